"""Loading of configured inputs and the inbound deployment event."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from helm_deploy.deployment.resolver import INPUT_FIELDS, input_env_name

from .config_utils import substitute_env_vars

# Inputs read by the run but not part of the deployment request
EXTRA_INPUTS = ("token",)


def load_inputs(
    environment: Mapping[str, str],
    config_file: Path | None = None,
    names: Iterable[str] | None = None,
) -> dict[str, str]:
    """
    Collect configured input values.

    Args:
        environment: Environment carrying ``INPUT_<NAME>`` variables
        config_file: Optional YAML file with a top-level ``inputs:`` mapping
        names: Input names to collect (default: every declared input plus token)

    Returns:
        Mapping of input name to value; ``INPUT_<NAME>`` variables win over
        entries from the config file. Values are stripped of surrounding
        whitespace, as the Actions toolkit does.

    Raises:
        ValueError: If the config file is not valid YAML, lacks an 'inputs'
                   mapping, or references an unset environment variable
        FileNotFoundError: If the config file doesn't exist
    """
    file_inputs: dict[str, Any] = {}
    if config_file is not None:
        file_inputs = _load_config_file(config_file, environment)

    selected = list(names) if names is not None else [*INPUT_FIELDS, *EXTRA_INPUTS]
    inputs: dict[str, str] = {}
    for name in selected:
        value = environment.get(input_env_name(name))
        if value is None:
            raw = file_inputs.get(name)
            value = _to_input_text(raw)
        inputs[name] = value.strip()
    return inputs


def _load_config_file(config_file: Path, environment: Mapping[str, str]) -> dict[str, Any]:
    logger.info(f"Loading inputs from {config_file}")
    with open(config_file) as f:
        content = f.read()

    content = substitute_env_vars(content, environment)

    try:
        loaded = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    if not isinstance(loaded, dict) or not isinstance(loaded.get("inputs"), dict):
        raise ValueError("Invalid YAML structure: missing 'inputs' mapping")

    inputs: dict[str, Any] = loaded["inputs"]
    unknown = sorted(set(inputs) - set(INPUT_FIELDS) - set(EXTRA_INPUTS))
    if unknown:
        logger.warning(f"Ignoring unknown inputs in {config_file}: {unknown}")
    return inputs


def _to_input_text(value: Any) -> str:
    # Structured entries are passed on as JSON, like a workflow would write them
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def load_event(event_path: Path | None) -> dict[str, Any] | None:
    """
    Read the ``deployment`` object from the workflow's webhook event.

    Returns:
        The deployment mapping, or None when there is no event file or the
        event is not a deployment event

    Raises:
        ValueError: If the event file is not valid JSON
    """
    if event_path is None or not event_path.exists():
        logger.debug("No event payload available")
        return None

    try:
        event = json.loads(event_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Error parsing event payload {event_path}: {e}") from e

    deployment = event.get("deployment") if isinstance(event, dict) else None
    if not isinstance(deployment, dict):
        return None
    logger.debug(f"Deployment event {deployment.get('id')} found")
    return deployment
