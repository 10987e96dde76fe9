"""Resolution of deployment parameters from inputs, environment and event.

Every input is looked up through the same precedence chain:

1. the configured input value (may be empty)
2. for names containing ``-``, the ``INPUT_`` environment variable with the
   dashes replaced by underscores, used only when step 1 is empty
3. a top-level field of the inbound deployment event with the same name
4. a field of the event's nested ``payload`` mapping with the same name

Event fields override whenever they are present, including empty strings and
``false``. The set of inputs is closed: only the fields declared in
``INPUT_FIELDS`` are ever read from the event.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from loguru import logger

from .constants import DEFAULT_CONSTANTS
from .errors import InvalidInputError, MissingInputError
from .request import (
    DeploymentRequest,
    RepositoryAddOn,
    Task,
    ToolVariant,
    chart_reference,
)

_FALSE_STRINGS = frozenset({"", "false", "0", "no", "off"})

# Inputs whose values must never reach the logs
SENSITIVE_INPUTS = frozenset({"repository-password", "secrets", "kube-token", "token"})


@dataclass(frozen=True)
class InputField:
    """Declaration of a named input.

    Attributes:
        name: Input name as declared by the action
        required: Whether an empty resolution fails the run
        overridable: Whether the deployment event may override the value
    """

    name: str
    required: bool = False
    overridable: bool = True


INPUT_FIELDS: dict[str, InputField] = {
    f.name: f
    for f in (
        InputField("track"),
        InputField("release", required=True),
        InputField("namespace", required=True),
        InputField("chart", required=True),
        InputField("chart-version"),
        InputField("values"),
        InputField("task"),
        InputField("version"),
        InputField("value-files"),
        InputField("remove-canary"),
        InputField("helm"),
        InputField("timeout"),
        InputField("repository"),
        InputField("repository-password"),
        InputField("repository-username"),
        InputField("repository-alias"),
        # Only the workflow itself may request a dry run or supply secrets
        InputField("dry-run", overridable=False),
        InputField("secrets", overridable=False),
        InputField("kube-context"),
        InputField("kube-token"),
    )
}


def input_env_name(name: str) -> str:
    """Environment variable carrying an action input.

    Example:
        >>> input_env_name("value_files")
        'INPUT_VALUE_FILES'
    """
    return f"INPUT_{name.replace(' ', '_').upper()}"


def parse_bool(value: Any) -> bool:
    """Interpret an input as a flag.

    Booleans pass through; text is true unless empty or a negative word
    (``false``, ``0``, ``no``, ``off``).
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() not in _FALSE_STRINGS


def parse_values(values: Any) -> str:
    """Serialize the ``values`` input to the text written to ``values.yml``."""
    if not values:
        return "{}"
    if isinstance(values, (Mapping, list)):
        return json.dumps(values, separators=(",", ":"))
    return str(values)


def parse_secrets(secrets: Any) -> Any:
    """Parse JSON secrets, keeping unparseable text as-is."""
    if isinstance(secrets, str):
        try:
            return json.loads(secrets)
        except json.JSONDecodeError:
            return secrets
    return secrets


def parse_value_files(files: Any) -> list[str]:
    """Parse the ``value-files`` input into an ordered list of paths.

    A JSON array is used as-is; any other text is taken as a single path.
    Empty entries are dropped.

    Example:
        >>> parse_value_files('["a.yml","b.yml"]')
        ['a.yml', 'b.yml']
        >>> parse_value_files("c.yml")
        ['c.yml']
    """
    file_list: Any
    if isinstance(files, str):
        try:
            file_list = json.loads(files)
        except json.JSONDecodeError:
            file_list = [files]
    else:
        file_list = files
    if not isinstance(file_list, list):
        return []
    return [str(f) for f in file_list if f]


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ParameterResolver:
    """Resolves named inputs into a ``DeploymentRequest``.

    Args:
        configured_inputs: Input values as configured for the step
        environment: Process environment used for the alternate spelling probe
        event_override: The inbound deployment event, if any
    """

    def __init__(
        self,
        configured_inputs: Mapping[str, Any],
        environment: Mapping[str, str],
        event_override: Mapping[str, Any] | None = None,
    ) -> None:
        self.configured_inputs = configured_inputs
        self.environment = environment
        self.event_override = event_override

    def get(self, name: str) -> Any:
        """Resolve a single declared input.

        Raises:
            KeyError: If ``name`` is not a declared input
            MissingInputError: If a required input resolves empty
        """
        field = INPUT_FIELDS[name]

        value: Any = self.configured_inputs.get(name, "")
        if _is_empty(value) and "-" in name:
            value = self.environment.get(input_env_name(name.replace("-", "_")), "")

        deployment = self.event_override
        if field.overridable and isinstance(deployment, Mapping):
            if name in deployment:
                value = deployment[name]
            payload = deployment.get("payload")
            if isinstance(payload, Mapping) and name in payload:
                value = payload[name]

        if field.required and not value:
            raise MissingInputError(name)
        return value

    def get_text(self, name: str) -> str:
        return _as_text(self.get(name))

    def resolve(self) -> DeploymentRequest:
        """Resolve every input and build the deployment request.

        Raises:
            MissingInputError: If release, namespace or chart is empty
            InvalidInputError: If the helm variant is unknown
        """
        track = self.get_text("track") or DEFAULT_CONSTANTS.DEFAULT_TRACK
        app_name = self.get_text("release")
        namespace = self.get_text("namespace")
        chart = chart_reference(self.get_text("chart"))

        helm = self.get_text("helm") or ToolVariant.HELM2.value
        try:
            variant = ToolVariant(helm)
        except ValueError:
            raise InvalidInputError(
                f"Unsupported helm variant: {helm}",
                details=f"Expected one of: {', '.join(v.value for v in ToolVariant)}",
            ) from None

        task = Task.REMOVE if self.get_text("task") == Task.REMOVE.value else Task.DEPLOY

        repository: RepositoryAddOn | None = None
        repository_url = self.get_text("repository")
        repository_alias = self.get_text("repository-alias")
        if repository_url and repository_alias:
            repository = RepositoryAddOn(
                url=repository_url,
                alias=repository_alias,
                username=self.get_text("repository-username") or None,
                password=self.get_text("repository-password") or None,
            )

        request = DeploymentRequest(
            app_name=app_name,
            namespace=namespace,
            chart=chart,
            track=track,
            chart_version=self.get_text("chart-version") or None,
            values=parse_values(self.get("values")),
            task=task,
            app_version=self.get_text("version") or None,
            value_files=tuple(parse_value_files(self.get("value-files"))),
            remove_canary=parse_bool(self.get("remove-canary")),
            variant=variant,
            timeout=self.get_text("timeout") or None,
            repository=repository,
            dry_run=parse_bool(self.get("dry-run")),
            secrets=parse_secrets(self.get("secrets")),
            kube_context=self.get_text("kube-context") or None,
            kube_token=self.get_text("kube-token") or None,
        )
        self._log_parameters(request)
        return request

    def _log_parameters(self, request: DeploymentRequest) -> None:
        for key, value in (
            ("helm", request.variant.value),
            ("track", request.track),
            ("release", request.release),
            ("appName", request.app_name),
            ("namespace", request.namespace),
            ("chart", request.chart),
            ("chart_version", request.chart_version),
            ("values", request.values),
            ("dryRun", request.dry_run),
            ("task", request.task.value),
            ("version", request.app_version),
            ("valueFiles", list(request.value_files)),
            ("removeCanary", request.remove_canary),
            ("timeout", request.timeout),
            ("repository", request.repository.url if request.repository else None),
            ("kube-context", request.kube_context),
        ):
            logger.debug(f'param: {key} = "{value}"')
        for key in sorted(SENSITIVE_INPUTS - {"token"}):
            logger.debug(f'param: {key} = "***"')


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and len(value) == 0)


def resolve(
    configured_inputs: Mapping[str, Any],
    environment: Mapping[str, str],
    event_override: Mapping[str, Any] | None = None,
) -> DeploymentRequest:
    """Resolve inputs into a ``DeploymentRequest``. See ``ParameterResolver``."""
    return ParameterResolver(configured_inputs, environment, event_override).resolve()
