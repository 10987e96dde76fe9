"""Deployment CLI commands."""

import json
import os
from pathlib import Path
from typing import Annotated

import typer

from helm_deploy.deployment import (
    DeploymentError,
    HelmDeployer,
    StatusReporter,
    ValueFileRenderer,
)
from helm_deploy.runtime.config import ActionSettings, load_event, load_inputs
from helm_deploy.runtime.logging import configure_logging

from .shared.console import console, with_error_handling


@with_error_handling
def run(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="YAML file with an 'inputs:' mapping (INPUT_* variables take priority)",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    workdir: Annotated[
        Path | None,
        typer.Option(
            "--workdir",
            "-w",
            help="Directory for generated files (defaults to the current directory)",
            file_okay=False,
        ),
    ] = None,
    event_path: Annotated[
        Path | None,
        typer.Option(
            "--event-path",
            help="Webhook event JSON (defaults to $GITHUB_EVENT_PATH)",
            dir_okay=False,
        ),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug logging"),
    ] = False,
) -> None:
    """
    🚀 Deploy or remove a helm release.

    Inputs are read from INPUT_* environment variables (and --config);
    fields of a GitHub deployment event override them by name.
    """
    environment = dict(os.environ)
    settings = ActionSettings.from_env(environment)
    configure_logging(debug or settings.debug)

    try:
        inputs = load_inputs(environment, config)
        deployment = load_event(event_path or settings.event_path)
    except ValueError as e:
        raise DeploymentError("Invalid configuration", details=str(e)) from e

    reporter = StatusReporter(
        inputs.get("token") or None,
        deployment,
        repository=settings.repository,
        sha=settings.sha,
        api_url=settings.api_url,
        server_url=settings.server_url,
    )
    deployer = HelmDeployer(
        console,
        workdir or settings.workspace,
        inputs=inputs,
        environment=environment,
        deployment=deployment,
        reporter=reporter,
    )
    state = deployer.run()
    console.ok(f"Deployment {state.value}")


@with_error_handling
def render(
    files: Annotated[
        list[Path],
        typer.Argument(help="Value files to render in place"),
    ],
    context_file: Annotated[
        Path | None,
        typer.Option(
            "--context",
            help="JSON file with 'secrets' and 'deployment' keys",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
) -> None:
    """
    📝 Render value files in place, as a deployment run would.
    """
    context: dict[str, object] = {"secrets": None, "deployment": None}
    if context_file is not None:
        try:
            loaded = json.loads(context_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise DeploymentError("Invalid render context", details=str(e)) from e
        if not isinstance(loaded, dict):
            raise DeploymentError("Render context must be a JSON object")
        context.update(loaded)

    ValueFileRenderer().render(files, context)
    console.ok(f"Rendered {len(files)} file(s)")
