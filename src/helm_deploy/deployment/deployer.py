"""Helm deployment run.

This module provides the HelmDeployer class which orchestrates one
deployment run. It coordinates specialized components for:
- Parameter resolution from inputs, environment and the deployment event
- Kubeconfig materialization and token injection
- Helm command synthesis
- Value file rendering
- Deployment status reporting
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

from .command_builder import CommandSynthesizer
from .constants import DEFAULT_CONSTANTS, DeploymentConstants
from .kubeconfig import materialize_kubeconfig
from .request import DeploymentRequest, Task
from .resolver import ParameterResolver
from .shell_commands import CommandRunner
from .status import DeploymentState, StatusReporter
from .values import ValueFileRenderer, build_render_context

if TYPE_CHECKING:
    from helm_deploy.cli.shared.console import CLIConsole


class HelmDeployer:
    """Runs a single helm deployment from resolved inputs.

    The workflow is strictly sequential:
    1. Report ``pending``
    2. Resolve the deployment request
    3. Write credential and values files
    4. Synthesize helm commands (rewriting the kubeconfig for helm2 tokens)
    5. Register the chart repository, if configured
    6. Render value files
    7. Remove the canary release, if requested
    8. Upgrade/install, or delete for removal tasks
    9. Report ``success`` (deploy) or ``inactive`` (remove)

    Any failure reports ``failure`` and is re-raised.
    """

    def __init__(
        self,
        console: CLIConsole,
        working_dir: Path,
        *,
        inputs: Mapping[str, Any],
        environment: Mapping[str, str],
        deployment: Mapping[str, Any] | None,
        reporter: StatusReporter,
        runner: CommandRunner | None = None,
        constants: DeploymentConstants = DEFAULT_CONSTANTS,
    ) -> None:
        """Initialize the deployer.

        Args:
            console: Console for progress output
            working_dir: Directory local files are written to and helm runs in
            inputs: Configured input values
            environment: Process environment
            deployment: Deployment object of the triggering event, if any
            reporter: Deployment status reporter
            runner: Command runner (defaults to one streaming to the console)
            constants: Deployment constants
        """
        self.console = console
        # helm runs with cwd=working_dir, so paths handed to it must be absolute
        self.working_dir = working_dir.resolve()
        self.inputs = inputs
        self.environment = environment
        self.deployment = deployment
        self.reporter = reporter
        self.constants = constants
        self.runner = runner or CommandRunner(
            self.working_dir, base_env=environment, on_output=console.raw
        )
        self.renderer = ValueFileRenderer(self.working_dir)

    def run(self) -> DeploymentState:
        """Execute the deployment.

        Returns:
            The final state reported for the deployment

        Raises:
            DeploymentError: If any step fails
        """
        self._report(DeploymentState.PENDING)
        try:
            request = ParameterResolver(
                self.inputs, self.environment, self.deployment
            ).resolve()
            self._execute(request)
        except Exception as e:
            logger.error(str(e))
            self._report(DeploymentState.FAILURE)
            raise

        state = (
            DeploymentState.INACTIVE
            if request.task is Task.REMOVE
            else DeploymentState.SUCCESS
        )
        self._report(state)
        return state

    def _execute(self, request: DeploymentRequest) -> None:
        kubeconfig = materialize_kubeconfig(
            self.environment, self.working_dir, self.constants
        ) or self.environment.get(self.constants.KUBECONFIG_ENV)

        values_file = self.working_dir / self.constants.VALUES_FILE
        values_file.write_text(request.values, encoding="utf-8")

        synthesizer = CommandSynthesizer(
            self.working_dir, kubeconfig=kubeconfig, constants=self.constants
        )
        upgrade = synthesizer.build(request)

        repo_add = synthesizer.repo_add(request)
        if repo_add is not None:
            self.console.info("Add repository")
            self.runner.run(repo_add)
            self.console.info("Update repository")
            self.runner.run(synthesizer.repo_update(request))

        self.renderer.render(
            [*request.value_files, self.constants.VALUES_FILE],
            build_render_context(request.secrets, self.deployment),
        )

        if request.remove_canary:
            self.console.info("Remove canary helm chart")
            logger.debug(f"removing canary {request.canary_release}")
            self.runner.run(synthesizer.delete(request, request.canary_release))

        if request.task is Task.REMOVE:
            self.console.info("Remove helm chart")
            self.runner.run(synthesizer.delete(request, request.release))
        else:
            self.console.info("Install helm chart")
            self.runner.run(upgrade)

    def _report(self, state: DeploymentState) -> None:
        result = self.reporter.report(state)
        if not result.success:
            logger.debug(f"Ignoring failed {state.value} status report: {result.error}")
