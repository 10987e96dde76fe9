"""Helm command synthesis.

Turns a ``DeploymentRequest`` into ``CommandInvocation`` records for the
helm executable. Nothing here runs a process or touches ``os.environ``: the
environment helm needs travels with each invocation as an overlay.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from .constants import DEFAULT_CONSTANTS, DeploymentConstants
from .kubeconfig import KubeconfigRewriter
from .request import DeploymentRequest, ToolVariant
from .shell_commands.types import CommandInvocation


class CommandSynthesizer:
    """Builds helm invocations for a deployment request.

    Handles:
    - ``upgrade --install`` with conditional flags and canary routing
    - Helm 2/3 differences in delete syntax and config directories
    - Token authentication, natively (helm3) or via a rewritten kubeconfig (helm2)
    - Chart repository registration
    """

    def __init__(
        self,
        working_dir: Path,
        *,
        kubeconfig: Path | str | None = None,
        rewriter: KubeconfigRewriter | None = None,
        constants: DeploymentConstants = DEFAULT_CONSTANTS,
    ) -> None:
        """Initialize the synthesizer.

        Args:
            working_dir: Directory helm runs in and derived files are written to
            kubeconfig: Active kubeconfig file, if one is configured
            rewriter: Kubeconfig rewriter used for helm2 token authentication
            constants: Deployment constants
        """
        self.working_dir = working_dir
        self.kubeconfig = kubeconfig
        self.constants = constants
        self.rewriter = rewriter or KubeconfigRewriter(working_dir, constants)
        self._token_kubeconfig: Path | None = None

    # =========================================================================
    # Environment
    # =========================================================================

    def environment(self, request: DeploymentRequest) -> dict[str, str]:
        """Environment overlay for every helm invocation of this request.

        The helm home directories point at a fixed writable location so helm
        works for identities without a home directory
        (https://helm.sh/docs/faq/#xdg-base-directory-support).

        Raises:
            DeploymentError: If token injection into the kubeconfig fails
        """
        home = self.constants.HELM_HOME
        if request.variant is ToolVariant.HELM3:
            env = {
                "XDG_DATA_HOME": home,
                "XDG_CACHE_HOME": home,
                "XDG_CONFIG_HOME": home,
            }
        else:
            env = {"HELM_HOME": home}

        kubeconfig = self.kubeconfig
        if request.kube_token and not request.variant.supports_kube_token:
            kubeconfig = self._rewrite_kubeconfig(request.kube_token)
        if kubeconfig:
            env[self.constants.KUBECONFIG_ENV] = str(kubeconfig)
            logger.debug(f'env: KUBECONFIG="{kubeconfig}"')
        return env

    def _rewrite_kubeconfig(self, token: str) -> Path:
        if self._token_kubeconfig is None:
            self._token_kubeconfig = self.rewriter.inject_token(self.kubeconfig, token)
        return self._token_kubeconfig

    # =========================================================================
    # Release Commands
    # =========================================================================

    def build(self, request: DeploymentRequest) -> CommandInvocation:
        """Build the ``upgrade --install`` invocation.

        The rendered ``./values.yml`` is passed after any additional value
        files so it wins under helm's last-file-wins merge.
        """
        args = [
            "upgrade",
            request.release,
            request.chart,
            "--install",
            "--wait",
            "--atomic",
            f"--namespace={request.namespace}",
        ]

        if request.dry_run:
            args.append("--dry-run")
        if request.app_name:
            args.append(f"--set=app.name={request.app_name}")
        if request.app_version:
            args.append(f"--set=app.version={request.app_version}")
        if request.chart_version:
            args.append(f"--version={request.chart_version}")
        if request.timeout:
            args.append(f"--timeout={request.timeout}")
        args.extend(f"--values={f}" for f in request.value_files)
        args.append(f"--values={self.constants.VALUES_FILE}")

        # Canary releases disable their own service and ingress; traffic
        # reaches them through the stable release's service.
        if request.is_canary:
            args.extend(["--set=service.enabled=false", "--set=ingress.enabled=false"])

        if request.kube_context:
            args.append(f"--kube-context={request.kube_context}")
        if request.kube_token and request.variant.supports_kube_token:
            args.append(f"--kube-token={request.kube_token}")

        return CommandInvocation(
            executable=request.variant.value,
            args=tuple(args),
            env=self.environment(request),
        )

    def delete(self, request: DeploymentRequest, release: str) -> CommandInvocation:
        """Build a delete invocation for ``release``.

        A missing release is expected (first deploy, repeated removal), so
        the return code is ignored.
        """
        return CommandInvocation(
            executable=request.variant.value,
            args=tuple(delete_args(request.variant, request.namespace, release)),
            env=self.environment(request),
            ignore_return_code=True,
        )

    # =========================================================================
    # Repository Commands
    # =========================================================================

    def repo_add(self, request: DeploymentRequest) -> CommandInvocation | None:
        """Build ``repo add`` for the configured repository, if any."""
        repository = request.repository
        if repository is None:
            return None

        args = ["repo", "add"]
        if repository.has_credentials:
            args.extend(
                [
                    "--username",
                    repository.username or "",
                    "--password",
                    repository.password or "",
                ]
            )
        args.extend([repository.alias, repository.url])

        return CommandInvocation(
            executable=request.variant.value,
            args=tuple(args),
            env=self.environment(request),
        )

    def repo_update(self, request: DeploymentRequest) -> CommandInvocation:
        return CommandInvocation(
            executable=request.variant.value,
            args=("repo", "update"),
            env=self.environment(request),
        )


def delete_args(variant: ToolVariant, namespace: str, release: str) -> list[str]:
    """Delete arguments for either helm major version.

    Example:
        >>> delete_args(ToolVariant.HELM3, "prod", "api")
        ['delete', '-n', 'prod', 'api']
        >>> delete_args(ToolVariant.HELM2, "prod", "api")
        ['delete', '--purge', 'api']
    """
    if variant is ToolVariant.HELM3:
        return ["delete", "-n", namespace, release]
    return ["delete", "--purge", release]
