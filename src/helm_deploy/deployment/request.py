"""Immutable deployment request built once per run."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .constants import DEFAULT_CONSTANTS
from .errors import MissingInputError


class ToolVariant(str, Enum):
    """Major version of the helm executable to drive.

    The value doubles as the executable name on the runner image.
    """

    HELM2 = "helm"
    HELM3 = "helm3"

    @property
    def supports_kube_token(self) -> bool:
        """Whether the executable accepts ``--kube-token`` natively."""
        return self is ToolVariant.HELM3


class Task(str, Enum):
    """What the run does with the release."""

    DEPLOY = "deploy"
    REMOVE = "remove"


@dataclass(frozen=True)
class RepositoryAddOn:
    """Chart repository registered before the install.

    Attributes:
        url: Repository URL
        alias: Local name the repository is added under
        username: Optional basic-auth username
        password: Optional basic-auth password
    """

    url: str
    alias: str
    username: str | None = None
    password: str | None = None

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)


def release_name(name: str, track: str) -> str:
    """Compute the helm release name for an application on a track.

    Example:
        >>> release_name("api", "canary")
        'api-canary'
        >>> release_name("api", "stable")
        'api'
    """
    if track != DEFAULT_CONSTANTS.DEFAULT_TRACK:
        return f"{name}-{track}"
    return name


def chart_reference(name: str) -> str:
    """Map the symbolic chart name ``app`` to the bundled chart path."""
    if name == DEFAULT_CONSTANTS.APP_CHART_ALIAS:
        return DEFAULT_CONSTANTS.APP_CHART_PATH
    return name


@dataclass(frozen=True)
class DeploymentRequest:
    """Fully resolved parameters for one helm invocation.

    Attributes:
        app_name: Application name as configured (``release`` input)
        namespace: Kubernetes namespace for the release
        chart: Chart reference (path or ``repo/chart``), already resolved
        track: Deployment track, ``stable`` unless configured
        chart_version: Optional chart version constraint
        values: Rendered values blob written to ``values.yml``
        task: Deploy or remove
        app_version: Optional application version passed as ``app.version``
        value_files: Additional value files, in precedence order
        remove_canary: Whether to delete the canary release first
        variant: helm major version
        timeout: Optional timeout forwarded to helm
        repository: Optional chart repository to register
        dry_run: Whether helm runs with ``--dry-run``
        secrets: Structured secrets or opaque text exposed to templates
        kube_context: Optional kubeconfig context name
        kube_token: Optional bearer token for the cluster
    """

    app_name: str
    namespace: str
    chart: str
    track: str = DEFAULT_CONSTANTS.DEFAULT_TRACK
    chart_version: str | None = None
    values: str = "{}"
    task: Task = Task.DEPLOY
    app_version: str | None = None
    value_files: tuple[str, ...] = ()
    remove_canary: bool = False
    variant: ToolVariant = ToolVariant.HELM2
    timeout: str | None = None
    repository: RepositoryAddOn | None = None
    dry_run: bool = False
    secrets: Any = field(default=None, compare=False)
    kube_context: str | None = None
    kube_token: str | None = None

    def __post_init__(self) -> None:
        # Checked in declaration order so the first missing input is reported
        for name, value in (
            ("release", self.app_name),
            ("namespace", self.namespace),
            ("chart", self.chart),
        ):
            if not value:
                raise MissingInputError(name)

    @property
    def release(self) -> str:
        """Release name derived from the application name and track."""
        return release_name(self.app_name, self.track)

    @property
    def canary_release(self) -> str:
        return f"{self.app_name}-{DEFAULT_CONSTANTS.CANARY_TRACK}"

    @property
    def is_canary(self) -> bool:
        return self.track == DEFAULT_CONSTANTS.CANARY_TRACK
