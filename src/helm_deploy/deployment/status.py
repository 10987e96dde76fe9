"""Deployment status reporting to the GitHub Deployments API.

Reporting is best effort: a failed report is returned as a ``StatusReport``
and logged, and never changes the outcome of the run.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
from loguru import logger

# Deployment statuses with log_url/inactive support
PREVIEW_MEDIA_TYPE = "application/vnd.github.ant-man-preview+json"


class DeploymentState(str, Enum):
    """Lifecycle states reported for a deployment."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"
    INACTIVE = "inactive"


@dataclass
class StatusReport:
    """Outcome of a status report.

    Attributes:
        state: State that was reported
        sent: Whether a request was made (False when reporting is not configured)
        success: Whether the report was accepted, or skipped without error
        error: Failure description, if the report failed
    """

    state: DeploymentState
    sent: bool = False
    success: bool = True
    error: str | None = None


class StatusReporter:
    """Posts deployment statuses for the deployment that triggered the run."""

    def __init__(
        self,
        token: str | None,
        deployment: Mapping[str, Any] | None,
        *,
        repository: str = "",
        sha: str = "",
        api_url: str = "https://api.github.com",
        server_url: str = "https://github.com",
        transport: httpx.BaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Initialize the reporter.

        Args:
            token: GitHub token; reporting is skipped without one
            deployment: Deployment object of the triggering event
            repository: ``owner/repo`` the deployment belongs to
            sha: Commit the run is for, used for the log link
            api_url: GitHub REST API base URL
            server_url: GitHub web base URL
            transport: Optional httpx transport (for testing)
            timeout: Request timeout in seconds
        """
        self.token = token
        self.deployment = deployment
        self.repository = repository
        self.sha = sha
        self.api_url = api_url.rstrip("/")
        self.server_url = server_url.rstrip("/")
        self.transport = transport
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.token and self.deployment)

    @property
    def log_url(self) -> str:
        return f"{self.server_url}/{self.repository}/commit/{self.sha}/checks"

    def report(self, state: DeploymentState | str) -> StatusReport:
        """Mark the deployment with ``state``.

        Delivery failures never raise; they are logged as warnings and returned.

        Raises:
            ValueError: If ``state`` is not a known deployment state
        """
        state = DeploymentState(state)
        if not self.enabled:
            logger.debug("not setting deployment status")
            return StatusReport(state=state)

        deployment_id = (self.deployment or {}).get("id")
        url = (
            f"{self.api_url}/repos/{self.repository}"
            f"/deployments/{deployment_id}/statuses"
        )
        body = {
            "state": state.value,
            "log_url": self.log_url,
            "target_url": self.log_url,
        }
        headers = {
            "Accept": PREVIEW_MEDIA_TYPE,
            "Authorization": f"token {self.token}",
        }

        try:
            with httpx.Client(transport=self.transport, timeout=self.timeout) as client:
                response = client.post(url, json=body, headers=headers)
                response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Failed to set deployment status: {e}")
            return StatusReport(state=state, sent=True, success=False, error=str(e))

        logger.debug(f"Deployment status set to {state.value}")
        return StatusReport(state=state, sent=True)
