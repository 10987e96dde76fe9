"""Settings describing the CI run the deployment belongs to."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field


class ActionSettings(BaseModel):
    """GitHub Actions runtime settings read from the environment.

    Attributes:
        repository: ``owner/repo`` of the workflow
        sha: Commit the workflow runs for
        event_path: Path of the webhook event JSON file
        api_url: GitHub REST API base URL
        server_url: GitHub web base URL, used for status links
        workspace: Directory helm runs in and local files are written to
        debug: Whether step debug logging is enabled
    """

    repository: str = ""
    sha: str = ""
    event_path: Path | None = None
    api_url: str = "https://api.github.com"
    server_url: str = "https://github.com"
    workspace: Path = Field(default_factory=Path.cwd)
    debug: bool = False

    @property
    def owner(self) -> str:
        return self.repository.partition("/")[0]

    @property
    def repo(self) -> str:
        return self.repository.partition("/")[2]

    @classmethod
    def from_env(cls, environment: Mapping[str, str]) -> ActionSettings:
        """Build settings from ``GITHUB_*`` variables, ignoring unset ones."""
        values: dict[str, object] = {
            "repository": environment.get("GITHUB_REPOSITORY", ""),
            "sha": environment.get("GITHUB_SHA", ""),
            "debug": environment.get("RUNNER_DEBUG") == "1",
        }
        if event_path := environment.get("GITHUB_EVENT_PATH"):
            values["event_path"] = Path(event_path)
        if api_url := environment.get("GITHUB_API_URL"):
            values["api_url"] = api_url.rstrip("/")
        if server_url := environment.get("GITHUB_SERVER_URL"):
            values["server_url"] = server_url.rstrip("/")
        if workspace := environment.get("GITHUB_WORKSPACE"):
            values["workspace"] = Path(workspace)
        return cls(**values)
