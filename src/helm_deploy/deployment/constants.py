"""Deployment constants and configuration.

This module centralizes the fixed paths, file names and identifiers used
throughout a deployment run.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DeploymentConstants:
    """Constants for a single Helm deployment run.

    All attributes are class-level and immutable.
    """

    # Chart resolution
    APP_CHART_ALIAS: str = "app"
    APP_CHART_PATH: str = "/usr/src/charts/app"

    # Track handling
    DEFAULT_TRACK: str = "stable"
    CANARY_TRACK: str = "canary"

    # Files produced in the working directory
    VALUES_FILE: str = "./values.yml"
    KUBECONFIG_FILE: str = "./kubeconfig.yml"
    TOKEN_KUBECONFIG_FILE: str = "./kubeconfig-with-token.yml"

    # Writable helm home used for config/cache/data directories
    HELM_HOME: str = "/root/.helm/"

    # Identity injected into rewritten kubeconfig files
    TOKEN_USER_NAME: str = "helm-deploy-action-token-user"

    # Environment variables carrying credential material
    KUBECONFIG_ENV: str = "KUBECONFIG"
    KUBECONFIG_RAW_ENV: str = "KUBECONFIG_FILE"
    KUBECONFIG_BASE64_ENV: str = "KUBECONFIG_BASE64"

    @property
    def default_kubeconfig(self) -> Path:
        """Get the kubeconfig location used when none is configured."""
        return Path.home() / ".kube" / "config"


DEFAULT_CONSTANTS = DeploymentConstants()
