"""Helm deployment package.

Each concern lives in its own module:

- resolver: Parameter resolution into a DeploymentRequest
- command_builder: Helm command synthesis
- kubeconfig: Kubeconfig materialization and token injection
- values: Value file rendering
- status: Deployment status reporting
- deployer: Orchestration of a full run

Usage:
    from helm_deploy.deployment import HelmDeployer

    deployer = HelmDeployer(console, Path("."), inputs=..., environment=...,
                            deployment=None, reporter=reporter)
    deployer.run()
"""

from .command_builder import CommandSynthesizer
from .deployer import HelmDeployer
from .errors import (
    CommandFailedError,
    CredentialFileNotFoundError,
    DeploymentError,
    InvalidInputError,
    MalformedCredentialDocumentError,
    MissingInputError,
    NoContextsDefinedError,
    TemplateFileMissingError,
)
from .kubeconfig import KubeconfigRewriter, materialize_kubeconfig
from .request import DeploymentRequest, RepositoryAddOn, Task, ToolVariant
from .resolver import ParameterResolver, resolve
from .status import DeploymentState, StatusReport, StatusReporter
from .values import ValueFileRenderer

__all__ = [
    "HelmDeployer",
    "DeploymentError",
    # Component classes for testing/extension
    "CommandSynthesizer",
    "KubeconfigRewriter",
    "ParameterResolver",
    "StatusReporter",
    "ValueFileRenderer",
    "materialize_kubeconfig",
    "resolve",
    # Data types
    "DeploymentRequest",
    "DeploymentState",
    "RepositoryAddOn",
    "StatusReport",
    "Task",
    "ToolVariant",
    # Errors
    "CommandFailedError",
    "CredentialFileNotFoundError",
    "InvalidInputError",
    "MalformedCredentialDocumentError",
    "MissingInputError",
    "NoContextsDefinedError",
    "TemplateFileMissingError",
]
