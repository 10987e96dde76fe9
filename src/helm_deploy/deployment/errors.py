"""Exceptions raised during a deployment run."""

from __future__ import annotations


class DeploymentError(Exception):
    """Raised when a deployment operation fails."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class MissingInputError(DeploymentError):
    """A required input resolved to an empty value."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Input required and not supplied: {name}")


class InvalidInputError(DeploymentError):
    """An input resolved to a value outside its allowed set."""


class CredentialFileNotFoundError(DeploymentError):
    """The kubeconfig file to rewrite does not exist."""


class MalformedCredentialDocumentError(DeploymentError):
    """The kubeconfig file could not be parsed."""


class NoContextsDefinedError(DeploymentError):
    """The kubeconfig file has no contexts to bind a token to."""


class TemplateFileMissingError(DeploymentError):
    """A value file scheduled for rendering does not exist."""


class CommandFailedError(DeploymentError):
    """An external command exited with a non-zero status."""

    def __init__(self, executable: str, returncode: int, details: str | None = None):
        self.executable = executable
        self.returncode = returncode
        super().__init__(
            f"The process '{executable}' failed with exit code {returncode}",
            details,
        )
