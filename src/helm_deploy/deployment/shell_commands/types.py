"""Data types for shell command invocations and results."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

__all__ = ["CommandInvocation", "CommandResult"]

# Flags whose values are credentials
_SECRET_FLAGS = ("--kube-token=",)
_SECRET_OPTIONS = ("--password",)


@dataclass
class CommandResult:
    """Result of a command execution."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0


@dataclass(frozen=True)
class CommandInvocation:
    """A fully built external command.

    Attributes:
        executable: Program to run (e.g. ``helm`` or ``helm3``)
        args: Ordered argument tokens
        env: Environment variables set for this process only
        ignore_return_code: Whether a non-zero exit is tolerated
    """

    executable: str
    args: tuple[str, ...]
    env: Mapping[str, str] = field(default_factory=dict)
    ignore_return_code: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))
        object.__setattr__(self, "env", MappingProxyType(dict(self.env)))

    @property
    def argv(self) -> list[str]:
        """Executable followed by its arguments."""
        return [self.executable, *self.args]

    def redacted(self) -> str:
        """Render the command line with credential values masked."""
        tokens: list[str] = []
        mask_next = False
        for token in self.argv:
            if mask_next:
                tokens.append("***")
                mask_next = False
                continue
            prefix = next((p for p in _SECRET_FLAGS if token.startswith(p)), None)
            if prefix:
                tokens.append(f"{prefix}***")
                continue
            mask_next = token in _SECRET_OPTIONS
            tokens.append(token)
        return " ".join(tokens)
