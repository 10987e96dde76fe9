"""Shell command abstractions for helm invocations.

- types: Invocation and result records
- runner: Execution with per-command environment overlays

Usage:
    from helm_deploy.deployment.shell_commands import CommandRunner

    runner = CommandRunner(Path("."))
    runner.run(CommandInvocation("helm3", ("repo", "update")))
"""

from .runner import CommandRunner
from .types import CommandInvocation, CommandResult

__all__ = [
    "CommandInvocation",
    "CommandResult",
    "CommandRunner",
]
