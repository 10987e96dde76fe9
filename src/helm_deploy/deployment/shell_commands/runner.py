"""Command runner for executing external tools.

Commands are run with the invoking process environment plus the overlay
carried by the ``CommandInvocation``; the process environment itself is
never modified.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Callable, Mapping
from pathlib import Path

from loguru import logger

from ..errors import CommandFailedError
from .types import CommandInvocation, CommandResult


class CommandRunner:
    """Low-level command executor with consistent result handling.

    Output is streamed line by line as the command runs so long helm
    operations show progress in the job log.
    """

    def __init__(
        self,
        working_dir: Path,
        *,
        base_env: Mapping[str, str] | None = None,
        on_output: Callable[[str], None] | None = None,
    ) -> None:
        """Initialize the command runner.

        Args:
            working_dir: Directory commands are executed from
            base_env: Environment the overlay is applied to (defaults to os.environ)
            on_output: Callback receiving each line of command output
        """
        self.working_dir = working_dir
        self.base_env = base_env
        self.on_output = on_output

    def run(self, invocation: CommandInvocation) -> CommandResult:
        """Execute an invocation, streaming its merged output.

        Args:
            invocation: Command to execute

        Returns:
            CommandResult with success status, collected output, and return code

        Raises:
            CommandFailedError: If the command exits non-zero and the
                invocation does not ignore the return code
        """
        env = dict(os.environ if self.base_env is None else self.base_env)
        env.update(invocation.env)
        env["PYTHONUNBUFFERED"] = "1"

        logger.info(f"[command]{invocation.redacted()}")

        try:
            process = subprocess.Popen(
                invocation.argv,
                cwd=self.working_dir,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,  # Merge stderr into stdout
                text=True,
                bufsize=1,
                env=env,
            )
        except FileNotFoundError as e:
            raise CommandFailedError(
                invocation.executable, 127, details=f"Unable to locate executable: {e}"
            ) from e

        stdout_lines: list[str] = []
        if process.stdout:
            for line in iter(process.stdout.readline, ""):
                line = line.rstrip("\n")
                stdout_lines.append(line)
                if self.on_output:
                    self.on_output(line)

        returncode = process.wait()
        result = CommandResult(
            success=returncode == 0,
            stdout="\n".join(stdout_lines),
            stderr="",  # stderr is merged into stdout
            returncode=returncode,
        )

        if not result.success:
            if invocation.ignore_return_code:
                logger.debug(
                    f"Ignoring exit code {returncode} from {invocation.executable}"
                )
            else:
                raise CommandFailedError(
                    invocation.executable, returncode, details=result.stdout or None
                )
        return result
