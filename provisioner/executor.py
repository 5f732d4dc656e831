# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Synchronous execution of container runtime commands.

``CommandExecutor`` runs one external command, captures stdout and stderr
into a single buffer, and either returns the captured text or raises a
``CommandError`` subclass that still carries it:

- ``CommandLaunchError``: the binary could not be started.
- ``CommandExecutionError``: the process exited non-zero.
- ``CommandTimeoutError``: the process outlived its deadline and was killed.

A zero exit status is success even when the runtime printed warnings on
stderr.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
import time
from collections.abc import Sequence
from dataclasses import dataclass

from provisioner.errors import ProvisionerError


logger = logging.getLogger(__name__)


class CommandError(ProvisionerError):
    """Base exception for failed command invocations.

    Attributes:
        command: Executable that was invoked.
        arguments: Arguments passed to it.
        output: Captured stdout/stderr text (may be empty).
    """

    def __init__(
        self,
        message: str,
        command: str,
        arguments: Sequence[str],
        output: str = "",
    ) -> None:
        super().__init__(message)
        self.command = command
        self.arguments = tuple(arguments)
        self.output = output


class CommandLaunchError(CommandError):
    """Raised when the command binary cannot be located or started."""


class CommandExecutionError(CommandError):
    """Raised when the command exits with a non-zero status.

    Attributes:
        exit_code: Process exit status.
    """

    def __init__(
        self,
        message: str,
        command: str,
        arguments: Sequence[str],
        output: str,
        exit_code: int,
    ) -> None:
        super().__init__(message, command, arguments, output)
        self.exit_code = exit_code


class CommandTimeoutError(CommandError):
    """Raised when the command does not finish before its deadline.

    Attributes:
        timeout: Deadline in seconds that was exceeded.
    """

    def __init__(
        self,
        message: str,
        command: str,
        arguments: Sequence[str],
        output: str,
        timeout: float,
    ) -> None:
        super().__init__(message, command, arguments, output)
        self.timeout = timeout


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a successful command.

    Attributes:
        command: Executable that was invoked.
        arguments: Arguments passed to it.
        output: Merged stdout/stderr text.
        exit_code: Process exit status (always 0).
    """

    command: str
    arguments: tuple[str, ...]
    output: str
    exit_code: int = 0


def _decode(data: bytes | str | None) -> str:
    """Normalize captured output that may arrive as bytes."""
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


class CommandExecutor:
    """Runs runtime commands and captures their merged output.

    Each call blocks until the process exits or the deadline passes.
    Instances hold no per-call state and may be shared between threads.
    """

    def __init__(self, timeout: float | None = None) -> None:
        """Initialize executor.

        Args:
            timeout: Default deadline in seconds for every invocation.
                None waits indefinitely.
        """
        self.timeout = timeout

    def run(
        self,
        command: str,
        arguments: Sequence[str],
        *,
        timeout: float | None = None,
    ) -> CommandResult:
        """Run *command* with *arguments* and return its output.

        Args:
            command: Path or name of the executable.
            arguments: Arguments, in order.
            timeout: Per-call deadline overriding the default.

        Returns:
            CommandResult with the merged output.

        Raises:
            CommandLaunchError: If the binary cannot be started.
            CommandExecutionError: If the process exits non-zero.
            CommandTimeoutError: If the deadline is exceeded.
        """
        argv = [command, *arguments]
        deadline = timeout if timeout is not None else self.timeout
        logger.info("Running command: %s", shlex.join(argv))
        start_time = time.monotonic()

        try:
            proc = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=deadline,
                check=False,
            )
        except OSError as e:
            logger.error("Failed to launch %s: %s", command, e)
            raise CommandLaunchError(
                f"Failed to launch {command}: {e}", command, arguments, str(e)
            ) from e
        except subprocess.TimeoutExpired as e:
            output = _decode(e.output)
            logger.error(
                "Command timed out after %ss: %s", deadline, shlex.join(argv)
            )
            raise CommandTimeoutError(
                f"{shlex.join(argv)} timed out after {deadline}s",
                command,
                arguments,
                output,
                e.timeout,
            ) from e

        elapsed = time.monotonic() - start_time
        if proc.returncode != 0:
            output = proc.stdout or ""
            logger.error(
                "Command failed (exit %d) in %.2fs: %s: %s",
                proc.returncode,
                elapsed,
                shlex.join(argv),
                output.strip(),
            )
            raise CommandExecutionError(
                f"{shlex.join(argv)} exited with status {proc.returncode}: "
                f"{output.strip()}",
                command,
                arguments,
                output,
                proc.returncode,
            )

        logger.debug("Command finished in %.2fs: %s", elapsed, command)
        return CommandResult(
            command=command,
            arguments=tuple(arguments),
            output=proc.stdout or "",
        )
