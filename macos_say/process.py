"""External process executor boundary.

Responsibilities:
- Define the runner protocol used by every `say`/utility invocation.
- Capture exit status and text output of one blocking child process.
- Map missing binaries and timeouts to `CommandFailedError`.

Key types:
- `ExecutionOptions`: pass-through process options (cwd, env, timeout).
- `CommandOutput`: captured result of one invocation.
- `CommandRunner`: protocol implemented by `SubprocessRunner` and test doubles.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import subprocess
from typing import Mapping, Protocol, Sequence

from .errors import CommandFailedError
from .runtime_tools import resolve_executable
from .telemetry.logger import CommandLogger


@dataclass(frozen=True, slots=True)
class ExecutionOptions:
    """Process options forwarded to the runner unchanged.

    Attributes:
        cwd: Working directory for the child process.
        env: Full environment mapping for the child process.
        timeout: Seconds before the child process is killed.
    """

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    timeout: float | None = None


@dataclass(frozen=True, slots=True)
class CommandOutput:
    """Captured result of one external command.

    Attributes:
        program: Program name as requested (not the resolved path).
        args: Argument vector passed after the program name.
        code: Process exit code.
        stdout: Decoded standard output.
        stderr: Decoded standard error.
    """

    program: str
    args: tuple[str, ...]
    code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        """Return whether the process exited with status 0."""

        return self.code == 0

    def lines(self) -> list[str]:
        """Split standard output into lines without trailing newlines."""

        return self.stdout.splitlines()

    def error_text(self) -> str:
        """Return standard error with surrounding whitespace removed."""

        return self.stderr.strip()


class CommandRunner(Protocol):
    """Protocol for process executors."""

    def run(
        self,
        program: str,
        args: Sequence[str],
        options: ExecutionOptions | None = None,
    ) -> CommandOutput:
        """Run `program` with `args` to completion and capture its output."""


class SubprocessRunner:
    """Blocking `subprocess.run` executor."""

    def __init__(self, command_logger: CommandLogger | None = None) -> None:
        self._logger = command_logger or CommandLogger()

    def run(
        self,
        program: str,
        args: Sequence[str],
        options: ExecutionOptions | None = None,
    ) -> CommandOutput:
        """Run `program` to completion; a missing binary or timeout raises `CommandFailedError`."""

        resolved_options = options if options is not None else ExecutionOptions()
        arguments = tuple(args)
        command = [resolve_executable(program, resolved_options.env), *arguments]
        self._logger.log_command_start(program, len(arguments))

        try:
            result = subprocess.run(
                command,
                check=False,
                capture_output=True,
                text=True,
                cwd=resolved_options.cwd,
                env=dict(resolved_options.env) if resolved_options.env is not None else None,
                timeout=resolved_options.timeout,
            )
        except FileNotFoundError as exc:
            self._logger.log_command_failure(program, "missing_binary")
            raise CommandFailedError(
                f"The `{program}` command is required but was not found.",
                program=program,
                hint="These helpers require macOS speech utilities on PATH.",
            ) from exc
        except subprocess.TimeoutExpired as exc:
            self._logger.log_command_failure(program, "timeout")
            raise CommandFailedError(
                f"`{program}` did not finish within {resolved_options.timeout} seconds.",
                program=program,
            ) from exc

        self._logger.log_command_complete(program, result.returncode)
        return CommandOutput(
            program=program,
            args=arguments,
            code=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )
