"""Translation of speech options into `say` argument vectors.

Responsibilities:
- Emit option flags in one fixed order, independent of how options were set.
- Render a display command string for logging and diagnostics.
- Bind an argument vector to a runner as a deferred invocation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .options import SpeechOptions, format_value
from .process import CommandOutput, CommandRunner, ExecutionOptions


SAY_PROGRAM = "say"


def build_arguments(options: SpeechOptions, positional: Sequence[str] = ()) -> list[str]:
    """Build the ordered `say` argument vector for `options`.

    Flags are emitted as voice, rate, quality, output file, network, audio
    device, file format, followed by `positional` unchanged. Unset options emit
    nothing. The voice is wrapped in double quotes without escaping.
    """

    args: list[str] = []
    if options.voice is not None:
        args.extend(["-v", f'"{options.voice}"'])
    if options.rate is not None:
        args.extend(["-r", str(options.rate)])
    if options.quality is not None:
        args.append(f"--quality={options.quality}")
    if options.output_file is not None:
        args.extend(["-o", options.output_file])
    if options.network is not None:
        args.extend(["-n", options.network])
    if options.audio_device is not None:
        args.extend(["-a", options.audio_device])
    if options.file_format is not None:
        args.append(f"--file-format={format_value(options.file_format)}")
    args.extend(positional)
    return args


def render_command(program: str, args: Sequence[str]) -> str:
    """Join program and arguments with single spaces. Display only; never re-parsed."""

    return " ".join([program, *args])


@dataclass(frozen=True, slots=True)
class SayInvocation:
    """A built `say` command that has not been executed yet.

    Attributes:
        command: Display command string.
        args: Ordered argument vector passed to the runner.
        runner: Executor that `run()` delegates to.
        program: Program name.
        execution: Pass-through process options.
    """

    command: str
    args: tuple[str, ...]
    runner: CommandRunner
    program: str = SAY_PROGRAM
    execution: ExecutionOptions | None = None

    def run(self) -> CommandOutput:
        """Execute the invocation and wait for it to finish."""

        return self.runner.run(self.program, self.args, self.execution)


def build_invocation(
    options: SpeechOptions,
    positional: Sequence[str],
    runner: CommandRunner,
    execution: ExecutionOptions | None = None,
) -> SayInvocation:
    """Build a deferred `say` invocation for `options` and trailing tokens."""

    args = build_arguments(options, positional)
    return SayInvocation(
        command=render_command(SAY_PROGRAM, args),
        args=tuple(args),
        runner=runner,
        execution=execution,
    )
