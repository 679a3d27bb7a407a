"""Domain exceptions for `say` invocations, catalog lookups, and config files."""

from __future__ import annotations


class SayError(RuntimeError):
    """Base error for every failure surfaced by the `say` wrapper.

    Attributes:
        kind: Stable machine-readable error kind.
        detail: Human-readable failure description.
        hint: Optional actionable hint for CLI diagnostics.
    """

    kind = "say"

    def __init__(self, detail: str, *, hint: str | None = None) -> None:
        """Initialize a kind-tagged error."""

        super().__init__(detail)
        self.detail = detail
        self.hint = hint


class InvalidOptionError(SayError):
    """Raised when speech options are out of their accepted domain."""

    kind = "invalid_option"

    def __init__(
        self,
        detail: str,
        *,
        errors: tuple[str, ...] = (),
        hint: str | None = None,
    ) -> None:
        """Initialize with an optional list of aggregated validation messages."""

        super().__init__(detail, hint=hint)
        self.errors = errors if errors else (detail,)


class VoiceNotFoundError(SayError):
    """Raised when a requested voice is not installed on the host."""

    kind = "voice_not_found"

    def __init__(self, voice: str, *, hint: str | None = None) -> None:
        """Initialize with the missing voice name."""

        super().__init__(
            f"Voice `{voice}` is not available on this system.",
            hint=hint or "Run `macos-say voices` to list installed voices.",
        )
        self.voice = voice


class CommandFailedError(SayError):
    """Raised when an external command reports failure."""

    kind = "process_failure"

    def __init__(
        self,
        detail: str,
        *,
        program: str,
        exit_code: int | None = None,
        hint: str | None = None,
    ) -> None:
        """Initialize with the failing program and its exit code, when known."""

        super().__init__(detail, hint=hint)
        self.program = program
        self.exit_code = exit_code


class ConfigLoadError(SayError):
    """Raised when a saved configuration cannot be read or decoded."""

    kind = "config_load"

    def __init__(self, detail: str, *, path: object = None, hint: str | None = None) -> None:
        """Initialize with the offending config path, when known."""

        super().__init__(detail, hint=hint)
        self.path = path
