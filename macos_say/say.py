"""Fluent `say` command builder.

Responsibilities:
- Hold one `SpeechOptions` record and expose copy-on-write setters.
- Build deferred `say` invocations for spoken text or text files.
- Validate the current options against option domains and the voice catalog.

Key types:
- `MacOsSay`: immutable builder; every setter returns a new instance.
- `ValidationResult`: non-raising validation outcome.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from .errors import InvalidOptionError, SayError, VoiceNotFoundError
from .options import (
    QUALITY_MAX,
    QUALITY_MIN,
    RATE_MIN,
    FileFormat,
    SpeechOptions,
    clamp_quality,
    clamp_rate,
)
from .parsing import optional_text
from .process import CommandRunner, ExecutionOptions, SubprocessRunner
from .translator import SayInvocation, build_invocation
from .voices import VoiceCatalog


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of `MacOsSay.validate()`.

    Attributes:
        is_valid: Whether no validation errors were found.
        errors: Ordered human-readable error messages.
    """

    is_valid: bool
    errors: tuple[str, ...] = ()

    def raise_for_errors(self) -> None:
        """Raise one aggregated `InvalidOptionError` when invalid."""

        if self.is_valid:
            return
        raise InvalidOptionError(
            "Invalid say options: " + "; ".join(self.errors),
            errors=self.errors,
        )


class MacOsSay:
    """Builder for macOS `say` invocations.

    Example:
        >>> MacOsSay(voice="Alex", rate=200).say("Hello, world!").command
        'say -v "Alex" -r 200 Hello, world!'

    Setters never mutate the receiver, so one configured instance can be
    reused safely across calls.
    """

    __slots__ = ("_options", "_runner")

    def __init__(
        self,
        *,
        voice: str | None = None,
        rate: int | None = None,
        quality: int | None = None,
        output_file: str | None = None,
        network: str | None = None,
        audio_device: str | None = None,
        file_format: FileFormat | str | None = None,
        runner: CommandRunner | None = None,
    ) -> None:
        """Initialize from individual options.

        Raises:
            InvalidOptionError: If `rate` is below 1. Out-of-range `quality` is
                corrected instead (negative values become 1, values above 127
                become 127).
        """

        options = SpeechOptions(
            voice=voice,
            rate=rate,
            quality=quality,
            output_file=output_file,
            network=network,
            audio_device=audio_device,
            file_format=file_format,
        )
        self._options = options.normalized()
        self._runner = runner if runner is not None else SubprocessRunner()

    @classmethod
    def from_options(
        cls, options: SpeechOptions, runner: CommandRunner | None = None
    ) -> MacOsSay:
        """Create a builder from a `SpeechOptions` record, applying constructor rules."""

        return cls(
            voice=options.voice,
            rate=options.rate,
            quality=options.quality,
            output_file=options.output_file,
            network=options.network,
            audio_device=options.audio_device,
            file_format=options.file_format,
            runner=runner,
        )

    @property
    def options(self) -> SpeechOptions:
        """Return the current options."""

        return self._options

    @property
    def runner(self) -> CommandRunner:
        """Return the runner bound to invocations built by this instance."""

        return self._runner

    def _with(self, **changes: object) -> MacOsSay:
        clone = object.__new__(type(self))
        clone._options = replace(self._options, **changes)
        clone._runner = self._runner
        return clone

    def set_voice(self, voice: str | None = None) -> MacOsSay:
        """Set the voice; no argument restores the system default voice."""

        return self._with(voice=optional_text(voice))

    def set_rate(self, rate: int | None = None) -> MacOsSay:
        """Set the speech rate in words per minute, raised to at least 1."""

        return self._with(rate=clamp_rate(rate))

    def set_quality(self, quality: int | None = None) -> MacOsSay:
        """Set the audio converter quality, clamped into 0..127."""

        return self._with(quality=clamp_quality(quality))

    def set_output_file(self, output_file: str | Path | None = None) -> MacOsSay:
        """Set the path of an audio file to write instead of playing."""

        value = str(output_file) if isinstance(output_file, Path) else output_file
        return self._with(output_file=optional_text(value))

    def set_network(self, network: str | None = None) -> MacOsSay:
        """Set an AUNetSend service name and/or `host:port` to redirect output to."""

        return self._with(network=optional_text(network))

    def set_audio_device(self, audio_device: str | None = None) -> MacOsSay:
        """Set the audio device, by ID or name prefix."""

        return self._with(audio_device=optional_text(audio_device))

    def set_file_format(self, file_format: FileFormat | str | None = None) -> MacOsSay:
        """Set the written file format (AIFF, caff, m4af, WAVE)."""

        return self._with(file_format=optional_text(file_format))

    def say(self, text: str, execution: ExecutionOptions | None = None) -> SayInvocation:
        """Build an invocation that speaks `text`."""

        return build_invocation(self._options, [text], self._runner, execution)

    def say_file(
        self, file: str | Path, execution: ExecutionOptions | None = None
    ) -> SayInvocation:
        """Build an invocation that speaks the contents of `file`."""

        return build_invocation(self._options, ["-f", str(file)], self._runner, execution)

    def validate(self, catalog: VoiceCatalog | None = None) -> ValidationResult:
        """Re-check the current options without raising.

        The voice, when set, is looked up in `catalog` (a fresh catalog bound
        to this instance's runner by default). A catalog fetch failure is
        reported as a validation error.
        """

        errors: list[str] = []
        options = self._options
        if options.rate is not None and options.rate < RATE_MIN:
            errors.append(f"Rate must be greater than or equal to {RATE_MIN}.")
        if options.quality is not None and not QUALITY_MIN <= options.quality <= QUALITY_MAX:
            errors.append(f"Quality must be between {QUALITY_MIN} and {QUALITY_MAX}.")
        if options.voice is not None:
            resolved_catalog = catalog if catalog is not None else VoiceCatalog(self._runner)
            try:
                if not resolved_catalog.contains(options.voice):
                    errors.append(f"Voice `{options.voice}` is not available on this system.")
            except SayError as exc:
                errors.append(f"Could not verify voice `{options.voice}`: {exc.detail}")
        return ValidationResult(is_valid=not errors, errors=tuple(errors))

    def set_voice_with_validation(
        self, voice: str, catalog: VoiceCatalog | None = None
    ) -> MacOsSay:
        """Set the voice after checking it is installed.

        Raises:
            VoiceNotFoundError: If `voice` is not in the catalog.
            CommandFailedError: If the catalog cannot be fetched.
        """

        resolved_catalog = catalog if catalog is not None else VoiceCatalog(self._runner)
        if not resolved_catalog.contains(voice):
            raise VoiceNotFoundError(voice)
        return self.set_voice(voice)

    def __repr__(self) -> str:
        return f"MacOsSay({self._options!r})"
