"""Speech option models for `say` invocations.

Responsibilities:
- Represent the seven independent `say` options as an immutable record.
- Define option domains and the correction rules applied to them.

Key types:
- `SpeechOptions`: optional voice/rate/quality/output/network/device/format values.
- `FileFormat`: known `--file-format` values, with free text still accepted.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from .errors import InvalidOptionError
from .parsing import optional_text


RATE_MIN = 1
QUALITY_MIN = 0
QUALITY_MAX = 127
DEFAULT_NETWORK_SERVICE = "AUNetSend"

# Stored in place of a negative quality passed at construction.
_NEGATIVE_QUALITY_REPLACEMENT = 1


class FileFormat(str, Enum):
    """Audio container formats documented for `say --file-format`."""

    AIFF = "AIFF"
    CAFF = "caff"
    M4AF = "m4af"
    WAVE = "WAVE"


@dataclass(frozen=True, slots=True)
class SpeechOptions:
    """Options for one `say` invocation. `None` means "not set".

    Attributes:
        voice: Voice name; the system default voice is used when unset.
        rate: Speech rate in words per minute.
        quality: Audio converter quality level between 0 (lowest) and 127 (highest).
        output_file: Path of an audio file to write instead of playing.
        network: AUNetSend service name and/or `host:port` to redirect output to.
        audio_device: Audio device ID or name prefix to play through.
        file_format: Format of the written file (AIFF, caff, m4af, WAVE).
    """

    voice: str | None = None
    rate: int | None = None
    quality: int | None = None
    output_file: str | None = None
    network: str | None = None
    audio_device: str | None = None
    file_format: FileFormat | str | None = None

    def normalized(self) -> SpeechOptions:
        """Apply construction rules: reject a sub-minimum rate, correct quality.

        Raises:
            InvalidOptionError: If `rate` is below `RATE_MIN`.
        """

        if self.rate is not None and self.rate < RATE_MIN:
            raise InvalidOptionError(
                f"Rate must be greater than or equal to {RATE_MIN}.",
                hint="Pass a speech rate in words per minute, for example 175.",
            )
        return replace(
            self,
            voice=optional_text(self.voice),
            quality=correct_initial_quality(self.quality),
            output_file=optional_text(self.output_file),
            network=optional_text(self.network),
            audio_device=optional_text(self.audio_device),
            file_format=optional_text(self.file_format),
        )


def correct_initial_quality(quality: int | None) -> int | None:
    """Correct a constructor quality: negative becomes 1, above max becomes max."""

    if quality is None:
        return None
    if quality < QUALITY_MIN:
        return _NEGATIVE_QUALITY_REPLACEMENT
    if quality > QUALITY_MAX:
        return QUALITY_MAX
    return quality


def clamp_quality(quality: int | None) -> int | None:
    """Clamp a setter quality into `[QUALITY_MIN, QUALITY_MAX]`."""

    if quality is None:
        return None
    return max(QUALITY_MIN, min(QUALITY_MAX, quality))


def clamp_rate(rate: int | None) -> int | None:
    """Clamp a setter rate to at least `RATE_MIN`."""

    if rate is None:
        return None
    return max(RATE_MIN, rate)


def format_value(value: FileFormat | str) -> str:
    """Render an option value, using the raw value for enum members."""

    if isinstance(value, Enum):
        return str(value.value)
    return value
