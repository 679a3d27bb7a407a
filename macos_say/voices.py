"""Voice catalog parsing and caching.

Responsibilities:
- Parse `say -v ?` output lines into `Voice` records.
- Filter voices by exact locale or by language prefix.
- Cache the most recent catalog for a fixed time-to-live.

Key types:
- `Voice`: one installed voice.
- `VoiceCache`: single-slot catalog cache with an injectable clock.
- `VoiceCatalog`: runner-backed catalog fetch composed with a `VoiceCache`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re
import threading
from time import monotonic
from typing import Callable, Iterable

from .errors import CommandFailedError
from .process import CommandRunner, SubprocessRunner
from .telemetry.logger import CommandLogger
from .translator import SAY_PROGRAM


LOCALE_PATTERN = re.compile(r"[a-z]{2}_[A-Z]{2}")
LIST_VOICES_ARGS = ("-v", "?")
DEFAULT_VOICE_CACHE_TTL_SECONDS = 300.0

_EXAMPLE_MARKER = "# "


@dataclass(frozen=True, slots=True)
class Voice:
    """An installed `say` voice.

    Attributes:
        name: Voice name as accepted by `say -v`.
        locale: Locale token such as `en_US`.
        example: Sample utterance shipped with the voice.
    """

    name: str
    locale: str
    example: str

    @property
    def language(self) -> str:
        """Return the two-letter language part of the locale."""

        return self.locale[:2]


def parse_voice_line(line: str) -> Voice | None:
    """Parse one catalog line, returning `None` when it has no locale token."""

    match = LOCALE_PATTERN.search(line)
    if match is None:
        return None
    name = line[: match.start()].strip()
    example = line[match.end() :].strip()
    if example.startswith(_EXAMPLE_MARKER):
        example = example[len(_EXAMPLE_MARKER) :]
    return Voice(name=name, locale=match.group(0), example=example)


def parse_voice_list(lines: Iterable[str]) -> list[Voice]:
    """Parse catalog output lines in order, skipping lines without a locale."""

    voices: list[Voice] = []
    for line in lines:
        voice = parse_voice_line(line)
        if voice is not None:
            voices.append(voice)
    return voices


def filter_by_locale(voices: Iterable[Voice], locale: str) -> list[Voice]:
    """Return voices whose locale equals `locale` exactly."""

    return [voice for voice in voices if voice.locale == locale]


def filter_by_language(voices: Iterable[Voice], language: str) -> list[Voice]:
    """Return voices whose locale starts with `<language>_`."""

    prefix = f"{language}_"
    return [voice for voice in voices if voice.locale.startswith(prefix)]


@dataclass(slots=True)
class VoiceCache:
    """Single-slot voice catalog cache with a fixed time-to-live."""

    ttl_seconds: float = DEFAULT_VOICE_CACHE_TTL_SECONDS
    clock: Callable[[], float] = monotonic
    hits: int = 0
    misses: int = 0
    _voices: tuple[Voice, ...] | None = field(default=None, repr=False)
    _stored_at: float | None = field(default=None, repr=False)

    @property
    def state(self) -> str:
        """Return `empty`, `fresh`, or `stale`."""

        if self._voices is None or self._stored_at is None:
            return "empty"
        if self.clock() - self._stored_at < self.ttl_seconds:
            return "fresh"
        return "stale"

    def get(self) -> list[Voice] | None:
        """Return the cached catalog when fresh and update hit/miss counters."""

        if self.state == "fresh" and self._voices is not None:
            self.hits += 1
            return list(self._voices)
        self.misses += 1
        return None

    def set(self, voices: Iterable[Voice]) -> None:
        """Store a catalog stamped with the current clock value."""

        self._voices = tuple(voices)
        self._stored_at = self.clock()

    def invalidate(self) -> None:
        """Drop the cached catalog."""

        self._voices = None
        self._stored_at = None


class VoiceCatalog:
    """Fetch the installed voice catalog through a runner, with caching."""

    def __init__(
        self,
        runner: CommandRunner | None = None,
        cache: VoiceCache | None = None,
        command_logger: CommandLogger | None = None,
    ) -> None:
        self.runner = runner if runner is not None else SubprocessRunner()
        self.cache = cache if cache is not None else VoiceCache()
        self._logger = command_logger or CommandLogger()
        self._lock = threading.Lock()

    def voices(self) -> list[Voice]:
        """Return installed voices, fetching them on a cache miss.

        Raises:
            CommandFailedError: If `say -v ?` reports failure.
        """

        with self._lock:
            cached = self.cache.get()
            if cached is not None:
                self._logger.log_cache("hit", voices=len(cached))
                return cached

            self._logger.log_cache("miss", state=self.cache.state)
            output = self.runner.run(SAY_PROGRAM, LIST_VOICES_ARGS)
            if not output.success:
                raise CommandFailedError(
                    output.error_text(),
                    program=SAY_PROGRAM,
                    exit_code=output.code,
                )
            voices = parse_voice_list(output.lines())
            self.cache.set(voices)
            return voices

    def by_locale(self, locale: str) -> list[Voice]:
        """Return voices for an exact locale such as `en_US`."""

        return filter_by_locale(self.voices(), locale)

    def by_language(self, language: str) -> list[Voice]:
        """Return voices for a two-letter language such as `fr`."""

        return filter_by_language(self.voices(), language)

    def contains(self, name: str) -> bool:
        """Return whether a voice named exactly `name` is installed."""

        return any(voice.name == name for voice in self.voices())

    def invalidate(self) -> None:
        """Force the next `voices()` to run the catalog command again."""

        with self._lock:
            self.cache.invalidate()
        self._logger.log_cache("invalidate")
