"""Convenience operations over `say` and the macOS speech utilities.

Responsibilities:
- Compose the builder, the voice catalog and an injected runner.
- Provide single-shot and sequential batch speech.
- Query speech state, the default voice and audio devices.
- Persist and restore configuration defaults.
"""

from __future__ import annotations

from pathlib import Path
from time import sleep
from typing import Callable, Iterable, Sequence

from .config import ConfigLoader, MacOsSayConfig
from .errors import CommandFailedError, InvalidOptionError, SayError, VoiceNotFoundError
from .options import RATE_MIN, SpeechOptions
from .process import CommandOutput, CommandRunner, ExecutionOptions, SubprocessRunner
from .say import MacOsSay
from .telemetry.logger import CommandLogger
from .translator import SAY_PROGRAM
from .voices import DEFAULT_VOICE_CACHE_TTL_SECONDS, Voice, VoiceCache, VoiceCatalog


FALLBACK_VOICE = "Alex"
DEFAULT_WORDS_PER_MINUTE = 175
DEFAULT_BATCH_DELAY_SECONDS = 1.0

_VOICE_PREFS_DOMAIN = "com.apple.speech.voice.prefs"
_VOICE_PREFS_KEY = "SelectedVoiceName"


def parse_audio_devices(lines: Iterable[str]) -> list[str]:
    """Extract device names from `system_profiler SPAudioDataType` output.

    Device names are the `Name:` heading lines nested one level below the
    `Devices:` heading; indented `Key: value` property lines are skipped.
    """

    devices: list[str] = []
    section_indent: int | None = None
    device_indent: int | None = None
    for line in lines:
        stripped = line.strip()
        if not stripped:
            continue
        indent = len(line) - len(line.lstrip())
        if stripped == "Devices:":
            section_indent = indent
            device_indent = None
            continue
        if section_indent is None:
            continue
        if indent <= section_indent:
            section_indent = None
            continue
        if stripped.endswith(":") and (device_indent is None or indent == device_indent):
            device_indent = indent
            devices.append(stripped[:-1])
    return devices


class SayService:
    """Speech helpers bound to one runner, voice catalog and config."""

    def __init__(
        self,
        runner: CommandRunner | None = None,
        catalog: VoiceCatalog | None = None,
        *,
        config: MacOsSayConfig | None = None,
        sleeper: Callable[[float], None] = sleep,
        command_logger: CommandLogger | None = None,
    ) -> None:
        self.runner = runner if runner is not None else SubprocessRunner()
        self.catalog = catalog if catalog is not None else VoiceCatalog(self.runner)
        self.config = config if config is not None else MacOsSayConfig()
        self._sleeper = sleeper
        self._logger = command_logger or CommandLogger()

    @classmethod
    def from_config(
        cls,
        config: MacOsSayConfig,
        runner: CommandRunner | None = None,
        **kwargs: object,
    ) -> SayService:
        """Create a service whose voice cache follows `cacheVoices`/`cacheDuration`."""

        resolved_runner = runner if runner is not None else SubprocessRunner()
        ttl_seconds = config.cache_ttl_seconds
        if ttl_seconds is None:
            ttl_seconds = DEFAULT_VOICE_CACHE_TTL_SECONDS
        if config.cache_voices is False:
            ttl_seconds = 0.0
        catalog = VoiceCatalog(resolved_runner, VoiceCache(ttl_seconds=ttl_seconds))
        return cls(resolved_runner, catalog, config=config, **kwargs)

    def create_say(self, config: MacOsSayConfig | None = None) -> MacOsSay:
        """Create a builder preloaded with config defaults."""

        source = config if config is not None else self.config
        return MacOsSay(
            voice=source.default_voice,
            rate=source.default_rate,
            quality=source.default_quality,
            audio_device=source.default_audio_device,
            runner=self.runner,
        )

    def speak(
        self,
        text: str,
        options: SpeechOptions | None = None,
        *,
        check: bool = False,
        execution: ExecutionOptions | None = None,
    ) -> CommandOutput:
        """Speak `text` and wait until `say` exits.

        `options` defaults to the configured defaults. With `auto_validate`
        enabled, a set voice is checked against the catalog first.

        Raises:
            VoiceNotFoundError: If auto-validation is on and the voice is missing.
            CommandFailedError: If `check` is set and `say` reports failure.
        """

        sayer = (
            self.create_say()
            if options is None
            else MacOsSay.from_options(options, runner=self.runner)
        )
        voice = sayer.options.voice
        if self.config.auto_validate and voice is not None and not self.catalog.contains(voice):
            raise VoiceNotFoundError(voice)

        output = sayer.say(text, execution).run()
        if check and not output.success:
            raise CommandFailedError(
                output.error_text() or f"`{SAY_PROGRAM}` exited with status {output.code}.",
                program=SAY_PROGRAM,
                exit_code=output.code,
            )
        return output

    def speak_batch(
        self,
        texts: Sequence[str],
        options: SpeechOptions | None = None,
        delay_seconds: float = DEFAULT_BATCH_DELAY_SECONDS,
    ) -> list[CommandOutput]:
        """Speak `texts` one after another, pausing `delay_seconds` between items.

        The first failing item raises and the remaining items are not spoken.
        """

        outputs: list[CommandOutput] = []
        for index, text in enumerate(texts):
            if index > 0 and delay_seconds > 0:
                self._sleeper(delay_seconds)
            outputs.append(self.speak(text, options, check=True))
        return outputs

    def get_voices(self) -> list[Voice]:
        """Return installed voices (cached)."""

        return self.catalog.voices()

    def get_voices_by_locale(self, locale: str) -> list[Voice]:
        """Return voices for an exact locale such as `en_US`."""

        return self.catalog.by_locale(locale)

    def get_voices_by_language(self, language: str) -> list[Voice]:
        """Return voices for a two-letter language such as `en`."""

        return self.catalog.by_language(language)

    def voice_exists(self, name: str) -> bool:
        """Return whether a voice named `name` is installed."""

        return self.catalog.contains(name)

    def invalidate_voice_cache(self) -> None:
        """Drop the cached voice catalog."""

        self.catalog.invalidate()

    def stop_speech(self) -> bool:
        """Ask every running `say` process to stop. Returns whether any was signalled."""

        try:
            return self.runner.run("killall", [SAY_PROGRAM]).success
        except SayError as exc:
            self._logger.log_warning("stop_speech_failed", error_type=exc.kind)
            return False

    def is_speaking(self) -> bool:
        """Return whether a `say` process is currently running."""

        return self.runner.run("pgrep", ["-x", SAY_PROGRAM]).success

    def get_default_voice(self) -> str:
        """Return the system voice, else the first cataloged voice, else `Alex`."""

        try:
            output = self.runner.run("defaults", ["read", _VOICE_PREFS_DOMAIN, _VOICE_PREFS_KEY])
        except SayError as exc:
            self._logger.log_warning("default_voice_preference_unavailable", error_type=exc.kind)
        else:
            selected = output.stdout.strip()
            if output.success and selected:
                return selected

        try:
            voices = self.catalog.voices()
        except SayError as exc:
            self._logger.log_warning("default_voice_fallback", error_type=exc.kind)
            return FALLBACK_VOICE
        if voices:
            return voices[0].name
        return FALLBACK_VOICE

    def get_audio_devices(self) -> list[str]:
        """Return audio device names reported by `system_profiler`.

        Raises:
            CommandFailedError: If `system_profiler` reports failure.
        """

        output = self.runner.run("system_profiler", ["SPAudioDataType"])
        if not output.success:
            raise CommandFailedError(
                output.error_text(),
                program="system_profiler",
                exit_code=output.code,
            )
        return parse_audio_devices(output.lines())

    @staticmethod
    def estimate_duration(text: str, rate: int = DEFAULT_WORDS_PER_MINUTE) -> int:
        """Estimate speaking time of `text` in milliseconds at `rate` words per minute.

        Raises:
            InvalidOptionError: If `rate` is below 1.
        """

        if rate < RATE_MIN:
            raise InvalidOptionError(f"Rate must be greater than or equal to {RATE_MIN}.")
        words = len(text.split())
        return round(words / rate * 60_000)

    @staticmethod
    def save_config(config: MacOsSayConfig, path: Path) -> Path:
        """Persist `config` as versioned JSON."""

        return ConfigLoader.save_json(config, path)

    @staticmethod
    def load_config(path: Path) -> MacOsSayConfig:
        """Load a config saved by `save_config`."""

        return ConfigLoader.from_json(path)
