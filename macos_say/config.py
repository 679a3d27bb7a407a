"""Configuration model and loaders for macos-say.

Responsibilities:
- Define persisted defaults as a typed dataclass.
- Save and load versioned JSON configuration files.
- Provide an environment-based loader with the same validation rules.

Key types:
- `MacOsSayConfig`: optional defaults for voice, rate, quality, device and caching.
- `ConfigLoader`: static construction and persistence helpers.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import json
import os
from pathlib import Path
from typing import Any, Mapping

from .errors import ConfigLoadError
from .parsing import (
    normalize_optional_string,
    optional_text,
    parse_optional_int,
    parse_permissive_boolean,
)
from .telemetry.logger import CommandLogger


CONFIG_SCHEMA_VERSION = "1.0.0"


@dataclass(slots=True)
class MacOsSayConfig:
    """Persisted defaults for building `say` invocations.

    Attributes:
        default_voice: Voice used when none is given explicitly.
        default_rate: Speech rate in words per minute.
        default_quality: Audio converter quality (0-127).
        default_audio_device: Audio device ID or name prefix.
        cache_voices: Whether the voice catalog is cached between lookups.
        cache_duration: Voice cache time-to-live in milliseconds.
        auto_validate: Whether voices are checked against the catalog before speaking.
    """

    default_voice: str | None = None
    default_rate: int | None = None
    default_quality: int | None = None
    default_audio_device: str | None = None
    cache_voices: bool | None = None
    cache_duration: int | None = None
    auto_validate: bool | None = None

    def __post_init__(self) -> None:
        self.default_voice = optional_text(self.default_voice)
        self.default_audio_device = optional_text(self.default_audio_device)

    @property
    def cache_ttl_seconds(self) -> float | None:
        """Return the voice cache time-to-live in seconds, when configured."""

        if self.cache_duration is None:
            return None
        return self.cache_duration / 1000.0

    def to_payload(self) -> dict[str, object]:
        """Return camelCase JSON fields, omitting unset values."""

        fields = {
            "defaultVoice": self.default_voice,
            "defaultRate": self.default_rate,
            "defaultQuality": self.default_quality,
            "defaultAudioDevice": self.default_audio_device,
            "cacheVoices": self.cache_voices,
            "cacheDuration": self.cache_duration,
            "autoValidate": self.auto_validate,
        }
        return {key: value for key, value in fields.items() if value is not None}


class ConfigLoader:
    """Factory and persistence helpers for `MacOsSayConfig`."""

    _ENV_KEYS = {
        "default_voice": "MACOS_SAY_DEFAULT_VOICE",
        "default_rate": "MACOS_SAY_DEFAULT_RATE",
        "default_quality": "MACOS_SAY_DEFAULT_QUALITY",
        "default_audio_device": "MACOS_SAY_DEFAULT_AUDIO_DEVICE",
        "cache_voices": "MACOS_SAY_CACHE_VOICES",
        "cache_duration": "MACOS_SAY_CACHE_DURATION",
        "auto_validate": "MACOS_SAY_AUTO_VALIDATE",
    }

    @staticmethod
    def save_json(
        config: MacOsSayConfig,
        path: Path,
        now: datetime | None = None,
    ) -> Path:
        """Write `config` as a versioned JSON document and return the path.

        Raises:
            ConfigLoadError: If `config` holds values that `from_json` would reject.
        """

        try:
            ConfigLoader.from_payload(config.to_payload(), source_label="Config")
        except ValueError as exc:
            raise ConfigLoadError(
                f"Refusing to save config to `{path}`: {exc}",
                path=path,
                hint="Fix the offending default before saving.",
            ) from exc

        timestamp = now if now is not None else datetime.now(timezone.utc)
        document = {
            "version": CONFIG_SCHEMA_VERSION,
            "config": config.to_payload(),
            "lastUpdated": timestamp.isoformat(),
        }
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(document, ensure_ascii=False, indent=2) + "\n",
            encoding="utf-8",
        )
        return path

    @staticmethod
    def from_json(path: Path) -> MacOsSayConfig:
        """Load a config saved by `save_json`.

        Raises:
            ConfigLoadError: If the file is unreadable, not JSON, or has invalid values.
        """

        try:
            raw_text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigLoadError(
                f"Failed to read config file `{path}`: {exc}",
                path=path,
                hint="Verify the path exists and is readable.",
            ) from exc

        try:
            document = json.loads(raw_text)
        except json.JSONDecodeError as exc:
            raise ConfigLoadError(
                f"Config file `{path}` is not valid JSON: {exc.msg} (line {exc.lineno}).",
                path=path,
                hint="Fix the JSON syntax or save the config again.",
            ) from exc

        if not isinstance(document, Mapping):
            raise ConfigLoadError(f"Config file `{path}` must contain a JSON object.", path=path)

        version = document.get("version")
        if version != CONFIG_SCHEMA_VERSION:
            CommandLogger().log_warning(
                "config_version_mismatch",
                expected=CONFIG_SCHEMA_VERSION,
                found=version,
            )

        payload = document.get("config")
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ConfigLoadError(f"Config file `{path}` field `config` must be an object.", path=path)

        try:
            return ConfigLoader.from_payload(payload, source_label=f"Config file `{path}`")
        except ValueError as exc:
            raise ConfigLoadError(str(exc), path=path) from exc

    @staticmethod
    def from_payload(payload: Mapping[str, Any], source_label: str = "Config") -> MacOsSayConfig:
        """Build a config from camelCase fields, ignoring unknown keys.

        Raises:
            ValueError: If a present field has the wrong type or domain.
        """

        return MacOsSayConfig(
            default_voice=ConfigLoader._optional_text(payload, "defaultVoice", source_label),
            default_rate=ConfigLoader._optional_int(payload, "defaultRate", source_label, minimum=1),
            default_quality=ConfigLoader._optional_int(
                payload, "defaultQuality", source_label, minimum=0
            ),
            default_audio_device=ConfigLoader._optional_text(
                payload, "defaultAudioDevice", source_label
            ),
            cache_voices=ConfigLoader._optional_boolean(payload, "cacheVoices", source_label),
            cache_duration=ConfigLoader._optional_int(
                payload, "cacheDuration", source_label, minimum=0
            ),
            auto_validate=ConfigLoader._optional_boolean(payload, "autoValidate", source_label),
        )

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> MacOsSayConfig:
        """Create a config from `MACOS_SAY_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        keys = ConfigLoader._ENV_KEYS
        payload = {
            "defaultVoice": normalize_optional_string(env_map.get(keys["default_voice"])),
            "defaultRate": env_map.get(keys["default_rate"]),
            "defaultQuality": env_map.get(keys["default_quality"]),
            "defaultAudioDevice": normalize_optional_string(
                env_map.get(keys["default_audio_device"])
            ),
            "cacheVoices": env_map.get(keys["cache_voices"]),
            "cacheDuration": env_map.get(keys["cache_duration"]),
            "autoValidate": env_map.get(keys["auto_validate"]),
        }
        return ConfigLoader.from_payload(payload, source_label="Environment")

    @staticmethod
    def _optional_text(payload: Mapping[str, Any], key: str, source_label: str) -> str | None:
        """Read an optional text field verbatim; empty text means unset."""

        raw_value = payload.get(key)
        if raw_value is None:
            return None
        if not isinstance(raw_value, str):
            raise ValueError(f"{source_label} field `{key}` must be a string.")
        return optional_text(raw_value)

    @staticmethod
    def _optional_int(
        payload: Mapping[str, Any], key: str, source_label: str, minimum: int
    ) -> int | None:
        """Read an optional integer field with a lower bound."""

        try:
            parsed = parse_optional_int(payload.get(key), key)
        except ValueError as exc:
            raise ValueError(f"{source_label} field `{key}` must be an integer.") from exc
        if parsed is not None and parsed < minimum:
            raise ValueError(
                f"{source_label} field `{key}` must be greater than or equal to {minimum}."
            )
        return parsed

    @staticmethod
    def _optional_boolean(payload: Mapping[str, Any], key: str, source_label: str) -> bool | None:
        """Read an optional boolean field from permissive tokens."""

        raw_value = payload.get(key)
        if normalize_optional_string(raw_value) is None and not isinstance(raw_value, bool):
            return None
        parsed = parse_permissive_boolean(raw_value)
        if parsed is None:
            raise ValueError(
                f"{source_label} field `{key}` must be a boolean value "
                "(`true`/`false`, `1`/`0`, `yes`/`no`)."
            )
        return parsed
