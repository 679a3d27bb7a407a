"""Structured command logging utilities.

Responsibilities:
- Emit concise, deterministic one-line events for external command activity.
- Keep `loguru` output disabled for library use until a front end enables it.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger


_LOGGER_NAMESPACE = "macos_say"


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


def format_event(level: str, event: str, **context: object) -> str:
    """Render one structured event line."""

    return f"[say] level={level} event={event}{_format_context(context)}"


def configure_logging(sink: TextIO | None = None, level: str = "INFO") -> None:
    """Route library events to `sink` (stderr by default) at `level`."""

    logger.remove()
    logger.add(sink or sys.stderr, format="{message}", level=level, colorize=False)
    logger.enable(_LOGGER_NAMESPACE)


class CommandLogger:
    """Emit deterministic events for external command invocations."""

    def _emit(self, level: str, event: str, **context: object) -> None:
        """Emit one structured runtime log line."""

        logger.log(level, format_event(level, event, **context))

    def log_command_start(self, program: str, arg_count: int) -> None:
        """Emit a command-start event without the spoken payload."""

        self._emit("DEBUG", "start", program=program, args=arg_count)

    def log_command_complete(self, program: str, exit_code: int) -> None:
        """Emit a command-complete event."""

        self._emit("DEBUG", "complete", program=program, exit_code=exit_code)

    def log_command_failure(self, program: str, error_type: str) -> None:
        """Emit a command-failure event."""

        self._emit("WARNING", "failure", program=program, error_type=error_type)

    def log_cache(self, event: str, **context: object) -> None:
        """Emit a voice-cache event (`hit`, `miss`, `invalidate`)."""

        self._emit("DEBUG", f"cache_{event}", **context)

    def log_warning(self, event: str, **context: object) -> None:
        """Emit a non-fatal warning event."""

        self._emit("WARNING", event, **context)
