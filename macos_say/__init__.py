"""Top-level package for macos-say.

A typed wrapper around the macOS `say` text-to-speech utility. `MacOsSay`
builds invocations; `SayService` provides catalog lookups, batch speech and
config persistence over an injectable process runner.
"""

from loguru import logger

from .config import ConfigLoader, MacOsSayConfig
from .errors import (
    CommandFailedError,
    ConfigLoadError,
    InvalidOptionError,
    SayError,
    VoiceNotFoundError,
)
from .options import FileFormat, SpeechOptions
from .process import CommandOutput, CommandRunner, ExecutionOptions, SubprocessRunner
from .say import MacOsSay, ValidationResult
from .service import SayService
from .translator import SayInvocation
from .voices import Voice, VoiceCache, VoiceCatalog

logger.disable(__name__)

__all__ = [
    "CommandFailedError",
    "CommandOutput",
    "CommandRunner",
    "ConfigLoadError",
    "ConfigLoader",
    "ExecutionOptions",
    "FileFormat",
    "InvalidOptionError",
    "MacOsSay",
    "MacOsSayConfig",
    "SayError",
    "SayInvocation",
    "SayService",
    "SpeechOptions",
    "SubprocessRunner",
    "ValidationResult",
    "Voice",
    "VoiceCache",
    "VoiceCatalog",
    "VoiceNotFoundError",
    "__version__",
]

__version__ = "0.1.0"
