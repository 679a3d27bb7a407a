"""Executable resolution for the macOS speech utilities.

Responsibilities:
- Resolve `say`, `killall`, `pgrep`, `defaults` and `system_profiler` paths.
- Allow an explicit tools directory override ahead of `PATH` discovery.
"""

from __future__ import annotations

import os
from pathlib import Path
import shutil
from typing import Mapping


TOOLS_DIR_ENV_KEY = "MACOS_SAY_TOOLS_DIR"


def resolve_executable(command_name: str, env: Mapping[str, str] | None = None) -> str:
    """Resolve an executable with override-directory-first precedence, then PATH.

    Resolution order:
    1. `$MACOS_SAY_TOOLS_DIR/<tool>` when the variable is set and the file exists.
    2. System `PATH`.
    3. Raw command name (allowing subprocess to raise a native missing-binary error).
    """

    normalized = command_name.strip()
    if not normalized:
        return command_name

    override = _override_candidate(normalized, os.environ if env is None else env)
    if override is not None and override.is_file():
        return str(override)

    resolved_path = shutil.which(normalized)
    if resolved_path is not None:
        return resolved_path

    return normalized


def _override_candidate(command_name: str, env: Mapping[str, str]) -> Path | None:
    """Return the override-directory candidate path for one executable name."""

    tools_dir = (env.get(TOOLS_DIR_ENV_KEY) or "").strip()
    if not tools_dir:
        return None
    return Path(tools_dir).expanduser() / command_name
