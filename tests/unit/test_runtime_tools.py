"""Unit tests for executable resolution."""

from __future__ import annotations

from pathlib import Path

from pytest import MonkeyPatch

from macos_say import runtime_tools


def test_resolve_executable_prefers_tools_dir_over_path(
    monkeypatch: MonkeyPatch,
    tmp_path: Path,
) -> None:
    """An executable in `MACOS_SAY_TOOLS_DIR` should take precedence over PATH."""

    bundled_tool = tmp_path / "say"
    bundled_tool.write_text("stub", encoding="utf-8")
    monkeypatch.setattr(runtime_tools.shutil, "which", lambda _: "/usr/bin/say")

    resolved = runtime_tools.resolve_executable("say", {"MACOS_SAY_TOOLS_DIR": str(tmp_path)})

    assert resolved == str(bundled_tool)


def test_resolve_executable_falls_back_to_path_when_override_missing(
    monkeypatch: MonkeyPatch,
    tmp_path: Path,
) -> None:
    """PATH lookup should be used when the override directory lacks the tool."""

    monkeypatch.setattr(runtime_tools.shutil, "which", lambda _: "/usr/bin/pgrep")

    resolved = runtime_tools.resolve_executable("pgrep", {"MACOS_SAY_TOOLS_DIR": str(tmp_path)})

    assert resolved == "/usr/bin/pgrep"


def test_resolve_executable_returns_raw_name_when_unresolved(monkeypatch: MonkeyPatch) -> None:
    """Unresolvable tools are returned unchanged so subprocess reports them."""

    monkeypatch.setattr(runtime_tools.shutil, "which", lambda _: None)

    assert runtime_tools.resolve_executable(" killall ", {}) == "killall"
