"""Unit tests for the subprocess-backed runner and captured outputs."""

from __future__ import annotations

from pathlib import Path
import subprocess

import pytest
from pytest import MonkeyPatch

from macos_say import process
from macos_say.errors import CommandFailedError
from macos_say.process import CommandOutput, ExecutionOptions, SubprocessRunner


def test_command_output_accessors() -> None:
    """Success follows the exit code; lines and error text are derived lazily."""

    output = CommandOutput(
        program="say",
        args=("-v", "?"),
        code=0,
        stdout="first\nsecond\n",
        stderr="  warning \n",
    )

    assert output.success is True
    assert output.lines() == ["first", "second"]
    assert output.error_text() == "warning"
    assert CommandOutput(program="say", args=(), code=2).success is False


def test_subprocess_runner_captures_output(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
    """The runner should resolve the program and forward execution options."""

    captured: dict[str, object] = {}

    def _fake_run(*args: object, **kwargs: object) -> subprocess.CompletedProcess[str]:
        captured["command"] = args[0]
        captured.update(kwargs)
        return subprocess.CompletedProcess(args[0], 0, stdout="done\n", stderr="")

    monkeypatch.setattr(process, "resolve_executable", lambda name, env=None: f"/usr/bin/{name}")
    monkeypatch.setattr(subprocess, "run", _fake_run)

    output = SubprocessRunner().run(
        "say",
        ["-r", "200", "Hi"],
        ExecutionOptions(cwd=tmp_path, timeout=5.0),
    )

    assert captured["command"] == ["/usr/bin/say", "-r", "200", "Hi"]
    assert captured["check"] is False
    assert captured["capture_output"] is True
    assert captured["text"] is True
    assert captured["cwd"] == tmp_path
    assert captured["timeout"] == 5.0
    assert output == CommandOutput(
        program="say",
        args=("-r", "200", "Hi"),
        code=0,
        stdout="done\n",
        stderr="",
    )


def test_subprocess_runner_reports_non_zero_exit_without_raising(
    monkeypatch: MonkeyPatch,
) -> None:
    """A non-zero exit is data for the caller, not an exception."""

    def _fake_run(*args: object, **kwargs: object) -> subprocess.CompletedProcess[str]:
        _ = kwargs
        return subprocess.CompletedProcess(args[0], 1, stdout="", stderr="no such voice\n")

    monkeypatch.setattr(subprocess, "run", _fake_run)

    output = SubprocessRunner().run("say", ["-v", "Nobody", "Hi"])

    assert output.success is False
    assert output.error_text() == "no such voice"


def test_subprocess_runner_maps_missing_binary(monkeypatch: MonkeyPatch) -> None:
    """A missing executable should raise process-failure with a hint."""

    def _missing(*args: object, **kwargs: object) -> subprocess.CompletedProcess[str]:
        _ = kwargs
        raise FileNotFoundError(str(args[0]))

    monkeypatch.setattr(subprocess, "run", _missing)

    with pytest.raises(CommandFailedError, match="The `say` command is required") as exc_info:
        SubprocessRunner().run("say", ["Hi"])

    assert exc_info.value.program == "say"
    assert exc_info.value.hint is not None


def test_subprocess_runner_maps_timeout(monkeypatch: MonkeyPatch) -> None:
    """A pass-through timeout should surface as process-failure."""

    def _slow(*args: object, **kwargs: object) -> subprocess.CompletedProcess[str]:
        raise subprocess.TimeoutExpired(args[0], kwargs["timeout"])

    monkeypatch.setattr(subprocess, "run", _slow)

    with pytest.raises(CommandFailedError, match="did not finish within 0.5 seconds"):
        SubprocessRunner().run("say", ["Hi"], ExecutionOptions(timeout=0.5))
