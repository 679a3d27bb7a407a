"""Shared pytest fixtures for the macos-say test suite."""

from __future__ import annotations

import pytest

from tests.fakes import VOICE_CATALOG_OUTPUT, FakeClock, FakeRunner


@pytest.fixture
def runner() -> FakeRunner:
    """Provide a recording runner with no queued outputs."""

    return FakeRunner()


@pytest.fixture
def catalog_runner() -> FakeRunner:
    """Provide a recording runner whose `say -v ?` returns a small catalog."""

    fake = FakeRunner()
    fake.queue("say", stdout=VOICE_CATALOG_OUTPUT)
    return fake


@pytest.fixture
def clock() -> FakeClock:
    """Provide a manually advanced clock for cache tests."""

    return FakeClock()
