"""Unit tests for speech convenience operations."""

from __future__ import annotations

from pathlib import Path

import pytest

from macos_say.config import MacOsSayConfig
from macos_say.errors import CommandFailedError, InvalidOptionError, VoiceNotFoundError
from macos_say.options import SpeechOptions
from macos_say.service import FALLBACK_VOICE, SayService, parse_audio_devices
from tests.fakes import VOICE_CATALOG_OUTPUT, FakeClock, FakeRunner


SYSTEM_PROFILER_OUTPUT = """Audio:

    Devices:

        MacBook Pro Microphone:

          Default Input Device: Yes
          Input Channels: 1
          Manufacturer: Apple Inc.

        MacBook Pro Speakers:

          Default Output Device: Yes
          Output Channels: 2

        External Headphones:

          Output Channels: 2
"""


class _RecordingSleeper:
    """Sleeper test double that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def test_speak_runs_say_and_returns_output(runner: FakeRunner) -> None:
    """Single-shot speech should run `say` once with translated options."""

    service = SayService(runner)

    output = service.speak("Hello", SpeechOptions(voice="Daniel", rate=180))

    assert output.success is True
    assert runner.calls == [("say", ("-v", '"Daniel"', "-r", "180", "Hello"))]


def test_speak_uses_config_defaults_when_options_missing(runner: FakeRunner) -> None:
    """Without explicit options the configured defaults apply."""

    service = SayService(runner, config=MacOsSayConfig(default_rate=150, default_quality=200))

    service.speak("Hi")

    assert runner.calls == [("say", ("-r", "150", "--quality=127", "Hi"))]


def test_speak_returns_failed_output_unless_checked(runner: FakeRunner) -> None:
    """A failing `say` is returned by default and raised with `check=True`."""

    runner.queue("say", code=1, stderr="audio device busy")
    service = SayService(runner)

    assert service.speak("Hi").success is False
    with pytest.raises(CommandFailedError, match="audio device busy"):
        service.speak("Hi", check=True)


def test_speak_auto_validates_voice(catalog_runner: FakeRunner) -> None:
    """With auto-validation, unknown voices are rejected before speaking."""

    service = SayService(catalog_runner, config=MacOsSayConfig(auto_validate=True))

    with pytest.raises(VoiceNotFoundError):
        service.speak("Hi", SpeechOptions(voice="NonExistentVoice123"))
    service.speak("Hi", SpeechOptions(voice="Daniel"))

    assert catalog_runner.calls_for("say") == [("-v", "?"), ("-v", '"Daniel"', "Hi")]


def test_speak_rejects_sub_one_rate(runner: FakeRunner) -> None:
    """Options records go through the same construction rules as the builder."""

    with pytest.raises(InvalidOptionError):
        SayService(runner).speak("Hi", SpeechOptions(rate=0))
    assert runner.calls == []


def test_speak_batch_is_sequential_with_delays_between_items(runner: FakeRunner) -> None:
    """Items run in order with the delay between, not after, items."""

    sleeper = _RecordingSleeper()
    service = SayService(runner, sleeper=sleeper)

    outputs = service.speak_batch(["one", "two", "three"], SpeechOptions(voice="Daniel"), 0.25)

    assert len(outputs) == 3
    assert [args[-1] for args in runner.calls_for("say")] == ["one", "two", "three"]
    assert sleeper.delays == [0.25, 0.25]


def test_speak_batch_aborts_on_first_failure(runner: FakeRunner) -> None:
    """A failing item should propagate and stop the remaining items."""

    runner.queue("say", code=0)
    runner.queue("say", code=1, stderr="boom")
    runner.queue("say", code=0)
    service = SayService(runner, sleeper=_RecordingSleeper())

    with pytest.raises(CommandFailedError, match="boom"):
        service.speak_batch(["one", "two", "three"])

    assert [args[-1] for args in runner.calls_for("say")] == ["one", "two"]


def test_voice_queries_share_cached_catalog(catalog_runner: FakeRunner) -> None:
    """Catalog helpers should reuse one fetch until invalidated."""

    service = SayService(catalog_runner)

    assert len(service.get_voices()) == 5
    assert [voice.name for voice in service.get_voices_by_locale("en_US")] == [
        "Albert",
        "Samantha",
    ]
    assert len(service.get_voices_by_language("fr")) == 2
    assert service.voice_exists("Daniel") is True
    assert len(catalog_runner.calls) == 1

    service.invalidate_voice_cache()
    service.get_voices()

    assert len(catalog_runner.calls) == 2


def test_stop_speech_and_is_speaking(runner: FakeRunner) -> None:
    """Stop and state checks map to `killall say` and `pgrep -x say`."""

    runner.queue("killall", code=1, stderr="No matching processes")
    runner.queue("pgrep", code=0, stdout="4242\n")
    service = SayService(runner)

    assert service.stop_speech() is False
    assert service.is_speaking() is True
    assert runner.calls == [("killall", ("say",)), ("pgrep", ("-x", "say"))]


def test_default_voice_prefers_system_preference(runner: FakeRunner) -> None:
    """The selected system voice wins when `defaults` returns one."""

    runner.queue("defaults", stdout="Samantha\n")

    assert SayService(runner).get_default_voice() == "Samantha"
    assert runner.calls == [
        ("defaults", ("read", "com.apple.speech.voice.prefs", "SelectedVoiceName"))
    ]


def test_default_voice_falls_back_to_first_catalog_voice(runner: FakeRunner) -> None:
    """Without a preference the first cataloged voice is used."""

    runner.queue("defaults", code=1, stderr="does not exist")
    runner.queue("say", stdout=VOICE_CATALOG_OUTPUT)

    assert SayService(runner).get_default_voice() == "Albert"


def test_default_voice_falls_back_to_literal(runner: FakeRunner) -> None:
    """When both lookups fail the fixed default voice is returned."""

    runner.queue("defaults", code=1)
    runner.queue("say", code=1, stderr="unavailable")

    assert SayService(runner).get_default_voice() == FALLBACK_VOICE


def test_default_voice_falls_back_when_defaults_binary_is_missing(runner: FakeRunner) -> None:
    """A missing `defaults` utility should fall through to the catalog."""

    runner.fail(
        "defaults",
        CommandFailedError(
            "The `defaults` command is required but was not found.", program="defaults"
        ),
    )
    runner.queue("say", stdout=VOICE_CATALOG_OUTPUT)

    assert SayService(runner).get_default_voice() == "Albert"


def test_default_voice_falls_back_to_literal_when_both_binaries_are_missing(
    runner: FakeRunner,
) -> None:
    """Without `defaults` and `say` the fixed default voice is returned."""

    runner.fail("defaults", CommandFailedError("missing", program="defaults"))
    runner.fail("say", CommandFailedError("missing", program="say"))

    assert SayService(runner).get_default_voice() == FALLBACK_VOICE


def test_stop_speech_is_best_effort_when_killall_is_missing(runner: FakeRunner) -> None:
    """A missing `killall` should report that nothing was stopped."""

    runner.fail(
        "killall",
        CommandFailedError("The `killall` command is required but was not found.", program="killall"),
    )

    assert SayService(runner).stop_speech() is False
    assert runner.calls == [("killall", ("say",))]


def test_audio_devices_are_parsed_from_system_profiler(runner: FakeRunner) -> None:
    """Device headings under `Devices:` are returned without property lines."""

    runner.queue("system_profiler", stdout=SYSTEM_PROFILER_OUTPUT)

    assert SayService(runner).get_audio_devices() == [
        "MacBook Pro Microphone",
        "MacBook Pro Speakers",
        "External Headphones",
    ]
    assert runner.calls == [("system_profiler", ("SPAudioDataType",))]


def test_audio_devices_failure_raises(runner: FakeRunner) -> None:
    """A failing `system_profiler` should raise process-failure."""

    runner.queue("system_profiler", code=1, stderr="profiler unavailable")

    with pytest.raises(CommandFailedError, match="profiler unavailable"):
        SayService(runner).get_audio_devices()


def test_parse_audio_devices_ignores_other_sections() -> None:
    """Headings outside the `Devices:` section are not devices."""

    lines = ["Audio:", "    Drivers:", "        Foo:", "    Devices:", "        Bar:"]

    assert parse_audio_devices(lines) == ["Bar"]


@pytest.mark.parametrize(
    ("text", "rate", "expected"),
    [
        ("This is a test message for duration estimation", 150, 3200),
        ("one two three", 180, 1000),
        ("", 175, 0),
        ("   spaced    words  ", 60, 2000),
    ],
)
def test_estimate_duration_is_linear_in_words(text: str, rate: int, expected: int) -> None:
    """Duration is words divided by rate, in milliseconds."""

    assert SayService.estimate_duration(text, rate) == expected


def test_estimate_duration_rejects_sub_one_rate() -> None:
    """A zero rate has no meaningful duration."""

    with pytest.raises(InvalidOptionError):
        SayService.estimate_duration("hello", 0)


def test_config_round_trip_and_builder_from_config(tmp_path: Path, runner: FakeRunner) -> None:
    """Saved defaults load back and preconfigure a builder."""

    config = MacOsSayConfig(
        default_voice="Daniel",
        default_rate=150,
        default_quality=127,
        default_audio_device="BuiltIn",
        cache_voices=True,
        auto_validate=True,
    )
    path = SayService.save_config(config, tmp_path / "macos-say-config.json")
    loaded = SayService.load_config(path)

    sayer = SayService(runner).create_say(loaded)

    assert loaded == config
    assert sayer.say("Hi").command == 'say -v "Daniel" -r 150 --quality=127 -a BuiltIn Hi'


def test_from_config_applies_cache_settings(clock: FakeClock) -> None:
    """Disabled caching should refetch every time; a duration sets the TTL."""

    runner = FakeRunner()
    runner.queue("say", stdout=VOICE_CATALOG_OUTPUT)

    uncached = SayService.from_config(MacOsSayConfig(cache_voices=False), runner=runner)
    uncached.get_voices()
    uncached.get_voices()
    short_lived = SayService.from_config(MacOsSayConfig(cache_duration=2500), runner=runner)

    assert len(runner.calls_for("say")) == 2
    assert uncached.catalog.cache.ttl_seconds == 0.0
    assert short_lived.catalog.cache.ttl_seconds == 2.5
