"""Command-line interface for macos-say.

Responsibilities:
- Expose speech, voice listing, batch, config and status commands.
- Convert CLI arguments into builder options and service calls.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import (
    echo_config,
    echo_status,
    echo_voice_list,
    exit_with_command_error,
)
from .config import ConfigLoader, MacOsSayConfig
from .errors import CommandFailedError, ConfigLoadError, InvalidOptionError, SayError
from .options import DEFAULT_NETWORK_SERVICE, QUALITY_MAX, QUALITY_MIN, RATE_MIN
from .process import SubprocessRunner
from .say import MacOsSay
from .service import DEFAULT_BATCH_DELAY_SECONDS, SayService
from .telemetry.logger import configure_logging
from .translator import SAY_PROGRAM

app = typer.Typer(
    name="macos-say",
    no_args_is_help=True,
    help="macOS say CLI.",
)
config_app = typer.Typer(no_args_is_help=True, help="Save or show configuration files.")
app.add_typer(config_app, name="config")

ConfigFileOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        help="Path to a JSON config saved by `config save`. Defaults come from MACOS_SAY_* otherwise.",
    ),
]
VoiceOption = Annotated[str | None, typer.Option("--voice", "-v", help="Voice name.")]
RateOption = Annotated[
    int | None,
    typer.Option("--rate", "-r", min=RATE_MIN, help="Speech rate in words per minute."),
]
QualityOption = Annotated[
    int | None,
    typer.Option(
        "--quality",
        min=QUALITY_MIN,
        max=QUALITY_MAX,
        help="Audio converter quality (0 lowest, 127 highest).",
    ),
]


@app.callback()
def main_callback(
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Log external command activity to stderr.")
    ] = False,
) -> None:
    """Speak text and inspect voices with the macOS `say` utility."""

    if verbose:
        configure_logging(level="DEBUG")


def _load_config(config_file: Path | None) -> MacOsSayConfig:
    """Load defaults from a config file, or from the environment when none is given."""

    if config_file is not None:
        return ConfigLoader.from_json(config_file)
    try:
        return ConfigLoader.from_env()
    except ValueError as exc:
        raise ConfigLoadError(
            f"Invalid environment configuration: {exc}",
            hint="Fix or unset the offending MACOS_SAY_* variable.",
        ) from exc


def _create_service(config_file: Path | None) -> SayService:
    """Create a service bound to the real process runner."""

    return SayService.from_config(_load_config(config_file), runner=SubprocessRunner())


def _apply_overrides(
    sayer: MacOsSay,
    voice: str | None,
    rate: int | None,
    quality: int | None,
) -> MacOsSay:
    """Apply explicit CLI options over config defaults."""

    if voice is not None:
        sayer = sayer.set_voice(voice)
    if rate is not None:
        sayer = sayer.set_rate(rate)
    if quality is not None:
        sayer = sayer.set_quality(quality)
    return sayer


@app.command("say")
def say_command(
    text: Annotated[str | None, typer.Argument(help="Text to speak.")] = None,
    voice: VoiceOption = None,
    rate: RateOption = None,
    quality: QualityOption = None,
    output_file: Annotated[
        Path | None,
        typer.Option("--output-file", "-o", help="Write audio to this file instead of playing."),
    ] = None,
    network: Annotated[
        str | None,
        typer.Option(
            "--network",
            "-n",
            help=f"Network service name (default `{DEFAULT_NETWORK_SERVICE}`) and/or `host:port`.",
        ),
    ] = None,
    audio_device: Annotated[
        str | None,
        typer.Option("--audio-device", "-a", help="Audio device ID or name prefix."),
    ] = None,
    file_format: Annotated[
        str | None,
        typer.Option("--file-format", help="Output file format: AIFF, caff, m4af, WAVE."),
    ] = None,
    input_file: Annotated[
        Path | None,
        typer.Option("--input-file", "-f", help="Speak the contents of this text file."),
    ] = None,
    config_file: ConfigFileOption = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Print the command instead of running it."),
    ] = False,
) -> None:
    """Speak text, or a text file, with optional voice and output settings."""

    try:
        if (text is None) == (input_file is None):
            raise InvalidOptionError(
                "Provide exactly one input: `<text>` or `--input-file <path>`.",
                hint="Use `macos-say say --help` for usage examples.",
            )
        service = _create_service(config_file)
        sayer = _apply_overrides(service.create_say(), voice, rate, quality)
        if output_file is not None:
            sayer = sayer.set_output_file(output_file)
        if network is not None:
            sayer = sayer.set_network(network)
        if audio_device is not None:
            sayer = sayer.set_audio_device(audio_device)
        if file_format is not None:
            sayer = sayer.set_file_format(file_format)

        invocation = sayer.say_file(input_file) if input_file is not None else sayer.say(text or "")
        if dry_run:
            typer.echo(invocation.command)
            return

        if service.config.auto_validate:
            sayer.validate(service.catalog).raise_for_errors()
        output = invocation.run()
        if not output.success:
            raise CommandFailedError(
                output.error_text() or f"`{SAY_PROGRAM}` exited with status {output.code}.",
                program=SAY_PROGRAM,
                exit_code=output.code,
            )
    except Exception as exc:
        exit_with_command_error("say", exc)


@app.command("voices")
def voices_command(
    locale: Annotated[
        str | None, typer.Option("--locale", help="Only voices for this locale, e.g. `en_US`.")
    ] = None,
    language: Annotated[
        str | None, typer.Option("--language", help="Only voices for this language, e.g. `fr`.")
    ] = None,
) -> None:
    """List installed voices."""

    try:
        if locale is not None and language is not None:
            raise InvalidOptionError("Use either `--locale` or `--language`, not both.")
        service = SayService(SubprocessRunner())
        if locale is not None:
            voices = service.get_voices_by_locale(locale)
            title = f"Voices for locale {locale}"
        elif language is not None:
            voices = service.get_voices_by_language(language)
            title = f"Voices for language {language}"
        else:
            voices = service.get_voices()
            title = "All available voices"
    except Exception as exc:
        exit_with_command_error("voices", exc)

    echo_voice_list(title, voices)


@app.command("batch")
def batch_command(
    texts: Annotated[list[str], typer.Argument(help="Texts to speak in order.")],
    voice: VoiceOption = None,
    rate: RateOption = None,
    quality: QualityOption = None,
    delay: Annotated[
        float,
        typer.Option("--delay", min=0.0, help="Pause between items, in seconds."),
    ] = DEFAULT_BATCH_DELAY_SECONDS,
    config_file: ConfigFileOption = None,
) -> None:
    """Speak several texts one after another."""

    try:
        service = _create_service(config_file)
        sayer = _apply_overrides(service.create_say(), voice, rate, quality)
        outputs = service.speak_batch(texts, sayer.options, delay_seconds=delay)
    except Exception as exc:
        exit_with_command_error("batch", exc)

    typer.echo(f"Batch completed with {len(outputs)} outputs")


@config_app.command("save")
def config_save_command(
    path: Annotated[Path, typer.Argument(help="Destination JSON file.")],
    voice: VoiceOption = None,
    rate: RateOption = None,
    quality: QualityOption = None,
    audio_device: Annotated[
        str | None, typer.Option("--audio-device", "-a", help="Default audio device.")
    ] = None,
    cache_voices: Annotated[
        bool | None,
        typer.Option("--cache-voices/--no-cache-voices", help="Cache the voice catalog."),
    ] = None,
    cache_duration: Annotated[
        int | None,
        typer.Option("--cache-duration", min=0, help="Voice cache lifetime in milliseconds."),
    ] = None,
    auto_validate: Annotated[
        bool | None,
        typer.Option(
            "--auto-validate/--no-auto-validate",
            help="Check voices against the catalog before speaking.",
        ),
    ] = None,
) -> None:
    """Save default options to a JSON config file."""

    config = MacOsSayConfig(
        default_voice=voice,
        default_rate=rate,
        default_quality=quality,
        default_audio_device=audio_device,
        cache_voices=cache_voices,
        cache_duration=cache_duration,
        auto_validate=auto_validate,
    )
    try:
        saved_path = SayService.save_config(config, path)
    except (OSError, SayError) as exc:
        exit_with_command_error("config save", exc)

    typer.echo(f"Configuration saved to {saved_path}")


@config_app.command("show")
def config_show_command(
    path: Annotated[Path, typer.Argument(help="JSON config file to read.")],
) -> None:
    """Print the defaults stored in a JSON config file."""

    try:
        config = SayService.load_config(path)
    except Exception as exc:
        exit_with_command_error("config show", exc)

    echo_config(config)


@app.command("stop")
def stop_command() -> None:
    """Stop any speech in progress."""

    try:
        stopped = SayService(SubprocessRunner()).stop_speech()
    except Exception as exc:
        exit_with_command_error("stop", exc)

    typer.echo("Speech stopped" if stopped else "No speech in progress")


@app.command("status")
def status_command() -> None:
    """Show whether speech is playing, the default voice and the voice count."""

    try:
        service = SayService(SubprocessRunner())
        speaking = service.is_speaking()
        default_voice = service.get_default_voice()
    except Exception as exc:
        exit_with_command_error("status", exc)

    try:
        voice_count: int | None = len(service.get_voices())
    except SayError:
        voice_count = None
    echo_status(speaking, default_voice, voice_count)


def main() -> None:
    """Run the CLI application."""

    app()
