"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
voice listings, status summaries and configuration dumps.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .config import MacOsSayConfig
from .errors import SayError
from .voices import Voice


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, SayError):
        typer.secho(f"{command_name} failed: {exc.detail}", fg=typer.colors.RED, err=True)
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_voice_list(title: str, voices: list[Voice]) -> None:
    """Print a heading and one `name (locale)` row per voice."""

    typer.echo(f"{title} ({len(voices)}):")
    for voice in voices:
        typer.echo(f"  - {voice.name} ({voice.locale})")


def echo_status(speaking: bool, default_voice: str, voice_count: int | None) -> None:
    """Print speech state, default voice and catalog size."""

    typer.echo("Status:")
    typer.echo(f"  Speaking: {'yes' if speaking else 'no'}")
    typer.echo(f"  Default voice: {default_voice}")
    typer.echo(f"  Available voices: {voice_count if voice_count is not None else 'unknown'}")


def echo_config(config: MacOsSayConfig) -> None:
    """Print the set config fields in stable order."""

    payload = config.to_payload()
    if not payload:
        typer.echo("(no defaults configured)")
        return
    for key, value in payload.items():
        typer.echo(f"{key}: {value}")
