"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
voice listings, and per-room relay summaries.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import PlaybackError, RelayCommandError, SynthesisError
from .models.datatypes import AcousticParameters, QueueStatus, VoiceInfo


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print stage diagnostics, the underlying engine or playback cause, and exit with code 1."""

    if not isinstance(exc, RelayCommandError):
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    typer.secho(
        f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
        fg=typer.colors.RED,
        err=True,
    )
    cause = describe_failure_cause(exc.__cause__)
    if cause is not None:
        typer.secho(f"Cause: {cause}", fg=typer.colors.RED, err=True)
    if exc.hint:
        typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    raise typer.Exit(code=1) from exc


def describe_failure_cause(cause: BaseException | None) -> str | None:
    """Return a one-line label for a synthesis or playback failure, or `None`."""

    if isinstance(cause, SynthesisError):
        details = [cause.failure_kind]
        if cause.status_code is not None:
            details.append(f"HTTP {cause.status_code}")
        return f"{type(cause).__name__} ({', '.join(details)}): {cause}"
    if isinstance(cause, PlaybackError):
        return f"{type(cause).__name__}: {cause}"
    return None


def echo_voice_list(voices: list[VoiceInfo]) -> None:
    """Print characters with their styles and ids."""

    for voice in voices:
        typer.echo(voice.name)
        for style in voice.styles:
            typer.echo(f"  - {style.name} (ID: {style.id})")


def echo_parameters(parameters: AcousticParameters) -> None:
    """Print the acoustic parameters that will be applied."""

    typer.echo(
        "Parameters: "
        f"speed={parameters.speed_scale:g} "
        f"pitch={parameters.pitch_scale:g} "
        f"intonation={parameters.intonation_scale:g} "
        f"volume={parameters.volume_scale:g}"
    )


def echo_room_summary(
    room_id: str,
    status: QueueStatus,
    spoken: int,
    failed: int,
    files: int,
) -> None:
    """Print one deterministic summary row for a relayed room."""

    state = "draining" if status.draining else "idle"
    typer.echo(
        f"room={room_id} state={state} pending={status.queue_length} "
        f"spoken={spoken} failed={failed} files={files}"
    )
