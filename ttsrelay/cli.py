"""Command-line interface for ttsrelay.

Responsibilities:
- Expose local commands that drive the relay core without a chat adapter.
- Convert CLI arguments into `RelayConfig` and relay operations.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import json
from pathlib import Path
import sys
from typing import Annotated

import typer

from .cli_rendering import (
    echo_parameters,
    echo_room_summary,
    echo_voice_list,
    exit_with_command_error,
)
from .config import ConfigLoader, RelayConfig
from .errors import RelayCommandError
from .playback.outputs import WaveDirectoryOutput
from .relay import SpeechRelay
from .telemetry.logger import configure_logging
from .text.normalizer import TextNormalizer

app = typer.Typer(
    name="ttsrelay",
    no_args_is_help=True,
    help="ttsrelay CLI.",
)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to YAML config file."),
]
TimeoutOption = Annotated[
    float,
    typer.Option("--timeout", help="Seconds to wait for queued speech to finish."),
]


def _load_config(config_path: Path | None) -> RelayConfig:
    """Load relay config and map failures to stage errors."""

    try:
        return ConfigLoader.load(config_path)
    except FileNotFoundError as exc:
        raise RelayCommandError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise RelayCommandError(
            stage="config",
            detail=f"Invalid configuration: {exc}",
            hint="Fix config values or the `VOICEVOX_*`/`TTSRELAY_*` environment and rerun.",
        ) from exc


def _build_relay(config_path: Path | None) -> SpeechRelay:
    """Create a relay with logging configured from the resolved config."""

    config = _load_config(config_path)
    configure_logging(level=config.log_level)
    return SpeechRelay(config)


def _read_relay_lines(input_path: Path | None) -> list[tuple[str, str, str | None]]:
    """Parse JSON lines of `{"room", "text", "submitter"?}` from a file or stdin."""

    if input_path is None:
        raw_lines = sys.stdin.read().splitlines()
    else:
        try:
            raw_lines = input_path.read_text(encoding="utf-8").splitlines()
        except OSError as exc:
            raise RelayCommandError(
                stage="input",
                detail=f"Failed to read `{input_path}`: {exc}",
                hint="Pass an existing JSON-lines file or pipe lines on stdin.",
            ) from exc

    entries: list[tuple[str, str, str | None]] = []
    for line_number, raw_line in enumerate(raw_lines, start=1):
        if not raw_line.strip():
            continue
        try:
            payload = json.loads(raw_line)
        except json.JSONDecodeError as exc:
            raise RelayCommandError(
                stage="input",
                detail=f"Line {line_number} is not valid JSON.",
                hint='Each line must look like {"room": "r1", "text": "hello"}.',
            ) from exc
        room = payload.get("room") if isinstance(payload, dict) else None
        text = payload.get("text") if isinstance(payload, dict) else None
        if not isinstance(room, str) or not room.strip() or not isinstance(text, str):
            raise RelayCommandError(
                stage="input",
                detail=f"Line {line_number} needs string `room` and `text` fields.",
                hint='Each line must look like {"room": "r1", "text": "hello"}.',
            )
        submitter = payload.get("submitter")
        entries.append((room.strip(), text, None if submitter is None else str(submitter)))
    return entries


@app.command("speak")
def speak_command(
    text: Annotated[str, typer.Argument(help="Text to normalize, synthesize, and record.")],
    room: Annotated[str, typer.Option("--room", help="Room identifier.")] = "default",
    submitter: Annotated[
        str | None, typer.Option("--submitter", help="Submitter identity.")
    ] = None,
    voice: Annotated[
        int | None, typer.Option("--voice", help="Room default voice id for this run.")
    ] = None,
    speed: Annotated[float | None, typer.Option("--speed", help="Speed (0.5-2.0).")] = None,
    pitch: Annotated[float | None, typer.Option("--pitch", help="Pitch (-0.15-0.15).")] = None,
    intonation: Annotated[
        float | None, typer.Option("--intonation", help="Intonation (0.0-2.0).")
    ] = None,
    volume: Annotated[float | None, typer.Option("--volume", help="Volume (0.5-2.0).")] = None,
    out: Annotated[Path, typer.Option("--out", help="Output directory.")] = Path("out"),
    config_file: ConfigOption = None,
    timeout: TimeoutOption = 60.0,
) -> None:
    """Speak one message into `<out>/<room>/` as a WAV file."""

    try:
        relay = _build_relay(config_file)
        if voice is not None:
            relay.set_room_default_voice(room, voice)
        parameters = relay.update_acoustic_parameters(
            room,
            {
                "speed_scale": speed,
                "pitch_scale": pitch,
                "intonation_scale": intonation,
                "volume_scale": volume,
            },
        )
        output = WaveDirectoryOutput(out / room)
        result = relay.submit(room, text, submitter_id=submitter, output=output)
        if not result.enqueued:
            raise RelayCommandError(
                stage="normalize",
                detail=f"Text was not queued ({result.reason}).",
                hint="Use `ttsrelay normalize` to see how the text is treated.",
            )
        if not relay.wait_idle(room, timeout):
            raise RelayCommandError(
                stage="playback",
                detail=f"Speech did not finish within {timeout:g} seconds.",
                hint="Raise `--timeout` or check the engine load.",
            )
        if not output.written:
            queue = relay.queues.get(room)
            raise RelayCommandError(
                stage="synthesis",
                detail="No audio was produced for the message.",
                hint="Run `ttsrelay check` and inspect the `speak_failure` log line.",
            ) from (queue.last_failure if queue is not None else None)
    except Exception as exc:
        exit_with_command_error("speak", exc)

    typer.echo(f"Room: {room}")
    typer.echo(f"Voice: {relay.voice_store.get_effective_voice(room, submitter)}")
    echo_parameters(parameters)
    typer.echo(f"Text: {result.text}")
    typer.echo(f"Audio: {output.written[-1]}")


@app.command("relay")
def relay_command(
    input_path: Annotated[
        Path | None,
        typer.Argument(help="JSON-lines file with `room`, `text`, optional `submitter`."),
    ] = None,
    out: Annotated[Path, typer.Option("--out", help="Output directory.")] = Path("out"),
    config_file: ConfigOption = None,
    timeout: TimeoutOption = 300.0,
) -> None:
    """Relay many messages across rooms, one WAV directory per room."""

    try:
        entries = _read_relay_lines(input_path)
        relay = _build_relay(config_file)
        outputs: dict[str, WaveDirectoryOutput] = {}
        suppressed = 0
        for room, text, submitter in entries:
            if room not in outputs:
                outputs[room] = WaveDirectoryOutput(out / room)
                relay.attach_output(room, outputs[room])
            if not relay.submit(room, text, submitter_id=submitter).enqueued:
                suppressed += 1
        if not relay.wait_all_idle(timeout):
            raise RelayCommandError(
                stage="playback",
                detail=f"Rooms did not finish within {timeout:g} seconds.",
                hint="Raise `--timeout` or check the engine load.",
            )
    except Exception as exc:
        exit_with_command_error("relay", exc)

    typer.echo(f"Messages: {len(entries)} (suppressed: {suppressed})")
    for room, output in outputs.items():
        queue = relay.queues.get(room)
        echo_room_summary(
            room,
            relay.get_status(room),
            spoken=queue.spoken_count if queue is not None else 0,
            failed=queue.failed_count if queue is not None else 0,
            files=len(output.written),
        )


@app.command("voices")
def voices_command(config_file: ConfigOption = None) -> None:
    """List engine characters and their style ids."""

    try:
        relay = _build_relay(config_file)
        voices = relay.list_available_voices()
        if not voices:
            raise RelayCommandError(
                stage="voices",
                detail=f"No voices returned by `{relay.config.synthesis_url}`.",
                hint="Run `ttsrelay check` to verify the engine is reachable.",
            )
    except Exception as exc:
        exit_with_command_error("voices", exc)

    echo_voice_list(voices)


@app.command("check")
def check_command(config_file: ConfigOption = None) -> None:
    """Report whether the synthesis engine is reachable."""

    try:
        relay = _build_relay(config_file)
        version = relay.engine_version()
        if version is None:
            raise RelayCommandError(
                stage="check",
                detail=f"Engine at `{relay.config.synthesis_url}` is unreachable.",
                hint="Start the engine or set `VOICEVOX_URL`.",
            )
    except Exception as exc:
        exit_with_command_error("check", exc)

    typer.echo(f"Engine: {relay.config.synthesis_url}")
    typer.echo(f"Version: {version}")


@app.command("normalize")
def normalize_command(
    text: Annotated[str, typer.Argument(help="Raw chat text.")],
    max_chars: Annotated[
        int, typer.Option("--max-chars", min=1, help="Longest text still spoken.")
    ] = 200,
) -> None:
    """Show the text that would be synthesized, or why it is suppressed."""

    result = TextNormalizer(max_chars=max_chars).normalize(text)
    if result.suppressed:
        typer.echo(f"suppressed: {result.reason}")
        return
    typer.echo(result.text)


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
