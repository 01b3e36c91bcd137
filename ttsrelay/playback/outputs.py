"""Concrete output handles for local relays and tests.

Responsibilities:
- Write each played utterance to a numbered WAV file in a room directory.
- Provide a discarding output for dry runs.
"""

from __future__ import annotations

import io
from pathlib import Path
import threading
import wave

from ..errors import PlaybackError
from ..models.datatypes import PlaybackCallback


class WaveDirectoryOutput:
    """Output that records each utterance as `<prefix>-<n>.wav` inside `directory`."""

    def __init__(self, directory: Path, prefix: str = "utterance") -> None:
        """Initialize target directory and file name prefix."""

        self.directory = directory
        self.prefix = prefix
        self.written: list[Path] = []
        self.total_seconds = 0.0
        self._lock = threading.Lock()

    def play(self, audio: bytes, on_finished: PlaybackCallback) -> None:
        """Validate and persist one WAV payload, then report completion."""

        try:
            duration = self._wav_duration_seconds(audio)
        except PlaybackError as exc:
            on_finished(exc)
            return

        with self._lock:
            path = self.directory / f"{self.prefix}-{len(self.written) + 1:04d}.wav"
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
                path.write_bytes(audio)
            except OSError as exc:
                on_finished(PlaybackError(f"Failed to write `{path}`: {exc}"))
                return
            self.written.append(path)
            self.total_seconds += duration
        on_finished(None)

    @staticmethod
    def _wav_duration_seconds(audio: bytes) -> float:
        """Compute WAV duration in seconds from engine response bytes."""

        try:
            with wave.open(io.BytesIO(audio), "rb") as wav_file:
                frame_count = wav_file.getnframes()
                sample_rate = wav_file.getframerate()
        except (wave.Error, EOFError) as exc:
            raise PlaybackError("Audio payload is not a readable WAV file.") from exc
        if sample_rate <= 0:
            raise PlaybackError("Audio payload has an invalid WAV sample rate.")
        return frame_count / float(sample_rate)


class NullOutput:
    """Output that discards audio and finishes immediately."""

    def __init__(self) -> None:
        self.played = 0

    def play(self, audio: bytes, on_finished: PlaybackCallback) -> None:
        self.played += 1
        on_finished(None)
