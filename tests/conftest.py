"""Shared pytest fixtures for the ttsrelay test suite."""

from __future__ import annotations

import io
from typing import Callable, Iterator
import wave

import pytest

from ttsrelay.telemetry.logger import configure_logging


def _build_wav_bytes(duration_seconds: float = 0.1, sample_rate: int = 24000) -> bytes:
    """Build deterministic silent mono WAV bytes."""

    frame_count = int(duration_seconds * sample_rate)
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(1)
        wav_file.setsampwidth(2)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(b"\x00\x00" * frame_count)
    return buffer.getvalue()


@pytest.fixture
def wav_bytes() -> Callable[..., bytes]:
    """Provide a factory for small valid WAV payloads."""

    return _build_wav_bytes


@pytest.fixture
def relay_log_lines() -> Iterator[list[str]]:
    """Capture relay log lines at DEBUG level for the duration of one test."""

    lines: list[str] = []
    configure_logging(sink=lambda message: lines.append(str(message).rstrip("\n")), level="DEBUG")
    yield lines
    configure_logging()
