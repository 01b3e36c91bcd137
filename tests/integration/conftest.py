"""Integration-test fixtures for deterministic engine behavior."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any
import wave

import pytest

from ttsrelay.tts.voicevox_client import VoicevoxClient


@pytest.fixture(autouse=True)
def _isolate_engine_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host `VOICEVOX_*`/`TTSRELAY_*` variables from changing config resolution."""

    for key in (
        "VOICEVOX_URL",
        "VOICEVOX_SPEAKER_ID",
        "TTSRELAY_REQUEST_TIMEOUT",
        "TTSRELAY_PLAYBACK_TIMEOUT",
        "TTSRELAY_UTTERANCE_GAP",
        "TTSRELAY_MAX_TEXT_CHARS",
        "TTSRELAY_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def engine_requests(monkeypatch: pytest.MonkeyPatch) -> list[tuple[str, Any]]:
    """Mock VOICEVOX client calls and record what the relay sent."""

    recorded: list[tuple[str, Any]] = []

    def _mock_audio_query(self: VoicevoxClient, *, text: str, speaker: int) -> dict[str, Any]:
        """Return a deterministic query document."""

        _ = self
        recorded.append(("audio_query", (text, speaker)))
        return {"accent_phrases": [], "speedScale": 1.0, "outputSamplingRate": 24000}

    def _mock_synthesis(self: VoicevoxClient, *, query: dict[str, Any], speaker: int) -> bytes:
        """Return deterministic placeholder WAV payload."""

        _ = self
        recorded.append(("synthesis", (query, speaker)))
        buffer = io.BytesIO()
        with wave.open(buffer, "wb") as wav_file:
            wav_file.setnchannels(1)
            wav_file.setsampwidth(2)
            wav_file.setframerate(24000)
            wav_file.writeframes(b"\x00\x00" * 2400)
        return buffer.getvalue()

    def _mock_speakers(self: VoicevoxClient) -> list[Any]:
        """Return a small speaker list."""

        _ = self
        return [{"name": "ずんだもん", "styles": [{"id": 3, "name": "ノーマル"}]}]

    def _mock_version(self: VoicevoxClient) -> str:
        """Return a fixed engine version."""

        _ = self
        return "0.14.5"

    monkeypatch.setattr(VoicevoxClient, "audio_query", _mock_audio_query)
    monkeypatch.setattr(VoicevoxClient, "synthesis", _mock_synthesis)
    monkeypatch.setattr(VoicevoxClient, "speakers", _mock_speakers)
    monkeypatch.setattr(VoicevoxClient, "version", _mock_version)
    return recorded


@pytest.fixture
def fast_config(tmp_path: Path) -> Path:
    """Write a config file with no pause between utterances."""

    config_path = tmp_path / "ttsrelay.yaml"
    config_path.write_text("utterance_gap_seconds: 0\nlog_level: warning\n", encoding="utf-8")
    return config_path
