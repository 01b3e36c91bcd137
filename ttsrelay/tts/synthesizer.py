"""Synthesis gateway interfaces and VOICEVOX-backed implementation.

Responsibilities:
- Define the protocol the room queues use to turn text into audio.
- Run the two-step query/render flow with room acoustic parameters merged in.
- Offer best-effort voice listing and engine reachability checks.
"""

from __future__ import annotations

from typing import Any, Protocol

from ..errors import SynthesisError
from ..models.datatypes import AcousticParameters, VoiceInfo, VoiceStyle
from ..telemetry.logger import RelayLogger
from .voicevox_client import VoicevoxClient


class SpeechSynthesizer(Protocol):
    """Protocol for synthesis gateway implementations."""

    def synthesize(self, text: str, voice_id: int, params: AcousticParameters) -> bytes:
        """Return rendered audio bytes for `text` at `voice_id`."""

    def list_voices(self) -> list[VoiceInfo]:
        """Return available voices, or an empty list when they cannot be listed."""

    def describe_voice(self, voice_id: int) -> str:
        """Return a display label for a voice id."""

    def engine_version(self) -> str | None:
        """Return the engine version, or `None` when unreachable."""

    def check_reachable(self) -> bool:
        """Return whether the engine answers."""


class VoicevoxSynthesizer:
    """VOICEVOX-backed gateway; stateless apart from the engine client."""

    def __init__(
        self,
        base_url: str = "http://localhost:50021",
        timeout_seconds: float = 30.0,
        client: VoicevoxClient | None = None,
        relay_logger: RelayLogger | None = None,
    ) -> None:
        """Initialize the engine client and event logger."""

        self.client = client or VoicevoxClient(base_url=base_url, timeout_seconds=timeout_seconds)
        self.relay_logger = relay_logger or RelayLogger()

    def synthesize(self, text: str, voice_id: int, params: AcousticParameters) -> bytes:
        """Build a query, overwrite its acoustic fields, and render audio.

        Raises:
            SynthesisUnavailable: If the engine cannot be reached or times out.
            SynthesisRejected: If either engine step returns a failure.
        """

        query = self.client.audio_query(text=text, speaker=voice_id)
        merged = self.merge_parameters(query, params)
        return self.client.synthesis(query=merged, speaker=voice_id)

    @staticmethod
    def merge_parameters(query: dict[str, Any], params: AcousticParameters) -> dict[str, Any]:
        """Return a copy of `query` with the acoustic fields replaced by `params`."""

        merged = dict(query)
        merged.update(params.as_engine_fields())
        return merged

    def list_voices(self) -> list[VoiceInfo]:
        """Return engine characters and styles, or an empty list when unavailable."""

        try:
            raw_speakers = self.client.speakers()
        except SynthesisError as exc:
            self.relay_logger.log_engine_failure("list_voices", type(exc).__name__)
            return []
        return [voice for voice in map(self._parse_voice, raw_speakers) if voice is not None]

    def describe_voice(self, voice_id: int) -> str:
        """Return `character（style）` for a voice id, or a generic label when unknown."""

        for voice in self.list_voices():
            for style in voice.styles:
                if style.id == voice_id:
                    return f"{voice.name}（{style.name}）"
        return f"Speaker ID {voice_id}"

    def engine_version(self) -> str | None:
        """Return the engine version, or `None` when the engine is unreachable."""

        try:
            return self.client.version()
        except SynthesisError as exc:
            self.relay_logger.log_engine_failure("version", type(exc).__name__)
            return None

    def check_reachable(self) -> bool:
        """Return whether the engine answers its version endpoint."""

        return self.engine_version() is not None

    @staticmethod
    def _parse_voice(raw: Any) -> VoiceInfo | None:
        """Parse one engine speaker entry, skipping malformed entries."""

        if not isinstance(raw, dict) or not isinstance(raw.get("name"), str):
            return None
        raw_styles = raw.get("styles")
        if raw_styles is None:
            raw_styles = []
        if not isinstance(raw_styles, list):
            return None
        styles: list[VoiceStyle] = []
        for raw_style in raw_styles:
            if not isinstance(raw_style, dict):
                continue
            style_id = raw_style.get("id")
            style_name = raw_style.get("name")
            if isinstance(style_id, bool) or not isinstance(style_id, int):
                continue
            styles.append(VoiceStyle(id=style_id, name=str(style_name or style_id)))
        speaker_uuid = raw.get("speaker_uuid")
        return VoiceInfo(
            name=raw["name"],
            styles=tuple(styles),
            speaker_uuid=speaker_uuid if isinstance(speaker_uuid, str) else None,
        )
