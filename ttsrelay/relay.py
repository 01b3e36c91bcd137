"""Relay facade used by chat adapters.

Responsibilities:
- Expose the inbound operations adapters call: submit, voice settings,
  queue control, and engine queries.
- Normalize text before queueing and report what happened to each submission.
- Wire the normalizer, voice store, synthesis gateway, playback sink, and
  queue manager together from one `RelayConfig`.

Key types:
- `SpeechRelay`: orchestration facade for all rooms of one process.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Mapping

from .config import RelayConfig
from .models.datatypes import (
    AcousticParameters,
    OutputHandle,
    QueueStatus,
    SubmitOutcome,
    SubmitResult,
    Utterance,
    VoiceInfo,
)
from .playback.sink import PlaybackSink
from .queueing.manager import QueueManager
from .telemetry.logger import RelayLogger
from .text.normalizer import TextNormalizer
from .tts.synthesizer import SpeechSynthesizer, VoicevoxSynthesizer
from .tts.voices import VoiceProfileStore


class SpeechRelay:
    """Coordinate normalization, per-room queues, and voice settings."""

    def __init__(
        self,
        config: RelayConfig | None = None,
        *,
        synthesizer: SpeechSynthesizer | None = None,
        sink: PlaybackSink | None = None,
        voice_store: VoiceProfileStore | None = None,
        normalizer: TextNormalizer | None = None,
        relay_logger: RelayLogger | None = None,
        sleeper: Callable[[float], None] = time.sleep,
    ) -> None:
        """Build default components from `config` unless explicitly injected."""

        self.config = config or RelayConfig()
        self.relay_logger = relay_logger or RelayLogger()
        self.synthesizer = synthesizer or VoicevoxSynthesizer(
            base_url=self.config.synthesis_url,
            timeout_seconds=self.config.request_timeout_seconds,
            relay_logger=self.relay_logger,
        )
        self.voice_store = voice_store or VoiceProfileStore(self.config.default_voice_id)
        self.normalizer = normalizer or TextNormalizer(max_chars=self.config.max_text_chars)
        self.queues = QueueManager(
            voice_store=self.voice_store,
            synthesizer=self.synthesizer,
            sink=sink or PlaybackSink(timeout_seconds=self.config.playback_timeout_seconds),
            gap_seconds=self.config.utterance_gap_seconds,
            relay_logger=self.relay_logger,
            sleeper=sleeper,
        )
        self._outputs: dict[str, OutputHandle] = {}
        self._outputs_lock = threading.Lock()

    def attach_output(self, room_id: str, output: OutputHandle) -> None:
        """Set the output used by submissions of a room that pass no explicit output."""

        with self._outputs_lock:
            self._outputs[room_id] = output

    def detach_output(self, room_id: str) -> bool:
        """Forget the attached output of a room and return whether one was set."""

        with self._outputs_lock:
            return self._outputs.pop(room_id, None) is not None

    def attached_output(self, room_id: str) -> OutputHandle | None:
        """Return the output attached to a room, if any."""

        with self._outputs_lock:
            return self._outputs.get(room_id)

    def submit(
        self,
        room_id: str,
        raw_text: str,
        submitter_id: str | None = None,
        output: OutputHandle | None = None,
    ) -> SubmitResult:
        """Normalize and enqueue text for a room.

        The output is captured now; later attach/detach calls do not affect
        utterances that are already queued.
        """

        target = output if output is not None else self.attached_output(room_id)
        if target is None:
            self.relay_logger.log_rejected(room_id, "no_output")
            return SubmitResult(
                outcome=SubmitOutcome.REJECTED,
                room_id=room_id,
                reason="no_output",
                queue_length=self.queues.status(room_id).queue_length,
            )

        normalized = self.normalizer.normalize(raw_text)
        if normalized.suppressed:
            self.relay_logger.log_suppressed(room_id, normalized.reason)
            return SubmitResult(
                outcome=SubmitOutcome.SUPPRESSED,
                room_id=room_id,
                reason=normalized.reason,
                queue_length=self.queues.status(room_id).queue_length,
            )

        utterance = Utterance(
            room_id=room_id,
            text=normalized.text,
            output=target,
            submitter_id=submitter_id,
        )
        queue_length = self.queues.submit(utterance)
        self.relay_logger.log_enqueued(room_id, queue_length, len(normalized.text))
        return SubmitResult(
            outcome=SubmitOutcome.ENQUEUED,
            room_id=room_id,
            text=normalized.text,
            queue_length=queue_length,
        )

    def set_room_default_voice(self, room_id: str, voice_id: int) -> None:
        """Change the default voice of a room."""

        self.voice_store.set_room_default(room_id, self._checked_voice_id(voice_id))
        self.relay_logger.log_voice_changed(room_id, voice_id)

    def get_room_default_voice(self, room_id: str) -> int:
        """Return the voice a room uses for submitters without an override."""

        return self.voice_store.get_room_default(room_id)

    def set_user_voice(self, room_id: str, submitter_id: str, voice_id: int) -> None:
        """Pin one submitter to a voice inside a room."""

        self.voice_store.set_user_override(room_id, submitter_id, self._checked_voice_id(voice_id))
        self.relay_logger.log_voice_changed(room_id, voice_id, submitter_id)

    def clear_user_voice(self, room_id: str, submitter_id: str) -> bool:
        """Remove a submitter override and return whether one existed."""

        removed = self.voice_store.clear_user_override(room_id, submitter_id)
        if removed:
            self.relay_logger.log_voice_changed(room_id, None, submitter_id)
        return removed

    def list_user_voices(self, room_id: str) -> list[tuple[str, int]]:
        """Return submitter overrides of a room for display."""

        return self.voice_store.list_user_overrides(room_id)

    def update_acoustic_parameters(
        self, room_id: str, partial: Mapping[str, Any]
    ) -> AcousticParameters:
        """Apply a partial, clamped parameter update and return the stored values."""

        updated = self.voice_store.update_parameters(room_id, partial)
        changed = [name for name, value in partial.items() if value is not None]
        if changed:
            self.relay_logger.log_parameters_updated(room_id, changed)
        return updated

    def get_acoustic_parameters(self, room_id: str) -> AcousticParameters:
        """Return the acoustic parameters of a room."""

        return self.voice_store.get_parameters(room_id)

    def clear_queue(self, room_id: str) -> int:
        """Drop pending utterances of a room; the one in flight still completes."""

        removed = self.queues.clear(room_id)
        self.relay_logger.log_queue_cleared(room_id, removed)
        return removed

    def get_status(self, room_id: str) -> QueueStatus:
        """Return the queue snapshot of a room."""

        return self.queues.status(room_id)

    def remove_room(self, room_id: str) -> bool:
        """Evict an idle room queue and its attached output; voice settings are kept.

        Raises:
            RoomBusyError: If the room is still draining.
        """

        removed = self.queues.remove_room(room_id)
        self.detach_output(room_id)
        return removed

    def room_ids(self) -> list[str]:
        """Return rooms that currently own a queue."""

        return self.queues.room_ids()

    def wait_idle(self, room_id: str, timeout: float | None = None) -> bool:
        """Block until a room has finished draining."""

        return self.queues.wait_idle(room_id, timeout)

    def wait_all_idle(self, timeout: float | None = None) -> bool:
        """Block until every room has finished draining."""

        return self.queues.wait_all_idle(timeout)

    def list_available_voices(self) -> list[VoiceInfo]:
        """Return engine voices; empty when the engine cannot be queried."""

        return self.synthesizer.list_voices()

    def describe_voice(self, voice_id: int) -> str:
        """Return a display label for a voice id."""

        return self.synthesizer.describe_voice(voice_id)

    def check_service_reachable(self) -> bool:
        """Return whether the engine answers; advisory only, never gates submission."""

        return self.synthesizer.check_reachable()

    def engine_version(self) -> str | None:
        """Return the engine version string, if reachable."""

        return self.synthesizer.engine_version()

    @staticmethod
    def _checked_voice_id(voice_id: int) -> int:
        """Reject voice ids that can never be valid engine selectors."""

        if isinstance(voice_id, bool) or not isinstance(voice_id, int) or voice_id < 0:
            raise ValueError(f"Voice id must be a non-negative integer, got `{voice_id}`.")
        return voice_id
