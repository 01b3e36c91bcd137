"""Per-room speech queue and its drain loop.

Responsibilities:
- Keep a room's pending utterances in submission order.
- Run at most one drain loop per room, started by the submission that finds
  the room idle and stopped by the loop itself once the queue is empty.
- Isolate synthesis and playback failures to the item that caused them.

Key types:
- `RoomSpeechQueue`: queue state (`deque` + draining flag) behind one condition lock.
"""

from __future__ import annotations

from collections import deque
import threading
import time
from typing import Callable

from ..models.datatypes import QueueStatus, Utterance
from ..playback.sink import PlaybackSink
from ..telemetry.logger import RelayLogger
from ..tts.synthesizer import SpeechSynthesizer
from ..tts.voices import VoiceProfileStore


DEFAULT_UTTERANCE_GAP_SECONDS = 0.3


class QueueClosed(RuntimeError):
    """Raised when submitting to a queue that was evicted from its manager."""


class RoomSpeechQueue:
    """Ordered speech queue of one room.

    The pending deque and the draining flag only change together under
    `_condition`. The drain loop checks for an empty queue and clears the
    flag in the same critical section, so a concurrent submission is either
    popped by the running loop or starts a new one.
    """

    def __init__(
        self,
        room_id: str,
        *,
        voice_store: VoiceProfileStore,
        synthesizer: SpeechSynthesizer,
        sink: PlaybackSink,
        gap_seconds: float = DEFAULT_UTTERANCE_GAP_SECONDS,
        relay_logger: RelayLogger | None = None,
        sleeper: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize an idle, empty queue bound to the shared relay components."""

        self.room_id = room_id
        self.voice_store = voice_store
        self.synthesizer = synthesizer
        self.sink = sink
        self.gap_seconds = gap_seconds
        self.relay_logger = relay_logger or RelayLogger()
        self.sleeper = sleeper
        self.spoken_count = 0
        self.failed_count = 0
        self.last_failure: Exception | None = None
        self._pending: deque[Utterance] = deque()
        self._draining = False
        self._closed = False
        self._condition = threading.Condition()

    def submit(self, utterance: Utterance) -> int:
        """Append an utterance, start draining if idle, and return the pending count.

        Raises:
            QueueClosed: If the queue was evicted from its manager.
        """

        with self._condition:
            if self._closed:
                raise QueueClosed(self.room_id)
            self._pending.append(utterance)
            queue_length = len(self._pending)
            start_drain = not self._draining
            self._draining = True

        if start_drain:
            self._start_drain()
        return queue_length

    def clear(self) -> int:
        """Discard pending utterances and return how many were dropped.

        The utterance currently being synthesized or played is not affected.
        """

        with self._condition:
            removed = len(self._pending)
            self._pending.clear()
        return removed

    def status(self) -> QueueStatus:
        """Return a snapshot of pending length and draining state."""

        with self._condition:
            return QueueStatus(queue_length=len(self._pending), draining=self._draining)

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until no drain loop is running; return `False` on timeout."""

        with self._condition:
            return self._condition.wait_for(lambda: not self._draining, timeout)

    def close_if_idle(self) -> bool:
        """Refuse further submissions if the room is idle; return whether it closed."""

        with self._condition:
            if self._draining:
                return False
            self._closed = True
            return True

    def _start_drain(self) -> None:
        """Spawn the drain worker; roll the flag back if the thread cannot start."""

        worker = threading.Thread(
            target=self._drain,
            name=f"ttsrelay-room-{self.room_id}",
            daemon=True,
        )
        try:
            worker.start()
        except RuntimeError:
            with self._condition:
                self._draining = False
                self._condition.notify_all()
            raise

    def _next_utterance(self) -> tuple[Utterance, int] | None:
        """Pop the head item, or leave the draining state when there is none."""

        with self._condition:
            if not self._pending:
                self._draining = False
                self._condition.notify_all()
                return None
            utterance = self._pending.popleft()
            return utterance, len(self._pending)

    def _drain(self) -> None:
        """Speak queued utterances one at a time until the queue is empty."""

        self.relay_logger.log_drain_start(self.room_id)
        while True:
            next_item = self._next_utterance()
            if next_item is None:
                break
            utterance, remaining = next_item
            if self._speak(utterance, remaining) and self.gap_seconds > 0.0:
                self.sleeper(self.gap_seconds)
        self.relay_logger.log_drain_idle(self.room_id)

    def _speak(self, utterance: Utterance, remaining: int) -> bool:
        """Synthesize and play one utterance; log and report failures as `False`."""

        voice_id, params = self.voice_store.resolve(self.room_id, utterance.submitter_id)
        self.relay_logger.log_speak_start(self.room_id, voice_id, remaining)
        try:
            audio = self.synthesizer.synthesize(utterance.text, voice_id, params)
            self.sink.play(audio, utterance.output)
        except Exception as exc:
            self.failed_count += 1
            self.last_failure = exc
            self.relay_logger.log_speak_failure(
                self.room_id,
                type(exc).__name__,
                getattr(exc, "failure_kind", None),
                getattr(exc, "status_code", None),
            )
            return False
        self.spoken_count += 1
        self.relay_logger.log_speak_complete(self.room_id)
        return True
