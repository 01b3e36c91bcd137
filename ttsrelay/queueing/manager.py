"""Registry of room speech queues.

Responsibilities:
- Create one `RoomSpeechQueue` per room on first reference.
- Route submit, clear, and status calls to the right room.
- Evict idle rooms on request without racing concurrent submissions.
"""

from __future__ import annotations

import threading
import time
from typing import Callable

from ..errors import RoomBusyError
from ..models.datatypes import QueueStatus, Utterance
from ..playback.sink import PlaybackSink
from ..telemetry.logger import RelayLogger
from ..tts.synthesizer import SpeechSynthesizer
from ..tts.voices import VoiceProfileStore
from .room_queue import DEFAULT_UTTERANCE_GAP_SECONDS, QueueClosed, RoomSpeechQueue


class QueueManager:
    """Own the room queues; rooms never share locks or drain loops."""

    def __init__(
        self,
        *,
        voice_store: VoiceProfileStore,
        synthesizer: SpeechSynthesizer,
        sink: PlaybackSink,
        gap_seconds: float = DEFAULT_UTTERANCE_GAP_SECONDS,
        relay_logger: RelayLogger | None = None,
        sleeper: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize shared components handed to every room queue."""

        self.voice_store = voice_store
        self.synthesizer = synthesizer
        self.sink = sink
        self.gap_seconds = gap_seconds
        self.relay_logger = relay_logger or RelayLogger()
        self.sleeper = sleeper
        self._queues: dict[str, RoomSpeechQueue] = {}
        self._registry_lock = threading.Lock()

    def get_or_create(self, room_id: str) -> RoomSpeechQueue:
        """Return the room queue, creating it on first use."""

        with self._registry_lock:
            queue = self._queues.get(room_id)
            if queue is None:
                queue = RoomSpeechQueue(
                    room_id,
                    voice_store=self.voice_store,
                    synthesizer=self.synthesizer,
                    sink=self.sink,
                    gap_seconds=self.gap_seconds,
                    relay_logger=self.relay_logger,
                    sleeper=self.sleeper,
                )
                self._queues[room_id] = queue
            return queue

    def get(self, room_id: str) -> RoomSpeechQueue | None:
        """Return the room queue if it exists, without creating it."""

        with self._registry_lock:
            return self._queues.get(room_id)

    def submit(self, utterance: Utterance) -> int:
        """Enqueue an utterance into its room and return the pending count."""

        while True:
            queue = self.get_or_create(utterance.room_id)
            try:
                return queue.submit(utterance)
            except QueueClosed:
                # Evicted between lookup and submit; the next lookup creates a fresh queue.
                continue

    def clear(self, room_id: str) -> int:
        """Drop pending utterances of a room and return how many were removed."""

        queue = self.get(room_id)
        if queue is None:
            return 0
        return queue.clear()

    def status(self, room_id: str) -> QueueStatus:
        """Return the room snapshot; unknown rooms report an idle empty queue."""

        queue = self.get(room_id)
        if queue is None:
            return QueueStatus(queue_length=0, draining=False)
        return queue.status()

    def remove_room(self, room_id: str) -> bool:
        """Evict an idle room queue and return whether one existed.

        Raises:
            RoomBusyError: If the room is still draining.
        """

        with self._registry_lock:
            queue = self._queues.get(room_id)
            if queue is None:
                return False
            if not queue.close_if_idle():
                raise RoomBusyError(room_id)
            del self._queues[room_id]
        self.relay_logger.log_room_removed(room_id)
        return True

    def room_ids(self) -> list[str]:
        """Return known room identifiers in creation order."""

        with self._registry_lock:
            return list(self._queues)

    def wait_idle(self, room_id: str, timeout: float | None = None) -> bool:
        """Block until one room is idle; unknown rooms are idle."""

        queue = self.get(room_id)
        if queue is None:
            return True
        return queue.wait_idle(timeout)

    def wait_all_idle(self, timeout: float | None = None) -> bool:
        """Block until every known room is idle, sharing one overall deadline."""

        deadline = None if timeout is None else time.monotonic() + timeout
        with self._registry_lock:
            queues = list(self._queues.values())
        for queue in queues:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            if not queue.wait_idle(remaining):
                return False
        return True
