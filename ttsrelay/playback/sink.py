"""Blocking playback over callback-style output handles.

Responsibilities:
- Turn an output's "play and call me back" operation into one blocking call.
- Bound every wait so a stuck output cannot stall a room's drain loop.
"""

from __future__ import annotations

import threading

from ..errors import PlaybackError
from ..models.datatypes import OutputHandle


class PlaybackSink:
    """Play one audio buffer on an output and wait for completion or failure."""

    def __init__(self, timeout_seconds: float = 30.0) -> None:
        """Initialize the upper bound on a single playback wait."""

        self.timeout_seconds = timeout_seconds

    def play(self, audio: bytes, output: OutputHandle) -> None:
        """Block until `output` reports completion.

        Raises:
            PlaybackError: If the output fails to start, reports an error, or
                does not finish within `timeout_seconds`.
        """

        finished = threading.Event()
        guard = threading.Lock()
        reported: list[Exception | None] = []

        def _on_finished(error: Exception | None) -> None:
            """Keep only the first completion signal."""

            with guard:
                if finished.is_set():
                    return
                reported.append(error)
                finished.set()

        try:
            output.play(audio, _on_finished)
        except Exception as exc:
            raise PlaybackError(f"Output failed to start playback: {exc}") from exc

        if not finished.wait(self.timeout_seconds):
            raise PlaybackError(
                f"Playback did not finish within {self.timeout_seconds:g} seconds."
            )

        error = reported[0]
        if isinstance(error, PlaybackError):
            raise error
        if error is not None:
            raise PlaybackError(f"Output reported a playback error: {error}") from error
