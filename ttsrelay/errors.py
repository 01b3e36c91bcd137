"""Domain exceptions for synthesis, playback, queue management, and CLI diagnostics."""

from __future__ import annotations


class SynthesisError(RuntimeError):
    """Raised when the synthesis engine cannot produce audio for one utterance."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "unknown",
        status_code: int | None = None,
    ) -> None:
        """Initialize synthesis error metadata for room-scoped diagnostics."""

        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code


class SynthesisUnavailable(SynthesisError):
    """Raised when the synthesis engine cannot be reached or does not answer in time."""


class SynthesisRejected(SynthesisError):
    """Raised when the engine answers but refuses or mangles a request."""


class PlaybackError(RuntimeError):
    """Raised when an output handle fails or does not finish playback in time."""


class RoomBusyError(RuntimeError):
    """Raised when a room queue is removed while its drain loop is still running."""

    def __init__(self, room_id: str) -> None:
        """Initialize the error with the busy room identifier."""

        super().__init__(f"Room `{room_id}` is still draining its speech queue.")
        self.room_id = room_id


class RelayCommandError(RuntimeError):
    """Raised when a CLI command fails at a specific stage."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped command error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint
