"""Structured relay logging utilities.

Responsibilities:
- Emit concise, deterministic event logs for queue and engine activity.
- Keep utterance text out of logs; only lengths and identifiers are recorded.
"""

from __future__ import annotations

import sys
from typing import Callable, TextIO

from loguru import logger


def _write_stderr(message: str) -> None:
    """Write to whatever `sys.stderr` is at emit time."""

    sys.stderr.write(message)


def configure_logging(
    sink: TextIO | Callable[[str], object] | None = None, level: str = "INFO"
) -> None:
    """Route relay logs to one plain-text sink at the given level."""

    logger.remove()
    logger.add(sink or _write_stderr, format="{message}", level=level.upper(), colorize=False)


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/", ","} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
        if context[key] is not None
    ]
    if not tokens:
        return ""
    return " " + " ".join(tokens)


class RelayLogger:
    """Emit deterministic event logs for room queues and the synthesis engine."""

    def _emit(self, level: str, event: str, **context: object) -> None:
        """Emit one structured relay log line."""

        logger.log(level, f"[relay] level={level} event={event}{_format_context(context)}")

    def log_enqueued(self, room_id: str, queue_length: int, text_chars: int) -> None:
        """Record an accepted submission."""

        self._emit("INFO", "enqueued", room=room_id, queue=queue_length, chars=text_chars)

    def log_suppressed(self, room_id: str, reason: str | None) -> None:
        """Record text the normalizer declined."""

        self._emit("DEBUG", "suppressed", room=room_id, reason=reason)

    def log_rejected(self, room_id: str, reason: str) -> None:
        """Record a submission that could not be queued."""

        self._emit("WARNING", "rejected", room=room_id, reason=reason)

    def log_drain_start(self, room_id: str) -> None:
        """Record an idle room switching to draining."""

        self._emit("INFO", "drain_start", room=room_id)

    def log_drain_idle(self, room_id: str) -> None:
        """Record a drain loop finding the queue empty and exiting."""

        self._emit("INFO", "drain_idle", room=room_id)

    def log_speak_start(self, room_id: str, voice_id: int, remaining: int) -> None:
        """Record the start of synthesis for one utterance."""

        self._emit("INFO", "speak_start", room=room_id, voice=voice_id, remaining=remaining)

    def log_speak_complete(self, room_id: str) -> None:
        """Record one utterance finishing playback."""

        self._emit("INFO", "speak_complete", room=room_id)

    def log_speak_failure(
        self,
        room_id: str,
        error_type: str,
        failure_kind: str | None = None,
        status_code: int | None = None,
    ) -> None:
        """Record an item-scoped failure without sensitive payload details."""

        self._emit(
            "ERROR",
            "speak_failure",
            room=room_id,
            error_type=error_type,
            failure_kind=failure_kind,
            status=status_code,
        )

    def log_queue_cleared(self, room_id: str, removed: int) -> None:
        """Record pending utterances discarded by a clear."""

        self._emit("INFO", "queue_cleared", room=room_id, removed=removed)

    def log_voice_changed(
        self, room_id: str, voice_id: int | None, submitter_id: str | None = None
    ) -> None:
        """Record a room default or submitter override change."""

        self._emit(
            "INFO",
            "voice_changed",
            room=room_id,
            submitter=submitter_id,
            voice=voice_id if voice_id is not None else "cleared",
        )

    def log_parameters_updated(self, room_id: str, fields: list[str]) -> None:
        """Record which acoustic parameters were changed."""

        self._emit("INFO", "parameters_updated", room=room_id, fields=",".join(sorted(fields)))

    def log_room_removed(self, room_id: str) -> None:
        """Record an idle room queue being evicted."""

        self._emit("INFO", "room_removed", room=room_id)

    def log_engine_failure(self, operation: str, error_type: str) -> None:
        """Record a best-effort engine call that failed."""

        self._emit("WARNING", "engine_failure", operation=operation, error_type=error_type)
