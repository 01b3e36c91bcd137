"""Core datatypes shared across ttsrelay modules.

Responsibilities:
- Represent immutable records exchanged between the normalizer, queues, and engine.
- Keep acoustic parameter bounds in one place so every setter clamps identically.

Key types:
- `AcousticParameters`, `Utterance`, `NormalizedText`, `QueueStatus`,
  `SubmitResult`, `VoiceInfo`, and the `OutputHandle` protocol.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Mapping, Protocol


PlaybackCallback = Callable[[Exception | None], None]


class OutputHandle(Protocol):
    """Audio output that plays one buffer at a time and reports when it is done."""

    def play(self, audio: bytes, on_finished: PlaybackCallback) -> None:
        """Start playing `audio` and call `on_finished` with `None` or the failure."""


def _clamp(value: float, lower: float, upper: float) -> float:
    """Clamp a numeric value into the closed range `[lower, upper]`."""

    return max(lower, min(upper, float(value)))


@dataclass(frozen=True, slots=True)
class AcousticParameters:
    """Tunable synthesis attributes applied to every engine query of a room.

    Attributes:
        speed_scale: Speaking rate multiplier.
        pitch_scale: Pitch offset.
        intonation_scale: Intonation strength multiplier.
        volume_scale: Output volume multiplier.
        pre_phoneme_length: Leading silence in seconds.
        post_phoneme_length: Trailing silence in seconds.
    """

    speed_scale: float = 1.0
    pitch_scale: float = 0.0
    intonation_scale: float = 1.0
    volume_scale: float = 1.0
    pre_phoneme_length: float = 0.1
    post_phoneme_length: float = 0.1

    BOUNDS = {
        "speed_scale": (0.5, 2.0),
        "pitch_scale": (-0.15, 0.15),
        "intonation_scale": (0.0, 2.0),
        "volume_scale": (0.5, 2.0),
        "pre_phoneme_length": (0.0, 1.5),
        "post_phoneme_length": (0.0, 1.5),
    }

    def with_updates(self, partial: Mapping[str, Any]) -> AcousticParameters:
        """Return a copy with the provided fields clamped into their ranges.

        Keys mapped to `None` are skipped so partially filled command options
        can be forwarded as-is.

        Raises:
            ValueError: If `partial` names an unknown parameter or a non-numeric value.
        """

        unknown = sorted(set(partial).difference(self.BOUNDS))
        if unknown:
            raise ValueError(f"Unknown acoustic parameter(s): {', '.join(unknown)}.")

        changes: dict[str, float] = {}
        for name, raw_value in partial.items():
            if raw_value is None:
                continue
            if isinstance(raw_value, bool) or not isinstance(raw_value, int | float):
                raise ValueError(f"Acoustic parameter `{name}` must be a number.")
            lower, upper = self.BOUNDS[name]
            changes[name] = _clamp(raw_value, lower, upper)
        return replace(self, **changes)

    def as_engine_fields(self) -> dict[str, float]:
        """Map parameters onto the engine's audio-query field names."""

        return {
            "speedScale": self.speed_scale,
            "pitchScale": self.pitch_scale,
            "intonationScale": self.intonation_scale,
            "volumeScale": self.volume_scale,
            "prePhonemeLength": self.pre_phoneme_length,
            "postPhonemeLength": self.post_phoneme_length,
        }


@dataclass(frozen=True, slots=True)
class Utterance:
    """One queued unit of sanitized text bound to the output captured at submission.

    Attributes:
        room_id: Room that owns the queue.
        text: Normalized text ready for synthesis.
        output: Output handle the utterance plays into.
        submitter_id: Optional identity used for per-user voice overrides.
    """

    room_id: str
    text: str
    output: OutputHandle = field(compare=False, repr=False)
    submitter_id: str | None = None


@dataclass(frozen=True, slots=True)
class NormalizedText:
    """Normalizer result: sanitized text or a suppression with its reason."""

    text: str
    suppressed: bool = False
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class QueueStatus:
    """Snapshot of one room queue."""

    queue_length: int
    draining: bool


class SubmitOutcome(str, Enum):
    """What happened to a submitted piece of text."""

    ENQUEUED = "enqueued"
    SUPPRESSED = "suppressed"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class SubmitResult:
    """Result returned to the adapter for one `submit` call.

    Attributes:
        outcome: Enqueued, suppressed by the normalizer, or rejected.
        room_id: Target room identifier.
        text: Normalized text, empty when nothing was enqueued.
        reason: Suppression or rejection reason.
        queue_length: Pending items in the room right after the call.
    """

    outcome: SubmitOutcome
    room_id: str
    text: str = ""
    reason: str | None = None
    queue_length: int = 0

    @property
    def enqueued(self) -> bool:
        """Return whether the text was accepted into the room queue."""

        return self.outcome is SubmitOutcome.ENQUEUED


@dataclass(frozen=True, slots=True)
class VoiceStyle:
    """One selectable style of an engine character."""

    id: int
    name: str


@dataclass(frozen=True, slots=True)
class VoiceInfo:
    """An engine character with its styles."""

    name: str
    styles: tuple[VoiceStyle, ...] = field(default_factory=tuple)
    speaker_uuid: str | None = None
