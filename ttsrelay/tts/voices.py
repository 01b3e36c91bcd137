"""Per-room voice selection and acoustic tuning.

Responsibilities:
- Hold each room's default voice, acoustic parameters, and per-submitter overrides.
- Resolve the effective voice for an utterance under the room's own lock.

Key types:
- `RoomVoiceProfile`: mutable settings of one room.
- `VoiceProfileStore`: thread-safe registry of room profiles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import threading
from typing import Any, Mapping

from ..models.datatypes import AcousticParameters


@dataclass(slots=True)
class RoomVoiceProfile:
    """Voice settings of one room.

    Attributes:
        default_voice: Room default voice, or `None` to fall back to the system default.
        parameters: Acoustic parameters applied to every utterance of the room.
        overrides: Submitter identity to voice identity, in insertion order.
        lock: Serializes reads and writes of this profile.
    """

    default_voice: int | None = None
    parameters: AcousticParameters = field(default_factory=AcousticParameters)
    overrides: dict[str, int] = field(default_factory=dict)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)


class VoiceProfileStore:
    """In-memory voice settings keyed by room identifier."""

    def __init__(self, system_default_voice: int) -> None:
        """Initialize the store with the voice used when a room sets none."""

        self.system_default_voice = system_default_voice
        self._profiles: dict[str, RoomVoiceProfile] = {}
        self._registry_lock = threading.Lock()

    def _profile(self, room_id: str) -> RoomVoiceProfile:
        """Return the room profile, creating it on first reference."""

        with self._registry_lock:
            profile = self._profiles.get(room_id)
            if profile is None:
                profile = RoomVoiceProfile()
                self._profiles[room_id] = profile
            return profile

    def get_effective_voice(self, room_id: str, submitter_id: str | None = None) -> int:
        """Return submitter override, else room default, else the system default."""

        voice_id, _ = self.resolve(room_id, submitter_id)
        return voice_id

    def resolve(
        self, room_id: str, submitter_id: str | None = None
    ) -> tuple[int, AcousticParameters]:
        """Return effective voice and parameters as one consistent snapshot."""

        profile = self._profile(room_id)
        with profile.lock:
            voice_id = None
            if submitter_id is not None:
                voice_id = profile.overrides.get(submitter_id)
            if voice_id is None:
                voice_id = profile.default_voice
            if voice_id is None:
                voice_id = self.system_default_voice
            return voice_id, profile.parameters

    def get_room_default(self, room_id: str) -> int:
        """Return the room default voice, falling back to the system default."""

        profile = self._profile(room_id)
        with profile.lock:
            if profile.default_voice is None:
                return self.system_default_voice
            return profile.default_voice

    def set_room_default(self, room_id: str, voice_id: int) -> None:
        """Set the default voice of a room."""

        profile = self._profile(room_id)
        with profile.lock:
            profile.default_voice = voice_id

    def set_user_override(self, room_id: str, submitter_id: str, voice_id: int) -> None:
        """Pin a submitter to a specific voice inside one room."""

        profile = self._profile(room_id)
        with profile.lock:
            profile.overrides[submitter_id] = voice_id

    def clear_user_override(self, room_id: str, submitter_id: str) -> bool:
        """Drop a submitter override and return whether one existed."""

        profile = self._profile(room_id)
        with profile.lock:
            return profile.overrides.pop(submitter_id, None) is not None

    def list_user_overrides(self, room_id: str) -> list[tuple[str, int]]:
        """Return `(submitter_id, voice_id)` pairs in the order they were first set."""

        profile = self._profile(room_id)
        with profile.lock:
            return list(profile.overrides.items())

    def get_parameters(self, room_id: str) -> AcousticParameters:
        """Return the room's acoustic parameters, initializing defaults lazily."""

        profile = self._profile(room_id)
        with profile.lock:
            return profile.parameters

    def update_parameters(
        self, room_id: str, partial: Mapping[str, Any]
    ) -> AcousticParameters:
        """Apply provided fields, clamped to their ranges, and return the new values."""

        profile = self._profile(room_id)
        with profile.lock:
            profile.parameters = profile.parameters.with_updates(partial)
            return profile.parameters
