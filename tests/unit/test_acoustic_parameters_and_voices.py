"""Unit tests for acoustic parameter clamping and per-room voice resolution."""

from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from ttsrelay.models.datatypes import AcousticParameters
from ttsrelay.tts.voices import VoiceProfileStore


def test_acoustic_parameters_defaults_and_engine_field_mapping() -> None:
    """Defaults should map onto the engine's camelCase query fields."""

    params = AcousticParameters()

    assert params.as_engine_fields() == {
        "speedScale": 1.0,
        "pitchScale": 0.0,
        "intonationScale": 1.0,
        "volumeScale": 1.0,
        "prePhonemeLength": 0.1,
        "postPhonemeLength": 0.1,
    }


def test_with_updates_clamps_each_field_into_its_range() -> None:
    """Out-of-range values should land on the nearest bound."""

    params = AcousticParameters().with_updates(
        {
            "speed_scale": 5,
            "pitch_scale": -1.0,
            "intonation_scale": 3.0,
            "volume_scale": 0.1,
            "pre_phoneme_length": -0.5,
            "post_phoneme_length": 9.0,
        }
    )

    assert params == AcousticParameters(
        speed_scale=2.0,
        pitch_scale=-0.15,
        intonation_scale=2.0,
        volume_scale=0.5,
        pre_phoneme_length=0.0,
        post_phoneme_length=1.5,
    )


def test_with_updates_skips_missing_and_none_fields() -> None:
    """Partial updates should leave unspecified fields untouched."""

    params = AcousticParameters(speed_scale=1.5).with_updates(
        {"pitch_scale": 0.05, "volume_scale": None}
    )

    assert params.speed_scale == 1.5
    assert params.pitch_scale == 0.05
    assert params.volume_scale == 1.0


@pytest.mark.parametrize(
    "partial",
    [
        {"tempo": 1.0},
        {"speed_scale": "fast"},
        {"speed_scale": True},
    ],
)
def test_with_updates_rejects_unknown_or_non_numeric_values(partial: dict[str, object]) -> None:
    """Unknown names and non-numeric values should raise `ValueError`."""

    with pytest.raises(ValueError):
        AcousticParameters().with_updates(partial)


def test_acoustic_parameters_are_immutable() -> None:
    """Stored parameter snapshots should never change under a running utterance."""

    params = AcousticParameters()

    with pytest.raises(FrozenInstanceError):
        params.speed_scale = 2.0  # type: ignore[misc]


def test_effective_voice_prefers_override_then_room_then_system_default() -> None:
    """Resolution should follow submitter override, room default, system default."""

    store = VoiceProfileStore(system_default_voice=1)

    assert store.get_effective_voice("room-a", "alice") == 1

    store.set_room_default("room-a", 3)
    store.set_user_override("room-a", "alice", 7)

    assert store.get_effective_voice("room-a", "alice") == 7
    assert store.get_effective_voice("room-a", "bob") == 3
    assert store.get_effective_voice("room-a") == 3

    assert store.clear_user_override("room-a", "alice") is True
    assert store.get_effective_voice("room-a", "alice") == 3
    assert store.clear_user_override("room-a", "alice") is False


def test_voice_settings_are_isolated_per_room() -> None:
    """Overrides and defaults of one room should not leak into another."""

    store = VoiceProfileStore(system_default_voice=2)
    store.set_room_default("room-a", 8)
    store.set_user_override("room-a", "alice", 9)

    assert store.get_effective_voice("room-b", "alice") == 2
    assert store.get_room_default("room-b") == 2
    assert store.list_user_overrides("room-b") == []


def test_list_user_overrides_keeps_first_set_order() -> None:
    """Display order should follow the order overrides were first set."""

    store = VoiceProfileStore(system_default_voice=1)
    store.set_user_override("room", "carol", 5)
    store.set_user_override("room", "alice", 6)
    store.set_user_override("room", "carol", 10)

    assert store.list_user_overrides("room") == [("carol", 10), ("alice", 6)]


def test_update_parameters_is_partial_clamped_and_per_room() -> None:
    """Parameter updates should clamp, persist, and stay within one room."""

    store = VoiceProfileStore(system_default_voice=1)

    assert store.get_parameters("room-a") == AcousticParameters()
    updated = store.update_parameters("room-a", {"speed_scale": 10.0})

    assert updated.speed_scale == 2.0
    assert store.get_parameters("room-a").speed_scale == 2.0
    assert store.get_parameters("room-b").speed_scale == 1.0

    voice_id, params = store.resolve("room-a", None)
    assert voice_id == 1
    assert params is store.get_parameters("room-a")
