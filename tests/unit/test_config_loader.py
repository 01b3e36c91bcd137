"""Unit tests for relay config loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from ttsrelay.config import ConfigLoader, RelayConfig


def test_defaults_are_valid() -> None:
    """Default config should point at a local engine and validate cleanly."""

    config = RelayConfig()
    config.validate()

    assert config.synthesis_url == "http://localhost:50021"
    assert config.default_voice_id == 1
    assert config.utterance_gap_seconds == 0.3
    assert config.max_text_chars == 200


def test_from_yaml_reads_all_supported_fields(tmp_path: Path) -> None:
    """YAML loader should map every supported field."""

    config_path = tmp_path / "ttsrelay.yaml"
    config_path.write_text(
        "\n".join(
            [
                "synthesis_url: http://engine:50021",
                "default_voice_id: 3",
                "request_timeout_seconds: 5",
                "playback_timeout_seconds: 12.5",
                "utterance_gap_seconds: 0",
                "max_text_chars: 120",
                "log_level: debug",
                "extra:",
                "  guild: main",
            ]
        ),
        encoding="utf-8",
    )

    config = ConfigLoader.from_yaml(config_path)

    assert config.synthesis_url == "http://engine:50021"
    assert config.default_voice_id == 3
    assert config.request_timeout_seconds == 5.0
    assert config.playback_timeout_seconds == 12.5
    assert config.utterance_gap_seconds == 0.0
    assert config.max_text_chars == 120
    assert config.log_level == "DEBUG"
    assert config.extra == {"guild": "main"}


def test_from_yaml_empty_file_uses_defaults(tmp_path: Path) -> None:
    """An empty YAML document should behave like no settings."""

    config_path = tmp_path / "empty.yaml"
    config_path.write_text("", encoding="utf-8")

    assert ConfigLoader.from_yaml(config_path) == RelayConfig()


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("- a\n- b\n", "top-level mapping"),
        ("speaker: 3\n", "unsupported key(s): speaker"),
        ("default_voice_id: three\n", "must be an integer"),
        ("default_voice_id: true\n", "must be an integer"),
        ("utterance_gap_seconds: soon\n", "must be a number"),
        ("synthesis_url: ftp://engine\n", "http(s) URL"),
        ("utterance_gap_seconds: -1\n", "must not be negative"),
        ("log_level: chatty\n", "Unsupported `log_level`"),
        ("extra: [1]\n", "must be a mapping"),
    ],
)
def test_from_yaml_rejects_invalid_content(tmp_path: Path, content: str, message: str) -> None:
    """Invalid YAML content should raise `ValueError` with a focused message."""

    config_path = tmp_path / "bad.yaml"
    config_path.write_text(content, encoding="utf-8")

    with pytest.raises(ValueError) as exc_info:
        ConfigLoader.from_yaml(config_path)

    assert message in str(exc_info.value)


def test_from_env_reads_engine_and_relay_keys() -> None:
    """Environment loader should map `VOICEVOX_*` and `TTSRELAY_*` keys."""

    config = ConfigLoader.from_env(
        {
            "VOICEVOX_URL": " http://voicevox:50021 ",
            "VOICEVOX_SPEAKER_ID": "8",
            "TTSRELAY_REQUEST_TIMEOUT": "10",
            "TTSRELAY_UTTERANCE_GAP": "0.5",
            "TTSRELAY_MAX_TEXT_CHARS": "50",
            "TTSRELAY_LOG_LEVEL": "warning",
        }
    )

    assert config.synthesis_url == "http://voicevox:50021"
    assert config.default_voice_id == 8
    assert config.request_timeout_seconds == 10.0
    assert config.playback_timeout_seconds == 30.0
    assert config.utterance_gap_seconds == 0.5
    assert config.max_text_chars == 50
    assert config.log_level == "WARNING"


def test_from_env_rejects_non_numeric_speaker() -> None:
    """Malformed numeric env values should name the variable."""

    with pytest.raises(ValueError, match="VOICEVOX_SPEAKER_ID"):
        ConfigLoader.from_env({"VOICEVOX_SPEAKER_ID": "zundamon"})


def test_load_prefers_environment_over_yaml(tmp_path: Path) -> None:
    """Engine environment keys should win over a config file."""

    config_path = tmp_path / "ttsrelay.yaml"
    config_path.write_text("default_voice_id: 3\n", encoding="utf-8")

    config = ConfigLoader.load(config_path, env={"VOICEVOX_SPEAKER_ID": "9"})

    assert config.default_voice_id == 9


def test_load_uses_yaml_when_engine_env_is_blank(tmp_path: Path) -> None:
    """Blank engine env values should not shadow the config file."""

    config_path = tmp_path / "ttsrelay.yaml"
    config_path.write_text("default_voice_id: 3\n", encoding="utf-8")

    config = ConfigLoader.load(config_path, env={"VOICEVOX_URL": "  "})

    assert config.default_voice_id == 3


def test_load_without_sources_returns_defaults() -> None:
    """No env keys and no file should yield validated defaults."""

    assert ConfigLoader.load(None, env={}) == RelayConfig()


def test_load_missing_yaml_raises_file_not_found(tmp_path: Path) -> None:
    """A missing config path should surface as `FileNotFoundError`."""

    with pytest.raises(FileNotFoundError):
        ConfigLoader.load(tmp_path / "missing.yaml", env={})
