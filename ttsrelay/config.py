"""Configuration model and loaders for ttsrelay.

Responsibilities:
- Define relay runtime settings as a typed dataclass.
- Load settings from YAML files or environment variables with validation.
- Resolve which source wins when both are present.

Key types:
- `RelayConfig`: normalized runtime settings for one relay process.
- `ConfigLoader`: static construction helpers for `RelayConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import urlparse

import yaml


_DEFAULT_SYNTHESIS_URL = "http://localhost:50021"
_DEFAULT_VOICE_ID = 1
_DEFAULT_TIMEOUT_SECONDS = 30.0
_DEFAULT_UTTERANCE_GAP_SECONDS = 0.3
_DEFAULT_MAX_TEXT_CHARS = 200
_SUPPORTED_LOG_LEVELS = frozenset({"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR"})


def _normalize_optional_string(value: object) -> str | None:
    """Return a stripped non-empty string, or `None` for missing/blank values."""

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


@dataclass(slots=True)
class RelayConfig:
    """Runtime configuration for one relay process.

    Attributes:
        synthesis_url: Base URL of the VOICEVOX-compatible engine.
        default_voice_id: Voice used by rooms that never chose one.
        request_timeout_seconds: Upper bound for each engine HTTP call.
        playback_timeout_seconds: Upper bound for one playback wait.
        utterance_gap_seconds: Pause inserted after each spoken utterance.
        max_text_chars: Longest message (after trimming) that is still spoken.
        log_level: Minimum loguru level for relay events.
        extra: Additional metadata for adapters.
    """

    synthesis_url: str = _DEFAULT_SYNTHESIS_URL
    default_voice_id: int = _DEFAULT_VOICE_ID
    request_timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS
    playback_timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS
    utterance_gap_seconds: float = _DEFAULT_UTTERANCE_GAP_SECONDS
    max_text_chars: int = _DEFAULT_MAX_TEXT_CHARS
    log_level: str = "INFO"
    extra: dict[str, str] = field(default_factory=dict)

    def validate(self) -> None:
        """Validate runtime configuration values before the relay starts."""

        parsed = urlparse(self.synthesis_url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError("`synthesis_url` must be an http(s) URL with a host.")
        if self.default_voice_id < 0:
            raise ValueError("`default_voice_id` must be a non-negative integer.")
        if self.request_timeout_seconds <= 0:
            raise ValueError("`request_timeout_seconds` must be positive.")
        if self.playback_timeout_seconds <= 0:
            raise ValueError("`playback_timeout_seconds` must be positive.")
        if self.utterance_gap_seconds < 0:
            raise ValueError("`utterance_gap_seconds` must not be negative.")
        if self.max_text_chars <= 0:
            raise ValueError("`max_text_chars` must be a positive integer.")
        if self.log_level.upper() not in _SUPPORTED_LOG_LEVELS:
            supported = ", ".join(sorted(_SUPPORTED_LOG_LEVELS))
            raise ValueError(
                f"Unsupported `log_level` value `{self.log_level}`; supported: {supported}."
            )


class ConfigLoader:
    """Factory methods for creating `RelayConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "synthesis_url",
            "default_voice_id",
            "request_timeout_seconds",
            "playback_timeout_seconds",
            "utterance_gap_seconds",
            "max_text_chars",
            "log_level",
            "extra",
        }
    )
    _PRIMARY_ENV_KEYS = ("VOICEVOX_URL", "VOICEVOX_SPEAKER_ID")

    @staticmethod
    def load(config_path: Path | None = None, env: Mapping[str, str] | None = None) -> RelayConfig:
        """Resolve config: environment when the engine keys are set, else YAML, else defaults."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        if any(
            _normalize_optional_string(env_map.get(key)) is not None
            for key in ConfigLoader._PRIMARY_ENV_KEYS
        ):
            return ConfigLoader.from_env(env_map)
        if config_path is not None:
            return ConfigLoader.from_yaml(config_path)
        config = RelayConfig()
        config.validate()
        return config

    @staticmethod
    def from_yaml(path: Path) -> RelayConfig:
        """Create a validated config from a YAML file."""

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> RelayConfig:
        """Create a validated config from environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        label = "Environment variable"

        config = RelayConfig(
            synthesis_url=_normalize_optional_string(env_map.get("VOICEVOX_URL"))
            or _DEFAULT_SYNTHESIS_URL,
            default_voice_id=ConfigLoader._int_value(
                env_map.get("VOICEVOX_SPEAKER_ID"),
                f"{label} `VOICEVOX_SPEAKER_ID`",
                default=_DEFAULT_VOICE_ID,
            ),
            request_timeout_seconds=ConfigLoader._float_value(
                env_map.get("TTSRELAY_REQUEST_TIMEOUT"),
                f"{label} `TTSRELAY_REQUEST_TIMEOUT`",
                default=_DEFAULT_TIMEOUT_SECONDS,
            ),
            playback_timeout_seconds=ConfigLoader._float_value(
                env_map.get("TTSRELAY_PLAYBACK_TIMEOUT"),
                f"{label} `TTSRELAY_PLAYBACK_TIMEOUT`",
                default=_DEFAULT_TIMEOUT_SECONDS,
            ),
            utterance_gap_seconds=ConfigLoader._float_value(
                env_map.get("TTSRELAY_UTTERANCE_GAP"),
                f"{label} `TTSRELAY_UTTERANCE_GAP`",
                default=_DEFAULT_UTTERANCE_GAP_SECONDS,
            ),
            max_text_chars=ConfigLoader._int_value(
                env_map.get("TTSRELAY_MAX_TEXT_CHARS"),
                f"{label} `TTSRELAY_MAX_TEXT_CHARS`",
                default=_DEFAULT_MAX_TEXT_CHARS,
            ),
            log_level=(
                _normalize_optional_string(env_map.get("TTSRELAY_LOG_LEVEL")) or "INFO"
            ).upper(),
        )
        config.validate()
        return config

    @staticmethod
    def _build_config_from_mapping(payload: Mapping[str, Any], source_label: str) -> RelayConfig:
        """Build a validated config from a parsed mapping payload."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            raise ValueError(f"{source_label} includes unsupported key(s): {', '.join(unknown)}.")

        def _field(key: str) -> str:
            return f"{source_label} field `{key}`"

        config = RelayConfig(
            synthesis_url=_normalize_optional_string(payload.get("synthesis_url"))
            or _DEFAULT_SYNTHESIS_URL,
            default_voice_id=ConfigLoader._int_value(
                payload.get("default_voice_id"),
                _field("default_voice_id"),
                default=_DEFAULT_VOICE_ID,
            ),
            request_timeout_seconds=ConfigLoader._float_value(
                payload.get("request_timeout_seconds"),
                _field("request_timeout_seconds"),
                default=_DEFAULT_TIMEOUT_SECONDS,
            ),
            playback_timeout_seconds=ConfigLoader._float_value(
                payload.get("playback_timeout_seconds"),
                _field("playback_timeout_seconds"),
                default=_DEFAULT_TIMEOUT_SECONDS,
            ),
            utterance_gap_seconds=ConfigLoader._float_value(
                payload.get("utterance_gap_seconds"),
                _field("utterance_gap_seconds"),
                default=_DEFAULT_UTTERANCE_GAP_SECONDS,
            ),
            max_text_chars=ConfigLoader._int_value(
                payload.get("max_text_chars"),
                _field("max_text_chars"),
                default=_DEFAULT_MAX_TEXT_CHARS,
            ),
            log_level=(_normalize_optional_string(payload.get("log_level")) or "INFO").upper(),
            extra=ConfigLoader._string_map(payload.get("extra"), _field("extra")),
        )
        config.validate()
        return config

    @staticmethod
    def _int_value(raw_value: object, label: str, default: int) -> int:
        """Parse an optional integer value, rejecting booleans and fractional input."""

        if isinstance(raw_value, bool):
            raise ValueError(f"{label} must be an integer.")
        if isinstance(raw_value, int):
            return raw_value
        normalized = _normalize_optional_string(raw_value)
        if normalized is None:
            return default
        try:
            return int(normalized)
        except ValueError as exc:
            raise ValueError(f"{label} must be an integer.") from exc

    @staticmethod
    def _float_value(raw_value: object, label: str, default: float) -> float:
        """Parse an optional numeric value."""

        if isinstance(raw_value, bool):
            raise ValueError(f"{label} must be a number.")
        if isinstance(raw_value, int | float):
            return float(raw_value)
        normalized = _normalize_optional_string(raw_value)
        if normalized is None:
            return default
        try:
            return float(normalized)
        except ValueError as exc:
            raise ValueError(f"{label} must be a number.") from exc

    @staticmethod
    def _string_map(raw: object, label: str) -> dict[str, str]:
        """Read an optional mapping with non-empty string keys and values."""

        if raw is None:
            return {}
        if not isinstance(raw, Mapping):
            raise ValueError(f"{label} must be a mapping/object.")

        normalized: dict[str, str] = {}
        for raw_key, raw_value in raw.items():
            key_value = _normalize_optional_string(raw_key)
            value_value = _normalize_optional_string(raw_value)
            if key_value is None:
                raise ValueError(f"{label} contains a blank key.")
            if value_value is None:
                raise ValueError(f"{label} contains blank value for `{key_value}`.")
            normalized[key_value] = value_value
        return normalized
