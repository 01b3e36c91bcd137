"""Integration tests for `voices`, `check`, and `normalize` commands."""

from __future__ import annotations

from typing import Any

from pytest import MonkeyPatch
from typer.testing import CliRunner

from ttsrelay.cli import app
from ttsrelay.errors import SynthesisUnavailable
from ttsrelay.tts.voicevox_client import VoicevoxClient


def _unavailable(self: VoicevoxClient) -> Any:
    """Simulate an engine that refuses connections."""

    _ = self
    raise SynthesisUnavailable("connection refused", failure_kind="transport")


def test_voices_lists_styles_with_ids() -> None:
    """Voices command should print characters and their style ids."""

    runner = CliRunner()

    result = runner.invoke(app, ["voices"])

    assert result.exit_code == 0, result.output
    assert "ずんだもん" in result.output
    assert "  - ノーマル (ID: 3)" in result.output


def test_voices_reports_unreachable_engine(monkeypatch: MonkeyPatch) -> None:
    """An empty voice list should fail at the voices stage with a hint."""

    monkeypatch.setattr(VoicevoxClient, "speakers", _unavailable)
    runner = CliRunner()

    result = runner.invoke(app, ["voices"])

    assert result.exit_code == 1
    assert "voices failed at stage `voices`" in result.output
    assert "Run `ttsrelay check`" in result.output


def test_check_prints_engine_version(monkeypatch: MonkeyPatch) -> None:
    """Check should show the resolved engine URL and its version."""

    monkeypatch.setenv("VOICEVOX_URL", "http://engine.local:50021")
    runner = CliRunner()

    result = runner.invoke(app, ["check"])

    assert result.exit_code == 0, result.output
    assert "Engine: http://engine.local:50021" in result.output
    assert "Version: 0.14.5" in result.output


def test_check_reports_unreachable_engine(monkeypatch: MonkeyPatch) -> None:
    """Check should exit with code 1 when the engine does not answer."""

    monkeypatch.setattr(VoicevoxClient, "version", _unavailable)
    runner = CliRunner()

    result = runner.invoke(app, ["check"])

    assert result.exit_code == 1
    assert "check failed at stage `check`" in result.output


def test_normalize_shows_text_or_suppression_reason() -> None:
    """Normalize should be usable offline to preview the relay's text handling."""

    runner = CliRunner()

    spoken = runner.invoke(app, ["normalize", "hi <@123>\nsee www.example.com"])
    suppressed = runner.invoke(app, ["normalize", "a" * 11, "--max-chars", "10"])

    assert spoken.exit_code == 0
    assert spoken.output.strip() == "hi mention。see URL"
    assert suppressed.exit_code == 0
    assert suppressed.output.strip() == "suppressed: too_long"
