"""Shared typed data models for ttsrelay.

This package contains dataclasses used across relay modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    AcousticParameters,
    NormalizedText,
    OutputHandle,
    QueueStatus,
    SubmitOutcome,
    SubmitResult,
    Utterance,
    VoiceInfo,
    VoiceStyle,
)

__all__ = [
    "AcousticParameters",
    "NormalizedText",
    "OutputHandle",
    "QueueStatus",
    "SubmitOutcome",
    "SubmitResult",
    "Utterance",
    "VoiceInfo",
    "VoiceStyle",
]
