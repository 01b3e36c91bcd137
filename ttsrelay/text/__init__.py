"""Text normalization components.

This package provides deterministic suppression checks and rewriting rules
applied to chat text before it is queued for synthesis.
"""

from .cleaners import (
    CollapseWhitespace,
    NewlinesToFullStop,
    ReplaceCustomEmoji,
    ReplaceMentions,
    ReplaceUrls,
    SpeechTextCleaner,
)
from .normalizer import TextNormalizer

__all__ = [
    "TextNormalizer",
    "SpeechTextCleaner",
    "ReplaceUrls",
    "ReplaceMentions",
    "ReplaceCustomEmoji",
    "NewlinesToFullStop",
    "CollapseWhitespace",
]
