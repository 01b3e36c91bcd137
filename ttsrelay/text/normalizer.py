"""Chat text normalization ahead of synthesis.

Responsibilities:
- Decide whether a raw message should be spoken at all.
- Rewrite accepted messages into sanitized, speakable text.
"""

from __future__ import annotations

from ..models.datatypes import NormalizedText
from .cleaners import SpeechTextCleaner


DEFAULT_MAX_TEXT_CHARS = 200
IGNORED_PREFIX = ";"
SPOILER_MARKER = "||"


class TextNormalizer:
    """Normalize raw chat text into speakable text or a suppression signal."""

    def __init__(
        self,
        max_chars: int = DEFAULT_MAX_TEXT_CHARS,
        cleaner: SpeechTextCleaner | None = None,
    ) -> None:
        """Initialize length limit and rewriting rules."""

        self.max_chars = max_chars
        self.cleaner = cleaner or SpeechTextCleaner()

    def normalize(self, raw: str) -> NormalizedText:
        """Return the sanitized text, or a suppressed result with its reason."""

        trimmed = raw.strip()
        reason = self._suppression_reason(trimmed)
        if reason is not None:
            return NormalizedText(text="", suppressed=True, reason=reason)

        cleaned = self.cleaner.clean(trimmed)
        if not cleaned:
            return NormalizedText(text="", suppressed=True, reason="empty")
        return NormalizedText(text=cleaned)

    def _suppression_reason(self, trimmed: str) -> str | None:
        """Return why trimmed text must not be spoken, or `None` when it may be."""

        if not trimmed:
            return "empty"
        if len(trimmed) > self.max_chars:
            return "too_long"
        if trimmed.startswith(IGNORED_PREFIX):
            return "ignored_prefix"
        if SPOILER_MARKER in trimmed:
            return "spoiler"
        return None
