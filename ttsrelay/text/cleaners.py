"""Deterministic text rewriting rules for chat messages.

Responsibilities:
- Provide composable rules that turn chat markup into speakable text.
- Keep rule order explicit, since later rules rely on earlier collapses.
"""

from __future__ import annotations

import re
from typing import Protocol


IDEOGRAPHIC_FULL_STOP = "。"


class CleanerRule(Protocol):
    """Protocol for text rewriting rules."""

    def apply(self, text: str) -> str:
        """Apply a single rewriting transformation."""


class ReplaceUrls:
    """Replace URL-shaped substrings with the `URL` token."""

    # Hosts and paths are printable ASCII only; Japanese text around a link has no spaces.
    _URL_RE = re.compile(
        r"[A-Za-z][A-Za-z0-9+.\-]*://[\x21-\x7e]+"
        r"|(?<![A-Za-z0-9.\-])www\.[\x21-\x7e]+"
        r"|(?<![A-Za-z0-9.\-])(?:[A-Za-z0-9\-]+\.)+[A-Za-z]{2,}/[\x21-\x7e]*"
    )
    _REPEATED_TOKEN_RE = re.compile(r"(?<![A-Za-z0-9])URL(?:\s+URL)+(?![A-Za-z0-9])")

    def apply(self, text: str) -> str:
        """Replace scheme, `www.` and bare `host.tld/path` forms, then merge repeats."""

        replaced = self._URL_RE.sub("URL", text)
        return self._REPEATED_TOKEN_RE.sub("URL", replaced)


class ReplaceMentions:
    """Replace user, channel, and role references with readable placeholders."""

    _ROLE_RE = re.compile(r"<@&\d+>")
    _USER_RE = re.compile(r"<@!?\d+>")
    _CHANNEL_RE = re.compile(r"<#\d+>")

    def apply(self, text: str) -> str:
        """Apply mention placeholder substitutions."""

        text = self._ROLE_RE.sub("role", text)
        text = self._USER_RE.sub("mention", text)
        return self._CHANNEL_RE.sub("channel", text)


class ReplaceCustomEmoji:
    """Replace static and animated custom emoji tokens with `emoji`."""

    _EMOJI_RE = re.compile(r"<a?:\w+:\d+>")

    def apply(self, text: str) -> str:
        """Apply custom-emoji substitution."""

        return self._EMOJI_RE.sub("emoji", text)


class NewlinesToFullStop:
    """Turn each run of line breaks into one ideographic full stop."""

    _NEWLINES_RE = re.compile(r"(?:\r\n|\r|\n)+")

    def apply(self, text: str) -> str:
        """Apply newline substitution."""

        return self._NEWLINES_RE.sub(IDEOGRAPHIC_FULL_STOP, text)


class CollapseWhitespace:
    """Collapse whitespace runs to single spaces and trim."""

    def apply(self, text: str) -> str:
        """Apply whitespace collapsing."""

        return re.sub(r"\s+", " ", text).strip()


class SpeechTextCleaner:
    """Apply a sequence of deterministic rewriting rules."""

    def __init__(self, rules: list[CleanerRule] | None = None) -> None:
        """Initialize with custom rules or the default rule sequence."""

        self.rules = rules or [
            ReplaceUrls(),
            ReplaceMentions(),
            ReplaceCustomEmoji(),
            NewlinesToFullStop(),
            CollapseWhitespace(),
        ]

    def clean(self, text: str) -> str:
        """Apply all configured rules in order."""

        current = text
        for rule in self.rules:
            current = rule.apply(current)
        return current
