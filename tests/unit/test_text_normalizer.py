"""Unit tests for chat text cleaning and suppression rules."""

from __future__ import annotations

import pytest

from ttsrelay.text import SpeechTextCleaner, TextNormalizer
from ttsrelay.text.cleaners import (
    CollapseWhitespace,
    NewlinesToFullStop,
    ReplaceCustomEmoji,
    ReplaceMentions,
    ReplaceUrls,
)


def test_normalizer_replaces_scheme_url_with_token() -> None:
    """Scheme-prefixed links should be spoken as the `URL` token."""

    result = TextNormalizer().normalize("check https://a.b/c out")

    assert result.suppressed is False
    assert result.text == "check URL out"


@pytest.mark.parametrize(
    ("raw", "reason"),
    [
        (";secret", "ignored_prefix"),
        ("a||b||c", "spoiler"),
        ("", "empty"),
        ("   \n\t ", "empty"),
    ],
)
def test_normalizer_suppresses_unspeakable_text(raw: str, reason: str) -> None:
    """Ignored-prefix, spoiler, and blank messages should be suppressed with a reason."""

    result = TextNormalizer().normalize(raw)

    assert result.suppressed is True
    assert result.reason == reason
    assert result.text == ""


def test_normalizer_applies_length_limit_after_trimming() -> None:
    """Exactly the limit passes, one more character is suppressed, padding is ignored."""

    normalizer = TextNormalizer()

    assert normalizer.normalize("a" * 200).text == "a" * 200
    assert normalizer.normalize("  " + "a" * 200 + "\n").text == "a" * 200
    too_long = normalizer.normalize("a" * 201)
    assert too_long.suppressed is True
    assert too_long.reason == "too_long"


def test_normalizer_checks_length_before_prefix() -> None:
    """An over-long ignored message reports the length reason first."""

    result = TextNormalizer(max_chars=5).normalize(";" + "a" * 10)

    assert result.reason == "too_long"


def test_normalizer_turns_newline_runs_into_single_full_stop() -> None:
    """Each run of line breaks should become one ideographic full stop."""

    normalizer = TextNormalizer()

    assert normalizer.normalize("line1\nline2").text == "line1。line2"
    assert normalizer.normalize("a\n\n\nb").text == "a。b"
    assert normalizer.normalize("a\r\nb").text == "a。b"


def test_normalizer_replaces_mentions_and_emoji() -> None:
    """Platform tokens should be replaced by fixed readable placeholders."""

    result = TextNormalizer().normalize(
        "hi <@123> and <@!456> in <#789> for <@&42> <:smile:111> <a:dance:222>"
    )

    assert result.text == "hi mention and mention in channel for role emoji emoji"


def test_url_rule_handles_www_and_bare_host_paths() -> None:
    """`www.` and `host.tld/path` forms should be recognized as links."""

    rule = ReplaceUrls()

    assert rule.apply("see www.example.com now") == "see URL now"
    assert rule.apply("see example.com/path?q=1 now") == "see URL now"
    assert rule.apply("plain text with a.dot") == "plain text with a.dot"


def test_url_rule_collapses_adjacent_tokens() -> None:
    """Neighbouring links should be spoken once."""

    rule = ReplaceUrls()

    assert rule.apply("https://a.b/c https://d.e/f www.g.h") == "URL"
    assert rule.apply("https://a.b/c and https://d.e/f") == "URL and URL"


def test_url_rule_keeps_japanese_text_around_links() -> None:
    """Links inside unspaced Japanese text should not swallow neighbouring words."""

    normalizer = TextNormalizer()

    assert normalizer.normalize("詳細はexample.com/docs").text == "詳細はURL"
    assert normalizer.normalize("詳細はexample.com/docsを見て").text == "詳細はURLを見て"
    assert normalizer.normalize("これhttps://a.b/cです").text == "これURLです"
    assert normalizer.normalize("ここwww.example.comだよ").text == "ここURLだよ"


def test_url_rule_collapses_adjacent_tokens_after_japanese_text() -> None:
    """Neighbouring links after Japanese text should still be spoken once."""

    normalizer = TextNormalizer()

    assert normalizer.normalize("見てhttps://a.b/c https://d.e/f").text == "見てURL"
    assert normalizer.normalize("見てhttps://a.b/c https://d.e/fね").text == "見てURLね"


def test_individual_rules_are_deterministic() -> None:
    """Each rule should transform only its own markup."""

    assert ReplaceMentions().apply("<@&1> <@2> <#3>") == "role mention channel"
    assert ReplaceCustomEmoji().apply("<:a_b:12>!") == "emoji!"
    assert NewlinesToFullStop().apply("x\r\ry") == "x。y"
    assert CollapseWhitespace().apply("  a \t  b  ") == "a b"


def test_cleaner_accepts_custom_rule_sequence() -> None:
    """A custom rule list should replace the default sequence."""

    cleaner = SpeechTextCleaner(rules=[CollapseWhitespace()])

    assert cleaner.clean("https://a.b/c   x") == "https://a.b/c x"
