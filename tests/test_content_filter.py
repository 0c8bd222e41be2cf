"""Tests for the basic content filter."""

import pytest

from stagenotes.utils.content_filter import contains_profanity


@pytest.mark.parametrize("text", [
    "This is spam content",
    "SPAM message",
    "test message",
    "lorem ipsum text",
])
def test_detects_blocked_terms(text):
    assert contains_profanity(text) is True


@pytest.mark.parametrize("text", [
    "This is a normal message",
    "Hello world",
    "Product launch Q&A",
    "",
])
def test_passes_clean_text(text):
    assert contains_profanity(text) is False


def test_case_insensitive():
    assert contains_profanity("SPAM") == contains_profanity("spam") == contains_profanity("SpAm") is True


def test_matches_inside_words():
    """Substring matching is intentionally crude: 'contest' contains 'test'."""
    assert contains_profanity("Join the contest") is True
