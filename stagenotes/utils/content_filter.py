"""
Basic content filter for submitted notes.

This is advisory, low-precision filtering and not a security control: a
blocked term matches anywhere in the text, so legitimate words that contain
one ("contest", "spammy") are rejected too.
"""

BLOCKED_TERMS = ("spam", "test", "lorem", "ipsum")


def contains_profanity(text: str) -> bool:
    lowered = text.lower()
    return any(term in lowered for term in BLOCKED_TERMS)
