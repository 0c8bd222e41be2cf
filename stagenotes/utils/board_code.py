"""
Board codes — the short identifier attendees type or read aloud to join.

Codes are six characters from A–Z and 2–9 with the look-alike symbols
0, 1, O and I left out.
"""

import re
import secrets

CODE_LENGTH = 6
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"

_CODE_RE = re.compile(rf"[{CODE_ALPHABET}]{{{CODE_LENGTH}}}")


def generate_board_code() -> str:
    """Return a random code. Uniqueness is enforced by the boards table."""
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def is_valid_board_code(code: str) -> bool:
    """Exact, case-sensitive check: uppercase only, no whitespace tolerated."""
    return bool(_CODE_RE.fullmatch(code or ""))


def normalize_board_code(code: str) -> str:
    """Tidy user input (`` abc234 `` → ``ABC234``) before validating it."""
    return (code or "").strip().upper()
