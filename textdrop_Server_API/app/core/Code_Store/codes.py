"""
Share code helpers for the ephemeral code store.

Codes are short, fixed-length strings drawn from an uppercase alphanumeric
alphabet so that they can be read aloud and typed by hand.
"""

import string
from typing import Any


DEFAULT_ALPHABET = string.ascii_uppercase + string.digits
DEFAULT_CODE_LENGTH = 4
DEFAULT_TTL_SECONDS = 30 * 60
DEFAULT_MAX_GENERATION_ATTEMPTS = 100
DEFAULT_MAX_TEXT_LENGTH = 5000  # applied by the HTTP layer; the store has no cap by default


def random_code(rng: Any, alphabet: str = DEFAULT_ALPHABET, length: int = DEFAULT_CODE_LENGTH) -> str:
    """
    Draw a uniformly random code.

    Args:
        rng: Random source exposing ``choice(seq)`` (e.g. ``secrets.SystemRandom()``)
        alphabet: Characters to draw from
        length: Number of characters

    Returns:
        The generated code
    """
    return "".join(rng.choice(alphabet) for _ in range(length))


def timestamp_fallback_code(now: float, length: int = DEFAULT_CODE_LENGTH) -> str:
    """Last ``length`` digits of the millisecond timestamp, zero padded."""
    millis = str(int(round(now * 1000)))
    return millis[-length:].rjust(length, "0")


def normalize_code(raw: str, alphabet: str = DEFAULT_ALPHABET, length: int = DEFAULT_CODE_LENGTH) -> str:
    """
    Normalize user-typed input to the code alphabet.

    Uppercases, drops any character outside the alphabet and truncates to the
    code length, the same clean-up the share form applies while typing.
    """
    if not raw:
        return ""
    allowed = set(alphabet)
    cleaned = [ch for ch in raw.upper() if ch in allowed]
    return "".join(cleaned[:length])


def is_well_formed_code(code: str, alphabet: str = DEFAULT_ALPHABET, length: int = DEFAULT_CODE_LENGTH) -> bool:
    """Check that a code has the right length and only alphabet characters."""
    if not isinstance(code, str) or len(code) != length:
        return False
    allowed = set(alphabet)
    return all(ch in allowed for ch in code)
