"""
Text normalization for song identity matching.

The normalized identity is stored on every Song and computed live for each
incoming track, so both must come from this one module.
"""

import re
import unicodedata
from typing import Any

ORIGINAL_MIX_RE = re.compile(r"original mix", re.IGNORECASE)
WHITESPACE_RE = re.compile(r"\s+")

# Letters, combining marks and numbers. Marks carry the vowel signs of
# Devanagari, Thai, Bengali etc., which have no precomposed NFC forms.
KEPT_CATEGORIES = ("L", "M", "N")


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _keep_char(ch: str) -> bool:
    return ch.isspace() or unicodedata.category(ch)[0] in KEPT_CATEGORIES


def normalize_part(value: Any) -> str:
    """Lowercase, drop "original mix" and punctuation, collapse whitespace."""
    # NFC so decomposed accents stay attached to their letters
    s = unicodedata.normalize("NFC", _as_text(value)).lower()
    s = ORIGINAL_MIX_RE.sub("", s)
    s = "".join(ch for ch in s if _keep_char(ch))
    s = WHITESPACE_RE.sub(" ", s)
    return s.strip()


def normalize(artist: Any, title: Any) -> str:
    """Reduce artist and title to the canonical comparison key.

    Returns an empty string when either part is empty; callers treat an
    empty key as unmatchable.

    Examples:
        >>> normalize("Daft Punk", "One More Time (Original Mix)")
        'daft punk one more time'
        >>> normalize("A&B", "Song!!")
        'ab song'
        >>> normalize("Björk", "Jóga")
        'björk jóga'
    """
    artist = _as_text(artist)
    title = _as_text(title)
    if not artist.strip() or not title.strip():
        return ""
    return normalize_part(f"{artist} {title}")
