"""
Song matching against the catalog.

Candidates are found by exact normalized identity, then narrowed by
duration when the incoming track has one.
"""

from typing import Optional

from loguru import logger

from .models import Song
from .normalize import normalize
from .store import SongStore

DURATION_TOLERANCE_MS = 2000
TIGHT_DURATION_TOLERANCE_MS = 1000


def find_match(
    store: SongStore, artist: str, title: str, duration: Optional[int] = None
) -> Optional[Song]:
    """Find the catalogued song an incoming track refers to.

    Args:
        store: Catalog store to query
        artist: Artist name as imported
        title: Song title as imported
        duration: Duration in milliseconds (None or <= 0 means unknown)

    Returns:
        Matching song or None if not found
    """
    key = normalize(artist, title)
    if not key:
        return None

    has_duration = duration is not None and duration > 0
    duration_range = None
    if has_duration:
        duration_range = (
            duration - DURATION_TOLERANCE_MS,
            duration + DURATION_TOLERANCE_MS,
        )

    candidates = store.query_by_normalized_identity(key, duration_range)
    if not candidates:
        return None

    if len(candidates) > 1:
        logger.debug(f"{len(candidates)} songs share identity '{key}'")

    if has_duration:
        # The store already applied the wide band; prefer a tight match
        for song in candidates:
            if (
                song.duration is not None
                and abs(song.duration - duration) <= TIGHT_DURATION_TOLERANCE_MS
            ):
                return song

    return candidates[0]
