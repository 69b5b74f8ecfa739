"""
Persistence boundary for the catalog core.

The matcher and upsert orchestrator only talk to a SongStore; the SQLite
implementation lives in crate_caddy.core.database.
"""

from typing import List, Optional, Protocol, Tuple

from .models import Song

DurationRange = Tuple[int, int]


class SongStore(Protocol):
    """Document-style song store used by the matcher and orchestrator."""

    def query_by_normalized_identity(
        self, key: str, duration_range: Optional[DurationRange] = None
    ) -> List[Song]:
        """Songs whose stored identity equals key, oldest first.

        With duration_range (inclusive), songs without a duration are excluded.
        """
        ...

    def update_song_by_id(self, song_id: int, song: Song) -> Song:
        """Replace the stored song and return it; SongNotFoundError if gone."""
        ...

    def insert_song(self, song: Song) -> Song:
        """Store a new song and return it with id and timestamps set."""
        ...
