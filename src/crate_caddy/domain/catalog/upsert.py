"""
Match-or-create entry point used by every importer.

Each call does one read (candidate lookup) and one write (update or
insert). Calls are not serialized against each other: two concurrent
upserts of the same song can both create it, so importers run one at a time.
"""

from dataclasses import dataclass, replace
from typing import Optional

from loguru import logger

from .exceptions import InvalidInputError
from .matching import find_match
from .merge import merge_song, union_values
from .models import IncomingTrack, Song, SongFields, Source
from .normalize import normalize, normalize_part
from .store import SongStore


@dataclass(frozen=True)
class UpsertResult:
    """Outcome of one upsert call."""

    song: Song
    created: bool


def _known_duration(duration: Optional[int]) -> Optional[int]:
    if duration is None or duration <= 0:
        return None
    return int(duration)


def _validate(artist: str, title: str) -> None:
    if not isinstance(title, str) or not title.strip():
        raise InvalidInputError("Track has no title")
    if not normalize_part(artist) and not normalize_part(title):
        raise InvalidInputError(
            f"Artist {artist!r} and title {title!r} normalize to nothing"
        )


def build_song(
    artist: str, title: str, duration: Optional[int], fields: SongFields, source: Source
) -> Song:
    """Construct a new, unsaved Song from an incoming track."""
    return Song(
        title=title,
        artist=artist,
        album=fields.album or None,
        duration=duration or _known_duration(fields.duration),
        genres=union_values([], fields.genres),
        grouping=union_values([], fields.grouping),
        bpm=fields.bpm,
        year=fields.year,
        key=fields.key or None,
        rating=fields.rating,
        sources=[source],
        normalized_identity=normalize(artist, title),
    )


def upsert_song(
    store: SongStore,
    artist: Optional[str],
    title: str,
    duration: Optional[int],
    fields: SongFields,
    source: Source,
) -> UpsertResult:
    """Merge a track into its matching song, or create a new song.

    Args:
        store: Catalog store
        artist: Artist name (may be empty)
        title: Song title (required)
        duration: Duration in milliseconds (None or <= 0 means unknown)
        fields: Partial song-level fields from the importer
        source: The one Source this track contributes

    Returns:
        UpsertResult with the stored song and whether it was created

    Raises:
        InvalidInputError: Missing title, or nothing left after normalization
        SongNotFoundError: The matched song was deleted before the update
        StoreUnavailableError: The store could not be reached
    """
    artist = artist or ""
    _validate(artist, title)
    duration = _known_duration(duration)

    existing = find_match(store, artist, title, duration)

    if existing is None:
        song = build_song(artist, title, duration, fields, source)
        stored = store.insert_song(song)
        logger.debug(
            f"Created song #{stored.id}: {artist} - {title} ({source.source_type.value})"
        )
        return UpsertResult(song=stored, created=True)

    if fields.duration is None and duration is not None:
        fields = replace(fields, duration=duration)

    merged = merge_song(existing, fields, source)
    # Derived field: always recomputed from the values being written
    merged.normalized_identity = normalize(merged.artist, merged.title)

    stored = store.update_song_by_id(existing.id, merged)
    logger.debug(
        f"Merged {source.source_type.value} source into song #{stored.id}: "
        f"{stored.artist} - {stored.title} ({len(stored.sources)} sources)"
    )
    return UpsertResult(song=stored, created=False)


class UpsertService:
    """Binds a store so importers can hand over IncomingTracks directly."""

    def __init__(self, store: SongStore) -> None:
        self.store = store

    def find_match(
        self, artist: str, title: str, duration: Optional[int] = None
    ) -> Optional[Song]:
        return find_match(self.store, artist, title, duration)

    def upsert(self, track: IncomingTrack) -> UpsertResult:
        return upsert_song(
            self.store,
            track.artist,
            track.title,
            track.duration,
            track.fields,
            track.source,
        )
