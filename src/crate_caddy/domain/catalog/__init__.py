"""Catalog domain - song identity resolution and merging.

This domain handles:
- Song and Source models
- Artist/title normalization
- Matching incoming tracks to catalogued songs
- Merging imports into existing songs (upsert)
"""

from .exceptions import (
    CrateCaddyError,
    ImportFileError,
    InvalidInputError,
    SongNotFoundError,
    StoreUnavailableError,
)
from .matching import (
    DURATION_TOLERANCE_MS,
    TIGHT_DURATION_TOLERANCE_MS,
    find_match,
)
from .merge import merge_song, merge_sources, union_values
from .models import IncomingTrack, Song, SongFields, Source, SourceType
from .normalize import normalize, normalize_part
from .store import SongStore
from .upsert import UpsertResult, UpsertService, build_song, upsert_song

__all__ = [
    # Exceptions
    "CrateCaddyError",
    "ImportFileError",
    "InvalidInputError",
    "SongNotFoundError",
    "StoreUnavailableError",
    # Models
    "IncomingTrack",
    "Song",
    "SongFields",
    "Source",
    "SourceType",
    "SongStore",
    # Normalize / match / merge
    "normalize",
    "normalize_part",
    "find_match",
    "DURATION_TOLERANCE_MS",
    "TIGHT_DURATION_TOLERANCE_MS",
    "merge_song",
    "merge_sources",
    "union_values",
    # Upsert
    "UpsertResult",
    "UpsertService",
    "build_song",
    "upsert_song",
]
