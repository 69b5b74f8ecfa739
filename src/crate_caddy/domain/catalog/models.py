"""
Song catalog domain models.

A Song is the canonical entity for a piece of music. Every concrete file or
stream of that song (an Apple Music entry, a Rekordbox track, a dJay Pro row,
a file on disk) is kept as an embedded Source.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class SourceType(str, Enum):
    """External library a Source was imported from."""

    APPLE_MUSIC = "apple-music"
    REKORDBOX = "rekordbox"
    DJ_PRO = "dj-pro"
    LOCAL_FILE = "local-file"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class Source:
    """One file or stream instance of a Song, owned by that Song.

    metadata holds source-specific fields. When it carries an "id" (Apple
    Music persistent id, Rekordbox TrackID) that id identifies the Source;
    otherwise the file path does.
    """

    source_type: SourceType
    file_path: Optional[str] = None
    file_size: Optional[int] = None
    bit_rate: Optional[int] = None
    file_type: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    last_import: datetime = field(default_factory=utc_now)

    @property
    def identity_key(self) -> Optional[str]:
        source_id = self.metadata.get("id")
        if source_id not in (None, ""):
            return str(source_id)
        return self.file_path or None

    @property
    def is_streaming(self) -> bool:
        """True for streaming-only sources (no local file behind them)."""
        return not self.file_path or bool(self.metadata.get("is_streaming"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_type": self.source_type.value,
            "file_path": self.file_path,
            "file_size": self.file_size,
            "bit_rate": self.bit_rate,
            "file_type": self.file_type,
            "metadata": dict(self.metadata),
            "last_import": _format_timestamp(self.last_import),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Source":
        return cls(
            source_type=SourceType(data["source_type"]),
            file_path=data.get("file_path"),
            file_size=data.get("file_size"),
            bit_rate=data.get("bit_rate"),
            file_type=data.get("file_type"),
            metadata=dict(data.get("metadata") or {}),
            last_import=_parse_timestamp(data.get("last_import")) or utc_now(),
        )


@dataclass
class SongFields:
    """Partial song-level fields supplied by an importer.

    None means "not provided"; the merge never treats it as a value.
    """

    album: Optional[str] = None
    genres: Optional[List[str]] = None
    grouping: Optional[List[str]] = None
    bpm: Optional[float] = None
    year: Optional[int] = None
    key: Optional[str] = None  # Musical key (e.g., "Am", "8A")
    rating: Optional[float] = None  # 0-5
    duration: Optional[int] = None  # milliseconds


@dataclass
class Song:
    """A catalogued song and every Source it has been imported from."""

    title: str
    artist: str = ""
    album: Optional[str] = None
    duration: Optional[int] = None  # milliseconds
    genres: List[str] = field(default_factory=list)
    grouping: List[str] = field(default_factory=list)
    bpm: Optional[float] = None
    year: Optional[int] = None
    key: Optional[str] = None
    rating: Optional[float] = None
    sources: List[Source] = field(default_factory=list)
    normalized_identity: str = ""
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "album": self.album,
            "duration": self.duration,
            "genres": list(self.genres),
            "grouping": list(self.grouping),
            "bpm": self.bpm,
            "year": self.year,
            "key": self.key,
            "rating": self.rating,
            "sources": [source.to_dict() for source in self.sources],
            "normalized_identity": self.normalized_identity,
            "created_at": _format_timestamp(self.created_at),
            "updated_at": _format_timestamp(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Song":
        return cls(
            id=data.get("id"),
            title=data.get("title") or "",
            artist=data.get("artist") or "",
            album=data.get("album"),
            duration=data.get("duration"),
            genres=list(data.get("genres") or []),
            grouping=list(data.get("grouping") or []),
            bpm=data.get("bpm"),
            year=data.get("year"),
            key=data.get("key"),
            rating=data.get("rating"),
            sources=[Source.from_dict(s) for s in data.get("sources") or []],
            normalized_identity=data.get("normalized_identity") or "",
            created_at=_parse_timestamp(data.get("created_at")),
            updated_at=_parse_timestamp(data.get("updated_at")),
        )


@dataclass
class IncomingTrack:
    """A track record produced by an importer, not yet matched or stored."""

    artist: str
    title: str
    source: Source
    duration: Optional[int] = None  # milliseconds; <= 0 means unknown
    fields: SongFields = field(default_factory=SongFields)
