"""
Apple Music library importer.

Reads the XML plist written by File > Library > Export Library. Only tracks
whose Grouping contains the configured tag (default "DJing") are imported.
"""

import plistlib
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional
from xml.parsers.expat import ExpatError

from loguru import logger

from crate_caddy.domain.catalog.exceptions import ImportFileError
from crate_caddy.domain.catalog.models import (
    IncomingTrack,
    SongFields,
    Source,
    SourceType,
)

from .base import (
    ParsedLibrary,
    clean_text,
    file_url_to_path,
    parse_float,
    parse_int,
    split_tags,
)

DEFAULT_GROUPING = "DJing"


def convert_rating(rating: Any) -> Optional[float]:
    """Apple Music stores ratings as 0-100 (20 per star); convert to 0-5."""
    value = parse_int(rating)
    if value is None:
        return None
    return value / 20


def _iso(value: Any) -> Optional[str]:
    return value.isoformat() if isinstance(value, datetime) else None


def track_from_entry(track_id: str, entry: Dict[str, Any]) -> IncomingTrack:
    """Build an IncomingTrack from one entry of the plist Tracks dict."""
    track_type = entry.get("Track Type")
    file_path = file_url_to_path(entry.get("Location"))
    persistent_id = clean_text(entry.get("Persistent ID"))

    source = Source(
        source_type=SourceType.APPLE_MUSIC,
        file_path=file_path,
        file_size=parse_int(entry.get("Size")),
        bit_rate=parse_int(entry.get("Bit Rate")),
        file_type=entry.get("Kind") or None,
        metadata={
            "id": persistent_id or str(track_id),
            "track_id": str(track_id),
            "track_type": track_type,
            "is_protected": entry.get("Protected") is True,
            "is_streaming": track_type == "Remote",
            "date_added": _iso(entry.get("Date Added")),
            "date_modified": _iso(entry.get("Date Modified")),
            "play_date": _iso(entry.get("Play Date UTC")),
        },
    )

    duration = parse_int(entry.get("Total Time"))
    return IncomingTrack(
        artist=clean_text(entry.get("Artist")),
        title=clean_text(entry.get("Name")),
        duration=duration,
        source=source,
        fields=SongFields(
            album=clean_text(entry.get("Album")) or None,
            genres=split_tags(entry.get("Genre")),
            grouping=split_tags(entry.get("Grouping")),
            bpm=parse_float(entry.get("BPM")),
            year=parse_int(entry.get("Year")),
            rating=convert_rating(entry.get("Rating")),
            duration=duration,
        ),
    )


def parse_apple_music_library(
    xml_path: Path, required_grouping: str = DEFAULT_GROUPING
) -> ParsedLibrary:
    """Parse an Apple Music Library.xml export.

    Args:
        xml_path: Path to Library.xml
        required_grouping: Grouping tag a track must contain ("" = no filter)

    Returns:
        ParsedLibrary of incoming tracks with skipped/filtered counts

    Raises:
        ImportFileError: File missing, not a plist, or has no Tracks dict
    """
    try:
        with open(xml_path, "rb") as f:
            parsed = plistlib.load(f)
    except OSError as e:
        raise ImportFileError(str(xml_path), str(e)) from e
    except (plistlib.InvalidFileException, ExpatError, ValueError) as e:
        raise ImportFileError(str(xml_path), f"not a valid plist: {e}") from e

    tracks = parsed.get("Tracks") if isinstance(parsed, dict) else None
    if not isinstance(tracks, dict):
        raise ImportFileError(str(xml_path), "no Tracks dict in plist")

    logger.info(f"Found {len(tracks)} tracks in {xml_path}")

    library = ParsedLibrary()
    for track_id, entry in tracks.items():
        if not isinstance(entry, dict):
            library.skipped += 1
            continue

        if required_grouping and required_grouping not in (entry.get("Grouping") or ""):
            library.filtered += 1
            continue

        # Artist-less tracks have no identity key and would duplicate on re-import
        if not clean_text(entry.get("Name")) or not clean_text(entry.get("Artist")):
            library.skipped += 1
            continue

        library.tracks.append(track_from_entry(track_id, entry))

    return library
