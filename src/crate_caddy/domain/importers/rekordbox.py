"""
Rekordbox library importer.

Reads the XML written by File > Export Collection in xml format. Every
DJ_PLAYLISTS/COLLECTION/TRACK element is one track; playlists are ignored.
"""

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Mapping, Optional

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

TAG_COLLECTION = "COLLECTION"
TAG_TRACK = "TRACK"

# Rekordbox writes star ratings as 0, 51, 102, 153, 204, 255
RATING_PER_STAR = 51


def convert_rating(rating: Optional[str]) -> Optional[float]:
    value = parse_int(rating)
    if value is None:
        return None
    return round(value / RATING_PER_STAR, 2)


def convert_total_time(total_time: Optional[str]) -> Optional[int]:
    """TotalTime is whole seconds; the catalog stores milliseconds."""
    seconds = parse_float(total_time)
    if seconds is None:
        return None
    return int(seconds * 1000)


def track_from_attributes(attrs: Mapping[str, str]) -> IncomingTrack:
    """Build an IncomingTrack from the attributes of a TRACK element."""
    file_path = file_url_to_path(attrs.get("Location"))
    duration = convert_total_time(attrs.get("TotalTime"))

    source = Source(
        source_type=SourceType.REKORDBOX,
        file_path=file_path,
        file_size=parse_int(attrs.get("Size")),
        bit_rate=parse_int(attrs.get("BitRate")),
        file_type=clean_text(attrs.get("Kind")) or None,
        metadata={
            "id": clean_text(attrs.get("TrackID")) or None,
            "composer": clean_text(attrs.get("Composer")) or None,
            "label": clean_text(attrs.get("Label")) or None,
            "remixer": clean_text(attrs.get("Remixer")) or None,
            "play_count": parse_int(attrs.get("PlayCount")) or 0,
            "sample_rate": parse_int(attrs.get("SampleRate")),
            "date_added": clean_text(attrs.get("DateAdded")) or None,
        },
    )

    return IncomingTrack(
        artist=clean_text(attrs.get("Artist")),
        title=clean_text(attrs.get("Name")),
        duration=duration,
        source=source,
        fields=SongFields(
            album=clean_text(attrs.get("Album")) or None,
            genres=split_tags(attrs.get("Genre")),
            grouping=split_tags(attrs.get("Grouping")),
            bpm=parse_float(attrs.get("AverageBpm")),
            year=parse_int(attrs.get("Year")),
            key=clean_text(attrs.get("Tonality")) or None,
            rating=convert_rating(attrs.get("Rating")),
            duration=duration,
        ),
    )


def parse_rekordbox_library(xml_path: Path) -> ParsedLibrary:
    """Parse a rekordbox.xml collection export.

    Raises:
        ImportFileError: File missing, malformed XML, or no COLLECTION node
    """
    try:
        tree = ET.parse(xml_path)
    except OSError as e:
        raise ImportFileError(str(xml_path), str(e)) from e
    except ET.ParseError as e:
        raise ImportFileError(str(xml_path), f"malformed XML: {e}") from e

    collection = tree.getroot().find(TAG_COLLECTION)
    if collection is None:
        raise ImportFileError(str(xml_path), f"no {TAG_COLLECTION} node")

    track_nodes = collection.findall(TAG_TRACK)
    logger.info(f"Found {len(track_nodes)} tracks in {xml_path}")

    library = ParsedLibrary()
    for node in track_nodes:
        if not clean_text(node.get("Name")) or not clean_text(node.get("Artist")):
            library.skipped += 1
            continue
        library.tracks.append(track_from_attributes(node.attrib))

    return library
