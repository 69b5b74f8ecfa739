"""
dJay Pro library importer.

dJay Pro exports a CSV with a header row and the columns
Title, Artist, Album, Time, BPM, Key, URL.
"""

import csv
from pathlib import Path
from typing import List, Optional

from loguru import logger

from crate_caddy.domain.catalog.exceptions import ImportFileError
from crate_caddy.domain.catalog.models import (
    IncomingTrack,
    SongFields,
    Source,
    SourceType,
)

from .base import ParsedLibrary, file_type_from_path, file_url_to_path, parse_float

EXPECTED_COLUMNS = 7


def parse_time_to_ms(time_str: Optional[str]) -> Optional[int]:
    """Parse "M:SS" (or "H:MM:SS") to milliseconds.

    Examples:
        >>> parse_time_to_ms("6:11")
        371000
        >>> parse_time_to_ms("")
    """
    if not time_str or not time_str.strip():
        return None

    parts = time_str.strip().split(":")
    if len(parts) not in (2, 3):
        return None

    try:
        numbers = [int(part) for part in parts]
    except ValueError:
        return None

    seconds = 0
    for number in numbers:
        seconds = seconds * 60 + number
    return seconds * 1000 if seconds > 0 else None


def track_from_row(row: List[str]) -> Optional[IncomingTrack]:
    """Build an IncomingTrack from one CSV row, or None if the row is unusable."""
    if len(row) < EXPECTED_COLUMNS:
        return None

    title, artist, album, time_str, bpm_str, key, url = (
        field.strip() for field in row[:EXPECTED_COLUMNS]
    )
    if not title or not artist:
        return None

    duration = parse_time_to_ms(time_str)
    source = Source(
        source_type=SourceType.DJ_PRO,
        file_path=file_url_to_path(url),
        file_type=file_type_from_path(url),
        metadata={"url": url},
    )

    return IncomingTrack(
        artist=artist,
        title=title,
        duration=duration,
        source=source,
        fields=SongFields(
            album=album or None,
            genres=[],
            grouping=[],
            bpm=parse_float(bpm_str),
            key=key or None,
            duration=duration,
        ),
    )


def parse_djay_pro_library(csv_path: Path) -> ParsedLibrary:
    """Parse a dJay Pro CSV export.

    Rows with missing columns, title or artist are counted as skipped.

    Raises:
        ImportFileError: File missing or without a data row
    """
    try:
        with open(csv_path, newline="", encoding="utf-8-sig") as f:
            rows = [row for row in csv.reader(f) if any(cell.strip() for cell in row)]
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise ImportFileError(str(csv_path), str(e)) from e

    if len(rows) < 2:
        raise ImportFileError(
            str(csv_path), "CSV must have a header and at least one data row"
        )

    data_rows = rows[1:]
    logger.info(f"Found {len(data_rows)} tracks in {csv_path}")

    library = ParsedLibrary()
    for row in data_rows:
        track = track_from_row(row)
        if track is None:
            library.skipped += 1
            continue
        library.tracks.append(track)

    return library
