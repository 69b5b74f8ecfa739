"""
Shared import plumbing: parsed-library container, value parsing helpers
and the runner that feeds incoming tracks through the upsert service.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Optional
from urllib.parse import unquote, urlparse

from loguru import logger

from crate_caddy.domain.catalog.exceptions import (
    CrateCaddyError,
    StoreUnavailableError,
)
from crate_caddy.domain.catalog.models import IncomingTrack
from crate_caddy.domain.catalog.upsert import UpsertService


@dataclass
class ParsedLibrary:
    """Tracks read from one export file, plus what the parser left out."""

    tracks: List[IncomingTrack] = field(default_factory=list)
    skipped: int = 0  # unusable rows (no title or artist, malformed)
    filtered: int = 0  # deliberately excluded rows (e.g. grouping filter)

    @property
    def total(self) -> int:
        return len(self.tracks) + self.skipped + self.filtered


@dataclass
class ImportStats:
    """Counters reported at the end of an import run."""

    created: int = 0
    updated: int = 0
    skipped: int = 0
    filtered: int = 0
    failed: int = 0
    total: int = 0

    @property
    def processed(self) -> int:
        return self.created + self.updated


def split_tags(value: Any) -> List[str]:
    """Split a comma-separated tag field, dropping blanks."""
    if not value or not isinstance(value, str):
        return []
    return [tag.strip() for tag in value.split(",") if tag.strip()]


def parse_int(value: Any) -> Optional[int]:
    """Parse a positive integer; zero, blanks and junk become None."""
    if value is None or value == "":
        return None
    try:
        number = int(float(value))
    except (ValueError, TypeError):
        return None
    return number if number > 0 else None


def parse_float(value: Any) -> Optional[float]:
    """Parse a positive float; zero, blanks and junk become None."""
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (ValueError, TypeError):
        return None
    return number if number > 0 else None


def clean_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def file_url_to_path(location: Optional[str]) -> Optional[str]:
    """Convert a file:// URL (as written by Apple Music and Rekordbox) to a path.

    Non-file URLs are returned unchanged.
    """
    if not location:
        return None
    parsed = urlparse(location)
    if parsed.scheme != "file":
        return location
    return unquote(parsed.path)


def file_type_from_path(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    suffix = Path(urlparse(path).path).suffix.lower()
    return suffix.lstrip(".") or None


ProgressCallback = Callable[[int, int, IncomingTrack], None]


def run_import(
    service: UpsertService,
    library: ParsedLibrary,
    progress_callback: Optional[ProgressCallback] = None,
) -> ImportStats:
    """Upsert every parsed track, counting outcomes.

    A track that fails is logged and counted; the run continues with the
    next one. Losing the store aborts the run.

    Args:
        service: Upsert service bound to the catalog store
        library: Parsed export file
        progress_callback: Optional callback(index, total, track)

    Returns:
        ImportStats for the run

    Raises:
        StoreUnavailableError: The catalog database went away mid-run
    """
    stats = ImportStats(
        skipped=library.skipped, filtered=library.filtered, total=library.total
    )
    track_count = len(library.tracks)

    for index, track in enumerate(library.tracks, 1):
        try:
            result = service.upsert(track)
        except StoreUnavailableError:
            raise
        except CrateCaddyError as e:
            stats.failed += 1
            logger.warning(f"Skipping {track.artist} - {track.title}: {e}")
            continue
        except Exception:
            stats.failed += 1
            logger.exception(f"Failed to import {track.artist} - {track.title}")
            continue

        if result.created:
            stats.created += 1
        else:
            stats.updated += 1

        if progress_callback:
            progress_callback(index, track_count, track)

    logger.info(
        f"Import finished: {stats.created} created, {stats.updated} updated, "
        f"{stats.skipped} skipped, {stats.filtered} filtered, {stats.failed} failed"
    )
    return stats
