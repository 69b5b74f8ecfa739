"""
Import command handlers for Crate Caddy.

Handles: import apple-music, import rekordbox, import djay-pro, import local
"""

from pathlib import Path
from typing import Callable, Dict, Optional

from loguru import logger

from crate_caddy.core.config import Config
from crate_caddy.core.console import print_table, safe_print
from crate_caddy.core.database import SQLiteSongStore
from crate_caddy.domain.catalog import UpsertService
from crate_caddy.domain.catalog.exceptions import (
    ImportFileError,
    StoreUnavailableError,
)
from crate_caddy.domain.importers import (
    ImportStats,
    ParsedLibrary,
    parse_apple_music_library,
    parse_djay_pro_library,
    parse_local_library,
    parse_rekordbox_library,
    run_import,
)


def _resolve_path(given: Optional[str], configured: Optional[str], label: str) -> Optional[Path]:
    path = given or configured
    if not path:
        safe_print(
            f"No {label} export given and none configured in [imports]", style="red"
        )
        return None
    return Path(path).expanduser()


def print_import_summary(stats: ImportStats) -> None:
    rows = [
        ("Imported", stats.created),
        ("Updated", stats.updated),
        ("Skipped", stats.skipped),
        ("Filtered", stats.filtered),
        ("Failed", stats.failed),
        ("Total in file", stats.total),
    ]
    print_table("Import complete", ["Result", "Tracks"], rows)


def _run(store: SQLiteSongStore, label: str, parse: Callable[[], ParsedLibrary]) -> int:
    try:
        library = parse()
    except ImportFileError as e:
        logger.error(str(e))
        safe_print(f"❌ {e}", style="red")
        return 1

    safe_print(f"Found {len(library.tracks)} {label} tracks to import", style="cyan")

    try:
        stats = run_import(UpsertService(store), library)
    except StoreUnavailableError as e:
        logger.error(f"Import aborted: {e}")
        safe_print(f"❌ Import aborted: {e}", style="red")
        return 1

    print_import_summary(stats)
    return 0


def import_apple_music(store: SQLiteSongStore, config: Config, path: Optional[str]) -> int:
    xml_path = _resolve_path(path, config.imports.apple_music_path, "Apple Music")
    if xml_path is None:
        return 1
    safe_print(f"Importing songs from: {xml_path}")
    return _run(
        store,
        "Apple Music",
        lambda: parse_apple_music_library(xml_path, config.imports.apple_music_grouping),
    )


def import_rekordbox(store: SQLiteSongStore, config: Config, path: Optional[str]) -> int:
    xml_path = _resolve_path(path, config.imports.rekordbox_path, "Rekordbox")
    if xml_path is None:
        return 1
    safe_print(f"Importing songs from: {xml_path}")
    return _run(store, "Rekordbox", lambda: parse_rekordbox_library(xml_path))


def import_djay_pro(store: SQLiteSongStore, config: Config, path: Optional[str]) -> int:
    csv_path = _resolve_path(path, config.imports.djay_pro_path, "dJay Pro")
    if csv_path is None:
        return 1
    safe_print(f"Importing songs from: {csv_path}")
    return _run(store, "dJay Pro", lambda: parse_djay_pro_library(csv_path))


def import_local(store: SQLiteSongStore, config: Config, path: Optional[str]) -> int:
    folders = [Path(path).expanduser()] if path else [
        Path(p) for p in config.imports.local_paths
    ]
    safe_print(f"Scanning: {', '.join(str(f) for f in folders)}")
    return _run(
        store,
        "local",
        lambda: parse_local_library(
            folders, config.imports.supported_formats, config.imports.scan_recursive
        ),
    )


IMPORTERS: Dict[str, Callable[[SQLiteSongStore, Config, Optional[str]], int]] = {
    "apple-music": import_apple_music,
    "rekordbox": import_rekordbox,
    "djay-pro": import_djay_pro,
    "local": import_local,
}
