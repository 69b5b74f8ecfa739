"""Importers for music library exports.

Each parser turns one export into IncomingTracks; run_import feeds them
through the upsert service.
"""

from .apple_music import parse_apple_music_library
from .base import ImportStats, ParsedLibrary, run_import
from .djay_pro import parse_djay_pro_library
from .local_files import parse_local_library
from .rekordbox import parse_rekordbox_library

__all__ = [
    "ImportStats",
    "ParsedLibrary",
    "run_import",
    "parse_apple_music_library",
    "parse_djay_pro_library",
    "parse_local_library",
    "parse_rekordbox_library",
]
