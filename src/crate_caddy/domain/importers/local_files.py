"""
Local audio file importer.

Scans folders for audio files and reads their tags with Mutagen. Files
Mutagen cannot read still import, with artist and title taken from an
"Artist - Title" filename.
"""

import os
from pathlib import Path
from typing import Any, Iterable, List, Optional

from loguru import logger
from mutagen import File as MutagenFile
from mutagen import MutagenError

from crate_caddy.domain.catalog.models import (
    IncomingTrack,
    SongFields,
    Source,
    SourceType,
)

from .base import ParsedLibrary, parse_float, parse_int, split_tags

TITLE_TAGS = ["TIT2", "\xa9nam", "TITLE", "title"]
ARTIST_TAGS = ["TPE1", "\xa9ART", "ARTIST", "artist"]
ALBUM_TAGS = ["TALB", "\xa9alb", "ALBUM", "album"]
GENRE_TAGS = ["TCON", "\xa9gen", "GENRE", "genre"]
GROUPING_TAGS = ["TIT1", "\xa9grp", "GROUPING", "grouping"]
KEY_TAGS = ["TKEY", "KEY", "INITIAL_KEY", "initialkey", "key"]
BPM_TAGS = ["TBPM", "tmpo", "BPM", "bpm"]
YEAR_TAGS = ["TDRC", "\xa9day", "DATE", "YEAR", "date", "year"]


def get_tag_value(audio_file: Any, tag_names: List[str]) -> Optional[str]:
    """Get tag value, trying multiple possible tag names."""
    for tag_name in tag_names:
        try:
            value = audio_file.get(tag_name)
        except (KeyError, ValueError):
            # Vorbis comments raise ValueError for unknown keys
            continue
        if value:
            if isinstance(value, list):
                value = value[0]
            text = str(value).strip()
            if text:
                return text
    return None


def split_filename(path: Path) -> tuple[str, str]:
    """Split an "Artist - Title" file stem; artist is "" if there is no separator."""
    stem = path.stem
    if " - " in stem:
        artist, title = stem.split(" - ", 1)
        return artist.strip(), title.strip()
    return "", stem.strip()


def _parse_year(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    # Dates come as "2019", "2019-04-12" or "2019-04-12T00:00:00"
    return parse_int(value.split("-")[0])


def read_local_track(path: Path) -> IncomingTrack:
    """Read one audio file into an IncomingTrack."""
    fallback_artist, fallback_title = split_filename(path)
    source = Source(
        source_type=SourceType.LOCAL_FILE,
        file_path=str(path),
        file_size=os.path.getsize(path),
        file_type=path.suffix.lower().lstrip(".") or None,
    )

    try:
        audio_file = MutagenFile(str(path))
    except (MutagenError, OSError) as e:
        logger.warning(f"Could not read tags from {path}: {e}")
        audio_file = None

    if audio_file is None:
        return IncomingTrack(
            artist=fallback_artist, title=fallback_title, source=source
        )

    duration = None
    info = getattr(audio_file, "info", None)
    if info is not None:
        length = getattr(info, "length", None)
        if length:
            duration = int(length * 1000)
        bitrate = getattr(info, "bitrate", None)
        if bitrate:
            source.bit_rate = int(bitrate) // 1000  # kbps, like the library exports

    return IncomingTrack(
        artist=get_tag_value(audio_file, ARTIST_TAGS) or fallback_artist,
        title=get_tag_value(audio_file, TITLE_TAGS) or fallback_title,
        duration=duration,
        source=source,
        fields=SongFields(
            album=get_tag_value(audio_file, ALBUM_TAGS),
            genres=split_tags(get_tag_value(audio_file, GENRE_TAGS)),
            grouping=split_tags(get_tag_value(audio_file, GROUPING_TAGS)),
            bpm=parse_float(get_tag_value(audio_file, BPM_TAGS)),
            year=_parse_year(get_tag_value(audio_file, YEAR_TAGS)),
            key=get_tag_value(audio_file, KEY_TAGS),
            duration=duration,
        ),
    )


def find_audio_files(
    directory: Path, supported_formats: Iterable[str], recursive: bool = True
) -> List[Path]:
    """List audio files under directory, sorted for a stable import order."""
    extensions = {ext.lower() for ext in supported_formats}
    candidates = directory.rglob("*") if recursive else directory.glob("*")
    return sorted(
        path
        for path in candidates
        if path.is_file() and path.suffix.lower() in extensions
    )


def parse_local_library(
    directories: Iterable[Path],
    supported_formats: Iterable[str],
    recursive: bool = True,
) -> ParsedLibrary:
    """Scan folders and read every supported audio file.

    Missing folders are logged and skipped; unreadable files and files with
    no artist (tag or "Artist - Title" filename) count as skipped.
    """
    formats = list(supported_formats)
    library = ParsedLibrary()

    for directory in directories:
        directory = Path(directory).expanduser()
        if not directory.is_dir():
            logger.warning(f"Library folder not found: {directory}")
            continue

        files = find_audio_files(directory, formats, recursive)
        logger.info(f"Found {len(files)} audio files in {directory}")

        for path in files:
            try:
                track = read_local_track(path)
            except OSError as e:
                logger.warning(f"Skipping {path}: {e}")
                library.skipped += 1
                continue

            if not track.title or not track.artist:
                library.skipped += 1
                continue
            library.tracks.append(track)

    return library
