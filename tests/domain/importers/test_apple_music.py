"""Tests for the Apple Music Library.xml importer."""

import plistlib
from datetime import datetime

import pytest

from crate_caddy.domain.catalog import ImportFileError, SourceType
from crate_caddy.domain.importers import run_import
from crate_caddy.domain.importers.apple_music import (
    convert_rating,
    parse_apple_music_library,
)


def _write_library(path, tracks):
    with open(path, "wb") as f:
        plistlib.dump({"Major Version": 1, "Tracks": tracks}, f)
    return path


@pytest.fixture
def library_xml(tmp_path):
    tracks = {
        "101": {
            "Track ID": 101,
            "Name": "We Run",
            "Artist": "Bailey Ibbs",
            "Album": "We Run EP",
            "Genre": "Drum & Bass, Jungle",
            "Grouping": "DJing, Peak",
            "Total Time": 371000,
            "BPM": 174,
            "Year": 2021,
            "Rating": 80,
            "Size": 9000000,
            "Bit Rate": 320,
            "Kind": "MPEG audio file",
            "Persistent ID": "ABCDEF0123456789",
            "Track Type": "File",
            "Location": "file:///Users/dj/Music/We%20Run.mp3",
            "Date Added": datetime(2023, 5, 1, 12, 0, 0),
        },
        "102": {
            "Track ID": 102,
            "Name": "Podcast Episode",
            "Artist": "Someone",
            "Grouping": "Listening",
        },
        "103": {
            "Track ID": 103,
            "Name": "",
            "Artist": "Nobody",
            "Grouping": "DJing",
        },
        "104": {
            "Track ID": 104,
            "Name": "Stream Only",
            "Artist": "Cloud",
            "Grouping": "DJing",
            "Track Type": "Remote",
        },
        "105": {
            "Track ID": 105,
            "Name": "No Artist",
            "Grouping": "DJing",
        },
    }
    return _write_library(tmp_path / "Library.xml", tracks)


class TestParseAppleMusicLibrary:
    def test_counts(self, library_xml):
        library = parse_apple_music_library(library_xml)
        assert len(library.tracks) == 2
        assert library.filtered == 1
        assert library.skipped == 2
        assert library.total == 5

    def test_track_fields(self, library_xml):
        track = parse_apple_music_library(library_xml).tracks[0]
        assert track.artist == "Bailey Ibbs"
        assert track.title == "We Run"
        assert track.duration == 371000
        assert track.fields.genres == ["Drum & Bass", "Jungle"]
        assert track.fields.grouping == ["DJing", "Peak"]
        assert track.fields.bpm == 174.0
        assert track.fields.rating == 4.0
        assert track.fields.year == 2021

    def test_source(self, library_xml):
        source = parse_apple_music_library(library_xml).tracks[0].source
        assert source.source_type == SourceType.APPLE_MUSIC
        assert source.file_path == "/Users/dj/Music/We Run.mp3"
        assert source.metadata["id"] == "ABCDEF0123456789"
        assert source.metadata["date_added"] == "2023-05-01T12:00:00"
        assert source.is_streaming is False

    def test_remote_track_is_streaming(self, library_xml):
        stream = parse_apple_music_library(library_xml).tracks[1]
        assert stream.source.is_streaming is True
        assert stream.source.metadata["id"] == "104"

    def test_no_grouping_filter(self, library_xml):
        library = parse_apple_music_library(library_xml, required_grouping="")
        assert library.filtered == 0
        assert len(library.tracks) == 3
        assert library.skipped == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImportFileError):
            parse_apple_music_library(tmp_path / "missing.xml")

    def test_not_a_plist(self, tmp_path):
        path = tmp_path / "Library.xml"
        path.write_text("this is not xml")
        with pytest.raises(ImportFileError):
            parse_apple_music_library(path)

    def test_no_tracks_dict(self, tmp_path):
        path = tmp_path / "Library.xml"
        with open(path, "wb") as f:
            plistlib.dump({"Major Version": 1}, f)
        with pytest.raises(ImportFileError, match="Tracks"):
            parse_apple_music_library(path)


def test_convert_rating():
    assert convert_rating(100) == 5.0
    assert convert_rating(0) is None
    assert convert_rating(None) is None


def test_reimport_does_not_duplicate(library_xml, service, store):
    run_import(service, parse_apple_music_library(library_xml))
    assert store.count_songs() == 2

    stats = run_import(service, parse_apple_music_library(library_xml))
    assert stats.created == 0
    assert stats.updated == 2
    assert store.count_songs() == 2
