"""Tests for the dJay Pro CSV importer."""

import pytest

from crate_caddy.domain.catalog import ImportFileError, SourceType
from crate_caddy.domain.importers.djay_pro import (
    parse_djay_pro_library,
    parse_time_to_ms,
    track_from_row,
)

HEADER = "Title,Artist,Album,Time,BPM,Key,URL\n"


def _write_csv(tmp_path, body):
    path = tmp_path / "djay.csv"
    path.write_text(HEADER + body, encoding="utf-8")
    return path


class TestParseTimeToMs:
    def test_minutes_seconds(self):
        assert parse_time_to_ms("6:11") == 371000

    def test_hours(self):
        assert parse_time_to_ms("1:02:03") == 3723000

    def test_invalid(self):
        assert parse_time_to_ms("abc") is None
        assert parse_time_to_ms("") is None
        assert parse_time_to_ms("0:00") is None


class TestTrackFromRow:
    def test_full_row(self):
        track = track_from_row(
            ["We Run", "Bailey Ibbs", "We Run EP", "6:11", "174", "Am",
             "file:///music/we-run.mp3"]
        )
        assert track.title == "We Run"
        assert track.duration == 371000
        assert track.fields.key == "Am"
        assert track.fields.bpm == 174.0
        assert track.source.source_type == SourceType.DJ_PRO
        assert track.source.file_path == "/music/we-run.mp3"
        assert track.source.metadata == {"url": "file:///music/we-run.mp3"}
        assert track.source.file_type == "mp3"

    def test_short_row(self):
        assert track_from_row(["Title", "Artist"]) is None

    def test_missing_artist(self):
        assert track_from_row(["Title", "", "", "3:00", "", "", ""]) is None


class TestParseDjayProLibrary:
    def test_parses_rows_and_skips_bad_ones(self, tmp_path):
        path = _write_csv(
            tmp_path,
            "We Run,Bailey Ibbs,,6:11,174,Am,file:///music/we-run.mp3\n"
            ",No Title,,3:00,,,\n"
            "\n"
            '"Song, With Comma",Artist,,4:00,,,\n',
        )
        library = parse_djay_pro_library(path)
        assert [t.title for t in library.tracks] == ["We Run", "Song, With Comma"]
        assert library.skipped == 1

    def test_header_only(self, tmp_path):
        path = _write_csv(tmp_path, "")
        with pytest.raises(ImportFileError):
            parse_djay_pro_library(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImportFileError):
            parse_djay_pro_library(tmp_path / "missing.csv")


def test_encoded_url_decoded_to_path():
    track = track_from_row(
        ["Title", "Artist", "", "3:00", "", "", "file:///Music/My%20Track.aiff"]
    )
    assert track.source.file_path == "/Music/My Track.aiff"
    assert track.source.file_type == "aiff"
