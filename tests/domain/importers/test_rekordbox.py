"""Tests for the Rekordbox XML importer."""

import pytest

from crate_caddy.domain.catalog import ImportFileError, SourceType
from crate_caddy.domain.importers import run_import
from crate_caddy.domain.importers.rekordbox import (
    convert_rating,
    convert_total_time,
    parse_rekordbox_library,
)

REKORDBOX_XML = """<?xml version="1.0" encoding="UTF-8"?>
<DJ_PLAYLISTS Version="1.0.0">
  <PRODUCT Name="rekordbox" Version="6.7.4" Company="AlphaTheta"/>
  <COLLECTION Entries="4">
    <TRACK TrackID="11" Name="One More Time" Artist="Daft Punk" Album="Discovery"
           Genre="House, French House" Grouping="" Kind="MP3 File" Size="12800000"
           TotalTime="320" Year="2000" AverageBpm="122.70" BitRate="320"
           SampleRate="44100" PlayCount="5" Rating="204" Tonality="8A"
           Label="Virgin" Location="file://localhost/Users/dj/Music/One%20More%20Time.mp3"/>
    <TRACK TrackID="12" Name="" Artist="Nobody"/>
    <TRACK TrackID="13" Name="Intro" Artist="Various" TotalTime="0"/>
    <TRACK TrackID="14" Name="Untagged" Artist="" TotalTime="300"/>
  </COLLECTION>
  <PLAYLISTS/>
</DJ_PLAYLISTS>
"""


@pytest.fixture
def rekordbox_xml(tmp_path):
    path = tmp_path / "rekordbox.xml"
    path.write_text(REKORDBOX_XML, encoding="utf-8")
    return path


class TestParseRekordboxLibrary:
    def test_counts(self, rekordbox_xml):
        library = parse_rekordbox_library(rekordbox_xml)
        assert len(library.tracks) == 2
        assert library.skipped == 2

    def test_track_fields(self, rekordbox_xml):
        track = parse_rekordbox_library(rekordbox_xml).tracks[0]
        assert track.artist == "Daft Punk"
        assert track.title == "One More Time"
        assert track.duration == 320000
        assert track.fields.key == "8A"
        assert track.fields.bpm == 122.7
        assert track.fields.genres == ["House", "French House"]
        assert track.fields.grouping == []
        assert track.fields.rating == 4.0

    def test_source(self, rekordbox_xml):
        source = parse_rekordbox_library(rekordbox_xml).tracks[0].source
        assert source.source_type == SourceType.REKORDBOX
        assert source.file_path == "/Users/dj/Music/One More Time.mp3"
        assert source.bit_rate == 320
        assert source.metadata["id"] == "11"
        assert source.metadata["label"] == "Virgin"

    def test_zero_total_time_is_unknown(self, rekordbox_xml):
        track = parse_rekordbox_library(rekordbox_xml).tracks[1]
        assert track.duration is None
        assert track.title == "Intro"

    def test_malformed_xml(self, tmp_path):
        path = tmp_path / "rekordbox.xml"
        path.write_text("<DJ_PLAYLISTS><COLLECTION>")
        with pytest.raises(ImportFileError, match="malformed"):
            parse_rekordbox_library(path)

    def test_missing_collection(self, tmp_path):
        path = tmp_path / "rekordbox.xml"
        path.write_text("<DJ_PLAYLISTS/>")
        with pytest.raises(ImportFileError, match="COLLECTION"):
            parse_rekordbox_library(path)


def test_conversions():
    assert convert_rating("255") == 5.0
    assert convert_rating("0") is None
    assert convert_total_time("371") == 371000
    assert convert_total_time("") is None


class TestRekordboxReimport:
    """Importing the same export again must not grow the catalog."""

    def test_reimport_keeps_song_count(self, rekordbox_xml, service, store):
        first = run_import(service, parse_rekordbox_library(rekordbox_xml))
        assert first.created == 2
        assert store.count_songs() == 2

        for _ in range(2):
            stats = run_import(service, parse_rekordbox_library(rekordbox_xml))
            assert stats.created == 0
            assert stats.updated == 2
            assert stats.skipped == 2
            assert store.count_songs() == 2

    def test_reimport_replaces_sources(self, rekordbox_xml, service, store):
        run_import(service, parse_rekordbox_library(rekordbox_xml))
        run_import(service, parse_rekordbox_library(rekordbox_xml))
        assert all(len(song.sources) == 1 for song in store.get_all_songs())
