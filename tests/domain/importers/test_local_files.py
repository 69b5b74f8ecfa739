"""Tests for the local audio file importer."""

from pathlib import Path

from crate_caddy.domain.catalog import SourceType
from crate_caddy.domain.importers.local_files import (
    find_audio_files,
    get_tag_value,
    parse_local_library,
    read_local_track,
    split_filename,
)


class TestSplitFilename:
    def test_artist_and_title(self):
        assert split_filename(Path("/x/Bailey Ibbs - We Run.mp3")) == (
            "Bailey Ibbs",
            "We Run",
        )

    def test_only_first_separator_splits(self):
        assert split_filename(Path("A - B - C.mp3")) == ("A", "B - C")

    def test_no_separator(self):
        assert split_filename(Path("Untitled.mp3")) == ("", "Untitled")


class TestGetTagValue:
    def test_first_present_tag_wins(self):
        tags = {"TPE1": [], "ARTIST": ["  Daft Punk  "]}
        assert get_tag_value(tags, ["TPE1", "ARTIST"]) == "Daft Punk"

    def test_missing(self):
        assert get_tag_value({}, ["TPE1"]) is None


class TestReadLocalTrack:
    def test_unreadable_file_falls_back_to_filename(self, tmp_path):
        path = tmp_path / "Bailey Ibbs - We Run.mp3"
        path.write_bytes(b"not really audio")

        track = read_local_track(path)
        assert track.artist == "Bailey Ibbs"
        assert track.title == "We Run"
        assert track.duration is None
        assert track.source.source_type == SourceType.LOCAL_FILE
        assert track.source.file_path == str(path)
        assert track.source.file_size == len(b"not really audio")
        assert track.source.file_type == "mp3"


class TestParseLocalLibrary:
    def test_scans_supported_files(self, tmp_path):
        (tmp_path / "sub").mkdir()
        (tmp_path / "A - One.mp3").write_bytes(b"x")
        (tmp_path / "sub" / "B - Two.flac").write_bytes(b"x")
        (tmp_path / "cover.jpg").write_bytes(b"x")

        library = parse_local_library([tmp_path], [".mp3", ".flac"])
        assert sorted(t.title for t in library.tracks) == ["One", "Two"]

    def test_non_recursive(self, tmp_path):
        (tmp_path / "sub").mkdir()
        (tmp_path / "A - One.mp3").write_bytes(b"x")
        (tmp_path / "sub" / "B - Two.mp3").write_bytes(b"x")

        files = find_audio_files(tmp_path, [".mp3"], recursive=False)
        assert [f.name for f in files] == ["A - One.mp3"]

    def test_file_without_artist_skipped(self, tmp_path):
        (tmp_path / "A - One.mp3").write_bytes(b"x")
        (tmp_path / "Untitled.mp3").write_bytes(b"x")

        library = parse_local_library([tmp_path], [".mp3"])
        assert [t.title for t in library.tracks] == ["One"]
        assert library.skipped == 1

    def test_missing_folder_skipped(self, tmp_path):
        library = parse_local_library([tmp_path / "nope"], [".mp3"])
        assert library.tracks == []
        assert library.total == 0
