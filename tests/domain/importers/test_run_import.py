"""Tests for feeding parsed libraries through the upsert service."""

from unittest.mock import Mock

import pytest

from crate_caddy.domain.catalog import (
    IncomingTrack,
    SongFields,
    Source,
    SourceType,
    StoreUnavailableError,
)
from crate_caddy.domain.importers import ParsedLibrary, run_import


def _track(artist, title, duration=300000, key=None, source_id=None):
    return IncomingTrack(
        artist=artist,
        title=title,
        duration=duration,
        source=Source(
            SourceType.REKORDBOX, metadata={"id": source_id} if source_id else {}
        ),
        fields=SongFields(key=key),
    )


class TestRunImport:
    def test_counts_created_and_updated(self, service, store):
        library = ParsedLibrary(
            tracks=[
                _track("Daft Punk", "One More Time", 320000, source_id="1"),
                _track("Daft Punk", "One More Time", 320500, source_id="2"),
                _track("Bailey Ibbs", "We Run", 371000, key="Am", source_id="3"),
            ],
            skipped=2,
            filtered=1,
        )
        stats = run_import(service, library)

        assert stats.created == 2
        assert stats.updated == 1
        assert stats.skipped == 2
        assert stats.filtered == 1
        assert stats.failed == 0
        assert stats.total == 6
        assert stats.processed == 3
        assert store.count_songs() == 2

    def test_invalid_track_counted_and_run_continues(self, service, store):
        library = ParsedLibrary(
            tracks=[_track("Artist", "  "), _track("Artist", "Title")]
        )
        stats = run_import(service, library)
        assert stats.failed == 1
        assert stats.created == 1
        assert store.count_songs() == 1

    def test_progress_callback(self, service):
        calls = []
        library = ParsedLibrary(tracks=[_track("A", "One"), _track("B", "Two")])
        run_import(service, library, lambda i, total, track: calls.append((i, total)))
        assert calls == [(1, 2), (2, 2)]

    def test_store_failure_aborts(self):
        service = Mock()
        service.upsert.side_effect = StoreUnavailableError("database is locked")
        library = ParsedLibrary(tracks=[_track("A", "One"), _track("B", "Two")])

        with pytest.raises(StoreUnavailableError):
            run_import(service, library)
        assert service.upsert.call_count == 1
