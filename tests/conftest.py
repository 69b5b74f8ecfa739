"""Shared fixtures: a throwaway SQLite catalog per test."""

from pathlib import Path

import pytest

from crate_caddy.core.database import SQLiteSongStore
from crate_caddy.domain.catalog import UpsertService


@pytest.fixture
def store(tmp_path: Path) -> SQLiteSongStore:
    """Initialized catalog store in a temporary directory."""
    song_store = SQLiteSongStore(tmp_path / "catalog.db")
    song_store.init_database()
    return song_store


@pytest.fixture
def service(store: SQLiteSongStore) -> UpsertService:
    return UpsertService(store)
