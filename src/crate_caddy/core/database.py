"""
SQLite catalog store for Crate Caddy.

Songs are stored one row per song; set-valued fields and the embedded
sources are JSON columns, so a song reads and writes as a single document.
"""

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from loguru import logger

from crate_caddy.domain.catalog.exceptions import (
    SongNotFoundError,
    StoreUnavailableError,
)
from crate_caddy.domain.catalog.models import Song, utc_now

# Database schema version for migrations
SCHEMA_VERSION = 1

SONG_COLUMNS = (
    "title",
    "artist",
    "album",
    "duration",
    "genres",
    "grouping",
    "bpm",
    "year",
    "musical_key",
    "rating",
    "normalized_identity",
    "sources",
    "created_at",
    "updated_at",
)


@contextmanager
def get_db_connection(db_path: Path) -> Iterator[sqlite3.Connection]:
    """Open a connection, translating driver failures to StoreUnavailableError."""
    try:
        conn = sqlite3.connect(db_path, timeout=30.0)
    except sqlite3.Error as e:
        raise StoreUnavailableError(f"Cannot open catalog {db_path}: {e}") from e

    conn.row_factory = sqlite3.Row  # Enable dict-like access

    try:
        # WAL lets query commands read while an import is writing
        conn.execute("PRAGMA journal_mode=WAL")
        yield conn
    except (sqlite3.OperationalError, sqlite3.DatabaseError) as e:
        conn.rollback()
        raise StoreUnavailableError(f"Catalog query failed: {e}") from e
    finally:
        conn.close()


def migrate_database(conn: sqlite3.Connection, current_version: int) -> None:
    """Migrate database from current_version to latest schema."""
    if current_version < 1:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS songs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                artist TEXT NOT NULL DEFAULT '',
                album TEXT,
                duration INTEGER, -- milliseconds
                genres TEXT NOT NULL DEFAULT '[]', -- JSON array
                grouping TEXT NOT NULL DEFAULT '[]', -- JSON array
                bpm REAL,
                year INTEGER,
                musical_key TEXT,
                rating REAL, -- 0-5
                normalized_identity TEXT NOT NULL DEFAULT '',
                sources TEXT NOT NULL DEFAULT '[]', -- JSON array of source documents
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_songs_identity ON songs (normalized_identity, duration)"
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_songs_title ON songs (title)")
        logger.info("Created songs table (schema v1)")


def _song_to_row(song: Song) -> Dict[str, Any]:
    data = song.to_dict()
    return {
        "title": song.title,
        "artist": song.artist or "",
        "album": song.album,
        "duration": song.duration,
        "genres": json.dumps(data["genres"], ensure_ascii=False),
        "grouping": json.dumps(data["grouping"], ensure_ascii=False),
        "bpm": song.bpm,
        "year": song.year,
        "musical_key": song.key,
        "rating": song.rating,
        "normalized_identity": song.normalized_identity,
        "sources": json.dumps(data["sources"], ensure_ascii=False),
        "created_at": data["created_at"],
        "updated_at": data["updated_at"],
    }


def _row_to_song(row: sqlite3.Row) -> Song:
    return Song.from_dict(
        {
            "id": row["id"],
            "title": row["title"],
            "artist": row["artist"],
            "album": row["album"],
            "duration": row["duration"],
            "genres": json.loads(row["genres"]),
            "grouping": json.loads(row["grouping"]),
            "bpm": row["bpm"],
            "year": row["year"],
            "key": row["musical_key"],
            "rating": row["rating"],
            "normalized_identity": row["normalized_identity"],
            "sources": json.loads(row["sources"]),
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        }
    )


class SQLiteSongStore:
    """Song store backed by a single SQLite file."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)

    def connection(self):
        return get_db_connection(self.db_path)

    def init_database(self) -> None:
        """Create the database file and bring the schema up to date."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with self.connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)

            row = conn.execute(
                "SELECT MAX(version) as version FROM schema_version"
            ).fetchone()
            current_version = row["version"] if row and row["version"] else 0

            if current_version < SCHEMA_VERSION:
                migrate_database(conn, current_version)

            conn.execute("DELETE FROM schema_version")
            conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,)
            )
            conn.commit()

    # Core store operations

    def query_by_normalized_identity(
        self, key: str, duration_range: Optional[Tuple[int, int]] = None
    ) -> List[Song]:
        query = "SELECT * FROM songs WHERE normalized_identity = ?"
        params: List[Any] = [key]
        if duration_range is not None:
            query += " AND duration IS NOT NULL AND duration BETWEEN ? AND ?"
            params.extend(duration_range)
        query += " ORDER BY id"

        with self.connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [_row_to_song(row) for row in rows]

    def update_song_by_id(self, song_id: int, song: Song) -> Song:
        row = _song_to_row(song)
        row["updated_at"] = utc_now().isoformat()
        # created_at is owned by the store and never rewritten
        del row["created_at"]

        set_clause = ", ".join(f"{column} = :{column}" for column in row)
        row["id"] = song_id

        with self.connection() as conn:
            cursor = conn.execute(f"UPDATE songs SET {set_clause} WHERE id = :id", row)
            if cursor.rowcount == 0:
                conn.rollback()
                raise SongNotFoundError(song_id)
            conn.commit()
            stored = conn.execute(
                "SELECT * FROM songs WHERE id = ?", (song_id,)
            ).fetchone()
        return _row_to_song(stored)

    def insert_song(self, song: Song) -> Song:
        row = _song_to_row(song)
        now = utc_now().isoformat()
        row["created_at"] = now
        row["updated_at"] = now

        columns = ", ".join(SONG_COLUMNS)
        placeholders = ", ".join(f":{column}" for column in SONG_COLUMNS)

        with self.connection() as conn:
            cursor = conn.execute(
                f"INSERT INTO songs ({columns}) VALUES ({placeholders})", row
            )
            conn.commit()
            stored = conn.execute(
                "SELECT * FROM songs WHERE id = ?", (cursor.lastrowid,)
            ).fetchone()
        return _row_to_song(stored)

    # Catalog queries and administration

    def get_song_by_id(self, song_id: int) -> Optional[Song]:
        with self.connection() as conn:
            row = conn.execute("SELECT * FROM songs WHERE id = ?", (song_id,)).fetchone()
        return _row_to_song(row) if row else None

    def get_all_songs(self) -> List[Song]:
        """All songs, newest first."""
        with self.connection() as conn:
            rows = conn.execute(
                "SELECT * FROM songs ORDER BY created_at DESC, id DESC"
            ).fetchall()
        return [_row_to_song(row) for row in rows]

    def delete_song(self, song_id: int) -> bool:
        with self.connection() as conn:
            cursor = conn.execute("DELETE FROM songs WHERE id = ?", (song_id,))
            conn.commit()
        return cursor.rowcount > 0

    def count_songs(self) -> int:
        with self.connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM songs").fetchone()[0]

    def sample_songs(self, limit: int = 3) -> List[Song]:
        with self.connection() as conn:
            rows = conn.execute(
                "SELECT * FROM songs ORDER BY id LIMIT ?", (limit,)
            ).fetchall()
        return [_row_to_song(row) for row in rows]

    def count_songs_with_key(self) -> int:
        with self.connection() as conn:
            return conn.execute(
                "SELECT COUNT(*) FROM songs WHERE musical_key IS NOT NULL AND musical_key != ''"
            ).fetchone()[0]

    def get_source_stats(self) -> List[Tuple[str, int]]:
        """Number of sources per source type, most common first."""
        with self.connection() as conn:
            rows = conn.execute("""
                SELECT json_extract(source.value, '$.source_type') AS source_type,
                       COUNT(*) AS count
                FROM songs, json_each(songs.sources) AS source
                GROUP BY source_type
                ORDER BY count DESC, source_type
            """).fetchall()
        return [(row["source_type"], row["count"]) for row in rows]

    def find_duplicates(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Identities shared by more than one song (e.g. durations too far apart)."""
        with self.connection() as conn:
            rows = conn.execute(
                """
                SELECT normalized_identity,
                       MIN(artist) AS artist,
                       MIN(title) AS title,
                       COUNT(*) AS count,
                       GROUP_CONCAT(id) AS ids
                FROM songs
                WHERE normalized_identity != ''
                GROUP BY normalized_identity
                HAVING COUNT(*) > 1
                ORDER BY count DESC, normalized_identity
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
        return [
            {
                "normalized_identity": row["normalized_identity"],
                "artist": row["artist"],
                "title": row["title"],
                "count": row["count"],
                "ids": sorted(int(i) for i in row["ids"].split(",")),
            }
            for row in rows
        ]

    def search_songs(self, term: str) -> List[Song]:
        """Songs whose title contains term (case-insensitive)."""
        escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        with self.connection() as conn:
            rows = conn.execute(
                "SELECT * FROM songs WHERE title LIKE ? ESCAPE '\\' ORDER BY title, id",
                (f"%{escaped}%",),
            ).fetchall()
        return [_row_to_song(row) for row in rows]

    def get_genre_stats(self) -> List[Tuple[str, int]]:
        """(genre, song count) pairs in alphabetical order."""
        with self.connection() as conn:
            rows = conn.execute("""
                SELECT genre.value AS genre, COUNT(*) AS count
                FROM songs, json_each(songs.genres) AS genre
                GROUP BY genre.value
                ORDER BY genre.value
            """).fetchall()
        return [(row["genre"], row["count"]) for row in rows]
