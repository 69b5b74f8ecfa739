"""
Catalog query command handlers for Crate Caddy.

Handles: query count, sample, with-key, sources, duplicates, genres, search:WORD
"""

import json
from typing import List

from crate_caddy.core.console import get_console, print_table, safe_print
from crate_caddy.core.database import SQLiteSongStore
from crate_caddy.domain.catalog.models import Song

QUERY_HELP = [
    ("count", "Total song count"),
    ("sample", "Show 3 sample songs"),
    ("with-key", "Count songs with a musical key"),
    ("sources", "Source type statistics"),
    ("duplicates", "Identities shared by more than one song"),
    ("genres", "Song count per genre"),
    ("search:word", "Search songs by word in title (returns JSON)"),
]


def _print_songs_json(songs: List[Song]) -> None:
    get_console().print_json(
        json.dumps([song.to_dict() for song in songs], ensure_ascii=False)
    )


def print_query_help() -> None:
    print_table("Available queries", ["Query", "Description"], QUERY_HELP)


def run_query(store: SQLiteSongStore, query: str) -> int:
    """Run a named catalog query and print the result."""
    name = query.strip()

    if name.lower().startswith("search:"):
        term = name[len("search:"):].strip()
        if not term:
            safe_print('Usage: crate-caddy query "search:word"', style="yellow")
            return 1
        _print_songs_json(store.search_songs(term))
        return 0

    name = name.lower()

    if name == "count":
        safe_print(f"Total songs: {store.count_songs()}")
    elif name == "sample":
        _print_songs_json(store.sample_songs(3))
    elif name == "with-key":
        safe_print(f"Songs with key: {store.count_songs_with_key()}")
    elif name == "sources":
        print_table("Sources by type", ["Source", "Count"], store.get_source_stats())
    elif name == "duplicates":
        duplicates = store.find_duplicates(limit=10)
        safe_print(
            f"Found {len(duplicates)} potential duplicates (showing first 10):"
        )
        print_table(
            "Potential duplicates",
            ["Artist", "Title", "Songs", "IDs"],
            [
                (d["artist"], d["title"], d["count"], ", ".join(map(str, d["ids"])))
                for d in duplicates
            ],
        )
    elif name == "genres":
        print_table("Genres", ["Genre", "Songs"], store.get_genre_stats())
    else:
        print_query_help()
        return 0 if name in ("", "help") else 1

    return 0
