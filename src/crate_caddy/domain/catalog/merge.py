"""
Field-level merge of an incoming track into an existing song.

Pure functions: nothing here touches the store.
"""

from dataclasses import replace
from typing import Iterable, List, Optional

from .models import Song, SongFields, Source


def union_values(existing: Iterable[str], incoming: Optional[Iterable[str]]) -> List[str]:
    """Ordered union: existing values first, then unseen incoming values."""
    merged = list(dict.fromkeys(existing))
    if incoming:
        seen = set(merged)
        for value in incoming:
            if value not in seen:
                merged.append(value)
                seen.add(value)
    return merged


def merge_sources(existing: List[Source], new_source: Source) -> List[Source]:
    """Replace the source with the same type and identity key, else append.

    A source without an identity key (no id, no path) cannot be told apart
    from others of its type and is always appended.
    """
    sources = list(existing)
    key = new_source.identity_key

    if key is not None:
        for index, source in enumerate(sources):
            if (
                source.source_type == new_source.source_type
                and source.identity_key == key
            ):
                sources[index] = new_source
                return sources

    sources.append(new_source)
    return sources


def _present(value: Optional[str]) -> bool:
    return value is not None and value != ""


def merge_song(existing: Song, incoming: SongFields, new_source: Source) -> Song:
    """Combine an existing song, an incoming partial record and its source.

    - genres, grouping: union, never shrinks
    - bpm, year, rating: incoming wins when provided
    - key, album: incoming wins when provided and not empty
    - duration: only filled in while unknown (the first real duration stays)
    - sources: re-imported source replaced in place, new source appended

    Returns:
        A new Song; existing is not modified.
    """
    duration = existing.duration
    if not duration and incoming.duration is not None and incoming.duration > 0:
        duration = incoming.duration

    return replace(
        existing,
        genres=union_values(existing.genres, incoming.genres),
        grouping=union_values(existing.grouping, incoming.grouping),
        bpm=incoming.bpm if incoming.bpm is not None else existing.bpm,
        year=incoming.year if incoming.year is not None else existing.year,
        rating=incoming.rating if incoming.rating is not None else existing.rating,
        key=incoming.key if _present(incoming.key) else existing.key,
        album=incoming.album if _present(incoming.album) else existing.album,
        duration=duration,
        sources=merge_sources(existing.sources, new_source),
    )
