"""Catalog exceptions for error handling."""

from typing import Optional


class CrateCaddyError(Exception):
    """Base exception for catalog operations."""

    pass


class InvalidInputError(CrateCaddyError):
    """Raised when an incoming track cannot be matched or created."""

    pass


class SongNotFoundError(CrateCaddyError):
    """Raised when an update targets a song that no longer exists."""

    def __init__(self, song_id: int, message: Optional[str] = None):
        self.song_id = song_id
        super().__init__(message or f"Song #{song_id} not found")


class StoreUnavailableError(CrateCaddyError):
    """Raised when the catalog database cannot be reached or queried."""

    pass


class ImportFileError(CrateCaddyError):
    """Raised when a library export file cannot be read or parsed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot import {path}: {reason}")
