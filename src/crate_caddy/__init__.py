"""Crate Caddy - one song catalog across Apple Music, Rekordbox and dJay Pro."""

__version__ = "0.1.0"
