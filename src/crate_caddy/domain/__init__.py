"""Domain layer: song catalog core and library importers."""
