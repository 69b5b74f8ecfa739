"""Core infrastructure layer.

This module provides foundation-level services:
- Configuration management (TOML)
- Song catalog storage (SQLite)
- Logging (Loguru) and console output (Rich)
"""

# Configuration
from .config import (
    Config,
    load_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    get_database_path,
    get_log_file_path,
    create_default_config,
    ensure_directories,
)

# Database
from .database import SQLiteSongStore, get_db_connection

# Output
from .console import get_console, print_table, safe_print
from .output import log, setup_loguru

__all__ = [
    # Config
    "Config",
    "load_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "get_database_path",
    "get_log_file_path",
    "create_default_config",
    "ensure_directories",
    # Database
    "SQLiteSongStore",
    "get_db_connection",
    # Output
    "get_console",
    "print_table",
    "safe_print",
    "log",
    "setup_loguru",
]
