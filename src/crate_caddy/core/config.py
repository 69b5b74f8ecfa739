"""
Configuration management for Crate Caddy
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class LibraryConfig:
    """Configuration for the song catalog database."""

    database_path: Optional[str] = None  # default: <data dir>/crate_caddy.db


@dataclass
class ImportConfig:
    """Configuration for library export importers."""

    apple_music_path: Optional[str] = None
    rekordbox_path: Optional[str] = None
    djay_pro_path: Optional[str] = None
    local_paths: List[str] = field(default_factory=lambda: [str(Path.home() / "Music")])
    # Apple Music tracks must carry this grouping tag ("" imports everything)
    apple_music_grouping: str = "DJing"
    supported_formats: List[str] = field(
        default_factory=lambda: [".mp3", ".m4a", ".aiff", ".wav", ".flac", ".opus"]
    )
    scan_recursive: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/crate-caddy/crate-caddy.log)
    )
    max_file_size_mb: int = 10  # Maximum log file size before rotation
    backup_count: int = 5  # Number of backup files to keep
    console_output: bool = False  # Also output to stderr (for debugging)


@dataclass
class Config:
    """Main configuration object."""

    library: LibraryConfig = field(default_factory=LibraryConfig)
    imports: ImportConfig = field(default_factory=ImportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "crate-caddy"
    return Path.home() / ".config" / "crate-caddy"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in project root by looking for pyproject.toml.

    Returns:
        Path to config.toml in project root, or None if not found
    """
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            if config_path.exists():
                return config_path
            # Found project root but no config.toml there
            return None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/crate-caddy (or ~/.config/crate-caddy)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "crate-caddy"
    return Path.home() / ".local" / "share" / "crate-caddy"


def get_database_path(config: Optional[Config] = None) -> Path:
    """Resolve the catalog database path.

    CRATE_CADDY_DB wins over the config file, which wins over the data dir.
    """
    env_path = os.environ.get("CRATE_CADDY_DB")
    if env_path:
        return Path(env_path).expanduser()
    if config is not None and config.library.database_path:
        return Path(config.library.database_path).expanduser()
    return get_data_dir() / "crate_caddy.db"


def get_log_file_path(config: Optional[Config] = None) -> Path:
    """Resolve the log file path."""
    if config is not None and config.logging.log_file:
        return Path(config.logging.log_file).expanduser()
    return get_data_dir() / "crate-caddy.log"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Crate Caddy Configuration

[library]
# SQLite catalog location (default: ~/.local/share/crate-caddy/crate_caddy.db)
# database_path = "~/crate_caddy.db"

[imports]
# Default export locations used when no path is given on the command line
# apple_music_path = "~/Music/Library.xml"
# rekordbox_path = "~/Documents/rekordbox.xml"
# djay_pro_path = "~/Documents/dJayPro.csv"

# Folders scanned by `crate-caddy import local`
local_paths = ["~/Music"]

# Only import Apple Music tracks whose Grouping contains this tag ("" = all)
apple_music_grouping = "DJing"

# Audio file extensions picked up by the local file importer
supported_formats = [".mp3", ".m4a", ".aiff", ".wav", ".flac", ".opus"]

# Recursively scan subdirectories
scan_recursive = true

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/crate-caddy/crate-caddy.log)
# log_file = "/path/to/custom/crate-caddy.log"

# Maximum log file size in MB before rotation
max_file_size_mb = 10

# Number of backup log files to keep
backup_count = 5

# Also output logs to stderr (useful for debugging)
console_output = false
""".strip()


def _expand(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    return str(Path(path).expanduser())


def parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML data, keeping defaults for missing keys."""
    config = Config()

    if "library" in toml_data:
        library_data = toml_data["library"]
        config.library = LibraryConfig(
            database_path=_expand(library_data.get("database_path")),
        )

    if "imports" in toml_data:
        imports_data = toml_data["imports"]
        config.imports = ImportConfig(
            apple_music_path=_expand(imports_data.get("apple_music_path")),
            rekordbox_path=_expand(imports_data.get("rekordbox_path")),
            djay_pro_path=_expand(imports_data.get("djay_pro_path")),
            local_paths=[
                str(Path(p).expanduser())
                for p in imports_data.get("local_paths", config.imports.local_paths)
            ],
            apple_music_grouping=imports_data.get(
                "apple_music_grouping", config.imports.apple_music_grouping
            ),
            supported_formats=[
                ext.lower()
                for ext in imports_data.get(
                    "supported_formats", config.imports.supported_formats
                )
            ],
            scan_recursive=imports_data.get(
                "scan_recursive", config.imports.scan_recursive
            ),
        )

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=_expand(logging_data.get("log_file")),
            max_file_size_mb=logging_data.get(
                "max_file_size_mb", config.logging.max_file_size_mb
            ),
            backup_count=logging_data.get(
                "backup_count", config.logging.backup_count
            ),
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    return config


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file or create default.

    Environment variables (optionally from a .env file in the config
    directory) override TOML values:
    - CRATE_CADDY_DB
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = config_path or get_config_path()

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_default_config())
        print(f"Created default configuration at: {config_path}")
        config = Config()
    else:
        try:
            with open(config_path, "rb") as f:
                toml_data = tomllib.load(f)
            config = parse_config(toml_data)
        except (OSError, tomllib.TOMLDecodeError) as e:
            print(f"Error loading configuration from {config_path}: {e}")
            print("Using default configuration.")
            config = Config()

    db_override = os.environ.get("CRATE_CADDY_DB")
    if db_override:
        config.library.database_path = str(Path(db_override).expanduser())

    return config


def ensure_directories() -> None:
    """Ensure all necessary directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
