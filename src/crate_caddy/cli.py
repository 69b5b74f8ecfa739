"""
Crate Caddy CLI - entry point for the crate-caddy command.

Imports library exports into the song catalog and runs catalog queries.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from crate_caddy.commands.imports import IMPORTERS
from crate_caddy.commands.query import run_query
from crate_caddy.core import config as config_module
from crate_caddy.core.console import safe_print
from crate_caddy.core.database import SQLiteSongStore
from crate_caddy.core.output import log, setup_loguru
from crate_caddy.domain.catalog.exceptions import StoreUnavailableError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crate-caddy",
        description="Crate Caddy - one song catalog across your DJ libraries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", help="Path to config.toml")
    parser.add_argument("--db", help="Path to the catalog database")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging to stderr"
    )

    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    subparsers.add_parser("init", help="Create the config file and catalog database")

    import_parser = subparsers.add_parser("import", help="Import a library export")
    import_parser.add_argument(
        "source", choices=sorted(IMPORTERS), help="Which library the export comes from"
    )
    import_parser.add_argument(
        "path", nargs="?", help="Export file (or folder for local); defaults from config"
    )

    query_parser = subparsers.add_parser("query", help="Query the catalog")
    query_parser.add_argument(
        "query", nargs="?", default="help", help='count, sample, with-key, sources, duplicates, genres or "search:word"'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the crate-caddy command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.subcommand:
        parser.print_help()
        return 0

    config = config_module.load_config(Path(args.config) if args.config else None)

    level = "DEBUG" if args.verbose else config.logging.level
    setup_loguru(
        config_module.get_log_file_path(config),
        level=level,
        max_file_size_mb=config.logging.max_file_size_mb,
        backup_count=config.logging.backup_count,
        console_output=args.verbose or config.logging.console_output,
    )

    db_path = Path(args.db).expanduser() if args.db else config_module.get_database_path(config)
    store = SQLiteSongStore(db_path)

    try:
        store.init_database()

        if args.subcommand == "init":
            config_module.ensure_directories()
            log(f"Catalog ready at: {db_path}")
            return 0

        if args.subcommand == "import":
            return IMPORTERS[args.source](store, config, args.path)

        if args.subcommand == "query":
            return run_query(store, args.query)

    except StoreUnavailableError as e:
        logger.error(str(e))
        safe_print(f"❌ {e}", style="red")
        return 1

    parser.print_help()
    return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
