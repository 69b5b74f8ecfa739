"""Shared Rich console for command output."""

from typing import Any, Iterable, Sequence

from rich.console import Console
from rich.table import Table

_console: Console | None = None


def get_console() -> Console:
    """Return the process-wide Console, creating it on first use."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def safe_print(message: str, style: str | None = None) -> None:
    """Print a line, optionally styled (e.g. "bold red")."""
    if style:
        get_console().print(message, style=style)
    else:
        get_console().print(message)


def print_table(
    title: str, columns: Sequence[str], rows: Iterable[Sequence[Any]]
) -> None:
    """Render rows as a Rich table. None cells are shown as blanks."""
    table = Table(title=title, show_lines=False)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*("" if cell is None else str(cell) for cell in row))
    get_console().print(table)
