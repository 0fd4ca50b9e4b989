"""
Rich logging and console output for the DOCX merger CLI.
"""

import logging
from typing import Iterable, Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .logger import LOG_LEVELS

console = Console(stderr=True)


def setup_logging(level: str = "INFO", use_rich: bool = True) -> None:
    """
    Setup logging for the application.

    Args:
        level: Log level
        use_rich: Whether to use rich logging
    """
    if level.upper() not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level}")
    numeric_level = getattr(logging, level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    if use_rich:
        rich_handler = RichHandler(
            console=console,
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        rich_handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
        root_logger.addHandler(rich_handler)
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(handler)


def print_table(
    title: str,
    rows: Iterable[Sequence[object]],
    columns: Sequence[str] = ("Property", "Value"),
    output: Optional[Console] = None,
) -> None:
    """Display rows in a rich table."""
    table = Table(title=title)
    styles = ("cyan", "magenta")
    for position, column in enumerate(columns):
        table.add_column(column, style=styles[position % len(styles)])
    for row in rows:
        table.add_row(*(str(value) for value in row))
    (output or Console()).print(table)


def success(message: str, output: Optional[Console] = None) -> None:
    """Print a success line."""
    (output or console).print(f"[green]✓ {message}[/green]")


def failure(message: str, output: Optional[Console] = None) -> None:
    """Print a failure line."""
    (output or console).print(f"[red]✗ {message}[/red]")
