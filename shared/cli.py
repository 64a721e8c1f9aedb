"""Console output helpers shared by the command-line tools."""

import functools
import sys
from typing import Any, Callable, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

# Status output starts on stderr; use_stderr(False) moves it to stdout
console = Console(stderr=True)
err_console = Console(stderr=True)


def use_stderr(enabled: bool) -> None:
    """Send status output to stderr (True) or stdout (False)."""
    console.stderr = enabled


def info(message: str) -> None:
    """Print an informational message."""
    console.print(f"[cyan]ℹ[/cyan] {escape(message)}", highlight=False)


def success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]✓[/bold green] {escape(message)}", highlight=False)


def warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[bold yellow]⚠[/bold yellow] {escape(message)}", highlight=False)


def error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[bold red]✗[/bold red] {escape(message)}", highlight=False)


def create_table(title: Optional[str] = None, **kwargs: Any) -> Table:
    """
    Create a rich table with the common style.

    Args:
        title: Table title
        **kwargs: Extra arguments for rich.table.Table

    Returns:
        Table ready for add_column()/add_row()
    """
    kwargs.setdefault("show_header", True)
    kwargs.setdefault("header_style", "bold magenta")
    return Table(title=title, **kwargs)


def print_table(table: Table) -> None:
    """Print a table to the console."""
    console.print(table)


def handle_errors(func: Callable) -> Callable:
    """
    Decorator for CLI entry points.

    Turns Ctrl-C and uncaught exceptions into an error line and exit code 1.
    SystemExit (including click's own exits) passes through, and so does
    any exception when the command was called with verbose=True.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            error("Interrupted")
            sys.exit(130)
        except SystemExit:
            raise
        except Exception as e:
            if kwargs.get("verbose"):
                raise
            error(f"{type(e).__name__}: {e}")
            sys.exit(1)

    return wrapper
