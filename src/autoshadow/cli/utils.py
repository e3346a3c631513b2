"""
CLI Utilities

Shared utilities for CLI commands: logging setup, .env loading, and rich
output helpers.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Optional, Sequence

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from autoshadow.core.exceptions import AutoShadowError
from autoshadow.filters.base import FilterOutcome, Verdict

console = Console()

LOG_ENV_VAR = "LOG"
DEFAULT_LOG_LEVEL = "INFO"


def resolve_log_level(verbose: bool = False, debug: bool = False) -> str:
    """
    Pick the log level from the CLI flags, falling back to the LOG variable.

    ``LOG`` accepts a plain level name ('debug', 'WARNING', ...). Anything
    unrecognized falls back to INFO. ``--verbose`` forces INFO even when
    ``LOG`` asks for less.
    """
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    return _env_log_level() or DEFAULT_LOG_LEVEL


def _env_log_level() -> Optional[str]:
    value = os.environ.get(LOG_ENV_VAR, "").strip().upper()
    if value in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        return value
    if value == "WARN":
        return "WARNING"
    return None


def setup_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Set up logging configuration for the application."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        force=True,
    )


def load_credentials_from_dotenv(dotenv_path_str: str = ".env") -> Dict[str, str]:
    """
    Load key-value pairs from a .env file into the environment.
    Does not override existing environment variables.

    Args:
        dotenv_path_str: Path to the .env file

    Returns:
        Dictionary of newly loaded environment variables
    """
    dotenv_path = Path(dotenv_path_str)
    loaded_vars: Dict[str, str] = {}

    if not dotenv_path.is_file():
        logging.debug(f"{dotenv_path.resolve()} not found, relying on existing environment variables")
        return loaded_vars

    try:
        with open(dotenv_path, 'r', encoding='utf-8') as f:
            for line_number, line in enumerate(f, 1):
                line = line.strip()
                if not line or line.startswith('#') or '=' not in line:
                    continue

                key, value = line.split('=', 1)
                key = key.strip()
                if key.startswith('export '):
                    key = key[len('export '):].strip()
                value = value.strip().strip("'\"")

                if not key:
                    logging.warning(f"Skipping line {line_number} in {dotenv_path.name}: empty key")
                    continue

                if key not in os.environ:
                    os.environ[key] = value
                    loaded_vars[key] = value
                    logging.debug(f"Loaded '{key}' from {dotenv_path.name}")
                else:
                    logging.debug(f"'{key}' already set in environment, not overridden by {dotenv_path.name}")
    except OSError as e:
        logging.warning(f"Could not read {dotenv_path.name}: {e}")

    return loaded_vars


def print_header(title: str, subtitle: Optional[str] = None) -> None:
    """Print a formatted header for CLI output."""
    if subtitle:
        header_text = f"[bold cyan]{title}[/bold cyan]\n[dim]{subtitle}[/dim]"
    else:
        header_text = f"[bold cyan]{title}[/bold cyan]"

    console.print(Panel(header_text, border_style="cyan"))


def format_verdict(verdict: Optional[Verdict]) -> str:
    """Rich markup for a verdict, or a dimmed dash when there is none."""
    if verdict is None:
        return "[dim]-[/dim]"
    color = "green" if verdict.is_ham else "red"
    return f"[{color}]{escape(str(verdict))}[/{color}]"


def print_trace(outcomes: Sequence[FilterOutcome], title: Optional[str] = None) -> None:
    """Print every filter's outcome as a table."""
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Filter", style="cyan")
    table.add_column("Verdict")

    for name, verdict in outcomes:
        table.add_row(name, format_verdict(verdict))

    console.print(table)


def handle_keyboard_interrupt() -> None:
    """Handle keyboard interrupt gracefully."""
    console.print("\n[yellow]Operation cancelled by user[/yellow]")
    raise typer.Exit(1)


def handle_fatal_error(error: Exception) -> None:
    """Print a fatal error with rich formatting and exit with status 1."""
    if isinstance(error, AutoShadowError):
        message = error.get_user_message()
        logging.debug(f"Fatal error details: {error.get_debug_info()}")
    else:
        message = str(error)

    console.print(Panel(
        f"[red]{escape(message)}[/red]",
        title="[red]Fatal Error[/red]",
        border_style="red"
    ))
    raise typer.Exit(1)
