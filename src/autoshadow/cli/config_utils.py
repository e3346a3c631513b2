"""
Configuration Utilities for CLI

Bridges command line options and the ConfigManager.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from rich.panel import Panel

from autoshadow.cli.utils import console, handle_fatal_error, load_credentials_from_dotenv
from autoshadow.core.config import AppConfig, ConfigManager
from autoshadow.core.exceptions import ConfigurationError


def build_cli_args(**kwargs: Any) -> Dict[str, Any]:
    """Drop options the user did not pass so they don't mask lower layers."""
    return {key: value for key, value in kwargs.items() if value is not None}


def load_config_from_cli(
    config_file: Optional[Path] = None,
    cli_args: Optional[Dict[str, Any]] = None
) -> AppConfig:
    """
    Load configuration with the CLI options applied on top.

    Args:
        config_file: Optional path to configuration file
        cli_args: Dictionary of CLI arguments to override config

    Returns:
        Validated AppConfig instance

    Raises:
        typer.Exit: If configuration is invalid
    """
    load_credentials_from_dotenv()

    config_manager = ConfigManager(config_file=config_file)
    try:
        app_config = config_manager.load_config(cli_args=cli_args or {})
    except ConfigurationError as e:
        handle_fatal_error(e)

    for warning in config_manager.validate_config(app_config):
        console.print(f"[yellow]Configuration warning:[/yellow] {warning}")

    return app_config


def print_config_summary(config: AppConfig) -> None:
    """Print a summary of the current configuration."""
    config_lines = [
        f"Subreddit: [cyan]r/{config.reddit.subreddit}[/cyan]",
        f"Poll interval: [cyan]{config.watch.poll_interval:g}s[/cyan]",
        f"Batch size: [cyan]{config.watch.latest_batch_size}[/cyan]",
        f"Database: [cyan]{config.storage.database_path}[/cyan]",
        f"Allowed domains: [cyan]{len(config.url.allow)}[/cyan]",
        f"Blocked domains: [cyan]{len(config.url.block)}[/cyan]",
        f"Trusted channels: [cyan]{len(config.youtube.trusted_channels)}[/cyan]",
    ]

    console.print(Panel(
        "\n".join(config_lines),
        title="[bold]Configuration[/bold]",
        border_style="green"
    ))
