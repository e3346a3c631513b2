#!/usr/bin/env python3
"""
autoshadow CLI Main Application

Typer-based command-line interface for watching and classifying posts.
"""

from typing import Optional

import typer

from autoshadow.cli import __version__
from autoshadow.cli.commands import analyze, classify, watch
from autoshadow.cli.utils import console, resolve_log_level, setup_logging

app = typer.Typer(
    name="autoshadow",
    help="Sorts Rust-the-language posts from Rust-the-game posts in r/rust's new queue",
    context_settings={"help_option_names": ["-h", "--help"]},
    rich_markup_mode="rich",
    no_args_is_help=True,
)

app.command("watch")(watch.watch)
app.command("analyze")(analyze.analyze)
app.command("classify")(classify.classify)
app.command("label")(classify.label)


def version_callback(value: bool):
    """Show version information."""
    if value:
        console.print(f"[bold cyan]autoshadow[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def app_callback(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version information and exit"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at INFO regardless of LOG"),
    debug: bool = typer.Option(False, "--debug", help="Log at DEBUG"),
):
    """
    autoshadow - keeps an eye on r/rust's new queue

    [bold]Quick Start:[/bold]

    • Watch the queue: [cyan]autoshadow watch[/cyan]
    • Try a post: [cyan]autoshadow classify "My title" --body "..."[/cyan]
    • Replay labelled posts: [cyan]autoshadow analyze --category lang[/cyan]

    The log level comes from [cyan]--verbose[/cyan]/[cyan]--debug[/cyan] or the LOG environment variable.
    """
    setup_logging(resolve_log_level(verbose=verbose, debug=debug))


def main():
    """Entry point for the autoshadow console script."""
    app()


if __name__ == "__main__":
    main()
