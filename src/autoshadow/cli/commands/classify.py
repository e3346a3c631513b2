"""
Classify and Label Commands

``classify`` runs the filter chain over a post typed on the command line.
``label`` assigns a category to a stored post for later ``analyze`` runs.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Optional

import typer

from autoshadow.cli.config_utils import build_cli_args, load_config_from_cli
from autoshadow.cli.utils import console, format_verdict, handle_fatal_error, print_trace
from autoshadow.core.exceptions import AutoShadowError
from autoshadow.filters.base import FilterChain
from autoshadow.filters.factory import FilterFactory
from autoshadow.scrapers import Category, Post
from autoshadow.storage import PostStore

CLI_POST_ID = "cli"


def classify(
    title: Annotated[str, typer.Argument(help="Post title")],
    body: Annotated[Optional[str], typer.Option("--body", "-b", help="Markdown body of the post")] = None,
    link: Annotated[Optional[str], typer.Option("--link", help="Link of a link post")] = None,
    author: Annotated[str, typer.Option("--author", "-a", help="Author to look up in the post history")] = "[unknown]",
    config: Annotated[Optional[Path], typer.Option("--config", "-c", help="Configuration file path")] = None,
    database: Annotated[Optional[Path], typer.Option("--database", "-d", help="SQLite database path")] = None,
    resolve: Annotated[bool, typer.Option("--resolve/--no-resolve", help="Look up YouTube channels over the network")] = True,
):
    """
    Classify a single post and show what every filter thinks of it.

    [bold cyan]Examples:[/bold cyan]

    • [green]autoshadow classify "Help with lifetimes" --body "fn main() {}"[/green]
    • [green]autoshadow classify "Base raid" --link https://store.steampowered.com/app/252490[/green]
    """
    app_config = load_config_from_cli(config_file=config, cli_args=build_cli_args(database=database))

    post = Post(
        id=CLI_POST_ID,
        author=author,
        score=0.0,
        title=title,
        created=datetime.now(timezone.utc),
        body=body,
        link=link,
    )

    db_path = app_config.storage.database_path
    try:
        with PostStore(db_path if Path(db_path).exists() else ":memory:") as store:
            store.init_db()
            resolver = FilterFactory.create_channel_resolver(app_config) if resolve else None
            chain = FilterFactory.create_filter_chain(app_config, history=store, channel_resolver=resolver)
            outcomes = chain.run_all(post)
    except AutoShadowError as e:
        handle_fatal_error(e)

    print_trace(outcomes, title="Filter trace")
    winner = FilterChain.winner(outcomes)
    if winner is None:
        console.print("Result: [yellow]unknown[/yellow]")
    else:
        name, verdict = winner
        console.print(f"Result: {format_verdict(verdict)} (decided by [cyan]{name}[/cyan])")


def label(
    post_id: Annotated[str, typer.Argument(help="Id of a stored post")],
    category: Annotated[Optional[Category], typer.Argument(help="Category to assign; omit to clear")] = None,
    config: Annotated[Optional[Path], typer.Option("--config", "-c", help="Configuration file path")] = None,
    database: Annotated[Optional[Path], typer.Option("--database", "-d", help="SQLite database path")] = None,
):
    """
    Label a stored post as lang, game or other.
    """
    app_config = load_config_from_cli(config_file=config, cli_args=build_cli_args(database=database))

    try:
        with PostStore(app_config.storage.database_path) as store:
            store.init_db()
            found = store.set_category(post_id, category)
    except AutoShadowError as e:
        handle_fatal_error(e)

    if not found:
        console.print(f"[red]No stored post with id {post_id}[/red]")
        raise typer.Exit(1)

    shown = category.value if category else "none"
    console.print(f"Labelled [bold]{post_id}[/bold] as [cyan]{shown}[/cyan]")
