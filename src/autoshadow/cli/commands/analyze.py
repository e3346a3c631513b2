"""
Analyze Command

Replays labelled posts from the store through every filter, to see how the
filters behave on posts whose category is already known.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.markup import escape

from autoshadow.cli.config_utils import build_cli_args, load_config_from_cli
from autoshadow.cli.utils import console, format_verdict, handle_fatal_error
from autoshadow.core.exceptions import AutoShadowError
from autoshadow.filters.factory import FilterFactory
from autoshadow.scrapers import Category
from autoshadow.storage import PostStore

DEFAULT_ANALYZE_LIMIT = 10_000


def analyze(
    config: Annotated[Optional[Path], typer.Option("--config", "-c", help="Configuration file path")] = None,
    category: Annotated[Category, typer.Option("--category", help="Category of stored posts to replay")] = Category.LANG,
    limit: Annotated[int, typer.Option("--limit", "-l", min=1, help="Maximum posts to replay")] = DEFAULT_ANALYZE_LIMIT,
    database: Annotated[Optional[Path], typer.Option("--database", "-d", help="SQLite database path")] = None,
):
    """
    Run every filter over the stored posts of a category and print each verdict.
    """
    app_config = load_config_from_cli(config_file=config, cli_args=build_cli_args(database=database))

    try:
        with PostStore(app_config.storage.database_path) as store:
            store.init_db()
            chain = FilterFactory.create_filter_chain(
                app_config,
                history=store,
                channel_resolver=FilterFactory.create_channel_resolver(app_config),
            )
            posts = store.get_posts(category, limit)

            for post in posts:
                console.print("---")
                console.print(f"[bold]{post.id}[/bold] {escape(post.title)}", highlight=False)
                for name, verdict in chain.run_all(post):
                    if verdict is not None:
                        console.print(f"  {name}: {format_verdict(verdict)}")
    except AutoShadowError as e:
        handle_fatal_error(e)

    console.print(f"\nAnalyzed [cyan]{len(posts)}[/cyan] {category.value} posts")
