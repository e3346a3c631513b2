"""
Watch Command

Polls the subreddit's new listing, stores posts once they leave it, and
classifies every freshly appeared post.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Callable, Optional

import typer

from autoshadow.cli.config_utils import build_cli_args, load_config_from_cli, print_config_summary
from autoshadow.cli.utils import handle_fatal_error, handle_keyboard_interrupt, print_header
from autoshadow.core.exceptions import AutoShadowError, ConfigurationError, ErrorCode, StoreError
from autoshadow.filters.base import FilterChain
from autoshadow.filters.factory import FilterFactory
from autoshadow.scrapers import PrawPostSource
from autoshadow.storage import PostStore
from autoshadow.watcher import FeedReconciler, Watcher

logger = logging.getLogger(__name__)


@dataclass
class WatchStats:
    """Running verdict tallies for the watch loop."""

    num_ham: int = 0
    num_spam: int = 0
    unknown: int = 0


def run_cycle(watcher: Watcher, store: PostStore, chain: FilterChain, stats: WatchStats) -> None:
    """One poll: reconcile, persist expired posts, classify fresh ones."""
    update = watcher.update()

    try:
        store.insert_posts(update.expired)
    except StoreError as e:
        logger.warning(f"Failed to store {len(update.expired)} expired posts: {e}")

    for post in update.fresh:
        verdict = chain.first_verdict(post)
        if verdict is None:
            stats.unknown += 1
        elif verdict.is_spam:
            stats.num_spam += 1
        else:
            stats.num_ham += 1
        logger.info(
            f"num_spam={stats.num_spam} num_ham={stats.num_ham} unknown={stats.unknown} "
            f"post={post.id} filter_result={verdict}"
        )


def watch_loop(
    watcher: Watcher,
    store: PostStore,
    chain: FilterChain,
    poll_interval: float,
    max_cycles: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> WatchStats:
    """
    Run poll cycles until interrupted, or for ``max_cycles`` cycles.

    Returns:
        Final verdict tallies
    """
    stats = WatchStats()
    cycles = 0
    while max_cycles is None or cycles < max_cycles:
        run_cycle(watcher, store, chain, stats)
        cycles += 1
        if max_cycles is None or cycles < max_cycles:
            sleep(poll_interval)
    return stats


def watch(
    config: Annotated[Optional[Path], typer.Option("--config", "-c", help="Configuration file path")] = None,
    subreddit: Annotated[Optional[str], typer.Option("--subreddit", "-r", help="Subreddit to watch")] = None,
    interval: Annotated[Optional[float], typer.Option("--interval", "-i", min=1.0, help="Seconds between polls")] = None,
    limit: Annotated[Optional[int], typer.Option("--limit", "-l", min=1, max=100, help="Posts fetched per poll")] = None,
    database: Annotated[Optional[Path], typer.Option("--database", "-d", help="SQLite database path")] = None,
    cycles: Annotated[Optional[int], typer.Option("--cycles", min=1, help="Stop after this many polls")] = None,
):
    """
    Watch the new queue and classify posts as they appear.

    [bold cyan]Examples:[/bold cyan]

    • Default settings: [green]autoshadow watch[/green]
    • Custom config: [green]autoshadow watch --config autoshadow.yaml[/green]
    """
    app_config = load_config_from_cli(
        config_file=config,
        cli_args=build_cli_args(subreddit=subreddit, interval=interval, limit=limit, database=database),
    )

    print_header("autoshadow", f"Watching r/{app_config.reddit.subreddit}")
    print_config_summary(app_config)

    try:
        if not app_config.reddit.has_credentials:
            raise ConfigurationError(
                "Reddit client_id and client_secret are required to watch",
                error_code=ErrorCode.CONFIG_MISSING_REQUIRED,
                config_key="reddit.client_id",
            )

        source = PrawPostSource(
            subreddit=app_config.reddit.subreddit,
            client_id=app_config.reddit.client_id,
            client_secret=app_config.reddit.client_secret,
            user_agent=app_config.reddit.user_agent,
            username=app_config.reddit.username,
            password=app_config.reddit.password,
            limit=app_config.watch.latest_batch_size,
        )
        reconciler = FeedReconciler(capacity=app_config.watch.debounce_capacity)
        watcher = Watcher(source, reconciler)

        with PostStore(app_config.storage.database_path) as store:
            store.init_db()
            chain = FilterFactory.create_filter_chain(
                app_config,
                history=store,
                channel_resolver=FilterFactory.create_channel_resolver(app_config),
            )
            stats = watch_loop(watcher, store, chain, app_config.watch.poll_interval, max_cycles=cycles)
            logger.info(f"Finished: {stats.num_ham} ham, {stats.num_spam} spam, {stats.unknown} unknown")
    except KeyboardInterrupt:
        handle_keyboard_interrupt()
    except AutoShadowError as e:
        handle_fatal_error(e)
