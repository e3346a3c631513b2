"""
Live listing watcher.

The "new" listing is polled as a whole, so each poll only says which posts
are currently visible. FeedReconciler turns consecutive snapshots into
"fresh" (just appeared) and "expired" (just dropped out) events. Removed
and re-approved posts make the listing flap, so every emitted id is
remembered in a bounded window and not emitted again for the same kind of
event while it is still in that window.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, FrozenSet, Iterable, List, Optional

from autoshadow.core.exceptions import AuthenticationError, FetchError
from autoshadow.scrapers import Post, PostSource
from autoshadow.utils import truncate_str

logger = logging.getLogger(__name__)

NUM_LATEST_POSTS = 20
DEBOUNCE_MARGIN = 100
LOG_TITLE_TRUNCATE_LEN = 80


@dataclass
class Update:
    """Posts that entered and left the listing since the previous poll."""

    fresh: List[Post] = field(default_factory=list)
    expired: List[Post] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.fresh and not self.expired


class FeedReconciler:
    """
    Diffs consecutive listing snapshots with debounce.

    Attributes:
        live: The previous snapshot
        fresh_debounce: Ids already emitted as fresh, most recent first
        expired_debounce: Ids already emitted as expired, most recent first
    """

    def __init__(self, capacity: int = NUM_LATEST_POSTS + DEBOUNCE_MARGIN):
        """
        Args:
            capacity: Number of ids each debounce window remembers
        """
        if capacity < 1:
            raise ValueError(f"Debounce capacity must be positive, got {capacity}")

        self.capacity = capacity
        self.live: FrozenSet[Post] = frozenset()
        self.fresh_debounce: Deque[str] = deque(maxlen=capacity)
        self.expired_debounce: Deque[str] = deque(maxlen=capacity)

    def reconcile(self, new_listing: Iterable[Post]) -> Update:
        """
        Compare a new snapshot against the live one and replace it.

        Args:
            new_listing: Every post currently visible in the listing

        Returns:
            Update with fresh and expired posts ordered by id
        """
        latest = frozenset(new_listing)

        fresh = self._emit(latest - self.live, self.fresh_debounce)
        expired = self._emit(self.live - latest, self.expired_debounce)

        self.live = latest
        return Update(fresh=fresh, expired=expired)

    @staticmethod
    def _emit(candidates: FrozenSet[Post], debounce: Deque[str]) -> List[Post]:
        emitted = [post for post in sorted(candidates) if post.id not in debounce]
        for post in emitted:
            # deque(maxlen=...) drops from the right when pushing on the left
            debounce.appendleft(post.id)
        return emitted


class Watcher:
    """Polls a PostSource and reconciles each snapshot."""

    def __init__(self, source: PostSource, reconciler: Optional[FeedReconciler] = None):
        self.source = source
        self.reconciler = reconciler or FeedReconciler()

    def update(self) -> Update:
        """
        Fetch the listing and return what changed.

        A failed fetch is logged and reported as an empty update; the live
        snapshot and debounce windows are left untouched. Rejected
        credentials will not recover on the next poll and are re-raised.
        """
        try:
            latest = self.source.fetch_latest()
        except AuthenticationError as e:
            logger.error(f"Reddit rejected the credentials, stopping: {e}")
            raise
        except FetchError as e:
            logger.warning(f"Failed to fetch the latest posts, skipping this cycle: {e}")
            return Update()

        update = self.reconciler.reconcile(latest)
        if not update.is_empty():
            logger.debug(f"Emitting update: {update}")
            logger.info(
                f"Update summary: fresh={_format_titles(update.fresh)} "
                f"expired={_format_titles(update.expired)}"
            )
        return update


def _format_titles(posts: List[Post]) -> List[str]:
    return [truncate_str(post.title, LOG_TITLE_TRUNCATE_LEN) for post in posts]
