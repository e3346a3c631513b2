"""
Reputable author filtering.

Authors with a track record of well received posts in the store are
trusted to stay on topic.
"""

from typing import Optional

from autoshadow.filters.base import Filter, FilterContext, ReputableAuthor, Verdict

KARMA_THRESHOLD = 3
NUM_POSTS_THRESHOLD = 2


class ReputableAuthorFilter(Filter):
    """Ham when the author has enough stored posts at or above the karma threshold."""

    @property
    def name(self) -> str:
        return "ReputableAuthor"

    @property
    def description(self) -> str:
        return f"Ham for authors with at least {NUM_POSTS_THRESHOLD} prior posts scoring {KARMA_THRESHOLD}+"

    def apply(self, context: FilterContext) -> Optional[Verdict]:
        author = context.post.author
        # StoreError propagates; the chain logs it and treats it as no verdict
        num_posts = context.history.count_posts(author, KARMA_THRESHOLD)

        if num_posts >= NUM_POSTS_THRESHOLD:
            return Verdict.ham(ReputableAuthor(author=author, num_reputable_posts=num_posts))
        return None
