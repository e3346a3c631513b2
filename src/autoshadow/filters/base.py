"""
Filter Base Classes

Defines the verdict types, the shared filter context and the ordered filter
chain. Every filter looks at one post and either returns a Verdict or
abstains with None; the first filter in chain order that returns a Verdict
decides the post.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator, List, Optional, Sequence, Tuple, Union

from autoshadow.core.exceptions import AutoShadowError
from autoshadow.filters.code_heuristic import Heuristic
from autoshadow.scrapers import Post
from autoshadow.tokenizer import Lang

if TYPE_CHECKING:
    from autoshadow.channels import ChannelResolver
    from autoshadow.core.config.models import AppConfig
    from autoshadow.storage import PostHistory


# ---------------------------------------------------------------------------
# Reasons
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AllowedUrl:
    url: str


@dataclass(frozen=True)
class BlockedUrl:
    url: str


@dataclass(frozen=True)
class ReputableAuthor:
    author: str
    num_reputable_posts: int


@dataclass(frozen=True)
class KnownChannel:
    channel_id: str


@dataclass(frozen=True)
class FencedCodeBlock:
    lang: Lang


@dataclass(frozen=True)
class DetectedRustCode:
    heuristic: Heuristic


Reason = Union[AllowedUrl, BlockedUrl, ReputableAuthor, KnownChannel, FencedCodeBlock, DetectedRustCode]


class VerdictKind(Enum):
    HAM = "ham"
    SPAM = "spam"


@dataclass(frozen=True)
class Verdict:
    """
    Outcome of a filter.

    Attributes:
        kind: Whether the post is on-topic (ham) or off-topic (spam)
        reason: Evidence explaining the decision
    """
    kind: VerdictKind
    reason: Reason

    @classmethod
    def ham(cls, reason: Reason) -> 'Verdict':
        return cls(VerdictKind.HAM, reason)

    @classmethod
    def spam(cls, reason: Reason) -> 'Verdict':
        return cls(VerdictKind.SPAM, reason)

    @property
    def is_ham(self) -> bool:
        return self.kind is VerdictKind.HAM

    @property
    def is_spam(self) -> bool:
        return self.kind is VerdictKind.SPAM

    def __str__(self) -> str:
        return f"{self.kind.value.capitalize()}({self.reason})"


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FilterContext:
    """Read-only inputs shared by every filter for one post."""

    post: Post
    config: 'AppConfig'
    history: 'PostHistory'
    channel_resolver: Optional['ChannelResolver'] = None


class Filter(ABC):
    """
    Abstract base class for post filters.

    Filters hold no per-post state; everything they need arrives through
    the FilterContext.
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Stable name used in traces and logs."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what the filter does."""
        pass

    @abstractmethod
    def apply(self, context: FilterContext) -> Optional[Verdict]:
        """
        Apply the filter to a post.

        Args:
            context: The post plus configuration and collaborators

        Returns:
            A Verdict, or None if this filter has no opinion
        """
        pass

    def __str__(self) -> str:
        return f"{self.name}: {self.description}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


FilterOutcome = Tuple[str, Optional[Verdict]]


class FilterChain:
    """
    Runs filters in a fixed priority order.

    ``first_verdict`` stops at the first filter with an opinion, while
    ``run_all`` runs every filter so the full trace can be logged or
    inspected. Later verdicts in a trace never override an earlier one.
    """

    def __init__(
        self,
        filters: Sequence[Filter],
        config: 'AppConfig',
        history: 'PostHistory',
        channel_resolver: Optional['ChannelResolver'] = None,
    ):
        """
        Initialize the filter chain.

        Args:
            filters: Filters in priority order
            config: Application configuration shared by all filters
            history: Author post-history lookup
            channel_resolver: Optional YouTube channel lookup
        """
        self.filters = list(filters)
        self.config = config
        self.history = history
        self.channel_resolver = channel_resolver
        self.logger = logging.getLogger(__name__)

    def context_for(self, post: Post) -> FilterContext:
        return FilterContext(
            post=post,
            config=self.config,
            history=self.history,
            channel_resolver=self.channel_resolver,
        )

    def trace(self, post: Post) -> Iterator[FilterOutcome]:
        """Lazily yield (filter name, verdict) for each filter in order."""
        context = self.context_for(post)
        for filter_instance in self.filters:
            yield filter_instance.name, self._apply(filter_instance, context)

    def run_all(self, post: Post) -> List[FilterOutcome]:
        """Run every filter and return the full trace."""
        return list(self.trace(post))

    def first_verdict(self, post: Post) -> Optional[Verdict]:
        """Return the verdict of the first filter that has one."""
        for _, verdict in self.trace(post):
            if verdict is not None:
                return verdict
        return None

    @staticmethod
    def winner(outcomes: Sequence[FilterOutcome]) -> Optional[FilterOutcome]:
        """Pick the deciding (name, verdict) pair out of a full trace."""
        for outcome in outcomes:
            if outcome[1] is not None:
                return outcome
        return None

    def _apply(self, filter_instance: Filter, context: FilterContext) -> Optional[Verdict]:
        start_time = time.perf_counter()
        try:
            verdict = filter_instance.apply(context)
        except AutoShadowError as e:
            self.logger.warning(
                f"Filter {filter_instance.name} failed on post {context.post.id}, treating as no verdict: {e}"
            )
            verdict = None
        self.logger.debug(
            f"Filter {filter_instance.name} took {(time.perf_counter() - start_time) * 1000:.2f}ms"
        )
        return verdict

    def __len__(self) -> int:
        return len(self.filters)

    def __str__(self) -> str:
        return f"FilterChain({' -> '.join(f.name for f in self.filters)})"
