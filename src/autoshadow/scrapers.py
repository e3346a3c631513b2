"""
Reddit post container and post sources.

Post is the immutable value object that flows through the watcher, the
filter chain and the store. PrawPostSource supplies snapshots of a
subreddit's "new" listing.
"""

import functools
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional, Protocol, Set
from urllib.parse import urlsplit

import praw
from praw.exceptions import PRAWException
import prawcore
import requests

from autoshadow.core.exceptions import AuthenticationError, ErrorCode, FetchError
from autoshadow.tokenizer import Token, tokenize
from autoshadow.utils import api_retry, truncate_str

logger = logging.getLogger(__name__)

DEBUG_FIELD_TRUNCATE_LEN = 60


class Category(Enum):
    """Operator-assigned label for a stored post."""

    LANG = "lang"
    GAME = "game"
    OTHER = "other"


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Post:
    """
    A single subreddit post.

    Identity, equality, hashing and ordering all go through ``id`` so posts
    can be kept in sets and diffed between snapshots.
    """

    id: str
    author: str
    score: float
    title: str
    created: datetime
    body: Optional[str] = None
    link: Optional[str] = None
    category: Optional[Category] = None

    def tokens(self) -> List[Token]:
        """Tokenize the body. Re-parses on every call."""
        if self.body is None:
            return []
        return tokenize(self.body)

    @classmethod
    def from_submission(cls, submission: Any) -> 'Post':
        """
        Build a Post from a PRAW submission.

        Self posts whose title (with an empty body) or whose whole body is a
        URL are treated as link posts.

        Args:
            submission: praw.models.Submission or any object with the same attributes

        Returns:
            Post for the submission
        """
        title = (submission.title or "").strip()
        selftext = (getattr(submission, 'selftext', "") or "").strip()
        author = submission.author.name if submission.author else "[deleted]"
        created = datetime.fromtimestamp(float(submission.created_utc), timezone.utc)

        if submission.is_self:
            if not selftext and _is_url(title):
                link, body = title, None
            elif _is_url(selftext):
                link, body = selftext, None
            else:
                link, body = None, selftext
        else:
            link, body = submission.url, selftext or None

        return cls(
            id=submission.id,
            author=author,
            score=float(submission.score),
            title=title,
            created=created,
            body=body,
            link=link,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Post):
            return NotImplemented
        return self.id == other.id

    def __lt__(self, other: 'Post') -> bool:
        if not isinstance(other, Post):
            return NotImplemented
        return self.id < other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        body = None if self.body is None else truncate_str(self.body, DEBUG_FIELD_TRUNCATE_LEN)
        category = None if self.category is None else self.category.value
        return (
            f"Post(id={self.id!r}, author={self.author!r}, score={self.score}, "
            f"title={truncate_str(self.title, DEBUG_FIELD_TRUNCATE_LEN)!r}, "
            f"created={self.created.isoformat()!r}, body={body!r}, "
            f"link={self.link!r}, category={category!r})"
        )


def _is_url(text: str) -> bool:
    if not text or len(text.split()) != 1:
        return False
    try:
        parts = urlsplit(text)
    except ValueError:
        return False
    return bool(parts.scheme and parts.netloc)


class PostSource(Protocol):
    """Supplies snapshots of the currently live posts."""

    def fetch_latest(self) -> Set[Post]:
        """
        Return the current snapshot.

        Raises:
            FetchError: If the listing could not be fetched
        """
        ...


class PrawPostSource:
    """
    Fetches a subreddit's "new" listing through the Reddit API (PRAW).
    """

    def __init__(
        self,
        subreddit: str,
        client_id: str,
        client_secret: str,
        user_agent: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        limit: int = 20,
        reddit: Optional[praw.Reddit] = None,
    ):
        """
        Initialize the source.

        Args:
            subreddit: Subreddit to watch, without the 'r/' prefix
            client_id: Reddit API client ID
            client_secret: Reddit API client secret
            user_agent: User agent string for API requests
            username: Optional username for authenticated access
            password: Optional password for authenticated access
            limit: Number of posts to fetch per snapshot
            reddit: Pre-built praw.Reddit instance (used instead of the credentials)
        """
        self.subreddit = subreddit
        self.limit = limit

        if reddit is not None:
            self.reddit = reddit
        elif username and password:
            self.reddit = praw.Reddit(
                client_id=client_id,
                client_secret=client_secret,
                username=username,
                password=password,
                user_agent=user_agent,
            )
        else:
            self.reddit = praw.Reddit(
                client_id=client_id,
                client_secret=client_secret,
                user_agent=user_agent,
            )

    def fetch_latest(self) -> Set[Post]:
        """Fetch the latest ``limit`` posts, wrapping API failures in FetchError."""
        try:
            return self._fetch()
        except (
            prawcore.exceptions.OAuthException,
            prawcore.exceptions.InvalidToken,
            prawcore.exceptions.Forbidden,
        ) as e:
            raise AuthenticationError(f"Reddit rejected the configured credentials: {e}", cause=e)
        except prawcore.exceptions.TooManyRequests as e:
            raise FetchError(
                f"Rate limited while fetching r/{self.subreddit}: {e}",
                error_code=ErrorCode.FETCH_RATE_LIMITED,
                cause=e,
            )
        except (prawcore.exceptions.PrawcoreException, PRAWException) as e:
            raise FetchError(f"Failed to fetch r/{self.subreddit}: {e}", cause=e)
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Network error fetching r/{self.subreddit}: {e}", cause=e)

    @api_retry(max_retries=3, initial_delay=0.7)
    def _fetch(self) -> Set[Post]:
        posts = set()
        for submission in self.reddit.subreddit(self.subreddit).new(limit=self.limit):
            posts.add(Post.from_submission(submission))
        logger.debug(f"Fetched {len(posts)} posts from r/{self.subreddit}")
        return posts
