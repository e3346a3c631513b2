"""
Shared Test Configuration and Fixtures

Post factories, configuration builders and in-memory stand-ins for the
external collaborators (post history, channel resolver, post source).
"""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Set
from unittest.mock import Mock

import pytest

from autoshadow.core.config.models import AppConfig
from autoshadow.core.exceptions import FetchError, StoreError
from autoshadow.scrapers import Post


class FakeHistory:
    """PostHistory backed by a dict of author -> count."""

    def __init__(self, counts: Optional[Dict[str, int]] = None, error: Optional[Exception] = None):
        self.counts = counts or {}
        self.error = error
        self.calls: List[tuple] = []

    def count_posts(self, author: str, min_score: float) -> int:
        self.calls.append((author, min_score))
        if self.error is not None:
            raise self.error
        return self.counts.get(author, 0)


class FakeResolver:
    """ChannelResolver backed by a dict of url -> channel id."""

    def __init__(self, channels: Optional[Dict[str, str]] = None, error: Optional[Exception] = None):
        self.channels = channels or {}
        self.error = error
        self.calls: List[str] = []

    def resolve(self, url: str) -> Optional[str]:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.channels.get(url)


class FakeSource:
    """PostSource that replays a scripted list of snapshots (or errors)."""

    def __init__(self, snapshots: Iterable):
        self.snapshots = list(snapshots)

    def fetch_latest(self) -> Set[Post]:
        snapshot = self.snapshots.pop(0)
        if isinstance(snapshot, Exception):
            raise snapshot
        return set(snapshot)


@pytest.fixture
def make_post():
    """Factory for Post objects with sensible defaults."""
    def _make_post(
        post_id: str = "abc123",
        title: str = "Sample post",
        body: Optional[str] = None,
        link: Optional[str] = None,
        author: str = "ferris",
        score: float = 1.0,
        **kwargs,
    ) -> Post:
        return Post(
            id=post_id,
            author=author,
            score=score,
            title=title,
            created=kwargs.pop("created", datetime(2024, 1, 1, tzinfo=timezone.utc)),
            body=body,
            link=link,
            **kwargs,
        )
    return _make_post


@pytest.fixture
def make_config():
    """Factory for AppConfig objects built from plain dictionaries."""
    def _make_config(
        allow: Optional[List[str]] = None,
        block: Optional[List[str]] = None,
        trusted_channels: Optional[List[str]] = None,
        **kwargs,
    ) -> AppConfig:
        return AppConfig(
            url={"allow": allow or [], "block": block or []},
            youtube={"trusted_channels": trusted_channels or []},
            **kwargs,
        )
    return _make_config


@pytest.fixture
def app_config(make_config):
    """A configuration resembling the production allow/block lists."""
    return make_config(
        allow=["github.com", "docs.rs", "crates.io", "blog.rust-lang.org", "rust-lang.org"],
        block=["rust.facepunch.com", "playrust.com", "steampowered.com"],
        trusted_channels=["UCaYhcUwRBNscFNUKTjgPFiA"],
    )


@pytest.fixture
def history():
    return FakeHistory()


@pytest.fixture
def failing_history():
    return FakeHistory(error=StoreError("database is locked"))


@pytest.fixture
def fake_history_cls():
    return FakeHistory


@pytest.fixture
def fake_resolver_cls():
    return FakeResolver


@pytest.fixture
def fake_source_cls():
    return FakeSource


@pytest.fixture
def fetch_error():
    return FetchError("connection reset")


@pytest.fixture
def mock_submission():
    """Factory for PRAW-like submission mocks."""
    def _mock_submission(
        submission_id: str = "t3abc",
        title: str = "Sample post",
        selftext: str = "",
        url: str = "https://www.reddit.com/r/rust/comments/t3abc/sample_post/",
        is_self: bool = True,
        author: Optional[str] = "ferris",
        score: int = 5,
        created_utc: float = 1704067200.0,
    ) -> Mock:
        submission = Mock()
        submission.id = submission_id
        submission.title = title
        submission.selftext = selftext
        submission.url = url
        submission.is_self = is_self
        submission.score = score
        submission.created_utc = created_utc
        if author is None:
            submission.author = None
        else:
            submission.author = Mock()
            submission.author.name = author
        return submission
    return _mock_submission
