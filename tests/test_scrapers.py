"""
Tests for the Post container and the PRAW post source.
"""

from datetime import datetime, timezone
from unittest.mock import Mock, patch

import prawcore
import pytest
import requests

from autoshadow.core.exceptions import AuthenticationError, ErrorCode, FetchError
from autoshadow.scrapers import Category, Post, PrawPostSource
from autoshadow.tokenizer import LinkToken, TextToken


class TestPost:
    """Test Post identity and helpers."""

    def test_equality_and_hash_by_id(self, make_post):
        a = make_post(post_id="a", title="One")
        also_a = make_post(post_id="a", title="Two", score=99.0)

        assert a == also_a
        assert hash(a) == hash(also_a)
        assert len({a, also_a}) == 1
        assert a != make_post(post_id="b")

    def test_ordering_by_id(self, make_post):
        posts = [make_post(post_id=i) for i in ("c", "a", "b")]
        assert [post.id for post in sorted(posts)] == ["a", "b", "c"]
        assert make_post(post_id="a") <= make_post(post_id="a")

    def test_not_equal_to_other_types(self, make_post):
        assert make_post(post_id="a") != "a"

    def test_immutable(self, make_post):
        post = make_post()
        with pytest.raises(AttributeError):
            post.title = "changed"

    def test_tokens(self, make_post):
        post = make_post(body="See https://crates.io/crates/serde\n\nthanks")
        assert post.tokens() == [
            TextToken("See https://crates.io/crates/serde"),
            TextToken("thanks"),
        ]
        assert make_post(body="https://docs.rs").tokens() == [LinkToken(None, "https://docs.rs")]
        assert make_post(body=None).tokens() == []

    def test_repr_truncates_long_fields(self, make_post):
        post = make_post(post_id="t3x", title="T" * 100, body="B" * 100, category=Category.GAME)
        text = repr(post)

        assert text.startswith("Post(id='t3x', author='ferris', score=1.0, ")
        assert "T" * 57 + "..." in text
        assert "B" * 57 + "..." in text
        assert "category='game'" in text
        assert "'2024-01-01T00:00:00+00:00'" in text


class TestFromSubmission:
    """Test conversion of PRAW submissions."""

    def test_self_post(self, mock_submission):
        post = Post.from_submission(mock_submission(title=" Help with lifetimes ", selftext="Why does this fail?"))

        assert post.id == "t3abc"
        assert post.author == "ferris"
        assert post.score == 5.0
        assert post.title == "Help with lifetimes"
        assert post.body == "Why does this fail?"
        assert post.link is None
        assert post.created == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert post.category is None

    def test_link_post(self, mock_submission):
        post = Post.from_submission(mock_submission(is_self=False, url="https://github.com/a/b"))

        assert post.link == "https://github.com/a/b"
        assert post.body is None

    def test_link_post_with_text(self, mock_submission):
        post = Post.from_submission(mock_submission(is_self=False, url="https://github.com/a/b", selftext="ctx"))
        assert post.body == "ctx"

    def test_self_post_whose_body_is_a_url(self, mock_submission):
        post = Post.from_submission(mock_submission(selftext="  https://playrust.com/servers  "))

        assert post.link == "https://playrust.com/servers"
        assert post.body is None

    def test_self_post_whose_title_is_a_url(self, mock_submission):
        post = Post.from_submission(mock_submission(title="https://docs.rs/serde", selftext=""))

        assert post.link == "https://docs.rs/serde"
        assert post.body is None

    def test_url_title_with_body_is_not_a_link(self, mock_submission):
        post = Post.from_submission(mock_submission(title="https://docs.rs/serde", selftext="thoughts?"))

        assert post.link is None
        assert post.body == "thoughts?"

    def test_body_with_url_and_words(self, mock_submission):
        post = Post.from_submission(mock_submission(selftext="look https://docs.rs/serde"))
        assert post.link is None

    def test_empty_self_post(self, mock_submission):
        post = Post.from_submission(mock_submission(selftext=""))

        assert post.body == ""
        assert post.link is None

    def test_deleted_author(self, mock_submission):
        assert Post.from_submission(mock_submission(author=None)).author == "[deleted]"


class TestPrawPostSource:
    """Test fetching through a mocked praw.Reddit."""

    def setup_method(self):
        self.reddit = Mock()
        self.listing = self.reddit.subreddit.return_value.new
        self.source = PrawPostSource(
            subreddit="rust",
            client_id="id",
            client_secret="secret",
            user_agent="test",
            limit=20,
            reddit=self.reddit,
        )

    def test_fetch_latest(self, mock_submission):
        self.listing.return_value = [
            mock_submission(submission_id="a"),
            mock_submission(submission_id="b"),
            mock_submission(submission_id="a"),
        ]

        posts = self.source.fetch_latest()

        assert {post.id for post in posts} == {"a", "b"}
        self.reddit.subreddit.assert_called_with("rust")
        self.listing.assert_called_with(limit=20)

    def test_auth_error(self):
        self.listing.side_effect = prawcore.exceptions.OAuthException(Mock(), "invalid_grant", None)

        with pytest.raises(AuthenticationError) as exc_info:
            self.source.fetch_latest()

        assert exc_info.value.error_code == ErrorCode.AUTH_INVALID_CREDENTIALS

    @patch("autoshadow.utils.time.sleep")
    def test_network_error_after_retries(self, mock_sleep):
        self.listing.side_effect = requests.exceptions.ConnectionError("reset")

        with pytest.raises(FetchError) as exc_info:
            self.source.fetch_latest()

        assert not isinstance(exc_info.value, AuthenticationError)
        assert self.listing.call_count == 4
        assert mock_sleep.call_count == 3

    @patch("autoshadow.utils.time.sleep")
    def test_transient_error_recovers(self, mock_sleep, mock_submission):
        self.listing.side_effect = [
            requests.exceptions.Timeout("slow"),
            [mock_submission(submission_id="a")],
        ]

        assert {post.id for post in self.source.fetch_latest()} == {"a"}

    @patch("autoshadow.scrapers.praw.Reddit")
    def test_builds_reddit_from_credentials(self, mock_reddit):
        PrawPostSource("rust", "id", "secret", "ua", username="u", password="p")

        mock_reddit.assert_called_once_with(
            client_id="id", client_secret="secret", username="u", password="p", user_agent="ua"
        )

    @patch("autoshadow.scrapers.praw.Reddit")
    def test_builds_read_only_reddit(self, mock_reddit):
        PrawPostSource("rust", "id", "secret", "ua")
        mock_reddit.assert_called_once_with(client_id="id", client_secret="secret", user_agent="ua")
