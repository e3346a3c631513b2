"""
Tests for the SQLite post store.
"""

import sqlite3
from datetime import datetime, timezone

import pytest

from autoshadow.core.exceptions import ErrorCode, StoreError
from autoshadow.scrapers import Category
from autoshadow.storage import PostStore


class TestPostStore:
    """Test inserts and queries against an in-memory database."""

    @pytest.fixture(autouse=True)
    def _setup(self, make_post):
        self.make_post = make_post
        self.store = PostStore(":memory:")
        self.store.init_db()
        yield
        self.store.close()

    def test_init_db_is_idempotent(self):
        self.store.init_db()
        assert self.store.count_posts("ferris", 0) == 0

    def test_insert_posts(self):
        posts = [self.make_post(post_id="a"), self.make_post(post_id="b")]
        assert self.store.insert_posts(posts) == 2

    def test_insert_is_idempotent(self):
        self.store.insert_posts([self.make_post(post_id="a", score=1.0)])

        inserted = self.store.insert_posts([
            self.make_post(post_id="a", score=100.0),
            self.make_post(post_id="b"),
        ])

        assert inserted == 1
        assert self.store.count_posts("ferris", 50) == 0

    def test_insert_nothing(self):
        assert self.store.insert_posts([]) == 0

    def test_count_posts(self):
        self.store.insert_posts([
            self.make_post(post_id="a", author="ferris", score=10),
            self.make_post(post_id="b", author="ferris", score=3),
            self.make_post(post_id="c", author="ferris", score=2),
            self.make_post(post_id="d", author="corro", score=50),
        ])

        assert self.store.count_posts("ferris", 3) == 2
        assert self.store.count_posts("ferris", 0) == 3
        assert self.store.count_posts("corro", 3) == 1
        assert self.store.count_posts("nobody", 0) == 0

    def test_get_posts_by_category(self):
        created = datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)
        self.store.insert_posts([
            self.make_post(post_id="b", category=Category.LANG, body="body", link="https://x.com", created=created),
            self.make_post(post_id="a", category=Category.LANG),
            self.make_post(post_id="c", category=Category.GAME),
            self.make_post(post_id="d"),
        ])

        posts = self.store.get_posts(Category.LANG)

        assert [post.id for post in posts] == ["a", "b"]
        stored = posts[1]
        assert stored.category is Category.LANG
        assert stored.body == "body"
        assert stored.link == "https://x.com"
        assert stored.created == created
        assert stored.author == "ferris"
        assert stored.score == 1.0

    def test_get_posts_limit(self):
        self.store.insert_posts([self.make_post(post_id=i, category=Category.GAME) for i in "abc"])
        assert [post.id for post in self.store.get_posts(Category.GAME, limit=2)] == ["a", "b"]

    def test_set_category(self):
        self.store.insert_posts([self.make_post(post_id="a")])

        assert self.store.set_category("a", Category.OTHER) is True
        assert [post.id for post in self.store.get_posts(Category.OTHER)] == ["a"]

        assert self.store.set_category("a", None) is True
        assert self.store.get_posts(Category.OTHER) == []

    def test_set_category_unknown_post(self):
        assert self.store.set_category("missing", Category.LANG) is False

    def test_query_error_wrapped(self):
        self.store._conn.execute("DROP TABLE posts")

        with pytest.raises(StoreError) as exc_info:
            self.store.count_posts("ferris", 0)

        assert exc_info.value.error_code == ErrorCode.STORE_QUERY_FAILED
        assert isinstance(exc_info.value.cause, sqlite3.Error)

    def test_insert_error_code(self):
        self.store._conn.execute("DROP TABLE posts")

        with pytest.raises(StoreError) as exc_info:
            self.store.insert_posts([self.make_post()])

        assert exc_info.value.error_code == ErrorCode.STORE_INSERT_FAILED


class TestPostStoreFile:
    """Test file-backed databases."""

    def test_creates_parent_directories(self, tmp_path, make_post):
        db_path = tmp_path / "nested" / "dir" / "posts.sqlite3"

        with PostStore(db_path) as store:
            store.init_db()
            store.insert_posts([make_post()])

        assert db_path.exists()
        with PostStore(db_path) as store:
            assert store.count_posts("ferris", 0) == 1

    def test_unopenable_database(self, tmp_path):
        with pytest.raises(StoreError) as exc_info:
            PostStore(tmp_path)

        assert exc_info.value.error_code == ErrorCode.STORE_CONNECTION_FAILED
