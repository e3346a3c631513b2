"""
SQLite post store.

Expired posts are recorded here once they leave the live listing. The store
doubles as the author history consulted by the reputable-author filter and
as the corpus replayed by ``autoshadow analyze``.
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Protocol, Union

from autoshadow.core.exceptions import ErrorCode, StoreError
from autoshadow.scrapers import Category, Post

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS posts (
    id TEXT PRIMARY KEY NOT NULL,
    author TEXT NOT NULL,
    score REAL NOT NULL,
    title TEXT NOT NULL,
    created REAL NOT NULL,
    body TEXT,
    link TEXT,
    category TEXT
);
CREATE INDEX IF NOT EXISTS idx_posts_author_score ON posts (author, score);
CREATE INDEX IF NOT EXISTS idx_posts_category ON posts (category);
"""


class PostHistory(Protocol):
    """Author post-history lookup used by the reputable-author filter."""

    def count_posts(self, author: str, min_score: float) -> int:
        """
        Count an author's stored posts scoring at least ``min_score``.

        Raises:
            StoreError: If the lookup failed
        """
        ...


class PostStore:
    """
    Posts persisted in a single SQLite database file.

    Use as a context manager, or call ``close()`` when done.
    """

    def __init__(self, db_path: Union[str, Path]):
        """
        Open (creating if needed) the database.

        Args:
            db_path: Path to the SQLite file, or ':memory:'

        Raises:
            StoreError: If the database cannot be opened
        """
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Connecting to database {self.db_path}")
        try:
            self._conn = sqlite3.connect(self.db_path, timeout=30.0)
        except sqlite3.Error as e:
            raise StoreError(
                f"Failed to open database {self.db_path}: {e}",
                error_code=ErrorCode.STORE_CONNECTION_FAILED,
                cause=e,
            )
        self._conn.row_factory = sqlite3.Row

    def __enter__(self) -> 'PostStore':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def _transaction(self, error_code: ErrorCode = ErrorCode.STORE_QUERY_FAILED) -> Iterator[sqlite3.Connection]:
        """Commit on success, roll back and raise StoreError on failure."""
        try:
            yield self._conn
            self._conn.commit()
        except sqlite3.Error as e:
            self._conn.rollback()
            raise StoreError(f"Database operation failed: {e}", error_code=error_code, cause=e)

    def init_db(self) -> None:
        """Create the schema if it does not exist yet."""
        with self._transaction() as conn:
            conn.executescript(SCHEMA)

    def insert_posts(self, posts: Iterable[Post]) -> int:
        """
        Insert posts, silently skipping ids that are already stored.

        Args:
            posts: Posts to persist

        Returns:
            Number of rows actually inserted
        """
        rows = [
            (
                post.id,
                post.author,
                post.score,
                post.title,
                post.created.timestamp(),
                post.body,
                post.link,
                post.category.value if post.category else None,
            )
            for post in posts
        ]
        if not rows:
            return 0

        with self._transaction(ErrorCode.STORE_INSERT_FAILED) as conn:
            before = conn.total_changes
            conn.executemany(
                "INSERT OR IGNORE INTO posts "
                "(id, author, score, title, created, body, link, category) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                rows,
            )
            inserted = conn.total_changes - before

        logger.debug(f"Inserted {inserted} of {len(rows)} posts")
        return inserted

    def count_posts(self, author: str, min_score: float) -> int:
        """Count stored posts by ``author`` with a score of at least ``min_score``."""
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT COUNT(id) FROM posts WHERE author = ? AND score >= ?",
                (author, min_score),
            ).fetchone()
        return int(row[0])

    def get_posts(self, category: Category, limit: Optional[int] = None) -> List[Post]:
        """
        Load stored posts labelled with ``category``.

        Args:
            category: Category to select
            limit: Maximum number of posts, or None for all of them

        Returns:
            Posts ordered by id
        """
        query = "SELECT * FROM posts WHERE category = ? ORDER BY id"
        params: tuple = (category.value,)
        if limit is not None:
            query += " LIMIT ?"
            params += (limit,)

        with self._transaction() as conn:
            rows = conn.execute(query, params).fetchall()
        return [_row_to_post(row) for row in rows]

    def set_category(self, post_id: str, category: Optional[Category]) -> bool:
        """
        Label a stored post.

        Returns:
            False if no post with that id is stored
        """
        with self._transaction() as conn:
            cursor = conn.execute(
                "UPDATE posts SET category = ? WHERE id = ?",
                (category.value if category else None, post_id),
            )
        return cursor.rowcount > 0


def _row_to_post(row: sqlite3.Row) -> Post:
    return Post(
        id=row["id"],
        author=row["author"],
        score=float(row["score"]),
        title=row["title"],
        created=datetime.fromtimestamp(row["created"], timezone.utc),
        body=row["body"],
        link=row["link"],
        category=Category(row["category"]) if row["category"] else None,
    )
