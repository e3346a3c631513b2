"""
Tests for the utility helpers.
"""

from unittest.mock import Mock, patch

import pytest
import requests

from autoshadow.utils import api_retry, exponential_backoff_retry, truncate_str


class TestTruncateStr:
    """Test string truncation."""

    def test_short_string_unchanged(self):
        assert truncate_str("hello", 10) == "hello"
        assert truncate_str("hello", 5) == "hello"

    def test_long_string(self):
        result = truncate_str("hello world", 8)

        assert result == "hello..."
        assert len(result) == 8

    def test_tiny_length(self):
        assert truncate_str("hello", 2) == "..."

    def test_empty(self):
        assert truncate_str("", 3) == ""


class TestExponentialBackoffRetry:
    """Test the retry decorator."""

    @patch("autoshadow.utils.time.sleep")
    def test_success_after_failures(self, mock_sleep):
        func = Mock(side_effect=[ValueError("1"), ValueError("2"), "ok"])
        func.__name__ = "func"
        wrapped = exponential_backoff_retry(max_retries=3, initial_delay=1.0, jitter=False)(func)

        assert wrapped() == "ok"
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1.0, 2.0]

    @patch("autoshadow.utils.time.sleep")
    def test_gives_up(self, mock_sleep):
        func = Mock(side_effect=ValueError("always"))
        func.__name__ = "func"
        wrapped = exponential_backoff_retry(max_retries=2, jitter=False)(func)

        with pytest.raises(ValueError, match="always"):
            wrapped()

        assert func.call_count == 3

    @patch("autoshadow.utils.time.sleep")
    def test_only_listed_exceptions_retried(self, mock_sleep):
        func = Mock(side_effect=KeyError("nope"))
        func.__name__ = "func"
        wrapped = exponential_backoff_retry(exceptions=(ValueError,))(func)

        with pytest.raises(KeyError):
            wrapped()

        assert func.call_count == 1
        mock_sleep.assert_not_called()

    @patch("autoshadow.utils.time.sleep")
    def test_jitter_bounds(self, mock_sleep):
        func = Mock(side_effect=[ValueError(), "ok"])
        func.__name__ = "func"
        exponential_backoff_retry(initial_delay=2.0, jitter=True)(func)()

        delay = mock_sleep.call_args.args[0]
        assert 2.0 <= delay <= 2.2


class TestApiRetry:
    """Test the Reddit API retry preset."""

    @patch("autoshadow.utils.time.sleep")
    def test_retries_transport_errors(self, mock_sleep):
        func = Mock(side_effect=[requests.exceptions.ConnectionError(), "ok"])
        func.__name__ = "func"

        assert api_retry(max_retries=1)(func)() == "ok"

    @patch("autoshadow.utils.time.sleep")
    def test_http_errors_not_retried(self, mock_sleep):
        func = Mock(side_effect=requests.exceptions.HTTPError("404"))
        func.__name__ = "func"

        with pytest.raises(requests.exceptions.HTTPError):
            api_retry()(func)()

        assert func.call_count == 1
