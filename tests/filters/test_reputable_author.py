"""
Tests for ReputableAuthorFilter functionality.
"""

import pytest

from autoshadow.core.exceptions import StoreError
from autoshadow.filters.base import FilterChain, FilterContext, ReputableAuthor, Verdict
from autoshadow.filters.reputable_author import (
    KARMA_THRESHOLD, NUM_POSTS_THRESHOLD, ReputableAuthorFilter
)


class TestReputableAuthorFilter:
    """Test author history lookups."""

    @pytest.fixture(autouse=True)
    def _setup(self, make_config, make_post):
        self.filter_obj = ReputableAuthorFilter()
        self.config = make_config()
        self.post = make_post(author="ferris")

    def test_name(self):
        assert self.filter_obj.name == "ReputableAuthor"

    def test_reputable_author(self, fake_history_cls):
        history = fake_history_cls({"ferris": 5})

        verdict = self.filter_obj.apply(FilterContext(self.post, self.config, history))

        assert verdict == Verdict.ham(ReputableAuthor(author="ferris", num_reputable_posts=5))
        assert history.calls == [("ferris", KARMA_THRESHOLD)]

    def test_exactly_at_threshold(self, fake_history_cls):
        history = fake_history_cls({"ferris": NUM_POSTS_THRESHOLD})
        verdict = self.filter_obj.apply(FilterContext(self.post, self.config, history))
        assert verdict.is_ham

    def test_below_threshold(self, fake_history_cls):
        history = fake_history_cls({"ferris": NUM_POSTS_THRESHOLD - 1})
        assert self.filter_obj.apply(FilterContext(self.post, self.config, history)) is None

    def test_unknown_author(self, history):
        assert self.filter_obj.apply(FilterContext(self.post, self.config, history)) is None

    def test_store_error_propagates(self, failing_history):
        with pytest.raises(StoreError):
            self.filter_obj.apply(FilterContext(self.post, self.config, failing_history))

    def test_store_error_is_no_verdict_in_chain(self, failing_history):
        chain = FilterChain([self.filter_obj], self.config, failing_history)
        assert chain.first_verdict(self.post) is None
