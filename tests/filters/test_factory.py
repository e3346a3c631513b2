"""
Tests for FilterFactory functionality.

Covers filter creation by name, channel resolver creation and the default
chain order.
"""

import pytest

from autoshadow.channels import YoutubeChannelResolver
from autoshadow.core.config.models import AppConfig
from autoshadow.filters.base import AllowedUrl, Verdict
from autoshadow.filters.factory import FilterFactory
from autoshadow.filters.known_channel import KnownChannelFilter
from autoshadow.filters.reputable_author import ReputableAuthorFilter
from autoshadow.filters.rust_code import RustCodeFilter
from autoshadow.filters.url_policy import UrlPolicyFilter


class TestFilterFactory:
    """Test filter and chain creation."""

    def test_create_each_filter(self):
        assert isinstance(FilterFactory.create_filter("AllowOrBlockUrl"), UrlPolicyFilter)
        assert isinstance(FilterFactory.create_filter("ReputableAuthor"), ReputableAuthorFilter)
        assert isinstance(FilterFactory.create_filter("YoutubeChannel"), KnownChannelFilter)
        assert isinstance(FilterFactory.create_filter("ContainsRustCode"), RustCodeFilter)

    def test_registry_names_match_filter_names(self):
        for name in FilterFactory.FILTER_REGISTRY:
            assert FilterFactory.create_filter(name).name == name

    def test_unknown_filter(self):
        with pytest.raises(ValueError, match="Unknown filter 'Nope'"):
            FilterFactory.create_filter("Nope")

    def test_default_order(self):
        assert FilterFactory.DEFAULT_ORDER == [
            "AllowOrBlockUrl", "ReputableAuthor", "YoutubeChannel", "ContainsRustCode"
        ]

    def test_create_filter_chain(self, app_config, history):
        chain = FilterFactory.create_filter_chain(app_config, history)

        assert [f.name for f in chain.filters] == FilterFactory.DEFAULT_ORDER
        assert chain.config is app_config
        assert chain.history is history
        assert chain.channel_resolver is None

    def test_create_filter_chain_subset(self, app_config, history):
        chain = FilterFactory.create_filter_chain(app_config, history, names=["ContainsRustCode"])
        assert len(chain) == 1

    def test_channel_resolver_created(self, app_config):
        resolver = FilterFactory.create_channel_resolver(app_config)

        assert isinstance(resolver, YoutubeChannelResolver)
        assert resolver.timeout == app_config.youtube.timeout
        assert resolver.session.headers["User-Agent"] == app_config.reddit.user_agent

    def test_channel_resolver_disabled(self, make_config):
        assert FilterFactory.create_channel_resolver(make_config()) is None
        config = AppConfig(youtube={"trusted_channels": ["UCx"], "resolve_channels": False})
        assert FilterFactory.create_channel_resolver(config) is None


class TestDefaultChain:
    """Test the canonical priority order end to end."""

    @pytest.fixture(autouse=True)
    def _setup(self, app_config, fake_history_cls, make_post):
        self.history = fake_history_cls({"ferris": 10})
        self.chain = FilterFactory.create_filter_chain(app_config, self.history)
        self.make_post = make_post

    def test_allowed_link_beats_everything(self):
        post = self.make_post(body="[repo](https://github.com/a/b) and [server](https://playrust.com/)")
        assert self.chain.first_verdict(post) == Verdict.ham(AllowedUrl("https://github.com/a/b"))

    def test_blocked_link_beats_reputable_author(self):
        """Test a later ham filter never overrides an earlier spam verdict."""
        post = self.make_post(link="https://playrust.com/wipe", author="ferris")

        outcomes = self.chain.run_all(post)

        assert outcomes[0][1].is_spam
        assert outcomes[1][1].is_ham
        assert self.chain.first_verdict(post).is_spam
        assert FilterFactory.DEFAULT_ORDER[0] == self.chain.winner(outcomes)[0]

    def test_reputable_author(self):
        verdict = self.chain.first_verdict(self.make_post(body="hello", author="ferris"))
        assert verdict.reason.author == "ferris"

    def test_code_after_unknown_author(self):
        post = self.make_post(body="```rust\nfn main() {}\n```", author="newcomer")
        assert self.chain.first_verdict(post).is_ham

    def test_unknown(self):
        assert self.chain.first_verdict(self.make_post(body="Anyone on EU 3?", author="newcomer")) is None
