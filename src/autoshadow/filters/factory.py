"""
Filter Factory for building the classification chain.

Filters are looked up by name in a registry and assembled in the canonical
priority order unless a different order is asked for.
"""

import logging
from typing import Dict, List, Optional, Sequence, Type

from autoshadow.channels import ChannelResolver, YoutubeChannelResolver
from autoshadow.core.config.models import AppConfig
from autoshadow.filters.base import Filter, FilterChain
from autoshadow.filters.known_channel import KnownChannelFilter
from autoshadow.filters.reputable_author import ReputableAuthorFilter
from autoshadow.filters.rust_code import RustCodeFilter
from autoshadow.filters.url_policy import UrlPolicyFilter
from autoshadow.storage import PostHistory

logger = logging.getLogger(__name__)


class FilterFactory:
    """
    Factory class for creating filter instances and chains.
    """

    # Registry of available filters, in priority order
    FILTER_REGISTRY: Dict[str, Type[Filter]] = {
        'AllowOrBlockUrl': UrlPolicyFilter,
        'ReputableAuthor': ReputableAuthorFilter,
        'YoutubeChannel': KnownChannelFilter,
        'ContainsRustCode': RustCodeFilter,
    }

    DEFAULT_ORDER: List[str] = list(FILTER_REGISTRY)

    @classmethod
    def create_filter(cls, name: str) -> Filter:
        """
        Create a single filter instance.

        Args:
            name: Registered filter name

        Returns:
            Filter instance

        Raises:
            ValueError: If the filter name is unknown
        """
        if name not in cls.FILTER_REGISTRY:
            available = ', '.join(cls.FILTER_REGISTRY)
            raise ValueError(f"Unknown filter '{name}'. Available filters: {available}")
        return cls.FILTER_REGISTRY[name]()

    @classmethod
    def create_channel_resolver(cls, config: AppConfig) -> Optional[ChannelResolver]:
        """Build the default resolver, or None when channel lookups are disabled."""
        if not config.youtube.resolve_channels or not config.youtube.trusted_channels:
            return None
        return YoutubeChannelResolver(
            timeout=config.youtube.timeout,
            user_agent=config.reddit.user_agent,
        )

    @classmethod
    def create_filter_chain(
        cls,
        config: AppConfig,
        history: PostHistory,
        channel_resolver: Optional[ChannelResolver] = None,
        names: Optional[Sequence[str]] = None,
    ) -> FilterChain:
        """
        Create a filter chain.

        Args:
            config: Application configuration
            history: Author history used by ReputableAuthor
            channel_resolver: Channel lookup used by YoutubeChannel
            names: Filter names in priority order (defaults to the canonical order)

        Returns:
            FilterChain instance
        """
        filters = [cls.create_filter(name) for name in (names or cls.DEFAULT_ORDER)]
        chain = FilterChain(filters, config, history, channel_resolver)
        logger.debug(f"Created {chain}")
        return chain
