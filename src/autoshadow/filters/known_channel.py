"""
Known YouTube channel filtering.
"""

from typing import Optional

from autoshadow.channels import is_youtube_url
from autoshadow.filters.base import Filter, FilterContext, KnownChannel, Verdict
from autoshadow.tokenizer import LinkToken


class KnownChannelFilter(Filter):
    """
    Ham for videos published by a trusted channel.

    Looks at the post link, or the first in-text link when the post has
    none. Without a resolver, a trusted list, or a resolvable channel id
    the filter has no opinion.
    """

    @property
    def name(self) -> str:
        return "YoutubeChannel"

    @property
    def description(self) -> str:
        return "Ham for videos from trusted YouTube channels"

    def apply(self, context: FilterContext) -> Optional[Verdict]:
        youtube = context.config.youtube
        if context.channel_resolver is None or not youtube.trusted_channels:
            return None

        url = self._candidate_url(context)
        if url is None or not is_youtube_url(url):
            return None

        channel_id = context.channel_resolver.resolve(url)
        if channel_id is None:
            return None

        if channel_id in youtube.trusted_channels:
            return Verdict.ham(KnownChannel(channel_id))

        self.logger.debug(f"Channel {channel_id} for {url} is not trusted")
        return None

    @staticmethod
    def _candidate_url(context: FilterContext) -> Optional[str]:
        post = context.post
        if post.link:
            return post.link
        for token in post.tokens():
            if isinstance(token, LinkToken):
                return token.url
        return None
