"""
URL allow/block filtering.

Link posts are judged on their link alone. Otherwise the links inside the
body are scanned: the first allowed link wins outright, and a blocked link
only counts when no allowed link shows up anywhere in the body.
"""

from typing import Optional

from autoshadow.filters.base import AllowedUrl, BlockedUrl, Filter, FilterContext, Verdict
from autoshadow.tokenizer import LinkToken


class UrlPolicyFilter(Filter):
    """
    Filter posts by the domains they link to.

    The allow list is consulted before the block list, both for the post's
    own link and for each in-text link.
    """

    @property
    def name(self) -> str:
        return "AllowOrBlockUrl"

    @property
    def description(self) -> str:
        return "Ham for links to allowed domains, spam for links to blocked domains"

    def apply(self, context: FilterContext) -> Optional[Verdict]:
        post = context.post
        allow = context.config.url.allow_matcher
        block = context.config.url.block_matcher

        if post.link:
            if allow.contains(post.link):
                return Verdict.ham(AllowedUrl(post.link))
            if block.contains(post.link):
                return Verdict.spam(BlockedUrl(post.link))

        verdict = None
        for token in post.tokens():
            if not isinstance(token, LinkToken):
                continue

            if allow.contains(token.url):
                self.logger.debug(f"Post {post.id} links to allowed url {token.url}")
                return Verdict.ham(AllowedUrl(token.url))
            if block.contains(token.url):
                verdict = Verdict.spam(BlockedUrl(token.url))

        return verdict
