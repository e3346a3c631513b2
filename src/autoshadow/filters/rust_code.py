"""
Embedded Rust code filtering.
"""

from typing import Optional

from autoshadow.filters.base import DetectedRustCode, FencedCodeBlock, Filter, FilterContext, Verdict
from autoshadow.filters.code_heuristic import detect
from autoshadow.tokenizer import CodeToken


class RustCodeFilter(Filter):
    """
    Ham for posts that contain code.

    A code block tagged with any recognized language is enough on its own,
    since game posts practically never include one. Untagged code is run
    through the syntactic heuristics. This filter never returns spam.
    """

    @property
    def name(self) -> str:
        return "ContainsRustCode"

    @property
    def description(self) -> str:
        return "Ham for posts with tagged code blocks or Rust-looking code"

    def apply(self, context: FilterContext) -> Optional[Verdict]:
        for token in context.post.tokens():
            if not isinstance(token, CodeToken):
                continue

            if token.lang is not None:
                return Verdict.ham(FencedCodeBlock(token.lang))

            heuristic = detect(token.text)
            if heuristic is not None:
                self.logger.debug(f"Post {context.post.id} matched {heuristic}")
                return Verdict.ham(DetectedRustCode(heuristic))

        return None
