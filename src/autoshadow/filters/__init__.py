"""
Post Classification Filters

Each filter inspects one post and returns a Ham/Spam verdict or abstains.
Filters run in a fixed priority order and the first verdict wins.

Key Components:
- Filter: Abstract base class for all filters
- FilterChain: Ordered chain with full trace and first-verdict lookup
- FilterFactory: Builds the canonical chain from configuration
- code_heuristic: Syntactic detection of Rust code in free text
"""

from .base import (
    AllowedUrl,
    BlockedUrl,
    DetectedRustCode,
    FencedCodeBlock,
    Filter,
    FilterChain,
    FilterContext,
    KnownChannel,
    ReputableAuthor,
    Verdict,
    VerdictKind,
)
from .factory import FilterFactory
from .known_channel import KnownChannelFilter
from .reputable_author import ReputableAuthorFilter
from .rust_code import RustCodeFilter
from .url_policy import UrlPolicyFilter

__all__ = [
    "Filter",
    "FilterChain",
    "FilterContext",
    "FilterFactory",
    "Verdict",
    "VerdictKind",
    "AllowedUrl",
    "BlockedUrl",
    "ReputableAuthor",
    "KnownChannel",
    "FencedCodeBlock",
    "DetectedRustCode",
    "UrlPolicyFilter",
    "ReputableAuthorFilter",
    "KnownChannelFilter",
    "RustCodeFilter",
]
