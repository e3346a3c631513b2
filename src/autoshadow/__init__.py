"""
autoshadow - keeps an eye on r/rust's new queue

Sorts posts about the Rust programming language from posts about the Rust
video game, and tracks which posts come and go from the live listing.
"""

__version__ = "0.1.0"
