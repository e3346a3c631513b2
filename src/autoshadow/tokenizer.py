"""
Markdown tokenizer for post bodies.

Reduces a markdown body to the three kinds of content the filters care
about: code, links and plain text. Structural markup (lists, quotes,
emphasis, tables, images, rules, line breaks) is dropped.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Union
from urllib.parse import urlsplit

from markdown_it import MarkdownIt
from markdown_it.token import Token as MdToken


class Lang(Enum):
    """Languages recognized from a fenced code block's info string."""

    BASH = "bash"
    C = "c"
    CPP = "cpp"
    GO = "go"
    JAVASCRIPT = "javascript"
    PYTHON = "python"
    RUST = "rust"
    SHELL = "shell"

    @classmethod
    def from_tag(cls, tag: str) -> Optional['Lang']:
        """Map a fence tag such as 'rs' or 'py' to a Lang, or None if unknown."""
        return _LANG_TAGS.get(tag)


_LANG_TAGS = {
    "bash": Lang.BASH,
    "c": Lang.C,
    "cpp": Lang.CPP,
    "go": Lang.GO,
    "js": Lang.JAVASCRIPT,
    "python": Lang.PYTHON,
    "py": Lang.PYTHON,
    "rust": Lang.RUST,
    "rs": Lang.RUST,
    "sh": Lang.SHELL,
}


@dataclass(frozen=True)
class CodeToken:
    lang: Optional[Lang]
    text: str


@dataclass(frozen=True)
class LinkToken:
    text: Optional[str]
    url: str


@dataclass(frozen=True)
class TextToken:
    text: str


Token = Union[CodeToken, LinkToken, TextToken]

_parser = MarkdownIt("commonmark").enable(["table", "strikethrough"])


def tokenize(body: str) -> List[Token]:
    """
    Tokenize a markdown body.

    Args:
        body: Markdown text of a post

    Returns:
        Tokens in source order
    """
    return list(iter_tokens(body))


def iter_tokens(body: str) -> Iterator[Token]:
    """Lazily yield the tokens of a markdown body."""
    for block in _parser.parse(body):
        if block.type == "fence":
            yield CodeToken(lang=_fence_lang(block.info), text=_code_text(block.content))
        elif block.type == "code_block":
            yield CodeToken(lang=None, text=_code_text(block.content))
        elif block.type == "inline":
            yield from _inline_tokens(block.children or [])


def _inline_tokens(children: Sequence[MdToken]) -> Iterator[Token]:
    it = iter(children)
    for child in it:
        if child.type == "text":
            if child.content:
                yield _text_or_link(child.content)
        elif child.type == "code_inline":
            yield CodeToken(lang=None, text=child.content)
        elif child.type == "link_open" and child.markup != "autolink":
            url = str(child.attrGet("href") or "")
            texts = []
            for inner in it:
                if inner.type == "link_close":
                    break
                if inner.type == "text" and inner.content:
                    texts.append(inner.content)
            yield LinkToken(text="\n".join(texts), url=url)
        # Everything else (emphasis, images, breaks, inline html,
        # autolink delimiters) carries no token of its own


def _text_or_link(text: str) -> Token:
    words = text.split()
    if len(words) == 1 and _is_absolute_url(words[0]):
        return LinkToken(text=None, url=words[0])
    return TextToken(text=text)


def _is_absolute_url(candidate: str) -> bool:
    if not candidate.startswith(("https://", "http://")):
        return False
    try:
        parts = urlsplit(candidate)
    except ValueError:
        return False
    return bool(parts.scheme and parts.netloc)


def _fence_lang(info: str) -> Optional[Lang]:
    words = info.split()
    if not words:
        return None
    return Lang.from_tag(words[0])


def _code_text(content: str) -> str:
    return "\n".join(content.splitlines())
