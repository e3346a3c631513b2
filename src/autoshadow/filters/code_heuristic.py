"""
Heuristic detection of Rust source code in free text.

The text is lexed into a token tree (identifiers, punctuation, literals and
delimited groups, the same shapes a Rust macro sees) and a small state
machine looks for syntactic fingerprints that rarely show up in posts about
the game: ``foo()``, ``.bar()``, ``baz!()``, ``a::b``, ``{ ... }`` and a
handful of keywords and std type names.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple, Union

from autoshadow.core.exceptions import ErrorCode, ParseError

PUNCT_CHARS = frozenset("~!@#$%^&*-=+|;:,<.>/?'")
OPEN_DELIMITERS = {"(": ")", "[": "]", "{": "}"}
CLOSE_DELIMITERS = frozenset(OPEN_DELIMITERS.values())


# ---------------------------------------------------------------------------
# Token tree
# ---------------------------------------------------------------------------

class Delimiter(Enum):
    PARENTHESIS = "("
    BRACKET = "["
    BRACE = "{"


class Spacing(Enum):
    ALONE = "alone"  # next character is not punctuation
    JOINT = "joint"  # next character is punctuation, e.g. the first ':' of '::'


@dataclass(frozen=True)
class Ident:
    name: str


@dataclass(frozen=True)
class Punct:
    char: str
    spacing: Spacing


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Group:
    delimiter: Delimiter
    stream: Tuple['TokenTree', ...]

    @property
    def is_empty(self) -> bool:
        return not self.stream


TokenTree = Union[Ident, Punct, Literal, Group]


class _Lexer:
    """Single-pass lexer from text to a tuple of TokenTrees."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def lex(self) -> Tuple[TokenTree, ...]:
        # Each stack frame is (delimiter, tokens so far, opening position)
        stack: List[Tuple[Optional[str], List[TokenTree], int]] = [(None, [], 0)]

        while True:
            self._skip_trivia()
            if self.pos >= len(self.text):
                break

            ch = self.text[self.pos]
            tokens = stack[-1][1]

            if ch in OPEN_DELIMITERS:
                stack.append((ch, [], self.pos))
                self.pos += 1
            elif ch in CLOSE_DELIMITERS:
                opener, inner, _ = stack.pop() if len(stack) > 1 else (None, [], 0)
                if opener is None or OPEN_DELIMITERS[opener] != ch:
                    raise ParseError(
                        f"Unexpected closing delimiter {ch!r}",
                        error_code=ErrorCode.PARSE_UNBALANCED_DELIMITER,
                        position=self.pos,
                    )
                stack[-1][1].append(Group(Delimiter(opener), tuple(inner)))
                self.pos += 1
            elif ch.isdigit():
                tokens.append(self._number())
            elif ch == '"' or self._at_prefixed_string():
                tokens.append(self._string())
            elif ch == "'":
                tokens.extend(self._quote())
            elif ch.isalpha() or ch == "_":
                tokens.append(self._ident())
            elif ch in PUNCT_CHARS:
                tokens.append(self._punct())
            else:
                raise ParseError(f"Unexpected character {ch!r}", position=self.pos)

        if len(stack) > 1:
            opener, _, position = stack[-1]
            raise ParseError(
                f"Unclosed delimiter {opener!r}",
                error_code=ErrorCode.PARSE_UNBALANCED_DELIMITER,
                position=position,
            )
        return tuple(stack[0][1])

    def _skip_trivia(self) -> None:
        text = self.text
        while self.pos < len(text):
            if text[self.pos].isspace():
                self.pos += 1
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = len(text) if end == -1 else end + 1
            elif text.startswith("/*", self.pos):
                self._skip_block_comment()
            else:
                break

    def _skip_block_comment(self) -> None:
        start = self.pos
        depth = 0
        while self.pos < len(self.text):
            if self.text.startswith("/*", self.pos):
                depth += 1
                self.pos += 2
            elif self.text.startswith("*/", self.pos):
                depth -= 1
                self.pos += 2
                if depth == 0:
                    return
            else:
                self.pos += 1
        raise ParseError(
            "Unterminated block comment",
            error_code=ErrorCode.PARSE_UNTERMINATED_LITERAL,
            position=start,
        )

    def _ident(self) -> Ident:
        start = self.pos
        # Raw identifiers: r#match
        if self.text.startswith("r#", self.pos) and self._is_ident_start(self.pos + 2):
            self.pos += 2
        while self.pos < len(self.text) and (self.text[self.pos].isalnum() or self.text[self.pos] == "_"):
            self.pos += 1
        return Ident(self.text[start:self.pos])

    def _is_ident_start(self, pos: int) -> bool:
        return pos < len(self.text) and (self.text[pos].isalpha() or self.text[pos] == "_")

    def _number(self) -> Literal:
        start = self.pos
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch.isalnum() or ch == "_":
                self.pos += 1
            elif ch == "." and self.pos + 1 < len(text) and text[self.pos + 1].isdigit():
                # 1.5 is one literal, 1..5 and 1.foo() are not
                self.pos += 1
            else:
                break
        return Literal(text[start:self.pos])

    def _at_prefixed_string(self) -> bool:
        # b"..", r"..", r#".."#, br".."
        text = self.text[self.pos:self.pos + 3]
        return (
            text.startswith(('b"', 'r"', 'r#"', 'br"', 'br#'))
            or (text.startswith('r#') and text[2:3] == '#')
        )

    def _string(self) -> Literal:
        start = self.pos
        text = self.text
        if text[self.pos] == "b":
            self.pos += 1

        if text[self.pos] == "r":
            self.pos += 1
            hashes = 0
            while self.pos < len(text) and text[self.pos] == "#":
                hashes += 1
                self.pos += 1
            if self.pos >= len(text) or text[self.pos] != '"':
                raise ParseError("Malformed raw string", position=start)
            terminator = '"' + "#" * hashes
            end = text.find(terminator, self.pos + 1)
            if end == -1:
                raise ParseError(
                    "Unterminated raw string",
                    error_code=ErrorCode.PARSE_UNTERMINATED_LITERAL,
                    position=start,
                )
            self.pos = end + len(terminator)
            return Literal(text[start:self.pos])

        self.pos += 1  # opening quote
        while self.pos < len(text):
            ch = text[self.pos]
            if ch == "\\":
                self.pos += 2
            elif ch == '"':
                self.pos += 1
                return Literal(text[start:self.pos])
            else:
                self.pos += 1
        raise ParseError(
            "Unterminated string literal",
            error_code=ErrorCode.PARSE_UNTERMINATED_LITERAL,
            position=start,
        )

    def _quote(self) -> List[TokenTree]:
        """Lex a char literal ('a', '\\n') or a lifetime ('a)."""
        start = self.pos
        text = self.text

        if text.startswith("\\", start + 1):
            end = text.find("'", start + 2)
            if end == -1:
                raise ParseError(
                    "Unterminated character literal",
                    error_code=ErrorCode.PARSE_UNTERMINATED_LITERAL,
                    position=start,
                )
            self.pos = end + 1
            return [Literal(text[start:self.pos])]

        if start + 2 < len(text) and text[start + 2] == "'":
            self.pos = start + 3
            return [Literal(text[start:self.pos])]

        if self._is_ident_start(start + 1):
            self.pos += 1
            return [Punct("'", Spacing.JOINT), self._ident()]

        raise ParseError("Stray quote", position=start)

    def _punct(self) -> Punct:
        ch = self.text[self.pos]
        self.pos += 1
        following = self.text[self.pos] if self.pos < len(self.text) else ""
        spacing = Spacing.JOINT if following in PUNCT_CHARS else Spacing.ALONE
        return Punct(ch, spacing)


def parse_token_stream(text: str) -> Tuple[TokenTree, ...]:
    """
    Lex text into a token tree.

    Raises:
        ParseError: If the text has unbalanced delimiters, unterminated
            literals or characters that cannot start a token
    """
    return _Lexer(text).lex()


# ---------------------------------------------------------------------------
# Heuristics
# ---------------------------------------------------------------------------

class Keyword(Enum):
    """Keywords and std names that are unlikely to appear in posts about the game."""

    BTREEMAP = "BTreeMap"
    DERIVE = "derive"
    ENUM = "enum"
    EQ = "Eq"
    F32 = "f32"
    F64 = "f64"
    FN = "fn"
    HASHMAP = "HashMap"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    I128 = "i128"
    IMPL = "impl"
    PARTIAL_EQ = "PartialEq"
    PRINTLN = "println"
    RWLOCK = "RwLock"
    SELF = "Self"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    U128 = "u128"
    VEC = "Vec"

    @classmethod
    def lookup(cls, name: str) -> Optional['Keyword']:
        if name == "vec":
            return cls.VEC
        try:
            return cls(name)
        except ValueError:
            return None


class HeuristicKind(Enum):
    DOUBLE_COLON = "double_colon"
    CURLY_BRACE_PAIR = "curly_brace_pair"
    EMPTY_FUNCTION = "empty_function"
    EMPTY_METHOD = "empty_method"
    EMPTY_FUNCTIONLIKE_MACRO = "empty_functionlike_macro"
    KEYWORD = "keyword"


@dataclass(frozen=True)
class Heuristic:
    """A detected pattern plus the snippet that triggered it."""

    kind: HeuristicKind
    evidence: Optional[str] = None
    keyword: Optional[Keyword] = None

    @classmethod
    def double_colon(cls, left: str, right: str) -> 'Heuristic':
        return cls(HeuristicKind.DOUBLE_COLON, f"{left}::{right}")

    @classmethod
    def curly_brace_pair(cls) -> 'Heuristic':
        return cls(HeuristicKind.CURLY_BRACE_PAIR)

    @classmethod
    def empty_fn(cls, ident: str) -> 'Heuristic':
        return cls(HeuristicKind.EMPTY_FUNCTION, f"{ident}()")

    @classmethod
    def empty_method(cls, ident: str) -> 'Heuristic':
        return cls(HeuristicKind.EMPTY_METHOD, f".{ident}()")

    @classmethod
    def empty_fn_like_macro(cls, ident: str) -> 'Heuristic':
        return cls(HeuristicKind.EMPTY_FUNCTIONLIKE_MACRO, f"{ident}!()")

    @classmethod
    def from_keyword(cls, keyword: Keyword) -> 'Heuristic':
        return cls(HeuristicKind.KEYWORD, keyword.value, keyword)

    def __str__(self) -> str:
        if self.evidence is None:
            return self.kind.value
        return f"{self.kind.value}({self.evidence})"


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------

class State(Enum):
    IDLE = "idle"
    SAW_DOT = "saw_dot"
    SAW_METHOD_IDENT = "saw_method_ident"
    SAW_IDENT = "saw_ident"
    SAW_IDENT_COLON = "saw_ident_colon"
    SAW_IDENT_DOUBLE_COLON = "saw_ident_double_colon"
    SAW_IDENT_BANG = "saw_ident_bang"
    FINAL = "final"
    LIMBO = "limbo"


ABSORBING_STATES = frozenset({State.FINAL, State.LIMBO})


class StateMachine:
    """
    Consumes top-level tokens of one fragment.

    FINAL and LIMBO are traps: once the machine falls into LIMBO the
    fragment can only still match through a nested group, which the caller
    evaluates with a fresh machine.
    """

    def __init__(self) -> None:
        self.state = State.IDLE
        self.ident: Optional[str] = None
        self.result: Optional[Heuristic] = None

    def munch(self, token: TokenTree) -> None:
        if self.state in ABSORBING_STATES:
            return

        if isinstance(token, Group):
            self._munch_group(token)
        elif isinstance(token, Ident):
            self._munch_ident(token.name)
        elif isinstance(token, Punct):
            self._munch_punct(token)
        else:
            self._goto(State.LIMBO)

    def finished(self) -> Optional[Heuristic]:
        return self.result if self.state is State.FINAL else None

    def _munch_group(self, group: Group) -> None:
        if group.delimiter is Delimiter.BRACE:
            self._finish(Heuristic.curly_brace_pair())
            return

        if group.delimiter is Delimiter.PARENTHESIS and group.is_empty:
            if self.state is State.SAW_IDENT:
                self._finish(Heuristic.empty_fn(self.ident))
                return
            if self.state is State.SAW_IDENT_BANG:
                self._finish(Heuristic.empty_fn_like_macro(self.ident))
                return
            if self.state is State.SAW_METHOD_IDENT:
                self._finish(Heuristic.empty_method(self.ident))
                return

        self._goto(State.LIMBO)

    def _munch_ident(self, name: str) -> None:
        keyword = Keyword.lookup(name)
        if keyword is not None:
            self._finish(Heuristic.from_keyword(keyword))
        elif self.state is State.SAW_IDENT_DOUBLE_COLON:
            self._finish(Heuristic.double_colon(self.ident, name))
        elif self.state is State.SAW_DOT:
            self._goto(State.SAW_METHOD_IDENT, name)
        else:
            self._goto(State.SAW_IDENT, name)

    def _munch_punct(self, punct: Punct) -> None:
        char, spacing = punct.char, punct.spacing

        if self.state is State.SAW_IDENT:
            if char == "!" and spacing is Spacing.ALONE:
                self._goto(State.SAW_IDENT_BANG, self.ident)
            elif char == ":" and spacing is Spacing.JOINT:
                self._goto(State.SAW_IDENT_COLON, self.ident)
            elif char == "." and spacing is Spacing.ALONE:
                self._goto(State.SAW_DOT)
            else:
                self._goto(State.LIMBO)
        elif self.state is State.SAW_IDENT_COLON:
            if char == ":" and spacing is Spacing.ALONE:
                self._goto(State.SAW_IDENT_DOUBLE_COLON, self.ident)
            else:
                self._goto(State.LIMBO)
        elif self.state is State.SAW_METHOD_IDENT and char == "." and spacing is Spacing.ALONE:
            # Chained field access: a.b.c()
            self._goto(State.SAW_DOT)
        else:
            self._goto(State.LIMBO)

    def _goto(self, state: State, ident: Optional[str] = None) -> None:
        self.state = state
        self.ident = ident

    def _finish(self, heuristic: Heuristic) -> None:
        self.state = State.FINAL
        self.ident = None
        self.result = heuristic


def detect(text: str) -> Optional[Heuristic]:
    """
    Look for Rust code fingerprints in a fragment of text.

    Returns:
        The first heuristic that fires, or None when nothing matches or the
        text cannot be lexed
    """
    try:
        tokens = parse_token_stream(text)
    except ParseError:
        return None
    return detect_in_stream(tokens)


def detect_in_stream(tokens: Iterable[TokenTree]) -> Optional[Heuristic]:
    """Run a fresh state machine over a token stream, descending into groups."""
    machine = StateMachine()

    for token in tokens:
        machine.munch(token)

        heuristic = machine.finished()
        if heuristic is not None:
            return heuristic

        if isinstance(token, Group):
            heuristic = detect_in_stream(token.stream)
            if heuristic is not None:
                return heuristic

    return None
