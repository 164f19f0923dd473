"""Token model shared by the lexer and the parser.

A :class:`Token` is the lexical unit (kind, source text and, for literals,
the decoded value). :class:`TokenWithContext` adds where the token was found
so syntax errors can point at it. :class:`TokenStream` is the peekable
iterator the parser consumes.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from quill.expressions.errors import UnexpectedEndOfInput
from quill.expressions.values import Value

__all__ = [
    "TokenKind",
    "Token",
    "TokenWithContext",
    "TokenStream",
]


class TokenKind(str, Enum):
    """Lexical category of a token."""

    BLOCK_START = "block_start"  # <%
    BLOCK_END = "block_end"  # %>
    VALUE = "value"  # 42, 3.13, "text", true
    VARIABLE = "variable"  # user_name
    NOT = "not"  # ! / not
    AND = "and"  # && / and
    OR = "or"  # || / or
    PLUS = "plus"
    MINUS = "minus"
    STAR = "star"
    SLASH = "slash"
    PERCENT = "percent"
    EQUALS = "equals"  # ==
    NOT_EQUALS = "not_equals"  # !=
    GREATER_THAN = "greater_than"
    GREATER_EQUAL_THAN = "greater_equal_than"
    LESS_THAN = "less_than"
    LESS_EQUAL_THAN = "less_equal_than"
    ROUND_BRACKET_START = "round_bracket_start"
    ROUND_BRACKET_END = "round_bracket_end"
    SQUARE_BRACKET_START = "square_bracket_start"
    SQUARE_BRACKET_END = "square_bracket_end"
    COMMA = "comma"


@dataclass(frozen=True, slots=True)
class Token:
    """A lexical token.

    Attributes:
        kind: Lexical category.
        text: Source text of the token ("" for synthesized block markers).
        value: Decoded literal for VALUE tokens, None otherwise.
    """

    kind: TokenKind
    text: str = ""
    value: Value | None = None

    @property
    def name(self) -> str:
        """Variable name carried by a VARIABLE token."""
        return self.text


@dataclass(frozen=True, slots=True)
class TokenWithContext:
    """A token plus the position it was read from.

    Position is diagnostic only and takes no part in evaluation.

    Attributes:
        token: The token itself.
        line: 1-based line number.
        column: 1-based column number.
        offset: 0-based character offset into the block source.
    """

    token: Token
    line: int = 1
    column: int = 1
    offset: int = 0

    @property
    def kind(self) -> TokenKind:
        return self.token.kind

    @property
    def text(self) -> str:
        return self.token.text


class TokenStream:
    """Peekable iterator over :class:`TokenWithContext` items.

    The parser consumes tokens as it goes; anything left after a parse (the
    closing ``%>`` marker, for instance) stays available to the caller.

    Example:
        >>> stream = TokenStream(tokenize("<% 1 + 2 %>")[1:])
        >>> expr = parse(stream)
        >>> stream.peek().kind
        <TokenKind.BLOCK_END: 'block_end'>
    """

    def __init__(self, tokens: Iterable[TokenWithContext]) -> None:
        self._iterator: Iterator[TokenWithContext] = iter(tokens)
        self._lookahead: list[TokenWithContext] = []

    def peek(self) -> TokenWithContext | None:
        """Return the next token without consuming it, or None at the end."""
        if not self._lookahead:
            try:
                self._lookahead.append(next(self._iterator))
            except StopIteration:
                return None
        return self._lookahead[0]

    def next_token(self) -> TokenWithContext:
        """Consume and return the next token.

        Raises:
            UnexpectedEndOfInput: If the stream is exhausted.
        """
        token = self.peek()
        if token is None:
            raise UnexpectedEndOfInput()
        self._lookahead.pop()
        return token

    def at_end(self) -> bool:
        return self.peek() is None

    def __iter__(self) -> Iterator[TokenWithContext]:
        return self

    def __next__(self) -> TokenWithContext:
        if self.peek() is None:
            raise StopIteration
        return self._lookahead.pop()
