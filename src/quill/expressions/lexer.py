"""Tokenizer for Quill expression blocks.

Turns the source of one ``<% ... %>`` block into a list of
:class:`~quill.expressions.tokens.TokenWithContext`. Terminals are declared
in ``grammar.lark`` and scanned with Lark's basic lexer; this module maps
Lark tokens onto Quill tokens, decodes literals, and reports lexical errors.

The output always starts with a BLOCK_START token. A bare expression such
as ``1 + 2`` is accepted too: synthetic BLOCK_START / BLOCK_END markers are
placed around it, so ``tokenize("1 + 2")`` and ``tokenize("<% 1 + 2 %>")``
yield the same token kinds.
"""

from __future__ import annotations

from pathlib import Path

from lark import Lark
from lark import Token as LarkToken
from lark.exceptions import UnexpectedCharacters

from quill.constants import BLOCK_START
from quill.expressions.errors import (
    ExpressionArithmeticError,
    ExpressionLexError,
)
from quill.expressions.tokens import Token, TokenKind, TokenWithContext
from quill.expressions.values import FALSE, TRUE, Float, Integer, String, check_integer_range

__all__ = ["tokenize"]

_GRAMMAR_PATH = Path(__file__).parent / "grammar.lark"

_lark = Lark(
    _GRAMMAR_PATH.read_text(encoding="utf-8"),
    parser="lalr",
    lexer="basic",
    start="start",
)

# Lark terminal name -> token kind, for terminals that carry no value.
_PUNCTUATION: dict[str, TokenKind] = {
    "BLOCK_START": TokenKind.BLOCK_START,
    "BLOCK_END": TokenKind.BLOCK_END,
    "AND": TokenKind.AND,
    "OR": TokenKind.OR,
    "EQUALS": TokenKind.EQUALS,
    "NOT_EQUALS": TokenKind.NOT_EQUALS,
    "GREATER_EQUAL_THAN": TokenKind.GREATER_EQUAL_THAN,
    "LESS_EQUAL_THAN": TokenKind.LESS_EQUAL_THAN,
    "GREATER_THAN": TokenKind.GREATER_THAN,
    "LESS_THAN": TokenKind.LESS_THAN,
    "NOT": TokenKind.NOT,
    "PLUS": TokenKind.PLUS,
    "MINUS": TokenKind.MINUS,
    "STAR": TokenKind.STAR,
    "SLASH": TokenKind.SLASH,
    "PERCENT": TokenKind.PERCENT,
    "ROUND_BRACKET_START": TokenKind.ROUND_BRACKET_START,
    "ROUND_BRACKET_END": TokenKind.ROUND_BRACKET_END,
    "SQUARE_BRACKET_START": TokenKind.SQUARE_BRACKET_START,
    "SQUARE_BRACKET_END": TokenKind.SQUARE_BRACKET_END,
    "COMMA": TokenKind.COMMA,
}

# Word operators and boolean literals are scanned as NAME.
_KEYWORDS: dict[str, Token] = {
    "and": Token(TokenKind.AND, "and"),
    "or": Token(TokenKind.OR, "or"),
    "not": Token(TokenKind.NOT, "not"),
    "true": Token(TokenKind.VALUE, "true", TRUE),
    "false": Token(TokenKind.VALUE, "false", FALSE),
}

# A literal with more significant digits than 2**63 cannot fit in 64 bits.
_MAX_INTEGER_DIGITS = len(str(2**63))

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
    "\\": "\\",
    '"': '"',
    "'": "'",
}


def _unescape(text: str, source: str, token: LarkToken) -> str:
    """Decode a quoted string literal, quotes included in ``text``."""
    body = text[1:-1]
    out: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        esc = body[i + 1]
        if esc not in _ESCAPES:
            raise ExpressionLexError(
                f"Unknown escape sequence \\{esc}",
                expression=source,
                line=token.line,
                column=token.column + i + 1,
                offset=token.start_pos + i + 1,
            )
        out.append(_ESCAPES[esc])
        i += 2
    return "".join(out)


def _integer_too_large(text: str, source: str, tok: LarkToken) -> ExpressionLexError:
    return ExpressionLexError(
        f"Integer literal {text} does not fit in 64 bits",
        expression=source,
        line=tok.line,
        column=tok.column,
        offset=tok.start_pos,
    )


def _convert(tok: LarkToken, source: str) -> Token:
    text = str(tok)
    kind = _PUNCTUATION.get(tok.type)
    if kind is not None:
        return Token(kind, text)
    if tok.type == "NAME":
        return _KEYWORDS.get(text) or Token(TokenKind.VARIABLE, text)
    if tok.type == "INTEGER":
        # Checked before int(), which refuses very long digit strings.
        digits = text.lstrip("0") or "0"
        if len(digits) > _MAX_INTEGER_DIGITS:
            raise _integer_too_large(text, source, tok)
        try:
            value = Integer(check_integer_range(int(digits)))
        except ExpressionArithmeticError as e:
            raise _integer_too_large(text, source, tok) from e
        return Token(TokenKind.VALUE, text, value)
    if tok.type == "FLOAT":
        return Token(TokenKind.VALUE, text, Float(float(text)))
    if tok.type == "STRING":
        return Token(TokenKind.VALUE, text, String(_unescape(text, source, tok)))
    raise ExpressionLexError(
        f"Unknown terminal {tok.type}",
        expression=source,
        line=tok.line,
        column=tok.column,
        offset=tok.start_pos,
    )


def _end_position(source: str) -> tuple[int, int]:
    """Line and column just past the last character of ``source``."""
    line = source.count("\n") + 1
    column = len(source) - (source.rfind("\n") + 1) + 1
    return line, column


def tokenize(source: str) -> list[TokenWithContext]:
    """Split the source of one expression block into tokens.

    Args:
        source: ``<% ... %>`` block text, or a bare expression.

    Returns:
        Tokens in source order, starting with BLOCK_START. A bare expression
        gets synthetic BLOCK_START / BLOCK_END markers with empty text.

    Raises:
        ExpressionLexError: On an invalid character, an unterminated string
            literal, an unknown escape sequence, or an integer literal that
            does not fit in 64 bits.

    Examples:
        >>> [t.kind.value for t in tokenize("<% a && 1 %>")]
        ['block_start', 'variable', 'and', 'value', 'block_end']
    """
    tokens: list[TokenWithContext] = []
    try:
        for tok in _lark.lex(source):
            tokens.append(
                TokenWithContext(
                    token=_convert(tok, source),
                    line=tok.line,
                    column=tok.column,
                    offset=tok.start_pos,
                )
            )
    except UnexpectedCharacters as e:
        char = source[e.pos_in_stream]
        message = (
            "Unterminated string literal"
            if char in {'"', "'"}
            else f"Invalid character {char!r}"
        )
        raise ExpressionLexError(
            message,
            expression=source,
            line=e.line,
            column=e.column,
            offset=e.pos_in_stream,
        ) from e

    if source.lstrip().startswith(BLOCK_START):
        return tokens

    line, column = _end_position(source)
    return [
        TokenWithContext(Token(TokenKind.BLOCK_START), line=1, column=1, offset=0),
        *tokens,
        TokenWithContext(
            Token(TokenKind.BLOCK_END), line=line, column=column, offset=len(source)
        ),
    ]
