"""Expression AST and recursive-descent parser.

Grammar (informal)::

    expression := primary (binop primary)*          precedence climbing
    primary    := ("!" | "not" | "-" | "+") primary
                | literal
                | variable
                | "[" (item ("," item)* ","?)? "]"    item := literal | variable
                | "(" expression ")"

Binary operators are grouped by precedence climbing over the table in
:mod:`quill.expressions.ops`, so ``2 * 2 + 3 * 5`` parses as
``(2 * 2) + (3 * 5)`` and ``1 - 2 - 3`` as ``(1 - 2) - 3``. Parentheses nest at most
:data:`~quill.constants.MAX_NESTING_DEPTH` levels deep.

Parsing stops in front of the block end marker (``%>``) or at the end of the
token stream; the marker is left in the stream for the caller. Anything else
after a complete expression is a syntax error.

Nodes are frozen dataclasses. A parsed tree is never modified afterwards,
so one tree can be cached and evaluated concurrently against different
contexts.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Union

from quill.constants import MAX_NESTING_DEPTH
from quill.expressions.errors import ExpressionSyntaxError
from quill.expressions.lexer import tokenize
from quill.expressions.ops import Op
from quill.expressions.terms import Constant, Term, Variable
from quill.expressions.tokens import TokenKind, TokenStream, TokenWithContext
from quill.expressions.values import Value

__all__ = [
    "TermExpression",
    "UnaryExpression",
    "BinaryExpression",
    "ListExpression",
    "Expression",
    "constant",
    "variable",
    "parse",
    "parse_source",
]


@dataclass(frozen=True, slots=True)
class TermExpression:
    """Leaf node: a constant or a variable reference."""

    term: Term


@dataclass(frozen=True, slots=True)
class UnaryExpression:
    """Prefix operator applied to one operand."""

    op: Op
    operand: Expression


@dataclass(frozen=True, slots=True)
class BinaryExpression:
    """Binary operator applied to two operands."""

    left: Expression
    op: Op
    right: Expression


@dataclass(frozen=True, slots=True)
class ListExpression:
    """List literal. Element order is kept through evaluation."""

    items: tuple[Expression, ...] = ()


Expression = Union[TermExpression, UnaryExpression, BinaryExpression, ListExpression]


def constant(value: Value) -> TermExpression:
    """Build a constant leaf node."""
    return TermExpression(Constant(value))


def variable(name: str) -> TermExpression:
    """Build a variable leaf node."""
    return TermExpression(Variable(name))


_TERMINATORS = frozenset({TokenKind.BLOCK_END})


class _Parser:
    def __init__(self, stream: TokenStream, depth: int = 0) -> None:
        self._stream = stream
        self._depth = depth

    def parse_expression(self, min_precedence: int = 0) -> Expression:
        left = self._parse_primary()
        while True:
            op = self._peek_binary_op()
            if op is None or op.precedence <= min_precedence:
                return left
            self._stream.next_token()
            # Left-associative: the right operand only takes tighter operators.
            right = self.parse_expression(op.precedence)
            left = BinaryExpression(left, op, right)

    def parse_complete(self) -> Expression:
        expr = self.parse_expression()
        tok = self._stream.peek()
        if tok is not None and tok.kind not in _TERMINATORS:
            raise ExpressionSyntaxError("Unexpected token after expression", token=tok)
        return expr

    def _peek_binary_op(self) -> Op | None:
        tok = self._stream.peek()
        if tok is None:
            return None
        op = Op.from_token(tok.kind)
        if op is None or not op.is_binary:
            return None
        return op

    def _parse_primary(self) -> Expression:
        # Prefix operators are collected in a loop so long runs like "!!!!x"
        # do not grow the call stack.
        prefixes: list[Op] = []
        tok = self._stream.next_token()
        while True:
            op = Op.from_token(tok.kind)
            if op is None or not op.is_unary:
                break
            prefixes.append(op)
            tok = self._stream.next_token()

        expr = self._parse_operand(tok)
        for op in reversed(prefixes):
            expr = UnaryExpression(op, expr)
        return expr

    def _parse_operand(self, tok: TokenWithContext) -> Expression:
        kind = tok.kind
        if kind is TokenKind.VALUE:
            return constant(tok.token.value)  # type: ignore[arg-type]
        if kind is TokenKind.VARIABLE:
            return variable(tok.token.name)
        if kind is TokenKind.SQUARE_BRACKET_START:
            return self._parse_list()
        if kind is TokenKind.ROUND_BRACKET_START:
            return self._parse_group(tok)
        raise ExpressionSyntaxError("Unexpected token", token=tok)

    def _parse_list(self) -> ListExpression:
        items: list[Expression] = []
        expect_item = True
        while True:
            tok = self._stream.next_token()
            kind = tok.kind
            if kind is TokenKind.SQUARE_BRACKET_END:
                return ListExpression(tuple(items))
            if expect_item and kind is TokenKind.VALUE:
                items.append(constant(tok.token.value))  # type: ignore[arg-type]
            elif expect_item and kind is TokenKind.VARIABLE:
                items.append(variable(tok.token.name))
            elif not expect_item and kind is TokenKind.COMMA:
                pass
            else:
                message = "Invalid list item" if expect_item else "Expected ',' or ']' in list"
                raise ExpressionSyntaxError(message, token=tok)
            expect_item = not expect_item

    def _parse_group(self, opening: TokenWithContext) -> Expression:
        if self._depth >= MAX_NESTING_DEPTH:
            raise ExpressionSyntaxError("Expression nested too deeply", token=opening)

        # Collect everything up to the matching ")" and parse it on its own.
        depth = 1
        inner: list[TokenWithContext] = []
        while True:
            tok = self._stream.next_token()
            if tok.kind is TokenKind.BLOCK_END:
                raise ExpressionSyntaxError("Unbalanced parentheses", token=tok)
            if tok.kind is TokenKind.ROUND_BRACKET_START:
                depth += 1
            elif tok.kind is TokenKind.ROUND_BRACKET_END:
                depth -= 1
                if depth == 0:
                    break
            inner.append(tok)

        sub_stream = TokenStream(inner)
        expr = _Parser(sub_stream, self._depth + 1).parse_expression()
        if not sub_stream.at_end():
            raise ExpressionSyntaxError(
                "Unexpected token in parentheses", token=sub_stream.peek()
            )
        return expr


def parse(tokens: TokenStream | Iterable[TokenWithContext]) -> Expression:
    """Parse one expression from a token stream.

    The block start marker must already have been skipped. Tokens are
    consumed up to, but not including, the block end marker.

    Args:
        tokens: A TokenStream, or any iterable of tokens (wrapped in a
            TokenStream internally).

    Returns:
        The root node of the expression tree.

    Raises:
        UnexpectedEndOfInput: If the stream ends where a token is required.
        ExpressionSyntaxError: If a token appears where the grammar forbids it.

    Examples:
        >>> stream = TokenStream(tokenize("<% 2 * 2 + 3 * 5 %>")[1:])
        >>> parse(stream)  # doctest: +ELLIPSIS
        BinaryExpression(left=BinaryExpression(...), op=<Op.ADD: '+'>, right=...)
    """
    stream = tokens if isinstance(tokens, TokenStream) else TokenStream(tokens)
    return _Parser(stream).parse_complete()


def parse_source(source: str) -> Expression:
    """Tokenize and parse a single ``<% ... %>`` block (or bare expression).

    The block must hold exactly one expression followed by the block end
    marker and nothing else.

    Raises:
        ExpressionLexError: If the source cannot be tokenized.
        UnexpectedEndOfInput: If the block is truncated.
        ExpressionSyntaxError: For any other malformed input.
    """
    stream = TokenStream(tokenize(source))
    try:
        start = stream.next_token()
        if start.kind is not TokenKind.BLOCK_START:
            raise ExpressionSyntaxError("Expected block start", token=start)
        expr = parse(stream)
        stream.next_token()  # block end
        trailing = stream.peek()
        if trailing is not None:
            raise ExpressionSyntaxError("Unexpected token after block end", token=trailing)
    except ExpressionSyntaxError as e:
        if e.expression is None:
            e.expression = source
        raise
    return expr
