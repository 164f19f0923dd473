"""Integration tests: tokenize, parse, cache and evaluate together.

These mimic how a template renderer drives the engine: each block's source
is parsed once and evaluated for every render with that render's context.
"""

from __future__ import annotations

import pytest

from quill import Context, evaluate, evaluate_source, parse_source, tokenize
from quill.expressions import (
    TRUE,
    ExpressionCache,
    ExpressionError,
    ExpressionErrorInfo,
    Integer,
    List,
    String,
    TokenKind,
    TokenStream,
    UndefinedVariableError,
    parse,
)


class TestRenderLoop:
    def test_blocks_across_renders(self) -> None:
        cache = ExpressionCache(max_size=16)
        blocks = [
            "<% logged_in && role == \"admin\" %>",
            "<% items + [extra] %>",
            "<% (price * quantity) - discount > 100 %>",
        ]
        renders = [
            {"logged_in": True, "role": "admin", "items": [1], "extra": 2,
             "price": 30, "quantity": 4, "discount": 10},
            {"logged_in": False, "role": "admin", "items": [], "extra": "x",
             "price": 10, "quantity": 1, "discount": 0},
        ]

        outputs = [
            [evaluate(cache.get_or_parse(block), Context(variables)) for block in blocks]
            for variables in renders
        ]

        assert outputs[0] == [TRUE, List.of([Integer(1), Integer(2)]), TRUE]
        assert outputs[1][1] == List.of([String("x")])
        assert not outputs[1][0].truthy()
        assert cache.stats().hits == 3

    def test_multiline_block(self) -> None:
        source = """<%
            (a + b) * 2
            == 10
        %>"""
        assert evaluate_source(source, Context({"a": 2, "b": 3})) == TRUE

    def test_manual_pipeline_matches_parse_source(self) -> None:
        """Skipping the start marker and calling parse() by hand gives the same tree."""
        source = "<% 1 + 2 * x %>"
        stream = TokenStream(tokenize(source))
        assert stream.next_token().kind is TokenKind.BLOCK_START
        expr = parse(stream)
        assert expr == parse_source(source)
        assert stream.next_token().kind is TokenKind.BLOCK_END
        assert stream.at_end()


class TestErrorReporting:
    @pytest.mark.parametrize(
        ("source", "kind"),
        [
            ("<% (1 + 2 %>", "ExpressionSyntaxError"),
            ("<% 1 + %>", "ExpressionSyntaxError"),
            ("<% [1, 2 %>", "ExpressionSyntaxError"),
            ("<% () %>", "UnexpectedEndOfInput"),
            ("<% 'open %>", "ExpressionLexError"),
            ("<% nope %>", "UndefinedVariableError"),
            ("<% 1 / 0 %>", "ExpressionArithmeticError"),
            ("<% \"a\" - 1 %>", "ExpressionTypeError"),
        ],
    )
    def test_every_failure_is_reportable(self, source: str, kind: str) -> None:
        """Every failure is an ExpressionError that carries its source."""
        with pytest.raises(ExpressionError) as exc_info:
            evaluate_source(source)

        info = ExpressionErrorInfo.from_error(exc_info.value)
        assert info.kind == kind
        assert info.expression == source

    def test_missing_variable_never_defaults(self) -> None:
        ctx = Context({"a": 0})
        for source in ("<% b %>", "<% a + b %>", "<% [a, b] %>", "<% !b %>"):
            with pytest.raises(UndefinedVariableError):
                evaluate_source(source, ctx)
