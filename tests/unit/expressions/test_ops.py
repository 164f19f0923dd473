"""Unit tests for operators: token mapping, precedence and semantics."""

from __future__ import annotations

import math

import pytest

from quill.constants import INT_MAX, INT_MIN
from quill.expressions.errors import (
    ExpressionArithmeticError,
    ExpressionTypeError,
    UnsupportedOperationError,
)
from quill.expressions.ops import Op
from quill.expressions.tokens import TokenKind
from quill.expressions.values import (
    FALSE,
    TRUE,
    Float,
    Integer,
    List,
    String,
    Value,
)


class TestFromToken:
    """Test mapping token kinds to operators."""

    @pytest.mark.parametrize(
        ("kind", "op"),
        [
            (TokenKind.NOT, Op.NOT),
            (TokenKind.AND, Op.AND),
            (TokenKind.OR, Op.OR),
            (TokenKind.PLUS, Op.ADD),
            (TokenKind.MINUS, Op.SUB),
            (TokenKind.STAR, Op.MULT),
            (TokenKind.SLASH, Op.DIV),
            (TokenKind.PERCENT, Op.MOD),
            (TokenKind.EQUALS, Op.EQUALS),
            (TokenKind.NOT_EQUALS, Op.NOT_EQUALS),
            (TokenKind.LESS_THAN, Op.LESS_THAN),
            (TokenKind.LESS_EQUAL_THAN, Op.LESS_EQUAL_THAN),
            (TokenKind.GREATER_THAN, Op.GREATER_THAN),
            (TokenKind.GREATER_EQUAL_THAN, Op.GREATER_EQUAL_THAN),
        ],
    )
    def test_operator_tokens(self, kind: TokenKind, op: Op) -> None:
        assert Op.from_token(kind) is op

    @pytest.mark.parametrize(
        "kind",
        [
            TokenKind.VALUE,
            TokenKind.VARIABLE,
            TokenKind.COMMA,
            TokenKind.BLOCK_END,
            TokenKind.ROUND_BRACKET_START,
        ],
    )
    def test_non_operator_tokens(self, kind: TokenKind) -> None:
        """Anything that is not an operator maps to None."""
        assert Op.from_token(kind) is None


class TestPrecedence:
    """Test the precedence table, loosest to tightest."""

    def test_total_order_of_levels(self) -> None:
        levels = [Op.OR, Op.AND, Op.EQUALS, Op.ADD, Op.MULT, Op.NOT]
        ranks = [op.precedence for op in levels]
        assert ranks == sorted(ranks)
        assert len(set(ranks)) == len(ranks)

    @pytest.mark.parametrize(
        "group",
        [
            [
                Op.EQUALS,
                Op.NOT_EQUALS,
                Op.LESS_THAN,
                Op.LESS_EQUAL_THAN,
                Op.GREATER_THAN,
                Op.GREATER_EQUAL_THAN,
            ],
            [Op.ADD, Op.SUB],
            [Op.MULT, Op.DIV, Op.MOD],
        ],
    )
    def test_same_level(self, group: list[Op]) -> None:
        assert len({op.precedence for op in group}) == 1

    def test_arity(self) -> None:
        assert not Op.NOT.is_binary
        assert Op.NOT.is_unary
        assert Op.SUB.is_binary and Op.SUB.is_unary
        assert Op.MULT.is_binary and not Op.MULT.is_unary


class TestComparisonOperators:
    @pytest.mark.parametrize(
        ("op", "left", "right", "expected"),
        [
            (Op.EQUALS, Integer(1), Integer(2), False),
            (Op.NOT_EQUALS, Integer(1), Integer(2), True),
            (Op.EQUALS, String("a"), Integer(1), False),
            (Op.NOT_EQUALS, String("a"), Integer(1), True),
            (Op.LESS_THAN, Integer(1), Float(1.5), True),
            (Op.LESS_EQUAL_THAN, Integer(2), Integer(2), True),
            (Op.GREATER_THAN, String("b"), String("a"), True),
            (Op.GREATER_EQUAL_THAN, FALSE, TRUE, False),
        ],
    )
    def test_results(self, op: Op, left: Value, right: Value, expected: bool) -> None:
        assert op.evaluate_binary(left, right) == (TRUE if expected else FALSE)

    def test_ordering_across_variants_raises(self) -> None:
        with pytest.raises(ExpressionTypeError):
            Op.LESS_THAN.evaluate_binary(List(), TRUE)


class TestLogicalOperators:
    @pytest.mark.parametrize(
        ("op", "left", "right", "expected"),
        [
            (Op.AND, Integer(1), Integer(1), True),
            (Op.AND, Integer(1), Integer(0), False),
            (Op.AND, String("x"), List.of([Integer(1)]), True),
            (Op.OR, Integer(0), String(""), False),
            (Op.OR, Integer(0), String("x"), True),
            (Op.OR, TRUE, FALSE, True),
        ],
    )
    def test_truthiness(self, op: Op, left: Value, right: Value, expected: bool) -> None:
        """Operands are coerced by truthiness; the result is always Boolean."""
        assert op.evaluate_binary(left, right) == (TRUE if expected else FALSE)


class TestArithmetic:
    @pytest.mark.parametrize(
        ("op", "left", "right", "expected"),
        [
            (Op.ADD, Integer(2), Integer(3), Integer(5)),
            (Op.ADD, Integer(2), Float(0.5), Float(2.5)),
            (Op.SUB, Integer(2), Integer(5), Integer(-3)),
            (Op.SUB, Float(1.5), Integer(1), Float(0.5)),
            (Op.MULT, Integer(4), Integer(-3), Integer(-12)),
            (Op.MULT, Float(1.5), Integer(2), Float(3.0)),
            (Op.DIV, Integer(7), Integer(2), Integer(3)),
            (Op.DIV, Integer(-7), Integer(2), Integer(-3)),
            (Op.DIV, Integer(7), Integer(-2), Integer(-3)),
            (Op.DIV, Integer(7), Float(2.0), Float(3.5)),
            (Op.MOD, Integer(7), Integer(3), Integer(1)),
            (Op.MOD, Integer(-7), Integer(3), Integer(-1)),
            (Op.MOD, Integer(7), Integer(-3), Integer(1)),
            (Op.MOD, Float(-7.5), Integer(2), Float(-1.5)),
            (Op.MOD, Integer(INT_MIN), Integer(-1), Integer(0)),
        ],
    )
    def test_numeric(self, op: Op, left: Value, right: Value, expected: Value) -> None:
        assert op.evaluate_binary(left, right) == expected

    def test_string_concatenation(self) -> None:
        assert Op.ADD.evaluate_binary(String("ab"), String("cd")) == String("abcd")

    def test_list_concatenation(self) -> None:
        result = Op.ADD.evaluate_binary(List.of([Integer(1)]), List.of([String("a")]))
        assert result == List.of([Integer(1), String("a")])

    @pytest.mark.parametrize(
        ("op", "divisor"),
        [
            (Op.DIV, Integer(0)),
            (Op.DIV, Float(0.0)),
            (Op.MOD, Integer(0)),
            (Op.MOD, Float(0.0)),
        ],
    )
    def test_division_by_zero(self, op: Op, divisor: Value) -> None:
        with pytest.raises(ExpressionArithmeticError, match="by zero"):
            op.evaluate_binary(Integer(1), divisor)

    @pytest.mark.parametrize(
        ("op", "left", "right"),
        [
            (Op.ADD, Integer(INT_MAX), Integer(1)),
            (Op.SUB, Integer(INT_MIN), Integer(1)),
            (Op.MULT, Integer(INT_MAX), Integer(2)),
            (Op.DIV, Integer(INT_MIN), Integer(-1)),
        ],
    )
    def test_integer_overflow(self, op: Op, left: Value, right: Value) -> None:
        """Integer results never wrap around."""
        with pytest.raises(ExpressionArithmeticError, match="overflow"):
            op.evaluate_binary(left, right)

    @pytest.mark.parametrize(
        ("op", "left", "right"),
        [
            (Op.ADD, String("a"), Integer(1)),
            (Op.ADD, List(), String("a")),
            (Op.SUB, String("a"), String("b")),
            (Op.MULT, String("a"), Integer(3)),
            (Op.DIV, TRUE, Integer(1)),
            (Op.MOD, List(), List()),
        ],
    )
    def test_non_numeric_operands(self, op: Op, left: Value, right: Value) -> None:
        with pytest.raises(ExpressionTypeError, match="not defined"):
            op.evaluate_binary(left, right)


class TestNonFiniteFloats:
    """Infinity and NaN are ordinary Float operands for every arithmetic operator."""

    @pytest.mark.parametrize("op", [Op.ADD, Op.SUB, Op.MULT, Op.DIV, Op.MOD])
    @pytest.mark.parametrize("special", [math.inf, -math.inf, math.nan])
    @pytest.mark.parametrize("other", [Integer(2), Float(0.5)])
    def test_either_side(self, op: Op, special: float, other: Value) -> None:
        assert isinstance(op.evaluate_binary(Float(special), other), Float)
        assert isinstance(op.evaluate_binary(other, Float(special)), Float)

    @pytest.mark.parametrize(
        ("op", "left", "right", "expected"),
        [
            (Op.ADD, Float(math.inf), Integer(1), math.inf),
            (Op.SUB, Integer(1), Float(math.inf), -math.inf),
            (Op.MULT, Float(-math.inf), Integer(2), -math.inf),
            (Op.DIV, Float(math.inf), Integer(2), math.inf),
            (Op.DIV, Integer(1), Float(math.inf), 0.0),
            (Op.MOD, Integer(5), Float(math.inf), 5.0),
        ],
    )
    def test_results(self, op: Op, left: Value, right: Value, expected: float) -> None:
        assert op.evaluate_binary(left, right) == Float(expected)

    @pytest.mark.parametrize(
        ("op", "left", "right"),
        [
            (Op.MOD, Float(math.inf), Integer(2)),
            (Op.MOD, Float(-math.inf), Float(0.5)),
            (Op.SUB, Float(math.inf), Float(math.inf)),
            (Op.MULT, Float(math.inf), Integer(0)),
            (Op.ADD, Float(math.nan), Integer(1)),
            (Op.MOD, Integer(2), Float(math.nan)),
        ],
    )
    def test_nan_results(self, op: Op, left: Value, right: Value) -> None:
        result = op.evaluate_binary(left, right)
        assert isinstance(result, Float)
        assert math.isnan(result.value)


class TestUnaryOperators:
    @pytest.mark.parametrize(
        ("operand", "expected"),
        [
            (TRUE, FALSE),
            (FALSE, TRUE),
            (Integer(0), TRUE),
            (String("x"), FALSE),
            (List(), TRUE),
        ],
    )
    def test_not(self, operand: Value, expected: Value) -> None:
        assert Op.NOT.evaluate_unary(operand) == expected

    def test_negation(self) -> None:
        assert Op.SUB.evaluate_unary(Integer(5)) == Integer(-5)
        assert Op.SUB.evaluate_unary(Float(2.5)) == Float(-2.5)

    def test_unary_plus_is_identity(self) -> None:
        assert Op.ADD.evaluate_unary(Integer(3)) == Integer(3)
        assert Op.ADD.evaluate_unary(Float(-1.0)) == Float(-1.0)

    @pytest.mark.parametrize("op", [Op.SUB, Op.ADD])
    def test_sign_requires_number(self, op: Op) -> None:
        with pytest.raises(ExpressionTypeError, match="requires a number"):
            op.evaluate_unary(String("5"))

    def test_negating_smallest_integer_overflows(self) -> None:
        with pytest.raises(ExpressionArithmeticError):
            Op.SUB.evaluate_unary(Integer(INT_MIN))


class TestUnsupportedPositions:
    def test_not_as_binary(self) -> None:
        with pytest.raises(UnsupportedOperationError) as exc_info:
            Op.NOT.evaluate_binary(TRUE, FALSE)
        assert exc_info.value.op is Op.NOT

    @pytest.mark.parametrize("op", [Op.MULT, Op.DIV, Op.AND, Op.EQUALS])
    def test_binary_only_as_unary(self, op: Op) -> None:
        with pytest.raises(UnsupportedOperationError, match="not a unary operator"):
            op.evaluate_unary(Integer(1))
