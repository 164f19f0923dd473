"""Operators of the Quill expression language.

Binary precedence, loosest to tightest:

=====  ==========================================
rank   operators
=====  ==========================================
1      ``||`` / ``or``
2      ``&&`` / ``and``
3      ``==`` ``!=`` ``<`` ``<=`` ``>`` ``>=``
4      ``+`` ``-``
5      ``*`` ``/`` ``%``
=====  ==========================================

``!`` / ``not`` is prefix only and applies to the primary that follows it,
as do prefix ``-`` and ``+``. All binary operators are left-associative.

``&&`` and ``||`` do not short-circuit: both operands are evaluated before
the operator sees them, and the result is always a Boolean.
"""

from __future__ import annotations

import math
from enum import Enum

from quill.expressions.errors import (
    ExpressionArithmeticError,
    ExpressionTypeError,
    UnsupportedOperationError,
)
from quill.expressions.tokens import TokenKind
from quill.expressions.values import (
    Boolean,
    Float,
    Integer,
    List,
    String,
    Value,
    check_integer_range,
    compare_values,
    values_equal,
)

__all__ = ["Op"]


class Op(str, Enum):
    """An operator with a fixed precedence rank."""

    NOT = "!"
    AND = "&&"
    OR = "||"
    ADD = "+"
    SUB = "-"
    MULT = "*"
    DIV = "/"
    MOD = "%"
    EQUALS = "=="
    NOT_EQUALS = "!="
    GREATER_THAN = ">"
    GREATER_EQUAL_THAN = ">="
    LESS_THAN = "<"
    LESS_EQUAL_THAN = "<="

    @staticmethod
    def from_token(kind: TokenKind) -> Op | None:
        """Map an operator token kind to its operator, None for anything else."""
        return _TOKEN_OPS.get(kind)

    @property
    def precedence(self) -> int:
        """Binding strength; higher binds tighter. ``!`` ranks above every binary op."""
        return _PRECEDENCE[self]

    @property
    def is_binary(self) -> bool:
        return self is not Op.NOT

    @property
    def is_unary(self) -> bool:
        return self in (Op.NOT, Op.ADD, Op.SUB)

    def evaluate_binary(self, left: Value, right: Value) -> Value:
        """Apply this operator to two evaluated operands.

        Raises:
            ExpressionTypeError: If the operands have the wrong variants.
            ExpressionArithmeticError: On division or modulo by zero, or
                64-bit integer overflow.
            UnsupportedOperationError: If this operator has no binary form.
        """
        if self is Op.EQUALS:
            return Boolean(values_equal(left, right))
        if self is Op.NOT_EQUALS:
            return Boolean(not values_equal(left, right))
        if self is Op.LESS_THAN:
            return Boolean(compare_values(left, right) < 0)
        if self is Op.LESS_EQUAL_THAN:
            return Boolean(compare_values(left, right) <= 0)
        if self is Op.GREATER_THAN:
            return Boolean(compare_values(left, right) > 0)
        if self is Op.GREATER_EQUAL_THAN:
            return Boolean(compare_values(left, right) >= 0)
        if self is Op.AND:
            return Boolean(left.truthy() and right.truthy())
        if self is Op.OR:
            return Boolean(left.truthy() or right.truthy())
        if self is Op.ADD:
            return _add(left, right)
        if self in (Op.SUB, Op.MULT, Op.DIV, Op.MOD):
            return _arithmetic(self, left, right)
        raise UnsupportedOperationError(f"'{self.value}' is not a binary operator", op=self)

    def evaluate_unary(self, operand: Value) -> Value:
        """Apply this operator as a prefix operator.

        Raises:
            ExpressionTypeError: If ``-`` or ``+`` is applied to a non-number.
            ExpressionArithmeticError: If negation overflows 64 bits.
            UnsupportedOperationError: If this operator has no unary form.
        """
        if self is Op.NOT:
            return Boolean(not operand.truthy())
        if self in (Op.SUB, Op.ADD):
            if isinstance(operand, Integer):
                if self is Op.ADD:
                    return operand
                return Integer(check_integer_range(-operand.value))
            if isinstance(operand, Float):
                return operand if self is Op.ADD else Float(-operand.value)
            raise ExpressionTypeError(
                f"Unary '{self.value}' requires a number, got {operand.kind.value}"
            )
        raise UnsupportedOperationError(f"'{self.value}' is not a unary operator", op=self)


_TOKEN_OPS: dict[TokenKind, Op] = {
    TokenKind.NOT: Op.NOT,
    TokenKind.AND: Op.AND,
    TokenKind.OR: Op.OR,
    TokenKind.PLUS: Op.ADD,
    TokenKind.MINUS: Op.SUB,
    TokenKind.STAR: Op.MULT,
    TokenKind.SLASH: Op.DIV,
    TokenKind.PERCENT: Op.MOD,
    TokenKind.EQUALS: Op.EQUALS,
    TokenKind.NOT_EQUALS: Op.NOT_EQUALS,
    TokenKind.GREATER_THAN: Op.GREATER_THAN,
    TokenKind.GREATER_EQUAL_THAN: Op.GREATER_EQUAL_THAN,
    TokenKind.LESS_THAN: Op.LESS_THAN,
    TokenKind.LESS_EQUAL_THAN: Op.LESS_EQUAL_THAN,
}

_PRECEDENCE: dict[Op, int] = {
    Op.OR: 1,
    Op.AND: 2,
    Op.EQUALS: 3,
    Op.NOT_EQUALS: 3,
    Op.LESS_THAN: 3,
    Op.LESS_EQUAL_THAN: 3,
    Op.GREATER_THAN: 3,
    Op.GREATER_EQUAL_THAN: 3,
    Op.ADD: 4,
    Op.SUB: 4,
    Op.MULT: 5,
    Op.DIV: 5,
    Op.MOD: 5,
    Op.NOT: 6,
}


def _add(left: Value, right: Value) -> Value:
    if isinstance(left, String) and isinstance(right, String):
        return String(left.value + right.value)
    if isinstance(left, List) and isinstance(right, List):
        return List(left.items + right.items)
    return _arithmetic(Op.ADD, left, right)


def _trunc_div(a: int, b: int) -> int:
    # Integer division rounding toward zero, as 64-bit hardware division does.
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _arithmetic(op: Op, left: Value, right: Value) -> Value:
    if not (left.is_numeric and right.is_numeric):
        raise ExpressionTypeError(
            f"Operator '{op.value}' is not defined for "
            f"{left.kind.value} and {right.kind.value}"
        )
    a = left.value  # type: ignore[attr-defined]
    b = right.value  # type: ignore[attr-defined]
    both_int = isinstance(left, Integer) and isinstance(right, Integer)

    if op in (Op.DIV, Op.MOD) and b == 0:
        verb = "Division" if op is Op.DIV else "Modulo"
        raise ExpressionArithmeticError(f"{verb} by zero")

    if both_int:
        if op is Op.ADD:
            result = a + b
        elif op is Op.SUB:
            result = a - b
        elif op is Op.MULT:
            result = a * b
        elif op is Op.DIV:
            result = _trunc_div(a, b)
        else:
            result = a - b * _trunc_div(a, b)
        return Integer(check_integer_range(result))

    a, b = float(a), float(b)
    if op is Op.ADD:
        return Float(a + b)
    if op is Op.SUB:
        return Float(a - b)
    if op is Op.MULT:
        return Float(a * b)
    if op is Op.DIV:
        return Float(a / b)
    if math.isinf(a):
        # IEEE 754 remainder of an infinite dividend is NaN; fmod raises instead.
        return Float(math.nan)
    return Float(math.fmod(a, b))
