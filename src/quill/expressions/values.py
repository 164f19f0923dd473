"""Runtime value model for Quill expressions.

Every expression evaluates to one of five value variants:

- ``Integer``: signed 64-bit integer
- ``Float``: double precision float
- ``Boolean``: ``true`` / ``false``
- ``String``: text
- ``List``: ordered, immutable sequence of values

Values are frozen dataclasses. Python ``==`` on two values is strict
structural equality (same variant, same payload), which is what tests and
caches want. The expression-level ``==`` operator is looser and lives in
:func:`values_equal`: integers and floats compare numerically.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from quill.constants import INT_MAX, INT_MIN
from quill.expressions.errors import ExpressionArithmeticError, ExpressionTypeError

__all__ = [
    "ValueKind",
    "Value",
    "Integer",
    "Float",
    "Boolean",
    "String",
    "List",
    "TRUE",
    "FALSE",
    "values_equal",
    "compare_values",
    "check_integer_range",
]


class ValueKind(str, Enum):
    """Variant tag of a runtime value."""

    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING = "string"
    LIST = "list"


class Value:
    """Base class of all runtime values."""

    __slots__ = ()

    kind: ClassVar[ValueKind]

    def truthy(self) -> bool:
        """Coerce the value to a bool for the logical operators."""
        raise NotImplementedError

    def to_python(self) -> Any:
        """Return the plain Python equivalent (lists become Python lists)."""
        raise NotImplementedError

    @property
    def is_numeric(self) -> bool:
        return self.kind in (ValueKind.INTEGER, ValueKind.FLOAT)

    @staticmethod
    def from_python(obj: Any) -> Value:
        """Convert a plain Python object to a value.

        Args:
            obj: A bool, int, float, str, a list or tuple of those (nested
                freely), or an existing Value.

        Returns:
            The matching value variant.

        Raises:
            ExpressionTypeError: If ``obj`` has no value representation.
            ExpressionArithmeticError: If an int does not fit in 64 bits.

        Examples:
            >>> Value.from_python([1, "a", True])
            List(items=(Integer(value=1), String(value='a'), Boolean(value=True)))
        """
        if isinstance(obj, Value):
            return obj
        # bool is a subclass of int, check it first
        if isinstance(obj, bool):
            return Boolean(obj)
        if isinstance(obj, int):
            return Integer(check_integer_range(obj))
        if isinstance(obj, float):
            return Float(obj)
        if isinstance(obj, str):
            return String(obj)
        if isinstance(obj, (list, tuple)):
            return List.of(Value.from_python(item) for item in obj)
        raise ExpressionTypeError(
            f"Cannot convert {type(obj).__name__} to an expression value"
        )


@dataclass(frozen=True, slots=True)
class Integer(Value):
    value: int

    kind: ClassVar[ValueKind] = ValueKind.INTEGER

    def truthy(self) -> bool:
        return self.value != 0

    def to_python(self) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class Float(Value):
    value: float

    kind: ClassVar[ValueKind] = ValueKind.FLOAT

    def truthy(self) -> bool:
        return self.value != 0.0

    def to_python(self) -> float:
        return self.value

    def __str__(self) -> str:
        return repr(self.value)


@dataclass(frozen=True, slots=True)
class Boolean(Value):
    value: bool

    kind: ClassVar[ValueKind] = ValueKind.BOOLEAN

    def truthy(self) -> bool:
        return self.value

    def to_python(self) -> bool:
        return self.value

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True, slots=True)
class String(Value):
    value: str

    kind: ClassVar[ValueKind] = ValueKind.STRING

    def truthy(self) -> bool:
        return self.value != ""

    def to_python(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class List(Value):
    items: tuple[Value, ...] = ()

    kind: ClassVar[ValueKind] = ValueKind.LIST

    @classmethod
    def of(cls, items: Iterable[Value]) -> List:
        return cls(tuple(items))

    def truthy(self) -> bool:
        return len(self.items) > 0

    def to_python(self) -> list[Any]:
        return [item.to_python() for item in self.items]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __str__(self) -> str:
        return "[" + ", ".join(_display(item) for item in self.items) + "]"


TRUE = Boolean(True)
FALSE = Boolean(False)


def _display(value: Value) -> str:
    if isinstance(value, String):
        return f'"{value.value}"'
    return str(value)


def check_integer_range(result: int) -> int:
    """Return ``result`` unchanged if it fits in a signed 64-bit integer.

    Raises:
        ExpressionArithmeticError: On overflow.
    """
    if result < INT_MIN or result > INT_MAX:
        raise ExpressionArithmeticError(f"Integer overflow: {result} does not fit in 64 bits")
    return result


def values_equal(left: Value, right: Value) -> bool:
    """Equality used by the ``==`` and ``!=`` operators.

    Integers and floats compare numerically with each other, lists compare
    element-wise with the same rule, and any other pair of different variants
    is unequal. Never raises.
    """
    if left.is_numeric and right.is_numeric:
        return left.value == right.value  # type: ignore[attr-defined]
    if isinstance(left, List) and isinstance(right, List):
        return len(left) == len(right) and all(
            values_equal(a, b) for a, b in zip(left.items, right.items)
        )
    if left.kind is not right.kind:
        return False
    return left == right


def compare_values(left: Value, right: Value) -> int:
    """Three-way comparison used by the ordering operators.

    Returns:
        A negative number, zero, or a positive number as ``left`` is less
        than, equal to, or greater than ``right``.

    Raises:
        ExpressionTypeError: If the two values have no defined ordering,
            e.g. a list against a boolean.
    """
    if left.is_numeric and right.is_numeric:
        a, b = left.value, right.value  # type: ignore[attr-defined]
        return (a > b) - (a < b)
    if isinstance(left, List) and isinstance(right, List):
        for a, b in zip(left.items, right.items):
            outcome = compare_values(a, b)
            if outcome:
                return outcome
        return (len(left) > len(right)) - (len(left) < len(right))
    if left.kind is right.kind and left.kind in (ValueKind.STRING, ValueKind.BOOLEAN):
        a, b = left.value, right.value  # type: ignore[attr-defined]
        return (a > b) - (a < b)
    raise ExpressionTypeError(
        f"Cannot compare {left.kind.value} with {right.kind.value}"
    )
