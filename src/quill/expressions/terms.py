"""Grammar leaves: literal constants and variable references."""

from __future__ import annotations

from dataclasses import dataclass

from quill.expressions.context import Context
from quill.expressions.errors import UndefinedVariableError
from quill.expressions.values import Value

__all__ = ["Term", "Constant", "Variable"]


class Term:
    """A literal constant or a variable reference."""

    __slots__ = ()

    @staticmethod
    def constant(value: Value) -> Constant:
        return Constant(value)

    @staticmethod
    def variable(name: str) -> Variable:
        return Variable(name)

    def evaluate(self, context: Context) -> Value:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class Constant(Term):
    """A literal. Evaluation ignores the context and always succeeds."""

    value: Value

    def evaluate(self, context: Context) -> Value:
        return self.value


@dataclass(frozen=True, slots=True)
class Variable(Term):
    """A reference to a context variable.

    A name missing from the context is an error, never a default value.
    """

    name: str

    def evaluate(self, context: Context) -> Value:
        value = context.get(self.name)
        if value is None:
            raise UndefinedVariableError(self.name, context_vars=context.names())
        return value
