"""Expression-specific error types for Quill.

Lexing, parsing and evaluation each fail with their own exception family so
that a template renderer can tell a malformed block apart from a block that
is well formed but cannot be evaluated against the current context.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from quill.exceptions import QuillError

if TYPE_CHECKING:
    from quill.expressions.ops import Op
    from quill.expressions.tokens import TokenWithContext

__all__ = [
    "ExpressionError",
    "ExpressionLexError",
    "ExpressionSyntaxError",
    "UnexpectedEndOfInput",
    "ExpressionEvaluationError",
    "UndefinedVariableError",
    "ExpressionTypeError",
    "ExpressionArithmeticError",
    "UnsupportedOperationError",
    "ExpressionErrorInfo",
]


class ExpressionError(QuillError):
    """Base exception for all expression-related errors.

    Attributes:
        message: Human-readable error message.
        expression: The expression source that caused the error (if known).
    """

    def __init__(
        self,
        message: str,
        expression: str | None = None,
    ) -> None:
        """Initialize the ExpressionError.

        Args:
            message: Human-readable error message.
            expression: The expression source that caused the error.
        """
        self.expression = expression
        super().__init__(message)


class ExpressionLexError(ExpressionError):
    """Raised when block source cannot be split into tokens.

    Covers invalid characters, unterminated string literals, unknown escape
    sequences and integer literals that do not fit in 64 bits.

    Attributes:
        line: 1-based line of the offending character.
        column: 1-based column of the offending character.
        offset: 0-based character offset into the source.
    """

    def __init__(
        self,
        message: str,
        expression: str,
        line: int = 1,
        column: int = 1,
        offset: int = 0,
    ) -> None:
        self.line = line
        self.column = column
        self.offset = offset
        super().__init__(f"{message} at {line}:{column}", expression=expression)


class ExpressionSyntaxError(ExpressionError):
    """Raised when a token appears where the grammar forbids it.

    Attributes:
        token: The offending token with its source position, or None when the
            error is not tied to a single token.
    """

    def __init__(
        self,
        message: str,
        token: TokenWithContext | None = None,
        expression: str | None = None,
    ) -> None:
        """Initialize the ExpressionSyntaxError.

        Args:
            message: Human-readable error message.
            token: The offending token.
            expression: The expression source, if known.
        """
        self.token = token
        if token is not None:
            message = f"{message}: {token.text!r} at {token.line}:{token.column}"
        super().__init__(message, expression=expression)

    @property
    def line(self) -> int:
        return self.token.line if self.token is not None else 0

    @property
    def column(self) -> int:
        return self.token.column if self.token is not None else 0


class UnexpectedEndOfInput(ExpressionSyntaxError):
    """Raised when the token stream runs out where a token was required."""

    def __init__(
        self,
        message: str = "Unexpected end of expression",
        expression: str | None = None,
    ) -> None:
        super().__init__(message, token=None, expression=expression)


class ExpressionEvaluationError(ExpressionError):
    """Raised when a well-formed expression cannot be evaluated."""


class UndefinedVariableError(ExpressionEvaluationError):
    """Raised when a variable term names something absent from the context.

    Attributes:
        name: The missing variable name.
        context_vars: Names that were available in the context.
    """

    def __init__(
        self,
        name: str,
        context_vars: tuple[str, ...] = (),
        expression: str | None = None,
    ) -> None:
        self.name = name
        self.context_vars = context_vars
        message = f"Undefined variable '{name}'"
        if context_vars:
            message = f"{message}\nAvailable variables: {', '.join(sorted(context_vars))}"
        super().__init__(message, expression=expression)


class ExpressionTypeError(ExpressionEvaluationError):
    """Raised when an operator is applied to values it cannot handle."""


class ExpressionArithmeticError(ExpressionEvaluationError):
    """Raised for division or modulo by zero and 64-bit integer overflow."""


class UnsupportedOperationError(ExpressionEvaluationError):
    """Raised when an operator is used in a position it has no meaning for.

    ``!`` has no binary form and ``*`` has no unary form; the parser never
    builds such nodes, but hand-built trees can.

    Attributes:
        op: The operator that was misapplied.
    """

    def __init__(self, message: str, op: Op, expression: str | None = None) -> None:
        self.op = op
        super().__init__(message, expression=expression)


@dataclass(frozen=True, slots=True)
class ExpressionErrorInfo:
    """Expression error details flattened for reporting.

    Attributes:
        expression: The expression source that failed ("" if unknown).
        message: Human-readable error message.
        kind: Exception class name, e.g. "UndefinedVariableError".
        line: 1-based line of the failure (0 if not applicable).
        column: 1-based column of the failure (0 if not applicable).
    """

    expression: str
    message: str
    kind: str
    line: int = 0
    column: int = 0

    @classmethod
    def from_error(cls, error: ExpressionError) -> ExpressionErrorInfo:
        line = getattr(error, "line", 0)
        column = getattr(error, "column", 0)
        return cls(
            expression=error.expression or "",
            message=error.message,
            kind=type(error).__name__,
            line=line,
            column=column,
        )
