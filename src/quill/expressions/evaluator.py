"""Expression evaluator for Quill.

Reduces a parsed expression tree to a :class:`~quill.expressions.values.Value`
against a :class:`~quill.expressions.context.Context`:

- Terms: constants evaluate to themselves, variables are looked up
- Binary nodes: both operands are evaluated (no short-circuit), then the
  operator is applied
- Unary nodes: the operand is evaluated, then the prefix operator applied
- Lists: elements are evaluated in order; the first failure aborts the list

Evaluation is a pure function of (tree, context): nothing is cached on the
nodes and the context is only read, so repeated calls give identical results
and one tree may be evaluated from several threads at once.
"""

from __future__ import annotations

from quill.expressions.context import Context
from quill.expressions.errors import ExpressionError, ExpressionEvaluationError
from quill.expressions.parser import (
    BinaryExpression,
    Expression,
    ListExpression,
    TermExpression,
    UnaryExpression,
    parse_source,
)
from quill.expressions.values import List, Value

__all__ = [
    "ExpressionEvaluator",
    "evaluate",
    "evaluate_source",
    "evaluate_default",
]


class ExpressionEvaluator:
    """Evaluates parsed expressions against a context.

    Attributes:
        context: The read-only variable environment.

    Example:
        ```python
        evaluator = ExpressionEvaluator(Context({"count": 3}))
        expr = parse_source("<% count * 2 + 1 %>")
        evaluator.evaluate(expr)  # Integer(value=7)
        ```
    """

    def __init__(self, context: Context | None = None) -> None:
        self._context = context if context is not None else Context.default()

    @property
    def context(self) -> Context:
        return self._context

    def evaluate(self, expr: Expression) -> Value:
        """Evaluate a single expression tree.

        Args:
            expr: Root node produced by the parser (or built by hand).

        Returns:
            The resulting value.

        Raises:
            UndefinedVariableError: If a variable is missing from the context.
            ExpressionTypeError: If an operator gets operands it cannot handle.
            ExpressionArithmeticError: On division by zero or overflow.
            UnsupportedOperationError: If a node applies an operator in a
                position it has no meaning for.
        """
        # Post-order walk with an explicit stack: a left-deep chain such as
        # "1 + 1 + ... + 1" is as deep as it is long.
        pending: list[tuple[Expression, bool]] = [(expr, False)]
        results: list[Value] = []
        while pending:
            node, ready = pending.pop()
            if isinstance(node, TermExpression):
                results.append(node.term.evaluate(self._context))
            elif isinstance(node, BinaryExpression):
                if ready:
                    right = results.pop()
                    left = results.pop()
                    results.append(node.op.evaluate_binary(left, right))
                else:
                    pending.append((node, True))
                    pending.append((node.right, False))
                    pending.append((node.left, False))
            elif isinstance(node, UnaryExpression):
                if ready:
                    results.append(node.op.evaluate_unary(results.pop()))
                else:
                    pending.append((node, True))
                    pending.append((node.operand, False))
            elif isinstance(node, ListExpression):
                if ready:
                    start = len(results) - len(node.items)
                    items = results[start:]
                    del results[start:]
                    results.append(List.of(items))
                else:
                    pending.append((node, True))
                    pending.extend((item, False) for item in reversed(node.items))
            else:
                raise ExpressionEvaluationError(
                    f"Unknown expression node: {type(node).__name__}"
                )
        return results.pop()

    def evaluate_source(self, source: str) -> Value:
        """Tokenize, parse and evaluate one ``<% ... %>`` block.

        Errors raised on the way carry ``source`` as their ``expression``.
        """
        try:
            return self.evaluate(parse_source(source))
        except ExpressionError as e:
            if e.expression is None:
                e.expression = source
            raise


def evaluate(expr: Expression, context: Context | None = None) -> Value:
    """Evaluate a parsed expression; an omitted context means no variables."""
    return ExpressionEvaluator(context).evaluate(expr)


def evaluate_source(source: str, context: Context | None = None) -> Value:
    """Evaluate expression source text in one step.

    Examples:
        >>> evaluate_source("<% 1 == 2 %>")
        Boolean(value=False)
        >>> evaluate_source("name", Context({"name": "quill"}))
        String(value='quill')
    """
    return ExpressionEvaluator(context).evaluate_source(source)


def evaluate_default(source: str) -> Value:
    """Evaluate expression source text against an empty context."""
    return evaluate_source(source, Context.default())
