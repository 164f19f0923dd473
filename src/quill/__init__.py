"""Quill - an embedded expression language for template text.

Quill parses and evaluates the small expression sub-language found inside
template blocks such as ``<% 1 == 2 %>`` or ``<% [1, 2, variable] %>``.

Example:
    >>> from quill import Context, evaluate_source
    >>> evaluate_source("<% count * 2 > 3 %>", Context({"count": 2}))
    Boolean(value=True)
"""

from __future__ import annotations

__version__ = "0.1.0"

from quill.expressions import (  # noqa: E402
    Context,
    Expression,
    ExpressionError,
    Value,
    evaluate,
    evaluate_default,
    evaluate_source,
    parse,
    parse_source,
    tokenize,
)

__all__ = [
    "__version__",
    "Context",
    "Expression",
    "ExpressionError",
    "Value",
    "evaluate",
    "evaluate_default",
    "evaluate_source",
    "parse",
    "parse_source",
    "tokenize",
]
