"""Output formatting utilities for Quill CLI.

This module defines output format options and formatting helpers for CLI commands.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from quill.expressions import ExpressionError, ExpressionErrorInfo, Value

__all__ = [
    "OutputFormat",
    "format_error",
    "format_expression_error",
    "format_json",
    "format_value",
]


class OutputFormat(str, Enum):
    """Supported output formats for CLI commands.

    Values:
        TEXT: Plain text, values printed in expression syntax.
        JSON: Machine-readable JSON output.
    """

    TEXT = "text"
    JSON = "json"


def format_error(
    message: str, details: list[str] | None = None, suggestion: str | None = None
) -> str:
    """Format an error message with optional details and suggestion.

    Args:
        message: Primary error message.
        details: Optional list of detail lines to include.
        suggestion: Optional suggestion for resolving the error.

    Returns:
        Formatted error string with details and suggestion if provided.

    Example:
        >>> print(format_error(
        ...     "Undefined variable 'x'",
        ...     details=["Expression: <% x %>"],
        ...     suggestion="Pass it with --var x=VALUE",
        ... ))
        Error: Undefined variable 'x'
          Expression: <% x %>
        Suggestion: Pass it with --var x=VALUE
    """
    lines = [f"Error: {message}"]

    if details:
        for detail in details:
            lines.append(f"  {detail}")

    if suggestion:
        lines.append(f"Suggestion: {suggestion}")

    return "\n".join(lines)


def format_expression_error(error: ExpressionError) -> str:
    """Format an expression error with its source and position."""
    info = ExpressionErrorInfo.from_error(error)
    details = [f"Kind: {info.kind}"]
    if info.expression:
        details.append(f"Expression: {info.expression}")
    if info.line:
        details.append(f"Position: line {info.line}, column {info.column}")
    return format_error(info.message, details=details)


def format_value(value: Value, fmt: OutputFormat = OutputFormat.TEXT) -> str:
    """Render an evaluated value for the terminal.

    Text output uses expression syntax, so strings inside lists are quoted
    and booleans print as ``true`` / ``false``. JSON output carries the
    variant name alongside the plain value.

    Example:
        >>> from quill.expressions import List, Integer, String
        >>> format_value(List.of([Integer(1), String("a")]))
        '[1, "a"]'
    """
    if fmt is OutputFormat.JSON:
        return format_json({"kind": value.kind.value, "value": value.to_python()})
    return str(value)


def format_json(data: Any) -> str:
    """Format data as indented JSON.

    Args:
        data: Any JSON-serializable data structure.

    Returns:
        Formatted JSON string with 2-space indentation.

    Raises:
        TypeError: If data is not JSON-serializable.
    """
    return json.dumps(data, indent=2)
