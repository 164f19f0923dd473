"""Expression parsing and evaluation for Quill templates.

This package implements the expression sub-language found inside template
blocks delimited by ``<%`` and ``%>``. A block is tokenized, parsed into an
immutable tree, and evaluated against a read-only :class:`Context`.

Expression Syntax
-----------------
- Literals: ``42``, ``3.13``, ``"text"``, ``'text'``, ``true``, ``false``
- Variables: ``user_id``, ``logged_in``
- Lists: ``[1, 2, "three", variable]`` (literals and variables only)
- Grouping: ``(1 + 2) * 3``
- Prefix operators: ``!`` / ``not``, ``-``, ``+``
- Binary operators, loosest to tightest: ``||`` / ``or``; ``&&`` / ``and``;
  ``==`` ``!=`` ``<`` ``<=`` ``>`` ``>=``; ``+`` ``-``; ``*`` ``/`` ``%``

Examples
--------
    <% 1 == 2 %>                 -> false
    <% 2 * 2 + 3 * 5 %>          -> 19
    <% !false == true && true %> -> true
    <% [1, 2, "three"] %>        -> [1, 2, "three"]

Module Structure
----------------
- tokens.py: Token kinds, positioned tokens and the peekable token stream
- lexer.py: Source text to tokens (terminals in grammar.lark)
- values.py: Runtime values and their equality, ordering and truthiness
- ops.py: Operators, precedence and operator semantics
- terms.py: Constant and variable leaves
- context.py: Read-only variable environment
- parser.py: Expression tree and recursive-descent parser
- evaluator.py: Tree-walk evaluator
- cache.py: Thread-safe cache of parsed expressions
- errors.py: Expression-specific error types

Parsed trees and contexts are immutable; evaluation is stateless and safe to
run from several threads against one cached tree.
"""

from __future__ import annotations

from quill.expressions.cache import (
    CacheStats,
    ExpressionCache,
    default_cache,
    reset_default_cache,
)
from quill.expressions.context import Context
from quill.expressions.errors import (
    ExpressionArithmeticError,
    ExpressionError,
    ExpressionErrorInfo,
    ExpressionEvaluationError,
    ExpressionLexError,
    ExpressionSyntaxError,
    ExpressionTypeError,
    UndefinedVariableError,
    UnexpectedEndOfInput,
    UnsupportedOperationError,
)
from quill.expressions.evaluator import (
    ExpressionEvaluator,
    evaluate,
    evaluate_default,
    evaluate_source,
)
from quill.expressions.lexer import tokenize
from quill.expressions.ops import Op
from quill.expressions.parser import (
    BinaryExpression,
    Expression,
    ListExpression,
    TermExpression,
    UnaryExpression,
    constant,
    parse,
    parse_source,
    variable,
)
from quill.expressions.terms import Constant, Term, Variable
from quill.expressions.tokens import Token, TokenKind, TokenStream, TokenWithContext
from quill.expressions.values import (
    FALSE,
    TRUE,
    Boolean,
    Float,
    Integer,
    List,
    String,
    Value,
    ValueKind,
)

__all__: list[str] = [
    # Error types
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
    # Tokens
    "TokenKind",
    "Token",
    "TokenWithContext",
    "TokenStream",
    "tokenize",
    # Values
    "Value",
    "ValueKind",
    "Integer",
    "Float",
    "Boolean",
    "String",
    "List",
    "TRUE",
    "FALSE",
    # Tree
    "Op",
    "Term",
    "Constant",
    "Variable",
    "Expression",
    "TermExpression",
    "UnaryExpression",
    "BinaryExpression",
    "ListExpression",
    "constant",
    "variable",
    "parse",
    "parse_source",
    # Evaluation
    "Context",
    "ExpressionEvaluator",
    "evaluate",
    "evaluate_source",
    "evaluate_default",
    # Cache
    "ExpressionCache",
    "CacheStats",
    "default_cache",
    "reset_default_cache",
]
