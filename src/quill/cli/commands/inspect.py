"""``quill parse`` and ``quill tokens`` commands.

Both are debugging aids: they show what the lexer and parser make of a block
without evaluating it.
"""

from __future__ import annotations

import click
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from quill.cli.console import console
from quill.cli.context import ExitCode
from quill.cli.output import format_expression_error
from quill.expressions import (
    BinaryExpression,
    Constant,
    Expression,
    ExpressionError,
    ListExpression,
    String,
    TermExpression,
    UnaryExpression,
    parse_source,
    tokenize,
)

__all__ = ["parse", "tokens", "build_tree"]


def _node_label(expr: Expression) -> Text:
    if isinstance(expr, TermExpression):
        term = expr.term
        if isinstance(term, Constant):
            value = term.value
            shown = f'"{value.value}"' if isinstance(value, String) else str(value)
            return Text.assemble(("constant ", "bold"), shown, (f" ({value.kind.value})", "dim"))
        return Text.assemble(("variable ", "bold"), (term.name, "cyan"))
    if isinstance(expr, UnaryExpression):
        return Text.assemble(("unary ", "bold"), (expr.op.value, "magenta"))
    if isinstance(expr, BinaryExpression):
        return Text.assemble(("binary ", "bold"), (expr.op.value, "magenta"))
    return Text.assemble(("list ", "bold"), (f"({len(expr.items)} items)", "dim"))


def _children(expr: Expression) -> tuple[Expression, ...]:
    if isinstance(expr, UnaryExpression):
        return (expr.operand,)
    if isinstance(expr, BinaryExpression):
        return (expr.left, expr.right)
    if isinstance(expr, ListExpression):
        return expr.items
    return ()


def build_tree(expr: Expression) -> Tree:
    """Build a Rich tree mirroring an expression tree."""
    root = Tree(_node_label(expr))
    pending: list[tuple[Expression, Tree]] = [(expr, root)]
    while pending:
        node, branch = pending.pop()
        children = _children(node)
        branches = [branch.add(_node_label(child)) for child in children]
        pending.extend(reversed(list(zip(children, branches))))
    return root


@click.command()
@click.argument("source")
@click.pass_context
def parse(ctx: click.Context, source: str) -> None:
    """Print the expression tree of SOURCE.

    Examples:
        quill parse "<% 2 * 2 + 3 * 5 %>"
    """
    try:
        expr = parse_source(source)
    except ExpressionError as e:
        click.echo(format_expression_error(e), err=True)
        ctx.exit(ExitCode.FAILURE)

    console.print(build_tree(expr))


@click.command()
@click.argument("source")
@click.pass_context
def tokens(ctx: click.Context, source: str) -> None:
    """Print the tokens of SOURCE with their positions.

    Examples:
        quill tokens "<% a && [1, 2] %>"
    """
    try:
        items = tokenize(source)
    except ExpressionError as e:
        click.echo(format_expression_error(e), err=True)
        ctx.exit(ExitCode.FAILURE)

    table = Table(show_lines=False)
    table.add_column("Kind", style="bold")
    table.add_column("Text")
    table.add_column("Line", justify="right")
    table.add_column("Column", justify="right")

    for tok in items:
        table.add_row(tok.kind.value, Text(tok.text), str(tok.line), str(tok.column))

    console.print(table)
