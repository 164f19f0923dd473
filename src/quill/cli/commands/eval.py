"""``quill eval`` command."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
import yaml

from quill.cli.context import ExitCode
from quill.cli.output import OutputFormat, format_expression_error, format_value
from quill.expressions import (
    Context,
    ExpressionError,
    ExpressionEvaluator,
)
from quill.logging import get_logger

logger = get_logger(__name__)


def parse_var(raw: str) -> tuple[str, Any]:
    """Split a ``NAME=VALUE`` option and decode VALUE as YAML.

    ``count=3`` gives an int, ``ratio=2.5`` a float, ``ok=true`` a bool,
    ``ids=[1, 2]`` a list, and anything else a string.

    Raises:
        click.BadParameter: If ``raw`` has no ``=`` or an empty name.
    """
    name, sep, text = raw.partition("=")
    name = name.strip()
    if not sep or not name:
        raise click.BadParameter(f"expected NAME=VALUE, got {raw!r}", param_hint="--var")
    try:
        value = yaml.safe_load(text) if text else ""
    except yaml.YAMLError:
        value = text
    return name, value


def load_vars_file(path: Path) -> dict[str, Any]:
    """Read a YAML mapping of variables."""
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise click.ClickException(f"Invalid YAML in {path}: {e}") from e
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise click.ClickException(f"Variables file {path} must contain a mapping")
    return loaded


@click.command("eval")
@click.argument("source")
@click.option(
    "--var",
    "variables",
    multiple=True,
    metavar="NAME=VALUE",
    help="Define a variable (repeatable). VALUE is read as YAML.",
)
@click.option(
    "--vars-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file mapping variable names to values.",
)
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice([f.value for f in OutputFormat]),
    default=OutputFormat.TEXT.value,
    help="Output format (text or json).",
)
@click.pass_context
def eval_command(
    ctx: click.Context,
    source: str,
    variables: tuple[str, ...],
    vars_file: Path | None,
    fmt: str,
) -> None:
    """Evaluate an expression block and print its value.

    SOURCE is a ``<% ... %>`` block or a bare expression.

    Examples:
        quill eval "<% 2 * 2 + 3 * 5 %>"
        quill eval "count > 3 && logged_in" --var count=5 --var logged_in=true
        quill eval "<% name %>" --vars-file vars.yaml --format json
    """
    values: dict[str, Any] = load_vars_file(vars_file) if vars_file else {}
    values.update(parse_var(raw) for raw in variables)

    try:
        result = ExpressionEvaluator(Context(values)).evaluate_source(source)
    except ExpressionError as e:
        if e.expression is None:
            e.expression = source
        logger.debug("expression_failed", source=source, error=e.message)
        click.echo(format_expression_error(e), err=True)
        ctx.exit(ExitCode.FAILURE)

    logger.debug("expression_evaluated", source=source, kind=result.kind.value)
    click.echo(format_value(result, OutputFormat(fmt)))
