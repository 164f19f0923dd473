"""CLI entry point for Quill.

This module defines the Click-based command-line interface for Quill.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from dotenv import load_dotenv

# Load .env from the working directory before anything reads QUILL_* variables.
load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

from quill import __version__  # noqa: E402
from quill.cli.commands import config, eval_command, parse, tokens  # noqa: E402
from quill.cli.context import CLIContext, ExitCode  # noqa: E402
from quill.cli.output import format_error  # noqa: E402
from quill.config import load_config  # noqa: E402
from quill.exceptions import ConfigError  # noqa: E402
from quill.logging import configure_logging  # noqa: E402

_VERBOSITY_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="quill")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=False, path_type=str),
    default=None,
    help="Path to config file (overrides ./quill.yaml).",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for INFO, -vv for DEBUG).",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    default=False,
    help="Suppress non-essential output (ERROR level only).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: str | None,
    verbose: int,
    quiet: bool,
) -> None:
    """Quill - evaluate and inspect template expressions."""
    ctx.ensure_object(dict)

    config_path = Path(config_file) if config_file else None
    try:
        config_obj = load_config(config_path)
    except ConfigError as e:
        # Logging is not configured yet
        details = []
        if e.field:
            details.append(f"Field: {e.field}")
        if e.value is not None:
            details.append(f"Value: {e.value}")
        click.echo(format_error(e.message, details=details), err=True)
        ctx.exit(ExitCode.FAILURE)

    ctx.obj["cli_ctx"] = CLIContext(config=config_obj)

    # Priority: quiet > verbose > config
    if quiet:
        level = logging.ERROR
    elif verbose > 0:
        level = logging.INFO if verbose == 1 else logging.DEBUG
    else:
        level = _VERBOSITY_LEVELS.get(config_obj.verbosity, logging.WARNING)

    configure_logging(level=level)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(eval_command)
cli.add_command(parse)
cli.add_command(tokens)
cli.add_command(config)

if __name__ == "__main__":
    cli()
