from __future__ import annotations

import click
import yaml

from quill.cli.context import CLIContext
from quill.cli.output import format_json


@click.group()
def config() -> None:
    """Inspect Quill configuration."""
    pass


@config.command("show")
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice(["yaml", "json"]),
    default="yaml",
    help="Output format (yaml or json).",
)
@click.pass_context
def config_show(ctx: click.Context, fmt: str) -> None:
    """Display current configuration.

    Shows the merged configuration from all sources (defaults, user config,
    project config, environment variables).

    Examples:
        quill config show
        quill config show --format json
    """
    cli_ctx: CLIContext = ctx.obj["cli_ctx"]
    config_dict = cli_ctx.config.model_dump(mode="json")

    if fmt == "json":
        click.echo(format_json(config_dict))
    else:
        click.echo(yaml.dump(config_dict, default_flow_style=False, sort_keys=False))
