"""Root CLI group for typegraph with global flags and command registration."""

from __future__ import annotations

import click

from typegraph import __version__
from typegraph.commands import register_commands
from typegraph.commands._context import AppContext
from typegraph.config.settings import GraphSettings


@click.group("typegraph", invoke_without_command=True)
@click.version_option(version=__version__, prog_name="typegraph")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging to stderr.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option("--db", "database_url", default=None, help="Database URL (overrides config).")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    database_url: str | None,
) -> None:
    """typegraph — schema-validated property graph over SQL."""
    settings = GraphSettings.from_cli(
        config_path=config_path,
        database_url=database_url,
        json_output=json_output,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    ctx.call_on_close(ctx.obj.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
