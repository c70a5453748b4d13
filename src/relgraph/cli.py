"""Root CLI group for relgraph with global flags and command registration."""

from __future__ import annotations

import click

from relgraph import __version__
from relgraph.commands import register_commands
from relgraph.commands._context import AppContext
from relgraph.config.logging import bind_log_context
from relgraph.config.settings import RelGraphSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="relgraph")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """relgraph: typed graph objects over pluggable storage."""
    settings = RelGraphSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    bind_log_context(command=ctx.invoked_subcommand)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
