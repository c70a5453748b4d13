"""Command: project initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from relgraph.commands._base import RelCommand
from relgraph.services.init import InitService

if TYPE_CHECKING:
    from relgraph.commands._context import AppContext

_INIT_EXAMPLES = (
    "relgraph init",
    "relgraph init --no-config",
    "RELGRAPH_STORAGE__PATH=/tmp/graph.db relgraph init",
)


@click.command("init", cls=RelCommand, examples=_INIT_EXAMPLES)
@click.option("--no-config", is_flag=True, help="Create storage without writing relgraph.toml.")
@click.pass_obj
def init_cmd(app: AppContext, no_config: bool) -> None:
    """Create relgraph.toml and the storage tables in the project root."""
    service = InitService(app.settings, registry=app.registry)
    app.emit(app.run(service.init_project(write_config=not no_config)))
