"""Command: list registered node types."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from relgraph.commands._base import RelCommand
from relgraph.services.types import TypesService

if TYPE_CHECKING:
    from relgraph.commands._context import AppContext

_TYPES_EXAMPLES = (
    "relgraph types",
    "relgraph --json types",
)


@click.command("types", cls=RelCommand, examples=_TYPES_EXAMPLES)
@click.pass_obj
def types(app: AppContext) -> None:
    """Show node types with their fields and derived relationship methods."""
    app.emit(TypesService(app.settings, registry=app.registry).list_types())
