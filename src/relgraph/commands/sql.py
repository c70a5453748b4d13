"""Command: read-only SQL against the SQLite store."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from relgraph.commands._base import RelCommand
from relgraph.services.sql import SqlService

if TYPE_CHECKING:
    from relgraph.commands._context import AppContext

_SQL_EXAMPLES = (
    'relgraph sql -q "SELECT class_name, count(*) FROM items GROUP BY class_name"',
    'relgraph --json sql -q "PRAGMA table_info(items)"',
)


@click.command("sql", cls=RelCommand, examples=_SQL_EXAMPLES)
@click.option("-q", "--query", "statement", required=True, help="Read-only SQL statement.")
@click.pass_obj
def sql(app: AppContext, statement: str) -> None:
    """Run a read-only SQL statement and print the rows."""
    service = SqlService(app.settings)
    app.emit(app.run(service.query(statement)))
