"""Subcommand modules for relgraph.

:func:`register_commands` imports each command lazily so ``relgraph --help``
stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Attach every standalone command to the root group."""
    from relgraph.commands.gql import gql
    from relgraph.commands.init_cmd import init_cmd
    from relgraph.commands.sql import sql
    from relgraph.commands.types import types

    cli.add_command(init_cmd)
    cli.add_command(types)
    cli.add_command(gql)
    cli.add_command(sql)
