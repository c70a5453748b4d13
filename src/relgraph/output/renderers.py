"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from relgraph.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from relgraph.services.result import ServiceResult


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="rg.ok"), Text(f"  {result.op}", style="rg.op"))


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}: ", style="rg.key")
    if isinstance(value, (dict, list)):
        v = Text(json.dumps(value, separators=(",", ":"), default=str))
    elif key == "id" or key.endswith("_id"):
        v = Text(str(value), style="rg.id")
    else:
        v = Text(str(value))
    console.print(k, v, sep="")


def _render_warnings(console: Console, result: ServiceResult) -> None:
    for warning in result.warnings:
        console.print(Text("  warning: ", style="rg.warning"), warning, sep="")


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR", style="rg.error"),
        Text(f"  {result.op}", style="rg.op"),
        Text(": "),
        msg,
        sep="",
    )
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Renderers ─────────────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    _render_warnings(console, result)


def _render_sql(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render read-only query rows as a table."""
    columns: list[str] = result.data.get("columns", [])
    rows: list[list[Any]] = result.data.get("rows", [])
    _status_line(console, result)
    if not columns:
        _field(console, "rows", 0)
        return
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*("NULL" if cell is None else str(cell) for cell in row))
    console.print(table)
    _field(console, "rows", len(rows))


def _render_types(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render registered node types with their fields and relationships."""
    _status_line(console, result)
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("type", style="rg.type")
    table.add_column("fields")
    table.add_column("relationships")
    for node_type in result.data.get("types", []):
        fields = ", ".join(f"{name}: {kind}" for name, kind in node_type["fields"].items())
        relations = ", ".join(
            f"{rel['role']} ({rel['cardinality']}) -> {rel['target']}"
            for rel in node_type["relationships"]
        )
        table.add_row(node_type["name"], fields or "-", relations or "-")
    console.print(table)
    _render_warnings(console, result)


def _render_gql(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a GraphQL response body as indented JSON."""
    _status_line(console, result)
    console.print(json.dumps(result.data.get("data"), indent=2, default=str), markup=False)
    _render_warnings(console, result)


_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "sql": _render_sql,
    "types": _render_types,
    "gql": _render_gql,
}
