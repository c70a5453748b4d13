"""SQLAlchemy Core table definitions for the SQLite backend.

Nodes and edges share the single ``items`` table. Edge rows fill the
``source_*``/``target_*``/``role`` columns; node rows leave them NULL.
Props are stored as a JSON document and filtered with ``json_extract``.
"""

from __future__ import annotations

from sqlalchemy import Column, Index, Integer, MetaData, Table, Text

metadata = MetaData()

items = Table(
    "items",
    metadata,
    Column("gid", Text, primary_key=True),
    Column("oid", Text, nullable=False),
    Column("class_name", Text, nullable=False),
    Column("created_at", Text, nullable=False),
    Column("last_updated", Text, nullable=False),
    Column("sort_value", Integer, nullable=False),
    Column("props", Text, nullable=False, server_default="{}"),  # JSON object
    # Edge-only columns
    Column("source_id", Text),
    Column("source_class_name", Text),
    Column("target_id", Text),
    Column("target_class_name", Text),
    Column("role", Text),
)

# ---------------------------------------------------------------------------
# Indexes for the lookups every relationship accessor depends on
# ---------------------------------------------------------------------------

Index("ix_items_oid_class", items.c.oid, items.c.class_name)
Index("ix_items_source_role", items.c.source_id, items.c.role)
Index("ix_items_target", items.c.target_id)
Index("ix_items_sort", items.c.sort_value)
