"""SqliteAdapter: SQLAlchemy Core over the asyncio extension (aiosqlite).

The database lives at the configured path (default
``{root}/.relgraph/relgraph.db``) in WAL mode. Every statement runs on a
short-lived connection; writes use ``engine.begin()`` so each adapter call
is its own transaction. Cross-call atomicity is not offered: the engine
documents the node-then-edge window instead of hiding it.

SQLAlchemy errors are translated to :class:`AdapterError` and re-raised;
nothing is retried here.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, event, func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from relgraph.domain.errors import AdapterError
from relgraph.domain.types import SortOrder
from relgraph.storage.adapter import (
    ORDERABLE_COLUMNS,
    DbItem,
    EdgeMetadata,
    NodeMetadata,
    StorageAdapter,
    check_metadata_filter,
    props_match,
)
from relgraph.storage.schema import items
from relgraph.storage.schema import metadata as schema_metadata

if TYPE_CHECKING:
    from sqlalchemy.engine import RowMapping
    from sqlalchemy.ext.asyncio import AsyncConnection

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"


def create_db_engine(db_path: Path | str) -> AsyncEngine:
    """Create an async SQLite engine with WAL mode enabled."""
    if str(db_path) == MEMORY_PATH:
        engine = create_async_engine(
            "sqlite+aiosqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", echo=False)

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return engine


class SqliteAdapter(StorageAdapter):
    """Durable adapter storing nodes and edges in one ``items`` table."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = db_path
        self._engine: AsyncEngine | None = None

    @property
    def db_path(self) -> Path | str:
        return self._db_path

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            msg = "SqliteAdapter used before initialize()"
            raise AdapterError(msg)
        return self._engine

    async def initialize(self) -> None:
        """Create the database file, tables and indexes. Idempotent."""
        if self._engine is not None:
            return
        if str(self._db_path) != MEMORY_PATH:
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._engine = create_db_engine(self._db_path)
        async with self._connect(write=True) as conn:
            await conn.run_sync(schema_metadata.create_all)
        logger.debug("SQLite adapter ready at %s", self._db_path)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None

    @asynccontextmanager
    async def _connect(self, *, write: bool = False) -> AsyncIterator[AsyncConnection]:
        """Yield a connection, translating backend failures to AdapterError."""
        try:
            if write:
                async with self.engine.begin() as conn:
                    yield conn
            else:
                async with self.engine.connect() as conn:
                    yield conn
        except SQLAlchemyError as exc:
            raise AdapterError(str(exc), detail={"backend": "sqlite"}) from exc

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def get_item(self, oid: str, gid: str) -> DbItem | None:
        stmt = select(items).where(items.c.oid == oid, items.c.gid == gid)
        async with self._connect() as conn:
            row = (await conn.execute(stmt)).mappings().first()
        return _row_to_item(row) if row is not None else None

    async def get_item_by_gid(self, gid: str, class_name: str | None = None) -> DbItem | None:
        stmt = select(items).where(items.c.gid == gid)
        if class_name is not None:
            stmt = stmt.where(items.c.class_name == class_name)
        async with self._connect() as conn:
            row = (await conn.execute(stmt)).mappings().first()
        return _row_to_item(row) if row is not None else None

    async def get_items_by_gid(
        self,
        gids: Sequence[str],
        class_name: str | None = None,
    ) -> list[DbItem]:
        if not gids:
            return []
        stmt = select(items).where(items.c.gid.in_(list(gids)))
        if class_name is not None:
            stmt = stmt.where(items.c.class_name == class_name)
        async with self._connect() as conn:
            rows = (await conn.execute(stmt)).mappings().all()
        by_gid = {str(row["gid"]): _row_to_item(row) for row in rows}
        return [by_gid[gid] for gid in gids if gid in by_gid]

    async def put_item(self, props: Mapping[str, Any], metadata: NodeMetadata) -> None:
        values: dict[str, Any] = {
            "gid": metadata.gid,
            "oid": metadata.oid,
            "class_name": metadata.class_name,
            "created_at": metadata.created_at.isoformat(),
            "last_updated": metadata.last_updated.isoformat(),
            "sort_value": metadata.sort_value,
            "props": json.dumps(dict(props)),
        }
        if isinstance(metadata, EdgeMetadata):
            values.update(
                source_id=metadata.source_id,
                source_class_name=metadata.source_class_name,
                target_id=metadata.target_id,
                target_class_name=metadata.target_class_name,
                role=metadata.role,
            )
        stmt = sqlite_insert(items).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[items.c.gid],
            set_={key: value for key, value in values.items() if key != "gid"},
        )
        async with self._connect(write=True) as conn:
            await conn.execute(stmt)

    async def query_items(
        self,
        metadata: Mapping[str, Any],
        props: Mapping[str, Any] | None = None,
        gids: Sequence[str] | None = None,
        order: SortOrder = SortOrder.ASC,
        order_by: str = "sort_value",
    ) -> list[DbItem]:
        check_metadata_filter(metadata)
        if order_by not in ORDERABLE_COLUMNS:
            msg = f"Cannot order by {order_by!r}"
            raise ValueError(msg)
        if gids is not None and not gids:
            return []

        stmt = select(items)
        for key, value in metadata.items():
            stmt = stmt.where(items.c[key] == value)
        for key, value in (props or {}).items():
            stmt = stmt.where(func.json_extract(items.c.props, f'$."{key}"') == value)
        if gids is not None:
            stmt = stmt.where(items.c.gid.in_(list(gids)))

        column = items.c[order_by]
        if order == SortOrder.DESC:
            stmt = stmt.order_by(column.desc(), items.c.gid.desc())
        else:
            stmt = stmt.order_by(column.asc(), items.c.gid.asc())

        async with self._connect() as conn:
            rows = (await conn.execute(stmt)).mappings().all()
        results = [_row_to_item(row) for row in rows]
        # json_extract folds booleans into integers; re-check exact types.
        return [item for item in results if props_match(item.props, props or {})]

    async def delete_item(self, oid: str, gid: str) -> None:
        stmt = delete(items).where(items.c.oid == oid, items.c.gid == gid)
        async with self._connect(write=True) as conn:
            await conn.execute(stmt)

    # ------------------------------------------------------------------
    # Graph walks (bounded BFS, one query per hop)
    # ------------------------------------------------------------------

    async def query_ancestors_by_class_name(
        self,
        oid: str,
        target_gid: str,
        source_class_name: str,
        depth: int = 10,
    ) -> list[DbItem]:
        return await self._walk(oid, target_gid, source_class_name, depth, forward=False)

    async def query_descendants_by_class_name(
        self,
        oid: str,
        source_gid: str,
        target_class_name: str,
        depth: int = 10,
    ) -> list[DbItem]:
        return await self._walk(oid, source_gid, target_class_name, depth, forward=True)

    async def _walk(
        self,
        oid: str,
        start: str,
        class_name: str,
        depth: int,
        *,
        forward: bool,
    ) -> list[DbItem]:
        from_col = items.c.source_id if forward else items.c.target_id
        to_col = items.c.target_id if forward else items.c.source_id

        visited: set[str] = {start}
        discovered: list[str] = []
        frontier: set[str] = {start}

        async with self._connect() as conn:
            for _hop in range(depth):
                if not frontier:
                    break
                stmt = select(to_col).where(
                    items.c.oid == oid,
                    items.c.role.is_not(None),
                    from_col.in_(sorted(frontier)),
                )
                rows = (await conn.execute(stmt)).scalars().all()
                next_frontier = {str(gid) for gid in rows} - visited
                visited |= next_frontier
                discovered.extend(sorted(next_frontier))
                frontier = next_frontier

            if not discovered:
                return []
            stmt = select(items).where(
                items.c.oid == oid,
                items.c.class_name == class_name,
                items.c.gid.in_(discovered),
            )
            rows = (await conn.execute(stmt)).mappings().all()

        by_gid = {str(row["gid"]): _row_to_item(row) for row in rows}
        return [by_gid[gid] for gid in discovered if gid in by_gid]


def _row_to_item(row: RowMapping) -> DbItem:
    common: dict[str, Any] = {
        "gid": row["gid"],
        "oid": row["oid"],
        "class_name": row["class_name"],
        "created_at": datetime.fromisoformat(row["created_at"]),
        "last_updated": datetime.fromisoformat(row["last_updated"]),
        "sort_value": row["sort_value"],
    }
    meta: NodeMetadata
    if row["role"] is not None:
        meta = EdgeMetadata(
            **common,
            source_id=row["source_id"],
            source_class_name=row["source_class_name"],
            target_id=row["target_id"],
            target_class_name=row["target_class_name"],
            role=row["role"],
        )
    else:
        meta = NodeMetadata(**common)
    return DbItem(props=json.loads(row["props"] or "{}"), metadata=meta)
