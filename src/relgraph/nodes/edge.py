"""Edge model: directed, role-labeled links persisted through the adapter.

An edge is a first-class item in the shared keyspace with its own id and
timestamps. Several edges with different roles may connect the same pair
of nodes.

INVARIANT: Edge lookups go through ``(source_id, role)``, which every
adapter serves from an index.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from relgraph.domain.ids import generate_gid, next_sort_value, utc_now
from relgraph.storage.adapter import EDGE_CLASS_NAME, DbItem, EdgeMetadata
from relgraph.storage.registry import AdapterRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Edge:
    """A persisted link from ``source_id`` to ``target_id`` under ``role``."""

    id: str
    owner_id: str
    source_id: str
    source_class_name: str
    target_id: str
    target_class_name: str
    role: str
    created_at: datetime

    @classmethod
    def from_item(cls, item: DbItem) -> Edge:
        meta = item.metadata
        if not isinstance(meta, EdgeMetadata):
            msg = f"Item {meta.gid} is a {meta.class_name}, not an edge"
            raise TypeError(msg)
        return cls(
            id=meta.gid,
            owner_id=meta.oid,
            source_id=meta.source_id,
            source_class_name=meta.source_class_name,
            target_id=meta.target_id,
            target_class_name=meta.target_class_name,
            role=meta.role,
            created_at=meta.created_at,
        )


async def create_edge(
    owner_id: str,
    source_id: str,
    source_class_name: str,
    target_id: str,
    target_class_name: str,
    role: str,
) -> Edge:
    """Persist a new edge and return it."""
    now = utc_now()
    metadata = EdgeMetadata(
        gid=generate_gid(),
        oid=owner_id,
        class_name=EDGE_CLASS_NAME,
        created_at=now,
        last_updated=now,
        sort_value=next_sort_value(),
        source_id=source_id,
        source_class_name=source_class_name,
        target_id=target_id,
        target_class_name=target_class_name,
        role=role,
    )
    adapter = await AdapterRegistry.get()
    await adapter.put_item({}, metadata)
    logger.debug("Linked %s -[%s]-> %s", source_id, role, target_id)
    return Edge.from_item(DbItem(props={}, metadata=metadata))


async def find_edges(owner_id: str, source_id: str, role: str) -> list[Edge]:
    """Edges of *role* leaving *source_id*, in creation order."""
    adapter = await AdapterRegistry.get()
    found = await adapter.query_items(
        {
            "oid": owner_id,
            "class_name": EDGE_CLASS_NAME,
            "source_id": source_id,
            "role": role,
        }
    )
    return [Edge.from_item(item) for item in found]


async def find_edges_from(owner_id: str, source_id: str) -> list[Edge]:
    """Every edge leaving *source_id*, whatever its role."""
    adapter = await AdapterRegistry.get()
    found = await adapter.query_items(
        {"oid": owner_id, "class_name": EDGE_CLASS_NAME, "source_id": source_id}
    )
    return [Edge.from_item(item) for item in found]


async def find_edges_to(owner_id: str, target_id: str) -> list[Edge]:
    """Every edge arriving at *target_id*, whatever its role."""
    adapter = await AdapterRegistry.get()
    found = await adapter.query_items(
        {"oid": owner_id, "class_name": EDGE_CLASS_NAME, "target_id": target_id}
    )
    return [Edge.from_item(item) for item in found]


async def delete_edge(owner_id: str, edge_id: str) -> None:
    """Delete one edge. Deleting a missing edge is a no-op."""
    adapter = await AdapterRegistry.get()
    await adapter.delete_item(owner_id, edge_id)
    logger.debug("Deleted edge %s", edge_id)
