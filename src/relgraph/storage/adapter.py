"""StorageAdapter: the contract every backend must provide.

Nodes and edges share one keyspace addressed by ``(oid, gid)``. Edges are
ordinary items whose metadata additionally carries source, target and role;
their identity is independent of the node pair they connect.

INVARIANT: Adapters are the only channel to durable state. The engine
performs no caching of its own.

INVARIANT: Every adapter serves ``(source_id, role)`` edge lookups from an
index, never from a full scan. All relationship accessors depend on it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from relgraph.domain.types import SortOrder

EDGE_CLASS_NAME = "Edge"

# Metadata keys accepted by ``query_items`` filters.
METADATA_FILTER_KEYS = frozenset(
    {
        "gid",
        "oid",
        "class_name",
        "source_id",
        "source_class_name",
        "target_id",
        "target_class_name",
        "role",
    }
)

ORDERABLE_COLUMNS = frozenset({"sort_value", "created_at", "last_updated", "gid"})


class NodeMetadata(BaseModel):
    """Storage metadata for a node."""

    model_config = ConfigDict(frozen=True)

    gid: str
    oid: str
    class_name: str
    created_at: datetime
    last_updated: datetime
    sort_value: int


class EdgeMetadata(NodeMetadata):
    """Storage metadata for an edge: a node record plus its endpoints and role."""

    source_id: str
    source_class_name: str
    target_id: str
    target_class_name: str
    role: str


@dataclass(frozen=True)
class DbItem:
    """One stored record as returned by an adapter."""

    props: dict[str, Any]
    metadata: NodeMetadata


def check_metadata_filter(metadata: Mapping[str, Any]) -> None:
    """Reject filter keys the contract does not define."""
    unknown = set(metadata) - METADATA_FILTER_KEYS
    if unknown:
        msg = f"Unsupported metadata filter keys: {sorted(unknown)}"
        raise ValueError(msg)


def props_match(props: Mapping[str, Any], expected: Mapping[str, Any]) -> bool:
    """Exact-match predicate over props; booleans never equal numbers."""
    for key, value in expected.items():
        if key not in props:
            return False
        actual = props[key]
        if isinstance(actual, bool) != isinstance(value, bool):
            return False
        if actual != value:
            return False
    return True


class StorageAdapter(ABC):
    """Async storage backend contract.

    Backends raise :class:`relgraph.domain.errors.AdapterError` for their own
    failures. Callers own retry policy; adapters do not retry.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the backend (create tables, open pools)."""

    @abstractmethod
    async def close(self) -> None:
        """Release backend resources."""

    @abstractmethod
    async def get_item(self, oid: str, gid: str) -> DbItem | None:
        """Fetch one item within the owner scope *oid*."""

    @abstractmethod
    async def get_item_by_gid(self, gid: str, class_name: str | None = None) -> DbItem | None:
        """Fetch one item by global id, optionally constrained to *class_name*."""

    @abstractmethod
    async def get_items_by_gid(
        self,
        gids: Sequence[str],
        class_name: str | None = None,
    ) -> list[DbItem]:
        """Fetch several items by global id. Missing ids are skipped."""

    @abstractmethod
    async def put_item(self, props: Mapping[str, Any], metadata: NodeMetadata) -> None:
        """Insert or replace the item identified by ``metadata.gid``."""

    @abstractmethod
    async def query_items(
        self,
        metadata: Mapping[str, Any],
        props: Mapping[str, Any] | None = None,
        gids: Sequence[str] | None = None,
        order: SortOrder = SortOrder.ASC,
        order_by: str = "sort_value",
    ) -> list[DbItem]:
        """Return items matching every metadata and prop value exactly.

        *gids*, when given, restricts the candidates to those ids.
        """

    @abstractmethod
    async def delete_item(self, oid: str, gid: str) -> None:
        """Delete one item. Deleting a missing item is a no-op."""

    @abstractmethod
    async def query_ancestors_by_class_name(
        self,
        oid: str,
        target_gid: str,
        source_class_name: str,
        depth: int = 10,
    ) -> list[DbItem]:
        """Walk edges backwards from *target_gid* up to *depth* hops.

        Returns nodes of *source_class_name* within scope *oid*.
        """

    @abstractmethod
    async def query_descendants_by_class_name(
        self,
        oid: str,
        source_gid: str,
        target_class_name: str,
        depth: int = 10,
    ) -> list[DbItem]:
        """Walk edges forwards from *source_gid* up to *depth* hops.

        Returns nodes of *target_class_name* within scope *oid*.
        """
