"""InMemoryAdapter: process-local backend for tests and scripts.

Items live in an insertion-ordered dict. Two structures keep edge access
off the full-scan path:

- ``(source_id, role)`` index for relationship accessors.
- A NetworkX ``MultiDiGraph`` mirroring every edge item, used for the
  bounded ancestor/descendant walks. Parallel edges (different roles
  between the same pair) are keyed by edge gid.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import networkx as nx

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

logger = logging.getLogger(__name__)


class InMemoryAdapter(StorageAdapter):
    """Dict-backed adapter with an indexed edge lookup."""

    def __init__(self) -> None:
        self._items: dict[str, DbItem] = {}
        self._edge_index: dict[tuple[str, str], dict[str, None]] = {}
        self._graph: nx.MultiDiGraph = nx.MultiDiGraph()

    async def initialize(self) -> None:
        logger.debug("In-memory adapter ready")

    async def close(self) -> None:
        self._items.clear()
        self._edge_index.clear()
        self._graph.clear()

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def get_item(self, oid: str, gid: str) -> DbItem | None:
        item = self._items.get(gid)
        if item is None or item.metadata.oid != oid:
            return None
        return _copy(item)

    async def get_item_by_gid(self, gid: str, class_name: str | None = None) -> DbItem | None:
        item = self._items.get(gid)
        if item is None:
            return None
        if class_name is not None and item.metadata.class_name != class_name:
            return None
        return _copy(item)

    async def get_items_by_gid(
        self,
        gids: Sequence[str],
        class_name: str | None = None,
    ) -> list[DbItem]:
        results: list[DbItem] = []
        for gid in gids:
            item = await self.get_item_by_gid(gid, class_name)
            if item is not None:
                results.append(item)
        return results

    async def put_item(self, props: Mapping[str, Any], metadata: NodeMetadata) -> None:
        previous = self._items.get(metadata.gid)
        if previous is not None:
            self._unindex(previous)
        item = DbItem(props=dict(props), metadata=metadata)
        self._items[metadata.gid] = item
        self._index(item)

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

        candidates: list[DbItem]
        if "source_id" in metadata and "role" in metadata:
            key = (str(metadata["source_id"]), str(metadata["role"]))
            candidates = [self._items[gid] for gid in self._edge_index.get(key, {})]
        else:
            candidates = list(self._items.values())

        wanted = set(gids) if gids is not None else None
        results = [
            _copy(item)
            for item in candidates
            if (wanted is None or item.metadata.gid in wanted)
            and _metadata_match(item.metadata, metadata)
            and props_match(item.props, props or {})
        ]
        results.sort(
            key=lambda item: getattr(item.metadata, order_by),
            reverse=order == SortOrder.DESC,
        )
        return results

    async def delete_item(self, oid: str, gid: str) -> None:
        item = self._items.get(gid)
        if item is None or item.metadata.oid != oid:
            return
        self._unindex(item)
        del self._items[gid]

    # ------------------------------------------------------------------
    # Graph walks
    # ------------------------------------------------------------------

    async def query_ancestors_by_class_name(
        self,
        oid: str,
        target_gid: str,
        source_class_name: str,
        depth: int = 10,
    ) -> list[DbItem]:
        scoped = self._scoped_graph(oid).reverse(copy=False)
        return self._walk(scoped, oid, target_gid, source_class_name, depth)

    async def query_descendants_by_class_name(
        self,
        oid: str,
        source_gid: str,
        target_class_name: str,
        depth: int = 10,
    ) -> list[DbItem]:
        return self._walk(self._scoped_graph(oid), oid, source_gid, target_class_name, depth)

    def _scoped_graph(self, oid: str) -> nx.MultiDiGraph:
        graph = self._graph
        return nx.subgraph_view(
            graph,
            filter_edge=lambda u, v, k: graph.edges[u, v, k]["oid"] == oid,
        )

    def _walk(
        self,
        graph: nx.MultiDiGraph,
        oid: str,
        start: str,
        class_name: str,
        depth: int,
    ) -> list[DbItem]:
        if start not in graph or depth < 1:
            return []
        distances = nx.single_source_shortest_path_length(graph, start, cutoff=depth)
        found = sorted((dist, gid) for gid, dist in distances.items() if gid != start)
        results: list[DbItem] = []
        for _dist, gid in found:
            item = self._items.get(gid)
            if item is None:
                continue
            if item.metadata.oid == oid and item.metadata.class_name == class_name:
                results.append(_copy(item))
        return results

    # ------------------------------------------------------------------
    # Index maintenance
    # ------------------------------------------------------------------

    def _index(self, item: DbItem) -> None:
        meta = item.metadata
        if not isinstance(meta, EdgeMetadata):
            return
        self._edge_index.setdefault((meta.source_id, meta.role), {})[meta.gid] = None
        self._graph.add_edge(
            meta.source_id,
            meta.target_id,
            key=meta.gid,
            oid=meta.oid,
            role=meta.role,
        )

    def _unindex(self, item: DbItem) -> None:
        meta = item.metadata
        if not isinstance(meta, EdgeMetadata):
            return
        bucket = self._edge_index.get((meta.source_id, meta.role))
        if bucket is not None:
            bucket.pop(meta.gid, None)
            if not bucket:
                del self._edge_index[(meta.source_id, meta.role)]
        if self._graph.has_edge(meta.source_id, meta.target_id, key=meta.gid):
            self._graph.remove_edge(meta.source_id, meta.target_id, key=meta.gid)


def _metadata_match(meta: NodeMetadata, expected: Mapping[str, Any]) -> bool:
    for key, value in expected.items():
        if getattr(meta, key, None) != value:
            return False
    return True


def _copy(item: DbItem) -> DbItem:
    return DbItem(props=dict(item.props), metadata=item.metadata)
