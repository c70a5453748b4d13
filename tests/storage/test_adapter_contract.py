"""StorageAdapter contract tests, run against every backend."""

from __future__ import annotations

import pytest

from relgraph.domain.types import SortOrder
from relgraph.storage.adapter import EDGE_CLASS_NAME, EdgeMetadata, NodeMetadata, StorageAdapter
from tests.conftest import OID, edge_meta, node_meta


async def put_node(
    adapter: StorageAdapter, class_name: str = "Thing", **props: object
) -> NodeMetadata:
    meta = node_meta(class_name)
    await adapter.put_item(props, meta)
    return meta


async def link(
    adapter: StorageAdapter, source: NodeMetadata, target: NodeMetadata, role: str
) -> EdgeMetadata:
    meta = edge_meta(source, target, role)
    await adapter.put_item({}, meta)
    return meta


class TestItems:
    async def test_put_and_get(self, adapter: StorageAdapter) -> None:
        meta = await put_node(adapter, name="a", size=3)
        item = await adapter.get_item(OID, meta.gid)
        assert item is not None
        assert item.props == {"name": "a", "size": 3}
        assert item.metadata.gid == meta.gid
        assert item.metadata.class_name == "Thing"

    async def test_get_is_scoped_by_owner(self, adapter: StorageAdapter) -> None:
        meta = await put_node(adapter)
        assert await adapter.get_item("other-org", meta.gid) is None
        assert await adapter.get_item_by_gid(meta.gid) is not None

    async def test_get_by_gid_with_class(self, adapter: StorageAdapter) -> None:
        meta = await put_node(adapter, "Thing")
        assert await adapter.get_item_by_gid(meta.gid, "Thing") is not None
        assert await adapter.get_item_by_gid(meta.gid, "Other") is None

    async def test_get_items_by_gid_keeps_order_and_skips_missing(
        self, adapter: StorageAdapter
    ) -> None:
        a = await put_node(adapter)
        b = await put_node(adapter)
        found = await adapter.get_items_by_gid([b.gid, "missing", a.gid])
        assert [item.metadata.gid for item in found] == [b.gid, a.gid]

    async def test_put_replaces(self, adapter: StorageAdapter) -> None:
        meta = await put_node(adapter, name="a")
        await adapter.put_item({"name": "b"}, meta)
        item = await adapter.get_item(OID, meta.gid)
        assert item is not None
        assert item.props == {"name": "b"}

    async def test_delete(self, adapter: StorageAdapter) -> None:
        meta = await put_node(adapter)
        await adapter.delete_item(OID, meta.gid)
        assert await adapter.get_item(OID, meta.gid) is None

    async def test_delete_missing_is_noop(self, adapter: StorageAdapter) -> None:
        await adapter.delete_item(OID, "missing")

    async def test_delete_respects_owner(self, adapter: StorageAdapter) -> None:
        meta = await put_node(adapter)
        await adapter.delete_item("other-org", meta.gid)
        assert await adapter.get_item(OID, meta.gid) is not None


class TestQueryItems:
    async def test_filters_by_class_in_insertion_order(self, adapter: StorageAdapter) -> None:
        first = await put_node(adapter, "Thing")
        await put_node(adapter, "Other")
        second = await put_node(adapter, "Thing")
        found = await adapter.query_items({"oid": OID, "class_name": "Thing"})
        assert [item.metadata.gid for item in found] == [first.gid, second.gid]

    async def test_descending_order(self, adapter: StorageAdapter) -> None:
        first = await put_node(adapter)
        second = await put_node(adapter)
        found = await adapter.query_items({"oid": OID}, order=SortOrder.DESC)
        assert [item.metadata.gid for item in found] == [second.gid, first.gid]

    async def test_props_exact_match(self, adapter: StorageAdapter) -> None:
        await put_node(adapter, name="a", size=1)
        match = await put_node(adapter, name="b", size=2)
        found = await adapter.query_items({"oid": OID}, props={"name": "b", "size": 2})
        assert [item.metadata.gid for item in found] == [match.gid]

    async def test_booleans_never_match_numbers(self, adapter: StorageAdapter) -> None:
        flag = await put_node(adapter, value=True)
        number = await put_node(adapter, value=1)
        by_bool = await adapter.query_items({"oid": OID}, props={"value": True})
        by_number = await adapter.query_items({"oid": OID}, props={"value": 1})
        assert [item.metadata.gid for item in by_bool] == [flag.gid]
        assert [item.metadata.gid for item in by_number] == [number.gid]

    async def test_missing_prop_does_not_match(self, adapter: StorageAdapter) -> None:
        await put_node(adapter, name="a")
        assert await adapter.query_items({"oid": OID}, props={"size": 1}) == []

    async def test_gids_restrict_candidates(self, adapter: StorageAdapter) -> None:
        a = await put_node(adapter)
        await put_node(adapter)
        found = await adapter.query_items({"oid": OID}, gids=[a.gid])
        assert [item.metadata.gid for item in found] == [a.gid]
        assert await adapter.query_items({"oid": OID}, gids=[]) == []

    async def test_unknown_metadata_key(self, adapter: StorageAdapter) -> None:
        with pytest.raises(ValueError, match="Unsupported metadata filter"):
            await adapter.query_items({"colour": "red"})

    async def test_unknown_order_column(self, adapter: StorageAdapter) -> None:
        with pytest.raises(ValueError, match="Cannot order by"):
            await adapter.query_items({"oid": OID}, order_by="props")


class TestEdges:
    async def test_edge_lookup_by_source_and_role(self, adapter: StorageAdapter) -> None:
        book = await put_node(adapter, "Book")
        frank = await put_node(adapter, "Person")
        john = await put_node(adapter, "Person")
        author = await link(adapter, book, frank, "author")
        await link(adapter, book, john, "illustrator")

        found = await adapter.query_items(
            {"oid": OID, "class_name": EDGE_CLASS_NAME, "source_id": book.gid, "role": "author"}
        )
        assert [item.metadata.gid for item in found] == [author.gid]
        edge = found[0].metadata
        assert isinstance(edge, EdgeMetadata)
        assert edge.target_id == frank.gid
        assert edge.target_class_name == "Person"

    async def test_parallel_edges_between_same_pair(self, adapter: StorageAdapter) -> None:
        book = await put_node(adapter, "Book")
        person = await put_node(adapter, "Person")
        await link(adapter, book, person, "author")
        await link(adapter, book, person, "illustrator")
        found = await adapter.query_items(
            {"oid": OID, "class_name": EDGE_CLASS_NAME, "target_id": person.gid}
        )
        roles = sorted(
            item.metadata.role for item in found if isinstance(item.metadata, EdgeMetadata)
        )
        assert roles == ["author", "illustrator"]

    async def test_deleted_edge_leaves_index(self, adapter: StorageAdapter) -> None:
        book = await put_node(adapter, "Book")
        person = await put_node(adapter, "Person")
        edge = await link(adapter, book, person, "author")
        await adapter.delete_item(OID, edge.gid)
        found = await adapter.query_items(
            {"oid": OID, "class_name": EDGE_CLASS_NAME, "source_id": book.gid, "role": "author"}
        )
        assert found == []


class TestGraphWalks:
    async def test_descendants_bounded_by_depth(self, adapter: StorageAdapter) -> None:
        root = await put_node(adapter, "Folder")
        child = await put_node(adapter, "Folder")
        leaf = await put_node(adapter, "File")
        await link(adapter, root, child, "child")
        await link(adapter, child, leaf, "child")

        near = await adapter.query_descendants_by_class_name(OID, root.gid, "File", depth=1)
        far = await adapter.query_descendants_by_class_name(OID, root.gid, "File", depth=2)
        assert near == []
        assert [item.metadata.gid for item in far] == [leaf.gid]

    async def test_ancestors(self, adapter: StorageAdapter) -> None:
        root = await put_node(adapter, "Folder")
        child = await put_node(adapter, "Folder")
        leaf = await put_node(adapter, "File")
        await link(adapter, root, child, "child")
        await link(adapter, child, leaf, "child")

        found = await adapter.query_ancestors_by_class_name(OID, leaf.gid, "Folder")
        assert [item.metadata.gid for item in found] == [child.gid, root.gid]

    async def test_walk_handles_cycles(self, adapter: StorageAdapter) -> None:
        a = await put_node(adapter, "Folder")
        b = await put_node(adapter, "Folder")
        await link(adapter, a, b, "child")
        await link(adapter, b, a, "child")
        found = await adapter.query_descendants_by_class_name(OID, a.gid, "Folder")
        assert [item.metadata.gid for item in found] == [b.gid]

    async def test_walk_without_edges(self, adapter: StorageAdapter) -> None:
        lonely = await put_node(adapter, "Folder")
        assert await adapter.query_descendants_by_class_name(OID, lonely.gid, "Folder") == []
