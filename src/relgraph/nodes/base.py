"""Node: the base record type for every graph entity.

A node class declares its prop shape and relationships once::

    @registry.register
    class Book(Node):
        node_spec = NodeSpec.define().string("title").one("author", "Person")

Instances are only produced by the library (``create``, ``find``, ``query``
and the relationship operations). Each carries the viewer that loaded it and
its class's :class:`RelationTable`; derived operations such as
``book.find_author()`` are looked up in that table on attribute access.

INVARIANT: ``id`` and ``owner_id`` never change after creation.
INVARIANT: Create is node-first, then edge. An edge failure is raised to the
caller while the new node stays persisted.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Any, ClassVar, Self

from pydantic import BaseModel

from relgraph.domain.errors import AdapterError, NotFound
from relgraph.domain.ids import generate_gid, next_sort_value, utc_now
from relgraph.domain.props import build_props_model, validate_props
from relgraph.domain.spec import NodeSpec
from relgraph.nodes.edge import (
    Edge,
    create_edge,
    delete_edge,
    find_edges,
    find_edges_from,
    find_edges_to,
)
from relgraph.nodes.registry import registry_of
from relgraph.storage.adapter import DbItem, NodeMetadata
from relgraph.storage.registry import AdapterRegistry

if TYPE_CHECKING:
    from relgraph.domain.viewer import ViewerContext
    from relgraph.nodes.registry import RelationTable
    from relgraph.nodes.relationships import ManyRelationship, OneRelationship

logger = logging.getLogger(__name__)


@functools.cache
def props_model(node_cls: type[Node]) -> type[BaseModel]:
    """Strict model for a complete props bag of *node_cls*."""
    return build_props_model(node_cls.__name__, node_cls.node_spec)


@functools.cache
def where_model(node_cls: type[Node]) -> type[BaseModel]:
    """All-optional model for ``where`` filters on *node_cls*."""
    return build_props_model(node_cls.__name__, node_cls.node_spec, partial=True)


class Node:
    """Base class for graph nodes. Subclasses set ``node_spec``."""

    node_spec: ClassVar[NodeSpec] = NodeSpec.define()

    def __init__(self, viewer: ViewerContext, item: DbItem, relations: RelationTable) -> None:
        self._viewer = viewer
        self._metadata = item.metadata
        self._props: dict[str, Any] = dict(item.props)
        self._relations = relations

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def id(self) -> str:
        return self._metadata.gid

    @property
    def owner_id(self) -> str:
        return self._metadata.oid

    @property
    def class_name(self) -> str:
        return self._metadata.class_name

    @property
    def created_at(self) -> datetime:
        return self._metadata.created_at

    @property
    def last_updated(self) -> datetime:
        return self._metadata.last_updated

    @property
    def viewer(self) -> ViewerContext:
        return self._viewer

    @property
    def props(self) -> dict[str, Any]:
        """A copy of the current props. Use :meth:`update_props` to change them."""
        return dict(self._props)

    @property
    def relations(self) -> RelationTable:
        return self._relations

    # ------------------------------------------------------------------
    # Class operations
    # ------------------------------------------------------------------

    @classmethod
    def relation_table(cls) -> RelationTable:
        return registry_of(cls).table_for(cls)

    @classmethod
    async def create(cls, viewer: ViewerContext, props: Mapping[str, Any]) -> Self:
        """Persist a new node owned by the viewer's organization scope.

        Raises:
            ValidationError: *props* does not match ``node_spec``.
        """
        node = await cls._persist_new(viewer, props, owner_id=viewer.organization_scope_id)
        await node.after_create()
        return node

    @classmethod
    async def find(cls, viewer: ViewerContext, node_id: str) -> Self | None:
        return await cls.find_in_scope(viewer, viewer.organization_scope_id, node_id)

    @classmethod
    async def find_x(cls, viewer: ViewerContext, node_id: str) -> Self:
        """Like :meth:`find` but raises :class:`NotFound` when absent."""
        node = await cls.find(viewer, node_id)
        if node is None:
            msg = f"{cls.__name__} {node_id} not found"
            raise NotFound(msg, detail={"class_name": cls.__name__, "id": node_id})
        return node

    @classmethod
    async def find_in_scope(
        cls,
        viewer: ViewerContext,
        owner_id: str,
        node_id: str,
    ) -> Self | None:
        """Load *node_id* from the owner scope *owner_id*, if it is a ``cls``."""
        adapter = await AdapterRegistry.get()
        item = await adapter.get_item(owner_id, node_id)
        if item is None or item.metadata.class_name != cls.__name__:
            return None
        return cls._hydrate(viewer, item)

    @classmethod
    async def query(
        cls,
        viewer: ViewerContext,
        where: Mapping[str, Any] | None = None,
        ids: Sequence[str] | None = None,
    ) -> list[Self]:
        """Nodes of this class in the viewer's scope, in creation order.

        *where* is an exact-match filter over declared props; ``None`` values
        place no constraint.
        """
        adapter = await AdapterRegistry.get()
        found = await adapter.query_items(
            {"oid": viewer.organization_scope_id, "class_name": cls.__name__},
            props=cls.clean_where(where),
            gids=ids,
        )
        return [cls._hydrate(viewer, item) for item in found]

    @classmethod
    def clean_where(cls, where: Mapping[str, Any] | None) -> dict[str, Any]:
        """Validate a ``where`` filter and drop unconstrained keys."""
        if not where:
            return {}
        validated = validate_props(where_model(cls), where, class_name=cls.__name__)
        return {key: value for key, value in validated.items() if value is not None}

    @classmethod
    def _hydrate(cls, viewer: ViewerContext, item: DbItem) -> Self:
        return cls(viewer, item, cls.relation_table())

    @classmethod
    async def _persist_new(
        cls,
        viewer: ViewerContext,
        props: Mapping[str, Any],
        *,
        owner_id: str,
    ) -> Self:
        validated = validate_props(props_model(cls), props, class_name=cls.__name__)
        relations = cls.relation_table()
        now = utc_now()
        metadata = NodeMetadata(
            gid=generate_gid(),
            oid=owner_id,
            class_name=cls.__name__,
            created_at=now,
            last_updated=now,
            sort_value=next_sort_value(),
        )
        adapter = await AdapterRegistry.get()
        await adapter.put_item(validated, metadata)
        logger.debug("Created %s %s", cls.__name__, metadata.gid)
        registry_of(cls).dispatch(
            "post_create_node",
            class_name=cls.__name__,
            node_id=metadata.gid,
            owner_id=owner_id,
            props=dict(validated),
        )
        return cls(viewer, DbItem(props=validated, metadata=metadata), relations)

    # ------------------------------------------------------------------
    # Instance lifecycle
    # ------------------------------------------------------------------

    async def after_create(self) -> None:
        """Runs once after this node is first persisted. No-op by default."""

    def update_props(self, changes: Mapping[str, Any]) -> None:
        """Merge *changes* into the props. Call :meth:`save` to persist.

        Raises:
            ValidationError: Unknown key or wrong type.
        """
        validated = validate_props(where_model(type(self)), changes, class_name=self.class_name)
        self._props.update(validated)

    async def save(self) -> None:
        """Write the current props back to storage."""
        validated = validate_props(props_model(type(self)), self._props, class_name=self.class_name)
        metadata = self._metadata.model_copy(update={"last_updated": utc_now()})
        adapter = await AdapterRegistry.get()
        await adapter.put_item(validated, metadata)
        self._metadata = metadata
        self._props = validated

    async def load(self) -> None:
        """Refresh props and timestamps from storage.

        Raises:
            NotFound: The node was deleted.
        """
        adapter = await AdapterRegistry.get()
        item = await adapter.get_item(self.owner_id, self.id)
        if item is None:
            msg = f"{self.class_name} {self.id} no longer exists"
            raise NotFound(msg, detail={"class_name": self.class_name, "id": self.id})
        self._metadata = item.metadata
        self._props = dict(item.props)

    async def delete(self) -> None:
        """Delete this node and every edge that starts or ends at it.

        Linked nodes are kept.
        """
        outgoing = await find_edges_from(self.owner_id, self.id)
        incoming = await find_edges_to(self.owner_id, self.id)
        unique = {edge.id: edge for edge in (*outgoing, *incoming)}
        await self.remove_edges(list(unique.values()))

        adapter = await AdapterRegistry.get()
        await adapter.delete_item(self.owner_id, self.id)
        logger.debug("Deleted %s %s", self.class_name, self.id)
        registry_of(type(self)).dispatch(
            "post_delete_node",
            class_name=self.class_name,
            node_id=self.id,
            owner_id=self.owner_id,
        )

    # ------------------------------------------------------------------
    # Edge-level building blocks for relationship operations
    # ------------------------------------------------------------------

    async def create_target_node(
        self,
        target_cls: type[Node],
        props: Mapping[str, Any],
        role: str,
    ) -> Node:
        """Create a ``target_cls`` node in this node's scope and link it under *role*.

        Raises:
            ValidationError: *props* does not match the target's spec. Nothing
                is written.
            AdapterError: The edge could not be written. The new node remains
                persisted; ``detail`` names it.
        """
        target = await target_cls._persist_new(self._viewer, props, owner_id=self.owner_id)
        try:
            edge = await create_edge(
                self.owner_id,
                self.id,
                self.class_name,
                target.id,
                target.class_name,
                role,
            )
        except AdapterError as exc:
            msg = (
                f"Created {target.class_name} {target.id} but could not link it as "
                f"{self.class_name}.{role}: {exc.message}"
            )
            raise AdapterError(
                msg,
                detail={
                    **exc.detail,
                    "role": role,
                    "source_class_name": self.class_name,
                    "source_id": self.id,
                    "target_class_name": target.class_name,
                    "orphaned_target_id": target.id,
                },
            ) from exc

        registry_of(type(self)).dispatch(
            "post_link",
            edge_id=edge.id,
            source_id=edge.source_id,
            target_id=edge.target_id,
            role=role,
            owner_id=edge.owner_id,
        )
        await target.after_create()
        return target

    async def query_target_instances(
        self,
        target_cls: type[Node],
        role: str,
        where: Mapping[str, Any] | None = None,
    ) -> list[Node]:
        """Nodes linked from this node under *role*, in edge creation order."""
        edges = await find_edges(self.owner_id, self.id, role)
        if not edges:
            return []
        position: dict[str, int] = {}
        for edge in edges:
            position.setdefault(edge.target_id, len(position))

        adapter = await AdapterRegistry.get()
        found = await adapter.query_items(
            {"oid": self.owner_id, "class_name": target_cls.__name__},
            props=target_cls.clean_where(where),
            gids=list(position),
        )
        found.sort(key=lambda item: position[item.metadata.gid])
        return [target_cls._hydrate(self._viewer, item) for item in found]

    async def unlink_target_instances(self, role: str, target_id: str | None = None) -> int:
        """Remove *role* edges (optionally only those to *target_id*). Returns the count."""
        edges = await find_edges(self.owner_id, self.id, role)
        if target_id is not None:
            edges = [edge for edge in edges if edge.target_id == target_id]
        await self.remove_edges(edges)
        return len(edges)

    async def remove_edges(self, edges: Sequence[Edge]) -> None:
        """Delete *edges* and announce each removal."""
        registry = registry_of(type(self))
        for edge in edges:
            await delete_edge(edge.owner_id, edge.id)
            registry.dispatch(
                "post_unlink",
                edge_id=edge.id,
                source_id=edge.source_id,
                target_id=edge.target_id,
                role=edge.role,
                owner_id=edge.owner_id,
            )

    async def query_ancestors_by_class_name(
        self,
        node_cls: type[Node],
        depth: int = 10,
    ) -> list[Node]:
        """``node_cls`` nodes with a path of at most *depth* edges to this node."""
        adapter = await AdapterRegistry.get()
        found = await adapter.query_ancestors_by_class_name(
            self.owner_id, self.id, node_cls.__name__, depth
        )
        return [node_cls._hydrate(self._viewer, item) for item in found]

    async def query_descendants_by_class_name(
        self,
        node_cls: type[Node],
        depth: int = 10,
    ) -> list[Node]:
        """``node_cls`` nodes reachable from this node in at most *depth* edges."""
        adapter = await AdapterRegistry.get()
        found = await adapter.query_descendants_by_class_name(
            self.owner_id, self.id, node_cls.__name__, depth
        )
        return [node_cls._hydrate(self._viewer, item) for item in found]

    # ------------------------------------------------------------------
    # Derived relationship operations
    # ------------------------------------------------------------------

    def relation(self, role: str) -> OneRelationship | ManyRelationship:
        """Operation bundle for *role*.

        Raises:
            AttributeError: The class declares no such relationship.
        """
        binding = self._relations.binding(role)
        if binding is None:
            msg = f"{self.class_name} declares no relationship {role!r}"
            raise AttributeError(msg)
        return binding.bind(self)

    def __getattr__(self, name: str) -> Any:
        relations = self.__dict__.get("_relations")
        if relations is not None:
            entry = relations.lookup(name)
            if entry is not None:
                binding, operation = entry
                return getattr(binding.bind(self), operation)
        msg = f"{type(self).__name__!r} object has no attribute {name!r}"
        raise AttributeError(msg)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return (self.class_name, self.id) == (other.class_name, other.id)

    def __hash__(self) -> int:
        return hash((self.class_name, self.id))

    def __repr__(self) -> str:
        return f"<{self.class_name} {self.id}>"
