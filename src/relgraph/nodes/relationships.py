"""Operation bundles bound to one node and one relationship role.

``book.find_author()`` and ``book.relation("author").find()`` both land here.
Every operation goes through the source node's role-filtered edge helpers,
so two roles that target the same class never observe each other's edges.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from relgraph.domain.errors import NotFound
from relgraph.nodes.connection import Connection, paginate
from relgraph.nodes.edge import find_edges

if TYPE_CHECKING:
    from relgraph.nodes.base import Node
    from relgraph.nodes.registry import RelationBinding

logger = logging.getLogger(__name__)


class _Relationship:
    def __init__(self, source: Node, binding: RelationBinding) -> None:
        self._source = source
        self._binding = binding

    @property
    def role(self) -> str:
        return self._binding.role

    @property
    def target_cls(self) -> type[Node]:
        return self._binding.target_cls

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} {self._source.class_name}.{self.role} "
            f"-> {self.target_cls.__name__}>"
        )


class OneRelationship(_Relationship):
    """To-one operations.

    Creating on an already-linked role replaces the link: the new node and
    edge are written first, then the older edges of the role are removed.
    The previously linked node is kept.
    """

    async def find(self) -> Node | None:
        """Return the linked node, or None. With duplicate edges the newest wins."""
        found = await self._source.query_target_instances(self.target_cls, self.role)
        return found[-1] if found else None

    async def find_x(self) -> Node:
        """Return the linked node.

        Raises:
            NotFound: No edge of this role leaves the source node.
        """
        node = await self.find()
        if node is None:
            msg = f"{self._source.class_name} {self._source.id} has no '{self.role}'"
            raise NotFound(
                msg,
                detail={
                    "role": self.role,
                    "source_class_name": self._source.class_name,
                    "source_id": self._source.id,
                },
            )
        return node

    async def create(self, props: Mapping[str, Any]) -> Node:
        """Create a target node linked under this role, replacing any older link."""
        source = self._source
        previous = await find_edges(source.owner_id, source.id, self.role)
        node = await source.create_target_node(self.target_cls, props, self.role)
        if previous:
            await source.remove_edges(previous)
            logger.debug(
                "Replaced %d '%s' link(s) on %s %s",
                len(previous),
                self.role,
                source.class_name,
                source.id,
            )
        return node

    async def unlink(self) -> None:
        """Remove the link, keeping the target node. No-op when unlinked."""
        await self._source.unlink_target_instances(self.role)

    async def delete(self) -> None:
        """Remove the link and delete the target node.

        Idempotent on the edge. A failure deleting the target propagates.
        """
        source = self._source
        edges = await find_edges(source.owner_id, source.id, self.role)
        await source.remove_edges(edges)
        for edge in edges:
            target = await self.target_cls.find_in_scope(
                source.viewer, source.owner_id, edge.target_id
            )
            if target is not None:
                await target.delete()


class ManyRelationship(_Relationship):
    """To-many operations, in edge creation order."""

    async def find_all(self) -> list[Node]:
        return await self._source.query_target_instances(self.target_cls, self.role)

    async def query(self, where: Mapping[str, Any] | None = None) -> list[Node]:
        """Linked nodes whose props equal every value in *where*."""
        return await self._source.query_target_instances(self.target_cls, self.role, where)

    async def create(self, props: Mapping[str, Any]) -> Node:
        """Create a target node and add it under this role."""
        return await self._source.create_target_node(self.target_cls, props, self.role)

    async def connection_for(
        self,
        *,
        first: int | None = None,
        after: str | None = None,
        last: int | None = None,
        before: str | None = None,
        where: Mapping[str, Any] | None = None,
    ) -> Connection[Node]:
        """Cursor-paginated view over :meth:`query`."""
        items = await self.query(where)
        return paginate(items, first=first, after=after, last=last, before=before)
