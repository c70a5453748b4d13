"""Pluggy hook specifications for node and edge lifecycle events.

Four lifecycle events fire after the storage adapter has acknowledged the
write. One setup-time hook lets plugins contribute node classes.
"""

from __future__ import annotations

from typing import Any

import pluggy

hookspec = pluggy.HookspecMarker("relgraph")
hookimpl = pluggy.HookimplMarker("relgraph")


class RelgraphHookSpec:
    """Hook specifications for the relgraph plugin system."""

    @hookspec
    def post_create_node(
        self,
        class_name: str,
        node_id: str,
        owner_id: str,
        props: dict[str, Any],
    ) -> None:
        """Called after a node is persisted by ``create``."""

    @hookspec
    def post_delete_node(
        self,
        class_name: str,
        node_id: str,
        owner_id: str,
    ) -> None:
        """Called after a node and its edges are deleted."""

    @hookspec
    def post_link(
        self,
        edge_id: str,
        source_id: str,
        target_id: str,
        role: str,
        owner_id: str,
    ) -> None:
        """Called after an edge is created."""

    @hookspec
    def post_unlink(
        self,
        edge_id: str,
        source_id: str,
        target_id: str,
        role: str,
        owner_id: str,
    ) -> None:
        """Called after an edge is deleted."""

    @hookspec
    def register_node_types(self) -> list[type] | None:
        """Return node classes to add to the registry before it resolves."""
