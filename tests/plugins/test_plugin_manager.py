"""Tests for PluginManager: registration, dispatch and node type contributions."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from relgraph.domain.spec import NodeSpec
from relgraph.nodes.base import Node
from relgraph.nodes.registry import NodeRegistry
from relgraph.plugins import hookimpl
from relgraph.plugins.manager import PluginManager


class _DummyPlugin:
    @hookimpl
    def post_link(
        self, edge_id: str, source_id: str, target_id: str, role: str, owner_id: str
    ) -> None:
        pass


class _ExplodingPlugin:
    @hookimpl
    def post_delete_node(self, class_name: str, node_id: str, owner_id: str) -> None:
        raise RuntimeError("boom")


class Widget(Node):
    node_spec = NodeSpec.define().string("label")


class _NodeTypePlugin:
    @hookimpl
    def register_node_types(self) -> list[type]:
        return [Widget]


class _BadNodeTypePlugin:
    @hookimpl
    def register_node_types(self) -> Any:
        return {"Widget": Widget}


class _NotANodePlugin:
    @hookimpl
    def register_node_types(self) -> list[type]:
        return [dict]


class TestPluginManager:
    def test_hook_relay_accessible(self) -> None:
        pm = PluginManager()
        assert hasattr(pm.hook, "post_create_node")
        assert hasattr(pm.hook, "register_node_types")

    def test_register_plugin(self) -> None:
        pm = PluginManager()
        plugin = _DummyPlugin()
        pm.register_plugin(plugin, name="dummy")
        assert "dummy" in pm.list_plugin_names()
        pm.unregister(plugin)
        assert "dummy" not in pm.list_plugin_names()

    def test_default_name_is_class_name(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_DummyPlugin())
        assert "_DummyPlugin" in pm.list_plugin_names()

    def test_discover_marks_loaded(self) -> None:
        pm = PluginManager()
        assert not pm.is_loaded
        pm.discover_and_load()
        assert pm.is_loaded


class TestDispatch:
    def test_failure_becomes_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        pm = PluginManager()
        pm.register_plugin(_ExplodingPlugin())
        with caplog.at_level(logging.WARNING, logger="relgraph.plugins.manager"):
            pm.dispatch("post_delete_node", class_name="Book", node_id="n1", owner_id="o1")
        assert "post_delete_node failed" in caplog.text

    def test_unknown_hook_ignored(self) -> None:
        PluginManager().dispatch("post_nothing", value=1)


class TestNodeTypeContributions:
    def test_contributed_class_registered_on_resolve(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_NodeTypePlugin())
        registry = NodeRegistry(plugins=pm)
        registry.resolve()
        assert registry.get("Widget") is Widget
        assert registry.table_for(Widget).bindings == {}

    def test_non_list_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        pm = PluginManager()
        pm.register_plugin(_BadNodeTypePlugin())
        registry = NodeRegistry(plugins=pm)
        with caplog.at_level(logging.WARNING, logger="relgraph.plugins.manager"):
            registry.resolve()
        assert "Widget" not in registry
        assert "non-list" in caplog.text

    def test_refused_class_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        pm = PluginManager()
        pm.register_plugin(_NotANodePlugin())
        with caplog.at_level(logging.WARNING, logger="relgraph.plugins.manager"):
            added = pm.contribute_node_types(NodeRegistry())
        assert added == []
        assert "Skipping node type" in caplog.text
