"""Tests for NodeRegistry registration, resolution and relation tables."""

from __future__ import annotations

import pytest

from relgraph.domain.spec import NodeSpec
from relgraph.domain.types import Cardinality
from relgraph.nodes.base import Node
from relgraph.nodes.registry import NodeRegistry, registry_of
from tests.models import LIBRARY, Book, Chapter, Person


class TestRegister:
    def test_registered_classes_in_order(self) -> None:
        assert LIBRARY.classes == [Person, Book, Chapter]
        assert "Book" in LIBRARY
        assert len(LIBRARY) == 3
        assert LIBRARY.get("Book") is Book
        assert registry_of(Book) is LIBRARY

    def test_get_unknown(self) -> None:
        with pytest.raises(KeyError):
            LIBRARY.get("Magazine")

    def test_rejects_non_node(self) -> None:
        registry = NodeRegistry()
        with pytest.raises(TypeError):
            registry.register(dict)
        with pytest.raises(TypeError):
            registry.register(Node)

    def test_rejects_name_clash(self) -> None:
        registry = NodeRegistry()

        class Thing(Node):
            node_spec = NodeSpec.define().string("name")

        registry.register(Thing)
        registry.register(Thing)

        def make_duplicate() -> type[Node]:
            class Thing(Node):
                pass

            return Thing

        with pytest.raises(ValueError, match="already registered"):
            registry.register(make_duplicate())

    def test_edge_class_name_reserved(self) -> None:
        registry = NodeRegistry()

        class Edge(Node):
            node_spec = NodeSpec.define().string("label")

        with pytest.raises(ValueError, match="reserved for edge records"):
            registry.register(Edge)
        assert "Edge" not in {cls.__name__ for cls in registry.classes}

    def test_class_belongs_to_one_registry(self) -> None:
        with pytest.raises(ValueError, match="another NodeRegistry"):
            NodeRegistry().register(Book)

    def test_registry_of_unregistered(self) -> None:
        class Loose(Node):
            pass

        with pytest.raises(LookupError):
            registry_of(Loose)


class TestResolve:
    def test_tables_per_class(self) -> None:
        table = Book.relation_table()
        assert table.class_name == "Book"
        assert set(table.bindings) == {"author", "illustrator", "chapter"}
        assert table.binding("author").target_cls is Person  # type: ignore[union-attr]
        assert table.binding("chapter").cardinality == Cardinality.MANY  # type: ignore[union-attr]

    def test_derived_method_names(self) -> None:
        methods = Book.relation_table().methods
        assert {name for name, (role, _op) in methods.items() if role == "author"} == {
            "find_author",
            "find_x_author",
            "create_author",
            "unlink_author",
            "delete_author",
        }
        assert {name for name, (role, _op) in methods.items() if role == "chapter"} == {
            "find_all_chapter",
            "query_chapter",
            "create_chapter",
            "connection_for_chapter",
        }

    def test_lookup(self) -> None:
        table = Book.relation_table()
        entry = table.lookup("find_x_author")
        assert entry is not None
        binding, operation = entry
        assert (binding.role, operation) == ("author", "find_x")
        assert table.lookup("find_editor") is None

    def test_nothing_attached_to_classes(self) -> None:
        Book.relation_table()
        assert not hasattr(Book, "find_author")
        assert "find_author" not in vars(Book)

    def test_class_target_resolves(self) -> None:
        registry = NodeRegistry()

        @registry.register
        class Leaf(Node):
            node_spec = NodeSpec.define().string("name")

        @registry.register
        class Tree(Node):
            node_spec = NodeSpec.define().many("leaf", Leaf)

        assert registry.table_for(Tree).binding("leaf").target_cls is Leaf  # type: ignore[union-attr]

    def test_unknown_target(self) -> None:
        registry = NodeRegistry()

        @registry.register
        class Orphan(Node):
            node_spec = NodeSpec.define().one("parent", "Ghost")

        with pytest.raises(LookupError, match="Ghost"):
            registry.resolve()

    def test_colliding_derived_names(self) -> None:
        registry = NodeRegistry()

        @registry.register
        class Clash(Node):
            node_spec = NodeSpec.define().one("owner", "Clash").one("x_owner", "Clash")

        with pytest.raises(ValueError, match="find_x_owner"):
            registry.resolve()

    def test_derived_name_shadowing_node_attribute(self) -> None:
        registry = NodeRegistry()

        @registry.register
        class Shadow(Node):
            node_spec = NodeSpec.define().one("in_scope", "Shadow")

        with pytest.raises(ValueError, match="find_in_scope"):
            registry.resolve()

    def test_table_for_unregistered(self) -> None:
        class Loose(Node):
            pass

        with pytest.raises(LookupError):
            LIBRARY.table_for(Loose)

    def test_registering_invalidates_tables(self) -> None:
        registry = NodeRegistry()

        @registry.register
        class Early(Node):
            node_spec = NodeSpec.define().one("late", "Late")

        with pytest.raises(LookupError):
            registry.resolve()

        @registry.register
        class Late(Node):
            pass

        assert registry.table_for(Early).binding("late").target_cls is Late  # type: ignore[union-attr]
