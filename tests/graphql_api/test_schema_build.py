"""Tests for the generated GraphQL schema shape."""

from __future__ import annotations

import pytest
from graphql import GraphQLNonNull, GraphQLObjectType, print_schema, validate_schema

from relgraph.domain.spec import NodeSpec
from relgraph.graphql.schema import build_schema, to_camel, to_pascal
from relgraph.nodes.base import Node
from relgraph.nodes.registry import NodeRegistry
from tests.models import LIBRARY, SHELVES


class TestNames:
    @pytest.mark.parametrize(
        ("name", "camel", "pascal"),
        [
            ("author", "author", "Author"),
            ("collection_method", "collectionMethod", "CollectionMethod"),
            ("x_owner", "xOwner", "XOwner"),
        ],
    )
    def test_case_conversion(self, name: str, camel: str, pascal: str) -> None:
        assert to_camel(name) == camel
        assert to_pascal(name) == pascal


class TestSchemaShape:
    def test_root_fields(self) -> None:
        schema = build_schema(LIBRARY)
        assert schema.query_type is not None
        assert set(schema.query_type.fields) == {"viewer", "person", "book", "chapter"}
        assert schema.mutation_type is not None
        assert set(schema.mutation_type.fields) == {
            "createPerson",
            "createBook",
            "createChapter",
            "createPersonFavorite",
            "createBookAuthor",
            "unlinkBookAuthor",
            "deleteBookAuthor",
            "createBookIllustrator",
            "unlinkBookIllustrator",
            "deleteBookIllustrator",
            "createBookChapter",
        }

    def test_object_fields(self) -> None:
        schema = build_schema(LIBRARY)
        book = schema.get_type("Book")
        assert isinstance(book, GraphQLObjectType)
        assert {"id", "createdAt", "lastUpdated", "title", "pages", "author", "chapter"} <= set(
            book.fields
        )
        assert not isinstance(book.fields["author"].type, GraphQLNonNull)
        assert isinstance(book.fields["chapter"].type, GraphQLNonNull)
        assert set(book.fields["chapter"].args) == {"first", "after", "last", "before", "where"}

    def test_connection_types(self) -> None:
        sdl = print_schema(build_schema(LIBRARY))
        assert "type ChapterConnection" in sdl
        assert "type ChapterEdge" in sdl
        assert "input ChapterWhere" in sdl
        assert "input BookInput" in sdl
        assert "type PageInfo" in sdl

    def test_snake_case_option(self) -> None:
        schema = build_schema(LIBRARY, camel_case=False)
        book = schema.get_type("Book")
        assert isinstance(book, GraphQLObjectType)
        assert "last_updated" in book.fields
        assert "lastUpdated" not in book.fields

    def test_unresolvable_registry(self) -> None:
        registry = NodeRegistry()

        @registry.register
        class Lost(Node):
            node_spec = NodeSpec.define().string("name").one("home", "Nowhere")

        with pytest.raises(LookupError):
            build_schema(registry)


class TestFieldlessTypes:
    def test_no_empty_input_objects(self) -> None:
        schema = build_schema(SHELVES)
        assert schema.get_type("TagInput") is None
        assert schema.get_type("TagWhere") is None
        assert schema.get_type("ShelfInput") is None
        assert validate_schema(schema) == []

    def test_arguments_omitted(self) -> None:
        schema = build_schema(SHELVES)
        shelf = schema.get_type("Shelf")
        assert isinstance(shelf, GraphQLObjectType)
        assert set(shelf.fields["tag"].args) == {"first", "after", "last", "before"}
        assert schema.mutation_type is not None
        assert set(schema.mutation_type.fields["createShelf"].args) == set()
        assert set(schema.mutation_type.fields["createShelfTag"].args) == {"sourceId"}
