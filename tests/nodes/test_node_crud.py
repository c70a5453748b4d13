"""Node create/find/query/update/delete against every backend."""

from __future__ import annotations

import pytest

from relgraph.domain.errors import NotFound, ValidationError
from relgraph.domain.viewer import ViewerContext
from relgraph.nodes.base import Node
from relgraph.nodes.edge import find_edges_to
from tests.models import Book, Chapter, Person

pytestmark = pytest.mark.usefixtures("adapter")


class TestCreate:
    async def test_create_stamps_identity(self, viewer: ViewerContext) -> None:
        book = await Book.create(viewer, {"title": "Dune", "pages": 412})
        assert book.class_name == "Book"
        assert book.owner_id == viewer.organization_scope_id
        assert book.props == {"title": "Dune", "pages": 412}
        assert book.created_at == book.last_updated
        assert book.viewer is viewer

    async def test_props_is_a_copy(self, viewer: ViewerContext) -> None:
        book = await Book.create(viewer, {"title": "Dune", "pages": 412})
        book.props["title"] = "changed"
        assert book.props["title"] == "Dune"

    @pytest.mark.parametrize(
        "props",
        [
            {"title": "Dune"},
            {"title": "Dune", "pages": "412"},
            {"title": "Dune", "pages": 412, "isbn": "x"},
        ],
    )
    async def test_invalid_props_write_nothing(
        self, viewer: ViewerContext, props: dict[str, object]
    ) -> None:
        with pytest.raises(ValidationError):
            await Book.create(viewer, props)
        assert await Book.query(viewer) == []


class TestFind:
    async def test_find(self, viewer: ViewerContext) -> None:
        book = await Book.create(viewer, {"title": "Dune", "pages": 412})
        found = await Book.find(viewer, book.id)
        assert found == book
        assert found is not None and found.props == book.props

    async def test_find_missing(self, viewer: ViewerContext) -> None:
        assert await Book.find(viewer, "missing") is None

    async def test_find_x_missing(self, viewer: ViewerContext) -> None:
        with pytest.raises(NotFound) as exc_info:
            await Book.find_x(viewer, "missing")
        assert exc_info.value.detail == {"class_name": "Book", "id": "missing"}

    async def test_find_checks_class(self, viewer: ViewerContext) -> None:
        person = await Person.create(viewer, {"name": "Frank"})
        assert await Book.find(viewer, person.id) is None

    async def test_other_scope_cannot_see_node(self, viewer: ViewerContext) -> None:
        book = await Book.create(viewer, {"title": "Dune", "pages": 412})
        stranger = ViewerContext.dangerously_create_for_scripts("stranger")
        assert await Book.find(stranger, book.id) is None
        assert await Book.query(stranger) == []


class TestQuery:
    async def test_query_in_creation_order(self, viewer: ViewerContext) -> None:
        first = await Book.create(viewer, {"title": "A", "pages": 1})
        second = await Book.create(viewer, {"title": "B", "pages": 2})
        assert await Book.query(viewer) == [first, second]

    async def test_query_where(self, viewer: ViewerContext) -> None:
        await Book.create(viewer, {"title": "A", "pages": 1})
        b = await Book.create(viewer, {"title": "B", "pages": 2})
        assert await Book.query(viewer, {"pages": 2}) == [b]

    async def test_none_in_where_places_no_constraint(self, viewer: ViewerContext) -> None:
        a = await Book.create(viewer, {"title": "A", "pages": 1})
        assert await Book.query(viewer, {"title": None}) == [a]

    async def test_query_ids(self, viewer: ViewerContext) -> None:
        await Book.create(viewer, {"title": "A", "pages": 1})
        b = await Book.create(viewer, {"title": "B", "pages": 2})
        assert await Book.query(viewer, ids=[b.id]) == [b]

    async def test_where_unknown_key(self, viewer: ViewerContext) -> None:
        with pytest.raises(ValidationError):
            await Book.query(viewer, {"isbn": "x"})


class TestUpdate:
    async def test_update_and_save(self, viewer: ViewerContext) -> None:
        book = await Book.create(viewer, {"title": "Dune", "pages": 412})
        book.update_props({"pages": 500})
        await book.save()
        found = await Book.find_x(viewer, book.id)
        assert found.props == {"title": "Dune", "pages": 500}
        assert found.last_updated >= found.created_at
        assert found.id == book.id

    async def test_update_rejects_bad_value(self, viewer: ViewerContext) -> None:
        book = await Book.create(viewer, {"title": "Dune", "pages": 412})
        with pytest.raises(ValidationError):
            book.update_props({"pages": "many"})
        assert book.props["pages"] == 412

    async def test_load_refreshes(self, viewer: ViewerContext) -> None:
        book = await Book.create(viewer, {"title": "Dune", "pages": 412})
        other = await Book.find_x(viewer, book.id)
        other.update_props({"title": "Dune Messiah"})
        await other.save()
        await book.load()
        assert book.props["title"] == "Dune Messiah"

    async def test_load_after_delete(self, viewer: ViewerContext) -> None:
        book = await Book.create(viewer, {"title": "Dune", "pages": 412})
        await book.delete()
        with pytest.raises(NotFound):
            await book.load()


class TestDelete:
    async def test_delete_removes_node_and_edges(self, viewer: ViewerContext) -> None:
        book = await Book.create(viewer, {"title": "Dune", "pages": 412})
        author = await book.create_author({"name": "Frank"})
        await book.create_chapter({"title": "One", "position": 1, "draft": False})

        await book.delete()

        assert await Book.find(viewer, book.id) is None
        assert await find_edges_to(book.owner_id, author.id) == []
        assert await Person.find(viewer, author.id) == author
        assert len(await Chapter.query(viewer)) == 1

    async def test_delete_removes_incoming_edges(self, viewer: ViewerContext) -> None:
        book = await Book.create(viewer, {"title": "Dune", "pages": 412})
        author = await book.create_author({"name": "Frank"})
        await author.delete()
        assert await book.find_author() is None


class TestAttributes:
    async def test_class_without_relations(self, viewer: ViewerContext) -> None:
        chapter = await Chapter.create(viewer, {"title": "One", "position": 1, "draft": False})
        with pytest.raises(AttributeError):
            chapter.find_author  # noqa: B018

    async def test_unknown_derived_name(self, viewer: ViewerContext) -> None:
        book = await Book.create(viewer, {"title": "Dune", "pages": 412})
        with pytest.raises(AttributeError, match="find_editor"):
            book.find_editor  # noqa: B018

    async def test_relation_unknown_role(self, viewer: ViewerContext) -> None:
        book = await Book.create(viewer, {"title": "Dune", "pages": 412})
        with pytest.raises(AttributeError, match="editor"):
            book.relation("editor")

    async def test_unregistered_class(self, viewer: ViewerContext) -> None:
        class Stray(Node):
            pass

        with pytest.raises(LookupError, match="not registered"):
            await Stray.create(viewer, {})

    async def test_repr_and_hash(self, viewer: ViewerContext) -> None:
        book = await Book.create(viewer, {"title": "Dune", "pages": 412})
        assert repr(book) == f"<Book {book.id}>"
        assert len({book, await Book.find_x(viewer, book.id)}) == 1
