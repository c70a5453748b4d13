"""Connection/pagination engine: ordered items -> Relay-style connection.

Cursors are URL-safe base64 of ``cursor:<ClassName>:<id>``. They are derived
from the item identity alone, so a cursor stays valid while its item is in
the set regardless of what else was added or removed.

Slicing rules:

- ``after``/``before`` narrow the window to items strictly after/before the
  cursor item.
- ``first`` keeps the first N items of the window, ``last`` the last N.
  Passing both is rejected.
- ``has_next_page``/``has_previous_page`` report whether the full ordered
  set holds items after/before the returned slice.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

from relgraph.domain.errors import InvalidCursor, ValidationError

CURSOR_PREFIX = "cursor"


class Cursorable(Protocol):
    """Anything with a stable identity and class name (every Node)."""

    @property
    def id(self) -> str: ...

    @property
    def class_name(self) -> str: ...


T = TypeVar("T", bound=Cursorable)


@dataclass(frozen=True)
class PageInfo:
    has_next_page: bool
    has_previous_page: bool
    start_cursor: str | None
    end_cursor: str | None


@dataclass(frozen=True)
class ConnectionEdge(Generic[T]):
    cursor: str
    node: T


@dataclass(frozen=True)
class Connection(Generic[T]):
    """One page of results plus its page info."""

    edges: list[ConnectionEdge[T]]
    page_info: PageInfo
    total_count: int

    @property
    def nodes(self) -> list[T]:
        return [edge.node for edge in self.edges]


def encode_cursor(class_name: str, item_id: str) -> str:
    raw = f"{CURSOR_PREFIX}:{class_name}:{item_id}".encode()
    return base64.urlsafe_b64encode(raw).decode("ascii")


def decode_cursor(cursor: str) -> tuple[str, str]:
    """Return ``(class_name, id)`` encoded in *cursor*.

    Raises:
        InvalidCursor: Not a cursor produced by :func:`encode_cursor`.
    """
    try:
        raw = base64.urlsafe_b64decode(cursor.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise InvalidCursor(f"Malformed cursor: {cursor!r}", detail={"cursor": cursor}) from exc

    prefix, _, rest = raw.partition(":")
    class_name, _, item_id = rest.partition(":")
    if prefix != CURSOR_PREFIX or not class_name or not item_id:
        raise InvalidCursor(f"Malformed cursor: {cursor!r}", detail={"cursor": cursor})
    return class_name, item_id


def paginate(
    items: Sequence[T],
    *,
    first: int | None = None,
    after: str | None = None,
    last: int | None = None,
    before: str | None = None,
) -> Connection[T]:
    """Slice *items* into a connection.

    Raises:
        ValidationError: ``first`` and ``last`` together, or a negative count.
        InvalidCursor: A cursor is malformed, names another class, or its
            item is not in *items*.
    """
    if first is not None and last is not None:
        msg = "Pass either 'first' or 'last', not both"
        raise ValidationError(msg, detail={"first": first, "last": last})
    for name, value in (("first", first), ("last", last)):
        if value is not None and value < 0:
            msg = f"'{name}' must be non-negative, got {value}"
            raise ValidationError(msg, detail={name: value})

    positions = {(item.class_name, item.id): index for index, item in enumerate(items)}
    total = len(items)
    start, end = 0, total

    if after is not None:
        start = _locate(after, positions) + 1
    if before is not None:
        end = _locate(before, positions)
    end = max(start, end)

    if first is not None:
        end = min(end, start + first)
    if last is not None:
        start = max(start, end - last)

    edges = [
        ConnectionEdge(cursor=encode_cursor(item.class_name, item.id), node=item)
        for item in items[start:end]
    ]
    page_info = PageInfo(
        has_next_page=end < total,
        has_previous_page=start > 0,
        start_cursor=edges[0].cursor if edges else None,
        end_cursor=edges[-1].cursor if edges else None,
    )
    return Connection(edges=edges, page_info=page_info, total_count=total)


def _locate(cursor: str, positions: dict[tuple[str, str], int]) -> int:
    key = decode_cursor(cursor)
    if key not in positions:
        class_name, item_id = key
        msg = f"Cursor does not point into this result set ({class_name}:{item_id})"
        raise InvalidCursor(msg, detail={"cursor": cursor})
    return positions[key]
