"""Error taxonomy shared by every layer.

Four kinds cross the library boundary:

- ``NotFound``: raised only by the ``find_x`` variants when nothing matches.
- ``InvalidCursor``: malformed or foreign pagination cursor.
- ``ValidationError``: props or arguments do not match a declared shape.
- ``AdapterError``: storage backend failure, passed through unchanged in kind.

INVARIANT: The engine performs no local recovery. Errors may be re-raised
with role/class context in ``detail`` but never change kind.
"""

from __future__ import annotations

from typing import Any


class RelGraphError(Exception):
    """Base class for all relgraph errors."""

    code: str = "RELGRAPH_ERROR"

    def __init__(self, message: str, *, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = dict(detail or {})


class NotFound(RelGraphError):
    """A required node or relationship target does not exist."""

    code = "NOT_FOUND"


class InvalidCursor(RelGraphError):
    """A pagination cursor could not be decoded against the result set."""

    code = "INVALID_CURSOR"


class ValidationError(RelGraphError):
    """Props or arguments do not match the declared shape."""

    code = "VALIDATION_ERROR"


class AdapterError(RelGraphError):
    """Failure reported by the storage adapter."""

    code = "ADAPTER_ERROR"
