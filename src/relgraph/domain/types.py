"""Field and relationship classification enums."""

from __future__ import annotations

from enum import StrEnum


class FieldType(StrEnum):
    """Primitive prop types a node class may declare."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"


class Cardinality(StrEnum):
    """Relationship cardinality."""

    ONE = "one"
    MANY = "many"


class SortOrder(StrEnum):
    """Ordering accepted by ``StorageAdapter.query_items``."""

    ASC = "ASC"
    DESC = "DESC"
