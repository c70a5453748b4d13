"""Declarative node specs: prop shape plus relationship declarations.

A node class declares its spec once, at class definition time::

    class Book(Node):
        node_spec = (
            NodeSpec.define()
            .string("title")
            .one("author", "Person")
            .one("illustrator", "Person")
        )

Every builder call returns a new frozen spec, so specs can be shared and
extended without mutation. Relationship targets are symbolic (a class name)
and resolved in a second pass by :class:`relgraph.nodes.registry.NodeRegistry`
once every class is registered.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from relgraph.domain.ids import FIELD_PATTERN, validate_role
from relgraph.domain.types import Cardinality, FieldType


@dataclass(frozen=True)
class RelationSpec:
    """One relationship declaration.

    ``target`` is either a class name (resolved later) or a node class.
    """

    role: str
    cardinality: Cardinality
    target: Any

    @property
    def target_name(self) -> str:
        """Symbolic name of the target class."""
        if isinstance(self.target, str):
            return self.target
        return str(self.target.__name__)


@dataclass(frozen=True)
class NodeSpec:
    """Immutable prop shape and relationship list for a node class."""

    fields: tuple[tuple[str, FieldType], ...] = ()
    relations: tuple[RelationSpec, ...] = field(default=())

    @classmethod
    def define(cls) -> NodeSpec:
        """Start an empty spec."""
        return cls()

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def string(self, name: str) -> NodeSpec:
        return self._with_field(name, FieldType.STRING)

    def number(self, name: str) -> NodeSpec:
        return self._with_field(name, FieldType.NUMBER)

    def boolean(self, name: str) -> NodeSpec:
        return self._with_field(name, FieldType.BOOLEAN)

    def _with_field(self, name: str, field_type: FieldType) -> NodeSpec:
        if FIELD_PATTERN.match(name) is None:
            msg = f"Invalid field name: {name!r}"
            raise ValueError(msg)
        if name in self.field_map:
            msg = f"Field {name!r} is already declared"
            raise ValueError(msg)
        return replace(self, fields=(*self.fields, (name, field_type)))

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    def one(self, role: str, target: Any) -> NodeSpec:
        """Declare a to-one relationship under *role*."""
        return self._with_relation(RelationSpec(role, Cardinality.ONE, target))

    def many(self, role: str, target: Any) -> NodeSpec:
        """Declare a to-many relationship under *role*."""
        return self._with_relation(RelationSpec(role, Cardinality.MANY, target))

    def _with_relation(self, relation: RelationSpec) -> NodeSpec:
        if not validate_role(relation.role):
            msg = f"Invalid relationship role: {relation.role!r}"
            raise ValueError(msg)
        if any(r.role == relation.role for r in self.relations):
            msg = f"Relationship role {relation.role!r} is already declared"
            raise ValueError(msg)
        return replace(self, relations=(*self.relations, relation))

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def field_map(self) -> dict[str, FieldType]:
        return dict(self.fields)

    def relation(self, role: str) -> RelationSpec | None:
        for relation in self.relations:
            if relation.role == role:
                return relation
        return None
