"""Node registry and per-class relationship capability tables.

Registration happens in two phases:

1. :meth:`NodeRegistry.register` records a node class. Relationship targets
   may still be symbolic names of classes that are not registered yet.
2. :meth:`NodeRegistry.resolve` runs once every class is known. It resolves
   targets and builds one :class:`RelationTable` per class, mapping each role
   to its binding and each derived method name to ``(role, operation)``.

The table is handed to every node instance the library produces. Nothing is
attached to the node classes themselves, and every lookup is keyed by
``(declaring class, role)``, never by target class.

Derived method names for role ``r``:

- to-one: ``find_r``, ``find_x_r``, ``create_r``, ``unlink_r``, ``delete_r``
- to-many: ``find_all_r``, ``query_r``, ``create_r``, ``connection_for_r``
"""

from __future__ import annotations

import logging
import weakref
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, TypeVar

from relgraph.domain.spec import RelationSpec
from relgraph.domain.types import Cardinality
from relgraph.storage.adapter import EDGE_CLASS_NAME

if TYPE_CHECKING:
    from relgraph.nodes.base import Node
    from relgraph.nodes.relationships import ManyRelationship, OneRelationship
    from relgraph.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

_C = TypeVar("_C", bound=type)

ONE_OPERATIONS = ("find", "find_x", "create", "unlink", "delete")
MANY_OPERATIONS = ("find_all", "query", "create", "connection_for")

# Which registry owns each node class. Weak so test-local classes can be collected.
_OWNERS: weakref.WeakKeyDictionary[type, NodeRegistry] = weakref.WeakKeyDictionary()


def derived_method_name(operation: str, role: str) -> str:
    return f"{operation}_{role}"


@dataclass(frozen=True)
class RelationBinding:
    """A relationship declaration with its target class resolved."""

    source_cls: type[Node]
    spec: RelationSpec
    target_cls: type[Node]

    @property
    def role(self) -> str:
        return self.spec.role

    @property
    def cardinality(self) -> Cardinality:
        return self.spec.cardinality

    @property
    def operations(self) -> tuple[str, ...]:
        return ONE_OPERATIONS if self.cardinality == Cardinality.ONE else MANY_OPERATIONS

    def bind(self, source: Node) -> OneRelationship | ManyRelationship:
        """Return the operation bundle for *source*."""
        from relgraph.nodes.relationships import ManyRelationship, OneRelationship

        if self.cardinality == Cardinality.ONE:
            return OneRelationship(source, self)
        return ManyRelationship(source, self)


@dataclass(frozen=True)
class RelationTable:
    """Capability table for one node class."""

    class_name: str
    bindings: Mapping[str, RelationBinding]
    methods: Mapping[str, tuple[str, str]]

    def binding(self, role: str) -> RelationBinding | None:
        return self.bindings.get(role)

    def lookup(self, method_name: str) -> tuple[RelationBinding, str] | None:
        """Map a derived method name to its binding and operation."""
        entry = self.methods.get(method_name)
        if entry is None:
            return None
        role, operation = entry
        return self.bindings[role], operation


class NodeRegistry:
    """Holds node classes and their resolved relationship tables.

    Parameters:
        plugins: Optional plugin manager. Its ``register_node_types``
            contributions are collected on first resolve, and lifecycle
            events of nodes from this registry are dispatched to it.
    """

    def __init__(self, *, plugins: PluginManager | None = None) -> None:
        self._classes: dict[str, type[Node]] = {}
        self._tables: dict[type, RelationTable] = {}
        self._resolved = False
        self._plugins_collected = False
        self.plugins = plugins

    # ------------------------------------------------------------------
    # Phase 1: registration
    # ------------------------------------------------------------------

    def register(self, node_cls: _C) -> _C:
        """Record *node_cls*. Usable as a class decorator.

        Raises:
            TypeError: *node_cls* is not a Node subclass.
            ValueError: Another class already uses the name, the name is the
                one edge records are stored under, or the class belongs to a
                different registry.
        """
        from relgraph.nodes.base import Node

        if not isinstance(node_cls, type) or not issubclass(node_cls, Node) or node_cls is Node:
            msg = f"{node_cls!r} is not a Node subclass"
            raise TypeError(msg)

        name = node_cls.__name__
        if name == EDGE_CLASS_NAME:
            msg = f"Node class name {name!r} is reserved for edge records"
            raise ValueError(msg)
        existing = self._classes.get(name)
        if existing is not None and existing is not node_cls:
            msg = f"Node class name {name!r} is already registered"
            raise ValueError(msg)
        owner = _OWNERS.get(node_cls)
        if owner is not None and owner is not self:
            msg = f"{name} is already registered with another NodeRegistry"
            raise ValueError(msg)

        self._classes[name] = node_cls
        _OWNERS[node_cls] = self
        self._resolved = False
        return node_cls

    # ------------------------------------------------------------------
    # Phase 2: resolution
    # ------------------------------------------------------------------

    def resolve(self) -> None:
        """Resolve relationship targets and build every class's table.

        Raises:
            LookupError: A relationship targets a class this registry lacks.
            ValueError: Two derived method names collide, or one shadows a
                Node attribute.
        """
        if self.plugins is not None and not self._plugins_collected:
            self._plugins_collected = True
            added = self.plugins.contribute_node_types(self)
            if added:
                logger.debug("Plugins contributed node types: %s", ", ".join(added))

        tables = {node_cls: self._build_table(node_cls) for node_cls in self._classes.values()}
        self._tables = tables
        self._resolved = True
        logger.debug("Resolved %d node classes", len(tables))

    def _build_table(self, node_cls: type[Node]) -> RelationTable:
        bindings: dict[str, RelationBinding] = {}
        methods: dict[str, tuple[str, str]] = {}
        for relation in node_cls.node_spec.relations:
            binding = RelationBinding(node_cls, relation, self._resolve_target(node_cls, relation))
            bindings[relation.role] = binding
            for operation in binding.operations:
                method_name = derived_method_name(operation, relation.role)
                if method_name in methods:
                    other_role, other_op = methods[method_name]
                    msg = (
                        f"{node_cls.__name__}.{method_name} is derived from both "
                        f"{other_op!r} on role {other_role!r} and {operation!r} on role "
                        f"{relation.role!r}"
                    )
                    raise ValueError(msg)
                if hasattr(node_cls, method_name):
                    msg = (
                        f"{node_cls.__name__}.{method_name} (role {relation.role!r}) "
                        "shadows an existing attribute"
                    )
                    raise ValueError(msg)
                methods[method_name] = (relation.role, operation)
        return RelationTable(
            class_name=node_cls.__name__,
            bindings=MappingProxyType(bindings),
            methods=MappingProxyType(methods),
        )

    def _resolve_target(self, node_cls: type[Node], relation: RelationSpec) -> type[Node]:
        target = relation.target
        if isinstance(target, str):
            resolved = self._classes.get(target)
        else:
            resolved = target if self._classes.get(relation.target_name) is target else None
        if resolved is None:
            msg = (
                f"{node_cls.__name__}.{relation.role} targets {relation.target_name!r}, "
                "which is not registered"
            )
            raise LookupError(msg)
        return resolved

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def table_for(self, node_cls: type[Node]) -> RelationTable:
        """Return the capability table of *node_cls*, resolving if needed."""
        if not self._resolved:
            self.resolve()
        table = self._tables.get(node_cls)
        if table is None:
            msg = f"{node_cls.__name__} is not registered with this NodeRegistry"
            raise LookupError(msg)
        return table

    def get(self, name: str) -> type[Node]:
        """Look up a registered class by name.

        Raises:
            KeyError: No class of that name is registered.
        """
        if name not in self._classes:
            msg = f"No node class registered as {name!r}"
            raise KeyError(msg)
        return self._classes[name]

    @property
    def classes(self) -> list[type[Node]]:
        """Registered classes in registration order."""
        return list(self._classes.values())

    def dispatch(self, hook_name: str, **payload: Any) -> None:
        """Forward a lifecycle event to the plugin manager, if any."""
        if self.plugins is not None:
            self.plugins.dispatch(hook_name, **payload)

    def __contains__(self, name: object) -> bool:
        return name in self._classes

    def __iter__(self) -> Iterator[type[Node]]:
        return iter(self.classes)

    def __len__(self) -> int:
        return len(self._classes)


def registry_of(node_cls: type) -> NodeRegistry:
    """Return the registry *node_cls* was registered with.

    Raises:
        LookupError: The class was never registered.
    """
    owner = _OWNERS.get(node_cls)
    if owner is None:
        msg = f"{node_cls.__name__} is not registered; decorate it with NodeRegistry.register"
        raise LookupError(msg)
    return owner


NODE_REGISTRY = NodeRegistry()
