"""GraphQL schema generated from a resolved :class:`NodeRegistry`.

For every node class ``T``:

- object type ``T`` with ``id``, timestamps and its declared props,
- to-one relationships as nullable ``T`` fields resolved with ``find()``,
- to-many relationships as ``<Target>Connection`` fields taking
  ``first``/``after``/``last``/``before``/``where``,
- root query field ``t(id: ID!)`` and mutation ``createT(input: TInput!)``,
- per relationship, mutations ``create<T><Role>`` and, for to-one,
  ``unlink<T><Role>``/``delete<T><Role>``.

Resolvers read the acting :class:`ViewerContext` from ``context["viewer"]``.
Errors raised by resolvers are reported as GraphQL error entries; a
relationship with no target resolves to ``null`` without an error.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from graphql import (
    ExecutionResult,
    GraphQLArgument,
    GraphQLBoolean,
    GraphQLField,
    GraphQLFloat,
    GraphQLID,
    GraphQLInputField,
    GraphQLInputObjectType,
    GraphQLInt,
    GraphQLList,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLResolveInfo,
    GraphQLSchema,
    GraphQLString,
    graphql,
)

from relgraph.domain.errors import ValidationError
from relgraph.domain.types import Cardinality, FieldType
from relgraph.domain.viewer import ViewerContext
from relgraph.nodes.base import Node
from relgraph.nodes.connection import Connection, PageInfo
from relgraph.nodes.registry import NodeRegistry, RelationBinding

logger = logging.getLogger(__name__)

_SCALARS = {
    FieldType.STRING: GraphQLString,
    FieldType.NUMBER: GraphQLFloat,
    FieldType.BOOLEAN: GraphQLBoolean,
}


def to_camel(name: str) -> str:
    """``collection_method`` -> ``collectionMethod``."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_pascal(name: str) -> str:
    camel = to_camel(name)
    return camel[:1].upper() + camel[1:]


def viewer_from_info(info: GraphQLResolveInfo) -> ViewerContext:
    """Return the viewer the transport layer put in the execution context.

    Raises:
        ValidationError: No viewer was supplied.
    """
    context = info.context
    viewer = context.get("viewer") if isinstance(context, Mapping) else None
    if not isinstance(viewer, ViewerContext):
        msg = "GraphQL context carries no viewer"
        raise ValidationError(msg)
    return viewer


PAGE_INFO_TYPE = GraphQLObjectType(
    "PageInfo",
    lambda: {
        "hasNextPage": GraphQLField(
            GraphQLNonNull(GraphQLBoolean),
            resolve=lambda page_info, _info: page_info.has_next_page,
        ),
        "hasPreviousPage": GraphQLField(
            GraphQLNonNull(GraphQLBoolean),
            resolve=lambda page_info, _info: page_info.has_previous_page,
        ),
        "startCursor": GraphQLField(
            GraphQLString,
            resolve=lambda page_info, _info: page_info.start_cursor,
        ),
        "endCursor": GraphQLField(
            GraphQLString,
            resolve=lambda page_info, _info: page_info.end_cursor,
        ),
    },
)

VIEWER_TYPE = GraphQLObjectType(
    "Viewer",
    {
        "identityId": GraphQLField(
            GraphQLNonNull(GraphQLID),
            resolve=lambda viewer, _info: viewer.identity_id,
        ),
        "organizationScopeId": GraphQLField(
            GraphQLNonNull(GraphQLID),
            resolve=lambda viewer, _info: viewer.organization_scope_id,
        ),
    },
)


class SchemaBuilder:
    """Builds the GraphQL types for one registry. Use :func:`build_schema`."""

    def __init__(self, registry: NodeRegistry, *, camel_case: bool = True) -> None:
        self._registry = registry
        self._camel_case = camel_case
        self._objects: dict[str, GraphQLObjectType] = {}
        self._connections: dict[str, GraphQLObjectType] = {}
        self._inputs: dict[str, GraphQLInputObjectType] = {}
        self._wheres: dict[str, GraphQLInputObjectType] = {}

    def field_name(self, name: str) -> str:
        return to_camel(name) if self._camel_case else name

    def build(self) -> GraphQLSchema:
        self._registry.resolve()
        classes = self._registry.classes
        query_fields: dict[str, GraphQLField] = {
            "viewer": GraphQLField(
                GraphQLNonNull(VIEWER_TYPE),
                resolve=lambda _root, info: viewer_from_info(info),
            )
        }
        mutation_fields: dict[str, GraphQLField] = {}

        for node_cls in classes:
            name = node_cls.__name__
            query_fields[name[:1].lower() + name[1:]] = self._root_find_field(node_cls)
            _add_unique(mutation_fields, f"create{name}", self._root_create_field(node_cls))
            for binding in node_cls.relation_table().bindings.values():
                for mutation_name, field in self._relation_mutations(binding).items():
                    _add_unique(mutation_fields, mutation_name, field)

        query = GraphQLObjectType("Query", query_fields)
        mutation = GraphQLObjectType("Mutation", mutation_fields) if mutation_fields else None
        schema = GraphQLSchema(query=query, mutation=mutation)
        logger.debug(
            "Built GraphQL schema: %d types, %d mutations",
            len(classes),
            len(mutation_fields),
        )
        return schema

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def object_type(self, node_cls: type[Node]) -> GraphQLObjectType:
        name = node_cls.__name__
        if name not in self._objects:
            self._objects[name] = GraphQLObjectType(
                name,
                lambda: self._object_fields(node_cls),
            )
        return self._objects[name]

    def _object_fields(self, node_cls: type[Node]) -> dict[str, GraphQLField]:
        fields: dict[str, GraphQLField] = {
            "id": GraphQLField(GraphQLNonNull(GraphQLID), resolve=lambda node, _info: node.id),
            self.field_name("created_at"): GraphQLField(
                GraphQLNonNull(GraphQLString),
                resolve=lambda node, _info: node.created_at.isoformat(),
            ),
            self.field_name("last_updated"): GraphQLField(
                GraphQLNonNull(GraphQLString),
                resolve=lambda node, _info: node.last_updated.isoformat(),
            ),
        }
        for prop_name, field_type in node_cls.node_spec.fields:
            fields[self.field_name(prop_name)] = GraphQLField(
                _SCALARS[field_type],
                resolve=_prop_resolver(prop_name),
            )
        for binding in node_cls.relation_table().bindings.values():
            fields[self.field_name(binding.role)] = self._relation_field(binding)
        return fields

    def _relation_field(self, binding: RelationBinding) -> GraphQLField:
        role = binding.role
        target_type = self.object_type(binding.target_cls)
        if binding.cardinality == Cardinality.ONE:

            async def resolve_one(node: Node, _info: GraphQLResolveInfo) -> Node | None:
                return await node.relation(role).find()

            return GraphQLField(target_type, resolve=resolve_one)

        async def resolve_many(
            node: Node,
            _info: GraphQLResolveInfo,
            **args: Any,
        ) -> Connection[Node]:
            return await node.relation(role).connection_for(**args)

        return GraphQLField(
            GraphQLNonNull(self.connection_type(binding.target_cls)),
            args=self._connection_args(binding.target_cls),
            resolve=resolve_many,
        )

    def connection_type(self, node_cls: type[Node]) -> GraphQLObjectType:
        name = node_cls.__name__
        if name not in self._connections:
            edge_type = GraphQLObjectType(
                f"{name}Edge",
                lambda: {
                    "cursor": GraphQLField(GraphQLNonNull(GraphQLString)),
                    "node": GraphQLField(GraphQLNonNull(self.object_type(node_cls))),
                },
            )
            self._connections[name] = GraphQLObjectType(
                f"{name}Connection",
                lambda: {
                    "edges": GraphQLField(GraphQLNonNull(GraphQLList(GraphQLNonNull(edge_type)))),
                    "pageInfo": GraphQLField(
                        GraphQLNonNull(PAGE_INFO_TYPE),
                        resolve=_page_info,
                    ),
                    "count": GraphQLField(
                        GraphQLNonNull(GraphQLInt),
                        resolve=lambda connection, _info: connection.total_count,
                    ),
                },
            )
        return self._connections[name]

    def _connection_args(self, node_cls: type[Node]) -> dict[str, GraphQLArgument]:
        args = {
            "first": GraphQLArgument(GraphQLInt),
            "after": GraphQLArgument(GraphQLString),
            "last": GraphQLArgument(GraphQLInt),
            "before": GraphQLArgument(GraphQLString),
        }
        where = self.where_type(node_cls)
        if where is not None:
            args["where"] = GraphQLArgument(where)
        return args

    def _input_args(self, node_cls: type[Node]) -> dict[str, GraphQLArgument]:
        """The ``input`` argument of create mutations; absent for classes without props."""
        input_type = self.input_type(node_cls)
        if input_type is None:
            return {}
        return {"input": GraphQLArgument(GraphQLNonNull(input_type), out_name="props")}

    def input_type(self, node_cls: type[Node]) -> GraphQLInputObjectType | None:
        """``<T>Input``: every declared prop, required. None when *node_cls* has no props."""
        name = node_cls.__name__
        if not node_cls.node_spec.fields:
            return None
        if name not in self._inputs:
            self._inputs[name] = GraphQLInputObjectType(
                f"{name}Input",
                {
                    self.field_name(prop): GraphQLInputField(
                        GraphQLNonNull(_SCALARS[field_type]),
                        out_name=prop,
                    )
                    for prop, field_type in node_cls.node_spec.fields
                },
            )
        return self._inputs[name]

    def where_type(self, node_cls: type[Node]) -> GraphQLInputObjectType | None:
        """``<T>Where``: exact-match filter, every prop optional."""
        name = node_cls.__name__
        if not node_cls.node_spec.fields:
            return None
        if name not in self._wheres:
            self._wheres[name] = GraphQLInputObjectType(
                f"{name}Where",
                {
                    self.field_name(prop): GraphQLInputField(_SCALARS[field_type], out_name=prop)
                    for prop, field_type in node_cls.node_spec.fields
                },
            )
        return self._wheres[name]

    # ------------------------------------------------------------------
    # Root fields
    # ------------------------------------------------------------------

    def _root_find_field(self, node_cls: type[Node]) -> GraphQLField:
        async def resolve(_root: Any, info: GraphQLResolveInfo, node_id: str) -> Node | None:
            return await node_cls.find(viewer_from_info(info), node_id)

        return GraphQLField(
            self.object_type(node_cls),
            args={"id": GraphQLArgument(GraphQLNonNull(GraphQLID), out_name="node_id")},
            resolve=resolve,
        )

    def _root_create_field(self, node_cls: type[Node]) -> GraphQLField:
        async def resolve(
            _root: Any,
            info: GraphQLResolveInfo,
            props: dict[str, Any] | None = None,
        ) -> Node:
            return await node_cls.create(viewer_from_info(info), props or {})

        return GraphQLField(
            GraphQLNonNull(self.object_type(node_cls)),
            args=self._input_args(node_cls),
            resolve=resolve,
        )

    def _relation_mutations(self, binding: RelationBinding) -> dict[str, GraphQLField]:
        source_cls = binding.source_cls
        role = binding.role
        suffix = f"{source_cls.__name__}{to_pascal(role)}"
        source_arg = {
            self.field_name("source_id"): GraphQLArgument(
                GraphQLNonNull(GraphQLID),
                out_name="source_id",
            )
        }

        async def load_source(info: GraphQLResolveInfo, source_id: str) -> Node:
            return await source_cls.find_x(viewer_from_info(info), source_id)

        async def resolve_create(
            _root: Any,
            info: GraphQLResolveInfo,
            source_id: str,
            props: dict[str, Any] | None = None,
        ) -> Node:
            source = await load_source(info, source_id)
            return await source.relation(role).create(props or {})

        mutations = {
            f"create{suffix}": GraphQLField(
                GraphQLNonNull(self.object_type(binding.target_cls)),
                args={**source_arg, **self._input_args(binding.target_cls)},
                resolve=resolve_create,
            )
        }
        if binding.cardinality == Cardinality.MANY:
            return mutations

        def source_mutation(operation: str) -> Callable[..., Any]:
            async def resolve(_root: Any, info: GraphQLResolveInfo, source_id: str) -> Node:
                source = await load_source(info, source_id)
                await getattr(source.relation(role), operation)()
                return source

            return resolve

        for operation in ("unlink", "delete"):
            mutations[f"{operation}{suffix}"] = GraphQLField(
                GraphQLNonNull(self.object_type(source_cls)),
                args=dict(source_arg),
                resolve=source_mutation(operation),
            )
        return mutations


def _prop_resolver(prop_name: str) -> Callable[[Node, GraphQLResolveInfo], Any]:
    def resolve(node: Node, _info: GraphQLResolveInfo) -> Any:
        return node.props.get(prop_name)

    return resolve


def _page_info(connection: Connection[Node], _info: GraphQLResolveInfo) -> PageInfo:
    return connection.page_info


def _add_unique(fields: dict[str, GraphQLField], name: str, field: GraphQLField) -> None:
    if name in fields:
        msg = f"GraphQL field {name!r} is generated twice"
        raise ValueError(msg)
    fields[name] = field


def build_schema(registry: NodeRegistry, *, camel_case: bool = True) -> GraphQLSchema:
    """Resolve *registry* and build its GraphQL schema."""
    return SchemaBuilder(registry, camel_case=camel_case).build()


async def execute_graphql(
    schema: GraphQLSchema,
    document: str,
    viewer: ViewerContext,
    variables: Mapping[str, Any] | None = None,
) -> ExecutionResult:
    """Execute *document* as *viewer*."""
    return await graphql(
        schema,
        document,
        context_value={"viewer": viewer},
        variable_values=dict(variables) if variables is not None else None,
    )
