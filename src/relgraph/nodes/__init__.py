"""Node layer: entities, edges, derived relationship operations and pagination."""

from relgraph.nodes.base import Node
from relgraph.nodes.connection import Connection, ConnectionEdge, PageInfo, paginate
from relgraph.nodes.edge import Edge
from relgraph.nodes.registry import NODE_REGISTRY, NodeRegistry, RelationTable
from relgraph.nodes.relationships import ManyRelationship, OneRelationship

__all__ = [
    "NODE_REGISTRY",
    "Connection",
    "ConnectionEdge",
    "Edge",
    "ManyRelationship",
    "Node",
    "NodeRegistry",
    "OneRelationship",
    "PageInfo",
    "RelationTable",
    "paginate",
]
