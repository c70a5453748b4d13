"""Sample: one collected completion attached to a deck."""

from __future__ import annotations

from enum import StrEnum

from relgraph.domain.spec import NodeSpec
from relgraph.nodes.base import Node
from relgraph.nodes.registry import NODE_REGISTRY


class CollectionMethod(StrEnum):
    """How a sample was collected."""

    MANUAL = "manual"
    TELEMETRY = "telemetry"


@NODE_REGISTRY.register
class Sample(Node):
    node_spec = NodeSpec.define().string("name").string("collection_method")
