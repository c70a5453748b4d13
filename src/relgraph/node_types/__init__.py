"""Built-in node types, registered with :data:`relgraph.nodes.NODE_REGISTRY` on import."""

from relgraph.node_types.api_key import ApiKey
from relgraph.node_types.deck import Deck
from relgraph.node_types.organization import Organization
from relgraph.node_types.sample import CollectionMethod, Sample

__all__ = ["ApiKey", "CollectionMethod", "Deck", "Organization", "Sample"]
