"""Storage layer: the adapter contract, its backends and the active-adapter registry.

INVARIANT: Adapters are the only channel to durable state.
"""

from relgraph.storage.adapter import DbItem, EdgeMetadata, NodeMetadata, StorageAdapter
from relgraph.storage.memory import InMemoryAdapter
from relgraph.storage.registry import AdapterRegistry
from relgraph.storage.sqlite import SqliteAdapter

__all__ = [
    "AdapterRegistry",
    "DbItem",
    "EdgeMetadata",
    "InMemoryAdapter",
    "NodeMetadata",
    "SqliteAdapter",
    "StorageAdapter",
]
