"""GraphQL surface over a node registry (graphql-core)."""

from relgraph.graphql.schema import build_schema, execute_graphql

__all__ = ["build_schema", "execute_graphql"]
