"""Service layer: CLI-facing operations returning ServiceResult.

Services may import from domain, nodes, storage and graphql.
They must never import from commands or output.
"""
