"""Domain layer: errors, viewer identity, node specs, prop validation.

This layer depends only on stdlib and pydantic.
It must never import from nodes, storage, graphql, commands, or config.
"""
