"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, relgraph.toml only contains
overrides. A fresh project needs no config file at all.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class StorageConfig(BaseModel):
    """[storage] section."""

    model_config = {"frozen": True}

    backend: Literal["sqlite", "memory"] = "sqlite"
    path: str = ".relgraph/relgraph.db"


class GraphqlConfig(BaseModel):
    """[graphql] section."""

    model_config = {"frozen": True}

    camel_case: bool = True


class RelGraphConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    storage: StorageConfig = Field(default_factory=StorageConfig)
    graphql: GraphqlConfig = Field(default_factory=GraphqlConfig)
