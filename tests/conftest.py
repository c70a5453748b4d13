"""Shared pytest fixtures for relgraph tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

from relgraph.config.discovery import CONFIG_ENV_VAR
from relgraph.domain.ids import generate_gid, next_sort_value, utc_now
from relgraph.domain.viewer import ViewerContext
from relgraph.storage.adapter import EDGE_CLASS_NAME, EdgeMetadata, NodeMetadata, StorageAdapter
from relgraph.storage.memory import InMemoryAdapter
from relgraph.storage.registry import AdapterRegistry
from relgraph.storage.sqlite import SqliteAdapter


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _reset_adapter_registry() -> Iterator[None]:
    """Every test starts without an active storage adapter."""
    AdapterRegistry.clear()
    yield
    AdapterRegistry.clear()


@pytest.fixture(params=["memory", "sqlite"])
async def adapter(request: pytest.FixtureRequest, tmp_path: Path) -> AsyncIterator[StorageAdapter]:
    """An initialized, registered adapter; each test runs once per backend."""
    backend: StorageAdapter
    if request.param == "memory":
        backend = InMemoryAdapter()
    else:
        backend = SqliteAdapter(tmp_path / "graph.db")
    await backend.initialize()
    AdapterRegistry.register(backend)
    try:
        yield backend
    finally:
        await backend.close()


@pytest.fixture
def viewer() -> ViewerContext:
    return ViewerContext.dangerously_create_for_scripts(identity_id="tester")


@pytest.fixture
def _isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run in an empty project directory with no inherited configuration.

    Use via ``@pytest.mark.usefixtures("_isolated_project")``.
    """
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    for name in ("RELGRAPH_STORAGE__BACKEND", "RELGRAPH_STORAGE__PATH"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test helpers (raw storage metadata for adapter-level tests)
# ---------------------------------------------------------------------------

OID = "org-1"


def node_meta(class_name: str = "Thing", *, oid: str = OID) -> NodeMetadata:
    now = utc_now()
    return NodeMetadata(
        gid=generate_gid(),
        oid=oid,
        class_name=class_name,
        created_at=now,
        last_updated=now,
        sort_value=next_sort_value(),
    )


def edge_meta(source: NodeMetadata, target: NodeMetadata, role: str) -> EdgeMetadata:
    now = utc_now()
    return EdgeMetadata(
        gid=generate_gid(),
        oid=source.oid,
        class_name=EDGE_CLASS_NAME,
        created_at=now,
        last_updated=now,
        sort_value=next_sort_value(),
        source_id=source.gid,
        source_class_name=source.class_name,
        target_id=target.gid,
        target_class_name=target.class_name,
        role=role,
    )
