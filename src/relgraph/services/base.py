"""BaseService: shared foundation for CLI-facing services.

Services are async and receive the resolved settings at construction time.
Storage access goes through :class:`AdapterRegistry`, configured from the
same settings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relgraph.storage.registry import AdapterRegistry

if TYPE_CHECKING:
    from relgraph.config.settings import RelGraphSettings
    from relgraph.nodes.registry import NodeRegistry


class BaseService:
    """Abstract base for service-layer classes."""

    def __init__(self, settings: RelGraphSettings, registry: NodeRegistry | None = None) -> None:
        self._settings = settings
        self._registry = registry
        AdapterRegistry.configure(settings)

    @property
    def registry(self) -> NodeRegistry:
        """The node registry, defaulting to the built-in types."""
        if self._registry is None:
            import relgraph.node_types  # noqa: F401
            from relgraph.nodes.registry import NODE_REGISTRY

            self._registry = NODE_REGISTRY
        return self._registry
