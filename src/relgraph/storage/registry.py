"""AdapterRegistry: the process-wide active storage adapter.

Exactly one adapter is active at a time. Registering a second, different
adapter is refused; tests call :meth:`AdapterRegistry.clear` between cases.
When nothing was registered, :meth:`AdapterRegistry.get` builds the
configured default backend on first use.
"""

from __future__ import annotations

import asyncio
import logging
from typing import ClassVar

from relgraph.config.settings import RelGraphSettings
from relgraph.storage.adapter import StorageAdapter

logger = logging.getLogger(__name__)


def build_adapter(settings: RelGraphSettings) -> StorageAdapter:
    """Instantiate the backend named by ``settings.storage.backend``."""
    if settings.storage.backend == "memory":
        from relgraph.storage.memory import InMemoryAdapter

        return InMemoryAdapter()

    from relgraph.storage.sqlite import SqliteAdapter

    return SqliteAdapter(settings.db_path)


class AdapterRegistry:
    """Class-level holder for the active :class:`StorageAdapter`."""

    _adapter: ClassVar[StorageAdapter | None] = None
    _settings: ClassVar[RelGraphSettings | None] = None
    _lock: ClassVar[asyncio.Lock | None] = None
    _owned: ClassVar[bool] = False

    @classmethod
    def register(cls, adapter: StorageAdapter) -> None:
        """Make *adapter* the active adapter.

        Re-registering the same instance is a no-op.

        Raises:
            RuntimeError: A different adapter is already registered.
        """
        if cls._adapter is not None and cls._adapter is not adapter:
            msg = (
                f"Adapter already registered ({type(cls._adapter).__name__}); "
                "call AdapterRegistry.clear() first"
            )
            raise RuntimeError(msg)
        cls._adapter = adapter
        logger.debug("Registered storage adapter %s", type(adapter).__name__)

    @classmethod
    def configure(cls, settings: RelGraphSettings) -> None:
        """Set the settings used to build the default adapter lazily."""
        cls._settings = settings

    @classmethod
    def has_adapter(cls) -> bool:
        return cls._adapter is not None

    @classmethod
    async def get(cls) -> StorageAdapter:
        """Return the active adapter, building the configured default if needed."""
        if cls._adapter is not None:
            return cls._adapter
        if cls._lock is None:
            cls._lock = asyncio.Lock()
        async with cls._lock:
            if cls._adapter is None:
                settings = cls._settings or RelGraphSettings.from_cli()
                adapter = build_adapter(settings)
                await adapter.initialize()
                cls._adapter = adapter
                cls._owned = True
                logger.debug(
                    "Initialized default %s storage adapter",
                    settings.storage.backend,
                )
        return cls._adapter

    @classmethod
    def clear(cls) -> None:
        """Forget the active adapter and settings. The adapter is not closed."""
        cls._adapter = None
        cls._settings = None
        cls._lock = None
        cls._owned = False

    @classmethod
    async def shutdown(cls) -> None:
        """Close and forget an adapter built by :meth:`get`.

        Adapters handed to :meth:`register` belong to the caller and are left alone.
        """
        if cls._owned and cls._adapter is not None:
            await cls._adapter.close()
            cls.clear()
