"""InitService: create the project config and storage."""

from __future__ import annotations

import logging

from relgraph.config.discovery import CONFIG_FILENAME
from relgraph.domain.errors import RelGraphError
from relgraph.services.base import BaseService
from relgraph.services.result import ServiceResult
from relgraph.storage.registry import AdapterRegistry

logger = logging.getLogger(__name__)

_CONFIG_TEMPLATE = """\
# relgraph project configuration. Only overrides are needed here.

[storage]
backend = "{backend}"
path = "{path}"

[graphql]
camel_case = {camel_case}
"""


class InitService(BaseService):
    """Initializes storage for the configured project."""

    async def init_project(self, *, write_config: bool = True) -> ServiceResult:
        """Write ``relgraph.toml`` if absent and create the storage tables.

        Idempotent: an existing config file is never overwritten.
        """
        settings = self._settings
        warnings: list[str] = []
        config_file = settings.project_root / CONFIG_FILENAME
        config_written = False
        if write_config:
            if config_file.exists():
                warnings.append(f"{config_file} already exists; left unchanged")
            else:
                config_file.write_text(
                    _CONFIG_TEMPLATE.format(
                        backend=settings.storage.backend,
                        path=settings.storage.path,
                        camel_case=str(settings.graphql.camel_case).lower(),
                    ),
                    encoding="utf-8",
                )
                config_written = True
                logger.debug("Wrote %s", config_file)

        try:
            await AdapterRegistry.get()
        except RelGraphError as exc:
            return ServiceResult.failure("init", exc)

        path = str(settings.db_path) if settings.storage.backend == "sqlite" else ":memory:"
        return ServiceResult(
            ok=True,
            op="init",
            data={
                "backend": settings.storage.backend,
                "path": path,
                "config_path": str(config_file),
                "config_written": config_written,
            },
            warnings=warnings,
        )
