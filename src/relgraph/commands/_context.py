"""AppContext: shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``. Owns logging setup, plugin loading, the async bridge
for services and result emission (stdout/stderr routing plus exit codes).
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import TYPE_CHECKING, Any, TypeVar

import click

from relgraph.output.formatters import OutputSettings, format_result
from relgraph.storage.registry import AdapterRegistry

if TYPE_CHECKING:
    from relgraph.config.settings import RelGraphSettings
    from relgraph.nodes.registry import NodeRegistry
    from relgraph.plugins.manager import PluginManager
    from relgraph.services.result import ServiceResult

_T = TypeVar("_T")

PLUGINS_DIRNAME = ".relgraph/plugins"


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The node registry and plugins load lazily so ``--help`` and
    ``--version`` never import node types or touch storage.
    """

    def __init__(self, settings: RelGraphSettings) -> None:
        self.settings = settings
        self._plugins: PluginManager | None = None

        from relgraph.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def plugins(self) -> PluginManager:
        if self._plugins is None:
            from relgraph.plugins.manager import PluginManager

            self._plugins = PluginManager()
            self._plugins.discover_and_load(local_dir=self.settings.project_root / PLUGINS_DIRNAME)
        return self._plugins

    @property
    def registry(self) -> NodeRegistry:
        """The built-in registry, wired to the loaded plugins."""
        import relgraph.node_types  # noqa: F401
        from relgraph.nodes.registry import NODE_REGISTRY

        if NODE_REGISTRY.plugins is None:
            NODE_REGISTRY.plugins = self.plugins
        return NODE_REGISTRY

    def run(self, coro: Coroutine[Any, Any, _T]) -> _T:
        """Run a service coroutine, closing any adapter it had to open."""

        async def _run() -> _T:
            try:
                return await coro
            finally:
                await AdapterRegistry.shutdown()

        return asyncio.run(_run())

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout. Warnings go to stderr in human mode so
          they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
