"""Output mode selection for ServiceResult.

The CLI renders results for humans (Rich tables and colors), for scripts
(``--quiet``) or for machines (``--json``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

if TYPE_CHECKING:
    from relgraph.services.result import ServiceResult


class OutputSettings(BaseModel):
    """Output flags taken from the root CLI group."""

    model_config = {"frozen": True}

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display according to *settings*."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        from relgraph.output.renderers import render_quiet

        return render_quiet(result)

    from relgraph.output.renderers import render_result

    return render_result(result, verbose=settings.verbose)
