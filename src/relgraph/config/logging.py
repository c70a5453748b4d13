"""Log routing for the relgraph CLI.

Library modules log through ``logging.getLogger(__name__)``: node and edge
writes, relationship replacement and adapter setup at DEBUG, plugin hook
failures at WARNING. The CLI routes all of it through structlog to stderr,
as a console rendering or as JSON lines (``--log-json``), so stdout only ever
carries command results.

Values bound with :func:`bind_log_context` (the running command, the
organization scope of ``gql``) are added to every line logged afterwards.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

# Third-party loggers that stay at WARNING even with --verbose.
QUIET_LOGGERS = ("sqlalchemy", "aiosqlite", "pluggy")


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install the stderr handler on the root logger and drop any bound context.

    Safe to call repeatedly.

    Args:
        verbose: Show relgraph DEBUG records. Otherwise WARNING and above.
        log_json: Emit JSON lines instead of the console rendering.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if log_json
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    structlog.contextvars.clear_contextvars()
    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("relgraph").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_log_context(**values: Any) -> None:
    """Attach *values* to subsequent log lines. ``None`` values are skipped."""
    bound = {key: value for key, value in values.items() if value is not None}
    if bound:
        structlog.contextvars.bind_contextvars(**bound)
