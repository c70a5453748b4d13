"""SqlService: read-only SQL inspection of the SQLite store.

Statements run on a dedicated connection with ``PRAGMA query_only`` set,
so SQLite itself rejects writes even if the keyword check is bypassed.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from relgraph.domain.errors import AdapterError, NotFound, ValidationError
from relgraph.services.base import BaseService
from relgraph.services.result import ServiceResult
from relgraph.storage.sqlite import create_db_engine

logger = logging.getLogger(__name__)

READ_ONLY_KEYWORDS = frozenset({"select", "with", "pragma", "explain", "values"})


def leading_keyword(statement: str) -> str:
    """First SQL keyword of *statement*, lowercased, skipping ``--`` comments."""
    for line in statement.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("--"):
            continue
        return stripped.split(None, 1)[0].rstrip(";").lower()
    return ""


class SqlService(BaseService):
    """Runs read-only queries against the configured SQLite database."""

    async def query(self, statement: str) -> ServiceResult:
        op = "sql"
        if self._settings.storage.backend != "sqlite":
            error = ValidationError(
                "SQL inspection needs the sqlite backend",
                detail={"backend": self._settings.storage.backend},
            )
            return ServiceResult.failure(op, error)

        keyword = leading_keyword(statement)
        if keyword not in READ_ONLY_KEYWORDS:
            error = ValidationError(
                f"Only read-only statements are allowed, got {keyword or 'nothing'!r}",
                detail={"allowed": sorted(READ_ONLY_KEYWORDS)},
            )
            return ServiceResult.failure(op, error)

        db_path = self._settings.db_path
        if not db_path.is_file():
            error = NotFound(f"No database at {db_path}; run 'relgraph init' first")
            return ServiceResult.failure(op, error)

        engine = create_db_engine(db_path)
        try:
            async with engine.connect() as conn:
                await conn.exec_driver_sql("PRAGMA query_only = ON")
                result = await conn.exec_driver_sql(statement)
                columns: list[str] = list(result.keys()) if result.returns_rows else []
                rows: list[list[Any]] = (
                    [list(row) for row in result.fetchall()] if result.returns_rows else []
                )
        except SQLAlchemyError as exc:
            logger.debug("Query failed", exc_info=True)
            reason = getattr(exc, "orig", None) or exc
            return ServiceResult.failure(
                op, AdapterError(str(reason), detail={"statement": statement})
            )
        finally:
            await engine.dispose()

        return ServiceResult(
            ok=True,
            op=op,
            data={"columns": columns, "rows": rows, "count": len(rows)},
        )
