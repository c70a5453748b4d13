"""GqlService: execute GraphQL documents from scripts and the CLI."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from relgraph.domain.viewer import ViewerContext
from relgraph.graphql.schema import build_schema, execute_graphql
from relgraph.services.base import BaseService
from relgraph.services.result import ServiceError, ServiceResult

logger = logging.getLogger(__name__)


class GqlService(BaseService):
    """Runs a document against the registry's schema as a script viewer."""

    async def execute(
        self,
        document: str,
        *,
        variables: Mapping[str, Any] | None = None,
        scope_id: str | None = None,
        identity_id: str = "script",
    ) -> ServiceResult:
        """Execute *document*.

        Without *scope_id* a fresh organization scope is used; the scope in
        effect is returned so later calls can reuse it.
        """
        op = "gql"
        viewer = ViewerContext.dangerously_create_for_scripts(
            identity_id=identity_id,
            organization_scope_id=scope_id,
        )
        schema = build_schema(self.registry, camel_case=self._settings.graphql.camel_case)
        result = await execute_graphql(schema, document, viewer, variables)

        if result.errors:
            errors = [error.formatted for error in result.errors]
            logger.debug("GraphQL execution returned %d error(s)", len(errors))
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="GRAPHQL_ERROR",
                    message="; ".join(error.message for error in result.errors),
                    detail={
                        "errors": errors,
                        "data": result.data,
                        "scope_id": viewer.organization_scope_id,
                    },
                ),
            )
        return ServiceResult(
            ok=True,
            op=op,
            data={"data": result.data, "scope_id": viewer.organization_scope_id},
        )
