"""Command: execute a GraphQL document."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from relgraph.commands._base import RelCommand
from relgraph.config.logging import bind_log_context
from relgraph.services.gql import GqlService

if TYPE_CHECKING:
    from relgraph.commands._context import AppContext

_GQL_EXAMPLES = (
    "relgraph gql '{ viewer { identityId organizationScopeId } }'",
    "relgraph gql 'mutation { createOrganization(input: {name: \"Acme\", domain: \"acme.test\"}) { id } }'",
    "relgraph gql -f query.graphql --variables '{\"id\": \"...\"}' --scope <scope-id>",
)


def _parse_variables(raw: str | None) -> dict[str, Any] | None:
    if raw is None:
        return None
    try:
        variables = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"not valid JSON: {exc}", param_hint="--variables") from exc
    if not isinstance(variables, dict):
        raise click.BadParameter("must be a JSON object", param_hint="--variables")
    return variables


@click.command("gql", cls=RelCommand, examples=_GQL_EXAMPLES)
@click.argument("document", required=False)
@click.option(
    "-f",
    "--file",
    "document_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read the document from a file.",
)
@click.option("--variables", default=None, help="Variables as a JSON object.")
@click.option("--scope", "scope_id", default=None, help="Organization scope to run in.")
@click.pass_obj
def gql(
    app: AppContext,
    document: str | None,
    document_file: Path | None,
    variables: str | None,
    scope_id: str | None,
) -> None:
    """Execute a GraphQL DOCUMENT as a script viewer.

    Without --scope a new organization scope is created; it is reported in
    the output so later calls can pass it back.
    """
    if (document is None) == (document_file is None):
        raise click.UsageError("Pass exactly one of DOCUMENT or --file.")
    if document_file is not None:
        document = document_file.read_text(encoding="utf-8")
    assert document is not None

    bind_log_context(scope_id=scope_id)
    service = GqlService(app.settings, registry=app.registry)
    result = app.run(
        service.execute(document, variables=_parse_variables(variables), scope_id=scope_id)
    )
    app.emit(result)
