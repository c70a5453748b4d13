"""ViewerContext: the acting identity threaded through every operation.

Viewer contexts are derived from the transport session at the boundary
(see :meth:`ViewerContext.from_session`). The library never builds one on
its own, except through :meth:`ViewerContext.dangerously_create_for_scripts`,
which exists for scripts and tests only.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from relgraph.domain.errors import ValidationError
from relgraph.domain.ids import generate_gid


class ViewerContext(BaseModel):
    """Immutable identity plus owning organization scope.

    Attributes:
        identity_id: The acting identity (user, service account, script).
        organization_scope_id: Scope stamped as ``owner_id`` on every
            node and edge this viewer creates.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    identity_id: str
    organization_scope_id: str

    @classmethod
    def from_session(cls, session: Mapping[str, Any]) -> ViewerContext:
        """Build a viewer from transport-layer session data.

        Raises:
            ValidationError: If either identity key is missing or not a string.
        """
        try:
            return cls.model_validate(
                {
                    "identity_id": session.get("identity_id"),
                    "organization_scope_id": session.get("organization_scope_id"),
                }
            )
        except PydanticValidationError as exc:
            msg = "Session does not carry a valid viewer identity"
            raise ValidationError(msg, detail={"errors": exc.errors()}) from exc

    @classmethod
    def dangerously_create_for_scripts(
        cls,
        identity_id: str = "script",
        organization_scope_id: str | None = None,
    ) -> ViewerContext:
        """Create a viewer outside any transport session. Scripts and tests only."""
        return cls(
            identity_id=identity_id,
            organization_scope_id=organization_scope_id or generate_gid(),
        )
