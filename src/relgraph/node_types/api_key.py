"""ApiKey: a credential bound to one organization by id."""

from __future__ import annotations

from relgraph.domain.ids import utc_now
from relgraph.domain.spec import NodeSpec
from relgraph.domain.viewer import ViewerContext
from relgraph.node_types.organization import Organization
from relgraph.nodes.base import Node
from relgraph.nodes.registry import NODE_REGISTRY

KEY_PREFIX = "rg+"


@NODE_REGISTRY.register
class ApiKey(Node):
    node_spec = (
        NodeSpec.define()
        .string("key")
        .string("description")
        .string("organization_id")
        .string("last_used_at")
    )

    @staticmethod
    def generate_key_for_organization(organization_id: str) -> str:
        return f"{KEY_PREFIX}{organization_id}"

    @staticmethod
    def verify_key_for_organization(key: str, organization_id: str) -> bool:
        return key == f"{KEY_PREFIX}{organization_id}"

    @classmethod
    async def create_for_organization(
        cls,
        viewer: ViewerContext,
        organization: Organization,
        description: str = "",
    ) -> ApiKey:
        """Issue a key for *organization*. ``last_used_at`` starts empty."""
        return await cls.create(
            viewer,
            {
                "key": cls.generate_key_for_organization(organization.id),
                "description": description,
                "organization_id": organization.id,
                "last_used_at": "",
            },
        )

    async def find_organization(self) -> Organization | None:
        organization_id = self.props["organization_id"]
        if not organization_id:
            return None
        return await Organization.find(self.viewer, organization_id)

    async def touch(self) -> None:
        """Record a use of this key."""
        self.update_props({"last_used_at": utc_now().isoformat()})
        await self.save()
