"""TypesService: describe registered node types and their relationships."""

from __future__ import annotations

from relgraph.services.base import BaseService
from relgraph.services.result import ServiceError, ServiceResult


class TypesService(BaseService):
    """Lists the node classes of the registry."""

    def list_types(self) -> ServiceResult:
        op = "types"
        try:
            self.registry.resolve()
        except (LookupError, ValueError) as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(code="REGISTRY_ERROR", message=str(exc)),
            )

        types = [
            {
                "name": node_cls.__name__,
                "fields": {name: str(kind) for name, kind in node_cls.node_spec.fields},
                "relationships": [
                    {
                        "role": binding.role,
                        "cardinality": str(binding.cardinality),
                        "target": binding.target_cls.__name__,
                        "methods": [
                            name
                            for name, (role, _op) in node_cls.relation_table().methods.items()
                            if role == binding.role
                        ],
                    }
                    for binding in node_cls.relation_table().bindings.values()
                ],
            }
            for node_cls in self.registry.classes
        ]
        return ServiceResult(ok=True, op=op, data={"types": types, "count": len(types)})
