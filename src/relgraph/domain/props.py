"""Prop-shape validation built from a :class:`NodeSpec`.

Each node class gets a pydantic model generated from its declared fields.
Types are strict (``"1"`` is not a number, ``1`` is not a boolean) and
unknown keys are rejected rather than silently stored.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, StrictBool, StrictFloat, StrictInt, StrictStr, create_model
from pydantic import ValidationError as PydanticValidationError

from relgraph.domain.errors import ValidationError
from relgraph.domain.spec import NodeSpec
from relgraph.domain.types import FieldType

_ANNOTATIONS: dict[FieldType, Any] = {
    FieldType.STRING: StrictStr,
    FieldType.NUMBER: StrictInt | StrictFloat,
    FieldType.BOOLEAN: StrictBool,
}

_CONFIG = ConfigDict(extra="forbid", frozen=True, protected_namespaces=())


def build_props_model(class_name: str, spec: NodeSpec, *, partial: bool = False) -> type[BaseModel]:
    """Generate the pydantic model validating props for *class_name*.

    With ``partial=True`` every field is optional (used for ``where`` filters
    and incremental updates).
    """
    definitions: dict[str, Any] = {}
    for name, field_type in spec.fields:
        annotation = _ANNOTATIONS[field_type]
        if partial:
            definitions[name] = (annotation | None, None)
        else:
            definitions[name] = (annotation, ...)
    suffix = "Where" if partial else "Props"
    return create_model(f"{class_name}{suffix}", __config__=_CONFIG, **definitions)


def validate_props(
    model: type[BaseModel],
    props: Mapping[str, Any],
    *,
    class_name: str,
) -> dict[str, Any]:
    """Validate *props* and return the normalized dict of supplied keys.

    Raises:
        ValidationError: Unknown key, missing required key, or wrong type.
    """
    try:
        validated = model.model_validate(dict(props))
    except PydanticValidationError as exc:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        fields = ", ".join(e["field"] for e in errors)
        msg = f"Invalid props for {class_name}: {fields}"
        raise ValidationError(msg, detail={"class_name": class_name, "errors": errors}) from exc
    return validated.model_dump(exclude_unset=True)
