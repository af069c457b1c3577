# src/prefill/core/graph/models.py
"""Wire models for the blueprint graph payload.

Leaf module - no intra-package imports beyond contracts (prevents import
cycles). The payload comes from an external service, so it is validated
here and converted into frozen contract records before anything else sees
it. Unknown keys are ignored; the payload carries far more than prefill
reads (positions, edges, UI schema).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from prefill.contracts.graph import FieldProperty, FieldSchema, FormNode
from prefill.contracts.types import ComponentID, FormID


def _type_tag(value: Any) -> str | None:
    """Reduce a JSON-schema "type" to a single tag.

    JSON schema allows a list of types (["string", "null"]); the first
    non-null entry is the one a field is rendered as.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        for item in value:
            if isinstance(item, str) and item != "null":
                return item
    return None


class _PayloadModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class NodeDataPayload(_PayloadModel):
    name: str | None = None
    component_id: str | None = None
    prerequisites: list[str] | None = None


class NodePayload(_PayloadModel):
    id: str
    type: str = "form"
    data: NodeDataPayload = Field(default_factory=NodeDataPayload)

    def to_form_node(self) -> FormNode:
        prerequisites = self.data.prerequisites or []
        return FormNode(
            id=FormID(self.id),
            kind=self.type,
            name=self.data.name or "",
            component_id=ComponentID(self.data.component_id) if self.data.component_id else None,
            prerequisite_ids=tuple(FormID(p) for p in prerequisites),
        )


class PropertyPayload(_PayloadModel):
    title: str | None = None
    avantos_type: str | None = None
    type: Any = None
    format: str | None = None

    def to_field_property(self) -> FieldProperty:
        return FieldProperty(
            title=self.title,
            declared_type=self.avantos_type,
            generic_type=_type_tag(self.type),
            format=self.format,
        )


class FieldSchemaPayload(_PayloadModel):
    properties: dict[str, PropertyPayload] | None = None
    required: list[str] | None = None


class FormPayload(_PayloadModel):
    id: str
    name: str | None = None
    field_schema: FieldSchemaPayload | None = None

    def to_field_schema(self) -> FieldSchema:
        schema = self.field_schema
        if schema is None or schema.properties is None:
            properties = None
        else:
            # dict preserves the payload's declaration order
            properties = {key: prop.to_field_property() for key, prop in schema.properties.items()}
        required = frozenset(schema.required or ()) if schema is not None else frozenset()
        return FieldSchema(
            component_id=ComponentID(self.id),
            properties=properties,
            required=required,
            name=self.name,
        )


class GraphPayload(_PayloadModel):
    """Top-level payload: `nodes` is required, `forms` may be absent."""

    nodes: list[NodePayload]
    forms: list[FormPayload] = Field(default_factory=list)

    @field_validator("forms", mode="before")
    @classmethod
    def _null_forms(cls, v: Any) -> Any:
        return [] if v is None else v
