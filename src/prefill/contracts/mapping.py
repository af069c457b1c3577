# src/prefill/contracts/mapping.py
"""Prefill mapping records: the persisted binding of a field to a source.

A mapping is a tagged union on source_type. The source-specific fields are
fully determined by the tag:

    form_field -> FormFieldMapping
    global     -> GlobalMapping
    url_param  -> UrlParamMapping
    (other)    -> PrefillMapping with unknown keys preserved verbatim

Wire format uses camelCase keys (targetFieldId, sourceType, createdAt, ...)
so documents stay readable by other tools that consume the same store.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, ValidationError, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from prefill.contracts.enums import SourceType
from prefill.contracts.errors import MappingDocumentError
from prefill.contracts.types import FieldID, FormID


class PrefillMapping(BaseModel):
    """Base mapping record.

    Also used as-is for source types with no dedicated model, in which case
    extra keys are kept so a load/save cycle does not drop them.

    transform, condition, and fallback are reserved for future use and are
    always None in documents written by this version.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    # Shown when the mapping carries nothing more specific to describe.
    unknown_label: ClassVar[str] = "Unknown source"

    target_field_id: FieldID
    source_type: str
    created_at: datetime
    transform: Any = None
    condition: Any = None
    fallback: Any = None

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        """Naive timestamps are assumed UTC; precision is cut to milliseconds."""
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.replace(microsecond=value.microsecond // 1000 * 1000)

    @field_serializer("created_at")
    def _iso_millis(self, value: datetime) -> str:
        """UTC with millisecond precision and a Z suffix ("2024-05-01T09:30:00.000Z")."""
        return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def describe(self) -> str:
        """Short provenance string shown next to the configured field."""
        return f"← {self.unknown_label}"

    def to_document(self) -> dict[str, Any]:
        """Serialize to the JSON-safe wire shape (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)


class FormFieldMapping(PrefillMapping):
    """Value comes from a field of an upstream form."""

    source_type: Literal["form_field"] = SourceType.FORM_FIELD.value
    source_form_id: FormID
    source_field_id: FieldID
    source_form_name: str | None = None
    source_field_name: str | None = None
    source_field_type: str | None = None

    def describe(self) -> str:
        return f"← {self.source_form_name or 'Unknown Form'}"


class GlobalMapping(PrefillMapping):
    """Value comes from the global profile (user, organization)."""

    source_type: Literal["global"] = SourceType.GLOBAL.value
    global_id: str
    source_name: str | None = None
    source_field_type: str | None = None

    def describe(self) -> str:
        return f"← {self.source_name or 'Global Data'}"


class UrlParamMapping(PrefillMapping):
    """Value comes from a query parameter of the current request."""

    source_type: Literal["url_param"] = SourceType.URL_PARAM.value
    param_key: str
    source_field_type: str | None = "text"

    def describe(self) -> str:
        return f"← URL: {self.param_key}"


MAPPING_MODELS: dict[str, type[PrefillMapping]] = {
    SourceType.FORM_FIELD: FormFieldMapping,
    SourceType.GLOBAL: GlobalMapping,
    SourceType.URL_PARAM: UrlParamMapping,
}


def mapping_from_document(data: Any) -> PrefillMapping:
    """Parse one mapping entry from the wire shape.

    Dispatches on the sourceType tag; unrecognized tags fall back to the
    base model so the entry survives a load/save cycle.

    Raises:
        MappingDocumentError: If the entry is not a mapping or fails validation
    """
    if not isinstance(data, dict):
        raise MappingDocumentError(f"Mapping entry must be an object, got {type(data).__name__}")

    tag = data.get("sourceType", data.get("source_type"))
    model = MAPPING_MODELS.get(tag, PrefillMapping) if isinstance(tag, str) else PrefillMapping
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise MappingDocumentError(f"Invalid {tag or 'untagged'} mapping: {e}") from e
