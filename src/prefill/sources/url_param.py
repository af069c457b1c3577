# src/prefill/sources/url_param.py
"""Query parameters of the current request."""

from __future__ import annotations

from datetime import datetime

from prefill.contracts import (
    DataSource,
    PrefillMapping,
    ResolvedValue,
    SourceMetadata,
    SourceType,
    UrlParamMapping,
)
from prefill.contracts.types import FieldID, SourceID
from prefill.core.logging import get_logger
from prefill.sources.base import BaseDataSourceProvider
from prefill.sources.context import SourceContext

logger = get_logger(__name__)

# Query parameters carry no type information
URL_PARAM_FIELD_TYPE = "text"


class UrlParamProvider(BaseDataSourceProvider):
    """One source per distinct query parameter key.

    Each source's get_value is bound to the parameter's value at
    enumeration time; resolution re-reads the parameter from whatever
    request the resolution context carries.
    """

    source_type = SourceType.URL_PARAM.value
    name = "URL Parameters"

    def enumerate(self, ctx: SourceContext) -> list[DataSource]:
        sources: list[DataSource] = []
        for key in ctx.param_keys():
            value = ctx.param(key)
            sources.append(
                DataSource(
                    type=self.source_type,
                    id=SourceID(key),
                    display_name=f"URL Param: {key}",
                    category="URL Parameters",
                    metadata=SourceMetadata(field_type=URL_PARAM_FIELD_TYPE),
                    get_value=lambda value=value: value,
                )
            )
        return sources

    def build_mapping(self, target_field_id: str, source: DataSource, created_at: datetime) -> PrefillMapping:
        return UrlParamMapping(
            target_field_id=FieldID(target_field_id),
            created_at=created_at,
            param_key=source.id,
            source_field_type=URL_PARAM_FIELD_TYPE,
        )

    def resolve(self, mapping: PrefillMapping, ctx: SourceContext) -> ResolvedValue | None:
        if not isinstance(mapping, UrlParamMapping):
            logger.warning("unexpected_mapping_model", source_type=mapping.source_type, model=type(mapping).__name__)
            return None
        # Blank (?key=) resolves like an absent key
        return ResolvedValue(value=ctx.param(mapping.param_key) or None, source=mapping)
