# src/prefill/sources/global_data.py
"""Profile-level values shared by every form (user, organization)."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from types import MappingProxyType

from prefill.contracts import (
    DataSource,
    GlobalMapping,
    PrefillMapping,
    ResolvedValue,
    SourceMetadata,
    SourceType,
)
from prefill.contracts.types import FieldID, SourceID
from prefill.core.config import DEFAULT_GLOBAL_PROFILE
from prefill.core.logging import get_logger
from prefill.sources.base import BaseDataSourceProvider
from prefill.sources.context import SourceContext

logger = get_logger(__name__)

# (id, display name, category, field type)
GLOBAL_CATALOG: tuple[tuple[str, str, str, str], ...] = (
    ("user_email", "User Email", "User Profile", "email"),
    ("user_name", "User Name", "User Profile", "text"),
    ("org_name", "Organization Name", "Organization", "text"),
)


class GlobalDataProvider(BaseDataSourceProvider):
    """Fixed catalog of profile sources.

    The catalog does not depend on the form being configured. Resolution
    reads literal values from the profile table.
    """

    source_type = SourceType.GLOBAL.value
    name = "Global Data"

    def __init__(self, profile: Mapping[str, str] | None = None) -> None:
        self._profile: Mapping[str, str] = MappingProxyType(dict(DEFAULT_GLOBAL_PROFILE if profile is None else profile))

    def enumerate(self, ctx: SourceContext) -> list[DataSource]:
        return [
            DataSource(
                type=self.source_type,
                id=SourceID(global_id),
                display_name=display_name,
                category=category,
                metadata=SourceMetadata(field_type=field_type),
            )
            for global_id, display_name, category, field_type in GLOBAL_CATALOG
        ]

    def build_mapping(self, target_field_id: str, source: DataSource, created_at: datetime) -> PrefillMapping:
        return GlobalMapping(
            target_field_id=FieldID(target_field_id),
            created_at=created_at,
            global_id=source.id,
            source_name=source.display_name,
            source_field_type=source.field_type,
        )

    def resolve(self, mapping: PrefillMapping, ctx: SourceContext) -> ResolvedValue | None:
        if not isinstance(mapping, GlobalMapping):
            logger.warning("unexpected_mapping_model", source_type=mapping.source_type, model=type(mapping).__name__)
            return None
        return ResolvedValue(value=self._profile.get(mapping.global_id), source=mapping)
