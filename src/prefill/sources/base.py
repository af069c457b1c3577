# src/prefill/sources/base.py
"""Base class for data source providers.

Subclasses set source_type and name and implement enumerate(). The
defaults build an untyped mapping that records the source id and resolve
nothing, which is enough for a provider that only offers sources.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime

from prefill.contracts import DataSource, PrefillMapping, ResolvedValue
from prefill.contracts.types import FieldID
from prefill.sources.context import SourceContext


class BaseDataSourceProvider(ABC):
    """Common behavior for providers."""

    source_type: str
    name: str

    @abstractmethod
    def enumerate(self, ctx: SourceContext) -> Sequence[DataSource]:
        """Candidate sources for the context's form."""

    def resolve(self, mapping: PrefillMapping, ctx: SourceContext) -> ResolvedValue | None:
        return None

    def build_mapping(self, target_field_id: str, source: DataSource, created_at: datetime) -> PrefillMapping:
        return PrefillMapping.model_validate(
            {
                "targetFieldId": FieldID(target_field_id),
                "sourceType": self.source_type,
                "createdAt": created_at,
                "sourceId": source.id,
                "sourceFieldType": source.field_type,
            }
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(source_type={self.source_type!r})"
