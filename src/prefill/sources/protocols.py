# src/prefill/sources/protocols.py
"""Provider protocol defining the contract for each data source type.

Used for type checking; registration goes through DataSourceRegistry.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from prefill.contracts import DataSource, PrefillMapping, ResolvedValue
    from prefill.sources.context import SourceContext


@runtime_checkable
class DataSourceProvider(Protocol):
    """Protocol for data source providers.

    A provider owns one source-type tag. It enumerates candidate sources
    for a form, turns a selected source into a mapping, and resolves a
    saved mapping back to a value.

    Example:
        class ApiProvider(BaseDataSourceProvider):
            source_type = "api"
            name = "API Data"

            def enumerate(self, ctx: SourceContext) -> list[DataSource]:
                return [...]
    """

    source_type: str
    name: str

    def enumerate(self, ctx: "SourceContext") -> Sequence["DataSource"]:
        """Candidate sources for the context's form."""
        ...

    def resolve(self, mapping: "PrefillMapping", ctx: "SourceContext") -> "ResolvedValue | None":
        """Value a saved mapping resolves to; None when it cannot."""
        ...

    def build_mapping(self, target_field_id: str, source: "DataSource", created_at: datetime) -> "PrefillMapping":
        """Turn a selected source into a persisted mapping."""
        ...
