# src/prefill/contracts/sources.py
"""Data source records produced by providers during enumeration.

DataSource is ephemeral: it is regenerated from the current context on
every enumeration and never persisted. Saving a selection turns it into a
PrefillMapping (see contracts/mapping.py).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from prefill.contracts.types import FieldID, FormID, SourceID

if TYPE_CHECKING:
    from prefill.contracts.mapping import PrefillMapping


def _no_value() -> Any:
    return None


def _always_available() -> bool:
    return True


@dataclass(frozen=True, slots=True)
class SourceMetadata:
    """Descriptive metadata used for validation and display."""

    field_type: str | None = None
    form_name: str | None = None
    field_name: str | None = None


@dataclass(frozen=True, slots=True)
class DataSource:
    """A typed origin of a value that can prefill a field.

    get_value and is_available are closures bound at enumeration time
    (e.g., a URL parameter's literal value). They are excluded from
    equality so two enumerations of the same context compare equal.
    """

    type: str
    id: SourceID
    display_name: str
    category: str
    metadata: SourceMetadata = field(default_factory=SourceMetadata)
    form_id: FormID | None = None
    field_id: FieldID | None = None
    get_value: Callable[[], Any] = field(default=_no_value, compare=False, repr=False)
    is_available: Callable[[], bool] = field(default=_always_available, compare=False, repr=False)

    @property
    def field_type(self) -> str | None:
        return self.metadata.field_type


@dataclass(frozen=True, slots=True)
class SourceGroup:
    """All sources one provider contributed for a context.

    error carries the failure message when the provider raised; sources is
    then empty.
    """

    source_type: str
    name: str
    sources: tuple[DataSource, ...] = ()
    error: str | None = None

    def by_category(self) -> dict[str, tuple[DataSource, ...]]:
        """Group sources by category, preserving first-seen order."""
        grouped: dict[str, list[DataSource]] = {}
        for source in self.sources:
            grouped.setdefault(source.category, []).append(source)
        return {category: tuple(items) for category, items in grouped.items()}


@dataclass(frozen=True, slots=True)
class ResolvedValue:
    """Value a saved mapping resolves to in the current context."""

    value: Any
    source: PrefillMapping
