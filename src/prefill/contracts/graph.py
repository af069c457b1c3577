# src/prefill/contracts/graph.py
"""Graph and schema records shared by the resolver, reader, and providers.

All records are frozen after construction. The intake graph is read-only
input: nothing in prefill mutates a FormNode or FieldSchema once loaded.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from prefill.contracts.types import ComponentID, FieldID, FormID

# Node kind that marks a fillable form. Other kinds (branches, triggers)
# may appear in the graph but are not offered for configuration.
FORM_KIND = "form"

# Field type used when a property declares neither a domain nor a generic type.
DEFAULT_FIELD_TYPE = "text"


@dataclass(frozen=True, slots=True)
class FormNode:
    """A vertex in the intake workflow graph.

    prerequisite_ids keeps the declared order and may contain ids with no
    matching node (dangling references). Consumers decide how to treat them.
    """

    id: FormID
    kind: str
    name: str
    component_id: ComponentID | None
    prerequisite_ids: tuple[FormID, ...] = ()

    @property
    def display_name(self) -> str:
        """Name shown to the operator, falling back to the id."""
        return self.name or self.id

    @property
    def is_form(self) -> bool:
        return self.kind == FORM_KIND


@dataclass(frozen=True, slots=True)
class FieldProperty:
    """One property entry of a form's field schema."""

    title: str | None = None
    declared_type: str | None = None
    generic_type: str | None = None
    format: str | None = None


@dataclass(frozen=True, slots=True)
class FieldSchema:
    """Field definitions for one component.

    properties is None when the payload carried no property map at all,
    which is distinct from an empty map only for diagnostics.
    """

    component_id: ComponentID
    properties: Mapping[str, FieldProperty] | None
    required: frozenset[str] = frozenset()
    name: str | None = None


@dataclass(frozen=True, slots=True)
class Field:
    """Projection of a single schema property, derived on demand."""

    id: FieldID
    name: str
    type: str
    format: str | None = None
    required: bool = False

    @classmethod
    def from_property(cls, key: str, prop: FieldProperty, *, required: bool) -> Field:
        """Project a schema property into a Field.

        name defaults to the key when no title is present; type prefers the
        domain type tag, then the generic JSON-schema type, then "text".
        """
        return cls(
            id=FieldID(key),
            name=prop.title or key,
            type=prop.declared_type or prop.generic_type or DEFAULT_FIELD_TYPE,
            format=prop.format,
            required=required,
        )


@dataclass(frozen=True, slots=True)
class DependencySets:
    """Forms a given form may read from.

    Invariants:
        - direct and transitive are disjoint
        - each form appears at most once across both
        - the owning form never appears in either
        - every entry is an existing FormNode (dangling ids are dropped)
    """

    direct: tuple[FormNode, ...] = ()
    transitive: tuple[FormNode, ...] = ()

    @property
    def direct_ids(self) -> frozenset[FormID]:
        return frozenset(node.id for node in self.direct)

    @property
    def transitive_ids(self) -> frozenset[FormID]:
        return frozenset(node.id for node in self.transitive)

    @property
    def all(self) -> tuple[FormNode, ...]:
        """Direct dependencies first, then transitive ones."""
        return self.direct + self.transitive

    def __bool__(self) -> bool:
        return bool(self.direct or self.transitive)


EMPTY_DEPENDENCIES = DependencySets()


@dataclass(frozen=True, slots=True)
class FormSummary:
    """Row shown when listing the forms of a graph."""

    form: FormNode
    direct_count: int
    transitive_count: int
    field_ids: tuple[FieldID, ...] = field(default_factory=tuple)
