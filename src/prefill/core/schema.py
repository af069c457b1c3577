# src/prefill/core/schema.py
"""Field schema reader - projects a form's fields from its component schema."""

from __future__ import annotations

from prefill.contracts import Field, FormNode
from prefill.core.graph import FormGraph


class FieldSchemaReader:
    """Reads the ordered field list of a form.

    Never fails on lookup misses: a form whose component has no schema, or
    whose schema has no property map, simply has no fields.
    """

    def __init__(self, graph: FormGraph) -> None:
        self._graph = graph

    def fields_of(self, form: FormNode | None) -> tuple[Field, ...]:
        """Project every schema property of the form, in declaration order."""
        if form is None:
            return ()
        schema = self._graph.get_schema(form.component_id)
        if schema is None or schema.properties is None:
            return ()
        return tuple(
            Field.from_property(key, prop, required=key in schema.required) for key, prop in schema.properties.items()
        )

    def field(self, form: FormNode | None, field_id: str) -> Field | None:
        """Find a single field of the form by id."""
        for candidate in self.fields_of(form):
            if candidate.id == field_id:
                return candidate
        return None
