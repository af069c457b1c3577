# src/prefill/core/mappings.py
"""MappingStore - the canonical prefill mapping document.

Shape on the wire:

    {
      "<form id>": {
        "<field id>": { "targetFieldId": ..., "sourceType": ..., ... }
      }
    }

The store is owned by the lifecycle manager; everyone else reads snapshots.
Keys are unique per (form id, field id): put() replaces, remove() of an
absent key changes nothing.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from prefill.contracts import MappingDocumentError, PrefillMapping, mapping_from_document
from prefill.contracts.types import FieldID, FormID
from prefill.core.canonical import canonical_json, stable_hash


class MappingStore:
    """In-memory mapping document keyed by form id, then field id.

    Form entries with no remaining fields are pruned so that removing the
    last mapping of a form restores the document it had before.
    """

    def __init__(self, mappings: Mapping[str, Mapping[str, PrefillMapping]] | None = None) -> None:
        self._mappings: dict[FormID, dict[FieldID, PrefillMapping]] = {}
        for form_id, fields in (mappings or {}).items():
            for field_id, mapping in fields.items():
                self.put(form_id, field_id, mapping)

    def get(self, form_id: str, field_id: str) -> PrefillMapping | None:
        form_mappings = self._mappings.get(FormID(form_id))
        if form_mappings is None:
            return None
        return form_mappings.get(FieldID(field_id))

    def contains(self, form_id: str, field_id: str) -> bool:
        return self.get(form_id, field_id) is not None

    def put(self, form_id: str, field_id: str, mapping: PrefillMapping) -> PrefillMapping | None:
        """Insert or replace the mapping at (form_id, field_id).

        Returns:
            The mapping that was replaced, or None
        """
        form_mappings = self._mappings.setdefault(FormID(form_id), {})
        previous = form_mappings.get(FieldID(field_id))
        form_mappings[FieldID(field_id)] = mapping
        return previous

    def remove(self, form_id: str, field_id: str) -> PrefillMapping | None:
        """Delete the mapping at (form_id, field_id).

        Returns:
            The removed mapping, or None when nothing was stored there
        """
        form_mappings = self._mappings.get(FormID(form_id))
        if form_mappings is None:
            return None
        removed = form_mappings.pop(FieldID(field_id), None)
        if not form_mappings:
            del self._mappings[FormID(form_id)]
        return removed

    def for_form(self, form_id: str) -> dict[FieldID, PrefillMapping]:
        """Copy of the mappings configured on one form (field id -> mapping)."""
        return dict(self._mappings.get(FormID(form_id), {}))

    def form_ids(self) -> list[FormID]:
        return list(self._mappings)

    def items(self) -> Iterator[tuple[FormID, FieldID, PrefillMapping]]:
        """Iterate (form id, field id, mapping) in insertion order."""
        for form_id, fields in self._mappings.items():
            for field_id, mapping in fields.items():
                yield form_id, field_id, mapping

    def copy(self) -> MappingStore:
        # Mappings are frozen, so sharing them between copies is safe
        return MappingStore(self._mappings)

    def __len__(self) -> int:
        return sum(len(fields) for fields in self._mappings.values())

    def __bool__(self) -> bool:
        return bool(self._mappings)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MappingStore):
            return NotImplemented
        return self.to_document() == other.to_document()

    __hash__ = None  # type: ignore[assignment]

    # === Serialization ===

    def to_document(self) -> dict[str, dict[str, dict[str, Any]]]:
        """JSON-safe nested dict (camelCase mapping keys)."""
        return {
            form_id: {field_id: mapping.to_document() for field_id, mapping in fields.items()}
            for form_id, fields in self._mappings.items()
        }

    def to_json(self) -> str:
        """Canonical JSON text of the document (RFC 8785)."""
        return canonical_json(self.to_document())

    def fingerprint(self) -> str:
        """Stable SHA-256 of the canonical document.

        Equal documents always fingerprint equal, regardless of insertion
        order or how many load/save cycles they went through.
        """
        return stable_hash(self.to_document())

    @classmethod
    def from_document(cls, document: Any) -> MappingStore:
        """Parse a persisted document.

        Raises:
            MappingDocumentError: If the document does not have the
                form -> field -> mapping shape, or an entry is invalid
        """
        if not isinstance(document, dict):
            raise MappingDocumentError(f"Mapping document must be an object, got {type(document).__name__}")

        store = cls()
        for form_id, fields in document.items():
            if not isinstance(fields, dict):
                raise MappingDocumentError(f"Mappings for form '{form_id}' must be an object, got {type(fields).__name__}")
            for field_id, entry in fields.items():
                mapping = mapping_from_document(entry)
                if mapping.target_field_id != field_id:
                    raise MappingDocumentError(
                        f"Mapping stored under '{form_id}.{field_id}' targets field '{mapping.target_field_id}'"
                    )
                store.put(form_id, field_id, mapping)
        return store
