# tests/core/test_mappings.py
"""Tests for mapping records and the MappingStore document."""

from datetime import UTC, datetime

import pytest

CREATED = datetime(2024, 5, 1, 9, 30, tzinfo=UTC)


def _form_field_mapping(target: str = "patient_email"):
    from prefill.contracts import FormFieldMapping

    return FormFieldMapping(
        target_field_id=target,
        created_at=CREATED,
        source_form_id="f1",
        source_field_id="email",
        source_form_name="Patient Intake",
        source_field_name="Email",
        source_field_type="email",
    )


def _global_mapping(target: str = "clinic"):
    from prefill.contracts import GlobalMapping

    return GlobalMapping(target_field_id=target, created_at=CREATED, global_id="org_name", source_name="Organization Name")


class TestMappingRecords:
    """Wire shape and provenance strings."""

    def test_document_uses_camel_case(self) -> None:
        document = _form_field_mapping().to_document()

        assert document["targetFieldId"] == "patient_email"
        assert document["sourceType"] == "form_field"
        assert document["sourceFormId"] == "f1"
        assert document["sourceFieldId"] == "email"
        assert document["createdAt"].startswith("2024-05-01T09:30:00")

    def test_describe_form_field(self) -> None:
        assert _form_field_mapping().describe() == "← Patient Intake"

    def test_describe_form_field_without_name(self) -> None:
        from prefill.contracts import FormFieldMapping

        mapping = FormFieldMapping(target_field_id="x", created_at=CREATED, source_form_id="f1", source_field_id="a")

        assert mapping.describe() == "← Unknown Form"

    def test_describe_global(self) -> None:
        from prefill.contracts import GlobalMapping

        assert _global_mapping().describe() == "← Organization Name"
        assert GlobalMapping(target_field_id="x", created_at=CREATED, global_id="g").describe() == "← Global Data"

    def test_describe_url_param(self) -> None:
        from prefill.contracts import UrlParamMapping

        mapping = UrlParamMapping(target_field_id="x", created_at=CREATED, param_key="visit")

        assert mapping.describe() == "← URL: visit"
        assert mapping.source_field_type == "text"

    def test_unknown_source_type_round_trips(self) -> None:
        from prefill.contracts import PrefillMapping, mapping_from_document

        entry = {
            "targetFieldId": "score",
            "sourceType": "calculated",
            "createdAt": "2024-05-01T09:30:00+00:00",
            "expression": "a + b",
        }
        mapping = mapping_from_document(entry)

        assert type(mapping) is PrefillMapping
        assert mapping.describe() == "← Unknown source"
        assert mapping.to_document()["expression"] == "a + b"

    def test_naive_timestamp_is_utc(self) -> None:
        from prefill.contracts import mapping_from_document

        mapping = mapping_from_document(
            {"targetFieldId": "x", "sourceType": "global", "createdAt": "2024-05-01T09:30:00", "globalId": "user_name"}
        )

        assert mapping.created_at.tzinfo is not None

    def test_mappings_are_frozen(self) -> None:
        from pydantic import ValidationError

        mapping = _form_field_mapping()

        with pytest.raises(ValidationError):
            mapping.source_form_id = "f9"  # type: ignore[misc]

    @pytest.mark.parametrize(
        "entry",
        [
            "not an object",
            {"sourceType": "form_field", "createdAt": "2024-05-01T09:30:00Z"},
            {"targetFieldId": "x", "sourceType": "form_field", "createdAt": "2024-05-01T09:30:00Z"},
            {"targetFieldId": "x", "sourceType": "global", "createdAt": "yesterday", "globalId": "g"},
        ],
    )
    def test_invalid_entries_are_rejected(self, entry) -> None:
        from prefill.contracts import MappingDocumentError, mapping_from_document

        with pytest.raises(MappingDocumentError):
            mapping_from_document(entry)


class TestMappingStore:
    """Keyed document of mappings."""

    def test_put_and_get(self) -> None:
        from prefill.core.mappings import MappingStore

        store = MappingStore()
        store.put("f2", "patient_email", _form_field_mapping())

        assert store.contains("f2", "patient_email")
        assert store.get("f2", "patient_email") == _form_field_mapping()
        assert store.get("f2", "other") is None
        assert store.get("f9", "patient_email") is None
        assert len(store) == 1

    def test_put_replaces_and_returns_previous(self) -> None:
        from prefill.core.mappings import MappingStore

        store = MappingStore()
        first = _form_field_mapping()
        store.put("f2", "patient_email", first)
        previous = store.put("f2", "patient_email", _global_mapping("patient_email"))

        assert previous == first
        assert len(store) == 1
        assert store.get("f2", "patient_email").source_type == "global"

    def test_remove_prunes_empty_form(self) -> None:
        from prefill.core.mappings import MappingStore

        store = MappingStore()
        store.put("f2", "patient_email", _form_field_mapping())

        removed = store.remove("f2", "patient_email")

        assert removed is not None
        assert store.form_ids() == []
        assert store.to_document() == {}
        assert not store

    def test_remove_absent_is_noop(self) -> None:
        from prefill.core.mappings import MappingStore

        store = MappingStore()
        store.put("f2", "patient_email", _form_field_mapping())
        before = store.to_json()

        assert store.remove("f2", "missing") is None
        assert store.remove("f9", "patient_email") is None
        assert store.to_json() == before

    def test_copy_is_independent(self) -> None:
        from prefill.core.mappings import MappingStore

        store = MappingStore()
        store.put("f2", "patient_email", _form_field_mapping())
        snapshot = store.copy()

        store.remove("f2", "patient_email")

        assert snapshot.contains("f2", "patient_email")
        assert not store.contains("f2", "patient_email")

    def test_for_form_and_items(self) -> None:
        from prefill.core.mappings import MappingStore

        store = MappingStore()
        store.put("f2", "patient_email", _form_field_mapping())
        store.put("f3", "clinic", _global_mapping())

        assert list(store.for_form("f2")) == ["patient_email"]
        assert store.for_form("f9") == {}
        assert [(form, field) for form, field, _ in store.items()] == [("f2", "patient_email"), ("f3", "clinic")]

    def test_document_round_trip(self) -> None:
        from prefill.core.mappings import MappingStore

        store = MappingStore()
        store.put("f2", "patient_email", _form_field_mapping())
        store.put("f3", "clinic", _global_mapping())

        reloaded = MappingStore.from_document(store.to_document())

        assert reloaded == store
        assert reloaded.to_json() == store.to_json()
        assert reloaded.fingerprint() == store.fingerprint()

    def test_fingerprint_ignores_insertion_order(self) -> None:
        from prefill.core.mappings import MappingStore

        a = MappingStore()
        a.put("f2", "patient_email", _form_field_mapping())
        a.put("f3", "clinic", _global_mapping())
        b = MappingStore()
        b.put("f3", "clinic", _global_mapping())
        b.put("f2", "patient_email", _form_field_mapping())

        assert a.fingerprint() == b.fingerprint()

    def test_from_document_rejects_non_object(self) -> None:
        from prefill.contracts import MappingDocumentError
        from prefill.core.mappings import MappingStore

        with pytest.raises(MappingDocumentError):
            MappingStore.from_document([])

    def test_from_document_rejects_non_object_form_entry(self) -> None:
        from prefill.contracts import MappingDocumentError
        from prefill.core.mappings import MappingStore

        with pytest.raises(MappingDocumentError):
            MappingStore.from_document({"f2": "patient_email"})

    def test_from_document_rejects_mismatched_target(self) -> None:
        from prefill.contracts import MappingDocumentError
        from prefill.core.mappings import MappingStore

        document = {"f2": {"visit_id": _form_field_mapping().to_document()}}

        with pytest.raises(MappingDocumentError, match="targets field"):
            MappingStore.from_document(document)
