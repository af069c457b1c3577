# tests/graphs.py
"""Graph payloads shared by the test suite.

INTAKE_PAYLOAD is a small clinic workflow:

    f3 (Insurance Review) -> f2 (Consent Form) -> f1 (Patient Intake)

plus a non-form branch node. f3 therefore reads f2 directly and f1
transitively.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from typing import Any

INTAKE_PAYLOAD: dict[str, Any] = {
    "id": "bp_01",
    "name": "Clinic Intake",
    "nodes": [
        {
            "id": "f1",
            "type": "form",
            "position": {"x": 0, "y": 0},
            "data": {"name": "Patient Intake", "component_id": "c_patient", "prerequisites": []},
        },
        {
            "id": "f2",
            "type": "form",
            "data": {"name": "Consent Form", "component_id": "c_consent", "prerequisites": ["f1"]},
        },
        {
            "id": "f3",
            "type": "form",
            "data": {"name": "Insurance Review", "component_id": "c_insurance", "prerequisites": ["f2"]},
        },
        {
            "id": "b1",
            "type": "branch",
            "data": {"name": "Router", "prerequisites": ["f1"]},
        },
    ],
    "edges": [{"source": "f1", "target": "f2"}, {"source": "f2", "target": "f3"}],
    "forms": [
        {
            "id": "c_patient",
            "name": "Patient Intake",
            "field_schema": {
                "type": "object",
                "properties": {
                    "email": {"title": "Email", "avantos_type": "email", "type": "string", "format": "email"},
                    "name": {"title": "Full Name", "avantos_type": "short-text", "type": "string"},
                    "dob": {"title": "Date of Birth", "type": "string", "format": "date"},
                },
                "required": ["email"],
            },
        },
        {
            "id": "c_consent",
            "name": "Consent Form",
            "field_schema": {
                "type": "object",
                "properties": {
                    "patient_email": {"title": "Patient Email", "avantos_type": "email", "type": "string"},
                    "visit_id": {"title": "Visit ID", "type": "string"},
                    "age": {"title": "Age", "avantos_type": "number", "type": "number"},
                },
                "required": ["patient_email"],
            },
        },
        {
            "id": "c_insurance",
            "name": "Insurance Review",
            "field_schema": {
                "type": "object",
                "properties": {
                    "member_id": {"title": "Member ID", "avantos_type": "short-text"},
                    "notes": {"avantos_type": "multi-line-text"},
                    "flag": {},
                },
            },
        },
    ],
}


def intake_payload() -> dict[str, Any]:
    """Fresh deep copy of INTAKE_PAYLOAD (tests may mutate it)."""
    return copy.deepcopy(INTAKE_PAYLOAD)


def make_payload(
    prerequisites: Mapping[str, Sequence[str]],
    fields: Mapping[str, Sequence[str]] | None = None,
) -> dict[str, Any]:
    """Build a payload from form id -> prerequisite ids.

    Each form gets component "c_<id>"; `fields` optionally lists the field
    ids of a form's schema (all typed "text").
    """
    fields = fields or {}
    return {
        "nodes": [
            {
                "id": form_id,
                "type": "form",
                "data": {"name": form_id.upper(), "component_id": f"c_{form_id}", "prerequisites": list(prereqs)},
            }
            for form_id, prereqs in prerequisites.items()
        ],
        "forms": [
            {
                "id": f"c_{form_id}",
                "name": form_id.upper(),
                "field_schema": {"properties": {field_id: {"avantos_type": "text"} for field_id in field_ids}},
            }
            for form_id, field_ids in fields.items()
        ],
    }
