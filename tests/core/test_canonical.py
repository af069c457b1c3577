# tests/core/test_canonical.py
"""Tests for canonical JSON serialization and hashing."""

import hashlib
from datetime import UTC, datetime, timedelta, timezone

import pytest


class TestNormalizeValue:
    """Test _normalize_value handles Python primitives."""

    def test_string_passthrough(self) -> None:
        from prefill.core.canonical import _normalize_value

        assert _normalize_value("hello") == "hello"

    def test_int_passthrough(self) -> None:
        from prefill.core.canonical import _normalize_value

        assert _normalize_value(42) == 42

    def test_none_passthrough(self) -> None:
        from prefill.core.canonical import _normalize_value

        assert _normalize_value(None) is None

    def test_datetime_naive_to_utc_iso(self) -> None:
        from prefill.core.canonical import _normalize_value

        assert _normalize_value(datetime(2024, 5, 1, 9, 30)) == "2024-05-01T09:30:00+00:00"

    def test_datetime_aware_to_utc_iso(self) -> None:
        from prefill.core.canonical import _normalize_value

        eastern = timezone(timedelta(hours=-5))
        assert _normalize_value(datetime(2024, 5, 1, 4, 30, tzinfo=eastern)) == "2024-05-01T09:30:00+00:00"

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_float_rejected(self, value: float) -> None:
        from prefill.core.canonical import _normalize_value

        with pytest.raises(ValueError, match="non-finite"):
            _normalize_value(value)


class TestCanonicalJson:
    """RFC 8785 output."""

    def test_sorts_keys(self) -> None:
        from prefill.core.canonical import canonical_json

        assert canonical_json({"b": 1, "a": 2}) == '{"a":2,"b":1}'

    def test_no_whitespace(self) -> None:
        from prefill.core.canonical import canonical_json

        assert " " not in canonical_json({"a": [1, 2], "b": {"c": None}})

    def test_tuple_converts_to_list(self) -> None:
        from prefill.core.canonical import canonical_json

        assert canonical_json({"a": (1, 2)}) == '{"a":[1,2]}'

    def test_nan_in_nested_raises(self) -> None:
        from prefill.core.canonical import canonical_json

        with pytest.raises(ValueError):
            canonical_json({"outer": {"inner": [1.0, float("nan")]}})

    def test_non_ascii_kept_literal(self) -> None:
        from prefill.core.canonical import canonical_json

        assert canonical_json({"d": "← Patient Intake"}) == '{"d":"← Patient Intake"}'


class TestStableHash:
    """Fingerprints of canonical JSON."""

    def test_returns_hex_string(self) -> None:
        from prefill.core.canonical import stable_hash

        digest = stable_hash({"a": 1})

        assert len(digest) == 64
        int(digest, 16)

    def test_key_order_independent(self) -> None:
        from prefill.core.canonical import stable_hash

        assert stable_hash({"a": 1, "b": 2}) == stable_hash({"b": 2, "a": 1})

    def test_verifiable(self) -> None:
        from prefill.core.canonical import canonical_json, stable_hash

        data = {"f2": {"patient_email": {"sourceType": "form_field"}}}
        expected = hashlib.sha256(canonical_json(data).encode("utf-8")).hexdigest()

        assert stable_hash(data) == expected

    def test_version_constant_exists(self) -> None:
        from prefill.core.canonical import CANONICAL_VERSION

        assert CANONICAL_VERSION == "sha256-rfc8785-v1"

    def test_datetime_representations_hash_equal(self) -> None:
        from prefill.core.canonical import stable_hash

        aware = datetime(2024, 5, 1, 9, 30, tzinfo=UTC)
        naive = datetime(2024, 5, 1, 9, 30)

        assert stable_hash({"t": aware}) == stable_hash({"t": naive})
