# src/prefill/core/canonical.py
"""Canonical JSON for the mapping document.

The document is normalized (timestamps to UTC ISO-8601, tuples to lists)
and then serialized per RFC 8785 (JCS) by the rfc8785 package. Because the
output is fully determined by content, re-saving a loaded document yields
the same bytes and a store's fingerprint does not depend on the order in
which mappings were inserted.
"""

from __future__ import annotations

import hashlib
import math
from datetime import UTC, datetime
from typing import Any

import rfc8785

# Identifies how fingerprints are computed; bump when normalization changes
CANONICAL_VERSION = "sha256-rfc8785-v1"


def _normalize_value(obj: Any) -> Any:
    """Convert a leaf value of the document to a JSON primitive.

    Raises:
        ValueError: If value is NaN or +/-Infinity
    """
    if isinstance(obj, datetime):
        stamp = obj if obj.tzinfo is not None else obj.replace(tzinfo=UTC)
        return stamp.astimezone(UTC).isoformat()
    if isinstance(obj, float) and not math.isfinite(obj):
        raise ValueError(f"Cannot write non-finite number {obj} to the mapping document")
    return obj


def _normalize(data: Any) -> Any:
    if isinstance(data, dict):
        return {key: _normalize(value) for key, value in data.items()}
    if isinstance(data, list | tuple):
        return [_normalize(item) for item in data]
    return _normalize_value(data)


def canonical_json(obj: Any) -> str:
    """Serialize to RFC 8785 JSON: sorted keys, no insignificant whitespace.

    Raises:
        ValueError: If data contains NaN or Infinity
        TypeError: If data contains a value JSON cannot represent
    """
    encoded: bytes = rfc8785.dumps(_normalize(obj))
    return encoded.decode("utf-8")


def stable_hash(obj: Any) -> str:
    """SHA-256 hex digest of canonical_json(obj)."""
    return hashlib.sha256(canonical_json(obj).encode("utf-8")).hexdigest()
