# src/prefill/core/validation.py
"""Advisory type-compatibility checks between a target field and a source.

Validation never blocks on its own: it produces warning strings that the
lifecycle manager surfaces once before letting a save through.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from types import MappingProxyType

from prefill.contracts import DataSource, Field
from prefill.core.logging import get_logger

logger = get_logger(__name__)

# Target semantic type -> source semantic types it accepts.
# Asymmetric: text accepts email, number does not accept text. Keep as is.
COMPATIBLE_TYPES: Mapping[str, frozenset[str]] = MappingProxyType(
    {
        "email": frozenset({"email", "text", "string", "short-text"}),
        "number": frozenset({"number", "integer", "float"}),
        "date": frozenset({"date", "datetime", "string"}),
        "boolean": frozenset({"boolean", "checkbox"}),
        "text": frozenset({"text", "string", "email", "url", "tel", "short-text"}),
        "short-text": frozenset({"text", "string", "email", "short-text"}),
        "multi-line-text": frozenset({"text", "string", "multi-line-text"}),
    }
)

type ValidationRule = Callable[[Field, DataSource], list[str]]
"""Extra check for one source type; returns warning strings."""


def type_mismatch_warning(source_type: str, target_type: str) -> str:
    return f"Type mismatch: {source_type} → {target_type}"


class MappingValidator:
    """Checks a candidate source against a target field.

    Per-source-type rules can be registered on top of the static type
    table (e.g., a calculated source that only yields numbers).

    Example:
        validator = MappingValidator()
        warnings = validator.validate(field, source)
        if warnings:
            show(", ".join(warnings))
    """

    def __init__(self, compatible_types: Mapping[str, frozenset[str]] = COMPATIBLE_TYPES) -> None:
        self._compatible_types = compatible_types
        self._rules: dict[str, ValidationRule] = {}

    def register_rule(self, source_type: str, rule: ValidationRule) -> None:
        """Register an extra rule for sources of one type (last write wins)."""
        if source_type in self._rules:
            logger.warning("validation_rule_overwritten", source_type=source_type)
        self._rules[source_type] = rule

    def has_rule(self, source_type: str) -> bool:
        return source_type in self._rules

    def validate(self, target: Field | None, source: DataSource | None) -> list[str]:
        """Return advisory warnings; never raises.

        The type check is skipped when either side has no known type.
        """
        if target is None or source is None:
            return []

        warnings: list[str] = []
        target_type = target.type
        source_type = source.field_type
        if target_type and source_type:
            accepted = self._compatible_types.get(target_type, frozenset({target_type}))
            if source_type not in accepted and source_type != target_type:
                warnings.append(type_mismatch_warning(source_type, target_type))

        rule = self._rules.get(source.type)
        if rule is not None:
            warnings.extend(self._run_rule(rule, target, source))
        return warnings

    def _run_rule(self, rule: ValidationRule, target: Field, source: DataSource) -> list[str]:
        # Validation is advisory: a raising rule contributes no warnings
        try:
            return list(rule(target, source))
        except Exception:
            logger.exception("validation_rule_failed", source_type=source.type, source_id=source.id)
            return []
