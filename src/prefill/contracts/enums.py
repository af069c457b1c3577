"""Status codes, tags, and kinds used across subsystem boundaries.

Values are persisted in the mapping document (SourceType) or shown to the
operator (DependencyCategory), so they must never be renamed.
"""

from enum import StrEnum


class SourceType(StrEnum):
    """Tag identifying which provider owns a data source or mapping.

    Stored in the mapping document (mappings.*.*.sourceType).

    API and CALCULATED are reserved tags with no built-in provider; they
    resolve to nothing until a provider is registered for them.
    """

    FORM_FIELD = "form_field"
    GLOBAL = "global"
    URL_PARAM = "url_param"
    API = "api"
    CALCULATED = "calculated"


class DependencyCategory(StrEnum):
    """How an upstream form relates to the form being configured."""

    DIRECT = "Direct Dependency"
    TRANSITIVE = "Transitive Dependency"


class Severity(StrEnum):
    """Severity of an operator-facing notification."""

    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class FieldState(StrEnum):
    """Configuration state of a single (form, field) pair.

    UNCONFIGURED -> CONFIGURING -> SAVED (or back to the prior state on cancel)
    SAVED -> CONFIGURING (edit) or UNCONFIGURED (removed)
    """

    UNCONFIGURED = "unconfigured"
    CONFIGURING = "configuring"
    SAVED = "saved"
