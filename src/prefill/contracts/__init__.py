"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core or
sources. Settings classes are NOT re-exported here - import them from
prefill.core.config.

Import patterns:
    from prefill.contracts import FormNode, DataSource, PrefillMapping
    from prefill.core.config import PrefillSettings
"""

from prefill.contracts.enums import (
    DependencyCategory,
    FieldState,
    Severity,
    SourceType,
)
from prefill.contracts.errors import (
    GraphLoadError,
    LifecycleError,
    MappingDocumentError,
    PrefillError,
)
from prefill.contracts.graph import (
    DEFAULT_FIELD_TYPE,
    EMPTY_DEPENDENCIES,
    FORM_KIND,
    DependencySets,
    Field,
    FieldProperty,
    FieldSchema,
    FormNode,
    FormSummary,
)
from prefill.contracts.mapping import (
    MAPPING_MODELS,
    FormFieldMapping,
    GlobalMapping,
    PrefillMapping,
    UrlParamMapping,
    mapping_from_document,
)
from prefill.contracts.sources import (
    DataSource,
    ResolvedValue,
    SourceGroup,
    SourceMetadata,
)
from prefill.contracts.types import ComponentID, FieldID, FormID, SourceID

__all__ = [
    "DEFAULT_FIELD_TYPE",
    "EMPTY_DEPENDENCIES",
    "FORM_KIND",
    "MAPPING_MODELS",
    "ComponentID",
    "DataSource",
    "DependencyCategory",
    "DependencySets",
    "Field",
    "FieldID",
    "FieldProperty",
    "FieldSchema",
    "FieldState",
    "FormFieldMapping",
    "FormID",
    "FormNode",
    "FormSummary",
    "GlobalMapping",
    "GraphLoadError",
    "LifecycleError",
    "MappingDocumentError",
    "PrefillError",
    "PrefillMapping",
    "ResolvedValue",
    "Severity",
    "SourceGroup",
    "SourceID",
    "SourceMetadata",
    "SourceType",
    "UrlParamMapping",
    "mapping_from_document",
]
