# src/prefill/sources/form_field.py
"""Fields of upstream forms (direct and transitive prerequisites)."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from prefill.contracts import (
    DataSource,
    DependencyCategory,
    FormFieldMapping,
    FormNode,
    PrefillMapping,
    ResolvedValue,
    SourceMetadata,
    SourceType,
)
from prefill.contracts.types import FieldID, SourceID
from prefill.core.logging import get_logger
from prefill.sources.base import BaseDataSourceProvider
from prefill.sources.context import SourceContext

logger = get_logger(__name__)


class FormFieldProvider(BaseDataSourceProvider):
    """Offers every field of every form the active form depends on.

    Source ids are "<form id>.<field id>". Direct dependencies are listed
    before transitive ones.
    """

    source_type = SourceType.FORM_FIELD.value
    name = "Form Fields"

    def enumerate(self, ctx: SourceContext) -> list[DataSource]:
        if ctx.form is None:
            return []
        dependencies = ctx.resolver.resolve(ctx.form.id)
        return [
            *self._sources_for(dependencies.direct, DependencyCategory.DIRECT, ctx),
            *self._sources_for(dependencies.transitive, DependencyCategory.TRANSITIVE, ctx),
        ]

    def _sources_for(
        self,
        forms: Iterable[FormNode],
        category: DependencyCategory,
        ctx: SourceContext,
    ) -> list[DataSource]:
        sources: list[DataSource] = []
        for form in forms:
            for field in ctx.schema_reader.fields_of(form):
                sources.append(
                    DataSource(
                        type=self.source_type,
                        id=SourceID(f"{form.id}.{field.id}"),
                        display_name=f"{form.display_name} → {field.name}",
                        category=category.value,
                        metadata=SourceMetadata(
                            field_type=field.type,
                            form_name=form.display_name,
                            field_name=field.name,
                        ),
                        form_id=form.id,
                        field_id=field.id,
                    )
                )
        return sources

    def build_mapping(self, target_field_id: str, source: DataSource, created_at: datetime) -> PrefillMapping:
        if source.form_id is None or source.field_id is None:
            raise ValueError(f"Form field source '{source.id}' is missing its form or field id")
        return FormFieldMapping(
            target_field_id=FieldID(target_field_id),
            created_at=created_at,
            source_form_id=source.form_id,
            source_field_id=source.field_id,
            source_form_name=source.metadata.form_name,
            source_field_name=source.metadata.field_name,
            source_field_type=source.metadata.field_type,
        )

    def resolve(self, mapping: PrefillMapping, ctx: SourceContext) -> ResolvedValue | None:
        """Describe where the value will come from.

        Reading the upstream form's submitted data happens at intake time,
        outside this system; configuration only needs a placeholder.
        """
        if not isinstance(mapping, FormFieldMapping):
            logger.warning("unexpected_mapping_model", source_type=mapping.source_type, model=type(mapping).__name__)
            return None
        form_name = mapping.source_form_name or mapping.source_form_id
        field_name = mapping.source_field_name or mapping.source_field_id
        return ResolvedValue(value=f"Value from {form_name}.{field_name}", source=mapping)
