# src/prefill/core/system.py
"""PrefillSystem - composition root for one loaded intake graph.

Builds the resolver, schema reader, provider registry, validator, and
lifecycle manager once and threads them through every call. There are no
module-level registries: two systems never share providers or mappings.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from prefill.contracts import (
    DataSource,
    DependencySets,
    Field,
    FieldState,
    FormNode,
    FormSummary,
    LifecycleError,
    PrefillMapping,
    ResolvedValue,
    SourceGroup,
)
from prefill.core.config import PrefillSettings, default_settings
from prefill.core.graph import DependencyResolver, FormGraph
from prefill.core.lifecycle import MappingLifecycleManager, SaveResult, utc_now
from prefill.core.logging import get_logger
from prefill.core.mappings import MappingStore
from prefill.core.notifications import LoggingNotifier, Notifier
from prefill.core.persistence import InMemoryMappingRepository, MappingRepository
from prefill.core.schema import FieldSchemaReader
from prefill.core.validation import MappingValidator, ValidationRule
from prefill.sources.context import SourceContext, request_params_from_url
from prefill.sources.protocols import DataSourceProvider
from prefill.sources.registry import DataSourceRegistry

logger = get_logger(__name__)


class PrefillSystem:
    """Everything needed to configure prefill for one intake graph.

    Example:
        system = PrefillSystem.create(graph, settings, repository=repo)
        system.select_form("f2")
        source = system.find_source("f1.email")
        result = system.save("patient_email", source)
    """

    def __init__(
        self,
        graph: FormGraph,
        registry: DataSourceRegistry,
        validator: MappingValidator,
        manager: MappingLifecycleManager,
        request_url: str | None = None,
    ) -> None:
        self.graph = graph
        self.resolver = DependencyResolver(graph)
        self.schema_reader = FieldSchemaReader(graph)
        self.registry = registry
        self.validator = validator
        self.manager = manager
        self.request_url = request_url

    @classmethod
    def create(
        cls,
        graph: FormGraph,
        settings: PrefillSettings | None = None,
        *,
        repository: MappingRepository | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] = utc_now,
        load_plugins: bool = False,
    ) -> PrefillSystem:
        """Wire a system with the built-in providers and load saved mappings.

        Args:
            graph: Loaded intake graph
            settings: Global profile and request URL; defaults when None
            repository: Mapping storage; in-memory when None
            notifier: Operator notification sink; structlog when None
            clock: Source of createdAt timestamps
            load_plugins: Also load providers from the "prefill" entry points

        Raises:
            MappingDocumentError: If the repository holds a malformed document
        """
        settings = settings if settings is not None else default_settings()
        notifier = notifier if notifier is not None else LoggingNotifier()

        registry = DataSourceRegistry(notifier=notifier)
        registry.register_builtin_providers(settings.global_profile)
        if load_plugins:
            loaded = registry.load_entrypoint_plugins()
            logger.info("provider_plugins_loaded", count=loaded)

        validator = MappingValidator()
        manager = MappingLifecycleManager(
            registry,
            validator,
            repository if repository is not None else InMemoryMappingRepository(),
            notifier,
            clock,
        )
        manager.load()
        return cls(graph, registry, validator, manager, request_url=settings.request_url)

    # === Extension ===

    def add_source_type(
        self,
        source_type: str,
        provider: DataSourceProvider | None = None,
        validator: ValidationRule | None = None,
    ) -> None:
        """Register a provider and/or an extra validation rule for a tag."""
        if provider is not None:
            self.registry.register(source_type, provider)
        if validator is not None:
            self.validator.register_rule(source_type, validator)

    # === Queries ===

    def context(self, form_id: str | None = None) -> SourceContext:
        """Provider context for a form (the selected one by default)."""
        target = form_id if form_id is not None else self.manager.selected_form_id
        return SourceContext(
            form=self.graph.get_form(target) if target is not None else None,
            graph=self.graph,
            resolver=self.resolver,
            schema_reader=self.schema_reader,
            request_params=request_params_from_url(self.request_url),
        )

    def list_forms(self) -> list[FormSummary]:
        summaries = []
        for form in self.graph.forms():
            deps = self.resolver.resolve(form.id)
            summaries.append(
                FormSummary(
                    form=form,
                    direct_count=len(deps.direct),
                    transitive_count=len(deps.transitive),
                    field_ids=tuple(f.id for f in self.schema_reader.fields_of(form)),
                )
            )
        return summaries

    def dependencies(self, form_id: str) -> DependencySets:
        return self.resolver.resolve(form_id)

    def fields(self, form_id: str | None = None) -> tuple[Field, ...]:
        return self.schema_reader.fields_of(self._form(form_id))

    def field(self, field_id: str, form_id: str | None = None) -> Field | None:
        return self.schema_reader.field(self._form(form_id), field_id)

    def sources(self, form_id: str | None = None) -> list[SourceGroup]:
        """Candidate sources for a form, grouped by provider."""
        return self.registry.enumerate_all(self.context(form_id))

    def find_source(self, source_id: str, source_type: str | None = None, form_id: str | None = None) -> DataSource | None:
        return self.registry.find_source(self.context(form_id), source_id, source_type)

    def resolve_mapping(self, field_id: str, form_id: str | None = None) -> ResolvedValue | None:
        """Resolve the saved mapping of a field to its current value."""
        target = self._form_id(form_id)
        mapping = self.manager.get_mapping(target, field_id)
        return self.registry.resolve(mapping, self.context(target))

    def state(self, field_id: str, form_id: str | None = None) -> FieldState:
        return self.manager.state(self._form_id(form_id), field_id)

    def display(self, field_id: str, form_id: str | None = None) -> str | None:
        return self.manager.display(self._form_id(form_id), field_id)

    def get_mapping(self, field_id: str, form_id: str | None = None) -> PrefillMapping | None:
        return self.manager.get_mapping(self._form_id(form_id), field_id)

    def snapshot(self) -> MappingStore:
        return self.manager.snapshot()

    # === Intents ===

    def select_form(self, form_id: str | None) -> FormNode | None:
        """Select the active form; unknown ids clear the selection."""
        form = self.graph.get_form(form_id) if form_id is not None else None
        if form_id is not None and form is None:
            logger.warning("unknown_form_selected", form_id=form_id)
        self.manager.select_form(form.id if form is not None else None)
        return form

    def begin_configure(self, field_id: str) -> None:
        self.manager.begin_configure(field_id)

    def select_candidate(self, source: DataSource) -> None:
        self.manager.select_candidate(source)

    def save(self, field_id: str | None = None, candidate: DataSource | None = None) -> SaveResult:
        """Save the candidate for a field of the selected form.

        Raises:
            LifecycleError: If no form is selected, no field is being
                configured, or no candidate is recorded
        """
        if field_id is None:
            session = self.manager.session
            if session is None:
                raise LifecycleError("No field is being configured")
            field_id = session.field_id

        target_field = self.field(field_id)
        if target_field is None and self._needs_session(field_id):
            # Fields outside the schema can still be mapped, without type checks
            self.manager.begin_configure(field_id)
        return self.manager.save(target_field, candidate)

    def cancel(self) -> FieldState | None:
        return self.manager.cancel()

    def remove(self, field_id: str, form_id: str | None = None) -> bool:
        return self.manager.remove(self._form_id(form_id), field_id)

    # === Internals ===

    def _needs_session(self, field_id: str) -> bool:
        session = self.manager.session
        return session is None or session.field_id != field_id

    def _form_id(self, form_id: str | None) -> str:
        if form_id is not None:
            return form_id
        selected = self.manager.selected_form_id
        if selected is None:
            raise LifecycleError("No form selected")
        return selected

    def _form(self, form_id: str | None) -> FormNode | None:
        return self.graph.get_form(self._form_id(form_id))
