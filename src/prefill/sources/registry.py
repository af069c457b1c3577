# src/prefill/sources/registry.py
"""Data source registry: source-type tag -> provider.

Uses pluggy for hook-based provider discovery (built-ins and entry-point
plugins) and keeps an explicit tag table for dispatch.

Override policy: registering a provider under a tag that is already taken
replaces the previous provider (last write wins) and logs a warning. This
is how deployments swap out a built-in provider.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

import pluggy

from prefill.contracts import DataSource, PrefillMapping, ResolvedValue, Severity, SourceGroup
from prefill.contracts.types import FieldID
from prefill.core.logging import get_logger
from prefill.core.notifications import LoggingNotifier, Notifier
from prefill.sources.context import SourceContext
from prefill.sources.hookspecs import PROJECT_NAME, PrefillSourceSpec
from prefill.sources.protocols import DataSourceProvider

logger = get_logger(__name__)

_PROVIDER_HOOK = "prefill_get_providers"


class DataSourceRegistry:
    """Registry of data source providers keyed by source-type tag.

    Usage:
        registry = DataSourceRegistry(notifier=notifier)
        registry.register_builtin_providers()
        registry.register("api", ApiProvider())

        groups = registry.enumerate_all(ctx)
        resolved = registry.resolve(mapping, ctx)
    """

    def __init__(self, notifier: Notifier | None = None) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(PrefillSourceSpec)
        self._providers: dict[str, DataSourceProvider] = {}
        self._notifier: Notifier = notifier if notifier is not None else LoggingNotifier()

    # === Registration ===

    def register(self, source_type: str, provider: DataSourceProvider) -> None:
        """Register a provider under a tag; replaces any existing provider."""
        previous = self._providers.get(source_type)
        if previous is not None:
            logger.warning(
                "data_source_overwritten",
                source_type=source_type,
                previous=type(previous).__name__,
                replacement=type(provider).__name__,
            )
        self._providers[source_type] = provider
        logger.debug("data_source_registered", source_type=source_type, provider=type(provider).__name__)

    def register_plugin(self, plugin: Any) -> list[DataSourceProvider]:
        """Register a pluggy plugin and the providers its hook returns.

        Only the new plugin's hook is called; providers contributed by
        earlier plugins are not re-registered.

        Returns:
            Providers contributed by this plugin
        """
        self._pm.register(plugin)
        return self._collect_from([plugin])

    def register_builtin_providers(self, global_profile: Mapping[str, str] | None = None) -> None:
        """Register the form-field, global, and URL-parameter providers.

        Call once at startup.
        """
        from prefill.sources.builtin import BuiltinProviders

        self.register_plugin(BuiltinProviders(global_profile=global_profile))

    def load_entrypoint_plugins(self) -> int:
        """Load provider plugins published under the "prefill" entry-point group.

        Returns:
            Number of plugins loaded
        """
        before = set(self._pm.get_plugins())
        count = self._pm.load_setuptools_entrypoints(PROJECT_NAME)
        added = [plugin for plugin in self._pm.get_plugins() if plugin not in before]
        self._collect_from(added)
        return count

    def _collect_from(self, plugins: Iterable[Any]) -> list[DataSourceProvider]:
        wanted = list(plugins)
        others = [plugin for plugin in self._pm.get_plugins() if plugin not in wanted]
        caller = self._pm.subset_hook_caller(_PROVIDER_HOOK, remove_plugins=others)

        collected: list[DataSourceProvider] = []
        for providers in caller():
            for provider in providers:
                self.register(provider.source_type, provider)
                collected.append(provider)
        return collected

    # === Lookup ===

    def get(self, source_type: str) -> DataSourceProvider | None:
        return self._providers.get(source_type)

    def source_types(self) -> list[str]:
        """Registered tags in registration order."""
        return list(self._providers)

    def __contains__(self, source_type: object) -> bool:
        return source_type in self._providers

    def __len__(self) -> int:
        return len(self._providers)

    # === Enumeration / resolution ===

    def enumerate_all(self, ctx: SourceContext) -> list[SourceGroup]:
        """Enumerate every provider, in registration order.

        A provider that raises contributes an empty group carrying the
        error; the failure is logged and reported through the notifier,
        and the remaining providers still run.
        """
        groups: list[SourceGroup] = []
        for source_type, provider in self._providers.items():
            try:
                sources = tuple(provider.enumerate(ctx))
            except Exception as e:
                logger.exception("data_source_enumeration_failed", source_type=source_type, provider=provider.name)
                self._notifier.notify(f"Error loading {provider.name} sources", Severity.ERROR)
                groups.append(SourceGroup(source_type=source_type, name=provider.name, error=str(e) or type(e).__name__))
                continue
            groups.append(SourceGroup(source_type=source_type, name=provider.name, sources=sources))
        return groups

    def find_source(self, ctx: SourceContext, source_id: str, source_type: str | None = None) -> DataSource | None:
        """Find an enumerated source by id (optionally restricted to one tag)."""
        for group in self.enumerate_all(ctx):
            if source_type is not None and group.source_type != source_type:
                continue
            for source in group.sources:
                if source.id == source_id:
                    return source
        return None

    def resolve(self, mapping: PrefillMapping | None, ctx: SourceContext) -> ResolvedValue | None:
        """Resolve a saved mapping through its provider.

        Unknown source types resolve to None and never raise.
        """
        if mapping is None:
            return None
        provider = self._providers.get(mapping.source_type)
        if provider is None:
            logger.warning("unknown_data_source_type", source_type=mapping.source_type)
            return None
        return provider.resolve(mapping, ctx)

    def build_mapping(self, target_field_id: str, source: DataSource, created_at: datetime) -> PrefillMapping:
        """Build the persisted mapping for a selected source.

        Tags without a provider still produce a base mapping so a selection
        is never lost; resolution will report it as unknown.
        """
        provider = self._providers.get(source.type)
        if provider is None:
            logger.warning("unknown_data_source_type", source_type=source.type)
            return PrefillMapping.model_validate(
                {
                    "targetFieldId": FieldID(target_field_id),
                    "sourceType": source.type,
                    "createdAt": created_at,
                    "sourceId": source.id,
                }
            )
        return provider.build_mapping(target_field_id, source, created_at)
