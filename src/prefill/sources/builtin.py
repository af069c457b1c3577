# src/prefill/sources/builtin.py
"""Built-in providers, registered through the same hook as third parties."""

from __future__ import annotations

from collections.abc import Mapping

from prefill.sources.form_field import FormFieldProvider
from prefill.sources.global_data import GlobalDataProvider
from prefill.sources.hookspecs import hookimpl
from prefill.sources.protocols import DataSourceProvider
from prefill.sources.url_param import UrlParamProvider


class BuiltinProviders:
    """pluggy plugin contributing the form-field, global, and URL providers."""

    def __init__(self, global_profile: Mapping[str, str] | None = None) -> None:
        self._global_profile = global_profile

    @hookimpl
    def prefill_get_providers(self) -> list[DataSourceProvider]:
        return [
            FormFieldProvider(),
            GlobalDataProvider(profile=self._global_profile),
            UrlParamProvider(),
        ]
