# src/prefill/sources/__init__.py
"""Data source providers and the registry that dispatches to them.

Provider types:
- form_field: fields of upstream (prerequisite) forms
- global: profile-level values (user, organization)
- url_param: query parameters of the current request

Additional types register through DataSourceRegistry.register() or a
pluggy plugin implementing prefill_get_providers.
"""

from prefill.sources.base import BaseDataSourceProvider
from prefill.sources.context import SourceContext, request_params_from_url
from prefill.sources.form_field import FormFieldProvider
from prefill.sources.global_data import GLOBAL_CATALOG, GlobalDataProvider
from prefill.sources.hookspecs import hookimpl
from prefill.sources.protocols import DataSourceProvider
from prefill.sources.registry import DataSourceRegistry
from prefill.sources.url_param import UrlParamProvider

__all__ = [
    "GLOBAL_CATALOG",
    "BaseDataSourceProvider",
    "DataSourceProvider",
    "DataSourceRegistry",
    "FormFieldProvider",
    "GlobalDataProvider",
    "SourceContext",
    "UrlParamProvider",
    "hookimpl",
    "request_params_from_url",
]
