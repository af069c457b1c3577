# src/prefill/sources/context.py
"""Enumeration/resolution context handed to every provider.

Capabilities are injected rather than imported, so a provider only depends
on what it actually uses and tests can hand in a tiny graph.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import parse_qsl

from prefill.contracts import FormNode
from prefill.core.graph import DependencyResolver, FormGraph
from prefill.core.schema import FieldSchemaReader


def request_params_from_url(url: str | None) -> tuple[tuple[str, str], ...]:
    """Parse the query parameters of a request URL, in order.

    Accepts absolute, scheme-less and relative URLs as well as a bare
    query string ("a=1&b=2"). Everything after the first "?" is the query;
    a "#fragment" is dropped. Without a "?", only text shaped like
    "key=value" with no path is read as a query.
    """
    if not url:
        return ()
    if "?" in url:
        query = url.partition("?")[2]
    elif "/" in url or "=" not in url:
        return ()
    else:
        query = url
    query = query.split("#", 1)[0]
    return tuple(parse_qsl(query, keep_blank_values=True))


@dataclass(frozen=True)
class SourceContext:
    """Everything a provider may need for one form.

    Example:
        ctx = SourceContext(
            form=graph.get_form_info("f2"),
            graph=graph,
            resolver=DependencyResolver(graph),
            schema_reader=FieldSchemaReader(graph),
            request_params=request_params_from_url("https://app/intake?visit=42"),
        )
    """

    form: FormNode | None
    graph: FormGraph
    resolver: DependencyResolver
    schema_reader: FieldSchemaReader
    request_params: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    def param(self, key: str) -> str | None:
        """First value of a query parameter, or None when absent."""
        for name, value in self.request_params:
            if name == key:
                return value
        return None

    def param_keys(self) -> list[str]:
        """Distinct parameter keys in first-seen order."""
        return list(dict.fromkeys(name for name, _ in self.request_params))
