# src/prefill/clients/graph.py
"""Graph supply: fetch the intake workflow graph over HTTP or from a file.

The payload is `{nodes: [...], forms: [...]}` as served by the blueprint
graph endpoint. Every failure to obtain or decode it surfaces as
GraphLoadError; nothing downstream sees a partial graph.
"""

from __future__ import annotations

import json
from json import JSONDecodeError
from pathlib import Path
from typing import Any

import httpx

from prefill.contracts import GraphLoadError
from prefill.core.config import GraphSourceSettings, PrefillSettings
from prefill.core.graph import FormGraph
from prefill.core.logging import get_logger

logger = get_logger(__name__)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"JSON contains non-finite value {name}")


def _parse_payload(text: str, origin: str) -> Any:
    """Parse a graph payload, rejecting NaN and Infinity.

    Raises:
        GraphLoadError: If the text is not strict JSON
    """
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except (JSONDecodeError, ValueError) as e:
        raise GraphLoadError(f"Invalid JSON in graph payload from {origin}: {e}") from e


class GraphClient:
    """Fetches the graph payload from the configured endpoint.

    Example:
        with GraphClient(settings.graph) as client:
            graph = FormGraph.from_payload(client.fetch_payload())
    """

    def __init__(self, settings: GraphSourceSettings, client: httpx.Client | None = None) -> None:
        self._settings = settings
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=settings.timeout_seconds)

    @property
    def url(self) -> str:
        return self._settings.url

    def fetch_payload(self) -> Any:
        """GET the graph and decode its JSON body.

        Raises:
            GraphLoadError: On transport errors, non-2xx status, or invalid JSON
        """
        url = self.url
        try:
            response = self._client.get(url, headers=self._settings.headers)
        except httpx.HTTPError as e:
            logger.error("graph_fetch_failed", url=url, error=str(e))
            raise GraphLoadError(f"Failed to fetch graph from {url}: {e}") from e

        if not response.is_success:
            logger.error("graph_fetch_failed", url=url, status_code=response.status_code)
            raise GraphLoadError(f"Failed to fetch graph from {url}: HTTP {response.status_code}")

        payload = _parse_payload(response.text, url)
        logger.debug("graph_fetched", url=url, bytes=len(response.content))
        return payload

    def fetch_graph(self) -> FormGraph:
        return FormGraph.from_payload(self.fetch_payload())

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> GraphClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def load_graph_file(path: Path) -> FormGraph:
    """Build a graph from a JSON file holding the endpoint's payload.

    Raises:
        GraphLoadError: If the file is missing, unreadable, or malformed
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise GraphLoadError(f"Cannot read graph file {path}: {e}") from e
    return FormGraph.from_payload(_parse_payload(text, str(path)))


def load_graph(settings: PrefillSettings) -> FormGraph:
    """Load the graph from the configured file, or else the HTTP endpoint."""
    if settings.graph.file is not None:
        logger.info("graph_source", file=str(settings.graph.file))
        return load_graph_file(settings.graph.file)

    logger.info("graph_source", url=settings.graph.url)
    with GraphClient(settings.graph) as client:
        return client.fetch_graph()
