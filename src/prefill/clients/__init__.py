"""Clients for external systems prefill reads from."""

from prefill.clients.graph import GraphClient, load_graph, load_graph_file

__all__ = [
    "GraphClient",
    "load_graph",
    "load_graph_file",
]
