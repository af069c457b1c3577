# src/prefill/core/graph/__init__.py
"""Intake graph model and dependency resolution."""

from prefill.core.graph.graph import PREREQUISITE_EDGE, FormGraph
from prefill.core.graph.models import GraphPayload
from prefill.core.graph.resolver import DependencyResolver

__all__ = [
    "PREREQUISITE_EDGE",
    "DependencyResolver",
    "FormGraph",
    "GraphPayload",
]
