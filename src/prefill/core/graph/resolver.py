# src/prefill/core/graph/resolver.py
"""Dependency resolution over the intake graph.

Classifies every form a given form may read from as a direct dependency
(declared prerequisite) or a transitive one (reachable only through other
prerequisites).
"""

from __future__ import annotations

from collections import deque

from prefill.contracts import EMPTY_DEPENDENCIES, DependencySets, FormNode
from prefill.contracts.types import FormID
from prefill.core.graph.graph import FormGraph
from prefill.core.logging import get_logger

logger = get_logger(__name__)


class DependencyResolver:
    """Computes direct and transitive prerequisite sets for a form.

    Results are memoized per form id; the graph is immutable, so a cached
    result can never go stale for the lifetime of the resolver.
    """

    def __init__(self, graph: FormGraph) -> None:
        self._graph = graph
        self._cache: dict[str, DependencySets] = {}

    @property
    def graph(self) -> FormGraph:
        return self._graph

    def resolve(self, form_id: str) -> DependencySets:
        """Resolve the dependency sets of a form.

        Breadth-first traversal starting at the declared prerequisites.
        `visited` is seeded with the form's own id, so a malformed edge back
        to the form (directly or through a cycle) never includes it. Ids
        already classified as direct are never reclassified as transitive.

        Unknown forms and forms without prerequisites yield empty sets;
        dangling prerequisite ids are dropped from the result.
        """
        cached = self._cache.get(form_id)
        if cached is not None:
            return cached

        result = self._resolve_uncached(form_id)
        self._cache[form_id] = result
        return result

    def _resolve_uncached(self, form_id: str) -> DependencySets:
        form = self._graph.get_form(form_id)
        if form is None or not form.prerequisite_ids:
            return EMPTY_DEPENDENCIES

        # dict keeps declaration order while deduplicating
        direct_ids: dict[FormID, None] = dict.fromkeys(form.prerequisite_ids)
        transitive_ids: dict[FormID, None] = {}

        visited: set[str] = {form.id}
        queue: deque[FormID] = deque(form.prerequisite_ids)

        while queue:
            current_id = queue.popleft()
            if current_id in visited:
                continue
            visited.add(current_id)

            current = self._graph.get_form(current_id)
            if current is None:
                continue

            for dep_id in current.prerequisite_ids:
                if dep_id not in visited and dep_id not in direct_ids:
                    transitive_ids[dep_id] = None
                    queue.append(dep_id)

        # Self-referential prerequisite: the form is never its own dependency
        direct_ids.pop(form.id, None)

        direct = self._existing(direct_ids)
        transitive = self._existing(transitive_ids)
        logger.debug(
            "dependencies_resolved",
            form_id=form_id,
            direct=len(direct),
            transitive=len(transitive),
        )
        return DependencySets(direct=direct, transitive=transitive)

    def _existing(self, ids: dict[FormID, None]) -> tuple[FormNode, ...]:
        """Map ids to nodes, silently dropping dangling references."""
        nodes = (self._graph.get_form(node_id) for node_id in ids)
        return tuple(node for node in nodes if node is not None)
