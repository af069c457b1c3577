# src/prefill/core/graph/graph.py
"""FormGraph - read-only view of the intake workflow graph.

Wraps a NetworkX DiGraph whose edges run from a form to each of its
prerequisites. The graph is built once from the loader's payload and never
mutated afterwards; every query is a pure read.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import networkx as nx
from networkx import DiGraph
from pydantic import ValidationError

from prefill.contracts import FieldSchema, FormNode, GraphLoadError
from prefill.contracts.types import ComponentID, FormID
from prefill.core.graph.models import GraphPayload
from prefill.core.logging import get_logger

logger = get_logger(__name__)

# Edge label for form -> prerequisite edges
PREREQUISITE_EDGE = "prerequisite"


class FormGraph:
    """Intake graph of form nodes and their field schemas.

    Nodes are keyed by form id and carry the FormNode under the "info"
    attribute. Dangling prerequisite ids (no matching node) remain in
    FormNode.prerequisite_ids but never become graph nodes, so every node
    in the NetworkX graph is a real form.

    Example:
        graph = FormGraph.from_payload(client.fetch_payload())
        form = graph.get_form(FormID("f2"))
        schema = graph.get_schema(form.component_id)
    """

    def __init__(
        self,
        nodes: Iterable[FormNode],
        schemas: Iterable[FieldSchema] = (),
    ) -> None:
        self._graph: DiGraph[str] = nx.DiGraph()
        self._order: list[FormID] = []
        self._schemas: dict[ComponentID, FieldSchema] = {}

        for node in nodes:
            if self._graph.has_node(node.id):
                # First declaration wins, matching lookup-by-first-match loaders
                logger.warning("duplicate_form_node_ignored", form_id=node.id)
                continue
            self._graph.add_node(node.id, info=node)
            self._order.append(node.id)

        for node_id in self._order:
            node = self.get_form_info(node_id)
            for prerequisite_id in node.prerequisite_ids:
                if self._graph.has_node(prerequisite_id):
                    self._graph.add_edge(node_id, prerequisite_id, label=PREREQUISITE_EDGE)
                else:
                    logger.debug("dangling_prerequisite", form_id=node_id, prerequisite_id=prerequisite_id)

        for schema in schemas:
            if schema.component_id in self._schemas:
                logger.warning("duplicate_field_schema_ignored", component_id=schema.component_id)
                continue
            self._schemas[schema.component_id] = schema

        if not self.is_acyclic():
            logger.warning("prerequisite_cycle_detected", cycle=self.find_cycle())

    @classmethod
    def from_payload(cls, payload: Any) -> FormGraph:
        """Build a graph from the graph-supply payload.

        Args:
            payload: Decoded JSON `{nodes: [...], forms: [...]}`

        Raises:
            GraphLoadError: If the payload is not an object or lacks `nodes`
        """
        if not isinstance(payload, Mapping) or payload.get("nodes") is None:
            raise GraphLoadError("Invalid data format received from API")
        try:
            parsed = GraphPayload.model_validate(payload)
        except ValidationError as e:
            raise GraphLoadError(f"Invalid data format received from API: {e}") from e

        graph = cls(
            nodes=(node.to_form_node() for node in parsed.nodes),
            schemas=(form.to_field_schema() for form in parsed.forms),
        )
        logger.info("graph_loaded", nodes=graph.node_count, edges=graph.edge_count, schemas=len(graph._schemas))
        return graph

    @property
    def node_count(self) -> int:
        """Number of nodes in the graph."""
        return self._graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        """Number of resolvable prerequisite edges."""
        return self._graph.number_of_edges()

    def has_form(self, form_id: str) -> bool:
        return self._graph.has_node(form_id)

    def get_form_info(self, form_id: str) -> FormNode:
        """Get the FormNode for an id known to exist.

        Raises:
            KeyError: If the id is not a node of this graph
        """
        if not self._graph.has_node(form_id):
            raise KeyError(f"Form not found: {form_id}")
        info: FormNode = self._graph.nodes[form_id]["info"]
        return info

    def get_form(self, form_id: str) -> FormNode | None:
        """Look up a node by id; None for unknown ids."""
        if not self._graph.has_node(form_id):
            return None
        return self.get_form_info(form_id)

    def nodes(self) -> list[FormNode]:
        """All nodes in payload order, including non-form kinds."""
        return [self.get_form_info(node_id) for node_id in self._order]

    def forms(self) -> list[FormNode]:
        """Nodes of kind "form" in payload order."""
        return [node for node in self.nodes() if node.is_form]

    def prerequisites_of(self, form_id: str) -> tuple[FormID, ...]:
        """Declared prerequisites that exist in the graph, in declared order.

        Unknown form ids yield an empty tuple.
        """
        node = self.get_form(form_id)
        if node is None:
            return ()
        return tuple(p for p in node.prerequisite_ids if self._graph.has_node(p))

    def get_schema(self, component_id: str | None) -> FieldSchema | None:
        """Field schema for a component; None when absent."""
        if component_id is None:
            return None
        return self._schemas.get(ComponentID(component_id))

    def schemas(self) -> list[FieldSchema]:
        return list(self._schemas.values())

    def is_acyclic(self) -> bool:
        """Check that no form is (transitively) its own prerequisite."""
        return nx.is_directed_acyclic_graph(self._graph)

    def find_cycle(self) -> list[FormID]:
        """Return the form ids along one prerequisite cycle, or [] if none."""
        try:
            edges = nx.find_cycle(self._graph)
        except nx.NetworkXNoCycle:
            return []
        return [FormID(edge[0]) for edge in edges]

    def get_nx_graph(self) -> DiGraph[str]:
        """Return a frozen copy of the underlying NetworkX graph.

        Mutation attempts on the copy raise nx.NetworkXError.
        """
        return nx.freeze(self._graph.copy())  # type: ignore[no-any-return]
