"""
Neo4j query-result adapter.

Converts Neo4j-style node and relationship records into GraphData.
"""

import logging
from typing import Any, Dict, List

from ..domain.models import GraphData, GraphNode, GraphEdge, GraphDataError
from ..ports.graph_source_port import GraphSourcePort

logger = logging.getLogger(__name__)


class Neo4jResultAdapter(GraphSourcePort):
    """
    Graph source backed by already-fetched Neo4j records.

    Node records: {identity, labels, properties}
    Relationship records: {identity, start, end, type, properties}
    """

    def __init__(self, nodes: List[Dict[str, Any]], relationships: List[Dict[str, Any]]):
        """
        Initialize the adapter.

        Args:
            nodes: Neo4j node records
            relationships: Neo4j relationship records
        """
        self._nodes = nodes
        self._relationships = relationships

    def load(self) -> GraphData:
        graph_nodes: List[GraphNode] = []
        for record in self._nodes:
            try:
                graph_nodes.append(GraphNode(
                    id=str(record["identity"]),
                    labels=list(record.get("labels") or []),
                    properties=dict(record.get("properties") or {}),
                ))
            except KeyError as e:
                raise GraphDataError(f"Neo4j node record missing {e}: {record!r}") from e

        graph_edges: List[GraphEdge] = []
        for record in self._relationships:
            try:
                graph_edges.append(GraphEdge(
                    id=str(record["identity"]),
                    type=str(record["type"]),
                    source=str(record["start"]),
                    target=str(record["end"]),
                    properties=dict(record.get("properties") or {}),
                    directed=True,
                ))
            except KeyError as e:
                raise GraphDataError(f"Neo4j relationship record missing {e}: {record!r}") from e

        logger.debug("Loaded %d nodes and %d relationships from Neo4j result",
                     len(graph_nodes), len(graph_edges))

        return GraphData(
            nodes=graph_nodes,
            edges=graph_edges,
            metadata={
                "node_count": len(graph_nodes),
                "edge_count": len(graph_edges),
            },
        )
