"""
Graph Statistics Service.

Counts and label/type histograms for the stats badge. Independent of
layout, so it is available before any layout has run.
"""

from typing import Optional, Sequence

from ..domain.models import GraphData, GraphNode, GraphEdge, GraphStats


def calculate_graph_stats(
    data: GraphData,
    visible_nodes: Optional[Sequence[GraphNode]] = None,
    visible_edges: Optional[Sequence[GraphEdge]] = None,
) -> GraphStats:
    """
    Calculate graph statistics.

    Args:
        data: The full graph
        visible_nodes: Nodes that survived filtering (defaults to all)
        visible_edges: Edges that survived filtering (defaults to all)

    Returns:
        GraphStats; a node counts once under each of its labels
    """
    nodes_by_label = {}
    for node in data.nodes:
        for label in node.labels:
            nodes_by_label[label] = nodes_by_label.get(label, 0) + 1

    edges_by_type = {}
    for edge in data.edges:
        edges_by_type[edge.type] = edges_by_type.get(edge.type, 0) + 1

    return GraphStats(
        total_nodes=len(data.nodes),
        total_edges=len(data.edges),
        visible_nodes=len(data.nodes if visible_nodes is None else visible_nodes),
        visible_edges=len(data.edges if visible_edges is None else visible_edges),
        nodes_by_label=nodes_by_label,
        edges_by_type=edges_by_type,
    )
