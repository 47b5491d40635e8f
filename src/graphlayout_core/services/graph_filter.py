"""
Graph Filter Service.

Caps a graph to a renderable size before layout runs, and provides the
neighbor/label/search queries the presentation layer needs.

Edges are ranked by the combined degree of their endpoints so the most
structurally significant links survive the cap.
"""

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from ..domain.models import GraphNode, GraphEdge

logger = logging.getLogger(__name__)

# Property names tried, in order, when picking a display label
LABEL_PROPERTIES = ("name", "title", "label", "id")


def node_degrees(edges: Iterable[GraphEdge]) -> Dict[str, int]:
    """Count incident edges per node id (either direction)."""
    degrees: Dict[str, int] = {}
    for edge in edges:
        degrees[edge.source] = degrees.get(edge.source, 0) + 1
        degrees[edge.target] = degrees.get(edge.target, 0) + 1
    return degrees


def filter_graph(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    max_nodes: int,
    max_edges: int,
) -> Tuple[List[GraphNode], List[GraphEdge]]:
    """
    Cap nodes and edges to the configured maxima.

    Keeps the first max_nodes nodes in input order, drops edges whose
    endpoints fell outside that subset, then keeps the max_edges edges
    with the highest combined endpoint degree. Ties keep input order.

    Args:
        nodes: Full node list
        edges: Full edge list
        max_nodes: Maximum nodes to keep
        max_edges: Maximum edges to keep

    Returns:
        (nodes, edges) - new lists; inputs are not modified
    """
    if max_nodes < 0 or max_edges < 0:
        raise ValueError(f"Limits must be >= 0, got max_nodes={max_nodes}, max_edges={max_edges}")

    kept_nodes = list(nodes[:max_nodes])
    node_ids = {n.id for n in kept_nodes}

    kept_edges = [e for e in edges if e.source in node_ids and e.target in node_ids]

    if len(kept_edges) > max_edges:
        degrees = node_degrees(kept_edges)
        # sorted() is stable (also with reverse=True), so ties keep input order
        kept_edges = sorted(
            kept_edges,
            key=lambda e: degrees[e.source] + degrees[e.target],
            reverse=True,
        )[:max_edges]

    dropped_nodes = len(nodes) - len(kept_nodes)
    dropped_edges = len(edges) - len(kept_edges)
    if dropped_nodes or dropped_edges:
        logger.debug("Filtered graph: dropped %d nodes and %d edges", dropped_nodes, dropped_edges)

    return kept_nodes, kept_edges


def get_node_neighbors(node_id: str, edges: Iterable[GraphEdge]) -> List[str]:
    """Ids of nodes connected to node_id in either direction, in edge order."""
    neighbors: Dict[str, None] = {}
    for edge in edges:
        if edge.source == node_id:
            neighbors[edge.target] = None
        if edge.target == node_id:
            neighbors[edge.source] = None
    # A self-loop is not a neighbor relationship
    neighbors.pop(node_id, None)
    return list(neighbors)


def get_node_edges(node_id: str, edges: Iterable[GraphEdge]) -> List[GraphEdge]:
    """Edges touching node_id."""
    return [e for e in edges if e.source == node_id or e.target == node_id]


def filter_nodes_by_label(nodes: Sequence[GraphNode], labels: Iterable[str]) -> List[GraphNode]:
    """Nodes carrying any of the given labels. No labels means no filtering."""
    wanted = set(labels)
    if not wanted:
        return list(nodes)
    return [n for n in nodes if any(label in wanted for label in n.labels)]


def filter_edges_by_type(edges: Sequence[GraphEdge], types: Iterable[str]) -> List[GraphEdge]:
    """Edges of any of the given types. No types means no filtering."""
    wanted = set(types)
    if not wanted:
        return list(edges)
    return [e for e in edges if e.type in wanted]


def get_node_label(node: GraphNode) -> str:
    """Display label: a naming property, else the primary label, else the id."""
    for prop in LABEL_PROPERTIES:
        value = node.properties.get(prop)
        if value:
            return str(value)
    return node.primary_label or node.id


def search_nodes(nodes: Sequence[GraphNode], query: str) -> List[GraphNode]:
    """Case-insensitive search over labels, display label and property values."""
    needle = query.lower()
    results = []
    for node in nodes:
        if any(needle in label.lower() for label in node.labels):
            results.append(node)
        elif needle in get_node_label(node).lower():
            results.append(node)
        elif any(needle in str(value).lower() for value in node.properties.values()):
            results.append(node)
    return results
