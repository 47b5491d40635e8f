"""
Viewport helpers for the rendering layer.

Resolves edges to drawable segments and culls positioned elements to
what is on screen.
"""

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Set

from ..domain.models import GraphEdge, PositionedNode, PositionedEdge

# Extra margin around the viewport when culling, so nodes don't pop at the edge
CULL_MARGIN = 100.0


@dataclass(frozen=True)
class BoundingBox:
    min_x: float = 0.0
    min_y: float = 0.0
    max_x: float = 0.0
    max_y: float = 0.0

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


def resolve_edges(nodes: Sequence[PositionedNode], edges: Iterable[GraphEdge]) -> List[PositionedEdge]:
    """Drawable edges; edges with an endpoint that has no position are dropped."""
    positions = {n.id: (n.x, n.y) for n in nodes}
    resolved = []
    for edge in edges:
        source = positions.get(edge.source)
        target = positions.get(edge.target)
        if source is None or target is None:
            continue
        resolved.append(PositionedEdge(
            edge=edge,
            x1=source[0], y1=source[1],
            x2=target[0], y2=target[1],
        ))
    return resolved


def calculate_bounding_box(nodes: Sequence[PositionedNode]) -> BoundingBox:
    """Bounding box of positioned nodes; all zeros when empty."""
    if not nodes:
        return BoundingBox()
    return BoundingBox(
        min_x=min(n.x for n in nodes),
        min_y=min(n.y for n in nodes),
        max_x=max(n.x for n in nodes),
        max_y=max(n.y for n in nodes),
    )


def get_visible_nodes(
    nodes: Sequence[PositionedNode],
    viewport_x: float,
    viewport_y: float,
    viewport_width: float,
    viewport_height: float,
    scale: float = 1.0,
) -> List[PositionedNode]:
    """Nodes whose scaled position falls within the viewport plus CULL_MARGIN."""
    visible = []
    for node in nodes:
        x = node.x * scale
        y = node.y * scale
        if (viewport_x - CULL_MARGIN <= x <= viewport_x + viewport_width + CULL_MARGIN and
                viewport_y - CULL_MARGIN <= y <= viewport_y + viewport_height + CULL_MARGIN):
            visible.append(node)
    return visible


def get_visible_edges(edges: Iterable[GraphEdge], visible_node_ids: Set[str]) -> List[GraphEdge]:
    """Edges with both endpoints visible."""
    return [e for e in edges if e.source in visible_node_ids and e.target in visible_node_ids]
