"""
Force Simulation Service.

Fruchterman-Reingold style relaxation:
1. Pairwise repulsion, with an extra linear push inside min_node_distance
2. Springs along edges toward ideal_edge_length
3. Weak pull toward the viewport center (weaker for larger graphs)
4. Velocity damping and a linear cooling schedule

All mutable state lives in a per-run arena of NodeLayoutState records
keyed by node id. The GraphNode/GraphEdge inputs are never modified.
"""

import logging
import math
import random
from dataclasses import replace
from collections.abc import Mapping
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ..domain.models import (
    GraphNode,
    GraphEdge,
    LayoutParams,
    NodeLayoutState,
    PositionedNode,
)

logger = logging.getLogger(__name__)

Position = Tuple[float, float]
InitialLayout = Union[Mapping[str, Position], Sequence[PositionedNode]]

# Above this node count the iteration budget is capped
HUGE_GRAPH_NODES = 500
HUGE_GRAPH_MAX_ITERATIONS = 50


def positions_from(initial: Optional[InitialLayout]) -> Dict[str, Position]:
    """Normalize a prior layout (positioned nodes or an id->(x, y) map) to a dict."""
    if initial is None:
        return {}
    if isinstance(initial, Mapping):
        items = initial.items()
    else:
        items = ((p.id, (p.x, p.y)) for p in initial)

    positions: Dict[str, Position] = {}
    for node_id, xy in items:
        x, y = xy
        # Non-finite positions are treated as unset
        if x is None or y is None or not (math.isfinite(x) and math.isfinite(y)):
            continue
        positions[node_id] = (float(x), float(y))
    return positions


def adjusted_iterations(node_count: int, iterations: int) -> int:
    """Iteration budget, capped for very large graphs."""
    if node_count > HUGE_GRAPH_NODES:
        return min(iterations, HUGE_GRAPH_MAX_ITERATIONS)
    return iterations


def check_viewport(width: float, height: float, padding: float = 0.0) -> None:
    """
    Raise ValueError unless the padded viewport is non-empty.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Viewport must be positive, got {width}x{height}")
    if width < 2 * padding or height < 2 * padding:
        raise ValueError(
            f"Viewport {width}x{height} is smaller than twice the padding ({padding})"
        )


class ForceSimulation:
    """
    One layout run over a private arena of node states.

    Usage:
        sim = ForceSimulation(nodes, edges, 800, 600)
        for i in range(sim.params.iterations):
            sim.step(i, sim.params.iterations)
        positioned = sim.result()
    """

    def __init__(
        self,
        nodes: Sequence[GraphNode],
        edges: Sequence[GraphEdge],
        width: float,
        height: float,
        params: Optional[LayoutParams] = None,
        initial: Optional[InitialLayout] = None,
    ):
        """
        Initialize the simulation.

        Args:
            nodes: Nodes to lay out (duplicate ids keep the first)
            edges: Edges; those with an endpoint outside nodes are skipped
            width: Viewport width
            height: Viewport height
            params: Tuning (defaults to LayoutParams())
            initial: Starting positions; nodes without one are seeded on a circle.
                All starting positions are clamped into the padded viewport

        Raises:
            LayoutParamsError: If params are invalid
            ValueError: If the viewport is too small for the padding
        """
        self.params = (params or LayoutParams()).validate()
        check_viewport(width, height, self.params.padding)

        self.width = float(width)
        self.height = float(height)
        self.center_x = self.width / 2
        self.center_y = self.height / 2

        self._nodes: List[GraphNode] = []
        self._index: Dict[str, int] = {}
        for node in nodes:
            if node.id not in self._index:
                self._index[node.id] = len(self._nodes)
                self._nodes.append(node)

        self._states: List[NodeLayoutState] = self._seed_states(positions_from(initial))

        # Resolve edges to index pairs once; dangling edges are dropped here
        self._edge_pairs: List[Tuple[int, int]] = []
        skipped = 0
        for edge in edges:
            src = self._index.get(edge.source)
            dst = self._index.get(edge.target)
            if src is None or dst is None:
                skipped += 1
                continue
            if src != dst:
                self._edge_pairs.append((src, dst))
        if skipped:
            logger.debug("Skipped %d edges with unresolved endpoints", skipped)

    def _seed_states(self, positions: Dict[str, Position]) -> List[NodeLayoutState]:
        count = len(self._nodes)
        radius = min(self.width, self.height) * 0.3
        states = []
        for i, node in enumerate(self._nodes):
            if node.id in positions:
                x, y = positions[node.id]
            else:
                angle = (2 * math.pi * i) / count
                x = self.center_x + radius * math.cos(angle)
                y = self.center_y + radius * math.sin(angle)
            x, y = self.clamp(x, y)
            states.append(NodeLayoutState(x=x, y=y))
        return states

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        """Number of edges that resolved to nodes in this run."""
        return len(self._edge_pairs)

    @property
    def iteration_budget(self) -> int:
        """Iterations a full run performs (capped for very large graphs)."""
        return adjusted_iterations(len(self._nodes), self.params.iterations)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._index

    def state(self, node_id: str) -> NodeLayoutState:
        """Snapshot of a node's layout state."""
        return replace(self._states[self._index[node_id]])

    def positions(self) -> Dict[str, Position]:
        return {n.id: (s.x, s.y) for n, s in zip(self._nodes, self._states)}

    # -------------------------------------------------------------------------
    # Pins
    # -------------------------------------------------------------------------

    def clamp(self, x: float, y: float) -> Position:
        """Clamp a point into the padded viewport."""
        padding = self.params.padding
        return (
            max(padding, min(self.width - padding, x)),
            max(padding, min(self.height - padding, y)),
        )

    def pin(self, node_id: str, x: float, y: float) -> bool:
        """
        Pin a node. The pin is clamped into the padded viewport.

        Returns:
            False if the node is not part of this run
        """
        index = self._index.get(node_id)
        if index is None:
            return False
        state = self._states[index]
        state.fx, state.fy = self.clamp(x, y)
        state.x, state.y = state.fx, state.fy
        return True

    def unpin(self, node_id: str) -> None:
        index = self._index.get(node_id)
        if index is not None:
            self._states[index].unpin()

    def unpin_all(self) -> None:
        for state in self._states:
            state.unpin()

    def set_position(self, node_id: str, x: float, y: float) -> None:
        state = self._states[self._index[node_id]]
        state.x, state.y = x, y

    # -------------------------------------------------------------------------
    # Simulation
    # -------------------------------------------------------------------------

    def step(self, iteration: int, total: int) -> None:
        """
        Run one iteration.

        Args:
            iteration: Zero-based iteration index
            total: Iteration budget (drives the cooling schedule)
        """
        p = self.params
        states = self._states
        count = len(states)
        if count == 0:
            return

        cooling = 1 - iteration / total
        temp = cooling * 0.5

        for s in states:
            s.vx *= p.friction
            s.vy *= p.friction

        # 1. Repulsion between all pairs (O(n^2))
        repulsion = p.repulsion_strength * cooling
        min_dist = p.min_node_distance
        for i in range(count):
            a = states[i]
            for j in range(i + 1, count):
                b = states[j]
                dx = b.x - a.x
                dy = b.y - a.y
                dist_sq = dx * dx + dy * dy
                distance = math.sqrt(dist_sq)

                if distance == 0:
                    # Coincident nodes: separate along a fixed per-pair direction
                    angle = (2 * math.pi * j) / count
                    ux, uy = math.cos(angle), math.sin(angle)
                    distance = 1.0
                else:
                    ux, uy = dx / distance, dy / distance
                    distance = max(distance, 1.0)

                force = repulsion / max(dist_sq, 100.0)
                if distance < min_dist:
                    force += (min_dist - distance) * 2

                fx = ux * force
                fy = uy * force
                a.vx -= fx
                a.vy -= fy
                b.vx += fx
                b.vy += fy

        # 2. Springs along edges toward the ideal length
        attraction = p.attraction_strength * cooling
        ideal = p.ideal_edge_length
        for src, dst in self._edge_pairs:
            s = states[src]
            t = states[dst]
            dx = t.x - s.x
            dy = t.y - s.y
            distance = math.sqrt(dx * dx + dy * dy) or 1.0

            force = (distance - ideal) * attraction
            fx = (dx / distance) * force
            fy = (dy / distance) * force
            s.vx += fx
            s.vy += fy
            t.vx -= fx
            t.vy -= fy

        # 3. Center gravity, weaker for larger graphs
        center_force = p.center_strength * cooling * max(0.3, 1 - count / 100)
        for s in states:
            s.vx += (self.center_x - s.x) * center_force
            s.vy += (self.center_y - s.y) * center_force

        # 4. Integrate
        for s in states:
            if s.pinned:
                s.x = s.fx
                s.y = s.fy
                continue
            s.x, s.y = self.clamp(s.x + s.vx * temp, s.y + s.vy * temp)

    def run(self) -> None:
        """Run the full iteration budget synchronously."""
        total = self.iteration_budget
        for i in range(total):
            self.step(i, total)

    def result(self) -> List[PositionedNode]:
        """Positioned nodes in input order."""
        return [PositionedNode(node=n, x=s.x, y=s.y) for n, s in zip(self._nodes, self._states)]


def apply_force_layout(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    width: float,
    height: float,
    params: Optional[LayoutParams] = None,
    initial: Optional[InitialLayout] = None,
) -> List[PositionedNode]:
    """
    Compute a force-directed layout synchronously.

    Args:
        nodes: Nodes to lay out
        edges: Edges (dangling ones are ignored)
        width: Viewport width
        height: Viewport height
        params: Tuning (defaults to LayoutParams())
        initial: Optional starting positions

    Returns:
        New list of PositionedNode in input order
    """
    sim = ForceSimulation(nodes, edges, width, height, params, initial)
    sim.run()
    logger.debug("Force layout: %d nodes, %d edges, %d iterations",
                 sim.node_count, sim.edge_count, sim.iteration_budget)
    return sim.result()


def initialize_circle_layout(
    nodes: Sequence[GraphNode],
    width: float,
    height: float,
) -> Dict[str, Position]:
    """Evenly spaced positions on a circle of radius 0.35 x min(width, height)."""
    check_viewport(width, height)
    radius = min(width, height) * 0.35
    center_x, center_y = width / 2, height / 2
    count = len(nodes)
    positions = {}
    for i, node in enumerate(nodes):
        angle = (2 * math.pi * i) / count
        positions[node.id] = (
            center_x + radius * math.cos(angle),
            center_y + radius * math.sin(angle),
        )
    return positions


def initialize_random_layout(
    nodes: Sequence[GraphNode],
    width: float,
    height: float,
    rng: Optional[random.Random] = None,
) -> Dict[str, Position]:
    """Uniformly random positions inside the viewport."""
    check_viewport(width, height)
    rng = rng or random.Random()
    return {n.id: (rng.random() * width, rng.random() * height) for n in nodes}


def reset_layout(states: Mapping[str, NodeLayoutState]) -> Dict[str, NodeLayoutState]:
    """Copies of the given states with all pins cleared."""
    return {node_id: replace(s, fx=None, fy=None) for node_id, s in states.items()}
