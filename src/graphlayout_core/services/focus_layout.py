"""
Focus Layout Service.

Re-lays the graph around one selected node:
1. The focused node is pinned at the viewport center
2. Direct neighbors are pinned on a ring (FIRST_RING_RADIUS)
3. Second-degree neighbors are pinned on an outer ring (SECOND_RING_RADIUS);
   both rings shrink by one factor when the padded viewport is too small
4. Everything else stays free; nodes with no prior position are
   scattered at BACKGROUND_RADIUS_MIN-MAX from the center
5. A short settle pass resolves overlaps while the pins hold
6. All pins are released before the result is returned

If the focused node is not in the graph the current layout is returned
unchanged.
"""

import logging
import math
import random
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from ..domain.enums import LayoutStatus
from ..domain.models import (
    GraphNode,
    GraphEdge,
    LayoutParams,
    LayoutProgress,
    LayoutOutcome,
    PositionedNode,
)
from .graph_filter import get_node_neighbors
from .scheduler import CancellationToken, LayoutTask, ProgressCallback, run_layout_task
from .simulation import ForceSimulation, InitialLayout, positions_from

logger = logging.getLogger(__name__)

FIRST_RING_RADIUS = 180.0
SECOND_RING_RADIUS = 320.0
BACKGROUND_RADIUS_MIN = 450.0
BACKGROUND_RADIUS_MAX = 550.0

# Progress reported after each placement stage; the settle pass fills the rest
PLACEMENT_PROGRESS = (20, 40, 60)


@dataclass
class FocusArrangement:
    """Which nodes went where during focus placement."""
    focused_id: str
    first_ring: List[str] = field(default_factory=list)
    second_ring: List[str] = field(default_factory=list)
    background: List[str] = field(default_factory=list)
    scattered: List[str] = field(default_factory=list)   # Background nodes given a random spot
    ring_scale: float = 1.0                               # Ring radii multiplier for small viewports


def _ring_positions(count: int, cx: float, cy: float, radius: float) -> List[Tuple[float, float]]:
    return [
        (cx + radius * math.cos(2 * math.pi * k / count),
         cy + radius * math.sin(2 * math.pi * k / count))
        for k in range(count)
    ]


def ring_scale(sim: ForceSimulation, outermost_radius: float) -> float:
    """Uniform factor that fits a ring of outermost_radius inside the padded viewport."""
    padding = sim.params.padding
    extent = max(0.0, min(sim.center_x - padding, sim.center_y - padding))
    if outermost_radius <= extent:
        return 1.0
    return extent / outermost_radius


def _placement_stages(
    sim: ForceSimulation,
    arrangement: FocusArrangement,
    edges: Sequence[GraphEdge],
    node_ids: Sequence[str],
    prior_ids: set,
    rng: random.Random,
) -> Iterator[int]:
    """Pin and place nodes stage by stage, yielding the progress after each."""
    cx, cy = sim.center_x, sim.center_y
    focused_id = arrangement.focused_id

    arrangement.first_ring = [n for n in get_node_neighbors(focused_id, edges) if sim.has_node(n)]
    first = set(arrangement.first_ring)
    second: dict = {}
    for neighbor_id in arrangement.first_ring:
        for candidate in get_node_neighbors(neighbor_id, edges):
            if candidate != focused_id and candidate not in first and sim.has_node(candidate):
                second[candidate] = None
    arrangement.second_ring = list(second)

    # Both rings shrink by the same factor so they stay concentric and distinct
    outermost = SECOND_RING_RADIUS if arrangement.second_ring else FIRST_RING_RADIUS
    arrangement.ring_scale = ring_scale(sim, outermost)

    sim.pin(focused_id, cx, cy)
    yield PLACEMENT_PROGRESS[0]

    first_radius = FIRST_RING_RADIUS * arrangement.ring_scale
    for node_id, (x, y) in zip(arrangement.first_ring,
                               _ring_positions(len(arrangement.first_ring), cx, cy, first_radius)):
        sim.pin(node_id, x, y)
    yield PLACEMENT_PROGRESS[1]

    second_radius = SECOND_RING_RADIUS * arrangement.ring_scale
    for node_id, (x, y) in zip(arrangement.second_ring,
                               _ring_positions(len(arrangement.second_ring), cx, cy, second_radius)):
        sim.pin(node_id, x, y)

    placed = first | set(second) | {focused_id}
    for node_id in node_ids:
        if node_id in placed:
            continue
        arrangement.background.append(node_id)
        sim.unpin(node_id)
        if node_id not in prior_ids:
            angle = rng.random() * 2 * math.pi
            dist = BACKGROUND_RADIUS_MIN + rng.random() * (BACKGROUND_RADIUS_MAX - BACKGROUND_RADIUS_MIN)
            sim.set_position(node_id, *sim.clamp(cx + dist * math.cos(angle), cy + dist * math.sin(angle)))
            arrangement.scattered.append(node_id)
    yield PLACEMENT_PROGRESS[2]


def _fallback_layout(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    width: float,
    height: float,
    current_layout: Optional[InitialLayout],
) -> List[PositionedNode]:
    """Layout returned when the focus target is missing."""
    if current_layout is not None and not isinstance(current_layout, Mapping):
        return list(current_layout)
    # No usable prior layout: seeded positions so every node is drawable
    return ForceSimulation(nodes, edges, width, height, initial=current_layout).result()


class FocusLayoutTask:
    """
    Chunked focus layout. Iterating yields LayoutProgress events:
    20/40/60 for the placement stages, then 60-100 for the settle pass.
    """

    def __init__(
        self,
        nodes: Sequence[GraphNode],
        edges: Sequence[GraphEdge],
        focused_id: str,
        width: float,
        height: float,
        current_layout: Optional[InitialLayout] = None,
        params: Optional[LayoutParams] = None,
        token: Optional[CancellationToken] = None,
        progress_callback: Optional[ProgressCallback] = None,
        yield_hook: Optional[Callable[[], None]] = None,
        generation: int = 0,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the task.

        Args:
            nodes: Filtered nodes
            edges: Filtered edges
            focused_id: Node to center on
            width: Viewport width
            height: Viewport height
            current_layout: Positions to start from (usually the base layout)
            params: Settle-pass tuning (defaults to LayoutParams.settle())
            token: Cancellation token checked between batches
            progress_callback: Called with each progress event
            yield_hook: Called between settle batches
            generation: Request token carried through to the outcome
            rng: Random source for background scatter
        """
        self.focused_id = focused_id
        self.token = token or CancellationToken()
        self.generation = generation
        self.arrangement: Optional[FocusArrangement] = None
        self.outcome: Optional[LayoutOutcome] = None

        self._nodes = nodes
        self._edges = edges
        self._width = width
        self._height = height
        self._current_layout = current_layout
        self._params = params or LayoutParams.settle()
        self._progress_callback = progress_callback
        self._yield_hook = yield_hook
        self._rng = rng or random.Random()
        self._started = False

        # Fail fast on bad arguments, before any iteration
        self._sim = ForceSimulation(nodes, edges, width, height, self._params, current_layout)

    def __iter__(self) -> Iterator[LayoutProgress]:
        if self._started:
            raise RuntimeError("FocusLayoutTask can only be run once")
        self._started = True
        return self._run()

    def _emit(self, percent: int) -> LayoutProgress:
        event = LayoutProgress(percent=percent, iteration=0, total=0)
        if self._progress_callback:
            self._progress_callback(event)
        return event

    def _run(self) -> Iterator[LayoutProgress]:
        if self.token.cancelled:
            self.outcome = LayoutOutcome.cancelled(self.generation)
            return

        sim = self._sim
        if not sim.has_node(self.focused_id):
            logger.debug("Focus target %r not in graph; keeping current layout", self.focused_id)
            self.outcome = LayoutOutcome(
                status=LayoutStatus.COMPLETED,
                nodes=_fallback_layout(self._nodes, self._edges, self._width,
                                       self._height, self._current_layout),
                generation=self.generation,
            )
            yield self._emit(100)
            return

        self.arrangement = FocusArrangement(focused_id=self.focused_id)
        stages = _placement_stages(
            sim,
            self.arrangement,
            self._edges,
            [n.id for n in self._nodes],
            set(positions_from(self._current_layout)),
            self._rng,
        )
        for percent in stages:
            yield self._emit(percent)

        settle = LayoutTask(
            sim,
            token=self.token,
            progress_callback=self._progress_callback,
            yield_hook=self._yield_hook,
            generation=self.generation,
            progress_offset=PLACEMENT_PROGRESS[-1],
            progress_span=100 - PLACEMENT_PROGRESS[-1],
        )
        yield from settle
        self.outcome = settle.outcome

        logger.debug(
            "Focus layout on %r: %d first ring, %d second ring, %d background (%s)",
            self.focused_id, len(self.arrangement.first_ring),
            len(self.arrangement.second_ring), len(self.arrangement.background),
            self.outcome.status.value,
        )


def arrange_focus(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    focused_id: str,
    width: float,
    height: float,
    current_layout: Optional[InitialLayout] = None,
    params: Optional[LayoutParams] = None,
    rng: Optional[random.Random] = None,
) -> Tuple[Optional[ForceSimulation], Optional[FocusArrangement]]:
    """
    Run the placement stages only, leaving the pins active.

    Returns:
        (simulation, arrangement), or (None, None) if focused_id is absent
    """
    sim = ForceSimulation(nodes, edges, width, height, params or LayoutParams.settle(), current_layout)
    if not sim.has_node(focused_id):
        return None, None

    arrangement = FocusArrangement(focused_id=focused_id)
    for _ in _placement_stages(sim, arrangement, edges, [n.id for n in nodes],
                               set(positions_from(current_layout)), rng or random.Random()):
        pass
    return sim, arrangement


def apply_focused_layout(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    focused_id: str,
    width: float,
    height: float,
    current_layout: Optional[InitialLayout] = None,
    params: Optional[LayoutParams] = None,
    rng: Optional[random.Random] = None,
) -> List[PositionedNode]:
    """
    Compute a focused layout synchronously.

    Returns:
        New positioned nodes, or the current layout if focused_id is absent
    """
    sim, _ = arrange_focus(nodes, edges, focused_id, width, height, current_layout, params, rng)
    if sim is None:
        return _fallback_layout(nodes, edges, width, height, current_layout)
    sim.run()
    sim.unpin_all()
    return sim.result()


def apply_focused_layout_chunked(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    focused_id: str,
    width: float,
    height: float,
    current_layout: Optional[InitialLayout] = None,
    params: Optional[LayoutParams] = None,
    progress_callback: Optional[ProgressCallback] = None,
    token: Optional[CancellationToken] = None,
    generation: int = 0,
    rng: Optional[random.Random] = None,
    yield_hook: Optional[Callable[[], None]] = None,
) -> LayoutOutcome:
    """Chunked focus layout; see FocusLayoutTask."""
    task = FocusLayoutTask(
        nodes, edges, focused_id, width, height,
        current_layout=current_layout,
        params=params,
        token=token,
        progress_callback=progress_callback,
        yield_hook=yield_hook,
        generation=generation,
        rng=rng,
    )
    return run_layout_task(task)
