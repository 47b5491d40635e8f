"""
Graph Layout ViewModel.

Manages:
- Graph data and the filtered (renderable) subset
- Display settings (mode, viewport, caps, physics on/off)
- The cached base layout and the focused layout
- Request generations, so only the newest layout request is applied

The renderer reads display_layout / display_edges and focuses purely on
drawing. Layouts are stored as tuples and swapped, never mutated.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional, List, Tuple, Set, Any

from PyQt6.QtCore import pyqtSignal

from .base import BaseViewModel
from graphlayout_core.domain.enums import DisplayMode, LayoutKind
from graphlayout_core.domain.models import (
    GraphData,
    GraphNode,
    GraphEdge,
    GraphStats,
    LayoutParams,
    LayoutOutcome,
    PositionedNode,
    PositionedEdge,
)
from graphlayout_core.services.graph_filter import filter_graph, get_node_neighbors
from graphlayout_core.services.simulation import ForceSimulation, check_viewport
from graphlayout_core.services.scheduler import LayoutTask
from graphlayout_core.services.focus_layout import FocusLayoutTask
from graphlayout_core.services.stats import calculate_graph_stats
from graphlayout_core.services.viewport import resolve_edges

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutSettings:
    """Graph display settings."""
    mode: DisplayMode = DisplayMode.DETAILED
    width: float = 800.0
    height: float = 450.0
    max_visible_nodes: int = 100
    max_visible_edges: int = 150
    enable_physics: bool = True

    @classmethod
    def for_mode(cls, mode: DisplayMode, width: Optional[float] = None) -> "LayoutSettings":
        """Default viewport for a display mode."""
        if mode == DisplayMode.COMPACT:
            return cls(mode=mode, width=width or 400.0, height=250.0)
        return cls(mode=mode, width=width or 800.0, height=450.0)

    @property
    def layout_params(self) -> LayoutParams:
        return LayoutParams.for_mode(self.mode)


class GraphLayoutVM(BaseViewModel):
    """
    ViewModel for the force-directed graph view.

    Signals:
        layout_changed: Emitted when the displayed positions change
        focus_changed(str): Emitted when the focused node changes ("" = none)
        stats_changed: Emitted when graph statistics change
        layout_failed(str): Emitted when a layout run raised
        (progress_changed and busy_changed come from BaseViewModel)

    State:
        data: Full graph as loaded
        visible_nodes / visible_edges: Filtered subset that gets laid out
        base_layout: Cached base layout (empty tuple until computed)
        focused_layout: Layout around the focused node, or None
        display_layout: What the renderer should draw
        focused_node_id: Focused node, or None
        generation: Id of the newest layout request
    """

    # Signals
    layout_changed = pyqtSignal()
    focus_changed = pyqtSignal(str)  # node_id or ""
    stats_changed = pyqtSignal()
    layout_failed = pyqtSignal(str)  # error message

    def __init__(self, settings: Optional[LayoutSettings] = None, threaded: bool = True):
        """
        Initialize the ViewModel.

        Args:
            settings: Display settings (defaults to LayoutSettings())
            threaded: Run layouts on a QThread; False runs them inline
        """
        super().__init__(threaded=threaded)

        # State
        self._settings = settings or LayoutSettings()
        check_viewport(self._settings.width, self._settings.height,
                       self._settings.layout_params.padding)
        self._data = GraphData()
        self._nodes: List[GraphNode] = []
        self._edges: List[GraphEdge] = []
        self._stats = GraphStats()

        self._base_layout: Tuple[PositionedNode, ...] = ()
        self._focused_layout: Optional[Tuple[PositionedNode, ...]] = None
        self._focused_node_id: Optional[str] = None

        # Request tracking
        self._generation = 0
        self._pending_kind: Optional[LayoutKind] = None
        self._pending_focus_id: Optional[str] = None

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def settings(self) -> LayoutSettings:
        return self._settings

    @property
    def data(self) -> GraphData:
        return self._data

    @property
    def visible_nodes(self) -> List[GraphNode]:
        return list(self._nodes)

    @property
    def visible_edges(self) -> List[GraphEdge]:
        return list(self._edges)

    @property
    def stats(self) -> GraphStats:
        return self._stats

    @property
    def base_layout(self) -> Tuple[PositionedNode, ...]:
        return self._base_layout

    @property
    def focused_layout(self) -> Optional[Tuple[PositionedNode, ...]]:
        return self._focused_layout

    @property
    def focused_node_id(self) -> Optional[str]:
        return self._focused_node_id

    @property
    def display_layout(self) -> Tuple[PositionedNode, ...]:
        """Focused layout while focused, otherwise the base layout."""
        if self._focused_node_id is not None and self._focused_layout is not None:
            return self._focused_layout
        return self._base_layout

    @property
    def display_edges(self) -> List[PositionedEdge]:
        return resolve_edges(self.display_layout, self._edges)

    @property
    def focus_neighbor_ids(self) -> Set[str]:
        """Direct neighbors of the focused node (for highlighting)."""
        if self._focused_node_id is None:
            return set()
        return set(get_node_neighbors(self._focused_node_id, self._edges))

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_layouting(self) -> bool:
        return self.is_busy

    # -------------------------------------------------------------------------
    # Data Commands
    # -------------------------------------------------------------------------

    def set_graph(self, data: GraphData) -> None:
        """
        Load new graph data and start a base layout.

        Args:
            data: The full graph; it is filtered to the configured caps
        """
        self._data = data
        self._refilter()
        self._reset_layouts()
        self.request_base_layout()

    def update_settings(self, **changes: Any) -> None:
        """
        Change display settings and re-layout if anything changed.

        Args:
            **changes: LayoutSettings fields to replace
        """
        settings = replace(self._settings, **changes)
        if settings == self._settings:
            return
        check_viewport(settings.width, settings.height, settings.layout_params.padding)

        self._settings = settings
        self._refilter()
        self._reset_layouts()
        self.request_base_layout()

    def set_mode(self, mode: DisplayMode) -> None:
        """Switch between compact and detailed display."""
        self.update_settings(mode=mode)

    def _refilter(self) -> None:
        self._nodes, self._edges = filter_graph(
            self._data.nodes,
            self._data.edges,
            self._settings.max_visible_nodes,
            self._settings.max_visible_edges,
        )
        self._stats = calculate_graph_stats(self._data, self._nodes, self._edges)
        self.stats_changed.emit()

    def _reset_layouts(self) -> None:
        had_focus = self._focused_node_id is not None
        self._base_layout = ()
        self._focused_layout = None
        self._focused_node_id = None
        if had_focus:
            self.focus_changed.emit("")

    # -------------------------------------------------------------------------
    # Layout Commands
    # -------------------------------------------------------------------------

    def request_base_layout(self) -> int:
        """
        Start a base layout run, superseding any in-flight request.

        Returns:
            The generation of the new request
        """
        generation = self._invalidate()
        settings = self._settings

        if not settings.enable_physics:
            # Seeded circle placement only
            sim = ForceSimulation(self._nodes, self._edges, settings.width, settings.height,
                                  settings.layout_params)
            self._base_layout = tuple(sim.result())
            self._set_busy(False)
            self.layout_changed.emit()
            return generation

        sim = ForceSimulation(self._nodes, self._edges, settings.width, settings.height,
                              settings.layout_params)
        task = LayoutTask(sim, generation=generation)
        self._start(task, LayoutKind.BASE)
        return generation

    def focus_node(self, node_id: str) -> int:
        """
        Focus a node; focusing the focused node again clears focus.

        Args:
            node_id: Node to center on

        Returns:
            The generation of the request (0 if focus was cleared)
        """
        if node_id == self._focused_node_id:
            self.clear_focus()
            return 0
        if not any(n.id == node_id for n in self._nodes):
            logger.debug("Ignoring focus on unknown node %r", node_id)
            return 0

        generation = self._invalidate()
        settings = self._settings
        task = FocusLayoutTask(
            self._nodes,
            self._edges,
            node_id,
            settings.width,
            settings.height,
            current_layout=self._base_layout or None,
            generation=generation,
        )
        self._pending_focus_id = node_id
        self._start(task, LayoutKind.FOCUS)
        return generation

    def clear_focus(self) -> None:
        """Drop the focused layout and show the cached base layout again."""
        if self._pending_kind == LayoutKind.FOCUS:
            self._invalidate()
            self._set_busy(False)

        if self._focused_node_id is not None or self._focused_layout is not None:
            self._focused_node_id = None
            self._focused_layout = None
            self.focus_changed.emit("")
            self.layout_changed.emit()

        # A focus request superseded the base run before it finished
        if not self._base_layout and self._nodes and self._pending_kind is None:
            self.request_base_layout()

    def cancel(self) -> None:
        """Cancel whatever is running (e.g. the view is going away)."""
        self._invalidate()
        self._set_busy(False)

    def _invalidate(self) -> int:
        """Bump the generation and cancel the in-flight worker."""
        self._generation += 1
        self._pending_kind = None
        self._pending_focus_id = None
        self._cancel_worker()
        return self._generation

    def _start(self, task, kind: LayoutKind) -> None:
        from ..workers import LayoutWorker

        self._pending_kind = kind
        self._set_progress(0)
        self._set_busy(True)

        worker = LayoutWorker(task)
        worker.progress.connect(self._on_layout_progress)
        worker.finished.connect(self._on_layout_finished)
        worker.failed.connect(self._on_layout_failed)
        self._run_worker(worker)

    # -------------------------------------------------------------------------
    # Worker Slots
    # -------------------------------------------------------------------------

    def _on_layout_progress(self, generation: int, percent: int) -> None:
        if generation != self._generation:
            return
        self._set_progress(percent)

    def _on_layout_finished(self, generation: int, outcome: LayoutOutcome) -> None:
        if generation != self._generation:
            logger.debug("Discarding stale layout generation %d (current %d)",
                         generation, self._generation)
            return

        kind = self._pending_kind
        focus_id = self._pending_focus_id
        self._pending_kind = None
        self._pending_focus_id = None
        self._current_worker = None
        self._set_busy(False)

        if not outcome.is_complete:
            return

        if kind == LayoutKind.BASE:
            self._base_layout = tuple(outcome.nodes)
        elif kind == LayoutKind.FOCUS:
            self._focused_layout = tuple(outcome.nodes)
            self._focused_node_id = focus_id
            self.focus_changed.emit(focus_id)

        self._set_progress(100)
        self.layout_changed.emit()

    def _on_layout_failed(self, generation: int, message: str) -> None:
        if generation != self._generation:
            return
        self._pending_kind = None
        self._pending_focus_id = None
        self._current_worker = None
        self._set_busy(False)
        self.layout_failed.emit(message)
