"""
Services for the graph layout engine.

Business logic layer - uses domain models, no Qt dependency.
"""

from .graph_filter import (
    filter_graph,
    node_degrees,
    get_node_neighbors,
    get_node_edges,
    filter_nodes_by_label,
    filter_edges_by_type,
    get_node_label,
    search_nodes,
)
from .simulation import (
    ForceSimulation,
    apply_force_layout,
    initialize_circle_layout,
    initialize_random_layout,
    reset_layout,
)
from .scheduler import (
    CancellationToken,
    LayoutTask,
    run_layout_task,
    apply_force_layout_chunked,
)
from .focus_layout import (
    FocusArrangement,
    FocusLayoutTask,
    arrange_focus,
    apply_focused_layout,
    apply_focused_layout_chunked,
)
from .stats import calculate_graph_stats
from .viewport import (
    BoundingBox,
    resolve_edges,
    calculate_bounding_box,
    get_visible_nodes,
    get_visible_edges,
)

__all__ = [
    # Filter and queries
    "filter_graph",
    "node_degrees",
    "get_node_neighbors",
    "get_node_edges",
    "filter_nodes_by_label",
    "filter_edges_by_type",
    "get_node_label",
    "search_nodes",
    # Simulation
    "ForceSimulation",
    "apply_force_layout",
    "initialize_circle_layout",
    "initialize_random_layout",
    "reset_layout",
    # Scheduling
    "CancellationToken",
    "LayoutTask",
    "run_layout_task",
    "apply_force_layout_chunked",
    # Focus
    "FocusArrangement",
    "FocusLayoutTask",
    "arrange_focus",
    "apply_focused_layout",
    "apply_focused_layout_chunked",
    # Stats
    "calculate_graph_stats",
    # Viewport
    "BoundingBox",
    "resolve_edges",
    "calculate_bounding_box",
    "get_visible_nodes",
    "get_visible_edges",
]
