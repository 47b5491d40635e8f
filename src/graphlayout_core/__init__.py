"""
GraphLayout Core - Headless force-directed layout engine.

Computes 2-D positions for node/edge graphs and re-lays them around a
focused node. It has no UI dependencies and can be embedded in other
applications.

Inputs are never modified: every layout call returns new positioned
collections.
"""

__version__ = "0.1.0"

# Lazy imports to avoid loading everything at once
def __getattr__(name):
    if name == "apply_force_layout":
        from .services.simulation import apply_force_layout
        return apply_force_layout
    elif name == "apply_focused_layout":
        from .services.focus_layout import apply_focused_layout
        return apply_focused_layout
    elif name == "filter_graph":
        from .services.graph_filter import filter_graph
        return filter_graph
    elif name == "calculate_graph_stats":
        from .services.stats import calculate_graph_stats
        return calculate_graph_stats
    elif name == "GraphData":
        from .domain.models import GraphData
        return GraphData
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    "__version__",
    "apply_force_layout",
    "apply_focused_layout",
    "filter_graph",
    "calculate_graph_stats",
    "GraphData",
]
