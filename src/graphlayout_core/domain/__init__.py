"""
Domain models for the graph layout engine.

Contains DTOs, enums, and data structures used throughout the library.
"""

from .models import (
    GraphNode,
    GraphEdge,
    GraphData,
    GraphStats,
    LayoutParams,
    NodeLayoutState,
    PositionedNode,
    PositionedEdge,
    LayoutProgress,
    LayoutOutcome,
    GraphDataError,
    LayoutParamsError,
)
from .enums import (
    DisplayMode,
    LayoutStatus,
    LayoutKind,
)

__all__ = [
    # Models
    "GraphNode",
    "GraphEdge",
    "GraphData",
    "GraphStats",
    "LayoutParams",
    "NodeLayoutState",
    "PositionedNode",
    "PositionedEdge",
    "LayoutProgress",
    "LayoutOutcome",
    # Errors
    "GraphDataError",
    "LayoutParamsError",
    # Enums
    "DisplayMode",
    "LayoutStatus",
    "LayoutKind",
]
