"""
Background worker threads for the graph layout app.

These QThread subclasses run layout tasks without blocking the UI.
"""

from .layout_worker import LayoutWorker

__all__ = [
    "LayoutWorker",
]
