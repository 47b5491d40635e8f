"""
ViewModels for the graph layout app.

MVVM architecture separating layout state from rendering:
- ViewModels handle state, request generations and worker lifecycle
- Views (Qt widgets) handle painting and user input
- graphlayout_core handles the layout computation
"""

from .base import BaseViewModel
from .layout_vm import GraphLayoutVM, LayoutSettings

__all__ = [
    # Base
    "BaseViewModel",

    # ViewModels
    "GraphLayoutVM",

    # Data classes
    "LayoutSettings",
]
