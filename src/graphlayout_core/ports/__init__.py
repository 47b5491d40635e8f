"""
Ports (interfaces) for the graph layout engine.

These define the contracts that adapters must implement.
This enables dependency injection and testing with mocks.
"""

from .graph_source_port import GraphSourcePort

__all__ = ["GraphSourcePort"]
