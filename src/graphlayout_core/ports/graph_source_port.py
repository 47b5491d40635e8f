"""
Graph source port interface.

Defines the contract for anything that supplies graph data to the
layout engine (query-result adapters, files, fixtures).
"""

from abc import ABC, abstractmethod

from ..domain.models import GraphData


class GraphSourcePort(ABC):
    """
    Abstract interface for graph data sources.

    The layout engine makes no assumptions about where data comes from;
    it only consumes the GraphData returned by load().
    """

    @abstractmethod
    def load(self) -> GraphData:
        """
        Load the graph.

        Returns:
            GraphData with nodes, edges and optional metadata

        Raises:
            GraphDataError: If the source data is malformed
        """
        pass
