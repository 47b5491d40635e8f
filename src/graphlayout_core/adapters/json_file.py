"""
JSON graph file adapter.

Reads a {"nodes": [...], "edges": [...]} document from disk.
Read-only: layouts are never written back.
"""

import json
import logging
from pathlib import Path
from typing import Union

from ..domain.models import GraphData, GraphDataError
from ..ports.graph_source_port import GraphSourcePort

logger = logging.getLogger(__name__)


class JsonGraphFile(GraphSourcePort):
    """Graph source backed by a JSON file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> GraphData:
        if not self.path.exists():
            raise FileNotFoundError(f"Graph file does not exist: {self.path}")

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            raise GraphDataError(f"Invalid JSON in {self.path}: {e}") from e

        data = GraphData.from_dict(document)
        logger.debug("Loaded %s: %d nodes, %d edges", self.path, len(data.nodes), len(data.edges))
        return data
