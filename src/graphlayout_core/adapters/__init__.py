"""
Adapters for the graph layout engine.

Concrete implementations of the port interfaces.
"""

from .neo4j_result import Neo4jResultAdapter
from .json_file import JsonGraphFile

__all__ = ["Neo4jResultAdapter", "JsonGraphFile"]
