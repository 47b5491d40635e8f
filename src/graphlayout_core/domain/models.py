"""
Domain models (DTOs) for the graph layout engine.

These are pure data classes with no Qt or filesystem dependencies.
Simulation scratch state (velocity, pins) lives in NodeLayoutState,
never on GraphNode.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, List, Dict, Any

from .enums import DisplayMode, LayoutStatus


class GraphDataError(ValueError):
    """Raised when graph data cannot be parsed into nodes and edges."""


class LayoutParamsError(ValueError):
    """Raised when layout parameters are invalid."""


def _checked(data: Dict[str, Any], key: str, kind: type) -> Any:
    """Optional field of a record, rejected unless it has the expected type."""
    value = data.get(key)
    if value is None:
        return kind()
    if not isinstance(value, kind):
        raise GraphDataError(f"'{key}' must be a {kind.__name__}, got {type(value).__name__}: {data!r}")
    return value


@dataclass(frozen=True)
class GraphNode:
    """A node with labels and properties (e.g. a Neo4j node)."""
    id: str
    labels: List[str] = field(default_factory=list)
    properties: Dict[str, Any] = field(default_factory=dict)

    # Optional visual overrides
    color: Optional[str] = None
    size: Optional[float] = None
    icon: Optional[str] = None

    @property
    def primary_label(self) -> Optional[str]:
        return self.labels[0] if self.labels else None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphNode":
        if not isinstance(data, dict):
            raise GraphDataError(f"Node record must be an object, got {type(data).__name__}")
        if "id" not in data:
            raise GraphDataError(f"Node is missing an id: {data!r}")
        return cls(
            id=str(data["id"]),
            labels=list(_checked(data, "labels", list)),
            properties=dict(_checked(data, "properties", dict)),
            color=data.get("color"),
            size=data.get("size"),
            icon=data.get("icon"),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": self.id,
            "labels": list(self.labels),
            "properties": dict(self.properties),
        }
        for key in ("color", "size", "icon"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result


@dataclass(frozen=True)
class GraphEdge:
    """A typed relationship between two nodes."""
    id: str
    type: str
    source: str
    target: str
    properties: Dict[str, Any] = field(default_factory=dict)
    directed: bool = True

    # Optional visual overrides
    color: Optional[str] = None
    width: Optional[float] = None
    label: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphEdge":
        if not isinstance(data, dict):
            raise GraphDataError(f"Edge record must be an object, got {type(data).__name__}")
        missing = [k for k in ("id", "source", "target") if k not in data]
        if missing:
            raise GraphDataError(f"Edge is missing {', '.join(missing)}: {data!r}")
        return cls(
            id=str(data["id"]),
            type=str(data.get("type", "")),
            source=str(data["source"]),
            target=str(data["target"]),
            properties=dict(_checked(data, "properties", dict)),
            directed=bool(data.get("directed", True)),
            color=data.get("color"),
            width=data.get("width"),
            label=data.get("label"),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "source": self.source,
            "target": self.target,
            "properties": dict(self.properties),
            "directed": self.directed,
        }
        for key in ("color", "width", "label"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result


@dataclass
class GraphData:
    """Nodes and edges as supplied by a data-loading layer."""
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphData":
        """
        Build GraphData from a plain {nodes, edges, metadata} dict.

        Duplicate node or edge ids keep the first occurrence.

        Raises:
            GraphDataError: If the document is not shaped like a graph
        """
        if not isinstance(data, dict):
            raise GraphDataError(f"Expected a dict, got {type(data).__name__}")

        raw_nodes = data.get("nodes", [])
        raw_edges = data.get("edges", [])
        if not isinstance(raw_nodes, list) or not isinstance(raw_edges, list):
            raise GraphDataError("'nodes' and 'edges' must be lists")

        nodes: List[GraphNode] = []
        seen_nodes = set()
        for raw in raw_nodes:
            node = GraphNode.from_dict(raw)
            if node.id not in seen_nodes:
                seen_nodes.add(node.id)
                nodes.append(node)

        edges: List[GraphEdge] = []
        seen_edges = set()
        for raw in raw_edges:
            edge = GraphEdge.from_dict(raw)
            if edge.id not in seen_edges:
                seen_edges.add(edge.id)
                edges.append(edge)

        return cls(nodes=nodes, edges=edges, metadata=dict(data.get("metadata") or {}))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class LayoutParams:
    """Force simulation tuning."""
    repulsion_strength: float = 5000.0   # How much nodes repel each other
    attraction_strength: float = 0.005   # How much edges pull nodes together
    center_strength: float = 0.02        # Pull toward the viewport center
    friction: float = 0.85               # Velocity damping per iteration
    iterations: int = 100
    ideal_edge_length: float = 120.0
    min_node_distance: float = 80.0      # Collision distance
    padding: float = 80.0                # Keep-out band at the viewport edge

    def validate(self) -> "LayoutParams":
        """
        Check the parameters and return self.

        Raises:
            LayoutParamsError: If any value is out of range
        """
        if not isinstance(self.iterations, int) or isinstance(self.iterations, bool):
            raise LayoutParamsError(f"iterations must be an int, got {self.iterations!r}")
        if self.iterations < 0:
            raise LayoutParamsError(f"iterations must be >= 0, got {self.iterations}")
        for name in ("repulsion_strength", "attraction_strength", "center_strength"):
            value = getattr(self, name)
            if value < 0:
                raise LayoutParamsError(f"{name} must be >= 0, got {value}")
        if not 0.0 <= self.friction <= 1.0:
            raise LayoutParamsError(f"friction must be in [0, 1], got {self.friction}")
        for name in ("ideal_edge_length", "min_node_distance"):
            value = getattr(self, name)
            if value <= 0:
                raise LayoutParamsError(f"{name} must be > 0, got {value}")
        if self.padding < 0:
            raise LayoutParamsError(f"padding must be >= 0, got {self.padding}")
        return self

    def with_overrides(self, **overrides: Any) -> "LayoutParams":
        return replace(self, **overrides)

    @classmethod
    def for_mode(cls, mode: DisplayMode) -> "LayoutParams":
        """Base layout tuning for a display mode."""
        if mode == DisplayMode.COMPACT:
            return cls(iterations=50, repulsion_strength=4000.0)
        return cls(iterations=100, repulsion_strength=5000.0)

    @classmethod
    def settle(cls) -> "LayoutParams":
        """Low-intensity tuning for the pass that follows focus placement."""
        return cls(
            iterations=30,
            repulsion_strength=3000.0,
            attraction_strength=0.01,
            center_strength=0.01,
            friction=0.9,
        )


@dataclass
class NodeLayoutState:
    """Per-run simulation record for one node. Never shared between runs."""
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    fx: Optional[float] = None   # Pinned x
    fy: Optional[float] = None   # Pinned y

    @property
    def pinned(self) -> bool:
        return self.fx is not None and self.fy is not None

    def unpin(self) -> None:
        self.fx = None
        self.fy = None


@dataclass(frozen=True)
class PositionedNode:
    """A node with resolved coordinates, ready for rendering."""
    node: GraphNode
    x: float
    y: float

    @property
    def id(self) -> str:
        return self.node.id


@dataclass(frozen=True)
class PositionedEdge:
    """An edge resolved to its endpoint coordinates."""
    edge: GraphEdge
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def id(self) -> str:
        return self.edge.id


@dataclass(frozen=True)
class LayoutProgress:
    """Progress event emitted once per batch."""
    percent: int         # 0-100
    iteration: int       # Iterations completed so far
    total: int           # Iteration budget for the run


@dataclass(frozen=True)
class LayoutOutcome:
    """Result of a layout run. nodes is None when the run was cancelled."""
    status: LayoutStatus
    nodes: Optional[List[PositionedNode]] = None
    generation: int = 0

    @property
    def is_complete(self) -> bool:
        return self.status == LayoutStatus.COMPLETED

    @classmethod
    def cancelled(cls, generation: int = 0) -> "LayoutOutcome":
        return cls(status=LayoutStatus.CANCELLED, nodes=None, generation=generation)


@dataclass
class GraphStats:
    """Counts and histograms for the stats badge."""
    total_nodes: int = 0
    total_edges: int = 0
    visible_nodes: int = 0
    visible_edges: int = 0
    nodes_by_label: Dict[str, int] = field(default_factory=dict)
    edges_by_type: Dict[str, int] = field(default_factory=dict)
