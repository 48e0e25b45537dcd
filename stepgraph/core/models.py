"""
Core data models for the graph editor.

These models define the canonical payloads held by the graph store:
- Nodes with position, force accumulator and visualization state
- Edges connecting two node handles, with enable/reverse flags and cached geometry
- Force configuration records consumed by the layout engine

Handles are plain integers assigned by the store and never reused.
"""

import math
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


NodeHandle = int
EdgeHandle = int


# Layout constants (defaults for the force configs)
PUSH_FORCE_FORCE = 1000.0
PUSH_FORCE_DISTANCE = 150.0
PULL_FORCE_MIN_DISTANCE = 100.0
PULL_FORCE_FORCE_AT_TWICE_DISTANCE = 500.0

BASE_RADIUS = 20.0


class Color(str, Enum):
    """Display colors used by the visualization steps."""
    WHITE = "#ffffff"
    BLACK = "#000000"
    GREEN = "#00ff00"
    LIGHT_GRAY = "#c8c8c8"


DEFAULT_NODE_COLOR = Color.WHITE.value
DEFAULT_EDGE_COLOR = Color.BLACK.value


class NodeState(str, Enum):
    """Visitation state of a node during an algorithm replay."""
    NOT_VISITED = "not_visited"
    QUEUED = "queued"
    VISITED = "visited"

    @property
    def color(self) -> str:
        return _STATE_COLORS[self]


_STATE_COLORS = {
    NodeState.NOT_VISITED: Color.WHITE.value,
    NodeState.QUEUED: Color.LIGHT_GRAY.value,
    NodeState.VISITED: Color.GREEN.value,
}


class NodeHighlight(str, Enum):
    """UI-driven emphasis of a node."""
    NORMAL = "normal"
    HIGHLIGHTED = "highlighted"


class Direction(str, Enum):
    """Which incident edges a neighbor walk follows."""
    OUTGOING = "outgoing"
    INCOMING = "incoming"
    BOTH = "both"  # outgoing first, then incoming


class Node(BaseModel):
    """A node in the graph."""
    id: NodeHandle
    label: str = ""
    x: float = 0.0
    y: float = 0.0
    radius: float = BASE_RADIUS
    # Accumulated force, zeroed on every integration step
    force_x: float = 0.0
    force_y: float = 0.0
    pinned: bool = False
    state: NodeState = NodeState.NOT_VISITED
    highlight: NodeHighlight = NodeHighlight.NORMAL
    color: str = DEFAULT_NODE_COLOR

    def position(self) -> tuple[float, float]:
        return (self.x, self.y)

    def contains(self, x: float, y: float) -> bool:
        """Is the point inside this node's circle?"""
        return math.hypot(x - self.x, y - self.y) <= self.radius

    def add_force(self, fx: float, fy: float):
        self.force_x += fx
        self.force_y += fy

    def clear_force(self):
        self.force_x = 0.0
        self.force_y = 0.0

    def set_state(self, state: NodeState):
        self.state = state
        self.color = state.color


class Edge(BaseModel):
    """
    A directed edge between two nodes.

    `source` and `target` are the stored topology and never change.
    `reversed` only swaps which endpoint is treated as the source when the
    edge is drawn or pulls on its nodes.
    """
    id: EdgeHandle
    source: NodeHandle
    target: NodeHandle
    enabled: bool = True
    reversed: bool = False
    color: str = DEFAULT_EDGE_COLOR
    # Cached geometry of the drawn arrow
    from_x: float = 0.0
    from_y: float = 0.0
    to_x: float = 0.0
    to_y: float = 0.0

    @property
    def head(self) -> NodeHandle:
        """Endpoint currently treated as the source."""
        return self.target if self.reversed else self.source

    @property
    def tail(self) -> NodeHandle:
        """Endpoint currently treated as the target."""
        return self.source if self.reversed else self.target

    def update_position(self, from_x: float, from_y: float, to_x: float, to_y: float):
        self.from_x = from_x
        self.from_y = from_y
        self.to_x = to_x
        self.to_y = to_y

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "enabled": self.enabled,
            "reversed": self.reversed,
            "color": self.color,
            "from": [self.from_x, self.from_y],
            "to": [self.to_x, self.to_y],
        }


class PushForceConfig(BaseModel):
    """Repulsion between every pair of nodes."""
    model_config = ConfigDict(frozen=True)

    force: float = PUSH_FORCE_FORCE
    distance: float = PUSH_FORCE_DISTANCE  # falloff radius


class PullForceConfig(BaseModel):
    """Attraction along enabled edges."""
    model_config = ConfigDict(frozen=True)

    min_distance: float = PULL_FORCE_MIN_DISTANCE
    force_at_twice_distance: float = PULL_FORCE_FORCE_AT_TWICE_DISTANCE


# --- API Request/Response Models ---

class CreateNodeRequest(BaseModel):
    """Request to create a new node."""
    x: float = 0.0
    y: float = 0.0
    label: str = ""


class UpdateNodeRequest(BaseModel):
    """Request to update an existing node (partial update)."""
    label: Optional[str] = None
    highlight: Optional[NodeHighlight] = None


class MoveNodeRequest(BaseModel):
    """Request to move a node to a new position."""
    x: float
    y: float


class CreateEdgeRequest(BaseModel):
    """Request to connect two nodes."""
    source: NodeHandle
    target: NodeHandle


class ForceConfigRequest(BaseModel):
    """Request to change the layout force configuration (partial update)."""
    push_force: Optional[float] = None
    push_distance: Optional[float] = None
    pull_min_distance: Optional[float] = None
    pull_force_at_twice_distance: Optional[float] = None


class AlgorithmKind(str, Enum):
    """Algorithms that can be replayed."""
    DFS = "dfs"
    BFS = "bfs"
    SCC = "scc"


class RunAlgorithmRequest(BaseModel):
    """Request to run an algorithm and start its replay."""
    algorithm: AlgorithmKind
    start: Optional[NodeHandle] = None
    directed: bool = True
    cover_all: bool = False  # DFS only: continue from every unreached node
    interval: Optional[float] = Field(default=None, gt=0)


class FrameRequest(BaseModel):
    """Request to advance the simulation by one frame."""
    dt: float = Field(gt=0)
