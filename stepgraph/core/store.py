"""
Graph Store - Arena-indexed directed graph.

This module implements:
- Node and edge storage keyed by integer handles (never reused)
- O(1) node/edge lookups and per-node incident edge indexes
- Neighbor walks in insertion order, by direction
- Edge geometry caching, refreshed whenever a node moves

The store is the only component allowed to change topology. Lookups through a
removed (stale) handle return None, and mutations through one are no-ops.
"""

import logging
from typing import Iterator, Optional

from .models import (
    Direction,
    Edge,
    EdgeHandle,
    Node,
    NodeHandle,
    NodeHighlight,
    NodeState,
    DEFAULT_NODE_COLOR,
)

logger = logging.getLogger(__name__)


class GraphStore:
    """
    Owns every node and edge payload of one graph.

    Features:
    - Stable handles: removal is the only operation that invalidates one
    - Incident edge indexes for outgoing and incoming walks
    - Snapshots for running algorithms without touching the live graph
    """

    def __init__(self):
        self._nodes: dict[NodeHandle, Node] = {}
        self._edges: dict[EdgeHandle, Edge] = {}
        self._outgoing: dict[NodeHandle, list[EdgeHandle]] = {}
        self._incoming: dict[NodeHandle, list[EdgeHandle]] = {}
        self._next_node_id: NodeHandle = 0
        self._next_edge_id: EdgeHandle = 0

    # --- Properties ---

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def __contains__(self, handle: NodeHandle) -> bool:
        return handle in self._nodes

    # --- Lookups ---

    def node(self, handle: NodeHandle) -> Optional[Node]:
        """Get a node by handle, or None if the handle is stale."""
        return self._nodes.get(handle)

    def edge(self, handle: EdgeHandle) -> Optional[Edge]:
        """Get an edge by handle, or None if the handle is stale."""
        return self._edges.get(handle)

    def node_handles(self) -> list[NodeHandle]:
        """All node handles in insertion order."""
        return list(self._nodes)

    def edge_handles(self) -> list[EdgeHandle]:
        """All edge handles in insertion order."""
        return list(self._edges)

    def nodes(self) -> list[Node]:
        return list(self._nodes.values())

    def edges(self) -> list[Edge]:
        return list(self._edges.values())

    def node_at(self, x: float, y: float) -> Optional[NodeHandle]:
        """Hit test: the topmost (most recently added) node containing the point."""
        for handle in reversed(self._nodes):
            if self._nodes[handle].contains(x, y):
                return handle
        return None

    def neighbors(
        self,
        handle: NodeHandle,
        direction: Direction = Direction.OUTGOING
    ) -> Iterator[tuple[EdgeHandle, NodeHandle]]:
        """
        Walk the neighbors of a node along stored topology.

        Yields (edge handle, neighbor handle) pairs in edge insertion order.
        BOTH yields the outgoing walk followed by the incoming walk.
        A stale handle yields nothing.
        """
        if direction in (Direction.OUTGOING, Direction.BOTH):
            for edge_id in list(self._outgoing.get(handle, ())):
                yield edge_id, self._edges[edge_id].target
        if direction in (Direction.INCOMING, Direction.BOTH):
            for edge_id in list(self._incoming.get(handle, ())):
                yield edge_id, self._edges[edge_id].source

    def edges_between(self, source: NodeHandle, target: NodeHandle) -> list[EdgeHandle]:
        return [
            edge_id for edge_id in self._outgoing.get(source, ())
            if self._edges[edge_id].target == target
        ]

    # --- Structural Operations ---

    def add_node(self, x: float = 0.0, y: float = 0.0, label: str = "") -> NodeHandle:
        """Add a new node and return its handle."""
        handle = self._next_node_id
        self._next_node_id += 1
        self._nodes[handle] = Node(id=handle, label=label, x=x, y=y)
        self._outgoing[handle] = []
        self._incoming[handle] = []
        return handle

    def remove_node(self, handle: NodeHandle) -> bool:
        """Remove a node and all edges attached to it."""
        if handle not in self._nodes:
            return False

        attached = set(self._outgoing[handle]) | set(self._incoming[handle])
        for edge_id in attached:
            self.remove_edge(edge_id)

        del self._nodes[handle]
        del self._outgoing[handle]
        del self._incoming[handle]
        return True

    def add_edge(self, source: NodeHandle, target: NodeHandle) -> EdgeHandle:
        """
        Connect two existing nodes.

        Raises:
            ValueError: If either endpoint does not exist
        """
        if source not in self._nodes:
            raise ValueError(f"Source node not found: {source}")
        if target not in self._nodes:
            raise ValueError(f"Target node not found: {target}")

        handle = self._next_edge_id
        self._next_edge_id += 1
        edge = Edge(id=handle, source=source, target=target)
        self._edges[handle] = edge
        self._outgoing[source].append(handle)
        self._incoming[target].append(handle)
        self._refresh_edge(edge)

        logger.debug("Connecting %d -> %d", source, target)
        return handle

    def remove_edge(self, handle: EdgeHandle) -> bool:
        """Remove a single edge."""
        edge = self._edges.pop(handle, None)
        if edge is None:
            return False
        self._outgoing[edge.source].remove(handle)
        self._incoming[edge.target].remove(handle)
        return True

    def connect_all(self) -> list[EdgeHandle]:
        """Turn the graph into a clique: connect every ordered pair not yet connected."""
        created = []
        for source in self.node_handles():
            for target in self.node_handles():
                if source != target and not self.edges_between(source, target):
                    created.append(self.add_edge(source, target))
        return created

    def clear(self):
        """Remove every node and edge. Handles keep counting up."""
        self._nodes.clear()
        self._edges.clear()
        self._outgoing.clear()
        self._incoming.clear()

    # --- Non-structural Operations ---

    def move_node(self, handle: NodeHandle, x: float, y: float):
        """Move a node and recompute the geometry of every edge attached to it."""
        node = self._nodes.get(handle)
        if node is None:
            return
        node.x = x
        node.y = y

        for edge_id in self._outgoing[handle]:
            self._refresh_edge(self._edges[edge_id])
        for edge_id in self._incoming[handle]:
            self._refresh_edge(self._edges[edge_id])

    def refresh_edges(self):
        """Recompute the cached geometry of every edge."""
        for edge in self._edges.values():
            self._refresh_edge(edge)

    def _refresh_edge(self, edge: Edge):
        head = self._nodes[edge.head]
        tail = self._nodes[edge.tail]
        edge.update_position(head.x, head.y, tail.x, tail.y)

    def set_highlight(self, handle: NodeHandle, highlight: NodeHighlight):
        node = self._nodes.get(handle)
        if node is not None:
            node.highlight = highlight

    def set_pinned(self, handle: Optional[NodeHandle], pinned: bool):
        """Pin or unpin a node; its pending force is discarded either way."""
        node = self._nodes.get(handle) if handle is not None else None
        if node is not None:
            node.pinned = pinned
            node.clear_force()

    def set_all_edges_enabled(self, enabled: bool):
        for edge in self._edges.values():
            edge.enabled = enabled

    def reset_state(self):
        """
        Clear every trace of an algorithm replay.

        Edges get their stored orientation back, so an SCC replay interrupted
        between its two reversals leaves nothing flipped.
        """
        for node in self._nodes.values():
            node.set_state(NodeState.NOT_VISITED)
            node.color = DEFAULT_NODE_COLOR
            node.pinned = False
            node.clear_force()
        for edge in self._edges.values():
            edge.enabled = True
            edge.reversed = False
        self.refresh_edges()

    # --- Snapshots ---

    def snapshot(self) -> "GraphStore":
        """Deep copy of the store; handles stay identical."""
        copy = GraphStore()
        copy._nodes = {h: n.model_copy(deep=True) for h, n in self._nodes.items()}
        copy._edges = {h: e.model_copy(deep=True) for h, e in self._edges.items()}
        copy._outgoing = {h: list(ids) for h, ids in self._outgoing.items()}
        copy._incoming = {h: list(ids) for h, ids in self._incoming.items()}
        copy._next_node_id = self._next_node_id
        copy._next_edge_id = self._next_edge_id
        return copy

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "nodes": [n.model_dump(mode="json") for n in self._nodes.values()],
            "edges": [e.to_json_dict() for e in self._edges.values()],
        }
