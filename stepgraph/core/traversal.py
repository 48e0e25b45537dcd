"""
Graph traversals that record their execution as visualization steps.

Each algorithm runs to completion against a graph without modifying it, and
keeps its own visitation map. The result is a StepLog that the step player
replays later, at its own pace:
- DFS: queued on entry, visited on exit (postorder)
- BFS: queued on enqueue, visited on dequeue
- SCC: Kosaraju's two-pass algorithm built from two DFS runs
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator

from .models import Direction, NodeHandle, NodeState
from .steps import (
    EdgeStateChange,
    EnableAllEdges,
    NodeStateChange,
    PaintComponent,
    ResetAll,
    ReverseAllEdges,
    Step,
    StepLog,
)

if TYPE_CHECKING:
    from .store import GraphStore

logger = logging.getLogger(__name__)


# Component colors, reused cyclically
SCC_PALETTE = (
    "#ff5f5d",
    "#00ccbf",
    "#72f2eb",
    "#747e7e",
    "#3f7c85",
    "#ef6024",
    "#f0941f",
    "#90a19d",
    "#196774",
    "#363432",
)


def _walk_direction(directed: bool, direction: Direction = Direction.OUTGOING) -> Direction:
    return direction if directed else Direction.BOTH


def _require_node(graph: "GraphStore", start: NodeHandle):
    if graph.node(start) is None:
        raise ValueError(f"Start node not found: {start}")


class DepthFirstSearch:
    """
    Depth-first search that records steps.

    One instance keeps a single visitation map, so `visit` can be called for
    several roots and never enters a node twice. The explicit stack produces
    exactly the order of the recursive formulation: a neighbor's state is read
    only when the walk reaches it.
    """

    def __init__(self, graph: "GraphStore", direction: Direction = Direction.OUTGOING):
        self.graph = graph
        self.direction = direction
        self.states: dict[NodeHandle, NodeState] = {
            handle: NodeState.NOT_VISITED for handle in graph.node_handles()
        }
        self.steps: list[Step] = []
        self.preorder: list[NodeHandle] = []
        self.postorder: list[NodeHandle] = []

    def _enter(self, handle: NodeHandle) -> Iterator:
        self.steps.append(NodeStateChange(handle, NodeState.QUEUED))
        self.states[handle] = NodeState.QUEUED
        self.preorder.append(handle)
        return self.graph.neighbors(handle, self.direction)

    def _leave(self, handle: NodeHandle):
        self.steps.append(NodeStateChange(handle, NodeState.VISITED))
        self.states[handle] = NodeState.VISITED
        self.postorder.append(handle)

    def visit(self, root: NodeHandle):
        """Traverse everything reachable from `root` that is not visited yet."""
        stack = [(root, self._enter(root))]

        while stack:
            handle, walker = stack[-1]
            for edge_id, other in walker:
                if self.states.get(other) == NodeState.NOT_VISITED:
                    self.steps.append(EdgeStateChange(edge_id, True))
                    stack.append((other, self._enter(other)))
                    break
            else:
                stack.pop()
                self._leave(handle)

    def visit_all(self):
        """Start a traversal from every node still not visited, in index order."""
        for handle in self.graph.node_handles():
            if self.states[handle] == NodeState.NOT_VISITED:
                self.visit(handle)


def run_dfs(
    graph: "GraphStore",
    start: NodeHandle,
    directed: bool = True,
    cover_all: bool = False
) -> StepLog:
    """
    Record a depth-first search starting at `start`.

    Args:
        graph: The graph to traverse (not modified)
        start: Node the search starts from
        directed: Follow outgoing edges only; False treats edges as undirected
        cover_all: Continue from every remaining node so the whole graph is covered

    Returns:
        StepLog of the traversal

    Raises:
        ValueError: If the start node does not exist
    """
    _require_node(graph, start)

    dfs = DepthFirstSearch(graph, _walk_direction(directed))
    dfs.visit(start)
    if cover_all:
        dfs.visit_all()

    logger.debug("DFS from %d recorded %d steps", start, len(dfs.steps))
    return StepLog(dfs.steps)


def run_bfs(graph: "GraphStore", start: NodeHandle, directed: bool = True) -> StepLog:
    """
    Record a breadth-first search starting at `start`.

    A node is marked queued as soon as it enters the frontier, so it is never
    enqueued twice, and visited when it leaves it.

    Raises:
        ValueError: If the start node does not exist
    """
    _require_node(graph, start)

    direction = _walk_direction(directed)
    states = {handle: NodeState.NOT_VISITED for handle in graph.node_handles()}
    steps: list[Step] = [NodeStateChange(start, NodeState.QUEUED)]
    states[start] = NodeState.QUEUED
    queue = deque([start])

    while queue:
        current = queue.popleft()
        for edge_id, other in graph.neighbors(current, direction):
            if states.get(other) == NodeState.NOT_VISITED:
                steps.append(EdgeStateChange(edge_id, True))
                steps.append(NodeStateChange(other, NodeState.QUEUED))
                states[other] = NodeState.QUEUED
                queue.append(other)

        states[current] = NodeState.VISITED
        steps.append(NodeStateChange(current, NodeState.VISITED))

    logger.debug("BFS from %d recorded %d steps", start, len(steps))
    return StepLog(steps)


@dataclass
class SccResult:
    """Steps and components found by one SCC run."""
    steps: StepLog
    components: list[list[NodeHandle]] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.components)


def strongly_connected_components(graph: "GraphStore") -> SccResult:
    """
    Kosaraju's algorithm, recorded as steps.

    1. DFS over outgoing edges from every node, keeping the finish order
    2. Reset the visuals and reverse every edge
    3. Scan the finish order back to front; every node still not visited
       roots a DFS over incoming edges whose postorder is one component,
       painted with the next palette color
    4. Restore edge orientation and enable every edge

    Args:
        graph: The graph to analyze (not modified)

    Returns:
        SccResult with the StepLog and the components in discovery order
    """
    forward = DepthFirstSearch(graph, Direction.OUTGOING)
    forward.visit_all()
    finish_order = list(forward.postorder)

    steps: list[Step] = list(forward.steps)
    steps.append(ResetAll())
    steps.append(ReverseAllEdges())

    backward = DepthFirstSearch(graph, Direction.INCOMING)
    components: list[list[NodeHandle]] = []

    for handle in reversed(finish_order):
        if backward.states[handle] != NodeState.NOT_VISITED:
            continue

        backward.postorder.clear()
        backward.visit(handle)
        component = list(backward.postorder)
        color = SCC_PALETTE[len(components) % len(SCC_PALETTE)]
        backward.steps.append(PaintComponent(color, component))
        components.append(component)

    steps.extend(backward.steps)

    # Visual cleanup
    steps.append(ReverseAllEdges())
    steps.append(EnableAllEdges())

    logger.debug("SCC found %d components", len(components))
    return SccResult(steps=StepLog(steps), components=components)


def run_scc(graph: "GraphStore") -> StepLog:
    """Record Kosaraju's strongly connected components algorithm."""
    return strongly_connected_components(graph).steps
