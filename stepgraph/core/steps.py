"""
Visualization steps recorded by the traversal algorithms.

A step is one atomic, self-contained mutation of the graph's visual state.
Steps never touch topology and hold no reference to the algorithm that
produced them. The set of step kinds is closed; `apply_step` dispatches over
all of them.

A StepLog is the ordered, once-through sequence of steps one algorithm run
produced. It is consumed front to back by the step player.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Iterator, Optional, Union

from .models import EdgeHandle, NodeHandle, NodeState

if TYPE_CHECKING:
    from .store import GraphStore

logger = logging.getLogger(__name__)


class _Step:
    kind = ""

    def apply(self, graph: "GraphStore"):
        """Apply this step to the graph."""
        apply_step(self, graph)  # type: ignore[arg-type]


@dataclass(frozen=True)
class NodeStateChange(_Step):
    """Move a node to a new visitation state (and its color)."""
    node: NodeHandle
    state: NodeState
    kind = "node_state"

    def to_dict(self) -> dict:
        return {"kind": self.kind, "node": self.node, "state": self.state.value}


@dataclass(frozen=True)
class EdgeStateChange(_Step):
    """Enable or disable a single edge."""
    edge: EdgeHandle
    enable: bool = True
    kind = "edge_state"

    def to_dict(self) -> dict:
        return {"kind": self.kind, "edge": self.edge, "enable": self.enable}


@dataclass(frozen=True)
class ReverseAllEdges(_Step):
    """Flip the drawn/pulling direction of every edge."""
    kind = "reverse_all_edges"

    def to_dict(self) -> dict:
        return {"kind": self.kind}


@dataclass(frozen=True)
class PaintComponent(_Step):
    """Paint a group of nodes (one strongly connected component) in one color."""
    color: str
    nodes: tuple[NodeHandle, ...]
    kind = "paint_component"

    def __post_init__(self):
        object.__setattr__(self, "nodes", tuple(self.nodes))

    def to_dict(self) -> dict:
        return {"kind": self.kind, "color": self.color, "nodes": list(self.nodes)}


@dataclass(frozen=True)
class ResetAll(_Step):
    """Every node back to not visited with the default color, every edge enabled."""
    kind = "reset_all"

    def to_dict(self) -> dict:
        return {"kind": self.kind}


@dataclass(frozen=True)
class EnableAllEdges(_Step):
    """Enable every edge."""
    kind = "enable_all_edges"

    def to_dict(self) -> dict:
        return {"kind": self.kind}


Step = Union[
    NodeStateChange,
    EdgeStateChange,
    ReverseAllEdges,
    PaintComponent,
    ResetAll,
    EnableAllEdges,
]


def apply_step(step: Step, graph: "GraphStore"):
    """
    Apply one step to the graph.

    Handles that no longer exist in the graph are skipped silently.
    """
    match step:
        case NodeStateChange(node=handle, state=state):
            node = graph.node(handle)
            if node is not None:
                node.set_state(state)

        case EdgeStateChange(edge=handle, enable=enable):
            edge = graph.edge(handle)
            if edge is not None:
                edge.enabled = enable

        case ReverseAllEdges():
            for edge in graph.edges():
                edge.reversed = not edge.reversed
            graph.refresh_edges()

        case PaintComponent(color=color, nodes=handles):
            for handle in handles:
                node = graph.node(handle)
                if node is not None:
                    node.color = color

        case ResetAll():
            for node in graph.nodes():
                node.set_state(NodeState.NOT_VISITED)
            graph.set_all_edges_enabled(True)

        case EnableAllEdges():
            graph.set_all_edges_enabled(True)

        case _:
            raise TypeError(f"Unknown step: {step!r}")

    logger.debug("Applied %s", step)


class StepLog:
    """
    FIFO of steps produced by one algorithm run.

    The log is built once from the algorithm's output and can only be
    consumed afterwards.
    """

    def __init__(self, steps: Iterable[Step] = ()):
        self._steps: deque[Step] = deque(steps)

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(tuple(self._steps))

    def __eq__(self, other) -> bool:
        if isinstance(other, StepLog):
            return list(self._steps) == list(other._steps)
        return NotImplemented

    def __repr__(self) -> str:
        return f"StepLog({list(self._steps)!r})"

    @property
    def is_empty(self) -> bool:
        return not self._steps

    def peek(self) -> Optional[Step]:
        return self._steps[0] if self._steps else None

    def pop_front(self) -> Optional[Step]:
        """Remove and return the next step, or None when the log is drained."""
        return self._steps.popleft() if self._steps else None

    def to_list(self) -> list[dict]:
        """Convert to a JSON-serializable list."""
        return [step.to_dict() for step in self._steps]
