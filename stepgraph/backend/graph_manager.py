"""
Graph Manager - Owns the live graph and everything that drives it per frame.

This module implements:
- Single graph state management (one graph open at a time)
- Editing operations delegated to the core graph store
- The force configuration and layout engine
- One active algorithm replay at a time, replaced by every new run
- The edit policy applied to structural edits during a replay
- Change callbacks for real-time sync
"""

import logging
from enum import Enum
from typing import Callable, Optional

from ..core.layout import ForceLayout
from ..core.models import (
    AlgorithmKind,
    EdgeHandle,
    Edge,
    Node,
    NodeHandle,
    NodeHighlight,
    PullForceConfig,
    PushForceConfig,
)
from ..core.player import DEFAULT_STEP_INTERVAL, StepPlayer
from ..core.steps import StepLog
from ..core.store import GraphStore
from ..core.traversal import run_bfs, run_dfs, strongly_connected_components
from ..core.validation import validate_graph, validate_steps

logger = logging.getLogger(__name__)


class EditPolicy(str, Enum):
    """How structural edits are treated while a replay is running."""
    REJECT = "reject"  # refuse the edit with GraphLockedError
    ALLOW = "allow"    # apply the edit; steps referencing removed handles become no-ops


class GraphLockedError(RuntimeError):
    """A structural edit was refused because an algorithm replay is running."""


class GraphManager:
    """
    Manages the live graph, its layout and its algorithm replay.

    Features:
    - Editing through stable node/edge handles
    - Frame ticks that integrate the layout and advance the replay
    - Explicit edit policy for edits made during a replay
    - Change callbacks for real-time sync
    """

    def __init__(
        self,
        edit_policy: EditPolicy = EditPolicy.REJECT,
        step_interval: float = DEFAULT_STEP_INTERVAL,
        layout: Optional[ForceLayout] = None
    ):
        self._graph = GraphStore()
        self._layout = layout or ForceLayout()
        self._push_conf = PushForceConfig()
        self._pull_conf = PullForceConfig()
        self._player: Optional[StepPlayer] = None
        self._last_algorithm: Optional[AlgorithmKind] = None
        self._components: list[list[NodeHandle]] = []
        self._edit_policy = EditPolicy(edit_policy)
        self._step_interval = step_interval
        self._on_change_callbacks: list[Callable] = []

    # --- Properties ---

    @property
    def graph(self) -> GraphStore:
        return self._graph

    @property
    def push_conf(self) -> PushForceConfig:
        return self._push_conf

    @property
    def pull_conf(self) -> PullForceConfig:
        return self._pull_conf

    @property
    def player(self) -> Optional[StepPlayer]:
        return self._player

    @property
    def edit_policy(self) -> EditPolicy:
        return self._edit_policy

    @edit_policy.setter
    def edit_policy(self, policy: EditPolicy):
        self._edit_policy = EditPolicy(policy)

    @property
    def is_playing(self) -> bool:
        """Check if an algorithm replay is running."""
        return self._player is not None and self._player.running

    # --- Change Callbacks ---

    def on_change(self, callback: Callable):
        """Register a callback for graph changes."""
        self._on_change_callbacks.append(callback)

    def _notify_change(self):
        """Notify all registered callbacks of a change."""
        for callback in self._on_change_callbacks:
            callback()

    def _check_editable(self):
        if self.is_playing and self._edit_policy == EditPolicy.REJECT:
            raise GraphLockedError("Graph is locked while an algorithm replay is running")

    # --- Graph Operations ---

    def new_graph(self) -> GraphStore:
        """Drop the current graph and start an empty one."""
        self.stop_algorithm()
        self._graph = GraphStore()
        self._player = None
        self._components = []
        self._notify_change()
        return self._graph

    def reset_state(self):
        """Stop any replay and clear every trace of it from the graph."""
        if self._player is not None:
            self._player.stop(self._graph)
        self._graph.reset_state()
        self._notify_change()

    # --- Node Operations ---

    def add_node(self, x: float = 0.0, y: float = 0.0, label: str = "") -> Node:
        """Add a new node to the graph."""
        self._check_editable()
        handle = self._graph.add_node(x, y, label)
        self._notify_change()
        return self._graph.node(handle)

    def get_node(self, handle: NodeHandle) -> Optional[Node]:
        return self._graph.node(handle)

    def node_at(self, x: float, y: float) -> Optional[Node]:
        """Get the topmost node under a point."""
        handle = self._graph.node_at(x, y)
        return self._graph.node(handle) if handle is not None else None

    def update_node(
        self,
        handle: NodeHandle,
        label: Optional[str] = None,
        highlight: Optional[NodeHighlight] = None
    ) -> Optional[Node]:
        """Update non-structural node fields."""
        node = self._graph.node(handle)
        if node is None:
            return None
        if label is not None:
            node.label = label
        if highlight is not None:
            self._graph.set_highlight(handle, highlight)
        self._notify_change()
        return node

    def move_node(self, handle: NodeHandle, x: float, y: float) -> Optional[Node]:
        """Move a node (dragging does not change topology)."""
        node = self._graph.node(handle)
        if node is None:
            return None
        self._graph.move_node(handle, x, y)
        self._notify_change()
        return node

    def delete_node(self, handle: NodeHandle) -> bool:
        """Delete a node and all connected edges."""
        self._check_editable()
        removed = self._graph.remove_node(handle)
        if removed:
            self._notify_change()
        return removed

    # --- Edge Operations ---

    def add_edge(self, source: NodeHandle, target: NodeHandle) -> Edge:
        """
        Connect two nodes.

        Raises:
            ValueError: If either node does not exist
            GraphLockedError: If a replay is running under the REJECT policy
        """
        self._check_editable()
        handle = self._graph.add_edge(source, target)
        self._notify_change()
        return self._graph.edge(handle)

    def get_edge(self, handle: EdgeHandle) -> Optional[Edge]:
        return self._graph.edge(handle)

    def delete_edge(self, handle: EdgeHandle) -> bool:
        """Delete an edge."""
        self._check_editable()
        removed = self._graph.remove_edge(handle)
        if removed:
            self._notify_change()
        return removed

    def connect_all(self) -> list[Edge]:
        """Connect every pair of nodes in both directions."""
        self._check_editable()
        handles = self._graph.connect_all()
        if handles:
            self._notify_change()
        return [self._graph.edge(h) for h in handles]

    # --- Layout ---

    def update_forces(
        self,
        push_force: Optional[float] = None,
        push_distance: Optional[float] = None,
        pull_min_distance: Optional[float] = None,
        pull_force_at_twice_distance: Optional[float] = None
    ) -> tuple[PushForceConfig, PullForceConfig]:
        """Replace the force configs, changing only the provided fields."""
        push_updates = {
            "force": push_force,
            "distance": push_distance,
        }
        pull_updates = {
            "min_distance": pull_min_distance,
            "force_at_twice_distance": pull_force_at_twice_distance,
        }
        self._push_conf = self._push_conf.model_copy(
            update={k: v for k, v in push_updates.items() if v is not None}
        )
        self._pull_conf = self._pull_conf.model_copy(
            update={k: v for k, v in pull_updates.items() if v is not None}
        )
        self._notify_change()
        return self._push_conf, self._pull_conf

    # --- Algorithms ---

    def run_algorithm(
        self,
        algorithm: AlgorithmKind,
        start: Optional[NodeHandle] = None,
        directed: bool = True,
        interval: Optional[float] = None,
        cover_all: bool = False
    ) -> StepLog:
        """
        Run an algorithm on a snapshot of the graph and start replaying it.

        Any replay already running is stopped and replaced.

        Args:
            algorithm: Which algorithm to run
            start: Start node (required for DFS and BFS)
            directed: Follow edge direction (DFS/BFS only)
            interval: Seconds between replayed steps
            cover_all: DFS only, also traverse nodes unreachable from start

        Returns:
            The StepLog being replayed (a copy; the player drains its own)

        Raises:
            ValueError: If the start node is missing or does not exist
        """
        algorithm = AlgorithmKind(algorithm)
        snapshot = self._graph.snapshot()

        if algorithm == AlgorithmKind.SCC:
            result = strongly_connected_components(snapshot)
            log = result.steps
            self._components = result.components
        else:
            if start is None:
                raise ValueError(f"{algorithm.value} needs a start node")
            if algorithm == AlgorithmKind.DFS:
                log = run_dfs(snapshot, start, directed=directed, cover_all=cover_all)
            else:
                log = run_bfs(snapshot, start, directed=directed)
            self._components = []

        self.reset_state()

        self._player = StepPlayer(interval=interval or self._step_interval)
        self._player.show(StepLog(log), start, self._graph)
        self._last_algorithm = algorithm

        logger.info("Running %s from %s (%d steps)", algorithm.value, start, len(log))
        self._notify_change()
        return log

    def stop_algorithm(self) -> bool:
        """Stop the running replay, keeping the steps already shown."""
        if not self.is_playing:
            return False
        self._player.stop(self._graph)
        self._notify_change()
        return True

    def algorithm_status(self) -> dict:
        """Describe the current (or last) replay."""
        if self._player is None:
            return {"algorithm": None, "running": False}

        status = self._player.status()
        status["algorithm"] = self._last_algorithm.value if self._last_algorithm else None
        status["components"] = self._components
        status["stale_steps"] = len(validate_steps(self._graph, self._player.log))
        return status

    # --- Frame Driver ---

    def tick(self, dt: float):
        """Advance the layout and the replay by one frame of `dt` seconds."""
        self._layout.update(dt, self._graph, self._push_conf, self._pull_conf)
        if self._player is not None:
            self._player.update(dt, self._graph)
        self._notify_change()

    # --- Analysis ---

    def validate(self) -> list:
        """Validate the graph and, while replaying, the remaining steps."""
        issues = validate_graph(self._graph)
        if self._player is not None:
            issues.extend(validate_steps(self._graph, self._player.log))
        return issues

    def get_state(self) -> dict:
        """Get the full current state for API responses."""
        return {
            "graph": self._graph.to_json_dict(),
            "forces": {
                "push": self._push_conf.model_dump(),
                "pull": self._pull_conf.model_dump(),
            },
            "algorithm": self.algorithm_status(),
            "edit_policy": self._edit_policy.value,
            "locked": self.is_playing and self._edit_policy == EditPolicy.REJECT,
        }


def create_graph_manager() -> GraphManager:
    """Build a manager from the environment settings."""
    from .. import config

    return GraphManager(
        edit_policy=EditPolicy(config.EDIT_POLICY),
        step_interval=config.STEP_INTERVAL
    )
