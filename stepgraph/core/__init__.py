"""
stepgraph core - Graph store, force layout, step recording and playback.

This module provides the functionality used by the backend, the CLI and the
agent tools, ensuring a single source of truth for all graph logic.
"""

from .models import (
    # Enums
    Color,
    Direction,
    NodeHighlight,
    NodeState,
    AlgorithmKind,
    # Core models
    Node,
    Edge,
    PushForceConfig,
    PullForceConfig,
    # Request models (for API)
    CreateNodeRequest,
    UpdateNodeRequest,
    MoveNodeRequest,
    CreateEdgeRequest,
    ForceConfigRequest,
    RunAlgorithmRequest,
    FrameRequest,
)

from .store import GraphStore
from .layout import ForceLayout, push_force_vector, pull_force_vector
from .steps import (
    Step,
    StepLog,
    NodeStateChange,
    EdgeStateChange,
    ReverseAllEdges,
    PaintComponent,
    ResetAll,
    EnableAllEdges,
    apply_step,
)
from .timer import Timer
from .player import StepPlayer, DEFAULT_STEP_INTERVAL
from .traversal import (
    DepthFirstSearch,
    SccResult,
    SCC_PALETTE,
    run_dfs,
    run_bfs,
    run_scc,
    strongly_connected_components,
)
from .validation import validate_graph, validate_steps, validation_summary, ValidationIssue, IssueSeverity

__all__ = [
    # Enums
    "Color",
    "Direction",
    "NodeHighlight",
    "NodeState",
    "AlgorithmKind",
    # Models
    "Node",
    "Edge",
    "PushForceConfig",
    "PullForceConfig",
    # Request models
    "CreateNodeRequest",
    "UpdateNodeRequest",
    "MoveNodeRequest",
    "CreateEdgeRequest",
    "ForceConfigRequest",
    "RunAlgorithmRequest",
    "FrameRequest",
    # Store
    "GraphStore",
    # Layout
    "ForceLayout",
    "push_force_vector",
    "pull_force_vector",
    # Steps
    "Step",
    "StepLog",
    "NodeStateChange",
    "EdgeStateChange",
    "ReverseAllEdges",
    "PaintComponent",
    "ResetAll",
    "EnableAllEdges",
    "apply_step",
    # Playback
    "Timer",
    "StepPlayer",
    "DEFAULT_STEP_INTERVAL",
    # Traversal
    "DepthFirstSearch",
    "SccResult",
    "SCC_PALETTE",
    "run_dfs",
    "run_bfs",
    "run_scc",
    "strongly_connected_components",
    # Validation
    "validate_graph",
    "validate_steps",
    "validation_summary",
    "ValidationIssue",
    "IssueSeverity",
]
