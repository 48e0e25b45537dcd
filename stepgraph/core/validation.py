"""
Graph validation - Check graphs and step logs for structural issues.

Provides validation that can be used by the backend and the agent tools to
spot problems before running or while replaying an algorithm.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable

from .steps import EdgeStateChange, NodeStateChange, PaintComponent, Step

if TYPE_CHECKING:
    from .store import GraphStore


class IssueSeverity(str, Enum):
    """Severity levels for validation issues."""
    ERROR = "error"      # Invalid state, must be fixed
    WARNING = "warning"  # Potential problem, should review
    INFO = "info"        # Informational, may be intentional


@dataclass
class ValidationIssue:
    """A single validation issue found in a graph or step log."""
    severity: IssueSeverity
    message: str
    node_id: int | None = None
    edge_id: int | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "type": self.severity.value,
            "message": self.message
        }
        if self.node_id is not None:
            result["node_id"] = self.node_id
        if self.edge_id is not None:
            result["edge_id"] = self.edge_id
        return result


def validate_graph(graph: "GraphStore") -> list[ValidationIssue]:
    """
    Validate a graph and return a list of issues.

    Checks for:
    - Empty graph - INFO
    - Orphan nodes (no connections) - INFO
    - Invalid edge references (endpoint doesn't exist) - ERROR
    - Self-referencing edges - WARNING
    - Duplicate edges (same source->target) - WARNING
    - Nodes left pinned - WARNING

    Args:
        graph: The graph to validate

    Returns:
        List of ValidationIssue objects
    """
    issues: list[ValidationIssue] = []

    nodes = graph.nodes()
    edges = graph.edges()

    if not nodes:
        issues.append(ValidationIssue(
            severity=IssueSeverity.INFO,
            message="Graph has no nodes"
        ))
        return issues

    node_ids = {n.id for n in nodes}

    connected_nodes: set[int] = set()
    for edge in edges:
        connected_nodes.add(edge.source)
        connected_nodes.add(edge.target)

    orphans = sorted(node_ids - connected_nodes)
    if orphans:
        issues.append(ValidationIssue(
            severity=IssueSeverity.INFO,
            message=f"Orphan nodes (no connections): {', '.join(str(o) for o in orphans)}"
        ))

    for edge in edges:
        if edge.source not in node_ids:
            issues.append(ValidationIssue(
                severity=IssueSeverity.ERROR,
                message=f"Edge references non-existent source node: {edge.source}",
                edge_id=edge.id
            ))
        if edge.target not in node_ids:
            issues.append(ValidationIssue(
                severity=IssueSeverity.ERROR,
                message=f"Edge references non-existent target node: {edge.target}",
                edge_id=edge.id
            ))

    for edge in edges:
        if edge.source == edge.target:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message="Self-referencing edge (node points to itself)",
                edge_id=edge.id,
                node_id=edge.source
            ))

    seen_pairs: set[tuple[int, int]] = set()
    for edge in edges:
        pair = (edge.source, edge.target)
        if pair in seen_pairs:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Duplicate edge from {edge.source} to {edge.target}",
                edge_id=edge.id
            ))
        else:
            seen_pairs.add(pair)

    for node in nodes:
        if node.pinned:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message="Node is pinned and ignores layout forces",
                node_id=node.id
            ))

    return issues


def validate_steps(graph: "GraphStore", steps: Iterable[Step]) -> list[ValidationIssue]:
    """
    Find steps that reference handles no longer present in the graph.

    Such steps are skipped when replayed, which makes an animation look stuck.

    Args:
        graph: The graph the steps will be applied to
        steps: Steps of a StepLog (or any iterable of steps)

    Returns:
        One ERROR issue per stale reference
    """
    issues: list[ValidationIssue] = []

    for position, step in enumerate(steps):
        if isinstance(step, NodeStateChange):
            referenced = [step.node]
        elif isinstance(step, PaintComponent):
            referenced = list(step.nodes)
        else:
            referenced = []

        for handle in referenced:
            if graph.node(handle) is None:
                issues.append(ValidationIssue(
                    severity=IssueSeverity.ERROR,
                    message=f"Step {position} references removed node {handle}",
                    node_id=handle
                ))

        if isinstance(step, EdgeStateChange) and graph.edge(step.edge) is None:
            issues.append(ValidationIssue(
                severity=IssueSeverity.ERROR,
                message=f"Step {position} references removed edge {step.edge}",
                edge_id=step.edge
            ))

    return issues


def validation_summary(issues: list[ValidationIssue]) -> dict:
    """
    Create a summary of validation issues.

    Args:
        issues: List of validation issues

    Returns:
        Dictionary with counts by severity
    """
    errors = len([i for i in issues if i.severity == IssueSeverity.ERROR])
    return {
        "total": len(issues),
        "errors": errors,
        "warnings": len([i for i in issues if i.severity == IssueSeverity.WARNING]),
        "info": len([i for i in issues if i.severity == IssueSeverity.INFO]),
        "valid": errors == 0
    }
