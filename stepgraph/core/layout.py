"""
Force-directed layout for the live graph.

Simulates physical forces on every frame:
- All nodes repel each other within a falloff radius
- Enabled edges pull their endpoints together once they are stretched
  beyond a minimum length

Forces of one tick are all computed from the same positions before any node
moves. Pinned nodes keep exerting forces on others but do not move.
"""

import math
import random
from typing import TYPE_CHECKING, Optional

from .models import PullForceConfig, PushForceConfig

if TYPE_CHECKING:
    from .store import GraphStore


# Positions closer than this are treated as coincident
COINCIDENT_EPSILON = 1e-6

# Rotated by a random angle when two nodes sit on the same spot
REFERENCE_DIRECTION = (0.0, 1.0)


def push_force_vector(
    position: tuple[float, float],
    other: tuple[float, float],
    push_conf: PushForceConfig,
    rng: random.Random
) -> tuple[float, float]:
    """
    Repulsion felt at `position` from a node at `other`.

    Args:
        position: Position of the node being pushed
        other: Position of the node pushing
        push_conf: Force magnitude and falloff radius
        rng: Source of the random direction for coincident positions

    Returns:
        Force vector (fx, fy); zero outside the falloff radius
    """
    if push_conf.distance <= 0:
        return (0.0, 0.0)

    dx = position[0] - other[0]
    dy = position[1] - other[1]
    dist = math.hypot(dx, dy)

    if dist < COINCIDENT_EPSILON:
        angle = rng.uniform(0.0, 2 * math.pi)
        rx, ry = REFERENCE_DIRECTION
        ux = rx * math.cos(angle) - ry * math.sin(angle)
        uy = rx * math.sin(angle) + ry * math.cos(angle)
    else:
        ux = dx / dist
        uy = dy / dist

    fall = 1.0 - dist / push_conf.distance
    if fall <= 0:
        return (0.0, 0.0)

    return (ux * push_conf.force * fall, uy * push_conf.force * fall)


def pull_force_vector(
    source: tuple[float, float],
    target: tuple[float, float],
    pull_conf: PullForceConfig
) -> tuple[float, float]:
    """
    Attraction along one edge, as felt by its source.

    The vector points from source to target; the target feels the opposite
    vector. At exactly twice the minimum distance its length equals
    `force_at_twice_distance`.
    """
    if pull_conf.min_distance <= 0:
        return (0.0, 0.0)

    dx = target[0] - source[0]
    dy = target[1] - source[1]
    dist = math.hypot(dx, dy)
    if dist < pull_conf.min_distance:
        return (0.0, 0.0)

    magnitude = (dist / pull_conf.min_distance - 1.0) * pull_conf.force_at_twice_distance
    return (dx / dist * magnitude, dy / dist * magnitude)


def push_force(graph: "GraphStore", push_conf: PushForceConfig, rng: random.Random):
    """Accumulate pairwise repulsion into every node."""
    nodes = graph.nodes()
    positions = [n.position() for n in nodes]

    for i, node in enumerate(nodes):
        for j, other_pos in enumerate(positions):
            if i == j:
                continue
            fx, fy = push_force_vector(positions[i], other_pos, push_conf, rng)
            node.add_force(fx, fy)


def pull_force(graph: "GraphStore", pull_conf: PullForceConfig):
    """Accumulate attraction along every enabled edge into its endpoints."""
    for edge in graph.edges():
        if not edge.enabled:
            continue

        head = graph.node(edge.head)
        tail = graph.node(edge.tail)
        if head is None or tail is None:
            continue

        fx, fy = pull_force_vector(head.position(), tail.position(), pull_conf)
        head.add_force(fx, fy)
        tail.add_force(-fx, -fy)


def consume_forces(graph: "GraphStore", dt: float):
    """
    Integrate accumulated forces into positions.

    Pinned nodes discard their force. Every accumulator is zeroed.
    """
    for node in graph.nodes():
        if not node.pinned:
            graph.move_node(node.id, node.x + node.force_x * dt, node.y + node.force_y * dt)
        node.clear_force()


class ForceLayout:
    """
    Layout engine driven by the frame loop.

    Holds the random source used to separate coincident nodes, so a seeded
    engine is fully deterministic.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def update(
        self,
        dt: float,
        graph: "GraphStore",
        push_conf: PushForceConfig,
        pull_conf: PullForceConfig
    ):
        """Run one simulation tick of length `dt` seconds."""
        push_force(graph, push_conf, self._rng)
        pull_force(graph, pull_conf)
        consume_forces(graph, dt)
