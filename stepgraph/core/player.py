"""
Step Player - Replays a StepLog on the live graph at a human pace.

The player owns a timer and the log being shown. Each time the timer fires it
applies exactly one step. While the replay runs, every edge starts disabled
(so attraction does not fight the animation) and the start node is pinned.
"""

import logging
from typing import TYPE_CHECKING, Optional

from .models import NodeHandle
from .steps import StepLog
from .timer import Timer

if TYPE_CHECKING:
    from .store import GraphStore

logger = logging.getLogger(__name__)


# Seconds between two replayed steps
DEFAULT_STEP_INTERVAL = 0.2


class StepPlayer:
    """
    Drains one StepLog into a graph, one step per timer tick.

    End of playback is detected lazily: the tick after the last step finds the
    log empty, stops the timer and releases the start node.
    """

    def __init__(
        self,
        log: Optional[StepLog] = None,
        start: Optional[NodeHandle] = None,
        interval: float = DEFAULT_STEP_INTERVAL
    ):
        self.log = log if log is not None else StepLog()
        self.start_handle = start
        self.timer = Timer(interval, loops=True)
        self.applied = 0

    @property
    def running(self) -> bool:
        return self.timer.running

    @property
    def remaining_steps(self) -> int:
        return len(self.log)

    def show(self, log: StepLog, start: Optional[NodeHandle], graph: "GraphStore"):
        """
        Start replaying `log`.

        Disables every edge, pins the start node and arms the timer.
        """
        self.log = log
        self.start_handle = start
        self.applied = 0

        graph.set_all_edges_enabled(False)
        graph.set_pinned(start, True)
        self.timer.start()
        logger.debug("Showing %d steps from node %s", len(log), start)

    def update(self, dt: float, graph: "GraphStore"):
        """Advance the replay clock by `dt` seconds."""
        if not self.timer.update(dt):
            return

        step = self.log.pop_front()
        if step is not None:
            step.apply(graph)
            self.applied += 1
        else:
            self.stop(graph)

    def stop(self, graph: "GraphStore"):
        """Halt the replay. Already applied steps stay applied."""
        self.timer.stop()
        graph.set_pinned(self.start_handle, False)
        logger.debug("Playback stopped after %d steps", self.applied)

    def status(self) -> dict:
        return {
            "running": self.running,
            "start": self.start_handle,
            "applied": self.applied,
            "remaining": self.remaining_steps,
            "interval": self.timer.period,
        }
