"""
Frame-driven countdown timer.

The timer does not read a clock itself: the frame loop feeds it the elapsed
time of every frame through `update`.
"""

import logging

logger = logging.getLogger(__name__)


# Remaining time at or below this counts as elapsed; summed frame times drift
TICK_EPSILON = 1e-9


class Timer:
    """
    Fixed-interval (looping) or one-shot timer.

    Created stopped. `start()` arms it with `remaining = period`; each
    `update(dt)` counts down and reports whether a tick fired. A looping timer
    re-arms itself after firing, a one-shot timer stops.
    """

    def __init__(self, period: float, loops: bool = False):
        self.period = period
        self.loops = loops
        self.remaining = 0.0
        self.running = False

    def start(self):
        self.running = True
        self.remaining = self.period

    def stop(self):
        self.running = False
        self.remaining = 0.0

    def _finished(self) -> bool:
        if self.running and self.remaining <= TICK_EPSILON:
            if self.loops:
                self.start()
            else:
                self.stop()
            return True
        return False

    def update(self, dt: float) -> bool:
        """Advance by `dt` seconds. Returns True when a tick fired."""
        if not self.running:
            return False
        self.remaining -= dt
        fired = self._finished()
        if fired:
            logger.debug("Timer ticked")
        return fired
