# MIT License (see LICENSE)
"""
Frame pacing for the simulation loop.

The simulation advances by variable steps, so a display cannot redraw after
every one of them. FramePacer turns a stream of step sizes into a "redraw
due" signal: due once FRAME_TIME of simulated time has accumulated, or after
more than MAX_SKIPPED_FRAMES consecutive steps that were not due.
"""
from __future__ import annotations
from dataclasses import dataclass

from .constants import FRAME_TIME, MAX_SKIPPED_FRAMES


@dataclass
class FramePacer:
    """
    Attributes:
        elapsed: Simulated time accumulated since the last due frame.
        num_since: Steps since the last due frame.
    """
    elapsed: float = 0.0
    num_since: int = 0

    def tick(self, dt: float) -> bool:
        """Account for one step of size dt and report whether a redraw is due."""
        self.elapsed += dt
        if self.elapsed > FRAME_TIME:
            self.elapsed -= FRAME_TIME
            self.num_since = 0
            return True

        self.num_since += 1
        if self.num_since > MAX_SKIPPED_FRAMES:
            self.num_since = 0
            return True
        return False

    def reset(self) -> None:
        self.elapsed = 0.0
        self.num_since = 0
