# MIT License (see LICENSE)
"""
The simulation driver.

Simulation owns nothing but the area size, a FramePacer and an optional
Profiler; all state lives in the System it is given. One call to advance()
performs one physics step:

    1. Snapshot: every free mass records old_position/old_velocity.
    2. Step selection:
        - adaptive on, at least one live spring: RKF45 with error control,
        - adaptive on, no live spring: RK4 with DEF_TSTEP (also stored in
          params.cur_dt),
        - adaptive off: RK4 with params.cur_dt.
    3. Commit: new positions, velocities and accelerations are written back.
    4. Contacts: exploded-mass guard, wall stick/bounce, then pairwise
       impacts when params.collide is set.
    5. Pacing: returns True when a redraw is due.

params is read from the System on every call, so editor changes take effect
on the next step.
"""
from __future__ import annotations
from contextlib import nullcontext

from .collision.impact import resolve_impacts
from .collision.walls import resolve_walls
from .constants import DEF_TSTEP
from .core.arrays import SystemArrays
from .core.integrators import StepResult, adaptive_step, rk4_step
from .logger import get_logger
from .pacer import FramePacer
from .profiler import Profiler
from .system import System

log = get_logger(__name__)


class Simulation:
    """
    Steps a System inside a width x height area.

    Attributes:
        system: The entity store being simulated.
        width, height: Size of the area; walls sit at its edges.
        pacer: Redraw pacing state.
        profiler: Optional section timer ("integrate", "contacts").
        time: Simulated time accumulated over accepted steps.
    """

    def __init__(
        self,
        system: System,
        width: float,
        height: float,
        profiler: Profiler | None = None,
    ) -> None:
        self.system = system
        self.width = float(width)
        self.height = float(height)
        self.pacer = FramePacer()
        self.profiler = profiler
        self.time = 0.0

    def _section(self, name: str):
        if self.profiler is None:
            return nullcontext()
        return self.profiler.section(name)

    def resize(self, width: float, height: float) -> None:
        self.width = float(width)
        self.height = float(height)

    def _integrate(self, arrays: SystemArrays) -> StepResult:
        params = self.system.params
        if params.adaptive_step:
            if self.system.any_spring_alive():
                return adaptive_step(arrays, params, self.width, self.height)
            params.cur_dt = DEF_TSTEP
        return rk4_step(arrays, params, params.cur_dt, self.width, self.height)

    def advance(self) -> bool:
        """
        Perform one step.

        Returns:
            True if enough simulated time has passed that the display should
            be refreshed.
        """
        system = self.system
        params = system.params

        for m in system.masses:
            if m.free:
                m.save_snapshot()

        with self._section("integrate"):
            arrays = SystemArrays.from_system(system)
            result = self._integrate(arrays)
            arrays.write_back(system, result.pos, result.vel, result.acc)
        self.time += result.h

        with self._section("contacts"):
            resolve_walls(system, self.width, self.height)
            if params.collide:
                resolve_impacts(system)

        return self.pacer.tick(params.cur_dt)

    def predict(self, h: float | None = None) -> None:
        """
        Compute where every free mass would be after one RK4 step of size h
        (default params.cur_dt) without committing it.

        The result is stored in each mass's test_position/test_velocity.
        """
        system = self.system
        params = system.params
        h = params.cur_dt if h is None else h
        arrays = SystemArrays.from_system(system)
        result = rk4_step(arrays, params, h, self.width, self.height)
        for i, m in enumerate(system.masses):
            if m.free:
                m.test_position = result.pos[i].copy()
                m.test_velocity = result.vel[i].copy()

    def run(self, steps: int) -> int:
        """
        Call advance() ``steps`` times.

        Returns:
            Number of steps after which a redraw was due.
        """
        frames = 0
        for _ in range(steps):
            if self.advance():
                frames += 1
        log.debug("Ran %d steps, %d frames, t=%.4f", steps, frames, self.time)
        return frames
