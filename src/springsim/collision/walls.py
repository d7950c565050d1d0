# MIT License (see LICENSE)
"""
Wall boundary conditions applied after each accepted integrator step.

For every free mass, in index order:
1. Exploded-value guard: a mass whose position, velocity or acceleration
   is no longer finite is deleted (with its springs).
2. Stick test: a mass that was resting against a wall in the pre-step
   snapshot stays pinned there while its new velocity normal to the wall is
   below the stickiness threshold.
3. Bounce test: a mass that crossed a wall during the step is put back on
   the wall; the normal velocity is reflected and both components are scaled
   by the mass's elasticity. If the rebound cannot overcome the stickiness,
   the mass stops.

Walls sit at x = r, x = width - r, y = r and y = height - r where r is the
mass's screen radius.
"""
from __future__ import annotations
import math

import numpy as np

from ..constants import STICK_MAG, WALL_CONTACT
from ..logger import get_logger
from ..params import SimParams
from ..system import System
from ..types import Mass
from ..util import screen_radius

log = get_logger(__name__)


def is_exploded(m: Mass) -> bool:
    """True if any of position, velocity or acceleration is NaN or infinite."""
    return not (np.isfinite(m.position).all()
                and np.isfinite(m.velocity).all()
                and np.isfinite(m.acceleration).all())


def per_unit_mass(value: float, m: Mass) -> float:
    """value / mass, infinite for a massless mass."""
    return value / m.mass if m.mass > 0 else math.inf


def stick_to_wall(m: Mass, params: SimParams, stick_mag: float, width: float, height: float) -> bool:
    """
    Pin ``m`` to the wall it was resting on, if it is not pulling away hard enough.

    Only applies when the snapshot velocity is exactly zero and the snapshot
    position is within WALL_CONTACT of a present wall. Left/right walls are
    checked before bottom/top.

    Returns:
        True if the mass was pinned (position restored, velocity zeroed).
    """
    ovx, ovy = m.old_velocity
    if ovx != 0.0 or ovy != 0.0:
        return False

    w = params.walls
    rad = screen_radius(m.radius)
    ox, oy = m.old_position
    threshold = per_unit_mass(stick_mag, m)

    if ((w.left and abs(ox - rad) < WALL_CONTACT)
            or (w.right and abs(ox - width + rad) < WALL_CONTACT)):
        held = abs(m.velocity[0]) < threshold
    elif ((w.bottom and abs(oy - rad) < WALL_CONTACT)
            or (w.top and abs(oy - height + rad) < WALL_CONTACT)):
        held = abs(m.velocity[1]) < threshold
    else:
        return False

    if held:
        m.velocity = np.zeros(2, dtype=np.float64)
        m.position = m.old_position.copy()
    return held


def _reflect(vn: float, vt: float, elastic: float, release: float) -> tuple[float, float]:
    """
    Reflect the normal component ``vn`` (positive pointing away from the wall
    after reflection) and damp the tangential one. ``release`` is the speed
    the rebound must exceed to leave a sticky wall.
    """
    vn = -vn * elastic
    vt *= elastic
    if vn > 0:
        vn -= release
        if vn < 0:
            vn = vt = 0.0
    return vn, vt


def bounce_off_walls(m: Mass, params: SimParams, width: float, height: float) -> None:
    """Clamp a mass that crossed a wall and reflect its velocity."""
    w = params.walls
    rad = screen_radius(m.radius)
    x, y = float(m.position[0]), float(m.position[1])
    vx, vy = float(m.velocity[0]), float(m.velocity[1])
    ox, oy = m.old_position
    e = m.elastic
    release = per_unit_mass(STICK_MAG * params.stickiness, m)

    if w.left and x < rad and ox >= rad:
        x = rad
        if vx < 0:
            vx, vy = _reflect(vx, vy, e, release)
    elif w.right and x > width - rad and ox <= width - rad:
        x = width - rad
        if vx > 0:
            vx, vy = _reflect(-vx, vy, e, release)
            vx = -vx

    if w.bottom and y < rad and oy >= rad:
        y = rad
        if vy < 0:
            vy, vx = _reflect(vy, vx, e, release)
    elif w.top and y > height - rad and oy <= height - rad:
        y = height - rad
        if vy > 0:
            vy, vx = _reflect(-vy, vx, e, release)
            vy = -vy

    m.position = np.array([x, y], dtype=np.float64)
    m.velocity = np.array([vx, vy], dtype=np.float64)


def resolve_walls(system: System, width: float, height: float) -> list[int]:
    """
    Apply the exploded-mass guard, stick and bounce tests to every free mass.

    Returns:
        Indices of masses deleted because their state diverged.
    """
    params = system.params
    stick_mag = STICK_MAG * params.cur_dt * params.stickiness
    deleted = []

    for i, m in enumerate(system.masses):
        if not m.free:
            continue
        if is_exploded(m):
            system.delete_mass(i)
            deleted.append(i)
            continue
        if stick_to_wall(m, params, stick_mag, width, height):
            continue
        bounce_off_walls(m, params, width, height)

    if deleted:
        log.warning("Deleted %d exploded mass(es): %s", len(deleted), deleted)
    return deleted
