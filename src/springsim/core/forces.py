# MIT License (see LICENSE)
"""
Force accumulator for the mass-spring system.

Computes the acceleration of every free mass for a given set of provisional
positions and velocities. The integrators call accumulate_accel() once per
Runge-Kutta stage.

Contributions, in order:
- Body forces: gravity, centre-of-mass pull, viscous drag, point attraction
  and wall attraction/repulsion. These act on each free mass on its own.
- Spring forces: Hooke tension plus axial damping, applied with opposite
  signs to both endpoints and divided by each endpoint's mass.

All functions add into an (N, 2) acceleration array in-place. Rows of masses
that are dead or fixed stay zero.
"""
from __future__ import annotations

import numpy as np

from ..constants import CENTER_RADIUS
from ..params import ForceKind, ForceSetting, SimParams, Walls
from .arrays import SystemArrays


def resolve_center(
    arrays: SystemArrays,
    pos: np.ndarray,
    params: SimParams,
    width: float,
    height: float,
) -> tuple[np.ndarray, int]:
    """
    Return the attraction centre and the index of the centre mass.

    The centre is the (provisional) position of ``params.center_id`` when
    that mass is alive, otherwise the middle of the area. A centre id that
    points at a dead mass is cleared.
    """
    cid = params.center_id
    if cid >= 0:
        if cid < arrays.n and arrays.alive[cid]:
            return pos[cid].copy(), cid
        params.center_id = -1
    return np.array([width / 2.0, height / 2.0], dtype=np.float64), -1


def gravity_vector(setting: ForceSetting) -> np.ndarray:
    """
    Uniform gravity rotated by ``setting.misc`` degrees.

    Direction 0 points towards the bottom wall (negative y).
    """
    if not setting.enabled:
        return np.zeros(2, dtype=np.float64)
    angle = np.radians(setting.misc)
    return np.array([setting.value * np.sin(angle), -setting.value * np.cos(angle)], dtype=np.float64)


def center_of_mass_accel(
    arrays: SystemArrays,
    pos: np.ndarray,
    vel: np.ndarray,
    center: np.ndarray,
    center_id: int,
    setting: ForceSetting,
) -> np.ndarray:
    """
    Spring-like pull of the free masses' centre of mass towards ``center``.

    Returns the acceleration shared by every free mass except the centre
    mass: -(k (c̄ - centre) + d v̄) / Σm, where c̄ and v̄ are the
    mass-weighted mean position and velocity.
    """
    if not setting.enabled:
        return np.zeros(2, dtype=np.float64)
    sel = arrays.free.copy()
    if center_id >= 0:
        sel[center_id] = False
    w = arrays.mass[sel]
    msum = float(w.sum())
    if msum == 0.0:
        return np.zeros(2, dtype=np.float64)
    mix = (w[:, None] * pos[sel]).sum(axis=0) / msum - center
    miv = (w[:, None] * vel[sel]).sum(axis=0) / msum
    return -(setting.value * mix + setting.misc * miv) / msum


def apply_point_attraction(
    acc: np.ndarray,
    arrays: SystemArrays,
    pos: np.ndarray,
    center: np.ndarray,
    setting: ForceSetting,
) -> None:
    """
    Inverse-power attraction of every free mass towards ``center``.

    Magnitude is value / r^misc. The separation is clamped to the sum of the
    mass radius and the centre radius so the force stays finite.
    """
    free = arrays.free
    d = center - pos[free]
    mag = np.hypot(d[:, 0], d[:, 1])
    lim = arrays.radius[free] + CENTER_RADIUS
    close = mag < lim
    d[close] *= (mag[close] / lim[close])[:, None]
    mag = np.where(close, lim, mag)
    fmag = setting.value / mag ** setting.misc
    acc[free] += (fmag / mag)[:, None] * d


def apply_wall_force(
    acc: np.ndarray,
    arrays: SystemArrays,
    pos: np.ndarray,
    walls: Walls,
    setting: ForceSetting,
    width: float,
    height: float,
) -> None:
    """
    Repulsion (value > 0) or attraction (value < 0) from each present wall.

    The clearance between the mass's screen radius and the wall is clamped
    to at least 1 and raised to ``misc``. Masses beyond a wall feel nothing
    from it.
    """
    free = arrays.free
    gval = -setting.value
    rad = arrays.screen_radius[free]
    x = pos[free, 0]
    y = pos[free, 1]
    dax = np.zeros_like(x)
    day = np.zeros_like(y)

    def push(dist: np.ndarray) -> np.ndarray:
        scaled = np.maximum(dist, 1.0) ** setting.misc
        return np.where(dist >= 0, gval / scaled, 0.0)

    if walls.left:
        dax -= push(x - rad)
    if walls.right:
        dax += push(width - rad - x)
    if walls.top:
        day += push(height - rad - y)
    if walls.bottom:
        day -= push(y - rad)

    acc[free, 0] += dax
    acc[free, 1] += day


def apply_springs(
    acc: np.ndarray,
    arrays: SystemArrays,
    pos: np.ndarray,
    vel: np.ndarray,
) -> None:
    """
    Add the tension and damping of every live spring.

    f = ks (restlen - |d|) - kd (Δv · d̂), directed along d = p1 - p2.
    Zero-length springs are skipped. Fixed or dead endpoints receive nothing.
    """
    if arrays.n_springs == 0:
        return
    m1, m2 = arrays.s_m1, arrays.s_m2
    d = pos[m1] - pos[m2]
    mag = np.hypot(d[:, 0], d[:, 1])
    ok = (d[:, 0] != 0) | (d[:, 1] != 0)

    force = arrays.ks * (arrays.restlen - mag)
    damp = ((vel[m1] - vel[m2]) * d).sum(axis=1) / mag
    force = np.where(arrays.kd != 0, force - arrays.kd * damp, force)
    f = (force / mag)[:, None] * d

    on1 = ok & arrays.free[m1]
    on2 = ok & arrays.free[m2]
    np.add.at(acc, m1[on1], f[on1] / arrays.mass[m1[on1], None])
    np.subtract.at(acc, m2[on2], f[on2] / arrays.mass[m2[on2], None])


def accumulate_accel(
    arrays: SystemArrays,
    pos: np.ndarray,
    vel: np.ndarray,
    params: SimParams,
    width: float,
    height: float,
) -> np.ndarray:
    """
    Net acceleration of every mass at the given provisional state.

    Args:
        arrays: Packed system (masses, radii, flags, springs).
        pos, vel: (N, 2) provisional positions and velocities.
        params: Force settings, viscosity and walls.
        width, height: Size of the area (wall positions, default centre).

    Returns:
        (N, 2) accelerations; zero for dead and fixed masses.
    """
    acc = np.zeros_like(pos)
    free = arrays.free
    if not free.any():
        return acc

    with np.errstate(all="ignore"):
        center, center_id = resolve_center(arrays, pos, params, width, height)
        g = gravity_vector(params.force(ForceKind.GRAVITY))
        og = center_of_mass_accel(arrays, pos, vel, center, center_id, params.force(ForceKind.CENTER_MASS))

        acc[free] = g - params.viscosity * vel[free]
        pulled = free.copy()
        if center_id >= 0:
            pulled[center_id] = False
        acc[pulled] += og

        attract = params.force(ForceKind.POINT_ATTRACT)
        if attract.enabled:
            apply_point_attraction(acc, arrays, pos, center, attract)

        wall = params.force(ForceKind.WALL)
        if wall.enabled:
            apply_wall_force(acc, arrays, pos, params.walls, wall, width, height)

        apply_springs(acc, arrays, pos, vel)

    return acc
