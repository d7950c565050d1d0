# MIT License (see LICENSE)
"""
Pairwise oblique impact between overlapping masses.

Runs after the wall pass when collisions are enabled. Positions are not
touched, so the overlap test is done once for all pairs with numpy; the
velocity exchange is then applied pair by pair in (i, j) order with i < j,
each pair seeing the velocities left by the previous ones.

Fixed masses take part with a small "nail" radius and act as immovable
partners: they never change velocity, and a free mass hitting one rebounds
as if from an infinitely heavy body.
"""
from __future__ import annotations

import numpy as np

from ..constants import DX_EPS, NAIL_SIZE
from ..system import System
from ..types import Mass


def impact_ratio(m: Mass, other: Mass) -> float:
    """Share of the relative normal velocity that ``m`` gives up."""
    restitution = 1.0 + (m.elastic + other.elastic) / 2.0
    if other.fixed:
        return restitution
    if other.mass <= 0.0:
        # massless partner: nothing to push against
        return 0.0
    return restitution / (1.0 + m.mass / other.mass)


def _exchange(m: Mass, v_self: np.ndarray, v_other: np.ndarray,
              dx: float, dy: float, ratio: float) -> None:
    """
    Replace the normal component of ``m``'s velocity.

    (dx, dy) is the line of centres; the tangential component is kept.
    """
    dxq = dx * dx
    dyq = dy * dy
    sumq = dxq + dyq
    if dx == 0.0:
        dx = DX_EPS
    vx, vy = v_self
    ovx, ovy = v_other
    nvx = (vx - (vx - ovx) * ratio) * (dxq / sumq) + vx * (dyq / sumq) - (vy - ovy) * ratio * (dx * dy / sumq)
    nvy = (nvx - vx) * (dy / dx) + vy
    m.velocity = np.array([nvx, nvy], dtype=np.float64)


def oblique_impact(m1: Mass, m2: Mass) -> bool:
    """
    Exchange momentum between two overlapping masses if they are closing.

    The pair is closing when the relative velocity has a positive component
    along x or y of the separation m2 - m1.

    Returns:
        True if velocities were changed.
    """
    dx, dy = m2.position - m1.position
    v1 = m1.velocity.copy()
    v2 = m2.velocity.copy()
    dv = v1 - v2
    if not (dv[0] * dx > 0 or dv[1] * dy > 0):
        return False

    if not m1.fixed:
        _exchange(m1, v1, v2, dx, dy, impact_ratio(m1, m2))
    if not m2.fixed:
        _exchange(m2, v2, v1, dx, dy, impact_ratio(m2, m1))
    return True


def contact_radii(system: System) -> np.ndarray:
    """Collision radius of each mass: NAIL_SIZE when fixed, otherwise its radius."""
    return np.array([NAIL_SIZE if m.fixed else m.radius for m in system.masses], dtype=np.float64)


def overlapping_pairs(system: System) -> list[tuple[int, int]]:
    """
    All (i, j), i < j, of live masses closer than the sum of their radii.

    Ordered row-major, the order in which impacts are applied.
    """
    alive = np.array([m.alive for m in system.masses], dtype=bool)
    idx = np.flatnonzero(alive)
    if idx.size < 2:
        return []
    pos = np.array([system.masses[i].position for i in idx], dtype=np.float64)
    rad = contact_radii(system)[idx]

    a, b = np.triu_indices(idx.size, k=1)
    d = pos[b] - pos[a]
    dist = np.hypot(d[:, 0], d[:, 1])
    hit = dist < rad[a] + rad[b]
    return [(int(idx[i]), int(idx[j])) for i, j in zip(a[hit], b[hit])]


def resolve_impacts(system: System) -> int:
    """
    Apply oblique impacts to every overlapping, closing pair.

    Returns:
        Number of pairs whose velocities changed.
    """
    count = 0
    for i, j in overlapping_pairs(system):
        if oblique_impact(system.masses[i], system.masses[j]):
            count += 1
    return count
