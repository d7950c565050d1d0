# MIT License (see LICENSE)
"""
Utilities for calculating physical invariants and conserved quantities.

Used for verifying simulation correctness and debugging stability issues.
In a closed system without damping, drag or external forces, the sum of
kinetic and spring energy and the total momentum should stay constant
(within integration error).
"""
from __future__ import annotations
import numpy as np

from ..system import System
from ..util import distance


def kinetic_energy(system: System) -> float:
    """
    Total kinetic energy of the free masses.

    T = Σ 0.5 m v²
    """
    ke = 0.0
    for m in system.masses:
        if not m.free:
            continue
        ke += 0.5 * m.mass * float(np.dot(m.velocity, m.velocity))
    return ke


def spring_energy(system: System) -> float:
    """
    Total elastic energy stored in the live springs.

    U = Σ 0.5 ks (|p1 - p2| - restlen)²
    """
    u = 0.0
    for s in system.springs:
        if not s.alive:
            continue
        stretch = distance(system.masses[s.m1].position, system.masses[s.m2].position) - s.restlen
        u += 0.5 * s.ks * stretch * stretch
    return u


def total_energy(system: System) -> float:
    """Kinetic plus spring energy (no potential from body forces)."""
    return kinetic_energy(system) + spring_energy(system)


def linear_momentum(system: System) -> np.ndarray:
    """
    Total linear momentum of the free masses.

    P = Σ m v
    """
    p = np.zeros(2, dtype=np.float64)
    for m in system.masses:
        if not m.free:
            continue
        p += m.mass * m.velocity
    return p
