# MIT License (see LICENSE)
"""
Packed numpy view of a System for the numeric kernels.

The integrators work on (N, 2) position/velocity arrays covering every mass
slot (dead and fixed ones included, so spring endpoint indices can be used
directly). Only rows flagged ``free`` ever change; results are written back
to the Mass objects once a step is accepted.
"""
from __future__ import annotations
from dataclasses import dataclass

import numpy as np

from ..system import System
from ..util import screen_radius


@dataclass
class SystemArrays:
    """
    Struct-of-arrays snapshot of the masses and live springs.

    Attributes:
        pos, vel: (N, 2) positions and velocities.
        mass: (N,) scalar masses.
        radius: (N,) display radii (point-attraction clamp).
        screen_radius: (N,) screen radii (wall clearance).
        alive: (N,) mask of alive masses.
        free: (N,) mask of alive, non-fixed masses.
        s_m1, s_m2: Endpoint indices of live springs.
        ks, kd, restlen: Parameters of live springs.
    """
    pos: np.ndarray
    vel: np.ndarray
    mass: np.ndarray
    radius: np.ndarray
    screen_radius: np.ndarray
    alive: np.ndarray
    free: np.ndarray
    s_m1: np.ndarray
    s_m2: np.ndarray
    ks: np.ndarray
    kd: np.ndarray
    restlen: np.ndarray

    @classmethod
    def from_system(cls, system: System) -> "SystemArrays":
        masses = system.masses
        n = len(masses)
        pos = np.zeros((n, 2), dtype=np.float64)
        vel = np.zeros((n, 2), dtype=np.float64)
        for i, m in enumerate(masses):
            pos[i] = m.position
            vel[i] = m.velocity

        springs = [s for s in system.springs if s.alive]
        return cls(
            pos=pos,
            vel=vel,
            mass=np.array([m.mass for m in masses], dtype=np.float64),
            radius=np.array([m.radius for m in masses], dtype=np.float64),
            screen_radius=np.array([screen_radius(m.radius) for m in masses], dtype=np.float64),
            alive=np.array([m.alive for m in masses], dtype=bool),
            free=np.array([m.free for m in masses], dtype=bool),
            s_m1=np.array([s.m1 for s in springs], dtype=np.intp),
            s_m2=np.array([s.m2 for s in springs], dtype=np.intp),
            ks=np.array([s.ks for s in springs], dtype=np.float64),
            kd=np.array([s.kd for s in springs], dtype=np.float64),
            restlen=np.array([s.restlen for s in springs], dtype=np.float64),
        )

    @property
    def n(self) -> int:
        return len(self.mass)

    @property
    def n_springs(self) -> int:
        return len(self.ks)

    def write_back(
        self,
        system: System,
        pos: np.ndarray,
        vel: np.ndarray,
        acc: np.ndarray,
    ) -> None:
        """Copy the rows of free masses back into the Mass objects."""
        for i in np.flatnonzero(self.free):
            m = system.masses[i]
            m.position = pos[i].copy()
            m.velocity = vel[i].copy()
            m.acceleration = acc[i].copy()
