# MIT License (see LICENSE)
"""
Core type definitions for the mass-spring simulation.

Defines the two simulation entities:
- Mass: a point mass with position, velocity, mass and elasticity.
- Spring: a damped spring connecting two masses by index.

Both carry a Status flag set. Entities live in the System arenas and refer
to each other by stable integer index (spring -> masses through m1/m2,
mass -> springs through ``parents``).
"""
from __future__ import annotations
import enum
from dataclasses import dataclass, field

import numpy as np

from .util import f64


class Status(enum.Flag):
    """Lifecycle and editing flags of a mass or spring."""
    NONE = 0
    ALIVE = enum.auto()
    SELECTED = enum.auto()
    FIXED = enum.auto()
    TEMP_FIXED = enum.auto()


class _Flagged:
    """Boolean accessors over ``self.status``."""

    status: Status

    def _set(self, flag: Status, on: bool) -> None:
        if on:
            self.status |= flag
        else:
            self.status &= ~flag

    @property
    def alive(self) -> bool:
        return bool(self.status & Status.ALIVE)

    @alive.setter
    def alive(self, on: bool) -> None:
        self._set(Status.ALIVE, on)

    @property
    def selected(self) -> bool:
        return bool(self.status & Status.SELECTED)

    @selected.setter
    def selected(self, on: bool) -> None:
        self._set(Status.SELECTED, on)

    def toggle_selected(self) -> None:
        self.status ^= Status.SELECTED


@dataclass
class Mass(_Flagged):
    """
    A point mass.

    Attributes:
        position: Position [x, y] in screen units (y up).
        velocity: Velocity [vx, vy].
        acceleration: Acceleration [ax, ay] from the most recent force pass.
        mass: Scalar mass (> 0 for anything that is integrated).
        elastic: Coefficient of restitution used for wall bounces and impacts.
        radius: Integer display radius, see util.mass_radius().
        parents: Indices of the springs attached to this mass.
        status: ALIVE / SELECTED / FIXED / TEMP_FIXED flags.
        old_position, old_velocity: Snapshot taken at the start of advance(),
            used for rollback and the wall stick/bounce tests.
        test_position, test_velocity: Result of a speculative RK4 step that
            was not committed.
    """
    position: np.ndarray | tuple[float, float] = (0.0, 0.0)
    velocity: np.ndarray | tuple[float, float] = (0.0, 0.0)
    mass: float = 0.0
    elastic: float = 0.0
    radius: int = 0
    parents: list[int] = field(default_factory=list)
    status: Status = Status.ALIVE

    acceleration: np.ndarray = field(default_factory=lambda: np.zeros(2, dtype=np.float64))
    old_position: np.ndarray = field(default_factory=lambda: np.zeros(2, dtype=np.float64))
    old_velocity: np.ndarray = field(default_factory=lambda: np.zeros(2, dtype=np.float64))
    test_position: np.ndarray = field(default_factory=lambda: np.zeros(2, dtype=np.float64))
    test_velocity: np.ndarray = field(default_factory=lambda: np.zeros(2, dtype=np.float64))

    def __post_init__(self) -> None:
        """Convert vectors to float64 arrays for consistent numerics."""
        self.position = f64(self.position)
        self.velocity = f64(self.velocity)
        self.acceleration = f64(self.acceleration)

    @property
    def fixed(self) -> bool:
        return bool(self.status & Status.FIXED)

    @fixed.setter
    def fixed(self, on: bool) -> None:
        self._set(Status.FIXED, on)

    @property
    def temp_fixed(self) -> bool:
        return bool(self.status & Status.TEMP_FIXED)

    @temp_fixed.setter
    def temp_fixed(self, on: bool) -> None:
        self._set(Status.TEMP_FIXED, on)

    @property
    def free(self) -> bool:
        """True for masses that are integrated: alive and not fixed."""
        return self.alive and not self.fixed

    def save_snapshot(self) -> None:
        """Record the current position/velocity as rollback state."""
        self.old_position = self.position.copy()
        self.old_velocity = self.velocity.copy()

    def copy(self) -> "Mass":
        """Independent copy (arrays and parent list are not shared)."""
        return Mass(
            position=self.position.copy(),
            velocity=self.velocity.copy(),
            mass=self.mass,
            elastic=self.elastic,
            radius=self.radius,
            parents=list(self.parents),
            status=self.status,
            acceleration=self.acceleration.copy(),
            old_position=self.old_position.copy(),
            old_velocity=self.old_velocity.copy(),
            test_position=self.test_position.copy(),
            test_velocity=self.test_velocity.copy(),
        )


@dataclass
class Spring(_Flagged):
    """
    A damped spring between masses ``m1`` and ``m2``.

    Attributes:
        ks: Stiffness (Hooke constant).
        kd: Damping along the spring axis.
        restlen: Rest length in screen units.
        m1, m2: Indices of the connected masses.
        status: ALIVE / SELECTED flags.
    """
    ks: float = 0.0
    kd: float = 0.0
    restlen: float = 0.0
    m1: int = 0
    m2: int = 0
    status: Status = Status.ALIVE

    def copy(self) -> "Spring":
        return Spring(ks=self.ks, kd=self.kd, restlen=self.restlen,
                      m1=self.m1, m2=self.m2, status=self.status)
