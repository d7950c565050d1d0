# MIT License (see LICENSE)
"""
Simulation parameters.

One SimParams instance belongs to each System. It holds the defaults used
for newly created entities, the four global force settings, drag and
stickiness, the time step and precision of the integrator, the walls and
the collision switch. The force accumulator and the integrators receive it
explicitly.
"""
from __future__ import annotations
import enum
from dataclasses import dataclass, field, fields, asdict
from typing import Any

from .constants import DEF_TSTEP


class ForceKind(enum.IntEnum):
    """Global force slots, in file order."""
    GRAVITY = 0
    CENTER_MASS = 1
    POINT_ATTRACT = 2
    WALL = 3


@dataclass
class ForceSetting:
    """
    One global force.

    Attributes:
        enabled: Whether the force is applied.
        value: Primary magnitude (gravity, spring constant of the centring
            pull, attraction magnitude, wall magnitude).
        misc: Secondary parameter (gravity direction in degrees, centring
            damping, attraction exponent, wall exponent).
    """
    enabled: bool = False
    value: float = 0.0
    misc: float = 0.0


def _default_forces() -> dict[ForceKind, ForceSetting]:
    return {
        ForceKind.GRAVITY: ForceSetting(False, 10.0, 0.0),
        ForceKind.CENTER_MASS: ForceSetting(False, 5.0, 2.0),
        ForceKind.POINT_ATTRACT: ForceSetting(False, 10.0, 0.0),
        ForceKind.WALL: ForceSetting(False, 10000.0, 1.0),
    }


@dataclass
class Walls:
    """Which of the four canvas borders act as walls."""
    top: bool = True
    left: bool = True
    right: bool = True
    bottom: bool = True


@dataclass
class SimParams:
    """
    Global simulation parameters.

    Attributes:
        cur_mass, cur_rest: Mass and elasticity given to new masses.
        cur_ks, cur_kd: Stiffness and damping given to new springs.
        fix_mass: New masses are created fixed.
        show_spring: Editor preview flag (persisted only).
        center_id: Index of the centre mass, or -1 for the canvas middle.
        forces: Settings for each ForceKind.
        viscosity: Isotropic drag coefficient.
        stickiness: Wall stickiness coefficient.
        cur_dt: Current step; adapted in place by the RKF45 integrator.
        precision: Error target of the adaptive integrator.
        adaptive_step: Use RKF45 with step control instead of fixed RK4.
        grid_snap, grid_snap_size: Editor grid settings (persisted only).
        walls: Wall presence flags.
        collide: Enable pairwise mass collisions.
    """
    cur_mass: float = 1.0
    cur_rest: float = 1.0
    cur_ks: float = 1.0
    cur_kd: float = 1.0
    fix_mass: bool = False
    show_spring: bool = True
    center_id: int = -1
    forces: dict[ForceKind, ForceSetting] = field(default_factory=_default_forces)
    viscosity: float = 0.0
    stickiness: float = 0.0
    cur_dt: float = DEF_TSTEP
    precision: float = 1.0
    adaptive_step: bool = False
    grid_snap: bool = False
    grid_snap_size: float = 20.0
    walls: Walls = field(default_factory=Walls)
    collide: bool = False

    def reset(self) -> None:
        """Restore every parameter to its default, in place."""
        defaults = SimParams()
        for f in fields(self):
            setattr(self, f.name, getattr(defaults, f.name))

    def force(self, kind: ForceKind) -> ForceSetting:
        return self.forces[ForceKind(kind)]

    def enable(self, kind: ForceKind, value: float | None = None, misc: float | None = None) -> None:
        """Switch a force on, optionally overriding its magnitude/parameter."""
        f = self.force(kind)
        f.enabled = True
        if value is not None:
            f.value = float(value)
        if misc is not None:
            f.misc = float(misc)

    def disable(self, kind: ForceKind) -> None:
        self.force(kind).enabled = False

    def set_walls(self, top: bool, left: bool, right: bool, bottom: bool) -> None:
        self.walls = Walls(top=top, left=left, right=right, bottom=bottom)

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form (JSON friendly)."""
        d = asdict(self)
        d["forces"] = {kind.name.lower(): asdict(f) for kind, f in self.forces.items()}
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "SimParams":
        """
        Build parameters from a dict produced by to_dict().

        Missing keys keep their defaults; unknown keys are ignored.
        """
        params = cls()
        known = {f.name for f in fields(cls)}
        for key, value in d.items():
            if key not in known:
                continue
            if key == "forces":
                for name, fd in value.items():
                    try:
                        kind = ForceKind[name.upper()]
                    except KeyError:
                        raise ValueError(f"Unknown force kind: {name}") from None
                    params.forces[kind] = ForceSetting(
                        enabled=bool(fd.get("enabled", False)),
                        value=float(fd.get("value", 0.0)),
                        misc=float(fd.get("misc", 0.0)),
                    )
            elif key == "walls":
                params.walls = Walls(**{k: bool(v) for k, v in value.items()})
            else:
                default = getattr(params, key)
                setattr(params, key, type(default)(value))
        return params
