# MIT License (see LICENSE)
"""
JSON serialization and deserialization for mass-spring systems.

Carries the same information as the .xsp format in a nested dictionary that
is easier to consume from other tools.

JSON Schema Overview:
---------------------
{
  "params": {                      # Optional, see SimParams.to_dict()
    "cur_mass": float, "cur_rest": float, "cur_ks": float, "cur_kd": float,
    "fix_mass": bool, "show_spring": bool, "center_id": int,
    "forces": {
      "gravity":       {"enabled": bool, "value": float, "misc": float},
      "center_mass":   {...},
      "point_attract": {...},
      "wall":          {...}
    },
    "viscosity": float, "stickiness": float, "cur_dt": float,
    "precision": float, "adaptive_step": bool,
    "grid_snap": bool, "grid_snap_size": float,
    "walls": {"top": bool, "left": bool, "right": bool, "bottom": bool},
    "collide": bool
  },
  "masses": [
    {
      "id": int,                   # Required, referenced by springs
      "position": [x, y],          # Default: [0, 0]
      "velocity": [vx, vy],        # Default: [0, 0]
      "mass": float,               # Required, > 0
      "elastic": float,            # Default: 1
      "fixed": bool                # Default: false
    }
  ],
  "springs": [
    {
      "m1": int, "m2": int,        # Mass ids
      "ks": float, "kd": float,
      "restlen": float
    }
  ]
}
"""
from __future__ import annotations
import json
from typing import Any

import numpy as np

from ..logger import get_logger
from ..params import SimParams
from ..system import System
from ..types import Mass, Spring, Status
from ..util import mass_radius

log = get_logger(__name__)


def load_scene_raw(path: str) -> dict[str, Any]:
    """
    Load raw JSON data from a scene file without object construction.

    Args:
        path: Absolute or relative path to the JSON file.

    Returns:
        Dictionary containing the raw JSON data.
    """
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def mass_from_json(d: dict[str, Any]) -> tuple[int, Mass]:
    """
    Parse a single mass definition.

    Returns:
        (id, Mass) with the radius derived from the mass.
    """
    if "id" not in d or "mass" not in d:
        raise ValueError("Mass definition requires 'id' and 'mass' fields.")
    mass = float(d["mass"])
    if mass <= 0:
        raise ValueError(f"Mass must be positive, got {mass}")
    status = Status.ALIVE
    if d.get("fixed", False):
        status |= Status.FIXED
    return int(d["id"]), Mass(
        position=tuple(d.get("position", [0.0, 0.0])),
        velocity=tuple(d.get("velocity", [0.0, 0.0])),
        mass=mass,
        elastic=float(d.get("elastic", 1.0)),
        radius=mass_radius(mass),
        status=status,
    )


def spring_from_json(d: dict[str, Any]) -> Spring:
    """Parse a single spring definition (endpoints are mass ids)."""
    try:
        return Spring(
            ks=float(d["ks"]),
            kd=float(d["kd"]),
            restlen=float(d["restlen"]),
            m1=int(d["m1"]),
            m2=int(d["m2"]),
        )
    except KeyError as e:
        raise ValueError(f"Spring definition missing required field {e}") from None


def system_from_json(data: dict[str, Any], system: System | None = None, insert: bool = False) -> System:
    """
    Populate a System from a scene dictionary.

    Args:
        data: Parsed scene (see module docstring).
        system: Target; a new System is created when omitted.
        insert: Merge into ``system`` instead of replacing it. Parameters are
            left untouched and, if nothing is selected, the new entities are
            selected.

    Returns:
        The populated system.

    Raises:
        ValueError: If a mass or spring definition is malformed.
    """
    if system is None:
        system = System()

    select_new = False
    if not insert:
        system.reset()
        if "params" in data:
            system.params = SimParams.from_dict(data["params"])
    elif not system.anything_selected():
        select_new = True

    masses = [mass_from_json(md) for md in data.get("masses", [])]
    springs = [spring_from_json(sd) for sd in data.get("springs", [])]
    mapping = system.import_entities(masses, springs, select_new=select_new)

    if not insert and system.params.center_id >= 0:
        system.params.center_id = mapping.get(system.params.center_id, -1)
    return system


def load_scene(path: str, system: System | None = None, insert: bool = False) -> System:
    """
    Load a System from a JSON file.

    Raises:
        FileNotFoundError: If the file cannot be found.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the scene content is malformed.
    """
    return system_from_json(load_scene_raw(path), system, insert=insert)


def mass_to_json(i: int, m: Mass) -> dict[str, Any]:
    """Serialize a mass under id ``i``; 'fixed' is only written when set."""
    result = {
        "id": i,
        "position": _to_list(m.position),
        "velocity": _to_list(m.velocity),
        "mass": m.mass,
        "elastic": m.elastic,
    }
    if m.fixed:
        result["fixed"] = True
    return result


def spring_to_json(s: Spring) -> dict[str, Any]:
    return {"m1": s.m1, "m2": s.m2, "ks": s.ks, "kd": s.kd, "restlen": s.restlen}


def system_to_json(system: System) -> dict[str, Any]:
    """
    Serialize parameters and every live mass and spring to a dictionary.

    The cursor mass and the preview spring are never written.

    Mass ids are arena indices, so spring endpoints are written unchanged.
    """
    return {
        "params": system.params.to_dict(),
        "masses": [
            mass_to_json(i, m) for i, m in enumerate(system.masses)
            if m.alive and not system.is_fake_mass(i)
        ],
        "springs": [
            spring_to_json(s) for i, s in enumerate(system.springs)
            if s.alive and not system.is_fake_spring(i)
        ],
    }


def save_scene(system: System, path: str, indent: int = 2) -> None:
    """Save a System to a JSON file on disk."""
    data = system_to_json(system)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent)


def _to_list(arr: Any) -> list[float]:
    """Helper: Convert numpy array or tuple to a clean list of floats."""
    if isinstance(arr, np.ndarray):
        return arr.tolist()
    return list(arr)
