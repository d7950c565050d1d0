# MIT License (see LICENSE)
"""
Input/Output utilities for mass-spring systems.

This subpackage provides:
    - XSpringies text format (.xsp): load, insert and save.
    - JSON format: the same content as a nested dictionary.

Both formats only go through the public System API, so a loaded system is
indistinguishable from one built by hand.

Typical usage:
    from springsim.io import load_xsp, save_xsp, load_scene, save_scene

    system = System()
    load_xsp("web.xsp", system)
    save_scene(system, "web.json")
"""
from .json_io import (
    load_scene,
    load_scene_raw,
    save_scene,
    system_to_json,
    system_from_json,
    mass_to_json,
    mass_from_json,
    spring_to_json,
    spring_from_json,
)
from .xsp_io import (
    MAGIC,
    extend_file,
    load_xsp,
    save_xsp,
    read_xsp,
    write_xsp,
)

__all__ = [
    # JSON
    "load_scene",
    "load_scene_raw",
    "save_scene",
    "system_to_json",
    "system_from_json",
    "mass_to_json",
    "mass_from_json",
    "spring_to_json",
    "spring_from_json",
    # XSpringies
    "MAGIC",
    "extend_file",
    "load_xsp",
    "save_xsp",
    "read_xsp",
    "write_xsp",
]
