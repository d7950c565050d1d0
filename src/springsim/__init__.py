# MIT License (see LICENSE)
"""
springsim - A 2D mass-spring simulation engine.

This package simulates networks of point masses joined by damped springs,
under gravity, a centring pull, point attraction, wall forces and drag,
with sticky/bouncy walls and pairwise collisions.

Main entry points:
    - System: The entity store (masses, springs, parameters, selection).
    - Simulation: Steps a System inside a rectangular area.
    - SimParams: Force settings, time step, walls and defaults.
    - Mass, Spring, Status: Entity records and their flags.

Submodules:
    - core: Packed arrays, force accumulator, integrators, invariants.
    - collision: Walls and pairwise impacts.
    - io: XSpringies (.xsp) and JSON persistence.

Example:
    from springsim import System, Simulation, ForceKind

    system = System()
    system.params.enable(ForceKind.GRAVITY)
    a = system.add_mass(100, 300, fixed=True)
    b = system.add_mass(100, 200)
    system.add_spring(a, b)
    sim = Simulation(system, width=640, height=480)
    sim.advance()
"""
from .system import System
from .simulation import Simulation
from .params import SimParams, ForceKind, ForceSetting, Walls
from .types import Mass, Spring, Status
from .pacer import FramePacer
from .profiler import Profiler

__all__ = [
    # Core simulation
    "System",
    "Simulation",
    # Parameters
    "SimParams",
    "ForceKind",
    "ForceSetting",
    "Walls",
    # Entities
    "Mass",
    "Spring",
    "Status",
    # Loop helpers
    "FramePacer",
    "Profiler",
]
