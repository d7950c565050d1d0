# MIT License (see LICENSE)
"""
Core numeric components.

This subpackage provides:
    - SystemArrays: packed numpy view of a System.
    - Force accumulator: gravity, centring, drag, point attraction, walls, springs.
    - Integrators: fixed RK4 and adaptive RKF45 (Cash-Karp).
    - Invariants: energy and momentum diagnostics.

Typical usage:
    from springsim.core import SystemArrays, rk4_step

    arrays = SystemArrays.from_system(system)
    result = rk4_step(arrays, system.params, h=0.025, width=640, height=480)
"""
from .arrays import SystemArrays
from .forces import accumulate_accel
from .integrators import StepResult, rk4_step, rkf45_step, adaptive_step
from .invariants import kinetic_energy, spring_energy, total_energy, linear_momentum

__all__ = [
    "SystemArrays",
    # Forces
    "accumulate_accel",
    # Integrators
    "StepResult",
    "rk4_step",
    "rkf45_step",
    "adaptive_step",
    # Invariants
    "kinetic_energy",
    "spring_energy",
    "total_energy",
    "linear_momentum",
]
