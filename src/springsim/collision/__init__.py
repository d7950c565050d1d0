# MIT License (see LICENSE)
"""
Post-step boundary and collision handling.

This subpackage provides:
    - Walls: exploded-mass guard, sticky walls and wall bounces.
    - Impact: pairwise oblique impact between overlapping masses.

Typical usage:
    from springsim.collision import resolve_walls, resolve_impacts

    resolve_walls(system, width, height)
    if system.params.collide:
        resolve_impacts(system)
"""
from .walls import is_exploded, stick_to_wall, bounce_off_walls, resolve_walls
from .impact import impact_ratio, oblique_impact, overlapping_pairs, resolve_impacts

__all__ = [
    # Walls
    "is_exploded",
    "stick_to_wall",
    "bounce_off_walls",
    "resolve_walls",
    # Impact
    "impact_ratio",
    "oblique_impact",
    "overlapping_pairs",
    "resolve_impacts",
]
