# MIT License (see LICENSE)
"""
Numeric constants used throughout the simulation.

Units are screen units (the canvas is measured in pixels, y pointing up)
and simulated seconds.
"""
from __future__ import annotations

# Adaptive step-size bounds for the RKF45 integrator.
DT_MIN: float = 0.0001
DT_MAX: float = 0.5

# Fixed step used when adaptive stepping is on but no spring is alive.
DEF_TSTEP: float = 0.025

# Upper bound on rejected attempts inside one adaptive step. Every rejection
# shrinks the step by at least 0.9, so DT_MIN is reached well before this.
MAX_STEP_RETRIES: int = 100

# Lower bound of the embedded error estimate before dividing by precision.
ERR_FLOOR: float = 1e-5

# Stickiness calibration: with STICK_MAG = 1.0 a mass of 1.0 under gravity 1.0
# stays stuck on a wall for every stickiness value above 1.0.
STICK_MAG: float = 1.0

# A mass is "against" a wall when its snapshot is this close to it.
WALL_CONTACT: float = 0.5

# Collision radius used for fixed masses.
NAIL_SIZE: int = 4

# Radius of the point used as centre when no centre mass is set.
CENTER_RADIUS: float = 1.0

# Picking tolerances for nearest_object().
MPROXIMITY: float = 8.0
SPROXIMITY: float = 8.0

# Replacement for an exactly vertical contact axis in the impact formula.
DX_EPS: float = 1e-10

# Frame pacing.
FRAME_TIME: float = 0.05
MAX_SKIPPED_FRAMES: int = 8
