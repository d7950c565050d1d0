# MIT License (see LICENSE)
"""
Numerical integrators for the mass-spring system.

Both integrators advance every free mass at once on the packed (N, 2)
arrays of a SystemArrays, re-evaluating the force accumulator at each
stage's provisional state:

- rk4_step: classical fixed-step 4th-order Runge-Kutta.
- rkf45_step: one embedded Runge-Kutta-Fehlberg 4(5) step with Cash-Karp
  coefficients, returning the 5th-order solution and an error ratio.
- adaptive_step: rkf45_step with step-size control. Rejected steps restart
  from the pre-step state with a smaller step; params.cur_dt is updated in
  place with the step suggested for the next call.

Nothing is written to the System here; the caller commits the result.

Reference:
    Numerical Recipes (2nd ed.), §16.2, embedded Runge-Kutta formulas.
"""
from __future__ import annotations
import math
from dataclasses import dataclass

import numpy as np

from ..constants import DT_MAX, DT_MIN, ERR_FLOOR, MAX_STEP_RETRIES
from ..logger import get_logger
from ..params import SimParams
from .arrays import SystemArrays
from .forces import accumulate_accel

log = get_logger(__name__)

# Classical RK4 tableau.
RK4_A = (
    (),
    (0.5,),
    (0.0, 0.5),
    (0.0, 0.0, 1.0),
)
RK4_B = (1.0 / 6.0, 1.0 / 3.0, 1.0 / 3.0, 1.0 / 6.0)

# Cash-Karp tableau.
CK_A = (
    (),
    (1.0 / 5.0,),
    (3.0 / 40.0, 9.0 / 40.0),
    (3.0 / 10.0, -9.0 / 10.0, 6.0 / 5.0),
    (-11.0 / 54.0, 5.0 / 2.0, -70.0 / 27.0, 35.0 / 27.0),
    (1631.0 / 55296.0, 175.0 / 512.0, 575.0 / 13824.0, 44275.0 / 110592.0, 253.0 / 4096.0),
)
CK_B5 = (37.0 / 378.0, 0.0, 250.0 / 621.0, 125.0 / 594.0, 0.0, 512.0 / 1771.0)
CK_B4 = (2825.0 / 27648.0, 0.0, 18575.0 / 48384.0, 13525.0 / 55296.0, 277.0 / 14336.0, 0.25)
CK_E = tuple(b5 - b4 for b5, b4 in zip(CK_B5, CK_B4))


@dataclass
class StepResult:
    """
    Outcome of one integrator call.

    Attributes:
        pos, vel: (N, 2) state after the step (fixed/dead rows unchanged).
        acc: (N, 2) accelerations from the last force evaluation.
        h: Step actually taken.
        error_ratio: Embedded error over precision (adaptive only).
        attempts: Number of stage sequences evaluated.
    """
    pos: np.ndarray
    vel: np.ndarray
    acc: np.ndarray
    h: float
    error_ratio: float | None = None
    attempts: int = 1


def _stages(
    arrays: SystemArrays,
    params: SimParams,
    h: float,
    width: float,
    height: float,
    a: tuple[tuple[float, ...], ...],
) -> tuple[list[np.ndarray], list[np.ndarray], np.ndarray]:
    """
    Evaluate the stages of an explicit Runge-Kutta tableau.

    Returns:
        (kx, kv, acc): per-stage position and velocity increments (already
        multiplied by h), and the accelerations of the last stage.
    """
    x0, v0 = arrays.pos, arrays.vel
    mask = arrays.free[:, None]
    kx: list[np.ndarray] = []
    kv: list[np.ndarray] = []
    acc = np.zeros_like(x0)
    with np.errstate(all="ignore"):
        for row in a:
            x = x0.copy()
            v = v0.copy()
            for coef, dx, dv in zip(row, kx, kv):
                if coef:
                    x += coef * dx
                    v += coef * dv
            acc = accumulate_accel(arrays, x, v, params, width, height)
            kx.append(np.where(mask, v * h, 0.0))
            kv.append(np.where(mask, acc * h, 0.0))
    return kx, kv, acc


def _combine(base: np.ndarray, weights: tuple[float, ...], ks: list[np.ndarray]) -> np.ndarray:
    out = base.copy()
    with np.errstate(all="ignore"):
        for w, k in zip(weights, ks):
            if w:
                out += w * k
    return out


def rk4_step(
    arrays: SystemArrays,
    params: SimParams,
    h: float,
    width: float,
    height: float,
) -> StepResult:
    """
    Advance every free mass by h with classical RK4.

    Four force evaluations are combined with weights (1, 2, 2, 1)/6. There
    is no error estimate and the step is never rejected.
    """
    kx, kv, acc = _stages(arrays, params, h, width, height, RK4_A)
    return StepResult(
        pos=_combine(arrays.pos, RK4_B, kx),
        vel=_combine(arrays.vel, RK4_B, kv),
        acc=acc,
        h=h,
    )


def rkf45_step(
    arrays: SystemArrays,
    params: SimParams,
    h: float,
    width: float,
    height: float,
) -> StepResult:
    """
    One embedded RKF45 (Cash-Karp) step of size h.

    The error of a mass is the summed absolute difference between the 5th
    and 4th order increments over x, y, vx and vy. The reported ratio is the
    worst error over all free masses (floored at ERR_FLOOR) divided by
    ``params.precision``. Masses whose error is NaN do not take part; they
    are removed by the exploded-mass guard after the step.
    """
    kx, kv, acc = _stages(arrays, params, h, width, height, CK_A)
    free = arrays.free

    with np.errstate(all="ignore"):
        ex = _combine(np.zeros_like(arrays.pos), CK_E, kx)
        ev = _combine(np.zeros_like(arrays.vel), CK_E, kv)
        err = (np.abs(ex) + np.abs(ev)).sum(axis=1)[free]
    err = err[~np.isnan(err)]
    maxerr = max(ERR_FLOOR, float(err.max())) if err.size else ERR_FLOOR
    ratio = maxerr / params.precision if params.precision > 0 else math.inf

    return StepResult(
        pos=_combine(arrays.pos, CK_B5, kx),
        vel=_combine(arrays.vel, CK_B5, kv),
        acc=acc,
        h=h,
        error_ratio=ratio,
    )


def adaptive_step(
    arrays: SystemArrays,
    params: SimParams,
    width: float,
    height: float,
) -> StepResult:
    """
    RKF45 with step-size control.

    The step is clamped to [DT_MIN, DT_MAX]. A step with error ratio r < 1
    is accepted and the next step grows by 0.9·r^(-1/8). Otherwise the step
    is retried from the pre-step state with h shrunk by 0.9·r^(-1/4), unless
    h is already DT_MIN, in which case it is accepted as is.

    Deterministic acceptance rule:
        Accept if r < 1 OR h <= DT_MIN

    Returns:
        The accepted step; ``params.cur_dt`` holds the next suggested step.
    """
    result = None
    for attempt in range(1, MAX_STEP_RETRIES + 1):
        if not math.isfinite(params.cur_dt):
            params.cur_dt = DT_MAX
        params.cur_dt = min(max(params.cur_dt, DT_MIN), DT_MAX)
        h = params.cur_dt

        result = rkf45_step(arrays, params, h, width, height)
        result.attempts = attempt
        ratio = result.error_ratio

        if ratio < 1.0:
            params.cur_dt = h * 0.9 * math.exp(-math.log(max(ratio, 1e-300)) / 8.0)
            return result
        if h <= DT_MIN:
            return result
        params.cur_dt = h * 0.9 * math.exp(-math.log(ratio) / 4.0)

    log.warning("Adaptive step not accepted after %d attempts (h=%g, error ratio=%g)",
                MAX_STEP_RETRIES, result.h, result.error_ratio)
    return result
