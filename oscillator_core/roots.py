# oscillator_core/roots.py
from __future__ import annotations
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

MAX_BISECTIONS = 60


def first_time_to(f: Callable[[float], float],
                  target: float,
                  t_min: float = 0.0,
                  t_max: float = 100.0,
                  dt: float = 0.01,
                  tolerance: float = 1e-9) -> Optional[float]:
    """
    Earliest t >= t_min with |f(t) - target| < tolerance, or None if the
    target is not reached by t_max.

    Coarse scan with step dt, then bisection on the first sign change.
    Two crossings closer together than dt fall inside one step without a
    sign change and are not seen; the resolution of the scan is dt.
    """
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")

    def g(t: float) -> float:
        return f(t) - target

    prev_t = t_min
    prev_g = g(t_min)
    if abs(prev_g) < tolerance:
        return t_min

    i = 0
    while prev_t < t_max:
        i += 1
        # t_min + i dt avoids accumulating rounding from repeated t += dt
        cur_t = min(t_min + i * dt, t_max)
        cur_g = g(cur_t)

        if abs(cur_g) < tolerance:
            logger.debug("first_time_to: sample hit at t=%g", cur_t)
            return cur_t

        if prev_g * cur_g < 0:
            return _bisect(g, prev_t, cur_t, prev_g, tolerance)

        prev_t, prev_g = cur_t, cur_g

    logger.debug("first_time_to: target %g not reached in [%g, %g]", target, t_min, t_max)
    return None


def _bisect(g: Callable[[float], float], lo: float, hi: float, g_lo: float, tolerance: float) -> float:
    for _ in range(MAX_BISECTIONS):
        mid = 0.5 * (lo + hi)
        g_mid = g(mid)
        if abs(g_mid) < tolerance:
            return mid
        if g_lo * g_mid < 0:
            hi = mid
        else:
            lo, g_lo = mid, g_mid
    return 0.5 * (lo + hi)
