from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import logging
import math
from typing import Optional

from oscillator_core.config import OscillatorConfig
from oscillator_core.latex import render_formula
from oscillator_core.oscillator import Oscillator, construct

logger = logging.getLogger(__name__)

MAX_SAMPLES = 100_000
# scan steps allowed for one first-time search, about a second of evaluations
MAX_SCAN_STEPS = 1_000_000


def _number(payload: dict, key: str, default: float) -> float:
    value = float(payload.get(key, default))
    if not math.isfinite(value):
        raise ValueError(f"{key} must be finite, got {value}")
    return value


def _count(payload: dict, key: str, default: int) -> int:
    return int(round(_number(payload, key, default)))


class DisplayMode(str, Enum):
    POSITION = "position"
    VELOCITY = "velocity"
    ACCELERATION = "acceleration"
    ALL = "all"


@dataclass
class AppState:
    """
    Per-session state shared between request handlers: the last solved
    oscillator and the currently selected display mode.
    """
    oscillator: Optional[Oscillator] = None
    display_mode: DisplayMode = DisplayMode.POSITION
    max_denominator: int = 100

    def require_solution(self) -> Oscillator:
        if self.oscillator is None:
            raise RuntimeError("Please solve first.")
        return self.oscillator


class OscillatorFactory:
    @staticmethod
    def create(payload: dict) -> Oscillator:
        return construct(OscillatorConfig.from_dict(payload))


class SolveService:
    def run(self, state: AppState, payload: dict) -> dict:
        oscillator = OscillatorFactory.create(payload)
        max_den = max(1, _count(payload, "max_denominator", payload.get("maxDen", 100)))

        state.oscillator = oscillator
        state.max_denominator = max_den
        logger.info("Solved %s oscillator (%s modes)",
                    oscillator.config.topology.value, oscillator.kind.value)

        resp = oscillator.modal.as_dict()
        resp["config"] = oscillator.config.as_dict()
        resp["amplitudes"] = [{"omega": m.omega, "phi": list(m.eigenvector), "A": m.A, "B": m.B}
                              for m in oscillator.modes]
        resp["coefficients"] = oscillator.coefficients.as_dict()
        resp["latex"] = render_formula(oscillator, max_den)
        return resp


class SeriesService:
    def run(self, state: AppState, payload: dict) -> dict:
        oscillator = state.require_solution()

        if "mode" in payload:
            state.display_mode = DisplayMode(payload["mode"])
        t_max = _number(payload, "t_max", payload.get("tMax", 20.0))
        samples = max(2, _count(payload, "samples", 500))
        if samples > MAX_SAMPLES:
            raise ValueError(f"samples must be at most {MAX_SAMPLES}, got {samples}")

        history = oscillator.sample(t_max, samples)
        series = {"mode": state.display_mode.value, "t": history.t.tolist()}

        quantities = {
            DisplayMode.POSITION: history.x,
            DisplayMode.VELOCITY: history.v,
            DisplayMode.ACCELERATION: history.a,
        }
        if state.display_mode is DisplayMode.ALL:
            for mode, values in quantities.items():
                series[mode.value] = values.tolist()
        else:
            series[state.display_mode.value] = quantities[state.display_mode].tolist()
        return series


class ValuesService:
    def run(self, state: AppState, t: float) -> dict:
        oscillator = state.require_solution()
        resp = oscillator.value_at_time(float(t))
        resp["t"] = float(t)
        return resp


class FirstTimeService:
    def run(self, state: AppState, payload: dict) -> dict:
        oscillator = state.require_solution()

        mass = _count(payload, "mass", 1)
        quantity = payload.get("quantity", "position")
        target = _number(payload, "target", 0.0)
        t_min = _number(payload, "t_min", 0.0)
        t_max = _number(payload, "t_max", 100.0)
        dt = _number(payload, "dt", 0.01)
        if dt > 0 and (t_max - t_min) / dt > MAX_SCAN_STEPS:
            raise ValueError(f"dt={dt} needs more than {MAX_SCAN_STEPS} scan steps over "
                             f"[{t_min}, {t_max}]")

        t = oscillator.first_time_to(
            mass, quantity, target,
            t_min=t_min,
            t_max=t_max,
            dt=dt,
            tolerance=_number(payload, "tolerance", 1e-9),
        )
        return {"found": t is not None, "t": t}
