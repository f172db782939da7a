# oscillator_core/coefficients.py
"""
Projection of the initial conditions onto the normal modes.

The general solution of the undamped 2-DOF system is

    x(t) = sum_i phi_i [A_i cos(w_i t) + B_i sin(w_i t)]

so each mass (and each derivative of its motion) is a trigonometric sum
with four coefficients over cos(w1 t), sin(w1 t), cos(w2 t), sin(w2 t).
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

import numpy as np

from .config import OscillatorConfig
from .modal import ModalResult, ModeKind

OMEGA_EPS = 1e-12


class Quantity(str, Enum):
    POSITION = "position"
    VELOCITY = "velocity"
    ACCELERATION = "acceleration"

    @classmethod
    def parse(cls, value) -> "Quantity":
        if isinstance(value, cls):
            return value
        aliases = {"x": cls.POSITION, "v": cls.VELOCITY, "a": cls.ACCELERATION}
        name = str(value).strip().lower()
        if name in aliases:
            return aliases[name]
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown quantity: {value!r}") from None


@dataclass(frozen=True)
class TrigSum:
    """c1 cos(w1 t) + s1 sin(w1 t) + c2 cos(w2 t) + s2 sin(w2 t)"""
    cos1: float = 0.0
    sin1: float = 0.0
    cos2: float = 0.0
    sin2: float = 0.0

    def as_tuple(self) -> tuple[float, float, float, float]:
        return self.cos1, self.sin1, self.cos2, self.sin2

    def derivative(self, w1: float, w2: float) -> "TrigSum":
        # d/dt [c cos(wt) + s sin(wt)] = (s w) cos(wt) + (-c w) sin(wt)
        return TrigSum(cos1=self.sin1 * w1, sin1=-self.cos1 * w1,
                       cos2=self.sin2 * w2, sin2=-self.cos2 * w2)

    def evaluate(self, t, w1: float, w2: float):
        t = np.asarray(t, dtype=float)
        value = (self.cos1 * np.cos(w1 * t) + self.sin1 * np.sin(w1 * t)
                 + self.cos2 * np.cos(w2 * t) + self.sin2 * np.sin(w2 * t))
        if value.ndim == 0:
            return float(value)
        return value


@dataclass(frozen=True)
class NormalMode:
    index: int
    omega: float
    eigenvector: tuple[float, float]
    A: float        # cosine amplitude
    B: float        # sine amplitude


@dataclass(frozen=True)
class SolutionCoefficients:
    x1: TrigSum
    v1: TrigSum
    a1: TrigSum
    x2: TrigSum
    v2: TrigSum
    a2: TrigSum

    @classmethod
    def from_position(cls, x1: TrigSum, x2: TrigSum, w1: float, w2: float) -> "SolutionCoefficients":
        v1 = x1.derivative(w1, w2)
        v2 = x2.derivative(w1, w2)
        return cls(x1=x1, v1=v1, a1=v1.derivative(w1, w2),
                   x2=x2, v2=v2, a2=v2.derivative(w1, w2))

    def get(self, mass: int, quantity) -> TrigSum:
        if mass not in (1, 2):
            raise ValueError(f"mass must be 1 or 2, got {mass!r}")
        prefix = {Quantity.POSITION: "x", Quantity.VELOCITY: "v", Quantity.ACCELERATION: "a"}
        return getattr(self, f"{prefix[Quantity.parse(quantity)]}{mass}")

    def as_dict(self) -> dict:
        return {name: list(getattr(self, name).as_tuple())
                for name in ("x1", "v1", "a1", "x2", "v2", "a2")}


def _sine_amplitude(projection: float, omega: float) -> float:
    # a mode with w ~ 0 has no sine term; its velocity share is dropped
    return projection / omega if omega > OMEGA_EPS else 0.0


def _mass_weighted(modal: ModalResult, config: OscillatorConfig) -> list[NormalMode]:
    """
    Mass-orthogonal projection: phi_i^T M x0 / phi_i^T M phi_i.
    """
    m1, m2 = config.m1, config.m2
    modes = []
    for i in (1, 2):
        pa, pb = modal.eigenvector(i)
        w = float(modal.frequencies[i - 1])
        norm = pa * pa * m1 + pb * pb * m2
        A = (pa * m1 * config.x10 + pb * m2 * config.x20) / norm
        B = _sine_amplitude((pa * m1 * config.v10 + pb * m2 * config.v20) / norm, w)
        modes.append(NormalMode(index=i, omega=w, eigenvector=(pa, pb), A=A, B=B))
    return modes


def _residual(modal: ModalResult, config: OscillatorConfig) -> list[NormalMode]:
    """
    Degenerate split: mode 1 takes all it can of the initial state, mode 2
    (orthogonal to mode 1) takes what is left.
    """
    phi1 = np.array(modal.eigenvector(1))
    phi2 = np.array(modal.eigenvector(2))
    w1, w2 = (float(w) for w in modal.frequencies)

    def split(vec: np.ndarray) -> tuple[float, float]:
        first = float(phi1 @ vec) / float(phi1 @ phi1)
        rest = vec - first * phi1
        return first, float(phi2 @ rest) / float(phi2 @ phi2)

    A1, A2 = split(np.array([config.x10, config.x20]))
    P1, P2 = split(np.array([config.v10, config.v20]))

    return [
        NormalMode(index=1, omega=w1, eigenvector=tuple(phi1.tolist()), A=A1, B=_sine_amplitude(P1, w1)),
        NormalMode(index=2, omega=w2, eigenvector=tuple(phi2.tolist()), A=A2, B=_sine_amplitude(P2, w2)),
    ]


def solve_mode_amplitudes(modal: ModalResult, config: OscillatorConfig) -> tuple[NormalMode, NormalMode]:
    if modal.kind is ModeKind.DEGENERATE:
        modes = _residual(modal, config)
    else:
        modes = _mass_weighted(modal, config)
    return modes[0], modes[1]


def position_coefficients(mode1: NormalMode, mode2: NormalMode) -> tuple[TrigSum, TrigSum]:
    """
    Per-mass position sums: each mode contributes its (A, B) scaled by the
    mass's component of the eigenvector.
    """
    sums = []
    for component in (0, 1):
        p1 = mode1.eigenvector[component]
        p2 = mode2.eigenvector[component]
        sums.append(TrigSum(cos1=mode1.A * p1, sin1=mode1.B * p1,
                            cos2=mode2.A * p2, sin2=mode2.B * p2))
    return sums[0], sums[1]


def solve_coefficients(modal: ModalResult,
                       config: OscillatorConfig) -> tuple[tuple[NormalMode, NormalMode], SolutionCoefficients]:
    mode1, mode2 = solve_mode_amplitudes(modal, config)
    x1, x2 = position_coefficients(mode1, mode2)
    coeffs = SolutionCoefficients.from_position(x1, x2, mode1.omega, mode2.omega)
    return (mode1, mode2), coeffs
