# oscillator_core/response.py
from __future__ import annotations
from dataclasses import dataclass

import numpy as np

from .coefficients import Quantity, SolutionCoefficients
from .config import OscillatorConfig
from .matrices import mass_matrix, stiffness_matrix


@dataclass
class TimeHistoryResult:
    t: np.ndarray
    x: np.ndarray       # shape (2, samples), row i = mass i+1
    v: np.ndarray
    a: np.ndarray

    def as_dict(self) -> dict:
        return {
            "t": self.t.tolist(),
            "x": self.x.tolist(),
            "v": self.v.tolist(),
            "a": self.a.tolist(),
        }


class AnalyticResponse:
    """
    Closed-form response x(t), v(t), a(t) of both masses.

    Nothing is integrated in time: every value is a trigonometric sum of
    the precomputed coefficients, so t may be any real number (or an
    array of them).
    """

    def __init__(self, coefficients: SolutionCoefficients, w1: float, w2: float):
        self.coefficients = coefficients
        self.w1 = w1
        self.w2 = w2

    def evaluate(self, mass: int, quantity, t):
        return self.coefficients.get(mass, quantity).evaluate(t, self.w1, self.w2)

    def position(self, mass: int, t):
        return self.evaluate(mass, Quantity.POSITION, t)

    def velocity(self, mass: int, t):
        return self.evaluate(mass, Quantity.VELOCITY, t)

    def acceleration(self, mass: int, t):
        return self.evaluate(mass, Quantity.ACCELERATION, t)

    def value_at_time(self, t: float) -> dict:
        return {
            "x1": self.position(1, t),
            "v1": self.velocity(1, t),
            "a1": self.acceleration(1, t),
            "x2": self.position(2, t),
            "v2": self.velocity(2, t),
            "a2": self.acceleration(2, t),
        }

    def sample(self, t_max: float, samples: int = 500, t_min: float = 0.0) -> TimeHistoryResult:
        if samples < 2:
            raise ValueError(f"samples must be at least 2, got {samples}")

        t = np.linspace(t_min, t_max, int(samples))
        x = np.vstack([self.position(1, t), self.position(2, t)])
        v = np.vstack([self.velocity(1, t), self.velocity(2, t)])
        a = np.vstack([self.acceleration(1, t), self.acceleration(2, t)])
        return TimeHistoryResult(t=t, x=x, v=v, a=a)

    def energy(self, config: OscillatorConfig, t):
        """
        Mechanical energy E = 1/2 v^T M v + 1/2 x^T K x (constant in t).
        """
        M = mass_matrix(config.m1, config.m2)
        K = stiffness_matrix(config.k1, config.k2, config.k3, config.topology)

        x = np.array([self.position(1, t), self.position(2, t)])
        v = np.array([self.velocity(1, t), self.velocity(2, t)])

        kinetic = 0.5 * np.einsum("i...,ij,j...->...", v, M, v)
        potential = 0.5 * np.einsum("i...,ij,j...->...", x, K, x)
        E = kinetic + potential
        if np.ndim(E) == 0:
            return float(E)
        return E
