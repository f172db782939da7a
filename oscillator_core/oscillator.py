# oscillator_core/oscillator.py
from __future__ import annotations
import logging
from typing import Optional

from .coefficients import NormalMode, Quantity, SolutionCoefficients, solve_coefficients
from .config import OscillatorConfig
from .modal import ModalAnalyzer, ModalResult, ModeKind
from .response import AnalyticResponse, TimeHistoryResult
from .roots import first_time_to

logger = logging.getLogger(__name__)


class Oscillator:
    """
    Solved two-mass oscillator. Modes and coefficients are derived once
    from the config; the instance is read-only afterwards.
    """

    def __init__(self, config: OscillatorConfig):
        self._config = config
        self._modal = ModalAnalyzer(config).run()
        self._modes, self._coefficients = solve_coefficients(self._modal, config)
        self._response = AnalyticResponse(self._coefficients, self.omega1, self.omega2)

        logger.debug("Oscillator solved: kind=%s w1=%.6g w2=%.6g",
                     self.kind.value, self.omega1, self.omega2)

    @property
    def config(self) -> OscillatorConfig:
        return self._config

    @property
    def modal(self) -> ModalResult:
        return self._modal

    @property
    def kind(self) -> ModeKind:
        return self._modal.kind

    @property
    def modes(self) -> tuple[NormalMode, NormalMode]:
        return self._modes

    @property
    def coefficients(self) -> SolutionCoefficients:
        return self._coefficients

    @property
    def omega1(self) -> float:
        return float(self._modal.frequencies[0])

    @property
    def omega2(self) -> float:
        return float(self._modal.frequencies[1])

    def position(self, mass: int, t):
        return self._response.position(mass, t)

    def velocity(self, mass: int, t):
        return self._response.velocity(mass, t)

    def acceleration(self, mass: int, t):
        return self._response.acceleration(mass, t)

    def value_at_time(self, t: float) -> dict:
        return self._response.value_at_time(t)

    def sample(self, t_max: float, samples: int = 500, t_min: float = 0.0) -> TimeHistoryResult:
        return self._response.sample(t_max, samples, t_min)

    def energy(self, t):
        return self._response.energy(self._config, t)

    def first_time_to(self,
                      mass: int,
                      quantity,
                      target: float,
                      t_min: float = 0.0,
                      t_max: float = 100.0,
                      dt: float = 0.01,
                      tolerance: float = 1e-9) -> Optional[float]:
        trig_sum = self._coefficients.get(mass, Quantity.parse(quantity))
        w1, w2 = self.omega1, self.omega2
        return first_time_to(lambda t: trig_sum.evaluate(t, w1, w2), target,
                             t_min=t_min, t_max=t_max, dt=dt, tolerance=tolerance)


def construct(config) -> Oscillator:
    """
    Solve `config` (an OscillatorConfig or a payload dict). Invalid
    parameters raise ConfigError.
    """
    if not isinstance(config, OscillatorConfig):
        config = OscillatorConfig.from_dict(config)
    return Oscillator(config)
