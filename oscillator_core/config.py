# oscillator_core/config.py
from __future__ import annotations
from dataclasses import dataclass, asdict
from enum import Enum
import math

from .errors import ConfigError


class Topology(str, Enum):
    """
    Spring/mass connectivity:
        FIXED_FIXED:  wall --k1-- m1 --k2-- m2 --k3-- wall
        FIXED_FREE:   wall --k1-- m1 --k2-- m2        (k3 unused)
    """
    FIXED_FIXED = "fixed-fixed"
    FIXED_FREE = "fixed-free"

    @classmethod
    def parse(cls, value) -> "Topology":
        if isinstance(value, cls):
            return value
        name = str(value).strip().lower()
        # older form values
        legacy = {"three-spring": cls.FIXED_FIXED, "two-spring": cls.FIXED_FREE}
        if name in legacy:
            return legacy[name]
        try:
            return cls(name)
        except ValueError:
            raise ConfigError(f"Unknown topology: {value!r}") from None


@dataclass(frozen=True)
class OscillatorConfig:
    """
    Parameters of an undamped two-mass oscillator:
    M x¨ + K x = 0,  x(0) = (x10, x20),  x˙(0) = (v10, v20)
    """
    m1: float = 1.0
    m2: float = 1.0
    k1: float = 1.0
    k2: float = 1.0
    k3: float = 1.0
    topology: Topology = Topology.FIXED_FIXED
    x10: float = 1.0
    x20: float = 0.0
    v10: float = 0.0
    v20: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "topology", Topology.parse(self.topology))

        for name in ("m1", "m2", "k1", "k2", "k3", "x10", "x20", "v10", "v20"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ConfigError(f"{name} must be finite, got {value!r}")

        # M must be invertible, otherwise A = M^-1 K is undefined
        if self.m1 <= 0 or self.m2 <= 0:
            raise ConfigError(f"Masses must be positive (m1={self.m1}, m2={self.m2})")

        if min(self.k1, self.k2, self.k3) < 0:
            raise ConfigError("Spring constants must be non-negative")

    @property
    def right_spring(self) -> float:
        """Stiffness attaching m2 to the right wall (0 for a free end)."""
        return self.k3 if self.topology is Topology.FIXED_FIXED else 0.0

    @classmethod
    def from_dict(cls, payload: dict) -> "OscillatorConfig":
        defaults = cls()
        kwargs = {}
        for name in ("m1", "m2", "k1", "k2", "k3", "x10", "x20", "v10", "v20"):
            try:
                kwargs[name] = float(payload.get(name, getattr(defaults, name)))
            except (TypeError, ValueError):
                raise ConfigError(f"{name} must be a number, got {payload.get(name)!r}") from None
        topology = payload.get("topology", payload.get("config", defaults.topology))
        return cls(topology=Topology.parse(topology), **kwargs)

    def as_dict(self) -> dict:
        data = asdict(self)
        data["topology"] = self.topology.value
        return data
