# oscillator_core/modal.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import logging
import math

import numpy as np

from .config import OscillatorConfig
from .matrices import dynamics_matrix

logger = logging.getLogger(__name__)

EIGENVECTOR_EPS = 1e-12
COUPLING_EPS = 1e-14


class ModeKind(str, Enum):
    """
    How the two mode slots were obtained:
        NORMAL:     distinct eigenvalues, M-orthogonal eigenvectors
        UNCOUPLED:  k2 ~ 0, slot 1 is mass 1 alone, slot 2 is mass 2 alone
        DEGENERATE: parallel eigenvectors, phi2 forced orthogonal to phi1
    """
    NORMAL = "normal"
    UNCOUPLED = "uncoupled"
    DEGENERATE = "degenerate"


@dataclass(frozen=True)
class ModalResult:
    frequencies: np.ndarray     # w_n [rad/s]
    eigenvalues: np.ndarray     # lambda_n = w_n^2
    modes: np.ndarray           # PHI (columns = modes)
    kind: ModeKind

    @property
    def periods(self) -> np.ndarray:
        # T_n = 2 pi / w_n, a rigid-body mode (w = 0) never repeats
        w_n = self.frequencies
        positive = w_n > 0
        return np.where(positive, 2.0 * np.pi / np.where(positive, w_n, 1.0), np.inf)

    def eigenvector(self, index: int) -> tuple[float, float]:
        """Eigenvector of mode `index` (1 or 2) as (phi_a, phi_b)."""
        column = self.modes[:, index - 1]
        return float(column[0]), float(column[1])

    def as_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "frequencies": self.frequencies.tolist(),
            "eigenvalues": self.eigenvalues.tolist(),
            "periods": [p if math.isfinite(p) else None for p in self.periods.tolist()],
            "modes": self.modes.tolist(),
        }


def eigenvector(A: np.ndarray, shift0: float, shift1: float) -> tuple[float, float]:
    """
    Eigenvector of the 2x2 matrix A for an eigenvalue lam, read off a row
    of (A - lam I) that is not trivially zero.

    shift0 = lam - A00 and shift1 = lam - A11 come from eigen_shifts: under
    weak coupling lam lies next to a diagonal entry and forming the
    difference here would leave only rounding noise.
    """
    a01, a10 = A[0, 1], A[1, 0]

    if abs(a01) > EIGENVECTOR_EPS:
        return float(a01), float(shift0)
    if abs(a10) > EIGENVECTOR_EPS:
        return float(shift1), float(a10)

    # diagonal matrix: the canonical vector of the closer diagonal entry
    if abs(shift0) <= abs(shift1):
        return 1.0, 0.0
    return 0.0, 1.0


def eigen_shifts(gap: float, sq: float, coupling: float) -> tuple[float, float]:
    """
    (lam1 - a, lam2 - a) for the diagonal entry a, with gap = b - a (b the
    other diagonal entry), coupling = A01 * A10 >= 0 and
    sq = sqrt(gap^2 + 4 coupling).

    lam - a = (gap -+ sq) / 2. The root in which gap and sq cancel is taken
    from (gap - sq)(gap + sq) = -4 coupling instead.
    """
    if gap >= 0:
        big = gap + sq
        return (-2.0 * coupling / big if big > 0 else 0.0), big / 2.0
    big = gap - sq
    return big / 2.0, -2.0 * coupling / big


def is_parallel(u: tuple[float, float], v: tuple[float, float]) -> bool:
    cross = u[0] * v[1] - u[1] * v[0]
    scale = (abs(u[0]) + abs(u[1])) * (abs(v[0]) + abs(v[1]))
    return scale < 1e-24 or abs(cross) < 1e-10 * scale


class ModalAnalyzer:
    """
    Closed-form eigen-decomposition of the 2-DOF system K phi = lambda M phi.
    """

    def __init__(self, config: OscillatorConfig):
        self.config = config

    def run(self) -> ModalResult:
        if abs(self.config.k2) < COUPLING_EPS:
            result = self._uncoupled()
        else:
            result = self._coupled(dynamics_matrix(self.config))

        logger.debug("ModalAnalyzer: kind=%s w=%s", result.kind.value, result.frequencies.tolist())
        return result

    def _uncoupled(self) -> ModalResult:
        cfg = self.config
        lam = np.array([cfg.k1 / cfg.m1, cfg.right_spring / cfg.m2])
        w_n = np.sqrt(np.clip(lam, 0.0, None))
        PHI = np.eye(2)
        return ModalResult(frequencies=w_n, eigenvalues=lam, modes=PHI, kind=ModeKind.UNCOUPLED)

    def _coupled(self, A: np.ndarray) -> ModalResult:
        # characteristic polynomial: lambda^2 - tr lambda + det = 0
        a00, a11 = A[0, 0], A[1, 1]
        tr = a00 + a11
        gap = a11 - a00
        coupling = A[0, 1] * A[1, 0]
        # tr^2 - 4 det, written as gap^2 + 4 A01 A10 so nothing cancels;
        # disc >= 0 for a symmetric-definite problem, clamp rounding noise
        disc = max(0.0, gap * gap + 4.0 * coupling)
        sq = math.sqrt(disc)

        lam1 = (tr - sq) / 2.0
        lam2 = (tr + sq) / 2.0

        shift0 = eigen_shifts(gap, sq, coupling)
        shift1 = eigen_shifts(-gap, sq, coupling)
        phi1 = eigenvector(A, shift0[0], shift1[0])
        phi2 = eigenvector(A, shift0[1], shift1[1])

        if phi1 == (0.0, 0.0):
            phi1 = (1.0, 0.0)
        if phi2 == (0.0, 0.0):
            phi2 = (0.0, 1.0)

        kind = ModeKind.NORMAL
        if is_parallel(phi1, phi2):
            phi2 = (-phi1[1], phi1[0])
            kind = ModeKind.DEGENERATE

        lam = np.array([lam1, lam2])
        w_n = np.sqrt(np.clip(lam, 0.0, None))
        PHI = np.array([[phi1[0], phi2[0]],
                        [phi1[1], phi2[1]]])

        return ModalResult(frequencies=w_n, eigenvalues=lam, modes=PHI, kind=kind)
