import logging

import numpy as np

from .config import OscillatorConfig, Topology

logger = logging.getLogger(__name__)


def mass_matrix(m1: float, m2: float) -> np.ndarray:
    """
    Lumped (diagonal) mass matrix of the two masses.
    """
    return np.diag([float(m1), float(m2)])


def stiffness_matrix(k1: float,
                     k2: float,
                     k3: float,
                     topology: Topology = Topology.FIXED_FIXED) -> np.ndarray:
    """
    Assemble the global stiffness matrix K of the spring chain.

    fixed-fixed (wall - k1 - m1 - k2 - m2 - k3 - wall):
        K11 = k1 + k2,  K12 = -k2
        K21 = -k2,      K22 = k2 + k3
    fixed-free (the right wall is removed, k3 does not act):
        K22 = k2
    """
    # springs in series along the chain; the last one only exists with a wall
    springs = [k1, k2]
    if topology is Topology.FIXED_FIXED:
        springs.append(k3)

    K = np.zeros((2, 2), dtype=float)

    for i in range(2):
        # spring on the left of mass i and spring on its right
        K[i, i] += springs[i]
        if i + 1 < len(springs):
            K[i, i] += springs[i + 1]
        if i + 1 < 2:
            K[i, i + 1] -= springs[i + 1]
            K[i + 1, i] -= springs[i + 1]

    return K


def dynamics_matrix(config: OscillatorConfig) -> np.ndarray:
    """
    Mass-normalized stiffness A = M^-1 K, so that x¨ = -A x.
    """
    M = mass_matrix(config.m1, config.m2)
    K = stiffness_matrix(config.k1, config.k2, config.k3, config.topology)
    A = np.linalg.solve(M, K)

    logger.debug("dynamics_matrix(%s): M=%s K=%s A=%s",
                 config.topology.value, M.tolist(), K.tolist(), A.tolist())
    return A
