import os
import sys
import numpy as np
import pytest
from scipy.integrate import solve_ivp

# add the project root (the folder above tests) to PYTHONPATH
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from oscillator_core.config import OscillatorConfig, Topology
from oscillator_core.errors import ConfigError
from oscillator_core.matrices import mass_matrix, stiffness_matrix, dynamics_matrix
from oscillator_core.modal import ModalAnalyzer, ModeKind
from oscillator_core.oscillator import construct


SYMMETRIC = dict(m1=1.0, m2=1.0, k1=1.0, k2=0.5, k3=1.0)


def random_configs(n=6, seed=123):
    rng = np.random.default_rng(seed)
    for i in range(n):
        yield OscillatorConfig(
            m1=float(rng.uniform(0.5, 5.0)),
            m2=float(rng.uniform(0.5, 5.0)),
            k1=float(rng.uniform(0.5, 10.0)),
            k2=float(rng.uniform(0.5, 10.0)),
            k3=float(rng.uniform(0.5, 10.0)),
            topology=Topology.FIXED_FIXED if i % 2 == 0 else Topology.FIXED_FREE,
            x10=float(rng.uniform(-1.0, 1.0)),
            x20=float(rng.uniform(-1.0, 1.0)),
            v10=float(rng.uniform(-1.0, 1.0)),
            v20=float(rng.uniform(-1.0, 1.0)),
        )


def test_stiffness_matrix_per_topology():
    """
    fixed-fixed: K = [[k1+k2, -k2], [-k2, k2+k3]]
    fixed-free:  K = [[k1+k2, -k2], [-k2, k2]]  (k3 is ignored)
    """
    K = stiffness_matrix(1.0, 2.0, 3.0, Topology.FIXED_FIXED)
    assert np.allclose(K, [[3.0, -2.0], [-2.0, 5.0]])

    K = stiffness_matrix(1.0, 2.0, 3.0, Topology.FIXED_FREE)
    assert np.allclose(K, [[3.0, -2.0], [-2.0, 2.0]])

    assert np.allclose(mass_matrix(2.0, 4.0), np.diag([2.0, 4.0]))


def test_dynamics_matrix_is_mass_normalized():
    cfg = OscillatorConfig(m1=2.0, m2=4.0, k1=1.0, k2=2.0, k3=3.0)
    A = dynamics_matrix(cfg)
    assert np.allclose(A, [[1.5, -1.0], [-0.5, 1.25]])


@pytest.mark.parametrize("m1, m2", [(0.0, 1.0), (1.0, -2.0), (-1.0, 0.0)])
def test_non_positive_mass_is_rejected(m1, m2):
    with pytest.raises(ConfigError):
        construct({"m1": m1, "m2": m2})
    with pytest.raises(ConfigError):
        OscillatorConfig(m1=m1, m2=m2)


def test_negative_spring_and_unknown_topology_are_rejected():
    with pytest.raises(ConfigError):
        OscillatorConfig(k2=-1.0)
    with pytest.raises(ConfigError):
        OscillatorConfig(topology="triangle")
    with pytest.raises(ConfigError):
        OscillatorConfig.from_dict({"m1": "heavy"})


def test_config_from_dict_defaults_and_legacy_names():
    cfg = OscillatorConfig.from_dict({"config": "two-spring", "k1": "2.5"})
    assert cfg.topology is Topology.FIXED_FREE
    assert cfg.k1 == 2.5
    assert cfg.x10 == 1.0 and cfg.x20 == 0.0
    assert cfg.right_spring == 0.0


def test_symmetric_frequencies():
    """
    m1 = m2 = 1, k1 = k3 = 1, k2 = 1/2  =>  w1 = 1, w2 = sqrt(2)
    """
    osc = construct(OscillatorConfig(**SYMMETRIC))

    assert osc.kind is ModeKind.NORMAL
    assert np.isclose(osc.omega1, 1.0, atol=1e-8)
    assert np.isclose(osc.omega2, np.sqrt(2.0), atol=1e-8)
    assert np.allclose(osc.modal.periods, 2.0 * np.pi / np.array([1.0, np.sqrt(2.0)]))


def test_modal_mass_orthogonality():
    """
    PHI^T M PHI must be diagonal for distinct eigenvalues.
    """
    for cfg in random_configs():
        modal = ModalAnalyzer(cfg).run()
        PHI = modal.modes
        M = mass_matrix(cfg.m1, cfg.m2)

        M_modal = PHI.T @ M @ PHI
        off_diag = abs(M_modal[0, 1])
        mean_diag = np.mean(np.abs(np.diag(M_modal)))

        assert modal.kind is ModeKind.NORMAL
        assert modal.eigenvalues[0] <= modal.eigenvalues[1]
        assert off_diag / mean_diag < 1e-10


def test_initial_conditions_are_reproduced():
    for cfg in random_configs():
        osc = construct(cfg)
        assert np.isclose(osc.position(1, 0.0), cfg.x10, atol=1e-9)
        assert np.isclose(osc.position(2, 0.0), cfg.x20, atol=1e-9)
        assert np.isclose(osc.velocity(1, 0.0), cfg.v10, atol=1e-9)
        assert np.isclose(osc.velocity(2, 0.0), cfg.v20, atol=1e-9)


def test_derivatives_match_central_differences():
    h = 1e-5
    times = np.linspace(0.3, 17.0, 25)
    for cfg in random_configs(n=4, seed=7):
        osc = construct(cfg)
        for mass in (1, 2):
            dx = (osc.position(mass, times + h) - osc.position(mass, times - h)) / (2 * h)
            dv = (osc.velocity(mass, times + h) - osc.velocity(mass, times - h)) / (2 * h)
            assert np.allclose(osc.velocity(mass, times), dx, atol=1e-4)
            assert np.allclose(osc.acceleration(mass, times), dv, atol=1e-4)


def test_equation_of_motion_holds():
    """
    fixed-fixed:  m1 a1 = -(k1+k2) x1 + k2 x2,   m2 a2 = k2 x1 - (k2+k3) x2
    fixed-free:   m2 a2 = k2 x1 - k2 x2
    """
    times = np.linspace(0.0, 30.0, 61)
    for cfg in random_configs():
        osc = construct(cfg)
        x1, x2 = osc.position(1, times), osc.position(2, times)
        a1, a2 = osc.acceleration(1, times), osc.acceleration(2, times)

        assert np.allclose(cfg.m1 * a1, -(cfg.k1 + cfg.k2) * x1 + cfg.k2 * x2, atol=1e-5)
        assert np.allclose(cfg.m2 * a2, cfg.k2 * x1 - (cfg.k2 + cfg.right_spring) * x2, atol=1e-5)


@pytest.mark.parametrize("k2", [1e-5, 1e-7, 1e-8, 1e-11])
def test_weak_coupling_keeps_modes_accurate(k2):
    """
    Small but non-zero k2 puts each eigenvalue right next to a diagonal
    entry of A. The eigenvectors must still be M-orthogonal and reproduce
    the initial state.
    """
    cfg = OscillatorConfig(m1=1.0, m2=3.0, k1=5.0, k2=k2, k3=2.0,
                           x10=0.4, x20=1.0, v10=-0.3, v20=1.0)
    osc = construct(cfg)

    assert osc.kind is ModeKind.NORMAL
    assert abs(osc.position(1, 0.0) - cfg.x10) < 1e-9
    assert abs(osc.position(2, 0.0) - cfg.x20) < 1e-9
    assert abs(osc.velocity(1, 0.0) - cfg.v10) < 1e-9
    assert abs(osc.velocity(2, 0.0) - cfg.v20) < 1e-9

    times = np.linspace(0.0, 20.0, 81)
    x1, x2 = osc.position(1, times), osc.position(2, times)
    a1, a2 = osc.acceleration(1, times), osc.acceleration(2, times)
    assert np.allclose(cfg.m1 * a1, -(cfg.k1 + k2) * x1 + k2 * x2, atol=1e-5)
    assert np.allclose(cfg.m2 * a2, k2 * x1 - (k2 + cfg.k3) * x2, atol=1e-5)


def test_weak_coupling_equal_masses():
    cfg = OscillatorConfig(m1=1.0, m2=1.0, k1=1.0, k2=1e-8, k3=2.0,
                           x10=0.0, x20=1.0, v10=0.0, v20=1.0)
    osc = construct(cfg)

    assert abs(osc.position(1, 0.0)) < 1e-9
    assert abs(osc.position(2, 0.0) - 1.0) < 1e-9
    assert abs(osc.velocity(1, 0.0)) < 1e-9
    assert abs(osc.velocity(2, 0.0) - 1.0) < 1e-9


def test_in_phase_and_out_of_phase_modes():
    times = np.linspace(0.0, 25.0, 101)

    in_phase = construct(OscillatorConfig(**SYMMETRIC, x10=1.0, x20=1.0))
    assert np.allclose(in_phase.position(1, times), in_phase.position(2, times), atol=1e-12)
    assert np.allclose(in_phase.position(1, times), np.cos(times), atol=1e-9)

    out_of_phase = construct(OscillatorConfig(**SYMMETRIC, x10=1.0, x20=-1.0))
    assert np.allclose(out_of_phase.position(1, times), -out_of_phase.position(2, times), atol=1e-12)
    assert np.allclose(out_of_phase.position(1, times), np.cos(np.sqrt(2.0) * times), atol=1e-9)


def test_energy_is_conserved():
    times = np.linspace(0.0, 50.0, 201)
    for cfg in random_configs(n=4, seed=11):
        osc = construct(cfg)
        E = osc.energy(times)
        assert np.allclose(E, osc.energy(0.0), rtol=1e-9, atol=1e-12)


def test_closed_form_matches_numerical_integration():
    """
    Independent check against an RK integration of M x¨ + K x = 0.
    """
    cfg = OscillatorConfig(m1=1.5, m2=0.7, k1=2.0, k2=1.3, k3=0.4,
                           x10=0.2, x20=-0.6, v10=0.5, v20=0.1)
    osc = construct(cfg)
    A = dynamics_matrix(cfg)

    def ode(t, y):
        return np.concatenate([y[2:], -A @ y[:2]])

    t_eval = np.linspace(0.0, 10.0, 201)
    sol = solve_ivp(ode, (0.0, 10.0), [cfg.x10, cfg.x20, cfg.v10, cfg.v20],
                    t_eval=t_eval, method="DOP853", rtol=1e-11, atol=1e-12)
    assert sol.success

    assert np.allclose(osc.position(1, t_eval), sol.y[0], atol=1e-6)
    assert np.allclose(osc.position(2, t_eval), sol.y[1], atol=1e-6)
    assert np.allclose(osc.velocity(1, t_eval), sol.y[2], atol=1e-6)
    assert np.allclose(osc.velocity(2, t_eval), sol.y[3], atol=1e-6)


def test_zero_coupling_decouples_masses():
    """
    k2 = 0: each mass is a single oscillator at sqrt(k/m) of its own spring.
    """
    cfg = OscillatorConfig(m1=2.0, m2=1.0, k1=8.0, k2=0.0, k3=9.0,
                           x10=0.5, x20=-1.0, v10=1.0, v20=0.3)
    osc = construct(cfg)
    times = np.linspace(0.0, 12.0, 97)

    assert osc.kind is ModeKind.UNCOUPLED
    assert np.isclose(osc.omega1, 2.0)
    assert np.isclose(osc.omega2, 3.0)
    assert np.allclose(osc.position(1, times), 0.5 * np.cos(2 * times) + 0.5 * np.sin(2 * times))
    assert np.allclose(osc.position(2, times), -np.cos(3 * times) + 0.1 * np.sin(3 * times))

    # moving mass 2 differently leaves mass 1 untouched
    other = construct(OscillatorConfig(m1=2.0, m2=1.0, k1=8.0, k2=0.0, k3=9.0,
                                       x10=0.5, x20=3.0, v10=1.0, v20=-2.0))
    assert np.allclose(other.position(1, times), osc.position(1, times))


def test_zero_coupling_free_end_has_rigid_mode():
    cfg = OscillatorConfig(k2=0.0, topology=Topology.FIXED_FREE, x10=1.0, x20=0.4, v20=2.0)
    osc = construct(cfg)

    assert osc.kind is ModeKind.UNCOUPLED
    assert osc.omega2 == 0.0
    # no sine term for w = 0: mass 2 stays at its initial offset
    assert np.isclose(osc.position(2, 5.0), 0.4)
    assert np.isinf(osc.modal.periods[1])


def test_degenerate_modes_reproduce_initial_conditions():
    """
    Vanishing (but non-zero) coupling with equal natural frequencies gives
    parallel eigenvectors; phi2 is forced orthogonal to phi1.
    """
    cfg = OscillatorConfig(m1=1.0, m2=1.0, k1=1.0, k2=1e-13, k3=1.0,
                           x10=0.3, x20=-0.7, v10=0.2, v20=0.9)
    osc = construct(cfg)

    assert osc.kind is ModeKind.DEGENERATE
    phi1, phi2 = osc.modes[0].eigenvector, osc.modes[1].eigenvector
    assert abs(phi1[0] * phi2[0] + phi1[1] * phi2[1]) < 1e-12

    assert np.isclose(osc.position(1, 0.0), 0.3)
    assert np.isclose(osc.position(2, 0.0), -0.7)
    assert np.isclose(osc.velocity(1, 0.0), 0.2)
    assert np.isclose(osc.velocity(2, 0.0), 0.9)
    assert np.isclose(osc.position(1, 2.0), 0.3 * np.cos(2.0) + 0.2 * np.sin(2.0), atol=1e-6)


def test_value_at_time_and_sampling():
    osc = construct(OscillatorConfig(**SYMMETRIC, x10=1.0, x20=0.0))
    values = osc.value_at_time(1.3)

    assert set(values) == {"x1", "v1", "a1", "x2", "v2", "a2"}
    assert values["x2"] == pytest.approx(osc.position(2, 1.3))
    assert isinstance(values["a1"], float)

    history = osc.sample(t_max=10.0, samples=11)
    assert history.t.shape == (11,)
    assert history.x.shape == (2, 11)
    assert np.allclose(history.v[1], osc.velocity(2, history.t))
    assert history.as_dict()["t"][-1] == pytest.approx(10.0)

    with pytest.raises(ValueError):
        osc.sample(t_max=10.0, samples=1)
    with pytest.raises(ValueError):
        osc.position(3, 0.0)
