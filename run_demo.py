import logging

import numpy as np

from oscillator_core.config import OscillatorConfig, Topology
from oscillator_core.latex import render_formula
from oscillator_core.oscillator import construct


def main():
    logging.basicConfig(level=logging.INFO)

    # ===== symmetric chain: wall - 1 - m - 1/2 - m - 1 - wall =====
    config = OscillatorConfig(
        m1=1.0, m2=1.0,
        k1=1.0, k2=0.5, k3=1.0,
        topology=Topology.FIXED_FIXED,
        x10=1.0, x20=0.0,       # only mass 1 displaced -> beating
        v10=0.0, v20=0.0,
    )

    osc = construct(config)

    # ===== modal analysis =====
    print("--- Modal analysis ---")
    print("kind:       ", osc.kind.value)
    print("w_n (rad/s):", osc.modal.frequencies)
    print("T_n (s):    ", osc.modal.periods)
    print("Modes (columns = mode):\n", osc.modal.modes)

    # ===== closed-form solution =====
    print("\n--- Analytic solution ---")
    for name, latex in render_formula(osc, max_denominator=100).items():
        print(f"{name:>7}: {latex}")

    # ===== time history sampled from the closed form =====
    history = osc.sample(t_max=20.0, samples=2001)
    print("\n--- Time history ---")
    print("t shape:", history.t.shape)
    print("x shape:", history.x.shape)
    print("max |x1|:", np.max(np.abs(history.x[0, :])))
    print("max |x2|:", np.max(np.abs(history.x[1, :])))

    t_hit = osc.first_time_to(2, "position", 0.5, t_max=20.0)
    print("\nfirst time x2 = 0.5:", t_hit)
    print("values there:", osc.value_at_time(t_hit) if t_hit is not None else None)


if __name__ == "__main__":
    main()
