# oscillator_core/latex.py
"""
LaTeX strings for the analytic solution

    x_i(t) = C1 cos(w1 t) + C2 sin(w1 t) + C3 cos(w2 t) + C4 sin(w2 t)

and its two time derivatives, with every coefficient shown as a reduced
fraction. The strings are meant for an external typesetter (KaTeX/MathJax).
"""
from __future__ import annotations
from typing import Iterable, NamedTuple

from .rational import Fraction, approximate

OMEGA_LABELS = (r"\omega_1", r"\omega_2")


class Term(NamedTuple):
    coefficient: float
    trig: str               # r"\cos" or r"\sin"
    omega_label: str


def fraction_to_latex(frac: Fraction, show_plus: bool = False, skip_one: bool = False) -> str:
    if not frac.is_finite:
        return r"-\infty" if frac.num < 0 else r"\infty"
    if frac.is_zero:
        return "0"

    sign = "-" if frac.num < 0 else ("+" if show_plus else "")
    n, d = abs(frac.num), abs(frac.den)

    if d == 1:
        magnitude = "" if (n == 1 and skip_one) else f"{n}"
    else:
        magnitude = rf"\frac{{{n}}}{{{d}}}"
    return sign + magnitude


def omega_to_latex(omega: float) -> str:
    frac = approximate(omega, 1000, 1e-6)
    if frac.den == 1:
        return f"{frac.num}"
    if frac.den <= 100:
        return fraction_to_latex(frac)
    # irrational (e.g. sqrt 2): five significant figures
    return f"{omega:.5g}"


def build_expression(terms: Iterable[Term], max_denominator: int = 10000) -> str:
    parts = []
    for term in terms:
        frac = approximate(term.coefficient, max_denominator)
        if frac.is_zero:
            continue

        negative = frac.num < 0
        if not parts:
            sign = "-" if negative else ""
        else:
            sign = " - " if negative else " + "

        magnitude = "" if frac.is_unit else fraction_to_latex(frac).lstrip("-")
        parts.append(f"{sign}{magnitude}{term.trig}({term.omega_label} t)")

    return "".join(parts) if parts else "0"


def trig_terms(coefficients: tuple[float, float, float, float]) -> list[Term]:
    c1, s1, c2, s2 = coefficients
    w1, w2 = OMEGA_LABELS
    return [
        Term(c1, r"\cos", w1),
        Term(s1, r"\sin", w1),
        Term(c2, r"\cos", w2),
        Term(s2, r"\sin", w2),
    ]


def render_formula(oscillator, max_denominator: int = 100) -> dict:
    """
    Display strings {omega1, omega2, x1, v1, a1, x2, v2, a2} of a solved
    oscillator.
    """
    coeffs = oscillator.coefficients
    result = {
        "omega1": omega_to_latex(oscillator.omega1),
        "omega2": omega_to_latex(oscillator.omega2),
    }
    for name in ("x1", "v1", "a1", "x2", "v2", "a2"):
        terms = trig_terms(getattr(coeffs, name).as_tuple())
        result[name] = build_expression(terms, max_denominator)
    return result
