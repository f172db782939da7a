# oscillator_core/rational.py
"""
Best rational approximation of real coefficients.

Fractions are used to display the closed-form solution with exact-looking
coefficients (1/2 instead of 0.5000000001). All public functions return a
reduced Fraction with den > 0 and the sign carried by num.
"""
from __future__ import annotations
from dataclasses import dataclass
import math
from typing import Union

MAX_ITERATIONS = 200


@dataclass(frozen=True)
class Fraction:
    # an int, except for the inf/NaN sentinels returned for non-finite input
    num: Union[int, float]
    den: int = 1

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.num)

    @property
    def value(self) -> float:
        if not self.is_finite:
            return float(self.num)
        return self.num / self.den

    @property
    def is_zero(self) -> bool:
        return self.num == 0

    @property
    def is_unit(self) -> bool:
        """|num| == |den|, i.e. the fraction is +1 or -1."""
        return self.is_finite and abs(self.num) == abs(self.den)

    @classmethod
    def sentinel(cls, x: float) -> "Fraction":
        """Stand-in for a value that has no rational representation."""
        if math.isnan(x):
            return cls(math.nan, 1)
        return cls(math.inf if x > 0 else -math.inf, 1)

    def __str__(self):
        if not self.is_finite:
            return str(self.num)
        if self.den == 1:
            return f"{self.num}"
        return f"{self.num}/{self.den}"


ZERO = Fraction(0, 1)


def gcd(a: int, b: int) -> int:
    """
    Non-negative greatest common divisor; gcd(0, 0) is 1 so that it can
    always be used as a divisor.
    """
    return math.gcd(abs(int(round(a))), abs(int(round(b)))) or 1


def reduce_fraction(num, den) -> Fraction:
    """
    Reduce num/den to lowest terms. den == 0 gives the signed infinity
    sentinel.
    """
    if den == 0:
        return Fraction.sentinel(math.inf if num >= 0 else -math.inf)
    if num == 0:
        return ZERO

    sign = -1 if (num < 0) != (den < 0) else 1
    abs_num = abs(int(round(num)))
    abs_den = abs(int(round(den)))
    g = gcd(abs_num, abs_den)
    return Fraction(sign * (abs_num // g), abs_den // g)


def approximate(x: float,
                max_denominator: int = 10000,
                tolerance: float = 1e-9,
                shifted: bool = True) -> Fraction:
    """
    Nearest fraction to x with den <= max_denominator (Stern-Brocot search).

    The search walks the mediants of a bracketing pair lo < |x| < hi and
    keeps the best candidate seen. With shifted=True the bracket starts at
    floor(|x|)/1 .. floor(|x|)+1/1, otherwise at 0/1 .. 1/0; the shifted
    bracket reaches large values without spending the iteration budget on
    the integer part.
    """
    if not math.isfinite(x):
        return Fraction.sentinel(x)
    if abs(x) < tolerance:
        return ZERO

    max_denominator = max(1, int(max_denominator))
    sign = -1 if x < 0 else 1
    ax = abs(x)

    if shifted:
        whole = math.floor(ax)
        lo_n, lo_d = whole, 1
        hi_n, hi_d = whole + 1, 1
        best_n, best_d = (lo_n, 1) if ax - lo_n <= hi_n - ax else (hi_n, 1)
    else:
        lo_n, lo_d = 0, 1
        hi_n, hi_d = 1, 0
        best_n, best_d = round(ax), 1
    best_err = abs(ax - best_n / best_d)

    for _ in range(MAX_ITERATIONS):
        if best_err < tolerance:
            break

        med_n = lo_n + hi_n
        med_d = lo_d + hi_d
        if med_d > max_denominator:
            break

        med = med_n / med_d
        err = abs(ax - med)
        if err < best_err:
            best_n, best_d, best_err = med_n, med_d, err

        if med < ax:
            lo_n, lo_d = med_n, med_d
        elif med > ax:
            hi_n, hi_d = med_n, med_d
        else:
            break

    return reduce_fraction(sign * best_n, best_d)
