"""
Gauss-Legendre quadrature on sub-intervals of the fraction axis.

Nodes and weights come from numpy.polynomial.legendre.leggauss and are
remapped from [-1, 1] to [0, 1] once, at import.
"""

from typing import Callable, List, Tuple

import numpy as np
from numpy.polynomial.legendre import leggauss

# Gauss point count used for arc length unless a caller asks otherwise.
# Integrates polynomials of degree 2n - 1 exactly.
DEFAULT_GAUSS_POINTS = 5

MAX_GAUSS_POINTS = 7


def _unit_interval_rule(num_points: int) -> Tuple[np.ndarray, np.ndarray]:
    x, w = leggauss(num_points)
    return 0.5 * (x + 1.0), 0.5 * w


_UNIT_RULES = {n: _unit_interval_rule(n) for n in range(1, MAX_GAUSS_POINTS + 1)}


class GaussMapper:
    """Maps a fixed Gauss rule onto arbitrary intervals."""

    def __init__(self, num_points: int = DEFAULT_GAUSS_POINTS):
        if not 1 <= num_points <= MAX_GAUSS_POINTS:
            raise ValueError(f"Gauss point count must be between 1 and {MAX_GAUSS_POINTS}, got {num_points}")
        self.num_points = num_points
        self._x, self._w = _UNIT_RULES[num_points]

    def map_xw(self, a: float, b: float) -> List[Tuple[float, float]]:
        """(x, weight) pairs for integrating over [a, b]."""
        h = b - a
        return [(a + h * float(x), h * float(w)) for x, w in zip(self._x, self._w)]

    def integrate(self, func: Callable[[float], float], a: float, b: float, num_intervals: int = 1) -> float:
        """Composite rule over `num_intervals` equal pieces of [a, b]."""
        num_intervals = max(1, num_intervals)
        total = 0.0
        for i in range(num_intervals):
            a0 = a + (b - a) * i / num_intervals
            a1 = a + (b - a) * (i + 1) / num_intervals
            for x, w in self.map_xw(a0, a1):
                total += w * func(x)
        return total
