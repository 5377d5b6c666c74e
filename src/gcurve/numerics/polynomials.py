"""
Closed-form root solvers used by the analytic arc cases.

    order2_bezier_root
        Root of the linear Bezier with end values (h0, h1).

    solve_trig_form
        Unit circle points (c, s) with  constant + cos_coff * c + sin_coff * s = 0.
        This is the "plane meets ellipse" case: the altitude of an arc point
        is linear in (cos theta, sin theta).

    solve_unit_circle_implicit_quadric
        Angles theta with
            acc c^2 + acs c s + ass s^2 + ac c + as_ s + a = 0,  c = cos, s = sin.
        Covers both "circle meets ellipse" and "perpendicular from a point
        to an ellipse". The half-angle substitution t = tan(theta / 2) turns
        it into a quartic in t, solved by numpy; theta = pi (t at infinity)
        is tested separately and every root is polished by a few Newton steps
        on the trig form.
"""

import math
from typing import List, Optional, Tuple

import numpy as np
from numpy.polynomial import polynomial as P

from gcurve.mathutils.gcurve_math import (
    SMALL_METRIC_DISTANCE_SQUARED,
    conditional_divide_fraction,
    is_almost_equal_radians_allow_periodic_shift,
)


# ============================================================================
# CONSTANTS
# ============================================================================

# Relative size under which a quartic coefficient is treated as zero
COEFFICIENT_ZERO_TOLERANCE = 1.0e-14

# Imaginary part (relative) under which a root is treated as real
IMAGINARY_TOLERANCE = 1.0e-6

# Relative residual accepted for a polished trig root
TRIG_RESIDUAL_TOLERANCE = 1.0e-10

TRIG_POLISH_STEPS = 4

# Ascending-power coefficients of each trig term multiplied by (1 + t^2)^2
_CC = np.array([1.0, 0.0, -2.0, 0.0, 1.0])   # (1 - t^2)^2
_CS = np.array([0.0, 2.0, 0.0, -2.0, 0.0])   # 2t (1 - t^2)
_SS = np.array([0.0, 0.0, 4.0, 0.0, 0.0])    # 4t^2
_C = np.array([1.0, 0.0, 0.0, 0.0, -1.0])    # (1 - t^2)(1 + t^2)
_S = np.array([0.0, 2.0, 0.0, 2.0, 0.0])     # 2t (1 + t^2)
_W = np.array([1.0, 0.0, 2.0, 0.0, 1.0])     # (1 + t^2)^2


def order2_bezier_root(h0: float, h1: float) -> Optional[float]:
    """Fraction where the line from h0 (at 0) to h1 (at 1) crosses zero, or None if flat."""
    return conditional_divide_fraction(-h0, h1 - h0)


def solve_trig_form(constant: float, cos_coff: float, sin_coff: float) -> List[Tuple[float, float]]:
    """Unit circle (cos, sin) pairs on the line constant + cos_coff*c + sin_coff*s = 0."""
    delta2 = cos_coff * cos_coff + sin_coff * sin_coff
    if delta2 <= 0.0:
        return []
    lam = -constant / delta2
    d2 = 1.0 - constant * constant / delta2
    # c0, s0 is the closest approach of the line to the origin
    c0 = lam * cos_coff
    s0 = lam * sin_coff
    if -SMALL_METRIC_DISTANCE_SQUARED < d2 <= 0.0:
        return [(c0, s0)]
    if d2 > 0.0:
        mu = math.sqrt(d2 / delta2)
        return [(c0 - mu * sin_coff, s0 + mu * cos_coff),
                (c0 + mu * sin_coff, s0 - mu * cos_coff)]
    return []


def _trig_value(coffs, theta):
    acc, acs, ass, ac, as_, a = coffs
    c, s = math.cos(theta), math.sin(theta)
    return acc * c * c + acs * c * s + ass * s * s + ac * c + as_ * s + a

def _trig_derivative(coffs, theta):
    acc, acs, ass, ac, as_, _ = coffs
    c, s = math.cos(theta), math.sin(theta)
    return -2.0 * acc * c * s + acs * (c * c - s * s) + 2.0 * ass * s * c - ac * s + as_ * c

def _polish(coffs, theta):
    best_theta, best_value = theta, abs(_trig_value(coffs, theta))
    for _ in range(TRIG_POLISH_STEPS):
        step = conditional_divide_fraction(_trig_value(coffs, theta), _trig_derivative(coffs, theta))
        if step is None:
            break
        theta -= step
        value = abs(_trig_value(coffs, theta))
        if value < best_value:
            best_theta, best_value = theta, value
    return best_theta


def solve_unit_circle_implicit_quadric(acc: float, acs: float, ass: float,
                                       ac: float, as_: float, a: float) -> List[float]:
    """
    Angles (radians, in (-pi, pi]) where the unit circle meets the implicit quadric.

    Returns an empty list when there are no real solutions, and also when the
    equation is satisfied identically (coincident curves have no isolated roots).
    """
    coffs = (acc, acs, ass, ac, as_, a)
    scale = max(abs(x) for x in coffs)
    if scale == 0.0:
        return []
    poly = acc * _CC + acs * _CS + ass * _SS + ac * _C + as_ * _S + a * _W
    poly_scale = float(np.max(np.abs(poly)))
    if poly_scale <= COEFFICIENT_ZERO_TOLERANCE * scale:
        return []
    poly = P.polytrim(poly, COEFFICIENT_ZERO_TOLERANCE * poly_scale)

    candidates = []
    if len(poly) > 1:
        for root in P.polyroots(poly):
            if abs(root.imag) <= IMAGINARY_TOLERANCE * (1.0 + abs(root.real)):
                candidates.append(2.0 * math.atan(root.real))
    candidates.append(math.pi)

    angles = []
    for theta in candidates:
        theta = _polish(coffs, theta)
        if abs(_trig_value(coffs, theta)) > TRIG_RESIDUAL_TOLERANCE * scale:
            continue
        theta = math.atan2(math.sin(theta), math.cos(theta))
        if any(is_almost_equal_radians_allow_periodic_shift(theta, other, 1.0e-9) for other in angles):
            continue
        angles.append(theta)
    angles.sort()
    return angles
