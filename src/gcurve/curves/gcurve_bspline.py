"""
BSplineCurve3d - non-rational b-spline evaluated by scipy.

Poles and a clamped knot vector define the curve; ``scipy.interpolate.BSpline``
does all span evaluation. Fraction maps linearly onto the knot domain
[knots[order - 1], knots[num_poles]] and clamps to [0, 1].
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

import numpy as np
from scipy.interpolate import BSpline

from gcurve.mathutils.vec3 import Vec3, transform_point
from gcurve.mathutils.gcurve_ray import GCurveRay
from gcurve.mathutils.gcurve_plane import PlaneByOriginAndVectors
from gcurve.mathutils.gcurve_math import clamp, interpolate
from gcurve.curves.gcurve_primitive import CurveKind, CurvePrimitive
from gcurve.curves.gcurve_stroke_options import StrokeOptions, apply_angle_tol


def create_clamped_uniform_knots(num_poles: int, order: int) -> List[float]:
    """Full knot vector (num_poles + order entries) with `order` repeats at each end."""
    num_interior = num_poles - order
    return [0.0] * order + [float(i) for i in range(1, num_interior + 1)] + [float(num_interior + 1)] * order


class BSplineCurve3d(CurvePrimitive):

    curve_kind = CurveKind.BSPLINE

    def __init__(self, poles: Sequence, order: int, knots: Optional[Sequence[float]] = None):
        poles = [Vec3(p) for p in poles]
        if order < 2:
            raise ValueError(f"B-spline order must be at least 2, got {order}")
        if len(poles) < order:
            raise ValueError(f"B-spline of order {order} needs at least {order} poles, got {len(poles)}")
        if knots is None:
            knots = create_clamped_uniform_knots(len(poles), order)
        knots = [float(k) for k in knots]
        if len(knots) != len(poles) + order:
            raise ValueError(f"Expected {len(poles) + order} knots, got {len(knots)}")
        if any(knots[i + 1] < knots[i] for i in range(len(knots) - 1)):
            raise ValueError("Knot vector must be non-decreasing")
        if knots[len(poles)] <= knots[order - 1]:
            raise ValueError("Knot vector has an empty domain")
        self.poles = poles
        self.order = order
        self.knots = knots
        self._build_evaluators()

    def __repr__(self):
        return f"BSplineCurve3d(order={self.order}, poles={self.poles!r})"

    def _build_evaluators(self):
        coefficients = np.array([p.to_list() for p in self.poles], dtype=float)
        self._spline = BSpline(np.array(self.knots), coefficients, self.degree, extrapolate=False)
        self._first_derivative = self._spline.derivative(1)
        self._second_derivative = self._spline.derivative(2) if self.degree >= 2 else None

    @property
    def degree(self) -> int:
        return self.order - 1

    @property
    def num_poles(self) -> int:
        return len(self.poles)

    @property
    def num_spans(self) -> int:
        return self.num_poles - self.order + 1

    @property
    def knot_domain(self):
        return self.knots[self.order - 1], self.knots[self.num_poles]

    def fraction_to_knot(self, fraction: float) -> float:
        k0, k1 = self.knot_domain
        return interpolate(k0, clamp(fraction, 0.0, 1.0), k1)

    def knot_to_fraction(self, knot: float) -> float:
        k0, k1 = self.knot_domain
        return (knot - k0) / (k1 - k0)

    def _span_fractions(self) -> List[float]:
        """Fractions of the distinct knots inside the domain, ends included."""
        k0, k1 = self.knot_domain
        knots = sorted({k for k in self.knots if k0 <= k <= k1})
        return [self.knot_to_fraction(k) for k in knots]

    # ------------------------------------------------------------------

    def fraction_to_point(self, fraction: float) -> Vec3:
        return Vec3(*self._spline(self.fraction_to_knot(fraction)))

    def fraction_to_point_and_derivative(self, fraction: float) -> GCurveRay:
        knot = self.fraction_to_knot(fraction)
        k0, k1 = self.knot_domain
        derivative = Vec3(*self._first_derivative(knot)) * (k1 - k0)
        return GCurveRay(Vec3(*self._spline(knot)), derivative)

    def fraction_to_point_and_2_derivatives(self, fraction: float) -> PlaneByOriginAndVectors:
        knot = self.fraction_to_knot(fraction)
        k0, k1 = self.knot_domain
        span = k1 - k0
        if self._second_derivative is None:
            second = Vec3(0.0, 0.0, 0.0)
        else:
            second = Vec3(*self._second_derivative(knot)) * (span * span)
        return PlaneByOriginAndVectors(Vec3(*self._spline(knot)),
                                       Vec3(*self._first_derivative(knot)) * span, second)

    def start_point(self) -> Vec3:
        return Vec3(self.poles[0]) if self._is_clamped() else self.fraction_to_point(0.0)

    def end_point(self) -> Vec3:
        return Vec3(self.poles[-1]) if self._is_clamped() else self.fraction_to_point(1.0)

    def _is_clamped(self) -> bool:
        order = self.order
        return len(set(self.knots[:order])) == 1 and len(set(self.knots[-order:])) == 1

    def quick_length(self) -> float:
        """Control polygon length, never less than the curve length."""
        return sum(self.poles[i].distance(self.poles[i + 1]) for i in range(self.num_poles - 1))

    def _polygon_turn_radians(self) -> float:
        total = 0.0
        for i in range(1, self.num_poles - 1):
            u = self.poles[i] - self.poles[i - 1]
            v = self.poles[i + 1] - self.poles[i]
            if u.length_sq() > 0.0 and v.length_sq() > 0.0:
                total += math.atan2(u.cross(v).length(), u.dot(v))
        return total

    # ------------------------------------------------------------------
    # Strokes
    # ------------------------------------------------------------------

    def compute_stroke_count_for_options(self, options: Optional[StrokeOptions]) -> int:
        num_strokes = apply_angle_tol(options, self.num_spans * self.degree, self._polygon_turn_radians())
        if options is not None:
            num_strokes = options.apply_max_edge_length(num_strokes, self.quick_length())
            num_strokes = options.apply_min_strokes_per_primitive(num_strokes)
        return num_strokes

    def emit_strokable_parts(self, handler, options: Optional[StrokeOptions] = None):
        """One uniform-step announcement per knot span, sharing the total count."""
        span_fractions = self._span_fractions()
        num_spans = len(span_fractions) - 1
        per_span = max(1, int(math.ceil(self.compute_stroke_count_for_options(options) / num_spans)))
        handler.start_curve_primitive(self)
        for i in range(num_spans):
            handler.announce_interval_for_uniform_step_strokes(self, per_span, span_fractions[i],
                                                               span_fractions[i + 1])
        handler.end_curve_primitive(self)

    # ------------------------------------------------------------------

    def reverse_in_place(self):
        total = self.knots[0] + self.knots[-1]
        self.poles.reverse()
        self.knots = [total - k for k in reversed(self.knots)]
        self._build_evaluators()

    def clone(self) -> BSplineCurve3d:
        return BSplineCurve3d(self.poles, self.order, self.knots)

    def try_transform_in_place(self, matrix) -> bool:
        self.poles = [transform_point(p, matrix) for p in self.poles]
        self._build_evaluators()
        return True
