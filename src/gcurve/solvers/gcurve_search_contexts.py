"""
Curve-type-agnostic search contexts driven by stroke emission.

Every context here is a StrokeHandler: a curve's emit_strokable_parts() feeds
it straight pieces or uniform fraction steps, and the context refines what it
needs through the CurvePrimitive evaluators only. Nothing in this module
knows any curve formula.

Contexts:
    ClosestPointStrokeHandler
        Seeds from the stroke samples: a sign change of
        tangent(t) . (curve(t) - space_point) between consecutive samples
        brackets a perpendicular foot, which Newton refines. Straight pieces
        are projected directly. The curve ends are candidates too. The
        closest candidate wins; ties keep the first one found.

    AppendPlaneIntersectionStrokeHandler
        Brackets sign changes of the plane altitude and refines the root by
        Newton on altitude(curve(t)). Straight pieces seed from the linear
        root. Each root becomes an ISOLATED CurveLocationDetail.

    CurveLengthContext
        Sums exact chord lengths of straight pieces and 5-point
        Gauss-Legendre integrals of |curve'(t)| over uniform steps, windowed
        to [fraction0, fraction1].

    StrokeCollector
        Records (curve, fraction, point) samples, used to seed curve/curve
        searches.

Each context is single use: create one per search and discard it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from gcurve.mathutils.vec3 import Vec3
from gcurve.mathutils.gcurve_math import (
    FRACTION_TOLERANCE,
    interpolate,
    inverse_interpolate,
    is_in_01,
    is_same_fraction,
)
from gcurve.curves.gcurve_stroke_handler import StrokeHandler
from gcurve.curves.gcurve_location_detail import CurveIntervalRole, CurveLocationDetail
from gcurve.curves.gcurve_primitive import resolve_extend
from gcurve.numerics.newton import Newton1dUnboundedApproximateDerivative
from gcurve.numerics.polynomials import order2_bezier_root
from gcurve.numerics.quadrature import DEFAULT_GAUSS_POINTS, GaussMapper

logger = logging.getLogger(__name__)


class _ParentAwareStrokeHandler(StrokeHandler):
    """Tracks the announced curve and an optional parent that announcements are made for."""

    def __init__(self):
        self._curve = None
        self._parent_curve = None

    def effective_curve(self):
        """The parent curve if one is active, else the announced curve."""
        return self._parent_curve if self._parent_curve is not None else self._curve

    def start_curve_primitive(self, cp):
        self._curve = cp

    def start_parent_curve_primitive(self, cp):
        self._parent_curve = cp

    def end_parent_curve_primitive(self, cp):
        self._parent_curve = None


# ============================================================================
# Closest point
# ============================================================================

class ClosestPointStrokeHandler(_ParentAwareStrokeHandler):

    def __init__(self, space_point, extend=False):
        super().__init__()
        self._space_point = Vec3(space_point)
        self._extend0, self._extend1 = resolve_extend(extend)
        self._closest: Optional[CurveLocationDetail] = None
        self._newton = Newton1dUnboundedApproximateDerivative(self._perpendicular_residual)

    def claim_result(self) -> Optional[CurveLocationDetail]:
        """The closest candidate seen, or None if nothing was announced."""
        return self._closest

    def _perpendicular_residual(self, fraction: float) -> Optional[float]:
        curve = self.effective_curve()
        if curve is None:
            return None
        ray = curve.fraction_to_point_and_derivative(fraction)
        return ray.direction.dot(ray.origin - self._space_point)

    def _fraction_allowed(self, curve, fraction: float) -> bool:
        if is_in_01(fraction):
            return True
        if not curve.is_extensible_fraction_space:
            return False
        return self._extend0 if fraction < 0.0 else self._extend1

    def _test_candidate(self, curve, fraction: float, point=None):
        if point is None:
            point = curve.fraction_to_point(fraction)
        distance = self._space_point.distance(point)
        if self._closest is None or distance < self._closest.a:
            self._closest = CurveLocationDetail.create_curve_fraction_point_distance(curve, fraction, point, distance)

    def _refine_and_test(self, curve, seed: float):
        self._newton.set_x(seed)
        if not self._newton.run_iterations():
            logger.debug("Closest point refinement from fraction %g kept best iterate", seed)
        fraction = self._newton.get_x()
        if self._fraction_allowed(curve, fraction):
            self._test_candidate(curve, fraction)

    def announce_segment_interval(self, cp, point0, point1, num_strokes, fraction0, fraction1):
        self._curve = cp
        point0 = Vec3(point0)
        local = self._space_point.fraction_of_projection_to_line(point0, point1)
        # interior stroke breaks never extend
        if local < 0.0 and not (self._extend0 and fraction0 == 0.0):
            local = 0.0
        if local > 1.0 and not (self._extend1 and fraction1 == 1.0):
            local = 1.0
        curve = self.effective_curve()
        self._test_candidate(curve, interpolate(fraction0, local, fraction1), point0.interpolate(local, point1))

    def announce_interval_for_uniform_step_strokes(self, cp, num_strokes, fraction0, fraction1):
        self.start_curve_primitive(cp)
        curve = self.effective_curve()
        num_strokes = max(1, num_strokes)
        fraction_a = function_a = None
        for i in range(num_strokes + 1):
            fraction_b = interpolate(fraction0, i / num_strokes, fraction1)
            ray = cp.fraction_to_point_and_derivative(fraction_b)
            function_b = ray.direction.dot(ray.origin - self._space_point)
            if i == 0 or i == num_strokes:
                self._test_candidate(curve, fraction_b, ray.origin)
            if function_b == 0.0:
                self._test_candidate(curve, fraction_b, ray.origin)
            elif fraction_a is not None and function_a * function_b < 0.0:
                seed = inverse_interpolate(fraction_a, function_a, fraction_b, function_b)
                if seed is not None:
                    self._refine_and_test(curve, seed)
            fraction_a, function_a = fraction_b, function_b

        # a perpendicular foot beyond an open end
        if curve.is_extensible_fraction_space:
            if self._extend0 and fraction0 == 0.0:
                self._refine_and_test(curve, 0.0)
            if self._extend1 and fraction1 == 1.0:
                self._refine_and_test(curve, 1.0)


# ============================================================================
# Plane intersection
# ============================================================================

class AppendPlaneIntersectionStrokeHandler(_ParentAwareStrokeHandler):

    def __init__(self, plane, intersections: List[CurveLocationDetail]):
        super().__init__()
        self._plane = plane
        self._intersections = intersections
        self._first_index = len(intersections)
        self._newton = Newton1dUnboundedApproximateDerivative(self._altitude_residual)

    def _altitude_residual(self, fraction: float) -> Optional[float]:
        curve = self.effective_curve()
        if curve is None:
            return None
        return self._plane.altitude(curve.fraction_to_point(fraction))

    def _announce_solution_fraction(self, fraction: float):
        curve = self.effective_curve()
        if curve is None or not is_in_01(fraction):
            return
        fraction = min(1.0, max(0.0, fraction))
        if len(self._intersections) > self._first_index:
            last = self._intersections[-1]
            if last.curve is curve and is_same_fraction(last.fraction, fraction, FRACTION_TOLERANCE):
                return
        detail = CurveLocationDetail.create_curve_fraction_point(curve, fraction, curve.fraction_to_point(fraction))
        detail.interval_role = CurveIntervalRole.ISOLATED
        self._intersections.append(detail)

    def _refine_and_announce(self, seed: float):
        self._newton.set_x(seed)
        if not self._newton.run_iterations():
            logger.debug("Plane intersection refinement from fraction %g kept best iterate", seed)
        self._announce_solution_fraction(self._newton.get_x())

    def announce_segment_interval(self, cp, point0, point1, num_strokes, fraction0, fraction1):
        self._curve = cp
        h0 = self._plane.altitude(point0)
        h1 = self._plane.altitude(point1)
        if h0 * h1 > 0.0:
            return
        local = order2_bezier_root(h0, h1)
        if local is None:
            return
        self._refine_and_announce(interpolate(fraction0, local, fraction1))

    def announce_interval_for_uniform_step_strokes(self, cp, num_strokes, fraction0, fraction1):
        self.start_curve_primitive(cp)
        num_strokes = max(1, num_strokes)
        fraction_a = function_a = None
        for i in range(num_strokes + 1):
            fraction_b = interpolate(fraction0, i / num_strokes, fraction1)
            function_b = self._plane.altitude(cp.fraction_to_point(fraction_b))
            if function_b == 0.0:
                self._announce_solution_fraction(fraction_b)
            elif fraction_a is not None and function_a * function_b < 0.0:
                seed = inverse_interpolate(fraction_a, function_a, fraction_b, function_b)
                if seed is not None:
                    self._refine_and_announce(seed)
            fraction_a, function_a = fraction_b, function_b


# ============================================================================
# Arc length
# ============================================================================

class CurveLengthContext(StrokeHandler):

    def __init__(self, fraction0: float = 0.0, fraction1: float = 1.0,
                 num_gauss_points: int = DEFAULT_GAUSS_POINTS):
        if fraction0 > fraction1:
            fraction0, fraction1 = fraction1, fraction0
        self._fraction0 = fraction0
        self._fraction1 = fraction1
        self._summed_length = 0.0
        self._gauss_mapper = GaussMapper(num_gauss_points)

    def get_sum(self) -> float:
        return self._summed_length

    def _window(self, fraction0: float, fraction1: float):
        """Overlap of [fraction0, fraction1] with the requested window, or None."""
        g0 = max(fraction0, self._fraction0)
        g1 = min(fraction1, self._fraction1)
        if g1 <= g0:
            return None
        return g0, g1

    def announce_segment_interval(self, cp, point0, point1, num_strokes, fraction0, fraction1):
        segment_length = Vec3(point0).distance(point1)
        if self._fraction0 <= fraction0 and fraction1 <= self._fraction1:
            self._summed_length += segment_length
            return
        window = self._window(fraction0, fraction1)
        if window is not None and fraction1 != fraction0:
            self._summed_length += segment_length * (window[1] - window[0]) / (fraction1 - fraction0)

    def announce_interval_for_uniform_step_strokes(self, cp, num_strokes, fraction0, fraction1):
        num_strokes = max(1, num_strokes)
        for i in range(1, num_strokes + 1):
            fraction_a = interpolate(fraction0, (i - 1) / num_strokes, fraction1)
            fraction_b = fraction1 if i == num_strokes else interpolate(fraction0, i / num_strokes, fraction1)
            window = self._window(fraction_a, fraction_b)
            if window is None:
                continue
            for x, w in self._gauss_mapper.map_xw(*window):
                self._summed_length += w * cp.fraction_to_point_and_derivative(x).direction.length()


# ============================================================================
# Stroke sampling
# ============================================================================

@dataclass
class StrokeSample:
    curve: object
    fraction: float
    point: Vec3


class StrokeCollector(StrokeHandler):
    """Collects stroke points in emission order."""

    def __init__(self):
        self.samples: List[StrokeSample] = []

    def _append(self, curve, fraction, point):
        if self.samples:
            last = self.samples[-1]
            if last.curve is curve and last.fraction == fraction:
                return
        self.samples.append(StrokeSample(curve, fraction, Vec3(point)))

    def announce_segment_interval(self, cp, point0, point1, num_strokes, fraction0, fraction1):
        point0 = Vec3(point0)
        num_strokes = max(1, num_strokes)
        for i in range(num_strokes + 1):
            local = i / num_strokes
            self._append(cp, interpolate(fraction0, local, fraction1), point0.interpolate(local, point1))

    def announce_interval_for_uniform_step_strokes(self, cp, num_strokes, fraction0, fraction1):
        num_strokes = max(1, num_strokes)
        for i in range(num_strokes + 1):
            fraction = interpolate(fraction0, i / num_strokes, fraction1)
            self._append(cp, fraction, cp.fraction_to_point(fraction))
