"""
CurvePrimitive - the evaluation contract every concrete curve implements.

A curve maps a fraction (nominally [0, 1], start to end) to a point. Beyond
the formula-specific evaluators, each curve describes itself to generic
algorithms through stroke emission (see gcurve_stroke_handler): linear pieces
are announced exactly, curved pieces as uniform fraction steps the consumer
evaluates itself. Closest point, plane intersection and arc length all run
on that protocol by default, so a new curve type only has to supply:

    fraction_to_point
    fraction_to_point_and_derivative       -> GCurveRay (derivative wrt fraction)
    fraction_to_point_and_2_derivatives    -> PlaneByOriginAndVectors
    quick_length
    emit_strokable_parts
    reverse_in_place / clone / try_transform_in_place

Subclasses with closed forms override the defaults (curve_length,
closest_point, append_plane_intersections, move_signed_distance_from_fraction).

Fractions outside [0, 1] are extrapolated when ``is_extensible_fraction_space``
is True and clamped otherwise.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from gcurve.mathutils.vec3 import Vec3
from gcurve.mathutils.gcurve_ray import GCurveRay
from gcurve.mathutils.gcurve_plane import GCurvePlane, PlaneByOriginAndVectors
from gcurve.mathutils.gcurve_math import (
    SMALL_METRIC_DISTANCE,
    conditional_divide_fraction,
    interpolate,
)
from gcurve.curves.gcurve_location_detail import CurveLocationDetail, CurveSearchStatus
from gcurve.curves.gcurve_stroke_options import StrokeOptions
from gcurve.numerics.quadrature import DEFAULT_GAUSS_POINTS, GaussMapper

logger = logging.getLogger(__name__)

# Extension permission: one flag for both ends, or (start, end)
ExtendParameter = Union[bool, Tuple[bool, bool], Sequence[bool]]

# Iteration cap for the generic distance walk
MOVE_DISTANCE_MAX_ITERATIONS = 10


class CurveKind(Enum):
    """Closed set of curve variants known to the intersection dispatcher"""
    OTHER = 0
    LINE_SEGMENT = 1
    LINE_STRING = 2
    ARC = 3
    TRANSITION_SPIRAL = 4
    BSPLINE = 5
    DISTANCE_INDEXED_CHAIN = 6


def resolve_extend(extend: ExtendParameter) -> Tuple[bool, bool]:
    """Normalize an extension parameter to (extend_at_start, extend_at_end)."""
    if isinstance(extend, (tuple, list)):
        return bool(extend[0]), bool(extend[1])
    return bool(extend), bool(extend)


def correct_fraction(extend: ExtendParameter, fraction: float) -> float:
    """Clamp a fraction to [0, 1] on each side where extension is not allowed."""
    extend0, extend1 = resolve_extend(extend)
    if fraction < 0.0 and not extend0:
        return 0.0
    if fraction > 1.0 and not extend1:
        return 1.0
    return fraction


class CurvePrimitive(ABC):

    curve_kind = CurveKind.OTHER

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    @abstractmethod
    def fraction_to_point(self, fraction: float) -> Vec3:
        """Point at fraction."""

    @abstractmethod
    def fraction_to_point_and_derivative(self, fraction: float) -> GCurveRay:
        """Point and derivative with respect to fraction."""

    @abstractmethod
    def fraction_to_point_and_2_derivatives(self, fraction: float) -> Optional[PlaneByOriginAndVectors]:
        """Point with first and second derivatives with respect to fraction."""

    def fraction_to_point_and_unit_tangent(self, fraction: float) -> GCurveRay:
        ray = self.fraction_to_point_and_derivative(fraction)
        unit = ray.direction.scale_to_length(1.0)
        return GCurveRay(ray.origin, unit if unit is not None else ray.direction)

    def start_point(self) -> Vec3:
        return self.fraction_to_point(0.0)

    def end_point(self) -> Vec3:
        return self.fraction_to_point(1.0)

    @property
    def is_extensible_fraction_space(self) -> bool:
        return False

    def get_fraction_to_distance_scale(self) -> Optional[float]:
        """Length per unit fraction when fraction is proportional to distance, else None."""
        return None

    # ------------------------------------------------------------------
    # Length
    # ------------------------------------------------------------------

    def curve_length(self) -> float:
        """Arc length by Gauss quadrature over the stroke emission."""
        from gcurve.solvers.gcurve_search_contexts import CurveLengthContext
        context = CurveLengthContext()
        self.emit_strokable_parts(context)
        return context.get_sum()

    @abstractmethod
    def quick_length(self) -> float:
        """Fast length estimate for tolerancing."""

    def curve_length_between_fractions(self, fraction0: float, fraction1: float) -> float:
        """Unsigned length between two fractions."""
        if fraction0 == fraction1:
            return 0.0
        scale = self.get_fraction_to_distance_scale()
        if scale is not None:
            return abs(fraction1 - fraction0) * scale
        from gcurve.solvers.gcurve_search_contexts import CurveLengthContext
        context = CurveLengthContext(fraction0, fraction1)
        self.emit_strokable_parts(context)
        return context.get_sum()

    def curve_length_with_fixed_interval_count_quadrature(self, fraction0: float, fraction1: float,
                                                          num_intervals: int,
                                                          num_gauss_points: int = DEFAULT_GAUSS_POINTS) -> float:
        """Length from `num_intervals` Gauss panels between the fractions, ignoring strokes."""
        if fraction0 > fraction1:
            fraction0, fraction1 = fraction1, fraction0
        mapper = GaussMapper(num_gauss_points)
        return mapper.integrate(lambda f: self.fraction_to_point_and_derivative(f).direction.length(),
                                fraction0, fraction1, num_intervals)

    # ------------------------------------------------------------------
    # Distance walks
    # ------------------------------------------------------------------

    def move_signed_distance_from_fraction(self, start_fraction: float, signed_distance: float,
                                           allow_extension: bool) -> CurveLocationDetail:
        """
        Point at true distance `signed_distance` from `start_fraction`.

        Walks past the ends only when `allow_extension` is set; otherwise a walk
        that runs out of curve stops at the end with STOPPED_AT_BOUNDARY status.
        """
        scale = self.get_fraction_to_distance_scale()
        if scale is not None:
            fraction_move = conditional_divide_fraction(signed_distance, scale)
            if fraction_move is None:
                return CurveLocationDetail.create_curve_fraction_point_distance_status(
                    self, start_fraction, self.fraction_to_point(start_fraction), 0.0, CurveSearchStatus.ERROR)
            return CurveLocationDetail.create_conditional_move_signed_distance(
                allow_extension, self, start_fraction, start_fraction + fraction_move, signed_distance)
        return self.move_signed_distance_from_fraction_generic(start_fraction, signed_distance, allow_extension)

    def move_signed_distance_from_fraction_generic(self, start_fraction: float, signed_distance: float,
                                                   allow_extension: bool) -> CurveLocationDetail:
        """
        Newton iteration on the end fraction of the arc length integral.

        The derivative of length with respect to the end fraction is the
        tangent magnitude there, so each step is (distance error) / |C'(f)|.
        """
        limit_fraction = 1.0 if signed_distance > 0.0 else 0.0
        abs_distance = abs(signed_distance)
        direction_factor = -1.0 if signed_distance < 0.0 else 1.0
        available_length = self.curve_length_between_fractions(start_fraction, limit_fraction)
        if available_length < abs_distance and not allow_extension:
            return CurveLocationDetail.create_conditional_move_signed_distance(
                allow_extension, self, start_fraction, limit_fraction, signed_distance)
        if abs_distance == 0.0:
            return CurveLocationDetail.create_conditional_move_signed_distance(
                allow_extension, self, start_fraction, start_fraction, signed_distance)
        if available_length <= 0.0:
            available_length = max(self.quick_length(), SMALL_METRIC_DISTANCE)

        fraction_b = interpolate(start_fraction, abs_distance / available_length, limit_fraction)
        fraction_a = start_fraction
        distance_a = 0.0
        tol = 1.0e-12 * available_length
        num_converged = 0
        for _ in range(MOVE_DISTANCE_MAX_ITERATIONS):
            distance_ab = self.curve_length_between_fractions(fraction_a, fraction_b)
            direction_ab = direction_factor if fraction_b > fraction_a else -direction_factor
            distance_0b = distance_a + direction_ab * distance_ab
            distance_error = abs_distance - distance_0b
            if abs(distance_error) < tol:
                num_converged += 1
                if num_converged > 1:
                    break
            else:
                num_converged = 0
            tangent_magnitude = self.fraction_to_point_and_derivative(fraction_b).direction.length()
            if tangent_magnitude == 0.0:
                break
            fraction_a = fraction_b
            fraction_b = fraction_a + direction_factor * distance_error / tangent_magnitude
            if fraction_a == fraction_b:
                num_converged = 2
                break
            distance_a = distance_0b

        if num_converged > 1:
            return CurveLocationDetail.create_conditional_move_signed_distance(
                allow_extension, self, start_fraction, fraction_b, signed_distance)
        logger.debug("Distance walk of %g from fraction %g did not converge", signed_distance, start_fraction)
        return CurveLocationDetail.create_curve_fraction_point_distance_status(
            self, start_fraction, self.fraction_to_point(start_fraction), 0.0, CurveSearchStatus.ERROR)

    # ------------------------------------------------------------------
    # Searches
    # ------------------------------------------------------------------

    def closest_point(self, space_point, extend: ExtendParameter = False) -> Optional[CurveLocationDetail]:
        """Closest curve point to `space_point`; ``a`` holds the distance."""
        from gcurve.solvers.gcurve_search_contexts import ClosestPointStrokeHandler
        handler = ClosestPointStrokeHandler(Vec3(space_point), extend)
        self.emit_strokable_parts(handler)
        return handler.claim_result()

    def append_plane_intersections(self, plane: GCurvePlane, result: List[CurveLocationDetail]) -> int:
        """Append transverse plane crossings to `result`; returns the number appended."""
        from gcurve.solvers.gcurve_search_contexts import AppendPlaneIntersectionStrokeHandler
        handler = AppendPlaneIntersectionStrokeHandler(plane, result)
        initial_length = len(result)
        self.emit_strokable_parts(handler)
        return len(result) - initial_length

    def is_in_plane(self, plane: GCurvePlane) -> bool:
        """True if every stroke point lies on the plane."""
        from gcurve.solvers.gcurve_search_contexts import StrokeCollector
        collector = StrokeCollector()
        self.emit_strokable_parts(collector, StrokeOptions.create_for_curves())
        return all(plane.is_point_in_plane(sample.point) for sample in collector.samples)

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @abstractmethod
    def emit_strokable_parts(self, handler, options: Optional[StrokeOptions] = None):
        """Announce this curve's linear pieces or uniform steps to a StrokeHandler."""

    @abstractmethod
    def reverse_in_place(self):
        """Reverse direction so that fraction f maps to the old 1 - f."""

    @abstractmethod
    def clone(self) -> CurvePrimitive:
        """Deep copy."""

    @abstractmethod
    def try_transform_in_place(self, matrix) -> bool:
        """Apply a row-major 4x4 transform. False if this curve type cannot represent the result."""

    def clone_transformed(self, matrix) -> Optional[CurvePrimitive]:
        result = self.clone()
        if result.try_transform_in_place(matrix):
            return result
        return None
