"""
Arc3d - circular or elliptic arc.

    point(theta) = center + vector0 * cos(theta) + vector90 * sin(theta)
    theta(f)     = sweep.start_radians + f * sweep.sweep_radians

vector0 and vector90 need not be perpendicular or of equal length; when they
are, the arc is circular and fraction is proportional to distance. Derivatives
are with respect to fraction, so the first derivative of a circular arc has
magnitude radius * |sweep|.

Closest point and plane intersection are solved analytically through the
trig-form solvers in numerics.polynomials. Elliptic lengths integrate with a
panel count driven by eccentricity.
"""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

import numpy as np

from gcurve.mathutils.vec3 import Vec3, transform_point, transform_vector
from gcurve.mathutils.gcurve_ray import GCurveRay
from gcurve.mathutils.gcurve_plane import GCurvePlane, PlaneByOriginAndVectors
from gcurve.mathutils.gcurve_math import is_almost_equal_number
from gcurve.mathutils.angle_sweep import AngleSweep
from gcurve.curves.gcurve_primitive import CurveKind, CurvePrimitive, ExtendParameter, resolve_extend
from gcurve.curves.gcurve_location_detail import CurveIntervalRole, CurveLocationDetail
from gcurve.curves.gcurve_stroke_options import StrokeOptions, apply_angle_tol
from gcurve.numerics.polynomials import solve_trig_form, solve_unit_circle_implicit_quadric


# ============================================================================
# CONSTANTS
# ============================================================================

# Relative tolerance for |vector0| == |vector90| and vector0 . vector90 == 0
CIRCULAR_TOLERANCE = 1.0e-10

# Elliptic length: one quadrature panel per this many degrees at eccentricity 1
QUADRATURE_INTERVAL_ANGLE_DEGREES = 10.0

QUADRATURE_GAUSS_COUNT = 5

MAX_QUADRATURE_INTERVALS = 400


class Arc3d(CurvePrimitive):

    curve_kind = CurveKind.ARC

    def __init__(self, center, vector0, vector90, sweep: Optional[AngleSweep] = None):
        self.center = Vec3(center)
        self.vector0 = Vec3(vector0)
        self.vector90 = Vec3(vector90)
        self.sweep = sweep.clone() if sweep is not None else AngleSweep()

    @staticmethod
    def create_xy_radius(center, radius: float, sweep: Optional[AngleSweep] = None) -> Arc3d:
        return Arc3d(center, Vec3(radius, 0.0, 0.0), Vec3(0.0, radius, 0.0), sweep)

    @staticmethod
    def create_center_normal_radius(center, normal, radius: float,
                                    sweep: Optional[AngleSweep] = None) -> Optional[Arc3d]:
        """Circular arc in the plane perpendicular to `normal`; None for a zero normal."""
        normal = Vec3(normal).scale_to_length(1.0)
        if normal is None:
            return None
        # cross with the axis least aligned with the normal
        components = [abs(normal.x), abs(normal.y), abs(normal.z)]
        axis = [Vec3(1, 0, 0), Vec3(0, 1, 0), Vec3(0, 0, 1)][components.index(min(components))]
        vector0 = normal.cross(axis.unit_cross(normal))
        vector0 = vector0.scale_to_length(radius)
        vector90 = normal.cross(vector0)
        return Arc3d(center, vector0, vector90, sweep)

    def __repr__(self):
        return (f"Arc3d(center={self.center!r}, vector0={self.vector0!r}, vector90={self.vector90!r}, "
                f"sweep={self.sweep!r})")

    # ------------------------------------------------------------------
    # Shape queries
    # ------------------------------------------------------------------

    @property
    def is_extensible_fraction_space(self) -> bool:
        return True

    def is_circular(self) -> bool:
        r0 = self.vector0.length()
        r90 = self.vector90.length()
        if not is_almost_equal_number(r0, r90, CIRCULAR_TOLERANCE):
            return False
        return abs(self.vector0.dot(self.vector90)) <= CIRCULAR_TOLERANCE * r0 * r90

    def circular_radius(self) -> Optional[float]:
        return self.vector0.length() if self.is_circular() else None

    def max_vector_length(self) -> float:
        return max(self.vector0.length(), self.vector90.length())

    def quick_eccentricity(self) -> float:
        """|vector0 x vector90| / (larger axis)^2: 1 for a circle, approaching 0 when flat."""
        large = self.max_vector_length()
        if large == 0.0:
            return 0.0
        return self.vector0.cross(self.vector90).length() / (large * large)

    def perpendicular_vector(self) -> Optional[Vec3]:
        """Unit normal of the arc plane."""
        return self.vector0.unit_cross(self.vector90)

    def plane(self) -> Optional[GCurvePlane]:
        return GCurvePlane.create_point_normal(self.center, self.vector0.cross(self.vector90))

    def get_fraction_to_distance_scale(self) -> Optional[float]:
        radius = self.circular_radius()
        if radius is None:
            return None
        return abs(radius * self.sweep.sweep_radians)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def radians_to_point(self, radians: float) -> Vec3:
        c, s = math.cos(radians), math.sin(radians)
        return Vec3(
            self.center.x + self.vector0.x * c + self.vector90.x * s,
            self.center.y + self.vector0.y * c + self.vector90.y * s,
            self.center.z + self.vector0.z * c + self.vector90.z * s,
        )

    def radians_to_vector(self, radians: float) -> Vec3:
        """Point minus center at an angle."""
        return self.vector0 * math.cos(radians) + self.vector90 * math.sin(radians)

    def fraction_to_point(self, fraction: float) -> Vec3:
        return self.radians_to_point(self.sweep.fraction_to_radians(fraction))

    def fraction_to_point_and_derivative(self, fraction: float) -> GCurveRay:
        theta = self.sweep.fraction_to_radians(fraction)
        c, s = math.cos(theta), math.sin(theta)
        derivative = (self.vector90 * c - self.vector0 * s) * self.sweep.sweep_radians
        return GCurveRay(self.radians_to_point(theta), derivative)

    def fraction_to_point_and_2_derivatives(self, fraction: float) -> PlaneByOriginAndVectors:
        theta = self.sweep.fraction_to_radians(fraction)
        c, s = math.cos(theta), math.sin(theta)
        a = self.sweep.sweep_radians
        vector = self.vector0 * c + self.vector90 * s
        derivative = (self.vector90 * c - self.vector0 * s) * a
        return PlaneByOriginAndVectors(self.center + vector, derivative, vector * (-a * a))

    # ------------------------------------------------------------------
    # Length
    # ------------------------------------------------------------------

    def curve_length(self) -> float:
        return self.curve_length_between_fractions(0.0, 1.0)

    def curve_length_between_fractions(self, fraction0: float, fraction1: float) -> float:
        scale = self.get_fraction_to_distance_scale()
        if scale is not None:
            return scale * abs(fraction1 - fraction0)
        f0, f1 = min(fraction0, fraction1), max(fraction0, fraction1)
        sweep_degrees = abs((f1 - f0) * math.degrees(self.sweep.sweep_radians))
        eccentricity = max(self.quick_eccentricity(), 0.00001)
        num_intervals = int(math.ceil(sweep_degrees / (eccentricity * QUADRATURE_INTERVAL_ANGLE_DEGREES)))
        num_intervals = min(max(num_intervals, 1), MAX_QUADRATURE_INTERVALS)
        return self.curve_length_with_fixed_interval_count_quadrature(f0, f1, num_intervals, QUADRATURE_GAUSS_COUNT)

    def quick_length(self) -> float:
        """Chord sum over a few panels, scaled by the circular arc/chord ratio."""
        total_sweep = abs(self.sweep.sweep_radians)
        num_intervals = max(1, int(math.ceil(4.0 * total_sweep / math.pi)))
        # force extras for short arcs
        if num_intervals < 4:
            num_intervals += 3
        elif num_intervals < 6:
            num_intervals += 2
        chord_sum = 0.0
        point_a = self.fraction_to_point(0.0)
        for i in range(1, num_intervals + 1):
            point_b = self.fraction_to_point(i / num_intervals)
            chord_sum += point_a.distance(point_b)
            point_a = point_b
        d_theta = total_sweep / num_intervals
        if d_theta == 0.0:
            return chord_sum
        return chord_sum * d_theta / (2.0 * math.sin(0.5 * d_theta))

    # ------------------------------------------------------------------
    # Searches
    # ------------------------------------------------------------------

    def all_perpendicular_angles(self, space_point) -> List[float]:
        """Angles where (point(theta) - space_point) is perpendicular to the tangent."""
        vector_q = self.center - Vec3(space_point)
        uu = self.vector0.length_sq()
        uv = self.vector0.dot(self.vector90)
        vv = self.vector90.length_sq()
        return solve_unit_circle_implicit_quadric(uv, vv - uu, -uv, self.vector90.dot(vector_q),
                                                  -self.vector0.dot(vector_q), 0.0)

    def radians_to_extended_fraction(self, radians: float, extend: ExtendParameter) -> Optional[float]:
        """Fraction of an angle, or None if it lies outside the sweep on a side that may not extend."""
        fraction = self.sweep.radians_to_signed_periodic_fraction(radians)
        if self.sweep.is_radians_in_sweep(radians):
            return min(1.0, max(0.0, fraction))
        extend0, extend1 = resolve_extend(extend)
        if fraction < 0.0 and extend0:
            return fraction
        if fraction > 1.0 and extend1:
            return fraction
        return None

    def closest_point(self, space_point, extend: ExtendParameter = False) -> CurveLocationDetail:
        space_point = Vec3(space_point)
        extend0, extend1 = resolve_extend(extend)
        candidates = [f for f in (self.radians_to_extended_fraction(r, extend)
                                  for r in self.all_perpendicular_angles(space_point)) if f is not None]
        if not self.sweep.is_full_circle():
            if not extend0:
                candidates.append(0.0)
            if not extend1:
                candidates.append(1.0)
        if not candidates:
            candidates.append(0.0)
        result = None
        for fraction in candidates:
            point = self.fraction_to_point(fraction)
            d = point.distance(space_point)
            if result is None or d < result.a:
                result = CurveLocationDetail.create_curve_fraction_point_distance(self, fraction, point, d)
        return result

    def plane_intersection_radians(self, plane: GCurvePlane) -> List[float]:
        """Angles (full ellipse, ignoring the sweep) where the arc crosses a plane."""
        const_coff = plane.altitude(self.center)
        cos_coff = plane.velocity(self.vector0)
        sin_coff = plane.velocity(self.vector90)
        return [math.atan2(s, c) for c, s in solve_trig_form(const_coff, cos_coff, sin_coff)]

    def append_plane_intersections(self, plane: GCurvePlane, result: List[CurveLocationDetail]) -> int:
        count = 0
        for radians in self.plane_intersection_radians(plane):
            if not self.sweep.is_radians_in_sweep(radians):
                continue
            fraction = min(1.0, self.sweep.radians_to_positive_periodic_fraction(radians))
            detail = CurveLocationDetail.create_curve_fraction_point(self, fraction, self.fraction_to_point(fraction))
            detail.interval_role = CurveIntervalRole.ISOLATED
            result.append(detail)
            count += 1
        return count

    def emit_strokable_parts(self, handler, options: Optional[StrokeOptions] = None):
        if options is not None:
            num_strokes = options.apply_tolerances_to_arc(self.max_vector_length(), self.sweep.sweep_radians)
        else:
            num_strokes = apply_angle_tol(None, 1, self.sweep.sweep_radians)
        handler.start_curve_primitive(self)
        handler.announce_interval_for_uniform_step_strokes(self, num_strokes, 0.0, 1.0)
        handler.end_curve_primitive(self)

    # ------------------------------------------------------------------
    # Local frame
    # ------------------------------------------------------------------

    def local_frame_matrix(self) -> Optional[np.ndarray]:
        """3x3 matrix with columns vector0, vector90 and the unit normal."""
        normal = self.perpendicular_vector()
        if normal is None:
            return None
        return np.array([list(self.vector0), list(self.vector90), list(normal)]).T

    def world_to_local(self, vectors) -> Optional[List[Vec3]]:
        """Express world vectors in (vector0, vector90, normal) coordinates."""
        matrix = self.local_frame_matrix()
        if matrix is None:
            return None
        try:
            solved = np.linalg.solve(matrix, np.array([list(v) for v in vectors]).T)
        except np.linalg.LinAlgError:
            return None
        return [Vec3(solved[:, i]) for i in range(solved.shape[1])]

    def other_arc_as_local_vectors(self, other: Arc3d) -> Optional[Tuple[Vec3, Vec3, Vec3]]:
        """Center, vector0 and vector90 of `other` in this arc's local frame."""
        local = self.world_to_local([other.center - self.center, other.vector0, other.vector90])
        if local is None:
            return None
        return local[0], local[1], local[2]

    # ------------------------------------------------------------------

    def reverse_in_place(self):
        self.sweep.reverse_in_place()

    def clone(self) -> Arc3d:
        return Arc3d(self.center, self.vector0, self.vector90, self.sweep)

    def try_transform_in_place(self, matrix) -> bool:
        self.center = transform_point(self.center, matrix)
        self.vector0 = transform_vector(self.vector0, matrix)
        self.vector90 = transform_vector(self.vector90, matrix)
        return True
