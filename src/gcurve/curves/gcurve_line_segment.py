"""
LineSegment3d - straight segment between two points.

Fraction is proportional to distance and extends beyond [0, 1] along the
carrier line.
"""

from __future__ import annotations

from typing import List, Optional

from gcurve.mathutils.vec3 import Vec3, transform_point
from gcurve.mathutils.gcurve_ray import GCurveRay
from gcurve.mathutils.gcurve_plane import GCurvePlane, PlaneByOriginAndVectors
from gcurve.curves.gcurve_primitive import CurveKind, CurvePrimitive, ExtendParameter, correct_fraction
from gcurve.curves.gcurve_location_detail import CurveIntervalRole, CurveLocationDetail
from gcurve.curves.gcurve_stroke_options import StrokeOptions
from gcurve.numerics.polynomials import order2_bezier_root


class LineSegment3d(CurvePrimitive):

    curve_kind = CurveKind.LINE_SEGMENT

    def __init__(self, point0, point1):
        self.point0 = Vec3(point0)
        self.point1 = Vec3(point1)

    @staticmethod
    def create_xyz(x0, y0, z0, x1, y1, z1) -> LineSegment3d:
        return LineSegment3d((x0, y0, z0), (x1, y1, z1))

    def __repr__(self):
        return f"LineSegment3d({self.point0!r}, {self.point1!r})"

    @property
    def is_extensible_fraction_space(self) -> bool:
        return True

    def get_fraction_to_distance_scale(self) -> Optional[float]:
        return self.curve_length()

    def vector(self) -> Vec3:
        return self.point1 - self.point0

    # ------------------------------------------------------------------

    def fraction_to_point(self, fraction: float) -> Vec3:
        return self.point0.interpolate(fraction, self.point1)

    def fraction_to_point_and_derivative(self, fraction: float) -> GCurveRay:
        return GCurveRay(self.fraction_to_point(fraction), self.vector())

    def fraction_to_point_and_2_derivatives(self, fraction: float) -> PlaneByOriginAndVectors:
        return PlaneByOriginAndVectors(self.fraction_to_point(fraction), self.vector(), Vec3(0.0, 0.0, 0.0))

    def start_point(self) -> Vec3:
        return Vec3(self.point0)

    def end_point(self) -> Vec3:
        return Vec3(self.point1)

    def curve_length(self) -> float:
        return self.point0.distance(self.point1)

    def quick_length(self) -> float:
        return self.curve_length()

    def curve_length_between_fractions(self, fraction0: float, fraction1: float) -> float:
        return abs(fraction1 - fraction0) * self.curve_length()

    def closest_point(self, space_point, extend: ExtendParameter = False) -> CurveLocationDetail:
        space_point = Vec3(space_point)
        fraction = correct_fraction(extend, space_point.fraction_of_projection_to_line(self.point0, self.point1))
        point = self.fraction_to_point(fraction)
        return CurveLocationDetail.create_curve_fraction_point_distance(self, fraction, point,
                                                                        point.distance(space_point))

    def append_plane_intersections(self, plane: GCurvePlane, result: List[CurveLocationDetail]) -> int:
        h0 = plane.altitude(self.point0)
        h1 = plane.altitude(self.point1)
        if h0 * h1 > 0.0:
            return 0
        fraction = order2_bezier_root(h0, h1)
        if fraction is None:
            return 0
        detail = CurveLocationDetail.create_curve_fraction_point(self, fraction, self.fraction_to_point(fraction))
        detail.interval_role = CurveIntervalRole.ISOLATED
        result.append(detail)
        return 1

    def emit_strokable_parts(self, handler, options: Optional[StrokeOptions] = None):
        num_strokes = 1
        if options is not None:
            num_strokes = options.apply_max_edge_length(1, self.curve_length())
        handler.start_curve_primitive(self)
        handler.announce_segment_interval(self, self.point0, self.point1, num_strokes, 0.0, 1.0)
        handler.end_curve_primitive(self)

    # ------------------------------------------------------------------

    def reverse_in_place(self):
        self.point0, self.point1 = self.point1, self.point0

    def clone(self) -> LineSegment3d:
        return LineSegment3d(self.point0, self.point1)

    def try_transform_in_place(self, matrix) -> bool:
        self.point0 = transform_point(self.point0, matrix)
        self.point1 = transform_point(self.point1, matrix)
        return True
