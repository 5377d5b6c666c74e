"""
LineString3d - polyline through an ordered list of points.

Vertex i sits at fraction i / (n - 1), so fraction is uniform per edge, not
per unit length. Fractions below 0 or above 1 extend the first or last edge.
"""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

from gcurve.mathutils.vec3 import Vec3, transform_point
from gcurve.mathutils.gcurve_ray import GCurveRay
from gcurve.mathutils.gcurve_plane import GCurvePlane, PlaneByOriginAndVectors
from gcurve.mathutils.gcurve_math import SMALL_METRIC_DISTANCE
from gcurve.curves.gcurve_primitive import CurveKind, CurvePrimitive, ExtendParameter, resolve_extend
from gcurve.curves.gcurve_location_detail import CurveIntervalRole, CurveLocationDetail
from gcurve.curves.gcurve_stroke_options import StrokeOptions


class LineString3d(CurvePrimitive):

    curve_kind = CurveKind.LINE_STRING

    def __init__(self, points=()):
        self.points: List[Vec3] = [Vec3(p) for p in points]

    def __repr__(self):
        return f"LineString3d({self.points!r})"

    @property
    def num_points(self) -> int:
        return len(self.points)

    @property
    def num_edges(self) -> int:
        return max(0, len(self.points) - 1)

    @property
    def is_extensible_fraction_space(self) -> bool:
        return True

    def add_point(self, point):
        """Append a point unless it duplicates the current last point."""
        point = Vec3(point)
        if not self.points or not point.is_almost_equal(self.points[-1], SMALL_METRIC_DISTANCE):
            self.points.append(point)

    def edge_fraction(self, edge_index: int, local_fraction: float) -> float:
        """Global fraction of a point `local_fraction` along edge `edge_index`."""
        return (edge_index + local_fraction) / self.num_edges

    def _edge_and_local_fraction(self, fraction: float) -> Tuple[int, float]:
        n = self.num_edges
        scaled = fraction * n
        index = int(math.floor(scaled))
        index = min(max(index, 0), n - 1)
        return index, scaled - index

    # ------------------------------------------------------------------

    def fraction_to_point(self, fraction: float) -> Vec3:
        if not self.points:
            return Vec3(0.0, 0.0, 0.0)
        if len(self.points) == 1:
            return Vec3(self.points[0])
        i, local = self._edge_and_local_fraction(fraction)
        return self.points[i].interpolate(local, self.points[i + 1])

    def fraction_to_point_and_derivative(self, fraction: float) -> GCurveRay:
        if len(self.points) < 2:
            return GCurveRay(self.fraction_to_point(fraction), Vec3(0.0, 0.0, 0.0))
        i, local = self._edge_and_local_fraction(fraction)
        edge = self.points[i + 1] - self.points[i]
        return GCurveRay(self.points[i].interpolate(local, self.points[i + 1]), edge * self.num_edges)

    def fraction_to_point_and_2_derivatives(self, fraction: float) -> PlaneByOriginAndVectors:
        ray = self.fraction_to_point_and_derivative(fraction)
        return PlaneByOriginAndVectors(ray.origin, ray.direction, Vec3(0.0, 0.0, 0.0))

    def curve_length(self) -> float:
        return sum(self.points[i].distance(self.points[i + 1]) for i in range(self.num_edges))

    def quick_length(self) -> float:
        return self.curve_length()

    def curve_length_between_fractions(self, fraction0: float, fraction1: float) -> float:
        if self.num_edges == 0:
            return 0.0
        if fraction0 > fraction1:
            fraction0, fraction1 = fraction1, fraction0
        i0, local0 = self._edge_and_local_fraction(fraction0)
        i1, local1 = self._edge_and_local_fraction(fraction1)
        if i0 == i1:
            return (local1 - local0) * self.points[i0].distance(self.points[i0 + 1])
        total = (1.0 - local0) * self.points[i0].distance(self.points[i0 + 1])
        for i in range(i0 + 1, i1):
            total += self.points[i].distance(self.points[i + 1])
        total += local1 * self.points[i1].distance(self.points[i1 + 1])
        return total

    def move_signed_distance_from_fraction(self, start_fraction: float, signed_distance: float,
                                           allow_extension: bool) -> CurveLocationDetail:
        """Exact walk along the edges; extension continues along the first or last edge."""
        n = self.num_edges
        if n == 0:
            return super().move_signed_distance_from_fraction(start_fraction, signed_distance, allow_extension)
        i, local = self._edge_and_local_fraction(start_fraction)
        remaining = signed_distance
        if signed_distance >= 0.0:
            while True:
                edge_length = self.points[i].distance(self.points[i + 1])
                available = (1.0 - local) * edge_length
                if remaining <= available or i == n - 1:
                    break
                remaining -= available
                i, local = i + 1, 0.0
        else:
            while True:
                edge_length = self.points[i].distance(self.points[i + 1])
                available = local * edge_length
                if -remaining <= available or i == 0:
                    break
                remaining += available
                i, local = i - 1, 1.0
        edge_length = self.points[i].distance(self.points[i + 1])
        if edge_length == 0.0:
            end_fraction = self.edge_fraction(i, local)
        else:
            end_fraction = self.edge_fraction(i, local + remaining / edge_length)
        return CurveLocationDetail.create_conditional_move_signed_distance(
            allow_extension, self, start_fraction, end_fraction, signed_distance)

    def closest_point(self, space_point, extend: ExtendParameter = False) -> Optional[CurveLocationDetail]:
        space_point = Vec3(space_point)
        if not self.points:
            return None
        extend0, extend1 = resolve_extend(extend)
        last = Vec3(self.points[-1])
        result = CurveLocationDetail.create_curve_fraction_point_distance(self, 1.0, last, last.distance(space_point))
        n = self.num_edges
        for i in range(n):
            local = space_point.fraction_of_projection_to_line(self.points[i], self.points[i + 1])
            if local < 0.0 and not (extend0 and i == 0):
                local = 0.0
            elif local > 1.0 and not (extend1 and i == n - 1):
                local = 1.0
            point = self.points[i].interpolate(local, self.points[i + 1])
            d = point.distance(space_point)
            if d < result.a:
                result.set_fraction_point(self.edge_fraction(i, local), point, None, d)
        return result

    def append_plane_intersections(self, plane: GCurvePlane, result: List[CurveLocationDetail]) -> int:
        """
        Transverse crossings are ISOLATED; vertices lying on the plane are
        ISOLATED_AT_VERTEX, or INTERVAL_START/INTERIOR/END for runs of them.
        """
        if not self.points:
            return 0
        initial_length = len(result)
        divisor = 1.0 if len(self.points) == 1 else float(len(self.points) - 1)
        num_consecutive_zero = 0
        h_a = 0.0
        for i, point_b in enumerate(self.points):
            h_b = plane.altitude(point_b)
            if abs(h_b) <= SMALL_METRIC_DISTANCE:
                self._push_vertex_hit(result, num_consecutive_zero, i / divisor, point_b)
                num_consecutive_zero += 1
            else:
                if i > 0 and h_a * h_b < 0.0:
                    local = h_a / (h_a - h_b)
                    point = self.points[i - 1].interpolate(local, point_b)
                    detail = CurveLocationDetail.create_curve_fraction_point(self, (i - 1 + local) / divisor, point)
                    detail.interval_role = CurveIntervalRole.ISOLATED
                    result.append(detail)
                num_consecutive_zero = 0
            h_a = 0.0 if abs(h_b) <= SMALL_METRIC_DISTANCE else h_b
        return len(result) - initial_length

    def _push_vertex_hit(self, result, counter, fraction, point):
        detail = CurveLocationDetail.create_curve_fraction_point(self, fraction, point)
        result.append(detail)
        if counter == 0:
            detail.interval_role = CurveIntervalRole.ISOLATED_AT_VERTEX
        elif counter == 1:
            result[-2].interval_role = CurveIntervalRole.INTERVAL_START
            detail.interval_role = CurveIntervalRole.INTERVAL_END
        else:
            result[-2].interval_role = CurveIntervalRole.INTERVAL_INTERIOR
            detail.interval_role = CurveIntervalRole.INTERVAL_END

    def emit_strokable_parts(self, handler, options: Optional[StrokeOptions] = None):
        handler.start_curve_primitive(self)
        n = self.num_edges
        for i in range(n):
            point0, point1 = self.points[i], self.points[i + 1]
            num_strokes = 1
            if options is not None:
                num_strokes = options.apply_max_edge_length(1, point0.distance(point1))
            handler.announce_segment_interval(self, point0, point1, num_strokes, i / n, (i + 1) / n)
        handler.end_curve_primitive(self)

    # ------------------------------------------------------------------

    def reverse_in_place(self):
        self.points.reverse()

    def clone(self) -> LineString3d:
        return LineString3d(self.points)

    def try_transform_in_place(self, matrix) -> bool:
        self.points = [transform_point(p, matrix) for p in self.points]
        return True
