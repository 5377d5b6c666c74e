"""
Curve-curve intersection solver - finds the points shared by two curve primitives in 3D.

The solver is told two curves A and B and, for each, whether it may be extended
past its ends. Work is dispatched on the pair of CurveKind tags:

    Dispatch table (either order; the reversed key runs the same handler with
    the roles swapped and the results swapped back):
        (LINE_SEGMENT, LINE_SEGMENT)  closest approach of the two carrier lines
        (LINE_SEGMENT, LINE_STRING)   per edge segment/segment
        (LINE_STRING,  LINE_STRING)   per edge pair segment/segment
        (LINE_SEGMENT, ARC)           plane through the segment cut with the arc
        (LINE_STRING,  ARC)           per edge segment/arc
        (ARC,          ARC)           coplanar: unit circle vs local ellipse quartic
                                      skew: each arc cut by the other's plane

    Distance-indexed chains:
        Either side may be a CurveChainWithDistanceIndex. It is decomposed into
        its children (only the first may extend at its start and only the last
        at its end) and each child hit is mapped back to a chain fraction with
        the child location attached as child_detail.

    Generic arm (any other pair, e.g. spline/arc, spiral/segment):
        Both curves are stroked; every pair of stroke chords that nearly meet
        seeds a 2-D Newton iteration on the closest-approach conditions
            (A(u) - B(v)) . A'(u) = 0
            (A(u) - B(v)) . B'(v) = 0
        Converged roots where A(u) and B(v) coincide are intersections.

Extension rules:
    A local fraction below 0 is accepted only when the start may extend, one
    above 1 only when the end may extend. Interior edges of a linestring never
    extend.

Results:
    Every intersection is recorded as an index-aligned pair (data_a[i],
    data_b[i]) of CurveLocationDetails tagged ISOLATED. A pair whose fractions
    match the most recently recorded pair is dropped (this collapses the hit
    found on both edges that share a linestring vertex).

Main API:
    result = CurveCurve.intersection_xyz(curve_a, extend_a, curve_b, extend_b)
    result.data_a -> List[CurveLocationDetail]   # locations on curve_a
    result.data_b -> List[CurveLocationDetail]   # locations on curve_b
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Dict, List, Optional, Tuple

from gcurve.mathutils.vec3 import Vec3
from gcurve.mathutils.gcurve_ray import GCurveRay
from gcurve.mathutils.gcurve_plane import GCurvePlane
from gcurve.mathutils.gcurve_math import (
    SMALL_METRIC_DISTANCE,
    interpolate,
    is_almost_equal_number,
    is_in_01,
)
from gcurve.curves.gcurve_primitive import CurveKind, CurvePrimitive, ExtendParameter, resolve_extend
from gcurve.curves.gcurve_location_detail import (
    CurveIntervalRole,
    CurveLocationDetail,
    CurveLocationDetailArrayPair,
)
from gcurve.curves.gcurve_stroke_options import StrokeOptions
from gcurve.numerics.newton import Newton2dUnboundedWithDerivative
from gcurve.numerics.polynomials import solve_unit_circle_implicit_quadric
from gcurve.solvers.gcurve_search_contexts import StrokeCollector

logger = logging.getLogger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

# Cosine above which a segment is treated as too close to the arc normal
# to build the cutting plane from it (the arc's vector0 is used instead)
PREFERRED_PERPENDICULAR_COSINE = 0.9

# Tolerance for fraction comparisons when de-duplicating recorded pairs
DUPLICATE_FRACTION_TOLERANCE = 1.0e-10

# Stroke chord parameters may overshoot [0, 1] by this much and still seed Newton
SEED_PARAMETER_MARGIN = 0.1

# Fraction tolerance for generic roots of curves that cannot extend
GENERIC_FRACTION_TOLERANCE = 1.0e-10

# Two generic roots closer than this in both fractions are the same root
GENERIC_ROOT_FRACTION_TOLERANCE = 1.0e-8

# Segment end description used by the per-edge helpers:
#   (curve, extend0, point0, fraction0, point1, fraction1, extend1)
SegmentEnds = Tuple[CurvePrimitive, bool, Vec3, float, Vec3, float, bool]


def accept_fraction(extend0: bool, fraction: float, extend1: bool) -> bool:
    """True unless the fraction falls off an end that may not extend."""
    if not extend0 and fraction < 0.0:
        return False
    if not extend1 and fraction > 1.0:
        return False
    return True


def _edges(linestring, extend0: bool, extend1: bool):
    """Yield SegmentEnds for each edge; only the first and last edges carry extension."""
    points = linestring.points
    num_edges = len(points) - 1
    for i in range(num_edges):
        yield (linestring, extend0 and i == 0, points[i], i / num_edges,
               points[i + 1], (i + 1) / num_edges, extend1 and i == num_edges - 1)


class CurveCurveIntersectXYZ:
    """
    Single-use intersection context for one pair of curves.

    Create with the two curves and their extension flags, call
    ``dispatch()``, then ``grab_results()``.
    """

    def __init__(self, geometry_a: CurvePrimitive, extend_a: ExtendParameter,
                 geometry_b: CurvePrimitive, extend_b: ExtendParameter):
        self._geometry_a = geometry_a
        self._geometry_b = geometry_b
        self._extend_a = resolve_extend(extend_a)
        self._extend_b = resolve_extend(extend_b)
        self._results = CurveLocationDetailArrayPair()

    def grab_results(self, reinitialize: bool = False) -> CurveLocationDetailArrayPair:
        result = self._results
        if reinitialize:
            self._results = CurveLocationDetailArrayPair()
        return result

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def _is_duplicate_of_last(self, fraction_a: float, fraction_b: float) -> bool:
        if not self._results.data_a:
            return False
        return (is_almost_equal_number(self._results.data_a[-1].fraction, fraction_a, DUPLICATE_FRACTION_TOLERANCE)
                and is_almost_equal_number(self._results.data_b[-1].fraction, fraction_b,
                                           DUPLICATE_FRACTION_TOLERANCE))

    def _record_details(self, detail_a: CurveLocationDetail, detail_b: CurveLocationDetail, reversed_: bool):
        """Append a pair; `reversed_` means detail_a belongs to curve B of this solver."""
        if reversed_:
            detail_a, detail_b = detail_b, detail_a
        if self._is_duplicate_of_last(detail_a.fraction, detail_b.fraction):
            return
        self._results.data_a.append(detail_a)
        self._results.data_b.append(detail_b)

    def _record_point_with_local_fractions(self, local_fraction_a: float, cp_a, fraction_a0: float,
                                           fraction_a1: float, local_fraction_b: float, cp_b,
                                           fraction_b0: float, fraction_b1: float, reversed_: bool):
        """Map local fractions to curve fractions, check the points coincide, and record."""
        global_fraction_a = interpolate(fraction_a0, local_fraction_a, fraction_a1)
        global_fraction_b = interpolate(fraction_b0, local_fraction_b, fraction_b1)
        point_a = cp_a.fraction_to_point(global_fraction_a)
        point_b = cp_b.fraction_to_point(global_fraction_b)
        if not point_a.is_almost_equal(point_b, SMALL_METRIC_DISTANCE):
            return
        detail_a = CurveLocationDetail.create_curve_fraction_point(cp_a, global_fraction_a, point_a)
        detail_a.interval_role = CurveIntervalRole.ISOLATED
        detail_b = CurveLocationDetail.create_curve_fraction_point(cp_b, global_fraction_b, point_b)
        detail_b.interval_role = CurveIntervalRole.ISOLATED
        self._record_details(detail_a, detail_b, reversed_)

    # ------------------------------------------------------------------
    # Segment cases
    # ------------------------------------------------------------------

    def _dispatch_segment_segment(self, seg_a: SegmentEnds, seg_b: SegmentEnds, reversed_: bool):
        cp_a, extend_a0, point_a0, fraction_a0, point_a1, fraction_a1, extend_a1 = seg_a
        cp_b, extend_b0, point_b0, fraction_b0, point_b1, fraction_b1, extend_b1 = seg_b
        uv = GCurveRay.closest_approach_unbounded(GCurveRay.from_points(point_a0, point_a1),
                                                  GCurveRay.from_points(point_b0, point_b1))
        if uv is None:
            return
        if accept_fraction(extend_a0, uv[0], extend_a1) and accept_fraction(extend_b0, uv[1], extend_b1):
            self._record_point_with_local_fractions(uv[0], cp_a, fraction_a0, fraction_a1,
                                                    uv[1], cp_b, fraction_b0, fraction_b1, reversed_)

    def _dispatch_segment_arc(self, seg_a: SegmentEnds, arc, extend_b: Tuple[bool, bool], reversed_: bool):
        """
        Cut the arc with a plane containing the segment, then keep the cut
        points that lie on the segment.
        """
        cp_a, extend_a0, point_a0, fraction_a0, point_a1, fraction_a1, extend_a1 = seg_a
        line_vector = Vec3(point_a1) - point_a0
        normal = arc.perpendicular_vector()
        if normal is None:
            return
        plane = GCurvePlane.create_with_preferred_perpendicular(point_a0, line_vector, PREFERRED_PERPENDICULAR_COSINE,
                                                                normal, arc.vector0)
        if plane is None:
            return
        candidates: List[CurveLocationDetail] = []
        arc.append_plane_intersections(plane, candidates)
        for candidate in candidates:
            if not accept_fraction(extend_b[0], candidate.fraction, extend_b[1]):
                continue
            if line_vector.length_sq() == 0.0:
                continue
            line_fraction = candidate.point.fraction_of_projection_to_line(point_a0, point_a1)
            line_point = Vec3(point_a0).interpolate(line_fraction, point_a1)
            if line_point.is_almost_equal(candidate.point, SMALL_METRIC_DISTANCE) \
                    and accept_fraction(extend_a0, line_fraction, extend_a1):
                self._record_point_with_local_fractions(line_fraction, cp_a, fraction_a0, fraction_a1,
                                                        candidate.fraction, arc, 0.0, 1.0, reversed_)

    def _segment_segment(self, seg_a, extend_a, seg_b, extend_b, reversed_: bool):
        self._dispatch_segment_segment(
            (seg_a, extend_a[0], seg_a.point0, 0.0, seg_a.point1, 1.0, extend_a[1]),
            (seg_b, extend_b[0], seg_b.point0, 0.0, seg_b.point1, 1.0, extend_b[1]),
            reversed_)

    def _segment_linestring(self, seg_a, extend_a, ls_b, extend_b, reversed_: bool):
        ends_a = (seg_a, extend_a[0], seg_a.point0, 0.0, seg_a.point1, 1.0, extend_a[1])
        for edge_b in _edges(ls_b, *extend_b):
            self._dispatch_segment_segment(ends_a, edge_b, reversed_)

    def _linestring_linestring(self, ls_a, extend_a, ls_b, extend_b, reversed_: bool):
        for edge_a in _edges(ls_a, *extend_a):
            for edge_b in _edges(ls_b, *extend_b):
                self._dispatch_segment_segment(edge_a, edge_b, reversed_)

    def _segment_arc(self, seg_a, extend_a, arc_b, extend_b, reversed_: bool):
        self._dispatch_segment_arc((seg_a, extend_a[0], seg_a.point0, 0.0, seg_a.point1, 1.0, extend_a[1]),
                                   arc_b, extend_b, reversed_)

    def _linestring_arc(self, ls_a, extend_a, arc_b, extend_b, reversed_: bool):
        for edge_a in _edges(ls_a, *extend_a):
            self._dispatch_segment_arc(edge_a, arc_b, extend_b, reversed_)

    # ------------------------------------------------------------------
    # Arc cases
    # ------------------------------------------------------------------

    def _dispatch_arc_arc_in_plane(self, arc_a, extend_a, arc_b, extend_b, reversed_: bool):
        """
        In arc A's local frame A is the unit circle and B is
        X(phi) = c + u cos(phi) + v sin(phi). Points of B on the circle satisfy
        |X(phi)|^2 = 1, a trig quadric in phi solved in closed form.
        """
        local = arc_a.other_arc_as_local_vectors(arc_b)
        if local is None:
            return
        c, u, v = local
        acc = u.x * u.x + u.y * u.y
        acs = 2.0 * (u.x * v.x + u.y * v.y)
        ass = v.x * v.x + v.y * v.y
        ac = 2.0 * (c.x * u.x + c.y * u.y)
        as_ = 2.0 * (c.x * v.x + c.y * v.y)
        a = c.x * c.x + c.y * c.y - 1.0
        for radians_b in solve_unit_circle_implicit_quadric(acc, acs, ass, ac, as_, a):
            x = c + u * math.cos(radians_b) + v * math.sin(radians_b)
            radians_a = math.atan2(x.y, x.x)
            fraction_a = arc_a.sweep.radians_to_signed_periodic_fraction(radians_a)
            fraction_b = arc_b.sweep.radians_to_signed_periodic_fraction(radians_b)
            if accept_fraction(extend_a[0], fraction_a, extend_a[1]) \
                    and accept_fraction(extend_b[0], fraction_b, extend_b[1]):
                self._record_point_with_local_fractions(fraction_a, arc_a, 0.0, 1.0,
                                                        fraction_b, arc_b, 0.0, 1.0, reversed_)

    def _arc_arc(self, arc_a, extend_a, arc_b, extend_b, reversed_: bool):
        """
        Parallel planes: coplanar arcs go to the closed-form case, others never meet.
        Skew planes: cut each arc with the other's plane and pair coincident points.
        """
        plane_a = arc_a.plane()
        plane_b = arc_b.plane()
        if plane_a is None or plane_b is None:
            return
        if plane_a.normal.cross(plane_b.normal).length() <= SMALL_METRIC_DISTANCE:
            if plane_a.is_point_in_plane(plane_b.origin) and plane_b.is_point_in_plane(plane_a.origin):
                self._dispatch_arc_arc_in_plane(arc_a, extend_a, arc_b, extend_b, reversed_)
            return
        points_b: List[CurveLocationDetail] = []
        arc_b.append_plane_intersections(plane_a, points_b)
        points_a: List[CurveLocationDetail] = []
        arc_a.append_plane_intersections(plane_b, points_a)
        for detail_b in points_b:
            for detail_a in points_a:
                if detail_a.point.is_almost_equal(detail_b.point, SMALL_METRIC_DISTANCE) \
                        and accept_fraction(extend_a[0], detail_a.fraction, extend_a[1]) \
                        and accept_fraction(extend_b[0], detail_b.fraction, extend_b[1]):
                    self._record_point_with_local_fractions(detail_a.fraction, arc_a, 0.0, 1.0,
                                                            detail_b.fraction, arc_b, 0.0, 1.0, reversed_)

    # ------------------------------------------------------------------
    # Chains
    # ------------------------------------------------------------------

    def _dispatch_chain(self, chain, extend_chain, other, extend_other, reversed_: bool):
        """Intersect each chain child with `other` and lift the child hits to the chain."""
        children = chain.path.children
        last_index = len(children) - 1
        for i, child in enumerate(children):
            child_extend = (extend_chain[0] and i == 0, extend_chain[1] and i == last_index)
            child_solver = CurveCurveIntersectXYZ(child, child_extend, other, extend_other)
            child_solver.dispatch()
            child_results = child_solver.grab_results()
            for child_detail, other_detail in zip(child_results.data_a, child_results.data_b):
                chain_distance = chain.child_fraction_to_chain_distance(child, child_detail.fraction)
                if chain_distance is None:
                    continue
                chain_detail = CurveLocationDetail.create_curve_fraction_point(
                    chain, chain.chain_distance_to_chain_fraction(chain_distance), child_detail.point)
                chain_detail.interval_role = CurveIntervalRole.ISOLATED
                chain_detail.child_detail = child_detail
                self._record_details(chain_detail, other_detail, reversed_)

    # ------------------------------------------------------------------
    # Generic numeric arm
    # ------------------------------------------------------------------

    @staticmethod
    def _stroke_samples(curve):
        collector = StrokeCollector()
        curve.emit_strokable_parts(collector, StrokeOptions.create_for_curves())
        return [sample for sample in collector.samples if sample.curve is curve]

    @staticmethod
    def _generic_fraction(curve, fraction: float, extend: Tuple[bool, bool]) -> Optional[float]:
        """Accepted (possibly clamped) fraction of a generic root, or None."""
        if curve.is_extensible_fraction_space:
            return fraction if accept_fraction(extend[0], fraction, extend[1]) else None
        if not is_in_01(fraction, GENERIC_FRACTION_TOLERANCE):
            return None
        return min(1.0, max(0.0, fraction))

    def _dispatch_generic(self, cp_a, extend_a, cp_b, extend_b, reversed_: bool):
        samples_a = self._stroke_samples(cp_a)
        samples_b = self._stroke_samples(cp_b)
        if len(samples_a) < 2 or len(samples_b) < 2:
            logger.debug("Generic intersection skipped: %r or %r produced no strokes", cp_a, cp_b)
            return

        def closest_approach_residual(u: float, v: float):
            plane_a = cp_a.fraction_to_point_and_2_derivatives(u)
            plane_b = cp_b.fraction_to_point_and_2_derivatives(v)
            if plane_a is None or plane_b is None:
                return None
            d = plane_a.origin - plane_b.origin
            da, dda = plane_a.vector_u, plane_a.vector_v
            db, ddb = plane_b.vector_u, plane_b.vector_v
            return (d.dot(da), da.dot(da) + d.dot(dda), -db.dot(da),
                    d.dot(db), da.dot(db), -db.dot(db) + d.dot(ddb))

        newton = Newton2dUnboundedWithDerivative(closest_approach_residual)
        roots: List[Tuple[float, float]] = []
        initial_count = len(self._results)
        for i in range(len(samples_a) - 1):
            a0, a1 = samples_a[i], samples_a[i + 1]
            chord_a = a1.point - a0.point
            for j in range(len(samples_b) - 1):
                b0, b1 = samples_b[j], samples_b[j + 1]
                chord_b = b1.point - b0.point
                uv = GCurveRay.closest_approach_unbounded(GCurveRay(a0.point, chord_a), GCurveRay(b0.point, chord_b))
                if uv is None:
                    continue
                if not (-SEED_PARAMETER_MARGIN <= uv[0] <= 1.0 + SEED_PARAMETER_MARGIN
                        and -SEED_PARAMETER_MARGIN <= uv[1] <= 1.0 + SEED_PARAMETER_MARGIN):
                    continue
                gap = a0.point.plus_scaled(chord_a, uv[0]).distance(b0.point.plus_scaled(chord_b, uv[1]))
                if gap > chord_a.length() + chord_b.length():
                    continue
                newton.set_uv(interpolate(a0.fraction, uv[0], a1.fraction),
                              interpolate(b0.fraction, uv[1], b1.fraction))
                if not newton.run_iterations():
                    continue
                fraction_a = self._generic_fraction(cp_a, newton.get_u(), extend_a)
                fraction_b = self._generic_fraction(cp_b, newton.get_v(), extend_b)
                if fraction_a is None or fraction_b is None:
                    continue
                if any(abs(fraction_a - ra) <= GENERIC_ROOT_FRACTION_TOLERANCE
                       and abs(fraction_b - rb) <= GENERIC_ROOT_FRACTION_TOLERANCE for ra, rb in roots):
                    continue
                roots.append((fraction_a, fraction_b))
                self._record_point_with_local_fractions(fraction_a, cp_a, 0.0, 1.0,
                                                        fraction_b, cp_b, 0.0, 1.0, reversed_)
        if len(self._results) == initial_count:
            logger.debug("Generic intersection of %s and %s found nothing",
                         cp_a.curve_kind.name, cp_b.curve_kind.name)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self) -> CurveLocationDetailArrayPair:
        """Run the handler for this pair of curves and return the results."""
        geometry_a, extend_a = self._geometry_a, self._extend_a
        geometry_b, extend_b = self._geometry_b, self._extend_b
        kind_a, kind_b = geometry_a.curve_kind, geometry_b.curve_kind
        if kind_a is CurveKind.DISTANCE_INDEXED_CHAIN:
            self._dispatch_chain(geometry_a, extend_a, geometry_b, extend_b, False)
        elif kind_b is CurveKind.DISTANCE_INDEXED_CHAIN:
            self._dispatch_chain(geometry_b, extend_b, geometry_a, extend_a, True)
        elif (kind_a, kind_b) in _PAIR_HANDLERS:
            _PAIR_HANDLERS[(kind_a, kind_b)](self, geometry_a, extend_a, geometry_b, extend_b, False)
        elif (kind_b, kind_a) in _PAIR_HANDLERS:
            _PAIR_HANDLERS[(kind_b, kind_a)](self, geometry_b, extend_b, geometry_a, extend_a, True)
        else:
            self._dispatch_generic(geometry_a, extend_a, geometry_b, extend_b, False)
        return self._results


_PAIR_HANDLERS: Dict[Tuple[CurveKind, CurveKind], Callable] = {
    (CurveKind.LINE_SEGMENT, CurveKind.LINE_SEGMENT): CurveCurveIntersectXYZ._segment_segment,
    (CurveKind.LINE_SEGMENT, CurveKind.LINE_STRING): CurveCurveIntersectXYZ._segment_linestring,
    (CurveKind.LINE_STRING, CurveKind.LINE_STRING): CurveCurveIntersectXYZ._linestring_linestring,
    (CurveKind.LINE_SEGMENT, CurveKind.ARC): CurveCurveIntersectXYZ._segment_arc,
    (CurveKind.LINE_STRING, CurveKind.ARC): CurveCurveIntersectXYZ._linestring_arc,
    (CurveKind.ARC, CurveKind.ARC): CurveCurveIntersectXYZ._arc_arc,
}


class CurveCurve:
    """Entry points for pairwise curve intersection."""

    @staticmethod
    def intersection_xyz(geometry_a: CurvePrimitive, extend_a: ExtendParameter,
                         geometry_b: CurvePrimitive, extend_b: ExtendParameter) -> CurveLocationDetailArrayPair:
        """
        All points where curve A meets curve B in 3D.

        Returns index-aligned lists: data_a[i] is on geometry_a and data_b[i] on
        geometry_b at the same point. Pairs no handler can solve give no results.
        """
        solver = CurveCurveIntersectXYZ(geometry_a, extend_a, geometry_b, extend_b)
        solver.dispatch()
        return solver.grab_results()
