"""
Distance-indexed chain - a path evaluated as one curve with fraction proportional to true distance.

Construction strokes every child and turns each stroke announcement into a
PathFragment: a child fraction interval paired with the chain distance
interval it covers. The fragment table is sorted and contiguous over
[0, total_length].

Evaluation at chain fraction f:
    1. distance = f * total_length
    2. find the fragment containing that distance (linear scan)
    3. walk the child's own true distance from the fragment's start fraction
       (move_signed_distance_from_fraction), not a linear blend of the stored
       fractions, since the child's fraction need not be proportional to length
    4. evaluate the child there and rescale derivatives to chain fraction

Fragments refer to child curves without owning them; the chain owns the path.
Mutating a child directly invalidates the table. The chain's own
reverse_in_place and try_transform_in_place keep children and table in step.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from gcurve.mathutils.vec3 import Vec3
from gcurve.mathutils.gcurve_ray import GCurveRay
from gcurve.mathutils.gcurve_plane import GCurvePlane, PlaneByOriginAndVectors
from gcurve.mathutils.gcurve_math import (
    FRACTION_TOLERANCE,
    interpolate,
    is_same_fraction,
)
from gcurve.curves.gcurve_primitive import CurveKind, CurvePrimitive, ExtendParameter, resolve_extend
from gcurve.curves.gcurve_location_detail import CurveLocationDetail
from gcurve.curves.gcurve_path import Path
from gcurve.curves.gcurve_stroke_handler import StrokeHandler
from gcurve.curves.gcurve_stroke_options import StrokeOptions

logger = logging.getLogger(__name__)

# Relative tolerance for fragment table contiguity
FRAGMENT_DISTANCE_TOLERANCE = 1.0e-12


# ============================================================================
# Fragment table
# ============================================================================

class PathFragment:
    """One child fraction interval and the chain distance interval it covers."""

    __slots__ = ('child_fraction0', 'child_fraction1', 'chain_distance0', 'chain_distance1', 'child_curve')

    def __init__(self, child_fraction0: float, child_fraction1: float,
                 chain_distance0: float, chain_distance1: float, child_curve: CurvePrimitive):
        self.child_fraction0 = child_fraction0
        self.child_fraction1 = child_fraction1
        self.chain_distance0 = chain_distance0
        self.chain_distance1 = chain_distance1
        self.child_curve = child_curve

    def __repr__(self):
        return (f"PathFragment(child=[{self.child_fraction0}, {self.child_fraction1}], "
                f"chain=[{self.chain_distance0}, {self.chain_distance1}])")

    def contains_chain_distance(self, distance: float) -> bool:
        return self.chain_distance0 <= distance <= self.chain_distance1

    def contains_child_curve_and_child_fraction(self, curve, fraction: float) -> bool:
        return self.child_curve is curve and self.child_fraction0 <= fraction <= self.child_fraction1

    def chain_distance_to_accurate_child_fraction(self, distance: float) -> float:
        detail = self.child_curve.move_signed_distance_from_fraction(
            self.child_fraction0, distance - self.chain_distance0, False)
        return detail.fraction

    def reverse_fractions_and_distances(self, total_length: float):
        f0, f1 = self.child_fraction0, self.child_fraction1
        d0, d1 = self.chain_distance0, self.chain_distance1
        self.child_fraction0 = 1.0 - f1
        self.child_fraction1 = 1.0 - f0
        self.chain_distance0 = total_length - d1
        self.chain_distance1 = total_length - d0

    def child_fraction_to_chain_distance(self, fraction: float) -> float:
        """Chain distance of a child fraction; negative offset when it precedes this fragment."""
        length = self.child_curve.curve_length_between_fractions(self.child_fraction0, fraction)
        if fraction < self.child_fraction0:
            return self.chain_distance0 - length
        return self.chain_distance0 + length


class DistanceIndexConstructionContext(StrokeHandler):
    """Stroke handler that turns each announcement into fragments with a running distance."""

    def __init__(self):
        self._accumulated_distance = 0.0
        self._fragments: List[PathFragment] = []

    def _push(self, cp, fraction0, fraction1, length):
        distance0 = self._accumulated_distance
        self._accumulated_distance += length
        self._fragments.append(PathFragment(fraction0, fraction1, distance0, self._accumulated_distance, cp))

    def announce_segment_interval(self, cp, point0, point1, num_strokes, fraction0, fraction1):
        segment_length = Vec3(point0).distance(point1)
        if num_strokes <= 1:
            self._push(cp, fraction0, fraction1, segment_length)
            return
        step_length = segment_length / num_strokes
        f0 = fraction0
        for i in range(1, num_strokes + 1):
            f1 = fraction1 if i == num_strokes else interpolate(fraction0, i / num_strokes, fraction1)
            self._push(cp, f0, f1, step_length)
            f0 = f1

    def announce_interval_for_uniform_step_strokes(self, cp, num_strokes, fraction0, fraction1):
        num_strokes = max(1, num_strokes)
        f0 = fraction0
        for i in range(1, num_strokes + 1):
            f1 = fraction1 if i == num_strokes else interpolate(fraction0, i / num_strokes, fraction1)
            self._push(cp, f0, f1, cp.curve_length_between_fractions(f0, f1))
            f0 = f1

    @staticmethod
    def create_path_fragment_index(path: Path, options: Optional[StrokeOptions] = None) -> List[PathFragment]:
        handler = DistanceIndexConstructionContext()
        for curve in path.children:
            curve.emit_strokable_parts(handler, options)
        return handler._fragments


def validate_fragments(fragments: List[PathFragment]):
    """Raise ValueError unless the table is non-empty, sorted and contiguous from 0."""
    if not fragments:
        raise ValueError("Fragment table is empty")
    total = fragments[-1].chain_distance1
    tol = FRAGMENT_DISTANCE_TOLERANCE * max(1.0, abs(total))
    if abs(fragments[0].chain_distance0) > tol:
        raise ValueError(f"Fragment table starts at distance {fragments[0].chain_distance0}, not 0")
    for i, fragment in enumerate(fragments):
        if fragment.chain_distance1 < fragment.chain_distance0 - tol:
            raise ValueError(f"Fragment {i} has decreasing chain distance")
        if i > 0 and abs(fragments[i - 1].chain_distance1 - fragment.chain_distance0) > tol:
            raise ValueError(f"Fragments {i - 1} and {i} are not contiguous")


# ============================================================================
# Chain
# ============================================================================

class CurveChainWithDistanceIndex(CurvePrimitive):

    curve_kind = CurveKind.DISTANCE_INDEXED_CHAIN

    def __init__(self, path: Path, fragments: List[PathFragment], options: Optional[StrokeOptions] = None):
        """Assemble from a path and its fragment table; use create_capture() to build both."""
        validate_fragments(fragments)
        self._path = path
        self._fragments = fragments
        self._options = options
        self._total_length = fragments[-1].chain_distance1

    @staticmethod
    def create_capture(path, options: Optional[StrokeOptions] = None) -> Optional[CurveChainWithDistanceIndex]:
        """
        Index `path` (a Path or a sequence of primitives), taking ownership of it.

        Returns None for a path with no children or no length.
        """
        if not isinstance(path, Path):
            path = Path.create_array(path)
        if path.is_empty:
            logger.debug("Distance index requested for an empty path")
            return None
        fragments = DistanceIndexConstructionContext.create_path_fragment_index(path, options)
        if not fragments or fragments[-1].chain_distance1 <= 0.0:
            logger.debug("Distance index requested for a path of zero length")
            return None
        return CurveChainWithDistanceIndex(path, fragments, options)

    def __repr__(self):
        return f"CurveChainWithDistanceIndex({self._path!r}, total_length={self._total_length})"

    @property
    def path(self) -> Path:
        return self._path

    @property
    def fragments(self) -> List[PathFragment]:
        return self._fragments

    @property
    def total_length(self) -> float:
        return self._total_length

    def get_fraction_to_distance_scale(self) -> Optional[float]:
        return self._total_length

    # ------------------------------------------------------------------
    # Index queries
    # ------------------------------------------------------------------

    def chain_distance_to_fragment(self, distance: float, allow_extrapolation: bool = False) -> Optional[PathFragment]:
        """Fragment containing `distance`; beyond the ends only with `allow_extrapolation`."""
        fragments = self._fragments
        if distance < 0.0:
            return fragments[0] if allow_extrapolation else None
        if distance > self._total_length:
            return fragments[-1] if allow_extrapolation else None
        for fragment in fragments:
            if fragment.contains_chain_distance(distance):
                return fragment
        return fragments[-1] if allow_extrapolation else None

    def chain_distance_to_chain_fraction(self, distance: float) -> float:
        return distance / self._total_length

    def chain_distance_to_accurate_child_fraction(self, distance: float,
                                                  allow_extrapolation: bool = True
                                                  ) -> Optional[Tuple[PathFragment, float]]:
        """(fragment, child fraction) at a chain distance, found by a true-distance walk on the child."""
        fragment = self.chain_distance_to_fragment(distance, allow_extrapolation)
        if fragment is None:
            return None
        return fragment, fragment.chain_distance_to_accurate_child_fraction(distance)

    def curve_and_child_fraction_to_fragment(self, curve, fraction: float) -> Optional[PathFragment]:
        """Fragment of `curve` bracketing `fraction`, or the nearest one of that curve when none does."""
        nearest = None
        nearest_gap = None
        for fragment in self._fragments:
            if fragment.child_curve is not curve:
                continue
            if fragment.contains_child_curve_and_child_fraction(curve, fraction):
                return fragment
            gap = min(abs(fraction - fragment.child_fraction0), abs(fraction - fragment.child_fraction1))
            if nearest_gap is None or gap < nearest_gap:
                nearest, nearest_gap = fragment, gap
        return nearest

    def child_fraction_to_chain_distance(self, curve, fraction: float) -> Optional[float]:
        fragment = self.curve_and_child_fraction_to_fragment(curve, fraction)
        if fragment is None:
            return None
        return fragment.child_fraction_to_chain_distance(fraction)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def _child_at_fraction(self, fraction: float) -> Tuple[CurvePrimitive, float]:
        fragment, child_fraction = self.chain_distance_to_accurate_child_fraction(fraction * self._total_length)
        return fragment.child_curve, child_fraction

    def fraction_to_point(self, fraction: float) -> Vec3:
        child, child_fraction = self._child_at_fraction(fraction)
        return child.fraction_to_point(child_fraction)

    def fraction_to_point_and_derivative(self, fraction: float) -> GCurveRay:
        child, child_fraction = self._child_at_fraction(fraction)
        ray = child.fraction_to_point_and_derivative(child_fraction)
        unit = ray.direction.scale_to_length(self._total_length)
        return GCurveRay(ray.origin, unit if unit is not None else ray.direction)

    def fraction_to_point_and_2_derivatives(self, fraction: float) -> Optional[PlaneByOriginAndVectors]:
        """
        Point, tangent and second derivative with respect to chain fraction.

        The child's derivatives are first converted to arc length (unit
        tangent U/|U|, curvature vector (V - (U.V/U.U) U) / |U|^2), then scaled
        by total_length and total_length squared.
        """
        child, child_fraction = self._child_at_fraction(fraction)
        plane = child.fraction_to_point_and_2_derivatives(child_fraction)
        if plane is None:
            return None
        u, v = plane.vector_u, plane.vector_v
        dot_uu = u.length_sq()
        if dot_uu == 0.0:
            return None
        a = 1.0 / dot_uu
        dot_uv = u.dot(v)
        curvature_vector = v * a - u * (a * dot_uv / dot_uu)
        length = self._total_length
        return PlaneByOriginAndVectors(plane.origin, u * (length / dot_uu ** 0.5),
                                       curvature_vector * (length * length))

    def start_point(self) -> Vec3:
        return self._path.children[0].start_point()

    def end_point(self) -> Vec3:
        return self._path.children[-1].end_point()

    def curve_length(self) -> float:
        return self._total_length

    def quick_length(self) -> float:
        return self._total_length

    def curve_length_between_fractions(self, fraction0: float, fraction1: float) -> float:
        return abs(fraction1 - fraction0) * self._total_length

    # ------------------------------------------------------------------
    # Searches
    # ------------------------------------------------------------------

    def move_signed_distance_from_fraction(self, start_fraction: float, signed_distance: float,
                                           allow_extension: bool) -> CurveLocationDetail:
        """Chain-level walk; ``child_detail`` carries the matching walk on the child reached."""
        distance_b = start_fraction * self._total_length + signed_distance
        fragment_b = self.chain_distance_to_fragment(distance_b, True)
        child_detail = fragment_b.child_curve.move_signed_distance_from_fraction(
            fragment_b.child_fraction0, distance_b - fragment_b.chain_distance0, allow_extension)
        end_fraction = start_fraction + signed_distance / self._total_length
        chain_detail = CurveLocationDetail.create_conditional_move_signed_distance(
            allow_extension, self, start_fraction, end_fraction, signed_distance)
        chain_detail.child_detail = child_detail
        return chain_detail

    def closest_point(self, space_point, extend: ExtendParameter = False) -> Optional[CurveLocationDetail]:
        """
        Closest point over all children. Only the first child may extend
        before its start and only the last after its end.
        """
        space_point = Vec3(space_point)
        extend0, extend1 = resolve_extend(extend)
        children = self._path.children
        last_index = len(children) - 1
        child_detail = None
        for i, child in enumerate(children):
            detail = child.closest_point(space_point, (extend0 and i == 0, extend1 and i == last_index))
            if detail is None:
                continue
            if child_detail is None or detail.a < child_detail.a:
                child_detail = detail
        if child_detail is None:
            return None
        chain_distance = self.child_fraction_to_chain_distance(child_detail.curve, child_detail.fraction)
        if chain_distance is None:
            return None
        chain_detail = CurveLocationDetail.create_curve_fraction_point_distance(
            self, self.chain_distance_to_chain_fraction(chain_distance), child_detail.point, child_detail.a)
        chain_detail.child_detail = child_detail
        return chain_detail

    def append_plane_intersections(self, plane: GCurvePlane, result: List[CurveLocationDetail]) -> int:
        """Child crossings mapped to chain fractions; a crossing at a child join is reported once."""
        initial_length = len(result)
        for child in self._path.children:
            child_hits: List[CurveLocationDetail] = []
            child.append_plane_intersections(plane, child_hits)
            for hit in child_hits:
                chain_distance = self.child_fraction_to_chain_distance(child, hit.fraction)
                if chain_distance is None:
                    continue
                fraction = self.chain_distance_to_chain_fraction(chain_distance)
                if len(result) > initial_length and is_same_fraction(result[-1].fraction, fraction,
                                                                     FRACTION_TOLERANCE):
                    continue
                detail = CurveLocationDetail.create_curve_fraction_point(self, fraction, hit.point)
                detail.interval_role = hit.interval_role
                detail.child_detail = hit
                result.append(detail)
        return len(result) - initial_length

    def is_in_plane(self, plane: GCurvePlane) -> bool:
        return all(child.is_in_plane(plane) for child in self._path.children)

    def emit_strokable_parts(self, handler, options: Optional[StrokeOptions] = None):
        """Children announce themselves; the strokes carry child fractions."""
        self._path.emit_strokable_parts(handler, options)

    # ------------------------------------------------------------------

    def reverse_in_place(self):
        """Reverse the children and remap every fragment, then reverse the table order."""
        self._path.reverse_children_in_place()
        for fragment in self._fragments:
            fragment.reverse_fractions_and_distances(self._total_length)
        self._fragments.reverse()

    def clone(self) -> Optional[CurveChainWithDistanceIndex]:
        return CurveChainWithDistanceIndex.create_capture(self._path.clone(), self._options)

    def try_transform_in_place(self, matrix) -> bool:
        """Transform the children and rebuild the fragment table from scratch."""
        if not self._path.try_transform_in_place(matrix):
            return False
        fragments = DistanceIndexConstructionContext.create_path_fragment_index(self._path, self._options)
        validate_fragments(fragments)
        self._fragments = fragments
        self._total_length = fragments[-1].chain_distance1
        return True
