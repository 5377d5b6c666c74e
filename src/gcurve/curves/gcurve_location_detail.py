"""
Result records produced by curve searches.

A CurveLocationDetail names a curve, a fraction on it and the evaluated
point, plus search-specific extras (a vector, a scalar ``a`` that is usually
a distance, an interval role, a search status). Composite curves report the
child-level location through ``child_detail``.

The ``curve`` field refers to the curve that produced the record. The record
never owns it: it is valid while the caller keeps the curve alive and
unmodified.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, List, Optional

from gcurve.mathutils.vec3 import Vec3
from gcurve.mathutils.gcurve_math import is_in_01

if TYPE_CHECKING:
    from gcurve.curves.gcurve_primitive import CurvePrimitive


class CurveIntervalRole(IntEnum):
    """How a detail relates to neighbouring details in a result list"""
    ISOLATED = 0              # Simple point hit
    ISOLATED_AT_VERTEX = 1    # Point hit exactly at a vertex
    INTERVAL_START = 10       # First of a run of on-curve points
    INTERVAL_INTERIOR = 11    # Inside a run
    INTERVAL_END = 12         # Last of a run


class CurveSearchStatus(IntEnum):
    """Outcome of a distance walk"""
    ERROR = 0
    SUCCESS = 1
    STOPPED_AT_BOUNDARY = 2


@dataclass
class CurveLocationDetail:
    curve: Optional[CurvePrimitive] = None
    fraction: float = 0.0
    point: Vec3 = field(default_factory=Vec3)
    vector: Optional[Vec3] = None
    a: float = 0.0
    interval_role: Optional[CurveIntervalRole] = None
    curve_search_status: Optional[CurveSearchStatus] = None
    child_detail: Optional[CurveLocationDetail] = None

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @staticmethod
    def create_curve_fraction_point(curve, fraction: float, point) -> CurveLocationDetail:
        return CurveLocationDetail(curve=curve, fraction=fraction, point=Vec3(point))

    @staticmethod
    def create_curve_evaluated_fraction(curve, fraction: float) -> CurveLocationDetail:
        return CurveLocationDetail(curve=curve, fraction=fraction, point=curve.fraction_to_point(fraction))

    @staticmethod
    def create_curve_fraction_point_distance(curve, fraction: float, point, a: float) -> CurveLocationDetail:
        return CurveLocationDetail(curve=curve, fraction=fraction, point=Vec3(point), a=a)

    @staticmethod
    def create_curve_fraction_point_distance_status(curve, fraction: float, point, a: float,
                                                    status: CurveSearchStatus) -> CurveLocationDetail:
        return CurveLocationDetail(curve=curve, fraction=fraction, point=Vec3(point), a=a,
                                   curve_search_status=status)

    @staticmethod
    def create_conditional_move_signed_distance(allow_extension: bool, curve, start_fraction: float,
                                                end_fraction: float, requested_signed_distance: float
                                                ) -> CurveLocationDetail:
        """
        Record the end of a distance walk, capped at the curve ends unless extension is allowed.

        A capped walk reports STOPPED_AT_BOUNDARY and ``a`` holds the signed distance
        actually travelled.
        """
        a = requested_signed_distance
        status = CurveSearchStatus.SUCCESS
        if not allow_extension and not is_in_01(end_fraction, 0.0):
            if end_fraction < 0.0:
                a = -curve.curve_length_between_fractions(start_fraction, 0.0)
                end_fraction = 0.0
            else:
                a = curve.curve_length_between_fractions(start_fraction, 1.0)
                end_fraction = 1.0
            status = CurveSearchStatus.STOPPED_AT_BOUNDARY
        return CurveLocationDetail(curve=curve, fraction=end_fraction, point=curve.fraction_to_point(end_fraction),
                                   a=a, curve_search_status=status)

    # ------------------------------------------------------------------

    def set_fraction_point(self, fraction: float, point, vector=None, a: Optional[float] = None):
        self.fraction = fraction
        self.point = Vec3(point)
        self.vector = vector
        if a is not None:
            self.a = a

    def clone(self) -> CurveLocationDetail:
        return CurveLocationDetail(
            curve=self.curve,
            fraction=self.fraction,
            point=Vec3(self.point),
            vector=None if self.vector is None else Vec3(self.vector),
            a=self.a,
            interval_role=self.interval_role,
            curve_search_status=self.curve_search_status,
            child_detail=None if self.child_detail is None else self.child_detail.clone(),
        )

    @property
    def is_isolated(self) -> bool:
        return self.interval_role in (CurveIntervalRole.ISOLATED, CurveIntervalRole.ISOLATED_AT_VERTEX)


@dataclass
class CurveLocationDetailPair:
    """Two details describing the same physical point on two curves."""
    detail_a: CurveLocationDetail
    detail_b: CurveLocationDetail


@dataclass
class CurveLocationDetailArrayPair:
    """Index-aligned result lists: data_a[i] and data_b[i] are the same physical point."""
    data_a: List[CurveLocationDetail] = field(default_factory=list)
    data_b: List[CurveLocationDetail] = field(default_factory=list)

    def __len__(self):
        return len(self.data_a)

    def pairs(self) -> List[CurveLocationDetailPair]:
        return [CurveLocationDetailPair(a, b) for a, b in zip(self.data_a, self.data_b)]

    def swapped(self) -> CurveLocationDetailArrayPair:
        return CurveLocationDetailArrayPair(list(self.data_b), list(self.data_a))
