"""gcurve - parametric curve evaluation, search and intersection."""

__version__ = "0.1.0"

# curves must load before solvers: the solvers import the curve types
from gcurve.mathutils import AngleSweep, GCurvePlane, GCurveRay, PlaneByOriginAndVectors, Vec3
from gcurve.curves import (
    Arc3d,
    BSplineCurve3d,
    CurveChainWithDistanceIndex,
    CurveIntervalRole,
    CurveKind,
    CurveLocationDetail,
    CurveLocationDetailArrayPair,
    CurvePrimitive,
    CurveSearchStatus,
    LineSegment3d,
    LineString3d,
    Path,
    StrokeOptions,
    TransitionSpiral3d,
)
from gcurve.solvers import CurveCurve, CurveCurveIntersectXYZ
