"""
Curve-type-agnostic searches and the curve-curve intersection solver.

1. Search contexts - closest point, plane intersection and arc length over stroke emission
2. CurveCurveIntersectXYZ - pairwise intersection dispatched on curve kinds
"""

from .gcurve_search_contexts import (
    ClosestPointStrokeHandler,
    AppendPlaneIntersectionStrokeHandler,
    CurveLengthContext,
    StrokeCollector,
    StrokeSample,
)

from .gcurve_intersection_solver import (
    CurveCurveIntersectXYZ,
    CurveCurve,
    accept_fraction,
)

__all__ = [
    'ClosestPointStrokeHandler',
    'AppendPlaneIntersectionStrokeHandler',
    'CurveLengthContext',
    'StrokeCollector',
    'StrokeSample',
    'CurveCurveIntersectXYZ',
    'CurveCurve',
    'accept_fraction',
]
