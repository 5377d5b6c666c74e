"""
Curve primitives, location records and the stroke protocol.

Pipeline:
1. Primitives - LineSegment3d, LineString3d, Arc3d, TransitionSpiral3d, BSplineCurve3d
2. Stroke emission - every primitive describes itself to a StrokeHandler
3. CurveChainWithDistanceIndex - a Path evaluated as one distance-true curve
"""

from .gcurve_location_detail import (
    CurveIntervalRole,
    CurveSearchStatus,
    CurveLocationDetail,
    CurveLocationDetailPair,
    CurveLocationDetailArrayPair,
)

from .gcurve_stroke_options import StrokeOptions
from .gcurve_stroke_handler import StrokeHandler

from .gcurve_primitive import (
    CurveKind,
    CurvePrimitive,
    resolve_extend,
    correct_fraction,
)

from .gcurve_line_segment import LineSegment3d
from .gcurve_line_string import LineString3d
from .gcurve_arc import Arc3d
from .gcurve_spiral import TransitionSpiral3d
from .gcurve_bspline import BSplineCurve3d
from .gcurve_path import Path

from .gcurve_distance_index import (
    PathFragment,
    DistanceIndexConstructionContext,
    CurveChainWithDistanceIndex,
)

__all__ = [
    'CurveIntervalRole',
    'CurveSearchStatus',
    'CurveLocationDetail',
    'CurveLocationDetailPair',
    'CurveLocationDetailArrayPair',
    'StrokeOptions',
    'StrokeHandler',
    'CurveKind',
    'CurvePrimitive',
    'resolve_extend',
    'correct_fraction',
    'LineSegment3d',
    'LineString3d',
    'Arc3d',
    'TransitionSpiral3d',
    'BSplineCurve3d',
    'Path',
    'PathFragment',
    'DistanceIndexConstructionContext',
    'CurveChainWithDistanceIndex',
]
