"""Points, vectors, rays, planes, angle sweeps and transform helpers."""

from .vec3 import Vec3, transform_point, transform_vector
from .gcurve_ray import GCurveRay
from .gcurve_plane import GCurvePlane, PlaneByOriginAndVectors
from .angle_sweep import AngleSweep

__all__ = [
    'Vec3',
    'transform_point',
    'transform_vector',
    'GCurveRay',
    'GCurvePlane',
    'PlaneByOriginAndVectors',
    'AngleSweep',
]
