"""
Planes used by curve searches.

GCurvePlane is an origin with a unit normal, the residual source for plane
intersection (``altitude``) and its rate along a curve (``velocity``).
PlaneByOriginAndVectors carries a point with two unnormalized vectors and is
what second-derivative evaluation returns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .vec3 import Vec3


@dataclass
class GCurvePlane:
    """Plane through ``origin`` with unit ``normal``."""
    origin: Vec3
    normal: Vec3

    def altitude(self, point) -> float:
        """Signed distance from the plane to a point."""
        n = self.normal
        return (point[0] - self.origin.x) * n.x + (point[1] - self.origin.y) * n.y + (point[2] - self.origin.z) * n.z

    def velocity(self, vector) -> float:
        """Rate of altitude change along a vector."""
        return self.normal.dot(vector)

    def project_point(self, point) -> Vec3:
        return Vec3(point).plus_scaled(self.normal, -self.altitude(point))

    def is_point_in_plane(self, point, tol=1.0e-6) -> bool:
        return abs(self.altitude(point)) <= tol

    @staticmethod
    def create_point_normal(origin, normal) -> Optional[GCurvePlane]:
        """Plane from a point and a normal of any length; None for a zero normal."""
        unit = Vec3(normal).scale_to_length(1.0)
        if unit is None:
            return None
        return GCurvePlane(Vec3(origin), unit)

    @staticmethod
    def create_with_preferred_perpendicular(origin, direction, cos_limit, preferred, fallback) -> Optional[GCurvePlane]:
        """
        Plane containing the line (origin, direction).

        Its normal is the unit cross product of ``direction`` with ``preferred``,
        unless the two are within the angle given by ``cos_limit`` of each other,
        in which case ``fallback`` is crossed instead.
        """
        direction = Vec3(direction)
        preferred = Vec3(preferred)
        dot_ab = abs(direction.dot(preferred))
        if dot_ab < cos_limit * direction.length() * preferred.length():
            normal = direction.unit_cross(preferred)
        else:
            normal = direction.unit_cross(Vec3(fallback))
        if normal is None:
            return None
        return GCurvePlane(Vec3(origin), normal)


@dataclass
class PlaneByOriginAndVectors:
    """Point with two (unnormalized) vectors, e.g. a curve point with first and second derivatives."""
    origin: Vec3
    vector_u: Vec3
    vector_v: Vec3
