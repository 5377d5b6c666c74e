"""
GCurveRay - a point with a direction vector.

Curve evaluation returns rays: ``origin`` is the curve point and
``direction`` the derivative with respect to fraction, so the direction is
not normalized and its magnitude carries the parameterization speed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .vec3 import Vec3
from .gcurve_math import linear_system_2d


@dataclass
class GCurveRay:
    """A ray with origin and (unnormalized) direction."""
    origin: Vec3
    direction: Vec3

    def point_at(self, t: float) -> Vec3:
        """Point at parameter t (0 is the origin, 1 is origin + direction)."""
        return self.origin.plus_scaled(self.direction, t)

    def project_point(self, point) -> float:
        """Parameter of the projection of a point onto the unbounded ray."""
        return Vec3(point).fraction_of_projection_to_line(self.origin, self.origin + self.direction)

    def clone(self) -> GCurveRay:
        return GCurveRay(Vec3(self.origin), Vec3(self.direction))

    @staticmethod
    def from_points(start, end) -> GCurveRay:
        """Ray from start with direction end - start."""
        start = Vec3(start)
        return GCurveRay(origin=start, direction=Vec3(end) - start)

    @staticmethod
    def closest_approach_unbounded(ray_a: GCurveRay, ray_b: GCurveRay) -> Optional[Tuple[float, float]]:
        """
        Parameters (ta, tb) of the closest approach between two unbounded lines.

        Solves the 2x2 system from (A(ta) - B(tb)) . u = 0 and (A(ta) - B(tb)) . v = 0
        with u, v the two directions. Returns None for parallel lines.
        """
        u = ray_a.direction
        v = ray_b.direction
        c = ray_b.origin - ray_a.origin
        uu = u.dot(u)
        uv = u.dot(v)
        vv = v.dot(v)
        return linear_system_2d(uu, -uv, uv, -vv, c.dot(u), c.dot(v))
