"""
TransitionSpiral3d - clothoid transition whose curvature varies linearly with distance.

In the local xy plane the spiral starts at the origin with bearing
``bearing0`` and

    curvature(g) = k0 + g * (k1 - k0)
    bearing(g)   = bearing0 + g * L * (k0 + 0.5 * g * (k1 - k0))
    point(g)     = integral of L * (cos(bearing), sin(bearing)) from 0 to g

for the global fraction g in [0, 1] and length L. A radius of 0 means
curvature 0 (tangent to a straight line). ``local_to_world`` (row-major 4x4,
rigid) places the spiral in space.

Positions integrate with 5-point Gauss from the nearest of 16 precomputed
stations. Only the ``active_interval`` of global fractions is exposed, mapped
to [0, 1]; reversal swaps its ends. Fractions outside [0, 1] clamp.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

from gcurve.mathutils.vec3 import Vec3, transform_point, transform_vector
from gcurve.mathutils.gcurve_ray import GCurveRay
from gcurve.mathutils.gcurve_plane import PlaneByOriginAndVectors
from gcurve.mathutils.gcurve_math import clamp, identity, interpolate, is_rigid, mat_mul
from gcurve.curves.gcurve_primitive import CurveKind, CurvePrimitive
from gcurve.curves.gcurve_stroke_options import StrokeOptions, apply_angle_tol
from gcurve.numerics.quadrature import GaussMapper

logger = logging.getLogger(__name__)

# Number of precomputed integration stations over the full spiral
NUM_STATIONS = 16


def radius_to_curvature(radius: float) -> float:
    return 0.0 if radius == 0.0 else 1.0 / radius


def radius_radius_sweep_radians_to_arc_length(radius0: float, radius1: float, sweep_radians: float) -> Optional[float]:
    """Length of a clothoid turning `sweep_radians` between two radii; None when it never turns."""
    average_curvature = 0.5 * (radius_to_curvature(radius0) + radius_to_curvature(radius1))
    if average_curvature == 0.0:
        return None
    return abs(sweep_radians / average_curvature)


class TransitionSpiral3d(CurvePrimitive):

    curve_kind = CurveKind.TRANSITION_SPIRAL

    def __init__(self, radius0: float, radius1: float, bearing0: float, arc_length: float,
                 local_to_world=None, active_interval: Tuple[float, float] = (0.0, 1.0)):
        self.radius0 = radius0
        self.radius1 = radius1
        self.bearing0 = bearing0
        self.arc_length = arc_length
        self.local_to_world = local_to_world if local_to_world is not None else identity()
        self.active_interval = (float(active_interval[0]), float(active_interval[1]))
        self._gauss = GaussMapper(5)
        self._refresh_computed_properties()

    @staticmethod
    def create_radius_radius_bearing_bearing(radius0: float, radius1: float, bearing0: float, bearing1: float,
                                             local_to_world=None,
                                             active_interval: Tuple[float, float] = (0.0, 1.0)
                                             ) -> Optional[TransitionSpiral3d]:
        """Spiral from end radii and end bearings (radians); None if the length is undefined."""
        arc_length = radius_radius_sweep_radians_to_arc_length(radius0, radius1, bearing1 - bearing0)
        if arc_length is None:
            logger.debug("Spiral with radii %g, %g never turns; no length for the bearing change", radius0, radius1)
            return None
        return TransitionSpiral3d(radius0, radius1, bearing0, arc_length, local_to_world, active_interval)

    def __repr__(self):
        return (f"TransitionSpiral3d(radius0={self.radius0}, radius1={self.radius1}, bearing0={self.bearing0}, "
                f"arc_length={self.arc_length}, active_interval={self.active_interval})")

    def _refresh_computed_properties(self):
        self.curvature0 = radius_to_curvature(self.radius0)
        self.curvature1 = radius_to_curvature(self.radius1)
        self._stations = [Vec3(0.0, 0.0, 0.0)]
        for i in range(1, NUM_STATIONS + 1):
            self._stations.append(self._stations[-1] + self._incremental_integral((i - 1) / NUM_STATIONS,
                                                                                  i / NUM_STATIONS))

    # ------------------------------------------------------------------
    # Global-fraction formulas
    # ------------------------------------------------------------------

    def global_fraction_to_bearing_radians(self, g: float) -> float:
        return self.bearing0 + g * self.arc_length * (self.curvature0 + 0.5 * g * (self.curvature1 - self.curvature0))

    def global_fraction_to_curvature(self, g: float) -> float:
        return interpolate(self.curvature0, g, self.curvature1)

    @property
    def bearing1(self) -> float:
        return self.global_fraction_to_bearing_radians(1.0)

    def _incremental_integral(self, g0: float, g1: float) -> Vec3:
        """Local xy displacement from global fraction g0 to g1."""
        dx = dy = 0.0
        for g, w in self._gauss.map_xw(g0, g1):
            radians = self.global_fraction_to_bearing_radians(g)
            dx += w * self.arc_length * math.cos(radians)
            dy += w * self.arc_length * math.sin(radians)
        return Vec3(dx, dy, 0.0)

    def _local_point(self, g: float) -> Vec3:
        g = clamp(g, 0.0, 1.0)
        index0 = min(int(g * NUM_STATIONS), NUM_STATIONS - 1)
        return self._stations[index0] + self._incremental_integral(index0 / NUM_STATIONS, g)

    def _active_to_global(self, fraction: float) -> float:
        return clamp(interpolate(self.active_interval[0], fraction, self.active_interval[1]), 0.0, 1.0)

    def _active_delta(self) -> float:
        return self.active_interval[1] - self.active_interval[0]

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def fraction_to_point(self, fraction: float) -> Vec3:
        return transform_point(self._local_point(self._active_to_global(fraction)), self.local_to_world)

    def fraction_to_point_and_derivative(self, fraction: float) -> GCurveRay:
        g = self._active_to_global(fraction)
        radians = self.global_fraction_to_bearing_radians(g)
        a = self.arc_length * self._active_delta()
        derivative = transform_vector(Vec3(a * math.cos(radians), a * math.sin(radians), 0.0), self.local_to_world)
        return GCurveRay(transform_point(self._local_point(g), self.local_to_world), derivative)

    def fraction_to_point_and_2_derivatives(self, fraction: float) -> PlaneByOriginAndVectors:
        g = self._active_to_global(fraction)
        radians = self.global_fraction_to_bearing_radians(g)
        c, s = math.cos(radians), math.sin(radians)
        a = self.arc_length * self._active_delta()
        b = a * a * self.global_fraction_to_curvature(g)
        return PlaneByOriginAndVectors(
            transform_point(self._local_point(g), self.local_to_world),
            transform_vector(Vec3(a * c, a * s, 0.0), self.local_to_world),
            transform_vector(Vec3(-b * s, b * c, 0.0), self.local_to_world),
        )

    def quick_length(self) -> float:
        return self.arc_length * abs(self._active_delta())

    # ------------------------------------------------------------------
    # Strokes
    # ------------------------------------------------------------------

    def compute_stroke_count_for_options(self, options: Optional[StrokeOptions]) -> int:
        sweep = self.bearing1 - self.bearing0
        if options is None:
            return apply_angle_tol(None, 4, sweep)
        radii = [abs(r) for r in (self.radius0, self.radius1) if r != 0.0]
        r_min = min(radii) if radii else self.arc_length
        num_strokes = options.apply_tolerances_to_arc(r_min, sweep)
        num_strokes = options.apply_max_edge_length(num_strokes, self.quick_length())
        return options.apply_min_strokes_per_primitive(num_strokes)

    def emit_strokable_parts(self, handler, options: Optional[StrokeOptions] = None):
        num_strokes = self.compute_stroke_count_for_options(options)
        handler.start_curve_primitive(self)
        handler.announce_interval_for_uniform_step_strokes(self, num_strokes, 0.0, 1.0)
        handler.end_curve_primitive(self)

    # ------------------------------------------------------------------

    def reverse_in_place(self):
        self.active_interval = (self.active_interval[1], self.active_interval[0])

    def clone(self) -> TransitionSpiral3d:
        return TransitionSpiral3d(self.radius0, self.radius1, self.bearing0, self.arc_length,
                                  self.local_to_world, self.active_interval)

    def try_transform_in_place(self, matrix) -> bool:
        """Rigid motions only: anything else would stop the curve being a clothoid."""
        if not is_rigid(matrix):
            return False
        self.local_to_world = mat_mul(self.local_to_world, matrix)
        return True
