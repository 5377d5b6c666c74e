"""
Stroke density configuration.

StrokeOptions is the single configuration object of the curve core: stroke
emission, and therefore closest-point seeding, plane-intersection bracketing
and the fragment density of distance-indexed chains, all derive from it.

Each tolerance axis is optional. An unset axis places no constraint; when
several are set, the one demanding the most strokes governs:

    chord_tol                 max distance between stroke and curve
    angle_tol                 max turn (radians) per stroke
    max_edge_length           cap on stroke length
    min_strokes_per_primitive floor on the count for each primitive

Usage:
    options = StrokeOptions.create_for_curves()          # 15 degree angle tolerance
    options = StrokeOptions(chord_tol=0.01, max_edge_length=0.5)
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass
from typing import Optional


# Default step for angle-limited stroking when no options are given at all
DEFAULT_STEP_RADIANS = math.pi / 8.0

# Default step for arcs when options exist but carry no angle tolerance
DEFAULT_ARC_STEP_RADIANS = math.pi / 4.0

# Upper limit on stroke counts derived from angle, chord or edge length
MAX_STEP_COUNT = 101


def step_count(step_size: float, total: float, min_count: int = 1, max_count: int = MAX_STEP_COUNT) -> int:
    """Number of steps of `step_size` covering `total`, clamped to [min_count, max_count]."""
    total = abs(total)
    if step_size <= 0.0 or step_size >= total:
        return min_count
    count = int(math.floor((total + 0.999999 * step_size) / step_size))
    if count < min_count:
        return min_count
    if count > max_count:
        return max_count
    return count


@dataclass
class StrokeOptions:
    chord_tol: Optional[float] = None
    angle_tol: Optional[float] = None
    max_edge_length: Optional[float] = None
    min_strokes_per_primitive: Optional[int] = None
    default_circle_strokes: int = 16

    def __post_init__(self):
        for name in ('chord_tol', 'angle_tol', 'max_edge_length'):
            value = getattr(self, name)
            if value is not None and not value > 0.0:
                warnings.warn(f"StrokeOptions.{name}={value!r} is not positive and will be ignored",
                              RuntimeWarning, stacklevel=3)
                setattr(self, name, None)

    @staticmethod
    def create_for_curves() -> StrokeOptions:
        return StrokeOptions(angle_tol=math.radians(15.0))

    @staticmethod
    def create_for_facets() -> StrokeOptions:
        return StrokeOptions(angle_tol=math.radians(22.5))

    @property
    def has_max_edge_length(self) -> bool:
        return self.max_edge_length is not None and self.max_edge_length > 0.0

    # ------------------------------------------------------------------
    # Count adjusters: each returns max(min_count, count demanded by one axis)
    # ------------------------------------------------------------------

    def apply_angle_tol(self, min_count: int, sweep_radians: float,
                        default_step_radians: float = DEFAULT_STEP_RADIANS) -> int:
        return apply_angle_tol(self, min_count, sweep_radians, default_step_radians)

    def apply_max_edge_length(self, min_count: int, total_length: float) -> int:
        total_length = abs(total_length)
        min_count = max(1, min_count)
        if self.has_max_edge_length and min_count * self.max_edge_length < total_length:
            min_count = int(math.ceil(total_length / self.max_edge_length + 0.99999))
        return min_count

    def apply_chord_tol(self, min_count: int, radius: float, sweep_radians: float) -> int:
        if self.chord_tol is not None and 0.0 < self.chord_tol < radius:
            step_radians = 2.0 * math.acos(1.0 - self.chord_tol / radius)
            min_count = step_count(step_radians, sweep_radians, min_count)
        return min_count

    def apply_min_strokes_per_primitive(self, min_count: int) -> int:
        if self.min_strokes_per_primitive is not None and self.min_strokes_per_primitive > min_count:
            min_count = int(self.min_strokes_per_primitive)
        return min_count

    def apply_tolerances_to_arc(self, radius: float, sweep_radians: float = 2.0 * math.pi) -> int:
        num_strokes = self.apply_angle_tol(1, sweep_radians, DEFAULT_ARC_STEP_RADIANS)
        num_strokes = self.apply_max_edge_length(num_strokes, sweep_radians * radius)
        num_strokes = self.apply_chord_tol(num_strokes, radius, abs(sweep_radians))
        return self.apply_min_strokes_per_primitive(num_strokes)


def apply_angle_tol(options: Optional[StrokeOptions], min_count: int, sweep_radians: float,
                    default_step_radians: float = DEFAULT_STEP_RADIANS) -> int:
    """Angle-driven stroke count; usable with ``options=None``."""
    sweep_radians = abs(sweep_radians)
    step_radians = default_step_radians if default_step_radians > 0.0 else DEFAULT_STEP_RADIANS
    if options is not None and options.angle_tol is not None and options.angle_tol > 0.0:
        step_radians = options.angle_tol
    if min_count * step_radians < sweep_radians:
        min_count = step_count(step_radians, sweep_radians, min_count)
    return min_count
