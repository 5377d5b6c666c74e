"""
AngleSweep - an angular interval [start, start + sweep] in radians.

Arcs map fractions to angles through a sweep. The inverse is ambiguous by
multiples of 2*pi, so two conversions exist:

    radians_to_signed_periodic_fraction
        Picks the fraction closest to the sweep midpoint, so points just
        before the start come back slightly negative and points just past
        the end slightly above 1. Used for extension-aware searches.

    radians_to_positive_periodic_fraction
        Always returns a fraction >= 0; outside-sweep angles land above 1.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .gcurve_math import (
    SMALL_ANGLE_RADIANS,
    is_almost_equal_radians_allow_periodic_shift,
    normalize_radians_to_pi,
)

TWO_PI = 2.0 * math.pi

# Angle tolerance for snapping to the sweep ends
END_ANGLE_TOLERANCE = 1.0e-10


@dataclass
class AngleSweep:
    start_radians: float = 0.0
    sweep_radians: float = TWO_PI

    @property
    def end_radians(self) -> float:
        return self.start_radians + self.sweep_radians

    @staticmethod
    def create_start_sweep_degrees(start_degrees: float, sweep_degrees: float) -> AngleSweep:
        return AngleSweep(math.radians(start_degrees), math.radians(sweep_degrees))

    @staticmethod
    def create_start_end_radians(start_radians: float, end_radians: float) -> AngleSweep:
        return AngleSweep(start_radians, end_radians - start_radians)

    def clone(self) -> AngleSweep:
        return AngleSweep(self.start_radians, self.sweep_radians)

    def fraction_to_radians(self, fraction: float) -> float:
        return self.start_radians + fraction * self.sweep_radians

    def is_full_circle(self) -> bool:
        return abs(abs(self.sweep_radians) - TWO_PI) <= END_ANGLE_TOLERANCE

    def fraction_period(self) -> float:
        """Fraction step equivalent to one full turn."""
        if abs(self.sweep_radians) < SMALL_ANGLE_RADIANS:
            return 0.0
        return TWO_PI / abs(self.sweep_radians)

    def radians_to_signed_periodic_fraction(self, radians: float) -> float:
        if is_almost_equal_radians_allow_periodic_shift(radians, self.start_radians, END_ANGLE_TOLERANCE):
            return 0.0
        if is_almost_equal_radians_allow_periodic_shift(radians, self.end_radians, END_ANGLE_TOLERANCE):
            return 1.0
        if abs(self.sweep_radians) < SMALL_ANGLE_RADIANS:
            return 0.0
        delta = radians - self.start_radians - 0.5 * self.sweep_radians
        return 0.5 + normalize_radians_to_pi(delta) / self.sweep_radians

    def radians_to_positive_periodic_fraction(self, radians: float) -> float:
        if is_almost_equal_radians_allow_periodic_shift(radians, self.start_radians, END_ANGLE_TOLERANCE):
            return 0.0
        if is_almost_equal_radians_allow_periodic_shift(radians, self.end_radians, END_ANGLE_TOLERANCE):
            return 1.0
        if abs(self.sweep_radians) < SMALL_ANGLE_RADIANS:
            return 0.0
        fraction = (radians - self.start_radians) / self.sweep_radians
        return fraction % self.fraction_period()

    def is_radians_in_sweep(self, radians: float) -> bool:
        return self.radians_to_positive_periodic_fraction(radians) <= 1.0 + END_ANGLE_TOLERANCE

    def reverse_in_place(self):
        self.start_radians = self.end_radians
        self.sweep_radians = -self.sweep_radians
