"""Test fixtures and utilities for gcurve testing.

Organized into logical modules:
- curves: Factories for the curves used across the suites (segments, arcs, chains, splines)
- assertions: Custom assertion functions (assert_points_close, assert_fraction_round_trip)
"""

from .curves import (
    make_unit_circle,
    make_quarter_arc,
    make_ellipse,
    make_l_linestring,
    make_spiral,
    make_cubic_spline,
    make_mixed_chain,
)
from .assertions import assert_points_close, assert_fraction_round_trip

__all__ = [
    'make_unit_circle',
    'make_quarter_arc',
    'make_ellipse',
    'make_l_linestring',
    'make_spiral',
    'make_cubic_spline',
    'make_mixed_chain',
    'assert_points_close',
    'assert_fraction_round_trip',
]
