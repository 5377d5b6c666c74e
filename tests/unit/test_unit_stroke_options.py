"""
Unit tests for StrokeOptions and the location detail records.

Tests cover stroke count derivation from each tolerance axis, the
warning on unusable option values, distance-walk result records and
index-aligned result pairs.
"""

import math
import unittest
import warnings

from gcurve.curves import (
    CurveIntervalRole,
    CurveLocationDetail,
    CurveLocationDetailArrayPair,
    CurveSearchStatus,
    LineSegment3d,
    StrokeOptions,
)
from gcurve.curves.gcurve_stroke_options import apply_angle_tol, step_count


class StrokeOptionsTests(unittest.TestCase):
    """Tests for stroke count derivation"""

    def testFactories(self):
        """Test the preset factories"""
        self.assertAlmostEqual(StrokeOptions.create_for_curves().angle_tol, math.radians(15.0), places=14,
                               msg="Curve preset uses 15 degrees")
        self.assertAlmostEqual(StrokeOptions.create_for_facets().angle_tol, math.radians(22.5), places=14,
                               msg="Facet preset uses 22.5 degrees")
        self.assertIsNone(StrokeOptions().chord_tol, "Default options carry no chord tolerance")

    def testNonPositiveToleranceWarnsAndIsIgnored(self):
        """Test the warning for unusable values"""
        with self.assertWarns(RuntimeWarning):
            options = StrokeOptions(chord_tol=-1.0)
        self.assertIsNone(options.chord_tol, "Negative chord tolerance should be dropped")
        with self.assertWarns(RuntimeWarning):
            options = StrokeOptions(max_edge_length=0.0)
        self.assertFalse(options.has_max_edge_length, "Zero edge length should be dropped")

    def testValidOptionsDoNotWarn(self):
        """Test that usable values are silent"""
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            StrokeOptions(chord_tol=0.01, angle_tol=0.1, max_edge_length=2.0)

    def testStepCount(self):
        """Test the clamped step count"""
        self.assertEqual(step_count(math.pi / 8.0, 2.0 * math.pi), 16, "Full turn in pi/8 steps")
        self.assertEqual(step_count(1.0, 0.5, 3), 3, "Step longer than total gives min count")
        self.assertEqual(step_count(1.0e-6, 1.0), 101, "Count is capped")

    def testApplyAngleTolWithoutOptions(self):
        """Test the default angle step"""
        self.assertEqual(apply_angle_tol(None, 1, 2.0 * math.pi), 16, "Default step is pi/8")
        self.assertEqual(apply_angle_tol(None, 4, 0.25), 4, "Small sweeps keep the min count")

    def testApplyAngleTolWithOptions(self):
        """Test an explicit angle tolerance"""
        options = StrokeOptions.create_for_curves()
        self.assertEqual(options.apply_angle_tol(1, 2.0 * math.pi), 24, "Full turn in 15 degree steps")

    def testApplyMaxEdgeLength(self):
        """Test the edge length cap"""
        options = StrokeOptions(max_edge_length=3.0)
        self.assertEqual(options.apply_max_edge_length(1, 10.0), 5, "Edge cap demands more strokes")
        self.assertEqual(options.apply_max_edge_length(6, 10.0), 6, "Already dense enough")
        self.assertEqual(StrokeOptions().apply_max_edge_length(2, 10.0), 2, "Unset cap changes nothing")

    def testApplyMinStrokesPerPrimitive(self):
        """Test the per-primitive floor"""
        options = StrokeOptions(min_strokes_per_primitive=7)
        self.assertEqual(options.apply_min_strokes_per_primitive(3), 7, "Floor raises the count")
        self.assertEqual(options.apply_min_strokes_per_primitive(9), 9, "Floor does not lower the count")

    def testApplyTolerancesToArc(self):
        """Test combined arc stroke counts"""
        self.assertEqual(StrokeOptions().apply_tolerances_to_arc(1.0), 8, "Default arc step is pi/4")
        chord_count = StrokeOptions(chord_tol=0.01).apply_tolerances_to_arc(1.0)
        self.assertEqual(chord_count, 23, "Chord tolerance 0.01 on the unit circle")
        self.assertEqual(StrokeOptions(chord_tol=5.0).apply_tolerances_to_arc(1.0), 8,
                         "Chord tolerance above the radius is ignored")


class CurveLocationDetailTests(unittest.TestCase):
    """Tests for search result records"""

    def setUp(self):
        self.segment = LineSegment3d((0, 0, 0), (4, 0, 0))

    def testConditionalMoveWithinCurve(self):
        """Test a walk that stays on the curve"""
        detail = CurveLocationDetail.create_conditional_move_signed_distance(False, self.segment, 0.25, 0.75, 2.0)
        self.assertEqual(detail.fraction, 0.75, "End fraction unchanged")
        self.assertEqual(detail.a, 2.0, "Distance unchanged")
        self.assertEqual(detail.curve_search_status, CurveSearchStatus.SUCCESS, "Walk succeeded")

    def testConditionalMoveStopsAtBoundary(self):
        """Test a walk that runs off the end"""
        detail = CurveLocationDetail.create_conditional_move_signed_distance(False, self.segment, 0.5, 1.25, 3.0)
        self.assertEqual(detail.fraction, 1.0, "Capped at the end")
        self.assertAlmostEqual(detail.a, 2.0, places=12, msg="Distance actually travelled")
        self.assertEqual(detail.curve_search_status, CurveSearchStatus.STOPPED_AT_BOUNDARY, "Boundary stop")
        detail = CurveLocationDetail.create_conditional_move_signed_distance(False, self.segment, 0.5, -0.5, -4.0)
        self.assertEqual(detail.fraction, 0.0, "Capped at the start")
        self.assertAlmostEqual(detail.a, -2.0, places=12, msg="Negative distance travelled")

    def testConditionalMoveWithExtension(self):
        """Test a walk allowed past the end"""
        detail = CurveLocationDetail.create_conditional_move_signed_distance(True, self.segment, 0.5, 1.25, 3.0)
        self.assertEqual(detail.fraction, 1.25, "Extension keeps the fraction")
        self.assertEqual(detail.curve_search_status, CurveSearchStatus.SUCCESS, "Extended walk succeeded")

    def testCloneIsDeep(self):
        """Test that clones do not share points or child details"""
        detail = CurveLocationDetail.create_curve_evaluated_fraction(self.segment, 0.5)
        detail.child_detail = CurveLocationDetail.create_curve_evaluated_fraction(self.segment, 0.25)
        copy = detail.clone()
        copy.point.x = 99.0
        copy.child_detail.fraction = 0.9
        self.assertEqual(detail.point.x, 2.0, "Original point untouched")
        self.assertEqual(detail.child_detail.fraction, 0.25, "Original child untouched")
        self.assertIs(copy.curve, self.segment, "Curve reference is shared")

    def testIsIsolated(self):
        """Test the isolated role check"""
        detail = CurveLocationDetail()
        detail.interval_role = CurveIntervalRole.ISOLATED_AT_VERTEX
        self.assertTrue(detail.is_isolated, "Vertex hit is isolated")
        detail.interval_role = CurveIntervalRole.INTERVAL_START
        self.assertFalse(detail.is_isolated, "Interval start is not isolated")

    def testArrayPairSwapped(self):
        """Test index-aligned pair lists"""
        pair = CurveLocationDetailArrayPair()
        pair.data_a.append(CurveLocationDetail(fraction=0.1))
        pair.data_b.append(CurveLocationDetail(fraction=0.9))
        self.assertEqual(len(pair), 1, "One pair")
        swapped = pair.swapped()
        self.assertEqual(swapped.data_a[0].fraction, 0.9, "Swapped A")
        self.assertEqual(swapped.data_b[0].fraction, 0.1, "Swapped B")
        self.assertEqual(pair.pairs()[0].detail_b.fraction, 0.9, "Pair view")


if __name__ == '__main__':
    unittest.main()
