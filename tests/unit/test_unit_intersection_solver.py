"""
Unit tests for the curve-curve intersection solver.

Tests cover each closed-form pair handler, the chain decomposition, the
generic Newton arm, extension flags and argument-order symmetry.
"""

import math
import unittest

from gcurve.mathutils import AngleSweep, Vec3
from gcurve.curves import (
    Arc3d,
    CurveChainWithDistanceIndex,
    CurveIntervalRole,
    LineSegment3d,
    LineString3d,
    Path,
)
from gcurve.solvers import CurveCurve, CurveCurveIntersectXYZ, accept_fraction
from test_fixtures.assertions import assert_points_close
from test_fixtures.curves import (
    MIXED_CHAIN_LENGTH,
    make_cubic_spline,
    make_ellipse,
    make_mixed_chain,
    make_spiral,
    make_unit_circle,
)


def _fraction_pairs(result, digits=9):
    return sorted((round(a.fraction, digits), round(b.fraction, digits))
                  for a, b in zip(result.data_a, result.data_b))


class AcceptFractionTests(unittest.TestCase):
    """Tests for the extension filter"""

    def testAcceptFraction(self):
        """Test each side of the filter"""
        self.assertTrue(accept_fraction(False, 0.5, False), "Interior accepted")
        self.assertFalse(accept_fraction(False, -0.1, True), "Start may not extend")
        self.assertTrue(accept_fraction(True, -0.1, False), "Start may extend")
        self.assertFalse(accept_fraction(True, 1.1, False), "End may not extend")


class SegmentIntersectionTests(unittest.TestCase):
    """Tests for segment and linestring pairs"""

    # ========================================================================
    # SEGMENT / SEGMENT
    # ========================================================================

    def testCrossingSegments(self):
        """Test two segments crossing at their midpoints"""
        seg_a = LineSegment3d((0, 0, 0), (2, 0, 0))
        seg_b = LineSegment3d((1, -1, 0), (1, 1, 0))
        result = CurveCurve.intersection_xyz(seg_a, False, seg_b, False)
        self.assertEqual(len(result), 1, "One intersection")
        self.assertEqual(result.data_a[0].fraction, 0.5, "Fraction on A")
        self.assertEqual(result.data_b[0].fraction, 0.5, "Fraction on B")
        self.assertIs(result.data_a[0].curve, seg_a, "A detail refers to A")
        self.assertIs(result.data_b[0].curve, seg_b, "B detail refers to B")
        self.assertEqual(result.data_a[0].interval_role, CurveIntervalRole.ISOLATED, "Isolated role")
        assert_points_close(self, result.data_a[0].point, (1, 0, 0), msg="Intersection point")

    def testExtensionFlags(self):
        """Test a crossing beyond the end of A"""
        seg_a = LineSegment3d((0, 0, 0), (1, 0, 0))
        seg_b = LineSegment3d((2, -1, 0), (2, 1, 0))
        self.assertEqual(len(CurveCurve.intersection_xyz(seg_a, False, seg_b, False)), 0, "No extension")
        self.assertEqual(len(CurveCurve.intersection_xyz(seg_a, (True, False), seg_b, False)), 0,
                         "Only the start may extend")
        result = CurveCurve.intersection_xyz(seg_a, True, seg_b, False)
        self.assertEqual(len(result), 1, "Extended A reaches B")
        self.assertAlmostEqual(result.data_a[0].fraction, 2.0, places=12, msg="Extended fraction")
        self.assertAlmostEqual(result.data_b[0].fraction, 0.5, places=12, msg="Fraction on B")

    def testSwappedArgumentsSwapResults(self):
        """Test argument-order symmetry"""
        seg_a = LineSegment3d((0, 0, 0), (1, 0, 0))
        seg_b = LineSegment3d((2, -1, 0), (2, 1, 0))
        result = CurveCurve.intersection_xyz(seg_b, False, seg_a, True)
        self.assertEqual(len(result), 1, "Same intersection")
        self.assertAlmostEqual(result.data_a[0].fraction, 0.5, places=12, msg="Fraction on first argument")
        self.assertAlmostEqual(result.data_b[0].fraction, 2.0, places=12, msg="Fraction on second argument")
        self.assertIs(result.data_a[0].curve, seg_b, "First list refers to the first argument")

    def testParallelAndSkewSegments(self):
        """Test pairs that never meet"""
        seg_a = LineSegment3d((0, 0, 0), (2, 0, 0))
        parallel = LineSegment3d((0, 1, 0), (2, 1, 0))
        skew = LineSegment3d((1, -1, 1), (1, 1, 1))
        self.assertEqual(len(CurveCurve.intersection_xyz(seg_a, True, parallel, True)), 0, "Parallel")
        self.assertEqual(len(CurveCurve.intersection_xyz(seg_a, True, skew, True)), 0, "Skew in 3D")

    # ========================================================================
    # LINESTRINGS
    # ========================================================================

    def testLinestringVertexHitReportedOnce(self):
        """Test the hit shared by two edges at a vertex"""
        linestring = LineString3d([(0, 0, 0), (1, 0, 0), (2, 0, 0)])
        segment = LineSegment3d((1, -1, 0), (1, 1, 0))
        result = CurveCurve.intersection_xyz(linestring, False, segment, False)
        self.assertEqual(len(result), 1, "Vertex hit deduplicated")
        self.assertAlmostEqual(result.data_a[0].fraction, 0.5, places=12, msg="Vertex fraction")
        self.assertIs(result.data_a[0].curve, linestring, "A detail on the linestring")

    def testLinestringLinestring(self):
        """Test two crossing polylines"""
        ls_a = LineString3d([(0, 0, 0), (2, 0, 0), (2, 2, 0)])
        ls_b = LineString3d([(1, -1, 0), (1, 1, 0), (3, 1, 0)])
        result = CurveCurve.intersection_xyz(ls_a, False, ls_b, False)
        self.assertEqual(_fraction_pairs(result), [(0.25, 0.25), (0.75, 0.75)], "Two crossings")

    def testInteriorEdgesNeverExtend(self):
        """Test that extension applies to the outer edges only"""
        linestring = LineString3d([(0, 0, 0), (2, 0, 0), (2, 2, 0), (4, 2, 0)])
        segment = LineSegment3d((3, -1, 0), (3, 3, 0))
        result = CurveCurve.intersection_xyz(linestring, True, segment, True)
        self.assertEqual(len(result), 1, "First edge may not extend past its end")
        assert_points_close(self, result.data_a[0].point, (3, 2, 0), msg="On the last edge")
        self.assertAlmostEqual(result.data_a[0].fraction, 5.0 / 6.0, places=12, msg="Middle of the last edge")


class ArcIntersectionTests(unittest.TestCase):
    """Tests for pairs involving arcs"""

    def testSegmentThroughCircle(self):
        """Test a chord of the unit circle"""
        segment = LineSegment3d((-2, 0.5, 0), (2, 0.5, 0))
        result = CurveCurve.intersection_xyz(segment, False, make_unit_circle(), False)
        self.assertEqual(len(result), 2, "Two crossings")
        chord = math.sqrt(0.75)
        self.assertEqual(_fraction_pairs(result, 7),
                         [(round((2.0 - chord) / 4.0, 7), round(5.0 / 12.0, 7)),
                          (round((2.0 + chord) / 4.0, 7), round(1.0 / 12.0, 7))],
                         "Segment and arc fractions")

    def testArcSegmentOrder(self):
        """Test the arc as the first argument"""
        segment = LineSegment3d((-2, 0.5, 0), (2, 0.5, 0))
        circle = make_unit_circle()
        result = CurveCurve.intersection_xyz(circle, False, segment, False)
        self.assertTrue(all(d.curve is circle for d in result.data_a), "A details on the circle")
        self.assertEqual(sorted(round(d.fraction, 7) for d in result.data_a),
                         [round(1.0 / 12.0, 7), round(5.0 / 12.0, 7)], "Arc fractions")

    def testSegmentAlongArcNormal(self):
        """Test a segment parallel to the arc normal"""
        segment = LineSegment3d((1, 0, -1), (1, 0, 1))
        result = CurveCurve.intersection_xyz(segment, False, make_unit_circle(), False)
        self.assertEqual(len(result), 1, "Pierces the circle once")
        self.assertAlmostEqual(result.data_a[0].fraction, 0.5, places=12, msg="Segment fraction")
        self.assertAlmostEqual(result.data_b[0].fraction, 0.0, places=12, msg="Arc fraction")

    def testCoplanarCircles(self):
        """Test two unit circles one unit apart"""
        result = CurveCurve.intersection_xyz(make_unit_circle(), False, make_unit_circle((1, 0, 0)), False)
        self.assertEqual(_fraction_pairs(result),
                         [(round(1.0 / 6.0, 9), round(1.0 / 3.0, 9)), (round(5.0 / 6.0, 9), round(2.0 / 3.0, 9))],
                         "Crossings at +-60 degrees on A")

    def testCoplanarPartialArc(self):
        """Test that crossings outside B's sweep are dropped"""
        arc_b = Arc3d.create_xy_radius((1, 0, 0), 1.0, AngleSweep.create_start_sweep_degrees(90.0, 90.0))
        result = CurveCurve.intersection_xyz(make_unit_circle(), False, arc_b, False)
        self.assertEqual(_fraction_pairs(result), [(round(1.0 / 6.0, 9), round(1.0 / 3.0, 9))],
                         "Only the upper crossing")

    def testConcentricAndCoincidentCircles(self):
        """Test circles with no isolated crossings"""
        circle = make_unit_circle()
        self.assertEqual(len(CurveCurve.intersection_xyz(circle, False, Arc3d.create_xy_radius((0, 0, 0), 2.0), False)),
                         0, "Concentric circles")
        self.assertEqual(len(CurveCurve.intersection_xyz(circle, False, make_unit_circle(), False)), 0,
                         "Coincident circles")

    def testSkewCircles(self):
        """Test circles in perpendicular planes"""
        circle_xz = Arc3d((0, 0, 0), Vec3(1, 0, 0), Vec3(0, 0, 1))
        result = CurveCurve.intersection_xyz(make_unit_circle(), False, circle_xz, False)
        self.assertEqual(_fraction_pairs(result), [(0.0, 0.0), (0.5, 0.5)], "Shared points on the x axis")

    def testParallelDistinctPlanes(self):
        """Test circles in parallel planes"""
        result = CurveCurve.intersection_xyz(make_unit_circle(), False, make_unit_circle((0, 0, 1)), False)
        self.assertEqual(len(result), 0, "Parallel planes never meet")


class ChainIntersectionTests(unittest.TestCase):
    """Tests for distance-indexed chains"""

    def setUp(self):
        self.chain = make_mixed_chain()

    def testChainSegment(self):
        """Test a hit on the first child"""
        segment = LineSegment3d((1, -2, 0), (1, 2, 0))
        result = CurveCurve.intersection_xyz(self.chain, False, segment, False)
        self.assertEqual(len(result), 1, "One crossing")
        self.assertAlmostEqual(result.data_a[0].fraction, 1.0 / MIXED_CHAIN_LENGTH, places=12, msg="Chain fraction")
        self.assertAlmostEqual(result.data_b[0].fraction, 0.25, places=12, msg="Segment fraction")
        self.assertIs(result.data_a[0].curve, self.chain, "A detail on the chain")
        self.assertIs(result.data_a[0].child_detail.curve, self.chain.path.children[0], "Child detail")

    def testChainAsSecondArgument(self):
        """Test a hit on the last child with the chain second"""
        segment = LineSegment3d((2.5, 0.5, 0), (4, 0.5, 0))
        result = CurveCurve.intersection_xyz(segment, False, self.chain, False)
        self.assertEqual(len(result), 1, "One crossing")
        self.assertAlmostEqual(result.data_a[0].fraction, 1.0 / 3.0, places=12, msg="Segment fraction")
        self.assertAlmostEqual(result.data_b[0].fraction, (2.5 + 0.5 * math.pi) / MIXED_CHAIN_LENGTH, places=10,
                               msg="Chain fraction")
        self.assertIs(result.data_b[0].child_detail.curve, self.chain.path.children[2], "Child detail")


class ArgumentOrderSymmetryTests(unittest.TestCase):
    """Tests that swapping the curves swaps the result lists"""

    def _assert_symmetric(self, curve_a, curve_b, expected_count, name):
        forward = CurveCurve.intersection_xyz(curve_a, False, curve_b, False)
        backward = CurveCurve.intersection_xyz(curve_b, False, curve_a, False)
        self.assertEqual(len(forward), expected_count, f"{name}: intersection count")
        self.assertEqual(len(backward), expected_count, f"{name}: swapped intersection count")
        for detail in forward.data_a + backward.data_b:
            self.assertIs(detail.curve, curve_a, f"{name}: details on the first curve")
        for detail in forward.data_b + backward.data_a:
            self.assertIs(detail.curve, curve_b, f"{name}: details on the second curve")

        forward_pairs = sorted((a.fraction, b.fraction) for a, b in zip(forward.data_a, forward.data_b))
        backward_pairs = sorted((b.fraction, a.fraction) for a, b in zip(backward.data_a, backward.data_b))
        for (fa, fb), (ga, gb) in zip(forward_pairs, backward_pairs):
            self.assertAlmostEqual(fa, ga, places=9, msg=f"{name}: fraction on the first curve")
            self.assertAlmostEqual(fb, gb, places=9, msg=f"{name}: fraction on the second curve")
        for a, b in zip(forward.data_a, forward.data_b):
            assert_points_close(self, a.point, b.point, atol=1.0e-9, msg=f"{name}: shared point")

    def testCoplanarArcs(self):
        """Test two overlapping circles"""
        self._assert_symmetric(make_unit_circle(), make_unit_circle((1, 0, 0)), 2, "coplanar arcs")

    def testSkewArcs(self):
        """Test circles in perpendicular planes"""
        circle_xz = Arc3d((0, 0, 0), Vec3(1, 0, 0), Vec3(0, 0, 1))
        self._assert_symmetric(make_unit_circle(), circle_xz, 2, "skew arcs")

    def testEllipseLinestring(self):
        """Test an ellipse crossing the vertical edge of a linestring"""
        self._assert_symmetric(make_ellipse(), LineString3d([(0, 0, 0), (2, 0, 0), (2, 1, 0)]), 1,
                               "ellipse and linestring")

    def testSplineArc(self):
        """Test a small circle centered on the spline"""
        spline = make_cubic_spline()
        circle = Arc3d.create_xy_radius(spline.fraction_to_point(0.5), 0.5)
        self._assert_symmetric(spline, circle, 2, "spline and arc")

    def testChainLinestring(self):
        """Test a linestring crossing the first and last children of a chain"""
        linestring = LineString3d([(1, -2, 0), (1, 2, 0), (4, 0, 0)])
        self._assert_symmetric(make_mixed_chain(), linestring, 2, "chain and linestring")

    def testChainChain(self):
        """Test two chains"""
        other = CurveChainWithDistanceIndex.create_capture(
            Path(LineSegment3d((1, -2, 0), (1, 2, 0)), LineSegment3d((1, 2, 0), (4, 0, 0))))
        self._assert_symmetric(make_mixed_chain(), other, 2, "chain and chain")


class GenericIntersectionTests(unittest.TestCase):
    """Tests for the Newton arm"""

    def testSplineSegment(self):
        """Test a b-spline crossing a vertical segment"""
        spline = make_cubic_spline()
        segment = LineSegment3d((3, -1, 0), (3, 3, 0))
        result = CurveCurve.intersection_xyz(spline, False, segment, False)
        self.assertEqual(len(result), 1, "One crossing")
        self.assertAlmostEqual(result.data_a[0].point.x, 3.0, places=9, msg="Crossing on the segment line")
        assert_points_close(self, spline.fraction_to_point(result.data_a[0].fraction),
                            segment.fraction_to_point(result.data_b[0].fraction), atol=1.0e-9,
                            msg="Both fractions give the same point")

    def testSpiralSegment(self):
        """Test a spiral crossing a vertical segment"""
        result = CurveCurve.intersection_xyz(make_spiral(), False, LineSegment3d((5, -1, 0), (5, 2, 0)), False)
        self.assertEqual(len(result), 1, "One crossing")
        self.assertAlmostEqual(result.data_a[0].point.x, 5.0, places=9, msg="Crossing on the segment line")

    def testFarApartGivesNothing(self):
        """Test curves that never meet"""
        result = CurveCurve.intersection_xyz(make_cubic_spline(), False, LineSegment3d((100, 0, 0), (101, 0, 0)), False)
        self.assertEqual(len(result), 0, "No crossings")

    def testSolverIsSingleUse(self):
        """Test grab_results with reinitialization"""
        solver = CurveCurveIntersectXYZ(LineSegment3d((0, 0, 0), (2, 0, 0)), False,
                                        LineSegment3d((1, -1, 0), (1, 1, 0)), False)
        solver.dispatch()
        self.assertEqual(len(solver.grab_results(True)), 1, "First grab holds the result")
        self.assertEqual(len(solver.grab_results()), 0, "Results were reset")


if __name__ == '__main__':
    unittest.main()
