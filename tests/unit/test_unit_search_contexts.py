"""
Unit tests for the stroke-driven search contexts.
"""

import math
import unittest

from gcurve.mathutils import GCurvePlane
from gcurve.curves import CurveIntervalRole, LineSegment3d
from gcurve.solvers import (
    AppendPlaneIntersectionStrokeHandler,
    ClosestPointStrokeHandler,
    CurveLengthContext,
    StrokeCollector,
)
from test_fixtures.curves import make_l_linestring, make_quarter_arc, make_spiral, make_unit_circle


class CurveLengthContextTests(unittest.TestCase):
    """Tests for quadrature lengths over strokes"""

    def testFullCircle(self):
        """Test the full circumference"""
        context = CurveLengthContext()
        make_unit_circle().emit_strokable_parts(context)
        self.assertAlmostEqual(context.get_sum(), 2.0 * math.pi, places=12, msg="Circumference")

    def testWindowedCircle(self):
        """Test a window that splits stroke intervals"""
        context = CurveLengthContext(0.25, 0.5)
        make_unit_circle().emit_strokable_parts(context)
        self.assertAlmostEqual(context.get_sum(), 0.5 * math.pi, places=12, msg="Quarter circumference")

    def testWindowOrderDoesNotMatter(self):
        """Test reversed window fractions"""
        context = CurveLengthContext(0.5, 0.25)
        make_unit_circle().emit_strokable_parts(context)
        self.assertAlmostEqual(context.get_sum(), 0.5 * math.pi, places=12, msg="Swapped window")

    def testWindowedLinestring(self):
        """Test exact chord lengths clipped to the window"""
        context = CurveLengthContext(0.25, 0.75)
        make_l_linestring().emit_strokable_parts(context)
        self.assertAlmostEqual(context.get_sum(), 1.5, places=12, msg="One unit on each edge side")


class StrokeCollectorTests(unittest.TestCase):
    """Tests for stroke sampling"""

    def testSharedVerticesAppearOnce(self):
        """Test duplicate suppression between consecutive announcements"""
        collector = StrokeCollector()
        make_l_linestring().emit_strokable_parts(collector)
        self.assertEqual([s.fraction for s in collector.samples], [0.0, 0.5, 1.0], "Vertex fractions")

    def testUniformStepsEvaluateTheCurve(self):
        """Test samples on an arc lie on the arc"""
        collector = StrokeCollector()
        make_quarter_arc().emit_strokable_parts(collector)
        self.assertEqual(len(collector.samples), 5, "Four default strokes on a quarter circle")
        for sample in collector.samples:
            self.assertAlmostEqual(sample.point.length(), 1.0, places=12, msg="Sample on the unit circle")


class ClosestPointStrokeHandlerTests(unittest.TestCase):
    """Tests for the generic closest point search"""

    def testNoAnnouncementsGiveNoResult(self):
        """Test an unused handler"""
        handler = ClosestPointStrokeHandler((0, 0, 0))
        self.assertIsNone(handler.claim_result(), "Nothing was announced")

    def testSegmentInterval(self):
        """Test direct projection onto a straight piece"""
        segment = LineSegment3d((0, 0, 0), (4, 0, 0))
        handler = ClosestPointStrokeHandler((1, 2, 0))
        segment.emit_strokable_parts(handler)
        result = handler.claim_result()
        self.assertAlmostEqual(result.fraction, 0.25, places=12, msg="Foot of the perpendicular")
        self.assertAlmostEqual(result.a, 2.0, places=12, msg="Distance")

    def testUniformStepsOnArc(self):
        """Test Newton refinement on the generic path of an arc"""
        handler = ClosestPointStrokeHandler((2, 2, 0))
        make_quarter_arc().emit_strokable_parts(handler)
        result = handler.claim_result()
        self.assertAlmostEqual(result.fraction, 0.5, places=9, msg="45 degrees")
        self.assertAlmostEqual(result.a, 2.0 * math.sqrt(2.0) - 1.0, places=9, msg="Distance to the arc")

    def testSpiralAnnouncesItself(self):
        """Test that a spiral is reported as the curve it announced"""
        spiral = make_spiral()
        handler = ClosestPointStrokeHandler(spiral.fraction_to_point(0.4))
        spiral.emit_strokable_parts(handler)
        result = handler.claim_result()
        self.assertIs(result.curve, spiral, "Result refers to the spiral")
        self.assertAlmostEqual(result.fraction, 0.4, delta=1.0e-7, msg="Recovered fraction")

    def testParentBracketsReportTheParent(self):
        """Test announcements made on behalf of a curve sharing the same fractions"""
        arc = make_quarter_arc()
        owner = arc.clone()
        handler = ClosestPointStrokeHandler((2, 2, 0))
        handler.start_parent_curve_primitive(owner)
        arc.emit_strokable_parts(handler)
        self.assertIs(handler.effective_curve(), owner, "Parent is active inside the brackets")
        handler.end_parent_curve_primitive(owner)
        self.assertIs(handler.effective_curve(), arc, "Announced curve after the brackets close")
        result = handler.claim_result()
        self.assertIs(result.curve, owner, "Result refers to the parent")
        self.assertAlmostEqual(result.fraction, 0.5, places=9, msg="45 degrees")


class AppendPlaneIntersectionStrokeHandlerTests(unittest.TestCase):
    """Tests for the generic plane intersection"""

    def testCircleCrossings(self):
        """Test bracketing and refinement on a full circle"""
        hits = []
        handler = AppendPlaneIntersectionStrokeHandler(GCurvePlane.create_point_normal((0.5, 0, 0), (1, 0, 0)), hits)
        make_unit_circle().emit_strokable_parts(handler)
        self.assertEqual(len(hits), 2, "Two crossings")
        self.assertAlmostEqual(hits[0].fraction, 1.0 / 6.0, places=10, msg="60 degrees")
        self.assertAlmostEqual(hits[1].fraction, 5.0 / 6.0, places=10, msg="300 degrees")
        self.assertTrue(all(h.interval_role == CurveIntervalRole.ISOLATED for h in hits), "Isolated roles")

    def testAppendsAfterExistingEntries(self):
        """Test that earlier results are kept"""
        hits = ["existing"]
        handler = AppendPlaneIntersectionStrokeHandler(GCurvePlane.create_point_normal((1, 0, 0), (1, 0, 0)), hits)
        LineSegment3d((0, 0, 0), (4, 0, 0)).emit_strokable_parts(handler)
        self.assertEqual(len(hits), 2, "One new hit after the existing entry")
        self.assertAlmostEqual(hits[1].fraction, 0.25, places=12, msg="Crossing fraction")

    def testMissingPlane(self):
        """Test a plane that misses the curve"""
        hits = []
        handler = AppendPlaneIntersectionStrokeHandler(GCurvePlane.create_point_normal((5, 0, 0), (1, 0, 0)), hits)
        make_unit_circle().emit_strokable_parts(handler)
        self.assertEqual(hits, [], "No crossings")


if __name__ == '__main__':
    unittest.main()
