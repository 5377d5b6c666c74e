"""
Unit tests for the numerics package.

Tests cover the Newton iterators (convergence, best-iterate fallback),
Gauss-Legendre quadrature and the closed-form trig/quartic root solvers.
"""

import math
import unittest

from gcurve.numerics import (
    GaussMapper,
    Newton1dUnbounded,
    Newton1dUnboundedApproximateDerivative,
    Newton2dUnboundedWithDerivative,
    order2_bezier_root,
    solve_trig_form,
    solve_unit_circle_implicit_quadric,
)


class NewtonIteratorTests(unittest.TestCase):
    """Tests for the Newton iteration variants"""

    def testApproximateDerivativeConverges(self):
        """Test 1-D Newton with a finite difference derivative"""
        newton = Newton1dUnboundedApproximateDerivative(lambda x: x * x - 2.0)
        newton.set_x(1.0)
        self.assertTrue(newton.run_iterations(), "sqrt(2) should converge")
        self.assertAlmostEqual(newton.get_x(), math.sqrt(2.0), places=10, msg="Root of x^2 - 2")
        self.assertLessEqual(newton.num_iterations, 15, "Iteration cap should hold")

    def testNonConvergenceKeepsBestIterate(self):
        """Test that a rootless function reports failure and keeps the best iterate"""
        newton = Newton1dUnboundedApproximateDerivative(lambda x: x * x + 1.0)
        newton.set_x(1.0)
        self.assertFalse(newton.run_iterations(), "x^2 + 1 has no real root")
        best_x = newton.get_x()
        self.assertAlmostEqual(best_x * best_x + 1.0, 1.0, places=12,
                               msg="Best iterate is the one with the smallest residual")

    def testEvaluationFailureStopsRun(self):
        """Test that a residual returning None ends the run"""
        newton = Newton1dUnboundedApproximateDerivative(lambda x: None)
        newton.set_x(0.5)
        self.assertFalse(newton.run_iterations(), "Failed evaluation cannot converge")
        self.assertEqual(newton.get_x(), 0.5, "Iterate should be unchanged")

    def testAnalyticDerivativeConverges(self):
        """Test 1-D Newton with an analytic derivative"""
        newton = Newton1dUnbounded(lambda x: (math.cos(x) - x, -math.sin(x) - 1.0))
        newton.set_x(1.0)
        self.assertTrue(newton.run_iterations(), "cos(x) = x should converge")
        self.assertAlmostEqual(newton.get_x(), 0.7390851332151607, places=12, msg="Dottie number")

    def testIterationCapIsConfigurable(self):
        """Test the max_iterations argument"""
        newton = Newton1dUnboundedApproximateDerivative(lambda x: x * x - 2.0, max_iterations=1)
        newton.set_x(100.0)
        self.assertFalse(newton.run_iterations(), "One iteration cannot converge from far away")
        self.assertEqual(newton.num_iterations, 1, "Run should stop at the cap")

    def testNewton2dLinearSystem(self):
        """Test 2-D Newton on a linear system"""
        newton = Newton2dUnboundedWithDerivative(lambda u, v: (u + v - 3.0, 1.0, 1.0, u - v - 1.0, 1.0, -1.0))
        newton.set_uv(0.0, 0.0)
        self.assertTrue(newton.run_iterations(), "Linear system should converge")
        self.assertAlmostEqual(newton.get_u(), 2.0, places=12, msg="u")
        self.assertAlmostEqual(newton.get_v(), 1.0, places=12, msg="v")

    def testNewton2dCircleAndLine(self):
        """Test 2-D Newton on a circle meeting a line"""
        def residual(u, v):
            return (u * u + v * v - 4.0, 2.0 * u, 2.0 * v, u - v, 1.0, -1.0)
        newton = Newton2dUnboundedWithDerivative(residual)
        newton.set_uv(1.0, 0.5)
        self.assertTrue(newton.run_iterations(), "Should converge")
        self.assertAlmostEqual(newton.get_u(), math.sqrt(2.0), places=10, msg="u")
        self.assertAlmostEqual(newton.get_v(), math.sqrt(2.0), places=10, msg="v")


class GaussQuadratureTests(unittest.TestCase):
    """Tests for Gauss-Legendre integration"""

    def testExactForPolynomialsOfDegree2nMinus1(self):
        """Test exactness of the 5 point rule on x^9"""
        mapper = GaussMapper(5)
        self.assertAlmostEqual(mapper.integrate(lambda x: x ** 9, 0.0, 1.0), 0.1, places=13,
                               msg="5 points integrate degree 9 exactly")

    def testWeightsSumToIntervalLength(self):
        """Test mapped weights"""
        xw = GaussMapper(4).map_xw(2.0, 5.0)
        self.assertEqual(len(xw), 4, "One pair per Gauss point")
        self.assertAlmostEqual(sum(w for _, w in xw), 3.0, places=13, msg="Weights sum to b - a")
        self.assertTrue(all(2.0 < x < 5.0 for x, _ in xw), "Nodes lie inside the interval")

    def testCompositeRule(self):
        """Test integration of cos over several panels"""
        mapper = GaussMapper()
        self.assertAlmostEqual(mapper.integrate(math.cos, 0.0, 0.5 * math.pi, 4), 1.0, places=12,
                               msg="Integral of cos over [0, pi/2]")

    def testPointCountIsValidated(self):
        """Test out-of-range Gauss counts"""
        with self.assertRaises(ValueError):
            GaussMapper(0)
        with self.assertRaises(ValueError):
            GaussMapper(8)


class PolynomialSolverTests(unittest.TestCase):
    """Tests for the closed-form root solvers"""

    def testOrder2BezierRoot(self):
        """Test the linear root"""
        self.assertAlmostEqual(order2_bezier_root(-1.0, 3.0), 0.25, places=14, msg="Root of -1 .. 3")
        self.assertIsNone(order2_bezier_root(2.0, 2.0), "Flat line has no root")

    def testTrigFormTwoRoots(self):
        """Test cos = 0 on the unit circle"""
        roots = solve_trig_form(0.0, 1.0, 0.0)
        self.assertEqual(len(roots), 2, "Two crossings")
        self.assertEqual(sorted(round(s, 12) for _, s in roots), [-1.0, 1.0], "Crossings at s = +-1")

    def testTrigFormTangentAndMiss(self):
        """Test tangent and missing lines"""
        tangent = solve_trig_form(1.0, 1.0, 0.0)
        self.assertEqual(len(tangent), 1, "Tangent line touches once")
        self.assertAlmostEqual(tangent[0][0], -1.0, places=12, msg="Touch point at c = -1")
        self.assertEqual(solve_trig_form(2.0, 1.0, 0.0), [], "Line outside the circle")

    def testUnitCircleMeetsVerticalLine(self):
        """Test cos(theta) = 0.5 through the quartic"""
        angles = solve_unit_circle_implicit_quadric(0.0, 0.0, 0.0, 1.0, 0.0, -0.5)
        self.assertEqual(len(angles), 2, "Two solutions")
        self.assertAlmostEqual(angles[0], -math.pi / 3.0, places=10, msg="-60 degrees")
        self.assertAlmostEqual(angles[1], math.pi / 3.0, places=10, msg="+60 degrees")

    def testRootAtPiIsFound(self):
        """Test the root where tan(theta/2) is infinite"""
        angles = solve_unit_circle_implicit_quadric(0.0, 0.0, 0.0, 1.0, 0.0, 1.0)
        self.assertEqual(len(angles), 1, "Single solution")
        self.assertAlmostEqual(abs(angles[0]), math.pi, places=10, msg="theta = pi")

    def testIdenticallySatisfiedEquationHasNoIsolatedRoots(self):
        """Test c^2 + s^2 - 1 = 0, which holds everywhere"""
        self.assertEqual(solve_unit_circle_implicit_quadric(1.0, 0.0, 1.0, 0.0, 0.0, -1.0), [],
                         "Coincident curves give no isolated roots")
        self.assertEqual(solve_unit_circle_implicit_quadric(0.0, 0.0, 0.0, 0.0, 0.0, 0.0), [],
                         "All-zero coefficients give no roots")

    def testConcentricCirclesHaveNoRoots(self):
        """Test 4c^2 + 4s^2 - 1 = 0, which never holds"""
        self.assertEqual(solve_unit_circle_implicit_quadric(4.0, 0.0, 4.0, 0.0, 0.0, -1.0), [],
                         "Circle of radius 2 never meets the unit circle")


if __name__ == '__main__':
    unittest.main()
