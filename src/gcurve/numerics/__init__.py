"""Newton iteration, Gauss quadrature and closed-form root solvers."""

from .newton import (
    Newton1dUnboundedApproximateDerivative,
    Newton1dUnbounded,
    Newton2dUnboundedWithDerivative,
)
from .quadrature import GaussMapper
from .polynomials import order2_bezier_root, solve_trig_form, solve_unit_circle_implicit_quadric

__all__ = [
    'Newton1dUnboundedApproximateDerivative',
    'Newton1dUnbounded',
    'Newton2dUnboundedWithDerivative',
    'GaussMapper',
    'order2_bezier_root',
    'solve_trig_form',
    'solve_unit_circle_implicit_quadric',
]
