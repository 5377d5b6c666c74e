"""
Bounded Newton iterations for one and two unknowns.

All iterators share the same driver (AbstractNewtonIterator.run_iterations):

    - compute a step; a failed step (evaluation failure, flat derivative,
      singular Jacobian) ends the run
    - a step counts as small when |step| / (1 + |x|) < step_size_tolerance
    - the run converges after `successive_convergence_target` small steps
      in a row
    - the run never exceeds `max_iterations`

A run that does not converge is not an error: the iterator falls back to the
best iterate it evaluated (smallest residual) and run_iterations() returns
False so callers can treat the result as reduced accuracy.

Residual functions are plain callables:

    Newton1dUnboundedApproximateDerivative  f(x) -> Optional[float]
    Newton1dUnbounded                       f(x) -> Optional[(f, df/dx)]
    Newton2dUnboundedWithDerivative         f(u, v) -> Optional[(f, fu, fv, g, gu, gv)]
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional, Tuple

from gcurve.mathutils.gcurve_math import conditional_divide_fraction, linear_system_2d

logger = logging.getLogger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

# Relative step size below which a step counts as converged
DEFAULT_STEP_SIZE_TOLERANCE = 1.0e-11

# Number of consecutive small steps required for convergence
DEFAULT_SUCCESSIVE_CONVERGENCE_TARGET = 2

# Hard cap on iterations per run
DEFAULT_MAX_ITERATIONS = 15

# Finite difference step for approximate derivatives
DEFAULT_DERIVATIVE_STEP = 1.0e-8


class AbstractNewtonIterator(ABC):
    """Shared convergence driver for the Newton variants."""

    def __init__(self,
                 step_size_tolerance: float = DEFAULT_STEP_SIZE_TOLERANCE,
                 successive_convergence_target: int = DEFAULT_SUCCESSIVE_CONVERGENCE_TARGET,
                 max_iterations: int = DEFAULT_MAX_ITERATIONS):
        self.step_size_tolerance = step_size_tolerance
        self.successive_convergence_target = successive_convergence_target
        self.max_iterations = max_iterations
        self.num_iterations = 0

    @abstractmethod
    def compute_step(self) -> bool:
        """Evaluate at the current iterate and stage a step. False if no step is possible."""

    @abstractmethod
    def current_step_size(self) -> float:
        """Relative size of the staged step."""

    @abstractmethod
    def apply_current_step(self, is_final_step: bool) -> bool:
        """Move the iterate by the staged step."""

    @abstractmethod
    def restore_best(self):
        """Reset the iterate to the best one seen."""

    def test_convergence(self, step_size: float) -> bool:
        return abs(step_size) < self.step_size_tolerance

    def run_iterations(self) -> bool:
        num_converged = 0
        self.num_iterations = 0
        while self.num_iterations < self.max_iterations:
            self.num_iterations += 1
            if not self.compute_step():
                break
            if self.test_convergence(self.current_step_size()):
                num_converged += 1
                if num_converged >= self.successive_convergence_target:
                    return self.apply_current_step(True)
            else:
                num_converged = 0
            if not self.apply_current_step(False):
                break
        logger.debug("Newton run stopped after %d iterations without convergence; keeping best iterate",
                     self.num_iterations)
        self.restore_best()
        return False


class _Newton1dBase(AbstractNewtonIterator):

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._x = 0.0
        self._step = 0.0
        self._best_x = 0.0
        self._best_f = None

    def set_x(self, x: float):
        self._x = x
        self._step = 0.0
        self._best_x = x
        self._best_f = None

    def get_x(self) -> float:
        return self._x

    def _note_value(self, x: float, f: float):
        if self._best_f is None or abs(f) < self._best_f:
            self._best_f = abs(f)
            self._best_x = x

    def current_step_size(self) -> float:
        return abs(self._step / (1.0 + abs(self._x)))

    def apply_current_step(self, is_final_step: bool) -> bool:
        self._x -= self._step
        return True

    def restore_best(self):
        if self._best_f is not None:
            self._x = self._best_x


class Newton1dUnboundedApproximateDerivative(_Newton1dBase):
    """1-D Newton where df/dx comes from a forward difference of the residual."""

    def __init__(self, func: Callable[[float], Optional[float]],
                 derivative_step: float = DEFAULT_DERIVATIVE_STEP, **kwargs):
        super().__init__(**kwargs)
        self._func = func
        self.derivative_step = derivative_step

    def compute_step(self) -> bool:
        f_a = self._func(self._x)
        if f_a is None:
            return False
        self._note_value(self._x, f_a)
        f_b = self._func(self._x + self.derivative_step)
        if f_b is None:
            return False
        dx = conditional_divide_fraction(f_a, (f_b - f_a) / self.derivative_step)
        if dx is None:
            return False
        self._step = dx
        return True


class Newton1dUnbounded(_Newton1dBase):
    """1-D Newton with an analytic derivative."""

    def __init__(self, func: Callable[[float], Optional[Tuple[float, float]]], **kwargs):
        super().__init__(**kwargs)
        self._func = func

    def compute_step(self) -> bool:
        values = self._func(self._x)
        if values is None:
            return False
        f, df = values
        self._note_value(self._x, f)
        dx = conditional_divide_fraction(f, df)
        if dx is None:
            return False
        self._step = dx
        return True


class Newton2dUnboundedWithDerivative(AbstractNewtonIterator):
    """2-D Newton on (f(u, v), g(u, v)) = (0, 0) with an analytic Jacobian."""

    def __init__(self, func: Callable[[float, float], Optional[Tuple[float, float, float, float, float, float]]],
                 **kwargs):
        super().__init__(**kwargs)
        self._func = func
        self._u = self._v = 0.0
        self._du = self._dv = 0.0
        self._best = None
        self._best_norm = None

    def set_uv(self, u: float, v: float):
        self._u, self._v = u, v
        self._du = self._dv = 0.0
        self._best = None
        self._best_norm = None

    def get_u(self) -> float:
        return self._u

    def get_v(self) -> float:
        return self._v

    def compute_step(self) -> bool:
        values = self._func(self._u, self._v)
        if values is None:
            return False
        f, fu, fv, g, gu, gv = values
        norm = f * f + g * g
        if self._best_norm is None or norm < self._best_norm:
            self._best_norm = norm
            self._best = (self._u, self._v)
        step = linear_system_2d(fu, fv, gu, gv, f, g)
        if step is None:
            return False
        self._du, self._dv = step
        return True

    def current_step_size(self) -> float:
        return max(abs(self._du) / (1.0 + abs(self._u)), abs(self._dv) / (1.0 + abs(self._v)))

    def apply_current_step(self, is_final_step: bool) -> bool:
        self._u -= self._du
        self._v -= self._dv
        return True

    def restore_best(self):
        if self._best is not None:
            self._u, self._v = self._best
