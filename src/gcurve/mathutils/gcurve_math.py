"""
Scalar helpers, shared tolerances and 4x4 transform builders.

Matrices are row-major tuple-of-tuples with the translation in the bottom row,
so a point transforms as the row vector ``[x, y, z, 1] @ M``.
"""
import math

from .vec3 import Vec3


# ============================================================================
# CONSTANTS
# ============================================================================

# Distance below which two points are considered coincident
SMALL_METRIC_DISTANCE = 1.0e-6

# Square of SMALL_METRIC_DISTANCE
SMALL_METRIC_DISTANCE_SQUARED = 1.0e-12

# Angle (and relative number) tolerance in radians
SMALL_ANGLE_RADIANS = 1.0e-12

# conditional_divide_fraction refuses quotients larger than this
LARGE_FRACTION_RESULT = 1.0e10

# Tolerance for treating a fraction as lying in [0, 1]
FRACTION_TOLERANCE = 1.0e-10


_IDENTITY_4x4_TUPLE = (
    (1.0, 0.0, 0.0, 0.0),
    (0.0, 1.0, 0.0, 0.0),
    (0.0, 0.0, 1.0, 0.0),
    (0.0, 0.0, 0.0, 1.0)
)


# ============================================================================
# Scalar helpers
# ============================================================================

def interpolate(a, fraction, b):
    """Linear interpolation between two numbers."""
    return a + fraction * (b - a)

def clamp(value, low, high):
    return max(low, min(high, value))

def is_in_01(fraction, tol=FRACTION_TOLERANCE):
    """True if fraction is in [0, 1] within tolerance."""
    return -tol <= fraction <= 1.0 + tol

def conditional_divide_fraction(numerator, denominator):
    """numerator/denominator, or None when the quotient would exceed LARGE_FRACTION_RESULT."""
    if abs(denominator) * LARGE_FRACTION_RESULT > abs(numerator):
        return numerator / denominator
    return None

def inverse_interpolate(x0, f0, x1, f1, target_f=0.0):
    """x at which the line through (x0, f0), (x1, f1) reaches target_f, or None if flat."""
    g = conditional_divide_fraction(target_f - f0, f1 - f0)
    if g is None:
        return None
    return interpolate(x0, g, x1)

def is_almost_equal_number(a, b, tol=SMALL_ANGLE_RADIANS):
    """Relative number equality: |a - b| <= tol * (1 + |a| + |b|)."""
    return abs(a - b) <= tol * (1.0 + abs(a) + abs(b))

def is_same_fraction(a, b, tol=1.0e-10):
    return abs(a - b) <= tol


# ============================================================================
# Angles
# ============================================================================

def normalize_radians_to_pi(radians):
    """Shift an angle into (-pi, pi]."""
    radians = math.fmod(radians, 2.0 * math.pi)
    if radians > math.pi:
        radians -= 2.0 * math.pi
    elif radians <= -math.pi:
        radians += 2.0 * math.pi
    return radians

def is_almost_equal_radians_allow_periodic_shift(a, b, tol=1.0e-10):
    return abs(normalize_radians_to_pi(a - b)) <= tol


# ============================================================================
# Small dense solvers
# ============================================================================

def linear_system_2d(ux, vx, uy, vy, cx, cy):
    """
    Solve [ux vx; uy vy] [a; b] = [cx; cy].

    Returns (a, b) or None when the system is singular relative to its scale.
    """
    uv = ux * vy - uy * vx
    scale = max(abs(ux), abs(vx)) * max(abs(uy), abs(vy))
    if abs(uv) <= SMALL_ANGLE_RADIANS * max(scale, 1.0e-300):
        return None
    inv = 1.0 / uv
    return ((vy * cx - vx * cy) * inv, (ux * cy - uy * cx) * inv)


# ============================================================================
# Transform matrices
# ============================================================================

def unpack_args(*args):
    x = y = z = 0

    if len(args) == 3:
        x, y, z = args
    elif len(args) == 1:
        if len(args[0]) == 3:
            x, y, z = args[0]
    else:
        raise ValueError("Invalid number of arguments. Expected either a tuple (x, y, z) or three individual values.")

    return x, y, z

def identity():
    """Return the 4x4 identity matrix as tuple-of-tuples."""
    return _IDENTITY_4x4_TUPLE

def translate_matrix(*args):
    x, y, z = unpack_args(*args)
    return (
        (1.0, 0.0, 0.0, 0.0),
        (0.0, 1.0, 0.0, 0.0),
        (0.0, 0.0, 1.0, 0.0),
        (x, y, z, 1.0)
    )

def scale_matrix(*args):
    x, y, z = unpack_args(*args)
    return (
        (x, 0.0, 0.0, 0.0),
        (0.0, y, 0.0, 0.0),
        (0.0, 0.0, z, 0.0),
        (0.0, 0.0, 0.0, 1.0)
    )

def rot_z_matrix(degrees):
    """Rotation about the z axis, counterclockwise seen from +z."""
    c, s = math.cos(math.radians(degrees)), math.sin(math.radians(degrees))
    return (
        (c, s, 0.0, 0.0),
        (-s, c, 0.0, 0.0),
        (0.0, 0.0, 1.0, 0.0),
        (0.0, 0.0, 0.0, 1.0)
    )

def mat_mul(matrix1, matrix2):
    """Row-major product: apply matrix1 first, then matrix2."""
    return tuple(
        tuple(sum(matrix1[i][k] * matrix2[k][j] for k in range(4)) for j in range(4))
        for i in range(4)
    )

def is_rigid(matrix, tol=1.0e-10):
    """True if the upper 3x3 block is orthonormal with determinant +1."""
    rows = [Vec3(matrix[i][0], matrix[i][1], matrix[i][2]) for i in range(3)]
    for i in range(3):
        if abs(rows[i].length_sq() - 1.0) > tol:
            return False
        for j in range(i + 1, 3):
            if abs(rows[i].dot(rows[j])) > tol:
                return False
    return rows[0].cross(rows[1]).dot(rows[2]) > 0.0
