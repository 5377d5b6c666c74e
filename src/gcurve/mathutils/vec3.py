"""
Pure Python 3D vector math used for points and vectors throughout gcurve.

Vec3 is a lightweight value type with arithmetic operators (+, -, *, /),
indexing, and the handful of affine helpers curve evaluation needs
(interpolation, projection fractions, toleranced equality).

For 3-element vectors pure Python beats numpy arrays because it avoids array
creation overhead; numpy is reserved for the small dense solves in arc frames.
"""
import math


class Vec3:
    """
    A lightweight 3D vector class that supports arithmetic operators.

    Stores components directly as attributes for fast access.
    Supports indexing like a tuple/list for compatibility.
    """
    __slots__ = ('x', 'y', 'z')

    def __init__(self, x=0.0, y=0.0, z=0.0):
        # Using try/except is faster than isinstance checks for the common case
        try:
            self.x = float(x)
            self.y = float(y)
            self.z = float(z)
        except TypeError:
            # x is a sequence (tuple, list, array, Vec3)
            self.x = float(x[0])
            self.y = float(x[1])
            self.z = float(x[2]) if len(x) > 2 else 0.0

    def __getitem__(self, i):
        if i == 0: return self.x
        if i == 1: return self.y
        if i == 2: return self.z
        raise IndexError(f"Vec3 index {i} out of range")

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z

    def __len__(self):
        return 3

    def __repr__(self):
        return f"Vec3({self.x}, {self.y}, {self.z})"

    def __eq__(self, other):
        try:
            return self.x == other[0] and self.y == other[1] and self.z == other[2]
        except (TypeError, IndexError):
            return NotImplemented

    __hash__ = None

    def __add__(self, other):
        try:
            return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)
        except AttributeError:
            return Vec3(self.x + other[0], self.y + other[1], self.z + other[2])

    def __radd__(self, other):
        return Vec3(self.x + other[0], self.y + other[1], self.z + other[2])

    def __sub__(self, other):
        try:
            return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)
        except AttributeError:
            return Vec3(self.x - other[0], self.y - other[1], self.z - other[2])

    def __rsub__(self, other):
        return Vec3(other[0] - self.x, other[1] - self.y, other[2] - self.z)

    def __mul__(self, scalar):
        return Vec3(self.x * scalar, self.y * scalar, self.z * scalar)

    def __rmul__(self, scalar):
        return Vec3(self.x * scalar, self.y * scalar, self.z * scalar)

    def __truediv__(self, scalar):
        inv = 1.0 / scalar
        return Vec3(self.x * inv, self.y * inv, self.z * inv)

    def __neg__(self):
        return Vec3(-self.x, -self.y, -self.z)

    def dot(self, other):
        """Dot product."""
        return self.x * other[0] + self.y * other[1] + self.z * other[2]

    def cross(self, other):
        """Cross product."""
        return Vec3(
            self.y * other[2] - self.z * other[1],
            self.z * other[0] - self.x * other[2],
            self.x * other[1] - self.y * other[0]
        )

    def length_sq(self):
        """Squared length (avoids sqrt)."""
        return self.x * self.x + self.y * self.y + self.z * self.z

    def length(self):
        """Vector length/magnitude."""
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalized(self):
        """Return normalized copy, or the zero vector for a zero-length input."""
        mag = self.length()
        if mag < 1e-10:
            return Vec3(0.0, 0.0, 0.0)
        inv_mag = 1.0 / mag
        return Vec3(self.x * inv_mag, self.y * inv_mag, self.z * inv_mag)

    def scale_to_length(self, length):
        """Return a copy with the given length, or None for a zero vector."""
        mag = self.length()
        if mag < 1e-300:
            return None
        return self * (length / mag)

    def unit_cross(self, other):
        """Normalized cross product, or None when the vectors are parallel."""
        c = self.cross(other)
        mag = c.length()
        if mag < 1e-300:
            return None
        return c / mag

    def distance(self, other):
        """Distance to another point."""
        dx, dy, dz = self.x - other[0], self.y - other[1], self.z - other[2]
        return math.sqrt(dx * dx + dy * dy + dz * dz)

    def interpolate(self, fraction, other):
        """Point at `fraction` along the line from self to other (0 -> self, 1 -> other)."""
        return Vec3(
            self.x + fraction * (other[0] - self.x),
            self.y + fraction * (other[1] - self.y),
            self.z + fraction * (other[2] - self.z)
        )

    def plus_scaled(self, vector, scale):
        """self + vector * scale."""
        return Vec3(self.x + vector[0] * scale, self.y + vector[1] * scale, self.z + vector[2] * scale)

    def fraction_of_projection_to_line(self, p0, p1, default_fraction=0.0):
        """Fraction of this point's projection onto the unbounded line p0->p1."""
        ux, uy, uz = p1[0] - p0[0], p1[1] - p0[1], p1[2] - p0[2]
        uu = ux * ux + uy * uy + uz * uz
        if uu < 1e-300:
            return default_fraction
        return ((self.x - p0[0]) * ux + (self.y - p0[1]) * uy + (self.z - p0[2]) * uz) / uu

    def is_almost_equal(self, other, tol=1e-6):
        """Toleranced point equality (metric distance)."""
        return self.distance(other) <= tol

    def to_list(self):
        """Convert to list."""
        return [self.x, self.y, self.z]


# ============================================================================
# Matrix Operations (4x4)
# ============================================================================

def transform_point(point, matrix):
    """Transform a 3D point by a row-major 4x4 matrix (translation in the bottom row). Returns Vec3."""
    x, y, z = point[0], point[1], point[2]
    w = x * matrix[0][3] + y * matrix[1][3] + z * matrix[2][3] + matrix[3][3]
    if abs(w) > 1e-10:
        inv_w = 1.0 / w
        return Vec3(
            (x * matrix[0][0] + y * matrix[1][0] + z * matrix[2][0] + matrix[3][0]) * inv_w,
            (x * matrix[0][1] + y * matrix[1][1] + z * matrix[2][1] + matrix[3][1]) * inv_w,
            (x * matrix[0][2] + y * matrix[1][2] + z * matrix[2][2] + matrix[3][2]) * inv_w
        )
    return Vec3(0.0, 0.0, 0.0)


def transform_vector(vector, matrix):
    """Apply the linear (upper 3x3) part of a row-major 4x4 matrix to a vector. Returns Vec3."""
    x, y, z = vector[0], vector[1], vector[2]
    return Vec3(
        x * matrix[0][0] + y * matrix[1][0] + z * matrix[2][0],
        x * matrix[0][1] + y * matrix[1][1] + z * matrix[2][1],
        x * matrix[0][2] + y * matrix[1][2] + z * matrix[2][2]
    )

