import math


class Vector3:
    """An immutable 3D vector. Operations always return new vectors."""
    __slots__ = ("_x", "_y", "_z")

    def __init__(self, x=0.0, y=0.0, z=0.0):
        self._x = float(x)
        self._y = float(y)
        self._z = float(z)

    @property
    def x(self):
        return self._x

    @property
    def y(self):
        return self._y

    @property
    def z(self):
        return self._z

    @classmethod
    def zero(cls):
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def from_iterable(cls, values):
        values = list(values)
        if not 2 <= len(values) <= 3:
            raise ValueError(f"Expected 2 or 3 components, got {len(values)}")
        return cls(*values)

    def __add__(self, other):
        return Vector3(self._x + other.x, self._y + other.y, self._z + other.z)

    def __sub__(self, other):
        return Vector3(self._x - other.x, self._y - other.y, self._z - other.z)

    def __mul__(self, scalar):
        return Vector3(self._x * scalar, self._y * scalar, self._z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar):
        if scalar == 0:
            return Vector3.zero()
        return Vector3(self._x / scalar, self._y / scalar, self._z / scalar)

    def __neg__(self):
        return Vector3(-self._x, -self._y, -self._z)

    def __iter__(self):
        yield self._x
        yield self._y
        yield self._z

    def __eq__(self, other):
        if not isinstance(other, Vector3):
            return NotImplemented
        return (self._x, self._y, self._z) == (other.x, other.y, other.z)

    def __hash__(self):
        return hash((self._x, self._y, self._z))

    def __setattr__(self, name, value):
        if name in Vector3.__slots__ and not hasattr(self, name):
            object.__setattr__(self, name, value)
        else:
            raise AttributeError("Vector3 is immutable")

    def dot(self, other):
        return self._x * other.x + self._y * other.y + self._z * other.z

    def length(self):
        return math.sqrt(self._x**2 + self._y**2 + self._z**2)

    def normalize(self):
        # A zero vector has no direction; hand back zero instead of NaN.
        return self / self.length()

    def distance_to(self, other):
        return (other - self).length()

    def direction_to(self, other):
        return (other - self).normalize()

    def clamp(self, low, high):
        return Vector3(min(max(self._x, low), high),
                       min(max(self._y, low), high),
                       min(max(self._z, low), high))

    @property
    def rotation(self):
        return math.atan2(self._y, self._x)

    def __repr__(self):
        return f"Vector3({self._x}, {self._y}, {self._z})"
