# gravfield/physics/vector.py
from __future__ import annotations

import numpy as np

from gravfield.config.settings import ConfigurationError


def _as_components(values, size: int) -> np.ndarray:
    arr = np.array(values, dtype=float)
    if arr.shape != (size,):
        raise ConfigurationError(f"Expected {size} components, got shape {arr.shape}")
    return arr


class Vector3:
    """
    Immutable 3D vector [x, y, z].
    Every operation returns a new Vector3; the backing array is read-only.
    """
    __slots__ = ("_a",)

    def __init__(self, x=0.0, y=0.0, z=0.0):
        a = np.array((x, y, z), dtype=float)
        a.flags.writeable = False
        self._a = a

    @classmethod
    def from_array(cls, values) -> "Vector3":
        a = _as_components(values, 3)
        v = cls.__new__(cls)
        a.flags.writeable = False
        v._a = a
        return v

    @classmethod
    def zeros(cls) -> "Vector3":
        return cls(0.0, 0.0, 0.0)

    @property
    def x(self) -> float:
        return float(self._a[0])

    @property
    def y(self) -> float:
        return float(self._a[1])

    @property
    def z(self) -> float:
        return float(self._a[2])

    @property
    def xyz(self) -> tuple:
        return (self.x, self.y, self.z)

    def to_array(self) -> np.ndarray:
        """Writable copy of the components."""
        return self._a.copy()

    def add(self, other: "Vector3") -> "Vector3":
        return Vector3.from_array(self._a + other._a)

    def sub(self, other: "Vector3") -> "Vector3":
        return Vector3.from_array(self._a - other._a)

    def mul(self, k: float) -> "Vector3":
        return Vector3.from_array(self._a * float(k))

    def div(self, k: float) -> "Vector3":
        return Vector3.from_array(self._a / float(k))

    def dot(self, other: "Vector3") -> float:
        return float(np.dot(self._a, other._a))

    def cross(self, other: "Vector3") -> "Vector3":
        return Vector3.from_array(np.cross(self._a, other._a))

    def norm(self) -> float:
        return float(np.linalg.norm(self._a))

    def dist(self, other: "Vector3") -> float:
        """Euclidean norm of self - other."""
        return float(np.linalg.norm(self._a - other._a))

    def isclose(self, other: "Vector3", rtol: float = 1e-9, atol: float = 0.0) -> bool:
        return bool(np.allclose(self._a, other._a, rtol=rtol, atol=atol))

    __add__ = add
    __sub__ = sub
    __mul__ = mul
    __rmul__ = mul
    __truediv__ = div

    def __neg__(self) -> "Vector3":
        return Vector3.from_array(-self._a)

    def __getitem__(self, i):
        return float(self._a[i])

    def __iter__(self):
        return iter(self.xyz)

    def __len__(self) -> int:
        return 3

    def __eq__(self, other) -> bool:
        if not isinstance(other, Vector3):
            return NotImplemented
        return bool(np.array_equal(self._a, other._a))

    def __hash__(self) -> int:
        return hash(self.xyz)

    def __repr__(self) -> str:
        return f"Vector3({self.x!r}, {self.y!r}, {self.z!r})"


Vector3.ex = Vector3(1.0, 0.0, 0.0)
Vector3.ey = Vector3(0.0, 1.0, 0.0)
Vector3.ez = Vector3(0.0, 0.0, 1.0)


class Vector6:
    """
    State vector for orbital motion in 3D.
    [x, y, z, vx, vy, vz]

    The upper half holds position, the lower half velocity (or acceleration
    while a solver combines stages). Both halves can be read and replaced
    independently; arithmetic returns new vectors.
    """
    __slots__ = ("_a",)

    def __init__(self, upper=None, lower=None):
        a = np.zeros(6, dtype=float)
        if upper is not None:
            a[:3] = _vec3_array(upper)
        if lower is not None:
            a[3:] = _vec3_array(lower)
        self._a = a

    @classmethod
    def from_vectors(cls, upper, lower) -> "Vector6":
        return cls(upper, lower)

    @classmethod
    def from_array(cls, values) -> "Vector6":
        v = cls.__new__(cls)
        v._a = _as_components(values, 6)
        return v

    @classmethod
    def zeros(cls) -> "Vector6":
        return cls()

    @property
    def upper(self) -> Vector3:
        return Vector3.from_array(self._a[:3])

    @upper.setter
    def upper(self, value) -> None:
        self._a[:3] = _vec3_array(value)

    @property
    def lower(self) -> Vector3:
        return Vector3.from_array(self._a[3:])

    @lower.setter
    def lower(self, value) -> None:
        self._a[3:] = _vec3_array(value)

    def to_array(self) -> np.ndarray:
        return self._a.copy()

    def copy(self) -> "Vector6":
        return Vector6.from_array(self._a)

    def add(self, other: "Vector6") -> "Vector6":
        return Vector6.from_array(self._a + other._a)

    def sub(self, other: "Vector6") -> "Vector6":
        return Vector6.from_array(self._a - other._a)

    def mul(self, k: float) -> "Vector6":
        return Vector6.from_array(self._a * float(k))

    __add__ = add
    __sub__ = sub
    __mul__ = mul
    __rmul__ = mul

    def __getitem__(self, i):
        return float(self._a[i])

    def __len__(self) -> int:
        return 6

    def __eq__(self, other) -> bool:
        if not isinstance(other, Vector6):
            return NotImplemented
        return bool(np.array_equal(self._a, other._a))

    __hash__ = None

    def __repr__(self) -> str:
        return f"Vector6(upper={self.upper!r}, lower={self.lower!r})"


def _vec3_array(value) -> np.ndarray:
    if isinstance(value, Vector3):
        return value._a
    return _as_components(value, 3)
