# geometry/primitives.py
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np

from pkgs.rotations import SO4Rotation
from pkgs.tensor_core import Matrix, Vector, Tensor


@dataclass(frozen=True)
class Point4D:
    """Point (or displacement) in R^4, components ordered (x, y, z, w)."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 0.0

    def __post_init__(self):
        for name in ("x", "y", "z", "w"):
            object.__setattr__(self, name, float(getattr(self, name)))

    @classmethod
    def from_array(cls, p: Sequence[float]) -> "Point4D":
        arr = np.asarray(p, dtype=np.float64)
        if arr.shape != (4,):
            raise ValueError(f"Point4D needs 4 components, got shape {arr.shape}")
        return cls(*arr)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z, self.w])

    def to_tensor(self) -> Vector:
        return Vector(self.as_array())

    def __add__(self, other: "Point4D") -> "Point4D":
        return Point4D.from_array(self.as_array() + other.as_array())

    def __sub__(self, other: "Point4D") -> "Point4D":
        return Point4D.from_array(self.as_array() - other.as_array())

    def __mul__(self, k: float) -> "Point4D":
        return Point4D.from_array(float(k) * self.as_array())

    __rmul__ = __mul__

    def dot(self, other: "Point4D") -> float:
        return float(np.dot(self.as_array(), other.as_array()))

    def norm(self) -> float:
        return math.sqrt(self.dot(self))

    def distance(self, other: "Point4D") -> float:
        return (self - other).norm()


PointLike = Union[Point4D, Sequence[float]]


def as_point(p: PointLike) -> Point4D:
    return p if isinstance(p, Point4D) else Point4D.from_array(p)


class Matrix4x4:
    """Immutable 4x4 linear map on (x, y, z, w) column vectors."""

    __slots__ = ("_m",)

    def __init__(self, m=None):
        arr = np.eye(4) if m is None else np.array(m, dtype=np.float64)
        if arr.shape != (4, 4):
            raise ValueError(f"Matrix4x4 needs a 4x4 array, got shape {arr.shape}")
        arr.setflags(write=False)
        self._m = arr

    @classmethod
    def identity(cls) -> "Matrix4x4":
        return cls()

    @classmethod
    def from_rotation(cls, rotation: SO4Rotation) -> "Matrix4x4":
        return cls(rotation.to_matrix())

    def as_array(self) -> np.ndarray:
        return self._m.copy()

    def to_tensor(self) -> Matrix:
        return Tensor(self._m)

    def transform(self, p: PointLike) -> Point4D:
        return Point4D.from_array(self._m @ as_point(p).as_array())

    def __matmul__(self, other: "Matrix4x4") -> "Matrix4x4":
        return Matrix4x4(self._m @ other._m)

    def transpose(self) -> "Matrix4x4":
        return Matrix4x4(self._m.T)

    def determinant(self) -> float:
        return float(np.linalg.det(self._m))

    def __repr__(self):
        return f"Matrix4x4({self._m.tolist()})"
