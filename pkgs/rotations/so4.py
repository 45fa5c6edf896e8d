"""
SO(4) rotations as left/right isoclinic quaternion pairs.

A 4-vector (x, y, z, w) is identified with the quaternion w + xi + yj + zk and
rotated by p -> L ⊗ p ⊗ R with unit L, R.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

import numpy as np

from .quaternion import Quat3D, hamilton_product

# plane -> (left, right) generator; the first axis rotates toward the second
_PLANES: Dict[str, Tuple[Tuple[int, float], bool]] = {
    # (quaternion component, sign), right == conj(left) ?
    "xy": ((3, +1.0), True),
    "xz": ((2, -1.0), True),
    "yz": ((1, +1.0), True),
    "xw": ((1, -1.0), False),
    "yw": ((2, -1.0), False),
    "zw": ((3, -1.0), False),
}


def _vec4(p: Sequence[float]) -> np.ndarray:
    arr = np.asarray(p, dtype=np.float64)
    if arr.shape != (4,):
        raise ValueError(f"4-vector must have 4 components, got shape {arr.shape}")
    return arr


@dataclass(frozen=True)
class SO4Rotation:
    left: Quat3D = Quat3D()
    right: Quat3D = Quat3D()

    def __post_init__(self):
        object.__setattr__(self, "left", self.left.normalized())
        object.__setattr__(self, "right", self.right.normalized())

    @classmethod
    def identity(cls) -> "SO4Rotation":
        return cls(Quat3D.identity(), Quat3D.identity())

    @classmethod
    def from_plane(cls, plane: str, angle: float) -> "SO4Rotation":
        """Simple rotation by `angle` in a coordinate plane ("xy", "xz", "yz", "xw", "yw", "zw")."""
        try:
            (component, sign), conjugate_right = _PLANES[plane.lower()]
        except KeyError:
            raise ValueError(f"unknown rotation plane {plane!r}; expected one of {sorted(_PLANES)}") from None
        q = np.zeros(4)
        q[0] = math.cos(0.5 * angle)
        q[component] = sign * math.sin(0.5 * angle)
        left = Quat3D.from_array(q)
        right = left.conjugate() if conjugate_right else left
        return cls(left, right)

    def apply(self, p: Sequence[float]) -> np.ndarray:
        x, y, z, w = _vec4(p)
        r = hamilton_product(hamilton_product(self.left.as_array(), np.array([w, x, y, z])),
                             self.right.as_array())
        return np.array([r[1], r[2], r[3], r[0]])

    def compose(self, other: "SO4Rotation") -> "SO4Rotation":
        """self ∘ other: apply `other` first.  L = L_a L_b, R = R_b R_a."""
        return SO4Rotation(self.left * other.left, other.right * self.right)

    def __matmul__(self, other: "SO4Rotation") -> "SO4Rotation":
        return self.compose(other)

    def inverse(self) -> "SO4Rotation":
        return SO4Rotation(self.left.conjugate(), self.right.conjugate())

    def to_matrix(self) -> np.ndarray:
        """4x4 orthogonal matrix acting on column vectors (x, y, z, w)."""
        return np.column_stack([self.apply(e) for e in np.eye(4)])
