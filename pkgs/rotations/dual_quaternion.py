"""
Unit dual quaternions for rigid motions (rotation + translation).

DQ = r + ε d with ‖r‖ = 1 and ⟨r, d⟩ = 0 (screw-motion constraint).  Both the
constructor and composition re-impose the constraint.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from pkgs.common import AXIS_EPS, DegenerateAxis
from .quaternion import Quat3D, hamilton_product, _vec3


@dataclass(frozen=True)
class DualQuat:
    real: Quat3D = Quat3D()
    dual: Quat3D = Quat3D(0.0, 0.0, 0.0, 0.0)

    def __post_init__(self):
        r, d = self.real.as_array(), self.dual.as_array()
        n = float(np.linalg.norm(r))
        if n < AXIS_EPS:
            raise DegenerateAxis("dual quaternion with zero real part")
        r, d = r / n, d / n
        d = d - np.dot(r, d) * r
        object.__setattr__(self, "real", Quat3D.from_array(r))
        object.__setattr__(self, "dual", Quat3D.from_array(d))

    @classmethod
    def identity(cls) -> "DualQuat":
        return cls()

    @classmethod
    def from_rotation_translation(cls, rotation: Quat3D, translation: Sequence[float]) -> "DualQuat":
        """d = ½ (0, t) ⊗ r: rotate first, then translate."""
        r = rotation.normalized().as_array()
        t = np.concatenate(([0.0], _vec3(translation, "translation")))
        return cls(Quat3D.from_array(r), Quat3D.from_array(0.5 * hamilton_product(t, r)))

    @classmethod
    def from_translation(cls, translation: Sequence[float]) -> "DualQuat":
        return cls.from_rotation_translation(Quat3D.identity(), translation)

    @property
    def rotation(self) -> Quat3D:
        return self.real

    @property
    def translation(self) -> np.ndarray:
        """t = 2 d ⊗ r*"""
        return 2.0 * hamilton_product(self.dual.as_array(), self.real.conjugate().as_array())[1:]

    def __mul__(self, other: "DualQuat") -> "DualQuat":
        """(r1 + εd1)(r2 + εd2) = r1 r2 + ε(r1 d2 + d1 r2); `other` acts first."""
        if not isinstance(other, DualQuat):
            return NotImplemented
        r1, d1 = self.real.as_array(), self.dual.as_array()
        r2, d2 = other.real.as_array(), other.dual.as_array()
        real = hamilton_product(r1, r2)
        dual = hamilton_product(r1, d2) + hamilton_product(d1, r2)
        return DualQuat(Quat3D.from_array(real), Quat3D.from_array(dual))

    def conjugate(self) -> "DualQuat":
        return DualQuat(self.real.conjugate(), self.dual.conjugate())

    def inverse(self) -> "DualQuat":
        # unit dual quaternion: inverse == quaternion conjugate of both parts
        return self.conjugate()

    def transform_point(self, p: Sequence[float]) -> np.ndarray:
        return self.real.rotate_vector(p) + self.translation

    def transform_vector(self, v: Sequence[float]) -> np.ndarray:
        return self.real.rotate_vector(v)

    def blend(self, other: "DualQuat", t: float) -> "DualQuat":
        """Dual-quaternion linear blending (DLB) along the shorter path."""
        sign = -1.0 if self.real.dot(other.real) < 0.0 else 1.0
        real = (1 - t) * self.real.as_array() + t * sign * other.real.as_array()
        dual = (1 - t) * self.dual.as_array() + t * sign * other.dual.as_array()
        return DualQuat(Quat3D.from_array(real), Quat3D.from_array(dual))

    def to_matrix4(self) -> np.ndarray:
        """Homogeneous 4x4 transform [[R, t], [0, 1]]."""
        m = np.eye(4)
        m[:3, :3] = self.real.to_rotation_matrix()
        m[:3, 3] = self.translation
        return m
