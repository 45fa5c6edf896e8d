# physics/lorentz.py
"""
Lorentz group SO⁺(1,3) acting on four-vectors (t, x, y, z) in units c = 1.

Boosts are built with the standard velocity form
    Λ⁰₀ = γ,  Λ⁰ᵢ = Λⁱ₀ = −γ βᵢ,  Λⁱⱼ = δᵢⱼ + (γ − 1) βᵢ βⱼ / β²
and map event coordinates of the rest frame into the frame moving with velocity β.
"""
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from pkgs.common import MINKOWSKI_TOL, ShapeMismatch, SuperluminalVelocity
from pkgs.rotations import Quat3D
from pkgs.tensor_core import Matrix, Tensor, transform
from .constants import c
from .metric import MetricTensor, Signature

_ETA = MetricTensor.minkowski(Signature.MOSTLY_PLUS)


def _three(v: Sequence[float], what: str) -> np.ndarray:
    arr = np.asarray(v, dtype=np.float64)
    if arr.shape != (3,):
        raise ShapeMismatch(f"{what} must have 3 components, got shape {arr.shape}")
    return arr


def _four(v: Sequence[float]) -> np.ndarray:
    arr = np.asarray(v, dtype=np.float64)
    if arr.shape != (4,):
        raise ShapeMismatch(f"four-vector must have 4 components, got shape {arr.shape}")
    return arr


def minkowski_interval(v: Sequence[float]) -> float:
    """−t² + x² + y² + z²"""
    return _ETA.interval(_four(v))


@dataclass(frozen=True, eq=False)
class LorentzTransform:
    matrix: Matrix

    def __post_init__(self):
        m = self.matrix if isinstance(self.matrix, Tensor) else Tensor(np.asarray(self.matrix, dtype=np.float64))
        if m.shape != (4, 4):
            raise ShapeMismatch(f"Lorentz matrix must be 4x4, got shape {m.shape}")
        object.__setattr__(self, "matrix", m)

    @classmethod
    def identity(cls) -> "LorentzTransform":
        return cls(Tensor.identity(4))

    @classmethod
    def boost(cls, velocity: Sequence[float]) -> "LorentzTransform":
        """Pure boost by a 3-velocity (same units as c). |velocity| >= c raises SuperluminalVelocity."""
        beta = _three(velocity, "velocity") / c
        b2 = float(beta @ beta)
        if not b2 < 1.0:
            raise SuperluminalVelocity(f"|v| = {math.sqrt(b2) * c} is not below c = {c}")
        if b2 == 0.0:
            return cls.identity()
        gamma = 1.0 / math.sqrt(1.0 - b2)
        L = np.eye(4)
        L[0, 0] = gamma
        L[0, 1:] = L[1:, 0] = -gamma * beta
        L[1:, 1:] += (gamma - 1.0) * np.outer(beta, beta) / b2
        return cls(Tensor(L))

    @classmethod
    def from_rapidity(cls, rapidity: float, direction: Sequence[float]) -> "LorentzTransform":
        n = _three(direction, "direction")
        norm = float(np.linalg.norm(n))
        if norm == 0.0:
            if rapidity == 0.0:
                return cls.identity()
            raise ValueError("boost direction must be non-zero")
        return cls.boost(c * math.tanh(rapidity) * n / norm)

    @classmethod
    def rotation(cls, q: Quat3D) -> "LorentzTransform":
        L = np.eye(4)
        L[1:, 1:] = q.normalized().to_rotation_matrix()
        return cls(Tensor(L))

    def as_array(self) -> np.ndarray:
        return self.matrix.to_numpy()

    @property
    def gamma(self) -> float:
        return float(self.matrix.get((0, 0)))

    @property
    def velocity(self) -> np.ndarray:
        """Velocity of the boosted frame as seen from the original one."""
        L = self.as_array()
        return -c * L[0, 1:] / L[0, 0]

    def compose(self, other: "LorentzTransform") -> "LorentzTransform":
        """self ∘ other: apply `other` first."""
        return LorentzTransform(Tensor(self.as_array() @ other.as_array()))

    def __matmul__(self, other: "LorentzTransform") -> "LorentzTransform":
        return self.compose(other)

    def inverse(self) -> "LorentzTransform":
        """Λ⁻¹ = η Λᵀ η"""
        eta = _ETA.array()
        return LorentzTransform(Tensor(eta @ self.as_array().T @ eta))

    def apply(self, four_vector: Sequence[float]) -> np.ndarray:
        return self.as_array() @ _four(four_vector)

    def apply_tensor(self, tensor: Tensor, covariant: Sequence[int] = ()) -> Tensor:
        """Transform every index of a rank-r tensor; indices in `covariant` transform with Λ⁻ᵀ."""
        return transform(tensor, self.matrix, covariant)

    @staticmethod
    def interval(four_vector: Sequence[float]) -> float:
        return minkowski_interval(four_vector)

    def preserves_interval(self, four_vector: Sequence[float], tol: float = MINKOWSKI_TOL) -> bool:
        v = _four(four_vector)
        before, after = minkowski_interval(v), minkowski_interval(self.apply(v))
        return abs(after - before) <= tol * max(1.0, float(v @ v))

    def is_lorentz(self, tol: float = MINKOWSKI_TOL) -> bool:
        """Λᵀ η Λ == η"""
        L, eta = self.as_array(), _ETA.array()
        return bool(np.allclose(L.T @ eta @ L, eta, atol=tol, rtol=0.0))

    def __repr__(self):
        return f"LorentzTransform({self.as_array().round(12).tolist()})"


def gamma_factor(speed: float) -> float:
    beta = abs(speed) / c
    if not beta < 1.0:
        raise SuperluminalVelocity(f"|v| = {abs(speed)} is not below c = {c}")
    return 1.0 / math.sqrt(1.0 - beta * beta)


def velocity_addition(u: Sequence[float], v: Sequence[float]) -> np.ndarray:
    """Velocity of an object moving with u in a frame that itself moves with v."""
    L = LorentzTransform.boost(v).inverse()
    four = L.apply(np.concatenate(([1.0], _three(u, "velocity") / c)))
    return c * four[1:] / four[0]
