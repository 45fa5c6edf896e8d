# physics/metric.py
"""
Metric tensors and metric fields.

MetricTensor is the metric at one event: a symmetric rank-2 Tensor plus signature and
coordinate tags.  A MetricField is the metric as a function of position; it also
supplies the coordinate derivatives dg[c, a, b] = ∂_c g_ab that curvature needs.
Coordinates are always ordered with time first (x^0 = ct, c = 1).
"""
from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence, Union

import numpy as np
import torch

from pkgs.common import (
    METRIC_FD_STEP, METRIC_RCOND_TOL, MINKOWSKI_TOL, SYMMETRY_TOL,
    AsymmetricMetric, RankMismatch, ShapeMismatch, SingularMetric,
)
from pkgs.tensor_core import Matrix, Tensor, Tensor3D, Vector, contract, transform

logger = logging.getLogger(__name__)

# warn when a metric is invertible but close to the METRIC_RCOND_TOL limit
_ILL_CONDITIONED = 1e-4 / METRIC_RCOND_TOL


class Signature(Enum):
    MOSTLY_PLUS = "-+++"
    MOSTLY_MINUS = "+---"

    @property
    def time_sign(self) -> float:
        return -1.0 if self is Signature.MOSTLY_PLUS else 1.0


class CoordinateSystem(Enum):
    CARTESIAN = "cartesian"                    # (t, x, y, z)
    SPHERICAL = "spherical"                    # (t, r, θ, φ)
    COMOVING_ISOTROPIC = "comoving_isotropic"  # (t, x, y, z) comoving, conformally flat slices


def _position(x: Sequence[float], dim: int = 4) -> np.ndarray:
    arr = np.asarray(x, dtype=np.float64)
    if arr.shape != (dim,):
        raise ShapeMismatch(f"position must have {dim} components, got shape {arr.shape}")
    return arr


@dataclass(frozen=True, eq=False)
class MetricTensor:
    components: Matrix
    signature: Signature = Signature.MOSTLY_PLUS
    coordinates: CoordinateSystem = CoordinateSystem.CARTESIAN

    def __post_init__(self):
        g = self.components if isinstance(self.components, Tensor) else Tensor(self.components)
        if g.rank != 2:
            raise RankMismatch(f"metric must be rank 2, got rank {g.rank}")
        if g.shape[0] != g.shape[1]:
            raise ShapeMismatch(f"metric must be square, got shape {g.shape}")
        if not g.is_symmetric(0, 1, SYMMETRY_TOL):
            raise AsymmetricMetric(f"metric components are not symmetric within {SYMMETRY_TOL:.0e}")
        object.__setattr__(self, "components", g)

    # --- standard metrics ---
    @classmethod
    def minkowski(cls, signature: Signature = Signature.MOSTLY_PLUS, dim: int = 4) -> "MetricTensor":
        eta = np.eye(dim)
        eta[0, 0] = -1.0
        return cls(Tensor(-signature.time_sign * eta), signature, CoordinateSystem.CARTESIAN)

    @classmethod
    def flrw(cls, scale_factor: float, curvature_k: float = 0.0,
             position: Optional[Sequence[float]] = None,
             signature: Signature = Signature.MOSTLY_PLUS) -> "MetricTensor":
        """
        FLRW in isotropic comoving coordinates:
            ds² = -dt² + a² (dx² + dy² + dz²) / (1 + k r²/4)²
        Evaluated at `position` (default: the spatial origin, where g_ij = a² δ_ij).
        """
        if not (math.isfinite(scale_factor) and scale_factor > 0):
            raise SingularMetric(f"scale factor must be positive and finite, got {scale_factor}")
        x = np.zeros(4) if position is None else _position(position)
        conformal = 1.0 + 0.25 * curvature_k * float(np.dot(x[1:], x[1:]))
        if conformal <= METRIC_RCOND_TOL:
            raise SingularMetric(f"FLRW chart with k={curvature_k} ends before r={np.linalg.norm(x[1:]):.4g}")
        g = np.diag([-1.0] + [(scale_factor / conformal) ** 2] * 3)
        return cls(Tensor(-signature.time_sign * g), signature, CoordinateSystem.COMOVING_ISOTROPIC)

    @classmethod
    def schwarzschild(cls, mass: float, position: Sequence[float],
                      signature: Signature = Signature.MOSTLY_PLUS) -> "MetricTensor":
        """ds² = -(1-2M/r) dt² + dr²/(1-2M/r) + r² dΩ²  at (t, r, θ, φ)."""
        if mass < 0:
            raise ValueError(f"mass must be non-negative, got {mass}")
        _, r, theta, _ = _position(position)
        if r <= 0:
            raise ValueError(f"radius must be positive, got {r}")
        f = 1.0 - 2.0 * mass / r
        if abs(f) <= METRIC_RCOND_TOL:
            raise SingularMetric(f"r={r} is on the horizon r=2M={2.0 * mass}")
        g = np.diag([-f, 1.0 / f, r * r, (r * math.sin(theta)) ** 2])
        return cls(Tensor(-signature.time_sign * g), signature, CoordinateSystem.SPHERICAL)

    # --- algebra ---
    @property
    def dim(self) -> int:
        return self.components.shape[0]

    def array(self) -> np.ndarray:
        return self.components.to_numpy()

    def condition_number(self) -> float:
        s = torch.linalg.svdvals(self.components.data)
        smin = s.min().item()
        return math.inf if smin == 0.0 else s.max().item() / smin

    def inverse(self) -> Matrix:
        """g^ab.  Fails with SingularMetric when σ_min/σ_max < METRIC_RCOND_TOL."""
        cond = self.condition_number()
        if not cond * METRIC_RCOND_TOL < 1.0:
            raise SingularMetric(f"metric condition number {cond:.3e} exceeds {1.0 / METRIC_RCOND_TOL:.0e}")
        if cond > _ILL_CONDITIONED:
            logger.warning(f"Metric is ill-conditioned (cond={cond:.3e}); derived curvature may lose precision")
        return Tensor(torch.linalg.inv(self.components.data))

    def determinant(self) -> float:
        return float(torch.linalg.det(self.components.data).item())

    def interval(self, v: Sequence[float], w: Optional[Sequence[float]] = None) -> float:
        """g_ab v^a w^b (w defaults to v)."""
        v = Vector(_position(v, self.dim))
        w = v if w is None else Vector(_position(w, self.dim))
        return contract(contract(self.components, 1, w, 0), 0, v, 0).get()

    def lower(self, v: Sequence[float]) -> np.ndarray:
        return contract(self.components, 1, Vector(_position(v, self.dim)), 0).to_numpy()

    def raise_index(self, covector: Sequence[float]) -> np.ndarray:
        return contract(self.inverse(), 1, Vector(_position(covector, self.dim)), 0).to_numpy()

    def classify(self, v: Sequence[float], tol: float = MINKOWSKI_TOL) -> str:
        """'timelike', 'spacelike' or 'null' (relative to Σ|g_ab v^a v^b|)."""
        v = _position(v, self.dim)
        scale = float(np.abs(v) @ np.abs(self.array()) @ np.abs(v))
        s = self.interval(v)
        if abs(s) <= tol * max(scale, np.finfo(float).tiny):
            return "null"
        return "timelike" if s * self.signature.time_sign > 0 else "spacelike"

    def transform(self, basis) -> "MetricTensor":
        """Metric in coordinates x' = B x:  g' = B⁻ᵀ g B⁻¹."""
        return MetricTensor(transform(self.components, basis, covariant=(0, 1)), self.signature, self.coordinates)

    def with_signature(self, signature: Signature) -> "MetricTensor":
        if signature is self.signature:
            return self
        return MetricTensor(self.components.scale(-1.0), signature, self.coordinates)

    def __repr__(self):
        return f"MetricTensor({self.signature.value}, {self.coordinates.value}, {self.array().tolist()})"


class MetricField:
    """Metric as a function of position; derivatives by central differences."""

    signature: Signature = Signature.MOSTLY_PLUS
    coordinates: CoordinateSystem = CoordinateSystem.CARTESIAN
    dim: int = 4

    def at(self, position: Sequence[float]) -> MetricTensor:
        raise NotImplementedError

    def __call__(self, position: Sequence[float]) -> MetricTensor:
        return self.at(position)

    def derivatives(self, position: Sequence[float], step: float = METRIC_FD_STEP) -> Tensor3D:
        """dg[c, a, b] = ∂_c g_ab, second-order central differences with the given step."""
        x = _position(position, self.dim)
        out = np.zeros((self.dim, self.dim, self.dim))
        for c in range(self.dim):
            e = np.zeros(self.dim)
            e[c] = step
            out[c] = (self.at(x + e).array() - self.at(x - e).array()) / (2.0 * step)
        return Tensor(out)


class MinkowskiMetric(MetricField):
    def __init__(self, signature: Signature = Signature.MOSTLY_PLUS):
        self.signature = signature
        self._eta = MetricTensor.minkowski(signature)

    def at(self, position: Sequence[float]) -> MetricTensor:
        _position(position, self.dim)
        return self._eta

    def derivatives(self, position: Sequence[float], step: float = METRIC_FD_STEP) -> Tensor3D:
        return Tensor.zeros((self.dim,) * 3)

    def interval(self, v: Sequence[float]) -> float:
        return self._eta.interval(v)


class FLRWMetric(MetricField):
    """Spatially homogeneous, isotropic metric with scale factor a(t) (constant or callable)."""

    coordinates = CoordinateSystem.COMOVING_ISOTROPIC

    def __init__(self, scale_factor: Union[float, Callable[[float], float]] = 1.0,
                 curvature_k: float = 0.0,
                 signature: Signature = Signature.MOSTLY_PLUS):
        self._a = scale_factor if callable(scale_factor) else (lambda t, a0=float(scale_factor): a0)
        self.curvature_k = float(curvature_k)
        self.signature = signature

    def scale_factor(self, t: float) -> float:
        return float(self._a(t))

    def hubble_rate(self, t: float, step: float = METRIC_FD_STEP) -> float:
        """H = ȧ/a"""
        return (self.scale_factor(t + step) - self.scale_factor(t - step)) / (2.0 * step * self.scale_factor(t))

    def at(self, position: Sequence[float]) -> MetricTensor:
        x = _position(position, self.dim)
        return MetricTensor.flrw(self.scale_factor(x[0]), self.curvature_k, x, self.signature)


class SchwarzschildMetric(MetricField):
    """Static vacuum metric of mass M in Schwarzschild coordinates, analytic derivatives."""

    coordinates = CoordinateSystem.SPHERICAL

    def __init__(self, mass: float = 1.0, signature: Signature = Signature.MOSTLY_PLUS):
        if mass < 0:
            raise ValueError(f"mass must be non-negative, got {mass}")
        self.mass = float(mass)
        self.signature = signature

    @property
    def horizon_radius(self) -> float:
        return 2.0 * self.mass

    def at(self, position: Sequence[float]) -> MetricTensor:
        return MetricTensor.schwarzschild(self.mass, position, self.signature)

    def derivatives(self, position: Sequence[float], step: float = METRIC_FD_STEP) -> Tensor3D:
        _, r, theta, _ = _position(position)
        M = self.mass
        f = 1.0 - 2.0 * M / r
        if abs(f) <= METRIC_RCOND_TOL:
            raise SingularMetric(f"r={r} is on the horizon r=2M={2.0 * M}")
        df = 2.0 * M / (r * r)
        s, c = math.sin(theta), math.cos(theta)
        dg = np.zeros((4, 4, 4))
        dg[1, 0, 0] = -df
        dg[1, 1, 1] = -df / (f * f)
        dg[1, 2, 2] = 2.0 * r
        dg[1, 3, 3] = 2.0 * r * s * s
        dg[2, 3, 3] = 2.0 * r * r * s * c
        return Tensor(-self.signature.time_sign * dg)
