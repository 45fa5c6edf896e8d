# physics/curvature.py
"""
Christoffel symbols, Riemann and Einstein tensors.

Index conventions:
    dg[c, a, b]     = ∂_c g_ab
    Γ[a, b, c]      = Γ^a_bc
    dΓ[e, a, b, c]  = ∂_e Γ^a_bc
    R[a, b, c, d]   = R^a_bcd = ∂_c Γ^a_db − ∂_d Γ^a_cb + Γ^a_ce Γ^e_db − Γ^a_de Γ^e_cb
    Ric[b, d]       = R^a_bad

Christoffel derivatives are central differences with step h, Richardson-extrapolated
against step 2h (4th order). The difference between the two estimates is kept as the
truncation error estimate of the resulting curvature.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable, Sequence, Tuple, Union

import numpy as np

from pkgs.common import CHRISTOFFEL_FD_STEP, ShapeMismatch
from pkgs.tensor_core import Matrix, Tensor, Tensor3D, Tensor4D, Vector, contract
from .metric import MetricField, MetricTensor, _position

logger = logging.getLogger(__name__)

# relative truncation estimate above which curvature results are flagged
CURVATURE_ERROR_WARN = 1e-6

DerivativeSource = Union[Tensor, np.ndarray, Callable[[], Union[Tensor, np.ndarray]]]


def _metric_derivative(source: DerivativeSource, dim: int) -> Tensor:
    dg = source() if callable(source) else source
    dg = dg if isinstance(dg, Tensor) else Tensor(np.asarray(dg, dtype=np.float64))
    if dg.shape != (dim, dim, dim):
        raise ShapeMismatch(f"metric derivative must have shape {(dim,) * 3}, got {dg.shape}")
    return dg


@dataclass(frozen=True, eq=False)
class ChristoffelSymbols:
    components: Tensor3D

    @classmethod
    def from_metric(cls, metric: MetricTensor, metric_derivative_fn: DerivativeSource) -> "ChristoffelSymbols":
        """
        Γ^a_bc = ½ g^ad (∂_b g_dc + ∂_c g_db − ∂_d g_bc)

        metric_derivative_fn returns dg[c, a, b] = ∂_c g_ab at the same event
        (a Tensor/array is accepted as well). Raises SingularMetric if g is not invertible.
        """
        g_inv = metric.inverse()
        dg = _metric_derivative(metric_derivative_fn, metric.dim)
        # S[d, b, c] = ∂_b g_dc + ∂_c g_db − ∂_d g_bc
        S = dg.permute((1, 0, 2)) + dg.permute((1, 2, 0)) - dg
        return cls(contract(g_inv, 1, S, 0).scale(0.5))

    @classmethod
    def from_field(cls, field: MetricField, position: Sequence[float]) -> "ChristoffelSymbols":
        return cls.from_metric(field.at(position), lambda: field.derivatives(position))

    def get(self, a: int, b: int, c: int) -> float:
        return self.components.get((a, b, c))

    def array(self) -> np.ndarray:
        return self.components.to_numpy()

    def geodesic_acceleration(self, velocity: Sequence[float]) -> np.ndarray:
        """−Γ^a_bc u^b u^c"""
        u = Vector(np.asarray(velocity, dtype=np.float64))
        return -contract(contract(self.components, 2, u, 0), 1, u, 0).to_numpy()

    def is_vanishing(self, tol: float = 1e-12) -> bool:
        return float(np.max(np.abs(self.array()))) <= tol


def christoffel_derivatives(christoffel_at: Callable[[np.ndarray], ChristoffelSymbols],
                            position: Sequence[float],
                            step: float = CHRISTOFFEL_FD_STEP) -> Tuple[Tensor4D, float]:
    """
    dΓ[e, a, b, c] = ∂_e Γ^a_bc with Richardson extrapolation:
        D = (4 D(h) − D(2h)) / 3
    Returns (dΓ, error_estimate) with error_estimate = max |D(h) − D(2h)| / 3.
    """
    if not step > 0:
        raise ValueError(f"finite-difference step must be positive, got {step}")
    x = np.asarray(position, dtype=np.float64)
    dim = x.shape[0]

    def central(e: int, h: float) -> np.ndarray:
        dx = np.zeros(dim)
        dx[e] = h
        return (christoffel_at(x + dx).array() - christoffel_at(x - dx).array()) / (2.0 * h)

    out = np.zeros((dim,) * 4)
    error = 0.0
    for e in range(dim):
        d1, d2 = central(e, step), central(e, 2.0 * step)
        out[e] = (4.0 * d1 - d2) / 3.0
        error = max(error, float(np.max(np.abs(d1 - d2))) / 3.0)
    return Tensor(out), error


@dataclass(frozen=True, eq=False)
class RiemannTensor:
    components: Tensor4D

    @classmethod
    def from_christoffel(cls, christoffel: ChristoffelSymbols, christoffel_derivative: Tensor4D) -> "RiemannTensor":
        G = christoffel.components
        dG = christoffel_derivative
        # X[a, p, q, b] = Γ^a_pe Γ^e_qb
        X = contract(G, 2, G, 0)
        R = (dG.permute((1, 3, 0, 2))      # ∂_c Γ^a_db
             - dG.permute((1, 3, 2, 0))    # ∂_d Γ^a_cb
             + X.permute((0, 3, 1, 2))     # Γ^a_ce Γ^e_db
             - X.permute((0, 3, 2, 1)))    # Γ^a_de Γ^e_cb
        return cls(R)

    def get(self, a: int, b: int, c: int, d: int) -> float:
        return self.components.get((a, b, c, d))

    def ricci(self) -> Matrix:
        return self.components.trace(0, 2)

    def lowered(self, metric: MetricTensor) -> Tensor4D:
        """R_abcd = g_ae R^e_bcd"""
        return contract(metric.components, 1, self.components, 0)

    def kretschmann(self, metric: MetricTensor) -> float:
        """R_abcd R^abcd"""
        g_inv = metric.inverse().to_numpy()
        low = self.lowered(metric).to_numpy()
        up = np.einsum("ae,bf,cg,dh,efgh->abcd", g_inv, g_inv, g_inv, g_inv, low)
        return float(np.sum(low * up))


@dataclass(frozen=True, eq=False)
class EinsteinTensor:
    """
    G_ab = R_ab − ½ R g_ab, together with the numerical context it was computed in:
    the finite-difference step, the Richardson truncation estimate and the metric
    condition number.
    """
    components: Matrix
    ricci: Matrix
    ricci_scalar: float
    riemann: RiemannTensor
    step: float
    error_estimate: float
    condition_number: float

    @classmethod
    def from_christoffel(cls, christoffel_at: Callable[[np.ndarray], ChristoffelSymbols],
                         metric: MetricTensor,
                         position: Sequence[float],
                         step: float = CHRISTOFFEL_FD_STEP) -> "EinsteinTensor":
        x = _position(position, metric.dim)
        christoffel = christoffel_at(x)
        dG, error = christoffel_derivatives(christoffel_at, x, step)
        riemann = RiemannTensor.from_christoffel(christoffel, dG)
        ricci = riemann.ricci()
        g_inv = metric.inverse()
        R = contract(g_inv, 1, ricci, 0).trace(0, 1).get()
        G = ricci - metric.components.scale(0.5 * R)
        cond = metric.condition_number()

        scale = max(1.0, float(np.max(np.abs(dG.to_numpy()))))
        if error > CURVATURE_ERROR_WARN * scale:
            logger.warning(f"Einstein tensor truncation estimate {error:.3e} at step {step:g} "
                           f"(condition number {cond:.3e})")
        logger.debug(f"Einstein tensor at {x.tolist()}: R={R:.6e}, error={error:.3e}")
        return cls(G, ricci, R, riemann, step, error, cond)

    @classmethod
    def from_field(cls, field: MetricField, position: Sequence[float],
                   step: float = CHRISTOFFEL_FD_STEP) -> "EinsteinTensor":
        return cls.from_christoffel(lambda x: ChristoffelSymbols.from_field(field, x),
                                    field.at(position), position, step)

    def get(self, a: int, b: int) -> float:
        return self.components.get((a, b))

    def array(self) -> np.ndarray:
        return self.components.to_numpy()

    def is_vacuum(self, tol: float = 1e-6) -> bool:
        return float(np.max(np.abs(self.array()))) <= tol
