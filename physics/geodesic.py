# physics/geodesic.py
from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Sequence, Tuple, Union

import numpy as np

from pkgs.common import GEODESIC_DRIFT_TOL, GEODESIC_RK_ORDER, NonPhysicalStep, ShapeMismatch, SuperluminalVelocity
from .curvature import ChristoffelSymbols
from .metric import MetricField, MetricTensor

logger = logging.getLogger(__name__)

Vec4 = Tuple[float, float, float, float]


def _vec(v: Sequence[float], n: int, what: str) -> Tuple[float, ...]:
    arr = np.asarray(v, dtype=np.float64)
    if arr.shape != (n,):
        raise ShapeMismatch(f"{what} must have {n} components, got shape {arr.shape}")
    return tuple(float(c) for c in arr)


@dataclass(frozen=True)
class ParticleState:
    """
    Event x^a and four-velocity u^a = dx^a/dτ of a free particle, plus the affine
    parameter (proper time for massive particles) accumulated so far.
    """
    position: Vec4
    velocity: Vec4
    proper_time: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "position", _vec(self.position, 4, "position"))
        object.__setattr__(self, "velocity", _vec(self.velocity, 4, "velocity"))
        object.__setattr__(self, "proper_time", float(self.proper_time))

    @property
    def x(self) -> np.ndarray:
        return np.array(self.position)

    @property
    def u(self) -> np.ndarray:
        return np.array(self.velocity)

    @classmethod
    def timelike(cls, metric: Union[MetricField, MetricTensor], position: Sequence[float],
                 coordinate_velocity: Sequence[float] = (0.0, 0.0, 0.0)) -> "ParticleState":
        """
        Normalised four-velocity u = u^0 (1, v) with g(u, u) = −1 (mostly plus) from the
        coordinate velocity v = dx^i/dt. Raises SuperluminalVelocity when (1, v) is not
        timelike at `position`.
        """
        x = np.array(_vec(position, 4, "position"))
        g = metric.at(x) if isinstance(metric, MetricField) else metric
        k = np.concatenate(([1.0], _vec(coordinate_velocity, 3, "coordinate velocity")))
        if g.classify(k) != "timelike":
            raise SuperluminalVelocity(f"coordinate velocity {k[1:].tolist()} is not inside the light cone at {x.tolist()}")
        norm = abs(g.interval(k))
        return cls(x, k / math.sqrt(norm))

    @classmethod
    def null(cls, metric: Union[MetricField, MetricTensor], position: Sequence[float],
             direction: Sequence[float], energy: float = 1.0) -> "ParticleState":
        """Photon with u^0 = energy moving along the spatial `direction`."""
        x = np.array(_vec(position, 4, "position"))
        g = (metric.at(x) if isinstance(metric, MetricField) else metric).array()
        d = np.array(_vec(direction, 3, "direction"))
        if not np.any(d):
            raise ValueError("photon direction must be non-zero")
        # g00 + 2λ g0i d^i + λ² g_ij d^i d^j = 0, take the future-pointing root λ > 0
        a = float(d @ g[1:, 1:] @ d)
        b = 2.0 * float(g[0, 1:] @ d)
        c0 = float(g[0, 0])
        disc = b * b - 4.0 * a * c0
        if a == 0.0 or disc < 0.0:
            raise ValueError(f"no null direction along {d.tolist()} at {x.tolist()}")
        lam = (-b + math.sqrt(disc)) / (2.0 * a)
        if lam <= 0:
            raise ValueError(f"no future-pointing null direction along {d.tolist()} at {x.tolist()}")
        return cls(x, energy * np.concatenate(([1.0], lam * d)))


class GeodesicIntegrator:
    """
    Classical 4th-order Runge–Kutta integration of
        d²x^a/dτ² = −Γ^a_bc (dx^b/dτ)(dx^c/dτ)
    with Christoffel symbols evaluated from the metric field at every stage.

    The integrator itself is stateless; `advance` is a convenience that steps a
    ParticleState owned by this instance.
    """

    ORDER = GEODESIC_RK_ORDER

    def __init__(self, field: MetricField, state: Optional[ParticleState] = None):
        self.field = field
        self.state = state

    def acceleration(self, position: np.ndarray, velocity: np.ndarray) -> np.ndarray:
        return ChristoffelSymbols.from_field(self.field, position).geodesic_acceleration(velocity)

    def _rhs(self, y: np.ndarray) -> np.ndarray:
        return np.concatenate((y[4:], self.acceleration(y[:4], y[4:])))

    def _check(self, state: ParticleState) -> ParticleState:
        if not np.all(np.isfinite(state.position + state.velocity)):
            raise NonPhysicalStep(f"integration produced non-finite values at τ={state.proper_time}")
        if self.field.at(state.position).classify(state.velocity, GEODESIC_DRIFT_TOL) == "spacelike":
            raise NonPhysicalStep(f"four-velocity {list(state.velocity)} became spacelike at τ={state.proper_time}")
        return state

    def step(self, state: ParticleState, dt: float) -> ParticleState:
        if not dt > 0 or not math.isfinite(dt):
            raise NonPhysicalStep(f"dt must be positive and finite, got {dt}")
        y = np.concatenate((state.position, state.velocity))
        k1 = self._rhs(y)
        k2 = self._rhs(y + 0.5 * dt * k1)
        k3 = self._rhs(y + 0.5 * dt * k2)
        k4 = self._rhs(y + dt * k3)
        y_next = y + (dt / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)
        return self._check(ParticleState(y_next[:4], y_next[4:], state.proper_time + dt))

    def advance(self, dt: float) -> ParticleState:
        if self.state is None:
            raise ValueError("integrator has no particle state to advance")
        self.state = self.step(self.state, dt)
        return self.state

    def trajectory(self, state: ParticleState, dt: float, steps: int) -> Iterator[ParticleState]:
        """Yield the state after each of `steps` steps (the initial state is not yielded)."""
        if steps < 0:
            raise ValueError(f"steps must be non-negative, got {steps}")
        for _ in range(steps):
            state = self.step(state, dt)
            yield state

    def integrate(self, state: ParticleState, dt: float, steps: int,
                  callback: Optional[Callable[[int, ParticleState], None]] = None) -> ParticleState:
        for i, state in enumerate(self.trajectory(state, dt, steps), start=1):
            if callback is not None:
                callback(i, state)
        logger.debug(f"Integrated {steps} geodesic steps of dt={dt}; τ={state.proper_time:.6g}")
        return state
