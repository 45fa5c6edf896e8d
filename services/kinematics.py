# services/kinematics.py
"""
Host-facing kinematics.

A host application (game loop, browser runtime) hands over plain position/velocity/mass
numbers each frame and gets plain lists back. Nothing here keeps state between calls.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from pkgs.engine_runtime.schemas import KinematicsRequest, KinematicsResult, TensorPayload
from pkgs.tensor_core import Tensor

DEFAULT_DT = 0.016                    # one frame at ~60 Hz
EARTH_GRAVITY = (0.0, -9.81, 0.0)     # m/s², y up


@dataclass(frozen=True)
class PhysicsResult:
    position: List[float]
    velocity: List[float]
    force: List[float]

    def to_dict(self):
        return {'position': self.position, 'velocity': self.velocity, 'force': self.force}


def _vec3(v: Sequence[float], what: str) -> np.ndarray:
    arr = np.asarray(v, dtype=np.float64)
    if arr.shape != (3,):
        raise ValueError(f"{what} must have 3 components, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{what} must be finite, got {arr.tolist()}")
    return arr


def compute_physics(position: Sequence[float], velocity: Sequence[float], mass: float,
                    dt: float = DEFAULT_DT, gravity: Sequence[float] = EARTH_GRAVITY) -> PhysicsResult:
    """
    One semi-implicit Euler step under uniform gravity:
        F = m g,  v' = v + (F/m) dt,  x' = x + v' dt
    """
    if not mass > 0:
        raise ValueError(f"mass must be positive, got {mass}")
    if not dt > 0:
        raise ValueError(f"dt must be positive, got {dt}")
    x = _vec3(position, "position")
    v = _vec3(velocity, "velocity")
    g = _vec3(gravity, "gravity")

    force = mass * g
    v_next = v + force / mass * dt
    x_next = x + v_next * dt
    return PhysicsResult(x_next.tolist(), v_next.tolist(), force.tolist())


def handle_kinematics(request: KinematicsRequest) -> KinematicsResult:
    result = compute_physics(request.position, request.velocity, request.mass, request.dt)
    return KinematicsResult(**result.to_dict())


def tensor_from_payload(payload: TensorPayload) -> Tensor:
    return Tensor.from_flat(payload.shape, payload.values)


def tensor_to_payload(tensor: Tensor) -> TensorPayload:
    shape, values = tensor.to_flat()
    return TensorPayload(shape=shape, values=values)
