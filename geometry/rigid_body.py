# geometry/rigid_body.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping, Tuple, Union

import numpy as np

from pkgs.rotations import SO4Rotation
from .primitives import Matrix4x4, Point4D, PointLike, as_point
from .polytopes import Polytope4D

Vec4 = Tuple[float, float, float, float]


def _vec4(v) -> Vec4:
    arr = np.asarray(v, dtype=np.float64)
    if arr.shape != (4,):
        raise ValueError(f"expected 4 components, got shape {arr.shape}")
    return tuple(float(c) for c in arr)


@dataclass(frozen=True)
class RigidBody4D:
    """
    Pose (rotation, then translation) and optional velocities of a 4D body.
    Applying it never mutates a polytope; a transformed snapshot is returned.
    angular_velocity maps a coordinate plane ("xy", ..., "zw") to rad per unit time.
    """
    rotation: SO4Rotation = SO4Rotation()
    translation: Vec4 = (0.0, 0.0, 0.0, 0.0)
    velocity: Vec4 = (0.0, 0.0, 0.0, 0.0)
    angular_velocity: Union[Mapping[str, float], Tuple[Tuple[str, float], ...]] = ()

    def __post_init__(self):
        object.__setattr__(self, "translation", _vec4(self.translation))
        object.__setattr__(self, "velocity", _vec4(self.velocity))
        rates = dict(self.angular_velocity)
        object.__setattr__(self, "angular_velocity", tuple(sorted((k.lower(), float(v)) for k, v in rates.items())))

    def transform_point(self, p: PointLike) -> Point4D:
        return Point4D.from_array(self.rotation.apply(as_point(p).as_array()) + np.array(self.translation))

    def apply(self, polytope: Polytope4D) -> Polytope4D:
        return polytope.with_vertices([self.transform_point(v) for v in polytope.vertices])

    def compose(self, other: "RigidBody4D") -> "RigidBody4D":
        """Pose of `self` applied after `other`; velocities of `self` are kept."""
        t = self.rotation.apply(other.translation) + np.array(self.translation)
        return RigidBody4D(self.rotation.compose(other.rotation), t, self.velocity, self.angular_velocity)

    def advance(self, dt: float) -> "RigidBody4D":
        """
        New body after dt: x += v dt and the rotation is pre-multiplied by one
        plane rotation per angular-velocity entry (applied in sorted plane order).
        """
        if not np.isfinite(dt):
            raise ValueError(f"dt must be finite, got {dt}")
        delta = SO4Rotation.identity()
        for plane, rate in self.angular_velocity:
            delta = SO4Rotation.from_plane(plane, rate * dt).compose(delta)
        t = np.array(self.translation) + dt * np.array(self.velocity)
        return RigidBody4D(delta.compose(self.rotation), t, self.velocity, self.angular_velocity)

    def rotation_matrix(self) -> Matrix4x4:
        return Matrix4x4.from_rotation(self.rotation)
