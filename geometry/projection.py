# geometry/projection.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

import numpy as np

from pkgs.common import PROJECTION_EPS, SingularProjection
from .primitives import Point4D, PointLike, as_point
from .polytopes import Polytope4D


class ProjectionKind(Enum):
    PERSPECTIVE = "perspective"
    ORTHOGRAPHIC = "orthographic"
    STEREOGRAPHIC = "stereographic"


@dataclass(frozen=True)
class Projection4Dto3D:
    """
    Maps (x, y, z, w) to 3D.
      - perspective:   eye at w = eye_w looking toward -w, image on w = 0:
                       (x, y, z) * eye_w / (eye_w - w)
      - orthographic:  drop w
      - stereographic: from the pole w = radius of the 3-sphere of that radius:
                       (x, y, z) * radius / (radius - w)
    Points at or beyond the singular hyperplane raise SingularProjection.
    """
    kind: ProjectionKind = ProjectionKind.PERSPECTIVE
    eye_w: float = 2.0
    radius: float = 1.0

    def __post_init__(self):
        if self.eye_w <= 0:
            raise ValueError(f"eye_w must be positive, got {self.eye_w}")
        if self.radius <= 0:
            raise ValueError(f"radius must be positive, got {self.radius}")

    def _pole(self, kind: ProjectionKind) -> float:
        return self.eye_w if kind is ProjectionKind.PERSPECTIVE else self.radius

    def _check_w(self, w: float, kind: ProjectionKind) -> float:
        pole = self._pole(kind)
        if pole - w <= PROJECTION_EPS:
            raise SingularProjection(f"w={w} is at or beyond the {kind.value} singularity at w={pole}")
        return pole

    def project(self, point: PointLike, kind: Optional[ProjectionKind] = None) -> np.ndarray:
        kind = kind or self.kind
        p = as_point(point)
        xyz = p.as_array()[:3]
        if kind is ProjectionKind.ORTHOGRAPHIC:
            return xyz
        pole = self._check_w(p.w, kind)
        return xyz * pole / (pole - p.w)

    def unproject(self, projected: Sequence[float], w: Optional[float] = None,
                  kind: Optional[ProjectionKind] = None) -> Point4D:
        """
        Inverse of `project`.  Perspective and orthographic need the original w;
        stereographic is invertible on its own (lifts onto the 3-sphere).
        """
        kind = kind or self.kind
        P = np.asarray(projected, dtype=np.float64)
        if P.shape != (3,):
            raise ValueError(f"projected point must have 3 components, got shape {P.shape}")
        if kind is ProjectionKind.STEREOGRAPHIC and w is None:
            R2, s = self.radius ** 2, float(np.dot(P, P))
            xyz = 2.0 * R2 * P / (s + R2)
            return Point4D(*xyz, self.radius * (s - R2) / (s + R2))
        if w is None:
            raise ValueError(f"{kind.value} projection needs the original w to invert")
        if kind is ProjectionKind.ORTHOGRAPHIC:
            return Point4D(*P, w)
        pole = self._check_w(w, kind)
        return Point4D(*(P * (pole - w) / pole), w)

    def project_polytope(self, polytope: Polytope4D, kind: Optional[ProjectionKind] = None) -> np.ndarray:
        """(n_vertices, 3) array; edges/faces of the polytope index its rows."""
        return np.array([self.project(v, kind) for v in polytope.vertices])
