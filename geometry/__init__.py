"""
4D geometry built on the rotation algebra and tensor core.

This package contains:
- Point4D / Matrix4x4 primitives
- Regular 4-polytopes (tesseract, 24-cell) with deterministic adjacency
- 4D -> 3D projections (perspective, orthographic, stereographic)
- RigidBody4D poses producing transformed polytope snapshots
"""

from .primitives import Point4D, Matrix4x4
from .polytopes import DEFAULT_CIRCUMRADIUS, Polytope4D, Tesseract, Cell24
from .projection import ProjectionKind, Projection4Dto3D
from .rigid_body import RigidBody4D

__all__ = [
    'Point4D', 'Matrix4x4',
    'DEFAULT_CIRCUMRADIUS', 'Polytope4D', 'Tesseract', 'Cell24',
    'ProjectionKind', 'Projection4Dto3D',
    'RigidBody4D',
]
