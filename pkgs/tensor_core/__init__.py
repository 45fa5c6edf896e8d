"""
Tensor core: dense rank 0-4 tensors shared by every physics object of the engine.

Metrics, curvature tensors and wave polarisations are all built from the same
Tensor representation defined here.
"""

from .tensors import (
    MAX_RANK, Tensor, Scalar, Vector, Matrix, Tensor3D, Tensor4D,
    zeros, from_values, add, scale, contract, transform,
)

__all__ = [
    'MAX_RANK',
    # Rank-tagged tensor classes
    'Tensor', 'Scalar', 'Vector', 'Matrix', 'Tensor3D', 'Tensor4D',
    # Operations
    'zeros', 'from_values', 'add', 'scale', 'contract', 'transform',
]
