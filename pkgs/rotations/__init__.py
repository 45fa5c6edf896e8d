"""
Rotation algebra: SO(3) quaternions, SO(4) isoclinic pairs and rigid-motion
dual quaternions.  Independent of the tensor core; produces plain 4-vectors and
4x4 arrays that the tensor core can wrap.
"""

from .quaternion import Quat3D, hamilton_product
from .so4 import SO4Rotation
from .dual_quaternion import DualQuat

__all__ = ['Quat3D', 'hamilton_product', 'SO4Rotation', 'DualQuat']
