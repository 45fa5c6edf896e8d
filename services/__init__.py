"""
Service modules for host applications.

This package contains:
- Per-frame kinematic stepping for real-time hosts
- Conversion between flat tensor payloads and Tensor values
"""

from .kinematics import (
    PhysicsResult, compute_physics, handle_kinematics,
    tensor_from_payload, tensor_to_payload,
)

__all__ = [
    'PhysicsResult', 'compute_physics', 'handle_kinematics',
    'tensor_from_payload', 'tensor_to_payload',
]
