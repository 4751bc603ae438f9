"""
Dual quaternion encoding of rigid motions.
"""

from .dual_quaternion import DualQuaternion, conjugate_unit

__all__ = [
    "DualQuaternion",
    "conjugate_unit",
]
