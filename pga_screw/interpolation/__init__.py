"""
Interpolation between rigid motions (motors and dual quaternions).
"""

from .motors import (
    seplerp,
    sclerp,
    lielerp,
    kenlerp,
    interpolate,
)

from .dual_quaternions import (
    dq_seplerp,
    dq_sclerp,
    dq_kenlerp,
)

__all__ = [
    # Motors
    "seplerp",
    "sclerp",
    "lielerp",
    "kenlerp",
    "interpolate",
    # Dual quaternions
    "dq_seplerp",
    "dq_sclerp",
    "dq_kenlerp",
]
