"""
Core module for pga_screw.

Contains:
- Constants: Tolerances, default dtype and blade indices
- Types: Type aliases and the ScrewCoordinates result container
- Numeric: Tolerance checks and small tensor helpers
- Base: The GeometricValue base class of every value type
"""

from .constants import (
    # Numeric constants
    EPSILON,
    EPSILON2,
    PI,
    DEFAULT_DTYPE,
    DEFAULT_KENLERP_BETA,
    # Blade layout
    NUM_BLADES,
    BLADE_NAMES,
    PLANE_BLADES,
    LINE_BLADES,
    POINT_BLADES,
    ROTOR_BLADES,
    MOTOR_BLADES,
    # Interpolation methods
    METHOD_SEPLERP,
    METHOD_SCLERP,
    METHOD_LIELERP,
    METHOD_KENLERP,
    INTERPOLATION_METHODS,
)

from .types import (
    TensorLike,
    ScalarLike,
    Vector3,
    ScrewCoordinates,
)

from .numeric import (
    as_tensor,
    is_approx_zero,
    is_square_approx_zero,
    safe_divide,
    lerp,
    inv_lerp,
)

from .base import GeometricValue

__all__ = [
    # Constants
    "EPSILON",
    "EPSILON2",
    "PI",
    "DEFAULT_DTYPE",
    "DEFAULT_KENLERP_BETA",
    "NUM_BLADES",
    "BLADE_NAMES",
    "PLANE_BLADES",
    "LINE_BLADES",
    "POINT_BLADES",
    "ROTOR_BLADES",
    "MOTOR_BLADES",
    "METHOD_SEPLERP",
    "METHOD_SCLERP",
    "METHOD_LIELERP",
    "METHOD_KENLERP",
    "INTERPOLATION_METHODS",
    # Types
    "TensorLike",
    "ScalarLike",
    "Vector3",
    "ScrewCoordinates",
    # Numeric
    "as_tensor",
    "is_approx_zero",
    "is_square_approx_zero",
    "safe_divide",
    "lerp",
    "inv_lerp",
    # Base
    "GeometricValue",
]
