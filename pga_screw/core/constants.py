"""
Centralized constants for pga_screw.

This module defines the tolerances, default dtype and blade indices used
throughout the library. Every value type stores its coefficients in the
last tensor dimension; the ``*_BLADES`` tuples below map each slot of a
specialized type to its slot in the 16-component multivector.

Usage:
    from pga_screw.core.constants import EPSILON, IDX_E123

    def is_finite(point_mv, eps: float = EPSILON):
        ...
"""

import torch

# =============================================================================
# Numeric Constants
# =============================================================================

# Linear tolerance used by is_approx_zero
EPSILON: float = 1e-5

# Squared tolerance used by is_square_approx_zero
EPSILON2: float = EPSILON ** 2

# Pi constant (for rotation calculations)
PI: float = 3.14159265358979323846

# Dtype used by factories when neither a tensor nor a dtype is given
DEFAULT_DTYPE: torch.dtype = torch.float32

# Blend weight of kenlerp between ScLERP (0) and SEPLERP (1)
DEFAULT_KENLERP_BETA: float = 0.5


# =============================================================================
# Multivector Blade Indices
# =============================================================================

# Blade order: 1; e0 e1 e2 e3; e01 e02 e03 e12 e31 e23; e021 e013 e032 e123; e0123
IDX_S: int = 0
IDX_E0: int = 1
IDX_E1: int = 2
IDX_E2: int = 3
IDX_E3: int = 4
IDX_E01: int = 5
IDX_E02: int = 6
IDX_E03: int = 7
IDX_E12: int = 8
IDX_E31: int = 9
IDX_E23: int = 10
IDX_E021: int = 11
IDX_E013: int = 12
IDX_E032: int = 13
IDX_E123: int = 14
IDX_E0123: int = 15

NUM_BLADES: int = 16

# Basis vectors making up each blade, in the order the blade is named
BLADE_FACTORS = (
    (),
    (0,), (1,), (2,), (3,),
    (0, 1), (0, 2), (0, 3), (1, 2), (3, 1), (2, 3),
    (0, 2, 1), (0, 1, 3), (0, 3, 2), (1, 2, 3),
    (0, 1, 2, 3),
)

BLADE_NAMES = (
    "1",
    "e0", "e1", "e2", "e3",
    "e01", "e02", "e03", "e12", "e31", "e23",
    "e021", "e013", "e032", "e123",
    "e0123",
)


# =============================================================================
# Specialized Type Layouts
# =============================================================================

# Plane (e1, e2, e3, e0): normal n and offset delta
PLANE_BLADES = (IDX_E1, IDX_E2, IDX_E3, IDX_E0)

# Line (e23, e31, e12, e01, e02, e03): direction d and moment m
LINE_BLADES = (IDX_E23, IDX_E31, IDX_E12, IDX_E01, IDX_E02, IDX_E03)

# Point (e032, e013, e021, e123): homogeneous coordinates (X, w)
POINT_BLADES = (IDX_E032, IDX_E013, IDX_E021, IDX_E123)

# Rotor (s, e23, e31, e12)
ROTOR_BLADES = (IDX_S, IDX_E23, IDX_E31, IDX_E12)

# Motor (s, e23, e31, e12, e0123, e01, e02, e03)
MOTOR_BLADES = (
    IDX_S, IDX_E23, IDX_E31, IDX_E12,
    IDX_E0123, IDX_E01, IDX_E02, IDX_E03,
)


# =============================================================================
# Interpolation Methods
# =============================================================================

METHOD_SEPLERP: str = "seplerp"
METHOD_SCLERP: str = "sclerp"
METHOD_LIELERP: str = "lielerp"
METHOD_KENLERP: str = "kenlerp"

INTERPOLATION_METHODS = (
    METHOD_SEPLERP,
    METHOD_SCLERP,
    METHOD_LIELERP,
    METHOD_KENLERP,
)
