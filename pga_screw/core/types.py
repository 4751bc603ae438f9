"""
Type aliases and result containers for pga_screw.

Shape Conventions:
==================

Every value type wraps a tensor whose LAST dimension holds the
coefficients; all leading dimensions are batch dimensions:

    Multivector:     (..., 16)
    Plane:           (..., 4)   (e1, e2, e3, e0)
    Line:            (..., 6)   (e23, e31, e12, e01, e02, e03)
    Point:           (..., 4)   (e032, e013, e021, e123)
    Rotor:           (..., 4)   (s, e23, e31, e12)
    Motor:           (..., 8)   (s, e23, e31, e12, e0123, e01, e02, e03)
    DualQuaternion:  (..., 8)   (w, x, y, z, dw, dx, dy, dz)

Scalar-valued results (norms, meets of a plane and a point, ...) are
tensors of the batch shape, without a trailing coefficient dimension.
"""

from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np
import torch


# =============================================================================
# Basic Type Aliases
# =============================================================================

# Anything torch.as_tensor accepts for a coefficient array
TensorLike = Union[float, Sequence[float], np.ndarray, torch.Tensor]

# Scalars broadcast against the batch shape
ScalarLike = Union[float, torch.Tensor]

# 3D vectors: (..., 3)
Vector3 = torch.Tensor


# =============================================================================
# Result Containers
# =============================================================================

@dataclass(frozen=True)
class ScrewCoordinates:
    """
    Screw parameters of a rigid motion.

    A motor is a rotation by ``angle`` about the axis line (direction,
    moment) combined with a translation of ``translation`` along it.
    When the rotation angle vanishes there is no axis; the motion is a
    pure translation and ``axis_defined`` is False for that element.

    Attributes:
        direction: Unit axis direction of shape (..., 3). For pure
                   translations, the normalized translation direction.
        moment: Axis moment of shape (..., 3). Zeros for pure translations.
        angle: Rotation angle in radians of shape (...)
        translation: Translation along the axis of shape (...)
        axis_defined: Boolean tensor of shape (...)
    """

    direction: torch.Tensor
    moment: torch.Tensor
    angle: torch.Tensor
    translation: torch.Tensor
    axis_defined: torch.Tensor

    def scaled(self, t: ScalarLike) -> "ScrewCoordinates":
        """Return the screw with angle and translation multiplied by t."""
        return ScrewCoordinates(
            direction=self.direction,
            moment=self.moment,
            angle=self.angle * t,
            translation=self.translation * t,
            axis_defined=self.axis_defined,
        )
