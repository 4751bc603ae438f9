"""
pga_screw: rigid motions in 3D Projective Geometric Algebra

A PyTorch library for planes, lines, points, rotors and motors of the
algebra G(3,0,1), with screw-motion interpolation and a dual quaternion
encoding of the same motions.

Key Features:
- Full PGA algebra (16-component multivectors, generated product tables)
- Flat primitives with meet, join, inner, projection and reflection
- Rotors and motors with exponential, logarithm and square roots
- SEPLERP, ScLERP, Lie-lerp and kenLerp interpolation
- Batched tensors on any device; float32 or float64

API Design:
- Every value wraps a tensor whose last dimension holds the coefficients
- Leading dimensions are batch dimensions and broadcast
- Degenerate inputs take epsilon-gated branches instead of raising

Example:
    >>> import torch
    >>> from pga_screw import Motor, Point, transform
    >>> m = Motor.from_axis_angle_translation([0.0, 1.0, 0.0], torch.pi, [4.0, 0.0, 0.0])
    >>> origin = transform(Point.ORIGIN, m).as_vector()  # (4, 0, 0)
"""

__version__ = "0.1.0"
__author__ = "pga_screw Contributors"

from . import core
from . import utils
from . import pga
from . import dquat
from . import interpolation

from .pga import (
    Multivector,
    Plane,
    Line,
    Point,
    Rotor,
    Motor,
    meet,
    join,
    inner,
    transform,
    transform_point,
    transform_direction,
)
from .dquat import DualQuaternion
from .interpolation import seplerp, sclerp, lielerp, kenlerp, interpolate
from .utils import Config, get_config, set_config

__all__ = [
    # Subpackages
    "core",
    "utils",
    "pga",
    "dquat",
    "interpolation",
    # Value types
    "Multivector",
    "Plane",
    "Line",
    "Point",
    "Rotor",
    "Motor",
    "DualQuaternion",
    # Operations
    "meet",
    "join",
    "inner",
    "transform",
    "transform_point",
    "transform_direction",
    # Interpolation
    "seplerp",
    "sclerp",
    "lielerp",
    "kenlerp",
    "interpolate",
    # Config
    "Config",
    "get_config",
    "set_config",
]
