"""
Utility functions for pga_screw.

Includes quaternion operations and configuration management.
"""

from .quaternion import (
    quaternion_multiply,
    quaternion_conjugate,
    quaternion_inverse,
    quaternion_to_matrix,
    quaternion_from_axis_angle,
    quaternion_to_axis_angle,
    quaternion_exp,
    quaternion_log,
    quaternion_pow,
    quaternion_slerp,
    random_quaternion,
    normalize_quaternion,
    rotate_vector,
)
from .config import Config, get_config, set_config, load_config, save_config

__all__ = [
    # Quaternion operations
    "quaternion_multiply",
    "quaternion_conjugate",
    "quaternion_inverse",
    "quaternion_to_matrix",
    "quaternion_from_axis_angle",
    "quaternion_to_axis_angle",
    "quaternion_exp",
    "quaternion_log",
    "quaternion_pow",
    "quaternion_slerp",
    "random_quaternion",
    "normalize_quaternion",
    "rotate_vector",
    # Config
    "Config",
    "get_config",
    "set_config",
    "load_config",
    "save_config",
]
