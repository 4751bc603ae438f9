"""
Interpolation schemes on dual quaternions.

Counterparts of ``pga_screw.interpolation.motors`` for the dual quaternion
encoding; each result equals the motor scheme applied to the isomorphic
motors.
"""

from __future__ import annotations
from typing import Optional, Union

import torch

from ..core.numeric import expand_parameter, lerp
from ..dquat.dual_quaternion import DualQuaternion
from ..utils.config import get_config
from ..utils.quaternion import quaternion_slerp

Parameter = Union[float, torch.Tensor]


def _slerp(q0: torch.Tensor, q1: torch.Tensor, t: Parameter) -> torch.Tensor:
    return quaternion_slerp(q0, q1, t, shortest_path=get_config().shortest_path)


def dq_seplerp(a: DualQuaternion, b: DualQuaternion, t: Parameter) -> DualQuaternion:
    """Slerp the rotations and lerp the translations separately."""
    a_trans = a.get_translation()
    b_trans = b.get_translation()
    rotation = _slerp(a.get_rotation(), b.get_rotation(), t)
    translation = lerp(a_trans, b_trans, expand_parameter(t, a_trans))
    return DualQuaternion.from_rotation_translation(rotation, translation)


def dq_sclerp(a: DualQuaternion, b: DualQuaternion, t: Parameter) -> DualQuaternion:
    """Screw linear interpolation a * screw(quat_conjugate(a) * b)^t."""
    delta = a.quat_conjugate() * b
    screw = delta.get_screw_coordinates()
    t = torch.as_tensor(t, dtype=a.dtype, device=a.device)
    return a * DualQuaternion.from_screw_coordinates(screw.scaled(t))


def dq_kenlerp(
    a: DualQuaternion,
    b: DualQuaternion,
    t: Parameter,
    beta: Optional[float] = None
) -> DualQuaternion:
    """Blend of dq_sclerp (beta = 0) and dq_seplerp (beta = 1)."""
    if beta is None:
        beta = get_config().kenlerp_beta

    sc_res = dq_sclerp(a, b, t)
    sep_res = dq_seplerp(a, b, t)
    sc_trans = sc_res.get_translation()
    sep_trans = sep_res.get_translation()

    rotation = _slerp(sc_res.get_rotation(), sep_res.get_rotation(), beta)
    translation = lerp(sc_trans, sep_trans, expand_parameter(beta, sc_trans))
    return DualQuaternion.from_rotation_translation(rotation, translation)
