"""
Interpolation between rigid motions.

All schemes return ``a`` at t = 0 and ``b`` (or a motor performing the
same motion) at t = 1:

    seplerp   slerp the rotations and lerp the translations separately
    sclerp    follow the screw carrying a to b at constant speed
    lielerp   a * (reverse(a) * b)^t through the exponential map
    kenlerp   blend of sclerp and seplerp weighted by beta

``t`` may be a float or a tensor broadcasting against the batch shape.
"""

from __future__ import annotations
import logging
from typing import Optional, Union

import torch

from ..core.constants import (
    METHOD_SEPLERP, METHOD_SCLERP, METHOD_LIELERP, METHOD_KENLERP,
    INTERPOLATION_METHODS,
)
from ..core.numeric import expand_parameter, lerp
from ..pga.motor import Motor
from ..pga.rotor import slerp
from ..utils.config import get_config

logger = logging.getLogger(__name__)

Parameter = Union[float, torch.Tensor]


def seplerp(a: Motor, b: Motor, t: Parameter) -> Motor:
    """
    Separate interpolation of rotation and translation.

    Args:
        a: Start motor (t = 0)
        b: End motor (t = 1)
        t: Interpolation parameter

    Returns:
        from_rotor_translation(slerp(R_a, R_b, t), lerp(t_a, t_b, t))
    """
    a_trans = a.get_translation()
    b_trans = b.get_translation()
    rotor = slerp(a.get_rotor(), b.get_rotor(), t)
    translation = lerp(a_trans, b_trans, expand_parameter(t, a_trans))
    return Motor.from_rotor_translation(rotor, translation)


def sclerp(a: Motor, b: Motor, t: Parameter) -> Motor:
    """
    Screw linear interpolation.

    The relative motion reverse(a) * b is decomposed into screw coordinates
    whose angle and translation are scaled by t.
    """
    delta = a.reverse() * b
    screw = delta.to_screw_coordinates()
    t = torch.as_tensor(t, dtype=a.dtype, device=a.device)
    return a * Motor.from_screw_coordinates(screw.scaled(t))


def lielerp(a: Motor, b: Motor, t: Parameter) -> Motor:
    """Interpolation through the exponential map: a * exp(t * log(reverse(a) * b))."""
    return a * (a.reverse() * b).pow(t)


def kenlerp(a: Motor, b: Motor, t: Parameter, beta: Optional[float] = None) -> Motor:
    """
    Blend of ScLERP and SEPLERP.

    The rotations of both results are slerped and their translations
    lerped with weight ``beta`` (0 gives sclerp, 1 gives seplerp).

    Args:
        a: Start motor
        b: End motor
        t: Interpolation parameter
        beta: Blend weight; defaults to the configured ``kenlerp_beta``
    """
    if beta is None:
        beta = get_config().kenlerp_beta

    sc_res = sclerp(a, b, t)
    sep_res = seplerp(a, b, t)
    sc_trans = sc_res.get_translation()
    sep_trans = sep_res.get_translation()

    rotor = slerp(sc_res.get_rotor(), sep_res.get_rotor(), beta)
    translation = lerp(sc_trans, sep_trans, expand_parameter(beta, sc_trans))
    return Motor.from_rotor_translation(rotor, translation)


_METHODS = {
    METHOD_SEPLERP: seplerp,
    METHOD_SCLERP: sclerp,
    METHOD_LIELERP: lielerp,
    METHOD_KENLERP: kenlerp,
}


def interpolate(a: Motor, b: Motor, t: Parameter, method: str = METHOD_SCLERP, **kwargs) -> Motor:
    """
    Interpolate between two motors with a scheme selected by name.

    Args:
        a: Start motor
        b: End motor
        t: Interpolation parameter
        method: One of 'seplerp', 'sclerp', 'lielerp', 'kenlerp'
        **kwargs: Extra arguments of the scheme (``beta`` for kenlerp)

    Raises:
        ValueError: If the method is unknown
    """
    if method not in _METHODS:
        raise ValueError(
            f"Unknown interpolation method: {method}. "
            f"Expected one of {', '.join(INTERPOLATION_METHODS)}"
        )
    logger.debug("Interpolating motors with %s", method)
    return _METHODS[method](a, b, t, **kwargs)
