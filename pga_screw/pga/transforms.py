"""
Applying rotors and motors to flats and Euclidean vectors.

transform(x, m) is the sandwich m x reverse(m), evaluated in closed form on
the dual quaternion view (a, b) of the motor:

    Plane (n, δ):  n' = Q n              δ' = k δ - 2 n · vec(a* b)
    Line  (d, m):  d' = Q d              m' = Q m + 2 vec(b d a*)
    Point (X, w):  X' = Q X + w t        w' = k w

where Q is the (unnormalized) rotation matrix of a, k = |a|² and
t = 2 vec(b a*). For unit motors k = 1 and Q is a rotation.
"""

from __future__ import annotations
from typing import Tuple, Union

import torch

from ..utils.quaternion import (
    quaternion_conjugate,
    quaternion_multiply,
    quaternion_norm_squared,
    quaternion_to_matrix,
)
from .flats import Plane, Line, Point
from .motor import Motor, _to_dual_quaternion
from .rotor import Rotor

Versor = Union[Rotor, Motor]


def _pure(v: torch.Tensor) -> torch.Tensor:
    """Embed (..., 3) vectors as pure quaternions."""
    return torch.cat([torch.zeros_like(v[..., :1]), v], dim=-1)


def _apply(Q: torch.Tensor, v: torch.Tensor) -> torch.Tensor:
    """Batched matrix-vector product."""
    return (Q @ v.unsqueeze(-1)).squeeze(-1)


def _motor_parts(versor: Versor) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor, torch.Tensor]:
    """Rotation matrix Q, scale k, and dual quaternion (a, b) of a versor."""
    if isinstance(versor, Rotor):
        versor = Motor.from_rotor(versor)
    if not isinstance(versor, Motor):
        raise TypeError(f"Expected a Rotor or a Motor, got {type(versor).__name__}")
    a, b = _to_dual_quaternion(versor.data)
    return quaternion_to_matrix(a, normalize=False), quaternion_norm_squared(a), a, b


def _translation_part(a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
    """t = 2 vec(b a*), the translation scaled by |a|²."""
    return 2.0 * quaternion_multiply(b, quaternion_conjugate(a))[..., 1:]


def transform(x, versor: Versor):
    """
    Apply a rotor or a motor to a plane, line, point or Euclidean point.

    Args:
        x: Plane, Line, Point, or a tensor of shape (..., 3) holding
           Euclidean point coordinates
        versor: Rotor or Motor

    Returns:
        Transformed value of the same type as x. Tensors are treated as
        finite points and returned as Euclidean coordinates.
    """
    if isinstance(x, torch.Tensor):
        return transform_point(x, versor)
    if not isinstance(x, (Plane, Line, Point)):
        raise TypeError(
            f"transform is not defined for {type(x).__name__} and {type(versor).__name__}"
        )

    Q, k, a, b = _motor_parts(versor)

    if isinstance(x, Plane):
        n = _apply(Q, x.normal)
        correction = quaternion_multiply(quaternion_conjugate(a), b)[..., 1:]
        delta = k * x.delta - 2.0 * (x.normal * correction).sum(dim=-1)
        return Plane(torch.cat([n, delta.unsqueeze(-1)], dim=-1))

    if isinstance(x, Line):
        d = _apply(Q, x.direction)
        bda = quaternion_multiply(quaternion_multiply(b, _pure(x.direction)), quaternion_conjugate(a))
        m = _apply(Q, x.moment) + 2.0 * bda[..., 1:]
        return Line(torch.cat([d, m], dim=-1))

    X = _apply(Q, x.xyz) + x.weight.unsqueeze(-1) * _translation_part(a, b)
    w = k * x.weight
    return Point(torch.cat([X, w.unsqueeze(-1)], dim=-1))


def transform_point(v: torch.Tensor, versor: Versor) -> torch.Tensor:
    """
    Move Euclidean points.

    Args:
        v: Points of shape (..., 3)
        versor: Rotor or Motor

    Returns:
        Points of shape (..., 3), divided by the squared norm of the versor
    """
    Q, k, a, b = _motor_parts(versor)
    return (_apply(Q, v) + _translation_part(a, b)) / k.unsqueeze(-1)


def transform_direction(v: torch.Tensor, versor: Versor) -> torch.Tensor:
    """Rotate direction vectors of shape (..., 3); translations are ignored."""
    Q, k, _, _ = _motor_parts(versor)
    return _apply(Q, v) / k.unsqueeze(-1)
