"""
Rotors: the rotation subgroup of the even subalgebra.

A rotor has 4 components [s, e23, e31, e12]. A unit rotor rotating by
angle θ counter-clockwise about a unit axis a through the origin is

    R = cos(θ/2) - sin(θ/2) * (a_x e23 + a_y e31 + a_z e12) = exp(-θ/2 L)

where L is the unit line along a. The map (s, e23, e31, e12) ->
(s, -e23, -e31, -e12) is an algebra isomorphism onto the quaternions, so
products, exponentials and logarithms reuse ``pga_screw.utils.quaternion``.
"""

from __future__ import annotations
import logging
import warnings
from typing import Optional, Tuple, Union

import torch

from ..core.constants import ROTOR_BLADES
from ..core.numeric import as_tensor, is_approx_zero, length_squared, dot, log_branch
from ..core.types import TensorLike
from ..utils.config import get_config
from ..utils.quaternion import (
    quaternion_conjugate,
    quaternion_multiply,
    quaternion_from_axis_angle,
    quaternion_to_axis_angle,
    quaternion_to_matrix,
    quaternion_exp,
    quaternion_log,
    quaternion_pow,
)
from .algebra import BladeSubset

logger = logging.getLogger(__name__)


class Rotor(BladeSubset):
    """
    A rotor [s, e23, e31, e12] of shape (..., 4).

    Products with ``*`` compose rotations: (a * b) applies b first, then a.
    """

    NUM_COMPONENTS = 4
    BLADES = ROTOR_BLADES

    # === Factories ===

    @classmethod
    def from_axis_angle(cls, axis: TensorLike, angle: Union[float, torch.Tensor]) -> 'Rotor':
        """
        Rotation by ``angle`` radians counter-clockwise about ``axis``.

        Args:
            axis: Rotation axis of shape (..., 3), will be normalized
            angle: Rotation angle of shape (...)
        """
        return cls.from_quaternion(quaternion_from_axis_angle(as_tensor(axis), angle))

    @classmethod
    def from_quaternion(cls, q: torch.Tensor) -> 'Rotor':
        """Rotor of a [w, x, y, z] quaternion."""
        return cls(quaternion_conjugate(as_tensor(q)))

    @classmethod
    def identity(
        cls,
        batch_shape: Union[int, Tuple[int, ...]] = (),
        device: Optional[torch.device] = None,
        dtype: Optional[torch.dtype] = None
    ) -> 'Rotor':
        """Create identity rotor (no rotation)."""
        data = cls._zeros(batch_shape, device=device, dtype=dtype)
        data[..., 0] = 1.0
        return cls(data)

    @classmethod
    def zero(
        cls,
        batch_shape: Union[int, Tuple[int, ...]] = (),
        device: Optional[torch.device] = None,
        dtype: Optional[torch.dtype] = None
    ) -> 'Rotor':
        return cls(cls._zeros(batch_shape, device=device, dtype=dtype))

    # === Components ===

    @property
    def s(self) -> torch.Tensor:
        """Scalar part of shape (...)."""
        return self.data[..., 0]

    def direction(self) -> torch.Tensor:
        """Bivector part (e23, e31, e12) of shape (..., 3)."""
        return self.data[..., 1:]

    def to_quaternion(self) -> torch.Tensor:
        """The [w, x, y, z] quaternion of this rotor."""
        return quaternion_conjugate(self.data)

    def to_axis_angle(self) -> Tuple[torch.Tensor, torch.Tensor]:
        """
        Returns:
            axis: Unit rotation axis of shape (..., 3), zero for the identity
            angle: Rotation angle in [0, 2π] of shape (...)
        """
        return quaternion_to_axis_angle(self.to_quaternion())

    # === Norms and inverses ===

    def reverse(self) -> 'Rotor':
        """Negate the bivector part."""
        return Rotor(quaternion_conjugate(self.data))

    def length_squared(self) -> torch.Tensor:
        return length_squared(self.data)

    def length(self) -> torch.Tensor:
        return torch.sqrt(self.length_squared())

    def normalized(self) -> 'Rotor':
        return self / self.length()

    def inverse(self) -> 'Rotor':
        """reverse / length_squared, so r * r.inverse() is the identity."""
        return self.reverse() / self.length_squared()

    # === Lie maps ===

    def exp(self) -> 'Rotor':
        """
        Exponential e^s * (cos|v| + sin|v| v/|v|) of s + v.

        A pure bivector -θ/2 * axis exponentiates to the rotation by θ.
        """
        return Rotor(quaternion_exp(self.data))

    def log(self) -> 'Rotor':
        """
        Logarithm (log|r|, atan2(|v|, s) v/|v|).

        The bivector part is zero when v vanishes. For rotors close to -1
        the axis is ill-defined and a warning is emitted.
        """
        real = is_approx_zero(torch.norm(self.direction(), dim=-1))
        log_branch(logger, real, "zero bivector in Rotor.log")

        degenerate = real & (self.s < 0)
        if bool(degenerate.any()):
            warnings.warn(
                "Rotor.log of a rotor close to -1: the rotation axis is ill-defined",
                RuntimeWarning,
            )
        return Rotor(quaternion_log(self.data))

    def pow(self, t: Union[float, torch.Tensor]) -> 'Rotor':
        """r^t = exp(t * log(r)); t may be a tensor broadcasting against the batch."""
        return Rotor(quaternion_pow(self.data, t))

    # === Products ===

    def __mul__(self, other):
        """Rotor composition, or scaling by a scalar."""
        if isinstance(other, Rotor):
            q = quaternion_multiply(self.to_quaternion(), other.to_quaternion())
            return Rotor.from_quaternion(q)
        return super().__mul__(other)

    # === Bases ===

    def as_basis(self) -> torch.Tensor:
        """
        Rotation matrix of shape (..., 3, 3) whose columns are the images of x, y, z.

        The matrix is scaled by length_squared for non-unit rotors.
        """
        return quaternion_to_matrix(self.to_quaternion(), normalize=False)

    def get_x_basis_vector(self) -> torch.Tensor:
        return self.as_basis()[..., :, 0]

    def get_y_basis_vector(self) -> torch.Tensor:
        return self.as_basis()[..., :, 1]

    def get_z_basis_vector(self) -> torch.Tensor:
        return self.as_basis()[..., :, 2]

    def as_transform(self) -> torch.Tensor:
        """Homogeneous 4x4 matrix of shape (..., 4, 4)."""
        basis = self.as_basis()
        M = torch.zeros(*basis.shape[:-2], 4, 4, device=basis.device, dtype=basis.dtype)
        M[..., :3, :3] = basis
        M[..., 3, 3] = 1.0
        return M


def slerp(
    a: Rotor,
    b: Rotor,
    t: Union[float, torch.Tensor],
    shortest_path: Optional[bool] = None
) -> Rotor:
    """
    Spherical interpolation a * (reverse(a) * b)^t.

    Args:
        a: Start rotor (t = 0)
        b: End rotor (t = 1)
        t: Interpolation parameter, a float or a tensor of batch shape
        shortest_path: Negate b when ⟨a, b⟩ < 0 so the rotation takes the
                       short way round; defaults to the configured value

    Returns:
        Interpolated rotor
    """
    if shortest_path is None:
        shortest_path = get_config().shortest_path
    if shortest_path:
        flip = dot(a.data, b.data) < 0
        b = Rotor(torch.where(flip.unsqueeze(-1), -b.data, b.data))
    return a * (a.reverse() * b).pow(t)
