"""
Dual quaternions: an alternate encoding of motors.

A dual quaternion q = r + ε d is stored as (..., 8) coefficients
[w, x, y, z, dw, dx, dy, dz]. A rigid motion rotating by the unit
quaternion r and then translating by t is

    q = r + ε ½ t r

The map to motors is an algebra isomorphism (see ``pga_screw.pga.motor``):

    Motor [s, e23, e31, e12, e0123, e01, e02, e03]
      <-> real (s, -e23, -e31, -e12), dual (-e0123, -e01, -e02, -e03)

Motor is the canonical representation. Screw decomposition, logarithms
and exponentials are delegated to it; the dual quaternion keeps its own
products, conjugates and point/line encodings.
"""

from __future__ import annotations
from typing import Optional, Tuple, Union

import torch

from ..core.base import GeometricValue
from ..core.numeric import as_tensor
from ..core.types import TensorLike, ScrewCoordinates
from ..pga.flats import Line
from ..pga.motor import Motor, _to_dual_quaternion, _from_dual_quaternion
from ..utils.quaternion import (
    quaternion_conjugate,
    quaternion_multiply,
    quaternion_inverse,
    quaternion_norm_squared,
    quaternion_from_axis_angle,
    identity_quaternion,
)


def _pure(v: torch.Tensor) -> torch.Tensor:
    return torch.cat([torch.zeros_like(v[..., :1]), v], dim=-1)


class DualQuaternion(GeometricValue):
    """
    Dual quaternion [w, x, y, z, dw, dx, dy, dz] of shape (..., 8).

    Products with ``*`` compose motions: (a * b) applies b first, then a.
    """

    NUM_COMPONENTS = 8

    def __init__(self, real: TensorLike, dual: Optional[TensorLike] = None):
        """
        Args:
            real: Real quaternion of shape (..., 4), or all 8 coefficients
                  when ``dual`` is omitted
            dual: Dual quaternion of shape (..., 4)
        """
        if dual is not None:
            real = as_tensor(real)
            dual = as_tensor(dual, dtype=real.dtype, device=real.device)
            real, dual = torch.broadcast_tensors(real, dual)
            real = torch.cat([real, dual], dim=-1)
        super().__init__(real)

    # === Factories ===

    @classmethod
    def identity(
        cls,
        batch_shape: Union[int, Tuple[int, ...]] = (),
        device: Optional[torch.device] = None,
        dtype: Optional[torch.dtype] = None
    ) -> 'DualQuaternion':
        data = cls._zeros(batch_shape, device=device, dtype=dtype)
        data[..., 0] = 1.0
        return cls(data)

    @classmethod
    def from_rotation(cls, rotation: torch.Tensor) -> 'DualQuaternion':
        """Pure rotation by a [w, x, y, z] quaternion."""
        rotation = as_tensor(rotation)
        return cls(rotation, torch.zeros_like(rotation))

    @classmethod
    def from_axis_angle(cls, axis: TensorLike, angle: Union[float, torch.Tensor]) -> 'DualQuaternion':
        return cls.from_rotation(quaternion_from_axis_angle(as_tensor(axis), angle))

    @classmethod
    def from_translation(cls, translation: TensorLike) -> 'DualQuaternion':
        t = as_tensor(translation)
        real = identity_quaternion(1, device=t.device, dtype=t.dtype)[0]
        return cls(real, 0.5 * _pure(t))

    @classmethod
    def from_rotation_translation(cls, rotation: torch.Tensor, translation: TensorLike) -> 'DualQuaternion':
        """
        Rotation followed by a translation: r + ε ½ t r.

        Args:
            rotation: Quaternion of shape (..., 4) as [w, x, y, z]
            translation: Translation of shape (..., 3)
        """
        rotation = as_tensor(rotation)
        t = as_tensor(translation, dtype=rotation.dtype, device=rotation.device)
        return cls(rotation, quaternion_multiply(0.5 * _pure(t), rotation))

    @classmethod
    def from_axis_angle_translation(
        cls,
        axis: TensorLike,
        angle: Union[float, torch.Tensor],
        translation: TensorLike
    ) -> 'DualQuaternion':
        rotation = quaternion_from_axis_angle(as_tensor(axis), angle)
        return cls.from_rotation_translation(rotation, translation)

    @classmethod
    def from_screw_coordinates(
        cls,
        direction: Union[TensorLike, ScrewCoordinates],
        moment: Optional[TensorLike] = None,
        angle: Optional[Union[float, torch.Tensor]] = None,
        translation: Optional[Union[float, torch.Tensor]] = None
    ) -> 'DualQuaternion':
        """
        Screw motion (cos θ/2 + sin θ/2 l) + ε (-τ/2 sin θ/2 + sin θ/2 m + τ/2 cos θ/2 l).

        Same arguments as ``Motor.from_screw_coordinates``.
        """
        return cls.from_motor(Motor.from_screw_coordinates(direction, moment, angle, translation))

    @classmethod
    def from_point(cls, point: TensorLike) -> 'DualQuaternion':
        """Encode a Euclidean point p as 1 + ε p."""
        p = as_tensor(point)
        real = torch.zeros(*p.shape[:-1], 4, device=p.device, dtype=p.dtype)
        real[..., 0] = 1.0
        return cls(real, _pure(p))

    @classmethod
    def from_line(cls, direction: TensorLike, point: TensorLike) -> 'DualQuaternion':
        """
        Encode the line through ``point`` along ``direction`` as l + ε (p × l).

        The direction is normalized. Lines transform with
        q * L * quat_conjugate(q).
        """
        return cls.from_plucker(Line.line(direction, point).normalized())

    @classmethod
    def from_plucker(cls, line: Line) -> 'DualQuaternion':
        """Encode a Line (d, m) as the pure dual quaternion d + ε m."""
        return cls(_pure(line.direction), _pure(line.moment))

    @classmethod
    def from_motor(cls, motor: Motor) -> 'DualQuaternion':
        real, dual = _to_dual_quaternion(motor.data)
        return cls(real, dual)

    # === Components ===

    @property
    def real(self) -> torch.Tensor:
        """Real quaternion of shape (..., 4)."""
        return self.data[..., :4]

    @property
    def dual(self) -> torch.Tensor:
        """Dual quaternion of shape (..., 4)."""
        return self.data[..., 4:]

    def to_motor(self) -> Motor:
        return Motor(_from_dual_quaternion(self.real, self.dual))

    def get_rotation(self) -> torch.Tensor:
        """Rotation quaternion (the real part)."""
        return self.real

    def get_translation(self) -> torch.Tensor:
        """Translation 2 vec(d r*) / |r|² of shape (..., 3)."""
        t = 2.0 * quaternion_multiply(self.dual, quaternion_conjugate(self.real))[..., 1:]
        return t / quaternion_norm_squared(self.real).unsqueeze(-1)

    def get_point(self) -> torch.Tensor:
        """Coordinates of a point encoded by ``from_point``, of shape (..., 3)."""
        return self.dual[..., 1:]

    def get_line(self) -> Line:
        """Line of a dual quaternion encoded by ``from_line``."""
        return Line.from_plucker(self.real[..., 1:], self.dual[..., 1:])

    def get_screw_coordinates(self) -> ScrewCoordinates:
        return self.to_motor().to_screw_coordinates()

    # === Algebra ===

    def __mul__(self, other):
        """Dual quaternion product (r1 r2, r1 d2 + d1 r2), or scaling by a scalar."""
        if isinstance(other, DualQuaternion):
            real = quaternion_multiply(self.real, other.real)
            dual = (quaternion_multiply(self.real, other.dual)
                    + quaternion_multiply(self.dual, other.real))
            return DualQuaternion(real, dual)
        return super().__mul__(other)

    def normalized(self) -> 'DualQuaternion':
        """Divide by the norm of the real part."""
        return self / torch.sqrt(quaternion_norm_squared(self.real))

    def inverse(self) -> 'DualQuaternion':
        """(r + ε d)^-1 = r^-1 - ε r^-1 d r^-1."""
        real_inv = quaternion_inverse(self.real)
        dual = -quaternion_multiply(quaternion_multiply(real_inv, self.dual), real_inv)
        return DualQuaternion(real_inv, dual)

    # === Conjugates ===

    def dual_conjugate(self) -> 'DualQuaternion':
        """r - ε d."""
        return DualQuaternion(self.real, -self.dual)

    def quat_conjugate(self) -> 'DualQuaternion':
        """r* + ε d*; the motor reverse. Inverse of unit dual quaternions."""
        return DualQuaternion(quaternion_conjugate(self.real), quaternion_conjugate(self.dual))

    def dquat_conjugate(self) -> 'DualQuaternion':
        """r* - ε d*; used to conjugate points."""
        return DualQuaternion(quaternion_conjugate(self.real), -quaternion_conjugate(self.dual))

    # === Transforms ===

    def transform_point(self, point: TensorLike) -> torch.Tensor:
        """Move Euclidean points of shape (..., 3) by this unit dual quaternion."""
        encoded = DualQuaternion.from_point(as_tensor(point, dtype=self.dtype, device=self.device))
        return conjugate_unit(self, encoded).get_point()

    def transform_line(self, line: Line) -> Line:
        """Move a line by this unit dual quaternion."""
        encoded = DualQuaternion.from_plucker(line)
        return (self * encoded * self.quat_conjugate()).get_line()


def conjugate_unit(p: DualQuaternion, q: DualQuaternion) -> DualQuaternion:
    """Conjugation p q dquat_conjugate(p) of q by the unit dual quaternion p."""
    return p * q * p.dquat_conjugate()
