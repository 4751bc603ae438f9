"""
Motors: rigid motions of 3D space.

A motor has 8 components [s, e23, e31, e12, e0123, e01, e02, e03]; the
first four form the real part (a rotor), the last four the dual part.

Conventions:
    T = 1 - ½ (t_x e01 + t_y e02 + t_z e03)     translation by t
    M = T * R                                   rotate by R, then translate
    x' = M x reverse(M)                         sandwich transform

Internally a motor is handled through the isomorphic dual quaternion
(a, b) with a = (s, -e23, -e31, -e12) and b = (-e0123, -e01, -e02, -e03):
the motor product is the dual quaternion product and the reverse conjugates
both quaternions.
"""

from __future__ import annotations
import logging
import warnings
from typing import Optional, Tuple, Union

import torch

from ..core.constants import MOTOR_BLADES, PI
from ..core.numeric import (
    as_tensor, dot, length_squared,
    is_approx_zero, is_square_approx_zero, safe_divide, log_branch,
)
from ..core.types import TensorLike, ScrewCoordinates
from ..utils.quaternion import quaternion_conjugate, quaternion_multiply
from .algebra import BladeSubset
from .flats import Line
from .rotor import Rotor

logger = logging.getLogger(__name__)


# =============================================================================
# Dual Quaternion View
# =============================================================================

def _to_dual_quaternion(data: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor]:
    """Split motor coefficients into the real and dual quaternions."""
    return quaternion_conjugate(data[..., :4]), -data[..., 4:]


def _from_dual_quaternion(real: torch.Tensor, dual: torch.Tensor) -> torch.Tensor:
    """Inverse of _to_dual_quaternion."""
    real, dual = torch.broadcast_tensors(real, dual)
    return torch.cat([quaternion_conjugate(real), -dual], dim=-1)


def _motor_product(x: torch.Tensor, y: torch.Tensor) -> torch.Tensor:
    a1, b1 = _to_dual_quaternion(x)
    a2, b2 = _to_dual_quaternion(y)
    real = quaternion_multiply(a1, a2)
    dual = quaternion_multiply(a1, b2) + quaternion_multiply(b1, a2)
    return _from_dual_quaternion(real, dual)


class Motor(BladeSubset):
    """
    A motor [s, e23, e31, e12, e0123, e01, e02, e03] of shape (..., 8).

    Products with ``*`` compose motions: (a * b) applies b first, then a.
    """

    NUM_COMPONENTS = 8
    BLADES = MOTOR_BLADES

    # === Factories ===

    @classmethod
    def identity(
        cls,
        batch_shape: Union[int, Tuple[int, ...]] = (),
        device: Optional[torch.device] = None,
        dtype: Optional[torch.dtype] = None
    ) -> 'Motor':
        """Create identity motor (no motion)."""
        data = cls._zeros(batch_shape, device=device, dtype=dtype)
        data[..., 0] = 1.0
        return cls(data)

    @classmethod
    def zero(
        cls,
        batch_shape: Union[int, Tuple[int, ...]] = (),
        device: Optional[torch.device] = None,
        dtype: Optional[torch.dtype] = None
    ) -> 'Motor':
        return cls(cls._zeros(batch_shape, device=device, dtype=dtype))

    @classmethod
    def from_parts(cls, real: Rotor, dual: Rotor) -> 'Motor':
        """Motor from its real part [s, e23, e31, e12] and dual part [e0123, e01, e02, e03]."""
        r, d = torch.broadcast_tensors(real.data, dual.data)
        return cls(torch.cat([r, d], dim=-1))

    @classmethod
    def from_rotor(cls, rotor: Rotor) -> 'Motor':
        return cls(torch.cat([rotor.data, torch.zeros_like(rotor.data)], dim=-1))

    @classmethod
    def from_translation(cls, translation: TensorLike) -> 'Motor':
        """
        Pure translation.

        Args:
            translation: Translation vector of shape (..., 3)
        """
        t = as_tensor(translation)
        real = torch.zeros(*t.shape[:-1], 4, device=t.device, dtype=t.dtype)
        real[..., 0] = 1.0
        return cls(torch.cat([real, torch.zeros_like(t[..., :1]), -0.5 * t], dim=-1))

    @classmethod
    def from_axis_angle(cls, axis: TensorLike, angle: Union[float, torch.Tensor]) -> 'Motor':
        """Rotation about the line through the origin along ``axis``."""
        return cls.from_rotor(Rotor.from_axis_angle(axis, angle))

    @classmethod
    def from_rotor_translation(cls, rotor: Rotor, translation: TensorLike) -> 'Motor':
        """
        Rotation by ``rotor`` followed by a translation.

        Args:
            rotor: Rotor of batch shape (...)
            translation: Translation vector of shape (..., 3)

        Returns:
            T * R
        """
        t = as_tensor(translation, dtype=rotor.dtype, device=rotor.device)
        return cls.from_translation(t) * cls.from_rotor(rotor)

    @classmethod
    def from_axis_angle_translation(
        cls,
        axis: TensorLike,
        angle: Union[float, torch.Tensor],
        translation: TensorLike
    ) -> 'Motor':
        rotor = Rotor.from_axis_angle(axis, angle)
        return cls.from_rotor_translation(rotor, translation)

    @classmethod
    def from_screw_coordinates(
        cls,
        direction: Union[TensorLike, ScrewCoordinates],
        moment: Optional[TensorLike] = None,
        angle: Optional[Union[float, torch.Tensor]] = None,
        translation: Optional[Union[float, torch.Tensor]] = None
    ) -> 'Motor':
        """
        Screw motion: rotation by ``angle`` about the axis line (direction,
        moment) combined with a translation of ``translation`` along it.

        Elements whose angle is approximately zero are pure translations by
        translation * direction, whatever their moment.

        Args:
            direction: Unit axis direction of shape (..., 3), or a
                       ScrewCoordinates holding every field
            moment: Axis moment of shape (..., 3)
            angle: Rotation angle of shape (...)
            translation: Translation along the axis of shape (...)

        Returns:
            exp(-½ (angle * L + translation * e0 direction))
        """
        if isinstance(direction, ScrewCoordinates):
            screw = direction
            direction, moment = screw.direction, screw.moment
            angle, translation = screw.angle, screw.translation

        l = as_tensor(direction)
        m = as_tensor(moment, dtype=l.dtype, device=l.device)
        angle = torch.as_tensor(angle, dtype=l.dtype, device=l.device)
        translation = torch.as_tensor(translation, dtype=l.dtype, device=l.device)

        batch = torch.broadcast_shapes(l.shape[:-1], m.shape[:-1], angle.shape, translation.shape)
        l, m = l.expand(*batch, 3), m.expand(*batch, 3)
        angle, translation = angle.expand(batch), translation.expand(batch)

        half = 0.5 * angle
        cos_h = torch.cos(half).unsqueeze(-1)
        sin_h = torch.sin(half).unsqueeze(-1)
        tau = translation.unsqueeze(-1)

        general = torch.cat([
            cos_h,
            -sin_h * l,
            0.5 * tau * sin_h,
            -sin_h * m - 0.5 * tau * cos_h * l,
        ], dim=-1)
        pure = cls.from_translation(tau * l).data

        translating = is_approx_zero(angle)
        log_branch(logger, translating, "pure translation in from_screw_coordinates")
        return cls(torch.where(translating.unsqueeze(-1), pure, general))

    # === Components ===

    @property
    def s(self) -> torch.Tensor:
        return self.data[..., 0]

    @property
    def e0123(self) -> torch.Tensor:
        return self.data[..., 4]

    @property
    def real(self) -> Rotor:
        """Real part [s, e23, e31, e12]."""
        return Rotor(self.data[..., :4])

    @property
    def dual(self) -> Rotor:
        """Dual part [e0123, e01, e02, e03], stored in a 4-component rotor."""
        return Rotor(self.data[..., 4:])

    def get_rotor(self) -> Rotor:
        return self.real

    def get_translation(self) -> torch.Tensor:
        """
        Translation applied after the rotation, of shape (..., 3).

        Computed as 2 * vec(b a*) / |a|² on the dual quaternion view, so
        non-unit motors yield the same translation as their normalization.
        """
        a, b = _to_dual_quaternion(self.data)
        t = 2.0 * quaternion_multiply(b, quaternion_conjugate(a))[..., 1:]
        return t / length_squared(a).unsqueeze(-1)

    def is_simple(self) -> torch.Tensor:
        """A motor is simple when its pseudoscalar part vanishes."""
        return is_approx_zero(self.e0123)

    # === Algebra ===

    def reverse(self) -> 'Motor':
        return Motor(self.data * self.data.new_tensor([1, -1, -1, -1, 1, -1, -1, -1]))

    def magnitude_squared(self) -> torch.Tensor:
        """Squared norm of the real part."""
        return length_squared(self.data[..., :4])

    def magnitude(self) -> torch.Tensor:
        return torch.sqrt(self.magnitude_squared())

    def vanishing_magnitude_squared(self) -> torch.Tensor:
        return length_squared(self.data[..., 4:])

    def vanishing_magnitude(self) -> torch.Tensor:
        return torch.sqrt(self.vanishing_magnitude_squared())

    def normalized(self) -> 'Motor':
        return self / self.magnitude()

    def inverse(self) -> 'Motor':
        return self.reverse() / self.magnitude_squared()

    def __mul__(self, other):
        """Motor composition (with a motor or a rotor), or scaling by a scalar."""
        if isinstance(other, Rotor):
            other = Motor.from_rotor(other)
        if isinstance(other, Motor):
            return Motor(_motor_product(self.data, other.data))
        return super().__mul__(other)

    def __rmul__(self, other):
        if isinstance(other, Rotor):
            return Motor(_motor_product(Motor.from_rotor(other).data, self.data))
        return super().__rmul__(other)

    def __truediv__(self, other):
        """a / b = a * inverse(b) for motors; coefficient division for scalars."""
        if isinstance(other, Motor):
            return self * other.inverse()
        return super().__truediv__(other)

    # === Lie maps ===

    @staticmethod
    def exp(line: Line) -> 'Motor':
        """
        Exponential of a bivector.

        The bivector B = (d, m) is split into commuting parts
        B = u l + v l e0123 with l a unit line, giving
        exp(B) = cos u + sin u l + v (cos u l - sin u) e0123.

        When d vanishes B is ideal, B² = 0 and exp(B) = 1 + B.

        Args:
            line: Bivector of batch shape (...)

        Returns:
            Motor of batch shape (...)
        """
        d, m = line.direction, line.moment
        r = length_squared(d)

        ideal = is_square_approx_zero(r)
        log_branch(logger, ideal, "ideal generator in exp")

        safe_r = torch.where(ideal, torch.ones_like(r), r)
        u = torch.sqrt(safe_r)
        rho = dot(d, m) / u

        u_ = u.unsqueeze(-1)
        l_d = d / u_
        l_m = m / u_ - (dot(d, m) / (safe_r * u)).unsqueeze(-1) * d

        cos_u = torch.cos(u).unsqueeze(-1)
        sin_u = torch.sin(u).unsqueeze(-1)
        rho_ = rho.unsqueeze(-1)
        general = torch.cat([
            cos_u,
            sin_u * l_d,
            rho_ * sin_u,
            sin_u * l_m + rho_ * cos_u * l_d,
        ], dim=-1)

        one = torch.ones_like(r).unsqueeze(-1)
        translation = torch.cat([one, torch.zeros_like(d), torch.zeros_like(one), m], dim=-1)
        return Motor(torch.where(ideal.unsqueeze(-1), translation, general))

    def log(self) -> Line:
        """
        Logarithm: the bivector B with exp(B) equal to this motor.

        The motor is scaled by its magnitude first, so exp(log(m)) is the
        normalized motor. Pure translations give a vanishing line.
        """
        M = self.data / self.magnitude().unsqueeze(-1)
        s, v, e0123, e0 = M[..., 0], M[..., 1:4], M[..., 4], M[..., 5:]

        sin_u = torch.norm(v, dim=-1)
        translating = is_approx_zero(sin_u)
        log_branch(logger, translating, "pure translation in log")

        safe_sin = torch.where(translating, torch.ones_like(sin_u), sin_u)
        u = torch.atan2(sin_u, s)
        rho = e0123 / safe_sin
        l_d = v / safe_sin.unsqueeze(-1)
        l_m = (e0 - (rho * s).unsqueeze(-1) * l_d) / safe_sin.unsqueeze(-1)

        direction = u.unsqueeze(-1) * l_d
        moment = u.unsqueeze(-1) * l_m + rho.unsqueeze(-1) * l_d

        safe_s = torch.where(translating, s, torch.ones_like(s))
        direction = torch.where(translating.unsqueeze(-1), torch.zeros_like(direction), direction)
        moment = torch.where(translating.unsqueeze(-1), e0 / safe_s.unsqueeze(-1), moment)
        return Line(torch.cat([direction, moment], dim=-1))

    def pow(self, p: Union[float, torch.Tensor]) -> 'Motor':
        """m^p = exp(p * log(m)); p may be a tensor broadcasting against the batch."""
        return Motor.exp(self.log() * torch.as_tensor(p, dtype=self.dtype, device=self.device))

    # === Square roots ===

    def sqrt(self) -> 'Motor':
        """
        Square root of a unit motor.

        For s >= 0 this is (1 + M) normalized by the sturdy number
        |1 + M| = sqrt(2 (1 + s)) (1 + e0123 / (2 (1 + s)) I).
        For s < 0 the same construction is applied to -M: the result is
        (M - 1) normalized, a square root of -M, which performs the same
        rigid motion.
        """
        s, v, e0123, e0 = self.s, self.data[..., 1:4], self.e0123, self.data[..., 5:]
        positive = s >= 0
        log_branch(logger, ~positive, "negative-scalar branch in sqrt")

        sign = torch.where(positive, torch.ones_like(s), -torch.ones_like(s))
        num = 2.0 * (1.0 + sign * s)
        g4 = e0123 / num

        # (1 + M)(1 - g4 I) for s >= 0, (M - 1)(1 + g4 I) otherwise
        root = torch.cat([
            (s + sign).unsqueeze(-1),
            v,
            (0.5 * e0123).unsqueeze(-1),
            e0 + (sign * g4).unsqueeze(-1) * v,
        ], dim=-1)
        return Motor(root / torch.sqrt(num).unsqueeze(-1))

    def fast_sqrt(self) -> 'Motor':
        """
        Positive multiple (1 + s) sqrt(2 (1 + s)) of ``sqrt()``.

        No square root is taken; only valid for s > -1. Normalize the
        result before using it as a transform.
        """
        s, v, e0123, e0 = self.s, self.data[..., 1:4], self.e0123, self.data[..., 5:]
        scaling = 1.0 + s
        half_g4 = 0.5 * e0123
        return Motor(torch.cat([
            (scaling * scaling).unsqueeze(-1),
            scaling.unsqueeze(-1) * v,
            (scaling * half_g4).unsqueeze(-1),
            scaling.unsqueeze(-1) * e0 + half_g4.unsqueeze(-1) * v,
        ], dim=-1))

    def oriented_sqrt(self) -> 'Motor':
        """
        Square root that keeps the orientation of the half motion.

        When s < -0.5 the root from ``sqrt()`` is composed with a 180°
        rotation about its own y basis vector. This is a heuristic and
        emits a warning when applied.
        """
        root = self.sqrt()
        flip = self.s < -0.5
        if bool(flip.any()):
            warnings.warn(
                "Motor.oriented_sqrt applied its 180 degree flip heuristic",
                RuntimeWarning,
            )
            axis = root.get_rotor().get_y_basis_vector()
            flipped = Rotor.from_axis_angle(axis, PI) * root
            root = Motor(torch.where(flip.unsqueeze(-1), flipped.data, root.data))
        return root

    # === Screw coordinates ===

    def to_screw_coordinates(self) -> ScrewCoordinates:
        """
        Decompose into a rotation about an axis line and a translation along it.

        Elements without rotation have no axis: the result holds the
        normalized translation direction, a zero moment, a zero angle and
        ``axis_defined`` False.
        """
        M = self.data / self.magnitude().unsqueeze(-1)
        s, v, e0123, e0 = M[..., 0], M[..., 1:4], M[..., 4], M[..., 5:]

        sin_h = torch.norm(v, dim=-1)
        axis_defined = ~is_approx_zero(sin_h)
        log_branch(logger, ~axis_defined, "pure translation in to_screw_coordinates")

        safe_sin = torch.where(axis_defined, sin_h, torch.ones_like(sin_h))
        angle = 2.0 * torch.atan2(sin_h, s)
        direction = -v / safe_sin.unsqueeze(-1)
        translation = 2.0 * e0123 / safe_sin
        moment = -(e0 + (0.5 * translation * s).unsqueeze(-1) * direction) / safe_sin.unsqueeze(-1)

        t = self.get_translation()
        t_len = torch.norm(t, dim=-1)
        t_dir = safe_divide(t, t_len.unsqueeze(-1))

        defined = axis_defined.unsqueeze(-1)
        return ScrewCoordinates(
            direction=torch.where(defined, direction, t_dir),
            moment=torch.where(defined, moment, torch.zeros_like(moment)),
            angle=torch.where(axis_defined, angle, torch.zeros_like(angle)),
            translation=torch.where(axis_defined, translation, t_len),
            axis_defined=axis_defined,
        )

    # === Matrices ===

    def as_transform(self) -> torch.Tensor:
        """
        Homogeneous 4x4 matrix of shape (..., 4, 4) acting on column vectors.

        The rotation block is normalized, so scaled motors give the same
        matrix as their normalization.
        """
        rotor = self.get_rotor()
        M = rotor.as_transform()
        M[..., :3, :3] = M[..., :3, :3] / rotor.length_squared()[..., None, None]
        M[..., :3, 3] = self.get_translation()
        return M

