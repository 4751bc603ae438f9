"""
Quaternion operations used by the rotor and dual-quaternion encodings.

Quaternions are represented as (w, x, y, z) where w is the scalar part
and (x, y, z) is the vector part. This follows the convention:
    q = w + xi + yj + zk

A rotor (s, e23, e31, e12) corresponds to the quaternion (s, -e23, -e31, -e12).

All operations support batched inputs with shape (..., 4).
"""

from typing import Optional, Tuple, Union
import torch
import torch.nn.functional as F


_CONJUGATE_SIGNS = (1.0, -1.0, -1.0, -1.0)


def normalize_quaternion(q: torch.Tensor, eps: float = 1e-12) -> torch.Tensor:
    """
    Normalize quaternion to unit length.

    Args:
        q: Quaternion tensor of shape (..., 4) as [w, x, y, z]
        eps: Small constant for numerical stability

    Returns:
        Normalized quaternion of shape (..., 4)
    """
    return F.normalize(q, p=2, dim=-1, eps=eps)


def quaternion_conjugate(q: torch.Tensor) -> torch.Tensor:
    """
    Compute quaternion conjugate: q* = w - xi - yj - zk

    Args:
        q: Quaternion tensor of shape (..., 4) as [w, x, y, z]

    Returns:
        Conjugate quaternion of shape (..., 4)
    """
    return q * q.new_tensor(_CONJUGATE_SIGNS)


def quaternion_norm_squared(q: torch.Tensor) -> torch.Tensor:
    """Squared norm |q|² of shape (...)."""
    return (q * q).sum(dim=-1)


def quaternion_inverse(q: torch.Tensor, eps: float = 1e-12) -> torch.Tensor:
    """
    Compute quaternion inverse: q^{-1} = q* / |q|^2

    For unit quaternions, the inverse equals the conjugate.

    Args:
        q: Quaternion tensor of shape (..., 4) as [w, x, y, z]
        eps: Small constant for numerical stability

    Returns:
        Inverse quaternion of shape (..., 4)
    """
    norm_sq = quaternion_norm_squared(q).unsqueeze(-1).clamp(min=eps)
    return quaternion_conjugate(q) / norm_sq


def quaternion_multiply(q1: torch.Tensor, q2: torch.Tensor) -> torch.Tensor:
    """
    Compute quaternion product: q1 * q2

    Uses the Hamilton product formula:
        (a1 + b1i + c1j + d1k)(a2 + b2i + c2j + d2k)

    Args:
        q1: First quaternion of shape (..., 4) as [w, x, y, z]
        q2: Second quaternion of shape (..., 4) as [w, x, y, z]

    Returns:
        Product quaternion of shape (..., 4)
    """
    q1, q2 = torch.broadcast_tensors(q1, q2)
    w1, x1, y1, z1 = q1.unbind(dim=-1)
    w2, x2, y2, z2 = q2.unbind(dim=-1)

    w = w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2
    x = w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2
    y = w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2
    z = w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2

    return torch.stack([w, x, y, z], dim=-1)


def quaternion_dot(q1: torch.Tensor, q2: torch.Tensor) -> torch.Tensor:
    """4D dot product ⟨q1, q2⟩ of shape (...)."""
    return (q1 * q2).sum(dim=-1)


def quaternion_to_matrix(q: torch.Tensor, normalize: bool = True) -> torch.Tensor:
    """
    Convert quaternion to 3x3 rotation matrix.

    With ``normalize=False`` the quaternion is used as is and the matrix
    equals |q|² times the rotation, which is what a sandwich q v q* yields.

    Args:
        q: Quaternion of shape (..., 4) as [w, x, y, z]
        normalize: Normalize q first

    Returns:
        Rotation matrix of shape (..., 3, 3)
    """
    if normalize:
        q = normalize_quaternion(q)
    w, x, y, z = q.unbind(dim=-1)
    ww, xx, yy, zz = w * w, x * x, y * y, z * z

    # Row 1
    r00 = ww + xx - yy - zz
    r01 = 2 * (x * y - z * w)
    r02 = 2 * (x * z + y * w)

    # Row 2
    r10 = 2 * (x * y + z * w)
    r11 = ww - xx + yy - zz
    r12 = 2 * (y * z - x * w)

    # Row 3
    r20 = 2 * (x * z - y * w)
    r21 = 2 * (y * z + x * w)
    r22 = ww - xx - yy + zz

    return torch.stack([
        torch.stack([r00, r01, r02], dim=-1),
        torch.stack([r10, r11, r12], dim=-1),
        torch.stack([r20, r21, r22], dim=-1),
    ], dim=-2)


def quaternion_from_axis_angle(
    axis: torch.Tensor,
    angle: Union[float, torch.Tensor]
) -> torch.Tensor:
    """
    Create quaternion from axis-angle representation.

    q = cos(θ/2) + sin(θ/2) * (ax*i + ay*j + az*k)

    A positive angle rotates counter-clockwise about the axis.

    Args:
        axis: Rotation axis of shape (..., 3), will be normalized
        angle: Rotation angle in radians of shape (...)

    Returns:
        Unit quaternion of shape (..., 4) as [w, x, y, z]
    """
    axis = F.normalize(axis, p=2, dim=-1)
    half_angle = torch.as_tensor(angle, dtype=axis.dtype, device=axis.device) / 2

    w = torch.cos(half_angle).unsqueeze(-1)
    xyz = axis * torch.sin(half_angle).unsqueeze(-1)
    w, xyz = torch.broadcast_tensors(w, xyz)
    return torch.cat([w[..., :1], xyz], dim=-1)


def quaternion_to_axis_angle(q: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor]:
    """
    Convert quaternion to axis-angle representation.

    Args:
        q: Quaternion of shape (..., 4) as [w, x, y, z]

    Returns:
        axis: Rotation axis of shape (..., 3)
        angle: Rotation angle in radians of shape (...)
    """
    q = normalize_quaternion(q)
    w = q[..., 0]
    xyz = q[..., 1:]

    # angle = 2 * atan2(sin_half, cos_half)
    sin_half_angle = torch.norm(xyz, dim=-1)
    angle = 2 * torch.atan2(sin_half_angle, w)

    # Zero rotation yields a zero axis
    axis = F.normalize(xyz, p=2, dim=-1, eps=1e-12)

    return axis, angle


def quaternion_exp(q: torch.Tensor, eps: float = 1e-12) -> torch.Tensor:
    """
    Quaternion exponential.

    exp(w + v) = e^w * (cos|v| + sin|v| * v/|v|)

    Args:
        q: Quaternion of shape (..., 4)

    Returns:
        exp(q) of shape (..., 4)
    """
    w = q[..., :1]
    v = q[..., 1:]
    theta = torch.norm(v, dim=-1, keepdim=True)

    # sin(θ)/θ → 1 as θ → 0
    small = theta < eps
    sinc = torch.sin(theta) / torch.where(small, torch.ones_like(theta), theta)
    sinc = torch.where(small, torch.ones_like(theta), sinc)

    return torch.exp(w) * torch.cat([torch.cos(theta), v * sinc], dim=-1)


def quaternion_log(q: torch.Tensor, eps: float = 1e-12) -> torch.Tensor:
    """
    Quaternion logarithm (principal branch).

    log(q) = log|q| + atan2(|v|, w) * v/|v|

    A real quaternion has a zero vector part in the result.

    Args:
        q: Nonzero quaternion of shape (..., 4)

    Returns:
        log(q) of shape (..., 4)
    """
    w = q[..., :1]
    v = q[..., 1:]
    v_norm = torch.norm(v, dim=-1, keepdim=True)
    q_norm = torch.norm(q, dim=-1, keepdim=True)

    small = v_norm < eps
    scale = torch.atan2(v_norm, w) / torch.where(small, torch.ones_like(v_norm), v_norm)
    scale = torch.where(small, torch.zeros_like(v_norm), scale)

    return torch.cat([torch.log(q_norm), v * scale], dim=-1)


def quaternion_pow(q: torch.Tensor, t: Union[float, torch.Tensor]) -> torch.Tensor:
    """
    Quaternion power q^t = exp(t * log(q)).

    Args:
        q: Nonzero quaternion of shape (..., 4)
        t: Exponent, a float or a tensor broadcasting against (...)
    """
    t = torch.as_tensor(t, dtype=q.dtype, device=q.device)
    return quaternion_exp(t.unsqueeze(-1) * quaternion_log(q))


def quaternion_slerp(
    q0: torch.Tensor,
    q1: torch.Tensor,
    t: Union[float, torch.Tensor],
    shortest_path: bool = True
) -> torch.Tensor:
    """
    Spherical linear interpolation between two quaternions.

    q(t) = sin((1-t)θ)/sin(θ) * q0 + sin(tθ)/sin(θ) * q1

    Args:
        q0: Start quaternion of shape (..., 4)
        q1: End quaternion of shape (..., 4)
        t: Interpolation parameter in [0, 1], scalar or tensor of shape (...)
        shortest_path: Negate q1 when ⟨q0, q1⟩ < 0
                       (quaternions q and -q represent the same rotation)

    Returns:
        Interpolated quaternion of shape (..., 4)
    """
    q0 = normalize_quaternion(q0)
    q1 = normalize_quaternion(q1)

    dot = quaternion_dot(q0, q1).unsqueeze(-1)
    if shortest_path:
        q1 = torch.where(dot < 0, -q1, q1)
        dot = torch.abs(dot)

    # Clamp for numerical stability
    dot = torch.clamp(dot, -1.0, 1.0)
    theta = torch.acos(dot)

    t = torch.as_tensor(t, dtype=q0.dtype, device=q0.device).unsqueeze(-1)

    sin_theta = torch.sin(theta)

    # Avoid division by zero for small angles
    small_angle_mask = sin_theta.abs() < 1e-6
    safe_sin = torch.where(small_angle_mask, torch.ones_like(sin_theta), sin_theta)

    s0 = torch.sin((1 - t) * theta) / safe_sin
    s1 = torch.sin(t * theta) / safe_sin

    # For small angles, use linear interpolation
    s0 = torch.where(small_angle_mask, 1 - t, s0)
    s1 = torch.where(small_angle_mask, t, s1)

    return normalize_quaternion(s0 * q0 + s1 * q1)


def random_quaternion(
    batch_size: int,
    device: Optional[torch.device] = None,
    dtype: Optional[torch.dtype] = None,
    generator: Optional[torch.Generator] = None
) -> torch.Tensor:
    """
    Generate random unit quaternions uniformly distributed on S^3.

    Uses the Shoemake method for uniform random rotations.

    Args:
        batch_size: Number of random quaternions to generate
        device: Torch device
        dtype: Torch dtype
        generator: Optional random generator for reproducibility

    Returns:
        Random unit quaternions of shape (batch_size, 4)
    """
    u = torch.rand(batch_size, 3, device=device, dtype=dtype, generator=generator)
    u0, u1, u2 = u.unbind(dim=-1)

    # Shoemake's method
    sqrt_1_minus_u0 = torch.sqrt(1 - u0)
    sqrt_u0 = torch.sqrt(u0)
    two_pi_u1 = 2 * torch.pi * u1
    two_pi_u2 = 2 * torch.pi * u2

    w = sqrt_1_minus_u0 * torch.sin(two_pi_u1)
    x = sqrt_1_minus_u0 * torch.cos(two_pi_u1)
    y = sqrt_u0 * torch.sin(two_pi_u2)
    z = sqrt_u0 * torch.cos(two_pi_u2)

    return torch.stack([w, x, y, z], dim=-1)


def identity_quaternion(
    batch_size: int = 1,
    device: Optional[torch.device] = None,
    dtype: Optional[torch.dtype] = None
) -> torch.Tensor:
    """
    Create identity quaternion (no rotation).

    Returns:
        Identity quaternions of shape (batch_size, 4)
    """
    q = torch.zeros(batch_size, 4, device=device, dtype=dtype)
    q[:, 0] = 1.0
    return q


def rotate_vector(v: torch.Tensor, q: torch.Tensor) -> torch.Tensor:
    """
    Rotate a 3D vector by a unit quaternion.

    v' = q * v * q^{-1} (quaternion sandwich product)

    Args:
        v: Vector(s) of shape (..., 3)
        q: Unit quaternion(s) of shape (..., 4)

    Returns:
        Rotated vector(s) of shape (..., 3)
    """
    v_quat = torch.cat([torch.zeros_like(v[..., :1]), v], dim=-1)
    result = quaternion_multiply(quaternion_multiply(q, v_quat), quaternion_conjugate(q))
    return result[..., 1:]
