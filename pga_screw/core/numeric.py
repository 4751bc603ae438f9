"""
Numeric helpers shared by every value type.

Tolerance checks default to the process-wide configuration (see
``pga_screw.utils.config``) so a single ``set_config`` call changes how
degenerate elements are detected everywhere.
"""

from __future__ import annotations
import logging
from typing import Optional, Sequence, Union

import torch

from ..utils.config import get_config
from .types import TensorLike


# =============================================================================
# Tensor Conversion
# =============================================================================

def as_tensor(
    data: TensorLike,
    dtype: Optional[torch.dtype] = None,
    device: Optional[torch.device] = None
) -> torch.Tensor:
    """
    Convert floats, sequences, numpy arrays or tensors to a float tensor.

    Tensors and numpy arrays keep their floating dtype unless one is given;
    Python numbers and sequences use the configured default dtype.

    Args:
        data: Input coefficients
        dtype: Optional target dtype
        device: Optional target device

    Returns:
        Floating point tensor
    """
    if isinstance(data, torch.Tensor):
        tensor = data
    else:
        if dtype is None and not hasattr(data, 'dtype'):
            dtype = get_config().torch_dtype
        tensor = torch.as_tensor(data, dtype=dtype)

    if not tensor.is_floating_point():
        tensor = tensor.to(dtype or get_config().torch_dtype)
    if dtype is not None or device is not None:
        tensor = tensor.to(device=device, dtype=dtype)
    return tensor


def stack(components: Sequence[torch.Tensor]) -> torch.Tensor:
    """Broadcast components against each other and stack them on a new last dim."""
    return torch.stack(torch.broadcast_tensors(*components), dim=-1)


def expand_parameter(t: Union[float, torch.Tensor], like: torch.Tensor) -> torch.Tensor:
    """
    Convert an interpolation parameter to a tensor matching ``like``.

    A tensor parameter broadcasts against the batch shape; a trailing
    singleton dimension is appended so it scales coefficient vectors.
    """
    t = torch.as_tensor(t, dtype=like.dtype, device=like.device)
    return t.unsqueeze(-1)


# =============================================================================
# Tolerances
# =============================================================================

def is_approx_zero(x: torch.Tensor, eps: Optional[float] = None) -> torch.Tensor:
    """Element-wise |x| < eps (linear tolerance)."""
    if eps is None:
        eps = get_config().epsilon
    return torch.abs(x) < eps


def is_square_approx_zero(x: torch.Tensor, eps2: Optional[float] = None) -> torch.Tensor:
    """Element-wise |x| < eps2, for quantities that are already squared."""
    if eps2 is None:
        eps2 = get_config().epsilon2
    return torch.abs(x) < eps2


def safe_divide(
    num: torch.Tensor,
    den: torch.Tensor,
    eps: Optional[float] = None
) -> torch.Tensor:
    """
    Divide where |den| >= eps and return zero elsewhere.

    The denominator is replaced by one before dividing so that gradients
    stay finite on the masked elements.
    """
    small = is_approx_zero(den, eps)
    den = torch.where(small, torch.ones_like(den), den)
    return torch.where(small, torch.zeros_like(num / den), num / den)


# =============================================================================
# Scalar Interpolation
# =============================================================================

def lerp(a, b, t):
    """Linear interpolation a + t * (b - a)."""
    return a + t * (b - a)


def inv_lerp(a, b, x):
    """Parameter t such that lerp(a, b, t) == x."""
    return (x - a) / (b - a)


# =============================================================================
# Vector Helpers
# =============================================================================

def dot(a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
    """Dot product over the last dimension."""
    return (a * b).sum(dim=-1)


def cross(a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
    """Cross product of (..., 3) vectors with broadcasting."""
    a, b = torch.broadcast_tensors(a, b)
    return torch.linalg.cross(a, b, dim=-1)


def length_squared(v: torch.Tensor) -> torch.Tensor:
    return dot(v, v)


# =============================================================================
# Logging
# =============================================================================

def log_branch(logger: logging.Logger, mask: torch.Tensor, message: str) -> None:
    """Emit a debug record when a degenerate branch is taken for any element."""
    if logger.isEnabledFor(logging.DEBUG) and bool(mask.any()):
        logger.debug("%s (%d of %d elements)", message, int(mask.sum()), mask.numel())
