"""
Base class for the fixed-size geometric value types.

Class Hierarchy:
    GeometricValue (abstract)
    ├── Multivector
    └── BladeSubset (abstract, embeds into a Multivector)
        ├── Plane
        ├── Line
        ├── Point
        ├── Rotor
        └── Motor
    DualQuaternion (GeometricValue)

Every value wraps a tensor whose last dimension holds NUM_COMPONENTS
coefficients. Values are immutable by convention: operations return new
objects of the same class.
"""

from __future__ import annotations
from abc import ABC
from typing import Optional, Tuple, Union

import torch

from ..utils.config import get_config
from .numeric import as_tensor, is_square_approx_zero
from .types import TensorLike, ScalarLike


class GeometricValue(ABC):
    """
    Abstract fixed-size coefficient vector with batch dimensions.

    Subclasses set NUM_COMPONENTS. Addition, subtraction, negation and
    scalar scaling act coefficient-wise; subclasses override ``__mul__`` and
    ``__truediv__`` where the algebra defines a product.
    """

    NUM_COMPONENTS: int = 0

    def __init__(self, data: TensorLike):
        """
        Initialize from coefficients.

        Args:
            data: Tensor-like of shape (..., NUM_COMPONENTS)
        """
        data = as_tensor(data)
        if data.dim() == 0 or data.shape[-1] != self.NUM_COMPONENTS:
            got = data.shape[-1] if data.dim() > 0 else 0
            raise ValueError(f"Expected {self.NUM_COMPONENTS} components, got {got}")
        self.data = data

    @classmethod
    def _zeros(
        cls,
        batch_shape: Union[int, Tuple[int, ...]] = (),
        device: Optional[torch.device] = None,
        dtype: Optional[torch.dtype] = None
    ) -> torch.Tensor:
        """Zero coefficients honoring the configured default dtype and device."""
        if isinstance(batch_shape, int):
            batch_shape = (batch_shape,)
        config = get_config()
        return torch.zeros(
            *batch_shape, cls.NUM_COMPONENTS,
            device=device if device is not None else config.device,
            dtype=dtype or config.torch_dtype,
        )

    def _new(self, data: torch.Tensor):
        """Wrap coefficients in a new value of the same class."""
        return type(self)(data)

    # === Tensor properties ===

    @property
    def shape(self) -> torch.Size:
        """Batch shape (excluding the coefficient dimension)."""
        return self.data.shape[:-1]

    @property
    def device(self) -> torch.device:
        return self.data.device

    @property
    def dtype(self) -> torch.dtype:
        return self.data.dtype

    def to(self, *args, **kwargs):
        """Move to a device and/or dtype (same arguments as Tensor.to)."""
        return self._new(self.data.to(*args, **kwargs))

    def clone(self):
        """Create a copy."""
        return self._new(self.data.clone())

    def detach(self):
        """Detach from computation graph."""
        return self._new(self.data.detach())

    def __getitem__(self, index):
        """Index the batch dimensions."""
        if not isinstance(index, tuple):
            index = (index,)
        return self._new(self.data[index + (slice(None),)])

    def __len__(self) -> int:
        if self.data.dim() < 2:
            raise TypeError(f"{type(self).__name__} without batch dimensions has no len()")
        return self.data.shape[0]

    # === Coefficient-wise arithmetic ===

    @staticmethod
    def _is_scalar(other) -> bool:
        return isinstance(other, (int, float, torch.Tensor))

    def _scale_data(self, s: ScalarLike) -> torch.Tensor:
        """Multiply coefficients by a scalar or a batch-shaped tensor."""
        if isinstance(s, torch.Tensor):
            s = s.unsqueeze(-1)
        return self.data * s

    def scale(self, s: ScalarLike):
        """Multiply every coefficient by s."""
        return self._new(self._scale_data(s))

    def __add__(self, other):
        if type(other) is type(self):
            return self._new(self.data + other.data)
        return NotImplemented

    def __sub__(self, other):
        if type(other) is type(self):
            return self._new(self.data - other.data)
        return NotImplemented

    def __neg__(self):
        return self._new(-self.data)

    def __mul__(self, other):
        if self._is_scalar(other):
            return self.scale(other)
        return NotImplemented

    def __rmul__(self, other):
        if self._is_scalar(other):
            return self.scale(other)
        return NotImplemented

    def __truediv__(self, other):
        if self._is_scalar(other):
            if isinstance(other, torch.Tensor):
                return self._new(self.data / other.unsqueeze(-1))
            return self._new(self.data / other)
        return NotImplemented

    # === Comparison helpers ===

    def allclose(self, other: 'GeometricValue', atol: float = 1e-5, rtol: float = 1e-5) -> bool:
        """True when all coefficients match within tolerance."""
        return torch.allclose(self.data, other.data, atol=atol, rtol=rtol)

    def is_zero(self, eps2: Optional[float] = None) -> torch.Tensor:
        """Element-wise test that all squared coefficients are approximately zero."""
        return is_square_approx_zero((self.data * self.data).sum(dim=-1), eps2)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(shape={tuple(self.shape)}, device={self.device})"
