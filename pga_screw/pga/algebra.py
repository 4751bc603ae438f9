"""
Full Projective Geometric Algebra (PGA) implementation for G(3,0,1).

PGA is an algebra with 16 basis elements organized by grade:
- Grade 0 (scalar): 1
- Grade 1 (vectors/planes): e₀, e₁, e₂, e₃
- Grade 2 (bivectors/lines): e₀₁, e₀₂, e₀₃, e₁₂, e₃₁, e₂₃
- Grade 3 (trivectors/points): e₀₂₁, e₀₁₃, e₀₃₂, e₁₂₃
- Grade 4 (pseudoscalar): e₀₁₂₃

The metric signature is (3,0,1) meaning:
- e₁² = e₂² = e₃² = +1 (Euclidean)
- e₀² = 0 (degenerate/null direction)

Component ordering:
[s, e0, e1, e2, e3, e01, e02, e03, e12, e31, e23, e021, e013, e032, e123, e0123]
 0   1   2   3   4   5    6    7    8    9    10   11    12    13    14    15

With this ordering the right complement (hodge dual) of slot i is slot
15 - i with a positive sign, so ``hdual`` is a flip of the last dimension.
"""

from __future__ import annotations
from typing import Dict, Optional, Tuple, Union
import torch

from ..core.base import GeometricValue
from ..core.constants import (
    BLADE_FACTORS, BLADE_NAMES, NUM_BLADES,
    IDX_S, IDX_E0, IDX_E1, IDX_E2, IDX_E3,
    IDX_E01, IDX_E02, IDX_E03, IDX_E12, IDX_E31, IDX_E23,
    IDX_E021, IDX_E013, IDX_E032, IDX_E123, IDX_E0123,
)
from ..core.numeric import length_squared
from ..core.types import ScalarLike


# Metric: e0^2 = 0, e1^2 = e2^2 = e3^2 = 1
METRIC = (0, 1, 1, 1)

# Grade of each blade
BLADE_GRADES = tuple(len(factors) for factors in BLADE_FACTORS)

GRADE_MASKS = tuple(
    [i for i in range(NUM_BLADES) if BLADE_GRADES[i] == k] for k in range(5)
)

# Reversion: grade k has sign (-1)^(k(k-1)/2), negating grades 2 and 3
REVERSION_SIGNS = torch.tensor(
    [(-1) ** (g * (g - 1) // 2) for g in BLADE_GRADES], dtype=torch.float64
)

# Grade involution: odd grades get negated
INVOLUTION_SIGNS = torch.tensor(
    [(-1) ** g for g in BLADE_GRADES], dtype=torch.float64
)

# Clifford conjugation: reversion + grade involution, negating grades 1 and 2
CONJUGATION_SIGNS = REVERSION_SIGNS * INVOLUTION_SIGNS


def _multiply_blades(a: Tuple[int, ...], b: Tuple[int, ...]) -> Tuple[Tuple[int, ...], int]:
    """
    Multiply two blades given as tuples of basis-vector indices.

    Bubble sorts the concatenated factors into ascending order, flipping
    the sign for every swap of distinct vectors and contracting equal
    neighbours with the metric.

    Returns:
        (sorted factors, sign); sign is 0 when an e0 pair contracts
    """
    combined = list(a) + list(b)
    sign = 1

    changed = True
    while changed:
        changed = False
        i = 0
        while i < len(combined) - 1:
            if combined[i] == combined[i + 1]:
                m = METRIC[combined[i]]
                if m == 0:
                    return (), 0
                sign *= m
                del combined[i:i + 2]
                changed = True
            elif combined[i] > combined[i + 1]:
                combined[i], combined[i + 1] = combined[i + 1], combined[i]
                sign = -sign
                changed = True
                i += 1
            else:
                i += 1

    return tuple(combined), sign


def _build_product_tables() -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
    """
    Build the bilinear product tables of G(3,0,1).

    ``table[i, j, k]`` is the coefficient of blade k in blade_i * blade_j.
    The outer and inner tables keep only the terms whose result grade is
    grade_i + grade_j and |grade_i - grade_j| respectively.

    Returns:
        geometric, outer, inner: (16, 16, 16) float64 tensors
    """
    # Sorted factors -> (slot, sign of the stored blade relative to sorted)
    lookup: Dict[Tuple[int, ...], Tuple[int, int]] = {}
    for idx, factors in enumerate(BLADE_FACTORS):
        canonical, sign = _multiply_blades(factors, ())
        lookup[canonical] = (idx, sign)

    geometric = torch.zeros(NUM_BLADES, NUM_BLADES, NUM_BLADES, dtype=torch.float64)
    for i, a in enumerate(BLADE_FACTORS):
        for j, b in enumerate(BLADE_FACTORS):
            factors, sign = _multiply_blades(a, b)
            if sign == 0:
                continue
            k, blade_sign = lookup[factors]
            geometric[i, j, k] = sign * blade_sign

    grades = torch.tensor(BLADE_GRADES)
    gi = grades.view(-1, 1, 1)
    gj = grades.view(1, -1, 1)
    gk = grades.view(1, 1, -1)

    outer = geometric * (gk == gi + gj)
    inner = geometric * (gk == (gi - gj).abs())
    return geometric, outer, inner


# Build product tables at module load time
GEOMETRIC_TABLE, OUTER_TABLE, INNER_TABLE = _build_product_tables()


def _bilinear(a: torch.Tensor, b: torch.Tensor, table: torch.Tensor) -> torch.Tensor:
    """Contract (..., 16) x (..., 16) coefficients with a (16, 16, 16) table."""
    pairs = a.unsqueeze(-1) * b.unsqueeze(-2)
    table = table.to(pairs).reshape(NUM_BLADES * NUM_BLADES, NUM_BLADES)
    return pairs.flatten(-2) @ table


class Multivector(GeometricValue):
    """
    A multivector in the Projective Geometric Algebra G(3,0,1).

    Components are stored as a tensor of shape (..., 16) where the last
    dimension contains the coefficients for each basis element.

    The algebra supports:
    - Geometric product (``*``)
    - Outer (wedge) product (``^``)
    - Inner (dot) product (``|``)
    - Regressive (vee) product (``&``)
    - Reversion (``~``), hodge dual, conjugation, involution
    - Norms and the normalizers of planes, lines and points
    """

    NUM_COMPONENTS = NUM_BLADES

    @property
    def mv(self) -> torch.Tensor:
        """The raw (..., 16) coefficient tensor."""
        return self.data

    def _signed(self, signs: torch.Tensor) -> 'Multivector':
        return Multivector(self.data * signs.to(self.data))

    # === Grade extraction ===

    def scalar(self) -> torch.Tensor:
        """Extract scalar (grade 0) component."""
        return self.data[..., IDX_S]

    def pseudoscalar(self) -> torch.Tensor:
        """Extract pseudoscalar (grade 4) component."""
        return self.data[..., IDX_E0123]

    def grade(self, k: int) -> 'Multivector':
        """Extract grade-k part of the multivector."""
        if k not in range(5):
            raise ValueError(f"Grade must be in 0..4, got {k}")
        result = torch.zeros_like(self.data)
        mask = GRADE_MASKS[k]
        result[..., mask] = self.data[..., mask]
        return Multivector(result)

    # === Unary operations ===

    def reverse(self) -> 'Multivector':
        """
        Reversion: ~M

        Reverses the order of basis vectors in each term.
        Grade k gets sign (-1)^(k(k-1)/2).
        """
        return self._signed(REVERSION_SIGNS)

    rev = reverse

    def __invert__(self) -> 'Multivector':
        """Operator ~: reversion."""
        return self.reverse()

    def conjugate(self) -> 'Multivector':
        """Clifford conjugation: reversion + grade involution."""
        return self._signed(CONJUGATION_SIGNS)

    conj = conjugate

    def involute(self) -> 'Multivector':
        """Grade involution: negate odd grades."""
        return self._signed(INVOLUTION_SIGNS)

    def hdual(self) -> 'Multivector':
        """
        Hodge dual (right complement).

        Maps each blade to its complement so that blade * hdual(blade) is
        the pseudoscalar; with this blade ordering that is slot 15 - i.
        """
        return Multivector(self.data.flip(-1))

    # === Norms ===

    def norm_squared(self) -> torch.Tensor:
        """
        Compute |M|² = ⟨M ~M⟩₀

        Returns the scalar part of M * ~M.
        """
        return (self * self.reverse()).scalar()

    def norm(self) -> torch.Tensor:
        """
        Compute |M| = √|⟨M ~M⟩₀|

        Uses absolute value to handle negative squared norms.
        """
        return torch.sqrt(torch.abs(self.norm_squared()))

    def inorm_squared(self) -> torch.Tensor:
        """Ideal norm squared: the norm squared of the hodge dual."""
        return self.hdual().norm_squared()

    def inorm(self) -> torch.Tensor:
        """Ideal norm."""
        return torch.sqrt(torch.abs(self.inorm_squared()))

    # === Type-specific normalizers ===

    def plane_normalize(self) -> 'Multivector':
        """Divide by the length of the plane normal (e1, e2, e3)."""
        n = self.data[..., [IDX_E1, IDX_E2, IDX_E3]]
        return self / torch.sqrt(length_squared(n))

    def line_normalize(self) -> 'Multivector':
        """Divide by the length of the line direction (e23, e31, e12)."""
        d = self.data[..., [IDX_E23, IDX_E31, IDX_E12]]
        return self / torch.sqrt(length_squared(d))

    def vanishing_line_normalize(self) -> 'Multivector':
        """Divide by the length of the ideal part (e01, e02, e03)."""
        m = self.data[..., [IDX_E01, IDX_E02, IDX_E03]]
        return self / torch.sqrt(length_squared(m))

    def point_normalize(self) -> 'Multivector':
        """Divide by the homogeneous weight e123."""
        return self / self.data[..., IDX_E123]

    # === Binary operations ===

    def __mul__(self, other: Union['Multivector', ScalarLike]) -> 'Multivector':
        """Geometric product, or scaling by a scalar."""
        if isinstance(other, Multivector):
            return geometric_product(self, other)
        if self._is_scalar(other):
            return self.scale(other)
        return NotImplemented

    def __xor__(self, other: 'Multivector') -> 'Multivector':
        """Outer (wedge) product: a ^ b."""
        if isinstance(other, Multivector):
            return outer_product(self, other)
        return NotImplemented

    def __or__(self, other: 'Multivector') -> 'Multivector':
        """Inner (dot) product: a | b."""
        if isinstance(other, Multivector):
            return inner_product(self, other)
        return NotImplemented

    def __and__(self, other: 'Multivector') -> 'Multivector':
        """Regressive (vee) product: a & b."""
        if isinstance(other, Multivector):
            return regressive_product(self, other)
        return NotImplemented

    def outer(self, other: 'Multivector') -> 'Multivector':
        """Outer (wedge) product."""
        return outer_product(self, other)

    def inner(self, other: 'Multivector') -> 'Multivector':
        """Inner (dot) product."""
        return inner_product(self, other)

    def regressive(self, other: 'Multivector') -> 'Multivector':
        """Regressive (vee) product."""
        return regressive_product(self, other)

    def __str__(self) -> str:
        if self.data.dim() > 1:
            return repr(self)
        terms = [
            f"{value:g}{'' if name == '1' else name}"
            for value, name in zip(self.data.tolist(), BLADE_NAMES)
            if value != 0.0
        ]
        return " + ".join(terms) if terms else "0"


def geometric_product(a: Multivector, b: Multivector) -> Multivector:
    """Compute the geometric product a * b."""
    return Multivector(_bilinear(a.data, b.data, GEOMETRIC_TABLE))


def outer_product(a: Multivector, b: Multivector) -> Multivector:
    """
    Compute the outer (wedge) product a ∧ b.

    For grade-r and grade-s elements: (a ∧ b) has grade r + s.
    """
    return Multivector(_bilinear(a.data, b.data, OUTER_TABLE))


def inner_product(a: Multivector, b: Multivector) -> Multivector:
    """
    Compute the inner (dot) product a · b.

    For grade-r and grade-s elements: (a · b) has grade |r - s|.
    """
    return Multivector(_bilinear(a.data, b.data, INNER_TABLE))


def regressive_product(a: Multivector, b: Multivector) -> Multivector:
    """
    Compute the regressive (vee) product a ∨ b.

    Defined as: a ∨ b = (a* ∧ b*)*
    where * denotes the hodge dual.
    """
    return outer_product(a.hdual(), b.hdual()).hdual()


def sandwich(a: Multivector, x: Multivector) -> Multivector:
    """
    Compute the sandwich product: a * x * ~a

    This is the fundamental operation for applying transformations in GA.
    """
    return a * x * a.reverse()


class BladeSubset(GeometricValue):
    """
    A value whose coefficients are a fixed subset of multivector blades.

    Subclasses list the multivector slot of each of their components in
    BLADES; conversion to and from Multivector scatters and gathers them.
    """

    BLADES: Tuple[int, ...] = ()

    def to_multivector(self) -> Multivector:
        """Embed into a full 16-component multivector."""
        mv = self.data.new_zeros(*self.shape, NUM_BLADES)
        mv[..., list(self.BLADES)] = self.data
        return Multivector(mv)

    @classmethod
    def from_multivector(cls, mv: Multivector):
        """Project a multivector onto this type's blades (other blades are dropped)."""
        return cls(mv.data[..., list(cls.BLADES)])


# === Factory functions for basis elements ===

def basis(
    idx: int,
    coeff: ScalarLike = 1.0,
    device: Optional[torch.device] = None,
    dtype: Optional[torch.dtype] = None
) -> Multivector:
    """
    Create a multiple of a single basis blade.

    Args:
        idx: Blade slot (0..15)
        coeff: Coefficient, a float or a tensor of batch shape
        device: Torch device
        dtype: Torch dtype

    Returns:
        Multivector of shape coeff.shape
    """
    if isinstance(coeff, torch.Tensor):
        mv = Multivector._zeros(coeff.shape, device=coeff.device, dtype=dtype or coeff.dtype)
    else:
        mv = Multivector._zeros((), device=device, dtype=dtype)
    mv[..., idx] = coeff
    return Multivector(mv)


def zero(
    batch_shape: Union[int, Tuple[int, ...]] = (),
    device: Optional[torch.device] = None,
    dtype: Optional[torch.dtype] = None
) -> Multivector:
    """Create the zero multivector."""
    return Multivector(Multivector._zeros(batch_shape, device=device, dtype=dtype))


def one(
    batch_shape: Union[int, Tuple[int, ...]] = (),
    device: Optional[torch.device] = None,
    dtype: Optional[torch.dtype] = None
) -> Multivector:
    """Create the unit scalar multivector."""
    mv = Multivector._zeros(batch_shape, device=device, dtype=dtype)
    mv[..., IDX_S] = 1.0
    return Multivector(mv)


def scalar(s: ScalarLike) -> Multivector:
    """Create a scalar multivector."""
    return basis(IDX_S, s)


def e0(coeff: ScalarLike = 1.0, **kwargs) -> Multivector:
    """Create e₀ basis element (degenerate direction, the plane at infinity)."""
    return basis(IDX_E0, coeff, **kwargs)


def e1(coeff: ScalarLike = 1.0, **kwargs) -> Multivector:
    """Create e₁ basis element (the plane x = 0)."""
    return basis(IDX_E1, coeff, **kwargs)


def e2(coeff: ScalarLike = 1.0, **kwargs) -> Multivector:
    return basis(IDX_E2, coeff, **kwargs)


def e3(coeff: ScalarLike = 1.0, **kwargs) -> Multivector:
    return basis(IDX_E3, coeff, **kwargs)


def e01(coeff: ScalarLike = 1.0, **kwargs) -> Multivector:
    """Create e₀₁ basis bivector (ideal line)."""
    return basis(IDX_E01, coeff, **kwargs)


def e02(coeff: ScalarLike = 1.0, **kwargs) -> Multivector:
    return basis(IDX_E02, coeff, **kwargs)


def e03(coeff: ScalarLike = 1.0, **kwargs) -> Multivector:
    return basis(IDX_E03, coeff, **kwargs)


def e12(coeff: ScalarLike = 1.0, **kwargs) -> Multivector:
    """Create e₁₂ basis bivector (the z axis)."""
    return basis(IDX_E12, coeff, **kwargs)


def e31(coeff: ScalarLike = 1.0, **kwargs) -> Multivector:
    """Create e₃₁ basis bivector (the y axis)."""
    return basis(IDX_E31, coeff, **kwargs)


def e23(coeff: ScalarLike = 1.0, **kwargs) -> Multivector:
    """Create e₂₃ basis bivector (the x axis)."""
    return basis(IDX_E23, coeff, **kwargs)


def e021(coeff: ScalarLike = 1.0, **kwargs) -> Multivector:
    """Create e₀₂₁ basis trivector (ideal point in z)."""
    return basis(IDX_E021, coeff, **kwargs)


def e013(coeff: ScalarLike = 1.0, **kwargs) -> Multivector:
    """Create e₀₁₃ basis trivector (ideal point in y)."""
    return basis(IDX_E013, coeff, **kwargs)


def e032(coeff: ScalarLike = 1.0, **kwargs) -> Multivector:
    """Create e₀₃₂ basis trivector (ideal point in x)."""
    return basis(IDX_E032, coeff, **kwargs)


def e123(coeff: ScalarLike = 1.0, **kwargs) -> Multivector:
    """Create e₁₂₃ basis trivector (the origin)."""
    return basis(IDX_E123, coeff, **kwargs)


def e0123(coeff: ScalarLike = 1.0, **kwargs) -> Multivector:
    """Create e₀₁₂₃ basis element (the PGA pseudoscalar)."""
    return basis(IDX_E0123, coeff, **kwargs)
