"""
Flat primitives of 3D PGA: planes, lines and points.

Each flat stores only the blades of its grade:

    Plane (e1, e2, e3, e0)               normal n, offset δ; locus n·x + δ = 0
    Line  (e23, e31, e12, e01, e02, e03) direction d, moment m = p × d
    Point (e032, e013, e021, e123)       homogeneous (X, w); w = 0 is a direction

Incidence and metric operations (meet, join, inner, projections,
reflections) are closed forms of the corresponding multivector products.
They are exposed as free functions that dispatch on the operand types:

    meet(plane, plane)        -> Line
    meet(plane, plane, plane) -> Point
    join(point, point)        -> Line
    inner(plane, point)       -> Line
    ...

Unsupported type pairs raise TypeError.
"""

from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Callable, Dict, Tuple, Union

import torch

from ..core.constants import PLANE_BLADES, LINE_BLADES, POINT_BLADES
from ..core.numeric import (
    as_tensor, stack, cross, dot, length_squared,
    is_approx_zero, is_square_approx_zero, log_branch,
)
from ..core.types import TensorLike
from .algebra import BladeSubset

if TYPE_CHECKING:
    from .motor import Motor

logger = logging.getLogger(__name__)

Flat = Union['Plane', 'Line', 'Point']


def _stack_values(*values: TensorLike) -> torch.Tensor:
    """Stack floats and tensors into one coefficient tensor with a shared dtype."""
    ref = next((v for v in values if isinstance(v, torch.Tensor)), None)
    kwargs = {} if ref is None else {'dtype': ref.dtype, 'device': ref.device}
    return stack([as_tensor(v, **kwargs) for v in values])


def _vector_and_scalar(vector: TensorLike, s: TensorLike) -> torch.Tensor:
    """Concatenate a (..., 3) vector with a scalar of matching batch shape."""
    vector = as_tensor(vector)
    s = as_tensor(s, dtype=vector.dtype, device=vector.device)
    return stack([*vector.unbind(-1), s])


class _FlatBase(BladeSubset):
    """Shared operators of planes, lines and points."""

    def reverse(self):
        raise NotImplementedError

    def magnitude_squared(self) -> torch.Tensor:
        raise NotImplementedError

    def magnitude(self) -> torch.Tensor:
        return torch.sqrt(self.magnitude_squared())

    def vanishing_magnitude(self) -> torch.Tensor:
        return torch.sqrt(self.vanishing_magnitude_squared())

    def inverse(self):
        """Multiplicative inverse: reverse / magnitude_squared."""
        return self.reverse() / self.magnitude_squared()

    def __mul__(self, other):
        """Scalar scaling, or the geometric product of two flats of the same type."""
        if type(other) is type(self):
            return _flat_product(self, other)
        return super().__mul__(other)

    def __truediv__(self, other):
        """Scalar division, or a * reverse(b) for two flats of the same type."""
        if type(other) is type(self):
            return _flat_product(self, other.reverse())
        return super().__truediv__(other)


def _flat_product(a: Flat, b: Flat) -> 'Motor':
    """Geometric product of two same-grade flats, an even element."""
    from .motor import Motor

    return Motor.from_multivector(a.to_multivector() * b.to_multivector())


# =============================================================================
# Plane
# =============================================================================

class Plane(_FlatBase):
    """
    A plane n·x + δ = 0 stored as (e1, e2, e3, e0).

    The plane is vanishing (the plane at infinity) when its normal is zero.
    """

    NUM_COMPONENTS = 4
    BLADES = PLANE_BLADES

    @classmethod
    def plane(cls, normal: TensorLike, distance: TensorLike) -> 'Plane':
        """
        Plane with the given normal at signed distance along it.

        Args:
            normal: Normal of shape (..., 3); the plane is n·x = distance
            distance: Offset of shape (...)
        """
        distance = as_tensor(distance)
        return cls(_vector_and_scalar(normal, -distance))

    @classmethod
    def from_coefficients(cls, a: TensorLike, b: TensorLike, c: TensorLike, d: TensorLike) -> 'Plane':
        """Plane a·x + b·y + c·z = d."""
        data = _stack_values(a, b, c, d)
        return cls(data * data.new_tensor([1.0, 1.0, 1.0, -1.0]))

    @classmethod
    def vanishing_plane(cls, delta: TensorLike) -> 'Plane':
        """Multiple of the plane at infinity, e0 = -delta."""
        delta = as_tensor(delta)
        zeros = torch.zeros_like(delta)
        return cls(stack([zeros, zeros, zeros, -delta]))

    @property
    def normal(self) -> torch.Tensor:
        """Unnormalized normal (e1, e2, e3) of shape (..., 3)."""
        return self.data[..., :3]

    @property
    def delta(self) -> torch.Tensor:
        """Offset coefficient e0 of shape (...)."""
        return self.data[..., 3]

    def magnitude_squared(self) -> torch.Tensor:
        return length_squared(self.normal)

    def vanishing_magnitude_squared(self) -> torch.Tensor:
        return self.delta * self.delta

    def vanishing_magnitude(self) -> torch.Tensor:
        return torch.abs(self.delta)

    def is_vanishing(self) -> torch.Tensor:
        return is_square_approx_zero(self.magnitude_squared())

    def normalized(self) -> 'Plane':
        """
        Scale to a unit normal.

        Vanishing planes normalize to the canonical plane at infinity
        (0, 0, 0, -1).
        """
        vanishing = self.is_vanishing()
        log_branch(logger, vanishing, "vanishing plane in normalized")

        mag = torch.where(vanishing, torch.ones_like(self.delta), self.magnitude())
        infinity = torch.zeros_like(self.data)
        infinity[..., 3] = -1.0
        return Plane(torch.where(vanishing.unsqueeze(-1), infinity, self.data / mag.unsqueeze(-1)))

    def reverse(self) -> 'Plane':
        """Grade 1 elements are their own reverse."""
        return Plane(self.data)

    def dual(self) -> 'Point':
        """The ideal point in the direction of the normal."""
        return Point.direction(self.normal)


# =============================================================================
# Line
# =============================================================================

class Line(_FlatBase):
    """
    A line stored by Plücker coordinates (e23, e31, e12, e01, e02, e03).

    The direction d is the Euclidean part and the moment m = p × d for any
    point p on the line. The line is vanishing (lies at infinity) when d = 0.
    """

    NUM_COMPONENTS = 6
    BLADES = LINE_BLADES

    @classmethod
    def line(cls, direction: TensorLike, point: TensorLike) -> 'Line':
        """Line through ``point`` along ``direction``."""
        direction = as_tensor(direction)
        point = as_tensor(point, dtype=direction.dtype, device=direction.device)
        return cls.from_plucker(direction, cross(point, direction))

    @classmethod
    def from_plucker(cls, direction: TensorLike, moment: TensorLike) -> 'Line':
        """Line from its direction and moment vectors."""
        direction = as_tensor(direction)
        moment = as_tensor(moment, dtype=direction.dtype, device=direction.device)
        direction, moment = torch.broadcast_tensors(direction, moment)
        return cls(torch.cat([direction, moment], dim=-1))

    @classmethod
    def vanishing_line(cls, direction: TensorLike) -> 'Line':
        """Line at infinity with the given ideal part (e01, e02, e03)."""
        moment = as_tensor(direction)
        return cls.from_plucker(torch.zeros_like(moment), moment)

    @property
    def direction(self) -> torch.Tensor:
        """Direction (e23, e31, e12) of shape (..., 3)."""
        return self.data[..., :3]

    @property
    def moment(self) -> torch.Tensor:
        """Moment (e01, e02, e03) of shape (..., 3)."""
        return self.data[..., 3:]

    def magnitude_squared(self) -> torch.Tensor:
        return length_squared(self.direction)

    def vanishing_magnitude_squared(self) -> torch.Tensor:
        return length_squared(self.moment)

    def is_vanishing(self) -> torch.Tensor:
        return is_square_approx_zero(self.magnitude_squared())

    def normalized(self) -> 'Line':
        """Scale to a unit direction, or to a unit moment for vanishing lines."""
        vanishing = self.is_vanishing()
        log_branch(logger, vanishing, "vanishing line in normalized")

        mag = torch.where(vanishing, self.vanishing_magnitude(), self.magnitude())
        return Line(self.data / mag.unsqueeze(-1))

    def reverse(self) -> 'Line':
        return Line(-self.data)


# =============================================================================
# Point
# =============================================================================

class Point(_FlatBase):
    """
    A point stored as (e032, e013, e021, e123).

    (X, w) with w != 0 is the finite point X / w; w = 0 is the ideal point
    (direction) X.
    """

    NUM_COMPONENTS = 4
    BLADES = POINT_BLADES

    @classmethod
    def point(cls, xyz: TensorLike) -> 'Point':
        """Finite point with weight 1."""
        xyz = as_tensor(xyz)
        return cls(_vector_and_scalar(xyz, torch.ones_like(xyz[..., 0])))

    @classmethod
    def direction(cls, xyz: TensorLike) -> 'Point':
        """Ideal point (direction) with weight 0."""
        xyz = as_tensor(xyz)
        return cls(_vector_and_scalar(xyz, torch.zeros_like(xyz[..., 0])))

    @property
    def xyz(self) -> torch.Tensor:
        """Homogeneous coordinates (e032, e013, e021) of shape (..., 3)."""
        return self.data[..., :3]

    @property
    def weight(self) -> torch.Tensor:
        """Homogeneous weight e123 of shape (...)."""
        return self.data[..., 3]

    def magnitude_squared(self) -> torch.Tensor:
        return self.weight * self.weight

    def magnitude(self) -> torch.Tensor:
        return torch.abs(self.weight)

    def vanishing_magnitude_squared(self) -> torch.Tensor:
        return length_squared(self.xyz)

    def is_vanishing(self) -> torch.Tensor:
        return is_approx_zero(self.weight)

    def normalized(self) -> 'Point':
        """Divide by the weight, or by |X| for ideal points."""
        vanishing = self.is_vanishing()
        log_branch(logger, vanishing, "ideal point in normalized")

        scale = torch.where(vanishing, self.vanishing_magnitude(), self.weight)
        return Point(self.data / scale.unsqueeze(-1))

    def reverse(self) -> 'Point':
        return Point(-self.data)

    def as_vector(self) -> torch.Tensor:
        """Euclidean coordinates X / w, or X for ideal points."""
        vanishing = self.is_vanishing()
        w = torch.where(vanishing, torch.ones_like(self.weight), self.weight)
        return self.xyz / w.unsqueeze(-1)


# Constants (unbatched, default dtype); use .to() to move them
Plane.VANISHING_PLANE = Plane([0.0, 0.0, 0.0, -1.0])
Plane.YZ = Plane([1.0, 0.0, 0.0, 0.0])
Plane.ZX = Plane([0.0, 1.0, 0.0, 0.0])
Plane.XY = Plane([0.0, 0.0, 1.0, 0.0])

Point.ZERO = Point([0.0, 0.0, 0.0, 0.0])
Point.ORIGIN = Point([0.0, 0.0, 0.0, 1.0])
Point.X_DIR = Point([1.0, 0.0, 0.0, 0.0])
Point.Y_DIR = Point([0.0, 1.0, 0.0, 0.0])
Point.Z_DIR = Point([0.0, 0.0, 1.0, 0.0])


# =============================================================================
# Type dispatch
# =============================================================================

_Table = Dict[Tuple[type, type], Callable]

_MEET: _Table = {}
_JOIN: _Table = {}
_INNER: _Table = {}
_FAST_PROJECT: _Table = {}
_PROJECT: _Table = {}
_FAST_REJECT: _Table = {}
_REJECT: _Table = {}
_FAST_REFLECT: _Table = {}
_IS_ON: _Table = {}


def _register(table: _Table, first: type, second: type):
    def decorator(fn: Callable) -> Callable:
        table[(first, second)] = fn
        return fn
    return decorator


def _dispatch(name: str, table: _Table, a, b):
    fn = table.get((type(a), type(b)))
    if fn is None:
        raise TypeError(
            f"{name} is not defined for {type(a).__name__} and {type(b).__name__}"
        )
    return fn(a, b)


def meet(a, b, c=None):
    """
    Outer product (intersection) of flats.

    plane ∧ plane -> Line; plane ∧ plane ∧ plane -> Point;
    plane ∧ line, line ∧ plane -> Point; plane ∧ point, point ∧ plane ->
    pseudoscalar coefficient; line ∧ line -> common Point of coplanar lines.

    Signs follow the outer product, so meeting a plane with the plane at
    infinity gives a negated vanishing line:
    meet(Plane.plane(n, 5), Plane.plane(0, -2)) = -Line.vanishing_line(2 n).
    """
    if c is not None:
        return meet(meet(a, b), c)
    return _dispatch("meet", _MEET, a, b)


def join(a, b, c=None):
    """
    Regressive product (span) of flats.

    point ∨ point -> Line; point ∨ point ∨ point -> Plane;
    line ∨ point, point ∨ line -> Plane; point ∨ plane, plane ∨ point ->
    scalar; line ∨ line -> common Plane of coplanar lines.
    """
    if c is not None:
        return join(join(a, b), c)
    return _dispatch("join", _JOIN, a, b)


def inner(a, b):
    """Inner product of flats (see the module docstring for result types)."""
    return _dispatch("inner", _INNER, a, b)


def is_on(a, b) -> torch.Tensor:
    """Element-wise incidence test: point on plane, point on line, line on plane."""
    return _dispatch("is_on", _IS_ON, a, b)


def incidence(a: Line, b: Line) -> torch.Tensor:
    """
    Scalar regressive product of two lines, d₁·m₂ + m₁·d₂.

    Zero iff the lines are coplanar (intersecting or parallel).
    """
    return dot(a.direction, b.moment) + dot(a.moment, b.direction)


# =============================================================================
# Meet (outer product)
# =============================================================================

@_register(_MEET, Plane, Plane)
def _meet_plane_plane(a: Plane, b: Plane) -> Line:
    a1, a2, a3, a0 = a.data.unbind(-1)
    b1, b2, b3, b0 = b.data.unbind(-1)
    return Line(stack([
        a2 * b3 - a3 * b2,
        a3 * b1 - a1 * b3,
        a1 * b2 - a2 * b1,
        a0 * b1 - a1 * b0,
        a0 * b2 - a2 * b0,
        a0 * b3 - a3 * b0,
    ]))


@_register(_MEET, Plane, Line)
def _meet_plane_line(p: Plane, l: Line) -> Point:
    p1, p2, p3, p0 = p.data.unbind(-1)
    l23, l31, l12, l01, l02, l03 = l.data.unbind(-1)
    return Point(stack([
        p2 * l03 - p3 * l02 - p0 * l23,
        p3 * l01 - p1 * l03 - p0 * l31,
        p1 * l02 - p2 * l01 - p0 * l12,
        p1 * l23 + p2 * l31 + p3 * l12,
    ]))


@_register(_MEET, Line, Plane)
def _meet_line_plane(l: Line, p: Plane) -> Point:
    return _meet_plane_line(p, l)


@_register(_MEET, Plane, Point)
def _meet_plane_point(p: Plane, x: Point) -> torch.Tensor:
    return p.delta * x.weight + dot(p.normal, x.xyz)


@_register(_MEET, Point, Plane)
def _meet_point_plane(x: Point, p: Plane) -> torch.Tensor:
    return -_meet_plane_point(p, x)


@_register(_MEET, Line, Line)
def _meet_line_line(a: Line, b: Line) -> Point:
    # Plane through b containing the common perpendicular, cut with a
    normal = cross(a.direction, b.direction)
    parallel = is_square_approx_zero(length_squared(normal))
    log_branch(logger, parallel, "parallel lines in meet")

    point = _meet_line_plane(a, _join_line_point(b, Point.direction(normal)))
    ideal = Point.direction(a.direction)
    return Point(torch.where(parallel.unsqueeze(-1), ideal.data, point.data))


# =============================================================================
# Join (regressive product)
# =============================================================================

@_register(_JOIN, Point, Point)
def _join_point_point(a: Point, b: Point) -> Line:
    a032, a013, a021, a123 = a.data.unbind(-1)
    b032, b013, b021, b123 = b.data.unbind(-1)
    return Line(stack([
        a032 * b123 - a123 * b032,
        a013 * b123 - a123 * b013,
        a021 * b123 - a123 * b021,
        a021 * b013 - a013 * b021,
        a032 * b021 - a021 * b032,
        a013 * b032 - a032 * b013,
    ]))


@_register(_JOIN, Line, Point)
def _join_line_point(l: Line, x: Point) -> Plane:
    l23, l31, l12, l01, l02, l03 = l.data.unbind(-1)
    x032, x013, x021, x123 = x.data.unbind(-1)
    return Plane(stack([
        l01 * x123 + l31 * x021 - l12 * x013,
        l02 * x123 + l12 * x032 - l23 * x021,
        l03 * x123 + l23 * x013 - l31 * x032,
        -l01 * x032 - l02 * x013 - l03 * x021,
    ]))


@_register(_JOIN, Point, Line)
def _join_point_line(x: Point, l: Line) -> Plane:
    return _join_line_point(l, x)


@_register(_JOIN, Point, Plane)
def _join_point_plane(x: Point, p: Plane) -> torch.Tensor:
    return dot(x.xyz, p.normal) + x.weight * p.delta


@_register(_JOIN, Plane, Point)
def _join_plane_point(p: Plane, x: Point) -> torch.Tensor:
    return -_join_point_plane(x, p)


@_register(_JOIN, Line, Line)
def _join_line_line(a: Line, b: Line) -> Plane:
    # Plane through a parallel to b; for parallel lines use b's closest point
    parallel = is_square_approx_zero(length_squared(cross(a.direction, b.direction)))
    log_branch(logger, parallel, "parallel lines in join")

    through_direction = _join_line_point(a, Point.direction(b.direction))
    closest = Point(stack([
        *cross(b.direction, b.moment).unbind(-1),
        b.magnitude_squared(),
    ]))
    through_point = _join_line_point(a, closest)
    return Plane(torch.where(parallel.unsqueeze(-1), through_point.data, through_direction.data))


# =============================================================================
# Inner product
# =============================================================================

@_register(_INNER, Plane, Plane)
def _inner_plane_plane(a: Plane, b: Plane) -> torch.Tensor:
    return dot(a.normal, b.normal)


@_register(_INNER, Line, Line)
def _inner_line_line(a: Line, b: Line) -> torch.Tensor:
    return -dot(a.direction, b.direction)


@_register(_INNER, Point, Point)
def _inner_point_point(a: Point, b: Point) -> torch.Tensor:
    return -a.weight * b.weight


@_register(_INNER, Plane, Line)
def _inner_plane_line(p: Plane, l: Line) -> Plane:
    p1, p2, p3, _ = p.data.unbind(-1)
    l23, l31, l12, l01, l02, l03 = l.data.unbind(-1)
    return Plane(stack([
        p3 * l31 - p2 * l12,
        p1 * l12 - p3 * l23,
        p2 * l23 - p1 * l31,
        -(p1 * l01 + p2 * l02 + p3 * l03),
    ]))


@_register(_INNER, Line, Plane)
def _inner_line_plane(l: Line, p: Plane) -> Plane:
    return -_inner_plane_line(p, l)


@_register(_INNER, Line, Point)
def _inner_line_point(l: Line, x: Point) -> Plane:
    l23, l31, l12 = l.direction.unbind(-1)
    x032, x013, x021, x123 = x.data.unbind(-1)
    return Plane(stack([
        -l23 * x123,
        -l31 * x123,
        -l12 * x123,
        l23 * x032 + l31 * x013 + l12 * x021,
    ]))


@_register(_INNER, Point, Line)
def _inner_point_line(x: Point, l: Line) -> Plane:
    return _inner_line_point(l, x)


@_register(_INNER, Plane, Point)
def _inner_plane_point(p: Plane, x: Point) -> Line:
    p1, p2, p3, _ = p.data.unbind(-1)
    x032, x013, x021, x123 = x.data.unbind(-1)
    return Line(stack([
        p1 * x123,
        p2 * x123,
        p3 * x123,
        p3 * x013 - p2 * x021,
        p1 * x021 - p3 * x032,
        p2 * x032 - p1 * x013,
    ]))


@_register(_INNER, Point, Plane)
def _inner_point_plane(x: Point, p: Plane) -> Line:
    return _inner_plane_point(p, x)


# =============================================================================
# Incidence predicates
# =============================================================================

@_register(_IS_ON, Point, Plane)
def _is_on_point_plane(x: Point, p: Plane) -> torch.Tensor:
    return is_approx_zero(_meet_plane_point(p, x))


@_register(_IS_ON, Point, Line)
def _is_on_point_line(x: Point, l: Line) -> torch.Tensor:
    return _join_line_point(l, x).is_zero()


@_register(_IS_ON, Line, Plane)
def _is_on_line_plane(l: Line, p: Plane) -> torch.Tensor:
    return _meet_plane_line(p, l).is_zero()


# =============================================================================
# Projections and rejections
# =============================================================================

def fast_project(a, b):
    """Projection of a onto b, up to a positive factor."""
    return _dispatch("fast_project", _FAST_PROJECT, a, b)


def project(a, b):
    """Projection of a onto b: (a · b) · b⁻¹ (points onto flats use a meet)."""
    return _dispatch("project", _PROJECT, a, b)


def fast_reject(a, b):
    """Rejection of point a from b, up to a positive factor."""
    return _dispatch("fast_reject", _FAST_REJECT, a, b)


def reject(a, b):
    """
    Rejection of point a from b: (a · b) · a⁻¹.

    From a plane this is the parallel plane through a; from a line, the
    parallel line through a.
    """
    return _dispatch("reject", _REJECT, a, b)


def _register_projections(flat: type) -> None:
    # Planes and lines project onto points by two inner products
    _FAST_PROJECT[(flat, Point)] = lambda a, b: inner(inner(a, b), b)
    _PROJECT[(flat, Point)] = lambda a, b: inner(inner(a, b), b.inverse())
    # Points project onto planes and lines by meeting the perpendicular
    _FAST_PROJECT[(Point, flat)] = lambda a, b: meet(inner(a, b), b)
    _PROJECT[(Point, flat)] = lambda a, b: meet(inner(a, b), b.inverse())
    _FAST_REJECT[(Point, flat)] = lambda a, b: inner(inner(a, b), a)
    _REJECT[(Point, flat)] = lambda a, b: inner(inner(a, b), a.inverse())


_register_projections(Plane)
_register_projections(Line)


# =============================================================================
# Reflections
# =============================================================================

def fast_reflect(a, b):
    """
    Reflection of a in b as the product b a b.

    The result is scaled by magnitude_squared(b) (and may carry the sign
    of the homogeneous representation); use ``reflect`` for the exact one.
    """
    return _dispatch("fast_reflect", _FAST_REFLECT, a, b)


def reflect(a, b):
    """Reflection of a in b: b a b / magnitude_squared(b). Applying it twice returns a."""
    reflected = fast_reflect(a, b)
    return reflected / b.magnitude_squared()


def _scaled(v: torch.Tensor, s: torch.Tensor) -> torch.Tensor:
    return v * s.unsqueeze(-1)


@_register(_FAST_REFLECT, Point, Plane)
def _reflect_point_plane(a: Point, b: Plane) -> Point:
    n, delta = b.normal, b.delta
    k = b.magnitude_squared()
    xyz = _scaled(a.xyz, k) - _scaled(n, 2.0 * dot(n, a.xyz)) - _scaled(n, 2.0 * delta * a.weight)
    return Point(stack([*xyz.unbind(-1), k * a.weight]))


@_register(_FAST_REFLECT, Plane, Plane)
def _reflect_plane_plane(a: Plane, b: Plane) -> Plane:
    k = b.magnitude_squared()
    return Plane(_scaled(b.data, 2.0 * dot(a.normal, b.normal)) - _scaled(a.data, k))


@_register(_FAST_REFLECT, Line, Plane)
def _reflect_line_plane(a: Line, b: Plane) -> Line:
    n, delta = b.normal, b.delta
    k = b.magnitude_squared()
    d, m = a.direction, a.moment
    direction = _scaled(n, 2.0 * dot(n, d)) - _scaled(d, k)
    moment = _scaled(m, k) - _scaled(n, 2.0 * dot(n, m)) + _scaled(cross(n, d), 2.0 * delta)
    return Line.from_plucker(direction, moment)


@_register(_FAST_REFLECT, Point, Line)
def _reflect_point_line(a: Point, b: Line) -> Point:
    db, mb = b.direction, b.moment
    k = b.magnitude_squared()
    xyz = _scaled(a.xyz, k) - _scaled(db, 2.0 * dot(db, a.xyz)) - _scaled(cross(db, mb), 2.0 * a.weight)
    return Point(stack([*xyz.unbind(-1), -k * a.weight]))


@_register(_FAST_REFLECT, Line, Line)
def _reflect_line_line(a: Line, b: Line) -> Line:
    db, mb = b.direction, b.moment
    d, m = a.direction, a.moment
    k = b.magnitude_squared()
    d_db = dot(d, db)
    direction = _scaled(d, k) - _scaled(db, 2.0 * d_db)
    moment = (
        _scaled(m, k)
        - _scaled(db, 2.0 * dot(m, db))
        + _scaled(d, 2.0 * dot(mb, db))
        - _scaled(mb, 2.0 * d_db)
        - _scaled(db, 2.0 * dot(mb, d))
    )
    return Line.from_plucker(direction, moment)


@_register(_FAST_REFLECT, Plane, Line)
def _reflect_plane_line(a: Plane, b: Line) -> Plane:
    db, mb = b.direction, b.moment
    n = a.normal
    k = b.magnitude_squared()
    normal = _scaled(n, k) - _scaled(db, 2.0 * dot(db, n))
    delta = -k * a.delta - 2.0 * dot(n, cross(db, mb))
    return Plane(stack([*normal.unbind(-1), delta]))


@_register(_FAST_REFLECT, Point, Point)
def _reflect_point_point(a: Point, b: Point) -> Point:
    beta = b.weight
    k = beta * beta
    xyz = _scaled(a.xyz, k) - _scaled(b.xyz, 2.0 * a.weight * beta)
    return Point(stack([*xyz.unbind(-1), -k * a.weight]))


@_register(_FAST_REFLECT, Line, Point)
def _reflect_line_point(a: Line, b: Point) -> Line:
    beta = b.weight
    k = beta * beta
    direction = _scaled(a.direction, -k)
    moment = _scaled(a.moment, k) - _scaled(cross(b.xyz, a.direction), 2.0 * beta)
    return Line.from_plucker(direction, moment)


@_register(_FAST_REFLECT, Plane, Point)
def _reflect_plane_point(a: Plane, b: Point) -> Plane:
    beta = b.weight
    k = beta * beta
    normal = _scaled(a.normal, -k)
    delta = k * a.delta + 2.0 * beta * dot(a.normal, b.xyz)
    return Plane(stack([*normal.unbind(-1), delta]))
