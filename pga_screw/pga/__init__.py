"""
PGA (Projective Geometric Algebra) module.

Implements the algebra of G(3,0,1) with 16-component multivectors, the
flat primitives (planes, lines, points) and the rotors and motors acting
on them.
"""

from .algebra import (
    Multivector,
    BladeSubset,
    geometric_product,
    outer_product,
    inner_product,
    regressive_product,
    sandwich,
    basis,
    zero,
    one,
    scalar,
    e0, e1, e2, e3,
    e01, e02, e03, e12, e31, e23,
    e021, e013, e032, e123,
    e0123,
)

from .flats import (
    Plane,
    Line,
    Point,
    meet,
    join,
    inner,
    incidence,
    is_on,
    fast_project,
    project,
    fast_reject,
    reject,
    fast_reflect,
    reflect,
)

from .rotor import Rotor, slerp

from .motor import Motor

from .transforms import (
    transform,
    transform_point,
    transform_direction,
)

__all__ = [
    # Algebra
    "Multivector",
    "BladeSubset",
    "geometric_product",
    "outer_product",
    "inner_product",
    "regressive_product",
    "sandwich",
    "basis",
    "zero",
    "one",
    "scalar",
    # Basis elements
    "e0", "e1", "e2", "e3",
    "e01", "e02", "e03", "e12", "e31", "e23",
    "e021", "e013", "e032", "e123",
    "e0123",
    # Flats
    "Plane",
    "Line",
    "Point",
    "meet",
    "join",
    "inner",
    "incidence",
    "is_on",
    "fast_project",
    "project",
    "fast_reject",
    "reject",
    "fast_reflect",
    "reflect",
    # Versors
    "Rotor",
    "slerp",
    "Motor",
    # Transforms
    "transform",
    "transform_point",
    "transform_direction",
]
