"""
Tests for applying rotors and motors to flats and Euclidean points.

The closed forms are checked against the multivector sandwich
m x reverse(m), for unit and scaled versors.
"""

import math

import pytest
import torch

from pga_screw.pga.algebra import sandwich
from pga_screw.pga.flats import Plane, Line, Point, meet, is_on
from pga_screw.pga.motor import Motor
from pga_screw.pga.rotor import Rotor
from pga_screw.pga.transforms import transform, transform_point, transform_direction


def T(*values):
    return torch.tensor(values, dtype=torch.float64)


@pytest.fixture
def flats(batch_size):
    g = torch.Generator().manual_seed(42)
    return {
        'plane': Plane(torch.randn(batch_size, 4, generator=g, dtype=torch.float64)),
        'line': Line.line(
            torch.randn(batch_size, 3, generator=g, dtype=torch.float64),
            torch.randn(batch_size, 3, generator=g, dtype=torch.float64),
        ),
        'point': Point(torch.randn(batch_size, 4, generator=g, dtype=torch.float64)),
    }


class TestSandwich:
    """transform agrees with the multivector sandwich."""

    @pytest.mark.parametrize("kind", ["plane", "line", "point"])
    def test_unit_motor(self, flats, random_motors, kind):
        """Unit motors."""
        x = flats[kind]
        expected = type(x).from_multivector(sandwich(random_motors.to_multivector(), x.to_multivector()))
        result = transform(x, random_motors)
        assert isinstance(result, type(x))
        assert torch.allclose(result.data, expected.data, atol=1e-10)

    @pytest.mark.parametrize("kind", ["plane", "line", "point"])
    def test_scaled_motor(self, flats, random_motors, kind):
        """Scaled motors scale the result by the squared magnitude."""
        x = flats[kind]
        m = random_motors * 1.7
        expected = type(x).from_multivector(sandwich(m.to_multivector(), x.to_multivector()))
        assert torch.allclose(transform(x, m).data, expected.data, atol=1e-10)

    @pytest.mark.parametrize("kind", ["plane", "line", "point"])
    def test_rotor(self, flats, random_rotors, kind):
        """Rotors are accepted directly."""
        x = flats[kind]
        expected = type(x).from_multivector(sandwich(random_rotors.to_multivector(), x.to_multivector()))
        assert torch.allclose(transform(x, random_rotors).data, expected.data, atol=1e-10)


class TestTransformProperties:
    """Geometric properties of transform."""

    @pytest.mark.parametrize("kind", ["plane", "line", "point"])
    def test_identity(self, flats, kind):
        """The identity motor leaves flats unchanged."""
        x = flats[kind]
        identity = Motor.identity(dtype=torch.float64)
        assert torch.allclose(transform(x, identity).data, x.data)

    def test_composition(self, flats, random_motors):
        """transform(transform(x, b), a) = transform(x, a * b)."""
        a = random_motors
        b = random_motors[torch.arange(7, -1, -1)]
        for x in flats.values():
            assert torch.allclose(transform(transform(x, b), a).data, transform(x, a * b).data, atol=1e-10)

    def test_inverse_undoes(self, flats, random_motors):
        """Transforming by the reverse undoes a unit motor."""
        for x in flats.values():
            back = transform(transform(x, random_motors), random_motors.reverse())
            assert torch.allclose(back.data, x.data, atol=1e-10)

    def test_meet_is_preserved(self, flats, random_motors):
        """Motions commute with the meet of a plane and a line."""
        p, l = flats['plane'], flats['line']
        moved = meet(transform(p, random_motors), transform(l, random_motors))
        assert torch.allclose(moved.data, transform(meet(p, l), random_motors).data, atol=1e-10)

    def test_incidence_is_preserved(self, random_motors):
        """A point on a plane stays on the moved plane."""
        plane = Plane.plane(T(0.0, 0.0, 1.0), T(2.0))
        point = Point.point(T(3.0, -1.0, 2.0))
        assert bool(is_on(transform(point, random_motors), transform(plane, random_motors)).all())

    def test_translation_of_plane(self):
        """Translating z = 0 by (0, 0, 3) gives z = 3."""
        plane = transform(Plane.XY.to(torch.float64), Motor.from_translation(T(0.0, 0.0, 3.0)))
        assert torch.allclose(plane.data, T(0.0, 0.0, 1.0, -3.0))

    def test_translation_of_line(self):
        """Translating the z axis by (1, 0, 0) moves it through (1, 0, 0)."""
        z_axis = Line.line(T(0.0, 0.0, 1.0), T(0.0, 0.0, 0.0))
        moved = transform(z_axis, Motor.from_translation(T(1.0, 0.0, 0.0)))
        assert torch.allclose(moved.data, Line.line(T(0.0, 0.0, 1.0), T(1.0, 0.0, 0.0)).data)

    def test_ideal_points_ignore_translation(self):
        """Directions only rotate."""
        direction = Point.direction(T(1.0, 0.0, 0.0))
        m = Motor.from_axis_angle_translation(T(0.0, 0.0, 1.0), math.pi / 2, T(5.0, 5.0, 5.0))
        assert torch.allclose(transform(direction, m).data, T(0.0, 1.0, 0.0, 0.0))


class TestEuclideanVectors:
    """transform_point and transform_direction on raw tensors."""

    def test_tensor_is_a_point(self, random_motors, random_points):
        """transform on a tensor treats it as Euclidean points."""
        x = random_points[:8]
        assert torch.allclose(transform(x, random_motors), transform_point(x, random_motors))

    def test_transform_point_matches_flat(self, random_motors, random_points):
        """transform_point agrees with the Point flat."""
        x = random_points[:8]
        expected = transform(Point.point(x), random_motors).as_vector()
        assert torch.allclose(transform_point(x, random_motors), expected)

    def test_transform_point_divides_by_norm(self, random_motors, random_points):
        """Scaled motors move points like their normalization."""
        x = random_points[:8]
        assert torch.allclose(transform_point(x, random_motors * 3.0), transform_point(x, random_motors))

    def test_transform_direction(self, random_rotors, random_translations):
        """Directions ignore the translation part."""
        m = Motor.from_rotor_translation(random_rotors, random_translations)
        v = torch.randn(8, 3, generator=torch.Generator().manual_seed(9), dtype=torch.float64)
        assert torch.allclose(transform_direction(v, m), transform_point(v, random_rotors))

    def test_preserves_distances(self, random_motors, random_points):
        """Rigid motions preserve distances."""
        a, b = random_points[:8], random_points[8:]
        before = torch.norm(a - b, dim=-1)
        after = torch.norm(transform_point(a, random_motors) - transform_point(b, random_motors), dim=-1)
        assert torch.allclose(before, after)

    def test_broadcast_points_against_single_motor(self, random_points):
        """One motor moves a whole batch of points."""
        m = Motor.from_translation(T(1.0, 2.0, 3.0))
        moved = transform_point(random_points, m)
        assert moved.shape == random_points.shape
        assert torch.allclose(moved, random_points + T(1.0, 2.0, 3.0))


class TestTransformErrors:
    """Unsupported arguments raise TypeError."""

    def test_unsupported_value(self):
        """Only flats and tensors can be transformed."""
        with pytest.raises(TypeError, match="transform is not defined for Rotor and Motor"):
            transform(Rotor.identity(), Motor.identity())

    def test_unsupported_versor(self):
        """Only rotors and motors can transform."""
        with pytest.raises(TypeError, match="Expected a Rotor or a Motor, got Plane"):
            transform(Point.point([0.0, 0.0, 0.0]), Plane.XY)
