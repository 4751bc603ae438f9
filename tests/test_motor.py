"""
Tests for motors.

Covers factories, composition, the dual quaternion isomorphism, exp / log /
pow, square roots, screw coordinates and the homogeneous matrix.
"""

import math
import warnings

import numpy as np
import pytest
import torch

from pga_screw.core.types import ScrewCoordinates
from pga_screw.pga.flats import Line, Point
from pga_screw.pga.motor import Motor
from pga_screw.pga.rotor import Rotor
from pga_screw.pga.transforms import transform, transform_point


def T(*values):
    return torch.tensor(values, dtype=torch.float64)


X = T(1.0, 0.0, 0.0)
Y = T(0.0, 1.0, 0.0)
Z = T(0.0, 0.0, 1.0)
ORIGIN = T(0.0, 0.0, 0.0)


def rotation_about_line(direction, point, angle):
    """Reference motor rotating by angle about the line through point."""
    rotor = Rotor.from_axis_angle(direction, angle)
    return Motor.from_rotor_translation(rotor, point - transform_point(point, rotor))


class TestMotorCreation:
    """Tests for motor factories and accessors."""

    def test_identity(self):
        """Identity motor."""
        m = Motor.identity()
        assert torch.equal(m.data, torch.tensor([1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0]))
        assert Motor.identity(batch_shape=(2, 3)).shape == (2, 3)

    def test_zero(self):
        """Zero motor."""
        assert float(Motor.zero(batch_shape=4).data.abs().sum()) == 0.0

    def test_from_translation(self):
        """T = 1 - ½ t e0i."""
        m = Motor.from_translation(T(2.0, -4.0, 6.0))
        assert torch.equal(m.data, T(1.0, 0.0, 0.0, 0.0, 0.0, -1.0, 2.0, -3.0))

    def test_from_numpy_translation(self):
        """numpy arrays keep their dtype."""
        m = Motor.from_translation(np.array([2.0, -4.0, 6.0]))
        assert m.dtype == torch.float64
        assert torch.allclose(m.get_translation(), T(2.0, -4.0, 6.0))

    def test_from_rotor(self):
        """A rotor embeds with a zero dual part."""
        r = Rotor.from_axis_angle(Z, 0.4)
        m = Motor.from_rotor(r)
        assert torch.equal(m.real.data, r.data)
        assert float(m.dual.data.abs().sum()) == 0.0

    def test_from_parts(self):
        """from_parts concatenates real and dual parts."""
        m = Motor.from_parts(Rotor(T(1.0, 2.0, 3.0, 4.0)), Rotor(T(5.0, 6.0, 7.0, 8.0)))
        assert torch.equal(m.data, torch.arange(1.0, 9.0, dtype=torch.float64))
        assert float(m.s) == 1.0
        assert float(m.e0123) == 5.0

    def test_rotor_and_translation_round_trip(self, random_rotors, random_translations):
        """get_rotor and get_translation recover the construction."""
        m = Motor.from_rotor_translation(random_rotors, random_translations)
        assert torch.allclose(m.get_rotor().data, random_rotors.data)
        assert torch.allclose(m.get_translation(), random_translations)

    def test_get_translation_of_scaled_motor(self, random_motors, random_translations):
        """Scaling a motor does not change its translation."""
        assert torch.allclose((random_motors * 3.0).get_translation(), random_translations)

    def test_from_axis_angle(self):
        """from_axis_angle rotates about a line through the origin."""
        m = Motor.from_axis_angle(Z, math.pi / 2)
        assert torch.allclose(transform_point(X, m), Y)

    def test_half_turn_then_translation(self):
        """Rotating the origin leaves it fixed; the translation moves it."""
        m = Motor.from_axis_angle_translation(Y, math.pi, T(4.0, 0.0, 0.0))
        assert torch.allclose(transform_point(ORIGIN, m), T(4.0, 0.0, 0.0))
        assert torch.allclose(transform_point(X, m), T(3.0, 0.0, 0.0), atol=1e-12)

    def test_is_simple(self):
        """Simple motors have no pseudoscalar part."""
        assert bool(Motor.from_axis_angle_translation(Z, 1.0, X).is_simple())
        assert not bool(Motor.from_axis_angle_translation(Z, 1.0, Z).is_simple())


class TestMotorAlgebra:
    """Tests for composition, inverses and norms."""

    def test_rotate_then_translate(self, random_rotors, random_translations, random_points):
        """M = T * R rotates first, then translates."""
        m = Motor.from_rotor_translation(random_rotors, random_translations)
        x = random_points[:8]
        expected = transform_point(x, random_rotors) + random_translations
        assert torch.allclose(transform_point(x, m), expected)

    def test_composition_order(self, random_motors, random_points):
        """(a * b) applies b first, then a."""
        a = random_motors
        b = random_motors[torch.arange(7, -1, -1)]
        x = random_points[:8]
        expected = transform_point(transform_point(x, b), a)
        assert torch.allclose(transform_point(x, a * b), expected)

    def test_product_matches_multivector(self, random_motors):
        """Motor products agree with the full geometric product."""
        a = random_motors
        b = random_motors[torch.arange(7, -1, -1)] * 1.5
        expected = a.to_multivector() * b.to_multivector()
        assert torch.allclose((a * b).to_multivector().mv, expected.mv, atol=1e-12)

    def test_reverse_matches_multivector(self, random_motors):
        """Motor reverse agrees with multivector reversion."""
        expected = random_motors.to_multivector().reverse()
        assert torch.allclose(random_motors.reverse().to_multivector().mv, expected.mv)

    def test_inverse(self, random_motors):
        """m * m.inverse() is the identity, for scaled motors too."""
        m = random_motors * 2.0
        identity = Motor.identity(batch_shape=8, dtype=torch.float64)
        assert torch.allclose((m * m.inverse()).data, identity.data, atol=1e-12)
        assert torch.allclose((m / m).data, identity.data, atol=1e-12)

    def test_reverse_of_unit_is_inverse(self, random_motors):
        """For unit motors reverse equals inverse."""
        assert torch.allclose(random_motors.reverse().data, random_motors.inverse().data)

    def test_magnitude(self, random_motors):
        """Unit motors have unit magnitude; normalized restores it."""
        assert torch.allclose(random_motors.magnitude(), torch.ones(8, dtype=torch.float64))
        scaled = random_motors * 4.0
        assert torch.allclose(scaled.normalized().data, random_motors.data)

    def test_vanishing_magnitude(self):
        """The vanishing magnitude measures the dual part."""
        m = Motor.from_translation(T(0.0, 6.0, 8.0))
        assert abs(float(m.vanishing_magnitude()) - 5.0) < 1e-12

    def test_mixed_rotor_products(self):
        """Rotors promote to motors on either side of a product."""
        r = Rotor.from_axis_angle(Z, 0.5)
        m = Motor.from_translation(X)
        assert isinstance(m * r, Motor)
        assert isinstance(r * m, Motor)
        assert torch.allclose((r * m).data, (Motor.from_rotor(r) * m).data)
        assert torch.allclose((m * r).data, Motor.from_rotor_translation(r, X).data)


class TestMotorLieMaps:
    """Tests for exp, log and pow."""

    def test_exp_of_rotation_generator(self):
        """exp(-θ/2 L) rotates by θ about the line L."""
        point = T(1.0, 0.0, 0.0)
        line = Line.line(Z, point)
        for angle in (math.pi, 0.7, -1.3):
            m = Motor.exp(line * (-0.5 * angle))
            assert torch.allclose(m.data, rotation_about_line(Z, point, angle).data, atol=1e-12)

    def test_exp_of_ideal_line_is_translation(self):
        """exp(-½ t e0i) is the translation by t."""
        t = T(1.0, -2.0, 0.5)
        m = Motor.exp(Line.vanishing_line(-0.5 * t))
        assert torch.allclose(m.data, Motor.from_translation(t).data)

    def test_exp_log_round_trip(self, random_motors):
        """exp(log(m)) = m for unit motors."""
        assert torch.allclose(Motor.exp(random_motors.log()).data, random_motors.data, atol=1e-10)

    def test_log_of_scaled_motor(self, random_motors):
        """log ignores the magnitude."""
        assert torch.allclose((random_motors * 2.5).log().data, random_motors.log().data, atol=1e-10)

    def test_log_of_translation(self):
        """A pure translation has a vanishing logarithm."""
        log = Motor.from_translation(T(2.0, 0.0, -4.0)).log()
        assert torch.allclose(log.data, T(0.0, 0.0, 0.0, -1.0, 0.0, 2.0))

    def test_log_of_identity(self):
        """log(1) = 0."""
        log = Motor.identity(dtype=torch.float64).log()
        assert float(log.data.abs().sum()) == 0.0

    def test_log_is_screw_generator(self):
        """A rotation about a line has log -θ/2 L."""
        point = T(0.0, 2.0, 0.0)
        m = rotation_about_line(X, point, 1.0)
        expected = Line.line(X, point) * -0.5
        assert torch.allclose(m.log().data, expected.data, atol=1e-12)

    def test_pow(self, random_motors):
        """m^½ applied twice is m; m^0 is the identity; m^1 is m."""
        half = random_motors.pow(0.5)
        assert torch.allclose((half * half).data, random_motors.data, atol=1e-10)
        identity = Motor.identity(batch_shape=8, dtype=torch.float64)
        assert torch.allclose(random_motors.pow(0.0).data, identity.data, atol=1e-12)
        assert torch.allclose(random_motors.pow(1.0).data, random_motors.data, atol=1e-10)

    def test_pow_tensor_exponent(self):
        """Tensor exponents broadcast over the batch."""
        m = Motor.from_axis_angle_translation(Z, 1.0, X)
        result = m.pow(torch.tensor([0.0, 1.0], dtype=torch.float64))
        assert result.shape == (2,)
        assert torch.allclose(result[1].data, m.data)


class TestMotorSqrt:
    """Tests for the square roots."""

    @pytest.fixture
    def positive_motors(self, random_translations):
        axis = torch.randn(8, 3, generator=torch.Generator().manual_seed(3), dtype=torch.float64)
        angle = torch.linspace(0.1, 3.0, 8, dtype=torch.float64)
        return Motor.from_axis_angle_translation(axis, angle, random_translations)

    def test_sqrt_squares_to_motor(self, positive_motors):
        """sqrt(m)² = m when s >= 0."""
        root = positive_motors.sqrt()
        assert torch.allclose((root * root).data, positive_motors.data, atol=1e-12)

    def test_sqrt_is_unit(self, positive_motors):
        """The square root of a unit motor is unit."""
        assert torch.allclose(positive_motors.sqrt().magnitude(), torch.ones(8, dtype=torch.float64))

    def test_sqrt_halves_the_motion(self, positive_motors):
        """The square root is the motor power ½."""
        assert torch.allclose(positive_motors.sqrt().data, positive_motors.pow(0.5).data, atol=1e-10)

    def test_sqrt_of_translation(self):
        """sqrt of a translation translates by half."""
        root = Motor.from_translation(T(2.0, 4.0, -6.0)).sqrt()
        assert torch.allclose(root.data, Motor.from_translation(T(1.0, 2.0, -3.0)).data)

    def test_sqrt_negative_scalar(self, positive_motors, random_points):
        """For s < 0 the root squares to -m, the same rigid motion."""
        negated = -positive_motors
        root = negated.sqrt()
        assert torch.allclose((root * root).data, positive_motors.data, atol=1e-12)
        x = random_points[:8]
        assert torch.allclose(transform_point(x, root * root), transform_point(x, negated))

    def test_fast_sqrt_is_positive_multiple(self, positive_motors):
        """fast_sqrt normalizes to sqrt."""
        assert torch.allclose(
            positive_motors.fast_sqrt().normalized().data, positive_motors.sqrt().data, atol=1e-12
        )

    def test_oriented_sqrt_matches_sqrt(self, positive_motors):
        """Without the flip oriented_sqrt is sqrt, and it does not warn."""
        m = positive_motors[:4]
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            result = m.oriented_sqrt()
        assert torch.allclose(result.data, m.sqrt().data)

    def test_oriented_sqrt_flip_warns(self):
        """The flip heuristic warns and only touches flipped elements."""
        m = Motor.from_axis_angle(Z, torch.tensor([0.5, 2.0 * math.pi - 0.5], dtype=torch.float64))
        with pytest.warns(RuntimeWarning, match="flip heuristic"):
            result = m.oriented_sqrt()
        assert torch.allclose(result[0].data, m[0].sqrt().data)
        assert not torch.allclose(result[1].data, m[1].sqrt().data)


class TestScrewCoordinates:
    """Tests for screw decomposition."""

    def test_screw_motion(self):
        """Half turn about the z axis through (1, 0, 0) with a pitch of 2."""
        axis_point = T(1.0, 0.0, 0.0)
        m = Motor.from_screw_coordinates(Z, torch.linalg.cross(axis_point, Z), math.pi, 2.0)
        assert torch.allclose(transform_point(ORIGIN, m), T(2.0, 0.0, 2.0), atol=1e-12)

    def test_rotation_about_line(self):
        """Zero translation is a pure rotation about the line."""
        point = T(0.0, 1.0, 2.0)
        m = Motor.from_screw_coordinates(X, torch.linalg.cross(point, X), 0.9, 0.0)
        assert torch.allclose(m.data, rotation_about_line(X, point, 0.9).data, atol=1e-12)

    def test_zero_angle_is_translation(self):
        """Without rotation the screw is a translation along its direction."""
        m = Motor.from_screw_coordinates(Y, T(5.0, 0.0, 0.0), 0.0, 3.0)
        assert torch.allclose(m.data, Motor.from_translation(T(0.0, 3.0, 0.0)).data)

    def test_round_trip(self, random_motors):
        """from_screw_coordinates(to_screw_coordinates(m)) = m."""
        screw = random_motors.to_screw_coordinates()
        assert isinstance(screw, ScrewCoordinates)
        assert bool(screw.axis_defined.all())
        assert torch.allclose(Motor.from_screw_coordinates(screw).data, random_motors.data, atol=1e-10)

    def test_decomposition_of_screw(self):
        """to_screw_coordinates recovers the parameters."""
        point = T(0.0, 1.0, 0.0)
        moment = torch.linalg.cross(point, Z)
        m = Motor.from_screw_coordinates(Z, moment, 1.1, -0.6)
        screw = m.to_screw_coordinates()
        assert torch.allclose(screw.direction, Z)
        assert torch.allclose(screw.moment, moment, atol=1e-12)
        assert abs(float(screw.angle) - 1.1) < 1e-12
        assert abs(float(screw.translation) + 0.6) < 1e-12

    def test_axis_lies_on_rotation_axis(self, random_motors):
        """Points of the screw axis move only along the axis."""
        screw = random_motors.to_screw_coordinates()
        on_axis = torch.linalg.cross(screw.direction, screw.moment)
        moved = transform_point(on_axis, random_motors)
        expected = on_axis + screw.direction * screw.translation.unsqueeze(-1)
        assert torch.allclose(moved, expected, atol=1e-10)

    def test_pure_translation(self):
        """A translation has no axis."""
        screw = Motor.from_translation(T(0.0, 0.0, 3.0)).to_screw_coordinates()
        assert not bool(screw.axis_defined)
        assert torch.allclose(screw.direction, Z)
        assert float(screw.moment.abs().sum()) == 0.0
        assert float(screw.angle) == 0.0
        assert abs(float(screw.translation) - 3.0) < 1e-12

    def test_scaled(self):
        """scaled multiplies angle and translation."""
        screw = Motor.from_screw_coordinates(Z, ORIGIN, 1.0, 2.0).to_screw_coordinates()
        half = screw.scaled(0.5)
        assert abs(float(half.angle) - 0.5) < 1e-12
        assert abs(float(half.translation) - 1.0) < 1e-12
        assert torch.equal(half.direction, screw.direction)

    def test_broadcasting(self):
        """A single axis broadcasts against a batch of angles."""
        angles = torch.linspace(0.0, 1.0, 5, dtype=torch.float64)
        m = Motor.from_screw_coordinates(Z, ORIGIN, angles, 0.0)
        assert m.shape == (5,)
        assert torch.allclose(m[0].data, Motor.identity(dtype=torch.float64).data)


class TestMotorTransformMatrix:
    """Tests for as_transform."""

    def test_matches_transform_point(self, random_motors, random_points):
        """The 4x4 matrix acts like the motor on homogeneous points."""
        x = random_points[:8]
        M = random_motors.as_transform()
        homogeneous = torch.cat([x, torch.ones(8, 1, dtype=torch.float64)], dim=-1)
        result = (M @ homogeneous.unsqueeze(-1)).squeeze(-1)
        assert torch.allclose(result[:, :3], transform_point(x, random_motors))
        assert torch.allclose(result[:, 3], torch.ones(8, dtype=torch.float64))

    def test_scaled_motor_gives_same_matrix(self, random_motors):
        """as_transform ignores the magnitude."""
        assert torch.allclose((random_motors * 3.0).as_transform(), random_motors.as_transform())

    def test_transform_of_point_flat(self, random_motors, random_points):
        """Point flats and Euclidean points move identically."""
        x = random_points[:8]
        moved = transform(Point.point(x), random_motors)
        assert torch.allclose(moved.as_vector(), transform_point(x, random_motors))
