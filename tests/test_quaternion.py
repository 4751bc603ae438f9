"""
Tests for quaternion operations.

Quaternions are (w, x, y, z) = w + xi + yj + zk. These helpers back the
rotor / quaternion isomorphism and the dual quaternion encoding.
"""

import math

import pytest
import torch

from pga_screw.utils.quaternion import (
    normalize_quaternion,
    quaternion_conjugate,
    quaternion_norm_squared,
    quaternion_inverse,
    quaternion_multiply,
    quaternion_dot,
    quaternion_to_matrix,
    quaternion_from_axis_angle,
    quaternion_to_axis_angle,
    quaternion_exp,
    quaternion_log,
    quaternion_pow,
    quaternion_slerp,
    random_quaternion,
    identity_quaternion,
    rotate_vector,
)


@pytest.fixture
def unit_quaternions(generator):
    return random_quaternion(10, dtype=torch.float64, generator=generator)


# =============================================================================
# Normalization and Conjugation
# =============================================================================

class TestNormalizeQuaternion:
    """Tests for quaternion normalization."""

    def test_unit_quaternion_unchanged(self):
        """Unit quaternion is unchanged by normalization."""
        q = torch.tensor([1.0, 0.0, 0.0, 0.0])
        assert torch.allclose(normalize_quaternion(q), q)

    def test_preserves_direction(self):
        """Normalization preserves quaternion direction."""
        q = torch.tensor([2.0, 4.0, 0.0, 0.0])
        expected = torch.tensor([1.0, 2.0, 0.0, 0.0]) / math.sqrt(5)
        assert torch.allclose(normalize_quaternion(q), expected, atol=1e-6)

    def test_numerical_stability_small(self):
        """Handles tiny quaternions without NaN."""
        q = torch.tensor([1e-20, 0.0, 0.0, 0.0])
        assert not torch.isnan(normalize_quaternion(q)).any()

    def test_3d_batch(self):
        """Handles nested batches."""
        q = torch.randn(2, 3, 4, generator=torch.Generator().manual_seed(1))
        norms = torch.norm(normalize_quaternion(q), dim=-1)
        assert torch.allclose(norms, torch.ones(2, 3), atol=1e-6)


class TestQuaternionConjugate:
    """Tests for conjugate, norm and inverse."""

    def test_conjugate_negates_vector(self):
        """Conjugate negates the vector part."""
        q = torch.tensor([1.0, 2.0, 3.0, 4.0])
        assert torch.equal(quaternion_conjugate(q), torch.tensor([1.0, -2.0, -3.0, -4.0]))

    def test_norm_squared(self):
        """|q|² sums the squared components."""
        q = torch.tensor([1.0, 2.0, 3.0, 4.0])
        assert float(quaternion_norm_squared(q)) == 30.0

    def test_inverse_times_original_is_identity(self):
        """q * q^{-1} = 1 for non-unit quaternions."""
        q = torch.tensor([[2.0, -1.0, 0.5, 3.0]], dtype=torch.float64)
        product = quaternion_multiply(q, quaternion_inverse(q))
        assert torch.allclose(product, identity_quaternion(dtype=torch.float64))

    def test_unit_inverse_equals_conjugate(self, unit_quaternions):
        """For unit quaternions, inverse equals conjugate."""
        assert torch.allclose(quaternion_inverse(unit_quaternions), quaternion_conjugate(unit_quaternions))


# =============================================================================
# Multiplication Tests
# =============================================================================

class TestQuaternionMultiply:
    """Tests for the Hamilton product."""

    @pytest.mark.parametrize("a,b,c", [(1, 2, 3), (2, 3, 1), (3, 1, 2)])
    def test_cyclic_units(self, a, b, c):
        """ij = k, jk = i, ki = j."""
        eye = torch.eye(4)
        assert torch.equal(quaternion_multiply(eye[a], eye[b]), eye[c])

    def test_units_square_to_minus_one(self):
        """i² = j² = k² = -1."""
        eye = torch.eye(4)
        for idx in (1, 2, 3):
            assert torch.equal(quaternion_multiply(eye[idx], eye[idx]), -eye[0])

    def test_associativity(self, unit_quaternions):
        """(a * b) * c = a * (b * c)."""
        a, b, c = unit_quaternions[:3], unit_quaternions[3:6], unit_quaternions[6:9]
        ab_c = quaternion_multiply(quaternion_multiply(a, b), c)
        a_bc = quaternion_multiply(a, quaternion_multiply(b, c))
        assert torch.allclose(ab_c, a_bc)

    def test_non_commutativity(self):
        """Quaternion multiplication is not commutative."""
        a = normalize_quaternion(torch.tensor([0.5, 0.5, 0.5, 0.5]))
        b = torch.tensor([0.0, 1.0, 0.0, 0.0])
        assert not torch.allclose(quaternion_multiply(a, b), quaternion_multiply(b, a))

    def test_broadcasting(self, unit_quaternions):
        """A single quaternion multiplies a batch."""
        identity = torch.tensor([1.0, 0.0, 0.0, 0.0], dtype=torch.float64)
        assert torch.equal(quaternion_multiply(identity, unit_quaternions), unit_quaternions)

    def test_dot(self):
        """The 4D dot product."""
        assert float(quaternion_dot(torch.tensor([1.0, 2.0, 3.0, 4.0]), torch.tensor([1.0, 0.0, -1.0, 1.0]))) == 2.0


# =============================================================================
# Conversion Tests
# =============================================================================

class TestQuaternionConversions:
    """Tests for matrix and axis-angle conversions."""

    def test_identity_to_identity_matrix(self):
        """Identity quaternion gives identity matrix."""
        assert torch.allclose(quaternion_to_matrix(torch.tensor([1.0, 0.0, 0.0, 0.0])), torch.eye(3))

    def test_90_deg_rotation_x(self):
        """90 degree rotation about X maps Y to Z."""
        c = math.cos(math.pi / 4)
        R = quaternion_to_matrix(torch.tensor([c, c, 0.0, 0.0]))
        assert torch.allclose(R @ torch.tensor([0.0, 1.0, 0.0]), torch.tensor([0.0, 0.0, 1.0]), atol=1e-6)

    def test_matrix_is_rotation(self, unit_quaternions):
        """Matrices are orthogonal with determinant 1."""
        R = quaternion_to_matrix(unit_quaternions)
        eye = torch.eye(3, dtype=torch.float64).expand_as(R)
        assert torch.allclose(R.transpose(-1, -2) @ R, eye)
        assert torch.allclose(torch.det(R), torch.ones(10, dtype=torch.float64))

    def test_unnormalized_matrix_scales(self, unit_quaternions):
        """Without normalization the matrix carries |q|²."""
        R = quaternion_to_matrix(2.0 * unit_quaternions, normalize=False)
        assert torch.allclose(R, 4.0 * quaternion_to_matrix(unit_quaternions))

    def test_matches_rotate_vector(self, unit_quaternions):
        """Matrix and sandwich rotations agree."""
        v = torch.randn(10, 3, generator=torch.Generator().manual_seed(3), dtype=torch.float64)
        R = quaternion_to_matrix(unit_quaternions)
        expected = (R @ v.unsqueeze(-1)).squeeze(-1)
        assert torch.allclose(rotate_vector(v, unit_quaternions), expected)

    def test_90_deg_around_z(self):
        """Axis-angle gives cos(θ/2) + sin(θ/2) axis."""
        q = quaternion_from_axis_angle(torch.tensor([[0.0, 0.0, 1.0]]), torch.tensor([math.pi / 2]))
        c = math.cos(math.pi / 4)
        assert torch.allclose(q, torch.tensor([[c, 0.0, 0.0, c]]))

    def test_axis_angle_roundtrip(self):
        """axis-angle -> quaternion -> axis-angle."""
        axis = torch.tensor([[1.0, 1.0, 1.0]], dtype=torch.float64) / math.sqrt(3)
        angle = torch.tensor([1.23], dtype=torch.float64)
        axis_rec, angle_rec = quaternion_to_axis_angle(quaternion_from_axis_angle(axis, angle))
        assert torch.allclose(axis_rec, axis)
        assert torch.allclose(angle_rec, angle)

    def test_zero_rotation_has_zero_axis(self):
        """The identity has no axis."""
        axis, angle = quaternion_to_axis_angle(torch.tensor([1.0, 0.0, 0.0, 0.0]))
        assert torch.equal(axis, torch.zeros(3))
        assert float(angle) == 0.0


# =============================================================================
# Exponential Map
# =============================================================================

class TestQuaternionExpLog:
    """Tests for exp, log and pow."""

    def test_exp_log_roundtrip(self, unit_quaternions):
        """exp(log(q)) = q."""
        assert torch.allclose(quaternion_exp(quaternion_log(unit_quaternions)), unit_quaternions)

    def test_exp_of_pure_quaternion(self):
        """exp(θ/2 k) is the rotation by θ about z."""
        q = quaternion_exp(torch.tensor([0.0, 0.0, 0.0, 0.5], dtype=torch.float64))
        expected = torch.tensor([math.cos(0.5), 0.0, 0.0, math.sin(0.5)], dtype=torch.float64)
        assert torch.allclose(q, expected)

    def test_log_of_real_quaternion(self):
        """A positive real quaternion has a real logarithm."""
        q = torch.tensor([math.e, 0.0, 0.0, 0.0], dtype=torch.float64)
        assert torch.allclose(quaternion_log(q), torch.tensor([1.0, 0.0, 0.0, 0.0], dtype=torch.float64))

    def test_pow_half(self, unit_quaternions):
        """(q^½)² = q."""
        root = quaternion_pow(unit_quaternions, 0.5)
        assert torch.allclose(quaternion_multiply(root, root), unit_quaternions)

    def test_pow_tensor_exponent(self):
        """Tensor exponents give one quaternion per value."""
        q = quaternion_from_axis_angle(torch.tensor([0.0, 0.0, 1.0]), 1.0)
        assert quaternion_pow(q, torch.tensor([0.0, 0.5, 1.0])).shape == (3, 4)


# =============================================================================
# SLERP Tests
# =============================================================================

class TestQuaternionSlerp:
    """Tests for spherical linear interpolation."""

    def test_endpoints(self, unit_quaternions):
        """t = 0 gives q0 and t = 1 gives q1 without a flip."""
        q0, q1 = unit_quaternions[:5], unit_quaternions[5:]
        assert torch.allclose(quaternion_slerp(q0, q1, 0.0, shortest_path=False), q0)
        assert torch.allclose(quaternion_slerp(q0, q1, 1.0, shortest_path=False), q1)

    def test_midpoint(self):
        """Halfway between 0 and 90 degrees is 45 degrees."""
        z = torch.tensor([0.0, 0.0, 1.0])
        q0 = identity_quaternion()[0]
        q1 = quaternion_from_axis_angle(z, math.pi / 2)
        expected = quaternion_from_axis_angle(z, math.pi / 4)
        assert torch.allclose(quaternion_slerp(q0, q1, 0.5), expected, atol=1e-6)

    def test_shortest_path_flips(self):
        """With shortest_path, -q1 gives the same result as q1."""
        z = torch.tensor([0.0, 0.0, 1.0])
        q0 = identity_quaternion()[0]
        q1 = quaternion_from_axis_angle(z, math.pi / 2)
        assert torch.allclose(quaternion_slerp(q0, -q1, 0.5), quaternion_slerp(q0, q1, 0.5), atol=1e-6)

    def test_same_quaternion(self, unit_quaternions):
        """Identical endpoints use the linear fallback."""
        result = quaternion_slerp(unit_quaternions, unit_quaternions, 0.3)
        assert torch.allclose(result, unit_quaternions)

    def test_result_is_normalized(self, unit_quaternions):
        """SLERP results have unit norm."""
        q0, q1 = unit_quaternions[:5], unit_quaternions[5:]
        for t in (0.25, 0.5, 0.75):
            norms = torch.norm(quaternion_slerp(q0, q1, t), dim=-1)
            assert torch.allclose(norms, torch.ones(5, dtype=torch.float64))


# =============================================================================
# Factories
# =============================================================================

class TestQuaternionFactories:
    """Tests for random and identity quaternions."""

    def test_random_shape_and_norm(self):
        """Random quaternions are unit."""
        q = random_quaternion(batch_size=100)
        assert q.shape == (100, 4)
        assert torch.allclose(torch.norm(q, dim=-1), torch.ones(100), atol=1e-5)

    def test_random_is_reproducible(self):
        """A seeded generator gives reproducible samples."""
        a = random_quaternion(4, generator=torch.Generator().manual_seed(7))
        b = random_quaternion(4, generator=torch.Generator().manual_seed(7))
        assert torch.equal(a, b)

    def test_random_dtype(self):
        """Dtype specification works."""
        assert random_quaternion(batch_size=5, dtype=torch.float64).dtype == torch.float64

    def test_identity(self):
        """identity_quaternion gives a batch of 1s."""
        q = identity_quaternion(batch_size=5)
        assert q.shape == (5, 4)
        assert torch.equal(q, torch.tensor([1.0, 0.0, 0.0, 0.0]).expand(5, 4))


class TestQuaternionGradientFlow:
    """Gradients flow through the operations."""

    def test_multiply_gradient(self):
        """Gradients flow through multiplication."""
        q1 = torch.randn(4, requires_grad=True)
        q2 = torch.randn(4, requires_grad=True)
        quaternion_multiply(q1, q2).sum().backward()
        assert q1.grad is not None
        assert q2.grad is not None

    def test_rotate_vector_gradient(self):
        """Gradients flow through vector rotation."""
        q = normalize_quaternion(torch.randn(4)).requires_grad_(True)
        v = torch.randn(3, requires_grad=True)
        rotate_vector(v, q).sum().backward()
        assert v.grad is not None
        assert q.grad is not None
