"""
Pytest configuration and fixtures for pga_screw tests.
"""

import pytest
import torch

from pga_screw.pga import Rotor, Motor
from pga_screw.utils.quaternion import random_quaternion


@pytest.fixture
def batch_size():
    """Default batch size for tests."""
    return 8


@pytest.fixture
def num_points():
    """Default number of points for tests."""
    return 16


@pytest.fixture
def generator():
    """Seeded random generator."""
    return torch.Generator().manual_seed(0)


@pytest.fixture
def random_points(num_points, generator):
    """Random points in [-2, 2]^3 (float64)."""
    return torch.rand(num_points, 3, generator=generator, dtype=torch.float64) * 4 - 2


@pytest.fixture
def random_rotors(batch_size, generator):
    """Random unit rotors (float64)."""
    q = random_quaternion(batch_size, dtype=torch.float64, generator=generator)
    return Rotor.from_quaternion(q)


@pytest.fixture
def random_translations(batch_size, generator):
    """Random translations in [-3, 3]^3 (float64)."""
    return torch.rand(batch_size, 3, generator=generator, dtype=torch.float64) * 6 - 3


@pytest.fixture
def random_motors(random_rotors, random_translations):
    """Random unit motors (float64)."""
    return Motor.from_rotor_translation(random_rotors, random_translations)
