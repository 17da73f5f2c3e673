"""
Shared fixtures: toy and demo public parameters, fresh settings per test.
"""

import pytest

from rsa_acc.config import get_settings
from rsa_acc.rsa_params import generate_demo_params, generate_toy_params


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings so environment overrides apply per test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def toy_params():
    """N = 187 = 11 * 17, g = 3. Arithmetic checks only, no security."""
    return generate_toy_params()


@pytest.fixture(scope="session")
def demo_params():
    """RSA-2048 challenge modulus with g = 4."""
    return generate_demo_params()


@pytest.fixture
def elements():
    return [f"device-{i}".encode() for i in range(6)]
