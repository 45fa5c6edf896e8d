"""Shared pytest fixtures."""

import math

import pytest

from physics import MinkowskiMetric, SchwarzschildMetric


@pytest.fixture
def minkowski():
    return MinkowskiMetric()


@pytest.fixture
def schwarzschild():
    return SchwarzschildMetric(mass=1.0)


@pytest.fixture
def equatorial_event():
    """(t, r, θ, φ) at r = 10M in the equatorial plane."""
    return [0.0, 10.0, math.pi / 2, 0.0]
