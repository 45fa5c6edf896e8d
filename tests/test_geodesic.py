"""Tests for particle states and RK4 geodesic integration."""

import math

import numpy as np
import pytest

from pkgs.common import NonPhysicalStep, ShapeMismatch, SuperluminalVelocity
from physics import GeodesicIntegrator, MetricTensor, OrbitCalculator, ParticleState


class TestParticleState:
    """Test four-velocity normalisation."""

    def test_timelike_normalisation(self, minkowski):
        state = ParticleState.timelike(minkowski, [0, 0, 0, 0], [0.6, 0, 0])
        assert minkowski.interval(state.velocity) == pytest.approx(-1.0)
        assert state.velocity[0] == pytest.approx(1.25)
        assert state.velocity[1] == pytest.approx(0.75)

    def test_timelike_in_curved_space(self, schwarzschild, equatorial_event):
        state = ParticleState.timelike(schwarzschild, equatorial_event)
        g = schwarzschild.at(equatorial_event)
        assert g.interval(state.velocity) == pytest.approx(-1.0)
        assert state.velocity[0] == pytest.approx(1.0 / math.sqrt(0.8))

    def test_timelike_from_metric_tensor(self):
        g = MetricTensor.minkowski()
        state = ParticleState.timelike(g, [0, 0, 0, 0], [0, 0.8, 0])
        assert g.interval(state.velocity) == pytest.approx(-1.0)

    @pytest.mark.parametrize("v", [[1.0, 0.0, 0.0], [0.8, 0.8, 0.0]])
    def test_superluminal_rejected(self, minkowski, v):
        with pytest.raises(SuperluminalVelocity):
            ParticleState.timelike(minkowski, [0, 0, 0, 0], v)

    def test_null_state(self, minkowski):
        photon = ParticleState.null(minkowski, [0, 0, 0, 0], [0, 3.0, 4.0], energy=2.0)
        assert minkowski.interval(photon.velocity) == pytest.approx(0.0, abs=1e-12)
        assert photon.velocity[0] == 2.0

    def test_shape_checked(self):
        with pytest.raises(ShapeMismatch):
            ParticleState((0.0, 1.0, 2.0), (1.0, 0.0, 0.0, 0.0))


class TestGeodesicIntegrator:
    """Test RK4 geodesic stepping."""

    def test_straight_line_in_flat_space(self, minkowski):
        integ = GeodesicIntegrator(minkowski)
        start = ParticleState.timelike(minkowski, [0, 1, 2, 3], [0.5, -0.2, 0.1])
        end = integ.integrate(start, 0.1, 50)
        np.testing.assert_allclose(end.x, start.x + 5.0 * start.u, atol=1e-12)
        np.testing.assert_allclose(end.u, start.u, atol=1e-14)
        assert end.proper_time == pytest.approx(5.0)

    @pytest.mark.parametrize("dt", [0.0, -0.1, float("nan"), float("inf")])
    def test_bad_step_rejected(self, minkowski, dt):
        integ = GeodesicIntegrator(minkowski)
        state = ParticleState.timelike(minkowski, [0, 0, 0, 0])
        with pytest.raises(NonPhysicalStep):
            integ.step(state, dt)

    def test_spacelike_velocity_rejected(self, minkowski):
        integ = GeodesicIntegrator(minkowski)
        tachyon = ParticleState((0, 0, 0, 0), (1.0, 2.0, 0.0, 0.0))
        with pytest.raises(NonPhysicalStep):
            integ.step(tachyon, 0.1)

    def test_advance_requires_state(self, minkowski):
        with pytest.raises(ValueError):
            GeodesicIntegrator(minkowski).advance(0.1)

    def test_advance_owns_state(self, minkowski):
        integ = GeodesicIntegrator(minkowski, ParticleState.timelike(minkowski, [0, 0, 0, 0]))
        integ.advance(0.5)
        integ.advance(0.5)
        assert integ.state.proper_time == pytest.approx(1.0)
        assert integ.state.position[0] == pytest.approx(1.0)

    def test_trajectory_and_callback(self, minkowski):
        integ = GeodesicIntegrator(minkowski)
        start = ParticleState.timelike(minkowski, [0, 0, 0, 0])
        seen = []
        integ.integrate(start, 0.1, 7, callback=lambda i, s: seen.append(i))
        assert seen == list(range(1, 8))
        assert len(list(integ.trajectory(start, 0.1, 3))) == 3

    def test_circular_orbit_stays_circular(self):
        calc = OrbitCalculator(mass=1.0)
        start = calc.circular_orbit(10.0)
        E0, L0 = calc.constants_of_motion(start)
        end = calc.integrator.integrate(start, 0.5, 400)
        E1, L1 = calc.constants_of_motion(end)
        assert end.position[1] == pytest.approx(10.0, rel=1e-6)
        assert end.position[2] == pytest.approx(math.pi / 2, abs=1e-12)
        assert E1 == pytest.approx(E0, rel=1e-8)
        assert L1 == pytest.approx(L0, rel=1e-8)
        assert calc.field.at(end.position).interval(end.velocity) == pytest.approx(-1.0, abs=1e-8)

    def test_orbit_phase_matches_kepler_frequency(self):
        # dφ/dt = √(M/r³) exactly for Schwarzschild circular orbits
        calc = OrbitCalculator(mass=1.0)
        end = calc.integrator.integrate(calc.circular_orbit(10.0), 0.5, 200)
        assert end.position[3] / end.position[0] == pytest.approx(calc.orbital_angular_frequency(10.0), rel=1e-8)

    def test_radial_photon_moves_at_light_speed(self, minkowski):
        integ = GeodesicIntegrator(minkowski)
        photon = ParticleState.null(minkowski, [0, 0, 0, 0], [1.0, 0.0, 0.0])
        end = integ.integrate(photon, 0.25, 40)
        assert end.position[1] == pytest.approx(end.position[0])
