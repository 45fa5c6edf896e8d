"""Tests for strong, weak and micro-lensing."""

import math

import numpy as np
import pytest

from physics import GravitationalLens, LensingStatistics, LensType, MicrolensingEvent, WeakLensing
from physics.constants import C_SI, DAY, G_SI, KPC, M_SUN, MPC

ARCSEC = math.pi / (180.0 * 3600.0)


@pytest.fixture
def galactic_lens():
    """Solar-mass lens half way to a bulge source."""
    return GravitationalLens(M_SUN, 4.0 * KPC, 8.0 * KPC)


@pytest.fixture
def galaxy_sis():
    return GravitationalLens.singular_isothermal_sphere(250e3, 1000.0 * MPC, 2000.0 * MPC)


class TestStrongLensing:
    """Test Einstein radii, images and magnifications."""

    def test_point_mass_einstein_radius(self, galactic_lens):
        expected = math.sqrt(4.0 * G_SI * M_SUN / C_SI ** 2 * (4.0 * KPC) / (4.0 * KPC * 8.0 * KPC))
        assert galactic_lens.einstein_radius() == pytest.approx(expected)
        # about a milliarcsecond for galactic microlensing
        assert galactic_lens.einstein_radius() / ARCSEC == pytest.approx(1.0e-3, rel=0.1)

    def test_sis_einstein_radius(self, galaxy_sis):
        expected = 4.0 * math.pi * (250e3 / C_SI) ** 2 * 0.5
        assert galaxy_sis.einstein_radius() == pytest.approx(expected)
        assert 0.5 < galaxy_sis.einstein_radius() / ARCSEC < 2.0

    def test_image_positions_solve_lens_equation(self, galactic_lens):
        te = galactic_lens.einstein_radius()
        beta = 0.3 * te
        for theta in galactic_lens.image_positions(beta):
            assert theta - te ** 2 / theta == pytest.approx(beta, rel=1e-10)

    def test_point_magnifications(self, galactic_lens):
        te = galactic_lens.einstein_radius()
        u = 0.5
        mu_plus, mu_minus = galactic_lens.magnifications(u * te)
        assert mu_plus + mu_minus == pytest.approx(1.0)
        assert galactic_lens.total_magnification(u * te) == pytest.approx(
            (u * u + 2.0) / (u * math.sqrt(u * u + 4.0)))

    def test_source_behind_lens(self, galactic_lens):
        assert galactic_lens.magnifications(0.0) == (math.inf, -math.inf)
        assert math.isinf(galactic_lens.total_magnification(0.0))

    def test_sis_single_image_outside_einstein_radius(self, galaxy_sis):
        te = galaxy_sis.einstein_radius()
        assert len(galaxy_sis.image_positions(2.0 * te)) == 1
        with pytest.raises(ValueError):
            galaxy_sis.time_delay(2.0 * te)
        assert galaxy_sis.time_delay(0.5 * te) > 0

    def test_deflection_angles(self, galactic_lens, galaxy_sis):
        b = 1e10
        assert galactic_lens.deflection_angle(b) == pytest.approx(4.0 * G_SI * M_SUN / (C_SI ** 2 * b))
        assert galaxy_sis.deflection_angle(b) == pytest.approx(galaxy_sis.deflection_angle(2.0 * b))

    def test_point_time_delay_scales_with_mass(self):
        a = GravitationalLens(1e12 * M_SUN, 1000.0 * MPC, 2000.0 * MPC)
        b = GravitationalLens(2e12 * M_SUN, 1000.0 * MPC, 2000.0 * MPC)
        beta = 0.2 * a.einstein_radius()
        u = beta / a.einstein_radius()
        assert b.time_delay(u * b.einstein_radius()) == pytest.approx(2.0 * a.time_delay(beta))

    def test_invalid_geometry(self):
        with pytest.raises(ValueError):
            GravitationalLens(M_SUN, 8.0 * KPC, 4.0 * KPC)
        with pytest.raises(ValueError):
            GravitationalLens(0.0, 4.0 * KPC, 8.0 * KPC)
        with pytest.raises(ValueError):
            GravitationalLens.singular_isothermal_sphere(0.0, MPC, 2 * MPC)


class TestWeakLensing:
    """Test convergence, shear and enclosed mass."""

    def test_point_mass_profiles(self, galactic_lens):
        wl = WeakLensing(galactic_lens)
        te = galactic_lens.einstein_radius()
        assert wl.convergence(2.0 * te) == 0.0
        assert wl.shear(2.0 * te) == pytest.approx(0.25)
        assert wl.reduced_shear(2.0 * te) == pytest.approx(0.25)

    def test_point_mass_projected_mass(self, galactic_lens):
        wl = WeakLensing(galactic_lens)
        te = galactic_lens.einstein_radius()
        for theta in (0.5 * te, te, 3.0 * te):
            assert wl.projected_mass(theta) == pytest.approx(M_SUN, rel=1e-10)

    def test_sis_profiles(self, galaxy_sis):
        wl = WeakLensing(galaxy_sis)
        te = galaxy_sis.einstein_radius()
        theta = 4.0 * te
        assert wl.convergence(theta) == pytest.approx(0.125)
        assert wl.shear(theta) == pytest.approx(wl.convergence(theta))
        assert wl.reduced_shear(theta) == pytest.approx(0.125 / 0.875)
        with pytest.raises(ValueError):
            wl.reduced_shear(0.25 * te)

    def test_shear_components(self, galaxy_sis):
        wl = WeakLensing(galaxy_sis)
        g1, g2 = wl.shear_components(1e-5, 0.0)
        assert g1 == pytest.approx(-wl.shear(1e-5))
        assert g2 == pytest.approx(0.0, abs=1e-15)

    def test_tangential_profile(self, galaxy_sis):
        wl = WeakLensing(galaxy_sis)
        profile = wl.tangential_profile([1e-5, 2e-5, 4e-5])
        assert profile.shape == (3,)
        assert np.all(np.diff(profile) < 0)

    def test_non_positive_theta(self, galaxy_sis):
        with pytest.raises(ValueError):
            WeakLensing(galaxy_sis).convergence(0.0)


class TestMicrolensing:
    """Test Paczyński light curves."""

    def test_peak_magnification(self):
        event = MicrolensingEvent(einstein_time=20.0, impact_parameter=0.1, peak_time=100.0)
        assert event.peak_magnification() == pytest.approx(2.01 / (0.1 * math.sqrt(4.01)))
        assert event.magnification(100.0) == pytest.approx(event.peak_magnification())
        assert event.magnification(120.0) == pytest.approx(MicrolensingEvent.magnification_at(math.sqrt(1.01)))

    def test_exact_alignment(self):
        assert math.isinf(MicrolensingEvent.magnification_at(0.0))
        assert math.isinf(MicrolensingEvent(10.0, 0.0).peak_magnification())

    def test_light_curve_blending(self):
        event = MicrolensingEvent(10.0, 0.5, source_fraction=0.5)
        flux = event.light_curve([0.0, 1e6], baseline_flux=2.0)
        assert flux[1] == pytest.approx(2.0, rel=1e-6)
        assert flux[0] == pytest.approx(2.0 * (0.5 * event.peak_magnification() + 0.5))

    def test_duration_above_threshold(self):
        # A = 1.34 at u = 1
        event = MicrolensingEvent(einstein_time=30.0, impact_parameter=0.6)
        threshold = 3.0 / math.sqrt(5.0)
        assert event.duration_above(threshold) == pytest.approx(2.0 * 30.0 * 0.8)
        assert MicrolensingEvent(30.0, 1.5).duration_above(threshold) == 0.0
        with pytest.raises(ValueError):
            event.duration_above(1.0)

    def test_from_lens(self, galactic_lens):
        event = MicrolensingEvent.from_lens(galactic_lens, 200e3, 0.2)
        assert event.einstein_time == pytest.approx(galactic_lens.einstein_radius_physical() / 200e3 / DAY)
        # typical bulge events last weeks
        assert 10.0 < event.einstein_time < 60.0


class TestLensingStatistics:
    """Test optical depth and event rates."""

    def test_uniform_density_optical_depth(self):
        rho, ds = 1e-20, 8.0 * KPC
        stats = LensingStatistics(rho, ds, M_SUN, 200e3)
        # ∫₀^Ds D (Ds − D) / Ds dD = Ds² / 6
        expected = 4.0 * math.pi * G_SI / C_SI ** 2 * rho * ds ** 2 / 6.0
        assert stats.optical_depth() == pytest.approx(expected, rel=1e-8)

    def test_callable_density(self):
        ds = 8.0 * KPC
        const = LensingStatistics(1e-20, ds, M_SUN, 200e3)
        func = LensingStatistics(lambda d: 1e-20, ds, M_SUN, 200e3)
        assert func.optical_depth() == pytest.approx(const.optical_depth())

    def test_event_rate(self):
        stats = LensingStatistics(1e-20, 8.0 * KPC, M_SUN, 200e3)
        rate = stats.event_rate(1e6)
        assert rate == pytest.approx(2.0 / math.pi * 1e6 * stats.optical_depth() / stats.mean_einstein_time())
        assert stats.expected_events(1e6, 3600.0) == pytest.approx(rate * 3600.0)
