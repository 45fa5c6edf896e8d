# physics/cosmology.py
"""
Homogeneous ΛCDM background cosmology.

Distances are returned in metres and times in seconds; use constants.MPC / YEAR to
convert. Integrals are evaluated with scipy.integrate.quad.
"""
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Optional, Sequence

from scipy import integrate

from .constants import C_SI, MPC, PARSEC
from .metric import FLRWMetric, MetricTensor, Signature

_QUAD_OPTS = dict(epsabs=0.0, epsrel=1e-10, limit=200)


def _quad(f, a: float, b: float) -> float:
    value, _ = integrate.quad(f, a, b, **_QUAD_OPTS)
    return value


@dataclass(frozen=True)
class CosmologicalParameters:
    h: float = 0.674                 # H0 / (100 km/s/Mpc)
    omega_m: float = 0.315
    omega_lambda: float = 0.685
    omega_r: float = 0.0
    omega_b: float = 0.0493
    sigma8: float = 0.811
    n_s: float = 0.965

    def __post_init__(self):
        if self.h <= 0:
            raise ValueError(f"h must be positive, got {self.h}")
        for name in ("omega_m", "omega_r", "omega_b"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")
        if self.omega_b > self.omega_m:
            raise ValueError(f"omega_b ({self.omega_b}) cannot exceed omega_m ({self.omega_m})")

    @classmethod
    def planck2018(cls) -> "CosmologicalParameters":
        omega_r = 9.14e-5
        return cls(h=0.674, omega_m=0.315, omega_lambda=1.0 - 0.315 - omega_r, omega_r=omega_r)

    @classmethod
    def einstein_de_sitter(cls, h: float = 0.7) -> "CosmologicalParameters":
        return cls(h=h, omega_m=1.0, omega_lambda=0.0, omega_b=0.05)

    @property
    def omega_k(self) -> float:
        return 1.0 - self.omega_m - self.omega_lambda - self.omega_r

    @property
    def hubble_constant(self) -> float:
        """H0 in km/s/Mpc"""
        return 100.0 * self.h

    @property
    def hubble_constant_si(self) -> float:
        """H0 in 1/s"""
        return self.hubble_constant * 1e3 / MPC

    @property
    def hubble_distance(self) -> float:
        return C_SI / self.hubble_constant_si

    @property
    def hubble_time(self) -> float:
        return 1.0 / self.hubble_constant_si


class FLRWUniverse:
    def __init__(self, params: Optional[CosmologicalParameters] = None):
        self.params = params or CosmologicalParameters.planck2018()

    def E(self, z: float) -> float:
        """H(z)/H0"""
        if z <= -1:
            raise ValueError(f"redshift must be > -1, got {z}")
        p, zp = self.params, 1.0 + z
        e2 = p.omega_r * zp ** 4 + p.omega_m * zp ** 3 + p.omega_k * zp ** 2 + p.omega_lambda
        if e2 <= 0:
            raise ValueError(f"H²(z) is not positive at z={z}; the model has no such epoch")
        return math.sqrt(e2)

    def _aE(self, a: float) -> float:
        # a E(a), finite at a -> 0 for any non-negative densities
        p = self.params
        return math.sqrt(p.omega_r / (a * a) + p.omega_m / a + p.omega_k + p.omega_lambda * a * a)

    def hubble(self, z: float) -> float:
        """H(z) in km/s/Mpc"""
        return self.params.hubble_constant * self.E(z)

    @staticmethod
    def scale_factor(z: float) -> float:
        return 1.0 / (1.0 + z)

    @staticmethod
    def redshift(a: float) -> float:
        if a <= 0:
            raise ValueError(f"scale factor must be positive, got {a}")
        return 1.0 / a - 1.0

    def omega_m_z(self, z: float) -> float:
        return self.params.omega_m * (1.0 + z) ** 3 / self.E(z) ** 2

    def omega_r_z(self, z: float) -> float:
        return self.params.omega_r * (1.0 + z) ** 4 / self.E(z) ** 2

    def omega_lambda_z(self, z: float) -> float:
        return self.params.omega_lambda / self.E(z) ** 2

    def deceleration_parameter(self, z: float = 0.0) -> float:
        """q = Ω_r + Ω_m/2 − Ω_Λ at redshift z"""
        return self.omega_r_z(z) + 0.5 * self.omega_m_z(z) - self.omega_lambda_z(z)

    @property
    def curvature_k(self) -> float:
        """k in comoving coordinates measured in Hubble distances."""
        return -self.params.omega_k

    def metric(self, z: float = 0.0, position: Optional[Sequence[float]] = None,
               signature: Signature = Signature.MOSTLY_PLUS) -> MetricTensor:
        return MetricTensor.flrw(self.scale_factor(z), self.curvature_k, position, signature)

    def metric_field(self, signature: Signature = Signature.MOSTLY_PLUS) -> FLRWMetric:
        """Constant-epoch field at a = 1; time-dependent models pass a(t) to FLRWMetric directly."""
        return FLRWMetric(1.0, self.curvature_k, signature)


class CosmologicalObservables:
    def __init__(self, universe: Optional[FLRWUniverse] = None):
        self.universe = universe or FLRWUniverse()

    @property
    def params(self) -> CosmologicalParameters:
        return self.universe.params

    def comoving_distance(self, z: float) -> float:
        if z < 0:
            raise ValueError(f"redshift must be non-negative, got {z}")
        return self.params.hubble_distance * _quad(lambda x: 1.0 / self.universe.E(x), 0.0, z)

    def transverse_comoving_distance(self, z: float) -> float:
        dc, dh, ok = self.comoving_distance(z), self.params.hubble_distance, self.params.omega_k
        if abs(ok) < 1e-12:
            return dc
        s = math.sqrt(abs(ok))
        if ok > 0:
            return dh / s * math.sinh(s * dc / dh)
        return dh / s * math.sin(s * dc / dh)

    def luminosity_distance(self, z: float) -> float:
        return (1.0 + z) * self.transverse_comoving_distance(z)

    def angular_diameter_distance(self, z: float) -> float:
        return self.transverse_comoving_distance(z) / (1.0 + z)

    def angular_diameter_distance_between(self, z1: float, z2: float) -> float:
        """D_A between two redshifts z1 < z2 (lens → source)."""
        if z2 < z1:
            raise ValueError(f"z2 ({z2}) must not be smaller than z1 ({z1})")
        dm1, dm2 = self.transverse_comoving_distance(z1), self.transverse_comoving_distance(z2)
        dh, ok = self.params.hubble_distance, self.params.omega_k
        return (dm2 * math.sqrt(1.0 + ok * dm1 ** 2 / dh ** 2)
                - dm1 * math.sqrt(1.0 + ok * dm2 ** 2 / dh ** 2)) / (1.0 + z2)

    def distance_modulus(self, z: float) -> float:
        return 5.0 * math.log10(self.luminosity_distance(z) / (10.0 * PARSEC))

    def lookback_time(self, z: float) -> float:
        if z < 0:
            raise ValueError(f"redshift must be non-negative, got {z}")
        a = self.universe.scale_factor(z)
        return self.params.hubble_time * _quad(lambda x: 1.0 / self.universe._aE(x), a, 1.0)

    def age(self, z: float = 0.0) -> float:
        """t(z) = t_H ∫₀^a da / (a E(a))"""
        a = self.universe.scale_factor(z)
        return self.params.hubble_time * _quad(lambda x: 1.0 / self.universe._aE(x), 0.0, a)

    def comoving_volume(self, z: float) -> float:
        """All-sky comoving volume out to z, m³."""
        dm, dh, ok = self.transverse_comoving_distance(z), self.params.hubble_distance, self.params.omega_k
        if abs(ok) < 1e-12:
            return 4.0 * math.pi / 3.0 * dm ** 3
        s = math.sqrt(abs(ok))
        x = dm / dh
        arc = math.asinh(s * x) if ok > 0 else math.asin(s * x)
        return 2.0 * math.pi * dh ** 3 / ok * (x * math.sqrt(1.0 + ok * x * x) - arc / s)


class CosmicStructure:
    """Linear growth of matter perturbations (ΛCDM, radiation neglected in the growth ODE)."""

    def __init__(self, universe: Optional[FLRWUniverse] = None):
        self.universe = universe or FLRWUniverse()

    def _growth_unnormalised(self, a: float) -> float:
        # Heath (1977): D(a) ∝ (5 Ω_m / 2) E(a) ∫₀^a da' / (a' E(a'))³
        u = self.universe
        integral = _quad(lambda x: 1.0 / u._aE(x) ** 3, 0.0, a)
        return 2.5 * u.params.omega_m * u.E(u.redshift(a)) * integral

    def growth_factor(self, z: float) -> float:
        """D(z) normalised to D(0) = 1."""
        a = self.universe.scale_factor(z)
        return self._growth_unnormalised(a) / self._growth_unnormalised(1.0)

    def growth_rate(self, z: float, step: float = 1e-4) -> float:
        """f = d ln D / d ln a"""
        ln_a = math.log(self.universe.scale_factor(z))
        up = math.log(self._growth_unnormalised(math.exp(ln_a + step)))
        down = math.log(self._growth_unnormalised(math.exp(ln_a - step)))
        return (up - down) / (2.0 * step)

    def sigma8(self, z: float) -> float:
        return self.universe.params.sigma8 * self.growth_factor(z)
