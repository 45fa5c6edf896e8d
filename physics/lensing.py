# physics/lensing.py
"""
Thin-lens gravitational lensing in SI units.

Angles are in radians; distances are angular-diameter distances in metres. When the
lens–source distance is not given it defaults to d_source − d_lens (the static,
Euclidean limit). Every method is a pure evaluation.
"""
from __future__ import annotations
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple, Union

import numpy as np
from scipy import integrate

from .constants import C_SI, DAY, G_SI


class LensType(Enum):
    POINT_MASS = "point_mass"
    SIS = "singular_isothermal_sphere"


def _positive(name: str, value: float) -> float:
    if not value > 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return float(value)


@dataclass(frozen=True)
class GravitationalLens:
    """
    POINT_MASS lenses use `mass` (kg); SIS lenses use `velocity_dispersion` (m/s).
    """
    mass: float
    d_lens: float
    d_source: float
    lens_type: LensType = LensType.POINT_MASS
    velocity_dispersion: float = 0.0
    d_lens_source: Optional[float] = None
    lens_redshift: float = 0.0

    def __post_init__(self):
        _positive("d_lens", self.d_lens)
        _positive("d_source", self.d_source)
        if self.d_lens_source is None:
            if self.d_source <= self.d_lens:
                raise ValueError(f"source ({self.d_source}) must lie behind the lens ({self.d_lens})")
            object.__setattr__(self, "d_lens_source", self.d_source - self.d_lens)
        _positive("d_lens_source", self.d_lens_source)
        if self.lens_type is LensType.POINT_MASS:
            _positive("mass", self.mass)
        else:
            _positive("velocity_dispersion", self.velocity_dispersion)

    @classmethod
    def singular_isothermal_sphere(cls, velocity_dispersion: float, d_lens: float, d_source: float,
                                   d_lens_source: Optional[float] = None) -> "GravitationalLens":
        return cls(0.0, d_lens, d_source, LensType.SIS, velocity_dispersion, d_lens_source)

    @property
    def distance_ratio(self) -> float:
        """D_ls / (D_l D_s)"""
        return self.d_lens_source / (self.d_lens * self.d_source)

    def einstein_radius(self) -> float:
        if self.lens_type is LensType.POINT_MASS:
            return math.sqrt(4.0 * G_SI * self.mass / C_SI ** 2 * self.distance_ratio)
        return 4.0 * math.pi * (self.velocity_dispersion / C_SI) ** 2 * self.d_lens_source / self.d_source

    def einstein_radius_physical(self) -> float:
        """θ_E D_l, metres in the lens plane."""
        return self.einstein_radius() * self.d_lens

    def critical_surface_density(self) -> float:
        """Σ_cr = c² D_s / (4π G D_l D_ls), kg/m²"""
        return C_SI ** 2 / (4.0 * math.pi * G_SI) / (self.d_lens * self.distance_ratio * self.d_lens)

    def deflection_angle(self, impact_parameter: float) -> float:
        """α̂(b): 4GM/(c² b) for a point mass, 4πσ²/c² for an SIS."""
        b = _positive("impact parameter", impact_parameter)
        if self.lens_type is LensType.POINT_MASS:
            return 4.0 * G_SI * self.mass / (C_SI ** 2 * b)
        return 4.0 * math.pi * (self.velocity_dispersion / C_SI) ** 2

    def image_positions(self, beta: float) -> Tuple[float, ...]:
        """Image angles for a source at angle β ≥ 0 (negative = opposite side)."""
        if beta < 0:
            raise ValueError(f"source angle must be non-negative, got {beta}")
        te = self.einstein_radius()
        if self.lens_type is LensType.POINT_MASS:
            root = math.sqrt(beta * beta + 4.0 * te * te)
            return 0.5 * (beta + root), 0.5 * (beta - root)
        if beta < te:
            return beta + te, beta - te
        return (beta + te,)

    def magnifications(self, beta: float) -> Tuple[float, ...]:
        """Signed magnification of each image in `image_positions` order."""
        if beta < 0:
            raise ValueError(f"source angle must be non-negative, got {beta}")
        te = self.einstein_radius()
        if beta == 0:
            return math.inf, -math.inf
        if self.lens_type is LensType.POINT_MASS:
            u = beta / te
            a = (u * u + 2.0) / (u * math.sqrt(u * u + 4.0))
            return 0.5 * (a + 1.0), -0.5 * (a - 1.0)
        if beta < te:
            return 1.0 + te / beta, 1.0 - te / beta
        return (1.0 + te / beta,)

    def total_magnification(self, beta: float) -> float:
        """Σ|μ|; diverges (math.inf) for a source exactly behind the lens."""
        return float(sum(abs(m) for m in self.magnifications(beta)))

    def time_delay(self, beta: float) -> float:
        """Arrival-time difference between the two images, seconds."""
        images = self.image_positions(beta)
        if len(images) < 2:
            raise ValueError(f"source at β={beta} has a single image")
        z = 1.0 + self.lens_redshift
        if self.lens_type is LensType.POINT_MASS:
            u = beta / self.einstein_radius()
            root = math.sqrt(u * u + 4.0)
            return z * 4.0 * G_SI * self.mass / C_SI ** 3 * (0.5 * u * root + math.log((root + u) / (root - u)))
        tp, tm = images
        return z * (tp * tp - tm * tm) / (2.0 * C_SI * self.distance_ratio)


@dataclass(frozen=True)
class WeakLensing:
    """Convergence κ and shear γ of a lens at angular radius θ from its centre."""
    lens: GravitationalLens

    def convergence(self, theta: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        theta = np.asarray(theta, dtype=np.float64)
        if np.any(theta <= 0):
            raise ValueError("theta must be positive")
        if self.lens.lens_type is LensType.POINT_MASS:
            k = np.zeros_like(theta)
        else:
            k = self.lens.einstein_radius() / (2.0 * theta)
        return float(k) if k.ndim == 0 else k

    def mean_convergence(self, theta: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """κ̄(<θ)"""
        theta = np.asarray(theta, dtype=np.float64)
        if np.any(theta <= 0):
            raise ValueError("theta must be positive")
        te = self.lens.einstein_radius()
        k = (te / theta) ** 2 if self.lens.lens_type is LensType.POINT_MASS else te / theta
        return float(k) if np.ndim(k) == 0 else k

    def shear(self, theta: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Tangential shear γ_t = κ̄(<θ) − κ(θ)"""
        g = np.asarray(self.mean_convergence(theta)) - np.asarray(self.convergence(theta))
        return float(g) if g.ndim == 0 else g

    def reduced_shear(self, theta: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        k = np.asarray(self.convergence(theta))
        if np.any(k >= 1.0):
            raise ValueError("reduced shear is undefined inside the critical curve (κ >= 1)")
        g = np.asarray(self.shear(theta)) / (1.0 - k)
        return float(g) if g.ndim == 0 else g

    def shear_components(self, x: float, y: float) -> Tuple[float, float]:
        """(γ₁, γ₂) at angular offset (x, y) from the lens centre."""
        theta = math.hypot(x, y)
        phi = math.atan2(y, x)
        gt = self.shear(theta)
        return -gt * math.cos(2.0 * phi), -gt * math.sin(2.0 * phi)

    def tangential_profile(self, radii) -> np.ndarray:
        return np.atleast_1d(np.asarray(self.shear(np.asarray(radii, dtype=np.float64))))

    def projected_mass(self, theta: float) -> float:
        """Mass inside angular radius θ: π (D_l θ)² Σ_cr κ̄(<θ)"""
        r = self.lens.d_lens * theta
        return math.pi * r * r * self.lens.critical_surface_density() * self.mean_convergence(theta)


@dataclass(frozen=True)
class MicrolensingEvent:
    """
    Point-lens, point-source (Paczyński) light curve:
        u(t) = √(u₀² + ((t − t₀)/t_E)²),  A(u) = (u² + 2) / (u √(u² + 4))
    Times are in the units of `einstein_time` (days for `from_lens`).
    """
    einstein_time: float
    impact_parameter: float
    peak_time: float = 0.0
    source_fraction: float = 1.0

    def __post_init__(self):
        _positive("einstein_time", self.einstein_time)
        if self.impact_parameter < 0:
            raise ValueError(f"impact_parameter must be non-negative, got {self.impact_parameter}")
        if not 0.0 < self.source_fraction <= 1.0:
            raise ValueError(f"source_fraction must be in (0, 1], got {self.source_fraction}")

    @classmethod
    def from_lens(cls, lens: GravitationalLens, relative_velocity: float, impact_parameter: float,
                  peak_time: float = 0.0) -> "MicrolensingEvent":
        """t_E = θ_E D_l / v⊥ expressed in days."""
        v = _positive("relative_velocity", relative_velocity)
        return cls(lens.einstein_radius_physical() / v / DAY, impact_parameter, peak_time)

    def separation(self, t):
        tau = (np.asarray(t, dtype=np.float64) - self.peak_time) / self.einstein_time
        return np.sqrt(self.impact_parameter ** 2 + tau * tau)

    @staticmethod
    def magnification_at(u):
        u = np.asarray(u, dtype=np.float64)
        with np.errstate(divide="ignore"):
            a = (u * u + 2.0) / (u * np.sqrt(u * u + 4.0))
        return float(a) if a.ndim == 0 else a

    def magnification(self, t):
        return self.magnification_at(self.separation(t))

    def peak_magnification(self) -> float:
        return self.magnification_at(self.impact_parameter)

    def light_curve(self, times, baseline_flux: float = 1.0) -> np.ndarray:
        """F(t) = F_base (f_s A(t) + 1 − f_s)"""
        a = np.asarray(self.magnification(times))
        return baseline_flux * (self.source_fraction * a + 1.0 - self.source_fraction)

    def duration_above(self, threshold: float) -> float:
        """Time the magnification stays above `threshold` (> 1)."""
        if threshold <= 1.0:
            raise ValueError(f"threshold must exceed 1, got {threshold}")
        u_thr = math.sqrt(2.0 * (threshold / math.sqrt(threshold * threshold - 1.0) - 1.0))
        if u_thr <= self.impact_parameter:
            return 0.0
        return 2.0 * self.einstein_time * math.sqrt(u_thr ** 2 - self.impact_parameter ** 2)


@dataclass(frozen=True)
class LensingStatistics:
    """
    Microlensing optical depth and event rate towards sources at `d_source`, for lenses
    of `lens_mass` with mass density `density` (kg/m³, constant or a function of the
    distance from the observer) and relative transverse speed `velocity` (m/s).
    """
    density: Union[float, Callable[[float], float]]
    d_source: float
    lens_mass: float
    velocity: float

    def __post_init__(self):
        _positive("d_source", self.d_source)
        _positive("lens_mass", self.lens_mass)
        _positive("velocity", self.velocity)

    def _rho(self, d: float) -> float:
        return float(self.density(d)) if callable(self.density) else float(self.density)

    def optical_depth(self) -> float:
        """τ = 4πG/c² ∫₀^Ds ρ(D) D (Ds − D)/Ds dD"""
        ds = self.d_source
        value, _ = integrate.quad(lambda d: self._rho(d) * d * (ds - d) / ds, 0.0, ds)
        return 4.0 * math.pi * G_SI / C_SI ** 2 * value

    def mean_einstein_time(self) -> float:
        """t_E (seconds) of a lens half-way to the sources."""
        lens = GravitationalLens(self.lens_mass, 0.5 * self.d_source, self.d_source)
        return lens.einstein_radius_physical() / self.velocity

    def event_rate(self, n_sources: float = 1.0) -> float:
        """Γ = (2/π) N τ / t_E, events per second."""
        return 2.0 / math.pi * n_sources * self.optical_depth() / self.mean_einstein_time()

    def expected_events(self, n_sources: float, duration: float) -> float:
        return self.event_rate(n_sources) * duration
