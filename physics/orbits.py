# physics/orbits.py
"""
Black-hole properties, weak-field GR effects and Schwarzschild orbits.

BlackHoleProperties / GravitationalEffects take SI inputs. OrbitCalculator works in
geometric units (G = c = 1, lengths in units of the mass) on Schwarzschild
coordinates (t, r, θ, φ) with the orbit in the equatorial plane θ = π/2.
"""
from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

from .constants import C_SI, G_SI, HBAR_SI, K_B_SI, M_SUN
from .geodesic import GeodesicIntegrator, ParticleState
from .gravitational_waves import WaveformAnalysis, quadrupole_waveform
from .metric import SchwarzschildMetric

logger = logging.getLogger(__name__)

# orbits are stopped this far (relative) outside the horizon
HORIZON_MARGIN = 1e-2
# |E² − V_min| below this counts as a circular orbit
CIRCULAR_TOL = 1e-9


def _positive(name: str, value: float) -> float:
    if not value > 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return float(value)


class OrbitType(Enum):
    CIRCULAR = "circular"
    BOUND = "bound"
    PLUNGE = "plunge"
    ESCAPE = "escape"


@dataclass(frozen=True)
class BlackHoleProperties:
    mass: float   # kg

    def __post_init__(self):
        _positive("mass", self.mass)

    @classmethod
    def from_solar_masses(cls, m: float) -> "BlackHoleProperties":
        return cls(m * M_SUN)

    @property
    def geometric_mass(self) -> float:
        """GM/c², metres"""
        return G_SI * self.mass / C_SI ** 2

    @property
    def schwarzschild_radius(self) -> float:
        return 2.0 * self.geometric_mass

    @property
    def photon_sphere_radius(self) -> float:
        return 3.0 * self.geometric_mass

    @property
    def isco_radius(self) -> float:
        return 6.0 * self.geometric_mass

    @property
    def surface_gravity(self) -> float:
        return C_SI ** 4 / (4.0 * G_SI * self.mass)

    @property
    def hawking_temperature(self) -> float:
        """T_H = ħc³ / (8π G M k_B), kelvin"""
        return HBAR_SI * C_SI ** 3 / (8.0 * math.pi * G_SI * self.mass * K_B_SI)

    @property
    def evaporation_time(self) -> float:
        """5120 π G² M³ / (ħ c⁴), seconds"""
        return 5120.0 * math.pi * G_SI ** 2 * self.mass ** 3 / (HBAR_SI * C_SI ** 4)

    def isco_frequency(self) -> float:
        """Orbital frequency of the ISCO seen from infinity, Hz."""
        return C_SI ** 3 / (6.0 ** 1.5 * 2.0 * math.pi * G_SI * self.mass)

    def to_geometric(self, length: float) -> float:
        """Metres → units of M."""
        return length / self.geometric_mass

    def to_si(self, length: float) -> float:
        """Units of M → metres."""
        return length * self.geometric_mass


@dataclass(frozen=True)
class GravitationalEffects:
    """Weak/strong-field effects of a static mass (kg), SI units."""
    mass: float

    def __post_init__(self):
        _positive("mass", self.mass)

    @property
    def schwarzschild_radius(self) -> float:
        return 2.0 * G_SI * self.mass / C_SI ** 2

    def _outside(self, r: float) -> float:
        if r <= self.schwarzschild_radius:
            raise ValueError(f"r={r} m is not outside the Schwarzschild radius {self.schwarzschild_radius} m")
        return 1.0 - self.schwarzschild_radius / r

    def time_dilation(self, r: float) -> float:
        """dτ/dt of a static clock at r."""
        return math.sqrt(self._outside(r))

    def gravitational_redshift(self, r_emit: float, r_obs: float = math.inf) -> float:
        f_obs = 1.0 if math.isinf(r_obs) else self._outside(r_obs)
        return math.sqrt(f_obs / self._outside(r_emit)) - 1.0

    def perihelion_precession(self, semi_major_axis: float, eccentricity: float) -> float:
        """Δφ = 6πGM / (c² a (1 − e²)) per orbit, radians"""
        if not 0.0 <= eccentricity < 1.0:
            raise ValueError(f"eccentricity must be in [0, 1), got {eccentricity}")
        a = _positive("semi_major_axis", semi_major_axis)
        return 6.0 * math.pi * G_SI * self.mass / (C_SI ** 2 * a * (1.0 - eccentricity ** 2))

    def light_deflection(self, impact_parameter: float) -> float:
        """α = 4GM / (c² b), radians"""
        return 4.0 * G_SI * self.mass / (C_SI ** 2 * _positive("impact_parameter", impact_parameter))

    def shapiro_delay(self, r1: float, r2: float, impact_parameter: float) -> float:
        """Extra light travel time (2GM/c³) ln(4 r₁ r₂ / b²), seconds"""
        b = _positive("impact_parameter", impact_parameter)
        return 2.0 * G_SI * self.mass / C_SI ** 3 * math.log(4.0 * _positive("r1", r1) * _positive("r2", r2) / b ** 2)


class OrbitCalculator:
    """Timelike equatorial geodesics of a Schwarzschild black hole of mass M."""

    def __init__(self, mass: float = 1.0):
        self.mass = _positive("mass", mass)
        self.field = SchwarzschildMetric(self.mass)
        self.integrator = GeodesicIntegrator(self.field)

    def _f(self, r: float) -> float:
        return 1.0 - 2.0 * self.mass / r

    def effective_potential(self, r: float, angular_momentum: float, massive: bool = True) -> float:
        """V(r) with E² = (dr/dτ)² + V(r):  (1 − 2M/r)(ε + L²/r²), ε = 1 massive, 0 photons"""
        r = _positive("r", r)
        return self._f(r) * ((1.0 if massive else 0.0) + angular_momentum ** 2 / r ** 2)

    def potential_extrema(self, angular_momentum: float) -> Optional[Tuple[float, float]]:
        """(r_max, r_min) of the massive-particle potential, None when L² < 12 M²."""
        M, L2 = self.mass, angular_momentum ** 2
        disc = L2 * L2 - 12.0 * M * M * L2
        if disc < 0:
            return None
        root = math.sqrt(disc)
        return (L2 - root) / (2.0 * M), (L2 + root) / (2.0 * M)

    def circular_orbit_constants(self, r: float) -> Tuple[float, float]:
        """(E, L) per unit mass of the circular orbit at r (> 3M)."""
        r = _positive("r", r)
        x = 1.0 - 3.0 * self.mass / r
        if x <= 0:
            raise ValueError(f"no timelike circular orbit at r={r} <= 3M={3.0 * self.mass}")
        return self._f(r) / math.sqrt(x), math.sqrt(self.mass * r) / math.sqrt(x)

    def circular_orbit(self, r: float, phi: float = 0.0) -> ParticleState:
        E, L = self.circular_orbit_constants(r)
        return ParticleState((0.0, r, 0.5 * math.pi, phi), (E / self._f(r), 0.0, 0.0, L / r ** 2))

    def orbital_period(self, r: float) -> float:
        """Coordinate-time period of the circular orbit: 2π √(r³/M)"""
        return 2.0 * math.pi * math.sqrt(_positive("r", r) ** 3 / self.mass)

    def state_from_constants(self, r: float, energy: float, angular_momentum: float,
                             inward: bool = True) -> ParticleState:
        V = self.effective_potential(r, angular_momentum)
        if energy ** 2 < V:
            raise ValueError(f"E²={energy ** 2} is below the potential {V} at r={r}; turning point exceeded")
        ur = math.sqrt(energy ** 2 - V) * (-1.0 if inward else 1.0)
        return ParticleState((0.0, r, 0.5 * math.pi, 0.0),
                             (energy / self._f(r), ur, 0.0, angular_momentum / r ** 2))

    def constants_of_motion(self, state: ParticleState) -> Tuple[float, float]:
        """(E, L) = ((1 − 2M/r) u^t, r² sin²θ u^φ)"""
        _, r, theta, _ = state.position
        return self._f(r) * state.velocity[0], r * r * math.sin(theta) ** 2 * state.velocity[3]

    def classify(self, energy: float, angular_momentum: float, r: Optional[float] = None,
                 outgoing: bool = False) -> OrbitType:
        """
        Fate of an orbit with constants (E, L) at radius r, moving outward when `outgoing`.
        Without r the particle is taken to be outside the potential barrier.

        Nothing stops an ingoing particle that clears the barrier; an outgoing one that
        clears it escapes only with E² >= 1 and otherwise falls back and plunges.
        """
        E2 = energy ** 2
        extrema = self.potential_extrema(angular_momentum)
        if extrema is None:
            return OrbitType.ESCAPE if outgoing and E2 >= 1.0 else OrbitType.PLUNGE
        r_max, r_min = extrema
        V_max = self.effective_potential(r_max, angular_momentum) if r_max > 2.0 * self.mass else math.inf
        V_min = self.effective_potential(r_min, angular_momentum)
        over_barrier = E2 >= V_max
        if over_barrier:
            return OrbitType.ESCAPE if outgoing and E2 >= 1.0 else OrbitType.PLUNGE
        if r is not None and r < r_max:
            # trapped between the horizon and the barrier
            return OrbitType.PLUNGE
        if abs(E2 - V_min) <= CIRCULAR_TOL * max(1.0, V_min) and (r is None or abs(r - r_min) <= 1e-6 * r_min):
            return OrbitType.CIRCULAR
        return OrbitType.ESCAPE if E2 >= 1.0 else OrbitType.BOUND

    def classify_state(self, state: ParticleState) -> OrbitType:
        E, L = self.constants_of_motion(state)
        return self.classify(E, L, state.position[1], outgoing=state.velocity[1] > 0)

    def integrate_orbit(self, state: ParticleState, dtau: float, steps: int) -> List[ParticleState]:
        """States along the geodesic including the initial one; stops just outside the horizon."""
        states = [state]
        stop = (1.0 + HORIZON_MARGIN) * self.field.horizon_radius
        for s in self.integrator.trajectory(state, dtau, steps):
            states.append(s)
            if s.position[1] <= stop:
                logger.info(f"Orbit reached r={s.position[1]:.6g} near the horizon after τ={s.proper_time:.6g}")
                break
        return states

    def gravitational_waveform(self, states: List[ParticleState], particle_mass: float,
                               distance: float) -> WaveformAnalysis:
        """Quadrupole waveform of a test mass on the given orbit (geometric units)."""
        return quadrupole_waveform(states, particle_mass, distance)

    def orbital_angular_frequency(self, r: float) -> float:
        """dφ/dt of the circular orbit, √(M/r³)"""
        return math.sqrt(self.mass / _positive("r", r) ** 3)

    def precession_per_orbit(self, states: List[ParticleState]) -> float:
        """Periapsis advance (radians) between the first two periapsis passages of an integrated orbit."""
        r = np.array([s.position[1] for s in states])
        phi = np.array([s.position[3] for s in states])
        idx = [i for i in range(1, len(r) - 1) if r[i] < r[i - 1] and r[i] <= r[i + 1]]
        if len(idx) < 2:
            raise ValueError("orbit does not contain two periapsis passages")
        return float(phi[idx[1]] - phi[idx[0]] - 2.0 * math.pi)
