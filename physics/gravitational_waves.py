# physics/gravitational_waves.py
"""
Gravitational waves at leading (Newtonian quadrupole, 0PN) order.

Binary quantities are in SI (kg, m, Hz); `frequency` always means the GW frequency,
twice the orbital frequency. Phase evolution beyond a linear chirp, spin and
higher harmonics are not modelled, so amplitudes and phases are accurate only while
v/c of the orbit is small.

Waveforms extracted from geodesic output (`quadrupole_waveform`) use geometric units
(G = c = 1) like the relativistic layer itself.
"""
from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from pkgs.tensor_core import Matrix, Tensor
from .constants import C_SI, G_SI, M_SUN, MPC
from .geodesic import ParticleState
from .metric import CoordinateSystem

logger = logging.getLogger(__name__)

APPROXIMATION_ORDER = "0PN"


class Polarization(Enum):
    PLUS = "plus"
    CROSS = "cross"

    def tensor(self, psi: float = 0.0) -> Matrix:
        """Transverse-traceless basis tensor for propagation along z, rotated by ψ."""
        p = np.array([math.cos(psi), math.sin(psi), 0.0])
        q = np.array([-math.sin(psi), math.cos(psi), 0.0])
        if self is Polarization.PLUS:
            e = np.outer(p, p) - np.outer(q, q)
        else:
            e = np.outer(p, q) + np.outer(q, p)
        return Tensor(e)


def _positive(name: str, value: float) -> float:
    if not value > 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return float(value)


@dataclass(frozen=True)
class CompactBinary:
    mass1: float          # kg
    mass2: float          # kg
    distance: float       # m
    frequency: float      # GW frequency, Hz
    inclination: float = 0.0

    def __post_init__(self):
        _positive("mass1", self.mass1)
        _positive("mass2", self.mass2)
        _positive("distance", self.distance)
        _positive("frequency", self.frequency)

    @classmethod
    def from_solar_masses(cls, m1: float, m2: float, distance_mpc: float, frequency: float,
                          inclination: float = 0.0) -> "CompactBinary":
        return cls(m1 * M_SUN, m2 * M_SUN, distance_mpc * MPC, frequency, inclination)

    @property
    def total_mass(self) -> float:
        return self.mass1 + self.mass2

    @property
    def reduced_mass(self) -> float:
        return self.mass1 * self.mass2 / self.total_mass

    @property
    def symmetric_mass_ratio(self) -> float:
        return self.reduced_mass / self.total_mass

    @property
    def chirp_mass(self) -> float:
        return (self.mass1 * self.mass2) ** 0.6 / self.total_mass ** 0.2

    @property
    def orbital_frequency(self) -> float:
        return 0.5 * self.frequency

    def separation(self) -> float:
        """Kepler separation at the current orbital frequency."""
        omega = 2.0 * math.pi * self.orbital_frequency
        return (G_SI * self.total_mass / omega ** 2) ** (1.0 / 3.0)

    def orbital_velocity(self) -> float:
        """v/c of the relative orbit, the expansion parameter of the PN series."""
        return (G_SI * self.total_mass * 2.0 * math.pi * self.orbital_frequency) ** (1.0 / 3.0) / C_SI

    def time_to_merger(self) -> float:
        """Peters: τ = 5/256 (G M_c / c³)^(-5/3) (π f)^(-8/3)"""
        tc = G_SI * self.chirp_mass / C_SI ** 3
        return 5.0 / 256.0 * tc ** (-5.0 / 3.0) * (math.pi * self.frequency) ** (-8.0 / 3.0)

    def frequency_derivative(self) -> float:
        """ḟ = 96/5 π^(8/3) (G M_c / c³)^(5/3) f^(11/3)"""
        tc = G_SI * self.chirp_mass / C_SI ** 3
        return 96.0 / 5.0 * math.pi ** (8.0 / 3.0) * tc ** (5.0 / 3.0) * self.frequency ** (11.0 / 3.0)

    def frequency_at(self, t: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """f(t) = f₀ (1 − t/τ)^(-3/8) for t < τ."""
        tau = self.time_to_merger()
        t = np.asarray(t, dtype=np.float64)
        if np.any(t >= tau):
            raise ValueError(f"t must be before coalescence at τ={tau:.6g} s")
        f = self.frequency * (1.0 - t / tau) ** (-3.0 / 8.0)
        return float(f) if f.ndim == 0 else f

    def isco_frequency(self) -> float:
        """GW frequency at the Schwarzschild ISCO of the total mass: c³ / (6^{3/2} π G M)."""
        return C_SI ** 3 / (6.0 ** 1.5 * math.pi * G_SI * self.total_mass)

    def strain_amplitude(self) -> float:
        """h₀ = 4 (G M_c)^(5/3) (π f)^(2/3) / (c⁴ D)"""
        return (4.0 * (G_SI * self.chirp_mass) ** (5.0 / 3.0) * (math.pi * self.frequency) ** (2.0 / 3.0)
                / (C_SI ** 4 * self.distance))

    def luminosity(self) -> float:
        """P = 32/5 G⁴ (m₁m₂)² M / (c⁵ a⁵), watts"""
        a = self.separation()
        return 32.0 / 5.0 * G_SI ** 4 * (self.mass1 * self.mass2) ** 2 * self.total_mass / (C_SI ** 5 * a ** 5)

    def wave(self, phase: float = 0.0) -> "GravitationalWave":
        return GravitationalWave(self.strain_amplitude(), self.frequency, phase, self.inclination,
                                 self.frequency_derivative())


@dataclass(frozen=True)
class GravitationalWave:
    """
    Quasi-monochromatic wave travelling along z:
        Φ(t)  = 2π (f t + ½ ḟ t²) + φ₀
        h₊(t) = A (1 + cos²ι)/2 cos Φ(t)
        h×(t) = A cos ι sin Φ(t)
    ḟ = 0 gives a monochromatic wave; ḟ > 0 is the linearised inspiral chirp.
    """
    amplitude: float
    frequency: float
    phase: float = 0.0
    inclination: float = 0.0
    frequency_derivative: float = 0.0

    def __post_init__(self):
        if self.amplitude < 0:
            raise ValueError(f"amplitude must be non-negative, got {self.amplitude}")
        _positive("frequency", self.frequency)

    def _phase(self, t):
        t = np.asarray(t, dtype=np.float64)
        return 2.0 * math.pi * (self.frequency * t + 0.5 * self.frequency_derivative * t * t) + self.phase

    def polarizations(self, t) -> Tuple[np.ndarray, np.ndarray]:
        ci = math.cos(self.inclination)
        phi = self._phase(t)
        return (self.amplitude * 0.5 * (1.0 + ci * ci) * np.cos(phi),
                self.amplitude * ci * np.sin(phi))

    def strain(self, t, polarization: Polarization = Polarization.PLUS) -> np.ndarray:
        hp, hc = self.polarizations(t)
        return hp if polarization is Polarization.PLUS else hc

    def strain_tensor(self, t: float) -> Matrix:
        """h_ij(t) in the TT gauge."""
        hp, hc = self.polarizations(t)
        return Polarization.PLUS.tensor().scale(float(hp)) + Polarization.CROSS.tensor().scale(float(hc))

    def sample(self, times: Sequence[float]) -> "WaveformAnalysis":
        hp, hc = self.polarizations(times)
        return WaveformAnalysis(times, hp, hc)

    @classmethod
    def from_orbit(cls, states: Sequence[ParticleState], mass: float, distance: float,
                   coordinates: CoordinateSystem = CoordinateSystem.SPHERICAL) -> "GravitationalWave":
        """Monochromatic fit (peak amplitude, dominant frequency) of `quadrupole_waveform`."""
        analysis = quadrupole_waveform(states, mass, distance, coordinates)
        return cls(analysis.peak_strain(trim=2), analysis.dominant_frequency())


def _cartesian(states: Sequence[ParticleState], coordinates: CoordinateSystem) -> Tuple[np.ndarray, np.ndarray]:
    x = np.array([s.position for s in states])
    t = x[:, 0]
    if coordinates is CoordinateSystem.SPHERICAL:
        r, th, ph = x[:, 1], x[:, 2], x[:, 3]
        xyz = np.stack((r * np.sin(th) * np.cos(ph), r * np.sin(th) * np.sin(ph), r * np.cos(th)), axis=1)
    else:
        xyz = x[:, 1:]
    return t, xyz


def quadrupole_waveform(states: Sequence[ParticleState], mass: float, distance: float,
                        coordinates: CoordinateSystem = CoordinateSystem.SPHERICAL) -> "WaveformAnalysis":
    """
    h_ij = (2 / D) d²I_ij/dt² with I_ij = m x_i x_j for a test mass m on the given
    geodesic (geometric units), seen by an observer on the +z axis:
        h₊ = (h_xx − h_yy) / 2,  h× = h_xy
    Derivatives are taken against coordinate time with second-order differences.
    """
    _positive("mass", mass)
    _positive("distance", distance)
    if len(states) < 5:
        raise ValueError(f"need at least 5 states to differentiate a waveform, got {len(states)}")
    t, xyz = _cartesian(states, coordinates)
    if np.any(np.diff(t) <= 0):
        raise ValueError("coordinate time must increase along the trajectory")
    I = mass * np.einsum("ni,nj->nij", xyz, xyz)
    I_ddot = np.gradient(np.gradient(I, t, axis=0), t, axis=0)
    h = 2.0 / distance * I_ddot
    return WaveformAnalysis(t, 0.5 * (h[:, 0, 0] - h[:, 1, 1]), h[:, 0, 1])


@dataclass(frozen=True)
class Detector:
    """Interferometer with a white-noise approximation of its sensitive band."""
    name: str
    arm_length: float          # m
    low_frequency: float       # Hz
    high_frequency: float      # Hz
    noise_asd: float           # strain / sqrt(Hz)
    arm_angle: float = math.pi / 2.0

    @classmethod
    def ligo(cls) -> "Detector":
        return cls("LIGO", 4.0e3, 10.0, 5.0e3, 4.0e-24)

    @classmethod
    def virgo(cls) -> "Detector":
        return cls("Virgo", 3.0e3, 10.0, 5.0e3, 6.0e-24)

    @classmethod
    def lisa(cls) -> "Detector":
        return cls("LISA", 2.5e9, 1.0e-4, 1.0e-1, 1.0e-20, math.pi / 3.0)

    def in_band(self, frequency: float) -> bool:
        return self.low_frequency <= frequency <= self.high_frequency

    def antenna_pattern(self, theta: float, phi: float, psi: float = 0.0) -> Tuple[float, float]:
        """(F₊, F×) for a source at polar angle θ, azimuth φ and polarisation angle ψ."""
        a = 0.5 * (1.0 + math.cos(theta) ** 2) * math.cos(2.0 * phi)
        b = math.cos(theta) * math.sin(2.0 * phi)
        s = math.sin(self.arm_angle)
        return (s * (a * math.cos(2.0 * psi) - b * math.sin(2.0 * psi)),
                s * (a * math.sin(2.0 * psi) + b * math.cos(2.0 * psi)))

    def response(self, wave: GravitationalWave, t, theta: float, phi: float, psi: float = 0.0) -> np.ndarray:
        fp, fc = self.antenna_pattern(theta, phi, psi)
        hp, hc = wave.polarizations(t)
        return fp * hp + fc * hc


class WaveformAnalysis:
    """Uniformly sampled strain series h₊(t), h×(t)."""

    def __init__(self, times: Sequence[float], h_plus: Sequence[float], h_cross: Optional[Sequence[float]] = None):
        t = np.asarray(times, dtype=np.float64)
        hp = np.asarray(h_plus, dtype=np.float64)
        hc = np.zeros_like(hp) if h_cross is None else np.asarray(h_cross, dtype=np.float64)
        if t.ndim != 1 or t.shape != hp.shape or hp.shape != hc.shape:
            raise ValueError(f"times and strains must be 1-D of equal length, got {t.shape}, {hp.shape}, {hc.shape}")
        if t.size < 2 or np.any(np.diff(t) <= 0):
            raise ValueError("need at least two strictly increasing sample times")
        dt = np.diff(t)
        if not np.allclose(dt, dt[0], rtol=1e-6, atol=0.0):
            # resample onto a uniform grid
            grid = np.linspace(t[0], t[-1], t.size)
            hp, hc, t = np.interp(grid, t, hp), np.interp(grid, t, hc), grid
            logger.debug(f"Resampled non-uniform waveform onto {t.size} uniform samples")
        self.times, self.h_plus, self.h_cross = t, hp, hc

    @property
    def dt(self) -> float:
        return float(self.times[1] - self.times[0])

    @property
    def sample_rate(self) -> float:
        return 1.0 / self.dt

    @property
    def duration(self) -> float:
        return float(self.times[-1] - self.times[0])

    def amplitude(self) -> np.ndarray:
        return np.hypot(self.h_plus, self.h_cross)

    def peak_strain(self, trim: int = 0) -> float:
        """Max √(h₊² + h×²), optionally ignoring `trim` samples at both ends."""
        amp = self.amplitude()
        if trim:
            amp = amp[trim:-trim]
        return float(np.max(amp))

    def rms(self) -> float:
        return float(np.sqrt(np.mean(self.h_plus ** 2)))

    def dominant_frequency(self, oversample: int = 8) -> float:
        """Peak of |FFT(h₊)| with zero padding and parabolic peak interpolation."""
        h = self.h_plus - self.h_plus.mean()
        n = oversample * (1 << int(math.ceil(math.log2(h.size))))
        spectrum = np.abs(np.fft.rfft(h * np.hanning(h.size), n))
        freqs = np.fft.rfftfreq(n, self.dt)
        k = int(np.argmax(spectrum[1:])) + 1
        if 0 < k < spectrum.size - 1:
            a, b, c = spectrum[k - 1], spectrum[k], spectrum[k + 1]
            denom = a - 2.0 * b + c
            shift = 0.5 * (a - c) / denom if denom != 0 else 0.0
            return float(freqs[k] + shift * (freqs[1] - freqs[0]))
        return float(freqs[k])

    def snr(self, noise: Union[float, Detector]) -> float:
        """
        Optimal matched-filter SNR against one-sided white noise S_n = ASD²:
            ρ² = 4 ∫ |h̃(f)|² / S_n df
        A Detector restricts the integral to its band.
        """
        asd = noise.noise_asd if isinstance(noise, Detector) else float(noise)
        _positive("noise ASD", asd)
        n = self.h_plus.size
        H = np.fft.rfft(self.h_plus)
        freqs = np.fft.rfftfreq(n, self.dt)
        weights = np.ones_like(freqs)
        weights[0] = 0.5
        if n % 2 == 0:
            weights[-1] = 0.5
        if isinstance(noise, Detector):
            weights = weights * ((freqs >= noise.low_frequency) & (freqs <= noise.high_frequency))
        power = 4.0 * self.dt / n * float(np.sum(weights * np.abs(H) ** 2))
        return math.sqrt(power / asd ** 2)
