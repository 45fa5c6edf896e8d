"""
Relativistic physics built on the tensor core.

This package contains:
- Metric tensors and metric fields (Minkowski, FLRW, Schwarzschild)
- Christoffel symbols, Riemann and Einstein tensors
- Geodesic integration (RK4) and Lorentz transforms
- Gravitational waves, lensing, cosmology and black-hole orbits
"""

from .metric import (
    Signature, CoordinateSystem, MetricTensor,
    MetricField, MinkowskiMetric, FLRWMetric, SchwarzschildMetric,
)
from .curvature import ChristoffelSymbols, RiemannTensor, EinsteinTensor, christoffel_derivatives
from .geodesic import ParticleState, GeodesicIntegrator
from .lorentz import LorentzTransform, minkowski_interval, gamma_factor, velocity_addition
from .gravitational_waves import (
    APPROXIMATION_ORDER, Polarization, CompactBinary, GravitationalWave,
    Detector, WaveformAnalysis, quadrupole_waveform,
)
from .lensing import LensType, GravitationalLens, WeakLensing, MicrolensingEvent, LensingStatistics
from .cosmology import CosmologicalParameters, FLRWUniverse, CosmologicalObservables, CosmicStructure
from .orbits import OrbitType, BlackHoleProperties, GravitationalEffects, OrbitCalculator

__all__ = [
    # Metrics
    'Signature', 'CoordinateSystem', 'MetricTensor',
    'MetricField', 'MinkowskiMetric', 'FLRWMetric', 'SchwarzschildMetric',
    # Curvature
    'ChristoffelSymbols', 'RiemannTensor', 'EinsteinTensor', 'christoffel_derivatives',
    # Motion
    'ParticleState', 'GeodesicIntegrator',
    'LorentzTransform', 'minkowski_interval', 'gamma_factor', 'velocity_addition',
    # Gravitational waves
    'APPROXIMATION_ORDER', 'Polarization', 'CompactBinary', 'GravitationalWave',
    'Detector', 'WaveformAnalysis', 'quadrupole_waveform',
    # Lensing
    'LensType', 'GravitationalLens', 'WeakLensing', 'MicrolensingEvent', 'LensingStatistics',
    # Cosmology
    'CosmologicalParameters', 'FLRWUniverse', 'CosmologicalObservables', 'CosmicStructure',
    # Orbits
    'OrbitType', 'BlackHoleProperties', 'GravitationalEffects', 'OrbitCalculator',
]
