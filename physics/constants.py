# physics/constants.py
"""
Physical constants.

Geometric/relativistic code (metrics, geodesics, Lorentz transforms, black-hole
orbits) works in natural units c = G = 1.  Astrophysical observables (waves,
lensing, cosmology) take SI inputs or the astronomical units named below.
"""
from typing import Final

# Natural units
c: Final[float] = 1.0   # set to C_SI if you're running the relativistic layer in SI
G: Final[float] = 1.0

# SI
C_SI: Final[float] = 299_792_458.0            # m / s
G_SI: Final[float] = 6.674_30e-11             # m^3 / (kg s^2)
HBAR_SI: Final[float] = 1.054_571_817e-34     # J s
K_B_SI: Final[float] = 1.380_649e-23          # J / K

# Astronomy
M_SUN: Final[float] = 1.988_47e30             # kg
PARSEC: Final[float] = 3.085_677_581_491_367e16   # m
KPC: Final[float] = 1e3 * PARSEC
MPC: Final[float] = 1e6 * PARSEC
YEAR: Final[float] = 365.25 * 86_400.0        # s (Julian)
DAY: Final[float] = 86_400.0
KM: Final[float] = 1e3

# Solar mass in geometric units
M_SUN_LENGTH: Final[float] = G_SI * M_SUN / C_SI**2   # m
M_SUN_TIME: Final[float] = G_SI * M_SUN / C_SI**3     # s
