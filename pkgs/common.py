"""
Shared numerical tolerances and the error taxonomy of the engine.

Every accept/reject decision made anywhere in the engine goes through one of the
constants below, so the same input always gets the same answer regardless of which
component looks at it.
"""
from typing import Final

# Rotation algebra
AXIS_EPS: Final[float] = 1e-10            # below this an axis (or quaternion) has no direction
UNIT_NORM_TOL: Final[float] = 1e-10       # |‖q‖ - 1| accepted as unit norm

# Metrics
SYMMETRY_TOL: Final[float] = 1e-9         # max |g_ab - g_ba|
METRIC_RCOND_TOL: Final[float] = 1e-12    # σ_min/σ_max below this => not invertible

# Lorentz / geodesics
MINKOWSKI_TOL: Final[float] = 1e-9        # interval preservation, light-cone classification
GEODESIC_DRIFT_TOL: Final[float] = 1e-6   # relative g(u,u) drift tolerated before a step counts as spacelike

# Projections
PROJECTION_EPS: Final[float] = 1e-10      # distance to the singular hyperplane

# Finite differences.  Central differences: truncation O(h²).  The Christoffel step is
# used with one Richardson extrapolation (h, 2h) which lifts it to O(h⁴).
METRIC_FD_STEP: Final[float] = 1e-5
CHRISTOFFEL_FD_STEP: Final[float] = 1e-3

# Geodesic integrator order (classical Runge-Kutta)
GEODESIC_RK_ORDER: Final[int] = 4


class EngineError(Exception):
    """Base class for every failure raised by the engine."""


class IndexOutOfBounds(EngineError, IndexError):
    """A tensor index is negative or not smaller than its dimension."""


class ShapeMismatch(EngineError, ValueError):
    """Operands (or a value list) do not have the required shape."""


class RankMismatch(EngineError, ValueError):
    """Contracted indices differ in dimension, or a result would leave rank 0-4."""


class DegenerateAxis(EngineError, ValueError):
    """Rotation axis (or quaternion) too close to zero to define a direction."""


class SingularProjection(EngineError, ArithmeticError):
    """Point lies at or beyond the singularity of a 4D->3D projection."""


class SingularMetric(EngineError, ArithmeticError):
    """Metric is not invertible within METRIC_RCOND_TOL."""


class AsymmetricMetric(EngineError, ValueError):
    """Metric components are not symmetric within SYMMETRY_TOL."""


class NonPhysicalStep(EngineError, ValueError):
    """Geodesic step with dt <= 0, or one that leaves the light cone."""


class SuperluminalVelocity(EngineError, ValueError):
    """Velocity at or above the speed of light."""
