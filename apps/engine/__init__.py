"""
Engine application package.

Contains the high-level service wrapper and CLI entrypoint for running
geodesic simulations from a YAML configuration.
"""

from .engine_service import EngineService, build_metric_field, build_initial_state

__all__ = ['EngineService', 'build_metric_field', 'build_initial_state']
