"""
Engine service wrapper providing a clean API around the geodesic integrator.

The service owns one ParticleState and advances it on request. It is the only
layer that turns engine exceptions into {'success': False, 'message': ...} results;
everything below it raises.
"""
import logging
import time
from typing import Any, Dict, Iterable, Optional

from pkgs.engine_runtime import EngineConfig, StateRecorder
from pkgs.engine_runtime.config import InitialStateConfig, MetricConfig
from pkgs.engine_runtime.schemas import InitRequest, StepRequest, StepResult
from physics import (
    FLRWMetric, GeodesicIntegrator, MetricField, MinkowskiMetric, OrbitCalculator,
    ParticleState, SchwarzschildMetric, Signature,
)

logger = logging.getLogger('EngineService')

_SIGNATURES = {
    'mostly_plus': Signature.MOSTLY_PLUS,
    'mostly_minus': Signature.MOSTLY_MINUS,
}


def build_metric_field(cfg: MetricConfig) -> MetricField:
    signature = _SIGNATURES[cfg.signature]
    if cfg.kind == 'minkowski':
        return MinkowskiMetric(signature)
    if cfg.kind == 'schwarzschild':
        return SchwarzschildMetric(cfg.mass, signature)
    n = cfg.scale_factor_exponent
    if n == 0:
        return FLRWMetric(1.0, cfg.curvature_k, signature)
    return FLRWMetric(lambda t: t ** n, cfg.curvature_k, signature)


def build_initial_state(field: MetricField, metric_cfg: MetricConfig,
                        state_cfg: InitialStateConfig) -> ParticleState:
    if metric_cfg.kind == 'schwarzschild' and state_cfg.circular_orbit:
        t, r, _, phi = state_cfg.position
        state = OrbitCalculator(metric_cfg.mass).circular_orbit(r, phi)
        return ParticleState((t,) + state.position[1:], state.velocity)
    return ParticleState.timelike(field, state_cfg.position, state_cfg.coordinate_velocity)


class EngineService:
    """High-level service wrapper for geodesic simulation."""

    def __init__(self, cfg: Optional[EngineConfig] = None):
        self.cfg = cfg or EngineConfig()
        self.field: Optional[MetricField] = None
        self.integrator: Optional[GeodesicIntegrator] = None
        self.recorder: Optional[StateRecorder] = None
        self._initial_state: Optional[ParticleState] = None
        self._initialized = False
        self._step_count = 0

        logger.info("EngineService created with configuration")

    @property
    def state(self) -> Optional[ParticleState]:
        return self.integrator.state if self.integrator else None

    def init(self, req: Optional[InitRequest] = None) -> Dict[str, Any]:
        """Build the metric field and the initial particle state."""
        if req is None:
            req = InitRequest(metric=self.cfg.metric, initial_state=self.cfg.initial_state,
                              enable_recorder=self.cfg.output.enable_recorder)
        try:
            field = build_metric_field(req.metric)
            state = build_initial_state(field, req.metric, req.initial_state)

            self.field = field
            self.integrator = GeodesicIntegrator(field, state)
            self._initial_state = state
            self.recorder = StateRecorder(enabled=True) if req.enable_recorder else None
            if self.recorder:
                self.recorder.set_metadata(metric=req.metric.model_dump(),
                                           initial_state=req.initial_state.model_dump())
                self.recorder.record_state(0, state, norm=self._norm(state))

            self._initialized = True
            self._step_count = 0

            logger.info(f"Engine initialized: {req.metric.kind} metric, x={list(state.position)}")

            return {
                'success': True,
                'state': self._state_dict(state),
                'message': 'Engine initialized successfully'
            }

        except Exception as e:
            logger.error(f"Engine initialization failed: {e}")
            return {
                'success': False,
                'message': f'Initialization failed: {str(e)}'
            }

    def _norm(self, state: ParticleState) -> float:
        return self.field.at(state.position).interval(state.velocity)

    @staticmethod
    def _state_dict(state: ParticleState) -> Dict[str, Any]:
        return {
            'position': list(state.position),
            'velocity': list(state.velocity),
            'proper_time': state.proper_time,
        }

    def step(self, req: StepRequest) -> StepResult:
        """Advance the particle by `req.steps` geodesic steps of size `req.dt`."""
        if not self._initialized:
            return StepResult(success=False, message="Engine not initialized")

        try:
            for _ in range(req.steps):
                state = self.integrator.advance(req.dt)
                self._step_count += 1
                norm = self._norm(state)
                if self.recorder:
                    self.recorder.record_state(self._step_count, state, norm=norm)

            logger.debug(f"Completed step {self._step_count}, τ={state.proper_time:.6g}")

            return StepResult(
                success=True,
                step=self._step_count,
                proper_time=state.proper_time,
                position=list(state.position),
                velocity=list(state.velocity),
                norm=norm,
                message=f"Step {self._step_count} completed"
            )

        except Exception as e:
            logger.error(f"Step execution failed: {e}")
            current = self.state
            return StepResult(
                success=False,
                step=self._step_count,
                proper_time=current.proper_time if current else 0.0,
                position=list(current.position) if current else [],
                velocity=list(current.velocity) if current else [],
                message=f"Step failed: {str(e)}"
            )

    def snapshot(self) -> Dict[str, Any]:
        """Return summary snapshot of current system state."""
        if not self._initialized:
            return {
                'initialized': False,
                'message': 'Engine not initialized'
            }

        state = self.state
        snapshot = {
            'initialized': True,
            'step_count': self._step_count,
            'timestamp': time.time(),
            'metric': type(self.field).__name__,
            'norm': self._norm(state),
            **self._state_dict(state),
        }
        if self.recorder:
            snapshot['recorder_summary'] = self.recorder.get_summary()
        return snapshot

    def reset(self) -> Dict[str, Any]:
        """Reset the particle to its initial state."""
        if not self._initialized:
            return {
                'success': False,
                'message': 'Engine not initialized'
            }

        self.integrator.state = self._initial_state
        self._step_count = 0
        if self.recorder:
            self.recorder.clear()
            self.recorder.record_state(0, self._initial_state, norm=self._norm(self._initial_state))

        logger.info("Engine reset to initial state")
        return {
            'success': True,
            'message': 'Engine reset successfully'
        }

    def save_recordings(self, base_path: Optional[str] = None,
                        formats: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """Save recorder data to `<base_path>.<fmt>`."""
        if not self.recorder:
            return {
                'success': False,
                'message': 'No recorder available'
            }

        base_path = base_path or self.cfg.output.recordings_path
        formats = formats if formats is not None else self.cfg.output.formats
        try:
            written = self.recorder.dump(base_path, formats)
            return {
                'success': True,
                'message': f'Recordings saved to {base_path}',
                'files': written,
                'summary': self.recorder.get_summary()
            }

        except Exception as e:
            logger.error(f"Recording save failed: {e}")
            return {
                'success': False,
                'message': f'Save failed: {str(e)}'
            }

    def shutdown(self) -> Dict[str, Any]:
        """Release the integrator and recorder."""
        self._initialized = False
        self.field = None
        self.integrator = None
        self.recorder = None
        self._initial_state = None

        logger.info("Engine service shutdown completed")
        return {
            'success': True,
            'message': 'Engine shutdown completed'
        }
