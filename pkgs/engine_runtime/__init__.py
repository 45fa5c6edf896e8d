"""
Engine runtime components: configuration, boundary schemas and recording.

Kept apart from the physics packages so the math core never depends on files,
YAML or serialization formats.
"""

from .config import (
    EngineConfig, LoggingConfig, MetricConfig, IntegratorConfig,
    InitialStateConfig, OutputConfig, load_config, save_config,
)
from .schemas import (
    TensorPayload, KinematicsRequest, KinematicsResult,
    InitRequest, StepRequest, StepResult,
)
from .recorder import StateRecorder

__all__ = [
    'EngineConfig', 'LoggingConfig', 'MetricConfig', 'IntegratorConfig',
    'InitialStateConfig', 'OutputConfig', 'load_config', 'save_config',
    'TensorPayload', 'KinematicsRequest', 'KinematicsResult',
    'InitRequest', 'StepRequest', 'StepResult',
    'StateRecorder',
]
