"""Pydantic schemas for the host boundary and service APIs."""

from math import prod
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from .config import InitialStateConfig, MetricConfig


class TensorPayload(BaseModel):
    """Flattened tensor: shape descriptor plus row-major values."""
    shape: List[int] = Field(default_factory=list, max_length=4)
    values: List[float]

    @model_validator(mode="after")
    def _check_size(self):
        if any(d < 0 for d in self.shape):
            raise ValueError(f"dimensions must be non-negative, got {self.shape}")
        if prod(self.shape) != len(self.values):
            raise ValueError(f"shape {self.shape} needs {prod(self.shape)} values, got {len(self.values)}")
        return self


class KinematicsRequest(BaseModel):
    """Request schema for a host-driven kinematic step."""
    position: List[float] = Field(min_length=3, max_length=3)
    velocity: List[float] = Field(min_length=3, max_length=3)
    mass: float
    dt: float = 0.016


class KinematicsResult(BaseModel):
    position: List[float]
    velocity: List[float]
    force: List[float]


class InitRequest(BaseModel):
    """Request schema for engine initialization."""
    metric: MetricConfig = Field(default_factory=MetricConfig)
    initial_state: InitialStateConfig = Field(default_factory=InitialStateConfig)
    enable_recorder: bool = True


class StepRequest(BaseModel):
    """Request schema for geodesic steps."""
    dt: float
    steps: int = Field(1, ge=1)


class StepResult(BaseModel):
    """Result schema from geodesic steps."""
    success: bool
    step: int = 0
    proper_time: float = 0.0
    position: List[float] = Field(default_factory=list)
    velocity: List[float] = Field(default_factory=list)
    norm: Optional[float] = None
    message: Optional[str] = None
    metrics: Dict[str, Any] = Field(default_factory=dict)
