"""
Engine configuration.

Configuration is a YAML file validated into an EngineConfig. A missing file falls
back to the defaults below; a file that exists but does not validate is an error.
"""
import logging
import math
from pathlib import Path
from typing import List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "configs/default.yaml"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: Literal["structured", "simple"] = "structured"
    file: Optional[str] = None


class MetricConfig(BaseModel):
    """Background spacetime. Schwarzschild uses (t, r, θ, φ); the others (t, x, y, z)."""
    kind: Literal["minkowski", "schwarzschild", "flrw"] = "schwarzschild"
    signature: Literal["mostly_plus", "mostly_minus"] = "mostly_plus"
    mass: float = Field(1.0, gt=0)
    curvature_k: float = 0.0
    # FLRW a(t) = t^n; n = 0 is a static universe
    scale_factor_exponent: float = Field(2.0 / 3.0, ge=0)


class IntegratorConfig(BaseModel):
    dt: float = 0.5
    steps: int = Field(2000, ge=0)
    log_interval: int = Field(100, ge=1)


class InitialStateConfig(BaseModel):
    position: List[float] = Field(default_factory=lambda: [0.0, 10.0, math.pi / 2, 0.0],
                                  min_length=4, max_length=4)
    coordinate_velocity: List[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0],
                                             min_length=3, max_length=3)
    # Schwarzschild only: start on the circular orbit through `position`
    circular_orbit: bool = True


class OutputConfig(BaseModel):
    enable_recorder: bool = True
    recordings_path: str = "./recordings/geodesic"
    formats: List[Literal["csv", "jsonl", "parquet"]] = Field(default_factory=lambda: ["csv", "jsonl"])


class EngineConfig(BaseModel):
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    metric: MetricConfig = Field(default_factory=MetricConfig)
    integrator: IntegratorConfig = Field(default_factory=IntegratorConfig)
    initial_state: InitialStateConfig = Field(default_factory=InitialStateConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


def load_config(path: Union[str, Path] = DEFAULT_CONFIG_PATH) -> EngineConfig:
    """Load and validate a YAML configuration file."""
    path = Path(path)
    if not path.exists():
        logger.warning(f"Config file {path} not found, using defaults")
        return EngineConfig()

    with open(path, 'r') as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")

    config = EngineConfig.model_validate(data)
    logger.info(f"Loaded configuration from {path}")
    return config


def save_config(config: EngineConfig, path: Union[str, Path]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        yaml.safe_dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)
