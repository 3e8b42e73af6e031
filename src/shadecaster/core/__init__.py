"""Shadecaster core: pipeline runner, base step, shared contracts."""

from .step_base import BaseStep
from .contracts import GeometryParams, PipelineConfig, ProcessingParams, StepEntry
from .pipeline_runner import run_pipeline, load_pipeline_config
from .logging import setup_logging

__all__ = [
    "BaseStep",
    "GeometryParams",
    "PipelineConfig",
    "ProcessingParams",
    "StepEntry",
    "run_pipeline",
    "load_pipeline_config",
    "setup_logging",
]
