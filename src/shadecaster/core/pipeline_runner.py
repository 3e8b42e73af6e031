"""Pipeline orchestrator: reads pipeline.yaml and executes steps in order."""

from __future__ import annotations

import importlib
import logging
from pathlib import Path

import yaml
from pydantic import BaseModel

from .contracts import PipelineConfig

logger = logging.getLogger(__name__)


def load_pipeline_config(config_path: Path) -> PipelineConfig:
    """Load and validate pipeline.yaml."""
    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return PipelineConfig(**raw)


def load_step_config(config_path: Path, config_class: type[BaseModel]) -> BaseModel:
    """Load a step-specific YAML config into its Pydantic model.

    A missing file yields the model defaults.
    """
    if not config_path.exists():
        logger.warning(f"Step config {config_path} not found, using defaults")
        return config_class()
    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return config_class(**raw)


def resolve_config_file(config_file: str, pipeline_path: Path) -> Path:
    """Resolve a step config path relative to the pipeline file."""
    path = Path(config_file)
    if path.is_absolute() or path.exists():
        return path
    return pipeline_path.parent / path


def import_step_class(module_path: str):
    """Dynamically import a step class from its module path.

    Expects module_path like 'shadecaster.steps.s01_occupancy'
    and looks for a class ending in 'Step' in that module's step.py.
    """
    step_module = importlib.import_module(f"{module_path}.step")
    for attr_name in dir(step_module):
        attr = getattr(step_module, attr_name)
        if (
            isinstance(attr, type)
            and hasattr(attr, "run")
            and attr_name.endswith("Step")
            and attr_name != "BaseStep"
        ):
            return attr
    raise ImportError(f"No Step class found in {module_path}.step")


def run_pipeline(config_path: Path) -> dict[str, BaseModel]:
    """Execute the full pipeline from a config file.

    Each step's input is built from its ``inputs`` entry in pipeline.yaml,
    overlaid with the outputs of the steps it depends on.
    """
    config_path = Path(config_path)
    pipeline_cfg = load_pipeline_config(config_path)
    data_root = pipeline_cfg.data_root
    results: dict[str, BaseModel] = {}

    enabled_steps = [s for s in pipeline_cfg.steps if s.enabled]
    logger.info(f"Pipeline '{pipeline_cfg.project_name}' with {len(enabled_steps)} steps")

    for entry in enabled_steps:
        logger.info(f"--- Step: {entry.name} ---")

        step_cls = import_step_class(entry.module)
        step_config = load_step_config(
            resolve_config_file(entry.config_file, config_path), step_cls.config_type
        )
        step_instance = step_cls(config=step_config, data_root=data_root)

        input_data = dict(entry.inputs)
        for dep in entry.depends_on:
            if dep not in results:
                raise KeyError(f"Step '{entry.name}' depends on '{dep}', which has not run")
            input_data.update(results[dep].model_dump())

        step_input = step_cls.input_type(**input_data)
        output = step_instance.execute(step_input)
        results[entry.name] = output

    logger.info("Pipeline complete.")
    return results
