"""Common Pydantic models shared across pipeline steps."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class ProcessingParams(BaseModel):
    """Image sampling surface: how finely and where to cut the silhouette."""

    angular_resolution: int = Field(64, description="Angular resolution requested by the user (>= 3)")
    threshold: float = Field(128, description="Luminance threshold 0-255; darker pixels are solid")


class GeometryParams(BaseModel):
    """Lampshade dimensions in millimetres.

    Not validated on construction: ``validate_geometry`` runs at the mesh
    builder boundary so that every caller hits the same checks.
    """

    dome_diameter: float = Field(60.0, description="Outer diameter of wall and dome (mm)")
    dome_height: float = Field(20.0, description="Height of the domed roof above the wall (mm)")
    wall_thickness: float = Field(1.6, description="Shell thickness of wall, base and dome (mm)")
    wall_height: float = Field(25.0, description="Height of the patterned wall (mm)")
    led_mount_diameter: float = Field(38.0, description="Tea light / LED mount diameter (mm)")
    led_mount_height: float = Field(16.0, description="Depth of the roof mounting pocket (mm)")
    pillar_count: int = Field(8, description="Number of forced-solid support pillars (>= 3)")


class PipelineConfig(BaseModel):
    """Top-level pipeline configuration loaded from pipeline.yaml."""

    project_name: str = "shadecaster_project"
    data_root: Path = Path("./data")
    steps: list[StepEntry] = Field(default_factory=list)


class StepEntry(BaseModel):
    """One entry in the pipeline step list."""

    name: str
    module: str
    config_file: str
    depends_on: list[str] = Field(default_factory=list)
    enabled: bool = True
    inputs: dict[str, Any] = Field(default_factory=dict)


# Fix forward reference
PipelineConfig.model_rebuild()
