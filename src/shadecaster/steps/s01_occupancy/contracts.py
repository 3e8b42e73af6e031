"""I/O contracts for Step 01: Image -> binary occupancy field."""

from pathlib import Path

from pydantic import BaseModel, Field


class OccupancyInput(BaseModel):
    image_path: Path = Field(..., description="Silhouette image (PNG/JPEG/...); alpha is honoured")


class OccupancyOutput(BaseModel):
    field_path: Path = Field(..., description="Path to field.npz (gray, alpha, solid planes)")
    mask_resolution: int = Field(..., description="Side length of the square working grid")
    threshold: float = Field(..., description="Clamped threshold the field was built with")
    solid_fraction: float = Field(..., description="Fraction of pixels marked solid")
