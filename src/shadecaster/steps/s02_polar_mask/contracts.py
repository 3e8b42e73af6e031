"""I/O contracts for Step 02: Binary field -> polar mask."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class PolarMaskInput(BaseModel):
    field_path: Path = Field(..., description="Path to field.npz from s01")
    threshold: float = Field(128, description="Threshold used to build the field")
    mask_resolution: int = Field(240, description="Working resolution chosen by s01")


class PolarMaskOutput(BaseModel):
    mask_path: Path = Field(..., description="Path to polar_mask.npy, shape (rows, columns)")
    rows: int = Field(..., description="Radial bands; row 0 is the outer image radius")
    columns: int = Field(..., description="Angular slots")
    solid_cells: int = Field(..., description="Number of cells with material present")
    preview_path: Optional[Path] = Field(None, description="Mask preview PNG, if rendered")
