"""I/O contracts for Step 03: Polar mask -> triangle mesh."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class MeshBuildInput(BaseModel):
    mask_path: Path = Field(..., description="Path to polar_mask.npy from s02")


class MeshBuildOutput(BaseModel):
    mesh_path: Path = Field(..., description="Path to triangles.npy, shape (N, 3, 3)")
    num_triangles: int = Field(..., description="Triangle count")
    open_cells: int = Field(0, description="Wall cells left open after pillars and closure")
    open_edges: Optional[int] = Field(None, description="Edges used by one triangle (None = not checked)")
    non_manifold_edges: Optional[int] = Field(
        None, description="Edges used by more than two triangles (None = not checked)"
    )
    preview_path: Optional[Path] = Field(None, description="Wall layout PNG, if rendered")
