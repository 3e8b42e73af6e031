"""I/O contracts for Step 04: Triangle mesh -> STL file."""

from pathlib import Path

from pydantic import BaseModel, Field


class StlExportInput(BaseModel):
    mesh_path: Path = Field(..., description="Path to triangles.npy from s03")


class StlExportOutput(BaseModel):
    stl_path: Path = Field(..., description="Path to the written .stl file")
    format: str = Field(..., description="'binary' or 'ascii'")
    num_triangles: int = Field(..., description="Triangles written")
    size_bytes: int = Field(..., description="File size in bytes")
    media_type: str = Field("application/sla", description="MIME type for download collaborators")
