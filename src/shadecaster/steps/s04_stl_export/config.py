"""Configuration for Step 04: STL export."""

from typing import Literal

from pydantic import BaseModel, Field


class StlExportConfig(BaseModel):
    format: Literal["binary", "ascii"] = Field("binary", description="STL flavour to write")
    filename: str = Field("shadow-lamp.stl", description="Output file name under processed/")
    solid_name: str = Field("shadecaster", description="Solid name for ASCII output")
    header: str = Field(
        "Binary STL generated by Shadecaster",
        max_length=80,
        description="80-byte binary header text (padded with NUL)",
    )
