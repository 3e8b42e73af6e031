"""Configuration for Step 01: Occupancy sampling."""

from pydantic import BaseModel, Field


class OccupancyConfig(BaseModel):
    threshold: float = Field(
        128, description="Luminance threshold (0-255). Pixels darker than this with alpha >= 128 are solid"
    )
    angular_resolution: int = Field(
        64, description="User-facing angular resolution; drives the working mask resolution"
    )
    oversample: int = Field(12, ge=1, description="Mask cells per unit of angular resolution")
    min_mask_resolution: int = Field(240, ge=3, description="Lower bound on the square working grid")
    max_mask_resolution: int = Field(720, ge=3, description="Upper bound on the square working grid")
