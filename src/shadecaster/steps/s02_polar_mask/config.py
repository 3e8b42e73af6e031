"""Configuration for Step 02: Polar resampling."""

from typing import Optional

from pydantic import BaseModel, Field


class PolarMaskConfig(BaseModel):
    columns: Optional[int] = Field(
        None, description="Angular slots (None = use the working mask resolution)"
    )
    rows: Optional[int] = Field(
        None, description="Radial bands (None = use the working mask resolution)"
    )
    tap_spread: float = Field(
        0.35, ge=0, description="Diagonal offset (px) of the four supersampling taps"
    )
    invert: bool = Field(
        False, description="Flip sampled cells so dark silhouette areas become windows"
    )
    save_preview: bool = Field(False, description="Render a PNG preview of the mask (matplotlib)")
