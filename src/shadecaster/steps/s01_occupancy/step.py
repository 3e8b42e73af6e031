"""Step 01: Decode a silhouette image into a binary occupancy field."""

from __future__ import annotations

import logging
from typing import ClassVar

from shadecaster.core.step_base import BaseStep
from shadecaster.utils.image import load_rgba, mask_resolution, resize_square
from shadecaster.utils.io import save_npz
from .config import OccupancyConfig
from .contracts import OccupancyInput, OccupancyOutput

logger = logging.getLogger(__name__)


class OccupancyStep(BaseStep[OccupancyInput, OccupancyOutput, OccupancyConfig]):
    """Load the image, stretch it onto the square working grid and threshold it."""

    name: ClassVar[str] = "occupancy"
    input_type: ClassVar = OccupancyInput
    output_type: ClassVar = OccupancyOutput
    config_type: ClassVar = OccupancyConfig

    def validate_inputs(self, inputs: OccupancyInput) -> bool:
        if not inputs.image_path.exists():
            logger.error(f"Image not found: {inputs.image_path}")
            return False
        return True

    def run(self, inputs: OccupancyInput) -> OccupancyOutput:
        from ._binary_field import sample_occupancy

        resolution = mask_resolution(
            self.config.angular_resolution,
            oversample=self.config.oversample,
            min_resolution=self.config.min_mask_resolution,
            max_resolution=self.config.max_mask_resolution,
        )

        rgba = load_rgba(inputs.image_path)
        rgba = resize_square(rgba, resolution)
        field = sample_occupancy(rgba, self.config.threshold)

        logger.info(
            f"Occupancy field {resolution}x{resolution}: "
            f"{field.solid_fraction:.1%} solid (threshold {field.threshold:.0f})"
        )

        field_path = save_npz(
            self.interim_dir() / "field.npz",
            solid=field.solid,
            gray=field.gray,
            alpha=field.alpha,
        )
        return OccupancyOutput(
            field_path=field_path,
            mask_resolution=resolution,
            threshold=field.threshold,
            solid_fraction=field.solid_fraction,
        )
