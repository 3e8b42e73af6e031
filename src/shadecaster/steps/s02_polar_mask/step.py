"""Step 02: Resample the occupancy field into a polar mask."""

from __future__ import annotations

import logging
from typing import ClassVar

import numpy as np

from shadecaster.core.step_base import BaseStep
from shadecaster.utils.io import load_npz, save_npy
from .config import PolarMaskConfig
from .contracts import PolarMaskInput, PolarMaskOutput

logger = logging.getLogger(__name__)


class PolarMaskStep(BaseStep[PolarMaskInput, PolarMaskOutput, PolarMaskConfig]):
    name: ClassVar[str] = "polar_mask"
    input_type: ClassVar = PolarMaskInput
    output_type: ClassVar = PolarMaskOutput
    config_type: ClassVar = PolarMaskConfig

    def validate_inputs(self, inputs: PolarMaskInput) -> bool:
        if not inputs.field_path.exists():
            logger.error(f"Occupancy field not found: {inputs.field_path}")
            return False
        return True

    def run(self, inputs: PolarMaskInput) -> PolarMaskOutput:
        from shadecaster.steps.s01_occupancy._binary_field import BinaryField
        from ._polar_resampler import resample_polar

        arrays = load_npz(inputs.field_path)
        field = BinaryField(
            solid=arrays["solid"].astype(bool),
            gray=arrays["gray"].astype(np.float64),
            alpha=arrays["alpha"].astype(np.float64),
            threshold=inputs.threshold,
        )

        columns = self.config.columns or inputs.mask_resolution
        rows = self.config.rows or inputs.mask_resolution
        mask = resample_polar(
            field,
            inputs.threshold,
            columns,
            rows,
            spread=self.config.tap_spread,
            invert=self.config.invert,
        )
        logger.info(
            f"Polar mask {mask.rows} rows x {mask.columns} columns: "
            f"{mask.solid_cells}/{mask.data.size} cells solid"
        )

        output_dir = self.interim_dir()
        mask_path = save_npy(output_dir / "polar_mask.npy", mask.data)

        preview_path = None
        if self.config.save_preview:
            from shadecaster.utils.visualization import plot_polar_mask

            preview_path = output_dir / "polar_mask.png"
            plot_polar_mask(mask.data, save_path=preview_path)

        return PolarMaskOutput(
            mask_path=mask_path,
            rows=mask.rows,
            columns=mask.columns,
            solid_cells=mask.solid_cells,
            preview_path=preview_path,
        )
