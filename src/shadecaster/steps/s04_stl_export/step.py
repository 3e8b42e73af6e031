"""Step 04: Serialize the mesh to a binary or ASCII STL file."""

from __future__ import annotations

import logging
from typing import ClassVar

from shadecaster.core.step_base import BaseStep
from shadecaster.utils.io import load_npy
from .config import StlExportConfig
from .contracts import StlExportInput, StlExportOutput

logger = logging.getLogger(__name__)


class StlExportStep(BaseStep[StlExportInput, StlExportOutput, StlExportConfig]):
    name: ClassVar[str] = "stl_export"
    input_type: ClassVar = StlExportInput
    output_type: ClassVar = StlExportOutput
    config_type: ClassVar = StlExportConfig

    def validate_inputs(self, inputs: StlExportInput) -> bool:
        if not inputs.mesh_path.exists():
            logger.error(f"Mesh not found: {inputs.mesh_path}")
            return False
        return True

    def run(self, inputs: StlExportInput) -> StlExportOutput:
        from ._stl_codec import export_stl

        triangles = load_npy(inputs.mesh_path)
        artifact = export_stl(
            triangles,
            self.config.format,
            name=self.config.solid_name,
            header=self.config.header,
            filename=self.config.filename,
        )

        output_dir = self.data_root / "processed"
        stl_path = artifact.save(output_dir / artifact.filename)

        size_kb = artifact.size / 1024
        logger.info(
            f"STL exported: {stl_path} ({self.config.format}, "
            f"{len(triangles)} triangles, {size_kb:.1f} KB)"
        )
        return StlExportOutput(
            stl_path=stl_path,
            format=artifact.format,
            num_triangles=len(triangles),
            size_bytes=artifact.size,
            media_type=artifact.media_type,
        )
