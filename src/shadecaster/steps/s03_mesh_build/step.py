"""Step 03: Build the closed lampshade mesh from the polar mask."""

from __future__ import annotations

import logging
from typing import ClassVar

from shadecaster.core.step_base import BaseStep
from shadecaster.utils.io import load_npy, save_npy
from .config import MeshBuildConfig
from .contracts import MeshBuildInput, MeshBuildOutput

logger = logging.getLogger(__name__)


class MeshBuildStep(BaseStep[MeshBuildInput, MeshBuildOutput, MeshBuildConfig]):
    name: ClassVar[str] = "mesh_build"
    input_type: ClassVar = MeshBuildInput
    output_type: ClassVar = MeshBuildOutput
    config_type: ClassVar = MeshBuildConfig

    def validate_inputs(self, inputs: MeshBuildInput) -> bool:
        if not inputs.mask_path.exists():
            logger.error(f"Polar mask not found: {inputs.mask_path}")
            return False
        return True

    def run(self, inputs: MeshBuildInput) -> MeshBuildOutput:
        from shadecaster.steps.s02_polar_mask._polar_resampler import PolarMask
        from ._mesh_builder import build_lamp

        mask = PolarMask.from_array(load_npy(inputs.mask_path))
        build = build_lamp(mask, self.config.geometry, open_base=self.config.open_base)
        triangles = build.triangles

        logger.info(
            f"Built {len(triangles)} triangles from a {mask.rows}x{mask.columns} mask "
            f"({build.open_cells} open cells, {int(build.pillars.sum())} pillar columns)"
        )

        open_edges = None
        non_manifold_edges = None
        if self.config.verify_manifold:
            from shadecaster.utils.mesh_check import inspect_mesh

            report = inspect_mesh(triangles, epsilon=self.config.manifold_epsilon)
            open_edges = report.open_edges
            non_manifold_edges = report.non_manifold_edges
            if report.is_manifold:
                logger.info(f"Manifold check passed: {report.edges} edges, all shared by 2 triangles")
            else:
                logger.warning(
                    f"Manifold check failed: {open_edges} open, "
                    f"{non_manifold_edges} non-manifold edges"
                )

        output_dir = self.interim_dir()
        mesh_path = save_npy(output_dir / "triangles.npy", triangles)

        preview_path = None
        if self.config.save_preview:
            from shadecaster.utils.visualization import plot_wall_layout

            preview_path = output_dir / "wall_layout.png"
            plot_wall_layout(build.solid, build.pillars, save_path=preview_path)

        return MeshBuildOutput(
            mesh_path=mesh_path,
            num_triangles=len(triangles),
            open_cells=build.open_cells,
            open_edges=open_edges,
            non_manifold_edges=non_manifold_edges,
            preview_path=preview_path,
        )
