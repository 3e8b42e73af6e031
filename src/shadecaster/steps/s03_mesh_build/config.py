"""Configuration for Step 03: Mesh construction."""

from pydantic import BaseModel, Field

from shadecaster.core.contracts import GeometryParams


class MeshBuildConfig(BaseModel):
    geometry: GeometryParams = Field(
        default_factory=GeometryParams, description="Lampshade dimensions (mm)"
    )
    open_base: bool = Field(
        True, description="Cut the mount bore through the base; False gives a solid disc"
    )
    verify_manifold: bool = Field(
        True, description="Run the quantized edge check on the finished mesh"
    )
    manifold_epsilon: float = Field(
        1e-5, gt=0, description="Vertex quantization step for the edge check (model units)"
    )
    save_preview: bool = Field(False, description="Render a PNG of the resolved wall cells (matplotlib)")
