"""Shared pytest fixtures for Shadecaster pipeline tests."""

import os
from pathlib import Path

import numpy as np
import pytest

os.environ.setdefault("MPLBACKEND", "Agg")


def make_silhouette(size: int = 120, radius_ratio: float = 0.25) -> np.ndarray:
    """Opaque white RGBA square with a black disc in the middle."""
    rgba = np.full((size, size, 4), 255, dtype=np.uint8)
    yy, xx = np.mgrid[0:size, 0:size]
    center = (size - 1) / 2.0
    disc = (xx - center) ** 2 + (yy - center) ** 2 <= (radius_ratio * size) ** 2
    rgba[disc, :3] = 0
    return rgba


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    """Create a temporary data root with standard directory structure."""
    for subdir in ["raw", "interim", "processed"]:
        (tmp_path / subdir).mkdir(parents=True, exist_ok=True)
    return tmp_path


@pytest.fixture
def silhouette_rgba() -> np.ndarray:
    return make_silhouette()


@pytest.fixture
def silhouette_png(data_root: Path, silhouette_rgba: np.ndarray) -> Path:
    """Write the silhouette as a 4-channel PNG under raw/."""
    import cv2

    path = data_root / "raw" / "silhouette.png"
    cv2.imwrite(str(path), cv2.cvtColor(silhouette_rgba, cv2.COLOR_RGBA2BGRA))
    return path


@pytest.fixture
def solid_mask():
    """Fully solid 4 x 8 polar mask."""
    from shadecaster.steps.s02_polar_mask._polar_resampler import PolarMask

    return PolarMask.from_array(np.ones((4, 8), dtype=bool))


@pytest.fixture
def default_geometry():
    from shadecaster.core.contracts import GeometryParams

    return GeometryParams(
        dome_diameter=60,
        dome_height=20,
        wall_thickness=1.6,
        wall_height=25,
        led_mount_diameter=38,
        led_mount_height=16,
        pillar_count=8,
    )


@pytest.fixture
def unit_tetrahedron() -> np.ndarray:
    """Closed tetrahedron with outward CCW winding."""
    o = [0.0, 0.0, 0.0]
    a = [1.0, 0.0, 0.0]
    b = [0.0, 1.0, 0.0]
    c = [0.0, 0.0, 1.0]
    return np.array([[o, b, a], [o, a, c], [o, c, b], [a, b, c]])
