"""Polar resampling of an occupancy field into angle x radius cells.

Row 0 samples the outermost radius (``max_radius``) and row ``rows - 1``
samples the image centre. Downstream, row 0 becomes the top of the wall
(next to the dome) and the last row the bottom (next to the base).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from shadecaster.core.errors import InvalidResolution
from shadecaster.steps.s01_occupancy._binary_field import (
    BinaryField,
    clamp_threshold,
    is_solid,
)

logger = logging.getLogger(__name__)

MIN_CELLS = 3


@dataclass(frozen=True)
class PolarMask:
    """Immutable (rows, columns) grid; True means material is present."""

    data: np.ndarray  # (rows, columns) bool

    def __post_init__(self):
        if self.data.ndim != 2:
            raise InvalidResolution(f"Polar mask must be 2-D, got shape {self.data.shape}")
        check_resolution(self.columns, self.rows)

    @property
    def rows(self) -> int:
        return int(self.data.shape[0])

    @property
    def columns(self) -> int:
        return int(self.data.shape[1])

    @property
    def solid_cells(self) -> int:
        return int(self.data.sum())

    @classmethod
    def from_array(cls, data) -> "PolarMask":
        """Copy an array-like into an owned, read-only mask."""
        array = np.array(data, dtype=bool, copy=True)
        array.setflags(write=False)
        return cls(data=array)


def check_resolution(columns: int, rows: int) -> None:
    if columns < MIN_CELLS or rows < MIN_CELLS:
        raise InvalidResolution(
            f"Polar mask resolution must be at least {MIN_CELLS}x{MIN_CELLS} "
            f"(got {rows} rows x {columns} columns)."
        )


def _bilinear(planes: np.ndarray, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Bilinear lookup of stacked (H, W, C) planes at float pixel coordinates.

    Coordinates are clamped to the image, so taps past the border repeat
    the edge pixels.
    """
    height, width = planes.shape[:2]
    x = np.clip(x, 0, width - 1)
    y = np.clip(y, 0, height - 1)
    x0 = np.floor(x).astype(np.intp)
    y0 = np.floor(y).astype(np.intp)
    x1 = np.minimum(x0 + 1, width - 1)
    y1 = np.minimum(y0 + 1, height - 1)
    dx = (x - x0)[..., np.newaxis]
    dy = (y - y0)[..., np.newaxis]

    return (
        planes[y0, x0] * (1 - dx) * (1 - dy)
        + planes[y0, x1] * dx * (1 - dy)
        + planes[y1, x0] * (1 - dx) * dy
        + planes[y1, x1] * dx * dy
    )


def supersample(
    planes: np.ndarray, x: np.ndarray, y: np.ndarray, spread: float = 0.35
) -> np.ndarray:
    """Mean of five bilinear taps: centre plus four diagonals at +/- spread."""
    offsets = ((0.0, 0.0), (-spread, -spread), (spread, -spread), (-spread, spread), (spread, spread))
    total = np.zeros(x.shape + planes.shape[2:], dtype=np.float64)
    for ox, oy in offsets:
        total += _bilinear(planes, x + ox, y + oy)
    return total / len(offsets)


def sample_coordinates(
    width: int, height: int, columns: int, rows: int
) -> tuple[np.ndarray, np.ndarray]:
    """Image-space (x, y) of every cell centre, each shaped (rows, columns)."""
    center_x = (width - 1) / 2.0
    center_y = (height - 1) / 2.0
    max_radius = min(center_x, center_y)

    angles = (np.arange(columns) + 0.5) * (2.0 * np.pi / columns)
    radii = max_radius * (rows - 1 - np.arange(rows)) / max(rows - 1, 1)

    x = center_x + np.cos(angles)[np.newaxis, :] * radii[:, np.newaxis]
    y = center_y + np.sin(angles)[np.newaxis, :] * radii[:, np.newaxis]
    return x, y


def seal_rim_and_hub(cells: np.ndarray) -> np.ndarray:
    """Force the outermost and innermost rows solid."""
    cells[0, :] = True
    cells[-1, :] = True
    return cells


def resample_polar(
    field: BinaryField,
    threshold: float,
    columns: int,
    rows: int,
    *,
    spread: float = 0.35,
    invert: bool = False,
) -> PolarMask:
    """Resample a BinaryField onto a (rows, columns) polar grid.

    Gray and alpha are averaged over the five taps and the solid test is
    applied once to the averaged pair. ``invert`` flips the sampled cells
    before the rim and hub rows are sealed.
    """
    check_resolution(columns, rows)
    threshold = clamp_threshold(threshold)

    planes = np.stack([field.gray, field.alpha], axis=-1)
    x, y = sample_coordinates(field.width, field.height, columns, rows)
    averaged = supersample(planes, x, y, spread=spread)

    cells = is_solid(averaged[..., 0], averaged[..., 1], threshold)
    if invert:
        cells = ~cells
    cells = seal_rim_and_hub(np.array(cells, dtype=bool))

    mask = PolarMask.from_array(cells)
    logger.debug(f"Polar mask {rows}x{columns}: {mask.solid_cells} solid cells")
    return mask
