"""Per-pixel occupancy: luminance threshold plus alpha test."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from shadecaster.core.errors import (
    DegenerateImage,
    EmptyImage,
    InvalidImage,
    InvalidParameter,
)

logger = logging.getLogger(__name__)

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])
ALPHA_CUTOFF = 128.0


@dataclass(frozen=True)
class BinaryField:
    """Immutable occupancy field derived from one RGBA image.

    ``gray`` and ``alpha`` are kept alongside ``solid`` because the polar
    resampler interpolates them rather than the thresholded booleans.
    """

    solid: np.ndarray  # (H, W) bool
    gray: np.ndarray  # (H, W) float64, 0-255
    alpha: np.ndarray  # (H, W) float64, 0-255
    threshold: float

    @property
    def width(self) -> int:
        return int(self.solid.shape[1])

    @property
    def height(self) -> int:
        return int(self.solid.shape[0])

    @property
    def solid_fraction(self) -> float:
        return float(self.solid.mean())


def clamp_threshold(threshold: float) -> float:
    """Validate a threshold and clamp it into [0, 255]."""
    try:
        value = float(threshold)
    except (TypeError, ValueError) as e:
        raise InvalidParameter(f"Threshold must be a number, got {threshold!r}") from e
    if not math.isfinite(value):
        raise InvalidParameter("Threshold must be a finite number between 0 and 255.")
    return min(255.0, max(0.0, value))


def is_solid(gray: np.ndarray | float, alpha: np.ndarray | float, threshold: float):
    """The solid test shared by pixel sampling and polar resampling."""
    return (np.asarray(alpha) >= ALPHA_CUTOFF) & (np.asarray(gray) < threshold)


def luminance_alpha(rgba: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Split an (H, W, 4) RGBA array into float luminance and alpha planes."""
    pixels = rgba.astype(np.float64)
    gray = pixels[..., :3] @ LUMA_WEIGHTS
    return gray, pixels[..., 3]


def to_binary_field(rgba: np.ndarray, threshold: float) -> BinaryField:
    """Threshold an RGBA buffer into a BinaryField of the same dimensions.

    Raises:
        InvalidImage: buffer is not (H, W, 4).
        EmptyImage: width or height is zero.
    """
    rgba = np.asarray(rgba)
    if rgba.ndim != 3 or rgba.shape[2] != 4:
        raise InvalidImage(f"Expected an (H, W, 4) RGBA buffer, got shape {rgba.shape}")
    if rgba.shape[0] == 0 or rgba.shape[1] == 0:
        raise EmptyImage(f"Image has no data ({rgba.shape[1]}x{rgba.shape[0]}).")

    threshold = clamp_threshold(threshold)
    gray, alpha = luminance_alpha(rgba)
    solid = is_solid(gray, alpha, threshold)
    for plane in (solid, gray, alpha):
        plane.setflags(write=False)
    return BinaryField(solid=solid, gray=gray, alpha=alpha, threshold=threshold)


def check_field_contrast(field: BinaryField) -> None:
    """Reject fields that are uniformly solid or uniformly empty."""
    if not field.solid.any():
        raise DegenerateImage(
            "Image is all white/transparent. Please provide an image with dark "
            "silhouette content. Try lowering the threshold."
        )
    if field.solid.all():
        raise DegenerateImage(
            "Image is all black. Please provide an image with a clear silhouette. "
            "Try raising the threshold."
        )


def sample_occupancy(rgba: np.ndarray, threshold: float) -> BinaryField:
    """Build a BinaryField and verify it has both solid and open pixels."""
    field = to_binary_field(rgba, threshold)
    check_field_contrast(field)
    logger.debug(
        f"Occupancy {field.width}x{field.height} @ threshold {field.threshold:.0f}: "
        f"{field.solid_fraction:.1%} solid"
    )
    return field
