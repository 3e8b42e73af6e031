"""Image utilities: decode to RGBA, wrap raw buffers, resize to the working grid."""

from __future__ import annotations

import logging
import math
from pathlib import Path

import numpy as np

from shadecaster.core.errors import EmptyImage, InvalidImage, InvalidResolution

logger = logging.getLogger(__name__)


def mask_resolution(
    angular_resolution: int,
    oversample: int = 12,
    min_resolution: int = 240,
    max_resolution: int = 720,
) -> int:
    """Square working resolution for a user-facing angular resolution.

    The mask is oversampled relative to the angular resolution for edge
    fidelity, floored for small requests and capped to bound the cost.
    """
    if not math.isfinite(angular_resolution):
        raise InvalidResolution("Angular resolution must be a valid number.")
    angular = int(round(angular_resolution))
    if angular < 3:
        raise InvalidResolution(
            f"Angular resolution must be at least 3 (got {angular}). Raise the resolution."
        )
    base = max(angular * oversample, min_resolution)
    return int(min(max_resolution, round(base)))


def rgba_from_buffer(buffer: bytes | bytearray | memoryview | np.ndarray, width: int, height: int) -> np.ndarray:
    """Wrap a flat RGBA byte buffer (row-major, 4 channels) as an (H, W, 4) array."""
    if width <= 0 or height <= 0:
        raise EmptyImage(f"Image has no data ({width}x{height}).")
    flat = np.frombuffer(buffer, dtype=np.uint8) if not isinstance(buffer, np.ndarray) else buffer.ravel()
    expected = width * height * 4
    if flat.size != expected:
        raise InvalidImage(
            f"RGBA buffer holds {flat.size} bytes, expected {expected} for {width}x{height}."
        )
    return flat.astype(np.uint8, copy=False).reshape(height, width, 4)


def to_rgba(image: np.ndarray) -> np.ndarray:
    """Normalise an OpenCV-decoded array (gray, BGR, BGRA; 8 or 16 bit) to RGBA uint8."""
    import cv2

    if image.dtype == np.uint16:
        image = (image // 257).astype(np.uint8)
    elif image.dtype != np.uint8:
        image = np.clip(image, 0, 255).astype(np.uint8)

    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    channels = image.shape[2]
    if channels == 1:
        return cv2.cvtColor(image[:, :, 0], cv2.COLOR_GRAY2RGBA)
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    raise InvalidImage(f"Unsupported channel count: {channels}")


def load_rgba(path: Path) -> np.ndarray:
    """Decode an image file into an (H, W, 4) RGBA uint8 array."""
    import cv2

    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise InvalidImage(f"Could not decode image: {path}")
    if image.size == 0:
        raise EmptyImage(f"Image has no data: {path}")
    rgba = to_rgba(image)
    logger.info(f"Loaded {path.name}: {rgba.shape[1]}x{rgba.shape[0]} RGBA")
    return rgba


def resize_square(rgba: np.ndarray, resolution: int) -> np.ndarray:
    """Stretch an RGBA image onto a ``resolution`` x ``resolution`` grid with smoothing."""
    import cv2

    if rgba.shape[0] == 0 or rgba.shape[1] == 0:
        raise EmptyImage("Image has no data.")
    h, w = rgba.shape[:2]
    if (h, w) == (resolution, resolution):
        return rgba
    shrinking = resolution < max(h, w)
    interp = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR
    return cv2.resize(rgba, (resolution, resolution), interpolation=interp)
