"""In-memory generation: RGBA buffer -> STL artifact in one synchronous call.

The file-based pipeline persists every intermediate artifact; this module
chains the same stage functions without touching disk, for interactive
callers that regenerate on every parameter change.

Requests are single-flight. Each call draws a ticket from a monotonically
increasing counter and only the newest ticket may publish its result;
anything older is discarded when it finishes.
"""

from __future__ import annotations

import hashlib
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .contracts import GeometryParams, ProcessingParams

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 8


@dataclass(frozen=True)
class MaskKey:
    """Identity of a polar mask: same image, threshold, resolution and polarity."""

    image_digest: str
    threshold: float
    resolution: int
    invert: bool


def image_digest(rgba: np.ndarray) -> str:
    """Content hash of an RGBA buffer, including its shape."""
    rgba = np.ascontiguousarray(rgba)
    h = hashlib.sha1()
    h.update(repr(rgba.shape).encode("ascii"))
    h.update(rgba.tobytes())
    return h.hexdigest()


class LampGenerator:
    """Single-flight generator with an optional polar-mask cache.

    Args:
        cache_size: Masks kept in the LRU cache; 0 disables caching.
        invert: Flip sampled cells so dark areas become windows.
        open_base: Cut the mount bore through the base.
        oversample, min_resolution, max_resolution: Working grid bounds,
            see ``mask_resolution``.
    """

    def __init__(
        self,
        cache_size: int = DEFAULT_CACHE_SIZE,
        invert: bool = False,
        open_base: bool = True,
        oversample: int = 12,
        min_resolution: int = 240,
        max_resolution: int = 720,
    ):
        self.oversample = oversample
        self.min_resolution = min_resolution
        self.max_resolution = max_resolution
        self.cache_size = max(0, cache_size)
        self.invert = invert
        self.open_base = open_base
        self.latest = None  # StlArtifact of the newest completed request
        self.latest_ticket = 0
        self._issued = 0
        self._lock = threading.Lock()
        self._masks: OrderedDict[MaskKey, object] = OrderedDict()

    def begin(self) -> int:
        """Issue a new ticket, superseding every request still in flight."""
        with self._lock:
            self._issued += 1
            return self._issued

    def is_current(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._issued

    def _publish(self, ticket: int, artifact) -> bool:
        with self._lock:
            if ticket != self._issued:
                return False
            self.latest = artifact
            self.latest_ticket = ticket
            return True

    def clear_cache(self) -> None:
        with self._lock:
            self._masks.clear()

    @property
    def cached_masks(self) -> int:
        return len(self._masks)

    def polar_mask(self, rgba: np.ndarray, processing: ProcessingParams):
        """Occupancy sampling and polar resampling, served from cache when possible."""
        from shadecaster.steps.s01_occupancy._binary_field import clamp_threshold, sample_occupancy
        from shadecaster.steps.s02_polar_mask._polar_resampler import resample_polar
        from shadecaster.utils.image import mask_resolution, resize_square

        threshold = clamp_threshold(processing.threshold)
        resolution = mask_resolution(
            processing.angular_resolution,
            oversample=self.oversample,
            min_resolution=self.min_resolution,
            max_resolution=self.max_resolution,
        )

        key = None
        if self.cache_size:
            key = MaskKey(image_digest(rgba), threshold, resolution, self.invert)
            with self._lock:
                cached = self._masks.get(key)
                if cached is not None:
                    self._masks.move_to_end(key)
                    logger.debug(f"Polar mask cache hit ({key.image_digest[:8]})")
                    return cached

        field = sample_occupancy(resize_square(rgba, resolution), threshold)
        mask = resample_polar(field, threshold, resolution, resolution, invert=self.invert)

        if key is not None:
            with self._lock:
                self._masks[key] = mask
                while len(self._masks) > self.cache_size:
                    self._masks.popitem(last=False)
        return mask

    def generate(
        self,
        rgba: np.ndarray,
        processing: Optional[ProcessingParams] = None,
        geometry: Optional[GeometryParams] = None,
        fmt: str = "binary",
        ticket: Optional[int] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ):
        """Run all four stages and publish the STL if this request is still current.

        Args:
            rgba: (H, W, 4) uint8 array, or a flat row-major RGBA byte buffer
                together with ``width`` and ``height``.
            processing: Angular resolution and threshold.
            geometry: Lampshade dimensions.
            fmt: ``"binary"`` or ``"ascii"``.
            ticket: Ticket from ``begin()``; a fresh one is drawn when omitted.
            width, height: Dimensions of a flat buffer.

        Returns:
            The StlArtifact, or None when a newer request superseded this one.

        Raises:
            Any stage error (InvalidImage, DegenerateImage, InvalidResolution,
            InvalidGeometry, SerializationFailure). Nothing is published then.
        """
        from shadecaster.steps.s03_mesh_build._mesh_builder import build_lamp_mesh
        from shadecaster.steps.s04_stl_export._stl_codec import export_stl
        from shadecaster.utils.image import rgba_from_buffer

        processing = processing or ProcessingParams()
        geometry = geometry or GeometryParams()
        if ticket is None:
            ticket = self.begin()

        t0 = time.perf_counter()
        if width is not None or height is not None:
            rgba = rgba_from_buffer(rgba, width or 0, height or 0)
        mask = self.polar_mask(np.asarray(rgba), processing)
        triangles = build_lamp_mesh(mask, geometry, open_base=self.open_base)
        artifact = export_stl(triangles, fmt)
        elapsed = time.perf_counter() - t0

        if not self._publish(ticket, artifact):
            logger.info(f"Discarding stale result for request #{ticket}")
            return None

        logger.info(
            f"Request #{ticket}: {len(triangles)} triangles, "
            f"{artifact.size / 1024:.1f} KB {fmt} STL in {elapsed:.2f}s"
        )
        return artifact
