"""Vector utilities: triangle normals, polar coordinates, quad splitting."""

from __future__ import annotations

import logging

import numpy as np

logger = logging.getLogger(__name__)

# Cross products shorter than this are treated as degenerate triangles.
DEGENERATE_EPS = 1e-12
# Coordinates closer to zero than this snap to exactly 0.0.
ZERO_SNAP = 1e-10


def triangle_normal(
    v1: np.ndarray | list[float],
    v2: np.ndarray | list[float],
    v3: np.ndarray | list[float],
) -> np.ndarray:
    """Unit normal of one triangle from its winding, or the zero vector if degenerate."""
    tri = np.asarray([v1, v2, v3], dtype=np.float64)[np.newaxis]
    return triangle_normals(tri)[0]


def triangle_normals(triangles: np.ndarray) -> np.ndarray:
    """Per-triangle unit normals ``normalize(cross(v2 - v1, v3 - v1))``.

    Args:
        triangles: (N, 3, 3) array of triangle vertices.

    Returns:
        (N, 3) float64 array. Degenerate (collinear or repeated vertex)
        triangles get the exact zero vector instead of a division by ~0.
    """
    tris = np.asarray(triangles, dtype=np.float64)
    if tris.size == 0:
        return np.zeros((0, 3), dtype=np.float64)
    cross = np.cross(tris[:, 1] - tris[:, 0], tris[:, 2] - tris[:, 0])
    length = np.linalg.norm(cross, axis=1)
    normals = np.zeros_like(cross)
    ok = length > DEGENERATE_EPS
    normals[ok] = cross[ok] / length[ok, np.newaxis]
    return normals


def snap_zero(values: np.ndarray) -> np.ndarray:
    """Replace tiny magnitudes and negative zero with 0.0."""
    out = np.array(values, dtype=np.float64, copy=True)
    out[np.abs(out) < ZERO_SNAP] = 0.0
    return out


def ring_directions(segments: int) -> np.ndarray:
    """Unit (cos, sin) directions at ``k * 2pi / segments`` for k in [0, segments).

    Index ``segments`` is deliberately absent: callers wrap with ``% segments``
    so that the closing seam reuses the exact coordinates of angle 0.
    """
    angles = np.arange(segments) * (2.0 * np.pi / segments)
    return snap_zero(np.column_stack([np.cos(angles), np.sin(angles)]))


def polar_points(
    directions: np.ndarray, radius: np.ndarray | float, z: np.ndarray | float
) -> np.ndarray:
    """Broadcast ring directions, radii and heights into (..., 3) points."""
    radius = np.asarray(radius, dtype=np.float64)
    z = np.asarray(z, dtype=np.float64)
    x = snap_zero(directions[..., 0] * radius)
    y = snap_zero(directions[..., 1] * radius)
    z = np.broadcast_to(z, x.shape)
    return np.stack([x, y, z], axis=-1)


def quads_to_triangles(
    a: np.ndarray, b: np.ndarray, c: np.ndarray, d: np.ndarray
) -> np.ndarray:
    """Split quads a-b-c-d (CCW seen from outside) along a-c.

    Args:
        a, b, c, d: (K, 3) corner arrays.

    Returns:
        (2K, 3, 3) triangles: (a, b, c) followed by (a, c, d).
    """
    first = np.stack([a, b, c], axis=1)
    second = np.stack([a, c, d], axis=1)
    return np.concatenate([first, second], axis=0)


def ease_radius(start: float, end: float, progress: np.ndarray) -> np.ndarray:
    """Cosine ease from ``start`` (progress 0) to ``end`` (progress 1).

    Both ends are pinned exactly so the rings meet the wall and the caps
    on identical coordinates.
    """
    progress = np.asarray(progress, dtype=np.float64)
    radii = end + (start - end) * np.cos(progress * (np.pi / 2.0))
    radii = np.where(progress <= 0.0, start, radii)
    radii = np.where(progress >= 1.0, end, radii)
    return radii
