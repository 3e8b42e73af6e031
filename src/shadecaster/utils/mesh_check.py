"""Mesh diagnostics: quantized edge-use histogram and orientation checks.

Vertex positions are snapped to a grid of ``epsilon`` model units before
edges are counted, so coincident vertices written separately (as in STL)
merge. In a closed 2-manifold every edge is used by exactly two triangles
and, with consistent winding, each directed edge appears exactly once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 1e-5


@dataclass
class EdgeReport:
    """Edge statistics for one mesh."""

    triangles: int
    vertices: int
    edges: int
    histogram: dict[int, int] = field(default_factory=dict)
    open_edges: int = 0  # used by one triangle
    non_manifold_edges: int = 0  # used by more than two
    reversed_edges: int = 0  # directed edges repeated (inconsistent winding)

    @property
    def is_manifold(self) -> bool:
        return self.triangles > 0 and self.open_edges == 0 and self.non_manifold_edges == 0

    @property
    def is_consistently_oriented(self) -> bool:
        return self.reversed_edges == 0


def _vertex_ids(triangles: np.ndarray, epsilon: float) -> tuple[np.ndarray, int]:
    keys = np.round(triangles.reshape(-1, 3) / epsilon).astype(np.int64)
    unique, inverse = np.unique(keys, axis=0, return_inverse=True)
    return inverse.reshape(-1, 3), len(unique)


def inspect_mesh(triangles: np.ndarray, epsilon: float = DEFAULT_EPSILON) -> EdgeReport:
    """Count how many triangles use each quantized edge.

    Args:
        triangles: (N, 3, 3) triangle vertices.
        epsilon: Quantization step; must be positive.
    """
    if not epsilon > 0:
        raise ValueError("Epsilon must be a positive number.")
    tris = np.asarray(triangles, dtype=np.float64)
    if len(tris) == 0:
        return EdgeReport(triangles=0, vertices=0, edges=0)

    vid, num_vertices = _vertex_ids(tris, epsilon)
    directed = np.concatenate([vid[:, [0, 1]], vid[:, [1, 2]], vid[:, [2, 0]]], axis=0)

    undirected = np.sort(directed, axis=1)
    _, edge_counts = np.unique(undirected, axis=0, return_counts=True)
    _, directed_counts = np.unique(directed, axis=0, return_counts=True)

    uses, how_many = np.unique(edge_counts, return_counts=True)
    histogram = {int(u): int(n) for u, n in zip(uses, how_many)}

    report = EdgeReport(
        triangles=len(tris),
        vertices=num_vertices,
        edges=len(edge_counts),
        histogram=histogram,
        open_edges=int((edge_counts == 1).sum()),
        non_manifold_edges=int((edge_counts > 2).sum()),
        reversed_edges=int((directed_counts > 1).sum()),
    )
    logger.debug(
        f"Edge check: {report.triangles} triangles, {report.edges} edges, histogram {histogram}"
    )
    return report


def inspect_stl(path: Path, epsilon: float = DEFAULT_EPSILON) -> EdgeReport:
    """Read a binary STL file and run ``inspect_mesh`` on it."""
    from shadecaster.steps.s04_stl_export._stl_codec import read_binary_stl

    with open(path, "rb") as f:
        triangles, _ = read_binary_stl(f.read())
    return inspect_mesh(triangles, epsilon=epsilon)


def signed_volume(triangles: np.ndarray) -> float:
    """Enclosed volume; positive when normals point outward."""
    tris = np.asarray(triangles, dtype=np.float64)
    if len(tris) == 0:
        return 0.0
    return float(np.einsum("ij,ij->i", tris[:, 0], np.cross(tris[:, 1], tris[:, 2])).sum() / 6.0)
