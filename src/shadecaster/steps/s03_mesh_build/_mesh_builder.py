"""Closed lampshade mesh from a polar mask.

The body is a closed (radius, z) profile revolved around the z axis. The
profile is traversed so that ``theta_hat x d(profile)`` always points out of
the material, which gives every revolved quad outward winding by one rule:

    base:  inner wall bottom -> bore -> base bottom -> outer rim
    wall:  outer skin up, inner skin down (per-cell, with cutouts)
    roof:  outer dome -> top annulus -> pocket wall -> lip -> throat
           -> inner dome -> inner wall top

The wall is not revolved as a whole. Each solid cell contributes its outer
and inner skin quads, and cap quads seal the wall thickness wherever a solid
cell borders an open one. All pieces share the same angular subdivision and
exact coordinates at their seams, so every edge is used by two triangles.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from shadecaster.core.contracts import GeometryParams
from shadecaster.steps.s02_polar_mask._polar_resampler import PolarMask, check_resolution
from shadecaster.utils.geometry import (
    ease_radius,
    polar_points,
    quads_to_triangles,
    ring_directions,
)
from ._lamp_geometry import LampDimensions, validate_geometry
from ._wall_cells import pillar_columns, resolve_solid_cells

logger = logging.getLogger(__name__)

MIN_DOME_STEPS = 8
MIN_INNER_DOME_STEPS = 4


def drop_degenerate(triangles: np.ndarray) -> np.ndarray:
    """Remove triangles with two identical vertices (fans collapsing onto the axis)."""
    if len(triangles) == 0:
        return triangles
    v0, v1, v2 = triangles[:, 0], triangles[:, 1], triangles[:, 2]
    same = (
        np.all(v0 == v1, axis=1)
        | np.all(v1 == v2, axis=1)
        | np.all(v0 == v2, axis=1)
    )
    return triangles[~same]


def revolve_profile(directions: np.ndarray, profile: np.ndarray) -> np.ndarray:
    """Revolve an open (radius, z) polyline into quads around the z axis.

    Segment k between profile points k and k+1 becomes one quad per column:
    (k, theta1) -> (k, theta2) -> (k+1, theta2) -> (k+1, theta1).

    Args:
        directions: (C, 2) ring directions from ``ring_directions``.
        profile: (P, 2) array of (radius, z) points.

    Returns:
        (M, 3, 3) triangles.
    """
    columns = len(directions)
    segments = len(profile) - 1
    if segments < 1:
        return np.zeros((0, 3, 3))

    seg_idx, col_idx = np.meshgrid(np.arange(segments), np.arange(columns), indexing="ij")
    seg_idx = seg_idx.ravel()
    col_idx = col_idx.ravel()
    next_col = (col_idx + 1) % columns

    r0, z0 = profile[seg_idx, 0], profile[seg_idx, 1]
    r1, z1 = profile[seg_idx + 1, 0], profile[seg_idx + 1, 1]
    d1, d2 = directions[col_idx], directions[next_col]

    triangles = quads_to_triangles(
        polar_points(d1, r0, z0),
        polar_points(d2, r0, z0),
        polar_points(d2, r1, z1),
        polar_points(d1, r1, z1),
    )
    return drop_degenerate(triangles)


def dome_step_count(columns: int) -> int:
    """Outer dome rings: a fixed minimum, more for finer angular resolution."""
    return max(MIN_DOME_STEPS, int(round(columns / 6)))


def base_profile(dims: LampDimensions) -> np.ndarray:
    """Inner wall bottom -> (bore) -> base bottom -> outer rim top."""
    t = dims.wall_bottom
    return np.array([
        [dims.inner_radius, t],
        [dims.bore_radius, t],
        [dims.bore_radius, 0.0],
        [dims.outer_radius, 0.0],
        [dims.outer_radius, t],
    ])


def roof_profile(dims: LampDimensions, dome_steps: int) -> np.ndarray:
    """Outer wall top -> dome -> pocket -> inner dome -> inner wall top."""
    progress = np.linspace(0.0, 1.0, dome_steps + 1)
    outer = np.column_stack([
        ease_radius(dims.outer_radius, dims.dome_top_outer_radius, progress),
        np.linspace(dims.wall_top, dims.dome_top, dome_steps + 1),
    ])

    pocket = np.array([
        [dims.pocket_radius, dims.dome_top],
        [dims.pocket_radius, dims.pocket_bottom],
        [dims.hole_radius, dims.pocket_bottom],
    ])

    inner_steps = max(
        MIN_INNER_DOME_STEPS,
        int(round(dome_steps * dims.inner_dome_height / dims.dome_height)),
    )
    inner_progress = np.linspace(0.0, 1.0, inner_steps + 1)
    inner = np.column_stack([
        ease_radius(dims.inner_radius, dims.hole_radius, inner_progress),
        np.linspace(dims.wall_top, dims.throat_bottom, inner_steps + 1),
    ])
    # Traversed top-down: throat bottom first, inner wall top last.
    return np.vstack([outer, pocket, inner[::-1]])


def _cell_quads(
    directions: np.ndarray,
    z_levels: np.ndarray,
    cells: np.ndarray,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Corner directions and heights for every True cell.

    Returns (d1, d2, z_bottom, z_top) where d1 / d2 are the directions of the
    cell's leading and trailing angle.
    """
    columns = len(directions)
    row_idx, col_idx = np.nonzero(cells)
    d1 = directions[col_idx]
    d2 = directions[(col_idx + 1) % columns]
    return d1, d2, z_levels[row_idx + 1], z_levels[row_idx]


def build_wall(
    directions: np.ndarray,
    solid: np.ndarray,
    dims: LampDimensions,
) -> np.ndarray:
    """Skins for solid cells plus cap faces on every solid/open boundary.

    Row 0 is the top of the wall and row ``rows - 1`` the bottom.
    """
    rows = solid.shape[0]
    z_levels = np.linspace(dims.wall_top, dims.wall_bottom, rows + 1)
    outer, inner = dims.outer_radius, dims.inner_radius
    parts = []

    def quads(cells, corners):
        """Two triangles per True cell; ``corners`` picks (direction, radius, height) x4."""
        d1, d2, zb, zt = _cell_quads(directions, z_levels, cells)
        lookup = {"d1": d1, "d2": d2, "zb": zb, "zt": zt, "ro": outer, "ri": inner}
        points = [polar_points(lookup[d], lookup[r], lookup[z]) for d, r, z in corners]
        return quads_to_triangles(*points)

    # Neighbour occupancy; rows do not wrap, so beyond the rim/hub counts as solid.
    prev_solid = np.roll(solid, 1, axis=1)
    next_solid = np.roll(solid, -1, axis=1)
    above_solid = np.ones_like(solid)
    above_solid[1:] = solid[:-1]
    below_solid = np.ones_like(solid)
    below_solid[:-1] = solid[1:]

    # Outer skin faces +r, inner skin faces -r.
    parts.append(quads(
        solid,
        [("d1", "ro", "zb"), ("d2", "ro", "zb"), ("d2", "ro", "zt"), ("d1", "ro", "zt")],
    ))
    parts.append(quads(
        solid,
        [("d1", "ri", "zt"), ("d2", "ri", "zt"), ("d2", "ri", "zb"), ("d1", "ri", "zb")],
    ))

    # Radial caps: leading angle faces -theta, trailing angle faces +theta.
    parts.append(quads(
        solid & ~prev_solid,
        [("d1", "ri", "zb"), ("d1", "ro", "zb"), ("d1", "ro", "zt"), ("d1", "ri", "zt")],
    ))
    parts.append(quads(
        solid & ~next_solid,
        [("d2", "ri", "zb"), ("d2", "ri", "zt"), ("d2", "ro", "zt"), ("d2", "ro", "zb")],
    ))

    # Horizontal caps: top faces +z, underside faces -z.
    parts.append(quads(
        solid & ~above_solid,
        [("d1", "ro", "zt"), ("d2", "ro", "zt"), ("d2", "ri", "zt"), ("d1", "ri", "zt")],
    ))
    parts.append(quads(
        solid & ~below_solid,
        [("d1", "ro", "zb"), ("d1", "ri", "zb"), ("d2", "ri", "zb"), ("d2", "ro", "zb")],
    ))

    return np.concatenate(parts, axis=0)


@dataclass(frozen=True)
class LampBuild:
    """A finished mesh together with the wall layout it was built from."""

    triangles: np.ndarray  # (N, 3, 3) float64
    solid: np.ndarray  # (rows, columns) resolved wall cells
    pillars: np.ndarray  # (columns,) pillar columns
    dims: LampDimensions

    @property
    def open_cells(self) -> int:
        return int((~self.solid).sum())


def build_lamp(
    mask: PolarMask,
    params: GeometryParams,
    *,
    open_base: bool = True,
) -> LampBuild:
    """Build the closed lampshade mesh for a polar mask.

    Args:
        mask: Polar mask; True cells carry wall material.
        params: Geometry parameters, validated here.
        open_base: Cut the mount bore through the base (otherwise a solid disc).

    Raises:
        InvalidGeometry: parameters fail validation.
        InvalidResolution: mask smaller than 3x3.
    """
    validate_geometry(params)
    check_resolution(mask.columns, mask.rows)

    dims = LampDimensions.from_params(params, open_base=open_base)
    directions = ring_directions(mask.columns)
    pillars = pillar_columns(
        mask.columns, dims.pillar_count, dims.thickness, dims.inner_radius
    )
    solid = resolve_solid_cells(mask.data, pillars)

    base = revolve_profile(directions, base_profile(dims))
    wall = build_wall(directions, solid, dims)
    roof = revolve_profile(directions, roof_profile(dims, dome_step_count(mask.columns)))
    triangles = np.concatenate([base, wall, roof], axis=0)

    logger.debug(
        f"Mesh: {len(base)} base, {len(wall)} wall, {len(roof)} roof triangles "
        f"({int((~solid).sum())} open cells)"
    )
    return LampBuild(triangles=triangles, solid=solid, pillars=pillars, dims=dims)


def build_lamp_mesh(
    mask: PolarMask,
    params: GeometryParams,
    *,
    open_base: bool = True,
) -> np.ndarray:
    """Triangles only: (N, 3, 3) float64 with outward CCW winding."""
    return build_lamp(mask, params, open_base=open_base).triangles
