"""Mask interpretation: which wall cells carry material.

Three policies override the sampled mask, each kept as its own predicate:
the rim and hub rows are always solid, pillar columns are always solid,
and diagonal-only contacts between solid cells are closed.
"""

from __future__ import annotations

import logging

import numpy as np

logger = logging.getLogger(__name__)

PILLAR_EPS = 1e-6


def is_rim_or_hub_row(row: int, rows: int) -> bool:
    """Top (row 0) and bottom (row ``rows - 1``) wall rows are always solid."""
    return row == 0 or row == rows - 1


def rim_and_hub_rows(rows: int) -> np.ndarray:
    return np.array([is_rim_or_hub_row(row, rows) for row in range(rows)], dtype=bool)


def pillar_columns(
    columns: int,
    pillar_count: int,
    wall_thickness: float,
    inner_radius: float,
) -> np.ndarray:
    """Columns whose centre angle falls inside a structural pillar arc.

    One pillar is centred every ``2pi / pillar_count``. Its angular width is a
    quarter of that spacing, but never narrower than one wall thickness of
    arc on the inner skin.

    Returns:
        (columns,) bool array.
    """
    pillar_count = max(3, int(round(pillar_count)))
    pillar_step = 2.0 * np.pi / pillar_count
    min_width = wall_thickness / max(inner_radius, PILLAR_EPS)
    width = min(pillar_step, max(pillar_step * 0.25, min_width))
    half = width / 2.0

    angles = (np.arange(columns) + 0.5) * (2.0 * np.pi / columns)
    nearest = np.round(angles / pillar_step) % pillar_count
    delta = np.abs(angles - nearest * pillar_step)
    wrapped = np.minimum(delta, 2.0 * np.pi - delta)
    return wrapped <= half + PILLAR_EPS


def checkerboard_blocks(cells: np.ndarray) -> np.ndarray:
    """2x2 blocks whose solid cells touch only at a corner.

    Block ``(r, c)`` covers rows r, r+1 and columns c, c+1 (wrapping).
    Returns a (rows - 1, columns) bool array.
    """
    right = np.roll(cells, -1, axis=1)
    a, b = cells[:-1], right[:-1]
    c, d = cells[1:], right[1:]
    return (a & d & ~b & ~c) | (b & c & ~a & ~d)


def close_diagonal_contacts(cells: np.ndarray) -> np.ndarray:
    """Fill every checkerboard 2x2 block until none remain.

    Two solid cells meeting at a single corner would put four cap faces on
    one edge. Filling only ever adds material, so the loop terminates.
    """
    cells = np.array(cells, dtype=bool, copy=True)
    columns = cells.shape[1]
    filled = 0
    while True:
        blocks = checkerboard_blocks(cells)
        if not blocks.any():
            break
        rows_idx, cols_idx = np.nonzero(blocks)
        next_cols = (cols_idx + 1) % columns
        for r, c in ((rows_idx, cols_idx), (rows_idx, next_cols),
                     (rows_idx + 1, cols_idx), (rows_idx + 1, next_cols)):
            filled += int((~cells[r, c]).sum())
            cells[r, c] = True
    if filled:
        logger.debug(f"Closed diagonal contacts: {filled} cells filled")
    return cells


def resolve_solid_cells(data: np.ndarray, pillars: np.ndarray) -> np.ndarray:
    """Final (rows, columns) wall occupancy: mask, rim/hub rows, pillars, closure.

    Always returns a freshly allocated array; ``data`` is not modified.
    """
    rows = data.shape[0]
    cells = np.array(data, dtype=bool, copy=True)
    cells |= rim_and_hub_rows(rows)[:, np.newaxis]
    cells |= pillars[np.newaxis, :]
    return close_diagonal_contacts(cells)
