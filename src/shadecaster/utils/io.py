"""I/O utilities: pipeline artifacts on disk (occupancy fields, masks, meshes)."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

logger = logging.getLogger(__name__)


def save_npz(path: Path, **arrays: np.ndarray) -> Path:
    """Write named arrays to a compressed .npz file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    np.savez_compressed(path, **arrays)
    return path


def load_npz(path: Path) -> dict[str, np.ndarray]:
    """Read every array of a .npz file into a plain dict."""
    with np.load(path) as data:
        return {key: data[key] for key in data.files}


def save_npy(path: Path, array: np.ndarray) -> Path:
    """Write a single array to .npy."""
    path.parent.mkdir(parents=True, exist_ok=True)
    np.save(path, array)
    return path


def load_npy(path: Path) -> np.ndarray:
    return np.load(path)
