"""Visualization utilities for pipeline debugging."""

from __future__ import annotations

from pathlib import Path

import numpy as np


def plot_polar_mask(
    mask: np.ndarray,
    title: str = "Polar Mask",
    save_path: Path | None = None,
):
    """Plot a (rows, columns) mask unrolled onto polar axes.

    Row 0 is drawn at the outer radius, matching the image it came from.
    """
    import matplotlib.pyplot as plt

    rows, columns = mask.shape
    theta = np.linspace(0.0, 2.0 * np.pi, columns + 1)
    radius = np.linspace(1.0, 0.0, rows + 1)

    fig = plt.figure(figsize=(8, 8))
    ax = fig.add_subplot(111, projection="polar")
    ax.pcolormesh(theta, radius, mask.astype(float), cmap="gray_r", shading="flat")
    # Image y grows downward, so angles run clockwise on screen.
    ax.set_theta_direction(-1)
    ax.set_title(title)
    ax.set_yticklabels([])

    if save_path:
        fig.savefig(str(save_path), dpi=150, bbox_inches="tight")
    else:
        plt.show()
    plt.close(fig)
    return fig


def plot_wall_layout(
    solid: np.ndarray,
    pillars: np.ndarray,
    title: str = "Wall Layout",
    save_path: Path | None = None,
):
    """Plot the resolved wall cells (rows top-down) with pillar columns highlighted."""
    import matplotlib.pyplot as plt

    image = np.where(solid, 1.0, 0.0)
    image[:, pillars] = np.where(solid[:, pillars], 0.6, 0.0)

    fig, ax = plt.subplots(figsize=(12, 4))
    ax.imshow(image, cmap="gray_r", aspect="auto", interpolation="nearest")
    ax.set_title(title)
    ax.set_xlabel("Column (angle)")
    ax.set_ylabel("Row (top of wall = 0)")

    if save_path:
        fig.savefig(str(save_path), dpi=150, bbox_inches="tight")
    else:
        plt.show()
    plt.close(fig)
    return fig
