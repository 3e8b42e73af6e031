"""Geometry parameter validation and the dimensions derived from it.

All lengths are millimetres. The lamp stands on its base at z=0 with the
vertical axis through the origin:

    z = 0                  base bottom
    z = t                  base top / wall bottom
    z = t + wall_height    wall top / dome start
    z = wall_top + dome_h  dome top, where the mounting pocket opens
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from shadecaster.core.contracts import GeometryParams
from shadecaster.core.errors import InvalidGeometry

logger = logging.getLogger(__name__)

MIN_PILLARS = 3
MIN_CLEARANCE = 0.4
MIN_LIP_WIDTH = 2.0


def validate_geometry(params: GeometryParams) -> None:
    """Reject non-finite, non-positive or mutually inconsistent parameters."""
    values = params.model_dump()
    bad = [name for name, value in values.items() if not math.isfinite(value)]
    if bad:
        raise InvalidGeometry(f"Geometry parameters must be valid numbers: {', '.join(bad)}")

    if params.dome_diameter <= 0 or params.dome_height <= 0:
        raise InvalidGeometry("Dome dimensions must be positive.")
    if params.wall_thickness <= 0:
        raise InvalidGeometry("Wall thickness must be greater than 0.")
    if params.wall_height <= 0:
        raise InvalidGeometry("Wall height must be greater than 0.")
    if params.led_mount_diameter <= 0 or params.led_mount_height <= 0:
        raise InvalidGeometry("Tea light mount dimensions must be positive.")
    if params.pillar_count < MIN_PILLARS:
        raise InvalidGeometry(f"Pillar count must be at least {MIN_PILLARS}.")

    radius = params.dome_diameter / 2
    mount_radius = params.led_mount_diameter / 2
    t = params.wall_thickness
    if t >= radius:
        raise InvalidGeometry(
            "Wall thickness must be smaller than the dome radius. "
            "Lower the wall thickness or raise the dome diameter."
        )
    if mount_radius + t >= radius:
        raise InvalidGeometry(
            "Tea light hole must be smaller than the dome diameter. "
            "Lower the mount diameter or raise the dome diameter."
        )
    if mount_radius <= t:
        raise InvalidGeometry("Tea light mount diameter must exceed twice the wall thickness.")
    if params.dome_height <= 3 * t:
        raise InvalidGeometry(
            "Dome height must exceed three times the wall thickness to fit the "
            "mounting pocket. Raise the dome height or lower the wall thickness."
        )


@dataclass(frozen=True)
class LampDimensions:
    """Radii and heights derived once from validated GeometryParams."""

    outer_radius: float
    inner_radius: float
    thickness: float
    wall_bottom: float
    wall_top: float
    dome_top: float
    dome_height: float
    bore_radius: float  # 0 for a closed base
    pocket_radius: float
    hole_radius: float
    pocket_bottom: float
    throat_bottom: float
    dome_top_outer_radius: float
    pillar_count: int

    @property
    def inner_dome_height(self) -> float:
        return self.throat_bottom - self.wall_top

    @classmethod
    def from_params(cls, params: GeometryParams, open_base: bool = True) -> "LampDimensions":
        t = params.wall_thickness
        outer_radius = params.dome_diameter / 2
        inner_radius = outer_radius - t
        wall_top = t + params.wall_height
        dome_top = wall_top + params.dome_height
        mount_radius = params.led_mount_diameter / 2

        clearance = max(MIN_CLEARANCE, t * 0.25)
        pocket_radius = mount_radius + clearance
        lip_width = min(max(t * 1.5, MIN_LIP_WIDTH), mount_radius * 0.25)
        hole_max = max(inner_radius - t, t)
        hole_radius = min(max(mount_radius - lip_width, t), hole_max)

        # Leave one shell thickness for the throat and one for the inner dome.
        pocket_depth = min(max(params.led_mount_height, t), params.dome_height - 2 * t)
        pocket_bottom = dome_top - pocket_depth

        return cls(
            outer_radius=outer_radius,
            inner_radius=inner_radius,
            thickness=t,
            wall_bottom=t,
            wall_top=wall_top,
            dome_top=dome_top,
            dome_height=params.dome_height,
            bore_radius=mount_radius if open_base else 0.0,
            pocket_radius=pocket_radius,
            hole_radius=hole_radius,
            pocket_bottom=pocket_bottom,
            throat_bottom=pocket_bottom - t,
            dome_top_outer_radius=pocket_radius + t,
            pillar_count=max(MIN_PILLARS, int(round(params.pillar_count))),
        )
