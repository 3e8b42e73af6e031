"""Error taxonomy for the image -> mask -> mesh -> STL pipeline.

Each stage raises its own error type at its boundary. None of them is
retried internally; callers re-run with edited parameters.
"""

from __future__ import annotations


class ShadecasterError(Exception):
    """Base class for all pipeline errors."""


class InvalidImage(ShadecasterError, ValueError):
    """Pixel buffer is missing, malformed or has no data."""


class EmptyImage(InvalidImage):
    """Pixel buffer has a zero width or height."""


class InvalidParameter(ShadecasterError, ValueError):
    """A processing parameter (threshold, resolution) is not a usable number."""


class DegenerateMask(ShadecasterError, ValueError):
    """Occupancy field is uniformly solid or uniformly empty."""


class DegenerateImage(DegenerateMask):
    """Source image thresholds to a single value everywhere."""


class InvalidResolution(ShadecasterError, ValueError):
    """Angular or radial resolution below the 3-cell minimum."""


class InvalidGeometry(ShadecasterError, ValueError):
    """Geometry parameters are non-finite, non-positive or inconsistent."""


class SerializationFailure(ShadecasterError, RuntimeError):
    """Serialized STL does not match its declared layout."""
