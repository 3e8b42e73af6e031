"""STL codec: binary and ASCII writers plus readers for round-trip checks.

Binary layout (little-endian):

    80 bytes   header (ASCII, ignored by readers)
    uint32     triangle count N
    N x 50 bytes:
        3 x float32   normal
        9 x float32   vertices v1, v2, v3
        uint16        attribute byte count (always 0)

so a file holding N triangles is exactly ``84 + 50 * N`` bytes.
"""

from __future__ import annotations

import logging
import math
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

import numpy as np

from shadecaster.core.errors import SerializationFailure
from shadecaster.utils.geometry import triangle_normals

logger = logging.getLogger(__name__)

HEADER_SIZE = 80
COUNT_SIZE = 4
RECORD_SIZE = 50
MEDIA_TYPE = "application/sla"
DEFAULT_HEADER = "Binary STL generated by Shadecaster"
DEFAULT_SOLID_NAME = "shadecaster"
ZERO_EPS = 1e-10

STL_RECORD = np.dtype([
    ("normal", "<f4", (3,)),
    ("vertices", "<f4", (3, 3)),
    ("attribute", "<u2"),
])

StlFormat = Literal["binary", "ascii"]


def binary_stl_size(num_triangles: int) -> int:
    return HEADER_SIZE + COUNT_SIZE + RECORD_SIZE * num_triangles


def _as_triangles(triangles: np.ndarray) -> np.ndarray:
    tris = np.asarray(triangles, dtype=np.float64)
    if tris.size == 0:
        return tris.reshape(0, 3, 3)
    if tris.ndim != 3 or tris.shape[1:] != (3, 3):
        raise SerializationFailure(f"Expected (N, 3, 3) triangles, got shape {tris.shape}")
    return tris


def _header_bytes(header: str) -> bytes:
    raw = header.encode("ascii", errors="replace")[:HEADER_SIZE]
    return raw.ljust(HEADER_SIZE, b"\x00")


def to_binary_stl(triangles: np.ndarray, header: str = DEFAULT_HEADER) -> bytes:
    """Serialize triangles to the binary STL layout.

    Normals are recomputed from the winding (zero for degenerate triangles).

    Raises:
        SerializationFailure: malformed input, or a buffer whose length does
            not match ``84 + 50 * N``.
    """
    tris = _as_triangles(triangles)
    count = len(tris)
    if count > 0xFFFFFFFF:
        raise SerializationFailure(f"Too many triangles for binary STL: {count}")

    records = np.zeros(count, dtype=STL_RECORD)
    records["normal"] = triangle_normals(tris)
    records["vertices"] = tris

    data = _header_bytes(header) + struct.pack("<I", count) + records.tobytes()
    expected = binary_stl_size(count)
    if len(data) != expected:
        raise SerializationFailure(
            f"Binary STL size mismatch: expected {expected} bytes, got {len(data)}"
        )
    return data


def read_binary_stl(data: bytes) -> tuple[np.ndarray, np.ndarray]:
    """Parse a binary STL buffer.

    Returns:
        (triangles (N, 3, 3), normals (N, 3)) as float64.
    """
    if len(data) < HEADER_SIZE + COUNT_SIZE:
        raise SerializationFailure("File too small to be a valid binary STL.")
    (count,) = struct.unpack_from("<I", data, HEADER_SIZE)
    expected = binary_stl_size(count)
    if len(data) != expected:
        raise SerializationFailure(
            f"Size mismatch for binary STL. Expected {expected} bytes, got {len(data)}."
        )
    if count == 0:
        return np.zeros((0, 3, 3)), np.zeros((0, 3))
    records = np.frombuffer(data, dtype=STL_RECORD, count=count, offset=HEADER_SIZE + COUNT_SIZE)
    return (
        records["vertices"].astype(np.float64),
        records["normal"].astype(np.float64),
    )


def format_stl_number(value: float) -> str:
    """Fixed 6 decimals with trailing zeros stripped; near-zero becomes ``0``."""
    if not math.isfinite(value) or abs(value) < ZERO_EPS:
        return "0"
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def _format_vector(values) -> str:
    return " ".join(format_stl_number(float(v)) for v in values)


def to_ascii_stl(triangles: np.ndarray, name: str = DEFAULT_SOLID_NAME) -> str:
    """Serialize triangles to ASCII STL text (trailing newline included)."""
    tris = _as_triangles(triangles)
    normals = triangle_normals(tris)

    lines = [f"solid {name}"]
    for tri, normal in zip(tris, normals):
        lines.append(f"  facet normal {_format_vector(normal)}")
        lines.append("    outer loop")
        for vertex in tri:
            lines.append(f"      vertex {_format_vector(vertex)}")
        lines.append("    endloop")
        lines.append("  endfacet")
    lines.append(f"endsolid {name}")
    return "\n".join(lines) + "\n"


def read_ascii_stl(text: str) -> tuple[np.ndarray, np.ndarray, str]:
    """Parse ASCII STL text.

    Returns:
        (triangles (N, 3, 3), normals (N, 3), solid name).
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines or not lines[0].startswith("solid"):
        raise SerializationFailure("ASCII STL must start with 'solid'.")
    name = lines[0][len("solid"):].strip()

    normals: list[list[float]] = []
    vertices: list[list[float]] = []
    try:
        for line in lines[1:]:
            parts = line.split()
            if parts[0] == "facet":
                normals.append([float(v) for v in parts[2:5]])
            elif parts[0] == "vertex":
                vertices.append([float(v) for v in parts[1:4]])
    except (IndexError, ValueError) as e:
        raise SerializationFailure(f"Malformed ASCII STL line: {e}") from e

    if len(vertices) != 3 * len(normals):
        raise SerializationFailure(
            f"ASCII STL has {len(normals)} facets but {len(vertices)} vertices."
        )
    triangles = np.array(vertices, dtype=np.float64).reshape(-1, 3, 3)
    return triangles, np.array(normals, dtype=np.float64).reshape(-1, 3), name


@dataclass(frozen=True)
class StlArtifact:
    """Serialized STL ready to hand to a save/download collaborator."""

    data: bytes
    format: StlFormat
    filename: str = "shadow-lamp.stl"
    media_type: str = MEDIA_TYPE

    @property
    def size(self) -> int:
        return len(self.data)

    def save(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.data)
        return path


def export_stl(
    triangles: np.ndarray,
    fmt: StlFormat = "binary",
    *,
    name: str = DEFAULT_SOLID_NAME,
    header: str = DEFAULT_HEADER,
    filename: str = "shadow-lamp.stl",
) -> StlArtifact:
    """Serialize a mesh in the requested format and wrap it as an artifact."""
    if fmt == "ascii":
        data = to_ascii_stl(triangles, name=name).encode("ascii")
    elif fmt == "binary":
        data = to_binary_stl(triangles, header=header)
    else:
        raise ValueError(f"Unknown STL format: {fmt!r} (expected 'binary' or 'ascii')")
    logger.debug(f"Serialized {len(triangles)} triangles as {fmt} STL ({len(data)} bytes)")
    return StlArtifact(data=data, format=fmt, filename=filename)
