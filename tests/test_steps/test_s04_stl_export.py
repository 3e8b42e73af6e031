"""Tests for S04: STL export (triangles -> binary / ASCII STL)."""

import struct
from pathlib import Path

import numpy as np
import pytest

from shadecaster.core.errors import SerializationFailure
from shadecaster.steps.s03_mesh_build._mesh_builder import build_lamp_mesh
from shadecaster.steps.s04_stl_export._stl_codec import (
    DEFAULT_HEADER,
    StlArtifact,
    export_stl,
    format_stl_number,
    read_ascii_stl,
    read_binary_stl,
    to_ascii_stl,
    to_binary_stl,
)
from shadecaster.steps.s04_stl_export.config import StlExportConfig
from shadecaster.steps.s04_stl_export.contracts import StlExportInput
from shadecaster.steps.s04_stl_export.step import StlExportStep
from shadecaster.utils.geometry import triangle_normals


def _has_trimesh() -> bool:
    try:
        import trimesh  # noqa: F401
        return True
    except ImportError:
        return False


needs_trimesh = pytest.mark.skipif(not _has_trimesh(), reason="trimesh not installed")

UNIT_TRIANGLE = np.array([[[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]])


@pytest.fixture
def lamp_triangles(solid_mask, default_geometry) -> np.ndarray:
    return build_lamp_mesh(solid_mask, default_geometry)


class TestBinaryStl:
    def test_size_invariant(self, lamp_triangles):
        data = to_binary_stl(lamp_triangles)
        assert len(data) == 84 + 50 * len(lamp_triangles)

    def test_header_and_count(self, lamp_triangles):
        data = to_binary_stl(lamp_triangles)
        assert data[:80].rstrip(b"\x00") == DEFAULT_HEADER.encode("ascii")
        assert data[80 - 1:80] == b"\x00"
        assert struct.unpack("<I", data[80:84])[0] == len(lamp_triangles)

    def test_record_layout(self):
        data = to_binary_stl(UNIT_TRIANGLE)
        values = struct.unpack("<12fH", data[84:134])
        assert values[:3] == (0.0, 0.0, 1.0)
        assert values[3:12] == (0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0, 0.0)
        assert values[12] == 0

    def test_custom_header_truncated(self):
        data = to_binary_stl(UNIT_TRIANGLE, header="x" * 100)
        assert data[:80] == b"x" * 80
        assert len(data) == 134

    def test_empty_mesh(self):
        data = to_binary_stl(np.zeros((0, 3, 3)))
        assert len(data) == 84
        assert struct.unpack("<I", data[80:84])[0] == 0

    def test_degenerate_triangle_zero_normal(self):
        flat = np.array([[[0.0, 0.0, 0.0], [1.0, 1.0, 1.0], [2.0, 2.0, 2.0]]])
        _, normals = read_binary_stl(to_binary_stl(flat))
        assert np.array_equal(normals[0], np.zeros(3))

    def test_bad_shape(self):
        with pytest.raises(SerializationFailure):
            to_binary_stl(np.zeros((3, 4)))

    def test_round_trip(self, lamp_triangles):
        data = to_binary_stl(lamp_triangles)
        triangles, normals = read_binary_stl(data)

        assert len(triangles) == len(lamp_triangles)
        np.testing.assert_allclose(triangles, lamp_triangles, atol=1e-5)
        np.testing.assert_allclose(normals, triangle_normals(lamp_triangles), atol=1e-5)

        again = to_binary_stl(triangles)
        assert len(again) == len(data)
        np.testing.assert_allclose(read_binary_stl(again)[1], normals, atol=1e-5)

    def test_normals_are_unit(self, lamp_triangles):
        _, normals = read_binary_stl(to_binary_stl(lamp_triangles))
        np.testing.assert_allclose(np.linalg.norm(normals, axis=1), 1.0, atol=1e-4)

    def test_truncated_buffer(self, lamp_triangles):
        data = to_binary_stl(lamp_triangles)
        with pytest.raises(SerializationFailure, match="Size mismatch"):
            read_binary_stl(data[:-1])
        with pytest.raises(SerializationFailure, match="too small"):
            read_binary_stl(data[:50])


class TestAsciiStl:
    @pytest.mark.parametrize("value, expected", [
        (1.5, "1.5"),
        (2.0, "2"),
        (100.0, "100"),
        (-3.25, "-3.25"),
        (0.1234567, "0.123457"),
        (0.0, "0"),
        (-0.0, "0"),
        (1e-11, "0"),
        (-1e-7, "0"),
        (float("nan"), "0"),
        (float("inf"), "0"),
    ])
    def test_format_number(self, value, expected):
        assert format_stl_number(value) == expected

    def test_exact_text(self):
        expected = (
            "solid shadecaster\n"
            "  facet normal 0 0 1\n"
            "    outer loop\n"
            "      vertex 0 0 0\n"
            "      vertex 1 0 0\n"
            "      vertex 0 1 0\n"
            "    endloop\n"
            "  endfacet\n"
            "endsolid shadecaster\n"
        )
        assert to_ascii_stl(UNIT_TRIANGLE) == expected

    def test_custom_name(self):
        text = to_ascii_stl(UNIT_TRIANGLE, name="lamp")
        assert text.startswith("solid lamp\n")
        assert text.endswith("endsolid lamp\n")

    def test_round_trip(self, lamp_triangles):
        triangles, normals, name = read_ascii_stl(to_ascii_stl(lamp_triangles))
        assert name == "shadecaster"
        assert len(triangles) == len(lamp_triangles)
        np.testing.assert_allclose(triangles, lamp_triangles, atol=1e-5)
        np.testing.assert_allclose(normals, triangle_normals(lamp_triangles), atol=1e-5)

    def test_malformed(self):
        with pytest.raises(SerializationFailure):
            read_ascii_stl("facet normal 0 0 1\n")
        with pytest.raises(SerializationFailure):
            read_ascii_stl("solid x\n  facet normal 0 0 1\n      vertex 0 0 0\nendsolid x\n")


class TestArtifact:
    def test_export_binary(self, lamp_triangles):
        artifact = export_stl(lamp_triangles)
        assert isinstance(artifact, StlArtifact)
        assert artifact.media_type == "application/sla"
        assert artifact.filename == "shadow-lamp.stl"
        assert artifact.size == 84 + 50 * len(lamp_triangles)

    def test_export_ascii(self):
        artifact = export_stl(UNIT_TRIANGLE, "ascii", name="lamp")
        assert artifact.format == "ascii"
        assert artifact.data.startswith(b"solid lamp")

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            export_stl(UNIT_TRIANGLE, "obj")

    def test_save_creates_parent(self, tmp_path: Path):
        artifact = export_stl(UNIT_TRIANGLE)
        path = artifact.save(tmp_path / "out" / "lamp.stl")
        assert path.read_bytes() == artifact.data


class TestStlExportStep:
    def _mesh_file(self, data_root: Path, triangles: np.ndarray) -> Path:
        path = data_root / "interim" / "mesh_build" / "triangles.npy"
        path.parent.mkdir(parents=True)
        np.save(path, triangles)
        return path

    def test_binary(self, data_root: Path, lamp_triangles):
        step = StlExportStep(config=StlExportConfig(), data_root=data_root)
        output = step.execute(StlExportInput(mesh_path=self._mesh_file(data_root, lamp_triangles)))

        assert output.stl_path == data_root / "processed" / "shadow-lamp.stl"
        assert output.format == "binary"
        assert output.num_triangles == len(lamp_triangles)
        assert output.size_bytes == output.stl_path.stat().st_size == 84 + 50 * len(lamp_triangles)
        assert output.media_type == "application/sla"

    def test_ascii(self, data_root: Path, lamp_triangles):
        cfg = StlExportConfig(format="ascii", filename="lamp_ascii.stl", solid_name="lamp")
        step = StlExportStep(config=cfg, data_root=data_root)
        output = step.execute(StlExportInput(mesh_path=self._mesh_file(data_root, lamp_triangles)))

        text = output.stl_path.read_text()
        assert text.startswith("solid lamp\n")
        assert text.count("endfacet") == len(lamp_triangles)

    def test_missing_mesh(self, data_root: Path):
        step = StlExportStep(config=StlExportConfig(), data_root=data_root)
        with pytest.raises(ValueError):
            step.execute(StlExportInput(mesh_path=data_root / "missing.npy"))

    @needs_trimesh
    def test_trimesh_reads_output(self, data_root: Path, lamp_triangles):
        import trimesh

        step = StlExportStep(config=StlExportConfig(), data_root=data_root)
        output = step.execute(StlExportInput(mesh_path=self._mesh_file(data_root, lamp_triangles)))
        mesh = trimesh.load_mesh(str(output.stl_path))
        assert len(mesh.faces) == len(lamp_triangles)
        assert mesh.is_watertight
        assert mesh.volume > 0
