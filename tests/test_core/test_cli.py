"""Tests for the Typer CLI."""

from pathlib import Path

import cv2
import numpy as np
import pytest
import yaml
from typer.testing import CliRunner

from shadecaster.cli import app

runner = CliRunner()


@pytest.fixture
def pipeline_yaml(tmp_path: Path) -> Path:
    config = {
        "project_name": "cli_test",
        "data_root": str(tmp_path / "data"),
        "steps": [
            {"name": "s01_occupancy", "module": "shadecaster.steps.s01_occupancy",
             "config_file": "missing.yaml"},
            {"name": "s02_polar_mask", "module": "shadecaster.steps.s02_polar_mask",
             "config_file": "missing.yaml", "depends_on": ["s01_occupancy"], "enabled": False},
        ],
    }
    path = tmp_path / "pipeline.yaml"
    with open(path, "w") as f:
        yaml.dump(config, f)
    return path


class TestInfo:
    def test_lists_steps(self, pipeline_yaml: Path):
        result = runner.invoke(app, ["info", "--config", str(pipeline_yaml)])
        assert result.exit_code == 0
        assert "cli_test" in result.output


class TestRunStep:
    def test_unknown_step(self, pipeline_yaml: Path):
        result = runner.invoke(app, ["run-step", "s09_nothing", "--config", str(pipeline_yaml)])
        assert result.exit_code == 1

    def test_missing_required_input(self, pipeline_yaml: Path):
        result = runner.invoke(app, ["run-step", "s01_occupancy", "--config", str(pipeline_yaml)])
        assert result.exit_code == 1
        assert "image_path" in result.output


class TestGenerateAndInspect:
    def test_generate_then_inspect(self, tmp_path: Path, silhouette_png: Path):
        out = tmp_path / "lamp.stl"
        result = runner.invoke(app, ["generate", str(silhouette_png), "-o", str(out), "--resolution", "3"])
        assert result.exit_code == 0, result.output
        assert out.exists()

        count = int.from_bytes(out.read_bytes()[80:84], "little")
        assert out.stat().st_size == 84 + 50 * count

        result = runner.invoke(app, ["inspect", str(out)])
        assert result.exit_code == 0, result.output

    def test_generate_ascii(self, tmp_path: Path, silhouette_png: Path):
        out = tmp_path / "lamp_ascii.stl"
        result = runner.invoke(app, [
            "generate", str(silhouette_png), "-o", str(out), "--resolution", "3", "--ascii",
        ])
        assert result.exit_code == 0, result.output
        assert out.read_text().startswith("solid shadecaster")

    def test_generate_degenerate_image(self, tmp_path: Path):
        white = tmp_path / "white.png"
        cv2.imwrite(str(white), np.full((40, 40, 3), 255, dtype=np.uint8))
        result = runner.invoke(app, ["generate", str(white), "-o", str(tmp_path / "x.stl")])
        assert result.exit_code == 1
        assert not (tmp_path / "x.stl").exists()

    def test_generate_invalid_geometry(self, tmp_path: Path, silhouette_png: Path):
        result = runner.invoke(app, [
            "generate", str(silhouette_png), "-o", str(tmp_path / "x.stl"), "--pillars", "2",
        ])
        assert result.exit_code == 1

    def test_inspect_open_mesh(self, tmp_path: Path):
        from shadecaster.steps.s04_stl_export._stl_codec import to_binary_stl

        path = tmp_path / "open.stl"
        path.write_bytes(to_binary_stl(np.array([[[0, 0, 0], [1, 0, 0], [0, 1, 0]]], dtype=float)))
        result = runner.invoke(app, ["inspect", str(path)])
        assert result.exit_code == 2

    def test_inspect_garbage(self, tmp_path: Path):
        path = tmp_path / "junk.stl"
        path.write_bytes(b"\x00" * 90)
        result = runner.invoke(app, ["inspect", str(path)])
        assert result.exit_code == 1
