"""Tests for shadecaster.utils.image."""

from pathlib import Path

import numpy as np
import pytest

from shadecaster.core.errors import EmptyImage, InvalidImage, InvalidResolution
from shadecaster.utils.image import (
    load_rgba,
    mask_resolution,
    resize_square,
    rgba_from_buffer,
    to_rgba,
)


class TestMaskResolution:
    @pytest.mark.parametrize("angular, expected", [
        (3, 240),
        (20, 240),
        (30, 360),
        (60, 720),
        (64, 720),
        (360, 720),
    ])
    def test_oversampled_floored_and_capped(self, angular, expected):
        assert mask_resolution(angular) == expected

    def test_custom_bounds(self):
        assert mask_resolution(8, oversample=3, min_resolution=12, max_resolution=100) == 24

    @pytest.mark.parametrize("angular", [2, 0, -5])
    def test_below_three_rejected(self, angular):
        with pytest.raises(InvalidResolution):
            mask_resolution(angular)


class TestBuffers:
    def test_rgba_from_buffer(self):
        raw = bytes(range(2 * 3 * 4))
        rgba = rgba_from_buffer(raw, width=3, height=2)
        assert rgba.shape == (2, 3, 4)
        assert rgba.dtype == np.uint8
        assert list(rgba[0, 1]) == [4, 5, 6, 7]

    def test_wrong_length(self):
        with pytest.raises(InvalidImage):
            rgba_from_buffer(b"\x00" * 10, width=2, height=2)

    def test_zero_dimension(self):
        with pytest.raises(EmptyImage):
            rgba_from_buffer(b"", width=0, height=4)


class TestConversion:
    def test_gray_to_rgba(self):
        gray = np.full((4, 5), 90, dtype=np.uint8)
        rgba = to_rgba(gray)
        assert rgba.shape == (4, 5, 4)
        assert list(rgba[0, 0]) == [90, 90, 90, 255]

    def test_bgr_channel_order(self):
        bgr = np.zeros((2, 2, 3), dtype=np.uint8)
        bgr[..., 0] = 255  # blue
        rgba = to_rgba(bgr)
        assert list(rgba[0, 0]) == [0, 0, 255, 255]

    def test_sixteen_bit(self):
        gray = np.full((2, 2), 65535, dtype=np.uint16)
        assert list(to_rgba(gray)[0, 0]) == [255, 255, 255, 255]

    def test_load_rgba_roundtrip(self, silhouette_png: Path, silhouette_rgba: np.ndarray):
        loaded = load_rgba(silhouette_png)
        np.testing.assert_array_equal(loaded, silhouette_rgba)

    def test_load_rgba_undecodable(self, tmp_path: Path):
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"not an image")
        with pytest.raises(InvalidImage):
            load_rgba(bad)

    def test_resize_square(self, silhouette_rgba):
        out = resize_square(silhouette_rgba, 48)
        assert out.shape == (48, 48, 4)
        assert resize_square(silhouette_rgba, 120) is silhouette_rgba
