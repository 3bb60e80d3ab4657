"""
Unit tests for the shared ImageBuffer and Point types.
"""

import numpy as np
import pytest
from pydantic import ValidationError

from src.common.types import ImageBuffer, Point


class TestImageBuffer:
    def test_rgb_promoted_to_rgba(self):
        rgb = np.full((4, 5, 3), 7, dtype=np.uint8)

        rgba = ImageBuffer(data=rgb).to_rgba()

        assert rgba.shape == (4, 5, 4)
        assert np.all(rgba[:, :, :3] == 7)
        assert np.all(rgba[:, :, 3] == 255)

    def test_grayscale_replicated(self):
        gray = np.arange(12, dtype=np.uint8).reshape(3, 4)

        rgba = ImageBuffer(data=gray).to_rgba()

        for channel in range(3):
            np.testing.assert_array_equal(rgba[:, :, channel], gray)
        assert np.all(rgba[:, :, 3] == 255)

    def test_single_channel(self):
        data = np.full((2, 2, 1), 9, dtype=np.uint8)
        assert ImageBuffer(data=data).to_rgba()[0, 0].tolist() == [9, 9, 9, 255]

    def test_rgba_is_copied(self):
        rgba = np.zeros((2, 2, 4), dtype=np.uint8)

        copy = ImageBuffer(data=rgba).to_rgba()
        copy[0, 0, 0] = 1

        assert rgba[0, 0, 0] == 0

    def test_properties(self):
        buffer = ImageBuffer(data=np.zeros((3, 8, 4), dtype=np.uint8))

        assert (buffer.height, buffer.width, buffer.channels) == (3, 8, 4)

    @pytest.mark.parametrize(
        "data",
        [
            np.zeros((0, 4, 4), dtype=np.uint8),
            np.zeros((4, 4, 2), dtype=np.uint8),
            np.zeros((4, 4, 4), dtype=np.float32),
            np.zeros((2, 2, 2, 2), dtype=np.uint8),
        ],
    )
    def test_invalid_arrays(self, data):
        with pytest.raises(ValidationError):
            ImageBuffer(data=data)


class TestPoint:
    def test_coordinates_become_float(self):
        point = Point(x=np.int32(3), y=4)
        assert point.to_tuple() == (3.0, 4.0)

    def test_rejects_non_numeric(self):
        with pytest.raises(ValidationError):
            Point(x="a", y=1)

    def test_equality_and_hash(self):
        assert Point(x=1, y=2) == Point(x=1.0, y=2.0)
        assert len({Point(x=1, y=2), Point(x=1.0, y=2.0)}) == 1
        assert Point(x=1, y=2) != (1, 2)

    def test_distance(self):
        assert Point(x=0, y=0).distance_to(Point(x=3, y=4)) == pytest.approx(5.0)

    def test_clamped(self):
        assert Point(x=-5, y=500).clamped(100, 80) == Point(x=0, y=79)
        assert Point(x=12.5, y=7).clamped(100, 80) == Point(x=12.5, y=7)

    def test_from_numpy_shape(self):
        assert Point.from_numpy(np.array([1.5, 2.5])) == Point(x=1.5, y=2.5)
        with pytest.raises(ValueError):
            Point.from_numpy(np.zeros(3))
