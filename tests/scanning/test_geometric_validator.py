"""
Unit tests for rectangle selection and geometric validation.
"""

import numpy as np
import pytest

from src.common.types import Point
from src.scanning.contours import find_contours
from src.scanning.filters import gaussian_blur, sobel_edges, to_grayscale
from src.scanning.geometric_validator import (
    calculate_aspect_ratio,
    default_quadrilateral,
    find_best_rectangle,
    is_valid_rectangle,
    is_within_bounds,
)
from src.scanning.types import Quadrilateral
from tests.conftest import make_rgba


def _contours_for(image):
    edges = sobel_edges(gaussian_blur(to_grayscale(image), 1))
    return find_contours(edges, threshold=100, min_length=50)


class TestCalculateAspectRatio:
    """Tests for calculate_aspect_ratio function."""

    def test_wide_rectangle(self):
        quad = Quadrilateral.from_points([(100, 100), (500, 100), (500, 200), (100, 200)])
        assert calculate_aspect_ratio(quad) == pytest.approx(4.0)

    def test_uses_longer_edges(self):
        # top 100, bottom 200, left/right ~100
        quad = Quadrilateral.from_points([(50, 0), (150, 0), (200, 100), (0, 100)])
        width, height = quad.dimensions()
        assert width == pytest.approx(200.0)
        assert calculate_aspect_ratio(quad) == pytest.approx(200.0 / height)

    def test_zero_height(self):
        quad = Quadrilateral.from_points([(5, 5)] * 4)
        with pytest.raises(ValueError, match="Height is zero"):
            calculate_aspect_ratio(quad)


class TestIsValidRectangle:
    """Tests for is_valid_rectangle function."""

    def test_large_rectangle_passes(self):
        quad = Quadrilateral.from_points([(10, 10), (90, 10), (90, 70), (10, 70)])
        assert is_valid_rectangle(quad, 100, 80)

    def test_rejects_narrow_width(self):
        # min(100, 80) * 0.2 = 16; width 15 is too small
        quad = Quadrilateral.from_points([(10, 10), (25, 10), (25, 70), (10, 70)])
        assert not is_valid_rectangle(quad, 100, 80)

    def test_rejects_short_height(self):
        quad = Quadrilateral.from_points([(10, 10), (90, 10), (90, 26), (10, 26)])
        assert not is_valid_rectangle(quad, 100, 80)

    def test_threshold_is_strict(self):
        quad = Quadrilateral.from_points([(10, 10), (26, 10), (26, 26), (10, 26)])
        assert not is_valid_rectangle(quad, 100, 80)
        assert is_valid_rectangle(quad, 100, 80, min_size_ratio=0.19)

    def test_rejects_point_outside_image(self):
        quad = Quadrilateral.from_points([(10, 10), (100, 10), (90, 70), (10, 70)])
        assert not is_within_bounds(quad, 100, 80)
        assert not is_valid_rectangle(quad, 100, 80)


class TestFindBestRectangle:
    """Tests for find_best_rectangle function."""

    def test_finds_white_rectangle(self, receipt_on_black):
        image, corners = receipt_on_black

        quad = find_best_rectangle(_contours_for(image), image.shape[:2])

        assert quad is not None
        np.testing.assert_allclose(quad.to_numpy(), corners, atol=3.0)

    def test_small_square_rejected(self, small_square_on_black):
        contours = _contours_for(small_square_on_black)

        assert len(contours) == 1
        assert find_best_rectangle(contours, small_square_on_black.shape[:2]) is None

    def test_no_contours(self):
        assert find_best_rectangle([], (100, 100)) is None

    def test_first_valid_contour_wins(self):
        """The larger outline is examined first and returned."""
        image = make_rgba(400, 400)
        image[40:360, 40:360, :3] = 255
        image[150:250, 150:250, :3] = 0

        quad = find_best_rectangle(_contours_for(image), image.shape[:2])

        assert quad is not None
        width, height = quad.dimensions()
        assert width > 300 and height > 300


class TestDefaultQuadrilateral:
    """Tests for default_quadrilateral function."""

    def test_five_percent_inset(self):
        quad = default_quadrilateral(200, 100)

        assert quad.top_left == Point(x=5, y=5)
        assert quad.top_right == Point(x=195, y=5)
        assert quad.bottom_right == Point(x=195, y=95)
        assert quad.bottom_left == Point(x=5, y=95)

    def test_custom_margin(self):
        quad = default_quadrilateral(400, 400, margin_ratio=0.1)
        assert quad.top_left == Point(x=40, y=40)
