"""
Unit tests for contour tracing.
"""

import numpy as np

from src.scanning.contours import contour_outline, find_contours, trace_contour
from tests.conftest import make_rgba


def _edge_raster(mask):
    """Wrap a boolean mask as an RGBA edge raster with magnitude 255 on True."""
    raster = make_rgba(*mask.shape)
    raster[mask, :3] = 255
    return raster


class TestTraceContour:
    """Tests for trace_contour function."""

    def test_collects_8_connected_component(self):
        mask = np.zeros((5, 5), dtype=bool)
        mask[0, 0] = mask[1, 1] = mask[2, 2] = True  # diagonal chain
        mask[4, 4] = True  # separate pixel
        visited = np.zeros_like(mask)

        contour = trace_contour(mask, visited, 0, 0)

        assert sorted(contour) == [(0, 0), (1, 1), (2, 2)]
        assert not visited[4, 4]

    def test_large_region_does_not_recurse(self):
        """A component far larger than the recursion limit is traced fully."""
        mask = np.ones((200, 200), dtype=bool)
        visited = np.zeros_like(mask)

        contour = trace_contour(mask, visited, 0, 0)

        assert len(contour) == 200 * 200
        assert visited.all()


class TestFindContours:
    """Tests for find_contours function."""

    def test_sorted_largest_first(self):
        mask = np.zeros((100, 100), dtype=bool)
        mask[10, 10:80] = True  # 70 px
        mask[50, 10:90] = True  # 80 px
        mask[90, 10:70] = True  # 60 px

        contours = find_contours(_edge_raster(mask), threshold=100, min_length=50)

        assert [len(c) for c in contours] == [80, 70, 60]

    def test_short_contours_discarded(self):
        mask = np.zeros((60, 60), dtype=bool)
        mask[5, 5:54] = True  # 49 px
        mask[30, 5:55] = True  # 50 px

        contours = find_contours(_edge_raster(mask), threshold=100, min_length=50)

        assert len(contours) == 1
        assert len(contours[0]) == 50

    def test_threshold_is_strict(self):
        raster = make_rgba(10, 80)
        raster[5, 5:70, :3] = 100

        assert find_contours(raster, threshold=100, min_length=10) == []
        assert len(find_contours(raster, threshold=99, min_length=10)) == 1

    def test_accepts_2d_magnitude(self):
        magnitude = np.zeros((20, 80), dtype=np.uint8)
        magnitude[10, 5:75] = 200

        contours = find_contours(magnitude, threshold=100, min_length=50)

        assert len(contours) == 1

    def test_blank_image(self):
        assert find_contours(make_rgba(30, 30), threshold=100, min_length=1) == []


class TestContourOutline:
    """Tests for contour_outline function."""

    def test_ring_outline_is_outer_boundary(self):
        mask = np.zeros((50, 60), dtype=np.uint8)
        mask[10:40, 10:50] = 255
        mask[12:38, 12:48] = 0
        ys, xs = np.nonzero(mask)
        contour = list(zip(xs.tolist(), ys.tolist()))

        outline = contour_outline(contour, mask.shape)

        assert outline.shape[1] == 2
        assert outline[:, 0].min() == 10
        assert outline[:, 0].max() == 49
        assert outline[:, 1].min() == 10
        assert outline[:, 1].max() == 39
        # consecutive boundary points are 8-neighbors
        steps = np.abs(np.diff(outline, axis=0)).max(axis=1)
        assert steps.max() <= 1

    def test_empty_contour(self):
        assert contour_outline([], (10, 10)).shape == (0, 2)
