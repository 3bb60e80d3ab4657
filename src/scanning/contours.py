"""
Contour tracing on edge-magnitude rasters.

A contour is one 8-connected component of pixels whose gradient magnitude
exceeds a threshold. Components are collected with an explicit stack, so
large images never hit the interpreter recursion limit.
"""

import logging
from typing import List, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)

# (x, y) pixel coordinates
Contour = List[Tuple[int, int]]

_NEIGHBOR_OFFSETS = [
    (dx, dy) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dx, dy) != (0, 0)
]


def trace_contour(
    mask: np.ndarray, visited: np.ndarray, start_x: int, start_y: int
) -> Contour:
    """
    Collect the 8-connected component of `mask` containing (start_x, start_y).

    Pixels are returned in visit order (depth-first from an explicit
    stack), not in geometric order. `visited` is updated in place.

    Args:
        mask: (H, W) boolean array of above-threshold pixels.
        visited: (H, W) boolean array shared across calls.
        start_x: Seed column.
        start_y: Seed row.

    Returns:
        List of (x, y) pixel coordinates.
    """
    height, width = mask.shape
    contour: Contour = []
    stack = [(start_x, start_y)]

    while stack:
        x, y = stack.pop()
        if visited[y, x]:
            continue
        visited[y, x] = True
        contour.append((x, y))

        for dx, dy in _NEIGHBOR_OFFSETS:
            nx = x + dx
            ny = y + dy
            if 0 <= nx < width and 0 <= ny < height:
                if mask[ny, nx] and not visited[ny, nx]:
                    stack.append((nx, ny))

    return contour


def find_contours(
    edges: np.ndarray, threshold: float = 100, min_length: int = 50
) -> List[Contour]:
    """
    Find connected high-gradient regions in an edge raster.

    Seeds are taken in raster scan order from unvisited pixels whose red
    channel exceeds `threshold`. Components with fewer than `min_length`
    pixels are discarded.

    Args:
        edges: (H, W, 4) edge-magnitude raster (or (H, W) magnitude array).
        threshold: Strict lower bound on magnitude.
        min_length: Minimum number of pixels per contour.

    Returns:
        Contours sorted by pixel count, largest first.
    """
    magnitude = edges[:, :, 0] if edges.ndim == 3 else edges
    mask = magnitude > threshold
    visited = np.zeros(mask.shape, dtype=bool)

    contours: List[Contour] = []
    discarded = 0
    # np.argwhere yields (row, col) pairs in raster order
    for y, x in np.argwhere(mask):
        if visited[y, x]:
            continue
        contour = trace_contour(mask, visited, int(x), int(y))
        if len(contour) >= min_length:
            contours.append(contour)
        else:
            discarded += 1

    contours.sort(key=len, reverse=True)

    logger.debug(
        f"Found {len(contours)} contours above threshold {threshold} "
        f"({discarded} shorter than {min_length} discarded)"
    )
    return contours


def contour_outline(contour: Contour, shape: Tuple[int, int]) -> np.ndarray:
    """
    Order a contour's outer boundary geometrically.

    A traced contour is a pixel set in visit order. Polygon simplification
    needs a path that walks around the shape, so the component is
    rasterized and its outer boundary followed with OpenCV border tracing.

    Args:
        contour: Pixel coordinates of one connected component.
        shape: (height, width) of the source image.

    Returns:
        (N, 2) float64 array of boundary points in traversal order, starting
        at the top-most, left-most pixel. Empty when the contour is empty.
    """
    if not contour:
        return np.empty((0, 2), dtype=np.float64)

    pts = np.asarray(contour, dtype=np.int32)
    component = np.zeros(shape[:2], dtype=np.uint8)
    component[pts[:, 1], pts[:, 0]] = 255

    boundaries, _ = cv2.findContours(
        component, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_NONE
    )
    if not boundaries:
        return pts.astype(np.float64)

    outer = max(boundaries, key=len)
    return outer.reshape(-1, 2).astype(np.float64)
