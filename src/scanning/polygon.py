"""
Polyline simplification (Douglas-Peucker).
"""

import logging
from typing import Sequence, Union

import numpy as np

logger = logging.getLogger(__name__)

PointArray = Union[np.ndarray, Sequence[Sequence[float]]]


def distance_to_segment(point: np.ndarray, start: np.ndarray, end: np.ndarray) -> float:
    """
    Distance from `point` to the segment start-end.

    The projection is clamped to the segment, so points beyond either end
    measure to that endpoint. A zero-length segment measures to `start`.
    """
    seg = end - start
    rel = point - start
    length_sq = float(seg[0] * seg[0] + seg[1] * seg[1])

    if length_sq == 0.0:
        return float(np.hypot(rel[0], rel[1]))

    t = float(rel[0] * seg[0] + rel[1] * seg[1]) / length_sq
    t = min(max(t, 0.0), 1.0)
    dx = rel[0] - t * seg[0]
    dy = rel[1] - t * seg[1]
    return float(np.hypot(dx, dy))


def douglas_peucker(points: PointArray, epsilon: float) -> np.ndarray:
    """
    Simplify a polyline with the Douglas-Peucker algorithm.

    Both endpoints are kept. Between two kept points, the interior point
    farthest from their chord is kept if its distance is strictly greater
    than `epsilon`, and both halves are processed the same way. Ranges are
    processed from an explicit stack.

    Args:
        points: (N, 2) polyline.
        epsilon: Distance tolerance in pixels.

    Returns:
        (M, 2) float64 array of the kept points, in input order. Inputs
        with fewer than 3 points are returned unchanged.

    Example:
        >>> douglas_peucker([[0, 0], [5, 0.2], [10, 0]], epsilon=1.0).tolist()
        [[0.0, 0.0], [10.0, 0.0]]
    """
    pts = np.asarray(points, dtype=np.float64)
    if len(pts) < 3:
        return pts

    keep = np.zeros(len(pts), dtype=bool)
    keep[0] = keep[-1] = True
    ranges = [(0, len(pts) - 1)]

    while ranges:
        first, last = ranges.pop()
        if last - first < 2:
            continue

        start, end = pts[first], pts[last]
        max_distance = 0.0
        max_index = first
        for i in range(first + 1, last):
            distance = distance_to_segment(pts[i], start, end)
            if distance > max_distance:
                max_distance = distance
                max_index = i

        if max_distance > epsilon:
            keep[max_index] = True
            ranges.append((first, max_index))
            ranges.append((max_index, last))

    return pts[keep]


def approximate_polygon(
    points: PointArray, epsilon: float, closed: bool = False
) -> np.ndarray:
    """
    Reduce a contour to its polygon vertices.

    Args:
        points: (N, 2) contour points.
        epsilon: Douglas-Peucker tolerance in pixels.
        closed: The contour wraps around to its first point. The final
            vertex is then dropped when it lies within `epsilon` of the
            first one, since both mark the same corner.

    Returns:
        (M, 2) float64 array of polygon vertices.
    """
    simplified = douglas_peucker(points, epsilon)

    if closed and len(simplified) > 3:
        if np.hypot(*(simplified[-1] - simplified[0])) <= epsilon:
            simplified = simplified[:-1]

    logger.debug(
        f"Simplified contour from {len(points)} to {len(simplified)} points "
        f"(epsilon={epsilon})"
    )
    return simplified
