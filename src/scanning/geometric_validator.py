"""
Rectangle selection and geometric validation for the Scanning module.

Turns traced contours into candidate document outlines, checks that a
candidate is inside the image and large enough, and provides the default
outline used when nothing qualifies.
"""

import logging
from typing import List, Optional, Tuple

from src.common.types import Point
from src.scanning.contours import Contour, contour_outline
from src.scanning.polygon import approximate_polygon
from src.scanning.types import Quadrilateral

logger = logging.getLogger(__name__)


def calculate_aspect_ratio(quad: Quadrilateral) -> float:
    """
    Calculate the aspect ratio (width/height) of a quadrilateral, using the
    longer of each pair of opposite edges.

    Raises:
        ValueError: If the height is zero.

    Example:
        >>> quad = Quadrilateral.from_points([(100, 100), (500, 100), (500, 200), (100, 200)])
        >>> calculate_aspect_ratio(quad)
        4.0
    """
    width, height = quad.dimensions()

    if height == 0:
        raise ValueError("Height is zero, cannot calculate aspect ratio")

    aspect_ratio = width / height
    logger.debug(f"Aspect ratio: {aspect_ratio:.2f}")
    return aspect_ratio


def is_within_bounds(quad: Quadrilateral, width: int, height: int) -> bool:
    """Check that every corner lies on the pixel grid: 0 <= x < width, 0 <= y < height."""
    return all(0 <= p.x < width and 0 <= p.y < height for p in quad.points())


def is_valid_rectangle(
    quad: Quadrilateral, width: int, height: int, min_size_ratio: float = 0.2
) -> bool:
    """
    Validate a candidate document outline.

    The outline must lie inside the image, and both its effective width
    (longer of top/bottom edges) and effective height (longer of
    left/right edges) must exceed `min_size_ratio * min(width, height)`.

    Args:
        quad: Candidate outline.
        width: Image width in pixels.
        height: Image height in pixels.
        min_size_ratio: Minimum side length as a fraction of the shorter
            image dimension.

    Returns:
        True if the candidate passes both checks.
    """
    if not is_within_bounds(quad, width, height):
        logger.debug(f"Rejected candidate outside {width}x{height} image: {quad}")
        return False

    rect_width, rect_height = quad.dimensions()
    min_size = min(width, height) * min_size_ratio

    if rect_width > min_size and rect_height > min_size:
        return True

    logger.debug(
        f"Rejected candidate {rect_width:.1f}x{rect_height:.1f}, "
        f"each side must exceed {min_size:.1f}px"
    )
    return False


def find_best_rectangle(
    contours: List[Contour],
    image_shape: Tuple[int, int],
    epsilon: float = 10.0,
    min_size_ratio: float = 0.2,
) -> Optional[Quadrilateral]:
    """
    Pick the first contour that simplifies to a valid 4-corner outline.

    Contours are tried in the given order (largest first from
    `find_contours`); the search stops at the first valid candidate.

    Args:
        contours: Traced contours, largest first.
        image_shape: (height, width) of the source image.
        epsilon: Douglas-Peucker tolerance in pixels.
        min_size_ratio: See `is_valid_rectangle`.

    Returns:
        The selected Quadrilateral, or None if no contour qualifies.
    """
    height, width = image_shape[:2]

    for index, contour in enumerate(contours):
        outline = contour_outline(contour, (height, width))
        polygon = approximate_polygon(outline, epsilon, closed=True)

        if len(polygon) != 4:
            logger.debug(
                f"Contour {index} ({len(contour)} px) simplified to "
                f"{len(polygon)} vertices, skipping"
            )
            continue

        quad = Quadrilateral.from_points(polygon)
        if is_valid_rectangle(quad, width, height, min_size_ratio):
            logger.info(f"Selected contour {index} ({len(contour)} px) as document outline")
            return quad

    logger.warning(f"No valid rectangle among {len(contours)} contours")
    return None


def default_quadrilateral(
    width: int, height: int, margin_ratio: float = 0.05
) -> Quadrilateral:
    """
    Outline inset from the image edges, used when detection finds nothing.

    The margin is `margin_ratio * min(width, height)` on every side.

    Example:
        >>> default_quadrilateral(200, 100).top_left
        Point(x=5.0, y=5.0)
    """
    margin = min(width, height) * margin_ratio
    return Quadrilateral(
        top_left=Point(x=margin, y=margin),
        top_right=Point(x=width - margin, y=margin),
        bottom_right=Point(x=width - margin, y=height - margin),
        bottom_left=Point(x=margin, y=height - margin),
    )
