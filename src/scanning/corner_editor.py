"""
Corner updates for the interactive outline editor.

The UI renders the outline as four draggable handles and calls
`update_corner` on every drag. Positions are clamped to the image; the
outline is not re-validated, so the user may produce a concave or
self-intersecting shape on purpose.
"""

import logging
from typing import Union

from src.scanning.types import CornerRole, PointLike, Quadrilateral, as_point

logger = logging.getLogger(__name__)


def update_corner(
    quad: Quadrilateral,
    corner_index: Union[CornerRole, int],
    new_point: PointLike,
    width: int,
    height: int,
) -> Quadrilateral:
    """
    Move one corner of an outline.

    Args:
        quad: Current outline.
        corner_index: 0-3 in TL, TR, BR, BL order (or a CornerRole).
        new_point: Requested position in image pixels.
        width: Image width; x is clamped to [0, width - 1].
        height: Image height; y is clamped to [0, height - 1].

    Returns:
        New Quadrilateral with the corner replaced. Other corners and all
        role assignments are unchanged.

    Raises:
        ValueError: If corner_index is outside 0-3 or the image is empty.

    Example:
        >>> quad = default_quadrilateral(100, 100)
        >>> update_corner(quad, CornerRole.TOP_LEFT, (-20, 40), 100, 100).top_left
        Point(x=0.0, y=40.0)
    """
    try:
        role = CornerRole(int(corner_index))
    except ValueError as e:
        raise ValueError(f"Corner index must be 0-3, got {corner_index}") from e

    if width < 1 or height < 1:
        raise ValueError(f"Invalid image size {width}x{height}")

    point = as_point(new_point).clamped(width, height)
    logger.debug(f"Moved {role.name} to ({point.x:.1f}, {point.y:.1f})")
    return quad.with_corner(role, point)
