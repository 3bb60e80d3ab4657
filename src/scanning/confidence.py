"""
Confidence scoring for detected document outlines.

The score rewards outlines that are close to square and cover a large part
of the frame:

    aspect_score = 1 - |w/h - 1|   if aspect_min <= w/h <= aspect_max, else 0
    size_score   = min(area_ratio / target_area_ratio, 1)
    confidence   = (aspect_weight * aspect_score + size_weight * size_score) * 100

where w and h are the outline's effective width and height and area_ratio is
w * h over the image area.
"""

import logging
from typing import Optional

from src.scanning.types import ConfidenceConfig, Quadrilateral

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_CONFIG = ConfidenceConfig(
    aspect_weight=0.6,
    size_weight=0.4,
    aspect_min=0.5,
    aspect_max=2.0,
    target_area_ratio=0.8,
)


def aspect_score(ratio: float, aspect_min: float = 0.5, aspect_max: float = 2.0) -> float:
    """Score in [0, 1] for how close a width/height ratio is to 1."""
    if not aspect_min <= ratio <= aspect_max:
        return 0.0
    return max(0.0, 1.0 - abs(ratio - 1.0))


def size_score(area_ratio: float, target_area_ratio: float = 0.8) -> float:
    """Score in [0, 1]; saturates once the area ratio reaches the target."""
    return min(area_ratio / target_area_ratio, 1.0)


def calculate_confidence(
    quad: Quadrilateral,
    width: int,
    height: int,
    config: Optional[ConfidenceConfig] = None,
) -> float:
    """
    Rate a detected outline from 0 to 100.

    Args:
        quad: Detected outline.
        width: Image width in pixels.
        height: Image height in pixels.
        config: Weights and bounds. Defaults to 0.6/0.4 with aspect
            bounds [0.5, 2.0] and a target area ratio of 0.8.

    Returns:
        Confidence in [0, 100].
    """
    config = config or DEFAULT_CONFIDENCE_CONFIG

    rect_width, rect_height = quad.dimensions()
    if rect_height == 0 or width * height == 0:
        return 0.0

    ratio = rect_width / rect_height
    area_ratio = (rect_width * rect_height) / (width * height)

    a_score = aspect_score(ratio, config.aspect_min, config.aspect_max)
    s_score = size_score(area_ratio, config.target_area_ratio)
    confidence = (a_score * config.aspect_weight + s_score * config.size_weight) * 100

    logger.debug(
        f"Confidence {confidence:.1f} (aspect={ratio:.2f} -> {a_score:.2f}, "
        f"area={area_ratio:.2f} -> {s_score:.2f})"
    )
    return confidence
