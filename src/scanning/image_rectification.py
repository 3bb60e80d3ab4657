"""
Image Rectification Utilities

Perspective correction of a document outline to an upright rectangle.
The outline's four corners are mapped exactly onto the four corners of the
output with a projective transform (homography).
"""

import logging
from typing import Union

import cv2
import numpy as np

from src.scanning.types import Quadrilateral

logger = logging.getLogger(__name__)

INTERPOLATION_FLAGS = {
    "linear": cv2.INTER_LINEAR,
    "cubic": cv2.INTER_CUBIC,
    "nearest": cv2.INTER_NEAREST,
    "lanczos": cv2.INTER_LANCZOS4,
}


def compute_homography(src: np.ndarray, dst: np.ndarray) -> np.ndarray:
    """
    Solve the 3x3 projective transform mapping 4 source points onto 4
    destination points.

    With h33 fixed to 1, each correspondence (x, y) -> (u, v) gives two
    linear equations in the remaining 8 unknowns:

        u = (h11 x + h12 y + h13) / (h31 x + h32 y + 1)
        v = (h21 x + h22 y + h23) / (h31 x + h32 y + 1)

    Args:
        src: (4, 2) source points.
        dst: (4, 2) destination points.

    Returns:
        (3, 3) float64 homography matrix.

    Raises:
        ValueError: If the shapes are wrong or the system is singular
            (three or more collinear source points).
    """
    src = np.asarray(src, dtype=np.float64)
    dst = np.asarray(dst, dtype=np.float64)
    if src.shape != (4, 2) or dst.shape != (4, 2):
        raise ValueError(
            f"Expected (4, 2) point arrays, got {src.shape} and {dst.shape}"
        )

    a = np.zeros((8, 8), dtype=np.float64)
    b = np.zeros(8, dtype=np.float64)
    for i, ((x, y), (u, v)) in enumerate(zip(src, dst)):
        a[2 * i] = [x, y, 1, 0, 0, 0, -u * x, -u * y]
        a[2 * i + 1] = [0, 0, 0, x, y, 1, -v * x, -v * y]
        b[2 * i] = u
        b[2 * i + 1] = v

    try:
        h = np.linalg.solve(a, b)
    except np.linalg.LinAlgError as e:
        raise ValueError(
            "Cannot compute perspective transform: outline is degenerate"
        ) from e

    return np.append(h, 1.0).reshape(3, 3)


def is_convex_quadrilateral(rect: np.ndarray) -> bool:
    """
    Check if 4 ordered points form a convex quadrilateral.

    For each consecutive edge pair the 2D cross product is computed; the
    shape is convex when all of them share the same sign.
    """
    cross_products = []
    for i in range(4):
        p1 = rect[i]
        p2 = rect[(i + 1) % 4]
        p3 = rect[(i + 2) % 4]
        v1 = p2 - p1
        v2 = p3 - p2
        cross_products.append(v1[0] * v2[1] - v1[1] * v2[0])

    signs = [cp > 1e-6 for cp in cross_products]
    return all(signs) or not any(signs)


def rectify(
    image: np.ndarray,
    quad: Union[Quadrilateral, np.ndarray],
    width: int = 800,
    height: int = 1000,
    interpolation: str = "linear",
) -> np.ndarray:
    """
    Warp the region inside a document outline onto a width x height image.

    Corners map as TL -> (0, 0), TR -> (width-1, 0),
    BR -> (width-1, height-1), BL -> (0, height-1). Concave or
    self-intersecting user outlines are warped as given.

    Args:
        image: Source raster (H, W) or (H, W, C).
        quad: Outline as a Quadrilateral or (4, 2) array in TL, TR, BR, BL order.
        width: Output width in pixels.
        height: Output height in pixels.
        interpolation: One of "linear", "cubic", "nearest", "lanczos".

    Returns:
        New raster of shape (height, width[, C]).

    Raises:
        ValueError: If the image is empty, the output size is not positive,
            the interpolation is unknown or the outline is degenerate.

    Example:
        >>> page = rectify(image, result.quadrilateral, 800, 1000)
        >>> page.shape[:2]
        (1000, 800)
    """
    if image is None or image.size == 0:
        raise ValueError("Invalid input image: image is None or empty")

    if width < 1 or height < 1:
        raise ValueError(f"Output size must be positive, got {width}x{height}")

    if interpolation not in INTERPOLATION_FLAGS:
        raise ValueError(
            f"Invalid interpolation: {interpolation}. "
            f"Must be one of {list(INTERPOLATION_FLAGS)}"
        )

    if isinstance(quad, Quadrilateral):
        src = quad.to_numpy(np.float64)
    else:
        src = np.asarray(quad, dtype=np.float64)

    if not is_convex_quadrilateral(src):
        logger.warning("Rectifying a non-convex outline; output will be distorted")

    dst = np.array(
        [
            [0, 0],  # Top-Left
            [width - 1, 0],  # Top-Right
            [width - 1, height - 1],  # Bottom-Right
            [0, height - 1],  # Bottom-Left
        ],
        dtype=np.float64,
    )

    matrix = compute_homography(src, dst)
    rectified = cv2.warpPerspective(
        image,
        matrix,
        (width, height),
        flags=INTERPOLATION_FLAGS[interpolation],
        borderMode=cv2.BORDER_REPLICATE,
    )

    logger.info(f"Rectified outline to {width}x{height} image")
    return rectified
