"""
Per-pixel filters for document outline detection.

Grayscale conversion, Gaussian smoothing and Sobel gradient magnitude.
All filters take an (H, W, 4) RGBA uint8 raster and return a new raster of
the same shape; inputs are never modified.
"""

import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def _check_rgba(image: np.ndarray) -> None:
    if image is None or image.ndim != 3 or image.shape[2] != 4:
        shape = None if image is None else image.shape
        raise ValueError(f"Expected an (H, W, 4) RGBA raster, got shape {shape}")


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """
    Convert an RGBA raster to grayscale.

    Each pixel's R, G and B channels are set to round(0.299R + 0.587G + 0.114B),
    rounding halves up. Alpha is preserved.

    Args:
        image: (H, W, 4) uint8 RGBA raster.

    Returns:
        New (H, W, 4) uint8 raster.
    """
    _check_rgba(image)

    rgb = image[:, :, :3].astype(np.float64)
    luma = (
        LUMA_WEIGHTS[0] * rgb[:, :, 0]
        + LUMA_WEIGHTS[1] * rgb[:, :, 1]
        + LUMA_WEIGHTS[2] * rgb[:, :, 2]
    )
    gray = np.clip(np.floor(luma + 0.5), 0, 255).astype(np.uint8)

    output = np.empty_like(image)
    output[:, :, :3] = gray[:, :, None]
    output[:, :, 3] = image[:, :, 3]
    return output


def gaussian_kernel(radius: int) -> np.ndarray:
    """
    Build a normalized (2r+1) x (2r+1) Gaussian kernel with sigma = r / 3.

    Raises:
        ValueError: If radius is less than 1.

    Example:
        >>> kernel = gaussian_kernel(1)
        >>> kernel.shape
        (3, 3)
        >>> float(round(kernel.sum(), 6))
        1.0
    """
    if radius < 1:
        raise ValueError(f"Blur radius must be at least 1, got {radius}")

    sigma = radius / 3.0
    offsets = np.arange(-radius, radius + 1, dtype=np.float64)
    xx, yy = np.meshgrid(offsets, offsets)
    kernel = np.exp(-(xx * xx + yy * yy) / (2.0 * sigma * sigma))
    return kernel / kernel.sum()


def gaussian_blur(image: np.ndarray, radius: int = 1) -> np.ndarray:
    """
    Smooth the color channels of an RGBA raster with a Gaussian kernel.

    Neighbor coordinates outside the image are clamped to the nearest edge
    pixel (replicated border), so a constant image stays constant. Alpha is
    copied through unchanged.

    Args:
        image: (H, W, 4) uint8 RGBA raster.
        radius: Kernel radius; the window is (2 * radius + 1) pixels wide.

    Returns:
        New (H, W, 4) uint8 raster.
    """
    _check_rgba(image)
    kernel = gaussian_kernel(radius)

    rgb = image[:, :, :3].astype(np.float32)
    blurred = cv2.filter2D(
        rgb, -1, kernel.astype(np.float32), borderType=cv2.BORDER_REPLICATE
    )

    output = np.empty_like(image)
    output[:, :, :3] = np.clip(np.rint(blurred), 0, 255).astype(np.uint8)
    output[:, :, 3] = image[:, :, 3]

    logger.debug(f"Applied Gaussian blur with radius {radius}")
    return output


def sobel_edges(image: np.ndarray) -> np.ndarray:
    """
    Compute the Sobel gradient magnitude of an RGBA raster.

    The red channel is used as the gray level. The magnitude
    sqrt(Gx^2 + Gy^2) is clamped to [0, 255] and written to R, G and B
    with alpha 255.

    Border policy: the outermost 1-pixel ring has no full 3x3 neighborhood
    and is left at zero in all four channels.

    Args:
        image: (H, W, 4) uint8 RGBA raster, typically blurred grayscale.

    Returns:
        New (H, W, 4) uint8 edge-magnitude raster.
    """
    _check_rgba(image)
    height, width = image.shape[:2]
    output = np.zeros_like(image)

    if height < 3 or width < 3:
        logger.debug("Image too small for a 3x3 Sobel window, returning zeros")
        return output

    intensity = image[:, :, 0].astype(np.float32)
    gx = cv2.Sobel(intensity, cv2.CV_32F, 1, 0, ksize=3)
    gy = cv2.Sobel(intensity, cv2.CV_32F, 0, 1, ksize=3)
    magnitude = np.clip(np.rint(np.sqrt(gx * gx + gy * gy)), 0, 255).astype(np.uint8)

    inner = magnitude[1:-1, 1:-1]
    output[1:-1, 1:-1, :3] = inner[:, :, None]
    output[1:-1, 1:-1, 3] = 255
    return output
