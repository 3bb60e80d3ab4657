"""
Main processor for the Scanning module.

Orchestrates the document outline pipeline for one image:
1. Grayscale conversion
2. Gaussian blur
3. Sobel edge detection
4. Contour tracing
5. Rectangle selection (Douglas-Peucker + validation)
6. Confidence scoring

and the steps that follow user review: corner editing, perspective
rectification and encoding of the accepted crop.

Each call is independent; the processor holds only its configuration.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np

from src.common.types import ImageBuffer
from src.scanning import corner_editor
from src.scanning.confidence import calculate_confidence
from src.scanning.config_loader import load_config
from src.scanning.contours import find_contours
from src.scanning.filters import gaussian_blur, sobel_edges, to_grayscale
from src.scanning.geometric_validator import default_quadrilateral, find_best_rectangle
from src.scanning.image_rectification import rectify as warp_quadrilateral
from src.scanning.types import (
    CornerRole,
    PointLike,
    ProcessedImage,
    ProcessingError,
    Quadrilateral,
    ScanConfig,
)
from src.utils.io import encode_image

logger = logging.getLogger(__name__)


class DocumentScanner:
    """
    Detects, edits and rectifies the document outline in a receipt photo.

    Example:
        >>> scanner = DocumentScanner()
        >>> result = scanner.detect(image)
        >>> quad = scanner.initial_quadrilateral(result)
        >>> quad = scanner.update_corner(quad, 0, (12, 30), result.width, result.height)
        >>> jpeg_bytes = scanner.crop(result.image, quad)
    """

    def __init__(
        self,
        config: Optional[ScanConfig] = None,
        config_path: Optional[Path] = None,
    ):
        """
        Initialize the scanner.

        Args:
            config: Pre-loaded configuration object. If None, will load from file.
            config_path: Path to config file. If None, uses default location.
        """
        if config is not None:
            self.config = config
            logger.info("Using provided configuration")
        else:
            self.config = load_config(config_path) if config_path else load_config()
            logger.info("Loaded configuration from file")

    def detect(self, image: np.ndarray) -> ProcessedImage:
        """
        Run outline detection on one image.

        Args:
            image: Decoded raster, grayscale, RGB or RGBA uint8.

        Returns:
            ProcessedImage with an RGBA working copy of the input, the detected
            outline (None if nothing qualified) and its confidence (0 if none).

        Raises:
            ValueError: If the input is not a valid image array.
            ProcessingError: If a pipeline stage fails.
        """
        working = ImageBuffer(data=image).to_rgba()
        height, width = working.shape[:2]

        logger.info(f"Detecting document outline in {width}x{height} image")

        try:
            gray = to_grayscale(working)
            blurred = gaussian_blur(gray, self.config.filters.blur_radius)
            edges = sobel_edges(blurred)

            contours = find_contours(
                edges,
                threshold=self.config.contours.edge_threshold,
                min_length=self.config.contours.min_contour_length,
            )
            quad = find_best_rectangle(
                contours,
                (height, width),
                epsilon=self.config.selection.epsilon,
                min_size_ratio=self.config.selection.min_size_ratio,
            )
        except (cv2.error, MemoryError) as e:
            logger.error(f"Outline detection failed: {e}")
            raise ProcessingError(f"Outline detection failed: {e}") from e

        confidence = (
            calculate_confidence(quad, width, height, self.config.confidence)
            if quad is not None
            else 0.0
        )

        if quad is not None:
            logger.info(f"Detected outline with confidence {confidence:.1f}")

        return ProcessedImage(image=working, quadrilateral=quad, confidence=confidence)

    def initial_quadrilateral(self, result: ProcessedImage) -> Quadrilateral:
        """
        Outline to seed the corner editor with.

        The detected outline is used when its confidence exceeds the
        configured minimum; otherwise an outline inset from the image edges,
        so the user always has something to adjust.
        """
        if result.has_detection(self.config.selection.min_confidence):
            return result.quadrilateral

        logger.warning(
            f"Using default outline (confidence {result.confidence:.1f} "
            f"<= {self.config.selection.min_confidence:.1f})"
        )
        return default_quadrilateral(
            result.width, result.height, self.config.selection.fallback_margin_ratio
        )

    def update_corner(
        self,
        quad: Quadrilateral,
        corner_index: Union[CornerRole, int],
        new_point: PointLike,
        width: int,
        height: int,
    ) -> Quadrilateral:
        """Move one corner, clamped to the image. See `corner_editor.update_corner`."""
        return corner_editor.update_corner(quad, corner_index, new_point, width, height)

    def rectify(
        self,
        image: np.ndarray,
        quad: Quadrilateral,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> np.ndarray:
        """
        Warp the outlined region onto an upright output image.

        Output size defaults to the configured width and height.

        Raises:
            ValueError: If the image, size or outline is invalid.
            ProcessingError: If OpenCV fails to warp.
        """
        if width is None:
            width = self.config.output.width
        if height is None:
            height = self.config.output.height

        try:
            return warp_quadrilateral(
                image, quad, width, height, self.config.output.interpolation
            )
        except (cv2.error, MemoryError) as e:
            logger.error(f"Rectification failed: {e}")
            raise ProcessingError(f"Rectification failed: {e}") from e

    def crop(
        self,
        image: np.ndarray,
        quad: Quadrilateral,
        fmt: Optional[str] = None,
        quality: Optional[int] = None,
    ) -> bytes:
        """
        Rectify the outlined region and encode it for upload.

        Raises:
            UnsupportedFormatError: If the output format is not supported.
        """
        rectified = self.rectify(image, quad)
        fmt = fmt or self.config.output.format
        quality = self.config.output.quality if quality is None else quality
        encoded = encode_image(rectified, fmt, quality)
        logger.info(f"Encoded rectified receipt as {fmt} ({len(encoded)} bytes)")
        return encoded


def detect(image: np.ndarray, config: Optional[ScanConfig] = None) -> ProcessedImage:
    """
    Convenience function for one-shot outline detection.

    Example:
        >>> result = detect(image)
        >>> if result.quadrilateral is not None:
        ...     print(f"Found receipt ({result.confidence:.0f}%)")
    """
    return DocumentScanner(config=config).detect(image)


def update_corner(
    quad: Quadrilateral,
    corner_index: Union[CornerRole, int],
    new_point: PointLike,
    width: int,
    height: int,
) -> Quadrilateral:
    """Convenience alias for `corner_editor.update_corner`."""
    return corner_editor.update_corner(quad, corner_index, new_point, width, height)


def rectify(
    image: np.ndarray,
    quad: Quadrilateral,
    width: Optional[int] = None,
    height: Optional[int] = None,
    config: Optional[ScanConfig] = None,
) -> np.ndarray:
    """
    Convenience function for one-shot rectification.

    Output size defaults to `config.output` (800x1000 with the default config).
    """
    return DocumentScanner(config=config).rectify(image, quad, width, height)
