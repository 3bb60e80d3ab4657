"""
Receipt Scanning: document outline detection and perspective crop

Finds the outline of a receipt in a photo, lets the user adjust its
corners, and rectifies the outlined region to an upright page image.

Pipeline stages:
1. Grayscale conversion and Gaussian blur
2. Sobel edge detection
3. Contour tracing (iterative flood fill)
4. Polygon simplification (Douglas-Peucker) and rectangle selection
5. Confidence scoring
6. Corner editing (user)
7. Perspective rectification (homography)
"""

from src.scanning.config_loader import load_config
from src.scanning.processor import DocumentScanner, detect, rectify, update_corner
from src.scanning.types import (
    CornerRole,
    ImageLoadError,
    ProcessedImage,
    ProcessingError,
    Quadrilateral,
    ScanConfig,
    UnsupportedFormatError,
)

__all__ = [
    "DocumentScanner",
    "detect",
    "update_corner",
    "rectify",
    "load_config",
    "CornerRole",
    "ProcessedImage",
    "Quadrilateral",
    "ScanConfig",
    "ImageLoadError",
    "ProcessingError",
    "UnsupportedFormatError",
]
