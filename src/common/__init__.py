"""
Common types shared across all modules.

Standardized raster and point types plus the pipeline's exceptions.
"""

from src.common.exceptions import ImageLoadError, ProcessingError, UnsupportedFormatError
from src.common.types import ImageBuffer, Point

__all__ = [
    "ImageBuffer",
    "Point",
    "ImageLoadError",
    "ProcessingError",
    "UnsupportedFormatError",
]
