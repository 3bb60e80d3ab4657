"""
Common type definitions for the receipt scanning pipeline.

This module provides Pydantic-based type definitions for the two primitive
data structures used throughout the pipeline: raster images and points.

These types provide:
- Type validation and conversion
- Consistent interfaces across modules
- Helper methods for common operations
- Integration with numpy arrays and OpenCV
"""

from typing import Tuple, Union

import numpy as np
from pydantic import BaseModel, Field, field_validator


class ImageBuffer(BaseModel):
    """
    Type-safe wrapper for raster images (numpy.ndarray).

    The scanning pipeline works on RGBA rasters, 8 bits per channel.
    ImageBuffer validates caller-supplied arrays and promotes grayscale
    and RGB input to that canonical form.

    Attributes:
        data: The underlying numpy array containing image data.
            Shape: (H, W), (H, W, 3) or (H, W, 4).
            Dtype: uint8 (0-255).

    Example:
        >>> raster = np.zeros((480, 640, 3), dtype=np.uint8)
        >>> buffer = ImageBuffer(data=raster)
        >>> buffer.to_rgba().shape
        (480, 640, 4)
    """

    data: np.ndarray = Field(..., description="Image data as numpy array")

    model_config = {"arbitrary_types_allowed": True}

    @field_validator("data")
    @classmethod
    def _validate_image(cls, v: np.ndarray) -> np.ndarray:
        """
        Validate that the numpy array is a valid image.

        Args:
            v: Numpy array to validate.

        Returns:
            Validated numpy array.

        Raises:
            ValueError: If array is not a valid image format.
        """
        if not isinstance(v, np.ndarray):
            raise ValueError(f"Expected numpy.ndarray, got {type(v)}")

        if v.size == 0:
            raise ValueError("Image array is empty")

        if len(v.shape) not in (2, 3):
            raise ValueError(
                f"Expected 2D (grayscale) or 3D (color) image, got shape {v.shape}"
            )

        if len(v.shape) == 3 and v.shape[2] not in (1, 3, 4):
            raise ValueError(
                f"Expected 1, 3, or 4 channels for color image, got {v.shape[2]}"
            )

        if v.dtype != np.uint8:
            raise ValueError(
                f"Expected uint8 dtype for image, got {v.dtype}. "
                "Images should be in range [0, 255]"
            )

        return v

    @property
    def shape(self) -> Tuple[int, ...]:
        """Get image shape (H, W) or (H, W, C)."""
        return self.data.shape

    @property
    def height(self) -> int:
        """Get image height in pixels."""
        return int(self.data.shape[0])

    @property
    def width(self) -> int:
        """Get image width in pixels."""
        return int(self.data.shape[1])

    @property
    def channels(self) -> int:
        """Get number of channels (1 for grayscale, 3 for RGB, 4 for RGBA)."""
        if len(self.data.shape) == 2:
            return 1
        return int(self.data.shape[2])

    def to_rgba(self) -> np.ndarray:
        """
        Return a fresh (H, W, 4) RGBA copy of the image.

        Grayscale values are replicated across R, G and B. Alpha is set to
        255 when the source has no alpha channel.
        """
        data = self.data
        if data.ndim == 3 and data.shape[2] == 1:
            data = data[:, :, 0]

        if data.ndim == 2:
            rgba = np.empty((*data.shape, 4), dtype=np.uint8)
            rgba[:, :, :3] = data[:, :, None]
            rgba[:, :, 3] = 255
            return rgba

        if data.shape[2] == 3:
            rgba = np.empty((*data.shape[:2], 4), dtype=np.uint8)
            rgba[:, :, :3] = data
            rgba[:, :, 3] = 255
            return rgba

        return data.copy()

    def __repr__(self) -> str:
        """String representation of ImageBuffer."""
        return f"ImageBuffer(shape={self.shape}, dtype={self.data.dtype})"


class Point(BaseModel):
    """
    A 2D point (x, y) in image pixel space.

    Coordinates are floats: detected corners come from integer pixel
    positions, but corners dragged by the user land anywhere.

    Example:
        >>> point = Point(x=100, y=200.5)
        >>> point.to_tuple()
        (100.0, 200.5)
    """

    x: float = Field(..., description="X-coordinate (horizontal)")
    y: float = Field(..., description="Y-coordinate (vertical)")

    @field_validator("x", "y", mode="before")
    @classmethod
    def _convert_to_float(cls, v: Union[int, float, np.number]) -> float:
        if isinstance(v, (int, float, np.number)) and not isinstance(v, bool):
            return float(v)
        raise ValueError(f"Coordinate must be numeric, got {type(v)}")

    @classmethod
    def from_numpy(cls, arr: np.ndarray) -> "Point":
        """
        Create Point from numpy array.

        Raises:
            ValueError: If array shape is not (2,).
        """
        arr = np.asarray(arr)
        if arr.shape != (2,):
            raise ValueError(f"Expected array of shape (2,), got {arr.shape}")
        return cls(x=float(arr[0]), y=float(arr[1]))

    def to_numpy(self, dtype: type = np.float32) -> np.ndarray:
        """Convert Point to a (2,) numpy array."""
        return np.array([self.x, self.y], dtype=dtype)

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def distance_to(self, other: "Point") -> float:
        """Euclidean distance to another point."""
        dx = self.x - other.x
        dy = self.y - other.y
        return float(np.sqrt(dx * dx + dy * dy))

    def clamped(self, width: int, height: int) -> "Point":
        """
        Return a copy clamped to the pixel grid of a width x height image,
        i.e. x in [0, width - 1] and y in [0, height - 1].
        """
        return Point(
            x=min(max(self.x, 0.0), float(width - 1)),
            y=min(max(self.y, 0.0), float(height - 1)),
        )

    def __repr__(self) -> str:
        return f"Point(x={self.x}, y={self.y})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Point):
            return False
        return self.x == other.x and self.y == other.y

    def __hash__(self) -> int:
        return hash((self.x, self.y))
