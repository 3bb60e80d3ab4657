"""
Data types and structures for the Scanning module.

Provides type-safe containers for configuration, detected document
outlines and detection results.
"""

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Iterable, List, Optional, Tuple, Union

import numpy as np

from src.common.exceptions import (  # noqa: F401
    ImageLoadError,
    ProcessingError,
    UnsupportedFormatError,
)
from src.common.types import Point


class CornerRole(IntEnum):
    """Corner roles of a quadrilateral, in clockwise order."""

    TOP_LEFT = 0
    TOP_RIGHT = 1
    BOTTOM_RIGHT = 2
    BOTTOM_LEFT = 3


PointLike = Union[Point, Tuple[float, float], List[float], np.ndarray]


def as_point(value: PointLike) -> Point:
    """Coerce a Point, (x, y) tuple/list or (2,) array into a Point."""
    if isinstance(value, Point):
        return value
    return Point.from_numpy(np.asarray(value, dtype=np.float64))


@dataclass
class Quadrilateral:
    """
    Four corner points of a (possibly skewed) document outline.

    Roles are assigned once, when the shape is built from unordered points
    with `from_points`. Individual corners may later be moved without the
    roles being re-sorted, so a user-edited quadrilateral may be concave or
    self-intersecting.
    """

    top_left: Point
    top_right: Point
    bottom_right: Point
    bottom_left: Point

    @classmethod
    def from_points(cls, points: Iterable[PointLike]) -> "Quadrilateral":
        """
        Build a quadrilateral from 4 unordered points.

        Points are sorted by y; the two upper points become the top pair and
        the two lower points the bottom pair, each pair sorted by x.

        Raises:
            ValueError: If the input does not contain exactly 4 points.

        Example:
            >>> quad = Quadrilateral.from_points([(90, 10), (10, 12), (12, 80), (95, 85)])
            >>> quad.top_left
            Point(x=10.0, y=12.0)
        """
        pts = [as_point(p) for p in points]
        if len(pts) != 4:
            raise ValueError(f"Expected exactly 4 points, got {len(pts)}")

        by_y = sorted(pts, key=lambda p: p.y)
        top = sorted(by_y[:2], key=lambda p: p.x)
        bottom = sorted(by_y[2:], key=lambda p: p.x)

        return cls(
            top_left=top[0],
            top_right=top[1],
            bottom_right=bottom[1],
            bottom_left=bottom[0],
        )

    @classmethod
    def from_numpy(cls, arr: np.ndarray) -> "Quadrilateral":
        """Build from a (4, 2) array already in TL, TR, BR, BL order."""
        arr = np.asarray(arr, dtype=np.float64)
        if arr.shape != (4, 2):
            raise ValueError(
                f"Expected exactly 4 points with shape (4, 2), got shape {arr.shape}"
            )
        return cls(*(Point.from_numpy(row) for row in arr))

    def points(self) -> Tuple[Point, Point, Point, Point]:
        """Corners in role order: TL, TR, BR, BL."""
        return (self.top_left, self.top_right, self.bottom_right, self.bottom_left)

    def corner(self, role: Union[CornerRole, int]) -> Point:
        return self.points()[CornerRole(role)]

    def with_corner(self, role: Union[CornerRole, int], point: Point) -> "Quadrilateral":
        """Return a copy with one corner replaced. Roles are not re-sorted."""
        field_name = CornerRole(role).name.lower()
        return replace(self, **{field_name: point})

    def to_numpy(self, dtype: type = np.float32) -> np.ndarray:
        """(4, 2) array of corners in TL, TR, BR, BL order."""
        return np.array([p.to_tuple() for p in self.points()], dtype=dtype)

    def edge_lengths(self) -> Tuple[float, float, float, float]:
        """Return (top, right, bottom, left) edge lengths."""
        tl, tr, br, bl = self.points()
        return (
            tl.distance_to(tr),
            tr.distance_to(br),
            bl.distance_to(br),
            tl.distance_to(bl),
        )

    def dimensions(self) -> Tuple[float, float]:
        """
        Effective (width, height): the longer of the top/bottom edges and
        the longer of the left/right edges.
        """
        top, right, bottom, left = self.edge_lengths()
        return max(top, bottom), max(left, right)


@dataclass
class FilterConfig:
    """Configuration for the grayscale/blur/edge stages."""

    blur_radius: int


@dataclass
class ContourConfig:
    """Configuration for contour tracing."""

    edge_threshold: float  # Gradient magnitude a pixel must exceed (0-255)
    min_contour_length: int  # Components with fewer points are discarded


@dataclass
class SelectionConfig:
    """Configuration for rectangle selection and the fallback outline."""

    epsilon: float  # Douglas-Peucker tolerance in pixels
    min_size_ratio: float  # Fraction of min(width, height) each side must exceed
    fallback_margin_ratio: float  # Inset of the default outline, fraction of min(width, height)
    min_confidence: float  # Detections at or below this seed the editor with the fallback


@dataclass
class ConfidenceConfig:
    """Configuration for confidence scoring."""

    aspect_weight: float
    size_weight: float
    aspect_min: float
    aspect_max: float
    target_area_ratio: float  # Area ratio that earns the full size score


@dataclass
class OutputConfig:
    """Configuration for the rectified output image."""

    width: int
    height: int
    format: str
    quality: int
    filename_prefix: str
    interpolation: str


@dataclass
class ScanConfig:
    """Complete scanning module configuration."""

    filters: FilterConfig
    contours: ContourConfig
    selection: SelectionConfig
    confidence: ConfidenceConfig
    output: OutputConfig


@dataclass
class ProcessedImage:
    """
    Output from one detection run.

    Attributes:
        image: RGBA working copy of the input raster.
        quadrilateral: Detected document outline, None if nothing qualified.
        confidence: Detection confidence in [0, 100]; 0 without a detection.
    """

    image: np.ndarray
    quadrilateral: Optional[Quadrilateral]
    confidence: float

    @property
    def width(self) -> int:
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        return int(self.image.shape[0])

    def has_detection(self, min_confidence: float = 0.0) -> bool:
        """Check whether a quadrilateral was found with confidence above the floor."""
        return self.quadrilateral is not None and self.confidence > min_confidence
