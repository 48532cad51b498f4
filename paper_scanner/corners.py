"""
Value types shared by the detection and rectification stages
"""

from dataclasses import dataclass
from typing import NamedTuple, Sequence, Tuple

import numpy as np

from .errors import InvalidInputError


class Point(NamedTuple):
    """A point in image pixel space"""
    x: float
    y: float


@dataclass(frozen=True)
class Corners:
    """
    Four document corners in canonical order, tagged with the size of the
    image they were found on.

    Coordinates only make sense relative to ``image_size``; use
    ``scaled_to`` before applying them to a different resolution.
    """
    top_left: Point
    top_right: Point
    bottom_right: Point
    bottom_left: Point
    image_size: Tuple[int, int]  # (width, height)

    @classmethod
    def from_points(cls, points, image_size) -> "Corners":
        """
        Build corners from 4 points already in (tl, tr, br, bl) order

        Args:
            points: Array-like of shape (4, 2)
            image_size: (width, height) of the source image

        Returns:
            Corners instance
        """
        pts = as_point_array(points, np.float64)
        return cls(
            *(Point(float(x), float(y)) for x, y in pts),
            image_size=as_image_size(image_size),
        )

    @property
    def points(self) -> Tuple[Point, Point, Point, Point]:
        return (self.top_left, self.top_right, self.bottom_right, self.bottom_left)

    def as_array(self) -> np.ndarray:
        """Return the corners as a (4, 2) float32 array"""
        return np.array(self.points, dtype=np.float32)

    def scaled_to(self, width: int, height: int) -> "Corners":
        """
        Rescale the corners proportionally to an image of another size

        Args:
            width: Target image width
            height: Target image height

        Returns:
            New Corners tagged with the target size
        """
        src_width, src_height = self.image_size
        if src_width <= 0 or src_height <= 0:
            raise InvalidInputError(
                f"Cannot rescale corners tagged with size {self.image_size}"
            )

        fx = width / src_width
        fy = height / src_height
        scaled = [(p.x * fx, p.y * fy) for p in self.points]
        return Corners.from_points(scaled, (width, height))


def as_point_array(points, dtype=np.float32) -> np.ndarray:
    """
    Convert 4 points to a (4, 2) array of finite coordinates

    Args:
        points: Array-like holding 4 (x, y) pairs
        dtype: Floating point dtype of the result

    Returns:
        New (4, 2) array, in the given order
    """
    if points is None:
        raise InvalidInputError("Corner points are None")
    try:
        pts = np.asarray(points, dtype=dtype)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Corner points must be numeric: {e}") from e
    if pts.size != 8:
        raise InvalidInputError(
            f"Expected 4 corner points, got array of shape {pts.shape}"
        )
    pts = pts.reshape(4, 2)
    if not np.all(np.isfinite(pts)):
        raise InvalidInputError("Corner coordinates must be finite")
    return pts


def as_image_size(size) -> Tuple[int, int]:
    """Convert a (width, height) pair to integers"""
    try:
        width, height = (int(v) for v in size)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(
            f"Image size must be a (width, height) pair of numbers, got {size!r}"
        ) from e
    return width, height


def corners_from_sequence(values: Sequence[float], image_size) -> Corners:
    """Parse a flat x1, y1, ..., x4, y4 sequence into Corners"""
    if len(values) != 8:
        raise InvalidInputError(
            f"Expected 8 coordinates (4 points), got {len(values)}"
        )
    return Corners.from_points(np.reshape(values, (4, 2)), image_size)
