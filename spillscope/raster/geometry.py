"""
Geometry normalizer: percentage space to absolute pixel space.

The transform is a pure linear scale. No clamping is performed; points outside
[0, 100] land off-canvas and the raster back-end clips them.
"""

from dataclasses import dataclass
from typing import List, Tuple, Union

from ..data import BoundingBox, Point, Polygon


@dataclass(frozen=True)
class PixelPoint:
    x: float
    y: float


@dataclass(frozen=True)
class PixelBox:
    x: float
    y: float
    w: float
    h: float

    @property
    def x2(self) -> float:
        return self.x + self.w

    @property
    def y2(self) -> float:
        return self.y + self.h


def scale(percent: float, size: float) -> float:
    return percent / 100.0 * size


def normalize(
    shape: Union[Point, BoundingBox],
    target_width: float,
    target_height: float
) -> Union[PixelPoint, PixelBox]:
    """
    Convert a percentage-space point or box into pixel space.

    Args:
        shape: Point or bounding box with 0-100 coordinates
        target_width: Canvas width in pixels
        target_height: Canvas height in pixels

    Returns:
        PixelPoint for a Point, PixelBox for a BoundingBox
    """
    if isinstance(shape, BoundingBox):
        return PixelBox(
            x=scale(shape.x, target_width),
            y=scale(shape.y, target_height),
            w=scale(shape.w, target_width),
            h=scale(shape.h, target_height),
        )
    if isinstance(shape, Point):
        return PixelPoint(x=scale(shape.x, target_width), y=scale(shape.y, target_height))
    raise TypeError(f"Cannot normalize {type(shape).__name__}")


def normalize_polygon(polygon: Polygon, target_width: float, target_height: float) -> List[PixelPoint]:
    """Normalize every vertex of a polygon, keeping input order."""
    return [normalize(point, target_width, target_height) for point in polygon.points]


def polygon_vertices(polygon: Polygon, target_width: float, target_height: float) -> List[Tuple[int, int]]:
    """Integer pixel vertices ready for OpenCV."""
    return [
        (int(round(p.x)), int(round(p.y)))
        for p in normalize_polygon(polygon, target_width, target_height)
    ]


def is_drawable(shape: Union[BoundingBox, Polygon]) -> bool:
    """Polygons need three vertices; boxes need positive width and height."""
    return not shape.is_degenerate
