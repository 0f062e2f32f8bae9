from __future__ import annotations

import pytest

from spillscope.data import BoundingBox, Point, Polygon
from spillscope.raster import PixelBox, PixelPoint, is_drawable, normalize, normalize_polygon
from spillscope.raster.geometry import polygon_vertices


@pytest.mark.parametrize("x,y", [(0, 0), (100, 100), (0, 100), (37.5, 62.25), (99.9, 0.1)])
@pytest.mark.parametrize("width,height", [(200, 200), (640, 480), (1, 3)])
def test_valid_points_map_inside_canvas(x: float, y: float, width: int, height: int) -> None:
    pixel = normalize(Point(x, y), width, height)

    assert isinstance(pixel, PixelPoint)
    assert 0 <= pixel.x <= width
    assert 0 <= pixel.y <= height


def test_box_normalization_is_linear() -> None:
    box = normalize(BoundingBox(x=10, y=10, w=20, h=20), 200, 200)

    assert box == PixelBox(x=20, y=20, w=40, h=40)
    assert (box.x2, box.y2) == (60, 60)


def test_out_of_range_points_are_not_clamped() -> None:
    pixel = normalize(Point(-10, 150), 200, 100)

    assert pixel == PixelPoint(x=-20, y=150)


def test_polygon_keeps_vertex_order() -> None:
    polygon = Polygon([Point(50, 0), Point(100, 100), Point(0, 100)])

    assert normalize_polygon(polygon, 10, 10) == [PixelPoint(5, 0), PixelPoint(10, 10), PixelPoint(0, 10)]
    assert polygon_vertices(polygon, 10, 10) == [(5, 0), (10, 10), (0, 10)]


def test_normalize_rejects_other_types() -> None:
    with pytest.raises(TypeError):
        normalize((10, 10), 100, 100)


def test_drawable_shapes() -> None:
    assert is_drawable(Polygon([Point(0, 0), Point(1, 0), Point(0, 1)]))
    assert not is_drawable(Polygon([Point(0, 0), Point(1, 0)]))
    assert is_drawable(BoundingBox(0, 0, 1, 1))
    assert not is_drawable(BoundingBox(0, 0, 0, 5))
    assert not is_drawable(BoundingBox(0, 0, 5, -1))
