from __future__ import annotations

import numpy as np
import pytest

from spillscope.data import BoundingBox, BoxGeometry, Point, Polygon, PolygonGeometry
from spillscope.raster import Placeholder, ShapeStyle, draw_shapes, new_surface, rasterize
from spillscope.utils import RasterizationError

TRIANGLE = Polygon([Point(10, 10), Point(80, 20), Point(40, 90)])


def test_new_surface_is_filled_with_background() -> None:
    surface = new_surface(30, 20, "#FF0000")

    assert surface.shape == (20, 30, 3)
    assert (surface == (0, 0, 255)).all()


def test_new_surface_rejects_empty_dimensions() -> None:
    with pytest.raises(RasterizationError):
        new_surface(0, 10, "#FFFFFF")


def test_opaque_box_fill_is_exact() -> None:
    surface = new_surface(200, 200, "#FFFFFF")

    drawn = draw_shapes(surface, [BoundingBox(10, 10, 20, 20)], ShapeStyle(fill="#000000"))

    assert drawn == 1
    assert (surface[20:60, 20:60] == 0).all()
    outside = surface.copy()
    outside[20:60, 20:60] = 255
    assert (outside == 255).all()


def test_degenerate_polygon_is_a_no_op() -> None:
    style = ShapeStyle(fill="#000000", stroke="#FF0000", stroke_width=3)
    with_sliver = new_surface(100, 100, "#FFFFFF")
    without_sliver = new_surface(100, 100, "#FFFFFF")

    drawn = draw_shapes(with_sliver, [TRIANGLE, Polygon([Point(5, 5), Point(95, 95)])], style)
    draw_shapes(without_sliver, [TRIANGLE], style)

    assert drawn == 1
    assert np.array_equal(with_sliver, without_sliver)


def test_empty_shapes_draw_placeholder() -> None:
    surface = new_surface(200, 100, "#FFFFFF")

    drawn = draw_shapes(surface, [], ShapeStyle(), Placeholder("NO_ANOMALY_DETECTED", "#0055FF"))

    assert drawn == 0
    assert not (surface == 255).all()


def test_placeholder_survives_tiny_surfaces() -> None:
    surface = new_surface(4, 4, "#FFFFFF")

    draw_shapes(surface, [], ShapeStyle(), Placeholder("NO_ANOMALY_DETECTED", "#000000"))

    assert not (surface == 255).all()


def test_empty_shapes_without_placeholder_leave_surface_untouched() -> None:
    surface = new_surface(50, 50, "#FFFFFF")

    draw_shapes(surface, [Polygon([])], ShapeStyle())

    assert (surface == 255).all()


def test_later_shapes_draw_on_top() -> None:
    surface = new_surface(100, 100, "#FFFFFF")
    draw_shapes(surface, [BoundingBox(0, 0, 50, 50)], ShapeStyle(fill="#00FF00"))
    draw_shapes(surface, [BoundingBox(25, 25, 50, 50)], ShapeStyle(fill="#FF0000"))

    assert tuple(surface[30, 30]) == (0, 0, 255)
    assert tuple(surface[10, 10]) == (0, 255, 0)


def test_translucent_fill_blends() -> None:
    surface = new_surface(10, 10, "#FFFFFF")

    draw_shapes(surface, [BoundingBox(0, 0, 100, 100)], ShapeStyle(fill="rgba(0, 0, 0, 0.5)"))

    assert np.all(np.abs(surface.astype(int) - 128) <= 1)


def test_boxes_partly_off_canvas_are_clipped() -> None:
    surface = new_surface(100, 100, "#FFFFFF")

    draw_shapes(surface, [BoundingBox(-20, 90, 40, 40)], ShapeStyle(fill="#000000"))

    assert (surface[90:100, 0:20] == 0).all()
    assert (surface[0:90] == 255).all()
    assert (surface[:, 20:] == 255).all()


def test_unsupported_shape_raises() -> None:
    surface = new_surface(10, 10, "#FFFFFF")

    with pytest.raises(RasterizationError):
        draw_shapes(surface, [Point(1, 1)], ShapeStyle())


def test_rasterize_draws_the_predicted_layer_of_both_variants() -> None:
    square = [Point(20, 20), Point(60, 20), Point(60, 60), Point(20, 60)]
    boxes = new_surface(100, 100, "#FFFFFF")
    polygons = new_surface(100, 100, "#FFFFFF")

    assert rasterize(boxes, BoxGeometry([BoundingBox(20, 20, 40, 40)]), ShapeStyle(fill="#000000")) == 1
    drawn = rasterize(
        polygons,
        PolygonGeometry(ground_truth=[Polygon(square)], land=[Polygon(square)]),
        ShapeStyle(fill="#000000"),
    )

    assert tuple(boxes[40, 40]) == (0, 0, 0)
    # Ground truth and land are not part of the predicted layer
    assert drawn == 0
    assert (polygons == 255).all()
