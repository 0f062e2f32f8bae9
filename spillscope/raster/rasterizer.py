"""
Shape rasterizer: draws bounding boxes and polygons onto a BGR surface.

Masks are built per shape with anti-aliasing disabled and then blended onto
the surface, so opaque fills replace pixels exactly and translucent fills,
glows and strokes alpha-blend over whatever was drawn before.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import cv2
import numpy as np

from ..data import BoundingBox, Geometry, Polygon
from ..utils import RasterizationError, get_logger, handle_exceptions, to_bgr
from .geometry import PixelBox, is_drawable, normalize, polygon_vertices

logger = get_logger(__name__)

Shape = Union[BoundingBox, Polygon]

FONT = cv2.FONT_HERSHEY_SIMPLEX
LINE_TYPE = cv2.LINE_8
# Cap height of FONT_HERSHEY_SIMPLEX at scale 1.0
FONT_BASE_HEIGHT = 22.0


@dataclass(frozen=True)
class ShapeStyle:
    """
    Styling for one rasterization pass.

    Widths are in pixels. ``gradient_to`` turns the box fill into a two-stop
    gradient from ``fill`` along the box diagonal; polygons always use the
    flat ``fill``.
    """
    fill: Optional[str] = "#000000"
    gradient_to: Optional[str] = None
    stroke: Optional[str] = None
    stroke_width: int = 0
    inner_stroke: Optional[str] = None
    inner_stroke_width: int = 0
    glow: Optional[str] = None
    glow_width: int = 0
    glow_radius: float = 0.0


@dataclass(frozen=True)
class Placeholder:
    """Label rendered when a pass has nothing to draw."""
    label: str
    color: str
    background: Optional[str] = None


def new_surface(width: int, height: int, color: str) -> np.ndarray:
    """Allocate a ``height x width`` BGR surface filled with ``color``."""
    if width <= 0 or height <= 0:
        raise RasterizationError("Surface dimensions must be positive", context={"width": width, "height": height})
    bgr, _ = to_bgr(color)
    return np.full((int(height), int(width), 3), bgr, dtype=np.uint8)


def fill_surface(surface: np.ndarray, color: str) -> None:
    """Blend ``color`` uniformly over the whole surface."""
    mask = np.full(surface.shape[:2], 255, dtype=np.uint8)
    blend_mask(surface, mask, color)


def blend_mask(surface: np.ndarray, mask: np.ndarray, color: str) -> None:
    """Paint ``color`` wherever ``mask`` is set, honouring the color's alpha."""
    bgr, alpha = to_bgr(color)
    selected = mask > 0
    if alpha <= 0 or not selected.any():
        return
    if alpha >= 1:
        surface[selected] = bgr
        return
    source = surface[selected].astype(np.float32)
    blended = source * (1.0 - alpha) + np.array(bgr, dtype=np.float32) * alpha
    surface[selected] = np.clip(np.rint(blended), 0, 255).astype(np.uint8)


def blend_weights(surface: np.ndarray, weights: np.ndarray, color: str) -> None:
    """Blend ``color`` with a per-pixel opacity map in [0, 1]."""
    bgr, alpha = to_bgr(color)
    opacity = (np.clip(weights, 0.0, 1.0) * alpha)[..., np.newaxis]
    blended = surface.astype(np.float32) * (1.0 - opacity) + np.array(bgr, dtype=np.float32) * opacity
    surface[:] = np.clip(np.rint(blended), 0, 255).astype(np.uint8)


def _empty_mask(surface: np.ndarray) -> np.ndarray:
    return np.zeros(surface.shape[:2], dtype=np.uint8)


def _box_bounds(box: PixelBox) -> Tuple[int, int, int, int]:
    return int(round(box.x)), int(round(box.y)), int(round(box.x2)), int(round(box.y2))


def _box_fill_mask(surface: np.ndarray, box: PixelBox) -> np.ndarray:
    height, width = surface.shape[:2]
    x0, y0, x1, y1 = _box_bounds(box)
    mask = _empty_mask(surface)
    # Clip to the canvas; negative indices would otherwise wrap around
    cx0, cy0 = max(0, x0), max(0, y0)
    cx1, cy1 = min(width, x1), min(height, y1)
    if cx1 > cx0 and cy1 > cy0:
        mask[cy0:cy1, cx0:cx1] = 255
    return mask


def _box_outline_mask(surface: np.ndarray, box: PixelBox, thickness: int, inset: int = 0) -> np.ndarray:
    x0, y0, x1, y1 = _box_bounds(box)
    mask = _empty_mask(surface)
    x0, y0, x1, y1 = x0 + inset, y0 + inset, x1 - inset, y1 - inset
    if thickness > 0 and x1 - 1 >= x0 and y1 - 1 >= y0:
        cv2.rectangle(mask, (x0, y0), (x1 - 1, y1 - 1), 255, int(thickness), LINE_TYPE)
    return mask


def _polygon_fill_mask(surface: np.ndarray, vertices: Sequence[Tuple[int, int]]) -> np.ndarray:
    mask = _empty_mask(surface)
    cv2.fillPoly(mask, [np.array(vertices, dtype=np.int32)], 255, LINE_TYPE)
    return mask


def _polygon_outline_mask(surface: np.ndarray, vertices: Sequence[Tuple[int, int]], thickness: int) -> np.ndarray:
    mask = _empty_mask(surface)
    if thickness > 0:
        cv2.polylines(mask, [np.array(vertices, dtype=np.int32)], True, 255, int(thickness), LINE_TYPE)
    return mask


def _apply_glow(surface: np.ndarray, base: np.ndarray, outline: np.ndarray, style: ShapeStyle) -> None:
    """Blur the widened shape and blend it beneath the crisp pass."""
    if not style.glow or style.glow_radius <= 0:
        return
    source = cv2.bitwise_or(base, outline).astype(np.float32) / 255.0
    weights = cv2.GaussianBlur(source, (0, 0), sigmaX=float(style.glow_radius))
    blend_weights(surface, weights, style.glow)


def _apply_gradient(surface: np.ndarray, box: PixelBox, mask: np.ndarray, start: str, end: str) -> None:
    """Two-stop linear gradient from (x, y) to (x + w, y + h)."""
    ys, xs = np.nonzero(mask)
    if xs.size == 0:
        return
    start_bgr, alpha = to_bgr(start)
    end_bgr, _ = to_bgr(end)
    span = box.w * box.w + box.h * box.h
    t = ((xs + 0.5 - box.x) * box.w + (ys + 0.5 - box.y) * box.h) / span
    t = np.clip(t, 0.0, 1.0)[:, np.newaxis]
    colors = np.array(start_bgr, dtype=np.float32) * (1.0 - t) + np.array(end_bgr, dtype=np.float32) * t
    current = surface[ys, xs].astype(np.float32)
    blended = current * (1.0 - alpha) + colors * alpha
    surface[ys, xs] = np.clip(np.rint(blended), 0, 255).astype(np.uint8)


def _draw_box(surface: np.ndarray, shape: BoundingBox, style: ShapeStyle) -> None:
    height, width = surface.shape[:2]
    box = normalize(shape, width, height)
    fill = _box_fill_mask(surface, box)

    if style.glow:
        _apply_glow(surface, fill, _box_outline_mask(surface, box, style.glow_width), style)

    if style.fill and style.gradient_to:
        _apply_gradient(surface, box, fill, style.fill, style.gradient_to)
    elif style.fill:
        blend_mask(surface, fill, style.fill)

    if style.stroke and style.stroke_width > 0:
        blend_mask(surface, _box_outline_mask(surface, box, style.stroke_width), style.stroke)

    if style.inner_stroke and style.inner_stroke_width > 0:
        inner = _box_outline_mask(surface, box, style.inner_stroke_width, inset=style.inner_stroke_width)
        blend_mask(surface, inner, style.inner_stroke)


def _draw_polygon(surface: np.ndarray, shape: Polygon, style: ShapeStyle) -> None:
    height, width = surface.shape[:2]
    vertices = polygon_vertices(shape, width, height)
    fill = _polygon_fill_mask(surface, vertices)

    if style.glow:
        _apply_glow(surface, fill, _polygon_outline_mask(surface, vertices, style.glow_width), style)

    if style.fill:
        blend_mask(surface, fill, style.fill)

    if style.stroke and style.stroke_width > 0:
        blend_mask(surface, _polygon_outline_mask(surface, vertices, style.stroke_width), style.stroke)


def draw_placeholder(surface: np.ndarray, placeholder: Placeholder) -> None:
    """Fill the optional placeholder background and center the label."""
    if placeholder.background:
        fill_surface(surface, placeholder.background)
    if not placeholder.label:
        return

    height, width = surface.shape[:2]
    (text_width, _), _ = cv2.getTextSize(placeholder.label, FONT, 1.0, 2)
    font_scale = max(0.8 * width / max(text_width, 1), 0.1)
    thickness = max(1, int(round(font_scale * 2)))
    (text_width, text_height), _ = cv2.getTextSize(placeholder.label, FONT, font_scale, thickness)
    origin = ((width - text_width) // 2, (height + text_height) // 2)

    mask = _empty_mask(surface)
    cv2.putText(mask, placeholder.label, origin, FONT, font_scale, 255, thickness, LINE_TYPE)
    if not mask.any():
        # Too small for glyphs; mark the center so the placeholder is never blank
        cv2.circle(mask, (width // 2, height // 2), max(1, min(width, height) // 8), 255, -1, LINE_TYPE)
    blend_mask(surface, mask, placeholder.color)


def draw_label(surface: np.ndarray, text: str, origin: Tuple[float, float], color: str, pixel_height: float) -> None:
    """Draw a caption whose cap height is roughly ``pixel_height`` pixels."""
    font_scale = pixel_height / FONT_BASE_HEIGHT
    thickness = max(1, int(round(font_scale * 2)))
    mask = _empty_mask(surface)
    cv2.putText(mask, text, (int(round(origin[0])), int(round(origin[1]))), FONT, font_scale, 255, thickness, LINE_TYPE)
    blend_mask(surface, mask, color)


@handle_exceptions(RasterizationError)
def draw_shapes(
    surface: np.ndarray,
    shapes: Sequence[Shape],
    style: ShapeStyle,
    placeholder: Optional[Placeholder] = None
) -> int:
    """
    Rasterize boxes and polygons onto ``surface`` in input order.

    Malformed shapes (polygons with fewer than three points, boxes with a
    non-positive width or height) are skipped one by one. When nothing
    drawable remains and a placeholder is given, it is rendered instead.

    Args:
        surface: BGR uint8 array, modified in place
        shapes: Bounding boxes and/or polygons in percentage space
        style: Fill, stroke and glow styling for this pass
        placeholder: Label to show when no shape is drawable

    Returns:
        Number of shapes drawn
    """
    drawable = []
    for shape in shapes:
        if not isinstance(shape, (BoundingBox, Polygon)):
            raise RasterizationError(f"Unsupported shape type {type(shape).__name__}")
        if is_drawable(shape):
            drawable.append(shape)
        else:
            logger.debug(f"Skipping degenerate {type(shape).__name__}: {shape}")

    if not drawable:
        if placeholder is not None:
            draw_placeholder(surface, placeholder)
        return 0

    for shape in drawable:
        if isinstance(shape, BoundingBox):
            _draw_box(surface, shape, style)
        else:
            _draw_polygon(surface, shape, style)
    return len(drawable)


def rasterize(
    surface: np.ndarray,
    geometry: Geometry,
    style: ShapeStyle,
    placeholder: Optional[Placeholder] = None
) -> int:
    """Draw the predicted layer of either geometry variant."""
    return draw_shapes(surface, geometry.predicted, style, placeholder)


def drawable_shapes(shapes: Sequence[Shape]) -> list:
    return [shape for shape in shapes if is_drawable(shape)]
