"""
Mask compositors producing the raster artifacts of a detection result.

Each pipeline decodes the source image on its own (the only suspension point),
then composites synchronously at the image's native resolution:

- ground-truth mask: background, land polygons, spill polygons drawn last
- predicted mask: background, predicted shapes
- overlay: source image, uniform tint, translucent highlight of the shapes
- annotated overlay: source image, glow, fill, white edge and a caption

A decode or rasterization failure resolves that artifact to ``""`` without
affecting its siblings.
"""

import asyncio
import time
from typing import Optional, Tuple

import numpy as np

from ..data import BoundingBox, DetectionResult, Geometry, PolygonGeometry, VisualArtifacts
from ..utils import RasterizationError, RenderStyle, SpillScopeError, get_logger, handle_exceptions
from .codec import decode_data_uri, encode_png_data_uri
from .geometry import normalize, normalize_polygon
from .rasterizer import (
    Placeholder, ShapeStyle, draw_label, draw_placeholder, draw_shapes,
    drawable_shapes, fill_surface, new_surface, rasterize
)

logger = get_logger(__name__)


def _stroke_width(width: int, ratio: float, minimum: int) -> int:
    return max(int(minimum), int(round(width * ratio)))


def predicted_mask_style(style: RenderStyle, width: int) -> Tuple[str, ShapeStyle]:
    """Background color and shape style for the configured mask variant."""
    raster = style.raster
    if raster.mask_variant == "stylized":
        stroke = _stroke_width(width, raster.stroke_ratio, raster.min_stroke)
        return raster.stylized_background, ShapeStyle(
            fill=style.palette.primary,
            gradient_to=raster.stylized_gradient_end,
            stroke=style.palette.primary,
            stroke_width=stroke,
            inner_stroke=raster.edge_color,
            inner_stroke_width=_stroke_width(width, raster.inner_stroke_ratio, raster.min_inner_stroke),
            glow=style.palette.primary,
            glow_width=stroke,
            glow_radius=width * raster.glow_ratio / 2.0,
        )
    return raster.mask_background, ShapeStyle(fill=raster.predicted_color)


@handle_exceptions(RasterizationError)
def compose_ground_truth_mask(image: np.ndarray, geometry: Geometry, style: RenderStyle) -> np.ndarray:
    """
    Tri-color ground-truth mask: background, land, spill.

    Spill is drawn after land so it always wins where the two overlap.
    """
    raster = style.raster
    height, width = image.shape[:2]
    surface = new_surface(width, height, raster.mask_background)

    if not isinstance(geometry, PolygonGeometry):
        draw_placeholder(surface, Placeholder(raster.unavailable_label, raster.placeholder_color))
        return surface

    land = drawable_shapes(geometry.land)
    spill = drawable_shapes(geometry.ground_truth)
    if not land and not spill:
        draw_placeholder(surface, Placeholder(raster.placeholder_label, raster.placeholder_color))
        return surface

    draw_shapes(surface, land, ShapeStyle(fill=raster.land_color))
    draw_shapes(surface, spill, ShapeStyle(fill=raster.spill_color))
    return surface


@handle_exceptions(RasterizationError)
def compose_predicted_mask(image: np.ndarray, geometry: Geometry, style: RenderStyle) -> np.ndarray:
    height, width = image.shape[:2]
    background, shape_style = predicted_mask_style(style, width)
    surface = new_surface(width, height, background)
    rasterize(
        surface,
        geometry,
        shape_style,
        Placeholder(style.raster.placeholder_label, style.raster.placeholder_color)
    )
    return surface


@handle_exceptions(RasterizationError)
def compose_overlay(image: np.ndarray, geometry: Geometry, style: RenderStyle) -> np.ndarray:
    """Tinted source image with the predicted shapes highlighted above the tint."""
    raster = style.raster
    surface = image.copy()
    fill_surface(surface, raster.tint_color)
    rasterize(
        surface,
        geometry,
        ShapeStyle(fill=raster.highlight_color),
        Placeholder(raster.placeholder_label, raster.placeholder_color)
    )
    return surface


@handle_exceptions(RasterizationError)
def compose_annotated_overlay(image: np.ndarray, geometry: Geometry, style: RenderStyle) -> np.ndarray:
    """Source image with glowing outlines, translucent fills and a caption per shape."""
    raster = style.raster
    height, width = image.shape[:2]
    surface = image.copy()
    shapes = drawable_shapes(geometry.predicted)
    glow_width = _stroke_width(width, 1 / 50, 12)
    draw_shapes(surface, shapes, ShapeStyle(
        fill=raster.highlight_color,
        stroke=raster.edge_color,
        stroke_width=_stroke_width(width, 1 / 250, 3),
        glow=style.palette.primary,
        glow_width=glow_width,
        glow_radius=glow_width,
    ))

    label_height = max(14.0, width / 40.0)
    for shape in shapes:
        if isinstance(shape, BoundingBox):
            box = normalize(shape, width, height)
            origin = (box.x, box.y - 10)
        else:
            vertices = normalize_polygon(shape, width, height)
            origin = (min(p.x for p in vertices), min(p.y for p in vertices) - 10)
        draw_label(surface, raster.detection_label, origin, style.palette.primary, label_height)
    return surface


async def _decode(image_uri: str) -> np.ndarray:
    return await asyncio.to_thread(decode_data_uri, image_uri)


async def _render(name: str, image_uri: str, geometry: Geometry, style: RenderStyle, compose) -> str:
    try:
        image = await _decode(image_uri)
        return encode_png_data_uri(compose(image, geometry, style))
    except SpillScopeError as e:
        logger.warning(f"{name} unavailable: {e}")
        return ""


async def render_ground_truth_mask(
    image_uri: str,
    geometry: Geometry,
    style: Optional[RenderStyle] = None,
    reference_mask: Optional[str] = None
) -> str:
    """
    Render the ground-truth mask as a PNG data URI.

    An operator-supplied ``reference_mask`` data URI takes precedence and is
    passed through unchanged.
    """
    if reference_mask:
        return reference_mask
    return await _render("Ground-truth mask", image_uri, geometry, style or RenderStyle(), compose_ground_truth_mask)


async def render_predicted_mask(image_uri: str, geometry: Geometry, style: Optional[RenderStyle] = None) -> str:
    return await _render("Predicted mask", image_uri, geometry, style or RenderStyle(), compose_predicted_mask)


async def render_overlay(image_uri: str, geometry: Geometry, style: Optional[RenderStyle] = None) -> str:
    return await _render("Overlay", image_uri, geometry, style or RenderStyle(), compose_overlay)


async def render_annotated_overlay(image_uri: str, geometry: Geometry, style: Optional[RenderStyle] = None) -> str:
    return await _render("Annotated overlay", image_uri, geometry, style or RenderStyle(), compose_annotated_overlay)


async def render_visual_artifacts(
    image_uri: str,
    result: DetectionResult,
    style: Optional[RenderStyle] = None,
    reference_mask: Optional[str] = None,
    annotated: bool = True
) -> VisualArtifacts:
    """
    Render every raster artifact of ``result`` concurrently.

    Each artifact decodes the source independently; there is no shared
    decoded-image cache.

    Args:
        image_uri: Source image data URI
        result: Detection result providing the geometry
        style: Styling bundle, defaults to ``RenderStyle()``
        reference_mask: Optional operator-supplied ground-truth mask
        annotated: Whether to render the annotated overlay variant

    Returns:
        Artifacts; failed ones are ``""``
    """
    style = style or RenderStyle()
    geometry = result.geometry
    start_time = time.time()

    tasks = [
        render_ground_truth_mask(image_uri, geometry, style, reference_mask),
        render_predicted_mask(image_uri, geometry, style),
        render_overlay(image_uri, geometry, style),
    ]
    if annotated:
        tasks.append(render_annotated_overlay(image_uri, geometry, style))
    rendered = await asyncio.gather(*tasks)

    artifacts = VisualArtifacts(
        input=image_uri,
        ground_truth_mask=rendered[0],
        predicted_mask=rendered[1],
        overlay=rendered[2],
        annotated_overlay=rendered[3] if annotated else "",
    )
    missing = [value for value in rendered if not value]
    logger.info(
        f"Rendered {len(rendered) - len(missing)}/{len(rendered)} artifacts "
        f"({geometry.kind} geometry) in {time.time() - start_time:.2f}s"
    )
    return artifacts


def render_visual_artifacts_sync(
    image_uri: str,
    result: DetectionResult,
    style: Optional[RenderStyle] = None,
    reference_mask: Optional[str] = None,
    annotated: bool = True
) -> VisualArtifacts:
    """Blocking wrapper around :func:`render_visual_artifacts`."""
    return asyncio.run(render_visual_artifacts(image_uri, result, style, reference_mask, annotated))
