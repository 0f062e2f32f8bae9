"""
Raster package: geometry normalization, shape rasterization and mask compositing.
"""

from .geometry import PixelPoint, PixelBox, normalize, normalize_polygon, is_drawable
from .codec import decode_data_uri, encode_png_data_uri, file_to_data_uri, data_uri_to_bytes
from .rasterizer import (
    ShapeStyle,
    Placeholder,
    new_surface,
    draw_shapes,
    draw_placeholder,
    rasterize
)
from .compositor import (
    compose_ground_truth_mask,
    compose_predicted_mask,
    compose_overlay,
    compose_annotated_overlay,
    render_ground_truth_mask,
    render_predicted_mask,
    render_overlay,
    render_annotated_overlay,
    render_visual_artifacts,
    render_visual_artifacts_sync
)

__all__ = [
    'PixelPoint',
    'PixelBox',
    'normalize',
    'normalize_polygon',
    'is_drawable',
    'decode_data_uri',
    'encode_png_data_uri',
    'file_to_data_uri',
    'data_uri_to_bytes',
    'ShapeStyle',
    'Placeholder',
    'new_surface',
    'draw_shapes',
    'draw_placeholder',
    'rasterize',
    'compose_ground_truth_mask',
    'compose_predicted_mask',
    'compose_overlay',
    'compose_annotated_overlay',
    'render_ground_truth_mask',
    'render_predicted_mask',
    'render_overlay',
    'render_annotated_overlay',
    'render_visual_artifacts',
    'render_visual_artifacts_sync'
]
