"""
Charts package: back-end agnostic layout engine plus SVG and matplotlib renderers.
"""

from .primitives import (
    ChartLayout,
    LinearScale,
    LinePrimitive,
    PathPrimitive,
    TextPrimitive,
    MarkerPrimitive
)
from .layout import (
    SERIES_MAX,
    RING_LEVELS,
    training_history_layout,
    metrics_bar_layout,
    radar_layout,
    radar_vertices,
    inference_path_layout,
    density_layout,
    hybrid_layout,
    parse_area_magnitude,
    chart_suite
)
from .renderer import ChartRenderer
from .svg_renderer import SvgChartRenderer, render_svg
from .interactive import InteractiveChartRenderer, InteractiveChart

__all__ = [
    'ChartLayout',
    'LinearScale',
    'LinePrimitive',
    'PathPrimitive',
    'TextPrimitive',
    'MarkerPrimitive',
    'SERIES_MAX',
    'RING_LEVELS',
    'training_history_layout',
    'metrics_bar_layout',
    'radar_layout',
    'radar_vertices',
    'inference_path_layout',
    'density_layout',
    'hybrid_layout',
    'parse_area_magnitude',
    'chart_suite',
    'ChartRenderer',
    'SvgChartRenderer',
    'render_svg',
    'InteractiveChartRenderer',
    'InteractiveChart'
]
