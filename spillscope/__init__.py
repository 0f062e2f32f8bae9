"""
SpillScope: visualization engine for SAR oil-spill detection results

Turns a detection result (geometry, confidence, metrics) and its source image
into raster masks, overlays, statistical charts and a self-contained HTML
mission report.

Key Features:
- Ground-truth and predicted mask rasterization with placeholders
- Photo overlays with tint, highlight and annotation layers
- Back-end agnostic chart layout with SVG and matplotlib renderers
- Offline HTML report export with embedded artifacts
- Logging, configuration management, and error handling
- Command-line interface for rendering and inspection

Author: SpillScope Team
Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "SpillScope Team"

# Core imports
from .utils import ConfigManager, LoggerManager, RenderStyle, setup_logging
from .data import DetectionResult, load_detection, REFERENCE_TRAINING_HISTORY
from .raster import render_visual_artifacts, render_visual_artifacts_sync
from .charts import chart_suite, SvgChartRenderer, InteractiveChartRenderer
from .report import assemble_report, save_report
from .interface import cli

__all__ = [
    # Version info
    '__version__',
    '__author__',

    # Core utilities
    'ConfigManager',
    'LoggerManager',
    'RenderStyle',
    'setup_logging',

    # Data handling
    'DetectionResult',
    'load_detection',
    'REFERENCE_TRAINING_HISTORY',

    # Raster artifacts
    'render_visual_artifacts',
    'render_visual_artifacts_sync',

    # Charts
    'chart_suite',
    'SvgChartRenderer',
    'InteractiveChartRenderer',

    # Report
    'assemble_report',
    'save_report',

    # Interface
    'cli'
]
