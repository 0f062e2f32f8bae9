"""
Utilities package for the detection visualization engine.
Provides common functionality across the application.
"""

from .logger import (
    LoggerManager, LoggerMixin, LoggingConfig, get_logger, setup_logging, mission_context,
    log_execution_time
)
from .colors import parse_color, to_bgr, to_hex, color_opacity, is_valid_color
from .config import (
    ConfigManager,
    get_config,
    PaletteConfig,
    RasterConfig,
    ChartConfig,
    ReportConfig,
    RenderStyle,
    MASK_VARIANTS
)
from .exceptions import (
    SpillScopeError,
    ImageDecodeError,
    RasterizationError,
    ChartLayoutError,
    ChartRenderError,
    ReportError,
    ConfigurationError,
    DetectionParseError,
    handle_exceptions
)

__all__ = [
    # Logger utilities
    'LoggerManager',
    'LoggerMixin',
    'LoggingConfig',
    'get_logger',
    'setup_logging',
    'mission_context',
    'log_execution_time',

    # Color utilities
    'parse_color',
    'to_bgr',
    'to_hex',
    'color_opacity',
    'is_valid_color',

    # Configuration utilities
    'ConfigManager',
    'get_config',
    'PaletteConfig',
    'RasterConfig',
    'ChartConfig',
    'ReportConfig',
    'RenderStyle',
    'MASK_VARIANTS',

    # Exception classes
    'SpillScopeError',
    'ImageDecodeError',
    'RasterizationError',
    'ChartLayoutError',
    'ChartRenderError',
    'ReportError',
    'ConfigurationError',
    'DetectionParseError',
    'handle_exceptions'
]
