"""
Configuration management utilities with validation and type safety.
Implements the Singleton pattern for global configuration access.

Rendering code never reads the global configuration directly: callers turn
it into a ``RenderStyle`` and pass that explicitly to every draw call.
"""

import copy
from pathlib import Path
from typing import Any, Optional, Union
import yaml
from omegaconf import OmegaConf, DictConfig
from dataclasses import asdict, dataclass, field
from .colors import is_valid_color
from .exceptions import ConfigurationError
from .logger import LoggerMixin


MASK_VARIANTS = ("binary", "stylized")


@dataclass(frozen=True)
class PaletteConfig:
    """Named colors substituted at every draw call."""
    primary: str = "#0055FF"
    secondary: str = "#E4E4E4"
    success: str = "#00E676"
    danger: str = "#FF0000"
    warning: str = "#FF4D00"
    background: str = "#050505"
    surface: str = "#0A0A0A"
    text: str = "#F1F5F9"
    muted: str = "#94A3B8"
    grid: str = "#1E293B"


@dataclass(frozen=True)
class RasterConfig:
    """Mask and overlay compositing parameters."""
    mask_background: str = "#FFFFFF"
    mask_variant: str = "binary"
    stylized_background: str = "#050B18"
    stylized_gradient_end: str = "#001133"
    land_color: str = "#8B7355"
    spill_color: str = "#000000"
    predicted_color: str = "#000000"
    tint_color: str = "rgba(0, 17, 51, 0.35)"
    highlight_color: str = "rgba(0, 85, 255, 0.45)"
    edge_color: str = "#FFFFFF"
    placeholder_color: str = "rgba(0, 85, 255, 0.2)"
    placeholder_label: str = "NO_ANOMALY_DETECTED"
    unavailable_label: str = "GROUND_TRUTH_UNAVAILABLE"
    detection_label: str = "DETECTED_OIL"
    glow_ratio: float = 1 / 15
    stroke_ratio: float = 0.01
    min_stroke: int = 6
    inner_stroke_ratio: float = 1 / 300
    min_inner_stroke: int = 2


@dataclass(frozen=True)
class ChartConfig:
    """Chart canvas sizes and sampling parameters."""
    width: int = 800
    height: int = 300
    padding: int = 40
    radar_size: int = 400
    bar_row_height: int = 60
    bar_label_width: int = 150
    font_size: int = 12
    dpi: int = 100
    marker_radius: float = 6.0
    density_samples: int = 20
    density_fallback: float = 50.0


@dataclass(frozen=True)
class ReportConfig:
    """Exported report text and naming."""
    title: str = "SENTINEL-X MISSION REPORT"
    footer: str = "Sentinel Marine Safety System - End of Report"
    filename_prefix: str = "sentinel_x_mission"


@dataclass(frozen=True)
class RenderStyle:
    """Styling bundle passed explicitly to raster, chart and report functions."""
    palette: PaletteConfig = field(default_factory=PaletteConfig)
    raster: RasterConfig = field(default_factory=RasterConfig)
    charts: ChartConfig = field(default_factory=ChartConfig)
    report: ReportConfig = field(default_factory=ReportConfig)


class ConfigManager(LoggerMixin):
    """
    Singleton configuration manager with validation and type safety.
    Provides centralized access to all configuration parameters.
    """

    _instance = None
    _config = None

    def __new__(cls, config_path: Optional[Union[str, Path]] = None):
        """Implement singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Initialize configuration manager."""
        if self._config is None or config_path is not None:
            self._load_config(config_path)

    @classmethod
    def reset(cls):
        """Drop the singleton so the next instantiation reloads from disk."""
        cls._instance = None
        cls._config = None

    def _load_config(self, config_path: Optional[Union[str, Path]]):
        """Load, merge over defaults and validate configuration."""
        if config_path is None:
            config_path = self._find_config_file()

        defaults = self._get_default_config()
        if config_path and Path(config_path).exists():
            try:
                with open(config_path, 'r') as f:
                    config_dict = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(
                    f"Failed to load configuration: {e}",
                    context={"path": str(config_path)}
                ) from e
            self._config = OmegaConf.merge(defaults, OmegaConf.create(config_dict))
            self.logger.info(f"Loaded configuration from {config_path}")
        else:
            self._config = defaults
            self.logger.debug("Using default configuration")

        self._validate_config()

    def _find_config_file(self) -> Optional[Path]:
        """Find configuration file in common locations."""
        search_paths = [
            Path("config/config.yaml"),
            Path("config.yaml"),
            Path("../config/config.yaml")
        ]

        for path in search_paths:
            if path.exists():
                return path

        return None

    def _get_default_config(self) -> DictConfig:
        """Get default configuration built from the typed dataclasses."""
        default_config = {
            "project": {
                "name": "spillscope",
                "version": "1.0.0",
                "description": "Detection visualization and report rendering engine"
            },
            "palette": asdict(PaletteConfig()),
            "raster": asdict(RasterConfig()),
            "charts": asdict(ChartConfig()),
            "report": asdict(ReportConfig()),
            "logging": {
                "level": "INFO",
                "log_dir": None
            },
            "paths": {
                "output_dir": "output"
            }
        }

        return OmegaConf.create(default_config)

    def _validate_config(self):
        """Validate configuration parameters."""
        try:
            for name, value in self._config.palette.items():
                assert is_valid_color(value), f"palette.{name} is not a valid color: {value}"

            raster = self._config.raster
            for name in ("mask_background", "stylized_background", "stylized_gradient_end",
                         "land_color", "spill_color", "predicted_color", "tint_color",
                         "highlight_color", "edge_color", "placeholder_color"):
                assert is_valid_color(raster[name]), f"raster.{name} is not a valid color: {raster[name]}"
            assert raster.mask_variant in MASK_VARIANTS, f"raster.mask_variant must be one of {MASK_VARIANTS}"
            assert raster.glow_ratio >= 0, "raster.glow_ratio must be non-negative"
            assert raster.min_stroke >= 0, "raster.min_stroke must be non-negative"

            charts = self._config.charts
            for name in ("width", "height", "radar_size", "bar_row_height", "dpi", "density_samples"):
                assert charts[name] > 0, f"charts.{name} must be positive"
            assert charts.padding * 2 < min(charts.width, charts.height), "charts.padding too large for canvas"
            assert charts.density_fallback > 0, "charts.density_fallback must be positive"

            self.logger.debug("Configuration validation passed")

        except (AssertionError, TypeError) as e:
            self.logger.error(f"Configuration validation failed: {e}")
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @property
    def config(self) -> DictConfig:
        """Get configuration object."""
        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key."""
        return OmegaConf.select(self._config, key, default=default)

    def set(self, key: str, value: Any):
        """Set configuration value by key; a value that fails validation is rolled back."""
        previous = copy.deepcopy(self._config)
        OmegaConf.update(self._config, key, value)
        try:
            self._validate_config()
        except ConfigurationError:
            self._config = previous
            raise

    def save(self, path: Union[str, Path]):
        """Save configuration to file."""
        with open(path, 'w') as f:
            OmegaConf.save(self._config, f)
        self.logger.info(f"Configuration saved to {path}")

    def get_palette_config(self) -> PaletteConfig:
        """Get typed palette configuration."""
        return PaletteConfig(**OmegaConf.to_container(self._config.palette))

    def get_raster_config(self) -> RasterConfig:
        """Get typed raster configuration."""
        return RasterConfig(**OmegaConf.to_container(self._config.raster))

    def get_chart_config(self) -> ChartConfig:
        """Get typed chart configuration."""
        return ChartConfig(**OmegaConf.to_container(self._config.charts))

    def get_report_config(self) -> ReportConfig:
        """Get typed report configuration."""
        return ReportConfig(**OmegaConf.to_container(self._config.report))

    def get_render_style(self) -> RenderStyle:
        """Bundle the typed sections into the style passed to renderers."""
        return RenderStyle(
            palette=self.get_palette_config(),
            raster=self.get_raster_config(),
            charts=self.get_chart_config(),
            report=self.get_report_config()
        )


# Global configuration instance
def get_config(config_path: Optional[Union[str, Path]] = None) -> ConfigManager:
    """Get global configuration instance."""
    return ConfigManager(config_path)
