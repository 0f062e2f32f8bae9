from __future__ import annotations

from pathlib import Path

import pytest

from spillscope.utils import (
    ConfigManager,
    ConfigurationError,
    RenderStyle,
    SpillScopeError,
    handle_exceptions,
    parse_color,
    to_hex,
)


def test_defaults_match_render_style(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("paths:\n  output_dir: out\n", encoding="utf-8")

    manager = ConfigManager(config_path)

    assert manager.get_render_style() == RenderStyle()
    assert manager.get("paths.output_dir") == "out"


def test_overrides_are_merged(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "palette:\n  primary: '#123456'\nraster:\n  mask_variant: stylized\ncharts:\n  width: 640\n",
        encoding="utf-8",
    )

    style = ConfigManager(config_path).get_render_style()

    assert style.palette.primary == "#123456"
    assert style.palette.danger == "#FF0000"
    assert style.raster.mask_variant == "stylized"
    assert style.charts.width == 640


def test_singleton_is_shared(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("charts:\n  width: 500\n", encoding="utf-8")

    first = ConfigManager(config_path)
    second = ConfigManager()

    assert first is second
    assert second.get("charts.width") == 500


@pytest.mark.parametrize("body", [
    "palette:\n  primary: not-a-color\n",
    "raster:\n  mask_variant: sepia\n",
    "raster:\n  tint_color: 'rgba(0, 0, 0, 1.5)'\n",
    "charts:\n  width: 0\n",
])
def test_invalid_configuration_raises(tmp_path: Path, body: str) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(body, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        ConfigManager(config_path)


def test_set_revalidates(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("{}\n", encoding="utf-8")
    manager = ConfigManager(config_path)

    manager.set("charts.height", 420)
    assert manager.get_chart_config().height == 420

    with pytest.raises(ConfigurationError):
        manager.set("palette.grid", "#12")
    assert manager.get("palette.grid") == "#1E293B"

    with pytest.raises(ConfigurationError):
        manager.set("charts.width", "wide")
    assert manager.get_chart_config().width == 800


def test_save_round_trips(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("report:\n  title: TEST REPORT\n", encoding="utf-8")
    saved = tmp_path / "saved.yaml"

    ConfigManager(config_path).save(saved)
    ConfigManager.reset()

    assert ConfigManager(saved).get_report_config().title == "TEST REPORT"


@pytest.mark.parametrize("value,expected", [
    ("#0055FF", (0, 85, 255, 1.0)),
    ("#fff", (255, 255, 255, 1.0)),
    ("rgba(0, 17, 51, 0.35)", (0, 17, 51, 0.35)),
    ("rgb(1,2,3)", (1, 2, 3, 1.0)),
])
def test_parse_color(value: str, expected: tuple) -> None:
    assert parse_color(value) == pytest.approx(expected)


def test_parse_color_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        parse_color("blue-ish")


def test_to_hex_drops_alpha() -> None:
    assert to_hex("rgba(0, 85, 255, 0.45)").upper() == "#0055FF"


def test_handle_exceptions_wraps_foreign_errors() -> None:
    @handle_exceptions(ConfigurationError)
    def broken():
        raise KeyError("missing")

    @handle_exceptions(ConfigurationError)
    def already_wrapped():
        raise SpillScopeError("kept")

    with pytest.raises(ConfigurationError):
        broken()
    with pytest.raises(SpillScopeError, match="kept"):
        already_wrapped()
