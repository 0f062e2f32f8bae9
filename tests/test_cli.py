from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner
from loguru import logger

from spillscope.interface import cli
from spillscope.utils import setup_logging


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(f"paths:\n  output_dir: {tmp_path / 'default_out'}\n", encoding="utf-8")
    return path


def test_render_writes_every_output(tmp_path: Path, config_file: Path, detection_file: Path, image_file: Path) -> None:
    output = tmp_path / "out"

    result = CliRunner().invoke(cli, [
        "--config", str(config_file), "render", str(detection_file),
        "--image", str(image_file), "--output", str(output),
    ])

    assert result.exit_code == 0, result.output
    for name in ("ground_truth_mask.png", "predicted_mask.png", "overlay.png", "annotated_overlay.png"):
        assert (output / name).read_bytes().startswith(b"\x89PNG")
    assert len(list((output / "charts").glob("*.svg"))) == 7
    reports = list(output.glob("sentinel_x_mission_*.html"))
    assert len(reports) == 1
    assert "ANOMALY DETECTED" in result.output


def test_render_without_report_or_charts(tmp_path: Path, config_file: Path, detection_file: Path, image_file: Path) -> None:
    output = tmp_path / "out"

    result = CliRunner().invoke(cli, [
        "--config", str(config_file), "render", str(detection_file),
        "--image", str(image_file), "--output", str(output), "--no-report", "--no-charts",
    ])

    assert result.exit_code == 0, result.output
    assert (output / "predicted_mask.png").exists()
    assert not (output / "charts").exists()
    assert not list(output.glob("*.html"))


def test_render_uses_configured_output_dir(tmp_path: Path, config_file: Path, detection_file: Path, image_file: Path) -> None:
    result = CliRunner().invoke(cli, [
        "--config", str(config_file), "render", str(detection_file), "--image", str(image_file), "--no-charts",
    ])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "default_out" / "overlay.png").exists()


def test_render_passes_ground_truth_through(tmp_path: Path, config_file: Path, detection_file: Path, image_file: Path) -> None:
    output = tmp_path / "out"

    result = CliRunner().invoke(cli, [
        "--config", str(config_file), "render", str(detection_file), "--image", str(image_file),
        "--ground-truth", str(image_file), "--output", str(output), "--no-report", "--no-charts",
    ])

    assert result.exit_code == 0, result.output
    assert (output / "ground_truth_mask.png").read_bytes() == image_file.read_bytes()


def test_render_rejects_malformed_detection(tmp_path: Path, config_file: Path, image_file: Path) -> None:
    detection = tmp_path / "broken.json"
    detection.write_text(json.dumps({"confidence": 0.4}), encoding="utf-8")

    result = CliRunner().invoke(cli, [
        "--config", str(config_file), "render", str(detection), "--image", str(image_file),
    ])

    assert result.exit_code != 0
    assert "Rendering failed" in result.output


def test_charts_saves_pngs(tmp_path: Path, config_file: Path, detection_file: Path) -> None:
    output = tmp_path / "png"

    result = CliRunner().invoke(cli, [
        "--config", str(config_file), "charts", str(detection_file), "--output", str(output),
    ])

    assert result.exit_code == 0, result.output
    assert (output / "radar.png").exists()
    assert len(list(output.glob("*.png"))) == 7


def test_info_prints_palette(config_file: Path) -> None:
    result = CliRunner().invoke(cli, ["--config", str(config_file), "info"])

    assert result.exit_code == 0, result.output
    assert "Mask variant: binary" in result.output
    assert "#0055FF" in result.output


def test_invalid_config_aborts(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("raster:\n  mask_variant: sepia\n", encoding="utf-8")

    result = CliRunner().invoke(cli, ["--config", str(config_path), "info"])

    assert result.exit_code != 0
    assert "Invalid configuration" in result.output


def test_render_rejects_non_object_technical_details(
    tmp_path: Path, config_file: Path, image_file: Path, box_payload: dict
) -> None:
    box_payload["technicalDetails"] = "n/a"
    detection = tmp_path / "details.json"
    detection.write_text(json.dumps(box_payload), encoding="utf-8")

    result = CliRunner().invoke(cli, [
        "--config", str(config_file), "render", str(detection), "--image", str(image_file),
    ])

    assert result.exit_code == 1
    assert "technicalDetails" in result.output
    assert not isinstance(result.exception, AttributeError)


def test_set_overrides_reach_info_and_saved_config(tmp_path: Path, config_file: Path) -> None:
    saved = tmp_path / "effective.yaml"

    result = CliRunner().invoke(cli, [
        "--config", str(config_file),
        "--set", "raster.mask_variant=stylized",
        "--set", "charts.dpi=150",
        "--set", "palette.primary=#123456",
        "info", "--save", str(saved),
    ])

    assert result.exit_code == 0, result.output
    assert "Mask variant: stylized" in result.output
    assert "@ 150 dpi" in result.output
    assert "#123456" in result.output
    assert "Configuration saved to" in result.output

    effective = yaml.safe_load(saved.read_text(encoding="utf-8"))
    assert effective["raster"]["mask_variant"] == "stylized"
    assert effective["charts"]["dpi"] == 150
    assert effective["palette"]["primary"] == "#123456"
    assert effective["paths"]["output_dir"] == str(tmp_path / "default_out")


@pytest.mark.parametrize("override", [
    "raster.mask_variant",
    "=stylized",
    "raster.mask_variant=sepia",
    "charts.width=wide",
])
def test_bad_override_aborts(config_file: Path, override: str) -> None:
    result = CliRunner().invoke(cli, ["--config", str(config_file), "--set", override, "info"])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_render_logs_are_tagged_with_the_detection_name(
    tmp_path: Path, detection_file: Path, image_file: Path
) -> None:
    log_dir = tmp_path / "logs"
    config_path = tmp_path / "config.yaml"
    config_path.write_text(f"logging:\n  log_dir: {log_dir}\n", encoding="utf-8")

    try:
        result = CliRunner().invoke(cli, [
            "--config", str(config_path), "render", str(detection_file),
            "--image", str(image_file), "--output", str(tmp_path / "out"), "--no-charts",
        ])
    finally:
        logger.remove()
        setup_logging()

    assert result.exit_code == 0, result.output
    main_log = (log_dir / "spillscope.log").read_text(encoding="utf-8")
    assert f"| {detection_file.stem} |" in main_log
