from __future__ import annotations

import math

import pytest

from spillscope.charts import (
    LinearScale,
    chart_suite,
    density_layout,
    inference_path_layout,
    metrics_bar_layout,
    parse_area_magnitude,
    radar_layout,
    radar_vertices,
    training_history_layout,
)
from spillscope.charts.layout import RADAR_RADIUS_RATIO, series_maximum
from spillscope.data import REFERENCE_TRAINING_HISTORY, DetectionResult, InferenceStep, MetricPoint
from spillscope.utils import ChartLayoutError, RenderStyle


def _distance(a, b) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def test_scenario_c_radar_vertices_on_rings(style: RenderStyle) -> None:
    metrics = [MetricPoint("A", 50, 100), MetricPoint("B", 100, 100)]

    layout = radar_layout(metrics, style)

    size = style.charts.radar_size
    center = (size / 2.0, size / 2.0)
    outer_radius = size * RADAR_RADIUS_RATIO
    (signature,) = layout.by_role("signature")
    vertex_a, vertex_b = signature.points
    assert _distance(vertex_b, center) == pytest.approx(outer_radius)
    assert _distance(vertex_a, center) == pytest.approx(outer_radius / 2.0)

    outer_ring = layout.by_role("ring")[-1]
    assert all(_distance(p, center) == pytest.approx(outer_radius) for p in outer_ring.points)


def test_radar_vertices_start_at_angle_zero() -> None:
    vertices = radar_vertices(
        [MetricPoint("A", 1, 1), MetricPoint("B", 1, 1), MetricPoint("C", 1, 1), MetricPoint("D", 1, 1)],
        (0.0, 0.0),
        10.0,
    )

    assert vertices[0] == pytest.approx((10.0, 0.0))
    assert vertices[1] == pytest.approx((0.0, 10.0), abs=1e-9)


def test_radar_non_positive_full_mark_collapses_to_center() -> None:
    assert radar_vertices([MetricPoint("A", 5, 0)], (3.0, 4.0), 10.0) == [(3.0, 4.0)]


def test_empty_radar_shows_placeholder(style: RenderStyle) -> None:
    layout = radar_layout([], style)

    assert not layout.by_role("signature")
    assert layout.by_role("placeholder")[0].text == "NO_SIGNATURE"


def test_linear_scale() -> None:
    scale = LinearScale((0, 1), (260, 40))

    assert scale(0) == 260
    assert scale(1) == 40
    assert scale(0.5) == pytest.approx(150)
    assert LinearScale((5, 5), (0, 100))(5) == 50


def test_history_series_share_their_maximum() -> None:
    assert series_maximum(["val_iou", "train_loss"]) == 1.0
    assert series_maximum(["val_accuracy"]) == 100.0
    with pytest.raises(ChartLayoutError):
        series_maximum(["val_iou", "val_accuracy"])
    with pytest.raises(ChartLayoutError):
        series_maximum(["precision"])


def test_training_history_points_follow_axes(style: RenderStyle) -> None:
    layout = training_history_layout(REFERENCE_TRAINING_HISTORY, ("val_iou",), style=style)

    (line,) = layout.by_role("series:val_iou")
    pad = style.charts.padding
    bottom, top = style.charts.height - pad, pad
    assert line.points[0][0] == pytest.approx(pad)
    assert line.points[-1][0] == pytest.approx(style.charts.width - pad)
    expected_y = bottom + (top - bottom) * REFERENCE_TRAINING_HISTORY[-1].val_iou
    assert line.points[-1][1] == pytest.approx(expected_y)


def test_training_history_reference_line(style: RenderStyle) -> None:
    layout = training_history_layout(REFERENCE_TRAINING_HISTORY, reference=0.5, style=style)

    (reference,) = layout.by_role("reference")
    middle = (style.charts.height) / 2.0
    assert reference.points[0][1] == pytest.approx(middle)


def test_metric_bars_are_clamped(box_payload: dict, style: RenderStyle) -> None:
    box_payload["confidence"] = 1.4
    box_payload["iou"] = -0.2
    result = DetectionResult.from_dict(box_payload)

    layout = metrics_bar_layout(result, style=style)

    bars = layout.by_role("bar")
    track = layout.by_role("track")[0]
    assert max(x for x, _ in bars[0].points) == pytest.approx(max(x for x, _ in track.points))
    assert max(x for x, _ in bars[1].points) == pytest.approx(min(x for x, _ in track.points))
    assert layout.by_role("value")[0].text == "140.0%"


def test_metric_bars_fall_back_to_history(style: RenderStyle) -> None:
    layout = metrics_bar_layout(None, REFERENCE_TRAINING_HISTORY, style)

    values = [text.text for text in layout.by_role("value")]
    assert values == ["97.4%", "88.0%", "85.0%"]


def test_inference_path_markers_carry_tooltips(style: RenderStyle) -> None:
    layout = inference_path_layout([InferenceStep(1, 0.25), InferenceStep(3, 0.75)], style)

    markers = layout.by_role("marker")
    assert [m.tooltip for m in markers] == ["Step 1: 25.0%", "Step 3: 75.0%"]
    assert markers[0].x == pytest.approx(style.charts.padding)


@pytest.mark.parametrize("text,expected", [
    ("4.2 km²", 4.2),
    ("1,500 m2", 15002.0),
    ("approx. 12 hectares", 0.12),
    ("unknown", 50.0),
    ("0 km", 50.0),
    ("", 50.0),
])
def test_parse_area_magnitude(text: str, expected: float) -> None:
    assert parse_area_magnitude(text) == pytest.approx(expected)


def test_density_chart_is_labelled_illustrative(style: RenderStyle) -> None:
    layout = density_layout("4.2 km²", style)

    assert "ILLUSTRATIVE" in layout.by_role("caption")[0].text
    assert len(layout.by_role("series")[0].points) == style.charts.density_samples


def test_chart_suite_without_result_skips_result_charts(style: RenderStyle) -> None:
    suite = chart_suite(None, REFERENCE_TRAINING_HISTORY, style)

    assert list(suite) == ["training_history", "validation_accuracy", "metrics_bar", "hybrid"]


def test_chart_suite_with_result(box_payload: dict, style: RenderStyle) -> None:
    suite = chart_suite(DetectionResult.from_dict(box_payload), REFERENCE_TRAINING_HISTORY, style)

    assert set(suite) == {
        "training_history", "validation_accuracy", "metrics_bar", "hybrid", "radar", "inference_path", "density",
    }


def test_palette_never_changes_geometry(box_payload: dict) -> None:
    from dataclasses import replace

    default = RenderStyle()
    recolored = replace(default, palette=replace(default.palette, primary="#123456", grid="#654321"))
    result = DetectionResult.from_dict(box_payload)

    for name, layout in chart_suite(result, style=default).items():
        other = chart_suite(result, style=recolored)[name]
        assert layout.coordinate_sequences() == other.coordinate_sequences()
