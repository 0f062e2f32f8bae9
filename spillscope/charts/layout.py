"""
Chart layout engine.

Pure functions turning data series into a ``ChartLayout`` of drawing
primitives. Both the interactive and the static SVG back-ends consume the same
layout, so all axis scaling and path construction happens here and nowhere
else.
"""

import math
import re
from collections import OrderedDict
from typing import Dict, List, Optional, Sequence, Tuple

from ..data import (
    DetectionResult, InferenceStep, MetricPoint, REFERENCE_TRAINING_HISTORY, TrainingMetricPoint
)
from ..utils import ChartLayoutError, RenderStyle, get_logger
from .primitives import (
    ChartLayout, Coordinate, LinearScale, LinePrimitive, MarkerPrimitive, PathPrimitive, TextPrimitive
)

logger = get_logger(__name__)

# Upper bound of the y axis for each history series: ratios vs percentages
SERIES_MAX = {
    "val_iou": 1.0,
    "train_loss": 1.0,
    "val_accuracy": 100.0,
}

SERIES_LABELS = {
    "val_iou": "Validation IoU",
    "train_loss": "Training Loss",
    "val_accuracy": "Validation Accuracy %",
}

RING_LEVELS = (0.2, 0.4, 0.6, 0.8, 1.0)
RADAR_RADIUS_RATIO = 0.4
RADAR_LABEL_OFFSET = 20.0
# Rings of radar charts with fewer than three axes are drawn as polygons with this many sides
FALLBACK_RING_SIDES = 24
DENSITY_CAPTION = "ILLUSTRATIVE ONLY: NOT A MEASUREMENT"


def _points(xs: Sequence[float], ys: Sequence[float]) -> Tuple[Coordinate, ...]:
    return tuple((float(x), float(y)) for x, y in zip(xs, ys))


def _format_tick(value: float, maximum: float) -> str:
    if maximum >= 100:
        return f"{value:.0f}%"
    return f"{value:.2f}"


def _horizontal_grid(
    layout: ChartLayout,
    y_scale: LinearScale,
    maximum: float,
    left: float,
    right: float,
    style: RenderStyle,
    labels: bool = True
) -> None:
    for step in range(5):
        value = maximum * step / 4.0
        y = y_scale(value)
        layout.add(LinePrimitive(
            points=((left, y), (right, y)),
            stroke=style.palette.grid,
            stroke_width=1.0,
            dash=(3.0, 3.0),
            role="grid",
        ))
        if labels:
            layout.add(TextPrimitive(
                x=left - 6, y=y + 4, text=_format_tick(value, maximum),
                fill=style.palette.muted, font_size=style.charts.font_size - 2, anchor="end", role="tick",
            ))


def _empty_label(layout: ChartLayout, text: str, style: RenderStyle) -> ChartLayout:
    layout.add(TextPrimitive(
        x=layout.width / 2.0, y=layout.height / 2.0, text=text, fill=style.palette.muted,
        font_size=style.charts.font_size + 4, anchor="middle", weight="bold", role="placeholder",
    ))
    return layout


def series_maximum(series: Sequence[str]) -> float:
    """
    Y-axis maximum shared by ``series``.

    Raises:
        ChartLayoutError: If a series is unknown or the series disagree
    """
    unknown = [key for key in series if key not in SERIES_MAX]
    if unknown:
        raise ChartLayoutError(f"Unknown history series: {unknown}", context={"known": sorted(SERIES_MAX)})
    maxima = {SERIES_MAX[key] for key in series}
    if len(maxima) != 1:
        raise ChartLayoutError(
            "History series mix ratio and percentage scales",
            context={"series": list(series), "maxima": sorted(maxima)}
        )
    return maxima.pop()


def training_history_layout(
    history: Sequence[TrainingMetricPoint] = REFERENCE_TRAINING_HISTORY,
    series: Sequence[str] = ("val_iou", "train_loss"),
    reference: Optional[float] = None,
    style: Optional[RenderStyle] = None,
    title: str = "Training Performance"
) -> ChartLayout:
    """
    Area/line chart of training history over epochs.

    Args:
        history: Reference training series
        series: Attribute names of ``TrainingMetricPoint`` to plot
        reference: Optional horizontal reference value (current mission), in series units
        style: Styling bundle
        title: Chart title

    Returns:
        Layout with one area and one line per series
    """
    style = style or RenderStyle()
    charts, palette = style.charts, style.palette
    maximum = series_maximum(series)
    layout = ChartLayout(kind="training_history", width=charts.width, height=charts.height,
                         background=palette.background, title=title)
    if not history:
        return _empty_label(layout, "NO_HISTORY", style)

    pad = charts.padding
    left, right, top, bottom = pad, charts.width - pad, pad, charts.height - pad
    x_scale = LinearScale((0, len(history) - 1), (left, right))
    y_scale = LinearScale((0, maximum), (bottom, top))
    _horizontal_grid(layout, y_scale, maximum, left, right, style)

    colors = [palette.primary, palette.danger, palette.warning, palette.success]
    xs = [x_scale(i) for i in range(len(history))]
    baseline = y_scale(0)

    for index, key in enumerate(series):
        color = colors[index % len(colors)]
        values = [getattr(point, key) for point in history]
        ys = [y_scale(v) for v in values]
        dashed = key == "train_loss"
        layout.add(PathPrimitive(
            points=((xs[0], baseline),) + _points(xs, ys) + ((xs[-1], baseline),),
            fill=color, fill_opacity=0.1 if dashed else 0.2, role=f"area:{key}",
        ))
        layout.add(LinePrimitive(
            points=_points(xs, ys), stroke=color, stroke_width=2.0 if dashed else 3.0,
            dash=(5.0, 5.0) if dashed else None, role=f"series:{key}",
        ))
        for point, x, y, value in zip(history, xs, ys, values):
            layout.add(MarkerPrimitive(
                x=x, y=y, radius=3.0, fill=color,
                tooltip=f"Epoch {point.epoch}: {SERIES_LABELS[key]} {_format_tick(value, maximum)}",
            ))
        layout.add(TextPrimitive(
            x=left + index * 180, y=top - 14, text=SERIES_LABELS[key], fill=color,
            font_size=charts.font_size, weight="bold", role="legend",
        ))

    if reference is not None:
        y = y_scale(reference)
        layout.add(LinePrimitive(
            points=((left, y), (right, y)), stroke=palette.success, stroke_width=2.0,
            dash=(3.0, 3.0), role="reference",
        ))
        layout.add(TextPrimitive(
            x=right, y=y - 6, text="CURRENT MISSION", fill=palette.success,
            font_size=charts.font_size - 2, anchor="end", weight="bold", role="reference-label",
        ))

    for point, x in zip(history, xs):
        layout.add(TextPrimitive(
            x=x, y=bottom + 18, text=f"Epoch {point.epoch}", fill=palette.muted,
            font_size=charts.font_size - 2, anchor="middle", role="tick",
        ))
    return layout


def metrics_bar_layout(
    result: Optional[DetectionResult] = None,
    history: Sequence[TrainingMetricPoint] = REFERENCE_TRAINING_HISTORY,
    style: Optional[RenderStyle] = None
) -> ChartLayout:
    """
    Horizontal bars comparing the current mission's ratio metrics.

    Without a result, the final point of ``history`` supplies the values.
    Bar lengths are clamped to the [0, 1] axis.
    """
    style = style or RenderStyle()
    charts, palette = style.charts, style.palette

    if result is not None:
        values = [result.confidence, result.iou, result.technical_details.segmentation_fidelity]
    else:
        final = history[-1] if history else None
        values = [
            final.val_accuracy / 100.0 if final else 0.0,
            final.val_iou if final else 0.0,
            0.85,
        ]
    metrics = list(zip(
        ("Model Confidence", "Segmentation IoU", "Fidelity Score"),
        values,
        (palette.primary, palette.success, palette.warning),
    ))

    pad, row = charts.padding, charts.bar_row_height
    height = len(metrics) * row + pad
    layout = ChartLayout(kind="metrics_bar", width=charts.width, height=height,
                         background=palette.background, title="Mission Fidelity")

    track_left = pad + charts.bar_label_width
    track_width = charts.width - pad * 2 - charts.bar_label_width
    x_scale = LinearScale((0.0, 1.0), (track_left, track_left + track_width))
    bar_height = 25.0

    for index, (label, value, color) in enumerate(metrics):
        y = index * row + pad
        clamped = min(max(float(value), 0.0), 1.0)
        right = x_scale(clamped)
        layout.add(TextPrimitive(
            x=pad, y=y + 17, text=label.upper(), fill=palette.muted,
            font_size=charts.font_size, weight="bold", role="label",
        ))
        layout.add(PathPrimitive(
            points=_rect(track_left, y, track_left + track_width, y + bar_height),
            fill=palette.surface, role="track",
        ))
        layout.add(PathPrimitive(
            points=_rect(track_left, y, right, y + bar_height),
            fill=color, fill_opacity=0.8, role="bar",
        ))
        layout.add(TextPrimitive(
            x=right + 10, y=y + 17, text=f"{value * 100:.1f}%", fill=palette.text,
            font_size=charts.font_size, role="value",
        ))
    return layout


def _rect(x0: float, y0: float, x1: float, y1: float) -> Tuple[Coordinate, ...]:
    return ((x0, y0), (x1, y0), (x1, y1), (x0, y1))


def radar_vertices(
    metrics: Sequence[MetricPoint],
    center: Tuple[float, float],
    radius: float
) -> List[Coordinate]:
    """
    Vertex of each metric at equal angular steps starting from angle 0.

    The vertex radius is ``radius * value / full_mark``; a non-positive
    ``full_mark`` collapses the vertex onto the center.
    """
    if not metrics:
        return []
    step = 2.0 * math.pi / len(metrics)
    vertices = []
    for index, metric in enumerate(metrics):
        ratio = metric.value / metric.full_mark if metric.full_mark > 0 else 0.0
        angle = index * step
        vertices.append((
            center[0] + radius * ratio * math.cos(angle),
            center[1] + radius * ratio * math.sin(angle),
        ))
    return vertices


def radar_layout(metrics: Sequence[MetricPoint], style: Optional[RenderStyle] = None) -> ChartLayout:
    """Radar signature: grid rings, spokes, the metric polygon and subject labels."""
    style = style or RenderStyle()
    charts, palette = style.charts, style.palette
    size = charts.radar_size
    center = (size / 2.0, size / 2.0)
    radius = size * RADAR_RADIUS_RATIO
    layout = ChartLayout(kind="radar", width=size, height=size,
                         background=palette.background, title="Radar Signature")

    sides = len(metrics) if len(metrics) >= 3 else FALLBACK_RING_SIDES
    ring_step = 2.0 * math.pi / sides
    for level in RING_LEVELS:
        layout.add(PathPrimitive(
            points=tuple(
                (center[0] + radius * level * math.cos(i * ring_step),
                 center[1] + radius * level * math.sin(i * ring_step))
                for i in range(sides)
            ),
            fill=None, stroke=palette.grid, stroke_width=1.0, role="ring",
        ))

    if not metrics:
        return _empty_label(layout, "NO_SIGNATURE", style)

    step = 2.0 * math.pi / len(metrics)
    for index in range(len(metrics)):
        angle = index * step
        layout.add(LinePrimitive(
            points=(center, (center[0] + radius * math.cos(angle), center[1] + radius * math.sin(angle))),
            stroke=palette.grid, stroke_width=1.0, role="spoke",
        ))

    vertices = radar_vertices(metrics, center, radius)
    layout.add(PathPrimitive(
        points=tuple(vertices), fill=palette.primary, fill_opacity=0.4,
        stroke=palette.primary, stroke_width=2.0, role="signature",
    ))
    for metric, (x, y) in zip(metrics, vertices):
        layout.add(MarkerPrimitive(
            x=x, y=y, radius=3.0, fill=palette.primary,
            tooltip=f"{metric.subject}: {metric.value:g}/{metric.full_mark:g}",
        ))

    for index, metric in enumerate(metrics):
        angle = index * step
        layout.add(TextPrimitive(
            x=center[0] + (radius + RADAR_LABEL_OFFSET) * math.cos(angle),
            y=center[1] + (radius + RADAR_LABEL_OFFSET) * math.sin(angle),
            text=metric.subject, fill=palette.muted, font_size=charts.font_size - 2,
            anchor="middle", role="axis-label",
        ))
    return layout


def inference_path_layout(path: Sequence[InferenceStep], style: Optional[RenderStyle] = None) -> ChartLayout:
    """Scatter of inference steps (x) against probability (y) joined by a line."""
    style = style or RenderStyle()
    charts, palette = style.charts, style.palette
    layout = ChartLayout(kind="inference_path", width=charts.width, height=charts.height,
                         background=palette.background, title="Inference Path")
    pad = charts.padding
    left, right, top, bottom = pad, charts.width - pad, pad, charts.height - pad
    y_scale = LinearScale((0.0, 1.0), (bottom, top))
    _horizontal_grid(layout, y_scale, 1.0, left, right, style, labels=False)
    for tick in range(5):
        layout.add(TextPrimitive(
            x=left - 6, y=y_scale(tick / 4.0) + 4, text=f"{tick * 25}%", fill=palette.muted,
            font_size=charts.font_size - 2, anchor="end", role="tick",
        ))

    if not path:
        return _empty_label(layout, "NO_INFERENCE_PATH", style)

    steps = [p.step for p in path]
    x_scale = LinearScale((min(steps), max(steps)), (left, right))
    xs = [x_scale(p.step) for p in path]
    ys = [y_scale(p.probability) for p in path]

    layout.add(LinePrimitive(points=_points(xs, ys), stroke=palette.primary, stroke_width=2.0, role="series"))
    for point, x, y in zip(path, xs, ys):
        layout.add(MarkerPrimitive(
            x=x, y=y, radius=charts.marker_radius, fill=palette.primary,
            tooltip=f"Step {point.step:g}: {point.probability * 100:.1f}%",
        ))
        layout.add(TextPrimitive(
            x=x, y=bottom + 18, text=f"{point.step:g}", fill=palette.muted,
            font_size=charts.font_size - 2, anchor="middle", role="tick",
        ))
    return layout


def parse_area_magnitude(text: str, fallback: float = 50.0) -> float:
    """
    Leading number of a free-text area estimate such as ``"4.2 km²"``.

    Every character except digits and dots is dropped first, so ``"1,500 m²"``
    reads as 1500. Text without a usable non-zero number yields ``fallback``.
    """
    stripped = re.sub(r"[^0-9.]", "", str(text or ""))
    match = re.match(r"[0-9]+\.?[0-9]*|\.[0-9]+", stripped)
    if not match:
        return fallback
    value = float(match.group(0))
    return value if value > 0 else fallback


def density_curve(magnitude: float, samples: int = 20) -> List[Tuple[float, float]]:
    """Symmetric Gaussian-like ``(x, density)`` samples centred on zero."""
    half = samples // 2
    curve = []
    for i in range(samples):
        x = float(i - half)
        curve.append((x, math.exp(-(x * x) / (magnitude / 5.0)) * magnitude))
    return curve


def density_layout(area_estimate: str, style: Optional[RenderStyle] = None) -> ChartLayout:
    """
    Decorative reflective-density curve shaped by the area estimate.

    This is a presentational chart, not a measurement: the magnitude parsed
    from the free text only sets the height and width of the curve.
    """
    style = style or RenderStyle()
    charts, palette = style.charts, style.palette
    magnitude = parse_area_magnitude(area_estimate, charts.density_fallback)
    curve = density_curve(magnitude, charts.density_samples)

    layout = ChartLayout(kind="density", width=charts.width, height=charts.height,
                         background=palette.background, title="Reflective Density")
    pad = charts.padding
    left, right, top, bottom = pad, charts.width - pad, pad, charts.height - pad
    peak = max(d for _, d in curve)
    x_scale = LinearScale((0, len(curve) - 1), (left, right))
    y_scale = LinearScale((0.0, peak), (bottom, top))
    _horizontal_grid(layout, y_scale, peak, left, right, style, labels=False)

    xs = [x_scale(i) for i in range(len(curve))]
    ys = [y_scale(d) for _, d in curve]
    layout.add(PathPrimitive(
        points=((xs[0], bottom),) + _points(xs, ys) + ((xs[-1], bottom),),
        fill=palette.primary, fill_opacity=0.3, role="area",
    ))
    layout.add(LinePrimitive(points=_points(xs, ys), stroke=palette.primary, stroke_width=2.0, role="series"))
    layout.add(TextPrimitive(
        x=left, y=top - 14, text=f"REFLECTIVE DENSITY (magnitude {magnitude:g})", fill=palette.primary,
        font_size=charts.font_size, weight="bold", role="legend",
    ))
    layout.add(TextPrimitive(
        x=right, y=top - 14, text=DENSITY_CAPTION, fill=palette.warning,
        font_size=charts.font_size - 2, anchor="end", weight="bold", role="caption",
    ))
    return layout


def hybrid_layout(
    history: Sequence[TrainingMetricPoint] = REFERENCE_TRAINING_HISTORY,
    result: Optional[DetectionResult] = None,
    style: Optional[RenderStyle] = None
) -> ChartLayout:
    """
    Composed chart: accuracy bars (percent axis) with the loss line (ratio axis).

    With a result, the current confidence is marked at the last epoch and the
    mission IoU is drawn as a reference line, both on the percent axis.
    """
    style = style or RenderStyle()
    charts, palette = style.charts, style.palette
    layout = ChartLayout(kind="hybrid", width=charts.width, height=charts.height,
                         background=palette.background, title="Hybrid Metrics")
    if not history:
        return _empty_label(layout, "NO_HISTORY", style)

    pad = charts.padding
    left, right, top, bottom = pad, charts.width - pad, pad, charts.height - pad
    percent = LinearScale((0.0, SERIES_MAX["val_accuracy"]), (bottom, top))
    ratio = LinearScale((0.0, SERIES_MAX["train_loss"]), (bottom, top))
    _horizontal_grid(layout, percent, SERIES_MAX["val_accuracy"], left, right, style)

    band = (right - left) / len(history)
    centers = [left + (i + 0.5) * band for i in range(len(history))]
    for point, x in zip(history, centers):
        layout.add(PathPrimitive(
            points=_rect(x - band * 0.3, percent(point.val_accuracy), x + band * 0.3, bottom),
            fill=palette.primary, fill_opacity=0.1, stroke=palette.primary, stroke_width=1.0, role="bar",
        ))
        layout.add(TextPrimitive(
            x=x, y=bottom + 18, text=f"{point.epoch}", fill=palette.muted,
            font_size=charts.font_size - 2, anchor="middle", role="tick",
        ))

    loss_ys = [ratio(point.train_loss) for point in history]
    layout.add(LinePrimitive(points=_points(centers, loss_ys), stroke=palette.danger,
                             stroke_width=2.0, role="series:train_loss"))
    for point, x, y in zip(history, centers, loss_ys):
        layout.add(MarkerPrimitive(x=x, y=y, radius=4.0, fill=palette.danger,
                                   tooltip=f"Epoch {point.epoch}: loss {point.train_loss:.2f}"))

    if result is not None:
        y = percent(result.iou * 100.0)
        layout.add(LinePrimitive(points=((left, y), (right, y)), stroke=palette.success,
                                 stroke_width=2.0, dash=(3.0, 3.0), role="reference"))
        layout.add(TextPrimitive(x=right, y=y - 6, text="MISSION IOU", fill=palette.success,
                                 font_size=charts.font_size - 2, anchor="end", role="reference-label"))
        layout.add(MarkerPrimitive(x=centers[-1], y=percent(result.confidence * 100.0), radius=8.0,
                                   fill=palette.primary,
                                   tooltip=f"Current confidence: {result.confidence * 100:.1f}%"))

    for index, (label, color) in enumerate((("History Accuracy %", palette.primary),
                                            ("Model Loss History", palette.danger))):
        layout.add(TextPrimitive(x=left + index * 180, y=top - 14, text=label, fill=color,
                                 font_size=charts.font_size, weight="bold", role="legend"))
    return layout


def chart_suite(
    result: Optional[DetectionResult],
    history: Sequence[TrainingMetricPoint] = REFERENCE_TRAINING_HISTORY,
    style: Optional[RenderStyle] = None
) -> Dict[str, ChartLayout]:
    """Every chart of the dashboard and the report, keyed by a file-friendly name."""
    style = style or RenderStyle()
    suite = OrderedDict()
    suite["training_history"] = training_history_layout(
        history, ("val_iou", "train_loss"), reference=result.iou if result else None, style=style
    )
    suite["validation_accuracy"] = training_history_layout(
        history, ("val_accuracy",), style=style, title="Validation Accuracy"
    )
    suite["metrics_bar"] = metrics_bar_layout(result, history, style)
    suite["hybrid"] = hybrid_layout(history, result, style)
    if result is not None:
        suite["radar"] = radar_layout(result.radar_metrics, style)
        suite["inference_path"] = inference_path_layout(result.inference_path, style)
        suite["density"] = density_layout(result.area_estimate, style)
    logger.debug(f"Laid out {len(suite)} charts")
    return suite
