"""
Report assembler: one self-contained HTML mission report.

Pure string composition. Raster artifacts are embedded as data URIs and charts
as inline SVG, so the document has no external references and can be viewed
offline.
"""

import html
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

from ..charts import SvgChartRenderer, chart_suite
from ..charts.layout import DENSITY_CAPTION
from ..data import REFERENCE_TRAINING_HISTORY, DetectionResult, TrainingMetricPoint
from ..utils import RenderStyle, ReportError, get_logger, log_execution_time

logger = get_logger(__name__)

ARTIFACT_PANELS = (
    ("input", "Input SAR"),
    ("ground_truth_mask", "Ground Truth"),
    ("predicted_mask", "Predicted Mask"),
    ("overlay", "Final Overlay"),
)

CHART_TITLES = {
    "training_history": "Training Performance (IoU / Loss)",
    "validation_accuracy": "Validation Accuracy",
    "metrics_bar": "Mission Fidelity",
    "hybrid": "Hybrid Metric History",
    "radar": "Radar Signature",
    "inference_path": "Inference Path",
    "density": "Reflective Density",
}


def _esc(value) -> str:
    return html.escape(str(value), quote=True)


def _stylesheet(style: RenderStyle) -> str:
    palette = style.palette
    return f"""
    body {{ font-family: sans-serif; background: {palette.background}; color: {palette.text}; padding: 40px; }}
    .card {{ background: {palette.surface}; padding: 40px; border-radius: 24px; border: 1px solid {palette.grid}; max-width: 960px; margin: auto; }}
    h1 {{ color: {palette.primary}; text-transform: uppercase; letter-spacing: 0.2em; font-size: 24px; border-bottom: 2px solid {palette.primary}; padding-bottom: 20px; }}
    h2 {{ color: {palette.muted}; text-transform: uppercase; letter-spacing: 0.15em; font-size: 12px; margin-top: 40px; }}
    .meta {{ display: flex; gap: 40px; margin-top: 20px; }}
    .grid {{ display: grid; grid-template-columns: 1fr 1fr; gap: 30px; margin-top: 20px; }}
    .metrics-grid {{ display: grid; grid-template-columns: repeat(4, 1fr); gap: 20px; }}
    .img-box {{ border: 1px solid {palette.grid}; padding: 10px; text-align: center; background: #000; border-radius: 12px; }}
    .img-box img {{ max-width: 100%; height: auto; border-radius: 4px; }}
    .unavailable {{ padding: 60px 10px; color: {palette.muted}; font-size: 11px; letter-spacing: 0.2em; }}
    .metrics {{ margin-top: 40px; background: {palette.surface}; padding: 30px; border-radius: 16px; border: 1px solid {palette.grid}; }}
    .label {{ font-weight: bold; color: {palette.primary}; text-transform: uppercase; font-size: 10px; letter-spacing: 0.1em; display: block; margin-bottom: 4px; }}
    .impact {{ padding: 16px; border-radius: 12px; border: 1px solid {palette.grid}; margin-top: 20px; }}
    .impact-critical {{ border: 2px solid {palette.danger}; background: rgba(255, 0, 0, 0.08); }}
    .impact-critical p {{ color: {palette.danger}; font-weight: bold; text-transform: uppercase; }}
    .impact-clear p {{ color: {palette.success}; font-weight: bold; }}
    .chart {{ margin-top: 20px; border: 1px solid {palette.grid}; border-radius: 12px; padding: 10px; background: {palette.background}; }}
    .caption {{ color: {palette.warning}; font-size: 10px; letter-spacing: 0.1em; }}
    p {{ margin-bottom: 20px; }}
    footer {{ margin-top: 60px; text-align: center; font-size: 10px; color: {palette.muted}; text-transform: uppercase; letter-spacing: 0.4em; }}
    """


def _artifact_panel(label: str, data_uri: Optional[str]) -> str:
    if data_uri:
        body = f'<img src="{_esc(data_uri)}" alt="{_esc(label)}" />'
    else:
        body = '<div class="unavailable">ARTIFACT UNAVAILABLE</div>'
    return f'<div class="img-box"><span class="label">{_esc(label)}</span>{body}</div>'


def _impact_block(result: DetectionResult) -> str:
    if not result.spill_found:
        return (
            '<div class="impact impact-clear"><span class="label">Environmental Impact</span>'
            '<p>CLEAR: no anomaly detected</p></div>'
        )
    css = "impact impact-critical" if result.is_critical else "impact"
    return (
        f'<div class="{css}"><span class="label">Environmental Impact</span>'
        f'<p>{_esc(result.environmental_impact)}</p></div>'
    )


def _metrics_block(result: DetectionResult) -> str:
    details = result.technical_details
    return f"""
      <div class="metrics">
        <div class="metrics-grid">
          <div><span class="label">Confidence</span> {result.confidence * 100:.2f}%</div>
          <div><span class="label">IoU Score</span> {result.iou:.4f}</div>
          <div><span class="label">Area Estimate</span> {_esc(result.area_estimate)}</div>
          <div><span class="label">Segmentation Fidelity</span> {details.segmentation_fidelity * 100:.1f}%</div>
        </div>
        <div style="margin-top: 30px;">
          <span class="label">Analytical Summary</span>
          <p style="font-style: italic;">&quot;{_esc(result.description)}&quot;</p>
          <span class="label">Spectral Signature</span>
          <p>{_esc(details.spectral_signature) or "N/A"}</p>
          <span class="label">Denoising Status</span>
          <p>{_esc(details.denoising_status) or "N/A"}</p>
        </div>
        {_impact_block(result)}
      </div>"""


def render_report_charts(
    result: DetectionResult,
    history: Sequence[TrainingMetricPoint],
    style: RenderStyle
) -> Dict[str, str]:
    """Static SVG markup for every chart of the report."""
    renderer = SvgChartRenderer()
    return {name: renderer.render(layout) for name, layout in chart_suite(result, history, style).items()}


def _chart_section(charts: Dict[str, str]) -> str:
    blocks = []
    for name, markup in charts.items():
        caption = f'<div class="caption">{_esc(DENSITY_CAPTION)}</div>' if name == "density" else ""
        blocks.append(
            f'<div class="chart" id="chart-{_esc(name)}"><span class="label">{_esc(CHART_TITLES.get(name, name))}</span>'
            f'{markup}{caption}</div>'
        )
    return "\n".join(blocks)


def report_filename(generated_at: Optional[datetime] = None, prefix: str = "sentinel_x_mission") -> str:
    """File name of the exported report, stamped in epoch milliseconds."""
    generated_at = generated_at or datetime.now()
    return f"{prefix}_{int(generated_at.timestamp() * 1000)}.html"


@log_execution_time
def assemble_report(
    result: DetectionResult,
    history: Sequence[TrainingMetricPoint] = REFERENCE_TRAINING_HISTORY,
    style: Optional[RenderStyle] = None,
    generated_at: Optional[datetime] = None
) -> str:
    """
    Compose the mission report of ``result`` as a standalone HTML document.

    The raster artifacts come from ``result.visuals``; a missing or empty
    artifact renders an "unavailable" panel instead of a broken image.

    Args:
        result: Detection result, usually carrying its visual artifacts
        history: Reference training series for the history charts
        style: Styling bundle
        generated_at: Report timestamp, defaults to now

    Returns:
        UTF-8 HTML document
    """
    style = style or RenderStyle()
    generated_at = generated_at or datetime.now()
    mission_id = report_filename(generated_at, style.report.filename_prefix)[:-len(".html")]
    status = "ANOMALY DETECTED" if result.spill_found else "CLEAR"

    if result.visuals is None:
        logger.warning("Assembling report without visual artifacts")
    panels = "\n".join(
        _artifact_panel(label, getattr(result.visuals, attr, "") if result.visuals else "")
        for attr, label in ARTIFACT_PANELS
    )
    charts = render_report_charts(result, history, style)

    return f"""<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>{_esc(style.report.title)} - {_esc(mission_id)}</title>
    <style>{_stylesheet(style)}</style>
  </head>
  <body>
    <div class="card">
      <h1>{_esc(style.report.title)}</h1>
      <div class="meta">
        <p><span class="label">Mission</span> {_esc(mission_id)}</p>
        <p><span class="label">Mission Time</span> {_esc(generated_at.strftime("%Y-%m-%d %H:%M:%S"))}</p>
        <p><span class="label">Status</span> {status}</p>
      </div>
      {_metrics_block(result)}
      <h2>Visual Artifacts</h2>
      <div class="grid">
        {panels}
      </div>
      <h2>Statistical Charts</h2>
      {_chart_section(charts)}
      <footer>{_esc(style.report.footer)}</footer>
    </div>
  </body>
</html>
"""


def save_report(document: str, path: Union[str, Path]) -> Path:
    """Write the report as UTF-8."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(document, encoding="utf-8")
    except OSError as e:
        raise ReportError(f"Cannot write report: {e}", context={"path": str(path)}) from e
    logger.info(f"Mission report exported to {path}")
    return path
