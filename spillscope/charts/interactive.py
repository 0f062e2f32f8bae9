"""
Interactive matplotlib back-end.

The axes cover the whole figure with x in [0, width] and an inverted y axis
over [height, 0], so layout pixels are used as data coordinates without any
rescaling. Hovering a marker shows its tooltip.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

import matplotlib.pyplot as plt
import seaborn as sns
from matplotlib.colors import to_rgba
from matplotlib.patches import Circle, Polygon

from ..utils import color_opacity, to_hex
from .primitives import ChartLayout, LinePrimitive, MarkerPrimitive, PathPrimitive, TextPrimitive
from .renderer import ChartRenderer

ANCHORS = {"start": "left", "middle": "center", "end": "right"}
HOVER_TOLERANCE = 4.0


def _rgba(color: Optional[str], opacity: float = 1.0):
    if not color:
        return "none"
    return to_rgba(to_hex(color), color_opacity(color) * opacity)


@dataclass
class InteractiveChart:
    """A rendered matplotlib chart with hover tooltips."""
    layout: ChartLayout
    figure: plt.Figure
    axes: plt.Axes
    markers: List[Tuple[Circle, str]] = field(default_factory=list)
    annotation: Optional[object] = None

    def tooltip_at(self, x: float, y: float) -> Optional[str]:
        """Tooltip of the first marker under layout coordinates ``(x, y)``."""
        for circle, tooltip in self.markers:
            cx, cy = circle.center
            reach = circle.radius + HOVER_TOLERANCE
            if tooltip and (x - cx) ** 2 + (y - cy) ** 2 <= reach ** 2:
                return tooltip
        return None

    def _on_hover(self, event) -> None:
        if event.inaxes is not self.axes or event.xdata is None:
            if self.annotation.get_visible():
                self.annotation.set_visible(False)
                self.figure.canvas.draw_idle()
            return
        tooltip = self.tooltip_at(event.xdata, event.ydata)
        if tooltip:
            self.annotation.xy = (event.xdata, event.ydata)
            self.annotation.set_text(tooltip)
            self.annotation.set_visible(True)
            self.figure.canvas.draw_idle()
        elif self.annotation.get_visible():
            self.annotation.set_visible(False)
            self.figure.canvas.draw_idle()

    def save(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.figure.savefig(path, dpi=self.figure.dpi, facecolor=self.figure.get_facecolor())
        return path

    def show(self) -> None:
        plt.show()

    def close(self) -> None:
        plt.close(self.figure)


class InteractiveChartRenderer(ChartRenderer):
    """Render layouts onto live matplotlib figures."""

    def __init__(self, dpi: int = 100, theme: str = "dark"):
        """
        Args:
            dpi: Figure resolution; one layout pixel maps to one figure pixel
            theme: Seaborn axes style applied while the figure is built
        """
        self.dpi = dpi
        self.theme = theme
        self.figure = None
        self.axes = None
        self.markers: List[Tuple[Circle, str]] = []

    def _points(self, pixels: float) -> float:
        """Convert layout pixels to typographic points."""
        return pixels * 72.0 / self.dpi

    def begin(self, layout: ChartLayout) -> None:
        with sns.axes_style(self.theme):
            self.figure = plt.figure(figsize=(layout.width / self.dpi, layout.height / self.dpi), dpi=self.dpi)
            self.axes = self.figure.add_axes([0, 0, 1, 1])
        self.axes.autoscale(False)
        self.axes.set_xlim(0, layout.width)
        self.axes.set_ylim(layout.height, 0)
        self.axes.set_axis_off()
        self.figure.patch.set_facecolor(to_hex(layout.background))
        if layout.title and self.figure.canvas.manager is not None:
            self.figure.canvas.manager.set_window_title(layout.title)
        self.markers = []

    def draw_line(self, primitive: LinePrimitive) -> None:
        xs = [x for x, _ in primitive.points]
        ys = [y for _, y in primitive.points]
        line, = self.axes.plot(
            xs, ys,
            color=_rgba(primitive.stroke, primitive.opacity),
            linewidth=self._points(primitive.stroke_width),
            solid_capstyle="butt",
            label=primitive.role,
        )
        if primitive.dash:
            line.set_dashes([self._points(d) / max(line.get_linewidth(), 1e-6) for d in primitive.dash])

    def draw_path(self, primitive: PathPrimitive) -> None:
        has_stroke = bool(primitive.stroke) and primitive.stroke_width > 0
        patch = Polygon(
            list(primitive.points),
            closed=primitive.closed,
            facecolor=_rgba(primitive.fill, primitive.fill_opacity),
            edgecolor=_rgba(primitive.stroke) if has_stroke else "none",
            linewidth=self._points(primitive.stroke_width) if has_stroke else 0.0,
            label=primitive.role,
        )
        self.axes.add_patch(patch)

    def draw_text(self, primitive: TextPrimitive) -> None:
        self.axes.text(
            primitive.x, primitive.y, primitive.text,
            color=_rgba(primitive.fill),
            fontsize=self._points(primitive.font_size),
            fontweight=primitive.weight,
            ha=ANCHORS.get(primitive.anchor, "left"),
            va="baseline",
            label=primitive.role,
        )

    def draw_marker(self, primitive: MarkerPrimitive) -> None:
        circle = Circle(
            (primitive.x, primitive.y),
            radius=primitive.radius,
            facecolor=_rgba(primitive.fill),
            edgecolor="none",
            label=primitive.role,
        )
        self.axes.add_patch(circle)
        self.markers.append((circle, primitive.tooltip))

    def finish(self, layout: ChartLayout) -> InteractiveChart:
        annotation = self.axes.annotate(
            "", xy=(0, 0), xytext=(12, 12), textcoords="offset points",
            color="#F1F5F9", fontsize=self._points(11),
            bbox={"boxstyle": "round", "fc": "#0A192F", "ec": to_hex(layout.background), "alpha": 0.95},
        )
        annotation.set_visible(False)
        chart = InteractiveChart(
            layout=layout, figure=self.figure, axes=self.axes,
            markers=list(self.markers), annotation=annotation,
        )
        self.figure.canvas.mpl_connect("motion_notify_event", chart._on_hover)
        self.logger.debug(f"Rendered interactive {layout.kind} chart with {len(self.markers)} markers")
        return chart
