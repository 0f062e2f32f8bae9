"""
Static SVG back-end.

Serializes a chart layout into self-contained SVG markup: inline presentation
attributes, no scripts, no external references. Marker tooltips become
``<title>`` children so they still show on hover in a browser.
"""

from typing import Iterable, Optional, Tuple

import svgwrite

from ..utils import color_opacity, to_hex
from .primitives import ChartLayout, Coordinate, LinePrimitive, MarkerPrimitive, PathPrimitive, TextPrimitive
from .renderer import ChartRenderer

DEFAULT_FONT_FAMILY = "Arial, sans-serif"
COORDINATE_PRECISION = 3


def _fmt(value: float) -> str:
    text = f"{round(float(value), COORDINATE_PRECISION):.{COORDINATE_PRECISION}f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def path_data(points: Iterable[Coordinate], closed: bool) -> str:
    """``M x y L x y ... [Z]`` path data for a polyline."""
    commands = []
    for index, (x, y) in enumerate(points):
        commands.append(f"{'M' if index == 0 else 'L'} {_fmt(x)} {_fmt(y)}")
    if closed and commands:
        commands.append("Z")
    return " ".join(commands)


class SvgChartRenderer(ChartRenderer):
    """Render layouts to SVG strings with svgwrite."""

    def __init__(self, font_family: str = DEFAULT_FONT_FAMILY, responsive: bool = True):
        """
        Args:
            font_family: Font stack for text primitives
            responsive: Emit ``width="100%"`` so the chart scales with its container
        """
        self.font_family = font_family
        self.responsive = responsive
        self.drawing: Optional[svgwrite.Drawing] = None
        self.groups = {}

    def begin(self, layout: ChartLayout) -> None:
        size: Tuple = ("100%", layout.height) if self.responsive else (layout.width, layout.height)
        self.drawing = svgwrite.Drawing(size=size, profile="full")
        self.drawing.viewbox(0, 0, layout.width, layout.height)
        self.drawing.add(self.drawing.rect(insert=(0, 0), size=("100%", "100%"), fill=to_hex(layout.background)))
        root = self.drawing.g(id=f"{layout.kind}_root")
        self.drawing.add(root)
        self.groups = {"root": root}
        if layout.title:
            self.drawing.set_desc(title=layout.title)

    def _paint(self, color: Optional[str], opacity: float = 1.0):
        """Hex color plus an opacity combining the primitive's and the color's alpha."""
        if not color:
            return "none", None
        alpha = color_opacity(color) * opacity
        return to_hex(color), (None if alpha >= 1.0 else round(alpha, 3))

    def draw_line(self, primitive: LinePrimitive) -> None:
        stroke, stroke_opacity = self._paint(primitive.stroke, primitive.opacity)
        attributes = {
            "d": path_data(primitive.points, closed=False),
            "fill": "none",
            "stroke": stroke,
            "stroke_width": primitive.stroke_width,
            "class_": primitive.role.replace(":", "-"),
        }
        if stroke_opacity is not None:
            attributes["stroke_opacity"] = stroke_opacity
        if primitive.dash:
            attributes["stroke_dasharray"] = ",".join(_fmt(d) for d in primitive.dash)
        self.groups["root"].add(self.drawing.path(**attributes))

    def draw_path(self, primitive: PathPrimitive) -> None:
        fill, fill_opacity = self._paint(primitive.fill, primitive.fill_opacity)
        attributes = {
            "d": path_data(primitive.points, closed=primitive.closed),
            "fill": fill,
            "class_": primitive.role.replace(":", "-"),
        }
        if fill_opacity is not None:
            attributes["fill_opacity"] = fill_opacity
        if primitive.stroke and primitive.stroke_width > 0:
            stroke, stroke_opacity = self._paint(primitive.stroke)
            attributes["stroke"] = stroke
            attributes["stroke_width"] = primitive.stroke_width
            if stroke_opacity is not None:
                attributes["stroke_opacity"] = stroke_opacity
        self.groups["root"].add(self.drawing.path(**attributes))

    def draw_text(self, primitive: TextPrimitive) -> None:
        fill, fill_opacity = self._paint(primitive.fill)
        attributes = {
            "insert": (round(primitive.x, COORDINATE_PRECISION), round(primitive.y, COORDINATE_PRECISION)),
            "fill": fill,
            "font_size": primitive.font_size,
            "font_family": self.font_family,
            "text_anchor": primitive.anchor,
            "class_": primitive.role.replace(":", "-"),
        }
        if primitive.weight != "normal":
            attributes["font_weight"] = primitive.weight
        if fill_opacity is not None:
            attributes["fill_opacity"] = fill_opacity
        self.groups["root"].add(self.drawing.text(primitive.text, **attributes))

    def draw_marker(self, primitive: MarkerPrimitive) -> None:
        fill, fill_opacity = self._paint(primitive.fill)
        attributes = {
            "center": (round(primitive.x, COORDINATE_PRECISION), round(primitive.y, COORDINATE_PRECISION)),
            "r": primitive.radius,
            "fill": fill,
            "class_": primitive.role,
        }
        if fill_opacity is not None:
            attributes["fill_opacity"] = fill_opacity
        circle = self.drawing.circle(**attributes)
        if primitive.tooltip:
            circle.set_desc(title=primitive.tooltip)
        self.groups["root"].add(circle)

    def finish(self, layout: ChartLayout) -> str:
        markup = self.drawing.tostring()
        self.logger.debug(f"Rendered {layout.kind} SVG ({len(markup)} bytes)")
        return markup


def render_svg(layout: ChartLayout) -> str:
    """Convenience wrapper returning the SVG markup of ``layout``."""
    return SvgChartRenderer().render(layout)
