"""
Back-end agnostic drawing primitives produced by the chart layout engine.

Coordinates are chart pixels with the origin at the top-left corner and y
growing downward. Renderers must not rescale them.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

Coordinate = Tuple[float, float]


@dataclass(frozen=True)
class LinePrimitive:
    """Open polyline."""
    points: Tuple[Coordinate, ...]
    stroke: str
    stroke_width: float = 1.0
    dash: Optional[Tuple[float, ...]] = None
    opacity: float = 1.0
    role: str = "line"


@dataclass(frozen=True)
class PathPrimitive:
    """Filled path, closed unless ``closed`` is False."""
    points: Tuple[Coordinate, ...]
    fill: Optional[str]
    fill_opacity: float = 1.0
    stroke: Optional[str] = None
    stroke_width: float = 0.0
    closed: bool = True
    role: str = "path"


@dataclass(frozen=True)
class TextPrimitive:
    x: float
    y: float
    text: str
    fill: str
    font_size: float = 12.0
    anchor: str = "start"
    weight: str = "normal"
    role: str = "label"


@dataclass(frozen=True)
class MarkerPrimitive:
    """Data point with a hover tooltip."""
    x: float
    y: float
    radius: float
    fill: str
    tooltip: str = ""
    role: str = "marker"


Primitive = Union[LinePrimitive, PathPrimitive, TextPrimitive, MarkerPrimitive]


@dataclass
class ChartLayout:
    """Ordered primitives describing one chart; later primitives draw on top."""
    kind: str
    width: int
    height: int
    background: str
    title: str = ""
    primitives: List[Primitive] = field(default_factory=list)

    def add(self, primitive: Primitive) -> Primitive:
        self.primitives.append(primitive)
        return primitive

    def by_role(self, role: str) -> List[Primitive]:
        return [p for p in self.primitives if p.role == role]

    def coordinate_sequences(self) -> List[Tuple[str, Tuple[Coordinate, ...]]]:
        """Geometry of every primitive in draw order, as ``(type, points)`` pairs."""
        sequences = []
        for primitive in self.primitives:
            if isinstance(primitive, (LinePrimitive, PathPrimitive)):
                sequences.append((type(primitive).__name__, primitive.points))
            else:
                sequences.append((type(primitive).__name__, ((primitive.x, primitive.y),)))
        return sequences


class LinearScale:
    """
    Map a numeric domain onto a pixel range.

    A degenerate domain maps every value to the middle of the range.
    """

    def __init__(self, domain: Sequence[float], output_range: Sequence[float]):
        self.d0, self.d1 = float(domain[0]), float(domain[1])
        self.r0, self.r1 = float(output_range[0]), float(output_range[1])

    def __call__(self, value: float) -> float:
        span = self.d1 - self.d0
        if span == 0:
            return (self.r0 + self.r1) / 2.0
        return self.r0 + (float(value) - self.d0) / span * (self.r1 - self.r0)

    def __repr__(self) -> str:
        return f"LinearScale(domain=({self.d0}, {self.d1}), range=({self.r0}, {self.r1}))"
