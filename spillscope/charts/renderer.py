"""
Common base for chart back-ends.

A back-end only implements the primitive capability set; dispatch over a
``ChartLayout`` lives here so every back-end walks primitives in the same
order.
"""

from abc import ABC, abstractmethod

from ..utils import ChartRenderError, LoggerMixin
from .primitives import ChartLayout, LinePrimitive, MarkerPrimitive, PathPrimitive, TextPrimitive


class ChartRenderer(LoggerMixin, ABC):
    """Render a ``ChartLayout`` by dispatching each primitive to a draw method."""

    def render(self, layout: ChartLayout):
        """
        Render ``layout`` and return the back-end specific result.

        Raises:
            ChartRenderError: If the back-end fails on a primitive
        """
        self.begin(layout)
        for primitive in layout.primitives:
            try:
                if isinstance(primitive, LinePrimitive):
                    self.draw_line(primitive)
                elif isinstance(primitive, PathPrimitive):
                    self.draw_path(primitive)
                elif isinstance(primitive, TextPrimitive):
                    self.draw_text(primitive)
                elif isinstance(primitive, MarkerPrimitive):
                    self.draw_marker(primitive)
                else:
                    raise TypeError(f"Unknown primitive {type(primitive).__name__}")
            except ChartRenderError:
                raise
            except Exception as e:
                raise ChartRenderError(
                    f"{type(self).__name__} failed on {type(primitive).__name__}: {e}",
                    context={"chart": layout.kind, "role": getattr(primitive, "role", None)}
                ) from e
        return self.finish(layout)

    @abstractmethod
    def begin(self, layout: ChartLayout) -> None:
        """Prepare a fresh canvas sized to the layout."""

    @abstractmethod
    def draw_line(self, primitive: LinePrimitive) -> None:
        pass

    @abstractmethod
    def draw_path(self, primitive: PathPrimitive) -> None:
        pass

    @abstractmethod
    def draw_text(self, primitive: TextPrimitive) -> None:
        pass

    @abstractmethod
    def draw_marker(self, primitive: MarkerPrimitive) -> None:
        pass

    @abstractmethod
    def finish(self, layout: ChartLayout):
        """Return the rendered chart."""
