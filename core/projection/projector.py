"""Map native manifest coordinates onto the rendered image and back."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Final

from core.manifest.models import Coordinate, DiagramManifest

BASE_MARKER_SIZE: Final = 28.0
BASE_FONT_SIZE: Final = 12.0
MIN_MARKER_SIZE: Final = 20.0
MIN_MARKER_SIZE_NARROW: Final = 14.0
MAX_MARKER_SIZE: Final = 40.0
NARROW_VIEWPORT_WIDTH: Final = 640.0


@dataclass(frozen=True)
class RenderedSize:
    """Observed size of the rendered image element in CSS pixels."""

    width: float
    height: float = 0.0


@dataclass(frozen=True)
class MarkerPlacement:
    """Marker position in rendered pixels; ``left``/``top`` are its center."""

    number: str
    left: float
    top: float
    size: float
    font_size: float

    @property
    def box_left(self) -> float:
        return self.left - self.size / 2

    @property
    def box_top(self) -> float:
        return self.top - self.size / 2

    def as_payload(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "left": self.left,
            "top": self.top,
            "size": self.size,
            "fontSize": self.font_size,
        }


Projector = Callable[[Coordinate, RenderedSize], MarkerPlacement]


class CoordinateProjector:
    """Scale coordinates recorded at the image's native width.

    ``scale = rendered_width / native_width``. Until the native width is known
    (image not decoded yet) the scale is 1.0. Marker size follows the scale
    but is clamped so markers stay legible; the lower bound is smaller on
    narrow viewports.
    """

    def __init__(self, native_width: float, *, viewport_width: float | None = None) -> None:
        self.native_width = float(native_width)
        self.viewport_width = viewport_width

    def scale_for(self, rendered_width: float) -> float:
        if self.native_width <= 0 or rendered_width <= 0:
            return 1.0
        return rendered_width / self.native_width

    def marker_size(self, scale: float) -> float:
        minimum = MIN_MARKER_SIZE
        if self.viewport_width is not None and self.viewport_width < NARROW_VIEWPORT_WIDTH:
            minimum = MIN_MARKER_SIZE_NARROW
        return min(MAX_MARKER_SIZE, max(minimum, BASE_MARKER_SIZE * scale))

    def project(self, coordinate: Coordinate, rendered: RenderedSize) -> MarkerPlacement:
        scale = self.scale_for(rendered.width)
        size = self.marker_size(scale)
        return MarkerPlacement(
            number=coordinate.number,
            left=coordinate.x * scale,
            top=coordinate.y * scale,
            size=size,
            font_size=size * BASE_FONT_SIZE / BASE_MARKER_SIZE,
        )

    def project_all(
        self, manifest: DiagramManifest, rendered: RenderedSize
    ) -> list[MarkerPlacement]:
        return [self.project(coordinate, rendered) for coordinate in manifest.coordinates]

    def placements_payload(
        self, coordinates: Iterable[Coordinate], rendered: RenderedSize
    ) -> dict[str, Any]:
        """JSON-ready ``{scale, markers}`` for one rendered width."""

        return {
            "scale": self.scale_for(rendered.width),
            "markers": [
                self.project(coordinate, rendered).as_payload() for coordinate in coordinates
            ],
        }

    def unproject(self, left: float, top: float, rendered: RenderedSize) -> tuple[float, float]:
        """Convert a rendered center point back to native image pixels."""

        scale = self.scale_for(rendered.width)
        return left / scale, top / scale


def make_projector(native_width: float, *, viewport_width: float | None = None) -> Projector:
    """Return the ``(coordinate, rendered_size) -> placement`` callable."""

    return CoordinateProjector(native_width, viewport_width=viewport_width).project
