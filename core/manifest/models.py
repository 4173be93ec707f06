"""Data models for diagram coordinate manifests."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    """One marker placed on a diagram, in native image pixels.

    ``x``/``y`` name the marker's center. ``number`` is the join key against
    the parts table.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    id: int | str
    number: str
    x: float
    y: float
    part_number: str = Field(default="", alias="partNumber")
    description: str | None = None


class DiagramManifest(BaseModel):
    """Parsed ``<baseName>.json`` document."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    image_name: str = Field(alias="imageName", min_length=1)
    coordinates: tuple[Coordinate, ...] = ()

    @property
    def marker_count(self) -> int:
        return len(self.coordinates)
