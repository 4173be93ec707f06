"""Catalog listing and diagram detail models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from core.manifest.models import Coordinate, DiagramManifest
from core.naming.models import ResolvedFolder
from core.table.models import TableRow
from core.utils.errors import ErrorCode


class CatalogEntry(BaseModel):
    """One listed diagram."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str
    folder_key: str = Field(alias="folderKey")
    base_name: str = Field(alias="baseName")
    marker_count: int = Field(alias="markerCount", ge=0)
    issues: list[ErrorCode] = Field(default_factory=list)


class SkippedFolder(BaseModel):
    """A folder excluded from the listing and why."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    folder_key: str = Field(alias="folderKey")
    error_code: ErrorCode = Field(alias="errorCode")
    message: str


class CatalogBuild(BaseModel):
    """Result of one catalog build.

    Rules:
    - entries keep discovery order unless sorting was requested
    - every requested folder appears exactly once in entries or skipped
    """

    model_config = ConfigDict(extra="forbid")

    entries: list[CatalogEntry] = Field(default_factory=list)
    skipped: list[SkippedFolder] = Field(default_factory=list)


class DiagramDetail(BaseModel):
    """Everything the detail view needs for one folder."""

    model_config = ConfigDict(extra="forbid")

    folder: ResolvedFolder
    manifest: DiagramManifest | None = None
    rows: list[TableRow] = Field(default_factory=list)
    image_url: str | None = None
    image_width: int | None = None
    image_height: int | None = None
    issues: list[ErrorCode] = Field(default_factory=list)

    @property
    def coordinates(self) -> tuple[Coordinate, ...]:
        return self.manifest.coordinates if self.manifest is not None else ()


class MarkerLink(BaseModel):
    """A marker joined to its parts-table row by ``number``."""

    model_config = ConfigDict(extra="forbid")

    coordinate: Coordinate
    row: TableRow | None = None


class CatalogCategory(BaseModel):
    """Entries sharing one parent path; ``path`` is ``""`` for top-level folders."""

    model_config = ConfigDict(extra="forbid")

    name: str
    path: str
    subcategories: list[str] = Field(default_factory=list)
    entries: list[CatalogEntry] = Field(default_factory=list)
