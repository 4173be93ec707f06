"""Marker/row joins and catalog search and grouping helpers."""

from __future__ import annotations

from collections.abc import Sequence

from core.catalog.models import CatalogCategory, CatalogEntry, DiagramDetail, MarkerLink
from core.catalog.sorting import sort_by_folder_name, sort_folder_names
from core.manifest.models import DiagramManifest
from core.table.models import TableRow
from core.transport.base import split_folder_key


def join_markers(manifest: DiagramManifest, rows: Sequence[TableRow]) -> list[MarkerLink]:
    """Pair every marker with the first table row carrying the same number."""

    by_number: dict[str, TableRow] = {}
    for row in rows:
        by_number.setdefault(row.number, row)
    return [
        MarkerLink(coordinate=coordinate, row=by_number.get(coordinate.number))
        for coordinate in manifest.coordinates
    ]


def find_part(detail: DiagramDetail, number: str) -> MarkerLink | None:
    """Look up one marker label in a loaded diagram."""

    wanted = number.strip()
    row = next((row for row in detail.rows if row.number == wanted), None)
    coordinate = next((c for c in detail.coordinates if c.number == wanted), None)
    if coordinate is None:
        return None
    return MarkerLink(coordinate=coordinate, row=row)


def search_entries(entries: Sequence[CatalogEntry], query: str) -> list[CatalogEntry]:
    """Case-insensitive substring match over entry names and folder keys."""

    needle = query.strip().lower()
    if not needle:
        return list(entries)
    return [
        entry
        for entry in entries
        if needle in entry.name.lower() or needle in entry.folder_key.lower()
    ]


def category_of(folder_key: str) -> str:
    """Parent path of a folder key, ``/``-joined; ``""`` for a top-level folder."""

    return "/".join(split_folder_key(folder_key)[:-1])


def filter_by_category(entries: Sequence[CatalogEntry], category: str) -> list[CatalogEntry]:
    """Entries whose parent path is exactly ``category``."""

    wanted = "/".join(split_folder_key(category))
    return [entry for entry in entries if category_of(entry.folder_key) == wanted]


def group_by_category(entries: Sequence[CatalogEntry]) -> list[CatalogCategory]:
    """Group entries by parent path.

    Categories and the entries inside each one follow leading-number order.
    ``subcategories`` lists the direct child categories that hold entries.
    """

    grouped: dict[str, list[CatalogEntry]] = {}
    for entry in entries:
        grouped.setdefault(category_of(entry.folder_key), []).append(entry)

    paths = sort_folder_names(grouped)
    categories: list[CatalogCategory] = []
    for path in paths:
        children = [
            other.rsplit("/", 1)[-1]
            for other in paths
            if other and category_of(other) == path and other != path
        ]
        categories.append(
            CatalogCategory(
                name=split_folder_key(path)[-1] if path else "",
                path=path,
                subcategories=children,
                entries=sort_by_folder_name(grouped[path], lambda entry: entry.name),
            )
        )
    return categories
