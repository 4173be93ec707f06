"""Human-readable catalog and diagram summaries for CLI output."""

from __future__ import annotations

from collections import Counter

from core.catalog.joins import join_markers
from core.catalog.models import CatalogBuild, DiagramDetail


def render_catalog_summary(build: CatalogBuild) -> str:
    """Render one line per entry followed by skipped-folder counts."""

    lines: list[str] = ["catalog:"]
    if not build.entries:
        lines.append("  (nothing found)")
    for entry in build.entries:
        suffix = f" issues={','.join(issue.value for issue in entry.issues)}" if entry.issues else ""
        lines.append(
            f"  {entry.name} base={entry.base_name} markers={entry.marker_count}{suffix}"
        )

    if build.skipped:
        counter: Counter[str] = Counter(item.error_code.value for item in build.skipped)
        counts = ", ".join(f"{code}={counter[code]}" for code in sorted(counter))
        lines.append(f"skipped: {counts}")
        for item in build.skipped:
            lines.append(f"  {item.folder_key}: {item.error_code.value} ({item.message})")
    return "\n".join(lines)


def render_diagram_summary(detail: DiagramDetail) -> str:
    """Render manifest, image and joined parts rows for one folder."""

    folder = detail.folder
    lines = [
        f"folder: {folder.folder_key}",
        f"base_name: {folder.base_name}",
        f"image: {folder.image_file or 'missing'}",
    ]
    if detail.image_width is not None and detail.image_height is not None:
        lines.append(f"native_size: {detail.image_width}x{detail.image_height}")
    if detail.issues:
        lines.append(f"issues: {', '.join(issue.value for issue in detail.issues)}")

    manifest = detail.manifest
    if manifest is None:
        lines.append("markers: unavailable")
        return "\n".join(lines)

    lines.append(f"markers: {manifest.marker_count}")
    for link in join_markers(manifest, detail.rows):
        coordinate = link.coordinate
        row = link.row
        part = row.part_number if row is not None else coordinate.part_number
        description = row.description if row is not None else (coordinate.description or "")
        lines.append(
            f"  #{coordinate.number} ({coordinate.x:g},{coordinate.y:g}) {part} {description}".rstrip()
        )
    return "\n".join(lines)
