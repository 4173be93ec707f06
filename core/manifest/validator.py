"""Structural validation of coordinate manifests.

Rules:
- value is a mapping with a non-empty string ``imageName``
- ``coordinates`` is a sequence of mappings with numeric ``x``/``y`` and a
  string ``number``
- strict mode additionally requires at least one coordinate
- malformed JSON and HTML error pages are reported the same way as a
  structural failure: ``None``
"""

from __future__ import annotations

import json
import logging
import math
from collections import Counter
from typing import Any

from pydantic import ValidationError

from core.manifest.models import DiagramManifest

logger = logging.getLogger("diagrams.manifest")

_HTML_MARKERS = ("<!doctype", "<html")


def validate_manifest(raw: Any, *, strict: bool = False) -> DiagramManifest | None:
    """Return a ``DiagramManifest`` for structurally valid input, else ``None``."""

    if not isinstance(raw, dict):
        return None

    image_name = raw.get("imageName")
    if not isinstance(image_name, str) or not image_name.strip():
        return None

    coordinates = raw.get("coordinates")
    if not isinstance(coordinates, (list, tuple)):
        return None
    if strict and not coordinates:
        return None

    normalized: list[dict[str, Any]] = []
    for index, item in enumerate(coordinates):
        if not _is_valid_coordinate(item):
            return None
        normalized.append(_normalize_coordinate(item, position=index + 1))

    try:
        manifest = DiagramManifest.model_validate(
            {"imageName": image_name, "coordinates": normalized}
        )
    except ValidationError:
        return None

    duplicates = sorted(
        number for number, count in Counter(c.number for c in manifest.coordinates).items()
        if count > 1
    )
    if duplicates:
        logger.warning("manifest %s repeats marker numbers: %s", image_name, duplicates)
    return manifest


def parse_manifest_text(text: str, *, strict: bool = False) -> DiagramManifest | None:
    """Decode manifest JSON text and validate it."""

    if looks_like_html(text):
        return None
    try:
        raw = json.loads(text.lstrip("\ufeff"))
    except ValueError:
        return None
    return validate_manifest(raw, strict=strict)


def looks_like_html(text: str) -> bool:
    """Detect an HTML error page served in place of JSON."""

    head = text.lstrip("\ufeff \t\r\n")[:64].lower()
    return head.startswith(_HTML_MARKERS)


def _is_valid_coordinate(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    return (
        _is_number(item.get("x"))
        and _is_number(item.get("y"))
        and isinstance(item.get("number"), str)
    )


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _normalize_coordinate(item: dict[str, Any], *, position: int) -> dict[str, Any]:
    coordinate_id = item.get("id")
    if isinstance(coordinate_id, bool) or not isinstance(coordinate_id, (int, str)):
        coordinate_id = position

    part_number = item.get("partNumber")
    description = item.get("description")
    return {
        "id": coordinate_id,
        "number": item["number"],
        "x": item["x"],
        "y": item["y"],
        "partNumber": "" if part_number is None else str(part_number),
        "description": description if isinstance(description, str) else None,
    }
