"""Settings loading utilities for catalog resolution."""

from __future__ import annotations

from pathlib import Path

import yaml  # type: ignore[import-untyped]
from pydantic import ValidationError

from core.config.models import CatalogSettings


def load_settings(path: Path | None = None) -> CatalogSettings:
    """Load and validate catalog settings from YAML."""

    settings_path = path or Path(__file__).with_name("catalog.yaml")

    try:
        raw = yaml.safe_load(settings_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ValueError(f"Settings file not found: {settings_path}") from exc
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in settings file: {settings_path}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"Settings file must contain a mapping: {settings_path}")

    try:
        return CatalogSettings.model_validate(_normalize_conventions(raw, settings_path))
    except ValidationError as exc:
        raise ValueError(f"Invalid settings schema: {settings_path}") from exc


def _normalize_conventions(raw: dict[object, object], settings_path: Path) -> dict[object, object]:
    # A single base name may be written as a scalar instead of a one-item list.
    normalized = dict(raw)
    conventions = normalized.get("folder_conventions")
    if conventions is None:
        normalized.pop("folder_conventions", None)
        return normalized
    if not isinstance(conventions, dict):
        raise ValueError(f"folder_conventions must be a mapping in {settings_path}")

    normalized["folder_conventions"] = {
        str(folder): [names] if isinstance(names, str) else names
        for folder, names in conventions.items()
    }
    return normalized
