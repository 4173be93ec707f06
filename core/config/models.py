"""Settings model for catalog resolution."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.cache.content_cache import FETCH_TTL_SECONDS, PROBE_TTL_SECONDS
from core.table.models import NamePolicy

DEFAULT_IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "webp", "gif")


class CatalogSettings(BaseModel):
    """Naming conventions and resolution knobs loaded from YAML."""

    model_config = ConfigDict(extra="forbid")

    legacy_base_name: str = "diagram"
    folder_conventions: dict[str, list[str]] = Field(default_factory=dict)
    known_folders: list[str] = Field(default_factory=list)
    image_extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_IMAGE_EXTENSIONS))
    folder_index_name: str = "folders.json"
    fetch_ttl_seconds: float = Field(default=FETCH_TTL_SECONDS, gt=0)
    probe_ttl_seconds: float = Field(default=PROBE_TTL_SECONDS, gt=0)
    require_table: bool = False
    require_image: bool = False
    table_delimiter: str = Field(default=",", min_length=1, max_length=1)
    name_policy: NamePolicy = "quantity"
    drop_placeholder_rows: bool = False

    @field_validator("image_extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        normalized = [item.strip().lstrip(".").lower() for item in value]
        if not normalized or not all(normalized):
            raise ValueError("image_extensions must list at least one non-empty extension")
        return normalized
