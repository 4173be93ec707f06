"""Data models for folder naming resolution."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ResolvedFolder:
    """Outcome of probing one folder; all artifacts share ``base_name``."""

    folder_key: str
    base_name: str | None
    has_manifest: bool
    has_table: bool
    has_image: bool
    image_file: str | None = None

    @classmethod
    def not_found(cls, folder_key: str) -> ResolvedFolder:
        return cls(
            folder_key=folder_key,
            base_name=None,
            has_manifest=False,
            has_table=False,
            has_image=False,
        )

    @property
    def manifest_file(self) -> str | None:
        return f"{self.base_name}.json" if self.base_name else None

    @property
    def table_file(self) -> str | None:
        return f"{self.base_name}.csv" if self.base_name else None
