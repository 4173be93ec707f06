"""Data models for parsed parts tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

NamePolicy = Literal["quantity", "name"]


class TableRow(BaseModel):
    """One parts-list row; ``number`` joins back to ``Coordinate.number``."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    id: int
    number: str
    part_number: str = Field(default="", alias="partNumber")
    description: str = ""
    name: str = ""


@dataclass(frozen=True)
class ColumnRoles:
    """Header column indexes inferred for each row field."""

    number: int | None = None
    part_number: int | None = None
    description: int | None = None
    quantity: int | None = None
    name: int | None = None

    def name_column(self, policy: NamePolicy) -> int | None:
        if policy == "name":
            return self.name if self.name is not None else self.quantity
        return self.quantity if self.quantity is not None else self.name
