"""Parts-table parser with header-driven column role inference.

Rules:
- the first non-blank line is the header row
- roles come from header text, never from fixed positions
- rows that are blank after trimming are skipped
- rows without a ``number`` are discarded
- placeholder rows whose only content is the ordinal are kept unless
  ``drop_placeholder_rows`` is set
- ``id`` is the 1-based position among emitted rows
- every field stays a string
"""

from __future__ import annotations

import csv
import io
import re
from collections.abc import Sequence

from core.table.models import ColumnRoles, NamePolicy, TableRow

_NUMBER_HEADERS = frozenset({"number", "s.no.", "s.no", "sno", "no.", "no", "#"})
_PART_NUMBER_RE = re.compile(r"part\s*(?:no|num)")
_QUANTITY_RE = re.compile(r"\b(?:qty|quantity)\b")

_SERIALIZED_HEADER = ("Number", "Part No.", "Description", "Qty")


def infer_columns(headers: Sequence[str]) -> ColumnRoles:
    """Map header cells to row roles; the first header claiming a role wins."""

    found: dict[str, int] = {}
    for index, header in enumerate(headers):
        normalized = header.strip().lower()
        if not normalized:
            continue
        if _PART_NUMBER_RE.search(normalized):
            role = "part_number"
        elif normalized in _NUMBER_HEADERS:
            role = "number"
        elif "description" in normalized:
            role = "description"
        elif _QUANTITY_RE.search(normalized):
            role = "quantity"
        elif normalized == "name":
            role = "name"
        else:
            continue
        found.setdefault(role, index)
    return ColumnRoles(**found)


def parse_table(
    text: str,
    *,
    delimiter: str = ",",
    name_policy: NamePolicy = "quantity",
    drop_placeholder_rows: bool = False,
) -> list[TableRow]:
    """Parse delimited text into ordered ``TableRow`` objects.

    Args:
        text: Raw table content; the header row is mandatory.
        delimiter: Field separator.
        name_policy: ``quantity`` fills ``name`` from a Qty column and falls
            back to an exact ``Name`` column; ``name`` reverses that priority.
        drop_placeholder_rows: Also discard rows such as ``2,,,`` whose only
            non-blank cell is the number.

    Returns:
        Rows in file order. An input without a header yields an empty list.
    """

    reader = csv.reader(io.StringIO(text.lstrip("\ufeff"), newline=""), delimiter=delimiter)

    headers: list[str] | None = None
    for cells in reader:
        if _is_blank(cells):
            continue
        headers = [cell.strip() for cell in cells]
        break
    if headers is None:
        return []

    roles = infer_columns(headers)
    number_index = _fallback(roles.number, headers, "number")
    part_number_index = _fallback(roles.part_number, headers, "partNumber")
    description_index = _fallback(roles.description, headers, "description")
    name_index = _fallback(roles.name_column(name_policy), headers, "name")

    rows: list[TableRow] = []
    for cells in reader:
        if _is_blank(cells):
            continue

        values = [cell.strip() for cell in cells]
        number = _cell(values, number_index)
        if not number:
            continue
        if drop_placeholder_rows and _is_placeholder(values, number_index):
            continue

        rows.append(
            TableRow(
                id=len(rows) + 1,
                number=number,
                part_number=_cell(values, part_number_index),
                description=_cell(values, description_index),
                name=_cell(values, name_index),
            )
        )
    return rows


def serialize_table(rows: Sequence[TableRow], *, delimiter: str = ",") -> str:
    """Write rows back out using the canonical header synonyms."""

    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, lineterminator="\n")
    writer.writerow(_SERIALIZED_HEADER)
    for row in rows:
        writer.writerow([row.number, row.part_number, row.description, row.name])
    return buffer.getvalue()


def _is_blank(cells: Sequence[str]) -> bool:
    return not any(cell.strip() for cell in cells)


def _fallback(index: int | None, headers: Sequence[str], literal: str) -> int | None:
    # Literal, case-sensitive header match when no keyword claimed the role.
    if index is not None:
        return index
    try:
        return list(headers).index(literal)
    except ValueError:
        return None


def _cell(values: Sequence[str], index: int | None) -> str:
    if index is None or index >= len(values):
        return ""
    return values[index]


def _is_placeholder(values: Sequence[str], number_index: int | None) -> bool:
    if len(values) < 2:
        return False
    return not any(value for index, value in enumerate(values) if index != number_index)
