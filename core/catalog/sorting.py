"""Numeric-prefix ordering for folder names such as ``10. Oil System``."""

from __future__ import annotations

import functools
import re
from collections.abc import Callable, Iterable
from typing import TypeVar

T = TypeVar("T")

_LEADING_INTEGER_RE = re.compile(r"^\s*(\d+)")


def extract_leading_integer(name: str) -> int | None:
    match = _LEADING_INTEGER_RE.match(name)
    if match is None:
        return None
    return int(match.group(1))


def compare_folder_names(left: str, right: str) -> int:
    """Numbered names first, ascending by number; then lexical order."""

    left_number = extract_leading_integer(left)
    right_number = extract_leading_integer(right)

    if left_number is not None and right_number is not None and left_number != right_number:
        return -1 if left_number < right_number else 1
    if left_number is not None and right_number is None:
        return -1
    if left_number is None and right_number is not None:
        return 1
    if left == right:
        return 0
    return -1 if left < right else 1


def sort_folder_names(names: Iterable[str]) -> list[str]:
    return sorted(names, key=functools.cmp_to_key(compare_folder_names))


def sort_by_folder_name(items: Iterable[T], name_of: Callable[[T], str]) -> list[T]:
    return sorted(
        items,
        key=functools.cmp_to_key(lambda a, b: compare_folder_names(name_of(a), name_of(b))),
    )
