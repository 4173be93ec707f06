from __future__ import annotations

from core.catalog.sorting import (
    compare_folder_names,
    extract_leading_integer,
    sort_by_folder_name,
    sort_folder_names,
)


def test_extract_leading_integer() -> None:
    assert extract_leading_integer("10. Oil Lubricating System") == 10
    assert extract_leading_integer("  2 Feed") == 2
    assert extract_leading_integer("Feed 2") is None
    assert extract_leading_integer("") is None


def test_numbered_names_sort_numerically_before_unnumbered() -> None:
    names = ["Thread Guide", "10. Oil Lubricating System", "2. Feed Dog", "Arm Shaft", "1. Hook"]

    assert sort_folder_names(names) == [
        "1. Hook",
        "2. Feed Dog",
        "10. Oil Lubricating System",
        "Arm Shaft",
        "Thread Guide",
    ]


def test_equal_numbers_fall_back_to_lexical_order() -> None:
    assert sort_folder_names(["3. b", "3. a"]) == ["3. a", "3. b"]
    assert compare_folder_names("3. a", "3. a") == 0


def test_sort_by_folder_name_uses_accessor() -> None:
    items = [{"name": "12 Gear"}, {"name": "9 Cam"}]

    assert sort_by_folder_name(items, lambda item: item["name"]) == [
        {"name": "9 Cam"},
        {"name": "12 Gear"},
    ]
