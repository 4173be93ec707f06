from __future__ import annotations

import json
import logging

import pytest

from core.manifest.validator import looks_like_html, parse_manifest_text, validate_manifest


def _manifest(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "imageName": "Oil-System",
        "coordinates": [{"id": 1, "number": "1", "x": 50, "y": 50, "partNumber": "P1"}],
    }
    payload.update(overrides)
    return payload


def test_valid_manifest_is_parsed() -> None:
    manifest = validate_manifest(_manifest())

    assert manifest is not None
    assert manifest.image_name == "Oil-System"
    assert manifest.marker_count == 1
    coordinate = manifest.coordinates[0]
    assert (coordinate.number, coordinate.x, coordinate.y) == ("1", 50.0, 50.0)
    assert coordinate.part_number == "P1"
    assert coordinate.description is None


def test_empty_coordinates_lenient_vs_strict() -> None:
    raw = _manifest(coordinates=[])

    lenient = validate_manifest(raw)
    assert lenient is not None
    assert lenient.marker_count == 0
    assert validate_manifest(raw, strict=True) is None


@pytest.mark.parametrize(
    "raw",
    [
        None,
        [],
        "text",
        {"coordinates": []},
        {"imageName": 5, "coordinates": []},
        {"imageName": "", "coordinates": []},
        {"imageName": "a", "coordinates": {}},
        {"imageName": "a", "coordinates": ["not-a-dict"]},
        {"imageName": "a", "coordinates": [{"number": "1", "x": "5", "y": 1}]},
        {"imageName": "a", "coordinates": [{"number": 1, "x": 5, "y": 1}]},
        {"imageName": "a", "coordinates": [{"number": "1", "x": True, "y": 1}]},
        {"imageName": "a", "coordinates": [{"number": "1", "x": float("nan"), "y": 1}]},
    ],
)
def test_structurally_invalid_manifests_return_none(raw: object) -> None:
    assert validate_manifest(raw) is None


def test_missing_optional_fields_get_defaults() -> None:
    manifest = validate_manifest(
        {"imageName": "a", "coordinates": [{"number": "7", "x": 1.5, "y": 2}]}
    )

    assert manifest is not None
    coordinate = manifest.coordinates[0]
    assert coordinate.id == 1
    assert coordinate.part_number == ""


def test_numeric_part_number_is_kept_as_string() -> None:
    manifest = validate_manifest(
        _manifest(coordinates=[{"number": "1", "x": 0, "y": 0, "partNumber": 4411}])
    )

    assert manifest is not None
    assert manifest.coordinates[0].part_number == "4411"


def test_html_error_page_and_malformed_json_are_reported_alike() -> None:
    assert parse_manifest_text("<!DOCTYPE html><html><body>404</body></html>") is None
    assert parse_manifest_text("  \n<html>oops</html>") is None
    assert parse_manifest_text('{"imageName": "a", "coordinates": [') is None


def test_parse_manifest_text_accepts_bom_prefixed_json() -> None:
    text = "\ufeff" + json.dumps(_manifest())

    manifest = parse_manifest_text(text, strict=True)

    assert manifest is not None
    assert manifest.marker_count == 1


def test_looks_like_html_ignores_json() -> None:
    assert looks_like_html("<!doctype html>")
    assert not looks_like_html('{"imageName": "<html>"}')


def test_duplicate_marker_numbers_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="diagrams.manifest")
    coordinates = [
        {"number": "3", "x": 1, "y": 1},
        {"number": "3", "x": 2, "y": 2},
    ]

    manifest = validate_manifest(_manifest(coordinates=coordinates))

    assert manifest is not None
    assert manifest.marker_count == 2
    assert any("repeats marker numbers" in record.message for record in caplog.records)
