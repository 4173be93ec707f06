from __future__ import annotations

from pathlib import Path

import pytest

from core.config.settings_loader import load_settings


def test_packaged_settings_load() -> None:
    settings = load_settings()

    assert settings.legacy_base_name == "diagram"
    assert settings.fetch_ttl_seconds == 60
    assert settings.probe_ttl_seconds == 300
    assert settings.name_policy == "quantity"
    assert settings.drop_placeholder_rows is False
    assert settings.folder_conventions["test_Brother_814_Needle_Bar_Mechanism"] == [
        "Brother814_Needle_Bar_Mechanism"
    ]


def test_scalar_convention_is_promoted_to_list(tmp_path: Path) -> None:
    path = tmp_path / "catalog.yaml"
    path.write_text(
        "folder_conventions:\n  Hook Assembly: HookAsm\nimage_extensions: ['.PNG']\n",
        encoding="utf-8",
    )

    settings = load_settings(path)

    assert settings.folder_conventions == {"Hook Assembly": ["HookAsm"]}
    assert settings.image_extensions == ["png"]


def test_empty_file_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "catalog.yaml"
    path.write_text("", encoding="utf-8")

    settings = load_settings(path)

    assert settings.table_delimiter == ","
    assert settings.known_folders == []


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("a: [unclosed", "Invalid YAML"),
        ("- just\n- a list\n", "must contain a mapping"),
        ("unknown_key: 1\n", "Invalid settings schema"),
        ("fetch_ttl_seconds: 0\n", "Invalid settings schema"),
        ("name_policy: both\n", "Invalid settings schema"),
        ("folder_conventions: [a, b]\n", "folder_conventions must be a mapping"),
    ],
)
def test_invalid_settings_raise_value_error(tmp_path: Path, content: str, message: str) -> None:
    path = tmp_path / "catalog.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ValueError, match=message):
        load_settings(path)


def test_missing_settings_file(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Settings file not found"):
        load_settings(tmp_path / "absent.yaml")
