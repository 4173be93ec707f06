#!/usr/bin/env python3
"""Generate the ``folders.json`` index for a local diagram data directory."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from apps.cli.io import write_json_atomic
from core.catalog.sorting import sort_folder_names


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Write the diagram folder index.")
    parser.add_argument("data_root", help="Directory holding one folder per diagram.")
    parser.add_argument(
        "--out",
        default=None,
        help="Output path (default: <data_root>/folders.json).",
    )
    parser.add_argument(
        "--manifest-suffix",
        default=".json",
        help="Only list folders holding at least one file with this suffix.",
    )
    parser.add_argument("--json", action="store_true", help="Also print the index as JSON.")
    return parser.parse_args()


def scan_folders(root: Path, *, manifest_suffix: str = ".json") -> list[str]:
    """Return posix folder keys, relative to ``root``, that may hold a diagram.

    Nested folders are listed with ``/`` separators. Hidden directories are
    skipped. Files directly under ``root`` never form a folder key.
    """

    if not root.is_dir():
        return []

    suffix = manifest_suffix.lower()
    keys: list[str] = []
    for directory in sorted(path for path in root.rglob("*") if path.is_dir()):
        relative = directory.relative_to(root)
        if any(part.startswith(".") for part in relative.parts):
            continue
        if any(
            child.is_file() and child.suffix.lower() == suffix for child in directory.iterdir()
        ):
            keys.append(relative.as_posix())
    return sort_folder_names(keys)


def build_index(root: Path, *, manifest_suffix: str = ".json") -> dict[str, Any]:
    return {"folders": scan_folders(root, manifest_suffix=manifest_suffix)}


def main() -> None:
    args = _parse_args()
    root = Path(args.data_root).expanduser()
    if not root.is_dir():
        raise SystemExit(f"ERROR: data root is not a directory: {root}")

    out_path = Path(args.out).expanduser() if args.out else root / "folders.json"
    index = build_index(root, manifest_suffix=args.manifest_suffix)
    write_json_atomic(out_path, index)

    if args.json:
        print(json.dumps(index, ensure_ascii=False, indent=2, sort_keys=True))
        return

    print(f"folders={len(index['folders'])}")
    print(f"wrote {out_path}")


if __name__ == "__main__":
    main()
