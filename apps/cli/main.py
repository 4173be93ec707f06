"""Typer CLI entrypoint for diagram-catalog."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated, Any, cast

import typer

from apps.cli.format_human import render_catalog_summary, render_diagram_summary
from apps.cli.io import write_json_atomic, write_text_atomic
from core.catalog.models import CatalogBuild, DiagramDetail
from core.catalog.resolver import CatalogResolver
from core.config.models import CatalogSettings
from core.config.settings_loader import load_settings
from core.manifest.validator import parse_manifest_text
from core.projection.projector import CoordinateProjector, RenderedSize
from core.table.models import NamePolicy
from core.table.parser import parse_table, serialize_table
from core.transport.factory import create_transport
from core.utils.errors import DiagramNotFoundError

app = typer.Typer(help="Diagram catalog CLI", rich_markup_mode=None)

DataRootOption = Annotated[
    str,
    typer.Option("--data-root", help="Directory or http(s) URL holding diagram folders."),
]
SettingsOption = Annotated[
    Path | None,
    typer.Option("--settings", exists=True, dir_okay=False, file_okay=True),
]


@app.callback()
def cli_callback() -> None:
    """CLI root callback to keep subcommands explicit."""


@app.command("catalog")
def catalog_command(
    data_root: DataRootOption,
    settings: SettingsOption = None,
    lenient: Annotated[
        bool, typer.Option("--lenient", help="Keep folders whose manifest is invalid.")
    ] = False,
    sort: Annotated[bool, typer.Option("--sort", help="Order entries by leading number.")] = False,
    out: Annotated[Path | None, typer.Option("--out", dir_okay=False)] = None,
) -> None:
    """List every diagram reachable from the data root."""

    resolved_settings = _load_settings_or_exit(settings)
    resolver = _build_resolver(data_root, resolved_settings)

    async def _run() -> CatalogBuild:
        async with resolver:
            return await resolver.build_catalog(strict=not lenient, sort=sort)

    build = asyncio.run(_run())
    typer.echo(render_catalog_summary(build))

    if out is not None:
        write_json_atomic(out, build.model_dump(mode="json", by_alias=True))
        typer.echo(f"INFO: wrote {out}")


@app.command("show")
def show_command(
    folder: Annotated[str, typer.Argument(help="Folder key, e.g. '10. Oil Lubricating System'.")],
    data_root: DataRootOption,
    settings: SettingsOption = None,
    strict: Annotated[bool, typer.Option("--strict")] = False,
) -> None:
    """Print manifest markers joined with the parts table for one folder."""

    resolved_settings = _load_settings_or_exit(settings)
    resolver = _build_resolver(data_root, resolved_settings)

    async def _run() -> DiagramDetail:
        async with resolver:
            return await resolver.load_diagram(folder, strict=strict)

    try:
        detail = asyncio.run(_run())
    except DiagramNotFoundError as exc:
        typer.echo(f"ERROR({exc.error_code.value}): {exc}")
        raise typer.Exit(code=2) from exc

    typer.echo(render_diagram_summary(detail))


@app.command("parse-table")
def parse_table_command(
    file: Annotated[Path, typer.Argument(exists=True, dir_okay=False, file_okay=True)],
    delimiter: Annotated[str, typer.Option("--delimiter")] = ",",
    name_policy: Annotated[str, typer.Option("--name-policy")] = "quantity",
    drop_placeholders: Annotated[
        bool,
        typer.Option("--drop-placeholders", help="Discard rows holding only a number."),
    ] = False,
    out: Annotated[Path | None, typer.Option("--out", dir_okay=False)] = None,
) -> None:
    """Parse a parts table and print the normalized rows as JSON."""

    if len(delimiter) != 1:
        typer.echo("ERROR: --delimiter must be a single character.")
        raise typer.Exit(code=1)
    normalized_policy = name_policy.lower().strip()
    if normalized_policy not in {"quantity", "name"}:
        typer.echo("ERROR: --name-policy must be one of: quantity, name.")
        raise typer.Exit(code=1)

    text = file.read_text(encoding="utf-8-sig")
    rows = parse_table(
        text,
        delimiter=delimiter,
        name_policy=cast(NamePolicy, normalized_policy),
        drop_placeholder_rows=drop_placeholders,
    )
    if not rows:
        typer.echo("WARN: table has no usable rows.")

    typer.echo(_dump_json([row.model_dump(mode="json", by_alias=True) for row in rows]))
    if out is not None:
        write_text_atomic(out, serialize_table(rows, delimiter=delimiter))
        typer.echo(f"INFO: wrote {out}")


@app.command("check-manifest")
def check_manifest_command(
    file: Annotated[Path, typer.Argument(exists=True, dir_okay=False, file_okay=True)],
    strict: Annotated[bool, typer.Option("--strict")] = False,
) -> None:
    """Validate a coordinate manifest file."""

    manifest = parse_manifest_text(file.read_text(encoding="utf-8"), strict=strict)
    if manifest is None:
        typer.echo(f"ERROR(MANIFEST_INVALID): {file}")
        raise typer.Exit(code=2)

    typer.echo(f"OK: image={manifest.image_name} markers={manifest.marker_count}")


@app.command("project")
def project_command(
    folder: Annotated[str, typer.Argument()],
    data_root: DataRootOption,
    rendered_width: Annotated[float, typer.Option("--rendered-width", min=0.0)],
    viewport_width: Annotated[float | None, typer.Option("--viewport-width")] = None,
    settings: SettingsOption = None,
) -> None:
    """Print marker placements for a diagram displayed at ``rendered_width``."""

    if rendered_width <= 0:
        typer.echo("ERROR: --rendered-width must be positive.")
        raise typer.Exit(code=1)

    resolved_settings = _load_settings_or_exit(settings)
    resolver = _build_resolver(data_root, resolved_settings)

    async def _run() -> DiagramDetail:
        async with resolver:
            return await resolver.load_diagram(folder)

    try:
        detail = asyncio.run(_run())
    except DiagramNotFoundError as exc:
        typer.echo(f"ERROR({exc.error_code.value}): {exc}")
        raise typer.Exit(code=2) from exc

    projector = CoordinateProjector(detail.image_width or 0, viewport_width=viewport_width)
    payload = projector.placements_payload(
        detail.coordinates, RenderedSize(width=rendered_width)
    )
    typer.echo(_dump_json(payload))


def _load_settings_or_exit(path: Path | None) -> CatalogSettings:
    try:
        return load_settings(path)
    except ValueError as exc:
        typer.echo(f"ERROR: {exc}")
        raise typer.Exit(code=1) from exc


def _build_resolver(data_root: str, settings: CatalogSettings) -> CatalogResolver:
    try:
        transport = create_transport(data_root)
    except ValueError as exc:
        typer.echo(f"ERROR: {exc}")
        raise typer.Exit(code=1) from exc
    return CatalogResolver(transport, settings)


def _dump_json(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True)


def main() -> None:
    """Console script entrypoint."""

    app()


if __name__ == "__main__":
    main()
