"""FastAPI wrapper for the diagram catalog resolution layer."""

from __future__ import annotations

import json
import logging
import os
import threading
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, Any

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

from core.catalog.joins import (
    filter_by_category,
    find_part,
    group_by_category,
    join_markers,
    search_entries,
)
from core.catalog.models import DiagramDetail
from core.catalog.resolver import CatalogResolver
from core.config.settings_loader import load_settings
from core.naming.models import ResolvedFolder
from core.projection.projector import CoordinateProjector, RenderedSize
from core.transport.factory import create_transport
from core.utils.errors import DiagramNotFoundError

logger = logging.getLogger("diagrams.api")

_REQUEST_ID_HEADER = "X-Diagrams-Request-Id"
_DEFAULT_DATA_ROOT = "data"
_DEFAULT_HTTP_TIMEOUT_SECONDS = 15.0

_resolver_lock = threading.Lock()
_resolver_cache: CatalogResolver | None = None


@asynccontextmanager
async def _lifespan(_app: FastAPI) -> AsyncIterator[None]:
    yield
    await reset_resolver()


app = FastAPI(title="diagram-catalog API", version="0.1.0", lifespan=_lifespan)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Ensure every response has a request id header."""

    request_id = uuid.uuid4().hex
    request.state.request_id = request_id
    try:
        response = await call_next(request)
    except Exception:  # noqa: BLE001
        logger.exception("unhandled error for %s", request.url.path)
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code="INTERNAL_ERROR",
            status_code=500,
            failure_stage="middleware",
        )
        response = _error_response(
            status_code=500,
            error_code="INTERNAL_ERROR",
            message="internal server error",
            request_id=request_id,
            detail={"path": request.url.path},
        )
    response.headers.setdefault(_REQUEST_ID_HEADER, request_id)
    return response


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    """Liveness endpoint."""

    return {"status": "ok"}


@app.get("/v1/catalog")
async def catalog_v1(
    request: Request,
    strict: bool = True,
    sort: bool = False,
    q: str | None = None,
    category: str | None = None,
    grouped: bool = False,
) -> JSONResponse:
    """List diagrams discovered from the folder index."""

    request_started = time.perf_counter()
    request_id = _request_id_from_request(request)
    _log_event(logging.INFO, "start", request_id, route="catalog", strict=strict, sort=sort)

    resolver = _get_resolver()
    build = await resolver.build_catalog(strict=strict, sort=sort)
    entries = search_entries(build.entries, q) if q else build.entries
    if category is not None:
        entries = filter_by_category(entries, category)

    _log_event(
        logging.INFO,
        "done",
        request_id,
        route="catalog",
        entry_count=len(entries),
        skipped_count=len(build.skipped),
        total_ms=_elapsed_ms(request_started),
    )
    content: dict[str, Any] = {
        "entries": [entry.model_dump(mode="json", by_alias=True) for entry in entries],
        "skipped": [item.model_dump(mode="json", by_alias=True) for item in build.skipped],
    }
    if grouped:
        content["categories"] = [
            group.model_dump(mode="json", by_alias=True) for group in group_by_category(entries)
        ]
    return JSONResponse(status_code=200, headers={_REQUEST_ID_HEADER: request_id}, content=content)


@app.get("/v1/diagrams/{folder_key:path}")
async def diagram_v1(request: Request, folder_key: str, strict: bool = False) -> JSONResponse:
    """Return manifest, parts table and image metrics for one folder."""

    request_id = _request_id_from_request(request)
    detail_or_error = await _load_detail(folder_key, strict=strict, request_id=request_id)
    if isinstance(detail_or_error, JSONResponse):
        return detail_or_error

    return JSONResponse(
        status_code=200,
        headers={_REQUEST_ID_HEADER: request_id},
        content=_detail_payload(detail_or_error),
    )


@app.get("/v1/markers/{folder_key:path}")
async def markers_v1(
    request: Request,
    folder_key: str,
    rendered_width: Annotated[float, Query(gt=0)],
    viewport_width: Annotated[float | None, Query(gt=0)] = None,
) -> JSONResponse:
    """Project every marker of a diagram onto the rendered image width."""

    request_id = _request_id_from_request(request)
    detail_or_error = await _load_detail(folder_key, strict=False, request_id=request_id)
    if isinstance(detail_or_error, JSONResponse):
        return detail_or_error

    detail = detail_or_error
    projector = CoordinateProjector(detail.image_width or 0, viewport_width=viewport_width)
    return JSONResponse(
        status_code=200,
        headers={_REQUEST_ID_HEADER: request_id},
        content=projector.placements_payload(
            detail.coordinates, RenderedSize(width=rendered_width)
        ),
    )


@app.get("/v1/parts/{folder_key:path}")
async def part_v1(request: Request, folder_key: str, number: str) -> JSONResponse:
    """Return the marker and table row sharing ``number`` in one diagram."""

    request_id = _request_id_from_request(request)
    detail_or_error = await _load_detail(folder_key, strict=False, request_id=request_id)
    if isinstance(detail_or_error, JSONResponse):
        return detail_or_error

    link = find_part(detail_or_error, number)
    if link is None:
        return _error_response(
            status_code=404,
            error_code="NOT_FOUND",
            message="marker not found",
            request_id=request_id,
            detail={"folder_key": folder_key, "number": number},
        )
    return JSONResponse(
        status_code=200,
        headers={_REQUEST_ID_HEADER: request_id},
        content=link.model_dump(mode="json", by_alias=True),
    )


@app.post("/v1/cache/clear")
async def clear_cache_v1(request: Request) -> JSONResponse:
    """Drop every cached fetch and folder probe result."""

    request_id = _request_id_from_request(request)
    _get_resolver().invalidate()
    _log_event(logging.INFO, "cache_cleared", request_id)
    return JSONResponse(
        status_code=200,
        headers={_REQUEST_ID_HEADER: request_id},
        content={"cleared": True},
    )


async def _load_detail(
    folder_key: str, *, strict: bool, request_id: str
) -> DiagramDetail | JSONResponse:
    resolver = _get_resolver()
    try:
        return await resolver.load_diagram(folder_key, strict=strict)
    except DiagramNotFoundError as exc:
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code=exc.error_code.value,
            status_code=404,
            failure_stage="resolve_folder",
            folder_key=folder_key,
        )
        return _error_response(
            status_code=404,
            error_code=exc.error_code.value,
            message=str(exc),
            request_id=request_id,
            detail={"folder_key": folder_key},
        )


def _detail_payload(detail: DiagramDetail) -> dict[str, Any]:
    manifest = detail.manifest
    links = join_markers(manifest, detail.rows) if manifest is not None else []
    return {
        "folder": _folder_payload(detail.folder),
        "manifest": manifest.model_dump(mode="json", by_alias=True) if manifest else None,
        "rows": [row.model_dump(mode="json", by_alias=True) for row in detail.rows],
        "links": [link.model_dump(mode="json", by_alias=True) for link in links],
        "imageUrl": detail.image_url,
        "imageWidth": detail.image_width,
        "imageHeight": detail.image_height,
        "issues": [issue.value for issue in detail.issues],
    }


def _folder_payload(folder: ResolvedFolder) -> dict[str, Any]:
    return {
        "folderKey": folder.folder_key,
        "baseName": folder.base_name,
        "hasManifest": folder.has_manifest,
        "hasTable": folder.has_table,
        "hasImage": folder.has_image,
        "imageFile": folder.image_file,
    }


def _get_resolver() -> CatalogResolver:
    global _resolver_cache

    with _resolver_lock:
        if _resolver_cache is None:
            settings_path = os.getenv("DIAGRAMS_SETTINGS_PATH")
            settings = load_settings(Path(settings_path) if settings_path else None)
            transport = create_transport(
                _data_root(), timeout_seconds=_http_timeout_seconds()
            )
            _resolver_cache = CatalogResolver(transport, settings)
        return _resolver_cache


async def reset_resolver() -> None:
    """Close and forget the process-wide resolver so the next request rebuilds it."""

    global _resolver_cache

    with _resolver_lock:
        resolver, _resolver_cache = _resolver_cache, None
    if resolver is not None:
        await resolver.aclose()


def _data_root() -> str:
    raw = os.getenv("DIAGRAMS_DATA_ROOT")
    if raw is None or not raw.strip():
        return _DEFAULT_DATA_ROOT
    return raw.strip()


def _http_timeout_seconds() -> float:
    raw = os.getenv("DIAGRAMS_HTTP_TIMEOUT_SECONDS")
    if raw is None:
        return _DEFAULT_HTTP_TIMEOUT_SECONDS
    try:
        parsed = float(raw)
    except ValueError:
        return _DEFAULT_HTTP_TIMEOUT_SECONDS
    return parsed if parsed > 0 else _DEFAULT_HTTP_TIMEOUT_SECONDS


def _request_id_from_request(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if isinstance(request_id, str) and request_id:
        return request_id
    request_id = uuid.uuid4().hex
    request.state.request_id = request_id
    return request_id


def _error_response(
    *,
    status_code: int,
    error_code: str,
    message: str,
    request_id: str,
    detail: dict[str, Any] | None = None,
) -> JSONResponse:
    payload_detail = dict(detail or {})
    payload_detail["request_id"] = request_id
    return JSONResponse(
        status_code=status_code,
        headers={_REQUEST_ID_HEADER: request_id},
        content={
            "error_code": error_code,
            "message": message,
            "detail": payload_detail,
        },
    )


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _dump_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def _log_event(level: int, event: str, request_id: str, **fields: Any) -> None:
    payload = {
        "event": event,
        "request_id": request_id,
        **fields,
    }
    logger.log(level, _dump_json(payload))
