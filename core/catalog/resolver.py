"""Catalog orchestration over naming, manifest and table resolution."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable

from core.cache.content_cache import CacheSet
from core.catalog.models import CatalogBuild, CatalogEntry, DiagramDetail, SkippedFolder
from core.catalog.sorting import sort_by_folder_name
from core.config.models import CatalogSettings
from core.manifest.models import DiagramManifest
from core.manifest.validator import parse_manifest_text
from core.naming.conventions import last_segment
from core.naming.models import ResolvedFolder
from core.naming.resolver import NamingResolver
from core.table.models import TableRow
from core.table.parser import parse_table
from core.transport.base import Transport
from core.transport.fetcher import CachedFetcher
from core.transport.images import read_image_size
from core.utils.errors import DiagramNotFoundError, ErrorCode, ImageDecodeError, TransportError

logger = logging.getLogger("diagrams.catalog")


class CatalogResolver:
    """Answer "what diagrams exist" and "what does diagram X contain".

    Per-folder failures never abort a build: they are turned into skipped
    entries (strict listing) or degraded entries with zero markers (lenient
    listing).
    """

    def __init__(
        self,
        transport: Transport,
        settings: CatalogSettings | None = None,
        *,
        caches: CacheSet | None = None,
    ) -> None:
        self.settings = settings or CatalogSettings()
        self.caches = caches or CacheSet.create(
            fetch_ttl_seconds=self.settings.fetch_ttl_seconds,
            probe_ttl_seconds=self.settings.probe_ttl_seconds,
        )
        self.transport = transport
        self.fetcher = CachedFetcher(transport, self.caches.fetch)
        self.naming = NamingResolver(self.fetcher, self.caches.probe, self.settings)

    async def __aenter__(self) -> CatalogResolver:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.transport.aclose()

    def invalidate(self) -> None:
        self.caches.invalidate_all()

    async def list_folder_keys(self) -> list[str]:
        """Read the folder index, falling back to configured known folders."""

        url = self.fetcher.locate(self.settings.folder_index_name)
        try:
            text = await self.fetcher.fetch_text(url)
        except TransportError as exc:
            logger.info("folder index unavailable (%s); using known folders", exc)
            return list(self.settings.known_folders)

        folders = _parse_folder_index(text)
        if folders is None:
            logger.warning("folder index %s is malformed; using known folders", url)
            return list(self.settings.known_folders)
        return folders

    async def resolve_folder(self, folder_key: str) -> ResolvedFolder:
        return await self.naming.resolve(folder_key)

    async def build_catalog(
        self,
        folder_keys: Iterable[str] | None = None,
        *,
        strict: bool = True,
        sort: bool = False,
    ) -> CatalogBuild:
        """Resolve every folder concurrently and aggregate inclusion decisions."""

        if folder_keys is None:
            folder_keys = await self.list_folder_keys()
        keys = list(dict.fromkeys(key for key in folder_keys if key.strip()))

        outcomes = await asyncio.gather(*(self._catalog_outcome(key, strict) for key in keys))

        build = CatalogBuild()
        for outcome in outcomes:
            if isinstance(outcome, CatalogEntry):
                build.entries.append(outcome)
            else:
                build.skipped.append(outcome)
        if sort:
            build.entries = sort_by_folder_name(build.entries, lambda entry: entry.name)

        logger.info(
            "catalog built: %d entries, %d skipped (strict=%s)",
            len(build.entries),
            len(build.skipped),
            strict,
        )
        return build

    async def load_diagram(self, folder_key: str, *, strict: bool = False) -> DiagramDetail:
        """Load manifest, table and image metrics for one folder.

        Raises:
            DiagramNotFoundError: no convention resolved a manifest, or, in
                strict mode, the manifest failed validation.
        """

        folder = await self.naming.resolve(folder_key)
        if folder.base_name is None:
            raise DiagramNotFoundError(
                f"No manifest found for folder: {folder_key}", folder_key=folder_key
            )

        (manifest, manifest_issue), (rows, table_issue), (size, image_issue) = (
            await asyncio.gather(
                self._load_manifest(folder, strict=strict),
                self._load_table(folder),
                self._load_image_size(folder),
            )
        )
        if manifest is None and strict:
            raise DiagramNotFoundError(
                f"Manifest for folder is not usable: {folder_key}",
                folder_key=folder_key,
                error_code=manifest_issue or ErrorCode.MANIFEST_INVALID,
            )

        issues = [issue for issue in (manifest_issue, table_issue, image_issue) if issue]
        return DiagramDetail(
            folder=folder,
            manifest=manifest,
            rows=rows,
            image_url=self.fetcher.locate(folder_key, folder.image_file)
            if folder.image_file
            else None,
            image_width=size[0] if size else None,
            image_height=size[1] if size else None,
            issues=_dedupe(issues),
        )

    async def _catalog_outcome(self, folder_key: str, strict: bool) -> CatalogEntry | SkippedFolder:
        folder = await self.naming.resolve(folder_key)
        if folder.base_name is None:
            return _skipped(folder_key, ErrorCode.NOT_FOUND, "no naming convention matched")
        if self.settings.require_image and not folder.has_image:
            return _skipped(folder_key, ErrorCode.NOT_FOUND, "image missing")

        (manifest, manifest_issue), (rows, table_issue) = await asyncio.gather(
            self._load_manifest(folder, strict=strict),
            self._load_table(folder),
        )
        if manifest is None and strict:
            code = manifest_issue or ErrorCode.MANIFEST_INVALID
            return _skipped(folder_key, code, "manifest not usable for listing")
        if self.settings.require_table and not rows:
            return _skipped(folder_key, table_issue or ErrorCode.TABLE_EMPTY, "table empty")

        issues = [issue for issue in (manifest_issue, table_issue) if issue]
        return CatalogEntry(
            name=last_segment(folder_key),
            folder_key=folder_key,
            base_name=folder.base_name,
            marker_count=manifest.marker_count if manifest is not None else 0,
            issues=_dedupe(issues),
        )

    async def _load_manifest(
        self, folder: ResolvedFolder, *, strict: bool
    ) -> tuple[DiagramManifest | None, ErrorCode | None]:
        url = self.fetcher.locate(folder.folder_key, folder.manifest_file or "")
        try:
            text = await self.fetcher.fetch_text(url)
        except TransportError as exc:
            logger.warning("manifest fetch failed for %s: %s", folder.folder_key, exc)
            return None, ErrorCode.TRANSPORT_ERROR

        manifest = parse_manifest_text(text, strict=strict)
        if manifest is None:
            logger.info("manifest invalid for %s", folder.folder_key)
            return None, ErrorCode.MANIFEST_INVALID
        return manifest, None

    async def _load_table(self, folder: ResolvedFolder) -> tuple[list[TableRow], ErrorCode | None]:
        if not folder.has_table or folder.table_file is None:
            return [], ErrorCode.TABLE_EMPTY

        url = self.fetcher.locate(folder.folder_key, folder.table_file)
        try:
            text = await self.fetcher.fetch_text(url)
        except TransportError as exc:
            logger.warning("table fetch failed for %s: %s", folder.folder_key, exc)
            return [], ErrorCode.TRANSPORT_ERROR

        rows = parse_table(
            text,
            delimiter=self.settings.table_delimiter,
            name_policy=self.settings.name_policy,
            drop_placeholder_rows=self.settings.drop_placeholder_rows,
        )
        if not rows:
            return [], ErrorCode.TABLE_EMPTY
        return rows, None

    async def _load_image_size(
        self, folder: ResolvedFolder
    ) -> tuple[tuple[int, int] | None, ErrorCode | None]:
        if folder.image_file is None:
            return None, None

        url = self.fetcher.locate(folder.folder_key, folder.image_file)
        try:
            content = await self.fetcher.fetch_bytes(url)
            return read_image_size(content), None
        except TransportError as exc:
            logger.warning("image fetch failed for %s: %s", folder.folder_key, exc)
            return None, ErrorCode.TRANSPORT_ERROR
        except ImageDecodeError as exc:
            logger.warning("image decode failed for %s: %s", folder.folder_key, exc)
            return None, None


def _parse_folder_index(text: str) -> list[str] | None:
    try:
        raw = json.loads(text)
    except ValueError:
        return None
    if not isinstance(raw, dict):
        return None
    folders = raw.get("folders")
    if not isinstance(folders, list) or not all(isinstance(item, str) for item in folders):
        return None
    return folders


def _skipped(folder_key: str, code: ErrorCode, message: str) -> SkippedFolder:
    return SkippedFolder(folder_key=folder_key, error_code=code, message=message)


def _dedupe(issues: list[ErrorCode]) -> list[ErrorCode]:
    return list(dict.fromkeys(issues))
