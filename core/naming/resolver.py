"""Resolve which base name a diagram folder publishes its files under."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from core.cache.content_cache import MISS, ContentCache
from core.config.models import CatalogSettings
from core.naming.conventions import DEFAULT_CONVENTIONS, Convention, candidate_base_names
from core.naming.models import ResolvedFolder
from core.transport.fetcher import CachedFetcher
from core.utils.errors import TransportError

logger = logging.getLogger("diagrams.naming")


class NamingResolver:
    """First-match resolution of a folder's manifest base name.

    Candidates are probed one at a time in declaration order and the first
    ``<candidate>.json`` that exists wins. Table and image are then probed
    with that same base name. Results are stored in the probe cache unless a
    probe failed at the transport level, so transient errors are retried on
    the next call.
    """

    def __init__(
        self,
        fetcher: CachedFetcher,
        probe_cache: ContentCache,
        settings: CatalogSettings,
        conventions: Sequence[Convention] = DEFAULT_CONVENTIONS,
    ) -> None:
        self._fetcher = fetcher
        self._probe_cache = probe_cache
        self._settings = settings
        self._conventions = tuple(conventions)

    def candidates(self, folder_key: str) -> list[str]:
        return candidate_base_names(folder_key, self._settings, self._conventions)

    async def resolve(self, folder_key: str) -> ResolvedFolder:
        cache_key = ("folder", self._fetcher.locate(folder_key))
        cached = self._probe_cache.get(cache_key)
        if cached is not MISS:
            return cached

        folder, complete = await self._resolve_uncached(folder_key)
        if complete:
            self._probe_cache.set(cache_key, folder)
        else:
            logger.info("resolution of %s incomplete; result not cached", folder_key)
        return folder

    async def _resolve_uncached(self, folder_key: str) -> tuple[ResolvedFolder, bool]:
        complete = True
        base_name: str | None = None
        for candidate in self.candidates(folder_key):
            found, failed = await self._probe(folder_key, f"{candidate}.json")
            complete = complete and not failed
            if found:
                base_name = candidate
                break

        if base_name is None:
            logger.debug("no manifest found for %s", folder_key)
            return ResolvedFolder.not_found(folder_key), complete

        (has_table, table_failed), (image_file, image_failed) = await asyncio.gather(
            self._probe(folder_key, f"{base_name}.csv"),
            self._find_image(folder_key, base_name),
        )
        folder = ResolvedFolder(
            folder_key=folder_key,
            base_name=base_name,
            has_manifest=True,
            has_table=has_table,
            has_image=image_file is not None,
            image_file=image_file,
        )
        return folder, complete and not table_failed and not image_failed

    async def _find_image(self, folder_key: str, base_name: str) -> tuple[str | None, bool]:
        failed_any = False
        for extension in self._settings.image_extensions:
            file_name = f"{base_name}.{extension}"
            found, failed = await self._probe(folder_key, file_name)
            failed_any = failed_any or failed
            if found:
                return file_name, failed_any
        return None, failed_any

    async def _probe(self, folder_key: str, file_name: str) -> tuple[bool, bool]:
        url = self._fetcher.locate(folder_key, file_name)
        try:
            return await self._fetcher.probe(url), False
        except TransportError as exc:
            logger.warning("probe failed for %s: %s", url, exc)
            return False, True
