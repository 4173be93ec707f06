"""Cache-backed fetch and probe helpers shared by resolution components."""

from __future__ import annotations

import logging

from core.cache.content_cache import ContentCache
from core.transport.base import Transport
from core.utils.errors import TransportError

logger = logging.getLogger("diagrams.transport")


class CachedFetcher:
    """Front a transport with the raw fetch cache.

    Successful bodies and definitive probe answers are cached under the
    fully qualified locator. Non-2xx responses and transport exceptions raise
    ``TransportError`` and leave the cache untouched.
    """

    def __init__(self, transport: Transport, cache: ContentCache) -> None:
        self.transport = transport
        self.cache = cache

    def locate(self, *segments: str) -> str:
        return self.transport.locate(*segments)

    async def fetch_bytes(self, url: str) -> bytes:
        return await self.cache.get_or_load(("GET", url), lambda: self._load(url))

    async def fetch_text(self, url: str) -> str:
        content = await self.fetch_bytes(url)
        return content.decode("utf-8-sig", errors="replace")

    async def probe(self, url: str) -> bool:
        return await self.cache.get_or_load(("HEAD", url), lambda: self.transport.probe(url))

    async def _load(self, url: str) -> bytes:
        result = await self.transport.fetch(url)
        if not result.ok:
            logger.debug("fetch %s returned %d", url, result.status)
            raise TransportError(
                f"GET {url} returned {result.status}", url=url, status=result.status
            )
        return result.content
