"""httpx-backed transport for diagram data published over HTTP."""

from __future__ import annotations

from urllib.parse import quote

import httpx

from core.transport.base import FetchResult, split_folder_key
from core.utils.errors import TransportError

_DEFAULT_TIMEOUT_SECONDS = 15.0
_HEAD_UNSUPPORTED = {405, 501}


class HttpTransport:
    """Fetch and probe resources below ``base_url`` with an async httpx client."""

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout_seconds, follow_redirects=True
        )

    def locate(self, *segments: str) -> str:
        parts: list[str] = []
        for segment in segments:
            parts.extend(quote(part, safe="") for part in split_folder_key(segment))
        if not parts:
            return self.base_url
        return f"{self.base_url}/{'/'.join(parts)}"

    async def fetch(self, url: str) -> FetchResult:
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise TransportError(f"GET failed: {exc}", url=url) from exc

        return FetchResult(
            url=url,
            status=response.status_code,
            content=response.content,
            content_type=response.headers.get("content-type"),
        )

    async def probe(self, url: str) -> bool:
        try:
            response = await self._client.head(url)
            if response.status_code in _HEAD_UNSUPPORTED:
                response = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise TransportError(f"probe failed: {exc}", url=url) from exc

        if response.status_code >= 500:
            raise TransportError(
                f"probe returned {response.status_code}", url=url, status=response.status_code
            )
        return response.is_success

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
