"""Directory-backed transport for diagram data stored on local disk."""

from __future__ import annotations

import asyncio
import mimetypes
from pathlib import Path

from core.transport.base import FetchResult, split_folder_key
from core.utils.errors import TransportError


class LocalTransport:
    """Serve resources from a data root directory with HTTP-like statuses."""

    def __init__(self, root: Path) -> None:
        self.root = root.resolve()

    def locate(self, *segments: str) -> str:
        path = self.root
        for segment in segments:
            for part in split_folder_key(segment):
                path = path / part
        return path.as_posix()

    async def fetch(self, url: str) -> FetchResult:
        path = self._resolve(url)
        if path is None or not path.is_file():
            return FetchResult(url=url, status=404, content=b"")

        try:
            content = await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise TransportError(f"read failed: {exc}", url=url) from exc

        content_type, _ = mimetypes.guess_type(path.name)
        return FetchResult(url=url, status=200, content=content, content_type=content_type)

    async def probe(self, url: str) -> bool:
        path = self._resolve(url)
        return path is not None and path.is_file()

    async def aclose(self) -> None:
        return None

    def _resolve(self, url: str) -> Path | None:
        path = Path(url).resolve()
        if path != self.root and self.root not in path.parents:
            return None
        return path
