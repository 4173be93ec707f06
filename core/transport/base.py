"""Storage/transport boundary consumed by the resolution layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class FetchResult:
    """Raw outcome of one GET against the storage boundary."""

    url: str
    status: int
    content: bytes
    content_type: str | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self, encoding: str = "utf-8") -> str:
        return self.content.decode(encoding, errors="replace")


class Transport(Protocol):
    """Protocol for async storage backends (HTTP origin, local directory)."""

    def locate(self, *segments: str) -> str:
        """Build the fully qualified locator for a folder-relative resource."""

    async def fetch(self, url: str) -> FetchResult:
        """GET ``url``; raise ``TransportError`` only for network-level failures."""

    async def probe(self, url: str) -> bool:
        """Return whether ``url`` exists without downloading its body."""

    async def aclose(self) -> None:
        """Release underlying resources."""


def split_folder_key(folder_key: str) -> list[str]:
    """Split a folder identifier into its non-empty path segments."""

    return [part for part in folder_key.replace("\\", "/").split("/") if part]
