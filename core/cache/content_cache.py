"""Time-bounded memoization for fetched content and folder probe results."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from typing import Any, Final

FETCH_TTL_SECONDS: Final = 60.0
PROBE_TTL_SECONDS: Final = 300.0

logger = logging.getLogger("diagrams.cache")


class _Miss:
    _instance: _Miss | None = None

    def __new__(cls) -> _Miss:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISS"

    def __bool__(self) -> bool:
        return False


MISS: Final = _Miss()


@dataclass(frozen=True)
class CacheEntry:
    """Cached value with the clock reading taken when it was stored."""

    value: Any
    stored_at: float


class ContentCache:
    """Key/value cache whose entries expire ``ttl_seconds`` after being stored.

    Rules:
    - a hit requires ``now - stored_at < ttl_seconds`` (strictly less)
    - entries are replaced, never mutated
    - loader failures are never stored
    """

    def __init__(
        self,
        ttl_seconds: float,
        *,
        name: str = "cache",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive: {ttl_seconds}")
        self.ttl_seconds = float(ttl_seconds)
        self.name = name
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry] = {}

    def get(self, key: Hashable) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return MISS
        if self._clock() - entry.stored_at >= self.ttl_seconds:
            return MISS
        return entry.value

    def set(self, key: Hashable, value: Any) -> None:
        self._entries[key] = CacheEntry(value=value, stored_at=self._clock())

    def invalidate_all(self) -> None:
        count = len(self._entries)
        self._entries = {}
        logger.debug("cache %s cleared (%d entries)", self.name, count)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not MISS

    def __len__(self) -> int:
        return len(self._entries)

    async def get_or_load(self, key: Hashable, loader: Callable[[], Awaitable[Any]]) -> Any:
        """Return a fresh cached value, or await ``loader`` and store its result."""

        cached = self.get(key)
        if cached is not MISS:
            return cached

        value = await loader()
        self.set(key, value)
        return value


@dataclass(frozen=True)
class CacheSet:
    """The two independent caches shared by resolution components."""

    fetch: ContentCache
    probe: ContentCache

    @classmethod
    def create(
        cls,
        *,
        fetch_ttl_seconds: float = FETCH_TTL_SECONDS,
        probe_ttl_seconds: float = PROBE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> CacheSet:
        return cls(
            fetch=ContentCache(fetch_ttl_seconds, name="fetch", clock=clock),
            probe=ContentCache(probe_ttl_seconds, name="probe", clock=clock),
        )

    def invalidate_all(self) -> None:
        self.fetch.invalidate_all()
        self.probe.invalidate_all()
