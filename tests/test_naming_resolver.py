from __future__ import annotations

from collections import Counter

import pytest

from core.cache.content_cache import CacheSet
from core.config.models import CatalogSettings
from core.naming.conventions import candidate_base_names
from core.naming.resolver import NamingResolver
from core.transport.base import FetchResult
from core.transport.fetcher import CachedFetcher
from core.utils.errors import TransportError


class _FakeTransport:
    def __init__(self, files: set[str], *, failing: set[str] | None = None) -> None:
        self.files = files
        self.failing = failing or set()
        self.probes: Counter[str] = Counter()

    def locate(self, *segments: str) -> str:
        return "/".join(segments)

    async def fetch(self, url: str) -> FetchResult:
        status = 200 if url in self.files else 404
        return FetchResult(url=url, status=status, content=b"")

    async def probe(self, url: str) -> bool:
        self.probes[url] += 1
        if url in self.failing:
            raise TransportError("boom", url=url)
        return url in self.files

    async def aclose(self) -> None:
        return None


def _resolver(transport: _FakeTransport, settings: CatalogSettings | None = None) -> NamingResolver:
    caches = CacheSet.create()
    return NamingResolver(
        CachedFetcher(transport, caches.fetch),
        caches.probe,
        settings or CatalogSettings(),
    )


def test_candidates_follow_convention_order_without_duplicates() -> None:
    settings = CatalogSettings(
        folder_conventions={"test_Brother_814_Needle": ["Brother814_Needle"]},
    )

    candidates = candidate_base_names("test_Brother_814_Needle", settings)

    assert candidates == [
        "testBrother814Needle",
        "diagram",
        "Brother814_Needle",
        "test_Brother_814_Needle",
        "Brother_814_Needle",
    ]


def test_candidates_use_last_segment_of_nested_keys() -> None:
    candidates = candidate_base_names("Brother/10. Oil System", CatalogSettings())

    assert candidates == ["10. Oil System", "diagram", "10.OilSystem"]


@pytest.mark.anyio
async def test_first_matching_candidate_wins_even_if_later_one_exists() -> None:
    transport = _FakeTransport(
        {
            "Feed_Dog/diagram.json",
            "Feed_Dog/Feed_Dog.json",
            "Feed_Dog/diagram.csv",
            "Feed_Dog/diagram.jpg",
        }
    )

    folder = await _resolver(transport).resolve("Feed_Dog")

    assert folder.base_name == "diagram"
    assert folder.has_manifest
    assert folder.has_table
    assert folder.image_file == "diagram.jpg"
    assert folder.table_file == "diagram.csv"
    assert transport.probes["Feed_Dog/Feed_Dog.json"] == 0


@pytest.mark.anyio
async def test_table_and_image_are_probed_with_the_manifest_base_name() -> None:
    transport = _FakeTransport({"Hook/Hook.json", "Hook/diagram.csv", "Hook/diagram.png"})

    folder = await _resolver(transport).resolve("Hook")

    assert folder.base_name == "Hook"
    assert not folder.has_table
    assert not folder.has_image
    assert folder.image_file is None


@pytest.mark.anyio
async def test_unresolvable_folder_is_not_found_and_cached() -> None:
    transport = _FakeTransport(set())
    resolver = _resolver(transport)

    first = await resolver.resolve("Nothing Here")
    second = await resolver.resolve("Nothing Here")

    assert first.base_name is None
    assert not first.has_manifest
    assert first.manifest_file is None
    assert second == first
    assert transport.probes["Nothing Here/diagram.json"] == 1


@pytest.mark.anyio
async def test_transport_failure_is_not_cached() -> None:
    transport = _FakeTransport({"Hook/diagram.json"}, failing={"Hook/Hook.json"})
    resolver = _resolver(transport)

    first = await resolver.resolve("Hook")
    assert first.base_name == "diagram"

    transport.failing.clear()
    transport.files.add("Hook/Hook.json")
    second = await resolver.resolve("Hook")

    assert second.base_name == "Hook"
    assert transport.probes["Hook/Hook.json"] == 2


@pytest.mark.anyio
async def test_image_extensions_are_tried_in_configured_order() -> None:
    transport = _FakeTransport({"Hook/Hook.json", "Hook/Hook.webp", "Hook/Hook.gif"})
    settings = CatalogSettings(image_extensions=["GIF", ".webp"])

    folder = await _resolver(transport, settings).resolve("Hook")

    assert folder.image_file == "Hook.gif"
