"""Ordered base-name conventions tried when resolving a folder.

Each convention is a pure function ``(folder_key, settings) -> candidates``.
Declaration order is priority order.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence

from core.config.models import CatalogSettings
from core.transport.base import split_folder_key

Convention = Callable[[str, CatalogSettings], Iterable[str]]

_LEGACY_PREFIX_RE = re.compile(r"^test2?_")
_WHITESPACE_RE = re.compile(r"\s+")


def last_segment(folder_key: str) -> str:
    segments = split_folder_key(folder_key)
    return segments[-1] if segments else ""


def underscore_stripped(folder_key: str, settings: CatalogSettings) -> Iterable[str]:
    yield last_segment(folder_key).replace("_", "")


def legacy_constant(folder_key: str, settings: CatalogSettings) -> Iterable[str]:
    yield settings.legacy_base_name


def configured(folder_key: str, settings: CatalogSettings) -> Iterable[str]:
    conventions = settings.folder_conventions
    yield from conventions.get(folder_key, ())
    segment = last_segment(folder_key)
    if segment != folder_key:
        yield from conventions.get(segment, ())


def verbatim(folder_key: str, settings: CatalogSettings) -> Iterable[str]:
    yield last_segment(folder_key)


def legacy_prefix_removed(folder_key: str, settings: CatalogSettings) -> Iterable[str]:
    yield _LEGACY_PREFIX_RE.sub("", last_segment(folder_key))


def whitespace_removed(folder_key: str, settings: CatalogSettings) -> Iterable[str]:
    yield _WHITESPACE_RE.sub("", last_segment(folder_key))


DEFAULT_CONVENTIONS: tuple[Convention, ...] = (
    underscore_stripped,
    legacy_constant,
    configured,
    verbatim,
    legacy_prefix_removed,
    whitespace_removed,
)


def candidate_base_names(
    folder_key: str,
    settings: CatalogSettings,
    conventions: Sequence[Convention] = DEFAULT_CONVENTIONS,
) -> list[str]:
    """Expand conventions into distinct candidates, keeping first occurrence order."""

    seen: set[str] = set()
    candidates: list[str] = []
    for convention in conventions:
        for name in convention(folder_key, settings):
            name = name.strip()
            if not name or "/" in name or name in seen:
                continue
            seen.add(name)
            candidates.append(name)
    return candidates
