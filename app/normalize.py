"""Normalisation of untrusted manifest records into canonical catalog items."""

from __future__ import annotations

import itertools
import time
from collections.abc import Callable, Mapping
from typing import Any

from .models import DEFAULT_CATEGORY, DEFAULT_TITLE, Item, MediaSource, RawCatalogRecord
from .utils import ensure_unique_item_id, parse_year


def normalize_record(raw: object, token: str) -> Item:
    """Return the canonical item for ``raw``; never raises.

    ``token`` is appended to derived identifiers, so distinct tokens keep
    title-derived ids from colliding. Records carrying an explicit ``id`` keep
    it verbatim and ignore the token.
    """

    record = RawCatalogRecord.from_payload(raw)
    title = _text(record.title)
    return Item(
        id=ensure_unique_item_id(_text(record.id), title, token),
        title=title or DEFAULT_TITLE,
        year=parse_year(record.year),
        description=_text(record.description),
        poster=_text(record.poster),
        category=_text(record.category) or DEFAULT_CATEGORY,
        theme_color=_text(record.theme_color) or None,
        sources=_coerce_sources(record.sources, record.source),
    )


class CatalogNormalizer:
    """Applies :func:`normalize_record` with a fresh uniqueness token per call."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._prefix = str(int(clock() * 1000))
        self._counter = itertools.count()

    def next_token(self) -> str:
        return f"{self._prefix}-{next(self._counter)}"

    def normalize(self, raw: object) -> Item:
        return normalize_record(raw, self.next_token())


def _text(value: Any) -> str:
    if not value or isinstance(value, bool):
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def _coerce_sources(sources: Any, legacy_source: Any) -> list[MediaSource]:
    if isinstance(sources, list):
        entries = sources
    elif legacy_source:
        entries = [legacy_source]
    else:
        entries = []

    coerced: list[MediaSource] = []
    for entry in entries:
        source = _coerce_source(entry)
        if source is not None:
            coerced.append(source)
    return coerced


def _coerce_source(entry: Any) -> MediaSource | None:
    if isinstance(entry, str):
        url = entry
    elif isinstance(entry, Mapping):
        url = entry.get("url")
    else:
        return None
    if not isinstance(url, str) or not url.strip():
        return None
    return MediaSource(url=url)
