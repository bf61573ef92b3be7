"""In-process catalog cache and the one-time seeding controller."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from ..errors import ManifestFetchError, SeedPartialFailure, StorageError
from ..models import Item
from ..normalize import CatalogNormalizer
from .manifest import ManifestFetcher

logger = logging.getLogger(__name__)


class ItemStore(Protocol):
    async def put(self, item: Item) -> None:
        ...

    async def get_all(self) -> list[Item]:
        ...


@dataclass(frozen=True, slots=True)
class _CacheSnapshot:
    items: tuple[Item, ...]
    index: dict[str, Item] = field(default_factory=dict)


class CatalogCache:
    """Full mirror of the store contents, replaced wholesale on every load.

    The snapshot is swapped with a single assignment, so readers never see a
    half-built cache.
    """

    def __init__(self, items: Iterable[Item] = ()) -> None:
        self._snapshot = self._build_snapshot(items)

    @staticmethod
    def _build_snapshot(items: Iterable[Item]) -> _CacheSnapshot:
        ordered = tuple(items)
        return _CacheSnapshot(ordered, {item.id: item for item in ordered})

    def replace(self, items: Iterable[Item]) -> None:
        self._snapshot = self._build_snapshot(items)

    async def reload(self, store: ItemStore) -> None:
        """Rebuild the cache from ``store.get_all()``."""

        items = await store.get_all()
        self.replace(items)

    @property
    def items(self) -> tuple[Item, ...]:
        return self._snapshot.items

    @property
    def is_empty(self) -> bool:
        return not self._snapshot.items

    def get(self, item_id: str) -> Item | None:
        return self._snapshot.index.get(item_id)

    def __iter__(self) -> Iterator[Item]:
        return iter(self._snapshot.items)

    def __len__(self) -> int:
        return len(self._snapshot.items)


class SeedStatus(str, Enum):
    SKIPPED = "skipped"
    SEEDED = "seeded"
    MANIFEST_UNAVAILABLE = "manifest_unavailable"


@dataclass(slots=True)
class SeedResult:
    """Outcome of :func:`ensure_seeded`."""

    status: SeedStatus
    stored: int = 0
    partial_failure: SeedPartialFailure | None = None
    error: str | None = None

    @property
    def failed(self) -> int:
        return self.partial_failure.failed if self.partial_failure else 0

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "status": self.status.value,
            "stored": self.stored,
            "failed": self.failed,
        }
        if self.partial_failure is not None:
            payload["partialFailure"] = self.partial_failure.to_payload()
        if self.error:
            payload["error"] = self.error
        return payload


async def ensure_seeded(
    cache: CatalogCache,
    store: ItemStore,
    fetcher: ManifestFetcher,
    *,
    normalizer: CatalogNormalizer | None = None,
) -> SeedResult:
    """Seed an empty store from the manifest, then reload ``cache``.

    A cache holding any item means the store was seeded before; nothing is
    fetched or written in that case. Manifest failures are logged and leave the
    cache untouched. Individual put failures are collected into a
    :class:`SeedPartialFailure` while the remaining records are still written.
    """

    if not cache.is_empty:
        return SeedResult(status=SeedStatus.SKIPPED)

    try:
        records = await fetcher.fetch()
    except ManifestFetchError as exc:
        logger.warning("No catalog manifest available for seeding: %s", exc)
        return SeedResult(status=SeedStatus.MANIFEST_UNAVAILABLE, error=str(exc))

    logger.info("Seeding catalog store with %d manifest records", len(records))
    normalizer = normalizer or CatalogNormalizer()
    stored = 0
    failed_ids: list[str] = []
    for raw in records:
        item = normalizer.normalize(raw)
        try:
            await store.put(item)
        except StorageError as exc:
            logger.warning("Failed to persist catalog item %s: %s", item.id, exc)
            failed_ids.append(item.id)
            continue
        stored += 1

    await cache.reload(store)

    partial_failure: SeedPartialFailure | None = None
    if failed_ids:
        partial_failure = SeedPartialFailure(
            failed=len(failed_ids), stored=stored, item_ids=tuple(failed_ids)
        )
        logger.warning(
            "Catalog seeding stored %d items; %d failed", stored, len(failed_ids)
        )
    else:
        logger.info("Catalog seeding stored %d items", stored)
    return SeedResult(
        status=SeedStatus.SEEDED, stored=stored, partial_failure=partial_failure
    )
