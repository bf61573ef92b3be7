"""Tests for the one-time seeding controller and the catalog cache."""

from __future__ import annotations

import asyncio

from app.database import Database
from app.errors import ManifestFetchError
from app.models import Item
from app.normalize import CatalogNormalizer
from app.query import build_view
from app.services.seeding import CatalogCache, SeedStatus, ensure_seeded
from app.services.store import CatalogStore


def _normalizer() -> CatalogNormalizer:
    return CatalogNormalizer(clock=lambda: 1_700_000_000.0)


def test_empty_store_is_seeded_from_manifest(memory_store, static_fetcher) -> None:
    store = memory_store()
    fetcher = static_fetcher([{"title": "Alpha"}])
    cache = CatalogCache()

    result = asyncio.run(
        ensure_seeded(cache, store, fetcher, normalizer=_normalizer())
    )

    assert result.status is SeedStatus.SEEDED
    assert result.stored == 1
    assert result.partial_failure is None
    assert len(cache) == 1
    item = cache.items[0]
    assert item.id == "alpha-1700000000000-0"
    assert item.category == "Uncategorized"
    assert item.sources == []


def test_seeding_is_idempotent(memory_store, static_fetcher) -> None:
    store = memory_store()
    fetcher = static_fetcher([{"title": "Alpha"}, {"title": "Beta"}])
    cache = CatalogCache()

    async def runner():
        first = await ensure_seeded(cache, store, fetcher)
        puts_after_first = store.put_calls
        second = await ensure_seeded(cache, store, fetcher)
        return first, second, puts_after_first

    first, second, puts_after_first = asyncio.run(runner())

    assert first.status is SeedStatus.SEEDED
    assert second.status is SeedStatus.SKIPPED
    assert fetcher.calls == 1
    assert store.put_calls == puts_after_first == 2


def test_non_empty_cache_is_never_topped_up(memory_store, static_fetcher) -> None:
    existing = Item(id="existing", title="Existing")
    store = memory_store([existing])
    fetcher = static_fetcher([{"title": "New"}])
    cache = CatalogCache([existing])

    result = asyncio.run(ensure_seeded(cache, store, fetcher))

    assert result.status is SeedStatus.SKIPPED
    assert fetcher.calls == 0
    assert store.put_calls == 0
    assert [item.id for item in cache] == ["existing"]


def test_manifest_failure_leaves_cache_empty(memory_store, static_fetcher) -> None:
    store = memory_store()
    fetcher = static_fetcher(error=ManifestFetchError("connection refused"))
    cache = CatalogCache()

    result = asyncio.run(ensure_seeded(cache, store, fetcher))

    assert result.status is SeedStatus.MANIFEST_UNAVAILABLE
    assert result.error == "connection refused"
    assert cache.is_empty
    assert store.put_calls == 0

    view = build_view(cache)
    assert view.hero.title == "No content"
    assert view.hero_placeholder is True
    assert view.groups == []


def test_failed_puts_are_reported_and_the_rest_persisted(
    memory_store, static_fetcher
) -> None:
    store = memory_store(failing_ids={"b"})
    fetcher = static_fetcher([{"id": "a"}, {"id": "b"}, {"id": "c"}])
    cache = CatalogCache()

    result = asyncio.run(ensure_seeded(cache, store, fetcher))

    assert result.status is SeedStatus.SEEDED
    assert result.stored == 2
    assert result.failed == 1
    assert result.partial_failure is not None
    assert result.partial_failure.item_ids == ("b",)
    assert result.partial_failure.stored == 2
    assert store.put_calls == 3
    assert sorted(item.id for item in cache) == ["a", "c"]
    assert result.to_payload()["partialFailure"]["failed"] == 1


def test_cache_reload_replaces_the_snapshot(memory_store) -> None:
    store = memory_store([Item(id="a"), Item(id="b")])
    cache = CatalogCache([Item(id="stale")])

    asyncio.run(cache.reload(store))

    assert [item.id for item in cache] == ["a", "b"]
    assert cache.get("stale") is None
    assert cache.get("a") == Item(id="a")


def test_seed_with_sqlite_store_upserts_duplicate_ids(tmp_path, static_fetcher) -> None:
    fetcher = static_fetcher(
        [
            {"id": "dup", "title": "Original", "category": "Drama"},
            {"id": "dup", "title": "Replacement", "category": "Comedy"},
            {"title": "Gamma", "themeColor": "#654321"},
        ]
    )

    async def runner():
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}")
        store = CatalogStore(database)
        cache = CatalogCache()
        try:
            result = await ensure_seeded(cache, store, fetcher, normalizer=_normalizer())
            return result, list(cache)
        finally:
            await database.dispose()

    result, items = asyncio.run(runner())

    assert result.stored == 3
    assert len(items) == 2
    by_id = {item.id: item for item in items}
    assert by_id["dup"].title == "Replacement"
    assert by_id["dup"].category == "Comedy"
    assert by_id["gamma-1700000000000-2"].theme_color == "#654321"


def test_seed_with_sqlite_store_survives_out_of_range_years(
    tmp_path, static_fetcher
) -> None:
    fetcher = static_fetcher(
        [
            {"id": "a", "year": 10**20},
            {"id": "b", "title": "B"},
            {"id": "c", "year": 1e30},
            {"id": "d", "year": float("inf")},
        ]
    )

    async def runner():
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}")
        store = CatalogStore(database)
        cache = CatalogCache()
        try:
            result = await ensure_seeded(cache, store, fetcher, normalizer=_normalizer())
            return result, list(cache)
        finally:
            await database.dispose()

    result, items = asyncio.run(runner())

    assert result.status is SeedStatus.SEEDED
    assert result.stored == 4
    assert result.partial_failure is None
    assert [item.id for item in items] == ["a", "b", "c", "d"]
    assert all(item.year is None for item in items)


def test_seed_with_sqlite_store_counts_rows_the_driver_rejects(
    tmp_path, static_fetcher
) -> None:
    class OversizedYearNormalizer(CatalogNormalizer):
        def normalize(self, raw: object) -> Item:
            item = super().normalize(raw)
            if item.id == "huge":
                return item.model_copy(update={"year": 10**20})
            return item

    fetcher = static_fetcher([{"id": "huge"}, {"id": "ok", "title": "Ok"}])

    async def runner():
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}")
        store = CatalogStore(database)
        cache = CatalogCache()
        try:
            result = await ensure_seeded(
                cache,
                store,
                fetcher,
                normalizer=OversizedYearNormalizer(clock=lambda: 1_700_000_000.0),
            )
            return result, list(cache)
        finally:
            await database.dispose()

    result, items = asyncio.run(runner())

    assert result.status is SeedStatus.SEEDED
    assert result.stored == 1
    assert result.partial_failure is not None
    assert result.partial_failure.item_ids == ("huge",)
    assert [item.id for item in items] == ["ok"]
