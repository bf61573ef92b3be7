"""High level orchestration of the catalog lifecycle."""

from __future__ import annotations

import asyncio
import logging

from ..models import CatalogView, Item
from ..normalize import CatalogNormalizer
from ..playback import PlaybackSelection, select_source
from ..query import ROW_WIDTH, build_view
from .manifest import ManifestFetcher
from .seeding import CatalogCache, ItemStore, SeedResult, ensure_seeded

logger = logging.getLogger(__name__)


class CatalogService:
    """Owns the store handle and cache snapshot for one session.

    ``start`` must complete before views are requested; afterwards every read
    is served from the cache without touching the store.
    """

    def __init__(
        self,
        store: ItemStore,
        fetcher: ManifestFetcher,
        *,
        normalizer: CatalogNormalizer | None = None,
        row_width: int = ROW_WIDTH,
    ):
        self._store = store
        self._fetcher = fetcher
        self._normalizer = normalizer
        self._row_width = row_width
        self._lock = asyncio.Lock()
        self._started = False
        self.cache = CatalogCache()
        self.last_seed: SeedResult | None = None

    @property
    def started(self) -> bool:
        return self._started

    async def start(self) -> SeedResult:
        """Load the cache from the store and seed it if the store is empty."""

        async with self._lock:
            await self.cache.reload(self._store)
            logger.info("Loaded %d catalog items from the store", len(self.cache))
            result = await ensure_seeded(
                self.cache,
                self._store,
                self._fetcher,
                normalizer=self._normalizer,
            )
            self.last_seed = result
            self._started = True
            return result

    def view(self, query: str | None = None) -> CatalogView:
        self._require_started()
        return build_view(self.cache, query, row_width=self._row_width)

    def get_item(self, item_id: str) -> Item:
        self._require_started()
        item = self.cache.get(item_id)
        if item is None:
            raise KeyError(f"Catalog item {item_id} not found")
        return item

    def select_source(self, item_id: str) -> PlaybackSelection:
        return select_source(self.get_item(item_id))

    def _require_started(self) -> None:
        if not self._started:
            raise RuntimeError("Catalog service not started")
