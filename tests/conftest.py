"""Pytest configuration and test helpers."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Iterable

import pytest


# Ensure the application package is importable when running tests without an
# editable install. This mirrors the expected runtime layout where ``app`` sits
# at the project root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


from app.errors import ManifestFetchError, StorageError  # noqa: E402
from app.models import Item  # noqa: E402


class MemoryStore:
    """In-memory stand-in for the durable store that records calls."""

    def __init__(self, items: Iterable[Item] = (), failing_ids: Iterable[str] = ()):
        self.items: dict[str, Item] = {item.id: item for item in items}
        self.failing_ids = set(failing_ids)
        self.put_calls = 0
        self.get_all_calls = 0

    async def put(self, item: Item) -> None:
        self.put_calls += 1
        if item.id in self.failing_ids:
            raise StorageError(f"quota exceeded while writing {item.id}")
        self.items[item.id] = item

    async def get_all(self) -> list[Item]:
        self.get_all_calls += 1
        return list(self.items.values())


class StaticFetcher:
    """Manifest fetcher returning canned records or raising a canned error."""

    def __init__(
        self,
        records: Iterable[Any] = (),
        error: ManifestFetchError | None = None,
    ):
        self.records = list(records)
        self.error = error
        self.calls = 0

    async def fetch(self) -> list[Any]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.records)


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"


@pytest.fixture
def memory_store() -> type[MemoryStore]:
    return MemoryStore


@pytest.fixture
def static_fetcher() -> type[StaticFetcher]:
    return StaticFetcher
