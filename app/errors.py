"""Error types raised or reported by the catalog core."""

from __future__ import annotations

from dataclasses import dataclass


class StorageError(RuntimeError):
    """The durable catalog store is unavailable or rejected an operation."""


class ManifestFetchError(RuntimeError):
    """The seed manifest could not be fetched or parsed."""


@dataclass(frozen=True, slots=True)
class SeedPartialFailure:
    """Condition reported when some items failed to persist during seeding."""

    failed: int
    stored: int
    item_ids: tuple[str, ...] = ()

    def to_payload(self) -> dict[str, object]:
        return {
            "failed": self.failed,
            "stored": self.stored,
            "itemIds": list(self.item_ids),
        }
