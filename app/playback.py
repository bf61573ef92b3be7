"""Selection of the URL handed to the playback element."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .models import Item

logger = logging.getLogger(__name__)

NOT_PLAYABLE_MESSAGE = "No playable source for this item."


@dataclass(frozen=True, slots=True)
class PlaybackSelection:
    item_id: str
    url: str | None = None
    message: str | None = None

    @property
    def playable(self) -> bool:
        return self.url is not None

    def to_payload(self) -> dict[str, Any]:
        return {
            "itemId": self.item_id,
            "playable": self.playable,
            "url": self.url,
            "message": self.message,
        }


def select_source(item: Item) -> PlaybackSelection:
    """Return the first source URL of ``item`` or a not-playable notice."""

    if not item.sources:
        logger.info("Item %s has no playable source", item.id)
        return PlaybackSelection(item_id=item.id, message=NOT_PLAYABLE_MESSAGE)
    return PlaybackSelection(item_id=item.id, url=item.sources[0].url)
