"""Durable catalog persistence backed by SQLAlchemy."""

from __future__ import annotations

import logging
from datetime import datetime

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ..database import Database
from ..db_models import ItemRecord
from ..errors import StorageError
from ..models import Item

logger = logging.getLogger(__name__)


class CatalogStore:
    """Durable ``id -> Item`` mapping; the source of truth across sessions."""

    def __init__(self, database: Database):
        self._database = database
        self._session_factory = database.session_factory
        self._initialized = False

    async def initialize(self) -> None:
        """Create the schema if needed; safe to call repeatedly."""

        try:
            await self._database.create_all()
        except SQLAlchemyError as exc:
            raise StorageError("Failed to create the catalog schema") from exc
        self._initialized = True

    async def _ensure_initialized(self) -> None:
        if not self._initialized:
            await self.initialize()

    async def put(self, item: Item) -> None:
        """Insert or overwrite ``item`` and return once committed.

        Any failure to write the row, including values the driver rejects,
        raises :class:`StorageError`.
        """

        await self._ensure_initialized()
        now = datetime.utcnow()
        try:
            async with self._session_factory() as session:
                record = await session.get(ItemRecord, item.id)
                if record is None:
                    record = ItemRecord(id=item.id, created_at=now)
                    session.add(record)
                record.title = item.title
                record.year = item.year
                record.description = item.description
                record.poster = item.poster
                record.category = item.category
                record.theme_color = item.theme_color
                record.sources = [source.model_dump() for source in item.sources]
                record.updated_at = now
                await session.commit()
        except (SQLAlchemyError, OverflowError, ValueError) as exc:
            # The sqlite driver raises OverflowError unwrapped for out-of-range ints.
            raise StorageError(f"Failed to store catalog item {item.id}") from exc
        logger.debug("Stored catalog item %s", item.id)

    async def get_all(self) -> list[Item]:
        """Return every stored item ordered by identifier.

        Rows that no longer validate as an :class:`Item` are logged and skipped.
        """

        await self._ensure_initialized()
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(ItemRecord).order_by(ItemRecord.id)
                )
                records = result.scalars().all()
        except SQLAlchemyError as exc:
            raise StorageError("Failed to read catalog items") from exc

        items: list[Item] = []
        for record in records:
            try:
                items.append(self._record_to_item(record))
            except ValidationError as exc:
                logger.warning("Stored catalog item %s is invalid: %s", record.id, exc)
        return items

    @staticmethod
    def _record_to_item(record: ItemRecord) -> Item:
        return Item.model_validate(
            {
                "id": record.id,
                "title": record.title,
                "year": record.year,
                "description": record.description or "",
                "poster": record.poster or "",
                "category": record.category,
                "theme_color": record.theme_color,
                "sources": record.sources or [],
            }
        )
