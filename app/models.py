"""Pydantic models describing catalog items and rendered views."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TITLE = "Untitled"
DEFAULT_CATEGORY = "Uncategorized"
DEFAULT_ACCENT_COLOR = "#e50914"


class MediaSource(BaseModel):
    """A playable location for an item."""

    model_config = ConfigDict(frozen=True)

    url: str


class Item(BaseModel):
    """Canonical catalog record persisted in the store."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    title: str = DEFAULT_TITLE
    year: int | None = None
    description: str = ""
    poster: str = ""
    category: str = DEFAULT_CATEGORY
    theme_color: str | None = Field(default=None, alias="themeColor")
    sources: list[MediaSource] = Field(default_factory=list)

    @property
    def playable(self) -> bool:
        return bool(self.sources)

    def search_fields(self) -> tuple[str, str, str]:
        """Return the lower-cased fields free-text search runs against."""

        return (
            self.title.lower(),
            self.description.lower(),
            self.category.lower(),
        )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class RawCatalogRecord(BaseModel):
    """Untrusted manifest entry; every field is optional and untyped."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Any = None
    title: Any = None
    year: Any = None
    description: Any = None
    poster: Any = None
    category: Any = None
    theme_color: Any = Field(default=None, alias="themeColor")
    sources: Any = None
    source: Any = None

    @classmethod
    def from_payload(cls, payload: object) -> "RawCatalogRecord":
        """Wrap any decoded JSON value; non-objects become an empty record."""

        if isinstance(payload, RawCatalogRecord):
            return payload
        if not isinstance(payload, Mapping):
            return cls()
        return cls.model_validate({str(key): value for key, value in payload.items()})


class CatalogRow(BaseModel):
    """One fixed-width row of a category; ``None`` entries are empty slots."""

    label: str
    items: list[Item | None]

    def to_payload(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "items": [item.to_payload() if item is not None else None for item in self.items],
        }


class CatalogGroup(BaseModel):
    """All rows for a single category."""

    label: str
    rows: list[CatalogRow] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "rows": [row.to_payload() for row in self.rows],
        }


class CatalogView(BaseModel):
    """Hero selection plus the grouped rows a UI renders."""

    hero: Item
    hero_placeholder: bool = False
    groups: list[CatalogGroup] = Field(default_factory=list)
    query: str | None = None

    @property
    def accent_color(self) -> str:
        return self.hero.theme_color or DEFAULT_ACCENT_COLOR

    @property
    def no_results(self) -> bool:
        return not self.groups

    def to_payload(self) -> dict[str, Any]:
        return {
            "hero": self.hero.to_payload(),
            "heroPlaceholder": self.hero_placeholder,
            "accentColor": self.accent_color,
            "query": self.query,
            "noResults": self.no_results,
            "groups": [group.to_payload() for group in self.groups],
        }
