"""Search, hero selection and row layout over the cached catalog."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .models import (
    DEFAULT_ACCENT_COLOR,
    CatalogGroup,
    CatalogRow,
    CatalogView,
    Item,
)

ROW_WIDTH = 8
MORE_LABEL_SUFFIX = " (more)"

NO_CONTENT_HERO = Item(
    id="no-content",
    title="No content",
    description="Add items via catalog.json in the repository",
    poster="",
    theme_color=DEFAULT_ACCENT_COLOR,
)


def normalise_query(query: str | None) -> str | None:
    """Return the lower-cased search needle, or ``None`` for blank input."""

    if query is None:
        return None
    needle = query.strip().lower()
    return needle or None


def item_matches(item: Item, needle: str) -> bool:
    return any(needle in value for value in item.search_fields())


def filter_items(items: Iterable[Item], query: str | None) -> list[Item]:
    needle = normalise_query(query)
    if needle is None:
        return list(items)
    return [item for item in items if item_matches(item, needle)]


def pick_hero(items: Sequence[Item]) -> Item | None:
    """Prefer the first themed item, falling back to the first item."""

    for item in items:
        if item.theme_color is not None:
            return item
    return items[0] if items else None


def group_by_category(items: Iterable[Item]) -> dict[str, list[Item]]:
    # dict insertion order keeps categories in first-seen order
    grouped: dict[str, list[Item]] = {}
    for item in items:
        grouped.setdefault(item.category, []).append(item)
    return grouped


def paginate(
    category: str, items: Sequence[Item], row_width: int = ROW_WIDTH
) -> list[CatalogRow]:
    """Split ``items`` into rows of ``row_width``, padding the tail with ``None``."""

    if row_width < 1:
        raise ValueError("row_width must be positive")
    slots: list[Item | None] = list(items)
    remainder = len(slots) % row_width
    if remainder:
        slots.extend([None] * (row_width - remainder))

    rows: list[CatalogRow] = []
    for start in range(0, len(slots), row_width):
        label = category if start == 0 else f"{category}{MORE_LABEL_SUFFIX}"
        rows.append(CatalogRow(label=label, items=slots[start : start + row_width]))
    return rows


def build_view(
    items: Iterable[Item],
    query: str | None = None,
    *,
    row_width: int = ROW_WIDTH,
) -> CatalogView:
    """Compute the hero and grouped rows for ``items`` and an optional query.

    The hero always comes from the full collection so that searching never
    changes it; only the groups are narrowed by ``query``.
    """

    catalog = list(items)
    hero = pick_hero(catalog)
    candidates = filter_items(catalog, query)
    groups = [
        CatalogGroup(label=category, rows=paginate(category, members, row_width))
        for category, members in group_by_category(candidates).items()
    ]
    return CatalogView(
        hero=hero if hero is not None else NO_CONTENT_HERO,
        hero_placeholder=hero is None,
        groups=groups,
        query=normalise_query(query),
    )
