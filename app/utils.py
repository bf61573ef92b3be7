"""Utility helpers for the Streamly catalog service."""

from __future__ import annotations

import re
from typing import Any


ID_UNSAFE_RE = re.compile(r"[^a-z0-9]+")
YEAR_RE = re.compile(r"^\s*(\d{1,4})\s*$")
MIN_YEAR = 1
MAX_YEAR = 9999


def slugify(value: str) -> str:
    """Return ``value`` lower-cased with every run of unsafe characters as ``-``."""

    return ID_UNSAFE_RE.sub("-", value.lower())


def ensure_unique_item_id(base_id: str, title: str, token: str) -> str:
    """Return ``base_id`` or derive an identifier from the title and token."""

    if base_id:
        return base_id
    if title:
        return f"{slugify(title)}-{token}"
    return f"item-{token}"


def parse_year(value: Any) -> int | None:
    """Best-effort conversion of a manifest year value to an integer.

    Values outside ``MIN_YEAR``..``MAX_YEAR`` are discarded.
    """

    year: int | None = None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        year = value
    elif isinstance(value, float):
        if value.is_integer():
            year = int(value)
    elif isinstance(value, str):
        match = YEAR_RE.match(value)
        if match:
            year = int(match.group(1))
    if year is None or not MIN_YEAR <= year <= MAX_YEAR:
        return None
    return year
