"""Derive the visible page from a loaded collection."""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Sequence

from config import DEFAULT_PAGE_SIZE
from models import EnrichedItem, Projection

_FALLBACK_DATE_FORMATS = (
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
)


def project(
    items: Sequence[EnrichedItem],
    search_text: str,
    page: int,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Projection:
    """Filter by title, sort newest first, and cut out one page.

    Pure: the same inputs always give the same output. The requested page is
    clamped into range, so a shrinking result set never yields an empty page
    past the end.
    """
    if page_size < 1:
        raise ValueError("page_size must be at least 1")

    # Stable even with reverse=True: equal dates keep index order.
    ordered = sorted(items, key=_date_key, reverse=True)
    filtered = filter_by_title(ordered, search_text)

    total_pages = max(1, math.ceil(len(filtered) / page_size))
    current_page = min(max(page, 1), total_pages)
    start = (current_page - 1) * page_size

    return Projection(
        visible=tuple(filtered[start : start + page_size]),
        current_page=current_page,
        total_pages=total_pages,
        total_items=len(filtered),
    )


def filter_by_title(items: Sequence[EnrichedItem], search_text: str) -> list[EnrichedItem]:
    query = search_text.strip().casefold()
    if not query:
        return list(items)
    return [
        item
        for item in items
        if item.detail is not None and item.detail.title and query in item.detail.title.casefold()
    ]


def _date_key(item: EnrichedItem) -> float:
    if item.detail is None:
        return 0.0
    return parse_date_timestamp(item.detail.date)


def parse_date_timestamp(raw: str) -> float:
    """Epoch seconds for a date or datetime; 0 when missing or unparseable.

    ISO 8601 is tried first, then the slash and month-name forms in
    ``_FALLBACK_DATE_FORMATS``. Dates without an offset are read as UTC.
    """
    if not raw:
        return 0.0
    value = raw.strip().replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        parsed = _parse_fallback(value)
        if parsed is None:
            return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.timestamp()


def _parse_fallback(value: str) -> datetime | None:
    for fmt in _FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None
