"""Query engine: search, category filters and sorting over craving records."""

from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from cravelog.config import (
    HIGH_INTENSITY_THRESHOLD,
    HIGH_RESISTANCE_THRESHOLD,
    RECENT_WINDOW,
)
from cravelog.models import CravingRecord, FilterCategory, SortOrder
from cravelog.store import CravingStore

NO_CRAVINGS_MESSAGE = "No cravings logged yet"
NO_MATCHES_MESSAGE = "No matching cravings found"


def _aware(ts: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def _all(records: list[CravingRecord], now: datetime) -> list[CravingRecord]:
    return records


def _recent(records: list[CravingRecord], now: datetime) -> list[CravingRecord]:
    cutoff = _aware(now) - RECENT_WINDOW
    return [r for r in records if r.timestamp is not None and _aware(r.timestamp) >= cutoff]


def _high_intensity(records: list[CravingRecord], now: datetime) -> list[CravingRecord]:
    return [r for r in records if r.intensity >= HIGH_INTENSITY_THRESHOLD]


def _high_resistance(records: list[CravingRecord], now: datetime) -> list[CravingRecord]:
    kept = [r for r in records if r.resistance >= HIGH_RESISTANCE_THRESHOLD]
    # sorted() is stable, so equal resistances keep their input order
    return sorted(kept, key=lambda r: r.resistance, reverse=True)


_CATEGORY_STAGES: dict[FilterCategory, Callable[[list[CravingRecord], datetime], list[CravingRecord]]] = {
    FilterCategory.ALL: _all,
    FilterCategory.RECENT: _recent,
    FilterCategory.HIGH_INTENSITY: _high_intensity,
    FilterCategory.HIGH_RESISTANCE: _high_resistance,
}

if set(_CATEGORY_STAGES) != set(FilterCategory):
    raise RuntimeError(
        f"Unhandled filter categories: {set(FilterCategory) - set(_CATEGORY_STAGES)}"
    )

_MIN_TIMESTAMP = datetime.min.replace(tzinfo=timezone.utc)

_SORT_KEYS: dict[SortOrder, Callable[[CravingRecord], object]] = {
    SortOrder.DATE: lambda r: _aware(r.timestamp) if r.timestamp else _MIN_TIMESTAMP,
    SortOrder.INTENSITY: lambda r: r.intensity,
    SortOrder.RESISTANCE: lambda r: r.resistance,
}


def select_cravings(records: Iterable[CravingRecord],
                    search_text: str = "",
                    category: FilterCategory = FilterCategory.ALL,
                    *,
                    now: datetime | None = None,
                    sort: SortOrder | None = None) -> list[CravingRecord]:
    """Return the ordered subset of ``records`` to display.

    Search narrows first (case-insensitive substring on the description, no
    trimming), then the category filter narrows the survivors. Only
    HIGH_RESISTANCE reorders (descending resistance, stable); every other
    category keeps input order. ``sort`` applies a further stable descending
    sort when given.
    """
    selected = list(records)

    if search_text:
        needle = search_text.lower()
        selected = [r for r in selected if needle in r.description.lower()]

    now = now or datetime.now(timezone.utc)
    selected = _CATEGORY_STAGES[category](selected, now)

    if sort is not None:
        selected = sorted(selected, key=_SORT_KEYS[sort], reverse=True)

    return list(selected)


def empty_state_message(search_text: str) -> str:
    """Message for an empty list: nothing logged vs. nothing matching."""
    return NO_CRAVINGS_MESSAGE if not search_text else NO_MATCHES_MESSAGE


def _normalize(text: str) -> str:
    return text.strip().lower().replace("-", "_").replace(" ", "_")


def parse_filter(text: str) -> FilterCategory:
    """Parse a filter value or label ("high-intensity", "High Intensity")."""
    key = _normalize(text)
    for category in FilterCategory:
        if key in (category.value, _normalize(category.label)):
            return category
    raise ValueError(
        f"Unknown filter: {text!r}. Available: {[c.value for c in FilterCategory]}"
    )


def parse_sort(text: str) -> SortOrder:
    """Parse a sort key ("date", "intensity", "resistance")."""
    key = _normalize(text)
    for order in SortOrder:
        if key == order.value:
            return order
    raise ValueError(
        f"Unknown sort order: {text!r}. Available: {[o.value for o in SortOrder]}"
    )


class CravingQueryEngine:
    """Reads the active snapshot from a CravingStore and selects from it."""

    def __init__(self, store: CravingStore):
        self.store = store

    def execute(self, search_text: str = "",
                category: FilterCategory = FilterCategory.ALL,
                sort: SortOrder | None = None) -> list[CravingRecord]:
        return select_cravings(self.store.fetch_all(), search_text, category, sort=sort)
