"""Tag and date-range filtering for entry lists.

Filters compose conjunctively with free-text search.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

from .models import Entry, Tag
from .search import matches

logger = logging.getLogger(__name__)


class DateRange(Enum):
    """How far back an entry list reaches."""

    DAYS_30 = "30"
    DAYS_90 = "90"
    DAYS_180 = "180"
    ALL = "all"

    @property
    def days(self) -> int | None:
        """Window length in days, or None when unbounded."""
        return None if self is DateRange.ALL else int(self.value)

    def cutoff(self, now: datetime) -> datetime | None:
        """Earliest date still inside the window."""
        if self.days is None:
            return None
        return now - timedelta(days=self.days)

    @classmethod
    def parse(cls, value: Any) -> "DateRange":
        """Parse '30', 30, 'all', '90d' and similar into a DateRange.

        Raises:
            ValueError: If the value is not one of the fixed ranges.
        """
        if isinstance(value, DateRange):
            return value
        text = str(value).strip().lower().removesuffix("d")
        return cls(text)


@dataclass(frozen=True)
class EntryFilter:
    """Active tag set and date range for an entry list."""

    tags: frozenset[Tag] = field(default_factory=frozenset)
    date_range: DateRange = DateRange.ALL
    unknown_tags: frozenset[str] = field(default_factory=frozenset)

    @property
    def tag_filter_active(self) -> bool:
        return bool(self.tags or self.unknown_tags)

    @classmethod
    def build(cls, tags: Iterable[Any] = (), date_range: Any = DateRange.ALL) -> "EntryFilter":
        """Build a filter from raw tag strings and a raw date range.

        Requested tags outside the vocabulary stay in the filter as
        unknown_tags. No entry can carry them, so they never match.
        """
        parsed: set[Tag] = set()
        unknown: set[str] = set()
        for raw in tags:
            tag = Tag.parse(raw)
            if tag is None:
                unknown.add(str(raw))
            else:
                parsed.add(tag)

        if unknown:
            logger.warning(f"Tags outside vocabulary match no entries: {sorted(unknown)}")
        return cls(
            tags=frozenset(parsed),
            date_range=DateRange.parse(date_range),
            unknown_tags=frozenset(unknown),
        )


def passes_tags(entry: Entry, entry_filter: EntryFilter) -> bool:
    """Entry shares at least one tag with the active set (or no set is active)."""
    if not entry_filter.tag_filter_active:
        return True
    return not entry_filter.tags.isdisjoint(entry.tags)


def passes_date_range(entry: Entry, date_range: DateRange, now: datetime | None = None) -> bool:
    """Entry date falls inside the range window."""
    cutoff = date_range.cutoff(now or datetime.now(UTC))
    if cutoff is None:
        return True
    return entry.date >= cutoff


def passes(entry: Entry, entry_filter: EntryFilter, now: datetime | None = None) -> bool:
    """Check an entry against the tag and date-range filters.

    Args:
        entry: Entry to check
        entry_filter: Active tags and date range
        now: Reference time for the date window. Defaults to now (UTC).

    Returns:
        True if both conditions hold
    """
    return passes_tags(entry, entry_filter) and passes_date_range(
        entry, entry_filter.date_range, now
    )


def filter_entries(
    entries: Iterable[Entry],
    query: str | None = "",
    entry_filter: EntryFilter | None = None,
    now: datetime | None = None,
    limit: int | None = None,
) -> list[Entry]:
    """Apply search and filters together, newest first.

    Args:
        entries: Entries to filter
        query: Free-text search
        entry_filter: Tag and date-range filter
        now: Reference time for the date window
        limit: Maximum results to return

    Returns:
        Entries passing every condition, sorted by date descending
    """
    entry_filter = entry_filter or EntryFilter()
    now = now or datetime.now(UTC)

    visible = [e for e in entries if matches(e, query) and passes(e, entry_filter, now)]
    visible.sort(key=lambda e: e.date, reverse=True)

    logger.debug(
        f"Filtered to {len(visible)} entries "
        f"(query={query!r}, tags={sorted(t.value for t in entry_filter.tags)}, "
        f"range={entry_filter.date_range.value})"
    )
    return visible[:limit] if limit is not None else visible


def member_entries(entries: Iterable[Entry], member_id: str) -> list[Entry]:
    """One member's entries, newest first."""
    return sorted(
        (e for e in entries if e.member_id == member_id),
        key=lambda e: e.date,
        reverse=True,
    )


def recent_entries(
    entries: Iterable[Entry],
    query: str | None = "",
    recent_limit: int = 5,
    search_limit: int = 20,
    entry_filter: EntryFilter | None = None,
    now: datetime | None = None,
) -> list[Entry]:
    """Newest entries for the dashboard list.

    Shows more results while a search is active.
    """
    searching = bool(query and query.strip())
    limit = search_limit if searching else recent_limit
    return filter_entries(entries, query=query, entry_filter=entry_filter, now=now, limit=limit)


def toggle_tag(active: frozenset[Tag], tag: Tag) -> frozenset[Tag]:
    """Add tag to the active set, or remove it if already active."""
    if tag in active:
        return active - {tag}
    return active | {tag}


__all__ = [
    "DateRange",
    "EntryFilter",
    "filter_entries",
    "member_entries",
    "passes",
    "passes_date_range",
    "passes_tags",
    "recent_entries",
    "toggle_tag",
]
