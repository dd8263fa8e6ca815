"""Free-text search over entries.

Case-insensitive substring matching across an entry's written fields.
"""

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from .models import ActionItem, Entry

logger = logging.getLogger(__name__)

LIST_FIELDS = ("wins", "blockers", "notable_quotes")
ACTION_FIELDS = ("action_items_mine", "action_items_theirs")


def _get(entry: Entry | dict[str, Any], name: str) -> Any:
    if isinstance(entry, dict):
        return entry.get(name)
    return getattr(entry, name, None)


def _item_text(item: Any) -> str | None:
    """Normalize an action item (bare string or record) to its text."""
    if isinstance(item, str):
        return item
    if isinstance(item, ActionItem):
        return item.text
    if isinstance(item, dict):
        text = item.get("text")
        return text if isinstance(text, str) else None
    return None


def searchable_text(entry: Entry | dict[str, Any]) -> Iterator[str]:
    """Yield every searchable text field of an entry, skipping absent ones."""
    for name in ("summary", "private_note"):
        value = _get(entry, name)
        if isinstance(value, str) and value:
            yield value

    for name in LIST_FIELDS:
        for value in _get(entry, name) or []:
            if isinstance(value, str) and value:
                yield value

    for name in ACTION_FIELDS:
        for item in _get(entry, name) or []:
            text = _item_text(item)
            if text:
                yield text


def matches(entry: Entry | dict[str, Any], query: str | None) -> bool:
    """Check whether an entry matches a free-text query.

    An empty or whitespace-only query matches everything.

    Args:
        entry: Entry, or a raw store document
        query: Search text

    Returns:
        True if any searchable field contains the query (case-insensitive)
    """
    if not query or not query.strip():
        return True

    needle = query.lower()
    return any(needle in text.lower() for text in searchable_text(entry))


def search_entries(
    entries: Iterable[Entry], query: str | None, limit: int | None = None
) -> list[Entry]:
    """Return entries matching query, newest first.

    Args:
        entries: Entries to search
        query: Search text
        limit: Maximum results to return

    Returns:
        Matching entries sorted by date descending
    """
    found = sorted(
        (entry for entry in entries if matches(entry, query)),
        key=lambda e: e.date,
        reverse=True,
    )
    logger.debug(f"Search '{query}' matched {len(found)} entries")
    return found[:limit] if limit is not None else found


__all__ = ["matches", "search_entries", "searchable_text"]
