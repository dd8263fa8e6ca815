"""Open action item aggregation and completion.

Flattens entries into the global open-items list. Each item keeps the
(entry id, owner, index) it came from so a completion can be written back
to exactly one element of one entry field.
"""

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Protocol

from oneonone.errors import ActionItemError

from .models import ActionItem, ActionOwner, Entry

logger = logging.getLogger(__name__)

ItemKey = tuple[str, str, int]


@dataclass(frozen=True)
class ActionItemRef:
    """An open action item together with where it lives.

    Attributes:
        entry_id: Entry holding the item
        owner: Which action item field it sits in
        index: Position within that field, counting completed items
        item: The action item itself
        date: Date of the owning entry
    """

    entry_id: str
    owner: ActionOwner
    index: int
    item: ActionItem
    date: datetime

    @property
    def key(self) -> ItemKey:
        """Identity of this item, stable across re-sorting."""
        return (self.entry_id, self.owner.value, self.index)

    @property
    def text(self) -> str:
        return self.item.text


@dataclass
class OpenItems:
    """Open action items split by ownership."""

    mine: list[ActionItemRef] = field(default_factory=list)
    theirs: list[ActionItemRef] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.mine) + len(self.theirs)

    def all(self) -> list[ActionItemRef]:
        return self.mine + self.theirs


def open_items(entries: Iterable[Entry]) -> OpenItems:
    """Collect every not-yet-completed action item.

    Items are listed newest entry first, then in field order.

    Args:
        entries: Entries to flatten

    Returns:
        OpenItems with mine/theirs lists of ActionItemRef
    """
    result = OpenItems()
    ordered = sorted(entries, key=lambda e: e.date, reverse=True)

    for entry in ordered:
        for owner, bucket in ((ActionOwner.MINE, result.mine), (ActionOwner.THEIRS, result.theirs)):
            for index, item in enumerate(entry.action_items(owner)):
                if item.completed:
                    continue
                bucket.append(
                    ActionItemRef(
                        entry_id=entry.id,
                        owner=owner,
                        index=index,
                        item=item,
                        date=entry.date,
                    )
                )

    logger.debug(f"Open items: {len(result.mine)} mine, {len(result.theirs)} theirs")
    return result


def _completed_field(entry: Entry, ref: ActionItemRef) -> list[ActionItem]:
    if ref.entry_id != entry.id:
        raise ActionItemError(f"Action item {ref.key} does not belong to entry {entry.id}")

    items = entry.action_items(ref.owner)
    if not 0 <= ref.index < len(items):
        raise ActionItemError(
            f"Action item index {ref.index} out of range for {ref.owner.field} "
            f"on entry {entry.id} ({len(items)} items)"
        )

    return [
        replace(item, completed=True) if i == ref.index else replace(item)
        for i, item in enumerate(items)
    ]


def completion_update(entry: Entry, ref: ActionItemRef) -> dict[str, Any]:
    """Build the partial update that marks one item complete.

    The whole field is sent, with only the referenced element changed.

    Raises:
        ActionItemError: If ref does not point into entry.
    """
    items = _completed_field(entry, ref)
    return {ref.owner.field: [item.to_dict() for item in items]}


def complete_item(entry: Entry, ref: ActionItemRef) -> Entry:
    """Return a copy of entry with the referenced item marked complete.

    Raises:
        ActionItemError: If ref does not point into entry.
    """
    items = _completed_field(entry, ref)
    return replace(entry, **{ref.owner.field: items})


class PendingSaves:
    """Tracks which action items have a completion save in flight.

    Keys are ActionItemRef.key tuples. Saves for different keys overlap
    freely; finishing one never affects another.
    """

    def __init__(self) -> None:
        self._keys: set[ItemKey] = set()
        self._lock = threading.Lock()

    def begin(self, key: ItemKey) -> bool:
        """Mark key as saving. Returns False if it was already saving."""
        with self._lock:
            if key in self._keys:
                return False
            self._keys.add(key)
            return True

    def finish(self, key: ItemKey) -> None:
        """Clear the saving mark for key, whether the save succeeded or failed."""
        with self._lock:
            self._keys.discard(key)

    def is_saving(self, key: ItemKey) -> bool:
        with self._lock:
            return key in self._keys

    def __contains__(self, key: object) -> bool:
        return self.is_saving(key)  # type: ignore[arg-type]

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)


class EntryStore(Protocol):
    """Protocol for the entry store."""

    def update_entry(self, entry_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        """Apply a partial update and return the stored entry document."""
        ...


def save_completion(
    store: EntryStore, entry: Entry, ref: ActionItemRef, pending: PendingSaves
) -> Entry:
    """Mark one item complete in the store, tracking the save as in flight.

    Args:
        store: Entry store receiving the partial update
        entry: Entry the ref points into
        ref: Item to complete
        pending: In-flight tracker shared with other saves

    Returns:
        The stored entry, or the locally completed entry if the store
        returns nothing. If a save for ref is already in flight, entry is
        returned unchanged.

    Raises:
        ActionItemError: If ref does not point into entry.
    """
    update = completion_update(entry, ref)
    if not pending.begin(ref.key):
        logger.debug(f"Save already in flight for {ref.key}")
        return entry

    try:
        stored = store.update_entry(entry.id, update)
    except Exception as e:
        logger.warning(f"Failed to save completion for {ref.key}: {e}")
        raise
    finally:
        pending.finish(ref.key)

    logger.info(f"Completed action item {ref.key}")
    return Entry.from_dict(stored) if stored else complete_item(entry, ref)


__all__ = [
    "ActionItemRef",
    "EntryStore",
    "ItemKey",
    "OpenItems",
    "PendingSaves",
    "complete_item",
    "completion_update",
    "open_items",
    "save_completion",
]
