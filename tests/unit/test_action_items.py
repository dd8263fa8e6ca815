"""Unit tests for open action item aggregation and completion."""

import threading
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from oneonone.errors import ActionItemError
from oneonone.notes.action_items import (
    ActionItemRef,
    PendingSaves,
    complete_item,
    completion_update,
    open_items,
    save_completion,
)
from oneonone.notes.models import ActionItem, ActionOwner, Entry, load_entries


@pytest.fixture
def entries() -> list[Entry]:
    """Two entries with a mix of open and completed items."""
    return [
        Entry(
            id="old",
            member_id="m1",
            date=datetime(2026, 1, 10, tzinfo=UTC),
            action_items_mine=[ActionItem("Book offsite", completed=True), ActionItem("Send agenda")],
            action_items_theirs=[ActionItem("Write RFC")],
        ),
        Entry(
            id="new",
            member_id="m2",
            date=datetime(2026, 2, 10, tzinfo=UTC),
            action_items_mine=[ActionItem("Ask about budget")],
            action_items_theirs=[ActionItem("Pair with Sam", completed=True), ActionItem("Demo prototype")],
        ),
    ]


class TestOpenItems:
    """Test open_items() aggregation."""

    def test_excludes_completed(self, entries: list[Entry]) -> None:
        """Completed items never appear."""
        result = open_items(entries)

        assert all(not ref.item.completed for ref in result.all())
        assert [r.text for r in result.mine] == ["Ask about budget", "Send agenda"]
        assert [r.text for r in result.theirs] == ["Demo prototype", "Write RFC"]

    def test_index_counts_completed_items(self, entries: list[Entry]) -> None:
        """Indexes are positions in the full field, not in the open subset."""
        result = open_items(entries)

        send_agenda = next(r for r in result.mine if r.text == "Send agenda")
        assert send_agenda.key == ("old", "mine", 1)
        demo = next(r for r in result.theirs if r.text == "Demo prototype")
        assert demo.key == ("new", "theirs", 1)

    def test_keys_unique(self, entries: list[Entry]) -> None:
        """Every returned key is unique."""
        keys = [ref.key for ref in open_items(entries).all()]

        assert len(keys) == len(set(keys))

    def test_keys_unique_from_raw_documents(self) -> None:
        """Loaded store documents never share an item key."""
        docs = [
            {"member_id": "m1", "date": "2026-01-01", "action_items_mine": ["First"]},
            {"member_id": "m2", "date": "2026-01-02", "action_items_mine": ["Second"]},
            {"_id": "x1", "member_id": "m1", "date": "2026-01-03", "action_items_mine": ["Third"]},
            {"_id": "x2", "member_id": "m2", "date": "2026-01-04", "action_items_mine": ["Fourth"]},
        ]

        keys = [ref.key for ref in open_items(load_entries(docs)).all()]

        assert keys == [("x2", "mine", 0), ("x1", "mine", 0)]
        assert len(keys) == len(set(keys))

    def test_keys_stable_across_input_order(self, entries: list[Entry]) -> None:
        """Re-sorting entries does not change identities."""
        forward = {r.key for r in open_items(entries).all()}
        backward = {r.key for r in open_items(list(reversed(entries))).all()}

        assert forward == backward

    def test_ref_carries_entry_date(self, entries: list[Entry]) -> None:
        """Each ref keeps its entry's date."""
        ref = open_items(entries).mine[0]

        assert ref.date == datetime(2026, 2, 10, tzinfo=UTC)

    def test_empty(self) -> None:
        """No entries gives no items."""
        result = open_items([])

        assert result.mine == []
        assert result.theirs == []
        assert len(result) == 0


class TestCompletion:
    """Test marking items complete."""

    def test_complete_item_replaces_one_element(self, entries: list[Entry]) -> None:
        """Only the referenced element changes."""
        entry = entries[0]
        ref = next(r for r in open_items(entries).mine if r.entry_id == "old")

        updated = complete_item(entry, ref)

        assert updated.action_items_mine == [
            ActionItem("Book offsite", completed=True),
            ActionItem("Send agenda", completed=True),
        ]
        assert updated.action_items_theirs == entry.action_items_theirs

    def test_complete_item_does_not_mutate_input(self, entries: list[Entry]) -> None:
        """The original entry keeps its items."""
        entry = entries[0]
        ref = ActionItemRef("old", ActionOwner.MINE, 1, entry.action_items_mine[1], entry.date)

        complete_item(entry, ref)

        assert entry.action_items_mine[1].completed is False

    def test_completed_item_leaves_open_list(self, entries: list[Entry]) -> None:
        """After completion the item is no longer open."""
        ref = next(r for r in open_items(entries).theirs if r.entry_id == "old")
        entries[0] = complete_item(entries[0], ref)

        assert ref.key not in {r.key for r in open_items(entries).all()}

    def test_completion_update_sends_whole_field(self, entries: list[Entry]) -> None:
        """The partial update holds the full field."""
        entry = entries[1]
        ref = ActionItemRef("new", ActionOwner.THEIRS, 1, entry.action_items_theirs[1], entry.date)

        update = completion_update(entry, ref)

        assert update == {
            "action_items_theirs": [
                {"text": "Pair with Sam", "completed": True},
                {"text": "Demo prototype", "completed": True},
            ]
        }

    def test_wrong_entry_raises(self, entries: list[Entry]) -> None:
        """A ref from another entry is rejected."""
        ref = ActionItemRef("new", ActionOwner.MINE, 0, ActionItem("x"), entries[1].date)

        with pytest.raises(ActionItemError):
            complete_item(entries[0], ref)

    def test_out_of_range_raises(self, entries: list[Entry]) -> None:
        """A stale index is rejected."""
        ref = ActionItemRef("old", ActionOwner.THEIRS, 5, ActionItem("x"), entries[0].date)

        with pytest.raises(ActionItemError, match="out of range"):
            completion_update(entries[0], ref)


class TestPendingSaves:
    """Test in-flight save tracking."""

    def test_independent_keys(self) -> None:
        """Finishing one save leaves the other in flight."""
        pending = PendingSaves()
        a = ("e1", "mine", 0)
        b = ("e1", "mine", 1)

        assert pending.begin(a)
        assert pending.begin(b)
        pending.finish(a)

        assert not pending.is_saving(a)
        assert b in pending
        assert len(pending) == 1

    def test_begin_twice(self) -> None:
        """A key already saving is not started again."""
        pending = PendingSaves()

        assert pending.begin(("e1", "theirs", 0))
        assert not pending.begin(("e1", "theirs", 0))

    def test_finish_unknown_key(self) -> None:
        """Finishing a key that is not saving is harmless."""
        pending = PendingSaves()

        pending.finish(("nope", "mine", 0))

        assert len(pending) == 0

    def test_concurrent_saves(self) -> None:
        """Overlapping saves from several threads all register and clear."""
        pending = PendingSaves()
        keys = [("e", "mine", i) for i in range(50)]

        threads = [threading.Thread(target=pending.begin, args=(k,)) for k in keys]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(pending) == 50

        for k in keys[::2]:
            pending.finish(k)
        assert len(pending) == 25
        assert all(pending.is_saving(k) for k in keys[1::2])


class TestSaveCompletion:
    """Test saving a completion through the store."""

    @pytest.fixture
    def store(self) -> MagicMock:
        """Mock entry store returning nothing."""
        store = MagicMock()
        store.update_entry.return_value = None
        return store

    def test_sends_partial_update(self, entries: list[Entry], store: MagicMock) -> None:
        """Only the edited field is sent and the save is cleared."""
        pending = PendingSaves()
        ref = next(r for r in open_items(entries).mine if r.entry_id == "old")

        updated = save_completion(store, entries[0], ref, pending)

        store.update_entry.assert_called_once_with(
            "old",
            {
                "action_items_mine": [
                    {"text": "Book offsite", "completed": True},
                    {"text": "Send agenda", "completed": True},
                ]
            },
        )
        assert updated.action_items_mine[1].completed is True
        assert len(pending) == 0

    def test_uses_stored_document(self, entries: list[Entry], store: MagicMock) -> None:
        """The store's canonical shape wins over the local copy."""
        store.update_entry.return_value = {
            "id": "old",
            "member_id": "m1",
            "date": "2026-01-10",
            "summary": "stored",
        }
        ref = next(r for r in open_items(entries).mine if r.entry_id == "old")

        updated = save_completion(store, entries[0], ref, PendingSaves())

        assert updated.summary == "stored"

    def test_already_saving(self, entries: list[Entry], store: MagicMock) -> None:
        """A second save for the same key is skipped."""
        pending = PendingSaves()
        ref = open_items(entries).mine[0]
        pending.begin(ref.key)

        result = save_completion(store, entries[1], ref, pending)

        assert result is entries[1]
        store.update_entry.assert_not_called()
        assert ref.key in pending

    def test_store_failure_clears_key(self, entries: list[Entry], store: MagicMock) -> None:
        """A failed save is re-raised and no longer in flight."""
        store.update_entry.side_effect = ConnectionError("store down")
        pending = PendingSaves()
        ref = open_items(entries).mine[0]

        with pytest.raises(ConnectionError):
            save_completion(store, entries[1], ref, pending)

        assert ref.key not in pending
