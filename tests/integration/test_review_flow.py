"""Integration tests for the entry review flow.

Tests loading raw store documents, narrowing them with search and
filters, and completing action items through to the store update.
"""

from datetime import UTC, datetime

import pytest

from oneonone.notes import (
    DateRange,
    EntryFilter,
    PendingSaves,
    Tag,
    average_scores,
    complete_item,
    completion_update,
    filter_entries,
    load_entries,
    member_entries,
    open_items,
)

NOW = datetime(2026, 6, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def documents() -> list[dict]:
    """Store documents in the mixed shapes older records use."""
    return [
        {
            "_id": "a1",
            "member_id": "ada",
            "date": "2026-06-10",
            "summary": "Promotion packet review",
            "tags": ["career growth", "feedback given"],
            "morale_score": 4,
            "growth_score": 5,
            "action_items_mine": ["Send packet to committee"],
            "action_items_theirs": [{"text": "Add peer quotes", "completed": False}],
        },
        {
            "_id": "a2",
            "member_id": "ada",
            "date": "2026-01-20",
            "summary": "Quiet week",
            "tags": ["morale"],
            "morale_score": 2,
            "blockers": ["Flaky CI"],
            "action_items_mine": [{"text": "Chase CI budget", "completed": True}],
        },
        {
            "_id": "b1",
            "member_id": "bo",
            "date": "2026-05-30T09:30:00+00:00",
            "summary": "Onboarding",
            "tags": ["hiring", "process"],
            "private_note": "Ask about the promotion timeline next time",
            "action_items_theirs": ["Finish onboarding doc"],
        },
    ]


class TestReviewFlow:
    """Test the review flow end to end."""

    def test_search_reaches_private_note(self, documents: list[dict]) -> None:
        """Test a query matches summaries and private notes alike."""
        entries = load_entries(documents)

        found = filter_entries(entries, query="PROMOTION", now=NOW)

        assert [e.id for e in found] == ["a1", "b1"]

    def test_tags_and_range_combine(self, documents: list[dict]) -> None:
        """Test tag and date filters narrow together."""
        entries = load_entries(documents)
        entry_filter = EntryFilter.build(tags=["morale", "hiring"], date_range="90")

        found = filter_entries(entries, entry_filter=entry_filter, now=NOW)

        assert [e.id for e in found] == ["b1"]

    def test_all_range_keeps_old_entries(self, documents: list[dict]) -> None:
        """Test the all range ignores dates."""
        entries = load_entries(documents)
        entry_filter = EntryFilter(tags=frozenset({Tag.MORALE}), date_range=DateRange.ALL)

        found = filter_entries(entries, entry_filter=entry_filter, now=NOW)

        assert [e.id for e in found] == ["a2"]

    def test_complete_items_and_save(self, documents: list[dict]) -> None:
        """Test completing every open item through the pending-save tracker."""
        entries = {e.id: e for e in load_entries(documents)}
        pending = PendingSaves()
        saved: list[tuple[str, dict]] = []

        for ref in open_items(entries.values()).all():
            assert pending.begin(ref.key)
            entry = entries[ref.entry_id]
            saved.append((ref.entry_id, completion_update(entry, ref)))
            entries[ref.entry_id] = complete_item(entry, ref)
            pending.finish(ref.key)

        assert len(pending) == 0
        assert len(open_items(entries.values())) == 0
        assert ("b1", {"action_items_theirs": [{"text": "Finish onboarding doc", "completed": True}]}) in saved
        # a2 only had a completed item
        assert all(entry_id != "a2" for entry_id, _ in saved)

    def test_member_view(self, documents: list[dict]) -> None:
        """Test one member's entries and averages."""
        entries = member_entries(load_entries(documents), "ada")

        averages = average_scores(entries)

        assert [e.id for e in entries] == ["a1", "a2"]
        assert averages.morale == pytest.approx(3.0)
        assert averages.growth == pytest.approx(4.0)
