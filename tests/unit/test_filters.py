"""Unit tests for tag and date-range filters."""

from datetime import UTC, datetime, timedelta

import pytest

from oneonone.notes.filters import (
    DateRange,
    EntryFilter,
    filter_entries,
    member_entries,
    passes,
    recent_entries,
    toggle_tag,
)
from oneonone.notes.models import Entry, Tag

NOW = datetime(2026, 6, 15, 12, 0, tzinfo=UTC)


def make_entry(entry_id: str = "e1", days_ago: float = 0, **fields) -> Entry:
    """Create an entry dated relative to NOW."""
    fields.setdefault("member_id", "m1")
    return Entry(id=entry_id, date=NOW - timedelta(days=days_ago), **fields)


class TestDateRange:
    """Test DateRange parsing and windows."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("30", DateRange.DAYS_30),
            (30, DateRange.DAYS_30),
            ("90d", DateRange.DAYS_90),
            ("180", DateRange.DAYS_180),
            ("all", DateRange.ALL),
            ("ALL", DateRange.ALL),
            (DateRange.DAYS_90, DateRange.DAYS_90),
        ],
    )
    def test_parse(self, raw, expected: DateRange) -> None:
        """Test accepted spellings."""
        assert DateRange.parse(raw) is expected

    def test_parse_rejects_other_values(self) -> None:
        """Only the fixed ranges are allowed."""
        with pytest.raises(ValueError):
            DateRange.parse("45")

    def test_days(self) -> None:
        """Test window length."""
        assert DateRange.DAYS_180.days == 180
        assert DateRange.ALL.days is None
        assert DateRange.ALL.cutoff(NOW) is None


class TestPasses:
    """Test the passes() predicate."""

    def test_no_op_filter_accepts_everything(self) -> None:
        """No tags and 'all' accept any entry."""
        entry_filter = EntryFilter(tags=frozenset(), date_range=DateRange.ALL)

        assert passes(make_entry(days_ago=5000), entry_filter, now=NOW)
        assert passes(make_entry(tags=[Tag.HIRING]), entry_filter, now=NOW)

    def test_tag_filter_requires_overlap(self) -> None:
        """Entry must share at least one active tag."""
        entry_filter = EntryFilter(tags=frozenset({Tag.MORALE, Tag.CONFLICT}))

        assert passes(make_entry(tags=[Tag.CONFLICT, Tag.WINS]), entry_filter, now=NOW)
        assert not passes(make_entry(tags=[Tag.WINS]), entry_filter, now=NOW)

    def test_untagged_entry_fails_active_tag_filter(self) -> None:
        """Entry without tags fails when a tag filter is active."""
        entry_filter = EntryFilter(tags=frozenset({Tag.MORALE}))

        assert not passes(make_entry(tags=[]), entry_filter, now=NOW)

    def test_thirty_day_window(self) -> None:
        """'30' excludes an entry from 45 days ago and keeps one from 10 days ago."""
        entry_filter = EntryFilter.build(date_range="30")

        assert passes(make_entry(days_ago=10), entry_filter, now=NOW)
        assert not passes(make_entry(days_ago=45), entry_filter, now=NOW)

    def test_window_boundary_is_inclusive(self) -> None:
        """An entry exactly at the cutoff passes."""
        entry_filter = EntryFilter(date_range=DateRange.DAYS_90)

        assert passes(make_entry(days_ago=90), entry_filter, now=NOW)
        assert not passes(make_entry(days_ago=90.001), entry_filter, now=NOW)

    def test_conditions_are_anded(self) -> None:
        """Both tag and date conditions must hold."""
        entry_filter = EntryFilter(tags=frozenset({Tag.HIRING}), date_range=DateRange.DAYS_30)

        assert passes(make_entry(days_ago=1, tags=[Tag.HIRING]), entry_filter, now=NOW)
        assert not passes(make_entry(days_ago=60, tags=[Tag.HIRING]), entry_filter, now=NOW)
        assert not passes(make_entry(days_ago=1, tags=[Tag.PROCESS]), entry_filter, now=NOW)

    def test_build_keeps_unknown_tags(self) -> None:
        """Unknown tag strings are kept apart from vocabulary tags."""
        entry_filter = EntryFilter.build(tags=["morale", "not-a-tag"], date_range="all")

        assert entry_filter.tags == frozenset({Tag.MORALE})
        assert entry_filter.unknown_tags == frozenset({"not-a-tag"})

    def test_unknown_tag_only_filter_passes_nothing(self) -> None:
        """A filter of only unknown tags is still active and matches no entry."""
        entry_filter = EntryFilter.build(tags=["moral"], date_range="all")

        assert entry_filter.tag_filter_active
        assert not passes(make_entry(tags=[Tag.MORALE]), entry_filter, now=NOW)
        assert not passes(make_entry(tags=[]), entry_filter, now=NOW)

    def test_unknown_tag_beside_known_tag(self) -> None:
        """Known tags in the same filter still match."""
        entry_filter = EntryFilter.build(tags=["moral", "morale"], date_range="all")

        assert passes(make_entry(tags=[Tag.MORALE]), entry_filter, now=NOW)
        assert not passes(make_entry(tags=[Tag.WINS]), entry_filter, now=NOW)


class TestFilterEntries:
    """Test search and filters combined."""

    @pytest.fixture
    def entries(self) -> list[Entry]:
        """Entries spread over time and tags."""
        return [
            make_entry("a", days_ago=3, summary="promotion talk", tags=[Tag.CAREER_GROWTH]),
            make_entry("b", days_ago=40, summary="promotion follow-up", tags=[Tag.CAREER_GROWTH]),
            make_entry("c", days_ago=1, summary="sprint review", tags=[Tag.PROCESS]),
            make_entry("d", days_ago=2, summary="promotion and hiring", tags=[Tag.HIRING]),
        ]

    def test_query_and_filter_are_conjunctive(self, entries: list[Entry]) -> None:
        """Entries must match the query and pass the filters."""
        entry_filter = EntryFilter.build(tags=["career growth"], date_range="30")

        result = filter_entries(entries, "promotion", entry_filter, now=NOW)

        assert [e.id for e in result] == ["a"]

    def test_sorted_newest_first(self, entries: list[Entry]) -> None:
        """Results are sorted by date, newest first."""
        result = filter_entries(entries, now=NOW)

        assert [e.id for e in result] == ["c", "d", "a", "b"]

    def test_limit(self, entries: list[Entry]) -> None:
        """Results are truncated to limit."""
        assert len(filter_entries(entries, now=NOW, limit=2)) == 2


class TestHelpers:
    """Test list helpers used by the views."""

    def test_member_entries(self) -> None:
        """Only the member's entries, newest first."""
        entries = [
            make_entry("a", days_ago=5, member_id="m1"),
            make_entry("b", days_ago=1, member_id="m2"),
            make_entry("c", days_ago=2, member_id="m1"),
        ]

        assert [e.id for e in member_entries(entries, "m1")] == ["c", "a"]

    def test_recent_entries_widens_during_search(self) -> None:
        """A search shows up to search_limit, otherwise recent_limit."""
        entries = [make_entry(str(i), days_ago=i, summary="weekly sync") for i in range(30)]

        assert len(recent_entries(entries, "", recent_limit=5, search_limit=20)) == 5
        assert len(recent_entries(entries, "sync", recent_limit=5, search_limit=20)) == 20

    def test_recent_entries_applies_filter(self) -> None:
        """The dashboard list honours tag and date filters."""
        entries = [
            make_entry("a", days_ago=1, tags=[Tag.HIRING]),
            make_entry("b", days_ago=2, tags=[Tag.WINS]),
            make_entry("c", days_ago=100, tags=[Tag.HIRING]),
        ]
        entry_filter = EntryFilter.build(tags=["hiring"], date_range="30")

        found = recent_entries(entries, "", entry_filter=entry_filter, now=NOW)

        assert [e.id for e in found] == ["a"]

    def test_toggle_tag(self) -> None:
        """Toggling adds a missing tag and removes a present one."""
        active = toggle_tag(frozenset(), Tag.MORALE)
        assert active == frozenset({Tag.MORALE})

        active = toggle_tag(active, Tag.WINS)
        assert active == frozenset({Tag.MORALE, Tag.WINS})

        assert toggle_tag(active, Tag.MORALE) == frozenset({Tag.WINS})
