"""Notes module for the 1:1 journal.

Provides entry models, search, filtering, action item tracking and
extraction normalization.
"""

from .action_items import (
    ActionItemRef,
    EntryStore,
    OpenItems,
    PendingSaves,
    complete_item,
    completion_update,
    open_items,
    save_completion,
)
from .extraction import extract_entry, parse_extraction
from .filters import DateRange, EntryFilter, filter_entries, member_entries, passes
from .models import ActionItem, ActionOwner, Entry, Tag, TeamMember, load_entries
from .search import matches, search_entries
from .stats import ScoreAverages, average_scores, tag_counts

__all__ = [
    "ActionItem",
    "ActionItemRef",
    "ActionOwner",
    "DateRange",
    "Entry",
    "EntryFilter",
    "EntryStore",
    "OpenItems",
    "PendingSaves",
    "ScoreAverages",
    "Tag",
    "TeamMember",
    "average_scores",
    "complete_item",
    "completion_update",
    "extract_entry",
    "filter_entries",
    "load_entries",
    "matches",
    "member_entries",
    "open_items",
    "parse_extraction",
    "passes",
    "save_completion",
    "search_entries",
    "tag_counts",
]
