"""Data models for 1:1 notes.

Defines the Entry record, its action items, and the fixed tag vocabulary.
Raw store documents are normalized here, once, so every consumer works with
the same canonical shapes.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

SCORE_MIN = 1
SCORE_MAX = 5
SCORE_MIDPOINT = 3


class Tag(Enum):
    """Fixed tag vocabulary for entries."""

    CAREER_GROWTH = "career growth"
    BLOCKERS = "blockers"
    WINS = "wins"
    FEEDBACK_GIVEN = "feedback given"
    FEEDBACK_RECEIVED = "feedback received"
    CROSS_TEAM = "cross-team"
    TECHNICAL_DEBT = "technical debt"
    HIRING = "hiring"
    PROCESS = "process"
    PERSONAL = "personal"
    MORALE = "morale"
    AUTONOMY = "autonomy"
    PROJECT_UPDATE = "project update"
    CONFLICT = "conflict"
    LEARNING = "learning"

    @classmethod
    def parse(cls, value: Any) -> "Tag | None":
        """Map a raw tag to the vocabulary, or None if it is not part of it."""
        if isinstance(value, Tag):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class ActionOwner(Enum):
    """Who an action item belongs to."""

    MINE = "mine"
    THEIRS = "theirs"

    @property
    def field(self) -> str:
        """Entry field holding this owner's action items."""
        return f"action_items_{self.value}"


@dataclass
class ActionItem:
    """A follow-up task recorded in an entry."""

    text: str
    completed: bool = False

    @classmethod
    def coerce(cls, raw: Any) -> "ActionItem":
        """Build an ActionItem from a bare string or a {text, completed} record."""
        if isinstance(raw, ActionItem):
            return cls(text=raw.text, completed=raw.completed)
        if isinstance(raw, dict):
            text = raw.get("text")
            return cls(
                text=text if isinstance(text, str) else "",
                completed=bool(raw.get("completed")),
            )
        if raw is None:
            return cls(text="")
        return cls(text=str(raw))

    def to_dict(self) -> dict[str, Any]:
        """Convert to the stored {text, completed} shape."""
        return {"text": self.text, "completed": self.completed}


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a stored date into a timezone-aware datetime.

    Accepts datetimes, dates, and ISO-8601 strings (including bare
    ``YYYY-MM-DD``). Naive values are taken as UTC.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            logger.debug(f"Unparseable date '{value}'")
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def coerce_score(value: Any) -> int | None:
    """Return value as a 1-5 score, or None when absent or out of range."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, int) and SCORE_MIN <= value <= SCORE_MAX:
        return value
    return None


def _string_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [item for item in value if isinstance(item, str)]


def _optional_text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _parse_tags(value: Any) -> list[Tag]:
    tags: list[Tag] = []
    for raw in value or []:
        tag = Tag.parse(raw)
        if tag is None:
            logger.debug(f"Dropping tag outside vocabulary: {raw!r}")
        elif tag not in tags:
            tags.append(tag)
    return tags


@dataclass
class Entry:
    """A single recorded 1:1 meeting's structured notes.

    Attributes:
        id: Store identifier
        member_id: Team member the entry belongs to
        date: When the meeting happened (UTC-aware)
        morale_score: Morale read, 1-5
        growth_score: Growth read, 1-5
        morale_rationale: Why the morale score was given
        growth_rationale: Why the growth score was given
        summary: Short summary of the discussion
        tags: Tags from the fixed vocabulary
        wins: Wins mentioned
        blockers: Blockers or frustrations mentioned
        notable_quotes: Things the member said worth keeping
        action_items_mine: Follow-ups owned by the note-taker
        action_items_theirs: Follow-ups owned by the team member
        private_note: Note-taker's private note
        transcript: Raw source transcript
    """

    id: str
    member_id: str
    date: datetime
    morale_score: int | None = None
    growth_score: int | None = None
    morale_rationale: str | None = None
    growth_rationale: str | None = None
    summary: str = ""
    tags: list[Tag] = field(default_factory=list)
    wins: list[str] = field(default_factory=list)
    blockers: list[str] = field(default_factory=list)
    notable_quotes: list[str] = field(default_factory=list)
    action_items_mine: list[ActionItem] = field(default_factory=list)
    action_items_theirs: list[ActionItem] = field(default_factory=list)
    private_note: str | None = None
    transcript: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def action_items(self, owner: ActionOwner) -> list[ActionItem]:
        """Return the action item list for an owner."""
        return self.action_items_mine if owner is ActionOwner.MINE else self.action_items_theirs

    def to_dict(self) -> dict[str, Any]:
        """Convert to the store document shape."""
        return {
            "id": self.id,
            "member_id": self.member_id,
            "date": self.date,
            "morale_score": self.morale_score,
            "growth_score": self.growth_score,
            "morale_rationale": self.morale_rationale,
            "growth_rationale": self.growth_rationale,
            "summary": self.summary,
            "tags": [tag.value for tag in self.tags],
            "wins": list(self.wins),
            "blockers": list(self.blockers),
            "notable_quotes": list(self.notable_quotes),
            "action_items_mine": [item.to_dict() for item in self.action_items_mine],
            "action_items_theirs": [item.to_dict() for item in self.action_items_theirs],
            "private_note": self.private_note,
            "transcript": self.transcript,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Entry":
        """Create from a store document, normalizing loose shapes."""
        raw_id = data.get("id", data.get("_id"))
        entry_date = parse_timestamp(data.get("date"))
        if entry_date is None:
            logger.warning(
                f"Entry {raw_id!r} has no usable date ({data.get('date')!r}), using current time"
            )
            entry_date = datetime.now(UTC)

        return cls(
            id=str(raw_id) if raw_id is not None else "",
            member_id=str(data.get("member_id") or ""),
            date=entry_date,
            morale_score=coerce_score(data.get("morale_score")),
            growth_score=coerce_score(data.get("growth_score")),
            morale_rationale=_optional_text(data.get("morale_rationale")),
            growth_rationale=_optional_text(data.get("growth_rationale")),
            summary=data.get("summary") or "",
            tags=_parse_tags(data.get("tags")),
            wins=_string_list(data.get("wins")),
            blockers=_string_list(data.get("blockers")),
            notable_quotes=_string_list(data.get("notable_quotes")),
            action_items_mine=[ActionItem.coerce(a) for a in data.get("action_items_mine") or []],
            action_items_theirs=[
                ActionItem.coerce(a) for a in data.get("action_items_theirs") or []
            ],
            private_note=_optional_text(data.get("private_note")),
            transcript=_optional_text(data.get("transcript")),
            created_at=parse_timestamp(data.get("created_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
        )

    def with_updates(self, **fields: Any) -> "Entry":
        """Return a new entry with one edited section replaced.

        Values go through the same normalization as from_dict, so raw
        store shapes are accepted. The current entry is left untouched.

        Raises:
            ValueError: If a field name is not an Entry field.
        """
        data = self.to_dict()
        unknown = sorted(set(fields) - set(data))
        if unknown:
            raise ValueError(f"Unknown entry fields: {', '.join(unknown)}")
        data.update(fields)
        return Entry.from_dict(data)


@dataclass
class TeamMember:
    """A person the note-taker holds 1:1s with."""

    id: str
    name: str
    role: str = ""
    color: str = "#3D405B"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TeamMember":
        """Create from a store document."""
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            role=data.get("role") or "",
            color=data.get("color") or "#3D405B",
        )


def load_entries(raw_entries: list[dict[str, Any]]) -> list[Entry]:
    """Normalize a batch of store documents into entries.

    Documents without an id are skipped, since action items are keyed by
    entry id.
    """
    entries = []
    for raw in raw_entries:
        entry = Entry.from_dict(raw)
        if not entry.id:
            logger.warning(f"Skipping entry without id (date={raw.get('date')!r})")
            continue
        entries.append(entry)
    return entries


__all__ = [
    "SCORE_MAX",
    "SCORE_MIDPOINT",
    "SCORE_MIN",
    "ActionItem",
    "ActionOwner",
    "Entry",
    "Tag",
    "TeamMember",
    "coerce_score",
    "load_entries",
    "parse_timestamp",
]
