"""Meeting prep: structured history plus the parsed AI briefing.

The briefing text itself comes from an external service. This module
computes the structured part of a prep from entries, reads the service
payload into typed form, and assembles the view shown before a 1:1.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from oneonone.briefing.models import BriefingSection
from oneonone.briefing.parser import parse_briefing
from oneonone.config import JournalConfig
from oneonone.errors import BriefingUnavailableError
from oneonone.notes.models import Entry, parse_timestamp
from oneonone.notes.stats import tag_counts

from .trend import TrendChart, TrendGeometry, project_trend, samples_from_score_points

logger = logging.getLogger(__name__)

NO_ENTRIES_BRIEFING = "No entries yet for this team member."


@dataclass
class PrepActionItem:
    """An open action item as listed in a prep."""

    text: str
    date: datetime | None

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "date": self.date.isoformat() if self.date else None}


@dataclass
class ScorePoint:
    """A dated score."""

    date: datetime | None
    score: int

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date.isoformat() if self.date else None, "score": self.score}


@dataclass
class TagCount:
    """How often a tag appears across the prep window."""

    tag: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"tag": self.tag, "count": self.count}


@dataclass
class PrepSummary:
    """Structured prep data computed from recent entries."""

    open_items_mine: list[PrepActionItem] = field(default_factory=list)
    open_items_theirs: list[PrepActionItem] = field(default_factory=list)
    recent_tags: list[TagCount] = field(default_factory=list)
    unresolved_blockers: list[str] = field(default_factory=list)
    morale_scores: list[ScorePoint] = field(default_factory=list)
    growth_scores: list[ScorePoint] = field(default_factory=list)


def compute_structured_prep(entries: Iterable[Entry]) -> PrepSummary:
    """Compute the structured part of a prep.

    Entries are read in the order given (the prep window is newest first).

    Args:
        entries: Recent entries for one team member

    Returns:
        PrepSummary with open items, tag counts, blockers and score points
    """
    entries = list(entries)
    summary = PrepSummary()

    for entry in entries:
        summary.open_items_mine.extend(
            PrepActionItem(text=a.text, date=entry.date)
            for a in entry.action_items_mine
            if not a.completed
        )
        summary.open_items_theirs.extend(
            PrepActionItem(text=a.text, date=entry.date)
            for a in entry.action_items_theirs
            if not a.completed
        )
        summary.unresolved_blockers.extend(entry.blockers)
        if entry.morale_score is not None:
            summary.morale_scores.append(ScorePoint(date=entry.date, score=entry.morale_score))
        if entry.growth_score is not None:
            summary.growth_scores.append(ScorePoint(date=entry.date, score=entry.growth_score))

    summary.recent_tags = [TagCount(tag=tag.value, count=count) for tag, count in tag_counts(entries)]
    return summary


@dataclass
class PrepPayload:
    """The briefing service response in typed form.

    Optional JIRA activity is kept as raw mappings under jira.
    """

    briefing: str = ""
    morale_scores: list[dict[str, Any]] = field(default_factory=list)
    growth_scores: list[dict[str, Any]] = field(default_factory=list)
    open_items_mine: list[PrepActionItem] = field(default_factory=list)
    open_items_theirs: list[PrepActionItem] = field(default_factory=list)
    recent_tags: list[TagCount] = field(default_factory=list)
    unresolved_blockers: list[str] = field(default_factory=list)
    jira: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PrepPayload":
        """Create from a service response, tolerating missing or null lists."""

        def items(key: str) -> list[PrepActionItem]:
            return [
                PrepActionItem(text=str(i.get("text", "")), date=parse_timestamp(i.get("date")))
                for i in data.get(key) or []
                if isinstance(i, dict)
            ]

        return cls(
            briefing=data.get("briefing") or "",
            morale_scores=[p for p in data.get("morale_scores") or [] if isinstance(p, dict)],
            growth_scores=[p for p in data.get("growth_scores") or [] if isinstance(p, dict)],
            open_items_mine=items("open_items_mine"),
            open_items_theirs=items("open_items_theirs"),
            recent_tags=[
                TagCount(tag=str(t.get("tag", "")), count=int(t.get("count") or 0))
                for t in data.get("recent_tags") or []
                if isinstance(t, dict)
            ],
            unresolved_blockers=[
                b for b in data.get("unresolved_blockers") or [] if isinstance(b, str)
            ],
            jira={k: v for k, v in data.items() if k.startswith("jira_") and v},
        )

    @classmethod
    def from_summary(cls, summary: PrepSummary, briefing: str = "") -> "PrepPayload":
        """Build a payload locally from computed prep data."""
        return cls(
            briefing=briefing,
            morale_scores=[p.to_dict() for p in summary.morale_scores],
            growth_scores=[p.to_dict() for p in summary.growth_scores],
            open_items_mine=list(summary.open_items_mine),
            open_items_theirs=list(summary.open_items_theirs),
            recent_tags=list(summary.recent_tags),
            unresolved_blockers=list(summary.unresolved_blockers),
        )


@dataclass
class PrepView:
    """Everything shown on the prep screen for one team member."""

    member_id: str
    payload: PrepPayload
    sections: list[BriefingSection]
    trend: TrendChart | None

    @property
    def has_open_items(self) -> bool:
        return bool(self.payload.open_items_mine or self.payload.open_items_theirs)


class BriefingSource(Protocol):
    """Protocol for the external briefing service."""

    def prep(self, member_id: str, force: bool = False) -> dict[str, Any]:
        """Return the prep payload for a team member."""
        ...


def build_prep_view(
    member_id: str, payload: PrepPayload, geometry: TrendGeometry | None = None
) -> PrepView:
    """Parse the briefing and project the trend for a payload."""
    samples = samples_from_score_points(payload.morale_scores, payload.growth_scores)
    return PrepView(
        member_id=member_id,
        payload=payload,
        sections=parse_briefing(payload.briefing),
        trend=project_trend(samples, geometry),
    )


class PrepService:
    """Service for assembling meeting prep views.

    Fetches payloads from the briefing service and turns them into
    parsed sections and trend geometry.
    """

    def __init__(
        self,
        source: BriefingSource | None = None,
        geometry: TrendGeometry | None = None,
        force_refresh: bool = False,
    ) -> None:
        """Initialize prep service.

        Args:
            source: Optional briefing service client
            geometry: Trend chart dimensions
            force_refresh: Default for prepare() when force is not given
        """
        self._source = source
        self._geometry = geometry
        self._force_refresh = force_refresh

    @classmethod
    def from_config(
        cls, config: JournalConfig, source: BriefingSource | None = None
    ) -> "PrepService":
        """Create a service using the trend and prep sections of config."""
        return cls(
            source=source,
            geometry=TrendGeometry.from_config(config.trend),
            force_refresh=config.prep.force_refresh,
        )

    def prepare(self, member_id: str, force: bool | None = None) -> PrepView:
        """Fetch and assemble the prep view for a team member.

        Args:
            member_id: Team member to prepare for
            force: Ask the service to regenerate instead of using its cache.
                Defaults to the service's force_refresh setting.

        Returns:
            PrepView with parsed briefing sections and trend

        Raises:
            BriefingUnavailableError: If the briefing service fails.
        """
        if not self._source:
            logger.warning("No briefing service configured for prep")
            raise BriefingUnavailableError("No briefing service configured", member_id=member_id)

        if force is None:
            force = self._force_refresh

        try:
            raw = self._source.prep(member_id, force=force)
        except Exception as e:
            logger.warning(f"Briefing fetch failed for {member_id}: {e}")
            raise BriefingUnavailableError(str(e), member_id=member_id) from e

        payload = PrepPayload.from_dict(raw or {})
        view = build_prep_view(member_id, payload, self._geometry)

        logger.info(
            f"Prepared briefing for {member_id}: sections={len(view.sections)}, "
            f"open_items={len(payload.open_items_mine) + len(payload.open_items_theirs)}"
        )
        return view

    def prepare_offline(self, member_id: str, entries: Iterable[Entry], limit: int = 5) -> PrepView:
        """Assemble a prep view from local entries, without a briefing.

        Uses the member's newest entries, like the service's prep window.
        """
        recent = sorted(
            (e for e in entries if e.member_id == member_id),
            key=lambda e: e.date,
            reverse=True,
        )[:limit]

        briefing = "" if recent else NO_ENTRIES_BRIEFING
        payload = PrepPayload.from_summary(compute_structured_prep(recent), briefing=briefing)
        return build_prep_view(member_id, payload, self._geometry)


__all__ = [
    "BriefingSource",
    "NO_ENTRIES_BRIEFING",
    "PrepActionItem",
    "PrepPayload",
    "PrepService",
    "PrepSummary",
    "PrepView",
    "ScorePoint",
    "TagCount",
    "build_prep_view",
    "compute_structured_prep",
]
