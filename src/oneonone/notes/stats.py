"""Score averages and tag counts across entries."""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

from .models import SCORE_MIDPOINT, Entry, Tag


def score_or_midpoint(score: int | None) -> int:
    """Missing scores count as the middle of the 1-5 scale."""
    return SCORE_MIDPOINT if score is None else score


@dataclass
class ScoreAverages:
    """Average morale and growth across a set of entries."""

    morale: float | None
    growth: float | None
    count: int

    def format(self, value: float | None) -> str:
        """One-decimal display value, or "-" when there is no data."""
        return "-" if value is None else f"{value:.1f}"


def average_scores(entries: Iterable[Entry]) -> ScoreAverages:
    """Average morale and growth scores.

    Args:
        entries: Entries to average

    Returns:
        ScoreAverages; averages are None when there are no entries
    """
    entries = list(entries)
    if not entries:
        return ScoreAverages(morale=None, growth=None, count=0)

    count = len(entries)
    morale = sum(score_or_midpoint(e.morale_score) for e in entries) / count
    growth = sum(score_or_midpoint(e.growth_score) for e in entries) / count
    return ScoreAverages(morale=morale, growth=growth, count=count)


def tag_counts(entries: Iterable[Entry]) -> list[tuple[Tag, int]]:
    """Count tag usage, most used first.

    Ties keep the order in which tags were first seen.
    """
    counter: Counter[Tag] = Counter()
    for entry in entries:
        counter.update(entry.tags)
    return sorted(counter.items(), key=lambda pair: pair[1], reverse=True)


__all__ = ["ScoreAverages", "average_scores", "score_or_midpoint", "tag_counts"]
