"""Morale and growth trend projection.

Maps a score history onto plot coordinates for a two-line chart. Geometry
and styling are separate so a chart can be recoloured without reprojecting.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from oneonone.config import TrendConfig
from oneonone.notes.models import SCORE_MAX, SCORE_MIN, coerce_score, parse_timestamp
from oneonone.notes.stats import score_or_midpoint

logger = logging.getLogger(__name__)

MIN_POINTS = 2
MAX_ALL_LABELS = 5


class Scored(Protocol):
    """Anything with a date and the two scores."""

    date: datetime
    morale_score: int | None
    growth_score: int | None


@dataclass(frozen=True)
class TrendGeometry:
    """Chart canvas size and padding."""

    width: float = 600
    height: float = 120
    pad_x: float = 30
    pad_top: float = 10
    pad_bottom: float = 24

    @classmethod
    def from_config(cls, config: TrendConfig) -> "TrendGeometry":
        """Create from the trend section of the journal config."""
        return cls(
            width=config.width,
            height=config.height,
            pad_x=config.pad_x,
            pad_top=config.pad_top,
            pad_bottom=config.pad_bottom,
        )

    @property
    def chart_width(self) -> float:
        return self.width - self.pad_x * 2

    @property
    def chart_height(self) -> float:
        return self.height - self.pad_top - self.pad_bottom

    def y_for(self, score: int | None) -> float:
        """Vertical position of a score; missing scores sit at the midpoint."""
        value = score_or_midpoint(score)
        span = SCORE_MAX - SCORE_MIN
        return self.pad_top + self.chart_height - ((value - SCORE_MIN) / span) * self.chart_height

    def x_for(self, index: int, count: int) -> float:
        """Horizontal position of the index-th of count evenly spaced points."""
        step = self.chart_width / (count - 1) if count > 1 else 0
        return self.pad_x + index * step


@dataclass(frozen=True)
class TrendPoint:
    """One plotted score."""

    x: float
    y: float
    score: int
    date: datetime


@dataclass
class TrendSeries:
    """A line of plotted scores."""

    name: str
    points: list[TrendPoint] = field(default_factory=list)

    def polyline(self) -> str:
        """Points as an SVG polyline attribute ("x,y x,y ...")."""
        return " ".join(f"{p.x:g},{p.y:g}" for p in self.points)


@dataclass(frozen=True)
class AxisLabel:
    """A tick label and where it sits along its axis."""

    text: str
    position: float


@dataclass
class TrendChart:
    """Projected geometry for the morale/growth chart."""

    geometry: TrendGeometry
    morale: TrendSeries
    growth: TrendSeries
    y_axis: list[AxisLabel]
    x_axis: list[AxisLabel]

    @property
    def axis_labels(self) -> dict[str, list[AxisLabel]]:
        return {"x": self.x_axis, "y": self.y_axis}


@dataclass(frozen=True)
class TrendStyle:
    """Colours and legend labels for the two series."""

    morale_color: str
    growth_color: str
    morale_label: str = "Morale"
    growth_label: str = "Growth"

    @classmethod
    def from_color(cls, color: str, **labels: str) -> "TrendStyle":
        """Use color for morale and a lighter shade for growth."""
        return cls(morale_color=color, growth_color=lighten(color, 80), **labels)


@dataclass
class StyledTrendChart:
    """A projected chart paired with a style."""

    chart: TrendChart
    style: TrendStyle


def lighten(hex_color: str, amount: int) -> str:
    """Raise each RGB channel of a #rrggbb colour by amount, clamped at 255.

    Returns the colour unchanged if it is not in #rrggbb form.
    """
    if len(hex_color) != 7 or not hex_color.startswith("#"):
        return hex_color
    try:
        channels = [int(hex_color[i : i + 2], 16) for i in (1, 3, 5)]
    except ValueError:
        return hex_color
    r, g, b = (min(255, c + amount) for c in channels)
    return f"rgb({r}, {g}, {b})"


def date_label(value: datetime) -> str:
    """Short month/day label, e.g. 'Mar 4'."""
    return f"{value.strftime('%b')} {value.day}"


def label_indices(count: int) -> list[int]:
    """Which points get a date label: all of a short series, else ends and middle."""
    if count <= MAX_ALL_LABELS:
        return list(range(count))
    return [0, count // 2, count - 1]


def project_trend(
    entries: Iterable[Scored], geometry: TrendGeometry | None = None
) -> TrendChart | None:
    """Project entries onto chart coordinates.

    Entries are ordered oldest first regardless of input order. Points are
    spaced evenly by position, not by elapsed time.

    Args:
        entries: Objects with date, morale_score and growth_score
        geometry: Canvas dimensions. Defaults to TrendGeometry().

    Returns:
        TrendChart, or None when there are fewer than two entries
    """
    ordered = sorted(entries, key=lambda e: e.date)
    count = len(ordered)
    if count < MIN_POINTS:
        logger.debug(f"Not enough points for a trend ({count})")
        return None

    geometry = geometry or TrendGeometry()
    morale = TrendSeries(name="morale")
    growth = TrendSeries(name="growth")

    for i, entry in enumerate(ordered):
        x = geometry.x_for(i, count)
        for series, score in ((morale, entry.morale_score), (growth, entry.growth_score)):
            series.points.append(
                TrendPoint(
                    x=x,
                    y=geometry.y_for(score),
                    score=score_or_midpoint(score),
                    date=entry.date,
                )
            )

    y_axis = [
        AxisLabel(text=str(v), position=geometry.y_for(v)) for v in range(SCORE_MIN, SCORE_MAX + 1)
    ]
    x_axis = [
        AxisLabel(text=date_label(ordered[i].date), position=geometry.x_for(i, count))
        for i in label_indices(count)
    ]

    return TrendChart(geometry=geometry, morale=morale, growth=growth, y_axis=y_axis, x_axis=x_axis)


def style_chart(chart: TrendChart, style: TrendStyle) -> StyledTrendChart:
    """Attach colours and labels to an already projected chart."""
    return StyledTrendChart(chart=chart, style=style)


@dataclass
class ScoreSample:
    """A dated pair of scores, used when only score history is available."""

    date: datetime
    morale_score: int | None
    growth_score: int | None


def samples_from_score_points(
    morale_scores: Sequence[dict[str, Any]], growth_scores: Sequence[dict[str, Any]]
) -> list[ScoreSample]:
    """Pair morale points with growth points by position.

    Morale drives the series; a missing growth point falls back to the
    midpoint. Points with unparseable dates are skipped.
    """
    samples = []
    for i, point in enumerate(morale_scores):
        when = parse_timestamp(point.get("date"))
        if when is None:
            continue
        growth = growth_scores[i].get("score") if i < len(growth_scores) else None
        samples.append(
            ScoreSample(
                date=when,
                morale_score=coerce_score(point.get("score")),
                growth_score=coerce_score(growth),
            )
        )
    return samples


__all__ = [
    "AxisLabel",
    "ScoreSample",
    "StyledTrendChart",
    "TrendChart",
    "TrendGeometry",
    "TrendPoint",
    "TrendSeries",
    "TrendStyle",
    "date_label",
    "label_indices",
    "lighten",
    "project_trend",
    "samples_from_score_points",
    "style_chart",
]
