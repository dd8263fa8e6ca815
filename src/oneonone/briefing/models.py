"""Data models for parsed meeting-prep briefings."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Fragment:
    """A run of item text, plain or emphasized."""

    text: str
    emphasized: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "emphasized": self.emphasized}


@dataclass
class BriefingSection:
    """A titled group of briefing items.

    Attributes:
        title: Section heading; None for text that precedes any heading
        items: One list of fragments per bullet or text line
    """

    title: str | None = None
    items: list[list[Fragment]] = field(default_factory=list)

    def plain_items(self) -> list[str]:
        """Items with emphasis dropped."""
        return ["".join(f.text for f in item) for item in self.items]

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "items": [[f.to_dict() for f in item] for item in self.items],
        }


__all__ = ["BriefingSection", "Fragment"]
