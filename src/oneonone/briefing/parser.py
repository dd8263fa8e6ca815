"""Briefing text parser.

Turns the freeform briefing text returned by the prep service into titled
sections of emphasis-aware items. The expected shape is::

    **Follow up on**
    - Discuss **promotion** timeline
    - Check in on workload

but any text is accepted. Each non-blank line is classified as a header,
a bullet, or plain text, and a two-state machine assigns lines to sections.
Unrecognized lines become plain items, so parsing never fails.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum

from .models import BriefingSection, Fragment

logger = logging.getLogger(__name__)

EMPHASIS_MARKER = "**"

# Optional markdown heading marks, then a bold label and nothing else
HEADER_PATTERN = re.compile(r"^(?:#{1,6}\s*)?\*\*(?P<label>(?:(?!\*\*).)+)\*\*$")
BULLET_PATTERN = re.compile(r"^[-*] +(?P<content>\S.*)$")


class LineKind(Enum):
    """Classification of a single briefing line."""

    BLANK = "blank"
    HEADER = "header"
    BULLET = "bullet"
    TEXT = "text"


class ParserState(Enum):
    """Whether a section is currently open."""

    NO_SECTION = "no_section"
    IN_SECTION = "in_section"


@dataclass(frozen=True)
class ClassifiedLine:
    """A line with its kind and the part of it that carries meaning."""

    kind: LineKind
    value: str


def classify_line(line: str) -> ClassifiedLine:
    """Classify a raw line.

    Returns:
        ClassifiedLine whose value is the header label, the bullet content,
        or the stripped line for plain text
    """
    stripped = line.strip()
    if not stripped:
        return ClassifiedLine(LineKind.BLANK, "")

    header = HEADER_PATTERN.match(stripped)
    if header:
        label = header.group("label").strip()
        if label:
            return ClassifiedLine(LineKind.HEADER, label)

    bullet = BULLET_PATTERN.match(stripped)
    if bullet:
        return ClassifiedLine(LineKind.BULLET, bullet.group("content").strip())

    return ClassifiedLine(LineKind.TEXT, stripped)


def split_emphasis(content: str) -> list[Fragment]:
    """Split item content on bold markers into alternating fragments.

    Text outside marker pairs is plain, text between them is emphasized.
    A marker with no partner is kept as literal text. Empty runs are
    dropped, so content opening with a marker pair starts emphasized, and
    neighbouring runs of the same kind are joined.
    """
    parts = content.split(EMPHASIS_MARKER)
    if len(parts) % 2 == 0:
        # Odd number of markers: the last one is unpaired
        parts = parts[:-2] + [parts[-2] + EMPHASIS_MARKER + parts[-1]]

    fragments: list[Fragment] = []
    for i, text in enumerate(parts):
        if not text:
            continue
        emphasized = i % 2 == 1
        if fragments and fragments[-1].emphasized == emphasized:
            fragments[-1] = Fragment(fragments[-1].text + text, emphasized)
        else:
            fragments.append(Fragment(text, emphasized))

    if not fragments:
        return [Fragment(content)]
    return fragments


def parse_briefing(text: str | None) -> list[BriefingSection]:
    """Parse briefing text into sections.

    Args:
        text: Briefing text, possibly malformed or empty

    Returns:
        Sections in document order. Items seen before the first header go
        into a leading section with no title.
    """
    sections: list[BriefingSection] = []
    if not text:
        return sections

    state = ParserState.NO_SECTION
    current: BriefingSection | None = None

    for line in text.splitlines():
        classified = classify_line(line)

        if classified.kind is LineKind.BLANK:
            continue

        if classified.kind is LineKind.HEADER:
            current = BriefingSection(title=classified.value)
            sections.append(current)
            state = ParserState.IN_SECTION
            continue

        if state is ParserState.NO_SECTION or current is None:
            current = BriefingSection(title=None)
            sections.append(current)
            state = ParserState.IN_SECTION

        if classified.kind is LineKind.BULLET:
            current.items.append(split_emphasis(classified.value))
        else:
            current.items.append([Fragment(classified.value)])

    logger.debug(
        f"Parsed briefing into {len(sections)} sections "
        f"({sum(len(s.items) for s in sections)} items)"
    )
    return sections


def render_text(sections: list[BriefingSection]) -> str:
    """Render sections back to briefing text with bold headers and dash bullets."""
    lines: list[str] = []
    for section in sections:
        if lines:
            lines.append("")
        if section.title is not None:
            lines.append(f"{EMPHASIS_MARKER}{section.title}{EMPHASIS_MARKER}")
        for item in section.items:
            rendered = "".join(
                f"{EMPHASIS_MARKER}{f.text}{EMPHASIS_MARKER}" if f.emphasized else f.text
                for f in item
            )
            lines.append(f"- {rendered}")
    return "\n".join(lines)


__all__ = [
    "ClassifiedLine",
    "LineKind",
    "ParserState",
    "classify_line",
    "parse_briefing",
    "render_text",
    "split_emphasis",
]
