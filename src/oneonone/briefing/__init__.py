"""Briefing module for the 1:1 journal.

Parses generated meeting-prep briefings into renderable sections.
"""

from .models import BriefingSection, Fragment
from .parser import classify_line, parse_briefing, render_text, split_emphasis

__all__ = [
    "BriefingSection",
    "Fragment",
    "classify_line",
    "parse_briefing",
    "render_text",
    "split_emphasis",
]
