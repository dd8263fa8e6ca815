"""Digest module for the 1:1 journal.

Provides score trend projection and meeting prep assembly.
"""

from .prep import PrepPayload, PrepService, PrepView, compute_structured_prep
from .trend import TrendChart, TrendGeometry, TrendStyle, project_trend, style_chart

__all__ = [
    "PrepPayload",
    "PrepService",
    "PrepView",
    "TrendChart",
    "TrendGeometry",
    "TrendStyle",
    "compute_structured_prep",
    "project_trend",
    "style_chart",
]
