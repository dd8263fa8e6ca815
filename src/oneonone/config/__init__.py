"""Configuration module for the 1:1 journal.

This module provides configuration loading and profile management.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol


@dataclass
class ReviewConfig:
    """Entry list and search configuration."""

    default_date_range: str = "all"
    recent_limit: int = 5
    search_limit: int = 20


@dataclass
class TrendConfig:
    """Trend chart canvas configuration."""

    width: float = 600
    height: float = 120
    pad_x: float = 30
    pad_top: float = 10
    pad_bottom: float = 24
    default_color: str = "#3D405B"


@dataclass
class PrepConfig:
    """Meeting prep configuration."""

    entry_limit: int = 5
    force_refresh: bool = False


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass
class JournalConfig:
    """Main 1:1 journal configuration."""

    review: ReviewConfig = field(default_factory=ReviewConfig)
    trend: TrendConfig = field(default_factory=TrendConfig)
    prep: PrepConfig = field(default_factory=PrepConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigLoader(Protocol):
    """Protocol for configuration loading."""

    def load(self, path: Path) -> JournalConfig:
        """Load configuration from file path."""
        ...

    def load_profile(self, profile: str) -> JournalConfig:
        """Load configuration by profile name (dev, test)."""
        ...

    def get_config_dir(self) -> Path:
        """Get the configuration directory path."""
        ...


# Public API
__all__ = [
    "ConfigLoader",
    "JournalConfig",
    "LoggingConfig",
    "PrepConfig",
    "ReviewConfig",
    "TrendConfig",
]
