"""1:1 Notes - review engine for a personal one-on-one journal.

Provides the data processing behind the journal views:
- Free-text search and tag/date filtering of entries
- Morale and growth trend projection
- Open action item tracking
- Parsing of generated meeting-prep briefings

Usage:
    python -m oneonone search --data journal.json --query promotion
    python -m oneonone briefing briefing.txt
"""

__version__ = "0.1.0"

from .config import JournalConfig
from .config.loader import load_config

__all__ = [
    "JournalConfig",
    "__version__",
    "load_config",
]
