"""1:1 Notes command line entry point.

Reviews a JSON snapshot of the journal from the terminal.

Usage:
    python -m oneonone [OPTIONS] COMMAND

Commands:
    search       List entries matching a query, tags and date range
    open-items   List open action items with their identity keys
    trend        Print trend chart coordinates for a team member
    prep         Build a prep view from local entries
    briefing     Parse a briefing text file into sections
"""

import argparse
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from . import __version__
from .briefing import parse_briefing, render_text
from .config import JournalConfig
from .config.loader import load_config
from .digest.prep import PrepService
from .digest.trend import TrendGeometry, TrendStyle, project_trend, style_chart
from .errors import ConfigError, OneOnOneError
from .notes.action_items import open_items
from .notes.filters import (
    DateRange,
    EntryFilter,
    filter_entries,
    member_entries,
    recent_entries,
)
from .notes.models import Entry, TeamMember, load_entries

logger = logging.getLogger("oneonone")


def setup_logging(level: str, fmt: str | None = None) -> None:
    """Configure logging based on config."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format=fmt or "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="oneonone",
        description="1:1 Notes - review a journal snapshot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m oneonone search --data journal.json --query promotion
  python -m oneonone search --data journal.json --tag morale --range 90
  python -m oneonone open-items --data journal.json
  python -m oneonone briefing prep.txt

Environment:
  ONEONONE_PROFILE    Set profile (dev, test)
""",
    )

    parser.add_argument("--config", type=Path, help="Path to YAML config file", metavar="PATH")
    parser.add_argument("--profile", choices=["dev", "test"], help="Configuration profile to use")
    parser.add_argument(
        "--version", action="version", version=f"1:1 Notes v{__version__}"
    )
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")

    commands = parser.add_subparsers(dest="command", required=True)

    def add_snapshot(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--data", type=Path, required=True, metavar="PATH", help="Journal snapshot (JSON)"
        )
        sub.add_argument("--member", help="Restrict to one team member id")

    search = commands.add_parser("search", help="List matching entries")
    add_snapshot(search)
    search.add_argument("--query", default="", help="Free-text search")
    search.add_argument("--tag", action="append", default=[], help="Tag filter (repeatable)")
    search.add_argument("--range", dest="date_range", help="Date range: 30, 90, 180 or all")
    search.add_argument("--limit", type=int, help="Maximum entries to show")

    items = commands.add_parser("open-items", help="List open action items")
    add_snapshot(items)

    trend = commands.add_parser("trend", help="Print trend chart coordinates")
    add_snapshot(trend)

    prep = commands.add_parser("prep", help="Build a prep view from local entries")
    add_snapshot(prep)

    briefing = commands.add_parser("briefing", help="Parse a briefing text file")
    briefing.add_argument("path", type=Path, help="Briefing text file ('-' for stdin)")

    return parser.parse_args(argv)


def load_snapshot(path: Path) -> tuple[list[TeamMember], list[Entry]]:
    """Load team members and entries from a JSON snapshot.

    Accepts {"team": [...], "entries": [...]} or a bare list of entries.
    """
    with open(path) as f:
        data: Any = json.load(f)

    if isinstance(data, list):
        return [], load_entries(data)

    team = [TeamMember.from_dict(m) for m in data.get("team") or []]
    return team, load_entries(data.get("entries") or [])


def _scoped(entries: list[Entry], member: str | None) -> list[Entry]:
    return member_entries(entries, member) if member else entries


def _emit(args: argparse.Namespace, payload: Any, text: str) -> None:
    if args.json:
        print(json.dumps(payload, indent=2, default=str))
    else:
        print(text)


def cmd_search(args: argparse.Namespace, config: JournalConfig) -> int:
    _, entries = load_snapshot(args.data)
    try:
        date_range = DateRange.parse(args.date_range or config.review.default_date_range)
    except ValueError as e:
        raise ConfigError(f"Unknown date range: {e}") from e

    entry_filter = EntryFilter.build(tags=args.tag, date_range=date_range)
    now = datetime.now(UTC)

    if args.limit is None and not args.member:
        found = recent_entries(
            entries,
            query=args.query,
            recent_limit=config.review.recent_limit,
            search_limit=config.review.search_limit,
            entry_filter=entry_filter,
            now=now,
        )
    else:
        found = filter_entries(
            _scoped(entries, args.member),
            query=args.query,
            entry_filter=entry_filter,
            now=now,
            limit=args.limit,
        )

    lines = [f"{e.date:%Y-%m-%d}  {e.member_id:<12} {e.summary}" for e in found]
    if not found:
        lines = ["No entries match your search."]
    _emit(args, [e.to_dict() for e in found], "\n".join(lines))
    return 0


def cmd_open_items(args: argparse.Namespace, config: JournalConfig) -> int:
    _, entries = load_snapshot(args.data)
    result = open_items(_scoped(entries, args.member))

    lines = []
    for label, refs in (("YOU", result.mine), ("THEM", result.theirs)):
        if not refs:
            continue
        lines.append(label)
        lines.extend(f"  [{'/'.join(map(str, r.key))}] {r.text} ({r.date:%b} {r.date.day})" for r in refs)

    payload = {
        "mine": [{"key": r.key, "text": r.text, "date": r.date} for r in result.mine],
        "theirs": [{"key": r.key, "text": r.text, "date": r.date} for r in result.theirs],
    }
    _emit(args, payload, "\n".join(lines) or "No open action items.")
    return 0


def cmd_trend(args: argparse.Namespace, config: JournalConfig) -> int:
    team, entries = load_snapshot(args.data)
    geometry = TrendGeometry.from_config(config.trend)
    chart = project_trend(_scoped(entries, args.member), geometry)
    if chart is None:
        print("Not enough entries for a trend.")
        return 0

    color = next((m.color for m in team if m.id == args.member), config.trend.default_color)
    styled = style_chart(chart, TrendStyle.from_color(color))

    payload = {
        "morale": {"color": styled.style.morale_color, "points": chart.morale.polyline()},
        "growth": {"color": styled.style.growth_color, "points": chart.growth.polyline()},
        "x_labels": [(label.text, label.position) for label in chart.x_axis],
    }
    text = "\n".join(
        [
            f"{styled.style.morale_label}: {payload['morale']['points']}",
            f"{styled.style.growth_label}: {payload['growth']['points']}",
            "Dates: " + ", ".join(label.text for label in chart.x_axis),
        ]
    )
    _emit(args, payload, text)
    return 0


def cmd_prep(args: argparse.Namespace, config: JournalConfig) -> int:
    if not args.member:
        raise ConfigError("prep requires --member")

    _, entries = load_snapshot(args.data)

    service = PrepService.from_config(config)
    view = service.prepare_offline(args.member, entries, limit=config.prep.entry_limit)

    p = view.payload
    lines = [render_text(view.sections)] if view.sections else []
    lines.extend(f"YOU: {i.text}" for i in p.open_items_mine)
    lines.extend(f"THEM: {i.text}" for i in p.open_items_theirs)
    if p.recent_tags:
        lines.append("Tags: " + ", ".join(f"{t.tag} x{t.count}" for t in p.recent_tags))
    lines.extend(f"Blocker: {b}" for b in p.unresolved_blockers)

    payload = {
        "open_items_mine": [i.to_dict() for i in p.open_items_mine],
        "open_items_theirs": [i.to_dict() for i in p.open_items_theirs],
        "recent_tags": [t.to_dict() for t in p.recent_tags],
        "unresolved_blockers": p.unresolved_blockers,
        "has_trend": view.trend is not None,
    }
    _emit(args, payload, "\n".join(lines) or "Nothing to prepare.")
    return 0


def cmd_briefing(args: argparse.Namespace, config: JournalConfig) -> int:
    text = sys.stdin.read() if str(args.path) == "-" else args.path.read_text()
    sections = parse_briefing(text)
    _emit(args, [s.to_dict() for s in sections], render_text(sections))
    return 0


COMMANDS = {
    "search": cmd_search,
    "open-items": cmd_open_items,
    "trend": cmd_trend,
    "prep": cmd_prep,
    "briefing": cmd_briefing,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    load_dotenv()
    args = parse_args(argv)

    try:
        config = load_config(path=args.config, profile=args.profile)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.logging.level, config.logging.format)
    logger.debug(f"1:1 Notes v{__version__}, command={args.command}")

    try:
        return COMMANDS[args.command](args, config)
    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        return 1
    except json.JSONDecodeError as e:
        logger.error(f"Snapshot is not valid JSON: {e}")
        return 1
    except OneOnOneError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
