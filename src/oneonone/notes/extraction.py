"""Normalization of transcript extraction responses.

The extraction service returns model-generated text that should hold a
JSON object with Entry fields. This module turns that text into an Entry,
tolerating code fences, surrounding prose and loosely typed lists.
"""

import json
import logging
from datetime import UTC, datetime
from typing import Any, Protocol

from oneonone.errors import ExtractionError

from .models import ActionItem, Entry, Tag, coerce_score

logger = logging.getLogger(__name__)

# Vocabulary string handed to the extraction model
EXTRACTION_TAGS = ", ".join(tag.value for tag in Tag)

STRING_LIST_FIELDS = ("wins", "blockers", "notable_quotes")
ACTION_ITEM_FIELDS = ("action_items_mine", "action_items_theirs")


class TranscriptExtractor(Protocol):
    """Protocol for the external extraction service."""

    def extract(self, transcript: str, member_name: str) -> str:
        """Return the raw extraction response for a transcript."""
        ...


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    clean = text.strip()
    clean = clean.removeprefix("```json")
    clean = clean.removeprefix("```")
    clean = clean.removesuffix("```")
    return clean.strip()


def _normalize_strings(items: Any) -> list[str]:
    """Normalize list items to strings, handling objects from the model."""
    if isinstance(items, str):
        return [items] if items.strip() else []

    result = []
    for item in items or []:
        if isinstance(item, str):
            if item.strip():
                result.append(item)
        elif isinstance(item, dict):
            for key in ["text", "description", "task", "quote", "value"]:
                if key in item and isinstance(item[key], str):
                    result.append(item[key])
                    break
            else:
                parts = [v for v in item.values() if isinstance(v, str)]
                if parts:
                    result.append(" ".join(parts))
    return result


def decode_extraction(response_text: str) -> dict[str, Any]:
    """Decode the JSON object inside an extraction response.

    Raises:
        ExtractionError: If no JSON object can be decoded.
    """
    clean = strip_code_fences(response_text)
    json_start = clean.find("{")
    json_end = clean.rfind("}") + 1

    if json_start < 0 or json_end <= json_start:
        raise ExtractionError("No JSON object in extraction response", response_text)

    try:
        data = json.loads(clean[json_start:json_end])
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse extraction JSON: {e}")
        raise ExtractionError(f"Invalid extraction JSON: {e}", response_text) from e

    if not isinstance(data, dict):
        raise ExtractionError("Extraction JSON is not an object", response_text)
    return data


def parse_extraction(
    response_text: str,
    member_id: str,
    date: datetime | None = None,
    transcript: str | None = None,
) -> Entry:
    """Build an unsaved Entry from an extraction response.

    Args:
        response_text: Raw text returned by the extraction service
        member_id: Team member the transcript belongs to
        date: Meeting date. Defaults to now (UTC).
        transcript: Source transcript to keep on the entry

    Returns:
        Entry with an empty id, ready for review and save

    Raises:
        ExtractionError: If the response holds no JSON object.
    """
    data = decode_extraction(response_text)

    raw_tags = _normalize_strings(data.get("tags"))
    tags = [tag for tag in (Tag.parse(t) for t in raw_tags) if tag is not None]
    if len(tags) < len(raw_tags):
        logger.debug(f"Dropped {len(raw_tags) - len(tags)} tags outside vocabulary")

    summary = data.get("summary")
    entry = Entry(
        id="",
        member_id=member_id,
        date=date or datetime.now(UTC),
        morale_score=coerce_score(data.get("morale_score")),
        growth_score=coerce_score(data.get("growth_score")),
        morale_rationale=data.get("morale_rationale") or None,
        growth_rationale=data.get("growth_rationale") or None,
        summary=summary if isinstance(summary, str) else "",
        tags=list(dict.fromkeys(tags)),
        transcript=transcript,
    )
    for name in STRING_LIST_FIELDS:
        setattr(entry, name, _normalize_strings(data.get(name)))
    for name in ACTION_ITEM_FIELDS:
        texts = _normalize_strings(data.get(name))
        setattr(entry, name, [ActionItem(text=text) for text in texts])

    logger.info(
        f"Extracted entry for {member_id}: tags={[t.value for t in entry.tags]}, "
        f"morale={entry.morale_score}, growth={entry.growth_score}"
    )
    return entry


def extract_entry(
    extractor: TranscriptExtractor,
    transcript: str,
    member_id: str,
    member_name: str,
    date: datetime | None = None,
) -> Entry:
    """Run the extraction service on a transcript and normalize the result.

    Raises:
        ExtractionError: If the transcript is empty or the response is unusable.
    """
    if not transcript.strip():
        raise ExtractionError("Transcript is empty")

    response_text = extractor.extract(transcript, member_name)
    return parse_extraction(response_text, member_id, date=date, transcript=transcript)


__all__ = [
    "EXTRACTION_TAGS",
    "TranscriptExtractor",
    "decode_extraction",
    "extract_entry",
    "parse_extraction",
    "strip_code_fences",
]
