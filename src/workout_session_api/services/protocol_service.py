"""Protocol source: weekly template files, briefing and schedule.

A protocol is ``<PROTOCOL_DIR>/<weekday>.json`` holding a JSON list of blocks.
Blocks that fail validation are logged and dropped; the rest of the day still
loads.
"""
from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from workout_session_api.config import settings
from workout_session_api.errors import ProtocolLoadError
from workout_session_api.models import BlockEnvelope
from workout_session_api.session.sections import distinct_section_names

logger = logging.getLogger(__name__)

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
SUMMARY_BLOCK_NAME = "Today's Protocol"
SECONDS_PER_SET = 120

BLOCK_TYPE_ALIASES = {
    "checklist_exercise": "exercise",
    "list": "checklist",
    "timer": "timed",
}
INTERVAL_KIND_ALIASES = {
    "interval": "countdown",
    "card": "instructional_card",
}


def resolve_day(day: Optional[str] = None, today: Optional[date] = None) -> str:
    """Weekday name for ``day``: a weekday name, an ISO date, or today when empty/unparseable."""
    today = today or date.today()
    fallback = WEEKDAYS[today.weekday()]
    if not day or not day.strip():
        return fallback
    text = day.strip().lower()
    if text.isalpha():
        return text
    try:
        return WEEKDAYS[datetime.strptime(text[:10], "%Y-%m-%d").weekday()]
    except ValueError:
        logger.warning("Unrecognised day %r, using %s", day, fallback)
        return fallback


def _normalize_interval(raw: Any) -> Any:
    if not isinstance(raw, dict):
        return raw
    interval = dict(raw)
    kind = interval.pop("type", None) or interval.get("kind")
    if kind:
        interval["kind"] = INTERVAL_KIND_ALIASES.get(kind, kind)
    return interval


def _normalize_item(raw: Any) -> Any:
    if isinstance(raw, str):
        return {"kind": "item", "text": raw}
    if not isinstance(raw, dict):
        return raw
    item = dict(raw)
    kind = item.pop("type", None)
    if kind and "kind" not in item:
        item["kind"] = kind
    return item


def normalize_block(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Map legacy tags onto the current block shape before validation."""
    block = dict(raw)
    block_type = block.get("type")
    block["type"] = BLOCK_TYPE_ALIASES.get(block_type, block_type)
    if isinstance(block.get("intervals"), list):
        block["intervals"] = [_normalize_interval(i) for i in block["intervals"]]
    if isinstance(block.get("items"), list):
        block["items"] = [_normalize_item(i) for i in block["items"]]
    if block.get("section") is None:
        block.pop("section", None)
    return block


def parse_blocks(raw_blocks: Any) -> list:
    """Validate a raw block list, dropping invalid entries."""
    if not isinstance(raw_blocks, list):
        raise ProtocolLoadError("Protocol must be a JSON list of blocks")
    blocks = []
    for i, raw in enumerate(raw_blocks):
        if not isinstance(raw, dict):
            logger.warning("Dropping block %s: expected an object, got %s", i, type(raw).__name__)
            continue
        try:
            blocks.append(BlockEnvelope(block=normalize_block(raw)).block)
        except ValidationError as e:
            logger.warning("Dropping invalid block %s (%s): %s", i, raw.get("name"), e.errors())
    return blocks


class ProtocolService:
    """Reads weekly protocol files from a directory."""

    def __init__(self, protocol_dir: Union[str, Path, None] = None):
        self.protocol_dir = Path(protocol_dir or settings.PROTOCOL_DIR)

    def path_for(self, weekday: str) -> Path:
        return self.protocol_dir / f"{weekday}.json"

    def read_day(self, weekday: str) -> list:
        """Blocks for a weekday. Missing file is an empty day; a broken one raises."""
        path = self.path_for(weekday)
        if not path.exists():
            logger.info("No protocol for %s at %s", weekday, path)
            return []
        try:
            with path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            raise ProtocolLoadError(f"Could not read {path}: {e}") from e
        return parse_blocks(raw)

    def load_protocol(self, day: Optional[str] = None) -> list:
        """Block source for a session. Any load failure yields an empty protocol."""
        weekday = resolve_day(day)
        try:
            return self.read_day(weekday)
        except ProtocolLoadError as e:
            logger.error("Protocol load failed for %s: %s", weekday, e)
            return []

    def briefing(self, day: Optional[str] = None) -> Dict[str, Any]:
        weekday = resolve_day(day)
        blocks = self.load_protocol(weekday)
        return {"day": weekday, **summarize_protocol(blocks)}

    def weekly_schedule(self) -> List[Dict[str, Any]]:
        schedule = []
        for order, weekday in enumerate(WEEKDAYS):
            blocks = self.load_protocol(weekday)
            schedule.append({
                "day": weekday,
                "title": weekday.capitalize(),
                "order": order,
                "blocks": len(blocks),
                "sections": distinct_section_names(blocks),
                "xp": total_xp(blocks),
            })
        return schedule


def _work_blocks(blocks: list) -> list:
    if blocks and blocks[0].name == SUMMARY_BLOCK_NAME:
        return list(blocks[1:])
    return list(blocks)


def total_xp(blocks: list) -> int:
    """Sum of xp_value, ignoring a leading summary checklist."""
    return sum(b.xp_value for b in _work_blocks(blocks))


def estimated_minutes(blocks: list) -> int:
    total_seconds = 0
    for block in _work_blocks(blocks):
        if block.type == "timed":
            total_seconds += sum(i.seconds for i in block.intervals)
        elif block.type == "exercise":
            total_seconds += block.sets * SECONDS_PER_SET
    return round(total_seconds / 60)


def summarize_protocol(blocks: list) -> Dict[str, Any]:
    return {
        "total_blocks": len(blocks),
        "total_xp": total_xp(blocks),
        "estimated_minutes": estimated_minutes(blocks),
        "blocks": [
            {"name": b.name, "type": b.type, "section": b.section_name}
            for b in blocks
        ],
    }
