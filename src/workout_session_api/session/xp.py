"""XP rules.

Lump-reward blocks pay their ``xp_value`` once on completion. Timed blocks pay
per finished countdown interval instead, scaled by duration and intensity.
"""
import math
from typing import Tuple

from workout_session_api.models import Interval

LUMP_REWARD_TYPES = frozenset({"exercise", "checklist", "superset"})

# (keywords, XP per minute); first match wins, checked in this order
INTENSITY_RATES: Tuple[Tuple[Tuple[str, ...], int], ...] = (
    (("push", "tempo", "threshold"), 12),
    (("all out", "sprint", "max"), 20),
    (("long run", "moderate"), 8),
)
BASE_RATE = 5  # base / recovery


def is_lump_reward(block) -> bool:
    return block.type in LUMP_REWARD_TYPES


def intensity_rate(zone_or_text: str) -> int:
    """XP per minute for an interval label."""
    text = (zone_or_text or "").lower()
    for keywords, rate in INTENSITY_RATES:
        if any(k in text for k in keywords):
            return rate
    return BASE_RATE


def interval_xp(interval: Interval) -> int:
    """Award for one finished interval. Instruction cards never pay."""
    if not interval.is_countdown:
        return 0
    minutes = interval.seconds / 60
    return math.ceil(max(1, minutes * intensity_rate(interval.zone_or_text)))


def lump_xp(block, skipped: bool = False) -> int:
    """Award for a finished block; zero when skipped or when the block pays per interval."""
    if skipped or not is_lump_reward(block):
        return 0
    return max(0, block.xp_value)


def reward_category(block) -> str:
    return "Cardio" if "Tread" in block.name else "Strength"


def award_details(block) -> str:
    if block.description:
        return block.description
    return f"{getattr(block, 'sets', None) or 1} Sets"
