"""Utility functions."""
import math
import re
from typing import Optional, Union


def to_int(s: Optional[Union[str, int]]) -> Optional[int]:
    """Convert string to int, returning None if conversion fails."""
    try:
        return int(s) if s is not None else None
    except Exception:
        return None


def to_float(s: Optional[str]) -> float:
    """Parse a user-entered weight. Empty or invalid text counts as 0."""
    try:
        value = float(str(s).strip()) if s is not None else 0.0
    except ValueError:
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def reps_as_int(value: Optional[Union[int, str]]) -> int:
    """Resolve a rep target to a number: 10 -> 10, '12' -> 12, ranges and text -> 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if not value:
        return 0
    return to_int(value.strip()) or 0


def format_time(total_seconds: Union[int, float]) -> str:
    """Format seconds as MM:SS. Negative values clamp to 00:00; minutes are not capped."""
    if total_seconds < 0:
        total_seconds = 0
    minutes = int(total_seconds // 60)
    seconds = int(total_seconds % 60)
    return f"{minutes:02d}:{seconds:02d}"


def snake_label(name: str) -> str:
    """'Bench Press' -> 'bench_press' (whitespace runs collapse to one underscore)."""
    return re.sub(r"\s+", "_", name.lower())
