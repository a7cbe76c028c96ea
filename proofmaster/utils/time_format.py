"""Time formatting helpers for timers and dough age"""
from datetime import datetime, timezone
import random


def format_time(total_seconds: int) -> str:
    """
    Format a number of seconds as a countdown display.

    Args:
        total_seconds: Seconds to display (negative values show as 00:00)

    Returns:
        str: "MM:SS" string; minutes keep growing past 99 ("125:07")
    """
    total_seconds = max(0, int(total_seconds))
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


def format_minutes(seconds: int) -> str:
    """Seconds as a minute count for messages: 120 -> "2", 90 -> "1.5" """
    return f"{seconds / 60:g}"


def generate_run_id(now: datetime | None = None) -> str:
    """
    Generate a production run ID.

    Returns:
        str: "PR-20251014-042" style identifier
    """
    if now is None:
        now = datetime.now(timezone.utc)
    sequence = random.randint(0, 999)
    return f"PR-{now.strftime('%Y%m%d')}-{sequence:03d}"
