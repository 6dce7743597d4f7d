"""Duration helpers. All durations are whole seconds."""

from datetime import datetime


def calculate_duration(start: datetime, end: datetime) -> int:
    return max(int((end - start).total_seconds()), 0)


def format_duration(seconds: int) -> str:
    """3725 -> '1h 2m', 125 -> '2m'."""
    seconds = int(seconds or 0)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def round_to_nearest(seconds: int, minutes: int) -> int:
    """Round to the nearest multiple of ``minutes``; 0 disables rounding."""
    if not minutes or minutes <= 0:
        return seconds
    step = minutes * 60
    # Half-up so 7.5 minutes rounds to 15 with a 15-minute step
    return ((seconds + step // 2) // step) * step
