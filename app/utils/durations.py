import math


def _as_minutes(value: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return max(number, 0.0) if math.isfinite(number) else 0.0


def _round_tenths(value: float) -> float:
    # Half-up: 0.25h reads as 0.3h.
    return math.floor(value * 10 + 0.5) / 10


def minutes_to_hours(minutes: float) -> float:
    """Convert minutes to hours, rounded to one decimal place."""
    return _round_tenths(_as_minutes(minutes) / 60)


def format_hours(minutes: float, suffix: str = "h") -> str:
    hours = _as_minutes(minutes) / 60
    if hours.is_integer():
        return f"{int(hours)}{suffix}"
    return f"{_round_tenths(hours):.1f}{suffix}"


def format_minutes(minutes: int) -> str:
    total = int(_as_minutes(minutes))
    if total < 60:
        return f"{total}m"
    hours, mins = divmod(total, 60)
    return f"{hours}h {mins}m" if mins else f"{hours}h"
