from __future__ import annotations

from datetime import time, timedelta


def as_offset(value: time | timedelta) -> timedelta:
    """Express a wall-clock time as an offset from midnight."""

    if isinstance(value, timedelta):
        return value
    return timedelta(hours=value.hour, minutes=value.minute, seconds=value.second)


def compute_period_interval(
    period_number: int,
    period_duration: int,
    break_after_period: int,
    break_duration: int,
    day_start: time | timedelta,
) -> tuple[timedelta, timedelta]:
    """Return (start, end) of a period as offsets from midnight.

    Periods are laid out back to back from `day_start`; every period after
    `break_after_period` is pushed back by `break_duration` minutes. The result
    is not clamped to 24:00, callers validate the interval.
    """

    offset_minutes = (period_number - 1) * period_duration
    if period_number > break_after_period:
        offset_minutes += break_duration

    start = as_offset(day_start) + timedelta(minutes=offset_minutes)
    end = start + timedelta(minutes=period_duration)
    return start, end


def format_clock(value: timedelta) -> str:
    total_minutes = int(value.total_seconds() // 60)
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours:02d}:{minutes:02d}"


def parse_clock(text: str) -> timedelta:
    """Parse "HH:MM" (24:00 allowed) into an offset from midnight."""

    raw = (text or "").strip()
    hours_s, sep, minutes_s = raw.partition(":")
    if not sep or not hours_s.isdigit() or not minutes_s.isdigit():
        raise ValueError(f"Expected HH:MM, got {text!r}")
    hours, minutes = int(hours_s), int(minutes_s)
    if minutes >= 60 or hours > 24 or (hours == 24 and minutes):
        raise ValueError(f"Expected HH:MM, got {text!r}")
    return timedelta(hours=hours, minutes=minutes)
