"""Work-hours arithmetic on "HH:MM" clock-of-day values."""
import math

MINUTES_PER_DAY = 24 * 60


def _to_minutes(clock):
    hour, minute = clock.split(":")
    return int(hour) * 60 + int(minute)


def compute_hours(start_time, end_time):
    """Return the hours elapsed from ``start_time`` to ``end_time``.

    An end earlier than the start is a shift that crossed midnight, so a day
    is added. Shifts are assumed to never span more than 24 hours; equal
    times are a zero-length entry, not a full day.
    """
    diff = _to_minutes(end_time) - _to_minutes(start_time)
    if diff < 0:
        diff += MINUTES_PER_DAY
    return diff / 60


def format_hours(hours):
    """Render an hour count as "7h" or "7h 30m"."""
    whole = math.floor(hours)
    # Round half up; Python's round() would send 0.5 to the even neighbour.
    minutes = math.floor((hours - whole) * 60 + 0.5)
    if minutes == 60:
        whole += 1
        minutes = 0
    if minutes == 0:
        return f"{whole}h"
    return f"{whole}h {minutes}m"


def _clock_pair(log):
    if isinstance(log, dict):
        return log["start_time"], log["end_time"]
    return log.start_time, log.end_time


def total_hours(logs):
    """Sum ``compute_hours`` over work logs (models or plain dicts)."""
    return sum(compute_hours(*_clock_pair(log)) for log in logs)
