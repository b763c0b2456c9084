"""Day and month query windows for date-scoped task lookups."""
from datetime import date, datetime, time, timedelta

from tasktracker.errors import ValidationError

_END_OF_DAY = time(23, 59, 59, 999000)


def _as_datetime(value):
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def day_bounds(value):
    """Return ``(start, end)`` of the calendar day holding ``value``.

    Both ends are inclusive. End is 23:59:59.999, the finest resolution
    MongoDB stores. Aware datetimes keep their tzinfo.
    """
    moment = _as_datetime(value)
    start = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    end = moment.replace(
        hour=_END_OF_DAY.hour,
        minute=_END_OF_DAY.minute,
        second=_END_OF_DAY.second,
        microsecond=_END_OF_DAY.microsecond,
    )
    return start, end


def month_bounds(value):
    """Return ``(start, end)`` covering the whole month holding ``value``."""
    first = _as_datetime(value).replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    # The last day is the day before the 1st of the following month.
    if first.month == 12:
        next_first = first.replace(year=first.year + 1, month=1)
    else:
        next_first = first.replace(month=first.month + 1)
    last_day = next_first - timedelta(days=1)
    _, end = day_bounds(last_day)
    return first, end


def date_key(value):
    """Canonical "YYYY-MM-DD" key of the calendar day holding ``value``."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_date_key(value, field="date"):
    if not value:
        raise ValidationError(f"{field} is required")
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"Invalid {field} format, expected YYYY-MM-DD") from None


def parse_month(value):
    """Parse "YYYY-MM" into the first day of that month."""
    try:
        year, month = str(value).split("-")
        return date(int(year), int(month), 1)
    except ValueError:
        raise ValidationError("Invalid month format, expected YYYY-MM") from None
