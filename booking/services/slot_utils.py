"""
slot_utils.py
-------------
Helpers to parse date/time inputs, build timezone-aware datetimes for a day,
read the engine's tunables and generate candidate slot starts inside a
working window.
"""

from datetime import date, datetime, time, timedelta

from django.conf import settings
from django.core.exceptions import ValidationError
from django.utils import timezone
from django.utils.dateparse import parse_date

DEFAULT_SLOT_INTERVAL_MINUTES = 30
DEFAULT_HOLD_MINUTES = 5


def _parse_hhmm(value: str) -> time:
    h, m = value.split(":")[:2]
    return time(int(h), int(m))


def _setting_minutes(key: str, settings_name: str, default: int) -> int:
    """
    Resolve an integer setting:
    SystemSetting row (runtime override) > Django settings > default.
    """
    from configmgr.models import SystemSetting

    row = SystemSetting.objects.filter(key=key).first()
    if row:
        try:
            value = int(row.value)
        except ValueError:
            value = 0
        if value > 0:
            return value
    return int(getattr(settings, settings_name, default))


def get_slot_interval_minutes() -> int:
    return _setting_minutes("SLOT_INTERVAL_MINUTES", "BOOKING_SLOT_INTERVAL_MINUTES", DEFAULT_SLOT_INTERVAL_MINUTES)


def get_hold_minutes() -> int:
    return _setting_minutes("HOLD_MINUTES", "BOOKING_HOLD_MINUTES", DEFAULT_HOLD_MINUTES)


# -------------------- input parsing --------------------
def parse_day(value) -> date:
    """
    Accept a date, a datetime, or 'YYYY-MM-DD' (a trailing time part is trimmed).
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    raw = (value or "").strip()
    if "T" in raw:
        raw = raw.split("T", 1)[0].strip()
    elif " " in raw:
        raw = raw.split(" ", 1)[0].strip()

    try:
        parsed = parse_date(raw)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError("Invalid date format. Use YYYY-MM-DD.")
    return parsed


def parse_slot_time(value) -> time:
    """
    Accept a time or 'HH:MM' / 'HH:MM:SS'.
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    raw = (value or "").strip()
    try:
        return _parse_hhmm(raw)
    except ValueError:
        raise ValidationError("Invalid time format. Use HH:MM.")


# -------------------- time helpers --------------------
def format_time(value) -> str:
    """'HH:MM:SS' or time -> 'HH:MM'."""
    if isinstance(value, time):
        return value.strftime("%H:%M")
    return value[:5]


def time_to_minutes(value) -> int:
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    hours, minutes = value.split(":")[:2]
    return int(hours) * 60 + int(minutes)


def is_valid_time_range(start, end) -> bool:
    return time_to_minutes(end) > time_to_minutes(start)


def day_of_week(day: date) -> int:
    """0=Sunday .. 6=Saturday (Python's weekday() is 0=Monday)."""
    return (day.weekday() + 1) % 7


# -------------------- day windows --------------------
def _make_aware(dt_naive: datetime):
    """
    Convert a naive datetime to an aware one using Django's current timezone.
    """
    if timezone.is_aware(dt_naive):
        return dt_naive
    return timezone.make_aware(dt_naive, timezone.get_current_timezone())


def combine(day: date, at: time) -> datetime:
    """Local wall-clock date + time as an aware datetime."""
    return _make_aware(datetime.combine(day, at))


def date_to_range(day: date):
    """
    Convert a date into a timezone-aware day window [start, end).
    """
    day_start = combine(day, time(0, 0))
    day_end = combine(day + timedelta(days=1), time(0, 0))
    return day_start, day_end


def generate_slots_for_window(
    day: date,
    open_time: time,
    close_time: time,
    occupied_minutes: int,
    interval_minutes: int | None = None,
):
    """
    Generate candidate slot starts stepping by a fixed interval from open_time.
    A start is kept only while start + occupied_minutes <= close_time.
    Returned datetimes are timezone-aware.
    """
    if interval_minutes is None:
        interval_minutes = get_slot_interval_minutes()

    step = timedelta(minutes=interval_minutes)
    occupied = timedelta(minutes=occupied_minutes)

    day_open = combine(day, open_time)
    day_close = combine(day, close_time)

    slots = []
    current = day_open
    while current + occupied <= day_close:
        slots.append(current)
        current += step

    return slots
