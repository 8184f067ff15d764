"""
schedules.py
------------
Weekly working-hour management for staff members.

The admin UI edits a whole week at once, as:
    {"monday": {"enabled": True, "start": "09:00", "end": "17:00"}, ...}
update_staff_schedule stores that as one StaffSchedule row per enabled day,
replacing whatever the staff member had before.
"""

from django.core.exceptions import ValidationError
from django.db import transaction

from booking.models import Staff
from booking.services.exceptions import NotFoundError
from booking.services.slot_utils import format_time, is_valid_time_range, parse_slot_time

from .models import StaffSchedule

DAY_NAMES = ["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]
DEFAULT_START = "09:00"
DEFAULT_END = "17:00"


def _get_staff(tenant, staff_id):
    staff = Staff.objects.filter(tenant=tenant, pk=staff_id).first()
    if staff is None:
        raise NotFoundError(f"Staff {staff_id} not found.")
    return staff


def get_staff_schedule(tenant, staff_id):
    """Active weekly entries for a staff member, Sunday first."""
    return list(
        StaffSchedule.objects.filter(tenant=tenant, staff_id=staff_id, is_active=True)
        .order_by("day_of_week")
    )


def convert_to_week_schedule(entries):
    """StaffSchedule rows -> week dict keyed by day name (Monday first)."""
    week = {
        name: {"enabled": False, "start": DEFAULT_START, "end": DEFAULT_END}
        for name in DAY_NAMES[1:] + DAY_NAMES[:1]
    }
    for entry in entries:
        week[DAY_NAMES[entry.day_of_week]] = {
            "enabled": entry.is_active,
            "start": format_time(entry.start_time),
            "end": format_time(entry.end_time),
        }
    return week


@transaction.atomic
def update_staff_schedule(tenant, staff_id, week_schedule):
    """
    Replace all weekly entries of a staff member with the enabled days of
    `week_schedule`. Unknown day names are ignored.

    Raises:
        NotFoundError: staff not in the tenant.
        ValidationError: an enabled day ends at or before it starts.
    """
    staff = _get_staff(tenant, staff_id)

    rows = []
    for day_name, day in week_schedule.items():
        if day_name not in DAY_NAMES or not day.get("enabled"):
            continue
        start = day.get("start") or ""
        end = day.get("end") or ""
        start_time = parse_slot_time(start)
        end_time = parse_slot_time(end)
        if not is_valid_time_range(start_time, end_time):
            raise ValidationError(f"Invalid times for {day_name}: end time must be after start time.")
        rows.append(StaffSchedule(
            tenant=tenant,
            staff=staff,
            day_of_week=DAY_NAMES.index(day_name),
            start_time=start_time,
            end_time=end_time,
            is_active=True,
        ))

    StaffSchedule.objects.filter(tenant=tenant, staff=staff).delete()
    StaffSchedule.objects.bulk_create(rows)
    return rows
