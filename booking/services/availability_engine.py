"""
availability_engine.py
----------------------
Computes bookable slots for a service on a day by walking each eligible staff
member's working window and checking candidates against:
1) existing active bookings (interval overlap, padded by the service buffers),
2) live holds (exact start time match), and
3) the current time when the day is today.

Also answers the coarse month-view question "does anyone work this day".

Every query is scoped by tenant. Nothing is cached between calls; expired
holds are filtered out at read time (expires_at > now).
"""

import logging
from datetime import timedelta

from django.utils import timezone

from ..models import Booking, BookingHold, Service, StaffService
from .exceptions import NotFoundError
from .slot_utils import (
    date_to_range,
    day_of_week,
    generate_slots_for_window,
    get_slot_interval_minutes,
    parse_day,
)
from staff.models import ScheduleException, StaffSchedule

logger = logging.getLogger(__name__)


def effective_duration(service, staff_link=None) -> int:
    """Per-staff override if set, otherwise the service's base duration."""
    if staff_link is not None and staff_link.custom_duration_minutes:
        return staff_link.custom_duration_minutes
    return service.duration_minutes


def intervals_overlap(start_a, end_a, start_b, end_b) -> bool:
    """Half-open intervals; touching ends do not overlap."""
    return start_a < end_b and end_a > start_b


class AvailabilityEngine:
    def _get_service(self, tenant, service_id):
        service = Service.objects.filter(tenant=tenant, pk=service_id).first()
        if service is None:
            raise NotFoundError(f"Service {service_id} not found.")
        return service

    def _within_advance_window(self, service, day, now) -> bool:
        local_now = timezone.localtime(now)
        earliest = (local_now + timedelta(hours=service.min_advance_hours)).date()
        latest = (local_now + timedelta(days=service.max_advance_days)).date()
        return earliest <= day <= latest

    def resolve_roster(self, tenant, service, staff_id=None):
        """
        Active staff↔service links for the service, ordered by staff id.
        Returns a list of (staff, effective_duration_minutes).
        """
        links = (
            StaffService.objects.filter(tenant=tenant, service=service, active=True)
            .select_related("staff")
            .order_by("staff_id")
        )
        if staff_id is not None:
            links = links.filter(staff_id=staff_id)
        return [(link.staff, effective_duration(service, link)) for link in links]

    def working_windows(self, tenant, staff_ids, day):
        """
        Map staff_id -> (start_time, end_time) for the given day.
        A dated exception overrides the weekly entry: day off removes the
        staff, custom hours replace the window.
        """
        windows = {}
        weekly = StaffSchedule.objects.filter(
            tenant=tenant,
            staff_id__in=staff_ids,
            day_of_week=day_of_week(day),
            is_active=True,
        ).order_by("id")
        for entry in weekly:
            # one entry per staff and weekday is the convention; first wins
            windows.setdefault(entry.staff_id, (entry.start_time, entry.end_time))

        exceptions = ScheduleException.objects.filter(
            tenant=tenant, staff_id__in=staff_ids, date=day
        )
        for exc in exceptions:
            if exc.is_available and exc.start_time and exc.end_time:
                windows[exc.staff_id] = (exc.start_time, exc.end_time)
            else:
                windows.pop(exc.staff_id, None)
        return windows

    def _active_bookings(self, tenant, staff_ids, day):
        day_start, day_end = date_to_range(day)
        # bookings from the evening before can run past midnight
        return list(
            Booking.objects.filter(
                tenant=tenant,
                staff_id__in=staff_ids,
                status__in=Booking.ACTIVE_STATUSES,
                scheduled_at__gte=day_start - timedelta(days=1),
                scheduled_at__lt=day_end,
            )
        )

    def _live_holds(self, tenant, staff_ids, day, now):
        return list(
            BookingHold.objects.filter(
                tenant=tenant,
                staff_id__in=staff_ids,
                slot_date=day,
                expires_at__gt=now,
            )
        )

    def get_available_slots(self, tenant, date, service_id, staff_id=None):
        """
        Slots for `service_id` on `date`, one entry per (staff, start time):
            {"date": "YYYY-MM-DD", "time": "HH:MM", "available": bool,
             "staff_id": int, "staff_name": str}
        Taken slots are returned with available=False so the UI can show them.

        Raises:
            NotFoundError: service does not exist for the tenant.
            ValidationError: malformed date.
        """
        day = parse_day(date)
        service = self._get_service(tenant, service_id)
        now = timezone.now()

        if not self._within_advance_window(service, day, now):
            logger.debug("Date %s outside booking window for service %s", day, service.pk)
            return []

        roster = self.resolve_roster(tenant, service, staff_id)
        if not roster:
            return []

        staff_ids = [staff.id for staff, _duration in roster]
        windows = self.working_windows(tenant, staff_ids, day)
        if not windows:
            return []

        bookings = self._active_bookings(tenant, staff_ids, day)
        held = {(h.staff_id, h.slot_time.strftime("%H:%M")) for h in self._live_holds(tenant, staff_ids, day, now)}
        is_today = day == timezone.localtime(now).date()
        interval = get_slot_interval_minutes()

        before = timedelta(minutes=service.buffer_time_before)
        after = timedelta(minutes=service.buffer_time_after)

        slots = []
        for staff, duration in roster:
            window = windows.get(staff.id)
            if window is None:
                continue  # closed that day
            open_time, close_time = window

            starts = generate_slots_for_window(
                day,
                open_time,
                close_time,
                occupied_minutes=duration + service.buffer_time_after,
                interval_minutes=interval,
            )
            staff_bookings = [b for b in bookings if b.staff_id == staff.id]

            for start in starts:
                slot_time = start.strftime("%H:%M")
                padded_start = start - before
                padded_end = start + timedelta(minutes=duration) + after

                available = True
                for b in staff_bookings:
                    b_end = b.scheduled_at + timedelta(minutes=b.duration_minutes)
                    if intervals_overlap(padded_start, padded_end, b.scheduled_at, b_end):
                        available = False
                        break
                if available and (staff.id, slot_time) in held:
                    available = False
                if available and is_today and start <= now:
                    available = False

                slots.append({
                    "date": day.isoformat(),
                    "time": slot_time,
                    "available": available,
                    "staff_id": staff.id,
                    "staff_name": staff.full_name,
                })

        slots.sort(key=lambda s: s["time"])
        return slots

    def is_slot_available_for_staff(
        self, tenant, staff, start, duration_minutes, buffer_before=0, buffer_after=0
    ) -> bool:
        """
        Point check used when converting a hold: any active booking of the
        staff overlapping [start - buffer_before, start + duration + buffer_after)
        makes the slot unavailable, the same interval the day view checks.
        """
        padded_start = start - timedelta(minutes=buffer_before)
        padded_end = start + timedelta(minutes=duration_minutes + buffer_after)
        day_start, _day_end = date_to_range(timezone.localtime(start).date())
        qs = Booking.objects.filter(
            tenant=tenant,
            staff=staff,
            status__in=Booking.ACTIVE_STATUSES,
            scheduled_at__gte=day_start - timedelta(days=1),
            scheduled_at__lt=padded_end,
        )
        for b in qs:
            b_end = b.scheduled_at + timedelta(minutes=b.duration_minutes)
            if intervals_overlap(padded_start, padded_end, b.scheduled_at, b_end):
                return False
        return True

    def get_staff_availability(self, tenant, start_date, end_date, staff_id=None):
        """
        {"YYYY-MM-DD": bool} for each day in [start_date, end_date]: True when
        any staff (or the given one) has an active weekly entry for that
        weekday and no day-off exception on that date. Bookings and holds are
        not considered; the day view is the ground truth.
        """
        start = parse_day(start_date)
        end = parse_day(end_date)
        if end < start:
            return {}

        schedules = StaffSchedule.objects.filter(tenant=tenant, is_active=True)
        exceptions = ScheduleException.objects.filter(tenant=tenant, date__gte=start, date__lte=end)
        if staff_id is not None:
            schedules = schedules.filter(staff_id=staff_id)
            exceptions = exceptions.filter(staff_id=staff_id)

        working_by_weekday = {}
        for entry in schedules.values("staff_id", "day_of_week"):
            working_by_weekday.setdefault(entry["day_of_week"], set()).add(entry["staff_id"])

        overrides = {}
        for exc in exceptions:
            overrides.setdefault(exc.date, {})[exc.staff_id] = exc.is_available and bool(exc.start_time and exc.end_time)

        days = {}
        current = start
        while current <= end:
            working = set(working_by_weekday.get(day_of_week(current), set()))
            for sid, available in overrides.get(current, {}).items():
                if available:
                    working.add(sid)
                else:
                    working.discard(sid)
            days[current.isoformat()] = bool(working)
            current += timedelta(days=1)

        return days
