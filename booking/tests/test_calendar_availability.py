from datetime import time, timedelta

from booking.services.availability_engine import AvailabilityEngine
from staff.models import ScheduleException

from .base import EngineTestCase


class CalendarAvailabilityTests(EngineTestCase):
    """
    Month view: a day is open when anyone works that weekday.
    """

    def setUp(self):
        super().setUp()
        self.engine = AvailabilityEngine()
        self.week = [self.monday + timedelta(days=i) for i in range(7)]

    def test_only_working_weekdays_are_open(self):
        days = self.engine.get_staff_availability(self.tenant, self.week[0], self.week[-1])

        self.assertEqual(len(days), 7)
        self.assertTrue(days[self.monday.isoformat()])
        for day in self.week[1:]:
            self.assertFalse(days[day.isoformat()], day)

    def test_accepts_strings_and_is_inclusive(self):
        days = self.engine.get_staff_availability(
            self.tenant, self.monday.isoformat(), (self.monday + timedelta(days=1)).isoformat()
        )
        self.assertEqual(list(days), [self.monday.isoformat(), (self.monday + timedelta(days=1)).isoformat()])

    def test_staff_filter(self):
        other = self.make_staff("Daan")
        self.work(other, day_of_week=2, start=time(10, 0), end=time(18, 0))
        tuesday = self.monday + timedelta(days=1)

        everyone = self.engine.get_staff_availability(self.tenant, self.monday, tuesday)
        only_daan = self.engine.get_staff_availability(self.tenant, self.monday, tuesday, staff_id=other.id)

        self.assertEqual(everyone, {self.monday.isoformat(): True, tuesday.isoformat(): True})
        self.assertEqual(only_daan, {self.monday.isoformat(): False, tuesday.isoformat(): True})

    def test_inactive_schedule_is_ignored(self):
        self.work(self.stylist, day_of_week=4, start=time(9, 0), end=time(17, 0), is_active=False)
        thursday = self.monday + timedelta(days=3)

        days = self.engine.get_staff_availability(self.tenant, thursday, thursday)

        self.assertEqual(days, {thursday.isoformat(): False})

    def test_fully_booked_day_still_reported_open(self):
        """Coarse signal: bookings are not considered"""
        for hour in range(9, 17):
            self.hold(self.stylist, self.monday, time(hour, 0), session_id=f"s{hour}")

        days = self.engine.get_staff_availability(self.tenant, self.monday, self.monday)

        self.assertTrue(days[self.monday.isoformat()])

    def test_day_off_exception_closes_that_date_only(self):
        ScheduleException.objects.create(
            tenant=self.tenant, staff=self.stylist, date=self.monday, is_available=False
        )
        next_monday = self.monday + timedelta(days=7)

        days = self.engine.get_staff_availability(self.tenant, self.monday, next_monday)

        self.assertFalse(days[self.monday.isoformat()])
        self.assertTrue(days[next_monday.isoformat()])

    def test_other_tenant_schedules_do_not_leak(self):
        from booking.models import Tenant

        other = Tenant.objects.create(name="Salon Zuid", slug="salon-zuid")
        days = self.engine.get_staff_availability(other, self.monday, self.monday)

        self.assertEqual(days, {self.monday.isoformat(): False})

    def test_reversed_range_is_empty(self):
        self.assertEqual(
            self.engine.get_staff_availability(self.tenant, self.monday, self.monday - timedelta(days=1)),
            {},
        )
