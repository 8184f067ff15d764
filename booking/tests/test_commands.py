from datetime import date, time, timedelta
from io import StringIO

from django.core.exceptions import ValidationError
from django.core.management import call_command

from booking.models import BookingHold, Service, StaffService, Tenant
from booking.services.slot_utils import (
    day_of_week,
    generate_slots_for_window,
    get_slot_interval_minutes,
    parse_day,
    parse_slot_time,
)
from configmgr.models import SystemSetting
from staff.models import StaffSchedule

from .base import EngineTestCase


class ManagementCommandTests(EngineTestCase):
    def test_cleanup_expired_holds(self):
        self.hold(self.stylist, self.monday, time(9, 0), session_id="old", expires_in=-1)
        self.hold(self.stylist, self.monday, time(9, 30), session_id="new")
        out = StringIO()

        call_command("cleanup_expired_holds", stdout=out)

        self.assertIn("Deleted 1 expired hold(s)", out.getvalue())
        self.assertEqual(BookingHold.objects.count(), 1)

    def test_seed_is_idempotent(self):
        call_command("seed_services", "--tenant", "demo", stdout=StringIO())
        call_command("seed_services", "--tenant", "demo", stdout=StringIO())

        tenant = Tenant.objects.get(slug="demo")
        self.assertEqual(Service.objects.filter(tenant=tenant).count(), 5)
        self.assertEqual(StaffService.objects.filter(tenant=tenant).count(), 10)
        self.assertEqual(StaffSchedule.objects.filter(tenant=tenant).count(), 10)


class SlotUtilsTests(EngineTestCase):
    def test_parse_day(self):
        self.assertEqual(parse_day("2030-01-07"), date(2030, 1, 7))
        self.assertEqual(parse_day("2030-01-07T10:00:00"), date(2030, 1, 7))
        with self.assertRaises(ValidationError):
            parse_day("2030-13-01")
        with self.assertRaises(ValidationError):
            parse_day("")

    def test_parse_slot_time(self):
        self.assertEqual(parse_slot_time("09:30"), time(9, 30))
        self.assertEqual(parse_slot_time("09:30:00"), time(9, 30))
        with self.assertRaises(ValidationError):
            parse_slot_time("25:00")

    def test_day_of_week_starts_on_sunday(self):
        self.assertEqual(day_of_week(self.monday), 1)
        self.assertEqual(day_of_week(self.monday - timedelta(days=1)), 0)
        self.assertEqual(day_of_week(self.monday + timedelta(days=5)), 6)

    def test_interval_setting_override(self):
        self.assertEqual(get_slot_interval_minutes(), 30)
        SystemSetting.objects.create(key="SLOT_INTERVAL_MINUTES", value="20")
        self.assertEqual(get_slot_interval_minutes(), 20)

    def test_invalid_interval_setting_falls_back(self):
        SystemSetting.objects.create(key="SLOT_INTERVAL_MINUTES", value="half an hour")
        self.assertEqual(get_slot_interval_minutes(), 30)

    def test_uneven_window_keeps_last_fitting_start(self):
        starts = generate_slots_for_window(self.monday, time(9, 0), time(10, 45), occupied_minutes=30, interval_minutes=30)
        self.assertEqual([s.strftime("%H:%M") for s in starts], ["09:00", "09:30", "10:00"])
