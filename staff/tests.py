from datetime import time

from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from rest_framework.test import APIClient

from booking.services.exceptions import NotFoundError
from booking.services.slot_utils import (
    format_time,
    is_valid_time_range,
    time_to_minutes,
)
from booking.tests.base import EngineTestCase
from staff.models import ScheduleException, StaffSchedule
from staff.schedules import convert_to_week_schedule, get_staff_schedule, update_staff_schedule


class TimeHelperTests(EngineTestCase):
    def test_conversions(self):
        self.assertEqual(format_time("09:30:00"), "09:30")
        self.assertEqual(format_time(time(9, 30)), "09:30")
        self.assertEqual(time_to_minutes("13:45"), 825)
        self.assertTrue(is_valid_time_range("09:00", "17:00"))
        self.assertFalse(is_valid_time_range("17:00", "17:00"))


class WeekScheduleTests(EngineTestCase):
    """
    Editing a staff member's week replaces their weekly rows.
    """

    def test_convert_defaults_and_monday(self):
        week = convert_to_week_schedule(get_staff_schedule(self.tenant, self.stylist.id))

        self.assertEqual(list(week)[0], "monday")
        self.assertEqual(list(week)[-1], "sunday")
        self.assertEqual(week["monday"], {"enabled": True, "start": "09:00", "end": "17:00"})
        self.assertEqual(week["tuesday"], {"enabled": False, "start": "09:00", "end": "17:00"})

    def test_update_replaces_rows(self):
        update_staff_schedule(self.tenant, self.stylist.id, {
            "tuesday": {"enabled": True, "start": "10:00", "end": "18:00"},
            "saturday": {"enabled": True, "start": "09:00", "end": "13:00"},
            "sunday": {"enabled": False, "start": "09:00", "end": "17:00"},
        })

        rows = StaffSchedule.objects.filter(staff=self.stylist).order_by("day_of_week")
        self.assertEqual([r.day_of_week for r in rows], [2, 6])
        self.assertEqual(rows[0].start_time, time(10, 0))
        self.assertEqual(rows[1].end_time, time(13, 0))

    def test_invalid_range_keeps_old_rows(self):
        with self.assertRaises(ValidationError):
            update_staff_schedule(self.tenant, self.stylist.id, {
                "monday": {"enabled": True, "start": "17:00", "end": "09:00"},
            })

        self.assertEqual(StaffSchedule.objects.filter(staff=self.stylist).count(), 1)

    def test_unknown_staff(self):
        with self.assertRaises(NotFoundError):
            update_staff_schedule(self.tenant, 999999, {})

    def test_model_clean_rejects_reversed_times(self):
        entry = StaffSchedule(
            tenant=self.tenant, staff=self.stylist, day_of_week=2, start_time=time(12, 0), end_time=time(9, 0)
        )
        with self.assertRaises(ValidationError):
            entry.full_clean()


class StaffScheduleApiTests(EngineTestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient(HTTP_X_TENANT=self.tenant.slug)
        self.admin = User.objects.create_user(username="owner", password="pass123", is_staff=True)

    def test_requires_staff_user(self):
        resp = self.client.get("/api/staff/schedules/week/", {"staff": self.stylist.id})
        self.assertEqual(resp.status_code, 403)

    def test_get_and_put_week(self):
        self.client.force_authenticate(self.admin)
        url = f"/api/staff/schedules/week/?staff={self.stylist.id}"

        resp = self.client.get(url)
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["monday"]["enabled"])

        resp = self.client.put(
            url,
            data={
                "monday": {"enabled": False, "start": "09:00", "end": "17:00"},
                "friday": {"enabled": True, "start": "08:30", "end": "16:00"},
            },
            format="json",
        )
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.json()["monday"]["enabled"])
        self.assertEqual(resp.json()["friday"], {"enabled": True, "start": "08:30", "end": "16:00"})

    def test_put_invalid_week(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.put(
            f"/api/staff/schedules/week/?staff={self.stylist.id}",
            data={"monday": {"enabled": True, "start": "18:00", "end": "09:00"}},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)

    def test_exception_crud(self):
        self.client.force_authenticate(self.admin)

        resp = self.client.post(
            "/api/staff/exceptions/",
            data={"staff": self.stylist.id, "date": self.monday.isoformat(), "is_available": False, "reason": "ziek"},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        exc = ScheduleException.objects.get(pk=resp.json()["id"])
        self.assertEqual(exc.tenant_id, self.tenant.id)

        listed = self.client.get("/api/staff/exceptions/", {"staff": self.stylist.id})
        self.assertEqual(len(listed.json()), 1)

        resp = self.client.delete(f"/api/staff/exceptions/{exc.id}/")
        self.assertEqual(resp.status_code, 204)

    def test_working_exception_needs_valid_times(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.post(
            "/api/staff/exceptions/",
            data={
                "staff": self.stylist.id,
                "date": self.monday.isoformat(),
                "is_available": True,
                "start_time": "15:00",
                "end_time": "10:00",
            },
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
