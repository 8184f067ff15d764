from datetime import time, timedelta

from django.core.exceptions import ValidationError

from booking.models import BookingHold, Tenant
from booking.services.exceptions import NotFoundError, SlotUnavailableError
from booking.services.hold_manager import HoldManager
from configmgr.models import SystemSetting

from .base import EngineTestCase


class HoldManagerTests(EngineTestCase):
    def setUp(self):
        super().setUp()
        self.holds = HoldManager()

    def place(self, session_id="session_a", at="10:00", **kwargs):
        return self.holds.hold_slot(
            self.tenant,
            session_id,
            self.stylist.id,
            self.service.id,
            kwargs.pop("date", self.monday),
            at,
            60,
            **kwargs,
        )

    def test_hold_expires_after_five_minutes(self):
        hold = self.place()

        self.assertIsNotNone(hold.pk)
        self.assertEqual(hold.expires_at, self.now + timedelta(minutes=5))
        self.assertEqual(hold.slot_time, time(10, 0))
        self.assertEqual(hold.slot_date, self.monday)
        self.assertIsNone(hold.client_id)

    def test_hold_length_can_be_overridden(self):
        SystemSetting.objects.create(key="HOLD_MINUTES", value="10")
        hold = self.place()
        self.assertEqual(hold.expires_at, self.now + timedelta(minutes=10))

    def test_new_hold_replaces_session_hold(self):
        """Same session, different slot: exactly one hold remains, on the new slot"""
        first = self.place(at="10:00")
        second = self.place(at="11:30")

        remaining = BookingHold.objects.filter(session_id="session_a")
        self.assertEqual(remaining.count(), 1)
        self.assertEqual(remaining.get().pk, second.pk)
        self.assertFalse(BookingHold.objects.filter(pk=first.pk).exists())

    def test_expired_session_hold_is_replaced_too(self):
        self.hold(self.stylist, self.monday, time(9, 0), session_id="session_a", expires_in=-10)
        self.place(at="10:00")

        self.assertEqual(BookingHold.objects.filter(session_id="session_a").count(), 1)

    def test_other_session_cannot_take_live_hold(self):
        self.place(session_id="session_a", at="10:00")

        with self.assertRaises(SlotUnavailableError):
            self.place(session_id="session_b", at="10:00")

    def test_other_session_can_take_expired_hold(self):
        self.hold(self.stylist, self.monday, time(10, 0), session_id="session_a", expires_in=-1)

        hold = self.place(session_id="session_b", at="10:00")

        self.assertEqual(hold.session_id, "session_b")

    def test_session_holds_one_slot_across_salons(self):
        """Moving to another salon drops the hold in the first one"""
        other = Tenant.objects.create(name="Salon Zuid", slug="salon-zuid")
        stylist = self.make_staff("Daan", tenant=other)
        service = self.make_service(tenant=other)
        self.place(at="10:00")

        hold = self.holds.hold_slot(other, "session_a", stylist.id, service.id, self.monday, "10:00", 30)

        remaining = BookingHold.objects.filter(session_id="session_a")
        self.assertEqual(remaining.count(), 1)
        self.assertEqual(remaining.get().pk, hold.pk)
        self.assertEqual(hold.tenant_id, other.id)

    def test_hold_with_known_client(self):
        client = self.make_client()
        hold = self.place(client_id=client.id)
        self.assertEqual(hold.client_id, client.id)

    def test_unknown_or_foreign_staff_is_rejected(self):
        other = Tenant.objects.create(name="Salon Zuid", slug="salon-zuid")
        foreign_staff = self.make_staff("Daan", tenant=other)

        with self.assertRaises(NotFoundError):
            self.holds.hold_slot(self.tenant, "s", foreign_staff.id, self.service.id, self.monday, "10:00", 60)

    def test_malformed_time_is_rejected(self):
        with self.assertRaises(ValidationError):
            self.place(at="10h00")

    def test_release_deletes_hold(self):
        hold = self.place()
        self.holds.release_slot(self.tenant, hold.pk)
        self.assertFalse(BookingHold.objects.filter(pk=hold.pk).exists())

    def test_release_unknown_hold_is_not_an_error(self):
        self.holds.release_slot(self.tenant, 424242)

    def test_release_is_scoped_to_tenant(self):
        hold = self.place()
        other = Tenant.objects.create(name="Salon Zuid", slug="salon-zuid")

        self.holds.release_slot(other, hold.pk)

        self.assertTrue(BookingHold.objects.filter(pk=hold.pk).exists())

    def test_cleanup_removes_only_expired(self):
        self.hold(self.stylist, self.monday, time(9, 0), session_id="old", expires_in=-1)
        live = self.hold(self.stylist, self.monday, time(9, 30), session_id="new")

        deleted = self.holds.cleanup_expired_holds()

        self.assertEqual(deleted, 1)
        self.assertEqual(list(BookingHold.objects.values_list("pk", flat=True)), [live.pk])
