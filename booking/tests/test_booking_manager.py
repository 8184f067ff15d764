from datetime import time, timedelta

from booking.models import Booking, BookingHold, Client
from booking.services.availability_engine import AvailabilityEngine
from booking.services.booking_manager import BookingManager
from booking.services.exceptions import ExpiredError, NotFoundError, SlotUnavailableError

from .base import EngineTestCase, local

CLIENT_DATA = {
    "first_name": "Eva",
    "last_name": "Jansen",
    "email": "eva@example.com",
    "phone": "0612345678",
    "notes": "Graag koffie",
}


class ConfirmBookingTests(EngineTestCase):
    def setUp(self):
        super().setUp()
        self.manager = BookingManager()
        self.engine = AvailabilityEngine()

    def slot(self, label):
        slots = self.engine.get_available_slots(self.tenant, self.monday, self.service.id)
        return next(s for s in slots if s["time"] == label)

    def test_confirm_creates_confirmed_booking_and_consumes_hold(self):
        hold = self.hold(self.stylist, self.monday, time(10, 0))

        booking_id = self.manager.confirm_booking(self.tenant, hold.pk, CLIENT_DATA)

        booking = Booking.objects.get(pk=booking_id)
        self.assertEqual(booking.status, "confirmed")
        self.assertEqual(booking.scheduled_at, local(self.monday, 10, 0))
        self.assertEqual(booking.duration_minutes, 60)
        self.assertEqual(booking.staff_id, self.stylist.id)
        self.assertEqual(booking.service_id, self.service.id)
        self.assertEqual(booking.notes, "Graag koffie")
        self.assertEqual(booking.client.email, "eva@example.com")
        self.assertFalse(BookingHold.objects.filter(pk=hold.pk).exists())

    def test_slot_stays_unavailable_after_confirmation(self):
        """The booking takes over from the hold; the slot never looks free"""
        hold = self.hold(self.stylist, self.monday, time(10, 0))
        self.assertFalse(self.slot("10:00")["available"])

        self.manager.confirm_booking(self.tenant, hold.pk, CLIENT_DATA)

        self.assertFalse(self.slot("10:00")["available"])
        self.assertFalse(self.slot("10:30")["available"])

    def test_expired_hold_cannot_confirm(self):
        hold = self.hold(self.stylist, self.monday, time(10, 0))
        self.set_now(self.now + timedelta(minutes=6))

        with self.assertRaises(ExpiredError):
            self.manager.confirm_booking(self.tenant, hold.pk, CLIENT_DATA)

        self.assertEqual(Booking.objects.count(), 0)
        self.assertTrue(BookingHold.objects.filter(pk=hold.pk).exists())

    def test_unknown_hold(self):
        with self.assertRaises(NotFoundError):
            self.manager.confirm_booking(self.tenant, 999999, CLIENT_DATA)

    def test_client_deduplicated_by_email(self):
        """Two anonymous holds, same email: one client row, refreshed details"""
        first = self.hold(self.stylist, self.monday, time(10, 0), session_id="s1")
        second = self.hold(self.stylist, self.monday, time(13, 0), session_id="s2")

        self.manager.confirm_booking(self.tenant, first.pk, CLIENT_DATA)
        self.manager.confirm_booking(
            self.tenant,
            second.pk,
            {**CLIENT_DATA, "email": "EVA@example.com", "last_name": "de Boer", "phone": "0687654321"},
        )

        clients = Client.objects.filter(tenant=self.tenant, email__iexact="eva@example.com")
        self.assertEqual(clients.count(), 1)
        client = clients.get()
        self.assertEqual(client.last_name, "de Boer")
        self.assertEqual(client.phone, "0687654321")
        self.assertEqual(Booking.objects.filter(client=client).count(), 2)

    def test_hold_client_is_used_as_is(self):
        known = self.make_client(email="known@example.com")
        hold = self.hold(self.stylist, self.monday, time(10, 0))
        hold.client = known
        hold.save()

        booking_id = self.manager.confirm_booking(self.tenant, hold.pk, CLIENT_DATA)

        self.assertEqual(Booking.objects.get(pk=booking_id).client_id, known.id)
        self.assertFalse(Client.objects.filter(email="eva@example.com").exists())

    def test_overlapping_booking_blocks_confirmation(self):
        self.book(self.stylist, local(self.monday, 9, 30), 60)
        hold = self.hold(self.stylist, self.monday, time(10, 0))
        bookings_before = Booking.objects.count()

        with self.assertRaises(SlotUnavailableError):
            self.manager.confirm_booking(self.tenant, hold.pk, CLIENT_DATA)

        self.assertEqual(Booking.objects.count(), bookings_before)
        self.assertTrue(BookingHold.objects.filter(pk=hold.pk).exists())
        self.assertFalse(Client.objects.filter(email="eva@example.com").exists())

    def test_buffer_overlap_blocks_confirmation(self):
        """10:00 + 60 min + 15 min buffer runs into an 11:00 booking"""
        self.book(self.stylist, local(self.monday, 11, 0), 60)
        hold = self.hold(self.stylist, self.monday, time(10, 0))
        self.assertFalse(self.slot("10:00")["available"])

        with self.assertRaises(SlotUnavailableError):
            self.manager.confirm_booking(self.tenant, hold.pk, CLIENT_DATA)

        self.assertTrue(BookingHold.objects.filter(pk=hold.pk).exists())

    def test_cancel_frees_the_slot(self):
        hold = self.hold(self.stylist, self.monday, time(10, 0))
        booking_id = self.manager.confirm_booking(self.tenant, hold.pk, CLIENT_DATA)

        self.manager.cancel_booking(Booking.objects.get(pk=booking_id))

        self.assertEqual(Booking.objects.get(pk=booking_id).status, "cancelled")
        self.assertTrue(self.slot("10:00")["available"])

    def test_cancel_twice_is_rejected(self):
        booking = self.book(self.stylist, local(self.monday, 10, 0), 60, status="cancelled")
        with self.assertRaises(ValueError):
            self.manager.cancel_booking(booking)
