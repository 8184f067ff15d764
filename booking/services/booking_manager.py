"""
booking_manager.py
------------------
Converts holds into bookings and cancels bookings.

Notes:
- confirm_booking runs in one transaction: the hold is locked, the client is
  found or created, the booking is inserted and the hold is deleted together.
  A failure anywhere leaves neither a partial booking nor a consumed hold.
- Uses AvailabilityEngine.is_slot_available_for_staff for the overlap check;
  the unique constraint on active bookings backs it up at the DB level.
"""

import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from ..models import Booking, BookingHold, Client
from .availability_engine import AvailabilityEngine
from .exceptions import ExpiredError, NotFoundError, SlotUnavailableError
from .slot_utils import combine

logger = logging.getLogger(__name__)


class BookingManager:
    def __init__(self):
        self.availability = AvailabilityEngine()

    def _resolve_client(self, hold, client_data) -> Client:
        """
        Client for the booking:
        - the hold's client when identity was already known,
        - else an existing client with the same email in the tenant (name and
          phone refreshed in place),
        - else a new client.
        """
        if hold.client_id:
            return hold.client

        email = (client_data.get("email") or "").strip()
        first_name = (client_data.get("first_name") or "").strip()
        last_name = (client_data.get("last_name") or "").strip()
        phone = (client_data.get("phone") or "").strip()

        existing = (
            Client.objects.filter(tenant_id=hold.tenant_id, email__iexact=email)
            .order_by("id")
            .first()
        )
        if existing:
            existing.first_name = first_name
            existing.last_name = last_name
            existing.phone = phone
            existing.save(update_fields=["first_name", "last_name", "phone"])
            return existing

        return Client.objects.create(
            tenant_id=hold.tenant_id,
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=phone,
        )

    def confirm_booking(self, tenant, hold_id, client_data) -> int:
        """
        Turn a live hold into a confirmed booking.

        Args:
            tenant: Tenant instance
            hold_id: BookingHold PK
            client_data: {first_name, last_name, email, phone, notes?}

        Returns:
            The new booking's id.

        Raises:
            NotFoundError: no such hold in the tenant.
            ExpiredError: the hold expired; the client must pick a slot again.
            SlotUnavailableError: an active booking already covers the slot.
        """
        try:
            with transaction.atomic():
                hold = (
                    BookingHold.objects.select_for_update(of=("self",))
                    .select_related("client", "service")
                    .filter(tenant=tenant, pk=hold_id)
                    .first()
                )
                if hold is None:
                    raise NotFoundError(f"Hold {hold_id} not found.")

                if hold.expires_at < timezone.now():
                    raise ExpiredError("Hold has expired.")

                scheduled_at = combine(hold.slot_date, hold.slot_time)
                if not self.availability.is_slot_available_for_staff(
                    tenant,
                    hold.staff,
                    scheduled_at,
                    hold.duration_minutes,
                    buffer_before=hold.service.buffer_time_before,
                    buffer_after=hold.service.buffer_time_after,
                ):
                    raise SlotUnavailableError(
                        "Selected time overlaps with an existing booking for this staff."
                    )

                client = self._resolve_client(hold, client_data)

                booking = Booking.objects.create(
                    tenant=tenant,
                    client=client,
                    service_id=hold.service_id,
                    staff_id=hold.staff_id,
                    scheduled_at=scheduled_at,
                    duration_minutes=hold.duration_minutes,
                    status="confirmed",
                    notes=client_data.get("notes") or "",
                )
                hold.delete()
        except IntegrityError:
            raise SlotUnavailableError("This time slot was just booked by someone else.")

        logger.info("Hold %s confirmed as booking %s", hold_id, booking.pk)
        return booking.pk

    @transaction.atomic
    def cancel_booking(self, booking) -> bool:
        """
        Cancel by status change (bookings are never deleted).
        Cancelled bookings stop occupying their slot.
        """
        if booking.status == "cancelled":
            raise ValueError("This booking is already cancelled.")
        booking.status = "cancelled"
        booking.save(update_fields=["status"])
        logger.info("Booking %s cancelled", booking.pk)
        return True
