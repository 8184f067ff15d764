"""
hold_manager.py
---------------
Short-lived, advisory reservations on a (staff, date, time) slot.

Rules:
- A booking session owns at most one hold: placing a new hold first deletes
  every hold of that session, in any salon (replace-on-new-selection, not a
  queue).
- A hold stops counting once expires_at <= now. Nothing has to delete it for
  that to happen; cleanup_expired_holds only keeps the table small.
- No row locks are taken. Two sessions racing for the same slot are narrowed,
  not serialized, by the check against other sessions' live holds.
"""

import logging
from datetime import timedelta

from django.db import transaction
from django.utils import timezone

from ..models import BookingHold, Client, Service, Staff
from .exceptions import NotFoundError, SlotUnavailableError
from .slot_utils import get_hold_minutes, parse_day, parse_slot_time

logger = logging.getLogger(__name__)


class HoldManager:
    def _resolve(self, model, tenant, pk, label):
        obj = model.objects.filter(tenant=tenant, pk=pk).first()
        if obj is None:
            raise NotFoundError(f"{label} {pk} not found.")
        return obj

    @transaction.atomic
    def hold_slot(
        self,
        tenant,
        session_id: str,
        staff_id,
        service_id,
        date,
        time,
        duration_minutes: int,
        client_id=None,
    ) -> BookingHold:
        """
        Replace the session's hold with a new one on the given slot.

        Args:
            tenant: Tenant instance
            session_id: opaque booking-session key
            staff_id / service_id / client_id: PKs inside the tenant
            date: date or 'YYYY-MM-DD'
            time: time or 'HH:MM'
            duration_minutes: effective duration of the appointment

        Raises:
            NotFoundError: staff, service or client not in the tenant.
            SlotUnavailableError: another session holds the same slot.
            ValidationError: malformed date/time.
        """
        slot_date = parse_day(date)
        slot_time = parse_slot_time(time)
        staff = self._resolve(Staff, tenant, staff_id, "Staff")
        service = self._resolve(Service, tenant, service_id, "Service")
        client = self._resolve(Client, tenant, client_id, "Client") if client_id is not None else None

        released, _ = BookingHold.objects.filter(session_id=session_id).delete()
        if released:
            logger.debug("Released %s previous hold(s) for session %s", released, session_id)

        now = timezone.now()
        taken = BookingHold.objects.filter(
            tenant=tenant,
            staff=staff,
            slot_date=slot_date,
            slot_time=slot_time,
            expires_at__gt=now,
        ).exclude(session_id=session_id)
        if taken.exists():
            raise SlotUnavailableError("This time slot is currently held by another client.")

        hold = BookingHold.objects.create(
            tenant=tenant,
            client=client,
            session_id=session_id,
            staff=staff,
            service=service,
            slot_date=slot_date,
            slot_time=slot_time,
            duration_minutes=duration_minutes,
            expires_at=now + timedelta(minutes=get_hold_minutes()),
        )
        logger.info(
            "Hold %s placed: staff=%s %s %s until %s",
            hold.pk, staff.pk, slot_date, slot_time.strftime("%H:%M"), hold.expires_at,
        )
        return hold

    def release_slot(self, tenant, hold_id) -> None:
        """Delete a hold by id; unknown ids are ignored."""
        deleted, _ = BookingHold.objects.filter(tenant=tenant, pk=hold_id).delete()
        if deleted:
            logger.debug("Hold %s released", hold_id)

    def cleanup_expired_holds(self, now=None) -> int:
        """
        Storage hygiene only: delete holds whose expires_at has passed.
        Availability never depends on this having run.
        """
        now = now or timezone.now()
        deleted, _ = BookingHold.objects.filter(expires_at__lte=now).delete()
        logger.info("Cleaned up %s expired hold(s)", deleted)
        return deleted
