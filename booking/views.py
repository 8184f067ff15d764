# booking/views.py
#
# Purpose:
# - Public booking-flow API, scoped to the salon named by the X-Tenant header:
#     * list services / staff to choose from
#     * month view: which days anyone works
#     * day view: slots with an available flag
#     * hold a slot, release it, confirm it into a booking
# - Staff-only booking listing and cancellation.
#
# Notes:
# - Holds belong to the server-side booking session (booking/tenancy.py);
#   a request can only release or confirm holds of its own session.
# - A hold is only accepted on a start the day view offers as available.
# - Engine errors map to HTTP: NotFound 404, Expired 410, SlotUnavailable 409,
#   ValidationError 400. Anything else propagates.
#
from django.core.exceptions import ValidationError
from django.db import transaction
from django.shortcuts import get_object_or_404

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import BasePermission
from rest_framework.response import Response

from .models import Booking, BookingHold, Service, Staff, StaffService
from .serializers import (
    BookingHoldSerializer,
    BookingSerializer,
    ClientDataSerializer,
    HoldRequestSerializer,
    ServiceSerializer,
    StaffSerializer,
)
from .services.availability_engine import AvailabilityEngine, effective_duration
from .services.booking_manager import BookingManager
from .services.exceptions import ExpiredError, NotFoundError, SlotUnavailableError
from .services.hold_manager import HoldManager
from .tenancy import get_booking_session_id, get_request_tenant


# -------------------- Permissions --------------------
class IsStaffOnly(BasePermission):
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_staff)


# -------------------- Helpers --------------------
def _detail(message, code):
    return Response({"detail": message}, status=code)


def _validation_message(exc: ValidationError) -> str:
    return " ".join(exc.messages)


def _optional_int(value):
    value = (value or "").strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError("Expected a numeric id.")


# -------------------- ViewSets --------------------
class ServiceViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Active services of the salon.
    GET /api/services/{id}/staff/ lists who can perform it.
    """
    serializer_class = ServiceSerializer

    def get_queryset(self):
        tenant = get_request_tenant(self.request)
        return Service.objects.filter(tenant=tenant, active=True).order_by("id")

    @action(detail=True, methods=["get"])
    def staff(self, request, pk=None):
        service = self.get_object()
        links = (
            StaffService.objects.filter(tenant=service.tenant, service=service, active=True)
            .select_related("staff")
            .order_by("staff_id")
        )
        data = []
        for link in links:
            row = StaffSerializer(link.staff).data
            row["duration_minutes"] = effective_duration(service, link)
            data.append(row)
        return Response(data)


class AvailabilityViewSet(viewsets.ViewSet):
    """
    GET /api/availability/slots/?service=ID&date=YYYY-MM-DD[&staff=ID]
    GET /api/availability/calendar/?start=YYYY-MM-DD&end=YYYY-MM-DD[&staff=ID]
    """
    engine = AvailabilityEngine()

    @action(detail=False, methods=["get"])
    def slots(self, request):
        tenant = get_request_tenant(request)
        service_id = (request.query_params.get("service") or "").strip()
        date_raw = (request.query_params.get("date") or "").strip()

        if not service_id or not date_raw:
            return _detail("Missing 'service' or 'date'.", status.HTTP_400_BAD_REQUEST)

        try:
            staff_id = _optional_int(request.query_params.get("staff"))
            slots = self.engine.get_available_slots(tenant, date_raw, _optional_int(service_id), staff_id)
        except ValidationError as e:
            return _detail(_validation_message(e), status.HTTP_400_BAD_REQUEST)
        except NotFoundError as e:
            return _detail(str(e), status.HTTP_404_NOT_FOUND)

        return Response({"slots": slots})

    @action(detail=False, methods=["get"])
    def calendar(self, request):
        tenant = get_request_tenant(request)
        start = (request.query_params.get("start") or "").strip()
        end = (request.query_params.get("end") or "").strip()

        if not start or not end:
            return _detail("Missing 'start' or 'end'.", status.HTTP_400_BAD_REQUEST)

        try:
            staff_id = _optional_int(request.query_params.get("staff"))
            days = self.engine.get_staff_availability(tenant, start, end, staff_id)
        except ValidationError as e:
            return _detail(_validation_message(e), status.HTTP_400_BAD_REQUEST)

        return Response({"days": days})


class BookingHoldViewSet(mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    POST   /api/holds/                 hold a slot (replaces this session's hold)
    GET    /api/holds/{id}/            current hold
    DELETE /api/holds/{id}/            release (204 even if already gone)
    POST   /api/holds/{id}/confirm/    turn the hold into a confirmed booking
    """
    serializer_class = BookingHoldSerializer
    engine = AvailabilityEngine()
    holds = HoldManager()
    manager = BookingManager()
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        tenant = get_request_tenant(self.request)
        return BookingHold.objects.filter(
            tenant=tenant,
            session_id=get_booking_session_id(self.request),
        )

    def _require_offered(self, tenant, data):
        """Only a start the day view lists as available for this staff can be held."""
        wanted = data["time"].strftime("%H:%M")
        slots = self.engine.get_available_slots(tenant, data["date"], data["service"], data["staff"])
        slot = next((s for s in slots if s["time"] == wanted and s["staff_id"] == data["staff"]), None)
        if slot is None:
            raise SlotUnavailableError("This time is not bookable for this staff member.")
        if not slot["available"]:
            raise SlotUnavailableError("This time slot is no longer available.")

    def create(self, request, *args, **kwargs):
        tenant = get_request_tenant(request)
        payload = HoldRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data

        # Duration is decided server-side from the staff's service link
        link = (
            StaffService.objects.filter(
                tenant=tenant, staff_id=data["staff"], service_id=data["service"], active=True
            )
            .select_related("service")
            .first()
        )
        if link is None:
            return _detail("This staff member does not offer this service.", status.HTTP_404_NOT_FOUND)

        session_id = get_booking_session_id(request)
        try:
            with transaction.atomic():
                # the session's current hold must not block picking the same slot again
                BookingHold.objects.filter(session_id=session_id).delete()
                self._require_offered(tenant, data)
                hold = self.holds.hold_slot(
                    tenant,
                    session_id,
                    staff_id=data["staff"],
                    service_id=data["service"],
                    date=data["date"],
                    time=data["time"],
                    duration_minutes=effective_duration(link.service, link),
                )
        except NotFoundError as e:
            return _detail(str(e), status.HTTP_404_NOT_FOUND)
        except SlotUnavailableError as e:
            return _detail(str(e), status.HTTP_409_CONFLICT)
        except ValidationError as e:
            return _detail(_validation_message(e), status.HTTP_400_BAD_REQUEST)

        out = self.get_serializer(hold)
        return Response(out.data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        # Only this session's holds; unknown ids are not an error
        hold = self.get_queryset().filter(pk=pk).first()
        if hold is not None:
            self.holds.release_slot(hold.tenant, hold.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def confirm(self, request, pk=None):
        tenant = get_request_tenant(request)
        payload = ClientDataSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        if not self.get_queryset().filter(pk=pk).exists():
            return _detail("Hold not found or expired.", status.HTTP_404_NOT_FOUND)

        try:
            booking_id = self.manager.confirm_booking(tenant, pk, payload.validated_data)
        except NotFoundError:
            return _detail("Hold not found or expired.", status.HTTP_404_NOT_FOUND)
        except ExpiredError as e:
            return _detail(str(e), status.HTTP_410_GONE)
        except SlotUnavailableError as e:
            return _detail(str(e), status.HTTP_409_CONFLICT)

        return Response({"booking_id": booking_id}, status=status.HTTP_201_CREATED)


class BookingViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Staff-only listing of the salon's bookings.
    POST /api/bookings/{id}/cancel/ frees the slot by status change.
    """
    serializer_class = BookingSerializer
    permission_classes = [IsStaffOnly]
    manager = BookingManager()

    def get_queryset(self):
        tenant = get_request_tenant(self.request)
        return Booking.objects.filter(tenant=tenant).order_by("-scheduled_at")

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        booking = get_object_or_404(self.get_queryset(), pk=pk)
        try:
            self.manager.cancel_booking(booking)
        except ValueError as e:
            return _detail(str(e), status.HTTP_400_BAD_REQUEST)
        return Response({"detail": "Booking cancelled."}, status=status.HTTP_200_OK)


class StaffViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = StaffSerializer

    def get_queryset(self):
        tenant = get_request_tenant(self.request)
        return Staff.objects.filter(tenant=tenant).order_by("id")
