from django.core.exceptions import ValidationError
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import BasePermission
from rest_framework.response import Response

from booking.services.exceptions import NotFoundError
from booking.services.slot_utils import parse_day
from booking.tenancy import get_request_tenant

from .models import ScheduleException, StaffSchedule
from .schedules import convert_to_week_schedule, get_staff_schedule, update_staff_schedule
from .serializers import DayScheduleSerializer, ScheduleExceptionSerializer, StaffScheduleSerializer


class IsStaffOnly(BasePermission):
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_staff)


def _query_date(request, name):
    try:
        return parse_day(request.query_params.get(name) or "")
    except ValidationError:
        return None


class StaffScheduleViewSet(viewsets.ReadOnlyModelViewSet):
    """
    GET /api/staff/schedules/                          all weekly entries
    GET /api/staff/schedules/week/?staff=ID            week dict for the editor
    PUT /api/staff/schedules/week/?staff=ID            replace the week
    """
    serializer_class = StaffScheduleSerializer
    permission_classes = [IsStaffOnly]

    def get_queryset(self):
        tenant = get_request_tenant(self.request)
        return StaffSchedule.objects.filter(tenant=tenant).order_by("staff_id", "day_of_week")

    @action(detail=False, methods=["get", "put"])
    def week(self, request):
        tenant = get_request_tenant(request)
        try:
            staff_id = int(request.query_params.get("staff") or "")
        except ValueError:
            return Response({"detail": "Missing or invalid 'staff'."}, status=status.HTTP_400_BAD_REQUEST)

        if request.method == "GET":
            return Response(convert_to_week_schedule(get_staff_schedule(tenant, staff_id)))

        days = {}
        for name, day in (request.data or {}).items():
            s = DayScheduleSerializer(data=day)
            s.is_valid(raise_exception=True)
            days[name] = s.validated_data

        try:
            update_staff_schedule(tenant, staff_id, days)
        except NotFoundError as e:
            return Response({"detail": str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ValidationError as e:
            return Response({"detail": " ".join(e.messages)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(convert_to_week_schedule(get_staff_schedule(tenant, staff_id)))


class ScheduleExceptionViewSet(viewsets.ModelViewSet):
    serializer_class = ScheduleExceptionSerializer
    permission_classes = [IsStaffOnly]

    def get_queryset(self):
        tenant = get_request_tenant(self.request)
        qs = ScheduleException.objects.filter(tenant=tenant).order_by("staff_id", "date")
        staff_id = self.request.query_params.get("staff")
        if staff_id and staff_id.isdigit():
            qs = qs.filter(staff_id=int(staff_id))
        start = _query_date(self.request, "start")
        end = _query_date(self.request, "end")
        if start:
            qs = qs.filter(date__gte=start)
        if end:
            qs = qs.filter(date__lte=end)
        return qs

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["tenant"] = get_request_tenant(self.request)
        return context

    def perform_create(self, serializer):
        serializer.save(tenant=get_request_tenant(self.request))
