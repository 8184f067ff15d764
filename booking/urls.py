# booking/urls.py
#
# Purpose:
# - Expose the booking-flow REST API via DRF router:
#     * /api/services/, /api/staff/            pick what and with whom
#     * /api/availability/calendar|slots/      month and day availability
#     * /api/holds/                            hold, release, confirm
#     * /api/bookings/                         staff-only listing and cancel
#
# Notes for developers:
# - Every endpoint needs the salon slug in the X-Tenant header (or ?tenant=).

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    AvailabilityViewSet,
    BookingHoldViewSet,
    BookingViewSet,
    ServiceViewSet,
    StaffViewSet,
)

router = DefaultRouter()
router.register(r"services", ServiceViewSet, basename="service")
router.register(r"staff-members", StaffViewSet, basename="staff")
router.register(r"availability", AvailabilityViewSet, basename="availability")
router.register(r"holds", BookingHoldViewSet, basename="hold")
router.register(r"bookings", BookingViewSet, basename="booking")

urlpatterns = [
    path("", include(router.urls)),
]
