# booking_system/urls.py
#
# Purpose:
# - Project URL router.
# - Booking-flow API under /api/, staff schedule management under /api/staff/.
#
from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    # Django admin
    path("admin/", admin.site.urls),

    # =====
    # API's
    # =====
    # staff/ first so its prefix is not swallowed by the booking router
    path("api/staff/", include("staff.urls")),
    path("api/", include("booking.urls")),
]
