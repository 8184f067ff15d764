from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import ScheduleExceptionViewSet, StaffScheduleViewSet

router = DefaultRouter()
router.register(r"schedules", StaffScheduleViewSet, basename="staff-schedule")
router.register(r"exceptions", ScheduleExceptionViewSet, basename="staff-schedule-exception")

urlpatterns = [path("", include(router.urls))]
