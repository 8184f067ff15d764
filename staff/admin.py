# staff/admin.py
from django.contrib import admin
from .models import ScheduleException, StaffSchedule

@admin.register(StaffSchedule)
class StaffScheduleAdmin(admin.ModelAdmin):
    list_display = ("staff", "day_of_week", "start_time", "end_time", "is_active")
    list_filter = ("tenant", "day_of_week", "is_active")
    search_fields = ("staff__first_name", "staff__last_name")

@admin.register(ScheduleException)
class ScheduleExceptionAdmin(admin.ModelAdmin):
    list_display = ("staff", "date", "is_available", "start_time", "end_time", "reason")
    list_filter = ("tenant", "is_available")
    search_fields = ("staff__first_name", "staff__last_name", "reason")
