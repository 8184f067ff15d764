from django.contrib import admin
from .models import Tenant, Client, Service, Staff, StaffService, Booking, BookingHold

@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "slug")
    search_fields = ("name", "slug")

@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ("id", "tenant", "name", "duration_minutes", "min_advance_hours", "max_advance_days", "active")
    list_filter = ("tenant", "active")
    search_fields = ("name",)
    list_editable = ("duration_minutes", "active")  # allow inline toggle

@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ("id", "tenant", "first_name", "last_name", "email", "phone")
    list_filter = ("tenant",)
    search_fields = ("first_name", "last_name", "email")

@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    list_display = ("id", "tenant", "first_name", "last_name", "email")
    list_filter = ("tenant",)

@admin.register(StaffService)
class StaffServiceAdmin(admin.ModelAdmin):
    list_display = ("staff", "service", "active", "custom_duration_minutes")
    list_filter = ("tenant", "active")

@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "client", "service", "staff", "scheduled_at", "duration_minutes", "status")
    list_filter = ("tenant", "status", "service")
    search_fields = ("client__first_name", "client__last_name", "client__email", "service__name")

@admin.register(BookingHold)
class BookingHoldAdmin(admin.ModelAdmin):
    list_display = ("id", "staff", "slot_date", "slot_time", "session_id", "expires_at")
    list_filter = ("tenant",)
