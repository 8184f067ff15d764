# booking/models.py
#
# Purpose:
# - Core domain models for the slot availability and hold engine.
#
# Design highlights:
# - Tenant: every other row points at one; all engine queries filter on it.
# - Client: identity within a tenant, reused by email from the booking flow.
# - Service: duration plus booking policy (advance window, buffers).
# - Staff / StaffService: who can perform what, with optional per-staff duration.
# - Booking:
#   • status is lowercase ("scheduled", "confirmed", ...)
#   • only ACTIVE_STATUSES occupy time for conflict checks
#   • never deleted; cancellation is a status change
# - BookingHold: short-lived claim on (staff, date, time), live while
#   expires_at > now. Expired rows are harmless and swept lazily.
#
# Notes for developers:
# - Weekly working hours live in staff.models.StaffSchedule.
# - The conditional unique constraint on Booking is the DB-level backstop
#   against two active bookings starting at the same moment for one staff.
#

from django.db import models
from django.db.models import Q
from django.core.validators import MinValueValidator


# -------------------------
# Tenant (salon)
# -------------------------
class Tenant(models.Model):
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=100, unique=True)

    def __str__(self):
        return self.name


# -------------------------
# Client (person who books)
# -------------------------
class Client(models.Model):
    """
    A client of a salon.
    - Identified within a tenant by email (case-insensitive) in the booking flow.
    """
    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name="clients")
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100, blank=True)
    email = models.EmailField()
    phone = models.CharField(max_length=20, blank=True)

    class Meta:
        indexes = [models.Index(fields=["tenant", "email"])]

    def __str__(self):
        return f"{self.first_name} {self.last_name}".strip()


# -------------------------
# Service catalog item
# -------------------------
class Service(models.Model):
    """
    A service offered by the salon, with its booking policy.

    Rules:
    - duration_minutes must be > 0
    - min_advance_hours: earliest a slot may start, relative to now
    - max_advance_days: latest a slot may start, relative to now
    - buffer_time_before/after: prep and cleanup padding in minutes
    """
    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name="services")
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    duration_minutes = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    min_advance_hours = models.PositiveIntegerField(default=0)
    max_advance_days = models.PositiveIntegerField(default=90)
    buffer_time_before = models.PositiveIntegerField(default=0)
    buffer_time_after = models.PositiveIntegerField(default=0)
    price = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0)],
    )
    active = models.BooleanField(default=True)

    def __str__(self):
        return f"{self.name} ({self.duration_minutes} min)"


# -------------------------
# Staff member / Stylist
# -------------------------
class Staff(models.Model):
    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name="staff")
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100, blank=True)
    email = models.EmailField(blank=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name or ''}".strip()

    def __str__(self):
        return self.full_name


class StaffService(models.Model):
    """
    Which staff member can perform which service.
    custom_duration_minutes overrides Service.duration_minutes for this staff.
    """
    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name="staff_services")
    staff = models.ForeignKey(Staff, on_delete=models.CASCADE, related_name="service_links")
    service = models.ForeignKey(Service, on_delete=models.CASCADE, related_name="staff_links")
    active = models.BooleanField(default=True)
    custom_duration_minutes = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["staff", "service"], name="uniq_staff_service"),
        ]

    def __str__(self):
        return f"{self.staff} → {self.service.name}"


# -------------------------
# Booking record
# -------------------------
class Booking(models.Model):
    STATUS_CHOICES = [
        ("scheduled", "Scheduled"),
        ("confirmed", "Confirmed"),
        ("in_progress", "In progress"),
        ("completed", "Completed"),
        ("cancelled", "Cancelled"),
        ("no_show", "No show"),
    ]
    ACTIVE_STATUSES = ("scheduled", "confirmed")

    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name="bookings")
    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name="bookings")
    service = models.ForeignKey(Service, on_delete=models.CASCADE)
    staff = models.ForeignKey(Staff, on_delete=models.CASCADE, related_name="bookings")
    scheduled_at = models.DateTimeField()
    duration_minutes = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="scheduled")
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "staff", "scheduled_at"],
                condition=Q(status__in=["scheduled", "confirmed"]),
                name="uniq_active_booking_per_staff_start",
            ),
        ]

    def __str__(self):
        return f"{self.client} → {self.service.name} on {self.scheduled_at}"


# -------------------------
# Temporary slot hold
# -------------------------
class BookingHold(models.Model):
    """
    Ephemeral claim on a slot while a client fills in their details.

    - session_id correlates the hold with an anonymous browser session;
      a session owns at most one hold at a time.
    - client stays empty until identity is known.
    """
    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name="booking_holds")
    client = models.ForeignKey(Client, on_delete=models.CASCADE, null=True, blank=True)
    session_id = models.CharField(max_length=100, db_index=True)
    staff = models.ForeignKey(Staff, on_delete=models.CASCADE, related_name="holds")
    service = models.ForeignKey(Service, on_delete=models.CASCADE)
    slot_date = models.DateField()
    slot_time = models.TimeField()
    duration_minutes = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    expires_at = models.DateTimeField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Hold {self.staff} {self.slot_date} {self.slot_time:%H:%M} (until {self.expires_at})"
