# staff/models.py
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator
from django.db import models


class StaffSchedule(models.Model):
    """
    Weekly recurring working window for a staff member.
    day_of_week: 0=Sunday .. 6=Saturday. Times are local wall-clock.
    Points to booking.Staff to avoid having two Staff models.
    """
    DAY_CHOICES = [
        (0, "Sunday"),
        (1, "Monday"),
        (2, "Tuesday"),
        (3, "Wednesday"),
        (4, "Thursday"),
        (5, "Friday"),
        (6, "Saturday"),
    ]

    tenant = models.ForeignKey("booking.Tenant", on_delete=models.CASCADE, related_name="staff_schedules")
    staff = models.ForeignKey(
        "booking.Staff",                 # ← reference booking app model
        on_delete=models.CASCADE,
        related_name="schedules",
    )
    day_of_week = models.PositiveSmallIntegerField(
        choices=DAY_CHOICES,
        validators=[MaxValueValidator(6)],
    )
    start_time = models.TimeField()
    end_time = models.TimeField()
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["staff_id", "day_of_week"]

    def clean(self):
        if self.is_active and self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValidationError("End time must be after start time.")

    def __str__(self):
        return f"{self.staff}: {self.get_day_of_week_display()} {self.start_time:%H:%M}-{self.end_time:%H:%M}"


class ScheduleException(models.Model):
    """
    Dated override of the weekly schedule.
    - is_available=False: day off (times ignored)
    - is_available=True: working, but start_time/end_time replace the weekly window
    """
    tenant = models.ForeignKey("booking.Tenant", on_delete=models.CASCADE, related_name="schedule_exceptions")
    staff = models.ForeignKey("booking.Staff", on_delete=models.CASCADE, related_name="schedule_exceptions")
    date = models.DateField()
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)
    is_available = models.BooleanField(default=False)
    reason = models.CharField(max_length=200, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["staff_id", "date"]

    def clean(self):
        if not self.is_available:
            return
        if self.start_time is None or self.end_time is None:
            raise ValidationError("Working exceptions need a start and end time.")
        if self.start_time >= self.end_time:
            raise ValidationError("End time must be after start time.")

    def __str__(self):
        label = "off" if not self.is_available else f"{self.start_time:%H:%M}-{self.end_time:%H:%M}"
        return f"{self.staff}: {self.date} {label}"
