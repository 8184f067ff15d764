from rest_framework import serializers
from .models import ScheduleException, StaffSchedule


class StaffScheduleSerializer(serializers.ModelSerializer):
    class Meta:
        model = StaffSchedule
        fields = ["id", "staff", "day_of_week", "start_time", "end_time", "is_active"]


class DayScheduleSerializer(serializers.Serializer):
    enabled = serializers.BooleanField()
    start = serializers.CharField(max_length=8)
    end = serializers.CharField(max_length=8)


class ScheduleExceptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = ScheduleException
        fields = ["id", "staff", "date", "start_time", "end_time", "is_available", "reason", "created_at"]
        read_only_fields = ["created_at"]

    def validate_staff(self, staff):
        tenant = self.context.get("tenant")
        if tenant is not None and staff.tenant_id != tenant.id:
            raise serializers.ValidationError("Unknown staff member.")
        return staff

    def validate(self, attrs):
        # PATCH keeps the stored values for fields not sent
        def current(name):
            if name in attrs:
                return attrs[name]
            return getattr(self.instance, name, None)

        if current("is_available"):
            start, end = current("start_time"), current("end_time")
            if start is None or end is None:
                raise serializers.ValidationError("Working exceptions need a start and end time.")
            if start >= end:
                raise serializers.ValidationError("End time must be after start time.")
        return attrs
