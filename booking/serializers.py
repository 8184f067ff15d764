from rest_framework import serializers
from .models import Service, Staff, Booking, BookingHold


class ServiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Service
        fields = [
            "id",
            "name",
            "description",
            "duration_minutes",
            "min_advance_hours",
            "max_advance_days",
            "buffer_time_before",
            "buffer_time_after",
            "price",
        ]


class StaffSerializer(serializers.ModelSerializer):
    class Meta:
        model = Staff
        fields = ["id", "first_name", "last_name", "full_name"]


class BookingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Booking
        fields = [
            "id",
            "client",
            "service",
            "staff",
            "scheduled_at",
            "duration_minutes",
            "status",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class BookingHoldSerializer(serializers.ModelSerializer):
    slot_time = serializers.TimeField(format="%H:%M", read_only=True)

    class Meta:
        model = BookingHold
        fields = [
            "id",
            "staff",
            "service",
            "slot_date",
            "slot_time",
            "duration_minutes",
            "expires_at",
        ]
        read_only_fields = fields


class HoldRequestSerializer(serializers.Serializer):
    staff = serializers.IntegerField()
    service = serializers.IntegerField()
    date = serializers.DateField()
    time = serializers.TimeField(input_formats=["%H:%M", "%H:%M:%S"])


class ClientDataSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    email = serializers.EmailField()
    phone = serializers.RegexField(r"^\+?\d{7,15}$", required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
