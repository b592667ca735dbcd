"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from shared.domain.value_objects import DATE_FORMAT


class AvailabilityProbeSerializer(serializers.Serializer):
    """Input of the room availability probe (``start``, ``end``, ``room-id``)."""

    start = serializers.DateField(input_formats=[DATE_FORMAT])
    end = serializers.DateField(input_formats=[DATE_FORMAT])
    room_id = serializers.IntegerField(min_value=1)

    def to_internal_value(self, data):  # type: ignore
        # The room pages post the room as "room-id".
        if hasattr(data, "get") and "room_id" not in data and "room-id" in data:
            data = {"start": data.get("start"), "end": data.get("end"), "room_id": data.get("room-id")}
        return super().to_internal_value(data)

    def validate(self, attrs):  # type: ignore
        if attrs["start"] > attrs["end"]:
            raise serializers.ValidationError("Arrival must not be after departure.")
        return attrs


class AvailabilityProbeResultSerializer(serializers.Serializer):
    """Response body of the availability probe."""

    ok = serializers.BooleanField()
    message = serializers.CharField(allow_blank=True)
    roomId = serializers.CharField(allow_blank=True)
    startDate = serializers.CharField(allow_blank=True)
    endDate = serializers.CharField(allow_blank=True)
