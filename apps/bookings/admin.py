"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Reservation, Restriction, Room, RoomRestriction


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ("id", "room_name", "created_at")
    search_fields = ("room_name",)


@admin.register(Restriction)
class RestrictionAdmin(admin.ModelAdmin):
    list_display = ("id", "restriction_name")


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "last_name",
        "first_name",
        "email",
        "room",
        "start_date",
        "end_date",
        "processed",
        "created_at",
    )
    list_filter = ("processed", "room", "start_date")
    search_fields = ("first_name", "last_name", "email")
    readonly_fields = ("created_at", "updated_at")


@admin.register(RoomRestriction)
class RoomRestrictionAdmin(admin.ModelAdmin):
    list_display = ("id", "room", "start_date", "end_date", "restriction", "reservation")
    list_filter = ("restriction", "room")
    readonly_fields = ("created_at", "updated_at")
