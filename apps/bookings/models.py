"""Booking domain models.

RoomRestriction is the single source of truth for occupancy: a row that
references a reservation is a guest booking, a row without one is a manual
block. Date ranges are inclusive on both ends.
"""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange


class Room(models.Model):
    """Bookable room. Reference data, not edited after creation."""

    room_name = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "rooms"
        verbose_name = _("Room")
        verbose_name_plural = _("Rooms")
        ordering = ["id"]

    def __str__(self) -> str:
        return self.room_name


class Restriction(models.Model):
    """Kind of restriction (guest reservation or owner block)."""

    RESERVATION = 1
    OWNER_BLOCK = 2

    restriction_name = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "restrictions"
        verbose_name = _("Restriction")
        verbose_name_plural = _("Restrictions")
        ordering = ["id"]

    def __str__(self) -> str:
        return self.restriction_name


class Reservation(models.Model):
    """Guest reservation for a room over an inclusive date range."""

    first_name = models.CharField(max_length=255)
    last_name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=255, blank=True)
    start_date = models.DateField()
    end_date = models.DateField()
    room = models.ForeignKey(
        Room,
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    processed = models.BooleanField(
        default=False,
        help_text=_("Set once an administrator has handled the reservation."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "reservations"
        verbose_name = _("Reservation")
        verbose_name_plural = _("Reservations")
        ordering = ["start_date"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="reservation_valid_date_range",
            ),
        ]

    def __str__(self) -> str:
        return f"Reservation #{self.pk} {self.first_name} {self.last_name} ({self.dates})"

    @property
    def dates(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)


class RoomRestriction(models.Model):
    """A room is unavailable for every day of this row's range."""

    start_date = models.DateField()
    end_date = models.DateField()
    room = models.ForeignKey(
        Room,
        on_delete=models.CASCADE,
        related_name="restrictions",
    )
    reservation = models.ForeignKey(
        Reservation,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="restrictions",
    )
    restriction = models.ForeignKey(
        Restriction,
        on_delete=models.PROTECT,
        related_name="room_restrictions",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "room_restrictions"
        verbose_name = _("Room restriction")
        verbose_name_plural = _("Room restrictions")
        ordering = ["start_date", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="room_restriction_valid_date_range",
            ),
        ]
        indexes = [
            models.Index(fields=["room", "start_date", "end_date"], name="idx_restriction_room_dates"),
        ]

    def __str__(self) -> str:
        kind = "reservation" if self.is_reservation else "block"
        return f"Room {self.room_id}: {self.dates} ({kind})"

    @property
    def is_reservation(self) -> bool:
        return self.reservation_id is not None

    @property
    def dates(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)
