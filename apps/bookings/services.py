"""Domain services for the booking workflows.

Services receive their store at construction time; ``build_services()``
wires them from ``settings.BOOKING_STORE``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.utils.module_loading import import_string  # type: ignore

from .domain.calendar import BlockEdits, MonthView, month_range, project_month
from .exceptions import RecordNotFound
from .models import Room, RoomRestriction
from .notifications import MailNotifier
from .stores import AvailabilityStore, BookingStore, ReservationStore

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .application.workflow import ReservationWorkflow

logger = logging.getLogger(__name__)


class RestrictionLedger:
    """Writes and reads room restrictions (reservation links and blocks)."""

    def __init__(self, availability_store: AvailabilityStore, reservation_store: ReservationStore):
        self.availability_store = availability_store
        self.reservation_store = reservation_store

    def insert_restriction(self, restriction: RoomRestriction) -> int:
        restriction_id = self.reservation_store.insert_restriction(restriction)
        logger.info(
            f"Inserted restriction {restriction_id} for room {restriction.room_id} "
            f"({restriction.start_date} - {restriction.end_date})"
        )
        return restriction_id

    def insert_block(self, room_id: int, day: date) -> int:
        block_id = self.reservation_store.insert_block(room_id, day)
        logger.info(f"Blocked room {room_id} on {day} (restriction {block_id})")
        return block_id

    def delete_block(self, block_id: int) -> None:
        self.reservation_store.delete_block(block_id)
        logger.info(f"Removed block {block_id}")

    def restrictions_for_room(self, room_id: int, start: date, end: date) -> list[RoomRestriction]:
        return self.availability_store.restrictions_for_room(room_id, start, end)


class AvailabilityEngine:
    """Answers availability questions from the restriction ledger."""

    def __init__(self, store: AvailabilityStore):
        self.store = store

    def is_room_available(self, room_id: int, start: date, end: date) -> bool:
        return self.store.room_is_free(room_id, start, end)

    def available_rooms(self, start: date, end: date) -> list[Room]:
        rooms = self.store.free_rooms(start, end)
        logger.debug(f"{len(rooms)} room(s) free between {start} and {end}")
        return rooms


class CalendarProjection:
    """Builds the dashboard month calendar and applies block edits."""

    def __init__(self, ledger: RestrictionLedger):
        self.ledger = ledger

    def build_month_view(self, year: int, month: int, rooms: Iterable[Room]) -> MonthView:
        window = month_range(year, month)
        rooms = list(rooms)
        restrictions = {
            room.pk: self.ledger.restrictions_for_room(room.pk, window.start_date, window.end_date)
            for room in rooms
        }
        return project_month(year, month, rooms, restrictions)

    def apply_block_edits(self, edits: BlockEdits) -> None:
        """Apply removes then adds as one unit; a block that is already gone counts as removed."""
        with self.ledger.reservation_store.atomic():
            for block_id in edits.remove:
                try:
                    self.ledger.delete_block(block_id)
                except RecordNotFound:
                    logger.info(f"Block {block_id} already removed")
            for room_id, day in edits.add:
                self.ledger.insert_block(room_id, day)
        for room_id, day in edits.skipped:
            logger.info(f"Skipped block for room {room_id} on {day}: day carries a reservation")


@dataclass
class BookingServices:
    """Everything request handlers need, built once per process."""

    store: BookingStore
    ledger: RestrictionLedger
    availability: AvailabilityEngine
    workflow: ReservationWorkflow
    calendar: CalendarProjection
    notifier: MailNotifier


def build_store(config: dict | None = None) -> BookingStore:
    config = config if config is not None else settings.BOOKING_STORE
    store_class = import_string(config["BACKEND"])
    return store_class(**config.get("OPTIONS", {}))


def build_services(store: BookingStore | None = None, notifier: MailNotifier | None = None) -> BookingServices:
    """Wire the booking services around a store (defaults come from settings)."""

    from .application.workflow import ReservationWorkflow

    store = store if store is not None else build_store()
    if notifier is None:
        notifier = MailNotifier(
            from_email=settings.DEFAULT_FROM_EMAIL,
            owner_email=settings.BOOKING_OWNER_EMAIL,
        )
    ledger = RestrictionLedger(store, store)
    availability = AvailabilityEngine(store)
    workflow = ReservationWorkflow(store, ledger, availability, notifier)
    logger.info(f"Booking services ready ({type(store).__name__})")
    return BookingServices(
        store=store,
        ledger=ledger,
        availability=availability,
        workflow=workflow,
        calendar=CalendarProjection(ledger),
        notifier=notifier,
    )
