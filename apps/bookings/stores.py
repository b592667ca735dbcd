"""Storage backends for the booking services.

Two capability interfaces describe what the services need from storage:
``AvailabilityStore`` (read side: rooms and restriction lookups) and
``ReservationStore`` (write side: reservations, restrictions, blocks).
``DjangoStore`` implements both against the ORM, ``InMemoryStore`` keeps
everything in dictionaries for tests and local experiments. The backend is
picked from ``settings.BOOKING_STORE`` when the services are built.
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date
from functools import wraps
from typing import ContextManager, Iterable

from django.db import DatabaseError, transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.value_objects import DateRange

from .exceptions import PersistenceError, RecordNotFound
from .models import Reservation, Restriction, Room, RoomRestriction

logger = logging.getLogger(__name__)


class AvailabilityStore(ABC):
    """Read access to rooms and the restriction ledger."""

    @abstractmethod
    def all_rooms(self) -> list[Room]:
        """All rooms in natural (id) order."""

    @abstractmethod
    def get_room(self, room_id: int) -> Room:
        """Raises RecordNotFound for unknown ids."""

    @abstractmethod
    def room_is_free(self, room_id: int, start: date, end: date) -> bool:
        """True iff no restriction for the room overlaps [start, end]."""

    @abstractmethod
    def free_rooms(self, start: date, end: date) -> list[Room]:
        """Rooms without an overlapping restriction, in id order."""

    @abstractmethod
    def restrictions_for_room(self, room_id: int, start: date, end: date) -> list[RoomRestriction]:
        """Restrictions for the room overlapping [start, end], by start date."""


class ReservationStore(ABC):
    """Write access to reservations and restrictions."""

    @abstractmethod
    def insert_reservation(self, reservation: Reservation) -> int: ...

    @abstractmethod
    def insert_restriction(self, restriction: RoomRestriction) -> int: ...

    @abstractmethod
    def insert_block(self, room_id: int, day: date) -> int: ...

    @abstractmethod
    def delete_block(self, block_id: int) -> None: ...

    @abstractmethod
    def get_reservation(self, reservation_id: int) -> Reservation: ...

    @abstractmethod
    def all_reservations(self) -> list[Reservation]: ...

    @abstractmethod
    def new_reservations(self) -> list[Reservation]: ...

    @abstractmethod
    def update_reservation(self, reservation: Reservation) -> None: ...

    @abstractmethod
    def mark_processed(self, reservation_id: int, processed: bool = True) -> None: ...

    @abstractmethod
    def delete_reservation(self, reservation_id: int) -> None: ...

    @abstractmethod
    def atomic(self) -> ContextManager[None]:
        """Group several writes so they succeed or fail together."""


class BookingStore(AvailabilityStore, ReservationStore, ABC):
    """Backend implementing both capabilities."""


def _overlapping(start: date, end: date) -> Q:
    # Inclusive ranges: [s1, e1] and [s2, e2] overlap iff s1 <= e2 and s2 <= e1.
    return Q(start_date__lte=end) & Q(end_date__gte=start)


def _db_errors_as_persistence(func):
    """Re-raise driver errors as PersistenceError, keeping the cause."""

    @wraps(func)
    def _wrapped(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            logger.error(f"{func.__name__} failed: {exc}", exc_info=True)
            raise PersistenceError(str(exc)) from exc

    return _wrapped


class DjangoStore(BookingStore):
    """ORM-backed store. Every call is a single autonomous statement."""

    # -- availability -------------------------------------------------------

    @_db_errors_as_persistence
    def all_rooms(self) -> list[Room]:
        return list(Room.objects.order_by("id"))

    @_db_errors_as_persistence
    def get_room(self, room_id: int) -> Room:
        try:
            return Room.objects.get(pk=room_id)
        except Room.DoesNotExist as exc:
            raise RecordNotFound(f"room {room_id} does not exist") from exc

    @_db_errors_as_persistence
    def room_is_free(self, room_id: int, start: date, end: date) -> bool:
        return not RoomRestriction.objects.filter(_overlapping(start, end), room_id=room_id).exists()

    @_db_errors_as_persistence
    def free_rooms(self, start: date, end: date) -> list[Room]:
        busy = RoomRestriction.objects.filter(_overlapping(start, end)).values("room_id")
        return list(Room.objects.exclude(pk__in=busy).order_by("id"))

    @_db_errors_as_persistence
    def restrictions_for_room(self, room_id: int, start: date, end: date) -> list[RoomRestriction]:
        return list(
            RoomRestriction.objects.filter(_overlapping(start, end), room_id=room_id).order_by("start_date", "id")
        )

    # -- reservations and restrictions -------------------------------------

    @_db_errors_as_persistence
    def insert_reservation(self, reservation: Reservation) -> int:
        reservation.save(force_insert=True)
        return reservation.pk

    @_db_errors_as_persistence
    def insert_restriction(self, restriction: RoomRestriction) -> int:
        restriction.save(force_insert=True)
        return restriction.pk

    @_db_errors_as_persistence
    def insert_block(self, room_id: int, day: date) -> int:
        block = RoomRestriction.objects.create(
            room_id=room_id,
            start_date=day,
            end_date=day,
            restriction_id=Restriction.OWNER_BLOCK,
        )
        return block.pk

    @_db_errors_as_persistence
    def delete_block(self, block_id: int) -> None:
        deleted, _ = RoomRestriction.objects.filter(pk=block_id, reservation__isnull=True).delete()
        if not deleted:
            raise RecordNotFound(f"block {block_id} does not exist")

    @_db_errors_as_persistence
    def get_reservation(self, reservation_id: int) -> Reservation:
        try:
            return Reservation.objects.select_related("room").get(pk=reservation_id)
        except Reservation.DoesNotExist as exc:
            raise RecordNotFound(f"reservation {reservation_id} does not exist") from exc

    @_db_errors_as_persistence
    def all_reservations(self) -> list[Reservation]:
        return list(Reservation.objects.select_related("room").order_by("start_date", "id"))

    @_db_errors_as_persistence
    def new_reservations(self) -> list[Reservation]:
        return list(
            Reservation.objects.select_related("room").filter(processed=False).order_by("start_date", "id")
        )

    @_db_errors_as_persistence
    def update_reservation(self, reservation: Reservation) -> None:
        reservation.save(update_fields=["first_name", "last_name", "email", "phone", "updated_at"])

    @_db_errors_as_persistence
    def mark_processed(self, reservation_id: int, processed: bool = True) -> None:
        updated = Reservation.objects.filter(pk=reservation_id).update(
            processed=processed,
            updated_at=timezone.now(),
        )
        if not updated:
            raise RecordNotFound(f"reservation {reservation_id} does not exist")

    @_db_errors_as_persistence
    def delete_reservation(self, reservation_id: int) -> None:
        deleted, _ = Reservation.objects.filter(pk=reservation_id).delete()
        if not deleted:
            raise RecordNotFound(f"reservation {reservation_id} does not exist")

    def atomic(self) -> ContextManager[None]:
        return transaction.atomic()


DEFAULT_ROOMS = ("General's Quarters", "Major's Suite")


class InMemoryStore(BookingStore):
    """Dictionary-backed store.

    ``failing_room_ids`` makes reservation inserts for those rooms raise
    PersistenceError; ``failing_restriction_room_ids`` does the same for
    restriction inserts. Model instances handed out are never saved.
    """

    def __init__(
        self,
        rooms: Iterable[str] = DEFAULT_ROOMS,
        failing_room_ids: Iterable[int] = (),
        failing_restriction_room_ids: Iterable[int] = (),
    ):
        self._rooms = {index: Room(id=index, room_name=name) for index, name in enumerate(rooms, start=1)}
        self._reservations: dict[int, Reservation] = {}
        self._restrictions: dict[int, RoomRestriction] = {}
        self._next_reservation_id = 1
        self._next_restriction_id = 1
        self.failing_room_ids = set(failing_room_ids)
        self.failing_restriction_room_ids = set(failing_restriction_room_ids)

    # -- availability -------------------------------------------------------

    def all_rooms(self) -> list[Room]:
        return [self._rooms[key] for key in sorted(self._rooms)]

    def get_room(self, room_id: int) -> Room:
        try:
            return self._rooms[room_id]
        except KeyError as exc:
            raise RecordNotFound(f"room {room_id} does not exist") from exc

    def room_is_free(self, room_id: int, start: date, end: date) -> bool:
        return not self.restrictions_for_room(room_id, start, end)

    def free_rooms(self, start: date, end: date) -> list[Room]:
        return [room for room in self.all_rooms() if self.room_is_free(room.pk, start, end)]

    def restrictions_for_room(self, room_id: int, start: date, end: date) -> list[RoomRestriction]:
        if start > end:
            # The SQL predicate matches nothing for an inverted window either.
            return []
        window = DateRange(start, end)
        matches = [
            row
            for row in self._restrictions.values()
            if row.room_id == room_id and row.dates.overlaps_with(window)
        ]
        return sorted(matches, key=lambda row: (row.start_date, row.pk))

    # -- reservations and restrictions -------------------------------------

    def insert_reservation(self, reservation: Reservation) -> int:
        if reservation.room_id in self.failing_room_ids:
            raise PersistenceError(f"insert failed for room {reservation.room_id}")
        reservation.pk = self._next_reservation_id
        self._next_reservation_id += 1
        if reservation.room_id in self._rooms:
            reservation.room = self._rooms[reservation.room_id]
        now = timezone.now()
        reservation.created_at = reservation.updated_at = now
        self._reservations[reservation.pk] = reservation
        return reservation.pk

    def insert_restriction(self, restriction: RoomRestriction) -> int:
        if restriction.room_id in self.failing_restriction_room_ids:
            raise PersistenceError(f"insert failed for room {restriction.room_id}")
        restriction.pk = self._next_restriction_id
        self._next_restriction_id += 1
        now = timezone.now()
        restriction.created_at = restriction.updated_at = now
        self._restrictions[restriction.pk] = restriction
        return restriction.pk

    def insert_block(self, room_id: int, day: date) -> int:
        block = RoomRestriction(
            room_id=room_id,
            start_date=day,
            end_date=day,
            restriction_id=Restriction.OWNER_BLOCK,
        )
        return self.insert_restriction(block)

    def delete_block(self, block_id: int) -> None:
        block = self._restrictions.get(block_id)
        if block is None or block.reservation_id is not None:
            raise RecordNotFound(f"block {block_id} does not exist")
        del self._restrictions[block_id]

    def get_reservation(self, reservation_id: int) -> Reservation:
        try:
            return self._reservations[reservation_id]
        except KeyError as exc:
            raise RecordNotFound(f"reservation {reservation_id} does not exist") from exc

    def all_reservations(self) -> list[Reservation]:
        return sorted(self._reservations.values(), key=lambda res: (res.start_date, res.pk))

    def new_reservations(self) -> list[Reservation]:
        return [res for res in self.all_reservations() if not res.processed]

    def update_reservation(self, reservation: Reservation) -> None:
        if reservation.pk not in self._reservations:
            raise RecordNotFound(f"reservation {reservation.pk} does not exist")
        reservation.updated_at = timezone.now()
        self._reservations[reservation.pk] = copy.copy(reservation)

    def mark_processed(self, reservation_id: int, processed: bool = True) -> None:
        reservation = copy.copy(self.get_reservation(reservation_id))
        reservation.processed = processed
        reservation.updated_at = timezone.now()
        self._reservations[reservation_id] = reservation

    def delete_reservation(self, reservation_id: int) -> None:
        self.get_reservation(reservation_id)
        del self._reservations[reservation_id]
        # Same as ON DELETE CASCADE on room_restrictions.reservation_id.
        self._restrictions = {
            pk: row for pk, row in self._restrictions.items() if row.reservation_id != reservation_id
        }

    @contextmanager
    def atomic(self):
        snapshot = (
            dict(self._reservations),
            dict(self._restrictions),
            self._next_reservation_id,
            self._next_restriction_id,
        )
        try:
            yield
        except Exception:
            (
                self._reservations,
                self._restrictions,
                self._next_reservation_id,
                self._next_restriction_id,
            ) = snapshot
            raise
