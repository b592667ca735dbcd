"""
Reservation Workflow

The use case behind the make-reservation form:

RECEIVED -> FORM_VALIDATED -> PERSISTED -> RESTRICTION_LINKED -> CONFIRMED

with two exits:
- REJECTED: field errors; the bound form is returned for re-rendering
- FAILED: unparsable input or a store failure; the message is shown as a notice

The reservation and its restriction are written inside one store.atomic()
block, so a failed restriction insert leaves no reservation behind.
"""

from dataclasses import dataclass
from enum import Enum
from datetime import date
from typing import Mapping, Optional, Tuple
import logging

from shared.domain.value_objects import parse_date
from apps.bookings.exceptions import (
    FormValidationError,
    ParseError,
    PersistenceError,
    RoomUnavailableError,
)
from apps.bookings.forms import ReservationForm
from apps.bookings.models import Reservation, Restriction, Room, RoomRestriction

logger = logging.getLogger(__name__)

CANT_PARSE_START = "can't parse start date"
CANT_PARSE_END = "can't parse end date"
CANT_GET_ROOM = "can't get room id"
CANT_INSERT_RESERVATION = "can't insert reservation into the database"
CANT_INSERT_RESTRICTION = "can't insert room restriction"
ROOM_TAKEN = "room is no longer available for those dates"


class SubmissionState(str, Enum):
    RECEIVED = "received"
    FORM_VALIDATED = "form_validated"
    PERSISTED = "persisted"
    RESTRICTION_LINKED = "restriction_linked"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass
class ReservationOutcome:
    """Result of a submission; only CONFIRMED outcomes carry a saved reservation."""
    state: SubmissionState
    reservation: Optional[Reservation] = None
    form: Optional[ReservationForm] = None
    message: str = ""
    room: Optional[Room] = None

    @property
    def confirmed(self) -> bool:
        return self.state is SubmissionState.CONFIRMED


class ReservationWorkflow:
    """
    Handler for reservation submissions

    Collaborators are injected: the store (for atomic() and the reservation
    insert), the restriction ledger, the availability engine and the mail
    notifier.
    """

    def __init__(self, store, ledger, availability, notifier):
        self.store = store
        self.ledger = ledger
        self.availability = availability
        self.notifier = notifier

    def _failed(self, message: str, **extra) -> ReservationOutcome:
        logger.warning(f"Reservation submission failed: {message}")
        return ReservationOutcome(SubmissionState.FAILED, message=message, **extra)

    @staticmethod
    def _parse(data: Mapping[str, str]) -> Tuple[date, date, int]:
        try:
            start = parse_date(data.get("start-date"))
        except ValueError as exc:
            raise ParseError(CANT_PARSE_START) from exc
        try:
            end = parse_date(data.get("end-date"))
        except ValueError as exc:
            raise ParseError(CANT_PARSE_END) from exc
        try:
            room_id = int(data.get("room-id"))
        except (TypeError, ValueError) as exc:
            raise ParseError(CANT_GET_ROOM) from exc
        return start, end, room_id

    @staticmethod
    def _validate(data: Mapping[str, str]) -> ReservationForm:
        form = ReservationForm(data)
        if not form.is_valid():
            raise FormValidationError(form)
        return form

    def submit(self, data: Mapping[str, str]) -> ReservationOutcome:
        """
        Run a posted make-reservation form through the workflow

        data is the posted form (first-name, last-name, email, phone,
        start-date, end-date, room-id).
        """
        state = SubmissionState.RECEIVED
        logger.debug(f"Reservation submission {state.value}")

        try:
            start, end, room_id = self._parse(data)
        except ParseError as exc:
            return self._failed(str(exc))

        reservation = Reservation(
            first_name=data.get("first-name", ""),
            last_name=data.get("last-name", ""),
            email=data.get("email", ""),
            phone=data.get("phone", ""),
            start_date=start,
            end_date=end,
            room_id=room_id,
        )

        try:
            form = self._validate(data)
        except FormValidationError as exc:
            logger.info(f"Reservation rejected, invalid fields: {sorted(exc.form.errors)}")
            return ReservationOutcome(SubmissionState.REJECTED, reservation=reservation, form=exc.form)
        state = SubmissionState.FORM_VALIDATED

        try:
            room = self.store.get_room(room_id)
        except PersistenceError:
            return self._failed(CANT_GET_ROOM, reservation=reservation)

        for field, value in form.guest_details().items():
            setattr(reservation, field, value)

        try:
            with self.store.atomic():
                if not self.availability.is_room_available(room_id, start, end):
                    raise RoomUnavailableError(ROOM_TAKEN)

                try:
                    reservation_id = self.store.insert_reservation(reservation)
                except PersistenceError as exc:
                    raise PersistenceError(CANT_INSERT_RESERVATION) from exc
                state = SubmissionState.PERSISTED
                logger.info(f"Reservation {reservation_id} {state.value} for room {room_id}")

                restriction = RoomRestriction(
                    start_date=start,
                    end_date=end,
                    room_id=room_id,
                    reservation_id=reservation_id,
                    restriction_id=Restriction.RESERVATION,
                )
                try:
                    self.ledger.insert_restriction(restriction)
                except PersistenceError as exc:
                    raise PersistenceError(CANT_INSERT_RESTRICTION) from exc
                state = SubmissionState.RESTRICTION_LINKED
        except (RoomUnavailableError, PersistenceError) as exc:
            reservation.pk = None
            return self._failed(str(exc), reservation=reservation, room=room)

        self.notifier.reservation_confirmed(reservation, room.room_name)

        state = SubmissionState.CONFIRMED
        logger.info(f"Reservation {reservation.pk} {state.value} ({reservation.dates})")
        return ReservationOutcome(state, reservation=reservation, form=form, room=room)
