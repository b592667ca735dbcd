"""Reservation mail notifications.

Messages are only enqueued here; the Celery worker renders and sends them
(see ``tasks.send_mail_message``).
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Callable, Optional

from shared.domain.value_objects import DATE_FORMAT

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "email/basic.html"


@dataclass(frozen=True)
class MailMessage:
    to: str
    from_email: str
    subject: str
    content: str
    template: str = DEFAULT_TEMPLATE

    def as_payload(self) -> dict:
        return asdict(self)


class MailNotifier:
    """Builds reservation mails and hands them to the dispatch queue."""

    def __init__(self, from_email: str, owner_email: str, dispatch: Optional[Callable[..., object]] = None):
        self.from_email = from_email
        self.owner_email = owner_email
        self._dispatch = dispatch

    def _enqueue(self, message: MailMessage) -> bool:
        dispatch = self._dispatch
        if dispatch is None:
            from .tasks import send_mail_message

            dispatch = send_mail_message.delay
        try:
            dispatch(**message.as_payload())
        except Exception:  # broker down, serialization errors
            logger.exception(f"Failed to enqueue mail '{message.subject}' to {message.to}")
            return False
        logger.info(f"Queued mail '{message.subject}' to {message.to}")
        return True

    def guest_confirmation(self, reservation, room_name: str) -> MailMessage:
        start = reservation.start_date.strftime(DATE_FORMAT)
        end = reservation.end_date.strftime(DATE_FORMAT)
        return MailMessage(
            to=reservation.email,
            from_email=self.from_email,
            subject="Reservation Confirmation",
            content=(
                "<strong>Reservation Confirmation</strong><br>"
                f"Dear {reservation.first_name}:<br>"
                f"This is confirmation of your reservation in the {room_name} "
                f"from {start} to {end}."
            ),
        )

    def owner_notification(self, reservation, room_name: str) -> MailMessage:
        start = reservation.start_date.strftime(DATE_FORMAT)
        end = reservation.end_date.strftime(DATE_FORMAT)
        return MailMessage(
            to=self.owner_email,
            from_email=self.from_email,
            subject="Reservation Notification",
            content=(
                "<strong>Reservation Notification</strong><br>"
                f"A reservation has been made for the {room_name} from {start} to {end} "
                f"by {reservation.first_name} {reservation.last_name} ({reservation.email})."
            ),
        )

    def reservation_confirmed(self, reservation, room_name: str) -> int:
        """Enqueue guest and owner mails. Returns how many were queued."""

        messages = (
            self.guest_confirmation(reservation, room_name),
            self.owner_notification(reservation, room_name),
        )
        return sum(1 for message in messages if self._enqueue(message))
