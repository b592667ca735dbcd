"""Errors raised by the booking services.

Views catch these at the request boundary and turn them into a redirect
with an error notice or a re-rendered form.
"""

from __future__ import annotations

from shared.infrastructure.session import SessionMissingError  # noqa: F401


class BookingError(Exception):
    """Base class for booking failures."""


class ParseError(BookingError):
    """Malformed date or identifier in the request."""


class FormValidationError(BookingError):
    """Submitted form failed validation; carries the bound form."""

    def __init__(self, form):
        super().__init__("form is not valid")
        self.form = form


class PersistenceError(BookingError):
    """Read or write against the store failed."""


class RecordNotFound(PersistenceError):
    """Requested row does not exist."""


class RoomUnavailableError(BookingError):
    """Room already carries a restriction for the requested dates."""
