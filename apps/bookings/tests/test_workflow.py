"""Tests for the reservation workflow."""

from __future__ import annotations

from datetime import date
from unittest import mock

from django.core import mail
from django.test import TestCase, override_settings

from apps.bookings.application.workflow import SubmissionState
from apps.bookings.exceptions import PersistenceError
from apps.bookings.models import Reservation, Restriction, RoomRestriction
from apps.bookings.notifications import MailNotifier
from apps.bookings.services import build_services
from apps.bookings.stores import DjangoStore, InMemoryStore


def _payload(**overrides) -> dict[str, str]:
    payload = {
        "first-name": "Yusuf",
        "last-name": "Grenada",
        "email": "yusuf@example.com",
        "phone": "555-555-5555",
        "start-date": "2050-01-01",
        "end-date": "2050-01-03",
        "room-id": "1",
    }
    payload.update(overrides)
    return payload


class RecordingNotifier(MailNotifier):
    def __init__(self):
        self.sent: list[dict] = []
        super().__init__("me@here.com", "owner@property.com", dispatch=lambda **kw: self.sent.append(kw))


@override_settings(DEFAULT_FROM_EMAIL="me@here.com", BOOKING_OWNER_EMAIL="owner@property.com")
class ReservationWorkflowTests(TestCase):
    def setUp(self) -> None:
        self.services = build_services(DjangoStore())
        self.workflow = self.services.workflow

    def test_valid_submission_is_confirmed(self) -> None:
        outcome = self.workflow.submit(_payload())

        self.assertEqual(outcome.state, SubmissionState.CONFIRMED)
        self.assertTrue(outcome.confirmed)
        reservation = Reservation.objects.get()
        self.assertEqual(outcome.reservation.pk, reservation.pk)
        self.assertEqual(reservation.first_name, "Yusuf")
        self.assertEqual(reservation.phone, "555-555-5555")

        restriction = RoomRestriction.objects.get()
        self.assertEqual(restriction.reservation_id, reservation.pk)
        self.assertEqual(restriction.restriction_id, Restriction.RESERVATION)
        self.assertEqual((restriction.start_date, restriction.end_date), (date(2050, 1, 1), date(2050, 1, 3)))
        self.assertFalse(self.services.availability.is_room_available(1, date(2050, 1, 2), date(2050, 1, 2)))

    def test_confirmation_sends_guest_and_owner_mail(self) -> None:
        self.workflow.submit(_payload())

        self.assertEqual(len(mail.outbox), 2)
        recipients = sorted(message.to[0] for message in mail.outbox)
        self.assertEqual(recipients, ["owner@property.com", "yusuf@example.com"])
        self.assertIn("Reservation Confirmation", [message.subject for message in mail.outbox])

    def test_short_first_name_is_rejected(self) -> None:
        outcome = self.workflow.submit(_payload(**{"first-name": "j"}))

        self.assertEqual(outcome.state, SubmissionState.REJECTED)
        self.assertIn("first-name", outcome.form.errors)
        self.assertEqual(
            outcome.form.errors["first-name"],
            ["This field must be at least 3 characters long"],
        )
        self.assertFalse(Reservation.objects.exists())
        self.assertFalse(RoomRestriction.objects.exists())

    def test_missing_and_invalid_fields_are_rejected(self) -> None:
        outcome = self.workflow.submit(_payload(**{"last-name": "", "email": "not-an-email"}))

        self.assertEqual(outcome.state, SubmissionState.REJECTED)
        self.assertEqual(outcome.form.errors["last-name"], ["This field can not be empty"])
        self.assertEqual(outcome.form.errors["email"], ["Invalid Email Address"])
        self.assertEqual(outcome.reservation.last_name, "")

    def test_departure_before_arrival_is_rejected(self) -> None:
        outcome = self.workflow.submit(_payload(**{"start-date": "2050-01-05", "end-date": "2050-01-03"}))

        self.assertEqual(outcome.state, SubmissionState.REJECTED)
        self.assertIn("end-date", outcome.form.errors)

    def test_unparsable_input_fails(self) -> None:
        cases = {
            "start-date": "can't parse start date",
            "end-date": "can't parse end date",
            "room-id": "can't get room id",
        }
        for field, message in cases.items():
            with self.subTest(field=field):
                outcome = self.workflow.submit(_payload(**{field: "invalid"}))
                self.assertEqual(outcome.state, SubmissionState.FAILED)
                self.assertEqual(outcome.message, message)

    def test_unknown_room_fails(self) -> None:
        outcome = self.workflow.submit(_payload(**{"room-id": "42"}))

        self.assertEqual(outcome.state, SubmissionState.FAILED)
        self.assertEqual(outcome.message, "can't get room id")

    def test_taken_room_fails(self) -> None:
        self.services.ledger.insert_block(1, date(2050, 1, 2))

        outcome = self.workflow.submit(_payload())

        self.assertEqual(outcome.state, SubmissionState.FAILED)
        self.assertEqual(outcome.message, "room is no longer available for those dates")
        self.assertFalse(Reservation.objects.exists())

    def test_restriction_failure_leaves_no_reservation(self) -> None:
        with mock.patch.object(
            self.services.store,
            "insert_restriction",
            side_effect=PersistenceError("constraint failed"),
        ):
            outcome = self.workflow.submit(_payload())

        self.assertEqual(outcome.state, SubmissionState.FAILED)
        self.assertEqual(outcome.message, "can't insert room restriction")
        self.assertIsNone(outcome.reservation.pk)
        self.assertFalse(Reservation.objects.exists())
        self.assertFalse(RoomRestriction.objects.exists())
        self.assertEqual(len(mail.outbox), 0)


class InMemoryWorkflowTests(TestCase):
    """Forced failures through the dictionary store."""

    def setUp(self) -> None:
        self.store = InMemoryStore(failing_room_ids=[2], failing_restriction_room_ids=[1])
        self.notifier = RecordingNotifier()
        self.workflow = build_services(self.store, notifier=self.notifier).workflow

    def test_reservation_insert_failure(self) -> None:
        outcome = self.workflow.submit(_payload(**{"room-id": "2"}))

        self.assertEqual(outcome.state, SubmissionState.FAILED)
        self.assertEqual(outcome.message, "can't insert reservation into the database")
        self.assertEqual(self.store.restrictions_for_room(2, date(2050, 1, 1), date(2050, 1, 3)), [])
        self.assertEqual(self.notifier.sent, [])

    def test_restriction_insert_failure_rolls_back_reservation(self) -> None:
        outcome = self.workflow.submit(_payload())

        self.assertEqual(outcome.state, SubmissionState.FAILED)
        self.assertEqual(outcome.message, "can't insert room restriction")
        self.assertEqual(self.store.all_reservations(), [])

    def test_notifier_failure_does_not_fail_submission(self) -> None:
        def broken_dispatch(**kwargs):
            raise ConnectionError("broker unavailable")

        store = InMemoryStore()
        notifier = MailNotifier("me@here.com", "owner@property.com", dispatch=broken_dispatch)
        workflow = build_services(store, notifier=notifier).workflow

        outcome = workflow.submit(_payload())

        self.assertEqual(outcome.state, SubmissionState.CONFIRMED)
        self.assertEqual(len(store.all_reservations()), 1)
